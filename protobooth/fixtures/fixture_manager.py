"""Fixture manager — owns fixture configuration and expands dynamic route patterns."""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Optional, Protocol

from pydantic import BaseModel, Field, ValidationError

from protobooth.discovery.router_discovery import ROUTE_MARKER, is_dynamic_path, marker_name
from protobooth.errors import (
    ConfigParseError,
    ConfigValidationError,
    InvalidStateError,
    SaveError,
)
from protobooth.models.config import AUTH_STATES
from protobooth.models.fixtures import AuthFixture, FixtureConfig, FixtureRecord
from protobooth.storage.file_storage import StoragePort

logger = logging.getLogger(__name__)


class ValidationOutcome(BaseModel):
    success: bool
    error: Optional[str] = None
    errors: list[str] = Field(default_factory=list)


class ConfigValidator(Protocol):
    def validate(self, config: Any) -> ValidationOutcome: ...


class RouteInstanceGenerator(Protocol):
    def generate(self, route_pattern: str, fixtures: list[FixtureRecord]) -> list[str]: ...


def format_validation_errors(exc: ValidationError) -> list[str]:
    """Render pydantic errors as ``field.path: message`` strings."""
    return [
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
        for err in exc.errors()
    ]


class PydanticConfigValidator:
    """Structural check of a raw fixture document against FixtureConfig."""

    def validate(self, config: Any) -> ValidationOutcome:
        try:
            FixtureConfig.model_validate(config)
        except ValidationError as e:
            errors = format_validation_errors(e)
            return ValidationOutcome(success=False, error=", ".join(errors), errors=errors)
        return ValidationOutcome(success=True)


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class DefaultRouteInstanceGenerator:
    """Substitutes one fixture record per instance into every marker family."""

    def generate(self, route_pattern: str, fixtures: list[FixtureRecord]) -> list[str]:
        if not is_dynamic_path(route_pattern):
            return [route_pattern]
        # A dynamic route with no fixtures cannot be rendered; skip it.
        return [self._substitute(route_pattern, record) for record in fixtures]

    @staticmethod
    def _substitute(route_pattern: str, record: FixtureRecord) -> str:
        def replace(match: re.Match) -> str:
            name = marker_name(match)
            if name not in record:
                return match.group(0)
            # A catch-all value is one verbatim token, possibly multi-segment.
            return _format_value(record[name])

        # Single pass, so substituted values are never rescanned for markers.
        return ROUTE_MARKER.sub(replace, route_pattern)


class FixtureManager:
    """Holds the fixture configuration for the duration of a capture run."""

    def __init__(
        self,
        storage: StoragePort,
        validator: Optional[ConfigValidator] = None,
        route_generator: Optional[RouteInstanceGenerator] = None,
    ):
        self.storage = storage
        self.validator = validator or PydanticConfigValidator()
        self.route_generator = route_generator or DefaultRouteInstanceGenerator()
        self.config: Optional[FixtureConfig] = None

    def load_fixtures(self, path: str) -> FixtureConfig:
        """Read, parse and validate a fixture document; absent file yields defaults."""
        if not self.storage.exists(path):
            logger.debug("No fixture config at %s, using defaults", path)
            self.config = FixtureConfig.default()
            return self.config

        content = self.storage.read_text(path)
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise ConfigParseError(f"Failed to parse fixture config: {path}") from e

        outcome = self.validate_fixture_config(data)
        if not outcome.success:
            raise ConfigValidationError(outcome.errors or [outcome.error or "unknown error"])

        self.config = FixtureConfig.model_validate(data)
        logger.info("Loaded fixtures from %s (%d dynamic route patterns)",
                    path, len(self.config.dynamic_routes))
        return self.config

    def set_fixtures(self, config: FixtureConfig) -> None:
        """Replace the in-memory config; the caller has already validated it."""
        self.config = config
        logger.debug("Fixtures set: dynamic route patterns=%s", list(config.dynamic_routes))

    def get_auth_fixture(self, state: str) -> Optional[AuthFixture]:
        if state not in AUTH_STATES:
            raise InvalidStateError(f"Invalid auth state: {state}")
        if self.config is None:
            return None
        return getattr(self.config.auth, state)

    def get_dynamic_route_fixtures(self, route_pattern: str) -> list[FixtureRecord]:
        if self.config is None:
            return []
        return self.config.dynamic_routes.get(route_pattern, [])

    def get_global_state(self) -> Optional[dict[str, Any]]:
        if self.config is None or self.config.global_state is None:
            return None
        return self.config.global_state.model_dump(mode="json", by_alias=True, exclude_none=True)

    def generate_route_instances(self, route_pattern: str) -> list[str]:
        fixtures = self.get_dynamic_route_fixtures(route_pattern)
        instances = self.route_generator.generate(route_pattern, fixtures)
        logger.debug("Route %s: %d fixture records -> %d instances",
                     route_pattern, len(fixtures), len(instances))
        return instances

    def validate_fixture_config(self, config: Any) -> ValidationOutcome:
        return self.validator.validate(config)

    def save_fixtures(self, path: str, config: FixtureConfig) -> None:
        try:
            content = json.dumps(config.to_document(), indent=2)
            self.storage.write_text(path, content)
        except Exception as e:
            raise SaveError(f"Failed to save fixture config: {path}") from e
