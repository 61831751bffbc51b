"""Configuration models for protobooth."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from protobooth.models.fixtures import FixtureConfig

ROUTER_TYPES = ("vite", "nextjs")
AUTH_STATES = ("authenticated", "unauthenticated")


class ViewportConfig(BaseModel):
    name: str = "desktop"
    width: int = 1440
    height: int = 900


class ProtoboothConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    enabled: bool = True

    # Routing
    router_type: str = Field(default="vite", alias="routerType")
    routes_dir: Optional[str] = Field(default=None, alias="routesDir")
    app_url: str = Field(default="http://localhost:5173", alias="appUrl")

    # Fixtures: inline, or a document inside the storage directory
    fixtures: Optional[FixtureConfig] = None
    fixtures_file: Optional[str] = Field(default=None, alias="fixturesFile")

    # Capture
    viewports: list[ViewportConfig] = Field(
        default_factory=lambda: [
            ViewportConfig(name="mobile", width=375, height=667),
            ViewportConfig(name="desktop", width=1440, height=900),
        ]
    )
    output_dir: str = Field(default=".protobooth/screenshots", alias="outputDir")
    max_parallel_contexts: int = Field(default=1, ge=1, alias="maxParallelContexts")
    navigation_timeout_ms: int = Field(default=30000, alias="navigationTimeoutMs")

    @classmethod
    def load(cls, path: str | Path) -> "ProtoboothConfig":
        """Load config from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path) as f:
            data = json.load(f)
        return cls(**data)

    def save(self, path: str | Path) -> None:
        """Save config to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        data = self.model_dump(mode="json", by_alias=True, exclude_none=True, exclude={"fixtures"})
        # Fixture auth keys are required even when null
        if self.fixtures is not None:
            data["fixtures"] = self.fixtures.to_document()
        with open(path, "w") as f:
            json.dump(data, f, indent=2)
