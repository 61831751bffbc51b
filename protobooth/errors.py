"""Error taxonomy shared by discovery, fixtures, capture and workflow."""

from __future__ import annotations

from typing import Optional


class ProtoboothError(Exception):
    """Base class for every error raised by protobooth."""


class ConfigParseError(ProtoboothError):
    """A configuration document is not valid JSON."""


class ConfigValidationError(ProtoboothError):
    """A configuration document parsed but does not match the expected shape."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(f"Invalid fixture config: {', '.join(errors)}")


class InvalidInputError(ProtoboothError, ValueError):
    """A caller passed a value outside a closed enumeration."""


class InvalidStateError(InvalidInputError):
    pass


class InvalidRouterTypeError(InvalidInputError):
    pass


class InvalidAuthStateError(InvalidInputError):
    pass


class ProjectPathError(ProtoboothError):
    pass


class RouteDiscoveryError(ProtoboothError):
    """The route manifest is missing, unreadable or malformed."""


class CaptureError(ProtoboothError):
    """A single screenshot failed for a reason other than connectivity."""

    def __init__(self, message: str, route: Optional[str] = None, viewport: Optional[str] = None):
        self.route = route
        self.viewport = viewport
        super().__init__(message)


class TargetConnectionError(ProtoboothError, ConnectionError):
    """The application under capture could not be reached."""


class StorageError(ProtoboothError):
    pass


class StorageNotFoundError(StorageError):
    pass


class SaveError(StorageError):
    pass
