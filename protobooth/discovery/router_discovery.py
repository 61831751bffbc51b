"""Route discovery — converts file-based routing conventions into route descriptors."""

from __future__ import annotations

import logging
import os
import re
from abc import ABC, abstractmethod
from pathlib import Path, PurePosixPath
from typing import Optional

from protobooth.errors import InvalidRouterTypeError
from protobooth.models.routes import RouteDescriptor

logger = logging.getLogger(__name__)

ROUTE_EXTENSIONS = (".tsx", ".jsx")
TOOL_KEYWORD = "protobooth"
API_DIR = "api"
SKIPPED_DIRS = {"node_modules", TOOL_KEYWORD}

# Optional catch-all [[...name]], catch-all [...name], bracket [name] or sigil $name,
# tried in that order at each position
ROUTE_MARKER = re.compile(
    r"\[\[\.\.\.([^\[\]/]+)\]\]|\[\.\.\.([^\[\]/]+)\]|\[([^\[\]/]+)\]|\$(\w+)"
)


def marker_name(match: re.Match) -> str:
    return next(group for group in match.groups() if group is not None)


def is_dynamic_path(route_path: str) -> bool:
    return ROUTE_MARKER.search(route_path) is not None


def extract_parameters(route_path: str) -> list[str]:
    """Return parameter names in order of appearance, catch-all prefix stripped."""
    return [marker_name(m) for m in ROUTE_MARKER.finditer(route_path)]


def _split(path: str) -> list[str]:
    return [seg for seg in path.replace("\\", "/").split("/") if seg and seg != "."]


def _find_root(segments: list[str], root: str) -> Optional[int]:
    """Index just past the first occurrence of ``root`` inside ``segments``."""
    root_segments = _split(root)
    width = len(root_segments)
    for i in range(len(segments) - width + 1):
        if segments[i:i + width] == root_segments:
            return i + width
    return None


def _join_route(segments: list[str]) -> str:
    return "/" + "/".join(segments) if segments else "/"


class RouterDiscovery(ABC):
    """Shared contract for one file-routing convention."""

    router_type: str = ""

    def discover_routes(self, paths: list[str]) -> list[RouteDescriptor]:
        """Parse every valid route file, preserving input order."""
        return [self.parse_route_path(p) for p in paths if self.is_valid_route(p)]

    def parse_route_path(self, file_path: str) -> RouteDescriptor:
        route_path = self.to_route_path(file_path)
        dynamic = is_dynamic_path(route_path)
        return RouteDescriptor(
            path=route_path,
            is_dynamic=dynamic,
            parameters=extract_parameters(route_path) if dynamic else [],
        )

    def is_valid_route(self, file_path: str) -> bool:
        if not file_path.endswith(ROUTE_EXTENSIONS):
            return False
        if TOOL_KEYWORD in file_path:
            return False
        located = self._locate(file_path)
        if located is None:
            return False
        _, relative = located
        if API_DIR in relative[:-1]:
            return False
        return self._is_route_file(relative)

    def to_route_path(self, file_path: str) -> str:
        located = self._locate(file_path)
        if located is None:
            return "/"
        flavor, relative = located
        return _join_route(self._route_segments(flavor, relative))

    def _locate(self, file_path: str) -> Optional[tuple[str, list[str]]]:
        """Find which routing root holds ``file_path``; return (flavor, segments below it)."""
        segments = _split(file_path)
        for flavor, root in self.route_sources():
            start = _find_root(segments, root)
            if start is not None and start < len(segments):
                return flavor, segments[start:]
        return None

    @abstractmethod
    def route_sources(self) -> list[tuple[str, str]]:
        """(manifest flavor, routing root) pairs scanned for this convention."""

    @abstractmethod
    def _is_route_file(self, relative: list[str]) -> bool:
        ...

    @abstractmethod
    def _route_segments(self, flavor: str, relative: list[str]) -> list[str]:
        ...


class TanStackRouterDiscovery(RouterDiscovery):
    """Flat ``index`` files under ``src/routes``; ``$name`` parameters."""

    router_type = "vite"
    INDEX_FILE = "index"
    ROOT_FILE = "__root"

    def __init__(self, routes_dir: str = "src/routes"):
        self.routes_dir = routes_dir

    def route_sources(self) -> list[tuple[str, str]]:
        return [("routes", self.routes_dir)]

    def _is_route_file(self, relative: list[str]) -> bool:
        return PurePosixPath(relative[-1]).stem != self.ROOT_FILE

    def _route_segments(self, flavor: str, relative: list[str]) -> list[str]:
        stem = PurePosixPath(relative[-1]).stem
        segments = relative[:-1]
        if stem != self.INDEX_FILE:
            segments = segments + [stem]
        return segments


class NextjsRouterDiscovery(RouterDiscovery):
    """App router (nested ``page`` files) and pages router (flat ``index`` files)."""

    router_type = "nextjs"
    PAGE_FILE = "page"
    INDEX_FILE = "index"
    LAYOUT_FILE = "layout"

    def __init__(self, base_dir: str = "src"):
        self.app_dir = f"{base_dir.rstrip('/')}/app"
        self.pages_dir = f"{base_dir.rstrip('/')}/pages"

    def route_sources(self) -> list[tuple[str, str]]:
        return [("app_router", self.app_dir), ("pages_router", self.pages_dir)]

    def _is_route_file(self, relative: list[str]) -> bool:
        stem = PurePosixPath(relative[-1]).stem
        if stem == self.LAYOUT_FILE:
            return False
        if stem.startswith("_"):  # _app, _document, _error
            return False
        return True

    def is_valid_route(self, file_path: str) -> bool:
        if not super().is_valid_route(file_path):
            return False
        flavor, relative = self._locate(file_path)
        if flavor == "app_router":
            return PurePosixPath(relative[-1]).stem == self.PAGE_FILE
        return True

    def _route_segments(self, flavor: str, relative: list[str]) -> list[str]:
        stem = PurePosixPath(relative[-1]).stem
        segments = relative[:-1]
        if flavor == "app_router":
            return segments if stem == self.PAGE_FILE else segments + [stem]
        if stem != self.INDEX_FILE:
            segments = segments + [stem]
        return segments


ROUTER_DISCOVERIES: dict[str, type[RouterDiscovery]] = {
    "vite": TanStackRouterDiscovery,
    "nextjs": NextjsRouterDiscovery,
}


def get_router_discovery(router_type: str, routes_dir: Optional[str] = None) -> RouterDiscovery:
    """Select the discovery strategy for a routing-convention tag."""
    cls = ROUTER_DISCOVERIES.get(router_type)
    if cls is None:
        raise InvalidRouterTypeError(f"Invalid router type: {router_type}")
    return cls(routes_dir) if routes_dir else cls()


def scan_route_files(project_root: str | Path, routes_dir: str) -> list[str]:
    """List candidate files under ``routes_dir`` as project-relative POSIX paths.

    Best-effort: a missing or unreadable directory contributes nothing.
    """
    project_root = Path(project_root)
    found: list[str] = []
    _scan(project_root / routes_dir, project_root, found)
    return found


def _scan(directory: Path, project_root: Path, found: list[str]) -> None:
    try:
        entries = sorted(os.scandir(directory), key=lambda e: e.name)
    except OSError as e:
        logger.debug("Skipping unreadable directory %s: %s", directory, e)
        return

    for entry in entries:
        try:
            is_dir = entry.is_dir()
        except OSError:
            continue
        if is_dir:
            if entry.name in SKIPPED_DIRS or entry.name.startswith("."):
                continue
            _scan(Path(entry.path), project_root, found)
        elif entry.name.endswith(ROUTE_EXTENSIONS):
            found.append(Path(entry.path).relative_to(project_root).as_posix())
