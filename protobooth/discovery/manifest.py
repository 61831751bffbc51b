"""Route manifest — builds routes.json from the filesystem and reads it back for capture."""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Optional, Protocol

from pydantic import ValidationError

from protobooth.errors import RouteDiscoveryError, StorageError
from protobooth.models.config import ViewportConfig
from protobooth.models.routes import RouteDescriptor, RouteManifest
from protobooth.storage.file_storage import StoragePort

from .router_discovery import get_router_discovery, scan_route_files

logger = logging.getLogger(__name__)

MANIFEST_FILE = "routes.json"


class RouteDiscoveryPort(Protocol):
    def discover_routes(self, project_path: str) -> list[RouteDescriptor]: ...


def manifest_path(project_root: str | Path) -> str:
    return str(Path(project_root).resolve() / MANIFEST_FILE)


def build_route_manifest(
    project_root: str | Path,
    router_type: str,
    routes_dir: Optional[str] = None,
    viewports: Optional[list[ViewportConfig]] = None,
) -> RouteManifest:
    """Scan the project's routing roots and describe every route found."""
    discovery = get_router_discovery(router_type, routes_dir)
    flavors: dict[str, list[RouteDescriptor]] = {}
    for flavor, directory in discovery.route_sources():
        paths = scan_route_files(project_root, directory)
        flavors[flavor] = discovery.discover_routes(paths)
        logger.debug("Discovered %d %s routes under %s", len(flavors[flavor]), flavor, directory)

    return RouteManifest(
        **flavors,
        viewports=viewports,
        timestamp=time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
    )


def write_route_manifest(storage: StoragePort, project_root: str | Path, manifest: RouteManifest) -> str:
    """Persist the manifest at the project root and return its path."""
    path = manifest_path(project_root)
    data = manifest.model_dump(mode="json", by_alias=True, exclude_none=True)
    storage.write_text(path, json.dumps(data, indent=2))
    logger.info("Wrote route manifest with %d routes to %s", len(manifest.all_routes()), path)
    return path


class ManifestRouteDiscovery:
    """Reads a previously generated manifest instead of parsing route files."""

    def __init__(self, storage: StoragePort):
        self.storage = storage

    def load_manifest(self, project_path: str) -> RouteManifest:
        path = manifest_path(project_path)
        try:
            content = self.storage.read_text(path)
            return RouteManifest.model_validate(json.loads(content))
        except StorageError as e:
            raise RouteDiscoveryError(f"Failed to discover routes: {e}") from e
        except (ValueError, ValidationError) as e:
            raise RouteDiscoveryError(f"Failed to discover routes: malformed {MANIFEST_FILE}") from e

    def discover_routes(self, project_path: str) -> list[RouteDescriptor]:
        return self.load_manifest(project_path).all_routes()
