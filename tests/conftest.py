"""Pytest configuration and shared fixtures."""

import json
from pathlib import Path
from unittest.mock import AsyncMock, Mock

import pytest

from protobooth.fixtures.fixture_manager import FixtureManager
from protobooth.models.config import ProtoboothConfig, ViewportConfig
from protobooth.models.fixtures import (
    AuthFixture,
    AuthFixtures,
    FixtureConfig,
    GlobalStateFixture,
    UserData,
)
from protobooth.models.screenshot import CaptureRequest, Dimensions, ScreenshotResult
from protobooth.storage.file_storage import FileStorage


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def viewports() -> list[ViewportConfig]:
    """Mobile and desktop viewports."""
    return [
        ViewportConfig(name="mobile", width=375, height=667),
        ViewportConfig(name="desktop", width=1440, height=900),
    ]


@pytest.fixture
def auth_fixture() -> AuthFixture:
    """An authenticated user session."""
    return AuthFixture(
        user=UserData(id="user-1", name="Ada Reviewer", email="ada@example.com"),
        token="test-token-123",
        permissions=["read", "write"],
    )


@pytest.fixture
def fixture_config(auth_fixture: AuthFixture) -> FixtureConfig:
    """Fixture config with TanStack and Next.js dynamic routes."""
    return FixtureConfig(
        auth=AuthFixtures(authenticated=auth_fixture, unauthenticated=None),
        dynamic_routes={
            "/product/$slug": [{"slug": "laptop"}, {"slug": "mouse"}],
            "/user/[id]": [{"id": "123"}, {"id": "456"}, {"id": "789"}],
            "/docs/[...path]": [{"path": "guides/getting-started"}],
        },
        global_state=GlobalStateFixture(theme="dark", language="en", feature_flags={"beta": True}),
    )


@pytest.fixture
def fixture_document() -> dict:
    """Raw JSON fixture document using wire names."""
    return {
        "auth": {
            "authenticated": {
                "user": {"id": "user-1", "name": "Ada Reviewer", "email": "ada@example.com"},
                "token": "test-token-123",
            },
            "unauthenticated": None,
        },
        "dynamicRoutes": {
            "/product/$slug": [{"slug": "laptop"}, {"slug": "mouse"}],
        },
        "globalState": {"theme": "dark", "featureFlags": {"beta": True}},
    }


@pytest.fixture
def project_config(fixture_config: FixtureConfig, viewports: list[ViewportConfig]) -> ProtoboothConfig:
    return ProtoboothConfig(
        router_type="vite",
        app_url="http://localhost:5173",
        fixtures=fixture_config,
        viewports=viewports,
    )


# ============================================================================
# Storage and Manager Fixtures
# ============================================================================


@pytest.fixture
def storage(tmp_path: Path) -> FileStorage:
    """File storage rooted in a temporary .protobooth directory."""
    return FileStorage.for_project(tmp_path)


@pytest.fixture
def fixture_manager(storage: FileStorage, fixture_config: FixtureConfig) -> FixtureManager:
    manager = FixtureManager(storage)
    manager.set_fixtures(fixture_config)
    return manager


# ============================================================================
# Project Fixtures
# ============================================================================


def write_manifest(project_root: Path, data: dict) -> Path:
    path = project_root / "routes.json"
    path.write_text(json.dumps(data))
    return path


@pytest.fixture
def tanstack_project(tmp_path: Path) -> Path:
    """A project with a TanStack Router routes directory."""
    routes = tmp_path / "src" / "routes"
    (routes / "product").mkdir(parents=True)
    (routes / "user").mkdir()
    for name in ["__root.tsx", "index.tsx", "about.tsx", "product/$slug.tsx", "user/$userId.tsx"]:
        (routes / name).write_text("export const Route = createFileRoute()")
    return tmp_path


@pytest.fixture
def nextjs_project(tmp_path: Path) -> Path:
    """A project mixing the Next.js app and pages routers."""
    app = tmp_path / "src" / "app"
    pages = tmp_path / "src" / "pages"
    for rel in [
        "page.tsx",
        "layout.tsx",
        "about/page.tsx",
        "user/[id]/page.tsx",
        "api/protobooth/[...path]/route.ts",
        "protobooth/annotate/page.tsx",
    ]:
        (app / rel).parent.mkdir(parents=True, exist_ok=True)
        (app / rel).write_text("export default function Page() {}")
    for rel in ["index.tsx", "_app.tsx", "blog/[slug].tsx", "api/hello.tsx"]:
        (pages / rel).parent.mkdir(parents=True, exist_ok=True)
        (pages / rel).write_text("export default function Page() {}")
    return tmp_path


@pytest.fixture
def capture_request(tmp_path: Path) -> CaptureRequest:
    return CaptureRequest(
        app_url="http://localhost:5173",
        project_path=str(tmp_path),
        router_type="vite",
        auth_state="unauthenticated",
    )


# ============================================================================
# Browser Fixtures
# ============================================================================


def _fake_screenshot(url, viewport, auth_fixture, global_state, output_path):
    return ScreenshotResult(
        route=url.split("5173", 1)[-1] or "/",
        viewport=viewport.name,
        dimensions=Dimensions(width=viewport.width, height=viewport.height),
        file_path=output_path,
        timestamp="2026-01-01T00:00:00Z",
    )


@pytest.fixture
def browser_controller() -> Mock:
    """Browser controller whose capture echoes its arguments into a result."""
    controller = Mock()
    controller.capture_screenshot = AsyncMock(side_effect=_fake_screenshot)
    return controller
