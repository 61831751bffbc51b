"""Screenshot capture service — validate, discover, expand, then capture every instance at every viewport."""

from __future__ import annotations

import asyncio
import logging
import os
import time
from pathlib import Path
from typing import Any, Optional, Protocol

from protobooth.discovery.manifest import ManifestRouteDiscovery, RouteDiscoveryPort
from protobooth.errors import (
    CaptureError,
    InvalidAuthStateError,
    InvalidRouterTypeError,
    ProjectPathError,
    TargetConnectionError,
)
from protobooth.fixtures.fixture_manager import FixtureManager
from protobooth.models.config import AUTH_STATES, ROUTER_TYPES, ViewportConfig
from protobooth.models.fixtures import AuthFixture
from protobooth.models.routes import RouteDescriptor
from protobooth.models.screenshot import (
    CaptureRequest,
    CaptureResult,
    InjectedFixtures,
    ScreenshotResult,
)
from protobooth.storage.file_storage import StoragePort
from protobooth.url_utils import build_capture_url, screenshot_filename

logger = logging.getLogger(__name__)


class BrowserControllerPort(Protocol):
    async def capture_screenshot(
        self,
        url: str,
        viewport: ViewportConfig,
        auth_fixture: Optional[AuthFixture],
        global_state: Optional[dict[str, Any]],
        output_path: str,
    ) -> ScreenshotResult: ...


class RequestValidatorPort(Protocol):
    def validate(self, request: CaptureRequest) -> None: ...


class DefaultRequestValidator:
    """Rejects a request before any side effect takes place."""

    def __init__(self, storage: StoragePort):
        self.storage = storage

    def validate(self, request: CaptureRequest) -> None:
        project_path = str(Path(request.project_path).resolve())
        if not self.storage.exists(project_path):
            raise ProjectPathError(f"Project path does not exist: {request.project_path}")
        if request.router_type not in ROUTER_TYPES:
            raise InvalidRouterTypeError(f"Invalid router type: {request.router_type}")
        if request.auth_state not in AUTH_STATES:
            raise InvalidAuthStateError(f"Invalid auth state: {request.auth_state}")


class ScreenshotCaptureService:
    """Turns a route set, a viewport set and fixtures into a screenshot set."""

    def __init__(
        self,
        output_dir: str,
        viewports: list[ViewportConfig],
        fixture_manager: FixtureManager,
        storage: StoragePort,
        browser_controller: BrowserControllerPort,
        route_discovery: Optional[RouteDiscoveryPort] = None,
        validator: Optional[RequestValidatorPort] = None,
        max_parallel_contexts: int = 1,
    ):
        self.output_dir = output_dir
        self.viewports = viewports
        self.fixture_manager = fixture_manager
        self.storage = storage
        self.browser_controller = browser_controller
        self.route_discovery = route_discovery or ManifestRouteDiscovery(storage)
        self.validator = validator or DefaultRequestValidator(storage)
        self.max_parallel_contexts = max(1, max_parallel_contexts)

    async def capture_routes(self, request: CaptureRequest) -> CaptureResult:
        """Capture every route instance at every viewport.

        Any failure aborts the run; screenshots already written stay on disk
        but no result is returned.
        """
        start = time.time()
        self.validator.validate(request)

        routes = self.route_discovery.discover_routes(request.project_path)
        instances = self.generate_route_instances(routes)
        logger.info("Capturing %d route instances x %d viewports (%d routes discovered)",
                    len(instances), len(self.viewports), len(routes))

        auth_fixture = self.fixture_manager.get_auth_fixture(request.auth_state)
        global_state = None
        if request.include_global_state:
            global_state = self.fixture_manager.get_global_state() or {}

        self.storage.ensure_dir(self.output_dir)

        shots = [(instance, viewport) for instance in instances for viewport in self.viewports]
        if self.max_parallel_contexts == 1:
            screenshots = []
            for instance, viewport in shots:
                screenshots.append(await self._capture_one(
                    request.app_url, instance, viewport, auth_fixture, global_state,
                ))
        else:
            screenshots = await self._capture_pooled(request.app_url, shots, auth_fixture, global_state)

        injection_log: list[str] = []
        for instance, viewport in shots:
            injection_log.append(f"Route: {instance}, Viewport: {viewport.name}")
            if auth_fixture is not None:
                injection_log.append("localStorage: auth")
            if global_state is not None:
                injection_log.append("localStorage: globalState")

        logger.info("Captured %d screenshots in %.1fs", len(screenshots), time.time() - start)
        return CaptureResult(
            screenshots=screenshots,
            injected_fixtures=InjectedFixtures(auth=auth_fixture, global_state=global_state),
            fixture_injection_log=injection_log,
            total_routes=len(routes),
            total_screenshots=len(screenshots),
        )

    def generate_route_instances(self, routes: list[RouteDescriptor]) -> list[str]:
        """Expand routes in discovery order, then fixture-record order."""
        instances: list[str] = []
        for route in routes:
            if route.is_dynamic:
                instances.extend(self.fixture_manager.generate_route_instances(route.path))
            else:
                instances.append(route.path)
        return instances

    async def _capture_one(
        self,
        app_url: str,
        instance: str,
        viewport: ViewportConfig,
        auth_fixture: Optional[AuthFixture],
        global_state: Optional[dict[str, Any]],
    ) -> ScreenshotResult:
        output_path = os.path.join(self.output_dir, screenshot_filename(instance, viewport.name))
        logger.debug("Capturing %s at %s (%dx%d)", instance, viewport.name, viewport.width, viewport.height)
        try:
            return await self.browser_controller.capture_screenshot(
                url=build_capture_url(app_url, instance),
                viewport=viewport,
                auth_fixture=auth_fixture,
                global_state=global_state,
                output_path=output_path,
            )
        except TargetConnectionError:
            # One unreachable target means every remaining shot would fail too.
            logger.error("Application unreachable while capturing %s at %s", instance, viewport.name)
            raise
        except Exception as e:
            raise CaptureError(
                f"Failed to capture screenshot for {instance} at {viewport.name}: {e}",
                route=instance,
                viewport=viewport.name,
            ) from e

    async def _capture_pooled(
        self,
        app_url: str,
        shots: list[tuple[str, ViewportConfig]],
        auth_fixture: Optional[AuthFixture],
        global_state: Optional[dict[str, Any]],
    ) -> list[ScreenshotResult]:
        """Run shots on a bounded pool; results keep the (instance, viewport) order."""
        semaphore = asyncio.Semaphore(self.max_parallel_contexts)

        async def _run(instance: str, viewport: ViewportConfig) -> ScreenshotResult:
            async with semaphore:
                return await self._capture_one(app_url, instance, viewport, auth_fixture, global_state)

        tasks = [asyncio.ensure_future(_run(instance, viewport)) for instance, viewport in shots]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
