"""Orchestrator — wires storage, fixtures, capture and workflow for one project."""

from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path
from typing import Optional

from protobooth.discovery.manifest import build_route_manifest, write_route_manifest
from protobooth.fixtures.fixture_manager import FixtureManager
from protobooth.models.config import ProtoboothConfig
from protobooth.models.fixtures import FixtureConfig
from protobooth.models.routes import RouteManifest
from protobooth.models.screenshot import CaptureRequest, CaptureResult
from protobooth.models.workflow import Annotation, LastCaptureResult, WorkflowStateData
from protobooth.screenshot.browser import BrowserSession
from protobooth.screenshot.capture_service import BrowserControllerPort, ScreenshotCaptureService
from protobooth.storage.file_storage import FileStorage
from protobooth.workflow.state_manager import WorkflowStateManager

logger = logging.getLogger(__name__)


class Orchestrator:
    """Coordinates route discovery, screenshot capture and the review workflow."""

    def __init__(self, project_root: str | Path, config: ProtoboothConfig):
        self.project_root = Path(project_root).resolve()
        self.config = config
        self.storage = FileStorage.for_project(self.project_root)

        self.fixture_manager = FixtureManager(self.storage)
        if config.fixtures_file:
            self.fixture_manager.load_fixtures(config.fixtures_file)
        else:
            self.fixture_manager.set_fixtures(config.fixtures or FixtureConfig.default())

        self.workflow = WorkflowStateManager(self.storage)

    @property
    def output_dir(self) -> Path:
        return self.project_root / self.config.output_dir

    def generate_route_manifest(self) -> RouteManifest:
        """Scan route files and write routes.json at the project root."""
        manifest = build_route_manifest(
            self.project_root,
            self.config.router_type,
            routes_dir=self.config.routes_dir,
            viewports=self.config.viewports,
        )
        write_route_manifest(self.storage, self.project_root, manifest)
        return manifest

    def create_screenshot_service(self, browser_controller: BrowserControllerPort) -> ScreenshotCaptureService:
        return ScreenshotCaptureService(
            output_dir=str(self.output_dir),
            viewports=self.config.viewports,
            fixture_manager=self.fixture_manager,
            storage=self.storage,
            browser_controller=browser_controller,
            max_parallel_contexts=self.config.max_parallel_contexts,
        )

    def build_request(
        self,
        auth_state: str = "unauthenticated",
        include_global_state: bool = False,
        app_url: Optional[str] = None,
    ) -> CaptureRequest:
        return CaptureRequest(
            app_url=app_url or self.config.app_url,
            project_path=str(self.project_root),
            router_type=self.config.router_type,
            auth_state=auth_state,
            include_global_state=include_global_state,
        )

    def capture(self, request: CaptureRequest) -> CaptureResult:
        """Run one capture request in a fresh browser session."""
        return asyncio.run(self._capture(request))

    async def _capture(self, request: CaptureRequest) -> CaptureResult:
        async with BrowserSession(navigation_timeout_ms=self.config.navigation_timeout_ms) as session:
            service = self.create_screenshot_service(session.controller())
            return await service.capture_routes(request)

    def request_review(
        self,
        auth_state: str = "unauthenticated",
        include_global_state: bool = False,
        app_url: Optional[str] = None,
    ) -> CaptureResult:
        """Refresh the manifest, capture every route, and mark reviews as requested.

        A failed capture raises and leaves the workflow state unchanged.
        """
        start = time.time()
        logger.info("=== Requesting review for %s ===", self.project_root)
        self.generate_route_manifest()

        request = self.build_request(auth_state, include_global_state, app_url)
        result = self.capture(request)

        self.workflow.set_workflow_state(
            "reviews-requested",
            LastCaptureResult(
                screenshot_count=result.total_screenshots,
                output_path=self.config.output_dir,
            ),
        )
        logger.info("=== Review requested: %d screenshots in %.1fs ===",
                    result.total_screenshots, time.time() - start)
        return result

    def get_workflow_state(self) -> WorkflowStateData:
        return self.workflow.get_workflow_state()

    def set_workflow_state(self, state: str) -> WorkflowStateData:
        return self.workflow.set_workflow_state(state)

    def get_annotations(self) -> list[Annotation]:
        return self.workflow.get_annotations()

    def reset_workflow(self) -> None:
        """Return to in-development and clear annotations."""
        self.workflow.reset_workflow()
        logger.info("Workflow reset")
