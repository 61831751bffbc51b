"""Capture request and result data structures."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from protobooth.models.fixtures import AuthFixture


class CaptureRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    app_url: str = Field(alias="appUrl")
    project_path: str = Field(alias="projectPath")
    # Kept as plain strings: out-of-enum values are rejected by the request
    # validator with a dedicated error, not by model construction.
    router_type: str = Field(alias="routerType")
    auth_state: str = Field(alias="authState")
    include_global_state: bool = Field(default=False, alias="includeGlobalState")


class Dimensions(BaseModel):
    width: int
    height: int


class ScreenshotResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    route: str
    viewport: str
    dimensions: Dimensions
    file_path: str = Field(alias="filePath")
    timestamp: str  # ISO timestamp


class InjectedFixtures(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    auth: Optional[AuthFixture] = None
    global_state: Optional[dict[str, Any]] = Field(default=None, alias="globalState")


class CaptureResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    screenshots: list[ScreenshotResult] = Field(default_factory=list)
    injected_fixtures: InjectedFixtures = Field(default_factory=InjectedFixtures, alias="injectedFixtures")
    fixture_injection_log: list[str] = Field(default_factory=list, alias="fixtureInjectionLog")
    total_routes: int = Field(default=0, alias="totalRoutes")
    total_screenshots: int = Field(default=0, alias="totalScreenshots")
