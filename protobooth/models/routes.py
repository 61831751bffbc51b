"""Route descriptors and the route manifest written for the capture service."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from protobooth.models.config import ViewportConfig


class RouteDescriptor(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    path: str
    is_dynamic: bool = Field(default=False, alias="isDynamic")
    parameters: list[str] = Field(default_factory=list)


class RouteManifest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    routes: Optional[list[RouteDescriptor]] = None  # vite / TanStack Router
    app_router: Optional[list[RouteDescriptor]] = Field(default=None, alias="appRouter")
    pages_router: Optional[list[RouteDescriptor]] = Field(default=None, alias="pagesRouter")
    viewports: Optional[list[ViewportConfig]] = None
    timestamp: str = ""

    def all_routes(self) -> list[RouteDescriptor]:
        """Concatenate every flavor present in the manifest."""
        merged: list[RouteDescriptor] = []
        for flavor in (self.routes, self.app_router, self.pages_router):
            if flavor:
                merged.extend(flavor)
        return merged
