"""Workflow state and annotation data structures."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

WorkflowState = Literal[
    "in-development",
    "reviews-requested",
    "in-review",
    "submitted-for-development",
]

# Lifecycle order; reset always returns to the first entry.
WORKFLOW_STATES: tuple[str, ...] = (
    "in-development",
    "reviews-requested",
    "in-review",
    "submitted-for-development",
)
INITIAL_STATE = "in-development"


class LastCaptureResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    screenshot_count: int = Field(alias="screenshotCount")
    output_path: str = Field(alias="outputPath")


class WorkflowStateData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    state: WorkflowState = INITIAL_STATE
    timestamp: str  # ISO timestamp
    last_capture_result: Optional[LastCaptureResult] = Field(default=None, alias="lastCaptureResult")


class Position(BaseModel):
    x: float
    y: float


class Annotation(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    timestamp: str
    route: str
    viewport: str
    position: Position
    content: str
    priority: Literal["low", "medium", "high"] = "medium"
    status: Literal["pending", "in-progress", "resolved"] = "pending"
