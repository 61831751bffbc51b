"""Workflow state manager — persists the review lifecycle and its annotations."""

from __future__ import annotations

import json
import logging
import time
from typing import Optional

from pydantic import TypeAdapter, ValidationError

from protobooth.errors import InvalidStateError
from protobooth.models.workflow import (
    INITIAL_STATE,
    WORKFLOW_STATES,
    Annotation,
    LastCaptureResult,
    WorkflowStateData,
)
from protobooth.storage.file_storage import StoragePort

logger = logging.getLogger(__name__)

_annotation_list = TypeAdapter(list[Annotation])


def _now() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())


class WorkflowStateManager:
    """Records transitions decided by its caller; never decides them itself.

    The state document is the only source of truth: nothing is cached between
    calls, and every write is a full overwrite.
    """

    WORKFLOW_FILE = "workflow-state.json"
    ANNOTATIONS_FILE = "annotations.json"

    def __init__(self, storage: StoragePort):
        self.storage = storage

    def get_workflow_state(self) -> WorkflowStateData:
        """Read the persisted state, or the initial state for a fresh project."""
        if self.storage.exists(self.WORKFLOW_FILE):
            try:
                data = json.loads(self.storage.read_text(self.WORKFLOW_FILE))
                return WorkflowStateData.model_validate(data)
            except (ValueError, ValidationError) as e:
                logger.warning("Failed to load workflow state: %s. Using initial state.", e)
        return WorkflowStateData(state=INITIAL_STATE, timestamp=_now())

    def set_workflow_state(
        self, state: str, capture_result: Optional[LastCaptureResult] = None,
    ) -> WorkflowStateData:
        """Overwrite the state document; omitting ``capture_result`` clears the stored one."""
        if state not in WORKFLOW_STATES:
            raise InvalidStateError(f"Invalid workflow state: {state}")
        data = WorkflowStateData(state=state, timestamp=_now(), last_capture_result=capture_result)
        self.storage.write_text(
            self.WORKFLOW_FILE,
            json.dumps(data.model_dump(mode="json", by_alias=True, exclude_none=True), indent=2),
        )
        logger.info("Workflow state -> %s", state)
        return data

    def get_annotations(self) -> list[Annotation]:
        if not self.storage.exists(self.ANNOTATIONS_FILE):
            return []
        content = self.storage.read_text(self.ANNOTATIONS_FILE)
        try:
            return _annotation_list.validate_json(content)
        except ValidationError as e:
            logger.warning("Failed to load annotations: %s. Using an empty list.", e)
            return []

    def save_annotations(self, annotations: list[Annotation]) -> None:
        content = _annotation_list.dump_json(annotations, indent=2).decode("utf-8")
        self.storage.write_text(self.ANNOTATIONS_FILE, content)
        logger.debug("Saved %d annotations", len(annotations))

    def reset_workflow(self) -> None:
        # Two independent writes; an interruption between them leaves the
        # state reset but the annotations intact.
        self.set_workflow_state(INITIAL_STATE)
        self.save_annotations([])
