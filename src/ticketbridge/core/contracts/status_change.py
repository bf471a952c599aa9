"""Bulk status-change contracts."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field, model_validator

STATUS_COMPLETE = "Complete"
STATUS_CANCELLED = "Cancelled"
STATUS_NO_NOTES = "No notes to process"

SKIP_NO_PROJECT_MAPPING = "no project mapping"
SKIP_NO_SUMMARY = "no issue_id and no summary"
SKIP_NOT_FOUND_BY_SUMMARY = "no issue_id and not found by summary"


class AgileAction(StrEnum):
    BACKLOG = "backlog"
    BOARD = "board"
    SPRINT = "sprint"


class StatusChangeOptions(BaseModel):
    """A requested transition and/or a single agile action."""

    transition_id: str | None = None
    transition_name: str | None = None
    agile_action: AgileAction | None = None
    sprint_id: int | None = None
    board_id: str | None = None

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_agile_target(self) -> StatusChangeOptions:
        if self.agile_action == AgileAction.BOARD and not self.board_id:
            raise ValueError("agile_action 'board' requires a board_id")
        if self.agile_action == AgileAction.SPRINT and self.sprint_id is None:
            raise ValueError("agile_action 'sprint' requires a sprint_id")
        return self


class ChangedNote(BaseModel):
    path: str
    issue_key: str
    old_status: str
    new_status: str


class ResolvedNote(BaseModel):
    path: str
    issue_key: str


class SkippedNote(BaseModel):
    path: str
    reason: str
    existing_issue_key: str | None = None


class FailedNote(BaseModel):
    path: str
    error: str


class BulkStatusChangeResult(BaseModel):
    changed: list[ChangedNote] = Field(default_factory=list)
    resolved: list[ResolvedNote] = Field(default_factory=list)
    skipped: list[SkippedNote] = Field(default_factory=list)
    failed: list[FailedNote] = Field(default_factory=list)


class BulkStatusChangeProgress(BaseModel):
    """Cumulative counters reported after every unit of work.

    Only ``status`` reliably signals termination: it is one of
    ``Complete``, ``Cancelled`` or ``No notes to process`` on the final call.
    """

    total: int = 0
    processed: int = 0
    current_file: str = ""
    status: str = ""
    changed: int = 0
    resolved: int = 0
    skipped: int = 0
    failed: int = 0

    @property
    def is_terminal(self) -> bool:
        return self.status in {STATUS_COMPLETE, STATUS_CANCELLED, STATUS_NO_NOTES}
