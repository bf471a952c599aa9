"""Bulk ticket-creation contracts."""

from __future__ import annotations

from pydantic import BaseModel, Field

from ticketbridge.core.contracts.status_change import (
    STATUS_CANCELLED,
    STATUS_COMPLETE,
    STATUS_NO_NOTES,
    FailedNote,
    SkippedNote,
)

SKIP_NO_SUMMARY_TO_CREATE = "no summary"


class CreatedNote(BaseModel):
    path: str
    issue_key: str
    issue_url: str


class BulkCreateResult(BaseModel):
    created: list[CreatedNote] = Field(default_factory=list)
    skipped: list[SkippedNote] = Field(default_factory=list)
    failed: list[FailedNote] = Field(default_factory=list)


class BulkCreateProgress(BaseModel):
    """Cumulative counters; the last report's ``status`` is terminal."""

    total: int = 0
    processed: int = 0
    current_file: str = ""
    status: str = ""
    created: int = 0
    skipped: int = 0
    failed: int = 0

    @property
    def is_terminal(self) -> bool:
        return self.status in {STATUS_COMPLETE, STATUS_CANCELLED, STATUS_NO_NOTES}
