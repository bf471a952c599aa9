"""Sync result and cache contracts."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field


class SkipReason(StrEnum):
    NO_ISSUE_ID = "no_issue_id"
    NO_INSTANCE_MAPPING = "no_instance_mapping"
    SYNC_DISABLED = "sync_disabled"
    CACHED = "cached"
    NOT_FOUND = "not_found"


class SyncDirection(StrEnum):
    FROM_JIRA = "fromJira"


class SyncTrigger(StrEnum):
    AUTO = "auto"
    FILE_OPEN = "file-open"
    COMMAND = "command"


class SyncChange(BaseModel):
    field: str
    old_value: Any = None
    new_value: str | None = None
    direction: SyncDirection = SyncDirection.FROM_JIRA
    frontmatter_key: str


class SyncResult(BaseModel):
    success: bool
    ticket_key: str
    changes: list[SyncChange] = Field(default_factory=list)
    skipped: bool = False
    skip_reason: SkipReason | None = None
    error: str | None = None


class SyncStats(BaseModel):
    total: int = 0
    synced: int = 0
    skipped: int = 0
    failed: int = 0
    changes: int = 0

    def record(self, result: SyncResult) -> None:
        if result.skipped:
            self.skipped += 1
        elif result.success:
            self.synced += 1
            self.changes += len(result.changes)
        else:
            self.failed += 1


class SyncOptions(BaseModel):
    force: bool = False
    silent: bool = False
    trigger: SyncTrigger = SyncTrigger.COMMAND

    model_config = {"frozen": True}


class CacheEntry(BaseModel):
    issue_key: str
    last_sync_at: float
    data: dict[str, Any] = Field(default_factory=dict)


class CacheConfig(BaseModel):
    max_size: int = Field(ge=1)
    ttl_ms: float = Field(ge=0)

    model_config = {"frozen": True}
