"""Mapping resolution contracts."""

from __future__ import annotations

from pydantic import BaseModel

from ticketbridge.core.contracts.settings import FolderMapping, TrackerInstance


class ResolvedContext(BaseModel):
    """Effective tracker configuration for a single file path."""

    instance: TrackerInstance | None = None
    instance_mapping: FolderMapping | None = None
    project_key: str | None = None
    project_mapping: FolderMapping | None = None
    is_instance_inherited: bool = False
    is_project_inherited: bool = False
    is_default: bool = False

    model_config = {"frozen": True}
