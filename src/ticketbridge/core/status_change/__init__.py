"""Bulk status-change engine."""

from ticketbridge.core.status_change.cancellation import CancellationToken
from ticketbridge.core.status_change.engine import BulkStatusChangeEngine, BulkTarget, collect_target_files

__all__ = ["BulkStatusChangeEngine", "BulkTarget", "CancellationToken", "collect_target_files"]
