"""Core contracts-domain exports."""

from ticketbridge.core.contracts.bulk_create import BulkCreateProgress, BulkCreateResult, CreatedNote
from ticketbridge.core.contracts.exceptions import (
    AuthenticationError,
    ConfigError,
    NoteStoreError,
    NotFoundError,
    ProviderError,
    SyncError,
    TicketBridgeError,
)
from ticketbridge.core.contracts.mapping import ResolvedContext
from ticketbridge.core.contracts.notifier import LoggingNotifier, Notifier
from ticketbridge.core.contracts.settings import (
    AdvancedSettings,
    BridgeSettings,
    ContentParsingConfig,
    FolderMapping,
    FrontmatterFieldMapping,
    FrontmatterFieldType,
    MappingType,
    ProjectMappingConfig,
    ProjectSyncConfig,
    SyncFieldConfig,
    SyncSettings,
    TrackerInstance,
)
from ticketbridge.core.contracts.status_change import (
    AgileAction,
    BulkStatusChangeProgress,
    BulkStatusChangeResult,
    StatusChangeOptions,
)
from ticketbridge.core.contracts.store import NoteStore, Workspace
from ticketbridge.core.contracts.sync import (
    CacheConfig,
    CacheEntry,
    SkipReason,
    SyncChange,
    SyncOptions,
    SyncResult,
    SyncStats,
)
from ticketbridge.core.contracts.tracker import (
    AssignableUser,
    IssueSummary,
    IssueType,
    Priority,
    TrackerClient,
    TrackerIssue,
    Transition,
)

__all__ = [
    "AdvancedSettings",
    "AgileAction",
    "AssignableUser",
    "AuthenticationError",
    "BridgeSettings",
    "BulkCreateProgress",
    "BulkCreateResult",
    "BulkStatusChangeProgress",
    "BulkStatusChangeResult",
    "CacheConfig",
    "CacheEntry",
    "ConfigError",
    "ContentParsingConfig",
    "CreatedNote",
    "FolderMapping",
    "FrontmatterFieldMapping",
    "FrontmatterFieldType",
    "IssueSummary",
    "IssueType",
    "LoggingNotifier",
    "MappingType",
    "NoteStore",
    "NoteStoreError",
    "NotFoundError",
    "Notifier",
    "Priority",
    "ProjectMappingConfig",
    "ProjectSyncConfig",
    "ProviderError",
    "ResolvedContext",
    "SkipReason",
    "StatusChangeOptions",
    "SyncChange",
    "SyncError",
    "SyncFieldConfig",
    "SyncOptions",
    "SyncResult",
    "SyncSettings",
    "SyncStats",
    "TicketBridgeError",
    "TrackerClient",
    "TrackerInstance",
    "TrackerIssue",
    "Transition",
    "Workspace",
]
