"""Public API surface for ticketbridge."""

__version__ = "0.1.0"

from ticketbridge.core.bulk_create import BulkCreateEngine
from ticketbridge.core.config import load_settings, write_settings
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
    FolderMapping,
    FrontmatterFieldMapping,
    FrontmatterFieldType,
    MappingType,
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
from ticketbridge.core.contracts.sync import SkipReason, SyncChange, SyncOptions, SyncResult, SyncStats
from ticketbridge.core.contracts.tracker import TrackerClient
from ticketbridge.core.events import SYNC_COMPLETE, EventBus
from ticketbridge.core.mapping import MappingResolver
from ticketbridge.core.notes import FileSystemNoteStore
from ticketbridge.core.providers import create_client
from ticketbridge.core.status_change import BulkStatusChangeEngine, CancellationToken
from ticketbridge.core.sync import SyncEngine
from ticketbridge.sdk import TicketBridge

__all__ = [
    "SYNC_COMPLETE",
    "AdvancedSettings",
    "AgileAction",
    "AuthenticationError",
    "BridgeSettings",
    "BulkCreateEngine",
    "BulkCreateProgress",
    "BulkCreateResult",
    "BulkStatusChangeEngine",
    "BulkStatusChangeProgress",
    "BulkStatusChangeResult",
    "CancellationToken",
    "ConfigError",
    "CreatedNote",
    "EventBus",
    "FileSystemNoteStore",
    "FolderMapping",
    "FrontmatterFieldMapping",
    "FrontmatterFieldType",
    "LoggingNotifier",
    "MappingResolver",
    "MappingType",
    "NoteStore",
    "NoteStoreError",
    "NotFoundError",
    "Notifier",
    "ProviderError",
    "ResolvedContext",
    "SkipReason",
    "StatusChangeOptions",
    "SyncChange",
    "SyncEngine",
    "SyncError",
    "SyncFieldConfig",
    "SyncOptions",
    "SyncResult",
    "SyncSettings",
    "SyncStats",
    "TicketBridge",
    "TicketBridgeError",
    "TrackerClient",
    "TrackerInstance",
    "Workspace",
    "create_client",
    "load_settings",
    "write_settings",
]
