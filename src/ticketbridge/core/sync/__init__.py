"""Core sync-domain exports."""

from .caching import NoCacheStrategy, SyncCacheStrategy, TTLCacheStrategy, create_cache_strategy
from .engine import SyncEngine, effective_sync_fields
from .extraction import FieldExtractionStrategy, FieldExtractor, create_default_extraction_strategies
from .scope import FolderScope, OpenNotesScope, SyncScopeStrategy
from .timer import AutoSyncTimer

__all__ = [
    "AutoSyncTimer",
    "FieldExtractionStrategy",
    "FieldExtractor",
    "FolderScope",
    "NoCacheStrategy",
    "OpenNotesScope",
    "SyncCacheStrategy",
    "SyncEngine",
    "SyncScopeStrategy",
    "TTLCacheStrategy",
    "create_cache_strategy",
    "create_default_extraction_strategies",
    "effective_sync_fields",
]
