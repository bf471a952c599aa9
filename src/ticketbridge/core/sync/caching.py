"""Memoization of remote ticket reads.

Entries are keyed by ticket key, so several notes pointing at one ticket share
an entry. Expiry is lazy: a stale entry is dropped by the ``has``/``get`` call
that notices it.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any, Protocol

from ticketbridge.core.contracts.settings import BridgeSettings
from ticketbridge.core.contracts.sync import CacheConfig, CacheEntry

_LOG = logging.getLogger(__name__)

Clock = Callable[[], float]


def now_ms() -> float:
    return time.time() * 1000


class SyncCacheStrategy(Protocol):
    def has(self, issue_key: str) -> bool: ...

    def get(self, issue_key: str) -> CacheEntry | None: ...

    def set(self, issue_key: str, data: dict[str, Any]) -> None: ...

    def clear(self) -> None: ...

    def update_config(self, config: CacheConfig) -> None: ...


class TTLCacheStrategy:
    """Size-bounded cache; an entry is valid while ``now - last_sync_at < ttl_ms``."""

    def __init__(self, config: CacheConfig, *, clock: Clock = now_ms) -> None:
        self._config = config
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    @property
    def config(self) -> CacheConfig:
        return self._config

    def __len__(self) -> int:
        return len(self._entries)

    def has(self, issue_key: str) -> bool:
        config = self._config
        entry = self._entries.get(issue_key)
        if entry is None:
            return False
        if self._clock() - entry.last_sync_at >= config.ttl_ms:
            del self._entries[issue_key]
            _LOG.debug("cache entry for %s expired", issue_key)
            return False
        return True

    def get(self, issue_key: str) -> CacheEntry | None:
        if not self.has(issue_key):
            return None
        return self._entries.get(issue_key)

    def set(self, issue_key: str, data: dict[str, Any]) -> None:
        if issue_key not in self._entries:
            self._evict_to(self._config.max_size - 1)
        self._entries[issue_key] = CacheEntry(issue_key=issue_key, last_sync_at=self._clock(), data=data)

    def clear(self) -> None:
        self._entries.clear()

    def update_config(self, config: CacheConfig) -> None:
        self._config = config
        self._evict_to(config.max_size)

    def _evict_to(self, size: int) -> None:
        while self._entries and len(self._entries) > size:
            oldest = min(self._entries.values(), key=lambda entry: entry.last_sync_at)
            del self._entries[oldest.issue_key]
            _LOG.debug("evicted cache entry for %s", oldest.issue_key)


class NoCacheStrategy:
    """Caching disabled: every lookup misses, so every sync goes to the tracker."""

    def has(self, issue_key: str) -> bool:
        return False

    def get(self, issue_key: str) -> CacheEntry | None:
        return None

    def set(self, issue_key: str, data: dict[str, Any]) -> None:
        pass

    def clear(self) -> None:
        pass

    def update_config(self, config: CacheConfig) -> None:
        pass


def cache_config_for(settings: BridgeSettings) -> CacheConfig:
    return CacheConfig(max_size=settings.advanced.cache_max_size, ttl_ms=settings.sync.interval_ms)


def create_cache_strategy(settings: BridgeSettings, *, clock: Clock = now_ms) -> SyncCacheStrategy:
    if not settings.advanced.cache_enabled:
        return NoCacheStrategy()
    return TTLCacheStrategy(cache_config_for(settings), clock=clock)
