"""Pull-sync of tracker fields into note frontmatter."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from types import TracebackType

from ticketbridge.core.contracts.exceptions import ConfigError
from ticketbridge.core.contracts.mapping import ResolvedContext
from ticketbridge.core.contracts.notifier import LoggingNotifier, Notifier
from ticketbridge.core.contracts.settings import BridgeSettings, SyncFieldConfig, TrackerInstance
from ticketbridge.core.contracts.store import NoteStore, Workspace
from ticketbridge.core.contracts.sync import (
    SkipReason,
    SyncChange,
    SyncOptions,
    SyncResult,
    SyncStats,
    SyncTrigger,
)
from ticketbridge.core.contracts.tracker import TrackerClient
from ticketbridge.core.errors import is_not_found
from ticketbridge.core.events import SYNC_COMPLETE, EventBus
from ticketbridge.core.mapping.resolver import MappingResolver
from ticketbridge.core.notes.frontmatter import add_frontmatter_fields
from ticketbridge.core.notes.keys import ISSUE_ID_KEY, SYNC_STATUS_KEY, SYNCED_AT_KEY, UNLINKED
from ticketbridge.core.providers.factory import ClientFactory, create_client
from ticketbridge.core.sync.caching import (
    Clock,
    SyncCacheStrategy,
    cache_config_for,
    create_cache_strategy,
    now_ms,
)
from ticketbridge.core.sync.extraction import FieldExtractor
from ticketbridge.core.sync.scope import FolderScope, OpenNotesScope, SyncScopeStrategy
from ticketbridge.core.sync.timer import AutoSyncTimer

_LOG = logging.getLogger(__name__)


def effective_sync_fields(context: ResolvedContext, settings: BridgeSettings) -> list[SyncFieldConfig]:
    """Project override when the project declares one, else the global defaults; enabled entries only."""
    project_config = context.project_mapping.project_config if context.project_mapping is not None else None
    sync_config = project_config.sync_config if project_config is not None else None

    if sync_config is not None:
        if not sync_config.enable_sync:
            return []
        if sync_config.sync_fields is not None:
            return [field for field in sync_config.sync_fields if field.enabled]

    return [field for field in settings.sync.sync_fields if field.enabled]


def _timestamp() -> str:
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class SyncEngine:
    """Keeps note frontmatter in step with tracker tickets.

    Owns the ticket cache, the per-instance client pool and the auto-sync
    timer; all three live as long as the engine. Use as an async context
    manager (or call :meth:`aclose`) so clients get closed.
    """

    def __init__(
        self,
        settings: BridgeSettings,
        store: NoteStore,
        *,
        workspace: Workspace | None = None,
        client_factory: ClientFactory = create_client,
        events: EventBus | None = None,
        notifier: Notifier | None = None,
        extractor: FieldExtractor | None = None,
        clock: Clock = now_ms,
    ) -> None:
        self._settings = settings
        self._store = store
        self._workspace = workspace if workspace is not None else (store if isinstance(store, Workspace) else None)
        self._client_factory = client_factory
        self._events = events or EventBus()
        self._notifier: Notifier = notifier or LoggingNotifier()
        self._extractor = extractor or FieldExtractor()
        self._clock = clock
        self._resolver = MappingResolver(settings)
        self._cache: SyncCacheStrategy = create_cache_strategy(settings, clock=clock)
        self._clients: dict[str, TrackerClient] = {}
        self._retired_clients: list[TrackerClient] = []
        self._timer = AutoSyncTimer(self._auto_sync_tick, settings.sync.sync_interval * 60)

    async def __aenter__(self) -> SyncEngine:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    @property
    def settings(self) -> BridgeSettings:
        return self._settings

    @property
    def events(self) -> EventBus:
        return self._events

    @property
    def cache(self) -> SyncCacheStrategy:
        return self._cache

    @property
    def resolver(self) -> MappingResolver:
        return self._resolver

    @property
    def auto_sync_running(self) -> bool:
        return self._timer.running

    @property
    def auto_sync_interval_seconds(self) -> float:
        return self._timer.interval_seconds

    # -- single note --------------------------------------------------------

    async def sync_note(self, path: str, options: SyncOptions | None = None) -> SyncResult:
        """Pull the mapped fields of the note's ticket into its frontmatter.

        Never raises: every outcome, including remote failures, comes back as
        a :class:`SyncResult`.
        """
        options = options or SyncOptions()
        settings = self._settings
        cache = self._cache

        try:
            frontmatter = self._store.get_frontmatter(path) or {}
        except Exception as exc:
            _LOG.warning("reading frontmatter of %s failed: %s", path, exc)
            return SyncResult(success=False, ticket_key="", error=str(exc))

        raw_key = frontmatter.get(ISSUE_ID_KEY)
        issue_key = str(raw_key).strip() if raw_key is not None else ""
        if not issue_key:
            return SyncResult(success=False, ticket_key="", skipped=True, skip_reason=SkipReason.NO_ISSUE_ID)

        _LOG.debug("syncing %s (%s), trigger=%s", path, issue_key, options.trigger)
        try:
            context = self._resolver.resolve(path)
            if context.instance is None:
                return SyncResult(
                    success=False,
                    ticket_key=issue_key,
                    skipped=True,
                    skip_reason=SkipReason.NO_INSTANCE_MAPPING,
                )

            sync_fields = effective_sync_fields(context, settings)
            if not sync_fields:
                return SyncResult(
                    success=False,
                    ticket_key=issue_key,
                    skipped=True,
                    skip_reason=SkipReason.SYNC_DISABLED,
                )

            if not options.force and cache.has(issue_key):
                _LOG.debug("cache hit for %s (%s)", issue_key, path)
                return SyncResult(success=True, ticket_key=issue_key, skipped=True, skip_reason=SkipReason.CACHED)

            result = await self._perform_sync(path, issue_key, context.instance, sync_fields, settings, cache)
        except Exception as exc:
            if is_not_found(exc):
                await self._mark_unlinked(path)
                return SyncResult(
                    success=False,
                    ticket_key=issue_key,
                    skipped=True,
                    skip_reason=SkipReason.NOT_FOUND,
                    error=f"Ticket {issue_key} not found in Jira",
                )
            _LOG.warning("sync of %s (%s) failed: %s", path, issue_key, exc)
            return SyncResult(success=False, ticket_key=issue_key, error=str(exc))

        if result.success and not options.silent:
            self._events.publish(SYNC_COMPLETE, result)
        return result

    async def _perform_sync(
        self,
        path: str,
        issue_key: str,
        instance: TrackerInstance,
        sync_fields: list[SyncFieldConfig],
        settings: BridgeSettings,
        cache: SyncCacheStrategy,
    ) -> SyncResult:
        client = await self._client_for(instance, settings)
        issue = await client.get_issue(issue_key, [field.jira_field for field in sync_fields])

        frontmatter = self._store.get_frontmatter(path) or {}
        changes: list[SyncChange] = []
        fields_to_update: dict[str, str] = {}

        for sync_field in sync_fields:
            remote_value = self._extractor.extract(issue.fields, sync_field.jira_field)
            current_value = frontmatter.get(sync_field.frontmatter_key)
            if remote_value == current_value:
                continue
            changes.append(
                SyncChange(
                    field=sync_field.jira_field,
                    old_value=current_value,
                    new_value=remote_value,
                    frontmatter_key=sync_field.frontmatter_key,
                )
            )
            fields_to_update[sync_field.frontmatter_key] = remote_value or ""

        if fields_to_update and settings.sync.update_frontmatter:
            fields_to_update[SYNCED_AT_KEY] = _timestamp()
            await add_frontmatter_fields(self._store, path, fields_to_update)

        cache.set(issue_key, issue.fields)
        _LOG.debug("synced %s (%s): %d change(s)", path, issue_key, len(changes))
        return SyncResult(success=True, ticket_key=issue_key, changes=changes)

    async def _mark_unlinked(self, path: str) -> None:
        try:
            await add_frontmatter_fields(self._store, path, {SYNC_STATUS_KEY: UNLINKED})
        except Exception as exc:
            _LOG.warning("failed to mark %s as unlinked: %s", path, exc)

    async def _client_for(self, instance: TrackerInstance, settings: BridgeSettings) -> TrackerClient:
        client = self._clients.get(instance.id)
        if client is not None:
            return client
        current = settings.find_instance(instance.id)
        if current is None:
            raise ConfigError(f"Jira instance not found or disabled: {instance.id}")
        client = self._client_factory(current, settings.advanced)
        await client.__aenter__()
        self._clients[instance.id] = client
        return client

    # -- batches ------------------------------------------------------------

    async def sync_batch(self, scope: SyncScopeStrategy, options: SyncOptions | None = None) -> SyncStats:
        """Sync every file of *scope* one after another.

        Per-file notices and events are suppressed; a single aggregate notice
        is sent when at least one note synced and the batch is not silent.
        """
        options = options or SyncOptions()
        files = scope.collect_files()
        stats = SyncStats(total=len(files))
        per_file = options.model_copy(update={"silent": True})

        for path in files:
            result = await self.sync_note(path, per_file)
            stats.record(result)

        _LOG.debug("batch sync finished: %s", stats.model_dump())
        if not options.silent and stats.synced > 0:
            self._notifier.notify(scope.notification_message(stats))
        return stats

    async def sync_open_notes(self, options: SyncOptions | None = None) -> SyncStats:
        if self._workspace is None:
            raise ConfigError("no workspace attached; cannot enumerate open notes")
        return await self.sync_batch(OpenNotesScope(self._workspace), options)

    async def sync_folder(self, folder: str, options: SyncOptions | None = None) -> SyncStats:
        return await self.sync_batch(FolderScope(self._store, folder), options)

    async def handle_file_open(self, path: str) -> SyncResult | None:
        if not self._settings.sync.sync_on_file_open:
            return None
        return await self.sync_note(path, SyncOptions(silent=True, trigger=SyncTrigger.FILE_OPEN))

    # -- lifecycle ----------------------------------------------------------

    def start_auto_sync(self) -> None:
        self._timer.start()

    def stop_auto_sync(self) -> None:
        self._timer.stop()

    async def _auto_sync_tick(self) -> SyncStats:
        return await self.sync_open_notes(SyncOptions(force=True, silent=True, trigger=SyncTrigger.AUTO))

    def update_settings(self, settings: BridgeSettings) -> None:
        """Swap in new settings for subsequent operations.

        Operations already running keep the settings, cache and clients they
        started with.
        """
        previous = self._settings
        was_running = self._timer.running

        self._settings = settings
        self._resolver.update_settings(settings)

        if previous.advanced.cache_enabled != settings.advanced.cache_enabled:
            self._cache = create_cache_strategy(settings, clock=self._clock)
        else:
            self._cache.update_config(cache_config_for(settings))

        self._retired_clients.extend(self._clients.values())
        self._clients = {}

        if was_running:
            self._timer.stop()
        self._timer.interval_seconds = settings.sync.sync_interval * 60
        if was_running and settings.sync.auto_sync:
            self._timer.start()

    async def aclose(self) -> None:
        self._timer.stop()
        await self._timer.wait_stopped()
        clients = [*self._clients.values(), *self._retired_clients]
        self._clients = {}
        self._retired_clients = []
        for client in clients:
            try:
                await client.__aexit__(None, None, None)
            except Exception as exc:
                _LOG.warning("failed to close tracker client: %s", exc)
        await self._events.drain()


__all__ = ["SyncEngine", "effective_sync_fields"]