"""SDK composition root for ticketbridge."""

from __future__ import annotations

from pathlib import Path
from types import TracebackType

from ticketbridge.core.bulk_create import BulkCreateEngine
from ticketbridge.core.bulk_create.engine import ProgressCallback as CreateProgressCallback
from ticketbridge.core.config import load_settings
from ticketbridge.core.contracts.bulk_create import BulkCreateResult
from ticketbridge.core.contracts.mapping import ResolvedContext
from ticketbridge.core.contracts.notifier import Notifier
from ticketbridge.core.contracts.settings import BridgeSettings
from ticketbridge.core.contracts.status_change import (
    BulkStatusChangeResult,
    StatusChangeOptions,
)
from ticketbridge.core.contracts.store import NoteStore, Workspace
from ticketbridge.core.contracts.sync import SyncOptions, SyncResult, SyncStats, SyncTrigger
from ticketbridge.core.events import EventBus
from ticketbridge.core.notes.filesystem import FileSystemNoteStore
from ticketbridge.core.providers.factory import ClientFactory, create_client
from ticketbridge.core.status_change import BulkStatusChangeEngine, BulkTarget
from ticketbridge.core.status_change.engine import ProgressCallback
from ticketbridge.core.sync import SyncEngine


class TicketBridge:
    """ticketbridge SDK public API.

    Wires settings, a note store and a tracker client factory into a
    :class:`SyncEngine` and hands out bulk status-change and bulk-create runs.
    """

    def __init__(
        self,
        *,
        settings: BridgeSettings,
        store: NoteStore,
        workspace: Workspace | None = None,
        client_factory: ClientFactory = create_client,
        notifier: Notifier | None = None,
        events: EventBus | None = None,
    ) -> None:
        self._settings = settings
        self._store = store
        self._client_factory = client_factory
        self._sync_engine = SyncEngine(
            settings,
            store,
            workspace=workspace,
            client_factory=client_factory,
            events=events,
            notifier=notifier,
        )
        self._status_change: BulkStatusChangeEngine | None = None
        self._bulk_create: BulkCreateEngine | None = None

    @classmethod
    def from_paths(
        cls,
        settings_path: str | Path,
        vault: str | Path,
        *,
        open_files: list[str] | None = None,
        notifier: Notifier | None = None,
    ) -> TicketBridge:
        settings = load_settings(settings_path)
        store = FileSystemNoteStore(vault, open_files=open_files)
        return cls(settings=settings, store=store, notifier=notifier)

    async def __aenter__(self) -> TicketBridge:
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
    def store(self) -> NoteStore:
        return self._store

    @property
    def sync_engine(self) -> SyncEngine:
        return self._sync_engine

    @property
    def events(self) -> EventBus:
        return self._sync_engine.events

    def resolve(self, path: str) -> ResolvedContext:
        return self._sync_engine.resolver.resolve(path)

    async def sync_note(self, path: str, *, force: bool = False) -> SyncResult:
        return await self._sync_engine.sync_note(path, SyncOptions(force=force, trigger=SyncTrigger.COMMAND))

    async def sync_folder(self, folder: str, *, force: bool = False) -> SyncStats:
        return await self._sync_engine.sync_folder(folder, SyncOptions(force=force, trigger=SyncTrigger.COMMAND))

    async def sync_open_notes(self, *, force: bool = False) -> SyncStats:
        return await self._sync_engine.sync_open_notes(SyncOptions(force=force, trigger=SyncTrigger.COMMAND))

    async def change_status(
        self,
        target: BulkTarget,
        instance_id: str,
        options: StatusChangeOptions,
        on_progress: ProgressCallback | None = None,
    ) -> BulkStatusChangeResult:
        """Run a bulk status change; :meth:`cancel_status_change` stops it between files."""
        engine = BulkStatusChangeEngine(
            self._settings,
            self._store,
            instance_id,
            client_factory=self._client_factory,
        )
        self._status_change = engine
        try:
            return await engine.execute(target, options, on_progress)
        finally:
            self._status_change = None

    def cancel_status_change(self) -> None:
        if self._status_change is not None:
            self._status_change.cancel()

    async def create_tickets(
        self, target: BulkTarget, on_progress: CreateProgressCallback | None = None
    ) -> BulkCreateResult:
        """Create a ticket per eligible note; :meth:`cancel_create_tickets` stops it between files."""
        engine = BulkCreateEngine(self._settings, self._store, client_factory=self._client_factory)
        self._bulk_create = engine
        try:
            return await engine.execute(target, on_progress)
        finally:
            self._bulk_create = None

    def cancel_create_tickets(self) -> None:
        if self._bulk_create is not None:
            self._bulk_create.cancel()

    def update_settings(self, settings: BridgeSettings) -> None:
        self._settings = settings
        self._sync_engine.update_settings(settings)

    async def aclose(self) -> None:
        await self._sync_engine.aclose()
