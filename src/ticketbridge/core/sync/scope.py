"""File sets targeted by batch sync."""

from __future__ import annotations

from typing import Protocol

from ticketbridge.core.contracts.store import NoteStore, Workspace
from ticketbridge.core.contracts.sync import SyncStats


class SyncScopeStrategy(Protocol):
    def collect_files(self) -> list[str]: ...

    def notification_message(self, stats: SyncStats) -> str: ...


class OpenNotesScope:
    """Markdown notes currently open in the workspace."""

    def __init__(self, workspace: Workspace) -> None:
        self._workspace = workspace

    def collect_files(self) -> list[str]:
        seen: set[str] = set()
        files: list[str] = []
        for path in self._workspace.open_files():
            if path.endswith(".md") and path not in seen:
                seen.add(path)
                files.append(path)
        return files

    def notification_message(self, stats: SyncStats) -> str:
        return f"Synced {stats.synced} note(s) with {stats.changes} change(s)"


class FolderScope:
    """Every markdown note under a folder, recursively."""

    def __init__(self, store: NoteStore, folder: str) -> None:
        self._store = store
        self._folder = folder.strip("/")

    @property
    def folder(self) -> str:
        return self._folder

    def collect_files(self) -> list[str]:
        return list(self._store.list_markdown_files(self._folder))

    def notification_message(self, stats: SyncStats) -> str:
        return f"Synced {stats.synced}/{stats.total} notes with {stats.changes} change(s)"
