"""Vault-on-disk note store."""

from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath
from typing import Any

import aiofiles

from ticketbridge.core.contracts.exceptions import NoteStoreError
from ticketbridge.core.contracts.store import NoteStore, Workspace
from ticketbridge.core.notes.frontmatter import parse_frontmatter

_LOG = logging.getLogger(__name__)

MARKDOWN_SUFFIX = ".md"


class FileSystemNoteStore(NoteStore, Workspace):
    """Serves notes from a vault directory.

    Paths are vault-relative and ``/`` separated. Parsed frontmatter is cached
    per path and invalidated when the file's mtime changes or after a write
    through this store.
    """

    def __init__(self, root: str | Path, *, open_files: list[str] | None = None) -> None:
        self._root = Path(root).expanduser().resolve()
        self._open_files: list[str] = list(open_files or [])
        self._metadata_cache: dict[str, tuple[int, dict[str, Any] | None]] = {}

    @property
    def root(self) -> Path:
        return self._root

    def _absolute(self, path: str) -> Path:
        relative = PurePosixPath(path.strip("/"))
        if ".." in relative.parts:
            raise NoteStoreError(f"path escapes vault: {path}")
        return self._root.joinpath(*relative.parts)

    async def read(self, path: str) -> str:
        target = self._absolute(path)
        try:
            async with aiofiles.open(target, "r", encoding="utf-8") as handle:
                return await handle.read()
        except (OSError, UnicodeDecodeError) as exc:
            raise NoteStoreError(f"failed reading note {path}: {exc}") from exc

    async def write(self, path: str, text: str) -> None:
        target = self._absolute(path)
        try:
            async with aiofiles.open(target, "w", encoding="utf-8") as handle:
                await handle.write(text)
        except OSError as exc:
            raise NoteStoreError(f"failed writing note {path}: {exc}") from exc
        self._metadata_cache.pop(path, None)
        _LOG.debug("wrote %s", path)

    def get_frontmatter(self, path: str) -> dict[str, Any] | None:
        target = self._absolute(path)
        try:
            mtime = target.stat().st_mtime_ns
        except OSError:
            self._metadata_cache.pop(path, None)
            return None

        cached = self._metadata_cache.get(path)
        if cached is not None and cached[0] == mtime:
            return cached[1]

        try:
            frontmatter = parse_frontmatter(target.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as exc:
            raise NoteStoreError(f"failed reading note {path}: {exc}") from exc
        self._metadata_cache[path] = (mtime, frontmatter)
        return frontmatter

    def list_markdown_files(self, folder: str) -> list[str]:
        base = self._absolute(folder)
        if not base.is_dir():
            raise NoteStoreError(f"not a folder: {folder or '/'}")
        files: list[str] = []
        for candidate in sorted(base.rglob(f"*{MARKDOWN_SUFFIX}")):
            relative = candidate.relative_to(self._root)
            if any(part.startswith(".") for part in relative.parts):
                continue
            if candidate.is_file():
                files.append(relative.as_posix())
        return files

    def open_files(self) -> list[str]:
        return [path for path in self._open_files if path.endswith(MARKDOWN_SUFFIX)]

    def open(self, path: str) -> None:
        if path not in self._open_files:
            self._open_files.append(path)

    def close(self, path: str) -> None:
        if path in self._open_files:
            self._open_files.remove(path)
