"""Local note store contracts."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class NoteStore(ABC):
    """File storage plus a synchronous metadata cache, keyed by vault-relative path."""

    @abstractmethod
    async def read(self, path: str) -> str: ...  # pragma: no cover

    @abstractmethod
    async def write(self, path: str, text: str) -> None: ...  # pragma: no cover

    @abstractmethod
    def get_frontmatter(self, path: str) -> dict[str, Any] | None: ...  # pragma: no cover

    @abstractmethod
    def list_markdown_files(self, folder: str) -> list[str]: ...  # pragma: no cover


class Workspace(ABC):
    @abstractmethod
    def open_files(self) -> list[str]: ...  # pragma: no cover
