"""Remote tracker client contract."""

from __future__ import annotations

from abc import ABC, abstractmethod
from types import TracebackType
from typing import Any

from pydantic import BaseModel, Field


class TrackerIssue(BaseModel):
    key: str
    fields: dict[str, Any] = Field(default_factory=dict)


class IssueSummary(BaseModel):
    key: str
    summary: str
    issue_type: str | None = None


class Transition(BaseModel):
    id: str
    name: str
    to_status: str | None = None


class IssueType(BaseModel):
    id: str
    name: str
    subtask: bool = False


class Priority(BaseModel):
    id: str
    name: str


class AssignableUser(BaseModel):
    account_id: str
    display_name: str


class TrackerClient(ABC):
    """Async access to one tracker instance.

    All calls may raise :class:`~ticketbridge.core.contracts.exceptions.ProviderError`;
    the message carries the HTTP status code when one is known.
    """

    @abstractmethod
    async def __aenter__(self) -> TrackerClient: ...  # pragma: no cover

    @abstractmethod
    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None: ...  # pragma: no cover

    @abstractmethod
    async def get_issue(self, issue_key: str, fields: list[str]) -> TrackerIssue: ...  # pragma: no cover

    @abstractmethod
    async def search_issues_by_summary(
        self, project_key: str, summary: str, max_results: int = 10
    ) -> list[IssueSummary]: ...  # pragma: no cover

    @abstractmethod
    async def search_issues_by_summaries(
        self, project_key: str, summaries: list[str]
    ) -> dict[str, str]: ...  # pragma: no cover

    @abstractmethod
    async def get_transitions(self, issue_key: str) -> list[Transition]: ...  # pragma: no cover

    @abstractmethod
    async def transition_issue(self, issue_key: str, transition_id: str) -> None: ...  # pragma: no cover

    @abstractmethod
    async def move_to_backlog(self, issue_keys: list[str], board_id: str | None = None) -> None: ...  # pragma: no cover

    @abstractmethod
    async def move_to_board(self, issue_keys: list[str], board_id: str) -> None: ...  # pragma: no cover

    @abstractmethod
    async def move_to_sprint(self, issue_keys: list[str], sprint_id: int) -> None: ...  # pragma: no cover

    @abstractmethod
    async def get_issue_types(self, project_key: str) -> list[IssueType]: ...  # pragma: no cover

    @abstractmethod
    async def get_priorities(self) -> list[Priority]: ...  # pragma: no cover

    @abstractmethod
    async def get_assignable_users(self, project_key: str) -> list[AssignableUser]: ...  # pragma: no cover

    @abstractmethod
    async def create_issue(
        self,
        project_key: str,
        issue_type_id: str,
        summary: str,
        *,
        description: str | None = None,
        priority_id: str | None = None,
        extra_fields: dict[str, Any] | None = None,
    ) -> str: ...  # pragma: no cover

    @abstractmethod
    def issue_url(self, issue_key: str) -> str: ...  # pragma: no cover
