"""Per-run memo of tracker clients, project metadata and known summaries."""

from __future__ import annotations

from contextlib import AsyncExitStack
from types import TracebackType

from ticketbridge.core.contracts.exceptions import ConfigError
from ticketbridge.core.contracts.settings import BridgeSettings
from ticketbridge.core.contracts.tracker import AssignableUser, IssueType, Priority, TrackerClient
from ticketbridge.core.providers.factory import ClientFactory

DUPLICATE_BATCH_SIZE = 20

_ProjectKey = tuple[str, str]


def _normalize(summary: str) -> str:
    return summary.strip().casefold()


class CreateLookup:
    """Lives for one bulk-create run.

    Clients are opened on first use and closed on exit. Metadata is fetched
    once per instance or project. Summaries are tracked per project: a known
    key means the ticket exists, an empty string means it was checked and is
    free.
    """

    def __init__(self, settings: BridgeSettings, client_factory: ClientFactory) -> None:
        self._settings = settings
        self._client_factory = client_factory
        self._stack = AsyncExitStack()
        self._clients: dict[str, TrackerClient] = {}
        self._issue_types: dict[_ProjectKey, list[IssueType]] = {}
        self._priorities: dict[str, list[Priority]] = {}
        self._users: dict[_ProjectKey, list[AssignableUser]] = {}
        self._summaries: dict[_ProjectKey, dict[str, str]] = {}

    async def __aenter__(self) -> CreateLookup:
        await self._stack.__aenter__()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self._clients = {}
        await self._stack.__aexit__(exc_type, exc_val, exc_tb)

    async def client(self, instance_id: str) -> TrackerClient:
        client = self._clients.get(instance_id)
        if client is None:
            instance = self._settings.find_instance(instance_id)
            if instance is None:
                raise ConfigError(f"Jira instance not found or disabled: {instance_id}")
            client = await self._stack.enter_async_context(self._client_factory(instance, self._settings.advanced))
            self._clients[instance_id] = client
        return client

    async def issue_types(self, instance_id: str, project_key: str) -> list[IssueType]:
        key = (instance_id, project_key)
        if key not in self._issue_types:
            client = await self.client(instance_id)
            self._issue_types[key] = await client.get_issue_types(project_key)
        return self._issue_types[key]

    async def priorities(self, instance_id: str) -> list[Priority]:
        if instance_id not in self._priorities:
            client = await self.client(instance_id)
            self._priorities[instance_id] = await client.get_priorities()
        return self._priorities[instance_id]

    async def assignable_users(self, instance_id: str, project_key: str) -> list[AssignableUser]:
        key = (instance_id, project_key)
        if key not in self._users:
            client = await self.client(instance_id)
            self._users[key] = await client.get_assignable_users(project_key)
        return self._users[key]

    async def find_duplicates(self, instance_id: str, project_key: str, summaries: list[str]) -> dict[str, str]:
        """Map each of *summaries* that already has a ticket in the project to its key."""
        known = self._summaries.setdefault((instance_id, project_key), {})
        unchecked = list(dict.fromkeys(s for s in summaries if _normalize(s) not in known))

        if unchecked:
            client = await self.client(instance_id)
            for start in range(0, len(unchecked), DUPLICATE_BATCH_SIZE):
                batch = unchecked[start : start + DUPLICATE_BATCH_SIZE]
                found = await client.search_issues_by_summaries(project_key, batch)
                for summary in batch:
                    known.setdefault(_normalize(summary), found.get(summary, ""))

        return {summary: known[_normalize(summary)] for summary in summaries if known.get(_normalize(summary))}

    def record_created(self, instance_id: str, project_key: str, summary: str, issue_key: str) -> None:
        self._summaries.setdefault((instance_id, project_key), {})[_normalize(summary)] = issue_key

    def find_created(self, instance_id: str, project_key: str, summary: str) -> str | None:
        return self._summaries.get((instance_id, project_key), {}).get(_normalize(summary)) or None


__all__ = ["DUPLICATE_BATCH_SIZE", "CreateLookup"]
