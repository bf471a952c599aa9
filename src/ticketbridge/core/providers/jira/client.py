"""Jira Cloud REST client (platform v3 + agile v1)."""

from __future__ import annotations

import logging
from types import TracebackType
from typing import Any

import httpx

from ticketbridge.core.contracts.exceptions import AuthenticationError, NotFoundError, ProviderError
from ticketbridge.core.contracts.settings import TrackerInstance
from ticketbridge.core.contracts.tracker import (
    AssignableUser,
    IssueSummary,
    IssueType,
    Priority,
    TrackerClient,
    TrackerIssue,
    Transition,
)
from ticketbridge.core.providers.jira._retrying_transport import RetryingTransport
from ticketbridge.core.providers.jira.adf import markdown_to_adf

_LOG = logging.getLogger(__name__)

_USER_AGENT = "ticketbridge/0.1"


def escape_jql_string(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def _as_list(payload: Any) -> list[dict[str, Any]]:
    return [item for item in payload if isinstance(item, dict)] if isinstance(payload, list) else []


def _error_detail(response: httpx.Response) -> str:
    """Jira puts validation failures in ``errorMessages`` and per-field ``errors``."""
    try:
        body = response.json()
    except ValueError:
        return ""
    if not isinstance(body, dict):
        return ""
    messages = [str(message) for message in body.get("errorMessages") or []]
    errors = body.get("errors")
    if isinstance(errors, dict):
        messages.extend(f"{field}: {message}" for field, message in errors.items())
    return ", ".join(messages)


class JiraClient(TrackerClient):
    """One Jira instance, authenticated with e-mail + API token.

    The HTTP session is opened by ``__aenter__`` and closed by ``__aexit__``.
    Failed requests raise :class:`ProviderError` (or a subclass) whose message
    ends with the HTTP status code.
    """

    def __init__(
        self,
        instance: TrackerInstance,
        *,
        timeout_seconds: float = 30.0,
        max_retries: int = 3,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._instance = instance
        self._base_url = instance.base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds
        self._max_retries = max_retries
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def instance(self) -> TrackerInstance:
        return self._instance

    async def __aenter__(self) -> JiraClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                auth=httpx.BasicAuth(self._instance.email, self._instance.api_token),
                headers={"Accept": "application/json", "User-Agent": _USER_AGENT},
                timeout=httpx.Timeout(self._timeout_seconds),
                transport=RetryingTransport(transport=self._transport, max_retries=self._max_retries),
            )
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def get_issue(self, issue_key: str, fields: list[str]) -> TrackerIssue:
        params = {"fields": ",".join(fields)} if fields else None
        payload = await self._request("GET", f"/rest/api/3/issue/{issue_key}", action="fetch issue", params=params)
        return TrackerIssue(key=str(payload.get("key", issue_key)), fields=payload.get("fields") or {})

    async def search_issues_by_summary(
        self, project_key: str, summary: str, max_results: int = 10
    ) -> list[IssueSummary]:
        jql = (
            f'project={project_key} AND summary ~ "{escape_jql_string(summary)}" '
            "AND statusCategory != Done ORDER BY created DESC"
        )
        payload = await self._request(
            "GET",
            "/rest/api/3/search/jql",
            action="search issues",
            params={"jql": jql, "maxResults": max_results, "fields": "summary,issuetype"},
        )
        results: list[IssueSummary] = []
        for issue in payload.get("issues") or []:
            fields = issue.get("fields") or {}
            issue_type = fields.get("issuetype") or {}
            results.append(
                IssueSummary(
                    key=issue["key"],
                    summary=fields.get("summary") or "",
                    issue_type=issue_type.get("name"),
                )
            )
        return results

    async def search_issues_by_summaries(self, project_key: str, summaries: list[str]) -> dict[str, str]:
        """Map each of *summaries* that already has a ticket (exact, case-insensitive) to its key."""
        found: dict[str, str] = {}
        if not summaries:
            return found
        conditions = " OR ".join(f'summary ~ "{escape_jql_string(summary)}"' for summary in summaries)
        payload = await self._request(
            "GET",
            "/rest/api/3/search/jql",
            action="search issues",
            params={"jql": f"project={project_key} AND ({conditions})", "maxResults": 100, "fields": "summary"},
        )
        wanted = {summary.strip().casefold(): summary for summary in summaries}
        for issue in payload.get("issues") or []:
            remote = str((issue.get("fields") or {}).get("summary") or "").strip().casefold()
            if remote in wanted:
                found.setdefault(wanted[remote], issue["key"])
        return found

    async def get_transitions(self, issue_key: str) -> list[Transition]:
        payload = await self._request(
            "GET", f"/rest/api/3/issue/{issue_key}/transitions", action="fetch transitions"
        )
        return [
            Transition(
                id=str(transition["id"]),
                name=transition.get("name") or "",
                to_status=(transition.get("to") or {}).get("name"),
            )
            for transition in payload.get("transitions") or []
        ]

    async def transition_issue(self, issue_key: str, transition_id: str) -> None:
        await self._request(
            "POST",
            f"/rest/api/3/issue/{issue_key}/transitions",
            action="transition issue",
            json={"transition": {"id": transition_id}},
        )

    async def move_to_backlog(self, issue_keys: list[str], board_id: str | None = None) -> None:
        path = f"/rest/agile/1.0/backlog/{board_id}/issue" if board_id else "/rest/agile/1.0/backlog/issue"
        await self._request("POST", path, action="move issues to backlog", json={"issues": issue_keys})

    async def move_to_board(self, issue_keys: list[str], board_id: str) -> None:
        await self._request(
            "POST",
            f"/rest/agile/1.0/board/{board_id}/issue",
            action="move issues to board",
            json={"issues": issue_keys},
        )

    async def move_to_sprint(self, issue_keys: list[str], sprint_id: int) -> None:
        await self._request(
            "POST",
            f"/rest/agile/1.0/sprint/{sprint_id}/issue",
            action="move issues to sprint",
            json={"issues": issue_keys},
        )

    async def get_issue_types(self, project_key: str) -> list[IssueType]:
        payload = await self._request(
            "GET", f"/rest/api/3/issue/createmeta/{project_key}/issuetypes", action="fetch issue types"
        )
        return [
            IssueType(id=str(item["id"]), name=item.get("name") or "", subtask=bool(item.get("subtask")))
            for item in payload.get("issueTypes") or payload.get("values") or []
        ]

    async def get_priorities(self) -> list[Priority]:
        payload = await self._request_json("GET", "/rest/api/3/priority", action="fetch priorities")
        return [Priority(id=str(item["id"]), name=item.get("name") or "") for item in _as_list(payload)]

    async def get_assignable_users(self, project_key: str) -> list[AssignableUser]:
        payload = await self._request_json(
            "GET",
            "/rest/api/3/user/assignable/search",
            action="fetch assignable users",
            params={"project": project_key},
        )
        return [
            AssignableUser(account_id=item["accountId"], display_name=item.get("displayName") or "")
            for item in _as_list(payload)
        ]

    async def create_issue(
        self,
        project_key: str,
        issue_type_id: str,
        summary: str,
        *,
        description: str | None = None,
        priority_id: str | None = None,
        extra_fields: dict[str, Any] | None = None,
    ) -> str:
        fields: dict[str, Any] = {
            "project": {"key": project_key},
            "issuetype": {"id": issue_type_id},
            "summary": summary,
        }
        if description:
            fields["description"] = markdown_to_adf(description)
        if priority_id:
            fields["priority"] = {"id": priority_id}
        fields.update(extra_fields or {})

        payload = await self._request("POST", "/rest/api/3/issue", action="create issue", json={"fields": fields})
        key = payload.get("key")
        if not key:
            raise ProviderError("Failed to create issue: response carries no issue key")
        return str(key)

    def issue_url(self, issue_key: str) -> str:
        return f"{self._base_url}/browse/{issue_key}"

    async def _request(
        self,
        method: str,
        path: str,
        *,
        action: str,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        payload = await self._request_json(method, path, action=action, params=params, json=json)
        if payload is None:
            return {}
        if not isinstance(payload, dict):
            raise ProviderError(f"Failed to {action}: unexpected response shape")
        return payload

    async def _request_json(
        self,
        method: str,
        path: str,
        *,
        action: str,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        client = self._require_client()
        _LOG.debug("%s %s", method, path)
        try:
            response = await client.request(method, path, params=params, json=json)
        except httpx.TimeoutException as exc:
            raise ProviderError(f"Failed to {action}: request timeout") from exc
        except httpx.HTTPError as exc:
            raise ProviderError(f"Failed to {action}: network error ({exc})") from exc

        status = response.status_code
        if status in (401, 403):
            raise AuthenticationError(f"Failed to {action}: {status}", status_code=status)
        if status == 404:
            raise NotFoundError(f"Failed to {action}: 404")
        if status >= 400:
            detail = _error_detail(response)
            message = f"Failed to {action}: {status}" + (f" ({detail})" if detail else "")
            raise ProviderError(message, status_code=status)

        if status == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise ProviderError(f"Failed to {action}: invalid JSON response") from exc

    def _require_client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise ProviderError("Jira client is not open; use 'async with'")
        return self._client
