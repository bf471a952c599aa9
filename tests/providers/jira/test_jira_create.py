from __future__ import annotations

import json

import httpx
import pytest

from tests.fakes.settings import make_instance
from ticketbridge.core.contracts.exceptions import ProviderError
from ticketbridge.core.providers.jira.client import JiraClient


def make_client(*responses: httpx.Response) -> tuple[JiraClient, list[httpx.Request]]:
    requests: list[httpx.Request] = []
    pending = list(responses)

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return pending.pop(0)

    client = JiraClient(make_instance(), max_retries=0, transport=httpx.MockTransport(handler))
    return client, requests


@pytest.mark.asyncio
async def test_create_issue_posts_fields_and_returns_key() -> None:
    client, requests = make_client(httpx.Response(201, json={"id": "10000", "key": "PROJ-42"}))

    async with client:
        key = await client.create_issue(
            "PROJ",
            "10001",
            "Fix login",
            description="Users **cannot** log in",
            priority_id="2",
            extra_fields={"labels": ["backend"], "parent": {"key": "PROJ-1"}},
        )

    assert key == "PROJ-42"
    request = requests[0]
    assert (request.method, request.url.path) == ("POST", "/rest/api/3/issue")
    fields = json.loads(request.content)["fields"]
    assert fields["project"] == {"key": "PROJ"}
    assert fields["issuetype"] == {"id": "10001"}
    assert fields["summary"] == "Fix login"
    assert fields["priority"] == {"id": "2"}
    assert fields["labels"] == ["backend"]
    assert fields["parent"] == {"key": "PROJ-1"}
    assert fields["description"]["type"] == "doc"
    assert fields["description"]["content"][0]["content"][1] == {
        "type": "text",
        "text": "cannot",
        "marks": [{"type": "strong"}],
    }


@pytest.mark.asyncio
async def test_create_issue_omits_empty_optional_fields() -> None:
    client, requests = make_client(httpx.Response(201, json={"key": "PROJ-43"}))

    async with client:
        await client.create_issue("PROJ", "10001", "Add export")

    fields = json.loads(requests[0].content)["fields"]
    assert set(fields) == {"project", "issuetype", "summary"}


@pytest.mark.asyncio
async def test_create_issue_surfaces_jira_validation_messages() -> None:
    client, _ = make_client(
        httpx.Response(400, json={"errorMessages": [], "errors": {"summary": "You must specify a summary."}})
    )

    async with client:
        with pytest.raises(ProviderError) as excinfo:
            await client.create_issue("PROJ", "10001", "x")

    assert str(excinfo.value) == "Failed to create issue: 400 (summary: You must specify a summary.)"
    assert excinfo.value.status_code == 400


@pytest.mark.asyncio
async def test_create_issue_without_key_in_response_fails() -> None:
    client, _ = make_client(httpx.Response(201, json={"id": "10000"}))

    async with client:
        with pytest.raises(ProviderError, match="no issue key"):
            await client.create_issue("PROJ", "10001", "x")


@pytest.mark.asyncio
async def test_metadata_endpoints_accept_list_payloads() -> None:
    client, requests = make_client(
        httpx.Response(200, json={"issueTypes": [{"id": "10001", "name": "Task", "subtask": False}]}),
        httpx.Response(200, json=[{"id": "2", "name": "High"}, "junk"]),
        httpx.Response(200, json=[{"accountId": "acc-1", "displayName": "Ada Lovelace"}]),
    )

    async with client:
        issue_types = await client.get_issue_types("PROJ")
        priorities = await client.get_priorities()
        users = await client.get_assignable_users("PROJ")

    assert [(t.id, t.name, t.subtask) for t in issue_types] == [("10001", "Task", False)]
    assert [(p.id, p.name) for p in priorities] == [("2", "High")]
    assert [(u.account_id, u.display_name) for u in users] == [("acc-1", "Ada Lovelace")]
    assert [r.url.path for r in requests] == [
        "/rest/api/3/issue/createmeta/PROJ/issuetypes",
        "/rest/api/3/priority",
        "/rest/api/3/user/assignable/search",
    ]
    assert requests[2].url.params["project"] == "PROJ"


@pytest.mark.asyncio
async def test_object_endpoint_rejects_list_payload() -> None:
    client, _ = make_client(httpx.Response(200, json=[1, 2]))

    async with client:
        with pytest.raises(ProviderError, match="unexpected response shape"):
            await client.get_issue_types("PROJ")


@pytest.mark.asyncio
async def test_duplicate_search_matches_exact_summaries_only() -> None:
    client, requests = make_client(
        httpx.Response(
            200,
            json={
                "issues": [
                    {"key": "PROJ-7", "fields": {"summary": " fix LOGIN "}},
                    {"key": "PROJ-8", "fields": {"summary": "Fix login page"}},
                ]
            },
        )
    )

    async with client:
        found = await client.search_issues_by_summaries("PROJ", ["Fix login", 'Say "hi"'])
        empty = await client.search_issues_by_summaries("PROJ", [])

    assert found == {"Fix login": "PROJ-7"}
    assert empty == {}
    assert len(requests) == 1
    assert requests[0].url.params["jql"] == 'project=PROJ AND (summary ~ "Fix login" OR summary ~ "Say \\"hi\\"")'
    assert requests[0].url.params["maxResults"] == "100"
