from __future__ import annotations

from typing import Any

import pytest

from tests.fakes.settings import instance_mapping, make_settings, note, project_mapping
from tests.fakes.store import InMemoryNoteStore
from tests.fakes.tracker import FakeClientFactory, FakeTrackerClient
from ticketbridge.core.bulk_create import BulkCreateEngine, CreateLookup, extract_create_fields
from ticketbridge.core.bulk_create.lookup import DUPLICATE_BATCH_SIZE
from ticketbridge.core.contracts.bulk_create import BulkCreateProgress
from ticketbridge.core.contracts.exceptions import ProviderError
from ticketbridge.core.contracts.settings import (
    ContentParsingConfig,
    FrontmatterFieldMapping,
    FrontmatterFieldType,
    ProjectMappingConfig,
)
from ticketbridge.core.contracts.status_change import STATUS_CANCELLED, STATUS_COMPLETE, STATUS_NO_NOTES

MAPPINGS = ProjectMappingConfig(
    frontmatter_mappings=[
        FrontmatterFieldMapping(frontmatter_key="type", jira_field_type=FrontmatterFieldType.ISSUE_TYPE),
        FrontmatterFieldMapping(frontmatter_key="labels", jira_field_type=FrontmatterFieldType.LABELS),
        FrontmatterFieldMapping(frontmatter_key="epic", jira_field_type=FrontmatterFieldType.PARENT),
        FrontmatterFieldMapping(frontmatter_key="priority", jira_field_type=FrontmatterFieldType.PRIORITY),
        FrontmatterFieldMapping(frontmatter_key="owner", jira_field_type=FrontmatterFieldType.ASSIGNEE),
        FrontmatterFieldMapping(
            frontmatter_key="team",
            jira_field_type=FrontmatterFieldType.CUSTOM,
            custom_field_id="customfield_10042",
        ),
    ]
)


def ticket_note(summary: str, description: str = "", frontmatter: str = "") -> str:
    body = f"# Note\n\n## Summary\n\n```\n{summary}\n```\n"
    if description:
        body += f"\n## Description\n\n{description}\n\n## Notes\n\nnot part of the ticket\n"
    if frontmatter:
        return f"---\n{frontmatter}\n---\n{body}"
    return body


def make_engine(
    store: InMemoryNoteStore, client_factory: FakeClientFactory, **settings_overrides: Any
) -> BulkCreateEngine:
    return BulkCreateEngine(make_settings(**settings_overrides), store, client_factory=client_factory)


def mapped_settings(project_config: ProjectMappingConfig) -> dict[str, Any]:
    return {"mappings": [instance_mapping("Work"), project_mapping("Work", "PROJ", project_config=project_config)]}


@pytest.mark.asyncio
async def test_creates_tickets_and_links_notes(tracker: FakeTrackerClient, client_factory: FakeClientFactory) -> None:
    store = InMemoryNoteStore(
        {
            "Work/a.md": ticket_note("Fix login", "Users cannot log in.\n\n- on Safari"),
            "Work/b.md": ticket_note("Add export"),
        }
    )
    updates: list[BulkCreateProgress] = []

    result = await make_engine(store, client_factory).execute("Work", updates.append)

    assert [(c.path, c.issue_key) for c in result.created] == [("Work/a.md", "PROJ-100"), ("Work/b.md", "PROJ-101")]
    assert result.created[0].issue_url == "https://example.atlassian.net/browse/PROJ-100"
    first = tracker.create_calls[0]
    assert (first["project_key"], first["issue_type_id"], first["summary"]) == ("PROJ", "10001", "Fix login")
    assert first["description"] == "Users cannot log in.\n\n- on Safari"
    assert tracker.create_calls[1]["description"] is None

    frontmatter = store.get_frontmatter("Work/a.md") or {}
    assert frontmatter["issue_id"] == "PROJ-100"
    assert frontmatter["issue_link"] == "https://example.atlassian.net/browse/PROJ-100"

    assert [u.status for u in updates[:5]] == [
        "Collecting notes...",
        "Analyzing: a.md",
        "Analyzing: b.md",
        "Checking duplicates...",
        "Creating tickets...",
    ]
    assert updates[-1].status == STATUS_COMPLETE
    assert (updates[-1].processed, updates[-1].created, updates[-1].total) == (2, 2, 2)
    assert tracker.entered == 1 and tracker.exited == 1


@pytest.mark.asyncio
async def test_ineligible_notes_are_skipped(tracker: FakeTrackerClient, client_factory: FakeClientFactory) -> None:
    store = InMemoryNoteStore(
        {
            "Work/linked.md": note({"issue_id": "PROJ-9"}, ticket_note("Already there")),
            "Work/empty.md": "# Just thoughts\n",
            "Other/outside.md": ticket_note("Elsewhere"),
        }
    )

    result = await make_engine(store, client_factory).execute(["Work/linked.md", "Work/empty.md", "Other/outside.md"])

    assert [(s.path, s.reason, s.existing_issue_key) for s in result.skipped] == [
        ("Work/linked.md", "already linked (PROJ-9)", "PROJ-9"),
        ("Work/empty.md", "no summary", None),
        ("Other/outside.md", "no project mapping", None),
    ]
    assert tracker.create_calls == []
    assert tracker.duplicate_calls == []


@pytest.mark.asyncio
async def test_existing_summary_is_skipped_as_duplicate(
    tracker: FakeTrackerClient, client_factory: FakeClientFactory
) -> None:
    tracker.add_searchable("PROJ", "PROJ-7", "Fix Login")
    store = InMemoryNoteStore({"Work/a.md": ticket_note("fix login"), "Work/b.md": ticket_note("Add export")})
    updates: list[BulkCreateProgress] = []

    result = await make_engine(store, client_factory).execute("Work", updates.append)

    assert [(s.path, s.reason, s.existing_issue_key) for s in result.skipped] == [
        ("Work/a.md", "duplicate (PROJ-7)", "PROJ-7")
    ]
    assert [call["summary"] for call in tracker.create_calls] == ["Add export"]
    assert tracker.duplicate_calls == [("PROJ", ["fix login", "Add export"])]
    assert (updates[-1].processed, updates[-1].skipped, updates[-1].created) == (2, 1, 1)


@pytest.mark.asyncio
async def test_failed_duplicate_check_fails_the_group_instead_of_creating(
    tracker: FakeTrackerClient, client_factory: FakeClientFactory
) -> None:
    tracker.fail("duplicates", "PROJ", ProviderError("Failed to search issues: 503", status_code=503))
    store = InMemoryNoteStore({"Work/a.md": ticket_note("Fix login")})

    result = await make_engine(store, client_factory).execute("Work")

    assert [(f.path, f.error) for f in result.failed] == [("Work/a.md", "Failed to search issues: 503")]
    assert tracker.create_calls == []


@pytest.mark.asyncio
async def test_frontmatter_mappings_feed_ticket_fields(
    tracker: FakeTrackerClient, client_factory: FakeClientFactory
) -> None:
    child = ticket_note(
        "Login form",
        frontmatter="type: bug\nlabels:\n  - backend\n  - urgent\nepic: Auth revamp\n"
        "priority: HIGH\nowner: ada\nteam: Platform",
    )
    store = InMemoryNoteStore({"Work/1-child.md": child, "Work/2-epic.md": ticket_note("Auth revamp")})

    result = await make_engine(store, client_factory, **mapped_settings(MAPPINGS)).execute("Work")

    assert result.failed == []
    # the parent is created first even though it sorts last
    assert [call["summary"] for call in tracker.create_calls] == ["Auth revamp", "Login form"]
    call = tracker.create_calls[1]
    assert call["issue_type_id"] == "10002"
    assert call["priority_id"] == "2"
    assert call["extra_fields"] == {
        "labels": ["backend", "urgent"],
        "parent": {"key": "PROJ-100"},
        "assignee": {"accountId": "acc-1"},
        "customfield_10042": "Platform",
    }
    assert tracker.metadata_calls.count("issue_types:PROJ") == 1


@pytest.mark.asyncio
async def test_parent_resolved_from_existing_ticket(
    tracker: FakeTrackerClient, client_factory: FakeClientFactory
) -> None:
    tracker.add_searchable("PROJ", "PROJ-3", "Auth revamp")
    store = InMemoryNoteStore({"Work/child.md": ticket_note("Login form", frontmatter="epic: auth revamp")})

    await make_engine(store, client_factory, **mapped_settings(MAPPINGS)).execute("Work")

    assert tracker.create_calls[0]["extra_fields"] == {"parent": {"key": "PROJ-3"}}


@pytest.mark.asyncio
async def test_unknown_type_and_priority_fall_back(
    tracker: FakeTrackerClient, client_factory: FakeClientFactory
) -> None:
    store = InMemoryNoteStore(
        {"Work/a.md": ticket_note("Fix login", frontmatter="type: Saga\npriority: Blocker\nowner: nobody")}
    )

    await make_engine(store, client_factory, **mapped_settings(MAPPINGS)).execute("Work")

    call = tracker.create_calls[0]
    assert (call["issue_type_id"], call["priority_id"], call["extra_fields"]) == ("10001", None, None)


@pytest.mark.asyncio
async def test_create_failure_is_recorded_and_run_continues(
    tracker: FakeTrackerClient, client_factory: FakeClientFactory
) -> None:
    tracker.fail("create", "Fix login", ProviderError("Failed to create issue: 400 (summary: too long)"))
    store = InMemoryNoteStore({"Work/a.md": ticket_note("Fix login"), "Work/b.md": ticket_note("Add export")})

    result = await make_engine(store, client_factory).execute("Work")

    assert [(f.path, f.error) for f in result.failed] == [
        ("Work/a.md", "Failed to create issue: 400 (summary: too long)")
    ]
    assert [c.path for c in result.created] == ["Work/b.md"]
    assert "issue_id" not in (store.get_frontmatter("Work/a.md") or {})


@pytest.mark.asyncio
async def test_write_back_failure_keeps_created_ticket(
    tracker: FakeTrackerClient, client_factory: FakeClientFactory
) -> None:
    store = InMemoryNoteStore({"Work/a.md": ticket_note("Fix login")})
    store.fail_writes.add("Work/a.md")

    result = await make_engine(store, client_factory).execute("Work")

    assert [c.issue_key for c in result.created] == ["PROJ-100"]
    assert result.failed == []


@pytest.mark.asyncio
async def test_unreadable_note_fails_without_stopping_the_run(
    tracker: FakeTrackerClient, client_factory: FakeClientFactory
) -> None:
    store = InMemoryNoteStore({"Work/a-bad.md": ticket_note("Broken"), "Work/b.md": ticket_note("Add export")})
    store.fail_frontmatter.add("Work/a-bad.md")
    updates: list[BulkCreateProgress] = []

    result = await make_engine(store, client_factory).execute("Work", updates.append)

    assert [f.path for f in result.failed] == ["Work/a-bad.md"]
    assert "undecodable" in result.failed[0].error
    assert [c.path for c in result.created] == ["Work/b.md"]
    assert updates[-1].status == STATUS_COMPLETE


@pytest.mark.asyncio
async def test_custom_description_pattern_is_used(
    tracker: FakeTrackerClient, client_factory: FakeClientFactory
) -> None:
    parsing = ProjectMappingConfig(content_parsing=ContentParsingConfig(description_pattern=r"^### Details\s*$"))
    content = "## Summary\n\n```\nFix login\n```\n\n### Details\n\nDeep text\n\n## Notes\n\nignored\n"
    store = InMemoryNoteStore({"Work/a.md": content})

    await make_engine(store, client_factory, **mapped_settings(parsing)).execute("Work")

    assert tracker.create_calls[0]["description"] == "Deep text"


@pytest.mark.asyncio
async def test_cancel_stops_before_next_file(tracker: FakeTrackerClient, client_factory: FakeClientFactory) -> None:
    store = InMemoryNoteStore({"Work/a.md": ticket_note("First"), "Work/b.md": ticket_note("Second")})
    engine = make_engine(store, client_factory)
    updates: list[BulkCreateProgress] = []

    def on_progress(progress: BulkCreateProgress) -> None:
        updates.append(progress)
        if progress.status == "Creating: a.md":
            engine.cancel()

    result = await engine.execute("Work", on_progress)

    assert [c.path for c in result.created] == ["Work/a.md"]
    assert updates[-1].status == STATUS_CANCELLED
    assert engine.cancelled is True
    assert tracker.exited == 1


@pytest.mark.asyncio
async def test_empty_target_reports_no_notes(client_factory: FakeClientFactory) -> None:
    updates: list[BulkCreateProgress] = []

    result = await make_engine(InMemoryNoteStore(), client_factory).execute("Work", updates.append)

    assert result.created == [] and result.skipped == [] and result.failed == []
    assert [u.status for u in updates] == ["Collecting notes...", STATUS_NO_NOTES]
    assert updates[-1].is_terminal is True


@pytest.mark.asyncio
async def test_duplicate_checks_are_batched_and_memoized(
    tracker: FakeTrackerClient, client_factory: FakeClientFactory
) -> None:
    summaries = [f"Task {index}" for index in range(DUPLICATE_BATCH_SIZE + 5)]
    tracker.add_searchable("PROJ", "PROJ-1", "Task 3")

    async with CreateLookup(make_settings(), client_factory) as lookup:
        found = await lookup.find_duplicates("jira-work", "PROJ", summaries)
        again = await lookup.find_duplicates("jira-work", "PROJ", ["task 3", "Task 4"])
        lookup.record_created("jira-work", "PROJ", "Task 4", "PROJ-50")

        assert found == {"Task 3": "PROJ-1"}
        assert again == {"task 3": "PROJ-1"}
        assert lookup.find_created("jira-work", "PROJ", "TASK 4") == "PROJ-50"
        assert lookup.find_created("jira-work", "PROJ", "Task 5") is None

    assert [len(batch) for _, batch in tracker.duplicate_calls] == [DUPLICATE_BATCH_SIZE, 5]
    assert tracker.exited == 1


def test_extract_create_fields_ignores_wrong_shapes() -> None:
    fields = extract_create_fields(
        {"type": ["Bug"], "labels": "solo", "owner": None, "team": ["a", "b"], "priority": ""},
        MAPPINGS,
    )

    assert fields.issue_type is None
    assert fields.labels == ["solo"]
    assert fields.assignee is None
    assert fields.priority is None
    assert fields.custom == {"customfield_10042": ["a", "b"]}
    assert extract_create_fields({"type": "Bug"}, None).issue_type is None
