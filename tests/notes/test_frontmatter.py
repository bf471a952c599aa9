from __future__ import annotations

import pytest

from tests.fakes.store import InMemoryNoteStore
from ticketbridge.core.notes.frontmatter import (
    add_frontmatter_fields,
    format_yaml_value,
    insert_or_update_frontmatter,
    parse_frontmatter,
    split_frontmatter,
)


def test_parse_frontmatter_scalars_quotes_and_lists() -> None:
    content = "\n".join(
        [
            "---",
            "issue_id: PROJ-1",
            'title: "Fix: the \\"thing\\""',
            "owner: 'Ada'",
            "empty:",
            "tags:",
            "  - one",
            "  - two",
            "---",
            "body",
        ]
    )

    assert parse_frontmatter(content) == {
        "issue_id": "PROJ-1",
        "title": 'Fix: the "thing"',
        "owner": "Ada",
        "empty": None,
        "tags": ["one", "two"],
    }


def test_parse_frontmatter_without_block() -> None:
    assert parse_frontmatter("# Heading\n---\nnot: frontmatter\n---") is None


def test_split_frontmatter() -> None:
    block, body = split_frontmatter("---\na: 1\n---\n\nBody")
    assert block == "a: 1"
    assert body == "Body"


@pytest.mark.parametrize(
    ("value", "formatted"),
    [
        ("plain", "plain"),
        ("https://x/browse/A-1", '"https://x/browse/A-1"'),
        ("#tag", '"#tag"'),
        ('say "hi"', '"say \\"hi\\""'),
        ("it's", "\"it's\""),
        (" padded ", '" padded "'),
        ("two\nlines", '"two\\nlines"'),
        ("C:\\new", '"C:\\\\new"'),
    ],
)
def test_format_yaml_value(value: str, formatted: str) -> None:
    assert format_yaml_value(value) == formatted


def test_update_preserves_order_and_appends_new_keys() -> None:
    content = "---\ntitle: Note\nstatus: Open\nowner: me\n---\nBody\n"

    updated = insert_or_update_frontmatter(content, {"status": "Done", "issue_id": "PROJ-9"})

    assert updated == "---\ntitle: Note\nstatus: Done\nowner: me\nissue_id: PROJ-9\n---\nBody\n"


def test_insert_block_when_missing() -> None:
    updated = insert_or_update_frontmatter("Body\n", {"issue_id": "PROJ-1", "issue_link": "https://x/browse/PROJ-1"})

    assert updated == '---\nissue_id: PROJ-1\nissue_link: "https://x/browse/PROJ-1"\n---\nBody\n'


def test_written_values_parse_back() -> None:
    values = {
        "a": 'quote " inside',
        "b": "colon: here",
        "c": "#hash",
        "d": "  padded ",
        "e": "first\nsecond",
        "f": "C:\\new\\path",
    }

    assert parse_frontmatter(insert_or_update_frontmatter("", values)) == values


def test_rewriting_same_values_is_stable() -> None:
    fields = {"jira_assignee": " Ada ", "jira_status": "In\nReview"}
    once = insert_or_update_frontmatter("---\ntitle: Note\n---\nBody\n", fields)

    assert insert_or_update_frontmatter(once, fields) == once
    assert once.count("jira_assignee") == 1


@pytest.mark.asyncio
async def test_add_frontmatter_fields_skips_unchanged_write() -> None:
    store = InMemoryNoteStore({"a.md": "---\nstatus: Done\n---\n"})

    changed = await add_frontmatter_fields(store, "a.md", {"status": "Done"})

    assert changed is False
    assert store.writes == []


@pytest.mark.asyncio
async def test_add_frontmatter_fields_writes_update() -> None:
    store = InMemoryNoteStore({"a.md": "---\nstatus: Open\n---\n"})

    changed = await add_frontmatter_fields(store, "a.md", {"status": "Done"})

    assert changed is True
    assert store.files["a.md"] == "---\nstatus: Done\n---\n"
