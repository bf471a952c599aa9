from __future__ import annotations

import re

from ticketbridge.core.notes.content import parse_description_from_content, parse_summary_from_content

NOTE = "\n".join(
    [
        "# Ticket",
        "",
        "## Summary",
        "",
        "```",
        "Add login rate limiting  ",
        "```",
        "",
        "## Description",
        "",
        "Throttle failed logins.",
        "",
        "### Details",
        "Per account.",
        "",
        "## Notes",
        "internal",
    ]
)


def test_default_summary_pattern_reads_first_code_block() -> None:
    assert parse_summary_from_content(NOTE) == "Add login rate limiting"


def test_summary_missing_returns_none() -> None:
    assert parse_summary_from_content("# Ticket\n\nNo summary here") is None


def test_custom_summary_pattern_and_flags() -> None:
    content = "# title: Custom Summary\nbody"

    assert parse_summary_from_content(content, r"^# TITLE: (.+)$", "im") == "Custom Summary"


def test_compiled_summary_pattern() -> None:
    assert parse_summary_from_content("Summary=abc", re.compile(r"Summary=(\w+)")) == "abc"


def test_pattern_without_group_returns_none() -> None:
    assert parse_summary_from_content("Summary", r"Summary") is None


def test_description_stops_at_next_heading() -> None:
    assert parse_description_from_content(NOTE) == "Throttle failed logins.\n\n### Details\nPer account."


def test_description_missing_returns_none() -> None:
    assert parse_description_from_content("# Ticket") is None


def test_custom_description_pattern_and_flags() -> None:
    content = "Intro\n### DETAILS\nKeep this\n## Next\ndrop"

    assert parse_description_from_content(content, r"^### details$", "im") == "Keep this"
    assert parse_description_from_content(content, r"^### details$", "m") is None
