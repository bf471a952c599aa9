"""Note body parsing helpers."""

from __future__ import annotations

import re

from ticketbridge.core.contracts.settings import DEFAULT_DESCRIPTION_PATTERN, DEFAULT_SUMMARY_PATTERN, compile_pattern

_NEXT_HEADING_RE = re.compile(r"^##? [^#]")


def _regex(pattern: str | re.Pattern[str], flags: str) -> re.Pattern[str]:
    return pattern if isinstance(pattern, re.Pattern) else compile_pattern(pattern, flags)


def parse_summary_from_content(
    content: str,
    pattern: str | re.Pattern[str] = DEFAULT_SUMMARY_PATTERN,
    flags: str = "m",
) -> str | None:
    """Return the ticket summary declared in *content*, or ``None``.

    By default the summary is the first line of the fenced code block that
    follows a ``## Summary`` heading.
    """
    match = _regex(pattern, flags).search(content)
    if match is None or not match.groups() or not match.group(1):
        return None
    summary = match.group(1).strip()
    return summary or None


def parse_description_from_content(
    content: str,
    pattern: str | re.Pattern[str] = DEFAULT_DESCRIPTION_PATTERN,
    flags: str = "m",
) -> str | None:
    """Return the text under the first line matching *pattern*, up to the next ``#``/``##`` heading."""
    heading = _regex(pattern, flags)
    lines = content.split("\n")
    start: int | None = None
    end = len(lines)

    for index, line in enumerate(lines):
        if start is None:
            if heading.search(line):
                start = index + 1
            continue
        if _NEXT_HEADING_RE.match(line):
            end = index
            break

    if start is None:
        return None
    description = "\n".join(lines[start:end]).strip()
    return description or None
