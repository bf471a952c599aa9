"""Markdown to Atlassian Document Format (ADF) for ticket descriptions.

Covers the subset notes use in practice: headings, fenced code, pipe tables,
bullet and numbered lists, paragraphs, and inline links, bold, italic and code.
Anything else is carried over as plain paragraph text.
"""

from __future__ import annotations

import re
from typing import Any

Node = dict[str, Any]

_HEADING_RE = re.compile(r"^(#{1,6})\s+(.+)$")
_FENCE_RE = re.compile(r"^```(\w*)$")
_BULLET_RE = re.compile(r"^[-*]\s+")
_ORDERED_RE = re.compile(r"^\d+\.\s+")
_TABLE_SEPARATOR_RE = re.compile(r"^\|[-:\s|]+\|$")

_INLINE_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"^\[([^\]]+)\]\(([^)]+)\)"), "link"),
    (re.compile(r"^\*\*([^*]+)\*\*"), "strong"),
    (re.compile(r"^\*([^*]+)\*"), "em"),
    (re.compile(r"^`([^`]+)`"), "code"),
)
_INLINE_STARTS = ("[", "*", "`")


def markdown_to_adf(markdown: str) -> Node:
    lines = markdown.split("\n")
    content: list[Node] = []
    index = 0

    while index < len(lines):
        line = lines[index]
        if not line.strip():
            index += 1
            continue

        for block in (_code_block, _table, _bullet_list, _ordered_list):
            parsed = block(lines, index)
            if parsed is not None:
                node, index = parsed
                content.append(node)
                break
        else:
            heading = _HEADING_RE.match(line)
            if heading:
                content.append(
                    {"type": "heading", "attrs": {"level": len(heading.group(1))}, "content": _inline(heading.group(2))}
                )
            else:
                content.append(_paragraph(line))
            index += 1

    if not content:
        content.append({"type": "paragraph", "content": []})
    return {"type": "doc", "version": 1, "content": content}


def _paragraph(text: str) -> Node:
    return {"type": "paragraph", "content": _inline(text)}


def _code_block(lines: list[str], start: int) -> tuple[Node, int] | None:
    fence = _FENCE_RE.match(lines[start])
    if fence is None:
        return None
    end = start + 1
    while end < len(lines) and not lines[end].startswith("```"):
        end += 1
    node: Node = {"type": "codeBlock", "content": [{"type": "text", "text": "\n".join(lines[start + 1 : end])}]}
    if fence.group(1):
        node["attrs"] = {"language": fence.group(1)}
    # an unclosed fence runs to the end of the text
    return node, end + 1


def _list(lines: list[str], start: int, marker: re.Pattern[str], list_type: str) -> tuple[Node, int] | None:
    items: list[Node] = []
    index = start
    while index < len(lines) and marker.match(lines[index]):
        text = marker.sub("", lines[index], count=1)
        items.append({"type": "listItem", "content": [_paragraph(text)]})
        index += 1
    if not items:
        return None
    return {"type": list_type, "content": items}, index


def _bullet_list(lines: list[str], start: int) -> tuple[Node, int] | None:
    return _list(lines, start, _BULLET_RE, "bulletList")


def _ordered_list(lines: list[str], start: int) -> tuple[Node, int] | None:
    return _list(lines, start, _ORDERED_RE, "orderedList")


def _is_table_row(line: str) -> bool:
    return line.startswith("|") and line.endswith("|")


def _table(lines: list[str], start: int) -> tuple[Node, int] | None:
    rows: list[Node] = []
    index = start
    while index < len(lines) and _is_table_row(lines[index]):
        line = lines[index]
        index += 1
        if _TABLE_SEPARATOR_RE.match(line):
            continue
        cell_type = "tableCell" if rows else "tableHeader"
        cells = [cell.strip() for cell in line[1:-1].split("|")]
        row = [{"type": cell_type, "content": [_paragraph(cell)]} for cell in cells]
        rows.append({"type": "tableRow", "content": row})
    if not rows:
        return None
    return {"type": "table", "content": rows}, index


def _inline(text: str) -> list[Node]:
    nodes: list[Node] = []
    remaining = text

    while remaining:
        for pattern, mark in _INLINE_RULES:
            match = pattern.match(remaining)
            if match is None:
                continue
            marks: Node = {"type": mark}
            if mark == "link":
                marks["attrs"] = {"href": match.group(2)}
            nodes.append({"type": "text", "text": match.group(1), "marks": [marks]})
            remaining = remaining[match.end() :]
            break
        else:
            # plain text runs up to the next character that may open a mark
            positions = [remaining.find(char) for char in _INLINE_STARTS]
            end = min((pos for pos in positions if pos > 0), default=len(remaining))
            nodes.append({"type": "text", "text": remaining[:end]})
            remaining = remaining[end:]

    return nodes or [{"type": "text", "text": ""}]


__all__ = ["markdown_to_adf"]
