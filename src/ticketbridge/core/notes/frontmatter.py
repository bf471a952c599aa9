"""Frontmatter block reading and in-place updating.

A note's frontmatter is a leading ``---`` delimited block of ``key: value``
lines. Updates preserve line order: existing keys are rewritten where they
stand, new keys are appended at the end of the block.
"""

from __future__ import annotations

import re
from typing import Any

from ticketbridge.core.contracts.settings import FRONTMATTER_KEY_PATTERN
from ticketbridge.core.contracts.store import NoteStore

_FRONTMATTER_RE = re.compile(r"\A---\n(.*?)\n---", re.DOTALL)
_KEY_LINE_RE = re.compile(rf"^({FRONTMATTER_KEY_PATTERN}):(.*)$")
_LIST_ITEM_RE = re.compile(r"^\s+-\s*(.*)$")
_QUOTE_TRIGGERS = (":", "#", "'", '"', "\n", "\\")
_ESCAPE_RE = re.compile(r'\\(["\\n])')


def split_frontmatter(content: str) -> tuple[str | None, str]:
    """Return ``(block, body)``; *block* is ``None`` when the note has no frontmatter."""
    match = _FRONTMATTER_RE.match(content)
    if match is None:
        return None, content
    return match.group(1), content[match.end() :].lstrip("\n")


def _unquote(raw: str) -> str | None:
    value = raw.strip()
    if not value:
        return None
    if len(value) >= 2 and value[0] == value[-1] == '"':
        return _ESCAPE_RE.sub(lambda match: "\n" if match.group(1) == "n" else match.group(1), value[1:-1])
    if len(value) >= 2 and value[0] == value[-1] == "'":
        return value[1:-1].replace("''", "'")
    return value


def parse_frontmatter(content: str) -> dict[str, Any] | None:
    """Parse the frontmatter block of *content* into a flat key/value map.

    Scalar values come back as strings (quotes removed), empty values as
    ``None`` and indented ``- item`` sequences as lists of strings.
    """
    block, _ = split_frontmatter(content)
    if block is None:
        return None

    data: dict[str, Any] = {}
    last_key: str | None = None
    for line in block.split("\n"):
        key_match = _KEY_LINE_RE.match(line)
        if key_match is not None:
            last_key = key_match.group(1)
            data[last_key] = _unquote(key_match.group(2))
            continue
        item_match = _LIST_ITEM_RE.match(line)
        if item_match is not None and last_key is not None:
            current = data.get(last_key)
            if not isinstance(current, list):
                current = []
                data[last_key] = current
            item = _unquote(item_match.group(1))
            if item is not None:
                current.append(item)
    return data


def format_yaml_value(value: str) -> str:
    """Double-quote *value* when it would not read back unchanged as a plain scalar."""
    if value != value.strip() or any(trigger in value for trigger in _QUOTE_TRIGGERS):
        escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
        return f'"{escaped}"'
    return value


def _update_block(block: str, fields: dict[str, str]) -> str:
    existing_keys: set[str] = set()
    updated_lines: list[str] = []
    for line in block.split("\n"):
        key_match = _KEY_LINE_RE.match(line)
        if key_match is not None and key_match.group(1) in fields:
            key = key_match.group(1)
            existing_keys.add(key)
            updated_lines.append(f"{key}: {format_yaml_value(fields[key])}")
        else:
            updated_lines.append(line)

    for key, value in fields.items():
        if key not in existing_keys:
            updated_lines.append(f"{key}: {format_yaml_value(value)}")
    return "\n".join(updated_lines)


def insert_or_update_frontmatter(content: str, fields: dict[str, str]) -> str:
    match = _FRONTMATTER_RE.match(content)
    if match is not None:
        updated = _update_block(match.group(1), fields)
        return f"---\n{updated}\n---{content[match.end():]}"

    new_block = "\n".join(f"{key}: {format_yaml_value(value)}" for key, value in fields.items())
    return f"---\n{new_block}\n---\n{content}"


async def add_frontmatter_fields(store: NoteStore, path: str, fields: dict[str, str]) -> bool:
    """Write *fields* into the frontmatter of *path*; returns ``False`` when nothing changed."""
    content = await store.read(path)
    new_content = insert_or_update_frontmatter(content, fields)
    if new_content == content:
        return False
    await store.write(path, new_content)
    return True
