"""Local note access: frontmatter, body parsing, and the on-disk store."""

from ticketbridge.core.notes.content import parse_description_from_content, parse_summary_from_content
from ticketbridge.core.notes.filesystem import FileSystemNoteStore
from ticketbridge.core.notes.frontmatter import (
    add_frontmatter_fields,
    format_yaml_value,
    insert_or_update_frontmatter,
    parse_frontmatter,
    split_frontmatter,
)

__all__ = [
    "FileSystemNoteStore",
    "add_frontmatter_fields",
    "format_yaml_value",
    "insert_or_update_frontmatter",
    "parse_description_from_content",
    "parse_frontmatter",
    "parse_summary_from_content",
    "split_frontmatter",
]
