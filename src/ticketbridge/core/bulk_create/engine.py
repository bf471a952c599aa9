"""Bulk ticket creation: turn mapped notes into new tracker tickets."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from ticketbridge.core.bulk_create.lookup import CreateLookup
from ticketbridge.core.contracts.bulk_create import (
    SKIP_NO_SUMMARY_TO_CREATE,
    BulkCreateProgress,
    BulkCreateResult,
    CreatedNote,
)
from ticketbridge.core.contracts.exceptions import ProviderError
from ticketbridge.core.contracts.settings import (
    BridgeSettings,
    ContentParsingConfig,
    FrontmatterFieldType,
    ProjectMappingConfig,
)
from ticketbridge.core.contracts.status_change import (
    SKIP_NO_PROJECT_MAPPING,
    STATUS_CANCELLED,
    STATUS_COMPLETE,
    STATUS_NO_NOTES,
    FailedNote,
    SkippedNote,
)
from ticketbridge.core.contracts.store import NoteStore
from ticketbridge.core.mapping.resolver import MappingResolver
from ticketbridge.core.notes.content import parse_description_from_content, parse_summary_from_content
from ticketbridge.core.notes.frontmatter import add_frontmatter_fields
from ticketbridge.core.notes.keys import ISSUE_ID_KEY, ISSUE_LINK_KEY
from ticketbridge.core.providers.factory import ClientFactory, create_client
from ticketbridge.core.status_change.cancellation import CancellationToken
from ticketbridge.core.status_change.engine import SUMMARY_SEARCH_LIMIT, BulkTarget, collect_target_files

_LOG = logging.getLogger(__name__)

STATUS_COLLECTING = "Collecting notes..."
STATUS_CHECKING_DUPLICATES = "Checking duplicates..."
STATUS_CREATING = "Creating tickets..."

ProgressCallback = Callable[[BulkCreateProgress], None]


@dataclass
class CreateFields:
    """Ticket fields taken from the note's frontmatter through the project's mappings."""

    issue_type: str | None = None
    labels: list[str] = field(default_factory=list)
    parent_summary: str | None = None
    priority: str | None = None
    assignee: str | None = None
    custom: dict[str, Any] = field(default_factory=dict)


@dataclass
class _NoteToCreate:
    path: str
    instance_id: str
    project_key: str
    summary: str
    description: str
    fields: CreateFields


def _name_of(path: str) -> str:
    return path.rpartition("/")[2]


def _error_text(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


def extract_create_fields(frontmatter: dict[str, Any], project_config: ProjectMappingConfig | None) -> CreateFields:
    """Read the mapped frontmatter values; values of the wrong shape are ignored."""
    values = CreateFields()
    if project_config is None:
        return values

    for mapping in project_config.frontmatter_mappings:
        value = frontmatter.get(mapping.frontmatter_key)
        if value is None or value == "":
            continue
        kind = mapping.jira_field_type
        if kind == FrontmatterFieldType.LABELS:
            if isinstance(value, list):
                values.labels = [str(item) for item in value]
            elif isinstance(value, str):
                values.labels = [value]
        elif kind == FrontmatterFieldType.CUSTOM:
            if mapping.custom_field_id:
                values.custom[mapping.custom_field_id] = value
        elif isinstance(value, str):
            if kind == FrontmatterFieldType.ISSUE_TYPE:
                values.issue_type = value
            elif kind == FrontmatterFieldType.PARENT:
                values.parent_summary = value
            elif kind == FrontmatterFieldType.PRIORITY:
                values.priority = value
            elif kind == FrontmatterFieldType.ASSIGNEE:
                values.assignee = value
    return values


class BulkCreateEngine:
    """Creates one ticket per eligible note under a folder or in a file list.

    Notes already carrying an ``issue_id`` are skipped, as are notes whose
    summary matches an existing ticket of the target project exactly. Parent
    tickets are created before the notes that reference them. Cancellation is
    observed between files.
    """

    def __init__(
        self,
        settings: BridgeSettings,
        store: NoteStore,
        *,
        client_factory: ClientFactory = create_client,
    ) -> None:
        self._settings = settings
        self._store = store
        self._client_factory = client_factory
        self._resolver = MappingResolver(settings)
        self._token = CancellationToken()

    @property
    def cancelled(self) -> bool:
        return self._token.cancelled

    def cancel(self) -> None:
        self._token.cancel()

    async def execute(self, target: BulkTarget, on_progress: ProgressCallback | None = None) -> BulkCreateResult:
        token = self._token = CancellationToken()
        files = collect_target_files(self._store, target)
        result = BulkCreateResult()
        progress = BulkCreateProgress(total=len(files), status=STATUS_COLLECTING)

        def report() -> None:
            if on_progress is not None:
                on_progress(progress.model_copy())

        def finish(status: str) -> BulkCreateResult:
            progress.status = status
            progress.current_file = ""
            report()
            return result

        report()
        if not files:
            return finish(STATUS_NO_NOTES)

        async with CreateLookup(self._settings, self._client_factory) as lookup:
            notes = await self._collect_notes(files, token, result, progress, report)
            if token.cancelled:
                return finish(STATUS_CANCELLED)
            if not notes:
                return finish(STATUS_NO_NOTES)

            progress.status = STATUS_CHECKING_DUPLICATES
            report()
            notes = await self._drop_duplicates(lookup, notes, result, progress)

            progress.status = STATUS_CREATING
            report()
            ordered = [note for note in notes if not note.fields.parent_summary]
            ordered += [note for note in notes if note.fields.parent_summary]

            for note in ordered:
                if token.cancelled:
                    return finish(STATUS_CANCELLED)

                name = _name_of(note.path)
                progress.current_file = name
                progress.status = f"Creating: {name}"
                report()

                try:
                    created = await self._create(lookup, note)
                except Exception as exc:
                    _LOG.warning("creating a ticket for %s failed: %s", note.path, exc)
                    result.failed.append(FailedNote(path=note.path, error=_error_text(exc)))
                    progress.failed += 1
                else:
                    result.created.append(created)
                    progress.created += 1

                progress.processed += 1
                report()

        return finish(STATUS_COMPLETE)

    async def _collect_notes(
        self,
        files: list[str],
        token: CancellationToken,
        result: BulkCreateResult,
        progress: BulkCreateProgress,
        report: Callable[[], None],
    ) -> list[_NoteToCreate]:
        notes: list[_NoteToCreate] = []

        def skip(path: str, reason: str, existing_issue_key: str | None = None) -> None:
            result.skipped.append(SkippedNote(path=path, reason=reason, existing_issue_key=existing_issue_key))
            progress.skipped += 1
            progress.processed += 1
            report()

        for path in files:
            if token.cancelled:
                break

            name = _name_of(path)
            progress.current_file = name
            progress.status = f"Analyzing: {name}"
            report()

            context = self._resolver.resolve(path)
            if context.instance is None or not context.project_key:
                skip(path, SKIP_NO_PROJECT_MAPPING)
                continue

            project_config = context.project_mapping.project_config if context.project_mapping else None
            parsing = project_config.content_parsing if project_config is not None else ContentParsingConfig()
            try:
                frontmatter = self._store.get_frontmatter(path) or {}
                raw_key = frontmatter.get(ISSUE_ID_KEY)
                linked_key = str(raw_key).strip() if raw_key is not None else ""
                if linked_key:
                    skip(path, f"already linked ({linked_key})", linked_key)
                    continue
                content = await self._store.read(path)
            except Exception as exc:
                _LOG.warning("reading %s failed: %s", path, exc)
                result.failed.append(FailedNote(path=path, error=_error_text(exc)))
                progress.failed += 1
                progress.processed += 1
                report()
                continue

            summary = parse_summary_from_content(content, parsing.summary_regex())
            if summary is None:
                skip(path, SKIP_NO_SUMMARY_TO_CREATE)
                continue

            notes.append(
                _NoteToCreate(
                    path=path,
                    instance_id=context.instance.id,
                    project_key=context.project_key,
                    summary=summary,
                    description=parse_description_from_content(content, parsing.description_regex()) or "",
                    fields=extract_create_fields(frontmatter, project_config),
                )
            )

        return notes

    async def _drop_duplicates(
        self,
        lookup: CreateLookup,
        notes: list[_NoteToCreate],
        result: BulkCreateResult,
        progress: BulkCreateProgress,
    ) -> list[_NoteToCreate]:
        groups: dict[tuple[str, str], list[_NoteToCreate]] = {}
        for note in notes:
            groups.setdefault((note.instance_id, note.project_key), []).append(note)

        remaining: list[_NoteToCreate] = []
        for (instance_id, project_key), group in groups.items():
            try:
                duplicates = await lookup.find_duplicates(instance_id, project_key, [note.summary for note in group])
            except Exception as exc:
                # an unchecked note could become a second ticket for the same summary
                _LOG.warning("duplicate check for %s failed: %s", project_key, exc)
                for note in group:
                    result.failed.append(FailedNote(path=note.path, error=_error_text(exc)))
                    progress.failed += 1
                    progress.processed += 1
                continue

            for note in group:
                existing = duplicates.get(note.summary)
                if existing:
                    result.skipped.append(
                        SkippedNote(path=note.path, reason=f"duplicate ({existing})", existing_issue_key=existing)
                    )
                    progress.skipped += 1
                    progress.processed += 1
                else:
                    remaining.append(note)

        return remaining

    async def _create(self, lookup: CreateLookup, note: _NoteToCreate) -> CreatedNote:
        client = await lookup.client(note.instance_id)
        fields = note.fields

        issue_types = await lookup.issue_types(note.instance_id, note.project_key)
        if not issue_types:
            raise ProviderError(f"No issue type available in project {note.project_key}")
        issue_type = issue_types[0]
        if fields.issue_type:
            wanted = fields.issue_type.casefold()
            issue_type = next((t for t in issue_types if t.name.casefold() == wanted), issue_type)

        priority_id: str | None = None
        if fields.priority:
            wanted = fields.priority.casefold()
            priorities = await lookup.priorities(note.instance_id)
            priority_id = next((p.id for p in priorities if p.name.casefold() == wanted), None)

        extra: dict[str, Any] = {}
        if fields.labels:
            extra["labels"] = fields.labels
        if fields.parent_summary:
            parent_key = await self._find_parent(lookup, note)
            if parent_key:
                extra["parent"] = {"key": parent_key}
        if fields.assignee:
            wanted = fields.assignee.casefold()
            users = await lookup.assignable_users(note.instance_id, note.project_key)
            user = next((u for u in users if u.display_name.casefold() == wanted), None)
            user = user or next((u for u in users if wanted in u.display_name.casefold()), None)
            if user is not None:
                extra["assignee"] = {"accountId": user.account_id}
        extra.update(fields.custom)

        issue_key = await client.create_issue(
            note.project_key,
            issue_type.id,
            note.summary,
            description=note.description or None,
            priority_id=priority_id,
            extra_fields=extra or None,
        )
        lookup.record_created(note.instance_id, note.project_key, note.summary, issue_key)
        issue_url = client.issue_url(issue_key)
        _LOG.debug("created %s for %s", issue_key, note.path)

        try:
            await add_frontmatter_fields(self._store, note.path, {ISSUE_ID_KEY: issue_key, ISSUE_LINK_KEY: issue_url})
        except Exception as exc:
            _LOG.warning("failed to record %s on %s: %s", issue_key, note.path, exc)

        return CreatedNote(path=note.path, issue_key=issue_key, issue_url=issue_url)

    async def _find_parent(self, lookup: CreateLookup, note: _NoteToCreate) -> str | None:
        summary = note.fields.parent_summary or ""
        created = lookup.find_created(note.instance_id, note.project_key, summary)
        if created:
            return created
        client = await lookup.client(note.instance_id)
        matches = await client.search_issues_by_summary(note.project_key, summary, SUMMARY_SEARCH_LIMIT)
        wanted = summary.strip().casefold()
        return next((issue.key for issue in matches if issue.summary.strip().casefold() == wanted), None)
