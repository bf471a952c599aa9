"""Bulk status change: resolve notes to tickets, then transition them."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from ticketbridge.core.contracts.exceptions import ConfigError
from ticketbridge.core.contracts.settings import BridgeSettings, ContentParsingConfig
from ticketbridge.core.contracts.status_change import (
    SKIP_NO_PROJECT_MAPPING,
    SKIP_NO_SUMMARY,
    SKIP_NOT_FOUND_BY_SUMMARY,
    STATUS_CANCELLED,
    STATUS_COMPLETE,
    STATUS_NO_NOTES,
    AgileAction,
    BulkStatusChangeProgress,
    BulkStatusChangeResult,
    ChangedNote,
    FailedNote,
    ResolvedNote,
    SkippedNote,
    StatusChangeOptions,
)
from ticketbridge.core.contracts.store import NoteStore
from ticketbridge.core.contracts.tracker import TrackerClient
from ticketbridge.core.mapping.resolver import MappingResolver
from ticketbridge.core.notes.content import parse_summary_from_content
from ticketbridge.core.notes.frontmatter import add_frontmatter_fields
from ticketbridge.core.notes.keys import ISSUE_ID_KEY, ISSUE_LINK_KEY
from ticketbridge.core.providers.factory import ClientFactory, create_client
from ticketbridge.core.status_change.cancellation import CancellationToken

_LOG = logging.getLogger(__name__)

STATUS_COLLECTING = "Collecting notes..."
STATUS_CHANGING = "Changing status..."
SUMMARY_SEARCH_LIMIT = 5

ProgressCallback = Callable[[BulkStatusChangeProgress], None]
BulkTarget = str | Sequence[str]


@dataclass(frozen=True)
class _PendingNote:
    path: str
    issue_key: str


def _name_of(path: str) -> str:
    return path.rpartition("/")[2]


def collect_target_files(store: NoteStore, target: BulkTarget) -> list[str]:
    """A folder path expands recursively; an explicit list keeps only markdown files."""
    if isinstance(target, str):
        return store.list_markdown_files(target)
    return [path for path in target if path.endswith(".md")]


class BulkStatusChangeEngine:
    """Changes the tracker status of many notes against one instance.

    Files are handled one at a time. :meth:`cancel` is observed before each
    file starts; a remote call already in flight is allowed to finish.
    """

    def __init__(
        self,
        settings: BridgeSettings,
        store: NoteStore,
        instance_id: str,
        *,
        client_factory: ClientFactory = create_client,
    ) -> None:
        self._settings = settings
        self._store = store
        self._instance_id = instance_id
        self._client_factory = client_factory
        self._resolver = MappingResolver(settings)
        self._token = CancellationToken()

    @property
    def cancelled(self) -> bool:
        return self._token.cancelled

    def cancel(self) -> None:
        self._token.cancel()

    async def execute(
        self,
        target: BulkTarget,
        options: StatusChangeOptions,
        on_progress: ProgressCallback | None = None,
    ) -> BulkStatusChangeResult:
        token = self._token = CancellationToken()
        instance = self._settings.find_instance(self._instance_id)
        if instance is None:
            raise ConfigError(f"Jira instance not found or disabled: {self._instance_id}")

        files = collect_target_files(self._store, target)
        result = BulkStatusChangeResult()
        progress = BulkStatusChangeProgress(total=len(files), status=STATUS_COLLECTING)

        def report() -> None:
            if on_progress is not None:
                on_progress(progress.model_copy())

        report()
        if not files:
            progress.status = STATUS_NO_NOTES
            report()
            return result

        async with self._client_factory(instance, self._settings.advanced) as client:
            pending = await self._resolve_notes(client, files, token, result, progress, report)
            if token.cancelled:
                return self._finish_cancelled(result, progress, report)
            if not pending:
                progress.status = STATUS_NO_NOTES
                progress.current_file = ""
                report()
                return result

            progress.status = STATUS_CHANGING
            report()

            for note in pending:
                if token.cancelled:
                    return self._finish_cancelled(result, progress, report)

                name = _name_of(note.path)
                progress.current_file = name
                progress.status = f"Processing: {name}"
                report()

                try:
                    changed = await self._change_status(client, note, options)
                except Exception as exc:
                    _LOG.warning("status change of %s (%s) failed: %s", note.path, note.issue_key, exc)
                    result.failed.append(FailedNote(path=note.path, error=str(exc) or type(exc).__name__))
                    progress.failed += 1
                else:
                    result.changed.append(changed)
                    progress.changed += 1

                progress.processed += 1
                report()

        progress.status = STATUS_COMPLETE
        progress.current_file = ""
        report()
        return result

    async def _resolve_notes(
        self,
        client: TrackerClient,
        files: list[str],
        token: CancellationToken,
        result: BulkStatusChangeResult,
        progress: BulkStatusChangeProgress,
        report: Callable[[], None],
    ) -> list[_PendingNote]:
        pending: list[_PendingNote] = []

        def skip(path: str, reason: str) -> None:
            result.skipped.append(SkippedNote(path=path, reason=reason))
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
            if not context.project_key:
                skip(path, SKIP_NO_PROJECT_MAPPING)
                continue

            project_config = context.project_mapping.project_config if context.project_mapping else None
            parsing = project_config.content_parsing if project_config is not None else ContentParsingConfig()
            try:
                frontmatter = self._store.get_frontmatter(path) or {}
                raw_key = frontmatter.get(ISSUE_ID_KEY)
                issue_key = str(raw_key).strip() if raw_key is not None else ""
                if issue_key:
                    pending.append(_PendingNote(path=path, issue_key=issue_key))
                    continue
                content = await self._store.read(path)
                summary = parse_summary_from_content(content, parsing.summary_regex())
                if summary is None:
                    skip(path, SKIP_NO_SUMMARY)
                    continue
                matches = await client.search_issues_by_summary(context.project_key, summary, SUMMARY_SEARCH_LIMIT)
            except Exception as exc:
                _LOG.warning("resolving %s failed: %s", path, exc)
                result.failed.append(FailedNote(path=path, error=str(exc) or type(exc).__name__))
                progress.failed += 1
                progress.processed += 1
                report()
                continue

            wanted = summary.casefold()
            match = next((issue for issue in matches if issue.summary.strip().casefold() == wanted), None)
            if match is None:
                skip(path, SKIP_NOT_FOUND_BY_SUMMARY)
                continue

            try:
                await add_frontmatter_fields(
                    self._store,
                    path,
                    {ISSUE_ID_KEY: match.key, ISSUE_LINK_KEY: client.issue_url(match.key)},
                )
            except Exception as exc:
                _LOG.warning("failed to record %s on %s: %s", match.key, path, exc)
            else:
                result.resolved.append(ResolvedNote(path=path, issue_key=match.key))
                progress.resolved += 1
            pending.append(_PendingNote(path=path, issue_key=match.key))

        return pending

    async def _change_status(
        self, client: TrackerClient, note: _PendingNote, options: StatusChangeOptions
    ) -> ChangedNote:
        issue = await client.get_issue(note.issue_key, ["status"])
        status = issue.fields.get("status")
        old_status = str(status.get("name") or "") if isinstance(status, dict) else ""

        if options.transition_id:
            await client.transition_issue(note.issue_key, options.transition_id)

        if options.agile_action == AgileAction.BACKLOG:
            await client.move_to_backlog([note.issue_key], options.board_id)
        elif options.agile_action == AgileAction.BOARD and options.board_id:
            await client.move_to_board([note.issue_key], options.board_id)
        elif options.agile_action == AgileAction.SPRINT and options.sprint_id is not None:
            await client.move_to_sprint([note.issue_key], options.sprint_id)

        return ChangedNote(
            path=note.path,
            issue_key=note.issue_key,
            old_status=old_status,
            new_status=options.transition_name or old_status,
        )

    @staticmethod
    def _finish_cancelled(
        result: BulkStatusChangeResult,
        progress: BulkStatusChangeProgress,
        report: Callable[[], None],
    ) -> BulkStatusChangeResult:
        progress.status = STATUS_CANCELLED
        report()
        return result
