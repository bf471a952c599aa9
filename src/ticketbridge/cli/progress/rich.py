"""Rich-based progress display and notices."""

from __future__ import annotations

from types import TracebackType

from rich.console import Console
from rich.markup import escape
from rich.progress import BarColumn, MofNCompleteColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.progress import TaskID as RichTaskID

from ticketbridge.core.contracts.notifier import Notifier
from ticketbridge.core.contracts.bulk_create import BulkCreateProgress
from ticketbridge.core.contracts.status_change import STATUS_COMPLETE, BulkStatusChangeProgress


class RichBulkProgress:
    """Live progress bar fed by bulk status-change or bulk-create callbacks.

    Use as a context manager so the live display is properly started/stopped::

        with RichBulkProgress() as progress:
            result = await engine.execute(target, options, progress)
    """

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console(stderr=True)
        self._progress = Progress(
            SpinnerColumn(finished_text="[green]✓[/green]"),
            TextColumn("{task.description}"),
            BarColumn(bar_width=30),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=self._console,
            transient=False,
        )
        self._task_id: RichTaskID | None = None

    def __enter__(self) -> RichBulkProgress:
        self._progress.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self._progress.stop()

    def __call__(self, progress: BulkStatusChangeProgress | BulkCreateProgress) -> None:
        description = escape(progress.status)
        if progress.is_terminal and progress.status != STATUS_COMPLETE:
            description = f"[yellow]{description}[/yellow]"
        if self._task_id is None:
            self._task_id = self._progress.add_task(description, total=progress.total or None)
        completed = progress.processed
        if progress.status == STATUS_COMPLETE:
            completed = progress.total
        self._progress.update(
            self._task_id,
            description=description,
            total=progress.total or None,
            completed=completed,
        )


class RichNotifier(Notifier):
    """Prints engine notices to the terminal."""

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console(stderr=True)

    def notify(self, message: str, *, error: bool = False) -> None:
        if error:
            self._console.print(f"[red]{escape(message)}[/red]")
        else:
            self._console.print(escape(message))
