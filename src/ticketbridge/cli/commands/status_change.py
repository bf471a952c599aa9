"""Status-change command formatting."""

from __future__ import annotations

import argparse

from ticketbridge import AgileAction, BulkStatusChangeResult, ConfigError, StatusChangeOptions
from ticketbridge.cli.progress.rich import RichBulkProgress
from ticketbridge.core.status_change import BulkTarget


def options_from_args(args: argparse.Namespace) -> StatusChangeOptions:
    agile_action: AgileAction | None = None
    if args.backlog:
        agile_action = AgileAction.BACKLOG
    elif args.board is not None:
        agile_action = AgileAction.BOARD
    elif args.sprint is not None:
        agile_action = AgileAction.SPRINT
    return StatusChangeOptions(
        transition_id=args.transition_id,
        transition_name=args.transition_name,
        agile_action=agile_action,
        board_id=args.board,
        sprint_id=args.sprint,
    )


def target_from_args(args: argparse.Namespace) -> BulkTarget:
    targets: list[str] = list(args.targets)
    if len(targets) == 1 and not targets[0].endswith(".md"):
        return targets[0]
    return targets


def format_status_change_summary(result: BulkStatusChangeResult) -> str:
    lines = [
        "",
        "ticketbridge - status change finished",
        "",
        f"  Changed:   {len(result.changed)}",
        f"  Resolved:  {len(result.resolved)}",
        f"  Skipped:   {len(result.skipped)}",
        f"  Failed:    {len(result.failed)}",
    ]
    if result.changed:
        lines.append("")
        for note in result.changed:
            lines.append(f"  {note.issue_key}  {note.old_status} -> {note.new_status}  ({note.path})")
    if result.skipped:
        lines.append("")
        for skipped in result.skipped:
            lines.append(f"  skipped {skipped.path}: {skipped.reason}")
    if result.failed:
        lines.append("")
        for failed in result.failed:
            lines.append(f"  failed  {failed.path}: {failed.error}")
    lines.append("")
    return "\n".join(lines)


async def run_status_change(args: argparse.Namespace) -> int:
    import ticketbridge.cli as cli

    bridge = cli.TicketBridge.from_paths(args.settings, args.vault)
    cli._configure_logging(args.verbose, bridge.settings.advanced.log_level)
    instance_id = args.instance
    if instance_id is None:
        default = bridge.settings.default_instance()
        if default is None:
            raise ConfigError("no --instance given and no default instance configured")
        instance_id = default.id

    try:
        options = options_from_args(args)
    except ValueError as exc:
        raise ConfigError(str(exc)) from exc

    async with bridge:
        if args.verbose:
            result = await bridge.change_status(target_from_args(args), instance_id, options)
        else:
            with RichBulkProgress() as progress:
                result = await bridge.change_status(target_from_args(args), instance_id, options, progress)

    print(cli._format_status_change_summary(result))
    return 0 if not result.failed else 1


__all__ = ["format_status_change_summary", "options_from_args", "run_status_change", "target_from_args"]
