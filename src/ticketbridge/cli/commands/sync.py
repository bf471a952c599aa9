"""Sync command formatting."""

from __future__ import annotations

import argparse

from ticketbridge import SyncResult, SyncStats
from ticketbridge.cli.common import format_error
from ticketbridge.cli.progress.rich import RichNotifier


def format_sync_result(path: str, result: SyncResult) -> str:
    if result.skipped:
        line = f"{path}: skipped ({result.skip_reason})"
        if result.error:
            line += f" - {result.error}"
        return line
    if not result.success:
        return f"{path}: failed - {format_error(result.error or 'unknown error')}"
    if not result.changes:
        return f"{path}: {result.ticket_key} up to date"

    lines = [f"{path}: {result.ticket_key} updated {len(result.changes)} field(s)"]
    for change in result.changes:
        lines.append(f"  {change.frontmatter_key}: {change.old_value!r} -> {change.new_value!r}")
    return "\n".join(lines)


def format_sync_stats(folder: str, stats: SyncStats) -> str:
    return "\n".join(
        [
            "",
            f"ticketbridge - folder sync complete ({folder or '/'})",
            "",
            f"  Notes:     {stats.total}",
            f"  Synced:    {stats.synced} ({stats.changes} change(s))",
            f"  Skipped:   {stats.skipped}",
            f"  Failed:    {stats.failed}",
            "",
        ]
    )


async def run_sync(args: argparse.Namespace) -> int:
    import ticketbridge.cli as cli

    bridge = cli.TicketBridge.from_paths(args.settings, args.vault, notifier=RichNotifier())
    cli._configure_logging(args.verbose, bridge.settings.advanced.log_level)
    async with bridge:
        if args.sync_command == "note":
            result = await bridge.sync_note(args.path, force=args.force)
            print(format_sync_result(args.path, result))
            return 0 if result.success or result.skipped else 1

        stats = await bridge.sync_folder(args.path, force=args.force)
        print(format_sync_stats(args.path, stats))
        return 0 if stats.failed == 0 else 1


__all__ = ["format_sync_result", "format_sync_stats", "run_sync"]
