"""Create command formatting."""

from __future__ import annotations

import argparse

from ticketbridge import BulkCreateResult
from ticketbridge.cli.commands.status_change import target_from_args
from ticketbridge.cli.progress.rich import RichBulkProgress


def format_create_summary(result: BulkCreateResult) -> str:
    lines = [
        "",
        "ticketbridge - ticket creation finished",
        "",
        f"  Created:   {len(result.created)}",
        f"  Skipped:   {len(result.skipped)}",
        f"  Failed:    {len(result.failed)}",
    ]
    if result.created:
        lines.append("")
        for note in result.created:
            lines.append(f"  {note.issue_key}  {note.issue_url}  ({note.path})")
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


async def run_create(args: argparse.Namespace) -> int:
    import ticketbridge.cli as cli

    bridge = cli.TicketBridge.from_paths(args.settings, args.vault)
    cli._configure_logging(args.verbose, bridge.settings.advanced.log_level)

    async with bridge:
        if args.verbose:
            result = await bridge.create_tickets(target_from_args(args))
        else:
            with RichBulkProgress() as progress:
                result = await bridge.create_tickets(target_from_args(args), progress)

    print(cli._format_create_summary(result))
    return 0 if not result.failed else 1


__all__ = ["format_create_summary", "run_create"]
