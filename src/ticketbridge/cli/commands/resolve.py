"""Resolve command formatting."""

from __future__ import annotations

import argparse

from ticketbridge import ResolvedContext


def format_resolved_context(path: str, context: ResolvedContext) -> str:
    if context.instance is None:
        return f"{path}: no tracker instance mapped"

    instance_line = f"  Instance:  {context.instance.name} ({context.instance.id})"
    if context.is_default:
        instance_line += " [default]"
    elif context.is_instance_inherited and context.instance_mapping is not None:
        instance_line += f" [inherited from {context.instance_mapping.folder_path or '/'}]"

    if context.project_key is None:
        project_line = "  Project:   -"
    else:
        project_line = f"  Project:   {context.project_key}"
        if context.is_project_inherited and context.project_mapping is not None:
            project_line += f" [inherited from {context.project_mapping.folder_path or '/'}]"

    return "\n".join([path, instance_line, project_line])


def run_resolve(args: argparse.Namespace) -> int:
    import ticketbridge.cli as cli

    bridge = cli.TicketBridge.from_paths(args.settings, args.vault)
    cli._configure_logging(args.verbose, bridge.settings.advanced.log_level)
    print(format_resolved_context(args.path, bridge.resolve(args.path)))
    return 0


__all__ = ["format_resolved_context", "run_resolve"]
