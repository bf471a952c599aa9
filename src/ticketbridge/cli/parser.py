"""CLI parser construction."""

from __future__ import annotations

import argparse
from importlib.metadata import PackageNotFoundError, version


def _package_version() -> str:
    try:
        return version("ticketbridge")
    except PackageNotFoundError:
        return "0.0.0"


def _common_options() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--settings", default="./ticketbridge.json", help="Path to the settings JSON file")
    common.add_argument("--vault", default=".", help="Vault root directory (default: current directory)")
    common.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return common


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ticketbridge")
    parser.add_argument("--version", action="version", version=f"%(prog)s {_package_version()}")
    common = _common_options()

    subparsers = parser.add_subparsers(dest="command", required=True)

    resolve_parser = subparsers.add_parser(
        "resolve", parents=[common], help="Show the instance and project a note maps to"
    )
    resolve_parser.add_argument("path", help="Vault-relative note path")

    sync_parser = subparsers.add_parser("sync", help="Pull tracker fields into note frontmatter")
    sync_subparsers = sync_parser.add_subparsers(dest="sync_command", required=True)

    sync_note_parser = sync_subparsers.add_parser("note", parents=[common], help="Sync a single note")
    sync_note_parser.add_argument("path", help="Vault-relative note path")
    sync_note_parser.add_argument("--force", action="store_true", help="Ignore the ticket cache")

    sync_folder_parser = sync_subparsers.add_parser(
        "folder", parents=[common], help="Sync every note under a folder"
    )
    sync_folder_parser.add_argument("path", help="Vault-relative folder path ('' for the whole vault)")
    sync_folder_parser.add_argument("--force", action="store_true", help="Ignore the ticket cache")

    status_parser = subparsers.add_parser(
        "status-change", parents=[common], help="Change the tracker status of many notes"
    )
    status_parser.add_argument(
        "targets",
        nargs="+",
        help="A folder path, or one or more note paths",
    )
    status_parser.add_argument(
        "--instance",
        default=None,
        help="Tracker instance id (default: the instance marked as default)",
    )
    status_parser.add_argument("--transition-id", default=None, help="Transition to apply")
    status_parser.add_argument(
        "--transition-name",
        default=None,
        help="Status name reported for the transition (defaults to the current status)",
    )
    agile = status_parser.add_mutually_exclusive_group()
    agile.add_argument("--backlog", action="store_true", help="Move tickets to the backlog")
    agile.add_argument("--board", default=None, metavar="BOARD_ID", help="Move tickets to a board")
    agile.add_argument("--sprint", default=None, type=int, metavar="SPRINT_ID", help="Move tickets to a sprint")

    create_parser = subparsers.add_parser(
        "create", parents=[common], help="Create a tracker ticket for every eligible note"
    )
    create_parser.add_argument(
        "targets",
        nargs="+",
        help="A folder path, or one or more note paths",
    )

    return parser


__all__ = ["build_parser"]
