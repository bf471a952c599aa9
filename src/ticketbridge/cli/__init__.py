"""Command-line interface for ticketbridge."""

from __future__ import annotations

import asyncio
import logging as logging

from ticketbridge import TicketBridge as TicketBridge
from ticketbridge import load_settings as load_settings
from ticketbridge.cli import common as common
from ticketbridge.cli.app import main as main
from ticketbridge.cli.commands import create as create_command
from ticketbridge.cli.commands import resolve as resolve_command
from ticketbridge.cli.commands import status_change as status_change_command
from ticketbridge.cli.commands import sync as sync_command
from ticketbridge.cli.parser import _package_version as _package_version
from ticketbridge.cli.parser import build_parser as build_parser

_format_resolved_context = resolve_command.format_resolved_context
_format_sync_result = sync_command.format_sync_result
_format_sync_stats = sync_command.format_sync_stats
_format_status_change_summary = status_change_command.format_status_change_summary
_format_create_summary = create_command.format_create_summary

_run_resolve = resolve_command.run_resolve
_run_sync = sync_command.run_sync
_run_status_change = status_change_command.run_status_change
_run_create = create_command.run_create

_configure_logging = common.configure_logging

__all__ = ["asyncio", "build_parser", "logging", "main"]
