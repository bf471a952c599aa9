"""Shared CLI helpers."""

from __future__ import annotations

import logging
import sys

from ticketbridge.core.errors import describe_error

LOG_FORMAT = "%(name)s %(message)s"

_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


def configure_logging(verbose: bool, log_level: str) -> None:
    """Apply the configured log level unless ``--verbose`` already switched on debug output."""
    import ticketbridge.cli as cli

    if verbose:
        return
    cli.logging.basicConfig(level=_LOG_LEVELS[log_level], format=LOG_FORMAT, stream=sys.stderr)


def format_error(error: BaseException | str) -> str:
    return f"{describe_error(error)} ({error})"
