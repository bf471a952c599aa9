"""CLI app entrypoint and error mapping."""

from __future__ import annotations

import sys

from ticketbridge import ConfigError, ProviderError
from ticketbridge.cli.common import LOG_FORMAT, format_error


def main(argv: list[str] | None = None) -> int:
    import ticketbridge.cli as cli

    parser = cli.build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        cli.logging.basicConfig(level=cli.logging.DEBUG, format=LOG_FORMAT, stream=sys.stderr)

    try:
        if args.command == "resolve":
            return cli._run_resolve(args)
        if args.command == "sync":
            return cli.asyncio.run(cli._run_sync(args))
        if args.command == "status-change":
            return cli.asyncio.run(cli._run_status_change(args))
        if args.command == "create":
            return cli.asyncio.run(cli._run_create(args))
        print(f"error: unsupported command: {args.command}", file=sys.stderr)
        return 2
    except ConfigError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 3
    except ProviderError as exc:
        print(f"error: {format_error(exc)}", file=sys.stderr)
        return 4
    except Exception as exc:
        print(f"error: {format_error(exc)}", file=sys.stderr)
        return 1


__all__ = ["main"]
