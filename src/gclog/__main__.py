"""
Entry point for running gclog as a module.

Reads lines from stdin and writes them to a rotating log file, with level
control through SIGUSR1/SIGUSR2 and the optional admin API.

Usage:
    my_server 2>&1 | python -m gclog --file ./my_server.log

    # Hourly slices, keep one day, level changes over HTTP
    GCLOG_ADMIN_TOKEN=secret my_server | python -m gclog --file ./app.log \\
        --slice-interval 1h --storage-time 1d --api
"""

import argparse
import asyncio
import sys
from datetime import timedelta
from typing import List, Optional

from gclog.daemon import LogDaemon, build_service
from gclog.levels import LogLevel
from gclog.utils.config import GcLogConfig, get_config
from gclog.utils.duration import parse_duration
from gclog.utils.logging import setup_logging


def _duration(value: str) -> timedelta:
    try:
        return parse_duration(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def _level(value: str) -> LogLevel:
    try:
        return LogLevel.parse(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gclog",
        description="Write stdin lines to a time-rotated log file.",
    )
    parser.add_argument("--file", default=None, help="Log file path (default: GCLOG_FILE)")
    parser.add_argument(
        "--level", type=_level, default=None, help="Level threshold (default: GCLOG_LEVEL)"
    )
    parser.add_argument(
        "--input-level",
        type=_level,
        default=LogLevel.NOTICE,
        help="Level stdin lines are logged at (default: notice)",
    )
    parser.add_argument(
        "--slice-interval", type=_duration, default=None, help="Rotation interval, e.g. 1h, 1d"
    )
    parser.add_argument(
        "--storage-time", type=_duration, default=None, help="Archive retention, e.g. 7d"
    )
    parser.add_argument(
        "--poll-interval", type=_duration, default=None, help="Scheduler poll interval, e.g. 30s"
    )
    parser.add_argument(
        "--strict-retention",
        action="store_true",
        default=None,
        help="Only prune files named <base>_YYYY_MM_DD_HH<suffix>",
    )
    parser.add_argument(
        "--api",
        dest="admin_enabled",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Serve the admin API (default: GCLOG_ADMIN_ENABLED)",
    )
    parser.add_argument("--port", type=int, default=None, help="Admin API port")
    return parser


def apply_args(config: GcLogConfig, args: argparse.Namespace) -> GcLogConfig:
    """Override config values with the options that were given."""
    if args.file is not None:
        config.log_file = args.file
    if args.level is not None:
        config.log_level = args.level
    if args.slice_interval is not None:
        config.slice_interval = args.slice_interval
    if args.storage_time is not None:
        config.storage_time = abs(args.storage_time)
    if args.poll_interval is not None:
        config.poll_interval = args.poll_interval.total_seconds()
    if args.strict_retention is not None:
        config.strict_retention = args.strict_retention
    if args.admin_enabled is not None:
        config.admin_enabled = args.admin_enabled
    if args.port is not None:
        config.admin_port = args.port
    return config


async def async_main(args: argparse.Namespace) -> int:
    """Async entry point for the daemon."""
    config = apply_args(get_config(), args)

    service = build_service(config)
    setup_logging(service)

    daemon = LogDaemon(config, service=service)

    try:
        await daemon.start(input_stream=sys.stdin, input_level=args.input_level)
    except OSError as e:
        service.error("open log file %s failed, because %s", config.log_file, e)
        return 1

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Synchronous entry point."""
    args = build_parser().parse_args(argv)
    try:
        return asyncio.run(async_main(args))
    except KeyboardInterrupt:
        # SIGINT is already handled by the daemon
        return 0
    except ValueError as e:
        print(f"gclog: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
