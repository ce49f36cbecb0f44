"""
Command-line interface for the domain monitor.

Commands:
- run: Run the monitor on its schedule, or a single cycle with --once
- check: Inspect domains and print their status
- resolve: Print the RDAP server responsible for a zone
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

from . import __version__
from .audit_logger import AuditLogger
from .bootstrap import AuthorityResolver
from .config import MonitorConfig, load_config
from .enums import LogLevel
from .exceptions import ConfigurationError
from .formatter import format_notification
from .models import QUERY_ERROR_STATUS, SERVER_NOT_FOUND_STATUS
from .monitor import MonitorCycle
from .scheduler import Scheduler


TASK_NAME = "domain-monitor-task"


def create_logger(config: MonitorConfig) -> AuditLogger:
    """Create the process logger from configuration."""
    return AuditLogger(
        output_format=config.logging.output_format,
        level=config.logging.log_level,
    )


def _load(args: argparse.Namespace) -> Optional[MonitorConfig]:
    env_file = Path(args.env_file) if args.env_file else None
    if env_file is None and Path(".env").is_file():
        env_file = Path(".env")
    try:
        return load_config(env_file=env_file)
    except ConfigurationError as e:
        print(f"Configuration error: {e.message}", file=sys.stderr)
        return None


async def run_once(config: MonitorConfig, logger: AuditLogger) -> int:
    """Run a single monitor cycle. Returns 0 if every domain succeeded."""
    cycle = MonitorCycle.from_config(config, logger)
    summary = await cycle.run()
    return 0 if summary.all_succeeded else 1


async def run_forever(config: MonitorConfig, logger: AuditLogger) -> None:
    """Run monitor cycles on the configured schedule until cancelled."""
    cycle = MonitorCycle.from_config(config, logger)
    scheduler = Scheduler(logger=logger)
    scheduler.schedule(TASK_NAME, config.schedule, cycle.run)
    await scheduler.run()


async def check_domains(
    config: MonitorConfig,
    logger: AuditLogger,
    domains: list[str],
    notify: bool = False,
    as_json: bool = False,
) -> int:
    """
    Inspect domains and print their status.

    Returns:
        0 if every domain could be inspected, 1 if any lookup failed
    """
    cycle = MonitorCycle.from_config(config, logger)
    statuses = await asyncio.gather(*(cycle.inspector.inspect(d) for d in domains))

    if as_json:
        print(json.dumps([s.to_dict() for s in statuses], indent=2, ensure_ascii=False))
    else:
        for status in statuses:
            state = "AVAILABLE" if status.is_available else "unavailable"
            print(f"{status.domain}: {state} - {status.status_text}")
            if status.registrar:
                print(f"  Registrar: {status.registrar}")
            if status.expiry_date:
                print(f"  Expiry Date: {status.expiry_date}")

    if notify:
        for status in statuses:
            await cycle.sink.deliver(format_notification(status, mention=config.mention))

    failed = [
        s for s in statuses
        if not s.is_available and s.status[0] in (SERVER_NOT_FOUND_STATUS, QUERY_ERROR_STATUS)
    ]
    return 1 if failed else 0


async def resolve_zone(config: MonitorConfig, logger: AuditLogger, zone: str) -> int:
    resolver = AuthorityResolver(
        bootstrap_url=config.bootstrap_url,
        timeout=config.timeouts.registry_seconds,
        logger=logger,
    )
    server = await resolver.resolve(zone)
    if server is None:
        print(f"No RDAP server found for zone: {zone}", file=sys.stderr)
        return 1
    print(server)
    return 0


def cmd_run(args: argparse.Namespace) -> int:
    """Handle the 'run' command."""
    config = _load(args)
    if config is None:
        return 1

    logger = create_logger(config)
    for warning in config.warnings():
        logger.log(LogLevel.WARN, "CLI", warning)

    if args.once:
        return asyncio.run(run_once(config, logger))

    try:
        asyncio.run(run_forever(config, logger))
    except KeyboardInterrupt:
        logger.log(LogLevel.INFO, "CLI", "Interrupted, shutting down")
    return 0


def cmd_check(args: argparse.Namespace) -> int:
    """Handle the 'check' command."""
    config = _load(args)
    if config is None:
        return 1

    domains = args.domains or config.domains
    if not domains:
        print("Error: No domains given and none configured (DOMAINS)", file=sys.stderr)
        return 1

    logger = create_logger(config)
    return asyncio.run(check_domains(
        config, logger, domains, notify=args.notify, as_json=args.json,
    ))


def cmd_resolve(args: argparse.Namespace) -> int:
    """Handle the 'resolve' command."""
    config = _load(args)
    if config is None:
        return 1
    return asyncio.run(resolve_zone(config, create_logger(config), args.zone))


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="domain-monitor",
        description="Monitor domain registration status via RDAP and notify a webhook",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--env-file", "-e",
        help="Path to a .env file (defaults to ./.env when present)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    run_parser = subparsers.add_parser(
        "run",
        help="Run monitor cycles on the configured schedule",
    )
    run_parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single cycle and exit",
    )
    run_parser.set_defaults(func=cmd_run)

    check_parser = subparsers.add_parser(
        "check",
        help="Inspect domains and print their status",
    )
    check_parser.add_argument(
        "domains",
        nargs="*",
        help="Domains to check (defaults to DOMAINS)",
    )
    check_parser.add_argument(
        "--notify",
        action="store_true",
        help="Also deliver notifications to the webhook",
    )
    check_parser.add_argument(
        "--json",
        action="store_true",
        help="Print results as JSON",
    )
    check_parser.set_defaults(func=cmd_check)

    resolve_parser = subparsers.add_parser(
        "resolve",
        help="Print the RDAP server responsible for a zone",
    )
    resolve_parser.add_argument("zone", help="Top-level zone label (e.g. com)")
    resolve_parser.set_defaults(func=cmd_resolve)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
