"""Command-line interface for the LionDine menu service.

Usage:
    liondine menu lunch
    liondine menu dinner --refresh --format json
    liondine cache stats --backend parquet
    liondine cache clear
    liondine health
"""

import argparse
import asyncio
import json
import logging
import sys
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Optional

from liondine import __version__
from liondine.config import Settings, settings
from liondine.errors import InvalidCategory, MenuServiceError
from liondine.models import VALID_CATEGORIES, MenuRecord, parse_category
from liondine.service import SERVICE_NAME, build_cache_store, build_orchestrator, health_report

logger = logging.getLogger(__name__)

_executor = ThreadPoolExecutor(max_workers=1)


def create_parser() -> argparse.ArgumentParser:
    """Create the CLI argument parser.

    Returns:
        Configured ArgumentParser with all commands and arguments.
    """
    parser = argparse.ArgumentParser(
        prog="liondine",
        description="LionDine: structured Columbia dining menus, cached per day",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  liondine menu lunch
  liondine menu latenight --refresh --format json
  liondine cache stats --backend parquet
  liondine cache clear
        """,
    )

    # shared cache options
    cache_opts = argparse.ArgumentParser(add_help=False)
    cache_opts.add_argument(
        "--backend",
        type=str,
        choices=["memory", "parquet"],
        default=None,
        help=f"Cache backend (default: {settings.cache_backend})",
    )
    cache_opts.add_argument(
        "--cache-dir",
        type=Path,
        default=None,
        help=f"Directory for the Parquet cache (default: {settings.cache_dir})",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # menu command
    menu_parser = subparsers.add_parser(
        "menu",
        parents=[cache_opts],
        help="Get today's structured menu for a meal",
        description="Return today's menu from cache, or fetch and structure it",
    )
    menu_parser.add_argument(
        "meal",
        type=str,
        help=f"Meal type ({', '.join(VALID_CATEGORIES)})",
    )
    menu_parser.add_argument(
        "--refresh",
        action="store_true",
        help="Bypass the cache and fetch fresh data",
    )
    menu_parser.add_argument(
        "--format",
        type=str,
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )

    # cache command
    cache_parser = subparsers.add_parser(
        "cache",
        help="Inspect or maintain the menu cache",
    )
    cache_sub = cache_parser.add_subparsers(dest="cache_command")
    cache_sub.add_parser("stats", parents=[cache_opts], help="Show cache statistics")
    cache_sub.add_parser("clear", parents=[cache_opts], help="Remove every cache entry")
    cache_sub.add_parser("sweep", parents=[cache_opts], help="Remove expired entries")

    # health command
    subparsers.add_parser(
        "health",
        parents=[cache_opts],
        help="Show service status",
    )

    # version command
    subparsers.add_parser(
        "version",
        help="Show version information",
    )

    return parser


def _run_async(coro):
    """Run an async coroutine from synchronous CLI context.

    Spins up a new event loop in a dedicated thread to avoid conflicts
    with any existing event loop.
    """
    def _target():
        loop = asyncio.new_event_loop()
        try:
            return loop.run_until_complete(coro)
        finally:
            loop.close()

    future = _executor.submit(_target)
    return future.result()


def _settings_for(args: argparse.Namespace) -> Settings:
    """Apply --backend / --cache-dir overrides to the loaded settings."""
    update = {}
    if getattr(args, "backend", None):
        update["cache_backend"] = args.backend
    if getattr(args, "cache_dir", None) is not None:
        update["cache_dir"] = str(args.cache_dir)
    return settings.model_copy(update=update) if update else settings


def format_menu(record: MenuRecord, cache_hit: bool) -> str:
    """Plain-text rendering of a menu record."""
    lines = [
        f"{record.meal_type.get_label()} menu "
        f"({record.timestamp:%Y-%m-%d %H:%M}, cache {'HIT' if cache_hit else 'MISS'})",
        "",
    ]
    for hall in record.dining_halls:
        header = f"{hall.name} [{hall.status}]"
        if hall.hours:
            header += f" {hall.hours}"
        lines.append(header)
        for station in hall.stations:
            lines.append(f"  {station.name}")
            lines.extend(f"    - {item}" for item in station.items)
    return "\n".join(lines)


def cmd_menu(args: argparse.Namespace) -> int:
    """Execute the menu command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code: 0 on success, 2 for an unknown meal, 1 for other failures
    """
    try:
        meal = parse_category(args.meal)
        cfg = _settings_for(args)
        cache = build_cache_store(cfg)
        orchestrator = build_orchestrator(cfg, cache)

        logger.info(
            "Requesting %s menu (backend=%s, refresh=%s)",
            meal.value, cfg.cache_backend, args.refresh,
        )
        result = _run_async(orchestrator.acquire(meal, bypass_cache=args.refresh))

        if args.format == "json":
            print(json.dumps(result.to_dict(), indent=2))
        else:
            print(format_menu(result.record, result.cache_hit))

        return 0

    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return 130
    except InvalidCategory as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 2
    except MenuServiceError as e:
        logger.error("Menu request failed: %s", e)
        print(f"Error ({e.kind}): {e.message}", file=sys.stderr)
        return 1


def cmd_cache(args: argparse.Namespace) -> int:
    """Execute a cache subcommand (stats, clear, sweep).

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    if args.cache_command is None:
        print("Usage: liondine cache {stats,clear,sweep}", file=sys.stderr)
        return 2

    try:
        cache = build_cache_store(_settings_for(args))

        if args.cache_command == "stats":
            print(json.dumps(_run_async(cache.stats()).to_dict(), indent=2))
        elif args.cache_command == "clear":
            _run_async(cache.clear())
            print("Cache cleared successfully")
        else:
            removed = _run_async(cache.sweep())
            print(f"Removed {removed} expired entries")
        return 0

    except MenuServiceError as e:
        logger.error("Cache %s failed: %s", args.cache_command, e)
        print(f"Error ({e.kind}): {e.message}", file=sys.stderr)
        return 1


def cmd_health(args: argparse.Namespace) -> int:
    """Execute the health command."""
    print(json.dumps(health_report(_settings_for(args)), indent=2))
    return 0


def cmd_version(args: argparse.Namespace) -> int:
    """Execute the version command."""
    print(f"{SERVICE_NAME} v{__version__}")
    print("Daily dining menus from liondine.com, structured and cached")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main CLI entry point.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    parser = create_parser()
    args = parser.parse_args(argv)

    # Route to command handler
    if args.command == "menu":
        return cmd_menu(args)
    elif args.command == "cache":
        return cmd_cache(args)
    elif args.command == "health":
        return cmd_health(args)
    elif args.command == "version":
        return cmd_version(args)
    else:
        parser.print_help()
        return 0


def cli_entry() -> None:
    """Console script entry point for setuptools."""
    sys.exit(main())


if __name__ == "__main__":
    cli_entry()
