#!/usr/bin/env python3
"""LionDine daily cache warm-up.

Acquires every meal category once so the first real request of the day is
a cache hit. Uses the Parquet cache so the result outlives this process.

Usage:
    python scripts/warm_cache.py
    python scripts/warm_cache.py --meals breakfast lunch
    python scripts/warm_cache.py --refresh

Scheduling (cache keys roll over at midnight in LIONDINE cache_timezone):
    crontab -e
    15 6 * * * /path/to/liondine/.venv/bin/python /path/to/liondine/scripts/warm_cache.py >> /path/to/liondine/logs/warm.log 2>&1
"""

import argparse
import asyncio
import logging
import sys
from datetime import date
from pathlib import Path

from liondine.config import settings
from liondine.errors import MenuServiceError
from liondine.models import VALID_CATEGORIES
from liondine.pipeline import MenuOrchestrator
from liondine.service import build_cache_store, build_orchestrator

PROJECT_ROOT = Path(__file__).resolve().parent.parent


def setup_logging(log_dir: Path, run_date: date) -> None:
    """Configure logging to both console and a dated log file."""
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"warm_{run_date.isoformat()}.log"

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(log_file, encoding="utf-8"),
        ],
    )


async def warm(orchestrator: MenuOrchestrator, meals: list[str], refresh: bool) -> dict[str, str]:
    """Acquire each meal in turn.

    Returns:
        Mapping of meal -> "HIT", "MISS", or the error kind
    """
    logger = logging.getLogger(__name__)
    outcome: dict[str, str] = {}

    for meal in meals:
        try:
            result = await orchestrator.acquire(meal, bypass_cache=refresh)
        except MenuServiceError as e:
            logger.error("  %-10s FAILED  %s: %s", meal, e.kind, e.message)
            outcome[meal] = e.kind
            continue

        halls = result.record.dining_halls
        logger.info(
            "  %-10s %-6s halls=%d open=%d",
            meal,
            "HIT" if result.cache_hit else "MISS",
            len(halls),
            len(result.record.open_halls()),
        )
        outcome[meal] = "HIT" if result.cache_hit else "MISS"

    return outcome


def main() -> int:
    """Main entry point for the warm-up run."""
    parser = argparse.ArgumentParser(
        description="LionDine: warm today's menu cache",
    )
    parser.add_argument(
        "--meals",
        nargs="+",
        choices=VALID_CATEGORIES,
        default=list(VALID_CATEGORIES),
        help="Meals to warm (default: all)",
    )
    parser.add_argument(
        "--refresh",
        action="store_true",
        help="Refetch even when today's entry is cached",
    )
    parser.add_argument(
        "--cache-dir",
        type=str,
        default=str(PROJECT_ROOT / settings.cache_dir),
        help="Parquet cache directory (default: .cache/)",
    )
    args = parser.parse_args()

    setup_logging(PROJECT_ROOT / "logs", date.today())
    logger = logging.getLogger(__name__)

    cfg = settings.model_copy(update={"cache_backend": "parquet", "cache_dir": args.cache_dir})
    logger.info("Starting LionDine cache warm-up")
    logger.info("  Meals: %s", ", ".join(args.meals))
    logger.info("  Cache dir: %s", cfg.cache_dir)

    try:
        orchestrator = build_orchestrator(cfg, build_cache_store(cfg))

        loop = asyncio.new_event_loop()
        try:
            outcome = loop.run_until_complete(warm(orchestrator, args.meals, args.refresh))
        finally:
            loop.close()

    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return 130
    except MenuServiceError as e:
        logger.error("Warm-up failed: %s", e)
        return 1

    failed = [m for m, status in outcome.items() if status not in ("HIT", "MISS")]
    logger.info("Done: %d/%d meals cached", len(outcome) - len(failed), len(outcome))
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
