"""Orchestrator: category → cache | fetch → structure → validate → cache.

    acquire(category, bypass_cache)
      1. validate category                      InvalidCategory
      2. cache hit (unless bypass) → return
      3. fetch page text                        UpstreamFetchFailed / InsufficientContent
      4. structure + validate                   StructuringFailed / SchemaInvalid
      5. store (also after a bypass)
      6. return

There is no retry here; every failure reaches the caller with its kind
intact. Concurrent misses for the same cache key share one in-flight
fetch-structure task unless ``single_flight`` is disabled.

Usage:
    orchestrator = MenuOrchestrator(cache, LionDineFetcher(), structurer)
    result = await orchestrator.acquire("lunch")
    print(result.cache_hit, len(result.record.dining_halls))
"""

import asyncio
import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from liondine.cache.base import CacheStore
from liondine.errors import (
    InsufficientContent,
    MenuServiceError,
    StructuringFailed,
    UpstreamFetchFailed,
)
from liondine.models import MealCategory, MenuRecord, parse_category
from liondine.pipeline.ports import MenuFetcher, MenuStructurer

logger = logging.getLogger(__name__)

MIN_CONTENT_LENGTH = 100


@dataclass(frozen=True)
class AcquireResult:
    """A menu record and whether it was served from cache."""

    record: MenuRecord
    cache_hit: bool

    def to_dict(self) -> dict[str, Any]:
        return {**self.record.to_dict(), "cache": "HIT" if self.cache_hit else "MISS"}


class MenuOrchestrator:
    """Coordinates the cache store, fetcher, and structurer.

    Args:
        cache: Day-scoped cache store
        fetcher: Source of raw page text
        structurer: Text → menu payload
        min_content_length: Shortest page text passed to the structurer
        fetch_timeout: Seconds allowed for one fetch (None = unbounded)
        structure_timeout: Seconds allowed for one structuring call (None = unbounded)
        single_flight: Share one upstream run between concurrent misses per key
    """

    def __init__(
        self,
        cache: CacheStore,
        fetcher: MenuFetcher,
        structurer: MenuStructurer,
        min_content_length: int = MIN_CONTENT_LENGTH,
        fetch_timeout: float | None = 30.0,
        structure_timeout: float | None = 120.0,
        single_flight: bool = True,
    ) -> None:
        self.cache = cache
        self.fetcher = fetcher
        self.structurer = structurer
        self.min_content_length = min_content_length
        self.fetch_timeout = fetch_timeout
        self.structure_timeout = structure_timeout
        self.single_flight = single_flight
        self._inflight: dict[str, asyncio.Task] = {}
        self._inflight_lock = threading.Lock()

    async def acquire(
        self,
        category: str | MealCategory,
        bypass_cache: bool = False,
    ) -> AcquireResult:
        """Return today's menu for ``category``.

        Args:
            category: Meal category name or MealCategory
            bypass_cache: Skip the cache lookup and fetch fresh data; the
                fresh record still replaces the cached one

        Raises:
            InvalidCategory, UpstreamFetchFailed, InsufficientContent,
            StructuringFailed, SchemaInvalid
        """
        meal = parse_category(category)

        if not bypass_cache:
            cached = await self.cache.get(meal)
            if cached is not None:
                return AcquireResult(record=cached, cache_hit=True)

        logger.info("[API] Fetching fresh data for %s", meal.value)
        if self.single_flight:
            record = await self._join_or_start(meal)
        else:
            record = await self._fetch_and_store(meal)
        return AcquireResult(record=record, cache_hit=False)

    def inflight_keys(self) -> list[str]:
        """Cache keys with an upstream run in progress."""
        with self._inflight_lock:
            return [k for k, t in self._inflight.items() if not t.done()]

    async def _join_or_start(self, meal: MealCategory) -> MenuRecord:
        """Await the shared upstream run for today's key, starting it if needed.

        The shared task is shielded: a caller that is cancelled stops waiting
        but the run continues for everyone else and still fills the cache.
        """
        key = self.cache.key_for(meal)
        loop = asyncio.get_running_loop()

        with self._inflight_lock:
            task = self._inflight.get(key)
            if task is None or task.done() or task.get_loop() is not loop:
                task = loop.create_task(self._fetch_and_store(meal), name=f"acquire-{key}")
                self._inflight[key] = task
                task.add_done_callback(lambda t, k=key: self._forget(k, t))
            else:
                logger.info("[API] Joining in-flight fetch for %s", key)

        return await asyncio.shield(task)

    def _forget(self, key: str, task: asyncio.Task) -> None:
        with self._inflight_lock:
            if self._inflight.get(key) is task:
                del self._inflight[key]
        # consume the outcome; every waiter may have been cancelled
        if not task.cancelled():
            task.exception()

    async def _fetch_and_store(self, meal: MealCategory) -> MenuRecord:
        text = await self._fetch(meal)
        payload = await self._structure(text, meal)
        record = MenuRecord.from_payload(payload, meal, generated_at=datetime.now(timezone.utc))
        await self.cache.put(meal, record)
        return record

    async def _fetch(self, meal: MealCategory) -> str:
        try:
            text = await asyncio.wait_for(self.fetcher.fetch(meal), timeout=self.fetch_timeout)
        except MenuServiceError:
            raise
        except asyncio.TimeoutError as e:
            raise UpstreamFetchFailed(
                f"Fetching {meal.value} menu timed out after {self.fetch_timeout}s"
            ) from e
        except Exception as e:
            logger.error("Error fetching %s menu: %s", meal.value, e)
            raise UpstreamFetchFailed(f"Failed to retrieve {meal.value} menu: {e}") from e

        if not text or len(text) < self.min_content_length:
            raise InsufficientContent(
                f"Failed to retrieve menu data from website: got {len(text or '')} characters, "
                f"need at least {self.min_content_length}"
            )
        return text

    async def _structure(self, text: str, meal: MealCategory) -> dict[str, Any]:
        try:
            payload = await asyncio.wait_for(
                self.structurer.structure(text, meal), timeout=self.structure_timeout
            )
        except MenuServiceError:
            raise
        except asyncio.TimeoutError as e:
            raise StructuringFailed(
                f"Structuring {meal.value} menu timed out after {self.structure_timeout}s"
            ) from e
        except Exception as e:
            logger.error("Error structuring %s menu: %s", meal.value, e)
            raise StructuringFailed(f"Failed to structure menu data: {e}") from e

        if not payload:
            raise StructuringFailed("No content returned from structuring service")
        if not isinstance(payload, dict):
            raise StructuringFailed(
                f"Structuring service returned {type(payload).__name__}, expected a JSON object"
            )
        return payload
