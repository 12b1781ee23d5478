"""Background expiry sweep for a cache store.

Day-scoped keys already stop stale entries from being served, so the sweep
is memory hygiene: it drops entries for categories nobody asks for anymore.
It runs as its own asyncio task, independent of request traffic.
"""

import asyncio
import logging

from liondine.cache.base import CacheStore

logger = logging.getLogger(__name__)


class CacheSweeper:
    """Periodically removes expired entries from a cache store.

    Usage:
        sweeper = CacheSweeper(cache, interval=3600)
        sweeper.start()          # inside a running event loop
        ...
        await sweeper.stop()

    Args:
        cache: Store to sweep
        interval: Seconds between sweeps (default: hourly)
    """

    def __init__(self, cache: CacheStore, interval: float = 3600.0) -> None:
        if interval <= 0:
            raise ValueError("Sweep interval must be positive")
        self.cache = cache
        self.interval = interval
        self.total_removed = 0
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task:
        """Schedule the sweep loop on the running event loop."""
        if self.running:
            return self._task
        self._task = asyncio.get_running_loop().create_task(
            self._run(), name="liondine-cache-sweeper"
        )
        logger.info("Cache sweeper started (every %.0fs)", self.interval)
        return self._task

    async def stop(self) -> None:
        """Cancel the sweep loop and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Cache sweeper stopped")

    async def run_once(self) -> int:
        """Sweep now. Returns the number of entries removed."""
        removed = await self.cache.sweep()
        self.total_removed += removed
        return removed

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                await self.run_once()
            except Exception as e:
                logger.error("Cache sweep failed: %s", e)
