"""Menu service runtime.

Owns the process-wide pieces with an explicit lifecycle: the cache store,
the orchestrator, and the background sweeper. Synchronous callers (CLI,
Streamlit) reach the async pipeline through a dedicated event loop running
on a daemon thread, so every caller shares one loop, one in-flight map, and
one sweeper.

Usage:
    with MenuService() as service:
        result = service.acquire("lunch")
        print(service.report())
"""

import asyncio
import logging
import threading
import time
from concurrent.futures import TimeoutError as FutureTimeoutError
from datetime import datetime, timedelta, timezone
from typing import Any, Coroutine, TypeVar

from liondine import __version__
from liondine.ai import LLMStructurer
from liondine.cache import CacheStore, CacheSweeper, MemoryCacheStore, ParquetCacheStore
from liondine.config import Settings, settings as default_settings
from liondine.pipeline import AcquireResult, LionDineFetcher, MenuOrchestrator
from liondine.pipeline.ports import MenuFetcher, MenuStructurer

logger = logging.getLogger(__name__)

SERVICE_NAME = "Lion Dine Menu API"

T = TypeVar("T")


async def _cancel_pending() -> None:
    """Cancel every other task on the running loop and wait for them to settle."""
    current = asyncio.current_task()
    pending = [t for t in asyncio.all_tasks() if t is not current]
    for task in pending:
        task.cancel()
    await asyncio.gather(*pending, return_exceptions=True)


def health_report(cfg: Settings, uptime: float = 0.0, running: bool = True) -> dict[str, Any]:
    """Service status summary; never touches upstream services."""
    keyed = {"openai": cfg.openai_api_key, "anthropic": cfg.anthropic_api_key}
    return {
        "status": "ok" if running else "stopped",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": round(uptime, 3),
        "service": SERVICE_NAME,
        "version": __version__,
        "cacheBackend": cfg.cache_backend,
        "structurerProvider": cfg.structurer_provider,
        "structurerConfigured": cfg.structurer_provider == "ollama"
        or bool(keyed.get(cfg.structurer_provider)),
    }


def build_cache_store(cfg: Settings) -> CacheStore:
    """Create the cache store selected by ``cache_backend``."""
    lifetime = timedelta(seconds=cfg.cache_lifetime_seconds)
    if cfg.cache_backend == "parquet":
        return ParquetCacheStore(cfg.cache_dir, lifetime=lifetime, tz=cfg.tzinfo)
    return MemoryCacheStore(lifetime=lifetime, tz=cfg.tzinfo)


def build_orchestrator(
    cfg: Settings,
    cache: CacheStore,
    fetcher: MenuFetcher | None = None,
    structurer: MenuStructurer | None = None,
) -> MenuOrchestrator:
    """Wire an orchestrator from settings, using defaults for missing parts.

    Raises:
        StructuringFailed: If no structurer is given and the configured
            provider has no API key
    """
    return MenuOrchestrator(
        cache=cache,
        fetcher=fetcher or LionDineFetcher(
            base_url=cfg.menu_base_url,
            user_agent=cfg.user_agent,
            timeout=cfg.fetch_timeout,
        ),
        structurer=structurer or LLMStructurer.from_settings(cfg),
        min_content_length=cfg.min_content_length,
        fetch_timeout=cfg.fetch_timeout,
        structure_timeout=cfg.structure_timeout,
        single_flight=cfg.single_flight,
    )


class MenuService:
    """Process-wide menu service with a start/stop lifecycle.

    Args:
        cfg: Settings (default: module-level settings)
        cache: Cache store (default: built from settings)
        fetcher: Menu fetcher (default: LionDineFetcher)
        structurer: Menu structurer (default: LLMStructurer from settings)
    """

    def __init__(
        self,
        cfg: Settings | None = None,
        cache: CacheStore | None = None,
        fetcher: MenuFetcher | None = None,
        structurer: MenuStructurer | None = None,
    ) -> None:
        self.settings = cfg or default_settings
        self.cache = cache or build_cache_store(self.settings)
        self._fetcher = fetcher
        self._structurer = structurer
        self._orchestrator: MenuOrchestrator | None = None
        self._orchestrator_lock = threading.Lock()
        self.sweeper = CacheSweeper(self.cache, interval=self.settings.sweep_interval_seconds)
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread: threading.Thread | None = None
        self._started_at: float | None = None

    @property
    def orchestrator(self) -> MenuOrchestrator:
        """Orchestrator, built on first use.

        Raises:
            StructuringFailed: If no structurer was given and the configured
                provider has no API key
        """
        with self._orchestrator_lock:
            if self._orchestrator is None:
                self._orchestrator = build_orchestrator(
                    self.settings, self.cache, self._fetcher, self._structurer
                )
            return self._orchestrator

    @property
    def running(self) -> bool:
        return self._loop is not None and self._loop.is_running()

    def start(self) -> "MenuService":
        """Start the event loop thread and the sweeper."""
        if self.running:
            return self

        loop = asyncio.new_event_loop()
        thread = threading.Thread(
            target=loop.run_forever, name="liondine-service-loop", daemon=True
        )
        thread.start()
        self._loop = loop
        self._thread = thread
        self._started_at = time.monotonic()

        self._submit(self._start_sweeper())
        logger.info("%s started (cache backend: %s)", SERVICE_NAME, self.settings.cache_backend)
        return self

    def stop(self) -> None:
        """Stop the sweeper and the event loop thread.

        Tasks still pending on the loop, such as a shared acquire whose
        callers timed out, are cancelled before the loop stops.
        """
        if self._loop is None:
            return

        loop, thread = self._loop, self._thread
        try:
            self._submit(self.sweeper.stop())
            self._submit(_cancel_pending(), timeout=5)
        finally:
            loop.call_soon_threadsafe(loop.stop)
            if thread is not None:
                thread.join(timeout=5)
            loop.close()
            self._loop = None
            self._thread = None
            logger.info("%s stopped", SERVICE_NAME)

    def __enter__(self) -> "MenuService":
        return self.start()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()

    async def _start_sweeper(self) -> None:
        self.sweeper.start()

    def _submit(self, coro: Coroutine[Any, Any, T], timeout: float | None = None) -> T:
        """Run ``coro`` on the service loop and wait for its result.

        On timeout the pending coroutine is cancelled; shared upstream work
        it joined keeps running.
        """
        if self._loop is None:
            coro.close()
            raise RuntimeError("MenuService not started. Call start() or use it as a context manager.")

        future = asyncio.run_coroutine_threadsafe(coro, self._loop)
        try:
            return future.result(timeout)
        except FutureTimeoutError:
            future.cancel()
            raise

    def acquire(
        self,
        category: str,
        bypass_cache: bool = False,
        timeout: float | None = None,
    ) -> AcquireResult:
        """Blocking acquire; see MenuOrchestrator.acquire."""
        orchestrator = self.orchestrator
        return self._submit(orchestrator.acquire(category, bypass_cache), timeout)

    def report(self) -> dict[str, Any]:
        """Cache statistics: entries, keys, sizeBytes, sizeKB."""
        return self._submit(self.cache.stats()).to_dict()

    def clear_all(self) -> None:
        """Remove every cache entry."""
        self._submit(self.cache.clear())

    def sweep(self) -> int:
        """Sweep expired entries now."""
        return self._submit(self.sweeper.run_once())

    def health(self) -> dict[str, Any]:
        """Liveness summary for status checks."""
        uptime = time.monotonic() - self._started_at if self._started_at is not None else 0.0
        return health_report(self.settings, uptime=uptime, running=self.running)
