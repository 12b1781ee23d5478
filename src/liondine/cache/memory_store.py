"""In-memory menu cache, the default store.

Lives for the lifetime of the process that constructs it. A single
``threading.Lock`` guards the mapping, so the same store can be shared by
request handlers on different threads and by the background sweeper.
"""

import json
import logging
import threading

from liondine.cache.base import CacheEntry, CacheStats, CacheStore
from liondine.models import MealCategory, MenuRecord

logger = logging.getLogger(__name__)


class MemoryCacheStore(CacheStore):
    """Process-local cache of menu records keyed by category and day."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    async def get(self, category: MealCategory) -> MenuRecord | None:
        now = self.now()
        key = self.key_for(category, now)

        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                logger.info("[Cache] MISS - No cache for %s", key)
                return None

            if self.is_expired(entry, now):
                del self._entries[key]
                logger.info("[Cache] EXPIRED - Cache for %s expired", key)
                return None

        logger.info("[Cache] HIT - Returning cached %s", key)
        return entry.record

    async def put(self, category: MealCategory, record: MenuRecord) -> None:
        now = self.now()
        key = self.key_for(category, now)
        with self._lock:
            self._entries[key] = CacheEntry(record=record, created_at=now)
        logger.info("[Cache] STORED - Cached %s", key)

    async def clear(self) -> None:
        with self._lock:
            self._entries = {}
        logger.info("[Cache] CLEARED - All cache cleared")

    async def sweep(self) -> int:
        now = self.now()
        with self._lock:
            expired = [k for k, e in self._entries.items() if self.is_expired(e, now)]
            for key in expired:
                del self._entries[key]

        if expired:
            logger.info("[Cache] SWEEP - Removed %d expired entries", len(expired))
        return len(expired)

    async def stats(self) -> CacheStats:
        with self._lock:
            snapshot = dict(self._entries)

        serialised = json.dumps({
            key: {
                "data": entry.record.to_dict(),
                "timestamp": entry.created_at.isoformat(),
            }
            for key, entry in snapshot.items()
        })
        return CacheStats(
            entries=len(snapshot),
            keys=list(snapshot.keys()),
            size_bytes=len(serialised.encode("utf-8")),
        )
