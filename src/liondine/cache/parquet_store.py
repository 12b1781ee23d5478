"""Parquet-backed menu cache that survives process restarts.

Same contract as the in-memory store, persisted to a single file:

    {base_path}/menu_cache.parquet

    key        string              lunch_2026-01-28
    category   string              lunch
    created_at timestamp[us, UTC]
    record     string              MenuRecord JSON (camelCase fields)

Every operation reads the file, applies its change under the store lock, and
writes the whole table back through a temporary file plus ``os.replace`` so
a reader never sees a half-written entry. File I/O runs in
``asyncio.to_thread`` to keep the event loop free.
"""

import asyncio
import logging
import os
import threading
from pathlib import Path

import pandas as pd
import pyarrow as pa
import pyarrow.parquet as pq

from liondine.cache.base import CacheEntry, CacheStats, CacheStore
from liondine.errors import CacheUnavailable
from liondine.models import MealCategory, MenuRecord

logger = logging.getLogger(__name__)

CACHE_FILENAME = "menu_cache.parquet"

_SCHEMA = pa.schema([
    ("key", pa.string()),
    ("category", pa.string()),
    ("created_at", pa.timestamp("us", tz="UTC")),
    ("record", pa.string()),
])


class ParquetCacheStore(CacheStore):
    """Durable cache of menu records in one Parquet file.

    Args:
        base_path: Directory holding the cache file. Defaults to '.cache/'.
        lifetime, tz, clock: See CacheStore.
    """

    def __init__(self, base_path: str | Path = ".cache", *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.base_path = Path(base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)
        self.file_path = self.base_path / CACHE_FILENAME
        self._lock = threading.Lock()

    def _load(self) -> dict[str, CacheEntry]:
        """Read all entries. A missing or unreadable file is an empty cache."""
        if not self.file_path.exists():
            return {}

        try:
            df = pq.read_table(self.file_path).to_pandas()
        except Exception as e:
            logger.warning(
                "Failed to read cache file %s: %s. "
                "File may be corrupted, starting with empty cache.",
                self.file_path, e,
            )
            return {}

        entries: dict[str, CacheEntry] = {}
        for row in df.itertuples(index=False):
            try:
                entries[row.key] = CacheEntry(
                    record=MenuRecord.from_json(row.record),
                    created_at=row.created_at.to_pydatetime(),
                )
            except Exception as e:
                logger.warning("Skipping unreadable cache row %s: %s", row.key, e)
        return entries

    def _save(self, entries: dict[str, CacheEntry]) -> None:
        """Replace the cache file with ``entries``."""
        df = pd.DataFrame({
            "key": list(entries.keys()),
            "category": [e.record.meal_type.value for e in entries.values()],
            "created_at": pd.to_datetime(
                [e.created_at for e in entries.values()], utc=True
            ),
            "record": [e.record.to_json() for e in entries.values()],
        })
        tmp_path = self.file_path.with_name(f".{CACHE_FILENAME}.tmp")
        try:
            table = pa.Table.from_pandas(df, schema=_SCHEMA, preserve_index=False)
            pq.write_table(table, tmp_path, compression="snappy")
            os.replace(tmp_path, self.file_path)
        except OSError as e:
            raise CacheUnavailable(f"Failed to write cache file {self.file_path}: {e}") from e

    async def get(self, category: MealCategory) -> MenuRecord | None:
        now = self.now()
        key = self.key_for(category, now)

        def _get() -> MenuRecord | None:
            with self._lock:
                entries = self._load()
                entry = entries.get(key)
                if entry is None:
                    logger.info("[ParquetCache] MISS - No cache for %s", key)
                    return None
                if self.is_expired(entry, now):
                    del entries[key]
                    self._save(entries)
                    logger.info("[ParquetCache] EXPIRED - Cache for %s expired", key)
                    return None
            logger.info("[ParquetCache] HIT - Returning cached %s", key)
            return entry.record

        return await asyncio.to_thread(_get)

    async def put(self, category: MealCategory, record: MenuRecord) -> None:
        now = self.now()
        key = self.key_for(category, now)

        def _put() -> None:
            with self._lock:
                entries = self._load()
                entries[key] = CacheEntry(record=record, created_at=now)
                self._save(entries)
            logger.info("[ParquetCache] STORED - Cached %s", key)

        await asyncio.to_thread(_put)

    async def clear(self) -> None:
        def _clear() -> None:
            with self._lock:
                self._save({})
            logger.info("[ParquetCache] CLEARED - All cache cleared")

        await asyncio.to_thread(_clear)

    async def sweep(self) -> int:
        now = self.now()

        def _sweep() -> int:
            with self._lock:
                entries = self._load()
                expired = [k for k, e in entries.items() if self.is_expired(e, now)]
                if not expired:
                    return 0
                for key in expired:
                    del entries[key]
                self._save(entries)
            logger.info("[ParquetCache] SWEEP - Removed %d expired entries", len(expired))
            return len(expired)

        return await asyncio.to_thread(_sweep)

    async def stats(self) -> CacheStats:
        def _stats() -> CacheStats:
            with self._lock:
                entries = self._load()
                size = self.file_path.stat().st_size if self.file_path.exists() else 0
            return CacheStats(entries=len(entries), keys=list(entries.keys()), size_bytes=size)

        return await asyncio.to_thread(_stats)
