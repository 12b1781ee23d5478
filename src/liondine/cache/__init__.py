"""Day-scoped menu cache for the LionDine menu service.

In-memory store by default, Parquet-backed store for persistence across
restarts, plus the background expiry sweeper.
"""

from liondine.cache.base import CacheEntry, CacheStats, CacheStore, cache_key
from liondine.cache.memory_store import MemoryCacheStore
from liondine.cache.parquet_store import ParquetCacheStore
from liondine.cache.sweeper import CacheSweeper

__all__ = [
    "CacheEntry",
    "CacheStats",
    "CacheStore",
    "CacheSweeper",
    "MemoryCacheStore",
    "ParquetCacheStore",
    "cache_key",
]
