"""Cache store contract shared by the in-memory and Parquet backends.

Entries are keyed by meal category scoped to a calendar day:

    {category}_{YYYY-MM-DD}      e.g. lunch_2026-01-28

The date is taken in a fixed reference time zone, so every request for a
category on the same day lands on the same entry, and the first request after
midnight lands on a fresh one. Expiry is purely time-based: an entry whose
age reaches the configured lifetime is dropped lazily by ``get`` or
proactively by ``sweep``. There is no capacity-based eviction.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Any, Callable

from liondine.models import MealCategory, MenuRecord

Clock = Callable[[], datetime]

DEFAULT_LIFETIME = timedelta(minutes=1440)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def cache_key(category: MealCategory, day: date) -> str:
    """Build the cache key for a category on a calendar day."""
    return f"{category.value}_{day.isoformat()}"


@dataclass(frozen=True)
class CacheEntry:
    """A stored record and the moment it was stored."""

    record: MenuRecord
    created_at: datetime


@dataclass
class CacheStats:
    """Cache statistics snapshot.

    ``size_bytes`` is informational only and never drives eviction.
    """

    entries: int
    keys: list[str] = field(default_factory=list)
    size_bytes: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "entries": self.entries,
            "keys": self.keys,
            "sizeBytes": self.size_bytes,
            "sizeKB": f"{self.size_bytes / 1024:.2f}",
        }


class CacheStore(ABC):
    """Day-scoped menu cache.

    All operations are safe to call concurrently from any thread or event
    loop. Implementations guard their mapping with a single lock.

    Args:
        lifetime: Maximum entry age; entries at or past it are expired
        tz: Time zone whose calendar date scopes keys
        clock: Returns the current aware datetime (injectable for tests)
    """

    def __init__(
        self,
        lifetime: timedelta = DEFAULT_LIFETIME,
        tz: tzinfo = timezone.utc,
        clock: Clock | None = None,
    ) -> None:
        if lifetime <= timedelta(0):
            raise ValueError("Cache lifetime must be positive")
        self.lifetime = lifetime
        self.tz = tz
        self._clock = clock or utcnow

    def now(self) -> datetime:
        return self._clock()

    def key_for(self, category: MealCategory, at: datetime | None = None) -> str:
        """Cache key for ``category`` at ``at`` (default: now)."""
        moment = at or self.now()
        return cache_key(category, moment.astimezone(self.tz).date())

    def is_expired(self, entry: CacheEntry, now: datetime | None = None) -> bool:
        """True once the entry's age has reached the lifetime."""
        return (now or self.now()) - entry.created_at >= self.lifetime

    @abstractmethod
    async def get(self, category: MealCategory) -> MenuRecord | None:
        """Return today's record for ``category``, or None.

        Lazy expiry: an entry found at or past its lifetime is deleted
        before None is returned. This is a read with a side effect, not a
        pure query.
        """
        ...

    @abstractmethod
    async def put(self, category: MealCategory, record: MenuRecord) -> None:
        """Insert or replace today's record for ``category``.

        ``created_at`` is set to now. No validation is performed here.
        """
        ...

    @abstractmethod
    async def clear(self) -> None:
        """Remove every entry. Idempotent."""
        ...

    @abstractmethod
    async def sweep(self) -> int:
        """Remove every expired entry and return how many were removed."""
        ...

    @abstractmethod
    async def stats(self) -> CacheStats:
        """Entry count, keys, and approximate serialised size."""
        ...
