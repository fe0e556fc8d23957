"""Bounded in-memory cache with time-based expiry."""

import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """A cached value and the clock reading when it was stored."""

    value: T
    inserted_at: float


class TTLCache(Generic[T]):
    """String-keyed cache bounded by size and age.

    Entries older than ``ttl`` seconds are never returned; they are dropped when
    read. When full, a write evicts the oldest-inserted entry. A read hit
    re-inserts the entry, so eviction approximates least-recently-used.

    Example:
        >>> cache: TTLCache[list[int]] = TTLCache(max_size=2, ttl=60)
        >>> cache.set("acme/widgets/abc123", [1, 2])
        >>> cache.get("acme/widgets/abc123")
        [1, 2]
    """

    def __init__(
        self,
        max_size: int = 1000,
        ttl: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize an empty cache.

        Args:
            max_size: Maximum number of entries
            ttl: Maximum entry age in seconds
            clock: Time source in seconds (injectable for tests)
        """
        if max_size < 1:
            raise ValueError(f"max_size must be at least 1, got {max_size}")
        if ttl <= 0:
            raise ValueError(f"ttl must be positive, got {ttl}")
        self.max_size = max_size
        self.ttl = ttl
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry[T]] = OrderedDict()

    def _is_fresh(self, entry: CacheEntry[T]) -> bool:
        return self._clock() - entry.inserted_at <= self.ttl

    def get(self, key: str) -> T | None:
        """Return the cached value, or None if missing or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None

        if not self._is_fresh(entry):
            del self._entries[key]
            return None

        self._entries.move_to_end(key)
        return entry.value

    def set(self, key: str, value: T) -> None:
        """Store ``value``, replacing any previous entry for ``key``."""
        if key in self._entries:
            del self._entries[key]
        elif len(self._entries) >= self.max_size:
            self._entries.popitem(last=False)
        self._entries[key] = CacheEntry(value=value, inserted_at=self._clock())

    def clear(self) -> None:
        """Drop every entry."""
        self._entries.clear()

    def __contains__(self, key: object) -> bool:
        entry = self._entries.get(key) if isinstance(key, str) else None
        return entry is not None and self._is_fresh(entry)

    def __len__(self) -> int:
        return len(self._entries)
