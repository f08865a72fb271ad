"""Bounded in-memory cache with per-entry expiry."""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable

from cachetools import FIFOCache

logger = logging.getLogger(__name__)

_MISSING = object()


@dataclass
class CacheEntry:
    """A stored value and the monotonic time after which it is expired."""

    key: str
    value: Any
    expires_at: float


@dataclass
class CacheStats:
    """Snapshot of cache occupancy and limits."""

    size: int
    max_entries: int
    ttl_seconds: float


class TTLCache:
    """
    Key/value store with a size bound and per-entry time-to-live.

    Eviction is by insertion order (FIFO): when the cache is full, the entry
    that was inserted first is dropped to make room, regardless of how recently
    it was read. Expired entries are removed lazily on read and by ``cleanup()``.

    A single lock guards all bookkeeping, so one instance can be shared by
    concurrent tasks and threads.

    Usage:
        cache = TTLCache(max_entries=1000, ttl_seconds=3600)
        key = TTLCache.make_key("arxiv", "graph neural networks")
        cache.set(key, papers)
        papers = cache.get(key)
    """

    def __init__(
        self,
        max_entries: int = 1000,
        ttl_seconds: float = 3600.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the cache.

        Args:
            max_entries: Maximum number of stored entries
            ttl_seconds: Default time-to-live for entries
            clock: Monotonic time source in seconds
        """
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")

        self.max_entries = max_entries
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        # FIFOCache evicts in insertion order; expiry is checked per entry
        self._entries: FIFOCache[str, CacheEntry] = FIFOCache(maxsize=max_entries)
        self._lock = threading.Lock()

    @staticmethod
    def make_key(prefix: str, *args: Any) -> str:
        """Build a cache key from a namespace prefix and ordered arguments."""
        return ":".join([prefix, *(str(arg) for arg in args)])

    def _is_expired(self, entry: CacheEntry, now: float) -> bool:
        return now > entry.expires_at

    def get(self, key: str, default: Any = None) -> Any:
        """Return the live value for key, or default if absent or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return default

            if self._is_expired(entry, self._clock()):
                del self._entries[key]
                logger.debug(f"Cache entry expired: {key}")
                return default

            return entry.value

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        """
        Store a value.

        Args:
            key: Cache key
            value: Value to store
            ttl: Time-to-live in seconds; None uses the cache default
        """
        ttl = self.ttl_seconds if ttl is None else ttl

        with self._lock:
            if key not in self._entries and len(self._entries) >= self.max_entries:
                oldest, _ = self._entries.popitem()
                logger.debug(f"Cache full, evicted oldest entry: {oldest}")

            # overwriting moves the key to the back of the eviction order
            self._entries[key] = CacheEntry(
                key=key,
                value=value,
                expires_at=self._clock() + ttl,
            )

    def has(self, key: str) -> bool:
        """Return True if key holds a live entry."""
        return self.get(key, _MISSING) is not _MISSING

    def delete(self, key: str) -> bool:
        """Remove key. Returns True if an entry was present."""
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def cleanup(self) -> int:
        """Remove every expired entry. Returns the number removed."""
        with self._lock:
            now = self._clock()
            expired = [
                key for key, entry in self._entries.items()
                if self._is_expired(entry, now)
            ]
            for key in expired:
                del self._entries[key]

        if expired:
            logger.debug(f"Cache cleanup removed {len(expired)} expired entries")
        return len(expired)

    def stats(self) -> CacheStats:
        """Sweep expired entries and report occupancy."""
        self.cleanup()
        with self._lock:
            size = len(self._entries)
        return CacheStats(
            size=size,
            max_entries=self.max_entries,
            ttl_seconds=self.ttl_seconds,
        )

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
