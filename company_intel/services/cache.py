"""In-process TTL cache shared across concurrent requests."""

from __future__ import annotations

import time
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from threading import Lock
from typing import Generic, TypeVar

V = TypeVar("V")


@dataclass(frozen=True)
class _CacheEntry(Generic[V]):
    expires_at: float
    value: V


class TTLCache(Generic[V]):
    """Lock-guarded mapping whose entries expire after a fixed TTL.

    Expired entries are evicted lazily when they are next looked up. Two
    concurrent misses on the same key both fill it; the last write wins.
    """

    def __init__(self, ttl_seconds: float, *, clock: Callable[[], float] = time.monotonic) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[Hashable, _CacheEntry[V]] = {}
        self._hits = 0
        self._misses = 0
        self._lock = Lock()

    @property
    def stats(self) -> dict[str, int]:
        with self._lock:
            return {"hits": self._hits, "misses": self._misses, "size": len(self._entries)}

    def get(self, key: Hashable) -> V | None:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return None
            if entry.expires_at <= now:
                del self._entries[key]
                self._misses += 1
                return None
            self._hits += 1
            return entry.value

    def set(self, key: Hashable, value: V) -> None:
        entry = _CacheEntry(expires_at=self._clock() + self._ttl, value=value)
        with self._lock:
            self._entries[key] = entry

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
