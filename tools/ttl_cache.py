"""In-process time-to-live caches."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Generic, Iterator, List, Optional, TypeVar

Clock = Callable[[], float]
T = TypeVar("T")


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """Cached value plus the clock reading taken when it was stored."""

    data: T
    timestamp: float


class TTLCache(Generic[T]):
    """Mapping whose entries are treated as absent once older than ``ttl_seconds``.

    Stale entries are not evicted eagerly; they are ignored on read and
    overwritten by the next ``set`` for the same key.
    """

    def __init__(self, ttl_seconds: float, clock: Clock | None = None) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.ttl_seconds = ttl_seconds
        self._clock = clock or time.monotonic
        self._entries: Dict[str, CacheEntry[T]] = {}
        self._lock = threading.Lock()

    def _is_live(self, entry: CacheEntry[T], now: float) -> bool:
        return now - entry.timestamp < self.ttl_seconds

    def get_entry(self, key: str) -> Optional[CacheEntry[T]]:
        with self._lock:
            entry = self._entries.get(key)
        if entry is None or not self._is_live(entry, self._clock()):
            return None
        return entry

    def get(self, key: str) -> Optional[T]:
        entry = self.get_entry(key)
        return entry.data if entry else None

    def set(self, key: str, data: T) -> CacheEntry[T]:
        entry = CacheEntry(data=data, timestamp=self._clock())
        with self._lock:
            self._entries[key] = entry
        return entry

    def live_values(self) -> Iterator[T]:
        """Yield the data of every entry that has not expired."""

        now = self._clock()
        with self._lock:
            entries: List[CacheEntry[T]] = list(self._entries.values())
        for entry in entries:
            if self._is_live(entry, now):
                yield entry.data

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return sum(1 for _ in self.live_values())


__all__ = ["Clock", "CacheEntry", "TTLCache"]
