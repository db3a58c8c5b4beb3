"""
staffdash/core/cache.py
═══════════════════════════════════════════════════════════════════════════
In-memory TTL cache shared by every hook in the process.
  • Only hooks call set(), and only after a successful fetch (write-through)
  • Failed fetches never call set() → last good payload stays
  • No eviction: staleness is judged by the reader via is_fresh()
  • Writes carry a generation; an older request finishing late never
    overwrites a newer one
  • Writes are protected by a threading lock → atomic replace, never partial
═══════════════════════════════════════════════════════════════════════════
"""

import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

Clock = Callable[[], float]


@dataclass(frozen=True)
class CacheEntry:
    key:        str
    payload:    Any
    fetched_at: float
    generation: int = 0


def is_fresh(entry: CacheEntry, ttl_s: float, now: float) -> bool:
    """Fresh iff strictly less than ttl_s has elapsed. Exactly ttl_s is stale."""
    return now - entry.fetched_at < ttl_s


class CacheStore:
    def __init__(self, clock: Clock = time.time):
        self._clock   = clock
        self._store:  dict[str, CacheEntry] = {}
        self._issued: dict[str, int] = {}
        self._lock    = threading.Lock()

    def now(self) -> float:
        return self._clock()

    def get(self, key: str) -> Optional[CacheEntry]:
        with self._lock:
            return self._store.get(key)

    def has(self, key: str) -> bool:
        with self._lock:
            return key in self._store

    def next_generation(self, key: str) -> int:
        """Reserve a generation number for a request about to be issued."""
        with self._lock:
            gen = self._issued.get(key, 0) + 1
            self._issued[key] = gen
            return gen

    def set(self, key: str, payload: Any, generation: Optional[int] = None) -> bool:
        """
        Store payload stamped with the current time, overwriting any prior entry.
        Returns False (and stores nothing) when a newer generation is already cached.
        """
        with self._lock:
            prev = self._store.get(key)
            if generation is None:
                generation = self._issued.get(key, 0)
            elif prev is not None and generation < prev.generation:
                return False
            self._store[key] = CacheEntry(key, payload, self._clock(), generation)
            return True

    def age(self, key: str) -> Optional[float]:
        """Seconds since last successful write, or None."""
        with self._lock:
            e = self._store.get(key)
            return round(self._clock() - e.fetched_at, 1) if e else None

    def summary(self, ttl_s: float) -> dict:
        """Metadata only, safe to expose in /health."""
        with self._lock:
            now = self._clock()
            return {
                k: {"age_s": round(now - e.fetched_at, 1), "fresh": is_fresh(e, ttl_s, now)}
                for k, e in self._store.items()
            }
