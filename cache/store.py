"""
In-process result cache with single-flight recomputation.

Each key moves EMPTY -> COMPUTING -> FRESH -> STALE -> COMPUTING -> ...

  - A fresh entry is served as-is.
  - A missing or expired entry is recomputed by exactly one caller; every
    other caller asking for the same key meanwhile joins that computation.
  - When recomputation fails the previous entry is served stale and
    held for another ttl. Only a key that never computed successfully
    surfaces CacheComputationFailed.

Payloads are stored serialized, so two reads of one entry return equal
strings.
"""

import logging
import threading
import time
from concurrent.futures import Future
from dataclasses import dataclass, replace
from typing import Callable, Dict, Optional

from cache.keys import CacheKey, CacheKind
from config import CACHE_TTL_SECONDS
from exceptions import CacheComputationFailed

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    key: CacheKey
    payload: str
    computed_at: float
    expires_at: float
    # Start order of the computation that produced this entry
    generation: int

    def is_fresh(self, now: float) -> bool:
        return now < self.expires_at


class CacheStore:

    def __init__(self, ttl: float = CACHE_TTL_SECONDS, clock: Callable[[], float] = time.time):
        self.ttl = ttl
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: Dict[CacheKey, CacheEntry] = {}
        self._inflight: Dict[CacheKey, Future] = {}
        self._generation = 0
        # Results of computations started at or before this generation are stored already stale
        self._invalidated: Dict[CacheKind, int] = {}

    def get(self, key: CacheKey) -> Optional[CacheEntry]:
        with self._lock:
            return self._entries.get(key)

    def __len__(self):
        with self._lock:
            return len(self._entries)

    def get_or_compute(self, key: CacheKey, compute: Callable[[], str], wait: bool = True) -> str:
        """
        Return the cached payload for key, computing it on miss or expiry.

        With wait=False a caller that finds a computation already running
        gets the stale payload immediately instead of blocking (only when
        there is one).
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and entry.is_fresh(self._clock()):
                return entry.payload
            future = self._inflight.get(key)
            if future is None:
                future, generation = self._begin(key)
                owner = True
            else:
                owner = False

        if owner:
            return self._compute(key, compute, future, generation)
        if not wait and entry is not None:
            return entry.payload
        return future.result()

    def refresh(self, key: CacheKey, compute: Callable[[], str]) -> str:
        """Recompute key regardless of freshness, joining any running computation."""
        with self._lock:
            future = self._inflight.get(key)
            if future is None:
                future, generation = self._begin(key)
                owner = True
            else:
                owner = False

        if owner:
            return self._compute(key, compute, future, generation)
        return future.result()

    def invalidate(self, kind: CacheKind) -> int:
        """Mark every entry of a kind stale. Stale entries stay servable on error."""
        now = self._clock()
        with self._lock:
            self._invalidated[kind] = self._generation
            count = 0
            for key, entry in self._entries.items():
                if key.kind is kind and entry.expires_at > now:
                    self._entries[key] = replace(entry, expires_at=now)
                    count += 1
        if count:
            logger.debug(f"[Cache] Invalidated {count} {kind.value} entries")
        return count

    def purge(self, older_than: float, kind: CacheKind = None) -> int:
        """Drop entries (of one kind, if given) that expired more than older_than seconds ago."""
        cutoff = self._clock() - older_than
        with self._lock:
            dead = [
                key for key, entry in self._entries.items()
                if entry.expires_at < cutoff and key not in self._inflight
                and (kind is None or key.kind is kind)
            ]
            for key in dead:
                del self._entries[key]
        if dead:
            logger.debug(f"[Cache] Purged {len(dead)} expired entries")
        return len(dead)

    # ---------- internals ----------

    def _begin(self, key: CacheKey):
        # Caller holds self._lock
        self._generation += 1
        future = Future()
        self._inflight[key] = future
        return future, self._generation

    def _compute(self, key: CacheKey, compute: Callable[[], str], future: Future, generation: int) -> str:
        try:
            payload = compute()
        except Exception as e:
            with self._lock:
                self._inflight.pop(key, None)
                stale = self._entries.get(key)
                if stale is not None:
                    # Kept as-is until the next attempt, one ttl from now
                    stale = replace(stale, expires_at=self._clock() + self.ttl)
                    self._entries[key] = stale
            if stale is not None:
                logger.warning(f"[Cache] Recomputing {key} failed, serving stale entry: {e}")
                future.set_result(stale.payload)
                return stale.payload
            logger.error(f"[Cache] Recomputing {key} failed with nothing cached: {e}")
            error = CacheComputationFailed()
            future.set_exception(error)
            raise error from e

        now = self._clock()
        with self._lock:
            current = self._entries.get(key)
            if current is not None and current.generation > generation:
                # A computation started later already stored its result
                payload = current.payload
            else:
                expires_at = now + self.ttl
                if generation <= self._invalidated.get(key.kind, 0):
                    expires_at = now
                self._entries[key] = CacheEntry(
                    key=key,
                    payload=payload,
                    computed_at=now,
                    expires_at=expires_at,
                    generation=generation,
                )
            self._inflight.pop(key, None)

        future.set_result(payload)
        logger.debug(f"[Cache] Stored {key}")
        return payload
