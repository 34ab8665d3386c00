"""
=============================================================================
LOADER-ON-MISS CACHE
=============================================================================

    posts = cache("recent_posts", load_recent_posts, 60)

    ┌─────────────────────────────────────────────────────────────────────┐
    │                          get(key, loader, ttl)                      │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                     │
    │   key present and fresh?  ── yes ──►  return stored value           │
    │          │                                                          │
    │          no                                                         │
    │          ▼                                                          │
    │   value = loader()        (outside the lock)                        │
    │   store (value, now + ttl)                                          │
    │   return value                                                      │
    │                                                                     │
    └─────────────────────────────────────────────────────────────────────┘

ttl = 0 stores the value until it is invalidated.

=============================================================================
CONCURRENCY
=============================================================================

The store itself is guarded by a lock, so concurrent requests never see a
half-written entry. The loader runs outside the lock:
two requests that miss the same key at the same moment may both call it,
and the later write wins. "At most one loader call" is best effort, not a
single-flight guarantee.

A loader that raises stores nothing and the exception propagates to the
caller.

=============================================================================
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional
import logging
import threading
import time


logger = logging.getLogger(__name__)


Clock = Callable[[], float]


@dataclass
class CacheEntry:
    value: Any
    expires_at: Optional[float]  # None = never expires

    def is_fresh(self, now: float) -> bool:
        return self.expires_at is None or now < self.expires_at


class Cache:
    """
    Process-wide keyed store with per-entry expiry.

    Args:
        clock: Monotonic time source, injectable for tests
    """

    def __init__(self, clock: Clock = time.monotonic):
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._clock = clock

    def get(self, key: str, loader: Callable[[], Any], ttl: float = 0) -> Any:
        """
        Cached value for `key`, loading it on a miss.

        Args:
            key: Cache key
            loader: Zero-argument callable producing the value
            ttl: Seconds the loaded value stays fresh (0 = until invalidated)

        Returns:
            The cached or freshly loaded value
        """
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and entry.is_fresh(now):
                return entry.value

        logger.debug(f"Cache miss: {key}")
        value = loader()

        expires_at = self._clock() + ttl if ttl and ttl > 0 else None
        with self._lock:
            self._entries[key] = CacheEntry(value=value, expires_at=expires_at)
        return value

    def invalidate(self, *keys: str) -> None:
        """Remove `keys` immediately. Unknown keys are ignored."""
        with self._lock:
            for key in keys:
                self._entries.pop(key, None)
        logger.debug(f"Cache invalidated: {', '.join(keys)}")

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, key: str) -> bool:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            return entry is not None and entry.is_fresh(now)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
