"""In-memory TTL cache for webhook redelivery deduplication."""

from __future__ import annotations

import logging
import time

logger = logging.getLogger(__name__)

_DEFAULT_TTL_SECONDS = 600.0
_DEFAULT_MAX_SIZE = 1000


class DedupeCache:
    """Remembers event ids for *ttl_seconds*, bounded to *max_size* entries.

    LINE retries a delivery with the same ``webhookEventId`` when the first
    attempt was not acknowledged; the cache lets those retries be dropped.
    Insertion order is kept so the oldest entry is evicted first.
    """

    __slots__ = ("_cache", "_max_size", "_ttl")

    def __init__(
        self,
        *,
        ttl_seconds: float = _DEFAULT_TTL_SECONDS,
        max_size: int = _DEFAULT_MAX_SIZE,
    ) -> None:
        self._ttl = max(0.0, ttl_seconds)
        self._max_size = max(1, max_size)
        self._cache: dict[str, float] = {}

    def seen(self, key: str) -> bool:
        """Return True if *key* was recorded within the TTL, else record it."""
        now = time.monotonic()
        recorded = self._cache.get(key)
        if recorded is not None and (self._ttl <= 0 or now - recorded < self._ttl):
            logger.debug("Dedup hit key=%s", key)
            return True

        self._cache.pop(key, None)
        self._cache[key] = now
        self._prune(now)
        return False

    def _prune(self, now: float) -> None:
        if self._ttl > 0:
            cutoff = now - self._ttl
            for key in [k for k, ts in self._cache.items() if ts < cutoff]:
                del self._cache[key]
        while len(self._cache) > self._max_size:
            del self._cache[next(iter(self._cache))]

    def clear(self) -> None:
        self._cache.clear()

    @property
    def size(self) -> int:
        return len(self._cache)
