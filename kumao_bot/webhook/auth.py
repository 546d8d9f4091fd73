"""Request admission for the webhook endpoint: signature header and rate limiting."""

from __future__ import annotations

import logging
import time
from collections import deque
from collections.abc import Mapping

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "X-Line-Signature"


def signature_from_headers(headers: Mapping[str, str]) -> str:
    """Return the LINE signature header value, or ``""`` when absent."""
    return headers.get(SIGNATURE_HEADER, "").strip()


class RateLimiter:
    """Sliding-window rate limiter using a deque of timestamps."""

    def __init__(self, max_per_minute: int) -> None:
        self._max = max_per_minute
        self._timestamps: deque[float] = deque()

    def check(self) -> bool:
        """Return True if the request is allowed, False if rate-limited."""
        now = time.monotonic()
        while self._timestamps and now - self._timestamps[0] > 60:
            self._timestamps.popleft()
        if len(self._timestamps) >= self._max:
            logger.warning("Rate limit exceeded (%d/min)", self._max)
            return False
        self._timestamps.append(now)
        return True

    def reset(self) -> None:
        self._timestamps.clear()
