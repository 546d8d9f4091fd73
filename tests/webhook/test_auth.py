"""Tests for signature header lookup and rate limiting."""

from __future__ import annotations

import time
from unittest.mock import patch

from multidict import CIMultiDict

from kumao_bot.webhook.auth import SIGNATURE_HEADER, RateLimiter, signature_from_headers


class TestSignatureFromHeaders:
    def test_present(self) -> None:
        assert signature_from_headers({SIGNATURE_HEADER: " abc= "}) == "abc="

    def test_missing(self) -> None:
        assert signature_from_headers({}) == ""

    def test_case_insensitive_headers(self) -> None:
        headers = CIMultiDict({"x-line-signature": "sig"})
        assert signature_from_headers(headers) == "sig"


class TestRateLimiter:
    def test_allows_within_limit(self) -> None:
        rl = RateLimiter(max_per_minute=5)
        for _ in range(5):
            assert rl.check() is True

    def test_rejects_over_limit(self) -> None:
        rl = RateLimiter(max_per_minute=2)
        assert rl.check() is True
        assert rl.check() is True
        assert rl.check() is False

    def test_window_slides(self) -> None:
        rl = RateLimiter(max_per_minute=1)
        now = time.monotonic()
        with patch("kumao_bot.webhook.auth.time") as mock_time:
            mock_time.monotonic.return_value = now
            assert rl.check() is True
            assert rl.check() is False
            mock_time.monotonic.return_value = now + 61
            assert rl.check() is True

    def test_reset(self) -> None:
        rl = RateLimiter(max_per_minute=1)
        rl.check()
        rl.reset()
        assert rl.check() is True
