"""Tests for the token-bucket rate limiter with server-limit override."""

from __future__ import annotations

import asyncio

import pytest

from scix_client.shared.rate_limiter import RateLimiter


class TestLocalBudget:
    async def test_burst_then_wait(self, limiter, clock):
        """Capacity 5 at 5/s: five acquires are immediate, the sixth waits 0.2s."""
        waits = [await limiter.acquire() for _ in range(6)]

        assert waits[:5] == [0.0] * 5
        assert waits[5] == pytest.approx(0.2)
        assert clock.sleeps == [pytest.approx(0.2)]

    async def test_refill_after_idle(self, limiter, clock):
        for _ in range(5):
            await limiter.acquire()
        clock.advance(1.0)

        assert limiter.tokens == pytest.approx(5.0)
        assert await limiter.acquire() == 0.0

    async def test_tokens_never_exceed_capacity(self, limiter, clock):
        clock.advance(3600)
        assert limiter.tokens == pytest.approx(5.0)

    async def test_conservation(self, limiter, clock):
        """Over a window of T seconds at most capacity + rate * T acquisitions succeed."""
        start = clock.now
        count = 0
        while clock.now - start < 2.0:
            await limiter.acquire()
            count += 1
        elapsed = clock.now - start
        assert count <= 5 + 5 * elapsed + 1e-6

    async def test_concurrent_callers_do_not_over_issue(self, limiter, clock):
        start = clock.now
        await asyncio.gather(*(limiter.acquire() for _ in range(12)))
        elapsed = clock.now - start
        # 5 from the bucket, 7 at 5/s.
        assert elapsed == pytest.approx(7 / 5)
        assert limiter.tokens < 1.0

    def test_invalid_configuration(self):
        with pytest.raises(ValueError):
            RateLimiter(capacity=0)
        with pytest.raises(ValueError):
            RateLimiter(capacity=5, per=0)


class TestServerLimits:
    async def test_server_exhaustion_takes_precedence(self, limiter, clock):
        limiter.update_from_headers(
            {"X-RateLimit-Remaining": "0", "X-RateLimit-Reset": str(int(clock.wall() + 30))}
        )
        assert limiter.tokens == pytest.approx(5.0)

        waited = await limiter.acquire()

        assert waited == pytest.approx(30.0)

    async def test_server_state_cleared_after_reset(self, limiter, clock):
        limiter.update_from_headers({"x-ratelimit-remaining": "0", "x-ratelimit-reset": str(int(clock.wall() + 10))})
        await limiter.acquire()
        assert limiter.server_state.remaining is None
        assert await limiter.acquire() == 0.0

    async def test_remaining_nonzero_does_not_block(self, limiter, clock):
        limiter.update_from_headers({"X-RateLimit-Remaining": "4000", "X-RateLimit-Reset": str(int(clock.wall() + 60))})
        assert await limiter.acquire() == 0.0
        assert limiter.server_state.remaining == 4000

    def test_headers_case_insensitive(self, limiter, clock):
        limiter.update_from_headers({"x-RATELIMIT-remaining": "17"})
        assert limiter.server_state.remaining == 17

    def test_malformed_headers_ignored(self, limiter):
        limiter.update_from_headers({"X-RateLimit-Remaining": "lots", "X-RateLimit-Reset": "soon"})
        assert limiter.server_state.remaining is None
        assert limiter.server_state.reset_at is None

    def test_reset_in_the_past_ignored(self, limiter, clock):
        limiter.update_from_headers({"X-RateLimit-Remaining": "0", "X-RateLimit-Reset": str(int(clock.wall() - 5))})
        assert limiter.server_state.reset_at is None

    async def test_note_retry_after_blocks(self, limiter, clock):
        limiter.note_retry_after(12.5)
        assert await limiter.acquire() == pytest.approx(12.5)

    def test_snapshot(self, limiter, clock):
        limiter.note_retry_after(3.0)
        snap = limiter.snapshot()
        assert snap.capacity == 5.0
        assert snap.refill_rate == 5.0
        assert snap.server_remaining == 0
        assert snap.server_reset_in == pytest.approx(3.0)
