"""Tests for the fixed-window rate limiters."""

from unittest.mock import AsyncMock

import pytest

from gateway.errors import RateLimitedError
from gateway.services.rate_limit import (
    BOT_LIMIT_MESSAGE,
    IP_LIMIT_MESSAGE,
    InMemoryWindowStore,
    RateLimiter,
    RedisWindowStore,
    build_rate_limiters,
)


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def limiters(clock):
    store = InMemoryWindowStore(clock=clock)
    return build_rate_limiters(store, window_seconds=60, ip_limit=100, bot_limit=60)


class TestInMemoryWindowStore:
    async def test_counts_within_window(self, clock):
        store = InMemoryWindowStore(clock=clock)
        assert [await store.hit("k", 60) for _ in range(3)] == [1, 2, 3]

    async def test_resets_after_window(self, clock):
        store = InMemoryWindowStore(clock=clock)
        await store.hit("k", 60)
        await store.hit("k", 60)

        clock.advance(60)
        assert await store.hit("k", 60) == 3

        clock.advance(0.5)
        assert await store.hit("k", 60) == 1

    async def test_keys_are_independent(self, clock):
        store = InMemoryWindowStore(clock=clock)
        await store.hit("a", 60)
        await store.hit("a", 60)
        assert await store.hit("b", 60) == 1

    async def test_prunes_expired_windows(self, clock):
        store = InMemoryWindowStore(clock=clock)
        store.MAX_KEYS = 2
        await store.hit("old-1", 60)
        await store.hit("old-2", 60)
        clock.advance(61)
        await store.hit("fresh", 60)

        assert set(store._windows) == {"fresh"}


class TestIpLimiter:
    async def test_admits_limit_then_rejects(self, limiters):
        ip_limiter, _ = limiters
        for _ in range(100):
            await ip_limiter.check("10.0.0.1")

        with pytest.raises(RateLimitedError) as exc_info:
            await ip_limiter.check("10.0.0.1")

        assert exc_info.value.status_code == 429
        assert exc_info.value.message == IP_LIMIT_MESSAGE

    async def test_admits_again_after_window(self, limiters, clock):
        ip_limiter, _ = limiters
        for _ in range(100):
            await ip_limiter.check("10.0.0.1")
        with pytest.raises(RateLimitedError):
            await ip_limiter.check("10.0.0.1")

        clock.advance(61)
        assert await ip_limiter.check("10.0.0.1") == 1

    async def test_other_addresses_unaffected(self, limiters):
        ip_limiter, _ = limiters
        for _ in range(100):
            await ip_limiter.check("10.0.0.1")
        assert await ip_limiter.check("10.0.0.2") == 1


class TestBotLimiter:
    async def test_rejects_sixty_first_request(self, limiters):
        _, bot_limiter = limiters
        for _ in range(60):
            await bot_limiter.check("bot_1")

        with pytest.raises(RateLimitedError) as exc_info:
            await bot_limiter.check("bot_1")
        assert exc_info.value.message == BOT_LIMIT_MESSAGE

    async def test_counters_do_not_share_keys_with_ip_limiter(self, limiters):
        ip_limiter, bot_limiter = limiters
        for _ in range(60):
            await bot_limiter.check("same-key")
        assert await ip_limiter.check("same-key") == 1


class TestRedisWindowStore:
    async def test_hit_runs_atomic_script_with_prefixed_key(self):
        client = AsyncMock()
        client.eval = AsyncMock(return_value=7)
        store = RedisWindowStore(client, prefix="test:")

        assert await store.hit("ip:10.0.0.1", 60) == 7
        script, num_keys, key, window = client.eval.call_args[0]
        assert "INCR" in script and "EXPIRE" in script
        assert (num_keys, key, window) == (1, "test:ip:10.0.0.1", 60)

    async def test_limiter_rejects_on_shared_count(self):
        client = AsyncMock()
        client.eval = AsyncMock(return_value=61)
        limiter = RateLimiter("bot", 60, 60, RedisWindowStore(client), BOT_LIMIT_MESSAGE)

        with pytest.raises(RateLimitedError):
            await limiter.check("bot_1")


async def test_prune_scans_at_most_once_per_window(clock):
    store = InMemoryWindowStore(clock=clock)
    store.MAX_KEYS = 1
    scans = []
    prune = store._prune
    store._prune = lambda now, window: (scans.append(now), prune(now, window))

    for i in range(5):
        await store.hit(f"live-{i}", 60)
    assert len(scans) == 1

    clock.advance(61)
    await store.hit("later", 60)
    assert len(scans) == 2
    assert set(store._windows) == {"later"}
