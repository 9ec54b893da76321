"""
Fixed-window request counters for the relay endpoint.

A limiter counts admitted requests per key inside a window and rejects
once the count passes its limit. Counters live in a window store: the
in-memory store is process-local, the Redis store is shared between
instances.
"""

import asyncio
import time
from collections.abc import Callable
from typing import Protocol

import redis.asyncio as aioredis

from gateway.errors import RateLimitedError
from gateway.logging import get_logger

logger = get_logger('services.rate_limit')


class WindowStore(Protocol):
    async def hit(self, key: str, window_seconds: int) -> int:
        """Count one request for ``key`` and return the count in the current window."""
        ...


class InMemoryWindowStore:
    """Per-key count and window start, updated under one lock."""

    MAX_KEYS = 10_000

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._windows: dict[str, tuple[int, float]] = {}
        self._lock = asyncio.Lock()
        self._last_prune: float | None = None

    async def hit(self, key: str, window_seconds: int) -> int:
        async with self._lock:
            now = self._clock()
            count, started_at = self._windows.get(key, (0, now))
            if now > started_at + window_seconds:
                count, started_at = 0, now
            count += 1
            self._windows[key] = (count, started_at)
            if len(self._windows) > self.MAX_KEYS and self._prune_due(now, window_seconds):
                self._prune(now, window_seconds)
            return count

    def _prune_due(self, now: float, window_seconds: int) -> bool:
        # At most one full scan per window.
        return self._last_prune is None or now - self._last_prune >= window_seconds

    def _prune(self, now: float, window_seconds: int) -> None:
        self._last_prune = now
        expired = [
            key for key, (_, started_at) in self._windows.items()
            if now > started_at + window_seconds
        ]
        for key in expired:
            del self._windows[key]


class RedisWindowStore:
    """Shared counters: INCR per key, expiry set on the first hit of a window."""

    _INCR_SCRIPT = """
local count = redis.call('INCR', KEYS[1])
if count == 1 then
  redis.call('EXPIRE', KEYS[1], ARGV[1])
end
return count
"""

    def __init__(self, client: aioredis.Redis, prefix: str = "botgateway:ratelimit:"):
        self.client = client
        self.prefix = prefix

    @classmethod
    def from_url(cls, redis_url: str, socket_timeout: float = 5.0) -> "RedisWindowStore":
        client = aioredis.from_url(
            redis_url,
            decode_responses=True,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
        )
        return cls(client)

    async def hit(self, key: str, window_seconds: int) -> int:
        count = await self.client.eval(self._INCR_SCRIPT, 1, f"{self.prefix}{key}", window_seconds)
        return int(count)

    async def close(self) -> None:
        await self.client.aclose()


class RateLimiter:
    """One named limit over one identity (network address or bot)."""

    def __init__(
        self,
        name: str,
        limit: int,
        window_seconds: int,
        store: WindowStore,
        message: str,
    ):
        self.name = name
        self.limit = limit
        self.window_seconds = window_seconds
        self.store = store
        self.message = message

    async def check(self, key: str) -> int:
        count = await self.store.hit(f"{self.name}:{key}", self.window_seconds)
        if count > self.limit:
            logger.warning(
                "Rate limit %s exceeded for %s (%d/%d in %ds)",
                self.name,
                key,
                count,
                self.limit,
                self.window_seconds,
            )
            raise RateLimitedError(self.message)
        return count


IP_LIMIT_MESSAGE = "Too many requests from this IP, please try again later."
BOT_LIMIT_MESSAGE = "Too many requests for this bot, please slow down."


def build_rate_limiters(
    store: WindowStore,
    window_seconds: int,
    ip_limit: int,
    bot_limit: int,
) -> tuple[RateLimiter, RateLimiter]:
    return (
        RateLimiter("ip", ip_limit, window_seconds, store, IP_LIMIT_MESSAGE),
        RateLimiter("bot", bot_limit, window_seconds, store, BOT_LIMIT_MESSAGE),
    )
