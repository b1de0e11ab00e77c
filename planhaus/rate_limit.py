"""
Fixed-window request counters for the AI endpoints.

A store is an ordinary object handed to whoever needs it (the FastAPI app
keeps one on ``app.state``), so tests and separate app instances never share
counters.
"""
import logging
import math
import time
from typing import Callable, Dict, NamedTuple, Optional

import redis

from config import AI_RATE_LIMIT_MAX_REQUESTS, AI_RATE_LIMIT_WINDOW_SECONDS, RATE_LIMIT_BACKEND, REDIS_URL
from planhaus.exceptions import RateLimitExceededError


class RateLimitDecision(NamedTuple):
    allowed: bool
    limit: int
    remaining: int
    retry_after: int


class _Window:
    __slots__ = ("count", "reset_at")

    def __init__(self, reset_at: float):
        self.count = 0
        self.reset_at = reset_at


class RateLimitStore:
    """In-process store. Expired windows are replaced when next read and dropped by ``sweep``."""

    def __init__(self, max_requests: int = AI_RATE_LIMIT_MAX_REQUESTS,
                 window_seconds: int = AI_RATE_LIMIT_WINDOW_SECONDS,
                 clock: Callable[[], float] = time.monotonic):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: Dict[str, _Window] = {}

    def hit(self, key: str) -> RateLimitDecision:
        now = self._clock()
        window = self._windows.get(key)
        if window is None or window.reset_at <= now:
            window = _Window(now + self.window_seconds)
            self._windows[key] = window

        retry_after = max(1, math.ceil(window.reset_at - now))
        if window.count >= self.max_requests:
            return RateLimitDecision(False, self.max_requests, 0, retry_after)

        window.count += 1
        return RateLimitDecision(True, self.max_requests, self.max_requests - window.count, retry_after)

    def sweep(self) -> int:
        """Drops expired windows and returns how many were removed."""
        now = self._clock()
        expired = [key for key, window in self._windows.items() if window.reset_at <= now]
        for key in expired:
            del self._windows[key]
        if expired:
            logging.debug(f"Rate limit sweep removed {len(expired)} expired window(s)")
        return len(expired)

    def __len__(self) -> int:
        return len(self._windows)


class RedisRateLimitStore:
    """Shared store for several app instances; windows expire through redis TTLs."""

    def __init__(self, client: "redis.Redis", max_requests: int = AI_RATE_LIMIT_MAX_REQUESTS,
                 window_seconds: int = AI_RATE_LIMIT_WINDOW_SECONDS, prefix: str = "ratelimit:"):
        self.client = client
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.prefix = prefix

    def hit(self, key: str) -> RateLimitDecision:
        redis_key = f"{self.prefix}{key}"
        try:
            count = self.client.incr(redis_key)
            if count == 1:
                self.client.expire(redis_key, self.window_seconds)
            ttl = self.client.ttl(redis_key)
            if ttl == -1:
                # key lost its expiry; restart the window
                self.client.expire(redis_key, self.window_seconds)
                ttl = self.window_seconds
        except redis.exceptions.RedisError as e:
            # fail open
            logging.error(f"Rate limit store unavailable for key {key}: {e}. Allowing request.")
            return RateLimitDecision(True, self.max_requests, self.max_requests, self.window_seconds)

        retry_after = ttl if ttl and ttl > 0 else self.window_seconds
        if count > self.max_requests:
            return RateLimitDecision(False, self.max_requests, 0, retry_after)
        return RateLimitDecision(True, self.max_requests, self.max_requests - count, retry_after)

    def sweep(self) -> int:
        return 0


def build_rate_limit_store(backend: Optional[str] = None):
    backend = (backend or RATE_LIMIT_BACKEND).lower()
    if backend == "redis":
        logging.info(f"Using redis rate limit store at {REDIS_URL}")
        return RedisRateLimitStore(redis.from_url(REDIS_URL, decode_responses=True))
    return RateLimitStore()


def enforce_rate_limit(store, key: str) -> RateLimitDecision:
    """Counts one request for ``key``; raises RateLimitExceededError when the window is used up."""
    decision = store.hit(key)
    if not decision.allowed:
        logging.info(f"Rate limit exceeded for {key}; retry after {decision.retry_after}s")
        raise RateLimitExceededError(decision.retry_after)
    return decision
