import pytest
import redis
from unittest.mock import MagicMock

from planhaus.exceptions import RateLimitExceededError
from planhaus.rate_limit import RateLimitStore, RedisRateLimitStore, enforce_rate_limit


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


class TestRateLimitStore:

    def test_allows_up_to_the_limit_then_blocks(self):
        clock = FakeClock()
        store = RateLimitStore(max_requests=3, window_seconds=60, clock=clock)

        remaining = [store.hit("user:a").remaining for _ in range(3)]
        assert remaining == [2, 1, 0]

        decision = store.hit("user:a")
        assert decision.allowed is False
        assert decision.retry_after == 60

        clock.now += 45
        assert store.hit("user:a").retry_after == 15

    def test_keys_are_independent(self):
        store = RateLimitStore(max_requests=1, window_seconds=60, clock=FakeClock())
        assert store.hit("user:a").allowed
        assert store.hit("user:b").allowed
        assert not store.hit("user:a").allowed

    def test_window_resets_after_expiry(self):
        clock = FakeClock()
        store = RateLimitStore(max_requests=1, window_seconds=60, clock=clock)
        store.hit("user:a")
        clock.now += 60
        decision = store.hit("user:a")
        assert decision.allowed
        assert decision.remaining == 0

    def test_sweep_drops_only_expired_windows(self):
        clock = FakeClock()
        store = RateLimitStore(max_requests=5, window_seconds=60, clock=clock)
        store.hit("user:old")
        clock.now += 30
        store.hit("user:new")
        clock.now += 31

        assert store.sweep() == 1
        assert len(store) == 1
        assert store.hit("user:new").remaining == 3

    def test_separate_stores_do_not_share_counters(self):
        first = RateLimitStore(max_requests=1, window_seconds=60)
        second = RateLimitStore(max_requests=1, window_seconds=60)
        first.hit("user:a")
        assert second.hit("user:a").allowed


def test_enforce_rate_limit_raises_with_retry_after():
    store = RateLimitStore(max_requests=1, window_seconds=300, clock=FakeClock())
    assert enforce_rate_limit(store, "ip:127.0.0.1").remaining == 0
    with pytest.raises(RateLimitExceededError) as excinfo:
        enforce_rate_limit(store, "ip:127.0.0.1")
    assert excinfo.value.retry_after == 300


class TestRedisRateLimitStore:

    def test_counts_with_incr_and_sets_expiry_once(self):
        client = MagicMock()
        client.incr.side_effect = [1, 2, 3]
        client.ttl.return_value = 42
        store = RedisRateLimitStore(client, max_requests=2, window_seconds=60)

        assert store.hit("user:a").remaining == 1
        assert store.hit("user:a").remaining == 0
        blocked = store.hit("user:a")

        assert blocked.allowed is False
        assert blocked.retry_after == 42
        client.expire.assert_called_once_with("ratelimit:user:a", 60)

    def test_fails_open_when_redis_is_down(self):
        client = MagicMock()
        client.incr.side_effect = redis.exceptions.ConnectionError("down")
        store = RedisRateLimitStore(client, max_requests=2, window_seconds=60)
        assert store.hit("user:a").allowed is True

    def test_restores_a_lost_expiry(self):
        client = MagicMock()
        client.incr.side_effect = [1, 2, 3]
        client.expire.side_effect = [redis.exceptions.ConnectionError("blip"), True]
        client.ttl.side_effect = [-1, 60]
        store = RedisRateLimitStore(client, max_requests=2, window_seconds=60)

        assert store.hit("user:a").allowed is True
        second = store.hit("user:a")
        assert (second.allowed, second.retry_after) == (True, 60)
        assert client.expire.call_count == 2
        client.expire.assert_called_with("ratelimit:user:a", 60)

        blocked = store.hit("user:a")
        assert (blocked.allowed, blocked.retry_after) == (False, 60)
