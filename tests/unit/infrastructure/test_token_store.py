"""
Name: Token Store Tests

Responsibilities:
  - In-memory backend: expiry, counters, bounded size
  - Redis backend: namespacing and TTL handling (client mocked)
  - Backend selection from Settings
"""

from unittest.mock import MagicMock, patch

import pytest
from app.crosscutting.config import Settings
from app.infrastructure.token_store import (
    InMemoryTokenStore,
    RedisTokenStore,
    build_token_store,
)

pytestmark = pytest.mark.unit


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return InMemoryTokenStore(clock=clock)


class TestInMemoryTokenStore:
    def test_set_get_until_expiry(self, store, clock):
        store.set("k", "v", 10)

        assert store.get("k") == "v"
        clock.advance(10)
        assert store.get("k") is None

    def test_incr_starts_window_on_first_hit(self, store, clock):
        assert store.incr("attempts", 60) == 1
        clock.advance(30)
        assert store.incr("attempts", 60) == 2
        assert store.ttl("attempts") == 30

        clock.advance(30)
        assert store.incr("attempts", 60) == 1

    def test_expire_extends_live_key_only(self, store, clock):
        store.set("k", "v", 5)

        assert store.expire("k", 100) is True
        clock.advance(50)
        assert store.get("k") == "v"
        assert store.expire("missing", 10) is False

    def test_delete(self, store):
        store.set("k", "v", 5)
        store.delete("k")
        store.delete("k")

        assert store.get("k") is None

    def test_ttl_of_missing_key(self, store):
        assert store.ttl("nope") is None

    def test_len_excludes_expired(self, store, clock):
        store.set("a", "1", 5)
        store.set("b", "1", 50)
        clock.advance(10)

        assert len(store) == 1

    def test_oldest_entry_evicted_when_full(self, clock):
        store = InMemoryTokenStore(max_entries=2, clock=clock)
        store.set("a", "1", 100)
        store.set("b", "1", 100)
        store.set("c", "1", 100)

        assert store.get("a") is None
        assert store.get("b") == "1"
        assert store.get("c") == "1"

    @pytest.mark.parametrize("ttl", [0, -5])
    def test_non_positive_ttl_rejected(self, store, ttl):
        with pytest.raises(ValueError):
            store.set("k", "v", ttl)

    def test_max_entries_must_be_positive(self):
        with pytest.raises(ValueError):
            InMemoryTokenStore(max_entries=0)


class TestRedisTokenStore:
    @pytest.fixture
    def client(self):
        return MagicMock()

    @pytest.fixture
    def redis_store(self, client):
        return RedisTokenStore(redis_url="", client=client)

    def test_set_uses_setex_with_prefix(self, redis_store, client):
        redis_store.set("jwt-revoked:abc", "1", 30)

        client.setex.assert_called_once_with("logistics:auth:jwt-revoked:abc", 30, "1")

    def test_get_is_namespaced(self, redis_store, client):
        client.get.return_value = "1"

        assert redis_store.get("k") == "1"
        client.get.assert_called_once_with("logistics:auth:k")

    def test_first_incr_sets_window(self, redis_store, client):
        client.incr.return_value = 1
        client.ttl.return_value = -1

        assert redis_store.incr("login-attempts:ip:1.2.3.4", 900) == 1
        client.expire.assert_called_once_with(
            "logistics:auth:login-attempts:ip:1.2.3.4", 900
        )

    def test_later_incr_keeps_window(self, redis_store, client):
        client.incr.return_value = 4
        client.ttl.return_value = 120

        assert redis_store.incr("k", 900) == 4
        client.expire.assert_not_called()

    @pytest.mark.parametrize("raw,expected", [(-2, None), (-1, None), (42, 42)])
    def test_ttl_mapping(self, redis_store, client, raw, expected):
        client.ttl.return_value = raw

        assert redis_store.ttl("k") == expected

    def test_requires_url_without_client(self):
        with pytest.raises(ValueError):
            RedisTokenStore(redis_url="")


class TestBuildTokenStore:
    def test_memory_backend(self):
        settings = Settings(token_store_backend="memory", redis_url="redis://x:6379")

        assert isinstance(build_token_store(settings), InMemoryTokenStore)

    def test_auto_without_redis_url(self):
        settings = Settings(token_store_backend="auto", redis_url="")

        assert isinstance(build_token_store(settings), InMemoryTokenStore)

    def test_auto_with_reachable_redis(self):
        settings = Settings(token_store_backend="auto", redis_url="redis://x:6379")

        with patch("redis.from_url") as from_url:
            from_url.return_value.ping.return_value = True
            store = build_token_store(settings)

        assert isinstance(store, RedisTokenStore)

    def test_unreachable_redis_falls_back_to_memory(self):
        settings = Settings(token_store_backend="redis", redis_url="redis://x:6379")

        with patch("redis.from_url") as from_url:
            from_url.return_value.ping.side_effect = ConnectionError("refused")
            store = build_token_store(settings)

        assert isinstance(store, InMemoryTokenStore)
