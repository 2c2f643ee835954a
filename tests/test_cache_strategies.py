"""Tests for the cache backends."""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
import redis
from pydantic import ValidationError as PydanticValidationError

from bakery_app.cache import MemoryCacheStrategy, RedisCacheStrategy, create_cache_strategy
from bakery_app.cache import memory as memory_module
from bakery_app.core.config import Settings


@pytest.fixture
def clock(monkeypatch):
    state = {"now": 1000.0}
    monkeypatch.setattr(memory_module, "time", SimpleNamespace(monotonic=lambda: state["now"]))
    return state


class TestMemoryCacheStrategy:
    def test_round_trips_json_values(self):
        cache = MemoryCacheStrategy()
        cache.set("products:id:1", {"id": 1, "name": "Croissant", "price": 1.5})
        assert cache.get("products:id:1") == {"id": 1, "name": "Croissant", "price": 1.5}

    def test_miss_returns_none(self):
        assert MemoryCacheStrategy().get("missing") is None

    def test_entry_expires_after_ttl(self, clock):
        cache = MemoryCacheStrategy()
        cache.set("k", [1, 2], ttl=10)
        clock["now"] += 9
        assert cache.get("k") == [1, 2]
        clock["now"] += 2
        assert cache.get("k") is None
        assert cache.keys() == []

    def test_unserializable_value_is_not_stored(self):
        cache = MemoryCacheStrategy()
        cache.set("k", object())
        assert cache.get("k") is None

    def test_delete_is_idempotent(self):
        cache = MemoryCacheStrategy()
        cache.set("k", 1)
        cache.delete("k")
        cache.delete("k")
        assert cache.get("k") is None

    def test_delete_pattern_only_touches_matching_prefix(self):
        cache = MemoryCacheStrategy()
        cache.set("orders:all", [])
        cache.set("orders:user:3", [])
        cache.set("products:all", [])

        assert cache.delete_pattern("orders:*") == 2
        assert cache.keys() == ["products:all"]

    def test_oldest_entry_evicted_when_full(self):
        cache = MemoryCacheStrategy(max_entries=2)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.set("c", 3)
        assert cache.get("a") is None
        assert cache.get("b") == 2
        assert cache.get("c") == 3

    def test_single_entry_capacity_keeps_newest(self):
        cache = MemoryCacheStrategy(max_entries=1)
        cache.set("a", 1)
        cache.set("b", 2)
        assert cache.keys() == ["b"]

    def test_zero_capacity_is_rejected(self):
        with pytest.raises(ValueError):
            MemoryCacheStrategy(max_entries=0)

    def test_settings_reject_zero_capacity(self):
        with pytest.raises(PydanticValidationError):
            Settings(_env_file=None, secret_key="k", cache_max_entries=0)


class TestRedisCacheStrategy:
    def test_get_decodes_json(self):
        client = MagicMock()
        client.get.return_value = '{"id": 5}'
        assert RedisCacheStrategy(client).get("products:id:5") == {"id": 5}

    def test_get_failure_degrades_to_miss(self):
        client = MagicMock()
        client.get.side_effect = redis.ConnectionError("down")
        assert RedisCacheStrategy(client).get("k") is None

    def test_get_invalid_json_degrades_to_miss(self):
        client = MagicMock()
        client.get.return_value = "{not json"
        assert RedisCacheStrategy(client).get("k") is None

    def test_set_uses_setex_with_ttl(self):
        client = MagicMock()
        RedisCacheStrategy(client).set("k", {"a": 1}, ttl=60)
        client.setex.assert_called_once_with("k", 60, '{"a": 1}')

    def test_set_failure_is_swallowed(self):
        client = MagicMock()
        client.setex.side_effect = redis.TimeoutError("slow")
        RedisCacheStrategy(client).set("k", 1)

    def test_delete_pattern_scans_and_deletes(self):
        client = MagicMock()
        client.scan_iter.return_value = iter(["orders:all", "orders:id:1"])
        client.delete.return_value = 2

        assert RedisCacheStrategy(client).delete_pattern("orders:*") == 2
        client.scan_iter.assert_called_once_with(match="orders:*", count=500)
        client.delete.assert_called_once_with("orders:all", "orders:id:1")
        client.keys.assert_not_called()

    def test_delete_pattern_failure_is_swallowed(self):
        client = MagicMock()
        client.scan_iter.side_effect = redis.ConnectionError("down")
        assert RedisCacheStrategy(client).delete_pattern("orders:*") == 0

    def test_is_available_reflects_ping(self):
        client = MagicMock()
        client.ping.return_value = True
        assert RedisCacheStrategy(client).is_available() is True

        client.ping.side_effect = redis.ConnectionError("down")
        assert RedisCacheStrategy(client).is_available() is False


def test_factory_falls_back_to_memory_when_redis_is_down(monkeypatch):
    client = MagicMock()
    client.ping.side_effect = redis.ConnectionError("down")
    monkeypatch.setattr(redis, "from_url", lambda *args, **kwargs: client)

    settings = Settings(_env_file=None, secret_key="x", cache_backend="redis")
    strategy = create_cache_strategy(settings)

    assert isinstance(strategy, MemoryCacheStrategy)
    client.close.assert_called_once()


def test_factory_uses_redis_when_reachable(monkeypatch):
    client = MagicMock()
    client.ping.return_value = True
    monkeypatch.setattr(redis, "from_url", lambda *args, **kwargs: client)

    settings = Settings(_env_file=None, secret_key="x", cache_backend="redis")
    assert isinstance(create_cache_strategy(settings), RedisCacheStrategy)
