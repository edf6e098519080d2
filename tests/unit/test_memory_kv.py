"""
Unit tests for InMemoryKVStore.

Covers the value types, wrong-type errors and clock-driven expiry.
"""

import pytest

from src.adapters.clock import FixedClock
from src.adapters.memory_kv import InMemoryKVStore
from src.core.ports.kv import StoreError


@pytest.fixture
def kv(clock: FixedClock) -> InMemoryKVStore:
    return InMemoryKVStore(clock)


class TestStrings:
    def test_set_and_get_json_values(self, kv: InMemoryKVStore) -> None:
        kv.set("doc", {"a": [1, 2], "b": None})
        assert kv.get("doc") == {"a": [1, 2], "b": None}

    def test_missing_key_is_none(self, kv: InMemoryKVStore) -> None:
        assert kv.get("nope") is None
        assert kv.exists("nope") is False

    def test_returned_values_are_copies(self, kv: InMemoryKVStore) -> None:
        kv.set("doc", {"items": [1]})
        kv.get("doc")["items"].append(2)
        assert kv.get("doc") == {"items": [1]}

    def test_incr_starts_at_zero(self, kv: InMemoryKVStore) -> None:
        assert kv.incr("counter") == 1
        assert kv.incr("counter", 5) == 6

    def test_incr_non_integer_raises(self, kv: InMemoryKVStore) -> None:
        kv.set("name", "alice")
        with pytest.raises(StoreError):
            kv.incr("name")

    def test_unserializable_value_raises(self, kv: InMemoryKVStore) -> None:
        with pytest.raises(StoreError):
            kv.set("bad", object())

    def test_delete_counts_removed_keys(self, kv: InMemoryKVStore) -> None:
        kv.set("a", 1)
        kv.hset("b", {"f": 1})
        assert kv.delete("a", "b", "c") == 2
        assert kv.keys() == []


class TestHashesAndSets:
    def test_hset_reports_new_fields(self, kv: InMemoryKVStore) -> None:
        assert kv.hset("h", {"a": 1, "b": 2}) == 2
        assert kv.hset("h", {"a": 3, "c": 4}) == 1
        assert kv.hgetall("h") == {"a": 3, "b": 2, "c": 4}
        assert kv.hget("h", "a") == 3

    def test_hdel_last_field_removes_key(self, kv: InMemoryKVStore) -> None:
        kv.hset("h", {"a": 1})
        assert kv.hdel("h", "a", "zzz") == 1
        assert kv.exists("h") is False

    def test_hincrby(self, kv: InMemoryKVStore) -> None:
        assert kv.hincrby("views", "s1") == 1
        assert kv.hincrby("views", "s1", 2) == 3

    def test_sets(self, kv: InMemoryKVStore) -> None:
        assert kv.sadd("s", "a", "b", "a") == 2
        assert kv.smembers("s") == {"a", "b"}
        assert kv.srem("s", "a", "x") == 1
        assert kv.smembers("s") == {"b"}

    def test_wrong_type_raises(self, kv: InMemoryKVStore) -> None:
        kv.set("plain", "value")
        with pytest.raises(StoreError):
            kv.hset("plain", {"f": 1})
        with pytest.raises(StoreError):
            kv.smembers("plain")

    def test_key_type(self, kv: InMemoryKVStore) -> None:
        kv.set("s", 1)
        kv.hset("h", {"f": 1})
        kv.sadd("t", "m")
        assert [kv.key_type(k) for k in ("s", "h", "t", "x")] == [
            "string",
            "hash",
            "set",
            "none",
        ]

    def test_keys_glob(self, kv: InMemoryKVStore) -> None:
        kv.set("url:abc", "x")
        kv.set("url:def", "y")
        kv.set("clicks:abc", 1)
        assert kv.keys("url:*") == ["url:abc", "url:def"]
        assert kv.keys("*:abc") == ["clicks:abc", "url:abc"]


class TestExpiry:
    def test_ttl_values(self, kv: InMemoryKVStore) -> None:
        kv.set("forever", 1)
        kv.set("short", 1, ttl_seconds=30)
        assert kv.ttl("forever") == -1
        assert kv.ttl("short") == 30
        assert kv.ttl("missing") == -2

    def test_expired_key_is_invisible(self, kv: InMemoryKVStore, clock: FixedClock) -> None:
        kv.set("session", {"u": "alice"}, ttl_seconds=60)
        clock.advance(seconds=59)
        assert kv.get("session") == {"u": "alice"}
        clock.advance(seconds=1)
        assert kv.get("session") is None
        assert kv.exists("session") is False
        assert kv.keys("*") == []
        assert kv.ttl("session") == -2

    def test_expire_applies_to_hashes(self, kv: InMemoryKVStore, clock: FixedClock) -> None:
        kv.hset("h", {"f": 1})
        assert kv.expire("h", 10) is True
        clock.advance(seconds=10)
        assert kv.hgetall("h") == {}

    def test_expire_missing_key(self, kv: InMemoryKVStore) -> None:
        assert kv.expire("nothing", 10) is False

    def test_set_clears_previous_ttl(self, kv: InMemoryKVStore, clock: FixedClock) -> None:
        kv.set("k", 1, ttl_seconds=5)
        kv.set("k", 2)
        clock.advance(seconds=10)
        assert kv.get("k") == 2
