"""
In-memory key-value store.

Dict-backed implementation of KVStorePort used in development and tests.
Values are stored JSON-encoded so callers never share mutable state with
the store, matching what a networked store would hand back.
"""

from __future__ import annotations

import json
from datetime import datetime, timedelta
from fnmatch import fnmatchcase
from threading import RLock
from typing import Any

from src.adapters.clock import SystemClock
from src.core.ports.kv import KeyType, StoreError
from src.core.ports.time import TimePort


def _encode(value: Any) -> str:
    try:
        return json.dumps(value)
    except (TypeError, ValueError) as e:
        raise StoreError(f"Value is not JSON serializable: {e}") from e


def _decode(raw: str) -> Any:
    return json.loads(raw)


class InMemoryKVStore:
    def __init__(self, clock: TimePort | None = None) -> None:
        self._clock = clock if clock is not None else SystemClock()
        self._strings: dict[str, str] = {}
        self._hashes: dict[str, dict[str, str]] = {}
        self._sets: dict[str, set[str]] = {}
        self._expires: dict[str, datetime] = {}
        self._lock = RLock()

    # --- Internal helpers ---

    def _purge(self, key: str) -> None:
        expires_at = self._expires.get(key)
        if expires_at is not None and expires_at <= self._clock.now_utc():
            self._drop(key)

    def _drop(self, key: str) -> bool:
        found = False
        for space in (self._strings, self._hashes, self._sets):
            if key in space:
                del space[key]
                found = True
        self._expires.pop(key, None)
        return found

    def _type(self, key: str) -> KeyType:
        self._purge(key)
        if key in self._strings:
            return "string"
        if key in self._hashes:
            return "hash"
        if key in self._sets:
            return "set"
        return "none"

    def _require(self, key: str, expected: KeyType) -> None:
        actual = self._type(key)
        if actual not in ("none", expected):
            raise StoreError(f"WRONGTYPE key '{key}' holds a {actual}, not a {expected}")

    # --- Port implementation ---

    def ping(self) -> bool:
        return True

    def get(self, key: str) -> Any | None:
        with self._lock:
            self._require(key, "string")
            raw = self._strings.get(key)
            return _decode(raw) if raw is not None else None

    def set(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        encoded = _encode(value)
        with self._lock:
            self._drop(key)
            self._strings[key] = encoded
            if ttl_seconds is not None and ttl_seconds > 0:
                self._expires[key] = self._clock.now_utc() + timedelta(seconds=ttl_seconds)

    def incr(self, key: str, amount: int = 1) -> int:
        with self._lock:
            self._require(key, "string")
            raw = self._strings.get(key)
            current = _decode(raw) if raw is not None else 0
            try:
                new_value = int(current) + amount
            except (TypeError, ValueError) as e:
                raise StoreError(f"Value at '{key}' is not an integer") from e
            self._strings[key] = _encode(new_value)
            return new_value

    def delete(self, *keys: str) -> int:
        with self._lock:
            removed = 0
            for key in keys:
                self._purge(key)
                if self._drop(key):
                    removed += 1
            return removed

    def exists(self, key: str) -> bool:
        with self._lock:
            return self._type(key) != "none"

    def keys(self, pattern: str = "*") -> list[str]:
        with self._lock:
            candidates = set(self._strings) | set(self._hashes) | set(self._sets)
            for key in list(candidates):
                self._purge(key)
            live = set(self._strings) | set(self._hashes) | set(self._sets)
            return sorted(k for k in live if fnmatchcase(k, pattern))

    def key_type(self, key: str) -> KeyType:
        with self._lock:
            return self._type(key)

    def expire(self, key: str, seconds: int) -> bool:
        with self._lock:
            if self._type(key) == "none":
                return False
            if seconds <= 0:
                self._drop(key)
                return True
            self._expires[key] = self._clock.now_utc() + timedelta(seconds=seconds)
            return True

    def ttl(self, key: str) -> int:
        with self._lock:
            if self._type(key) == "none":
                return -2
            expires_at = self._expires.get(key)
            if expires_at is None:
                return -1
            return max(0, int((expires_at - self._clock.now_utc()).total_seconds()))

    def hget(self, key: str, field: str) -> Any | None:
        with self._lock:
            self._require(key, "hash")
            raw = self._hashes.get(key, {}).get(field)
            return _decode(raw) if raw is not None else None

    def hset(self, key: str, mapping: dict[str, Any]) -> int:
        encoded = {str(f): _encode(v) for f, v in mapping.items()}
        with self._lock:
            self._require(key, "hash")
            bucket = self._hashes.setdefault(key, {})
            created = sum(1 for f in encoded if f not in bucket)
            bucket.update(encoded)
            return created

    def hincrby(self, key: str, field: str, amount: int = 1) -> int:
        with self._lock:
            self._require(key, "hash")
            bucket = self._hashes.setdefault(key, {})
            raw = bucket.get(field)
            current = _decode(raw) if raw is not None else 0
            try:
                new_value = int(current) + amount
            except (TypeError, ValueError) as e:
                raise StoreError(f"Hash field '{field}' at '{key}' is not an integer") from e
            bucket[field] = _encode(new_value)
            return new_value

    def hdel(self, key: str, *fields: str) -> int:
        with self._lock:
            self._require(key, "hash")
            bucket = self._hashes.get(key)
            if not bucket:
                return 0
            removed = 0
            for f in fields:
                if f in bucket:
                    del bucket[f]
                    removed += 1
            if not bucket:
                self._drop(key)
            return removed

    def hgetall(self, key: str) -> dict[str, Any]:
        with self._lock:
            self._require(key, "hash")
            return {f: _decode(raw) for f, raw in self._hashes.get(key, {}).items()}

    def sadd(self, key: str, *members: str) -> int:
        with self._lock:
            self._require(key, "set")
            bucket = self._sets.setdefault(key, set())
            added = sum(1 for m in set(members) if m not in bucket)
            bucket.update(members)
            return added

    def srem(self, key: str, *members: str) -> int:
        with self._lock:
            self._require(key, "set")
            bucket = self._sets.get(key)
            if not bucket:
                return 0
            removed = sum(1 for m in set(members) if m in bucket)
            bucket.difference_update(members)
            if not bucket:
                self._drop(key)
            return removed

    def smembers(self, key: str) -> set[str]:
        with self._lock:
            self._require(key, "set")
            return set(self._sets.get(key, set()))
