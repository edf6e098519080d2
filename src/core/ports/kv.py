"""
Key-value store interface.

Protocol-based interface over a Redis-like key space. Every module in the
site persists through this port: plain values, hashes (field -> value) and
sets of strings, with optional per-key expiry.

Key requirements:
- Values are JSON-compatible Python values (dict, list, str, int, float, bool, None)
- A key holds exactly one structure type; mixing types raises StoreError
- Expired keys are invisible to every read
- Key patterns use glob syntax (``*``, ``?``, ``[...]``)
"""

from __future__ import annotations

from typing import Any, Literal, Protocol

KeyType = Literal["string", "hash", "set", "none"]


class StoreError(Exception):
    """Raised when the underlying store fails or a key holds the wrong type."""


class KVStorePort(Protocol):
    """Key-value store interface."""

    def ping(self) -> bool:
        """Return True when the store is reachable."""
        ...

    # --- Plain values ---

    def get(self, key: str) -> Any | None:
        """Get a value, or None if the key is missing."""
        ...

    def set(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        """Set a value. Clears any previous expiry unless ttl_seconds is given."""
        ...

    def incr(self, key: str, amount: int = 1) -> int:
        """Increment an integer value. Missing keys start from 0."""
        ...

    # --- Key space ---

    def delete(self, *keys: str) -> int:
        """Delete keys of any type. Returns the number of keys removed."""
        ...

    def exists(self, key: str) -> bool:
        """Check whether a key exists."""
        ...

    def keys(self, pattern: str = "*") -> list[str]:
        """List keys matching a glob pattern."""
        ...

    def key_type(self, key: str) -> KeyType:
        """Return the structure type stored at a key."""
        ...

    def expire(self, key: str, seconds: int) -> bool:
        """Set a time-to-live on an existing key. Returns False if missing."""
        ...

    def ttl(self, key: str) -> int:
        """Seconds to live; -1 when the key has no expiry, -2 when missing."""
        ...

    # --- Hashes ---

    def hget(self, key: str, field: str) -> Any | None:
        """Get one hash field."""
        ...

    def hset(self, key: str, mapping: dict[str, Any]) -> int:
        """Set hash fields. Returns the number of newly created fields."""
        ...

    def hincrby(self, key: str, field: str, amount: int = 1) -> int:
        """Increment an integer hash field. Missing fields start from 0."""
        ...

    def hdel(self, key: str, *fields: str) -> int:
        """Delete hash fields. Returns the number removed."""
        ...

    def hgetall(self, key: str) -> dict[str, Any]:
        """Get every field of a hash (empty dict when missing)."""
        ...

    # --- Sets ---

    def sadd(self, key: str, *members: str) -> int:
        """Add set members. Returns the number newly added."""
        ...

    def srem(self, key: str, *members: str) -> int:
        """Remove set members. Returns the number removed."""
        ...

    def smembers(self, key: str) -> set[str]:
        """Get every member of a set (empty set when missing)."""
        ...
