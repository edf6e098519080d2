from __future__ import annotations

import json
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from fnmatch import fnmatchcase
from typing import Any

from src.adapters.clock import SystemClock
from src.core.ports.kv import KeyType, StoreError
from src.core.ports.time import TimePort

SCHEMA = """
CREATE TABLE IF NOT EXISTS kv_strings (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS kv_hashes (
    key TEXT NOT NULL,
    field TEXT NOT NULL,
    value TEXT NOT NULL,
    PRIMARY KEY (key, field)
);
CREATE TABLE IF NOT EXISTS kv_sets (
    key TEXT NOT NULL,
    member TEXT NOT NULL,
    PRIMARY KEY (key, member)
);
CREATE TABLE IF NOT EXISTS kv_expiry (
    key TEXT PRIMARY KEY,
    expires_at REAL NOT NULL
);
"""

_TABLES = ("kv_strings", "kv_hashes", "kv_sets", "kv_expiry")


class SQLiteKVStore:
    """KVStorePort backed by a single SQLite file.

    Expiry is lazy: every operation first removes keys whose deadline has
    passed, so expired data is never returned.
    """

    def __init__(self, db_path: str, clock: TimePort | None = None):
        self.db_path = db_path
        self._clock = clock if clock is not None else SystemClock()
        with self._tx() as conn:
            conn.executescript(SCHEMA)

    @contextmanager
    def _tx(self) -> Iterator[sqlite3.Connection]:
        try:
            conn = sqlite3.connect(self.db_path)
        except sqlite3.Error as e:
            raise StoreError(f"Cannot open store at {self.db_path}: {e}") from e
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise StoreError(str(e)) from e
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _now(self) -> float:
        return self._clock.now_utc().timestamp()

    def _purge_expired(self, conn: sqlite3.Connection) -> None:
        rows = conn.execute(
            "SELECT key FROM kv_expiry WHERE expires_at <= ?", (self._now(),)
        ).fetchall()
        for (key,) in rows:
            self._drop(conn, key)

    def _drop(self, conn: sqlite3.Connection, key: str) -> bool:
        found = False
        for table in _TABLES:
            cur = conn.execute(f"DELETE FROM {table} WHERE key = ?", (key,))
            if table != "kv_expiry" and cur.rowcount > 0:
                found = True
        return found

    def _type(self, conn: sqlite3.Connection, key: str) -> KeyType:
        if conn.execute("SELECT 1 FROM kv_strings WHERE key = ?", (key,)).fetchone():
            return "string"
        if conn.execute("SELECT 1 FROM kv_hashes WHERE key = ? LIMIT 1", (key,)).fetchone():
            return "hash"
        if conn.execute("SELECT 1 FROM kv_sets WHERE key = ? LIMIT 1", (key,)).fetchone():
            return "set"
        return "none"

    def _require(self, conn: sqlite3.Connection, key: str, expected: KeyType) -> None:
        actual = self._type(conn, key)
        if actual not in ("none", expected):
            raise StoreError(f"WRONGTYPE key '{key}' holds a {actual}, not a {expected}")

    @staticmethod
    def _encode(value: Any) -> str:
        try:
            return json.dumps(value)
        except (TypeError, ValueError) as e:
            raise StoreError(f"Value is not JSON serializable: {e}") from e

    # --- Port implementation ---

    def ping(self) -> bool:
        try:
            with self._tx() as conn:
                conn.execute("SELECT 1").fetchone()
            return True
        except StoreError:
            return False

    def get(self, key: str) -> Any | None:
        with self._tx() as conn:
            self._purge_expired(conn)
            self._require(conn, key, "string")
            row = conn.execute("SELECT value FROM kv_strings WHERE key = ?", (key,)).fetchone()
            return json.loads(row[0]) if row else None

    def set(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        encoded = self._encode(value)
        with self._tx() as conn:
            self._drop(conn, key)
            conn.execute("INSERT INTO kv_strings (key, value) VALUES (?, ?)", (key, encoded))
            if ttl_seconds is not None and ttl_seconds > 0:
                conn.execute(
                    "INSERT INTO kv_expiry (key, expires_at) VALUES (?, ?)",
                    (key, self._now() + ttl_seconds),
                )

    def incr(self, key: str, amount: int = 1) -> int:
        with self._tx() as conn:
            self._purge_expired(conn)
            self._require(conn, key, "string")
            row = conn.execute("SELECT value FROM kv_strings WHERE key = ?", (key,)).fetchone()
            current = json.loads(row[0]) if row else 0
            try:
                new_value = int(current) + amount
            except (TypeError, ValueError) as e:
                raise StoreError(f"Value at '{key}' is not an integer") from e
            conn.execute(
                """
                INSERT INTO kv_strings (key, value) VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET value=excluded.value
                """,
                (key, json.dumps(new_value)),
            )
            return new_value

    def delete(self, *keys: str) -> int:
        with self._tx() as conn:
            self._purge_expired(conn)
            return sum(1 for key in keys if self._drop(conn, key))

    def exists(self, key: str) -> bool:
        with self._tx() as conn:
            self._purge_expired(conn)
            return self._type(conn, key) != "none"

    def keys(self, pattern: str = "*") -> list[str]:
        with self._tx() as conn:
            self._purge_expired(conn)
            rows = conn.execute(
                """
                SELECT key FROM kv_strings
                UNION SELECT key FROM kv_hashes
                UNION SELECT key FROM kv_sets
                """
            ).fetchall()
            return sorted(key for (key,) in rows if fnmatchcase(key, pattern))

    def key_type(self, key: str) -> KeyType:
        with self._tx() as conn:
            self._purge_expired(conn)
            return self._type(conn, key)

    def expire(self, key: str, seconds: int) -> bool:
        with self._tx() as conn:
            self._purge_expired(conn)
            if self._type(conn, key) == "none":
                return False
            if seconds <= 0:
                self._drop(conn, key)
                return True
            conn.execute(
                """
                INSERT INTO kv_expiry (key, expires_at) VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET expires_at=excluded.expires_at
                """,
                (key, self._now() + seconds),
            )
            return True

    def ttl(self, key: str) -> int:
        with self._tx() as conn:
            self._purge_expired(conn)
            if self._type(conn, key) == "none":
                return -2
            row = conn.execute(
                "SELECT expires_at FROM kv_expiry WHERE key = ?", (key,)
            ).fetchone()
            if not row:
                return -1
            return max(0, int(row[0] - self._now()))

    def hget(self, key: str, field: str) -> Any | None:
        with self._tx() as conn:
            self._purge_expired(conn)
            self._require(conn, key, "hash")
            row = conn.execute(
                "SELECT value FROM kv_hashes WHERE key = ? AND field = ?", (key, field)
            ).fetchone()
            return json.loads(row[0]) if row else None

    def hset(self, key: str, mapping: dict[str, Any]) -> int:
        encoded = {str(f): self._encode(v) for f, v in mapping.items()}
        with self._tx() as conn:
            self._purge_expired(conn)
            self._require(conn, key, "hash")
            created = 0
            for field, value in encoded.items():
                exists = conn.execute(
                    "SELECT 1 FROM kv_hashes WHERE key = ? AND field = ?", (key, field)
                ).fetchone()
                if not exists:
                    created += 1
                conn.execute(
                    """
                    INSERT INTO kv_hashes (key, field, value) VALUES (?, ?, ?)
                    ON CONFLICT(key, field) DO UPDATE SET value=excluded.value
                    """,
                    (key, field, value),
                )
            return created

    def hincrby(self, key: str, field: str, amount: int = 1) -> int:
        with self._tx() as conn:
            self._purge_expired(conn)
            self._require(conn, key, "hash")
            row = conn.execute(
                "SELECT value FROM kv_hashes WHERE key = ? AND field = ?", (key, field)
            ).fetchone()
            current = json.loads(row[0]) if row else 0
            try:
                new_value = int(current) + amount
            except (TypeError, ValueError) as e:
                raise StoreError(f"Hash field '{field}' at '{key}' is not an integer") from e
            conn.execute(
                """
                INSERT INTO kv_hashes (key, field, value) VALUES (?, ?, ?)
                ON CONFLICT(key, field) DO UPDATE SET value=excluded.value
                """,
                (key, field, json.dumps(new_value)),
            )
            return new_value

    def hdel(self, key: str, *fields: str) -> int:
        with self._tx() as conn:
            self._purge_expired(conn)
            self._require(conn, key, "hash")
            removed = 0
            for field in fields:
                cur = conn.execute(
                    "DELETE FROM kv_hashes WHERE key = ? AND field = ?", (key, field)
                )
                removed += cur.rowcount
            if self._type(conn, key) == "none":
                conn.execute("DELETE FROM kv_expiry WHERE key = ?", (key,))
            return removed

    def hgetall(self, key: str) -> dict[str, Any]:
        with self._tx() as conn:
            self._purge_expired(conn)
            self._require(conn, key, "hash")
            rows = conn.execute(
                "SELECT field, value FROM kv_hashes WHERE key = ?", (key,)
            ).fetchall()
            return {field: json.loads(value) for field, value in rows}

    def sadd(self, key: str, *members: str) -> int:
        with self._tx() as conn:
            self._purge_expired(conn)
            self._require(conn, key, "set")
            added = 0
            for member in set(members):
                cur = conn.execute(
                    "INSERT OR IGNORE INTO kv_sets (key, member) VALUES (?, ?)", (key, member)
                )
                added += cur.rowcount
            return added

    def srem(self, key: str, *members: str) -> int:
        with self._tx() as conn:
            self._purge_expired(conn)
            self._require(conn, key, "set")
            removed = 0
            for member in set(members):
                cur = conn.execute(
                    "DELETE FROM kv_sets WHERE key = ? AND member = ?", (key, member)
                )
                removed += cur.rowcount
            if self._type(conn, key) == "none":
                conn.execute("DELETE FROM kv_expiry WHERE key = ?", (key,))
            return removed

    def smembers(self, key: str) -> set[str]:
        with self._tx() as conn:
            self._purge_expired(conn)
            self._require(conn, key, "set")
            rows = conn.execute("SELECT member FROM kv_sets WHERE key = ?", (key,)).fetchall()
            return {member for (member,) in rows}
