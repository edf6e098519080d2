"""
Store snapshots for backup and restore.

A snapshot is one JSON document listing every live key with its structure
type, value and remaining TTL::

    {"version": 1, "createdAt": "...", "entries": [
        {"key": "blog:hello", "type": "string", "value": {...}, "ttl": -1},
        {"key": "family_members", "type": "hash", "value": {...}, "ttl": -1},
        {"key": "blog:tag:ai", "type": "set", "value": ["hello"], "ttl": -1}
    ]}
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from src.core.ports.kv import KVStorePort
from src.domain.timeutil import to_iso

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1
FILE_PREFIX = "backup_"


class BackupError(Exception):
    """Raised for unreadable or incompatible snapshot files."""


@dataclass
class RestoreReport:
    restored: int = 0
    skipped: list[str] = field(default_factory=list)


def dump_store(store: KVStorePort, now: datetime) -> dict[str, Any]:
    """Snapshot every live key in the store."""
    entries: list[dict[str, Any]] = []
    for key in sorted(store.keys("*")):
        key_type = store.key_type(key)
        if key_type == "string":
            value: Any = store.get(key)
        elif key_type == "hash":
            value = store.hgetall(key)
        elif key_type == "set":
            value = sorted(store.smembers(key))
        else:
            # expired between keys() and the read
            continue
        entries.append({"key": key, "type": key_type, "value": value, "ttl": store.ttl(key)})
    return {"version": SNAPSHOT_VERSION, "createdAt": to_iso(now), "entries": entries}


def restore_store(
    store: KVStorePort, snapshot: dict[str, Any], *, clear: bool = False
) -> RestoreReport:
    """
    Write a snapshot back into the store.

    Keys in the snapshot replace whatever the store holds under the same
    name. With ``clear`` every other key is deleted first.
    """
    if snapshot.get("version") != SNAPSHOT_VERSION:
        raise BackupError(f"Unsupported snapshot version: {snapshot.get('version')!r}")
    entries = snapshot.get("entries")
    if not isinstance(entries, list):
        raise BackupError("Snapshot has no entries list")

    if clear:
        existing = store.keys("*")
        if existing:
            store.delete(*existing)

    report = RestoreReport()
    for entry in entries:
        key = entry.get("key") if isinstance(entry, dict) else None
        if not isinstance(key, str):
            report.skipped.append(repr(entry)[:60])
            continue
        key_type = entry.get("type")
        value = entry.get("value")
        store.delete(key)
        if key_type == "string":
            store.set(key, value)
        elif key_type == "hash" and isinstance(value, dict):
            if value:
                store.hset(key, value)
        elif key_type == "set" and isinstance(value, list):
            if value:
                store.sadd(key, *[str(member) for member in value])
        else:
            report.skipped.append(key)
            continue
        ttl = entry.get("ttl")
        if isinstance(ttl, int) and ttl > 0:
            store.expire(key, ttl)
        report.restored += 1

    logger.info("Restored %d keys (%d skipped)", report.restored, len(report.skipped))
    return report


def write_snapshot(snapshot: dict[str, Any], backup_dir: Path, now: datetime) -> Path:
    """Write a snapshot to ``backup_dir/backup_<timestamp>.json``."""
    backup_dir.mkdir(parents=True, exist_ok=True)
    path = backup_dir / f"{FILE_PREFIX}{now.strftime('%Y%m%d_%H%M%S')}.json"
    path.write_text(json.dumps(snapshot, indent=2), encoding="utf-8")
    return path


def read_snapshot(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise BackupError(f"Cannot read snapshot {path}: {e}") from e
    if not isinstance(data, dict):
        raise BackupError(f"Snapshot {path} is not a JSON object")
    return data


def list_backups(backup_dir: Path) -> list[Path]:
    """Backup files, newest first."""
    if not backup_dir.exists():
        return []
    return sorted(backup_dir.glob(f"{FILE_PREFIX}*.json"), key=lambda p: p.name, reverse=True)


def prune_backups(backup_dir: Path, keep: int) -> list[Path]:
    """Delete all but the ``keep`` newest backups; returns the removed paths."""
    removed = list_backups(backup_dir)[keep:]
    for old in removed:
        old.unlink()
        logger.info("Pruned old backup %s", old.name)
    return removed
