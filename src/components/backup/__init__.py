"""
Backup component - whole-store JSON snapshots.
"""

from ._impl import (
    SNAPSHOT_VERSION,
    BackupError,
    RestoreReport,
    dump_store,
    list_backups,
    prune_backups,
    read_snapshot,
    restore_store,
    write_snapshot,
)

__all__ = [
    "SNAPSHOT_VERSION",
    "BackupError",
    "RestoreReport",
    "dump_store",
    "list_backups",
    "prune_backups",
    "read_snapshot",
    "restore_store",
    "write_snapshot",
]
