import argparse
import logging
import sys
from pathlib import Path

import uvicorn

from src.adapters.clock import SystemClock
from src.api.deps import Settings, build_store
from src.components.admin_dashboard import AdminSectionService
from src.components.backup import (
    BackupError,
    dump_store,
    list_backups,
    prune_backups,
    read_snapshot,
    restore_store,
    write_snapshot,
)
from src.components.shortener import ShortenerService
from src.core.ports.kv import KVStorePort
from src.core.ports.time import TimePort
from src.rules.loader import load_rules
from src.rules.models import Rules

logger = logging.getLogger("cli")


def get_rules(settings: Settings) -> Rules:
    if not settings.rules_path.exists():
        logger.error("Rules file %s not found.", settings.rules_path)
        sys.exit(1)
    return load_rules(settings.rules_path)


def backup_dir_for(settings: Settings, rules: Rules) -> Path:
    return settings.data_dir / rules.ops.backups.backup_dir_name


def handle_backup(store: KVStorePort, clock: TimePort, rules: Rules, backup_dir: Path) -> Path:
    now = clock.now_utc()
    snapshot = dump_store(store, now)
    path = write_snapshot(snapshot, backup_dir, now)
    print(f"Backup created: {path} ({len(snapshot['entries'])} keys)")
    for old in prune_backups(backup_dir, rules.ops.backups.retention_count):
        print(f"Pruned old backup: {old.name}")
    return path


def handle_restore(store: KVStorePort, backup_dir: Path, args: argparse.Namespace) -> None:
    if args.list:
        print("Available Backups:")
        for b in list_backups(backup_dir):
            print(f" - {b.name} ({b.stat().st_size} bytes)")
        return

    target = None
    if args.latest:
        backups = list_backups(backup_dir)
        if not backups:
            logger.error("No backups found in %s.", backup_dir)
            sys.exit(1)
        target = backups[0]
    elif args.file:
        target = Path(args.file)
        if not target.exists():
            logger.error("File %s not found.", target)
            sys.exit(1)

    if target is None:
        logger.error("Specify --latest or --file <path>.")
        sys.exit(1)

    print(f"Restoring from {target}...")
    try:
        report = restore_store(store, read_snapshot(target), clear=args.clear)
    except BackupError as e:
        logger.error("Restore failed: %s", e)
        sys.exit(1)
    print(f"Restore complete: {report.restored} keys restored.")
    for key in report.skipped:
        print(f"Skipped: {key}")


def handle_init_sections(store: KVStorePort, clock: TimePort) -> None:
    report = AdminSectionService(store, clock).initialize_defaults()
    print(
        f"Sections initialized: {report.created} created, {report.realigned} realigned, "
        f"{report.duplicates_removed} duplicates removed."
    )


def handle_migrate_links(store: KVStorePort, clock: TimePort, rules: Rules) -> None:
    report = ShortenerService(store, clock, rules.shortener).migrate_indexes()
    print(f"Migrated {report.migrated} short links.")
    for error in report.errors:
        print(f"Error: {error}")


def handle_serve(args: argparse.Namespace) -> None:
    logger.info("Serving on %s:%s", args.host, args.port)
    uvicorn.run("src.api.main:app", host=args.host, port=args.port, reload=args.reload)


def main(argv: list[str] | None = None) -> None:
    logging.basicConfig(level=logging.INFO)

    parser = argparse.ArgumentParser(description="Folio CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # backup
    subparsers.add_parser("backup", help="Write a JSON snapshot of the store")

    # restore
    restore_parser = subparsers.add_parser("restore", help="Restore from backup")
    restore_parser.add_argument("--list", action="store_true", help="List available backups")
    restore_parser.add_argument("--latest", action="store_true", help="Restore most recent backup")
    restore_parser.add_argument("--file", help="Path to a backup JSON file")
    restore_parser.add_argument(
        "--clear", action="store_true", help="Delete keys missing from the backup"
    )

    # init-sections
    subparsers.add_parser("init-sections", help="Seed the default admin dashboard sections")

    # migrate-links
    subparsers.add_parser("migrate-links", help="Rebuild the short link reverse indexes")

    # serve
    serve_parser = subparsers.add_parser("serve", help="Run the API with uvicorn")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to bind")
    serve_parser.add_argument("--reload", action="store_true", help="Reload on code changes")

    args = parser.parse_args(argv)

    if args.command == "serve":
        handle_serve(args)
        return

    settings = Settings()
    rules = get_rules(settings)
    clock = SystemClock()
    store = build_store(settings, clock)

    if args.command == "backup":
        handle_backup(store, clock, rules, backup_dir_for(settings, rules))
    elif args.command == "restore":
        handle_restore(store, backup_dir_for(settings, rules), args)
    elif args.command == "init-sections":
        handle_init_sections(store, clock)
    elif args.command == "migrate-links":
        handle_migrate_links(store, clock, rules)


if __name__ == "__main__":
    main()
