import os
import shutil
import subprocess
import sys
from pathlib import Path

import pytest

from src.adapters.sqlite.kv_store import SQLiteKVStore

# Paths relative to project root
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


@pytest.fixture
def test_env(tmp_path):
    """
    Sets up a temporary environment with:
    - rules.yaml (copied)
    - a SQLite store under data/ holding a few keys
    """
    shutil.copy(PROJECT_ROOT / "rules.yaml", tmp_path / "rules.yaml")

    data_dir = tmp_path / "data"
    data_dir.mkdir()
    store = SQLiteKVStore(str(data_dir / "folio.db"))
    store.set("profile:main", {"name": "Folio Owner"})
    store.hset("family_members", {"asha": {"username": "asha", "role": "user"}})
    store.sadd("blog:tag:python", "blog_1")

    # Environment for subprocess
    env = os.environ.copy()
    env["PYTHONPATH"] = str(PROJECT_ROOT)
    env["FOLIO_DATA_DIR"] = str(data_dir)
    env["FOLIO_STORE"] = "sqlite"

    return tmp_path, env


def run_cli(cwd: Path, env: dict[str, str], *args: str) -> subprocess.CompletedProcess[str]:
    return subprocess.run(
        [sys.executable, "-m", "src.app_shell.cli", *args],
        cwd=cwd,
        env=env,
        capture_output=True,
        text=True,
    )


def test_backup_and_restore_cycle(test_env):
    tmp_path, env = test_env
    data_dir = tmp_path / "data"

    # 1. Run Backup
    result = run_cli(tmp_path, env, "backup")
    assert result.returncode == 0, result.stderr
    assert "Backup created" in result.stdout

    backups = list((data_dir / "backups").glob("backup_*.json"))
    assert len(backups) == 1

    # 2. Simulate Disaster (lose the database)
    (data_dir / "folio.db").unlink()

    # 3. Run Restore
    result = run_cli(tmp_path, env, "restore", "--latest")
    assert result.returncode == 0, result.stderr
    assert "Restore complete: 3 keys restored." in result.stdout

    # 4. Verify Data Restored
    store = SQLiteKVStore(str(data_dir / "folio.db"))
    assert store.get("profile:main") == {"name": "Folio Owner"}
    assert store.hget("family_members", "asha") == {"username": "asha", "role": "user"}
    assert store.smembers("blog:tag:python") == {"blog_1"}


def test_restore_list_and_missing_file(test_env):
    tmp_path, env = test_env

    run_cli(tmp_path, env, "backup")
    listing = run_cli(tmp_path, env, "restore", "--list")
    assert listing.returncode == 0
    assert "backup_" in listing.stdout

    missing = run_cli(tmp_path, env, "restore", "--file", str(tmp_path / "nope.json"))
    assert missing.returncode == 1

    no_target = run_cli(tmp_path, env, "restore")
    assert no_target.returncode == 1


def test_init_sections_command(test_env):
    tmp_path, env = test_env

    result = run_cli(tmp_path, env, "init-sections")

    assert result.returncode == 0, result.stderr
    assert "Sections initialized" in result.stdout
    store = SQLiteKVStore(str(tmp_path / "data" / "folio.db"))
    assert store.hgetall("admin:sections")


def test_migrate_links_command(test_env):
    tmp_path, env = test_env
    store = SQLiteKVStore(str(tmp_path / "data" / "folio.db"))
    store.set("url:abc123", "HTTPS://www.Example.com/")
    store.set("created:abc123", "2024-01-01T00:00:00.000Z")

    result = run_cli(tmp_path, env, "migrate-links")

    assert result.returncode == 0, result.stderr
    assert "Migrated 1 short links." in result.stdout
    assert store.get("original:https://example.com/") == "abc123"
