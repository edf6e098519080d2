"""
Dependency wiring: store selection, error mapping and the store error handler.
"""

from dataclasses import dataclass
from pathlib import Path

import pytest
from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient

from src.adapters.clock import FixedClock
from src.adapters.memory_kv import InMemoryKVStore
from src.adapters.sqlite.kv_store import SQLiteKVStore
from src.api import deps
from src.core.ports.kv import StoreError


@dataclass(frozen=True)
class FakeError:
    code: str
    message: str = "boom"
    field: str | None = None


class TestBuildStore:
    def test_memory(self, settings: deps.Settings, clock: FixedClock):
        assert isinstance(deps.build_store(settings, clock), InMemoryKVStore)

    def test_sqlite_creates_data_dir(self, settings: deps.Settings, clock: FixedClock, tmp_path):
        settings.store_backend = "sqlite"
        settings.data_dir = tmp_path / "nested" / "data"
        settings.db_path = str(settings.data_dir / "folio.db")

        store = deps.build_store(settings, clock)

        assert isinstance(store, SQLiteKVStore)
        assert Path(settings.db_path).exists()

    def test_unknown_backend(self, settings: deps.Settings, clock: FixedClock):
        settings.store_backend = "redis"
        with pytest.raises(ValueError, match="redis"):
            deps.build_store(settings, clock)


def test_settings_read_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    monkeypatch.setenv("FOLIO_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("FOLIO_STORE", "MEMORY")
    monkeypatch.setenv("FOLIO_PUBLIC_URL", "https://folio.example.com/")
    monkeypatch.setenv("FOLIO_ENV", "production")

    settings = deps.Settings()

    assert settings.db_path == str(tmp_path / "folio.db")
    assert settings.store_backend == "memory"
    assert settings.public_url == "https://folio.example.com"
    assert settings.is_production is True


@pytest.mark.parametrize(
    ("code", "status"),
    [
        ("not_found", 404),
        ("slug_exists", 409),
        ("invalid_credentials", 401),
        ("not_configured", 503),
        ("title_required", 400),
    ],
)
def test_raise_for_errors_status(code: str, status: int):
    with pytest.raises(HTTPException) as exc_info:
        deps.raise_for_errors([FakeError(code=code, field="title")])

    assert exc_info.value.status_code == status
    assert exc_info.value.detail == [{"code": code, "message": "boom", "field": "title"}]


def test_raise_for_errors_override():
    with pytest.raises(HTTPException) as exc_info:
        deps.raise_for_errors([FakeError(code="duplicate")], {"duplicate": 409})
    assert exc_info.value.status_code == 409


class BrokenStore(InMemoryKVStore):
    def hgetall(self, key: str):
        raise StoreError("disk on fire")


def test_store_errors_become_500(app: FastAPI, clock: FixedClock):
    app.dependency_overrides[deps.get_store] = lambda: BrokenStore(clock)
    client = TestClient(app)

    response = client.get("/api/blogs")

    assert response.status_code == 500
    assert response.json() == {"error": "Storage error"}


def test_admin_login_refused_without_token(client: TestClient, settings: deps.Settings):
    settings.admin_auth_token = ""

    response = client.post("/api/admin/login", json={"password": "admin-pass-123"})
    assert response.status_code == 503
