from collections.abc import Iterator
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.adapters.clock import FixedClock
from src.adapters.memory_kv import InMemoryKVStore
from src.api import deps
from src.api.auth_utils import ADMIN_COOKIE
from src.app_shell.rate_limit import RateLimiter
from src.rules.loader import load_rules
from src.rules.models import Rules

RULES_PATH = Path(__file__).resolve().parent.parent / "rules.yaml"

ADMIN_TOKEN = "test-admin-token"
ADMIN_PASSWORD = "admin-pass-123"
API_KEY = "test-api-key"
SECRET_KEY = "test-secret-key"


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def store(clock: FixedClock) -> InMemoryKVStore:
    return InMemoryKVStore(clock)


@pytest.fixture
def rules() -> Rules:
    """The real project rules file."""
    return load_rules(RULES_PATH)


@pytest.fixture
def settings(tmp_path: Path) -> deps.Settings:
    s = deps.Settings()
    s.data_dir = tmp_path
    s.db_path = str(tmp_path / "folio.db")
    s.store_backend = "memory"
    s.rules_path = RULES_PATH
    s.admin_auth_token = ADMIN_TOKEN
    s.admin_password = ADMIN_PASSWORD
    s.admin_api_key = API_KEY
    s.secret_key = SECRET_KEY
    s.public_url = ""
    s.env = "test"
    return s


@pytest.fixture
def app(
    settings: deps.Settings, store: InMemoryKVStore, clock: FixedClock, rules: Rules
) -> Iterator[FastAPI]:
    """The application wired to the in-memory store and a fixed clock."""
    from src.api.main import app

    limiter = RateLimiter(rules.rate_limits, clock)
    app.dependency_overrides[deps.get_settings] = lambda: settings
    app.dependency_overrides[deps.get_rules] = lambda: rules
    app.dependency_overrides[deps.get_clock] = lambda: clock
    app.dependency_overrides[deps.get_store] = lambda: store
    app.dependency_overrides[deps.get_rate_limiter] = lambda: limiter
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Anonymous client (no redirects)."""
    return TestClient(app, follow_redirects=False)


@pytest.fixture
def admin_client(app: FastAPI) -> TestClient:
    """Client holding a valid admin cookie."""
    c = TestClient(app, follow_redirects=False)
    c.cookies.set(ADMIN_COOKIE, ADMIN_TOKEN)
    return c
