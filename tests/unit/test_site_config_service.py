"""
Unit tests for the profile and footer documents.
"""

import pytest

from src.adapters.clock import FixedClock
from src.adapters.memory_kv import InMemoryKVStore
from src.components.site_config import DEFAULT_FOOTER, FooterService, ProfileService


@pytest.fixture
def profiles(store: InMemoryKVStore, clock: FixedClock) -> ProfileService:
    return ProfileService(store, clock)


@pytest.fixture
def footer(store: InMemoryKVStore) -> FooterService:
    return FooterService(store)


def test_save_stamps_last_updated(profiles: ProfileService):
    saved = profiles.save({"name": "Ada", "bio": "Lawyer"})

    assert saved["lastUpdated"] == "2025-01-01T12:00:00.000Z"
    assert profiles.load()["name"] == "Ada"


def test_load_missing_profile(profiles: ProfileService, store: InMemoryKVStore):
    assert profiles.load() is None
    store.set("profile:main", "not json")
    assert profiles.load() is None


def test_save_preserves_admin_password_hash(profiles: ProfileService):
    profiles.set_admin_password_hash("abc123")

    profiles.save({"name": "Ada", "adminPassword": "attacker-hash"})

    assert profiles.admin_password_hash() == "abc123"
    assert "adminPassword" not in profiles.public_view(profiles.load())


def test_set_admin_password_keeps_profile(profiles: ProfileService):
    profiles.save({"name": "Ada"})
    profiles.set_admin_password_hash("abc123")
    assert profiles.load()["name"] == "Ada"


def test_delete_profile(profiles: ProfileService):
    assert profiles.delete() is False
    profiles.save({"name": "Ada"})
    assert profiles.delete() is True


def test_backups(profiles: ProfileService, clock: FixedClock, store: InMemoryKVStore):
    assert profiles.create_backup("weekly") is None

    profiles.save({"name": "Ada"})
    key = profiles.create_backup("weekly")

    assert key == f"backup:weekly:{int(clock.now_utc().timestamp() * 1000)}"
    snapshot = store.get(key)
    assert snapshot["name"] == "Ada"
    assert snapshot["backupCreated"] == "2025-01-01T12:00:00.000Z"
    assert profiles.list_backups() == [key]


def test_footer_defaults_seeded(footer: FooterService, store: InMemoryKVStore):
    config = footer.load()

    assert config == DEFAULT_FOOTER
    assert store.get("footer:config") == DEFAULT_FOOTER
    config["copyrightText"] = "changed"
    assert footer.load()["copyrightText"] == "All rights reserved."


def test_footer_save(footer: FooterService):
    footer.save({"useProfileName": False, "customName": "Studio"})
    assert footer.load() == {"useProfileName": False, "customName": "Studio"}
