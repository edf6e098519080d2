"""
Site configuration documents: the profile, its named backups and the footer.

- ``profile:main``          whole profile document, stamped with ``lastUpdated``
- ``backup:<name>:<ms>``    snapshot of the profile with ``backupCreated``
- ``footer:config``         footer settings, seeded with defaults on first read
"""

from __future__ import annotations

import copy
import logging
from typing import Any

from src.core.ports.kv import KVStorePort
from src.core.ports.time import TimePort
from src.domain.documents import as_document
from src.domain.timeutil import to_iso

logger = logging.getLogger(__name__)

PROFILE_KEY = "profile:main"
BACKUP_PREFIX = "backup"
FOOTER_KEY = "footer:config"
ADMIN_PASSWORD_FIELD = "adminPassword"

DEFAULT_FOOTER: dict[str, Any] = {
    "useProfileName": True,
    "useProfileImage": True,
    "useProfileBio": True,
    "customName": "",
    "customImage": "",
    "customBio": "",
    "socialLinks": [],
    "quickLinks": [
        {"label": "Home", "href": "/"},
        {"label": "Blog", "href": "/blog"},
        {"label": "Expertise", "href": "/expertise"},
        {"label": "CaseVault", "href": "/casevault"},
    ],
    "legalLinks": [
        {"label": "Privacy Policy", "href": "/privacy"},
        {"label": "Terms of Service", "href": "/terms"},
    ],
    "copyrightText": "All rights reserved.",
}


def default_footer() -> dict[str, Any]:
    return copy.deepcopy(DEFAULT_FOOTER)


class ProfileService:
    """Profile document plus named backups of it."""

    def __init__(self, store: KVStorePort, clock: TimePort) -> None:
        self._store = store
        self._clock = clock

    def load(self) -> dict[str, Any] | None:
        return as_document(self._store.get(PROFILE_KEY))

    def save(self, data: dict[str, Any]) -> dict[str, Any]:
        """
        Replace the profile, stamping lastUpdated.

        The stored admin password hash survives saves; it only changes
        through set_admin_password_hash.
        """
        profile = {k: v for k, v in data.items() if k != ADMIN_PASSWORD_FIELD}
        stored_hash = self.admin_password_hash()
        if stored_hash:
            profile[ADMIN_PASSWORD_FIELD] = stored_hash
        return self._write(profile)

    def _write(self, profile: dict[str, Any]) -> dict[str, Any]:
        profile = {**profile, "lastUpdated": to_iso(self._clock.now_utc())}
        self._store.set(PROFILE_KEY, profile)
        return profile

    @staticmethod
    def public_view(profile: dict[str, Any]) -> dict[str, Any]:
        return {k: v for k, v in profile.items() if k != ADMIN_PASSWORD_FIELD}

    def delete(self) -> bool:
        return self._store.delete(PROFILE_KEY) > 0

    def create_backup(self, name: str) -> str | None:
        """
        Snapshot the current profile under ``backup:<name>:<ms>``.

        The admin password hash is left out. Returns the backup key, or None
        when there is no profile to copy.
        """
        profile = self.load()
        if profile is None:
            return None
        now = self._clock.now_utc()
        key = f"{BACKUP_PREFIX}:{name}:{int(now.timestamp() * 1000)}"
        self._store.set(key, {**self.public_view(profile), "backupCreated": to_iso(now)})
        logger.info("Created profile backup %s", key)
        return key

    def list_backups(self) -> list[str]:
        return self._store.keys(f"{BACKUP_PREFIX}:*")

    # --- Admin password ---

    def admin_password_hash(self) -> str | None:
        profile = self.load()
        if profile is None:
            return None
        value = profile.get(ADMIN_PASSWORD_FIELD)
        return value if isinstance(value, str) and value else None

    def set_admin_password_hash(self, password_hash: str) -> None:
        """Store a new admin password hash, keeping the rest of the profile."""
        profile = self.load() or {}
        profile[ADMIN_PASSWORD_FIELD] = password_hash
        self._write(profile)


class FooterService:
    def __init__(self, store: KVStorePort) -> None:
        self._store = store

    def load(self) -> dict[str, Any]:
        """Stored footer config; the defaults are saved and returned when absent."""
        config = as_document(self._store.get(FOOTER_KEY))
        if config is None:
            config = default_footer()
            self._store.set(FOOTER_KEY, config)
        return config

    def save(self, config: dict[str, Any]) -> dict[str, Any]:
        self._store.set(FOOTER_KEY, config)
        return config
