"""
ShortenerService - short codes for outbound URLs with click tracking.

Keys per code:
- ``url:<code>``      normalized target URL
- ``clicks:<code>``   click counter
- ``created:<code>``  creation timestamp
- ``expires:<code>``  optional expiry timestamp
- ``revoked:<code>``  present while the link is revoked
- ``original:<url>``  reverse index from normalized URL to code

When an expiry is set, every key above carries the same TTL so the whole
record disappears together.
"""

from __future__ import annotations

import logging
import re
from urllib.parse import urlsplit

from src.core.ports.kv import KVStorePort
from src.core.ports.time import TimePort
from src.domain.text import random_code
from src.domain.timeutil import parse_datetime, to_iso
from src.rules.models import ShortenerRules

from .models import (
    FollowResult,
    MigrationReport,
    ShortenerValidationError,
    ShortenResult,
    ShortLink,
)

logger = logging.getLogger(__name__)

_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)
_DEFAULT_PORTS = {"https": 443, "http": 80}
_CODE_FIELDS = ("url", "clicks", "created", "expires", "revoked")

NOT_FOUND_PATH = "/404"


def normalize_url(url: str) -> str:
    """
    Canonical form of a URL, used to detect duplicates.

    Adds ``https://`` when no scheme is given, strips trailing slashes from
    the path, drops default ports and a leading ``www.``, and lowercases the
    result. Input that cannot be parsed falls back to the lowercased,
    scheme-prefixed string.
    """
    normalized = url.strip()
    if not _SCHEME_RE.match(normalized):
        normalized = "https://" + normalized

    try:
        parts = urlsplit(normalized)
        port = parts.port
    except ValueError:
        return normalized.lower()

    hostname = parts.hostname or ""
    if not hostname or any(c.isspace() for c in parts.netloc):
        return normalized.lower()

    if hostname.startswith("www."):
        hostname = hostname[4:]
    if ":" in hostname:
        # urlsplit strips the brackets from IPv6 literals
        hostname = f"[{hostname}]"

    scheme = parts.scheme.lower()
    port_part = "" if port is None or _DEFAULT_PORTS.get(scheme) == port else f":{port}"

    path = parts.path or "/"
    while path.endswith("/") and len(path) > 1:
        path = path[:-1]

    query = f"?{parts.query}" if parts.query else ""
    fragment = f"#{parts.fragment}" if parts.fragment else ""
    return f"{scheme}://{hostname}{port_part}{path}{query}{fragment}".lower()


def _is_revoked(value: object) -> bool:
    return value is True or value == "true"


class ShortenerService:
    def __init__(
        self,
        store: KVStorePort,
        clock: TimePort,
        rules: ShortenerRules | None = None,
    ) -> None:
        self._store = store
        self._clock = clock
        self._rules = rules or ShortenerRules()

    def _load(self, code: str) -> ShortLink | None:
        url = self._store.get(f"url:{code}")
        if not url:
            return None
        clicks = self._store.get(f"clicks:{code}")
        try:
            click_count = int(clicks or 0)
        except (TypeError, ValueError):
            click_count = 0
        return ShortLink(
            code=code,
            original_url=str(url),
            clicks=click_count,
            created_at=self._store.get(f"created:{code}") or to_iso(self._clock.now_utc()),
            expires_at=self._store.get(f"expires:{code}") or None,
            is_revoked=_is_revoked(self._store.get(f"revoked:{code}")),
        )

    def _new_code(self) -> str:
        while True:
            code = random_code(self._rules.code_length)
            if not self._store.exists(f"url:{code}"):
                return code

    def shorten(
        self, url: str, expires_at: str | None = None
    ) -> tuple[ShortenResult | None, list[ShortenerValidationError]]:
        """
        Create (or find) the short code for a URL.

        A URL that normalizes to one already stored returns the existing
        record with ``exists=True``.
        """
        if not isinstance(url, str) or not url.strip():
            return None, [
                ShortenerValidationError(
                    code="url_required", message="URL is required", field="url"
                )
            ]

        expiry = None
        if expires_at:
            expiry = parse_datetime(expires_at)
            if expiry is None:
                return None, [
                    ShortenerValidationError(
                        code="invalid_expiry",
                        message="Invalid expiry date format",
                        field="expiresAt",
                    )
                ]

        normalized = normalize_url(url)
        existing_code = self._store.get(f"original:{normalized}")
        if existing_code:
            link = self._load(str(existing_code))
            if link is not None:
                return ShortenResult(link=link, exists=True), []

        now = self._clock.now_utc()
        code = self._new_code()
        link = ShortLink(
            code=code,
            original_url=normalized,
            clicks=0,
            created_at=to_iso(now),
            expires_at=expires_at or None,
        )
        self._store.set(f"url:{code}", normalized)
        self._store.set(f"clicks:{code}", 0)
        self._store.set(f"created:{code}", link.created_at)
        self._store.set(f"original:{normalized}", code)

        if expires_at and expiry is not None:
            self._store.set(f"expires:{code}", expires_at)
            ttl_seconds = int((expiry - now).total_seconds())
            if ttl_seconds > 0:
                for name in ("url", "clicks", "created", "expires"):
                    self._store.expire(f"{name}:{code}", ttl_seconds)
                self._store.expire(f"original:{normalized}", ttl_seconds)

        logger.info("Created short code %s", code)
        return ShortenResult(link=link, exists=False), []

    def list_all(self) -> list[ShortLink]:
        links = []
        for key in self._store.keys("url:*"):
            link = self._load(key[len("url:") :])
            if link is not None:
                links.append(link)
        return links

    def get(self, code: str) -> ShortLink | None:
        return self._load(code)

    def toggle_revoke(self, code: str) -> bool | None:
        """
        Flip the revoked flag.

        Returns the new revoked state, or None if the code does not exist.
        """
        if not self._store.exists(f"url:{code}"):
            return None
        if _is_revoked(self._store.get(f"revoked:{code}")):
            self._store.delete(f"revoked:{code}")
            logger.info("Reactivated short code %s", code)
            return False
        self._store.set(f"revoked:{code}", "true")
        ttl = self._store.ttl(f"url:{code}")
        if ttl > 0:
            self._store.expire(f"revoked:{code}", ttl)
        logger.info("Revoked short code %s", code)
        return True

    def delete(self, code: str) -> bool:
        url = self._store.get(f"url:{code}")
        if not url:
            return False
        self._store.delete(f"original:{url}", *(f"{name}:{code}" for name in _CODE_FIELDS))
        logger.info("Deleted short code %s", code)
        return True

    def _drop_code(self, code: str) -> None:
        self._store.delete(*(f"{name}:{code}" for name in _CODE_FIELDS))

    def _clicks(self, code: str) -> int:
        try:
            return int(self._store.get(f"clicks:{code}") or 0)
        except (TypeError, ValueError):
            return 0

    def migrate_indexes(self) -> MigrationReport:
        """
        Normalize stored URLs and rebuild the reverse index.

        When two codes point at the same normalized URL, the older code is
        kept, the clicks are summed onto it and the newer code is removed.
        """
        report = MigrationReport()
        now = self._clock.now_utc()

        for key in self._store.keys("url:*"):
            code = key[len("url:") :]
            original = self._store.get(key)
            if not original:
                continue
            normalized = normalize_url(str(original))
            existing_code = self._store.get(f"original:{normalized}")

            if not existing_code:
                ttl = self._store.ttl(key)
                self._store.set(f"original:{normalized}", code)
                self._store.set(key, normalized, ttl_seconds=ttl if ttl > 0 else None)
                if ttl > 0:
                    self._store.expire(f"original:{normalized}", ttl)
                report.migrated += 1
                continue

            if existing_code == code:
                continue

            created_existing = parse_datetime(self._store.get(f"created:{existing_code}")) or now
            created_current = parse_datetime(self._store.get(f"created:{code}")) or now
            total = self._clicks(str(existing_code)) + self._clicks(code)

            if created_current < created_existing:
                keep, drop = code, str(existing_code)
                ttl = self._store.ttl(key)
                self._store.set(key, normalized, ttl_seconds=ttl if ttl > 0 else None)
                self._store.set(f"original:{normalized}", code)
            else:
                keep, drop = str(existing_code), code

            self._store.set(f"clicks:{keep}", total)
            self._drop_code(drop)
            logger.info("Merged duplicate short code %s into %s", drop, keep)
            report.migrated += 1

        logger.info("Short link index migration: %d updated", report.migrated)
        return report

    def follow(self, code: str) -> FollowResult:
        """
        Resolve a visit to a short code.

        Missing, revoked and expired codes send the visitor to the not-found
        page; otherwise the click is counted and the target returned.
        """
        url = self._store.get(f"url:{code}")
        if not url:
            return FollowResult(location=NOT_FOUND_PATH, followed=False)

        if _is_revoked(self._store.get(f"revoked:{code}")):
            return FollowResult(location=f"{NOT_FOUND_PATH}?reason=revoked", followed=False)

        expiry = parse_datetime(self._store.get(f"expires:{code}"))
        if expiry is not None and expiry < self._clock.now_utc():
            return FollowResult(location=f"{NOT_FOUND_PATH}?reason=expired", followed=False)

        self._store.incr(f"clicks:{code}")
        return FollowResult(location=str(url), followed=True)
