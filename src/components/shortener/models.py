"""
Shortener component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ShortenerValidationError:
    code: str
    message: str
    field: str | None = None


@dataclass(frozen=True)
class ShortLink:
    """A short code and everything recorded against it."""

    code: str
    original_url: str
    clicks: int
    created_at: str
    expires_at: str | None = None
    is_revoked: bool = False


@dataclass(frozen=True)
class ShortenResult:
    link: ShortLink
    exists: bool


@dataclass(frozen=True)
class FollowResult:
    """Where a visitor of ``/s/<code>`` should be sent."""

    location: str
    followed: bool


@dataclass
class MigrationReport:
    migrated: int = 0
    errors: list[str] = field(default_factory=list)
