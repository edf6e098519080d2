"""
Shortener component - short codes, click counts and redirects.
"""

from ._impl import NOT_FOUND_PATH, ShortenerService, normalize_url
from .models import (
    FollowResult,
    MigrationReport,
    ShortenerValidationError,
    ShortenResult,
    ShortLink,
)

__all__ = [
    "NOT_FOUND_PATH",
    "ShortenerService",
    "normalize_url",
    "FollowResult",
    "MigrationReport",
    "ShortenerValidationError",
    "ShortenResult",
    "ShortLink",
]
