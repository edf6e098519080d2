"""
Text helpers shared by content modules: identifiers, slugs and reading time.
"""

from __future__ import annotations

import math
import re
import secrets
import string
from datetime import datetime

BASE36 = string.ascii_lowercase + string.digits

_TAG_RE = re.compile(r"<[^>]*>")
_NON_SLUG_RE = re.compile(r"[^a-z0-9\s-]")
_NON_ALNUM_RUN_RE = re.compile(r"[^a-z0-9]+")


def random_code(length: int = 8) -> str:
    """Random lowercase alphanumeric string."""
    return "".join(secrets.choice(BASE36) for _ in range(length))


def generate_id(prefix: str, now: datetime) -> str:
    """Prefixed id: ``<prefix>_<epoch ms>_<9 random chars>``."""
    millis = int(now.timestamp() * 1000)
    return f"{prefix}_{millis}_{random_code(9)}"


def slugify(title: str) -> str:
    """
    Lowercase, hyphen-separated slug.

    Drops anything other than letters, digits, whitespace and hyphens, then
    collapses whitespace and repeated hyphens.
    """
    slug = title.lower().strip()
    slug = _NON_SLUG_RE.sub("", slug)
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")


def suffixed_slug(title: str, max_base: int = 50, suffix_length: int = 6) -> str:
    """Slug with a random suffix, for collections where titles repeat."""
    base = _NON_ALNUM_RUN_RE.sub("-", title.lower()).strip("-")[:max_base]
    return f"{base}-{random_code(suffix_length)}"


def reading_time(content: str, words_per_minute: int = 200) -> str:
    plain = _TAG_RE.sub("", content)
    words = [w for w in plain.split() if w]
    minutes = math.ceil(len(words) / words_per_minute)
    return f"{minutes} min read"
