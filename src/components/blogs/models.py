"""
Blogs component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class BlogValidationError:
    """Blog validation error."""

    code: str
    message: str
    field: str | None = None


@dataclass(frozen=True)
class BlogStats:
    """Aggregate counts across every blog."""

    total: int
    published: int
    drafts: int
    archived: int
    total_tags: int
    total_views: int
