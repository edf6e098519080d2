"""
Admin dashboard component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class DashboardValidationError:
    """Section/category validation error."""

    code: str
    message: str
    field: str | None = None


@dataclass(frozen=True)
class SectionAnalytics:
    """Usage counts for one section over rolling windows."""

    section_id: str
    title: str
    total_usage: int
    daily_usage: int
    weekly_usage: int
    monthly_usage: int
    last_used: str


@dataclass(frozen=True)
class DefaultsReport:
    created: int
    realigned: int
    duplicates_removed: int
