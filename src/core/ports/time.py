"""
Time port.

All stored timestamps are UTC ISO-8601 strings; services read the current
time through this port so tests can pin it.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol


class TimePort(Protocol):
    """Time source interface."""

    def now_utc(self) -> datetime:
        """Get current UTC time (timezone-aware)."""
        ...
