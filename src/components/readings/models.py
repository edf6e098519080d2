"""
Readings component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ReadingValidationError:
    """Reading validation error."""

    code: str
    message: str
    field: str | None = None


@dataclass(frozen=True)
class ReadingCounts:
    total: int
    books: int
    courses: int


@dataclass
class MigrationResult:
    """Outcome of importing legacy book entries."""

    migrated: int = 0
    skipped: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)
    details: list[dict[str, str]] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.failed == 0
