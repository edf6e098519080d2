"""
Readings component - books and courses.
"""

from ._impl import READING_TYPES, ReadingService, validate_reading_input
from .models import MigrationResult, ReadingCounts, ReadingValidationError

__all__ = [
    "READING_TYPES",
    "ReadingService",
    "validate_reading_input",
    "MigrationResult",
    "ReadingCounts",
    "ReadingValidationError",
]
