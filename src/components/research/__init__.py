"""
Research component - studies, view counts and domains.
"""

from ._impl import ResearchService, ResearchValidationError
from .defaults import DEFAULT_DOMAINS, DEFAULT_STUDIES

__all__ = [
    "ResearchService",
    "ResearchValidationError",
    "DEFAULT_DOMAINS",
    "DEFAULT_STUDIES",
]
