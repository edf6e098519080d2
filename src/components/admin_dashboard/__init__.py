"""
Admin dashboard component - sections, categories and usage analytics.
"""

from ._impl import (
    SECTION_CATEGORIES,
    AdminCategoryService,
    AdminSectionService,
    reset_dashboard,
    validate_section_data,
)
from .defaults import DEFAULT_CATEGORIES, DEFAULT_SECTIONS
from .models import DashboardValidationError, DefaultsReport, SectionAnalytics

__all__ = [
    "SECTION_CATEGORIES",
    "AdminCategoryService",
    "AdminSectionService",
    "reset_dashboard",
    "validate_section_data",
    "DEFAULT_CATEGORIES",
    "DEFAULT_SECTIONS",
    "DashboardValidationError",
    "DefaultsReport",
    "SectionAnalytics",
]
