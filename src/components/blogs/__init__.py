"""
Blogs component - posts, pinning, tags and view counts.
"""

from ._impl import BlogService, validate_blog_input
from .models import BlogStats, BlogValidationError

__all__ = [
    "BlogService",
    "validate_blog_input",
    "BlogStats",
    "BlogValidationError",
]
