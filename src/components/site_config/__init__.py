"""
Site config component - profile document, profile backups and footer.
"""

from ._impl import (
    ADMIN_PASSWORD_FIELD,
    DEFAULT_FOOTER,
    FOOTER_KEY,
    PROFILE_KEY,
    FooterService,
    ProfileService,
    default_footer,
)

__all__ = [
    "ADMIN_PASSWORD_FIELD",
    "DEFAULT_FOOTER",
    "FOOTER_KEY",
    "PROFILE_KEY",
    "FooterService",
    "ProfileService",
    "default_footer",
]
