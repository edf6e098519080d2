"""
Auth component - admin, family and personal area logins.

Passwords are SHA-256 digests; the admin cookie is a static token, family
cookies are random tokens and personal cookies are signed JWTs.
"""

from ._impl import (
    FAMILY_SESSION_PREFIX,
    MEMBERS_KEY,
    AdminAuthService,
    FamilyAuthService,
    MemberDirectory,
    PersonalAuthService,
    validate_new_password,
)
from .crypto import create_access_token, decode_access_token, hash_password, verify_password
from .models import AuthValidationError, LoginResult, MemberSession

__all__ = [
    # Services
    "AdminAuthService",
    "FamilyAuthService",
    "MemberDirectory",
    "PersonalAuthService",
    "validate_new_password",
    "MEMBERS_KEY",
    "FAMILY_SESSION_PREFIX",
    # Crypto
    "hash_password",
    "verify_password",
    "create_access_token",
    "decode_access_token",
    # Models
    "AuthValidationError",
    "LoginResult",
    "MemberSession",
]
