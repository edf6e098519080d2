"""
Auth component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AuthValidationError:
    """Auth validation error."""

    code: str
    message: str
    field: str | None = None


@dataclass(frozen=True)
class MemberSession:
    """Who a personal-area token belongs to."""

    username: str
    role: str


@dataclass(frozen=True)
class LoginResult:
    """Outcome of a successful login: the cookie value and the member behind it."""

    token: str
    username: str
    role: str
