"""
Auth services for the three private areas.

- Admin: a single password (hash in the profile, else ``ADMIN_PASSWORD``);
  the cookie value is the static ``ADMIN_AUTH_TOKEN``.
- Family: members in the ``family_members`` hash; login issues a random
  token remembered under ``family:session:<token>`` for the cookie lifetime.
- Personal: same members, signed one-hour token carrying username and role.
"""

from __future__ import annotations

import hmac
import logging
import secrets
from datetime import timedelta
from typing import Any

from pydantic import ValidationError

from src.components.site_config import ProfileService
from src.core.ports.kv import KVStorePort
from src.core.ports.time import TimePort
from src.domain.documents import as_document
from src.domain.entities import FamilyMember
from src.domain.timeutil import to_iso
from src.rules.models import AuthRules

from .crypto import create_access_token, decode_access_token, hash_password, verify_password
from .models import AuthValidationError, LoginResult, MemberSession

logger = logging.getLogger(__name__)

MEMBERS_KEY = "family_members"
FAMILY_SESSION_PREFIX = "family:session:"

_INVALID_CREDENTIALS = AuthValidationError(
    code="invalid_credentials", message="Invalid credentials"
)
_WRONG_PASSWORD = AuthValidationError(
    code="invalid_credentials", message="Current password is incorrect", field="currentPassword"
)


def _required(value: Any, field: str, message: str) -> AuthValidationError | None:
    if isinstance(value, str) and value:
        return None
    return AuthValidationError(code="missing_field", message=message, field=field)


def validate_new_password(password: str, min_length: int) -> AuthValidationError | None:
    if len(password) < min_length:
        return AuthValidationError(
            code="password_too_short",
            message=f"Password must be at least {min_length} characters long",
            field="password",
        )
    return None


class AdminAuthService:
    def __init__(
        self,
        profiles: ProfileService,
        *,
        admin_password: str,
        auth_token: str,
        rules: AuthRules | None = None,
    ) -> None:
        self._profiles = profiles
        self._admin_password = admin_password
        self._auth_token = auth_token
        self._rules = rules or AuthRules()

    def _password_matches(self, password: str) -> bool:
        stored_hash = self._profiles.admin_password_hash()
        if stored_hash:
            return verify_password(password, stored_hash)
        if not self._admin_password:
            return False
        return hmac.compare_digest(password.encode("utf-8"), self._admin_password.encode("utf-8"))

    def login(self, password: Any) -> tuple[str | None, list[AuthValidationError]]:
        """Return the cookie value for a correct password."""
        missing = _required(password, "password", "Password is required")
        if missing:
            return None, [missing]
        if not self._auth_token:
            logger.error("ADMIN_AUTH_TOKEN is not configured; refusing admin login")
            return None, [
                AuthValidationError(code="not_configured", message="Admin login is not configured")
            ]
        if not self._password_matches(password):
            logger.warning("Failed admin login")
            return None, [_INVALID_CREDENTIALS]
        return self._auth_token, []

    def is_authenticated(self, token: str | None) -> bool:
        if not token or not self._auth_token:
            return False
        return hmac.compare_digest(token.encode("utf-8"), self._auth_token.encode("utf-8"))

    def change_password(
        self, current_password: Any, new_password: Any
    ) -> list[AuthValidationError]:
        """Verify the current password and store a hash of the new one in the profile."""
        errors = [
            e
            for e in (
                _required(current_password, "currentPassword", "Current password is required"),
                _required(new_password, "newPassword", "New password is required"),
            )
            if e
        ]
        if errors:
            return errors
        if not self._password_matches(current_password):
            return [_WRONG_PASSWORD]
        too_short = validate_new_password(new_password, self._rules.password_min_length)
        if too_short:
            return [too_short]
        self._profiles.set_admin_password_hash(hash_password(new_password))
        logger.info("Admin password changed")
        return []


class MemberDirectory:
    """Reads and writes the ``family_members`` hash."""

    def __init__(self, store: KVStorePort, clock: TimePort, rules: AuthRules | None = None):
        self._store = store
        self._clock = clock
        self._rules = rules or AuthRules()

    @staticmethod
    def _parse(username: str, raw: Any) -> FamilyMember | None:
        doc = as_document(raw)
        if doc is None:
            return None
        doc = dict(doc)
        # Older records keep the digest under "password".
        if "hashedPassword" not in doc and isinstance(doc.get("password"), str):
            doc["hashedPassword"] = doc.pop("password")
        doc.setdefault("username", username)
        try:
            return FamilyMember.model_validate(doc)
        except ValidationError:
            logger.warning("Skipping malformed family member %s", username)
            return None

    def get(self, username: str) -> FamilyMember | None:
        return self._parse(username, self._store.hget(MEMBERS_KEY, username))

    def list_all(self) -> list[FamilyMember]:
        members = [
            self._parse(name, raw) for name, raw in self._store.hgetall(MEMBERS_KEY).items()
        ]
        return sorted((m for m in members if m), key=lambda m: m.username)

    def _save(self, member: FamilyMember) -> None:
        self._store.hset(MEMBERS_KEY, {member.username: member.to_store()})

    def register(
        self, username: Any, password: Any, role: Any = None
    ) -> tuple[FamilyMember | None, list[AuthValidationError]]:
        errors = [
            e
            for e in (
                _required(username, "username", "Username is required"),
                _required(password, "password", "Password is required"),
            )
            if e
        ]
        if errors:
            return None, errors

        too_short = validate_new_password(password, self._rules.password_min_length)
        if too_short:
            return None, [too_short]

        role = role or self._rules.default_member_role
        if role not in self._rules.member_roles:
            return None, [
                AuthValidationError(code="invalid_role", message="Invalid role", field="role")
            ]

        if self._store.hget(MEMBERS_KEY, username) is not None:
            return None, [
                AuthValidationError(
                    code="duplicate", message="Username already exists", field="username"
                )
            ]

        member = FamilyMember(
            username=username,
            hashed_password=hash_password(password),
            role=role,
            created_at=to_iso(self._clock.now_utc()),
        )
        self._save(member)
        logger.info("Registered member %s (%s)", username, role)
        return member, []

    def authenticate(
        self, username: Any, password: Any
    ) -> tuple[FamilyMember | None, list[AuthValidationError]]:
        """Check credentials and stamp lastLogin."""
        errors = [
            e
            for e in (
                _required(username, "username", "Username is required"),
                _required(password, "password", "Password is required"),
            )
            if e
        ]
        if errors:
            return None, errors
        member = self.get(username)
        if member is None or not verify_password(password, member.hashed_password):
            logger.warning("Failed member login for %s", username)
            return None, [_INVALID_CREDENTIALS]
        member = member.model_copy(update={"last_login": to_iso(self._clock.now_utc())})
        self._save(member)
        return member, []

    def change_password(
        self, username: str, current_password: Any, new_password: Any
    ) -> list[AuthValidationError]:
        errors = [
            e
            for e in (
                _required(current_password, "currentPassword", "Current password is required"),
                _required(new_password, "newPassword", "New password is required"),
            )
            if e
        ]
        if errors:
            return errors
        member = self.get(username)
        if member is None:
            return [AuthValidationError(code="not_found", message="User not found")]
        if not verify_password(current_password, member.hashed_password):
            return [_WRONG_PASSWORD]
        too_short = validate_new_password(new_password, self._rules.password_min_length)
        if too_short:
            return [too_short]
        self._save(member.model_copy(update={"hashed_password": hash_password(new_password)}))
        return []

    def delete(self, username: str) -> bool:
        return self._store.hdel(MEMBERS_KEY, username) > 0


class FamilyAuthService:
    """Family area login with random opaque tokens."""

    def __init__(
        self,
        store: KVStorePort,
        members: MemberDirectory,
        rules: AuthRules | None = None,
    ) -> None:
        self._store = store
        self._members = members
        self._rules = rules or AuthRules()

    def login(
        self, username: Any, password: Any
    ) -> tuple[LoginResult | None, list[AuthValidationError]]:
        member, errors = self._members.authenticate(username, password)
        if member is None:
            return None, errors
        token = secrets.token_hex(32)
        self._store.set(
            FAMILY_SESSION_PREFIX + token,
            {"username": member.username, "role": member.role},
            ttl_seconds=self._rules.cookie.max_age_seconds,
        )
        return LoginResult(token=token, username=member.username, role=member.role), []

    def check(self, token: str | None) -> MemberSession | None:
        if not token:
            return None
        session = self._store.get(FAMILY_SESSION_PREFIX + token)
        if not isinstance(session, dict) or "username" not in session:
            return None
        return MemberSession(username=session["username"], role=session.get("role", "visitor"))

    def logout(self, token: str | None) -> None:
        if token:
            self._store.delete(FAMILY_SESSION_PREFIX + token)


class PersonalAuthService:
    """Personal area login with signed, self-expiring tokens."""

    def __init__(
        self,
        members: MemberDirectory,
        clock: TimePort,
        secret_key: str,
        rules: AuthRules | None = None,
    ) -> None:
        self._members = members
        self._clock = clock
        self._secret_key = secret_key
        self._rules = rules or AuthRules()

    @property
    def session_seconds(self) -> int:
        return self._rules.personal_session_minutes * 60

    def login(
        self, username: Any, password: Any
    ) -> tuple[LoginResult | None, list[AuthValidationError]]:
        member, errors = self._members.authenticate(username, password)
        if member is None:
            return None, errors
        token = create_access_token(
            {"sub": member.username, "username": member.username, "role": member.role},
            self._secret_key,
            timedelta(seconds=self.session_seconds),
            self._clock.now_utc(),
        )
        return LoginResult(token=token, username=member.username, role=member.role), []

    def check(self, token: str | None) -> MemberSession | None:
        if not token:
            return None
        claims = decode_access_token(token, self._secret_key, self._clock.now_utc())
        if claims is None or not claims.get("username"):
            return None
        return MemberSession(username=claims["username"], role=claims.get("role", "visitor"))
