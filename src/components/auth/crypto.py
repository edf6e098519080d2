"""
Password hashing and signed personal-area tokens.

Passwords are stored as lowercase hex SHA-256 digests so existing member
records keep working. Personal tokens are HS256 JWTs; expiry is checked
against the injected clock rather than the wall clock.
"""

import hashlib
import hmac
from datetime import datetime, timedelta
from typing import Any, cast

from jose import JWTError, jwt

ALGORITHM = "HS256"


def hash_password(password: str) -> str:
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return hmac.compare_digest(hash_password(plain_password), hashed_password.lower())


def create_access_token(
    data: dict[str, Any],
    secret_key: str,
    expires_delta: timedelta,
    now_utc: datetime,
) -> str:
    """
    Create a signed token.

    Args:
        data: Claims to encode in the token
        secret_key: HMAC signing key
        expires_delta: Lifetime of the token
        now_utc: Issue time; ``exp`` is stored as epoch seconds
    """
    to_encode = data.copy()
    to_encode.update(
        {
            "iat": int(now_utc.timestamp()),
            "exp": int((now_utc + expires_delta).timestamp()),
        }
    )
    encoded_jwt: str = jwt.encode(to_encode, secret_key, algorithm=ALGORITHM)
    return encoded_jwt


def decode_access_token(
    token: str, secret_key: str, now_utc: datetime
) -> dict[str, Any] | None:
    """Claims of a valid, unexpired token; None for anything else."""
    try:
        payload = jwt.decode(
            token, secret_key, algorithms=[ALGORITHM], options={"verify_exp": False}
        )
    except JWTError:
        return None
    exp = payload.get("exp")
    if not isinstance(exp, int | float) or exp <= now_utc.timestamp():
        return None
    return cast(dict[str, Any], payload)
