"""
SubscriberService - SMS update sign-ups, keyed by normalized phone number.
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from src.core.ports.kv import KVStorePort
from src.core.ports.time import TimePort
from src.domain.documents import as_document
from src.domain.entities import Subscriber
from src.domain.text import random_code
from src.domain.timeutil import to_iso

logger = logging.getLogger(__name__)

SUBSCRIBERS_KEY = "subscribers"

_SEPARATORS_RE = re.compile(r"[\s\-()]")
_MOBILE_RE = re.compile(r"^[6-9]\d{9}$")
_SEQUENCES = ("0123456789", "9876543210")


@dataclass(frozen=True)
class SubscriberValidationError:
    code: str
    message: str
    field: str | None = None


@dataclass(frozen=True)
class PhoneValidation:
    valid: bool
    message: str | None = None
    normalized: str | None = None


def validate_phone_number(phone_number: str) -> PhoneValidation:
    """
    Validate an Indian mobile number.

    Separators and a +91/91 country prefix are removed. The remainder must be
    ten digits starting with 6-9, not dominated by one repeated digit and not
    a plain ascending or descending run.
    """
    phone = _SEPARATORS_RE.sub("", phone_number)
    if phone.startswith("+91"):
        phone = phone[3:]
    elif phone.startswith("91") and len(phone) > 10:
        phone = phone[2:]

    if phone.startswith("0"):
        return PhoneValidation(False, "Mobile number should not start with 0")
    if len(phone) != 10:
        return PhoneValidation(False, "Mobile number must be exactly 10 digits")
    if not _MOBILE_RE.match(phone):
        return PhoneValidation(
            False, "Must be a valid Indian mobile number starting with 6, 7, 8, or 9"
        )
    if max(Counter(phone).values()) >= 8 or phone in _SEQUENCES:
        return PhoneValidation(False, "Invalid phone number pattern")

    return PhoneValidation(True, normalized=phone)


class SubscriberService:
    def __init__(self, store: KVStorePort, clock: TimePort) -> None:
        self._store = store
        self._clock = clock

    def subscribe(
        self, full_name: Any, phone_number: Any
    ) -> tuple[Subscriber | None, list[SubscriberValidationError]]:
        """
        Register a subscriber.

        Returns:
            Tuple of (subscriber, errors). A ``duplicate`` error code means
            the number is already registered.
        """
        if not isinstance(full_name, str) or not full_name.strip():
            return None, [
                SubscriberValidationError(
                    code="name_required", message="Full name is required", field="fullName"
                )
            ]
        if not isinstance(phone_number, str) or not phone_number.strip():
            return None, [
                SubscriberValidationError(
                    code="phone_required",
                    message="Phone number is required",
                    field="phoneNumber",
                )
            ]

        check = validate_phone_number(phone_number)
        if not check.valid or check.normalized is None:
            return None, [
                SubscriberValidationError(
                    code="invalid_phone",
                    message=check.message or "Invalid phone number format",
                    field="phoneNumber",
                )
            ]

        phone = check.normalized
        if self._store.hget(SUBSCRIBERS_KEY, phone) is not None:
            return None, [
                SubscriberValidationError(
                    code="duplicate",
                    message="You are already subscribed with this phone number",
                    field="phoneNumber",
                )
            ]

        subscriber = Subscriber(
            id=random_code(13),
            full_name=full_name.strip(),
            phone_number=phone,
            date_joined=to_iso(self._clock.now_utc()),
        )
        self._store.hset(SUBSCRIBERS_KEY, {phone: subscriber.to_store()})
        logger.info("New subscriber %s", subscriber.id)
        return subscriber, []

    def list_all(self) -> dict[str, Subscriber]:
        """Subscribers keyed by phone number."""
        result: dict[str, Subscriber] = {}
        for phone, raw in self._store.hgetall(SUBSCRIBERS_KEY).items():
            doc = as_document(raw)
            if doc is None:
                continue
            try:
                result[phone] = Subscriber.model_validate(doc)
            except ValidationError:
                logger.warning("Skipping malformed subscriber entry")
        return result

    def delete(self, phone_number: str) -> bool:
        """Remove a subscriber; formatted numbers match their normalized key."""
        key = validate_phone_number(phone_number).normalized or phone_number
        return self._store.hdel(SUBSCRIBERS_KEY, key) > 0
