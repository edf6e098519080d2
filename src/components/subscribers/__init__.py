"""
Subscribers component - phone sign-ups.
"""

from ._impl import (
    PhoneValidation,
    SubscriberService,
    SubscriberValidationError,
    validate_phone_number,
)

__all__ = [
    "PhoneValidation",
    "SubscriberService",
    "SubscriberValidationError",
    "validate_phone_number",
]
