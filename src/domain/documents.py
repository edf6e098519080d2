import json
from collections.abc import Callable
from typing import Any, TypeVar

from pydantic import ValidationError

E = TypeVar("E")


def as_document(raw: Any) -> dict[str, Any] | None:
    """
    Normalize a stored value to a dict.

    Older data holds JSON strings inside hashes rather than objects; both
    shapes are accepted. Returns None for anything that is not an object.
    """
    if isinstance(raw, dict):
        return raw
    if isinstance(raw, str):
        try:
            parsed = json.loads(raw)
        except ValueError:
            return None
        return parsed if isinstance(parsed, dict) else None
    return None


def field_errors(exc: ValidationError, error_type: Callable[..., E]) -> list[E]:
    """One ``invalid_field`` error per pydantic failure, named after the offending field."""
    return [
        error_type(
            code="invalid_field",
            message=f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}",
            field=str(err["loc"][0]) if err["loc"] else None,
        )
        for err in exc.errors()
    ]
