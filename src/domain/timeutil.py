from datetime import UTC, date, datetime


def to_iso(dt: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and a ``Z`` suffix."""
    return dt.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_datetime(value: str | None) -> datetime | None:
    """
    Parse an ISO date or datetime string.

    Date-only values are midnight UTC; naive datetimes are treated as UTC.
    Returns None for empty or unparsable input.
    """
    if not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        try:
            d = date.fromisoformat(text)
        except ValueError:
            return None
        parsed = datetime(d.year, d.month, d.day)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def sort_key_desc(value: str | None) -> float:
    """Sort key for newest-first ordering; unparsable dates sort last."""
    parsed = parse_datetime(value)
    return -parsed.timestamp() if parsed else float("inf")
