"""Time helpers shared across showcal.

Every instant handled by the engine is a timezone-aware UTC datetime with
whole-second precision.
"""

from datetime import datetime, timezone

# Compact UTC stamp used by UNTIL clauses and occurrence ids
STAMP_FORMAT = "%Y%m%dT%H%M%SZ"


def to_utc(value: datetime, name: str, *, whole_seconds: bool = True) -> datetime:
    """Normalize an aware datetime to UTC.

    Sub-second precision is dropped unless ``whole_seconds`` is False; query
    bounds keep it so half-open clipping stays exact.

    Raises:
        TypeError: If value is not a datetime or is naive
    """
    if not isinstance(value, datetime):
        raise TypeError(
            f"{name} must be a timezone-aware datetime.\n"
            f"Got {type(value).__name__!r}: {value!r}"
        )
    if value.tzinfo is None:
        raise TypeError(
            f"{name} must be a timezone-aware datetime.\n"
            f"Got naive datetime: {value!r}\n"
            f"Hint: Add timezone info:\n"
            f"  dt = datetime(..., tzinfo=timezone.utc)"
        )
    utc = value.astimezone(timezone.utc)
    return utc.replace(microsecond=0) if whole_seconds else utc


def format_stamp(value: datetime) -> str:
    return value.astimezone(timezone.utc).strftime(STAMP_FORMAT)


def parse_stamp(text: str) -> datetime:
    """Parse a YYYYMMDDTHHMMSSZ stamp into a UTC datetime."""
    return datetime.strptime(text, STAMP_FORMAT).replace(tzinfo=timezone.utc)


def format_wire(value: datetime) -> str:
    """Format as the millisecond ISO 8601 shape browsers emit (…T09:00:00.000Z)."""
    utc = value.astimezone(timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"
