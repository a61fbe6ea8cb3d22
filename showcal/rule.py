"""Recurrence rules for show templates.

Rules are persisted as a semicolon separated subset of RFC 5545 RRULE text,
e.g. ``FREQ=WEEKLY;BYDAY=MO,TU,WE,TH,FR;COUNT=10``. This module parses that
text into a RecurrenceRule and serializes it back, and maps a rule onto
python-dateutil's rrule arguments for expansion.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Literal, TypeAlias

from dateutil.rrule import DAILY, FR, MO, MONTHLY, SA, SU, TH, TU, WE, WEEKLY, weekday

from showcal.errors import RuleParseError
from showcal.util import STAMP_FORMAT, format_stamp, to_utc

Frequency: TypeAlias = Literal["daily", "weekly", "monthly"]
Termination: TypeAlias = Literal["never", "until", "count"]

_FREQ_MAP: dict[Frequency, int] = {
    "daily": DAILY,
    "weekly": WEEKLY,
    "monthly": MONTHLY,
}

# Index matches datetime.weekday(): 0 = Monday
_DAY_CODES = ("MO", "TU", "WE", "TH", "FR", "SA", "SU")
_DAY_CONSTANTS: tuple[weekday, ...] = (MO, TU, WE, TH, FR, SA, SU)

# Bare keywords stored by older clients for simple repeats
_LEGACY_PATTERNS: dict[str, Frequency] = {
    "daily": "daily",
    "weekly": "weekly",
    "monthly": "monthly",
}

_KEYS = ("FREQ", "INTERVAL", "BYDAY", "COUNT", "UNTIL")


@dataclass(frozen=True, kw_only=True)
class RecurrenceRule:
    """A parsed recurrence rule.

    Attributes:
        freq: "daily", "weekly" or "monthly"
        weekdays: Weekday indices (0=Monday .. 6=Sunday); weekly rules only.
            Empty means the weekday of the series start.
        interval: Repeat every N periods
        until: Inclusive UTC end bound, or None
        count: Cap on occurrences counted from the series start, or None
    """

    freq: Frequency
    weekdays: frozenset[int] = field(default_factory=frozenset)
    interval: int = 1
    until: datetime | None = None
    count: int | None = None

    def __post_init__(self) -> None:
        if self.freq not in _FREQ_MAP:
            valid = ", ".join(_FREQ_MAP)
            raise RuleParseError(f"Unsupported frequency (valid: {valid})", str(self.freq))
        if self.interval < 1:
            raise RuleParseError("INTERVAL must be at least 1", f"INTERVAL={self.interval}")
        if self.weekdays and self.freq != "weekly":
            raise RuleParseError(
                f"BYDAY is only allowed with FREQ=WEEKLY, got FREQ={self.freq.upper()}",
                f"BYDAY={_format_days(self.weekdays)}",
            )
        bad = [d for d in self.weekdays if not 0 <= d <= 6]
        if bad:
            raise RuleParseError("Weekday index must be in 0..6", str(sorted(bad)))
        if self.until is not None and self.count is not None:
            raise RuleParseError(
                "UNTIL and COUNT are mutually exclusive",
                f"UNTIL={format_stamp(self.until)};COUNT={self.count}",
            )
        if self.count is not None and self.count < 1:
            raise RuleParseError("COUNT must be at least 1", f"COUNT={self.count}")
        if self.until is not None:
            object.__setattr__(self, "until", to_utc(self.until, "until"))
        # Accept any iterable of ints but always store a frozenset
        object.__setattr__(self, "weekdays", frozenset(self.weekdays))

    @property
    def termination(self) -> Termination:
        if self.count is not None:
            return "count"
        if self.until is not None:
            return "until"
        return "never"

    def rrule_kwargs(self, series_start: datetime) -> dict[str, Any]:
        """Build python-dateutil rrule keyword arguments (without dtstart).

        The weekday and day-of-month implied by ``series_start`` are spelled
        out so the rule keeps its shape when expanded from a later anchor.
        """
        kwargs: dict[str, Any] = {
            "freq": _FREQ_MAP[self.freq],
            "interval": self.interval,
        }
        if self.freq == "weekly":
            days = self.weekdays or {series_start.weekday()}
            kwargs["byweekday"] = [_DAY_CONSTANTS[d] for d in sorted(days)]
        elif self.freq == "monthly":
            kwargs["bymonthday"] = series_start.day
        if self.until is not None:
            kwargs["until"] = self.until
        if self.count is not None:
            kwargs["count"] = self.count
        return kwargs


def _format_days(days: frozenset[int]) -> str:
    return ",".join(_DAY_CODES[d] for d in sorted(days) if 0 <= d <= 6)


def _parse_int(key: str, value: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise RuleParseError(f"{key} must be an integer", f"{key}={value}") from None


def _parse_days(value: str) -> frozenset[int]:
    days: set[int] = set()
    for code in value.split(","):
        code = code.strip().upper()
        if code not in _DAY_CODES:
            valid = ",".join(_DAY_CODES)
            raise RuleParseError(
                f"Invalid weekday (valid: {valid}; ordinals like 1MO are not supported)",
                code,
            )
        days.add(_DAY_CODES.index(code))
    return frozenset(days)


def _parse_until(value: str) -> datetime:
    for fmt in (STAMP_FORMAT, "%Y%m%dT%H%M%S"):
        try:
            return datetime.strptime(value, fmt).replace(tzinfo=timezone.utc)
        except ValueError:
            continue
    try:
        day = datetime.strptime(value, "%Y%m%d")
    except ValueError:
        raise RuleParseError(
            "UNTIL must look like 20251231T235959Z or 20251231", f"UNTIL={value}"
        ) from None
    # A date-only bound includes the whole day
    return day.replace(hour=23, minute=59, second=59, tzinfo=timezone.utc)


def _rule_line(text: str) -> str:
    """Pick the RRULE line out of possibly multi-line rule text.

    A DTSTART line is dropped; the template start anchors the series.
    """
    rule_lines: list[str] = []
    dtstart = None
    for line in text.splitlines():
        line = line.strip()
        if not line:
            continue
        name = line.split(":", 1)[0].split(";", 1)[0].upper()
        if name == "DTSTART" and ":" in line:
            dtstart = line
            continue
        if name == "RRULE" and ":" in line:
            line = line.split(":", 1)[1].strip()
        rule_lines.append(line)
    if len(rule_lines) > 1:
        raise RuleParseError("Expected a single RRULE line", rule_lines[1])
    if dtstart is not None and not rule_lines:
        raise RuleParseError("DTSTART given without an RRULE line", dtstart)
    return rule_lines[0] if rule_lines else ""


def parse(text: str | None) -> RecurrenceRule | None:
    """Parse persisted recurrence text.

    Args:
        text: Rule text such as ``FREQ=DAILY;UNTIL=20251231T235959Z``, with or
            without an ``RRULE:`` prefix and optionally preceded by a
            ``DTSTART:`` line (rrule.js ``toString()`` output), or a legacy
            keyword ("daily", "weekly", "monthly"). None or blank means
            non-recurring.

    Returns:
        The parsed rule, or None for a non-recurring template

    Raises:
        RuleParseError: If the text is malformed or contradictory
    """
    if text is None:
        return None
    body = _rule_line(text)
    if not body:
        return None

    legacy = _LEGACY_PATTERNS.get(body.lower())
    if legacy is not None:
        return RecurrenceRule(freq=legacy)

    parts: dict[str, str] = {}
    for token in body.split(";"):
        token = token.strip()
        if not token:
            continue
        key, sep, value = token.partition("=")
        key = key.strip().upper()
        value = value.strip()
        if not sep or not key or not value:
            raise RuleParseError("Expected KEY=VALUE", token)
        if key not in _KEYS:
            raise RuleParseError(f"Unsupported key (supported: {', '.join(_KEYS)})", token)
        if key in parts:
            raise RuleParseError(f"{key} given more than once", token)
        parts[key] = value

    if "FREQ" not in parts:
        raise RuleParseError(
            "FREQ is required.\nExample: FREQ=WEEKLY;BYDAY=MO,WE;COUNT=10", text
        )
    if "UNTIL" in parts and "COUNT" in parts:
        raise RuleParseError(
            "UNTIL and COUNT are mutually exclusive",
            f"UNTIL={parts['UNTIL']};COUNT={parts['COUNT']}",
        )

    freq = parts["FREQ"].lower()
    if freq not in _FREQ_MAP:
        raise RuleParseError(
            f"Unsupported frequency (valid: {', '.join(f.upper() for f in _FREQ_MAP)})",
            f"FREQ={parts['FREQ']}",
        )

    return RecurrenceRule(
        freq=freq,  # type: ignore[arg-type]
        weekdays=_parse_days(parts["BYDAY"]) if "BYDAY" in parts else frozenset(),
        interval=_parse_int("INTERVAL", parts["INTERVAL"]) if "INTERVAL" in parts else 1,
        until=_parse_until(parts["UNTIL"]) if "UNTIL" in parts else None,
        count=_parse_int("COUNT", parts["COUNT"]) if "COUNT" in parts else None,
    )


def serialize(rule: RecurrenceRule) -> str:
    """Render a rule in canonical text form; ``parse(serialize(r)) == r``."""
    tokens = [f"FREQ={rule.freq.upper()}"]
    if rule.interval != 1:
        tokens.append(f"INTERVAL={rule.interval}")
    if rule.weekdays:
        tokens.append(f"BYDAY={_format_days(rule.weekdays)}")
    if rule.count is not None:
        tokens.append(f"COUNT={rule.count}")
    elif rule.until is not None:
        tokens.append(f"UNTIL={format_stamp(rule.until)}")
    return ";".join(tokens)
