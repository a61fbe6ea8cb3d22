"""Tests for recurrence rule parsing and serialization."""

from datetime import datetime, timezone

import pytest

from showcal import RecurrenceRule, RuleParseError, parse, serialize


def test_parse_empty_means_non_recurring():
    """None and blank text describe a one-off show."""
    assert parse(None) is None
    assert parse("") is None
    assert parse("   ") is None


def test_parse_weekly_weekdays_with_count():
    """Weekly rule with a weekday list and a count cap."""
    rule = parse("FREQ=WEEKLY;BYDAY=MO,TU,WE,TH,FR;COUNT=10")

    assert rule == RecurrenceRule(
        freq="weekly", weekdays=frozenset({0, 1, 2, 3, 4}), count=10
    )
    assert rule.termination == "count"


def test_parse_daily_until():
    """UNTIL is parsed as an inclusive UTC bound."""
    rule = parse("FREQ=DAILY;UNTIL=20251231T235959Z")

    assert rule.freq == "daily"
    assert rule.until == datetime(2025, 12, 31, 23, 59, 59, tzinfo=timezone.utc)
    assert rule.termination == "until"


def test_parse_date_only_until_covers_whole_day():
    rule = parse("FREQ=DAILY;UNTIL=20251231")
    assert rule.until == datetime(2025, 12, 31, 23, 59, 59, tzinfo=timezone.utc)


def test_parse_accepts_rrule_prefix_and_lowercase():
    """Text written by RRULE.toString() carries an RRULE: prefix."""
    rule = parse("RRULE:freq=monthly;interval=2")
    assert rule == RecurrenceRule(freq="monthly", interval=2)
    assert rule.termination == "never"


def test_parse_accepts_dtstart_line():
    """rrule.js toString() output leads with a DTSTART line; the show start wins."""
    rule = parse("DTSTART:20250106T090000Z\nRRULE:FREQ=WEEKLY;BYDAY=MO;COUNT=5")

    assert rule == RecurrenceRule(freq="weekly", weekdays=frozenset({0}), count=5)
    assert serialize(rule) == "FREQ=WEEKLY;BYDAY=MO;COUNT=5"


def test_parse_accepts_dtstart_with_tzid():
    rule = parse("DTSTART;TZID=America/New_York:20250106T090000\r\nRRULE:FREQ=DAILY;INTERVAL=2")
    assert rule == RecurrenceRule(freq="daily", interval=2)


@pytest.mark.parametrize("keyword", ["daily", "Weekly", "MONTHLY"])
def test_parse_legacy_keywords(keyword):
    """Older shows stored a bare frequency keyword."""
    rule = parse(keyword)
    assert rule == RecurrenceRule(freq=keyword.lower())


@pytest.mark.parametrize(
    "text",
    [
        "FREQ=DAILY",
        "FREQ=DAILY;INTERVAL=3;COUNT=5",
        "FREQ=DAILY;UNTIL=20251231T235959Z",
        "FREQ=WEEKLY;BYDAY=MO,WE,FR;UNTIL=20250630T000000Z",
        "FREQ=WEEKLY;INTERVAL=2;BYDAY=TU,TH;COUNT=8",
        "FREQ=MONTHLY;INTERVAL=2;COUNT=12",
        "FREQ=MONTHLY;UNTIL=20261231T235959Z",
    ],
)
def test_canonical_text_round_trips(text):
    """Canonical rule text survives parse then serialize unchanged."""
    assert serialize(parse(text)) == text


def test_non_canonical_text_round_trips_semantically():
    """Key order and weekday order do not matter."""
    text = "COUNT=4;BYDAY=FR,MO;FREQ=WEEKLY"
    rule = parse(text)

    assert serialize(rule) == "FREQ=WEEKLY;BYDAY=MO,FR;COUNT=4"
    assert parse(serialize(rule)) == rule


def test_constructed_rule_round_trips():
    rule = RecurrenceRule(
        freq="weekly",
        weekdays={5, 6},
        interval=3,
        until=datetime(2026, 2, 1, 12, 30, tzinfo=timezone.utc),
    )
    assert parse(serialize(rule)) == rule


@pytest.mark.parametrize(
    ("text", "fragment"),
    [
        ("FREQ=MONTHLY;BYDAY=MO", "BYDAY=MO"),
        ("FREQ=DAILY;UNTIL=20250101T000000Z;COUNT=3", "UNTIL=20250101T000000Z;COUNT=3"),
        ("FREQ=DAILY;COUNT=0", "COUNT=0"),
        ("FREQ=YEARLY", "FREQ=YEARLY"),
        ("BYDAY=MO", "BYDAY=MO"),
        ("FREQ=WEEKLY;BYDAY=1MO", "1MO"),
        ("FREQ=DAILY;INTERVAL=x", "INTERVAL=x"),
        ("FREQ=DAILY;INTERVAL=0", "INTERVAL=0"),
        ("FREQ=DAILY;FREQ=WEEKLY", "FREQ=WEEKLY"),
        ("FREQ=DAILY;WKST=MO", "WKST=MO"),
        ("FREQ=DAILY;COUNT", "COUNT"),
        ("FREQ=DAILY;UNTIL=tomorrow", "UNTIL=tomorrow"),
        ("fortnightly", "fortnightly"),
        ("RRULE:FREQ=DAILY\nEXDATE:20250107T090000Z", "EXDATE:20250107T090000Z"),
        ("DTSTART:20250106T090000Z", "DTSTART:20250106T090000Z"),
    ],
)
def test_parse_rejects_bad_rules(text, fragment):
    """Malformed or contradictory rules fail loudly with the offending fragment."""
    with pytest.raises(RuleParseError) as excinfo:
        parse(text)

    assert excinfo.value.fragment == fragment


def test_rule_parse_error_is_value_error():
    with pytest.raises(ValueError):
        parse("FREQ=HOURLY")


def test_rule_constructor_validates():
    """The dataclass enforces the same invariants as the parser."""
    with pytest.raises(RuleParseError):
        RecurrenceRule(freq="daily", weekdays={0})
    with pytest.raises(RuleParseError):
        RecurrenceRule(freq="weekly", count=0)
    with pytest.raises(RuleParseError):
        RecurrenceRule(freq="weekly", weekdays={7})
