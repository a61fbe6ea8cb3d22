"""Tests for merging exception records into candidates."""

from datetime import datetime, timezone

import pytest

from showcal import ExceptionRecord, OccurrenceOverrides, SeriesTemplate, resolve


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


TEMPLATE = SeriesTemplate(
    id="news",
    title="Evening News",
    start=utc(2025, 1, 1, 18),
    end=utc(2025, 1, 1, 18, 30),
    recurrence_rule="FREQ=DAILY",
    description="Live broadcast",
    status="scheduled",
    notes="Studio B",
)

CANDIDATES = [utc(2025, 1, 1, 18), utc(2025, 1, 2, 18), utc(2025, 1, 3, 18)]


def test_resolve_without_exceptions_copies_template():
    occurrences = list(resolve(CANDIDATES, {}, TEMPLATE))

    assert [o.start for o in occurrences] == CANDIDATES
    assert occurrences[0].end == utc(2025, 1, 1, 18, 30)
    assert occurrences[1].occurrence_id == "news_20250102T180000Z"
    assert occurrences[1].description == "Live broadcast"
    assert occurrences[1].notes == "Studio B"
    assert occurrences[1].recurring_pattern == "FREQ=DAILY"


def test_resolve_overrides_only_given_fields():
    record = ExceptionRecord(
        series_id="news",
        target_start=CANDIDATES[1],
        kind="modified",
        overrides=OccurrenceOverrides(notes="Studio A", status="in_progress"),
    )

    middle = list(resolve(CANDIDATES, {record.target_start: record}, TEMPLATE))[1]

    assert middle.is_exception
    assert middle.notes == "Studio A"
    assert middle.status == "in_progress"
    assert middle.title == "Evening News"
    assert middle.start == CANDIDATES[1]


def test_resolve_override_with_explicit_end():
    record = ExceptionRecord(
        series_id="news",
        target_start=CANDIDATES[0],
        kind="modified",
        overrides=OccurrenceOverrides(end=utc(2025, 1, 1, 19, 30)),
    )

    first = list(resolve(CANDIDATES, {record.target_start: record}, TEMPLATE))[0]

    assert first.start == CANDIDATES[0]
    assert first.end == utc(2025, 1, 1, 19, 30)


def test_resolve_override_end_before_start_rejected():
    record = ExceptionRecord(
        series_id="news",
        target_start=CANDIDATES[0],
        kind="modified",
        overrides=OccurrenceOverrides(end=utc(2025, 1, 1, 17)),
    )

    with pytest.raises(ValueError):
        list(resolve(CANDIDATES, {record.target_start: record}, TEMPLATE))


def test_resolve_drops_cancelled_and_keeps_order():
    record = ExceptionRecord(series_id="news", target_start=CANDIDATES[1], kind="cancelled")

    occurrences = list(resolve(CANDIDATES, {record.target_start: record}, TEMPLATE))

    assert [o.start for o in occurrences] == [CANDIDATES[0], CANDIDATES[2]]


def test_resolve_status_override_to_cancelled_is_flagged():
    record = ExceptionRecord(
        series_id="news",
        target_start=CANDIDATES[2],
        kind="modified",
        overrides=OccurrenceOverrides(status="cancelled"),
    )

    last = list(resolve(CANDIDATES, {record.target_start: record}, TEMPLATE))[2]

    assert last.is_exception
    assert last.is_cancelled


def test_resolve_ignores_unmatched_keys():
    record = ExceptionRecord(series_id="news", target_start=utc(2025, 1, 2, 18, 1), kind="cancelled")

    assert len(list(resolve(CANDIDATES, {record.target_start: record}, TEMPLATE))) == 3
