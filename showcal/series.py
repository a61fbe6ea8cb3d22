"""Series edits: single-occurrence exceptions and "this and future" splits."""

import logging
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Any

from showcal.errors import OccurrenceIdError
from showcal.generator import generate
from showcal.identity import decode_occurrence_id
from showcal.models import ExceptionKind, ExceptionRecord, OccurrenceOverrides, SeriesTemplate
from showcal.rule import parse, serialize
from showcal.util import to_utc

logger = logging.getLogger(__name__)


def exception_for_occurrence(
    occurrence_id: str,
    kind: ExceptionKind,
    overrides: OccurrenceOverrides | None = None,
    template: SeriesTemplate | None = None,
) -> ExceptionRecord:
    """Build the exception record for "edit/delete this occurrence only".

    The record is keyed by the nominal start encoded in the occurrence id,
    so it keeps matching even when the override moves the occurrence.

    Args:
        occurrence_id: Id served by the calendar for the occurrence
        kind: "modified" or "cancelled"
        overrides: Replacement values for a modified occurrence
        template: The owning series; when given, the id must name one of its
            current nominal occurrences

    Raises:
        OccurrenceIdError: If the id does not name an occurrence of a recurring series
        RuleParseError: If the template's stored rule is invalid
    """
    series_id, nominal_start = decode_occurrence_id(occurrence_id)
    if nominal_start is None:
        raise OccurrenceIdError(
            f"{occurrence_id!r} is not an occurrence of a recurring series.\n"
            f"Edit the show directly instead of adding an exception"
        )
    if template is not None:
        _check_nominal(template, series_id, nominal_start, occurrence_id)
    return ExceptionRecord(
        series_id=series_id,
        target_start=nominal_start,
        kind=kind,
        overrides=overrides,
    )


def _check_nominal(
    template: SeriesTemplate, series_id: str, nominal_start: datetime, occurrence_id: str
) -> None:
    if series_id != template.id:
        raise OccurrenceIdError(
            f"Occurrence {occurrence_id!r} does not belong to show {template.id!r}"
        )
    rule = parse(template.recurrence_rule)
    window_end = nominal_start + timedelta(seconds=1)
    if rule is None or not any(
        generate(rule, template.start, template.duration, nominal_start, window_end)
    ):
        raise OccurrenceIdError(
            f"{occurrence_id!r} is not an occurrence of show {template.id!r}.\n"
            f"Hint: reload the calendar; the series may have changed"
        )


def split_series(
    template: SeriesTemplate,
    split_at: datetime,
    new_rule_text: str | None,
    new_id: str,
    **changes: Any,
) -> tuple[SeriesTemplate, SeriesTemplate]:
    """Split a recurring series at ``split_at`` for "this and future" edits.

    The original keeps only its occurrences before ``split_at``: a COUNT cap
    is lowered to the number already elapsed, otherwise an UNTIL bound one
    second before the split is applied. The new template starts at
    ``split_at`` with the original duration and ``new_rule_text``.

    Args:
        template: The series being split
        split_at: Start of the first occurrence governed by the new series
        new_rule_text: Rule text for the new series (None for a one-off)
        new_id: Id for the new template
        **changes: Other template fields to set on the new series

    Returns:
        (truncated original, new series)

    Raises:
        ValueError: If the template is not recurring, or split_at is not
            after its first occurrence
        RuleParseError: If either rule text is invalid
    """
    rule = parse(template.recurrence_rule)
    if rule is None:
        raise ValueError(f"Template {template.id!r} is not recurring and cannot be split")
    split_at = to_utc(split_at, "split_at")
    reserved = sorted({"id", "start", "end", "recurrence_rule"} & changes.keys())
    if reserved:
        raise ValueError(f"split_series() sets {', '.join(reserved)} itself")

    # Normalize the new rule text early so a bad rule aborts before any change
    new_rule = parse(new_rule_text)

    elapsed = sum(
        1 for _ in generate(rule, template.start, template.duration, template.start, split_at)
    )
    if elapsed == 0:
        raise ValueError(
            f"Split point {split_at.isoformat()} is not after the first occurrence of "
            f"{template.id!r}.\nHint: edit the whole series instead"
        )

    if rule.count is not None:
        truncated = replace(rule, count=min(rule.count, elapsed))
    else:
        cutoff = split_at - timedelta(seconds=1)
        until = cutoff if rule.until is None else min(rule.until, cutoff)
        truncated = replace(rule, until=until)

    original = replace(template, recurrence_rule=serialize(truncated))
    successor = replace(
        template,
        id=new_id,
        start=split_at,
        end=split_at + template.duration,
        recurrence_rule=serialize(new_rule) if new_rule is not None else None,
        **changes,
    )
    logger.info(
        "Split series %s at %s into %s (%s)",
        template.id,
        split_at.isoformat(),
        new_id,
        successor.recurrence_rule,
    )
    return original, successor
