"""Merge exception records into generated occurrences."""

import logging
from collections.abc import Iterable, Iterator, Mapping
from datetime import datetime

from showcal.identity import occurrence_id
from showcal.models import (
    CANCELLED,
    ExceptionRecord,
    MaterializedOccurrence,
    OccurrenceOverrides,
    SeriesTemplate,
)

logger = logging.getLogger(__name__)


def _from_template(template: SeriesTemplate, nominal: datetime) -> MaterializedOccurrence:
    return MaterializedOccurrence(
        occurrence_id=occurrence_id(template.id, nominal) if template.is_recurring else template.id,
        series_id=template.id,
        start=nominal,
        end=nominal + template.duration,
        title=template.title,
        status=template.status,
        description=template.description,
        color=template.color,
        notes=template.notes,
        recurring_pattern=template.recurrence_rule if template.is_recurring else None,
        is_recurrence=template.is_recurring,
        is_cancelled=template.status == CANCELLED,
    )


def _apply(base: MaterializedOccurrence, record: ExceptionRecord) -> MaterializedOccurrence:
    """Overlay a modified record on the template-built occurrence, field by field."""
    overrides = record.overrides or OccurrenceOverrides()

    start = overrides.start if overrides.start is not None else base.start
    if overrides.end is not None:
        end = overrides.end
    else:
        # Moving only the start keeps the series duration
        end = start + (base.end - base.start)
    status = overrides.status if overrides.status is not None else base.status

    return MaterializedOccurrence(
        occurrence_id=base.occurrence_id,
        series_id=base.series_id,
        start=start,
        end=end,
        title=overrides.title if overrides.title is not None else base.title,
        status=status,
        description=(
            overrides.description if overrides.description is not None else base.description
        ),
        color=overrides.color if overrides.color is not None else base.color,
        notes=overrides.notes if overrides.notes is not None else base.notes,
        recurring_pattern=base.recurring_pattern,
        is_recurrence=base.is_recurrence,
        is_exception=True,
        is_cancelled=status == CANCELLED,
    )


def resolve(
    candidates: Iterable[datetime],
    exceptions: Mapping[datetime, ExceptionRecord],
    template: SeriesTemplate,
) -> Iterator[MaterializedOccurrence]:
    """Turn nominal start times into materialized occurrences.

    Candidates without a record are built from the template. A modified
    record replaces the overridable fields and marks the occurrence as an
    exception; a cancelled record drops the occurrence. Records whose key
    is not among the candidates are ignored. Output keeps candidate order.

    Args:
        candidates: Ascending nominal start times
        exceptions: Records keyed by their nominal target start
        template: The series the candidates were generated from
    """
    for nominal in candidates:
        record = exceptions.get(nominal)
        if record is None:
            yield _from_template(template, nominal)
        elif record.kind == "cancelled":
            logger.debug("Dropping cancelled occurrence %s", record)
            continue
        else:
            yield _apply(_from_template(template, nominal), record)
