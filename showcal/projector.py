"""Project a series template onto a query window."""

import logging
from collections.abc import Iterable
from datetime import datetime

from showcal.errors import AmbiguousExceptionError
from showcal.generator import generate
from showcal.models import ExceptionRecord, MaterializedOccurrence, SeriesTemplate
from showcal.resolver import resolve
from showcal.rule import parse
from showcal.util import format_stamp

logger = logging.getLogger(__name__)


def index_exceptions(
    series_id: str, exceptions: Iterable[ExceptionRecord]
) -> dict[datetime, ExceptionRecord]:
    """Key a series' exception records by nominal start.

    Records belonging to other series are skipped.

    Raises:
        AmbiguousExceptionError: If two records target the same nominal start
    """
    index: dict[datetime, ExceptionRecord] = {}
    for record in exceptions:
        if record.series_id != series_id:
            continue
        if record.target_start in index:
            raise AmbiguousExceptionError(series_id, format_stamp(record.target_start))
        index[record.target_start] = record
    return index


def project(
    template: SeriesTemplate,
    exceptions: Iterable[ExceptionRecord],
    window_start: datetime,
    window_end: datetime,
) -> list[MaterializedOccurrence]:
    """Materialize a template's occurrences inside ``[window_start, window_end)``.

    Pure: the result depends only on the arguments. A recurring template's
    occurrences get ids derived from (series id, nominal start); a one-off
    template yields at most one occurrence whose id is the series id.

    Raises:
        RuleParseError: If the template's rule text is invalid
        AmbiguousExceptionError: If exceptions contain duplicate targets
    """
    rule = parse(template.recurrence_rule)
    candidates = generate(rule, template.start, template.duration, window_start, window_end)
    index = index_exceptions(template.id, exceptions)
    occurrences = list(resolve(candidates, index, template))
    logger.debug(
        "Projected %s into %d occurrences (%d exceptions indexed)",
        template.id,
        len(occurrences),
        len(index),
    )
    return occurrences
