"""Workspace calendar assembly.

Projects every template independently and merges the results into one
start-ordered list, the shape served by ``GET /api/calendar``.
"""

import logging
from collections import defaultdict
from collections.abc import Iterable
from datetime import datetime

from showcal.models import ExceptionRecord, MaterializedOccurrence, SeriesTemplate
from showcal.projector import project
from showcal.store import ShowStore

logger = logging.getLogger(__name__)


def calendar_view(
    templates: Iterable[SeriesTemplate],
    exceptions: Iterable[ExceptionRecord],
    window_start: datetime,
    window_end: datetime,
    *,
    include_cancelled: bool = True,
) -> list[MaterializedOccurrence]:
    """Project all templates into ``[window_start, window_end)``.

    Args:
        templates: Templates to expand
        exceptions: Exception records for any of the templates
        window_start: Inclusive lower bound
        window_end: Exclusive upper bound
        include_cancelled: Keep occurrences flagged as cancelled (series
            status or a status override of "cancelled")

    Returns:
        Occurrences sorted by (start, occurrence_id)
    """
    by_series: defaultdict[str, list[ExceptionRecord]] = defaultdict(list)
    for record in exceptions:
        by_series[record.series_id].append(record)

    occurrences: list[MaterializedOccurrence] = []
    for template in templates:
        occurrences.extend(project(template, by_series[template.id], window_start, window_end))

    if not include_cancelled:
        occurrences = [o for o in occurrences if not o.is_cancelled]

    occurrences.sort(key=lambda o: (o.start, o.occurrence_id))
    return occurrences


def fetch_calendar(
    store: ShowStore,
    workspace_id: str,
    window_start: datetime,
    window_end: datetime,
    *,
    include_cancelled: bool = True,
) -> list[MaterializedOccurrence]:
    """Load a workspace's templates and exceptions from ``store`` and project them."""
    templates = list(store.templates(workspace_id))
    exceptions = list(store.exceptions(workspace_id))
    logger.info(
        "Building calendar for workspace %s: %d templates, %d exceptions",
        workspace_id,
        len(templates),
        len(exceptions),
    )
    return calendar_view(
        templates,
        exceptions,
        window_start,
        window_end,
        include_cancelled=include_cancelled,
    )
