"""Nominal occurrence generation.

Expands a RecurrenceRule from a series start into the ascending start times
that fall inside a half-open query window ``[window_start, window_end)``.
"""

import logging
from collections.abc import Iterator
from datetime import datetime, timedelta

from dateutil.relativedelta import relativedelta
from dateutil.rrule import rrule

from showcal import config
from showcal.rule import RecurrenceRule
from showcal.util import to_utc

logger = logging.getLogger(__name__)


def _phase_anchor(rule: RecurrenceRule, series_start: datetime, target: datetime) -> datetime:
    """Return a dtstart near ``target`` that keeps the rule's cadence.

    The anchor lies on a period boundary that is a whole number of
    ``interval`` periods after the series start, at or before the period
    containing ``target``. Expanding from it yields the same start times as
    expanding from the series start, minus those already behind the anchor.
    Only valid for rules without a COUNT cap.
    """
    if rule.freq == "daily":
        periods = (target.date() - series_start.date()).days
        steps = periods // rule.interval
        if steps <= 0:
            return series_start
        return series_start + timedelta(days=steps * rule.interval)

    if rule.freq == "weekly":
        # rrule counts weeks from the Monday of dtstart's week (WKST=MO)
        series_monday = series_start - timedelta(days=series_start.weekday())
        periods = (target.date() - series_monday.date()).days // 7
        steps = periods // rule.interval
        if steps <= 0:
            return series_start
        return series_monday + timedelta(weeks=steps * rule.interval)

    # monthly: anchor on the 1st so short months cannot shift the day
    periods = (target.year - series_start.year) * 12 + (target.month - series_start.month)
    steps = periods // rule.interval
    if steps <= 0:
        return series_start
    return series_start.replace(day=1) + relativedelta(months=steps * rule.interval)


def _expand(
    rule: RecurrenceRule,
    series_start: datetime,
    window_start: datetime,
    window_end: datetime,
) -> Iterator[datetime]:
    kwargs = rule.rrule_kwargs(series_start)

    # COUNT is measured from the series start, so capped rules never skip ahead
    anchor = series_start
    if rule.count is None and window_start > series_start:
        anchor = _phase_anchor(rule, series_start, window_start)

    for scanned, occurrence in enumerate(rrule(dtstart=anchor, **kwargs), start=1):
        if scanned > config.MAX_CANDIDATES:
            logger.warning(
                "Stopped expanding %s from %s after %d candidates",
                rule,
                anchor.isoformat(),
                config.MAX_CANDIDATES,
            )
            return
        if occurrence >= window_end:
            return
        if occurrence < window_start:
            continue
        yield occurrence


def generate(
    rule: RecurrenceRule | None,
    series_start: datetime,
    duration: timedelta,
    window_start: datetime,
    window_end: datetime,
) -> Iterator[datetime]:
    """Yield nominal occurrence start times inside ``[window_start, window_end)``.

    Args:
        rule: Parsed recurrence rule, or None for a single event
        series_start: Start of the first occurrence (timezone-aware)
        duration: Length of each occurrence; must be positive
        window_start: Inclusive lower bound (timezone-aware)
        window_end: Exclusive upper bound (timezone-aware)

    Returns:
        A lazy, strictly ascending iterator of UTC datetimes. Calling again
        with the same arguments yields the same sequence. An empty or
        inverted window yields nothing.

    Raises:
        TypeError: If any datetime is naive
        ValueError: If duration is not positive
    """
    series_start = to_utc(series_start, "series_start")
    window_start = to_utc(window_start, "window_start", whole_seconds=False)
    window_end = to_utc(window_end, "window_end", whole_seconds=False)
    if duration <= timedelta(0):
        raise ValueError(
            f"duration must be positive, got {duration}.\n"
            f"Hint: the template's end must be after its start"
        )

    if window_start >= window_end:
        return iter(())

    if rule is None:
        if window_start <= series_start < window_end:
            return iter((series_start,))
        return iter(())

    return _expand(rule, series_start, window_start, window_end)
