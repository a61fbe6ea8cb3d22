"""Stable occurrence ids.

A nominal occurrence of a recurring series is addressed as
``<series_id>_<YYYYMMDDTHHMMSSZ>``, so the same occurrence gets the same id
across queries and restarts, and the id can be turned back into the key an
exception record is stored under.
"""

from datetime import datetime

from showcal.util import format_stamp, parse_stamp, to_utc

SEPARATOR = "_"


def occurrence_id(series_id: str, nominal_start: datetime) -> str:
    return f"{series_id}{SEPARATOR}{format_stamp(to_utc(nominal_start, 'nominal_start'))}"


def decode_occurrence_id(value: str) -> tuple[str, datetime | None]:
    """Split an occurrence id into (series_id, nominal_start).

    Ids without a trailing stamp are plain series ids and decode to
    ``(value, None)``.
    """
    series_id, sep, stamp = value.rpartition(SEPARATOR)
    if not sep or not series_id:
        return value, None
    try:
        return series_id, parse_stamp(stamp)
    except ValueError:
        return value, None
