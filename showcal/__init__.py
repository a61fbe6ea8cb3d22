from .calendar import calendar_view, fetch_calendar
from .errors import AmbiguousExceptionError, OccurrenceIdError, RuleParseError, ShowcalError
from .generator import generate
from .identity import decode_occurrence_id, occurrence_id
from .models import ExceptionRecord, MaterializedOccurrence, OccurrenceOverrides, SeriesTemplate
from .projector import project
from .resolver import resolve
from .rule import RecurrenceRule, parse, serialize
from .series import exception_for_occurrence, split_series

__all__ = [
    "RecurrenceRule",
    "parse",
    "serialize",
    "generate",
    "resolve",
    "project",
    "calendar_view",
    "fetch_calendar",
    "occurrence_id",
    "decode_occurrence_id",
    "exception_for_occurrence",
    "split_series",
    "SeriesTemplate",
    "ExceptionRecord",
    "OccurrenceOverrides",
    "MaterializedOccurrence",
    "ShowcalError",
    "RuleParseError",
    "AmbiguousExceptionError",
    "OccurrenceIdError",
]
