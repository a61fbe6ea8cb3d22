from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Literal, TypeAlias

from showcal.identity import SEPARATOR, decode_occurrence_id
from showcal.util import format_stamp, format_wire, to_utc

ExceptionKind: TypeAlias = Literal["modified", "cancelled"]

CANCELLED = "cancelled"


@dataclass(frozen=True, kw_only=True)
class SeriesTemplate:
    """A show definition: the first occurrence plus an optional recurrence rule.

    Attributes:
        id: Opaque series identifier; must not end in _YYYYMMDDTHHMMSSZ
        title: Show title
        start: Start of the first occurrence
        end: End of the first occurrence; fixes the duration of every occurrence
        recurrence_rule: Persisted rule text, None for a one-off show
        description: Free-form description
        status: draft, scheduled, in_progress, completed or cancelled
        color: Calendar color code
        notes: Production notes
        workspace_id: Owning workspace
    """

    id: str
    title: str
    start: datetime
    end: datetime
    recurrence_rule: str | None = None
    description: str | None = None
    status: str = "draft"
    color: str | None = None
    notes: str | None = None
    workspace_id: str | None = None

    def __post_init__(self) -> None:
        # Occurrence ids append _<stamp>, so a stamp suffix here would be ambiguous
        if decode_occurrence_id(self.id)[1] is not None:
            raise ValueError(
                f"Template id {self.id!r} ends in an occurrence stamp.\n"
                f"Hint: drop the trailing {SEPARATOR}YYYYMMDDTHHMMSSZ part"
            )
        start = to_utc(self.start, "start")
        end = to_utc(self.end, "end")
        if end <= start:
            raise ValueError(
                f"Template {self.id!r} must end after it starts.\n"
                f"Got start={start.isoformat()} end={end.isoformat()}"
            )
        object.__setattr__(self, "start", start)
        object.__setattr__(self, "end", end)

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    @property
    def is_recurring(self) -> bool:
        return bool(self.recurrence_rule and self.recurrence_rule.strip())


@dataclass(frozen=True, kw_only=True)
class OccurrenceOverrides:
    """Replacement values for one occurrence; None keeps the template's value."""

    title: str | None = None
    description: str | None = None
    start: datetime | None = None
    end: datetime | None = None
    status: str | None = None
    notes: str | None = None
    color: str | None = None

    def __post_init__(self) -> None:
        if self.start is not None:
            object.__setattr__(self, "start", to_utc(self.start, "start"))
        if self.end is not None:
            object.__setattr__(self, "end", to_utc(self.end, "end"))
        if self.start is not None and self.end is not None and self.end <= self.start:
            raise ValueError(
                f"Override end must be after override start.\n"
                f"Got start={self.start.isoformat()} end={self.end.isoformat()}"
            )


@dataclass(frozen=True, kw_only=True)
class ExceptionRecord:
    """A deviation from a series for exactly one nominal occurrence.

    Attributes:
        series_id: The owning template
        target_start: Nominal (rule-generated) start of the occurrence this
            record replaces; never the overridden start
        kind: "modified" or "cancelled"
        overrides: Replacement values; required for modified, absent for cancelled
    """

    series_id: str
    target_start: datetime
    kind: ExceptionKind
    overrides: OccurrenceOverrides | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "target_start", to_utc(self.target_start, "target_start"))
        if self.kind == "modified":
            if self.overrides is None:
                object.__setattr__(self, "overrides", OccurrenceOverrides())
        elif self.kind == "cancelled":
            if self.overrides is not None:
                raise ValueError(
                    "A cancelled exception cannot carry overrides.\n"
                    "Use kind='modified' to change an occurrence"
                )
        else:
            raise ValueError(
                f"Exception kind must be 'modified' or 'cancelled', got {self.kind!r}"
            )

    @property
    def key(self) -> tuple[str, datetime]:
        return self.series_id, self.target_start

    def __str__(self) -> str:
        return f"ExceptionRecord({self.kind} {self.series_id}@{format_stamp(self.target_start)})"


@dataclass(frozen=True, kw_only=True)
class MaterializedOccurrence:
    """A concrete, exception-resolved occurrence. Computed per query, never stored."""

    occurrence_id: str
    series_id: str
    start: datetime
    end: datetime
    title: str
    status: str
    description: str | None = None
    color: str | None = None
    notes: str | None = None
    recurring_pattern: str | None = None
    is_recurrence: bool = False
    is_exception: bool = False
    is_cancelled: bool = False

    def __post_init__(self) -> None:
        if self.end <= self.start:
            raise ValueError(
                f"Occurrence {self.occurrence_id!r} must end after it starts.\n"
                f"Got start={self.start.isoformat()} end={self.end.isoformat()}"
            )

    def to_wire(self) -> dict[str, Any]:
        """Render the JSON shape served by /api/calendar."""
        return {
            "id": self.occurrence_id,
            "title": self.title,
            "startTime": format_wire(self.start),
            "endTime": format_wire(self.end),
            "status": self.status,
            "description": self.description,
            "color": self.color,
            "parentId": self.series_id,
            "isRecurrence": self.is_recurrence,
            "isException": self.is_exception,
            "recurringPattern": self.recurring_pattern,
            "notes": self.notes,
        }
