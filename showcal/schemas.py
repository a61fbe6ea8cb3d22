"""Request schemas - Pydantic models for the write endpoints"""

from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, field_validator


def _assume_utc(v: Optional[datetime]) -> Optional[datetime]:
    if v is not None and v.tzinfo is None:
        return v.replace(tzinfo=timezone.utc)
    return v


class ExceptionCreate(BaseModel):
    """Schema for "edit/delete this occurrence only" """

    occurrenceId: str
    kind: Literal["modified", "cancelled"] = "modified"
    title: Optional[str] = None
    description: Optional[str] = None
    startTime: Optional[datetime] = None
    endTime: Optional[datetime] = None
    status: Optional[str] = None
    notes: Optional[str] = None
    color: Optional[str] = None

    @field_validator("startTime", "endTime")
    @classmethod
    def validate_timezone(cls, v):
        return _assume_utc(v)


class SeriesSplit(BaseModel):
    """Schema for "edit this and future occurrences" """

    splitDate: datetime
    newPattern: str
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    notes: Optional[str] = None
    color: Optional[str] = None

    @field_validator("splitDate")
    @classmethod
    def validate_timezone(cls, v):
        return _assume_utc(v)
