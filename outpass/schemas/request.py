"""
Leave and outing request schemas.

Create payloads, the student-editable update subsets and the admin
decision payload.
"""

from __future__ import annotations

from datetime import date as Date, datetime, timezone
from typing import Any, Optional

from pydantic import Field, field_validator, model_validator

from outpass.models.base.enums import RequestStatus
from outpass.schemas.common.base import PHONE_PATTERN, BaseCreateSchema, BaseUpdateSchema

__all__ = [
    "LeaveCreate",
    "LeaveStudentUpdate",
    "OutingCreate",
    "OutingStudentUpdate",
    "RequestDecision",
]


def _as_utc(value: datetime) -> datetime:
    # Naive values are taken as UTC so they compare with aware ones
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _check_window(start: Optional[datetime], end: Optional[datetime], label: str) -> None:
    if start is not None and end is not None and _as_utc(end) < _as_utc(start):
        raise ValueError(f"{label} return must not be before departure")


class StudentRequestUpdate(BaseUpdateSchema):
    """
    Base for the student editable subsets.

    Every field is optional but none may be sent as null; the columns
    behind them are all required.
    """

    @model_validator(mode="before")
    @classmethod
    def reject_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            nulls = sorted(key for key, value in data.items() if value is None)
            if nulls:
                raise ValueError(f"Fields cannot be null: {', '.join(nulls)}")
        return data


class LeaveCreate(BaseCreateSchema):
    """Leave request submitted by a student."""

    out_date: datetime = Field(..., description="Planned departure")
    in_date: datetime = Field(..., description="Planned return")
    phone_number: str = Field(..., pattern=PHONE_PATTERN, description="Contact number during leave")
    reason: str = Field(..., min_length=1, max_length=1000)
    destination: str = Field(..., min_length=1, max_length=500)

    @model_validator(mode="after")
    def validate_window(self) -> "LeaveCreate":
        _check_window(self.out_date, self.in_date, "Leave")
        return self


class LeaveStudentUpdate(StudentRequestUpdate):
    """Fields a student may change on their own pending leave."""

    out_date: Optional[datetime] = None
    in_date: Optional[datetime] = None
    phone_number: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    reason: Optional[str] = Field(None, min_length=1, max_length=1000)
    destination: Optional[str] = Field(None, min_length=1, max_length=500)

    @model_validator(mode="after")
    def validate_window(self) -> "LeaveStudentUpdate":
        _check_window(self.out_date, self.in_date, "Leave")
        return self


class OutingCreate(BaseCreateSchema):
    """Outing request submitted by a student."""

    out_time: datetime = Field(..., description="Planned departure")
    in_time: datetime = Field(..., description="Planned return")
    date: Optional[Date] = Field(None, description="Day of the outing, defaults to today")
    phone_number: str = Field(..., pattern=PHONE_PATTERN)
    purpose: str = Field(..., min_length=1, max_length=1000)
    destination: str = Field(..., min_length=1, max_length=500)

    @model_validator(mode="after")
    def validate_window(self) -> "OutingCreate":
        _check_window(self.out_time, self.in_time, "Outing")
        return self


class OutingStudentUpdate(StudentRequestUpdate):
    """Fields a student may change on their own pending outing."""

    out_time: Optional[datetime] = None
    in_time: Optional[datetime] = None
    phone_number: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    purpose: Optional[str] = Field(None, min_length=1, max_length=1000)
    destination: Optional[str] = Field(None, min_length=1, max_length=500)

    @model_validator(mode="after")
    def validate_window(self) -> "OutingStudentUpdate":
        _check_window(self.out_time, self.in_time, "Outing")
        return self


class RequestDecision(BaseUpdateSchema):
    """
    Admin decision on a request.

    Remarks are optional here; the lifecycle engine enforces that a
    rejection carries non-empty remarks.
    """

    status: RequestStatus
    remarks: Optional[str] = Field(None, max_length=2000)

    @field_validator("remarks")
    @classmethod
    def blank_remarks_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v
