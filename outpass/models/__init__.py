"""
Database models.

Importing this package registers every table on `Base.metadata`.
"""

from outpass.models.base import (
    AcademicYear,
    ActorKind,
    AdminRole,
    Base,
    BaseModel,
    Gender,
    RequestStatus,
    TimestampModel,
)
from outpass.models.admin import Admin
from outpass.models.history import LeaveHistory, OutingHistory
from outpass.models.request import Leave, Outing
from outpass.models.student import Student

__all__ = [
    "AcademicYear",
    "ActorKind",
    "AdminRole",
    "Base",
    "BaseModel",
    "Gender",
    "RequestStatus",
    "TimestampModel",
    "Admin",
    "Leave",
    "LeaveHistory",
    "Outing",
    "OutingHistory",
    "Student",
]
