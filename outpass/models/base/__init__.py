"""
Base models package.

Provides the declarative base, abstract base classes and enums for all
database models.
"""

from outpass.models.base.base_model import Base, BaseModel, TimestampModel, new_id, utcnow
from outpass.models.base.enums import AcademicYear, ActorKind, AdminRole, Gender, RequestStatus

__all__ = [
    "Base",
    "BaseModel",
    "TimestampModel",
    "new_id",
    "utcnow",
    "AcademicYear",
    "ActorKind",
    "AdminRole",
    "Gender",
    "RequestStatus",
]
