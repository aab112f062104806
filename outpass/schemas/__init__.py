"""
Pydantic schemas for every input payload.
"""

from outpass.schemas.admin import AdminCreate, AdminUpdate
from outpass.schemas.request import (
    LeaveCreate,
    LeaveStudentUpdate,
    OutingCreate,
    OutingStudentUpdate,
    RequestDecision,
)
from outpass.schemas.student import (
    StudentAdminUpdate,
    StudentBulkCreate,
    StudentCreate,
    StudentSelfUpdate,
)

__all__ = [
    "AdminCreate",
    "AdminUpdate",
    "LeaveCreate",
    "LeaveStudentUpdate",
    "OutingCreate",
    "OutingStudentUpdate",
    "RequestDecision",
    "StudentAdminUpdate",
    "StudentBulkCreate",
    "StudentCreate",
    "StudentSelfUpdate",
]
