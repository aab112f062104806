"""
Student profile schemas.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import EmailStr, Field, field_validator

from outpass.schemas.common.base import PHONE_PATTERN, BaseCreateSchema, BaseUpdateSchema

__all__ = [
    "StudentCreate",
    "StudentBulkCreate",
    "StudentSelfUpdate",
    "StudentAdminUpdate",
]


class StudentCreate(BaseCreateSchema):
    """New student record created by an admin."""

    name: str = Field(..., min_length=1, max_length=120)
    phone_number: str = Field(..., pattern=PHONE_PATTERN)
    email: EmailStr
    year: str = Field(..., description="Academic year tag, e.g. E1")
    branch: str = Field(..., min_length=1, max_length=120)
    room_no: str = Field(..., min_length=1, max_length=20)
    address: str = Field(..., min_length=1)
    image: Optional[str] = Field(None, description="Stored image reference")
    parent_name: str = Field(..., min_length=1, max_length=120)
    parent_phone_number: str = Field(..., pattern=PHONE_PATTERN)
    hostel_block: str = Field(..., min_length=1, max_length=50)
    password: str = Field(..., min_length=6)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()


class StudentBulkCreate(BaseCreateSchema):
    students: List[StudentCreate] = Field(..., min_length=1)


class StudentSelfUpdate(BaseUpdateSchema):
    """
    Profile fields a student may change on their own record.

    Academic year and quota counters are not part of this schema, so a
    student payload containing them is rejected.
    """

    name: Optional[str] = Field(None, min_length=1, max_length=120)
    phone_number: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    email: Optional[EmailStr] = None
    branch: Optional[str] = Field(None, min_length=1, max_length=120)
    room_no: Optional[str] = Field(None, min_length=1, max_length=20)
    address: Optional[str] = Field(None, min_length=1)
    image: Optional[str] = None
    parent_name: Optional[str] = Field(None, min_length=1, max_length=120)
    parent_phone_number: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    hostel_block: Optional[str] = Field(None, min_length=1, max_length=50)
    password: Optional[str] = Field(None, min_length=6)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: Optional[str]) -> Optional[str]:
        return v.lower() if v else v


class StudentAdminUpdate(StudentSelfUpdate):
    """Admin edit of a student record, including year and quotas."""

    year: Optional[str] = None
    remaining_outings: Optional[int] = Field(None, ge=0)
    remaining_leaves: Optional[int] = Field(None, ge=0)
