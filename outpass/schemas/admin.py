"""
Admin directory schemas.
"""

from __future__ import annotations

from typing import Optional

from pydantic import EmailStr, Field, field_validator

from outpass.models.base.enums import Gender
from outpass.schemas.common.base import PHONE_PATTERN, BaseCreateSchema, BaseUpdateSchema

__all__ = ["AdminCreate", "AdminUpdate"]


class AdminCreate(BaseCreateSchema):
    name: str = Field(..., min_length=1, max_length=120)
    position: str = Field(..., min_length=1, max_length=120)
    role: str = Field(..., description="Role identifier from the workflow policy")
    phone_number: str = Field(..., pattern=PHONE_PATTERN)
    email: EmailStr
    password: str = Field(..., min_length=6)
    reports_to: Optional[str] = None
    block: str = Field(..., min_length=1, max_length=50)
    gender: Gender

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()


class AdminUpdate(BaseUpdateSchema):
    name: Optional[str] = Field(None, min_length=1, max_length=120)
    position: Optional[str] = Field(None, min_length=1, max_length=120)
    role: Optional[str] = None
    phone_number: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6)
    reports_to: Optional[str] = None
    block: Optional[str] = Field(None, min_length=1, max_length=50)
    gender: Optional[Gender] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: Optional[str]) -> Optional[str]:
        return v.lower() if v else v
