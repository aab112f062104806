"""
Base schema classes with common configuration.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

__all__ = [
    "BaseSchema",
    "BaseCreateSchema",
    "BaseUpdateSchema",
    "PHONE_PATTERN",
]

PHONE_PATTERN = r"^\d{10}$"


class BaseSchema(BaseModel):
    """
    Base schema with common Pydantic configuration.
    """

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        use_enum_values=False,
        str_strip_whitespace=True,
        validate_assignment=True,
    )


class BaseCreateSchema(BaseSchema):
    """Base for create payloads; unknown fields are rejected."""

    model_config = ConfigDict(extra="forbid")


class BaseUpdateSchema(BaseSchema):
    """
    Base for partial update payloads.

    Unknown fields are rejected rather than silently dropped; only the
    fields a caller actually sent are applied (`exclude_unset`).
    """

    model_config = ConfigDict(extra="forbid")

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)
