from outpass.schemas.common.base import (
    PHONE_PATTERN,
    BaseCreateSchema,
    BaseSchema,
    BaseUpdateSchema,
)

__all__ = ["PHONE_PATTERN", "BaseCreateSchema", "BaseSchema", "BaseUpdateSchema"]
