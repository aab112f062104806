"""
Core domain primitives: exceptions and the workflow policy.
"""

from outpass.core.exceptions import (
    DenialReason,
    ErrorCode,
    ForbiddenError,
    ImmutableRecordError,
    InvalidTransitionError,
    NotAuthenticatedError,
    NotFoundError,
    OutpassError,
    QuotaExhaustedError,
    UnknownRoleError,
    ValidationError,
)

__all__ = [
    "DenialReason",
    "ErrorCode",
    "ForbiddenError",
    "ImmutableRecordError",
    "InvalidTransitionError",
    "NotAuthenticatedError",
    "NotFoundError",
    "OutpassError",
    "QuotaExhaustedError",
    "UnknownRoleError",
    "ValidationError",
]
