"""
Domain exceptions for the outpass workflow.

These exceptions are raised inside services, repositories and the
authorization gate, and are converted to typed ServiceResult failures at
the service operation boundary.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Optional


class ErrorCode(str, Enum):
    """Stable error kinds reported to callers."""

    NOT_FOUND = "NOT_FOUND"
    NOT_AUTHENTICATED = "NOT_AUTHENTICATED"
    FORBIDDEN = "FORBIDDEN"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    QUOTA_EXHAUSTED = "QUOTA_EXHAUSTED"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class DenialReason(str, Enum):
    """Why the authorization gate refused an operation."""

    NOT_AUTHENTICATED = "NOT_AUTHENTICATED"
    WRONG_ACTOR_KIND = "WRONG_ACTOR_KIND"
    INSUFFICIENT_ROLE = "INSUFFICIENT_ROLE"
    OUT_OF_SCOPE = "OUT_OF_SCOPE"


class OutpassError(Exception):
    """Base exception for all domain errors."""

    error_code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return f"{self.error_code.value}: {self.message}"


class NotFoundError(OutpassError):
    """Raised when an entity id does not resolve."""

    error_code = ErrorCode.NOT_FOUND

    def __init__(
        self,
        resource_type: str,
        identifier: Any = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        message = f"{resource_type} not found"
        if identifier is not None:
            message += f" (ID: {identifier})"
        super().__init__(message, details)
        self.resource_type = resource_type
        self.identifier = identifier


class NotAuthenticatedError(OutpassError):
    """Raised when there is no valid credential behind a call."""

    error_code = ErrorCode.NOT_AUTHENTICATED

    def __init__(self, message: str = "Not authorized to access this route") -> None:
        super().__init__(message, {"reason": DenialReason.NOT_AUTHENTICATED.value})


class ForbiddenError(OutpassError):
    """Raised when an authenticated actor violates role or scope rules."""

    error_code = ErrorCode.FORBIDDEN

    def __init__(
        self,
        message: str,
        reason: DenialReason = DenialReason.OUT_OF_SCOPE,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        details = dict(details or {})
        details["reason"] = reason.value
        super().__init__(message, details)
        self.reason = reason


class ValidationError(OutpassError):
    """Raised when input or a transition precondition is malformed."""

    error_code = ErrorCode.VALIDATION_ERROR

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details)
        self.field = field


class UnknownRoleError(ValidationError):
    """Raised when a role identifier is not part of the hierarchy."""

    def __init__(self, role: Any) -> None:
        super().__init__(f"Unknown admin role '{role}'", field="role", details={"role": str(role)})
        self.role = role


class QuotaExhaustedError(OutpassError):
    """Raised when a student has no remaining leaves or outings."""

    error_code = ErrorCode.QUOTA_EXHAUSTED

    def __init__(self, kind: str, period: str) -> None:
        super().__init__(
            f"No remaining {kind}s for this {period}",
            {"kind": kind},
        )
        self.kind = kind


class InvalidTransitionError(OutpassError):
    """Raised when a state machine precondition is violated."""

    error_code = ErrorCode.INVALID_TRANSITION

    def __init__(
        self,
        message: str,
        current_status: Optional[str] = None,
        target_status: Optional[str] = None,
    ) -> None:
        super().__init__(
            message,
            {"current_status": current_status, "target_status": target_status},
        )
        self.current_status = current_status
        self.target_status = target_status


class ImmutableRecordError(OutpassError):
    """Raised when code attempts to modify or delete an archived history record."""

    error_code = ErrorCode.INTERNAL_ERROR

    def __init__(self, model_name: str, record_id: Any, operation: str) -> None:
        super().__init__(
            f"{model_name} {record_id} is immutable and cannot be {operation}",
            {"model": model_name, "record_id": str(record_id), "operation": operation},
        )


__all__ = [
    "ErrorCode",
    "DenialReason",
    "OutpassError",
    "NotFoundError",
    "NotAuthenticatedError",
    "ForbiddenError",
    "ValidationError",
    "UnknownRoleError",
    "QuotaExhaustedError",
    "InvalidTransitionError",
    "ImmutableRecordError",
]
