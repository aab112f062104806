"""
ServiceResult tests.

Covers:
- Success and failure construction
- Conversion of domain exceptions
- unwrap helpers and dict serialization
"""

import pytest

from outpass.core.exceptions import ErrorCode, ForbiddenError, NotFoundError
from outpass.services.base import ErrorSeverity, ServiceError, ServiceResult


class TestServiceResult:

    def test_success(self):
        result = ServiceResult.success(5, message="done", metadata={"count": 5})

        assert result
        assert result.unwrap() == 5
        assert result.error_code is None
        assert result.to_dict()["data"] == 5

    def test_from_domain_error(self):
        result = ServiceResult.from_domain_error(NotFoundError("Leave", "abc"))

        assert not result
        assert result.error_code == ErrorCode.NOT_FOUND
        assert result.message == "Leave not found (ID: abc)"
        assert result.error.severity == ErrorSeverity.WARNING

    def test_forbidden_keeps_reason(self):
        result = ServiceResult.from_domain_error(ForbiddenError("nope"))

        assert result.to_dict()["error"]["details"] == {"reason": "OUT_OF_SCOPE"}

    def test_internal_error_hides_exception_text(self):
        result = ServiceResult.internal_error("record leave return", RuntimeError("db password is x"))

        assert result.error_code == ErrorCode.INTERNAL_ERROR
        assert result.message == "Failed to record leave return"
        assert "password" not in result.message
        assert result.error.details == {"exception_type": "RuntimeError"}

    def test_unwrap_failure(self):
        result = ServiceResult.failure(ServiceError(code=ErrorCode.VALIDATION_ERROR, message="bad"))

        assert result.unwrap_or("fallback") == "fallback"
        with pytest.raises(ValueError):
            result.unwrap()
