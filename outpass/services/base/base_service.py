"""
Base service class providing common functionality for all services.
"""

from contextlib import contextmanager
from typing import Any, Dict, Optional, Type, TypeVar, Union

from pydantic import BaseModel as PydanticModel
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from outpass.config.logging import get_logger
from outpass.core.exceptions import OutpassError
from outpass.core.policy import DEFAULT_POLICY, WorkflowPolicy
from outpass.services.base.service_result import ServiceResult

TSchema = TypeVar("TSchema", bound=PydanticModel)


class BaseService:
    """
    Base service with common behaviors:
    - Shared logger, db session and workflow policy
    - Consistent error handling via ServiceResult
    - Transaction management utilities
    """

    def __init__(self, db_session: Session, policy: Optional[WorkflowPolicy] = None):
        """
        Initialize base service.

        Args:
            db_session: SQLAlchemy database session
            policy: Workflow policy, defaults to the built-in institution rules
        """
        self.db: Session = db_session
        self.policy: WorkflowPolicy = policy or DEFAULT_POLICY
        self._logger = get_logger(self.__class__.__name__)

    # -------------------------------------------------------------------------
    # Exception & Error Handling
    # -------------------------------------------------------------------------

    def _handle_exception(
        self,
        exception: Exception,
        operation: str,
        entity_ref: Optional[Any] = None,
        additional_context: Optional[Dict[str, Any]] = None,
    ) -> ServiceResult:
        """
        Convert exception to a ServiceResult failure with logging.

        Domain errors become typed failures logged at WARNING, pydantic
        errors become VALIDATION_ERROR, anything else is INTERNAL_ERROR and
        logged with its traceback. The session is always rolled back.
        """
        self._rollback()

        context = {
            "operation": operation,
            "entity_ref": str(entity_ref) if entity_ref is not None else None,
            "exception_type": type(exception).__name__,
        }
        if additional_context:
            context.update(additional_context)

        if isinstance(exception, OutpassError):
            self._logger.warning(f"{operation} refused: {exception.message}", extra=context)
            return ServiceResult.from_domain_error(exception)

        if isinstance(exception, PydanticValidationError):
            errors = exception.errors(include_url=False)
            first = errors[0] if errors else {}
            field = ".".join(str(part) for part in first.get("loc", ())) or None
            self._logger.warning(f"{operation} rejected invalid payload", extra=context)
            return ServiceResult.validation_failure(
                first.get("msg", "Invalid payload"),
                field=field,
                details={"errors": [{"loc": list(e["loc"]), "msg": e["msg"]} for e in errors]},
            )

        self._logger.error(f"Error during {operation}: {exception}", exc_info=True, extra=context)
        return ServiceResult.internal_error(operation, exception)

    @staticmethod
    def _coerce(schema: Type[TSchema], payload: Union[TSchema, Dict[str, Any]]) -> TSchema:
        """Accept either a validated schema instance or a raw mapping."""
        if isinstance(payload, schema):
            return payload
        if isinstance(payload, PydanticModel):
            payload = payload.model_dump(exclude_unset=True)
        return schema.model_validate(payload)

    # -------------------------------------------------------------------------
    # Transaction Management
    # -------------------------------------------------------------------------

    @contextmanager
    def transaction(self, auto_commit: bool = True):
        """
        Context manager for database transactions with automatic rollback.

        Example:
            with self.transaction():
                self.repository.create(entity)
                # automatic commit on success, rollback on exception
        """
        try:
            yield self.db
            if auto_commit:
                self._commit()
        except Exception:
            self._rollback()
            raise

    def _commit(self) -> None:
        try:
            self.db.commit()
            self._logger.debug("Transaction committed successfully")
        except Exception as e:
            self._logger.error(f"Commit failed: {e}", exc_info=True)
            self._rollback()
            raise

    def _rollback(self) -> None:
        """Rollback the current transaction, suppressing rollback errors."""
        try:
            self.db.rollback()
        except Exception as e:
            # Rollback errors must not mask the original error
            self._logger.warning(f"Rollback failed: {e}")

    # -------------------------------------------------------------------------
    # Utility Methods
    # -------------------------------------------------------------------------

    def _log_operation(
        self,
        operation: str,
        entity_ref: Optional[Any] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Log service operation with standardized format."""
        context = {"entity_ref": str(entity_ref) if entity_ref else None}
        if extra:
            context.update(extra)
        self._logger.info(f"Operation: {operation}", extra=context)
