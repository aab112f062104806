"""
History archiver.

Copies a completed request into its append-only history table. Runs in the
same transaction as the return event, so a failed archive rolls the return
back with it.
"""
from __future__ import annotations

from typing import Any

from sqlalchemy.orm import Session

from outpass.config.logging import get_logger
from outpass.core.exceptions import InvalidTransitionError
from outpass.repositories.history_repository import HistoryRepository
from outpass.services.workflow.request_kinds import RequestKind

logger = get_logger(__name__)

SNAPSHOT_FIELDS = (
    "student_id",
    "scheduled_out",
    "scheduled_in",
    "actual_out",
    "actual_in",
    "destination",
    "remarks",
)


class HistoryArchiver:
    def __init__(self, db: Session, kind: RequestKind) -> None:
        self.kind = kind
        self.history = HistoryRepository(kind.history_model, db)

    def archive(self, request: Any) -> Any:
        """
        Build and add the history record for a returned request.

        Raises:
            InvalidTransitionError: The request has no recorded return yet
            ValidationError: A record for this request already exists
        """
        if not (request.has_departed and request.has_returned):
            raise InvalidTransitionError(
                f"{self.kind.label} must have departed and returned before archiving",
                current_status=getattr(request.status, "value", request.status),
            )

        values = {name: getattr(request, name) for name in SNAPSHOT_FIELDS}
        values[self.kind.detail_field] = getattr(request, self.kind.detail_field)
        record = self.history.create(self.kind.history_model(request_id=request.id, **values))

        logger.info(
            f"Archived {self.kind.name} to history",
            extra={"request_id": request.id, "student_id": request.student_id},
        )
        return record


__all__ = ["HistoryArchiver", "SNAPSHOT_FIELDS"]
