"""
Quota ledger.

Per-student remaining leave/outing counters. Every change is a single
atomic UPDATE so the counters never go negative under concurrent requests.
Runs inside the caller's transaction; nothing here commits.
"""
from __future__ import annotations

from typing import Optional

from sqlalchemy.orm import Session

from outpass.config.logging import get_logger
from outpass.core.exceptions import NotFoundError, QuotaExhaustedError
from outpass.core.policy import DEFAULT_POLICY, WorkflowPolicy
from outpass.repositories.student_repository import StudentRepository
from outpass.services.workflow.request_kinds import LEAVE, OUTING, RequestKind

logger = get_logger(__name__)


class QuotaLedger:
    """Consumes, restores and resets student request quotas."""

    def __init__(self, db: Session, policy: Optional[WorkflowPolicy] = None) -> None:
        self.policy = policy or DEFAULT_POLICY
        self.students = StudentRepository(db)

    def consume(self, student_id: str, kind: RequestKind) -> None:
        """
        Take one unit of `kind` quota from the student.

        Raises:
            QuotaExhaustedError: The counter is already zero
            NotFoundError: The student does not exist
        """
        if self.students.decrement_counter(student_id, kind.counter):
            logger.debug(
                f"Consumed one {kind.name} quota unit",
                extra={"student_id": student_id},
            )
            return
        if not self.students.exists(self.students.model.id == student_id):
            raise NotFoundError("Student", student_id)
        raise QuotaExhaustedError(kind.name, kind.quota_period)

    def restore(self, student_id: str, kind: RequestKind) -> None:
        """Give back one unit of `kind` quota."""
        if not self.students.increment_counter(student_id, kind.counter):
            raise NotFoundError("Student", student_id)
        logger.debug(
            f"Restored one {kind.name} quota unit",
            extra={"student_id": student_id},
        )

    def remaining(self, student_id: str, kind: RequestKind) -> int:
        student = self.students.get_by_id(student_id)
        if student is None:
            raise NotFoundError("Student", student_id)
        return getattr(student, kind.counter)

    def reset_outing_quota(self) -> int:
        """Set every student's outing counter to the monthly maximum."""
        return self.students.reset_counter(OUTING.counter, self.policy.max_outings_per_month)

    def reset_leave_quota(self) -> int:
        """Set every student's leave counter to the semester maximum."""
        return self.students.reset_counter(LEAVE.counter, self.policy.max_leaves_per_semester)


__all__ = ["QuotaLedger"]
