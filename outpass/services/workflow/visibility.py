"""
Visibility scoper.

Students see their own records, caretakers see the records of students in
their hostel block and every higher role sees everything. Lists are
filtered by owner id; single records are re-checked after they are loaded.
"""
from __future__ import annotations

from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from outpass.core.exceptions import DenialReason, ForbiddenError
from outpass.core.policy import DEFAULT_POLICY, WorkflowPolicy
from outpass.models.base.enums import RequestStatus
from outpass.repositories.student_repository import StudentRepository
from outpass.services.auth.actor_context import ActorContext


class VisibilityScoper:
    """Restricts reads and writes to the records an actor may see."""

    def __init__(self, db: Session, policy: Optional[WorkflowPolicy] = None) -> None:
        self.policy = policy or DEFAULT_POLICY
        self.students = StudentRepository(db)

    def is_block_scoped(self, actor: ActorContext) -> bool:
        """Caretakers (the lowest role) only see their own block."""
        return actor.is_admin and actor.role == self.policy.lowest_role

    def student_ids_for(self, actor: ActorContext) -> Optional[List[str]]:
        """
        Owner ids the actor may see.

        Returns:
            A list of student ids, or None when the actor is unrestricted
        """
        if actor.is_student:
            return [actor.actor_id]
        if self.is_block_scoped(actor):
            return self.students.ids_in_block(actor.block)
        return None

    def pending_statuses(self, actor: ActorContext) -> Tuple[RequestStatus, ...]:
        """Statuses that make up the actor's review queue."""
        if self.is_block_scoped(actor):
            return (RequestStatus.PENDING,)
        return (RequestStatus.PENDING, RequestStatus.FORWARDED)

    def can_access(self, actor: ActorContext, student_id: str) -> bool:
        if actor.is_student:
            return actor.actor_id == student_id
        if self.is_block_scoped(actor):
            student = self.students.get_by_id(student_id)
            return student is not None and student.hostel_block == actor.block
        return True

    def ensure_can_access(self, actor: ActorContext, student_id: str, resource: str = "record") -> None:
        """
        Raise unless the actor may see records owned by `student_id`.

        Raises:
            ForbiddenError: With reason OUT_OF_SCOPE
        """
        if not self.can_access(actor, student_id):
            raise ForbiddenError(
                f"Not authorized to access this {resource}",
                reason=DenialReason.OUT_OF_SCOPE,
                details={"student_id": student_id},
            )


__all__ = ["VisibilityScoper"]
