"""
Read access to archived leave and outing history.
"""
from __future__ import annotations

from typing import Any, List, Optional

from sqlalchemy.orm import Session

from outpass.core.exceptions import NotFoundError
from outpass.core.policy import WorkflowPolicy
from outpass.repositories.history_repository import HistoryRepository
from outpass.repositories.student_repository import StudentRepository
from outpass.services.auth.actor_context import ActorContext
from outpass.services.auth.authorization_gate import AuthorizationGate, Operation
from outpass.services.base import BaseService, ServiceResult
from outpass.services.workflow.request_kinds import LEAVE, OUTING, RequestKind
from outpass.services.workflow.visibility import VisibilityScoper


class HistoryService(BaseService):
    """Scoped reads over one kind's history table."""

    def __init__(self, db_session: Session, kind: RequestKind, policy: Optional[WorkflowPolicy] = None):
        super().__init__(db_session, policy)
        self.kind = kind
        self.repository = HistoryRepository(kind.history_model, db_session)
        self.students = StudentRepository(db_session)
        self.scoper = VisibilityScoper(db_session, self.policy)
        self.gate = AuthorizationGate(self.policy)

    @property
    def resource(self) -> str:
        return f"{self.kind.name} history"

    def list(self, actor: ActorContext) -> ServiceResult[List[Any]]:
        try:
            self.gate.require(actor, Operation.HISTORY_LIST)
            items = self.repository.find_scoped(self.scoper.student_ids_for(actor))
            return ServiceResult.success(items, metadata={"count": len(items)})
        except Exception as e:
            return self._handle_exception(e, f"list {self.resource}")

    def get(self, actor: ActorContext, history_id: str) -> ServiceResult:
        try:
            self.gate.require(actor, Operation.HISTORY_GET)
            record = self.repository.get_by_id(history_id)
            if record is None:
                raise NotFoundError(f"{self.kind.label} history", history_id)
            self.scoper.ensure_can_access(actor, record.student_id, self.resource)
            return ServiceResult.success(record)
        except Exception as e:
            return self._handle_exception(e, f"get {self.resource}", history_id)

    def list_for_student(self, actor: ActorContext, student_id: str) -> ServiceResult[List[Any]]:
        """History of one student; the student themself or an admin in scope."""
        try:
            self.gate.require(actor, Operation.HISTORY_LIST_FOR_STUDENT)
            if actor.is_admin and self.scoper.is_block_scoped(actor):
                if self.students.get_by_id(student_id) is None:
                    raise NotFoundError("Student", student_id)
            self.scoper.ensure_can_access(actor, student_id, f"student {self.resource}")
            items = self.repository.find_by_student(student_id)
            return ServiceResult.success(items, metadata={"count": len(items)})
        except Exception as e:
            return self._handle_exception(e, f"list {self.resource} for student", student_id)


class LeaveHistoryService(HistoryService):
    def __init__(self, db_session: Session, policy: Optional[WorkflowPolicy] = None):
        super().__init__(db_session, LEAVE, policy)


class OutingHistoryService(HistoryService):
    def __init__(self, db_session: Session, policy: Optional[WorkflowPolicy] = None):
        super().__init__(db_session, OUTING, policy)


__all__ = ["HistoryService", "LeaveHistoryService", "OutingHistoryService"]
