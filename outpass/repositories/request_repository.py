"""
Request Repository

Generic repository for leave and outing requests. Every state change is a
compare-and-swap UPDATE whose WHERE clause restates the precondition, so a
concurrent writer that got there first makes the update match zero rows.
"""

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence, Type, Union

from sqlalchemy import delete, update
from sqlalchemy.orm import Session

from outpass.models.base.enums import RequestStatus
from outpass.models.request import Leave, Outing
from outpass.repositories.base.base_repository import BaseRepository

RequestModel = Union[Leave, Outing]


class RequestRepository(BaseRepository[RequestModel]):
    """Repository for one request model (Leave or Outing)."""

    def __init__(self, model: Type[RequestModel], db: Session):
        super().__init__(model, db)

    # ==================== Finders ====================

    def find_scoped(
        self,
        student_ids: Optional[Iterable[str]] = None,
        statuses: Optional[Sequence[RequestStatus]] = None,
    ) -> List[RequestModel]:
        """
        Find requests, optionally restricted to a set of owners and statuses.

        Args:
            student_ids: Owner ids to restrict to; None means all owners
            statuses: Statuses to restrict to; None means any status
        """
        criteria = []
        if student_ids is not None:
            criteria.append(self.model.student_id.in_(list(student_ids)))
        if statuses:
            criteria.append(self.model.status.in_(list(statuses)))
        return self.find_all(*criteria)

    def count_for_student(self, student_id: str) -> int:
        return self.count(self.model.student_id == student_id)

    # ==================== Compare-and-swap Updates ====================

    def transition_status(
        self,
        request_id: str,
        expected_status: RequestStatus,
        values: Dict[str, Any],
    ) -> int:
        """Apply `values` only if the request still has `expected_status`."""
        stmt = (
            update(self.model)
            .where(self.model.id == request_id, self.model.status == expected_status)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return self._execute_write(stmt)

    def mark_departed(self, request_id: str, when: datetime) -> int:
        stmt = (
            update(self.model)
            .where(
                self.model.id == request_id,
                self.model.status == RequestStatus.ACCEPTED,
                self.model.actual_out.is_(None),
            )
            .values(actual_out=when)
            .execution_options(synchronize_session=False)
        )
        return self._execute_write(stmt)

    def mark_returned(self, request_id: str, when: datetime) -> int:
        stmt = (
            update(self.model)
            .where(
                self.model.id == request_id,
                self.model.actual_out.is_not(None),
                self.model.actual_in.is_(None),
            )
            .values(actual_in=when)
            .execution_options(synchronize_session=False)
        )
        return self._execute_write(stmt)

    def delete_if_status(self, request_id: str, expected_status: RequestStatus) -> int:
        """Delete the request only if it still has `expected_status`."""
        stmt = (
            delete(self.model)
            .where(self.model.id == request_id, self.model.status == expected_status)
            .execution_options(synchronize_session=False)
        )
        rowcount = self.db.execute(stmt).rowcount
        if rowcount:
            cached = self.db.identity_map.get(self.db.identity_key(self.model, request_id))
            if cached is not None:
                self.db.expunge(cached)
        return rowcount
