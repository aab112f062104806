"""
History Repository

Read and append access to the archived leave/outing history. Records are
never updated or deleted.
"""

from typing import Iterable, List, Optional, Type, Union

from sqlalchemy.orm import Session

from outpass.models.history import LeaveHistory, OutingHistory
from outpass.repositories.base.base_repository import BaseRepository

HistoryModel = Union[LeaveHistory, OutingHistory]

class HistoryRepository(BaseRepository[HistoryModel]):
    """Repository for one history model."""

    def __init__(self, model: Type[HistoryModel], db: Session):
        super().__init__(model, db)

    def find_scoped(self, student_ids: Optional[Iterable[str]] = None) -> List[HistoryModel]:
        if student_ids is None:
            return self.find_all()
        return self.find_all(self.model.student_id.in_(list(student_ids)))

    def find_by_student(self, student_id: str) -> List[HistoryModel]:
        return self.find_all(self.model.student_id == student_id)

    def delete(self, entity: HistoryModel) -> None:
        raise NotImplementedError("History records are append-only")
