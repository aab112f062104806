"""
Student Repository

Student lookups plus the atomic counter and bulk statements used by the
quota ledger and year upgrades.
"""

from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from outpass.models.student import Student
from outpass.repositories.base.base_repository import BaseRepository

QUOTA_COUNTERS = ("remaining_leaves", "remaining_outings")


class StudentRepository(BaseRepository[Student]):
    """Student repository."""

    def __init__(self, db: Session):
        super().__init__(Student, db)

    def find_by_email(self, email: str) -> Optional[Student]:
        return self.find_one(Student.email == email.lower())

    def find_by_block(self, block: str) -> List[Student]:
        return self.find_all(Student.hostel_block == block)

    def ids_in_block(self, block: str) -> List[str]:
        """Ids of every student living in `block`."""
        stmt = select(Student.id).where(Student.hostel_block == block)
        return list(self.db.scalars(stmt).all())

    # ==================== Quota Counters ====================

    def decrement_counter(self, student_id: str, counter: str) -> int:
        """
        Take one unit from a quota counter if it is positive.

        Single conditional UPDATE, so concurrent callers cannot drive the
        counter below zero.

        Returns:
            Number of rows updated (0 when the counter was already 0 or the
            student does not exist)
        """
        column = self._counter_column(counter)
        stmt = (
            update(Student)
            .where(Student.id == student_id, column > 0)
            .values({counter: column - 1})
            .execution_options(synchronize_session=False)
        )
        return self._execute_write(stmt)

    def increment_counter(self, student_id: str, counter: str) -> int:
        column = self._counter_column(counter)
        stmt = (
            update(Student)
            .where(Student.id == student_id)
            .values({counter: column + 1})
            .execution_options(synchronize_session=False)
        )
        return self._execute_write(stmt)

    def reset_counter(self, counter: str, value: int) -> int:
        """
        Set `counter` to `value` for every student in one statement.

        Returns:
            Number of students whose counter actually changed
        """
        column = self._counter_column(counter)
        stmt = (
            update(Student)
            .where(column != value)
            .values({counter: value})
            .execution_options(synchronize_session=False)
        )
        return self._execute_write(stmt)

    # ==================== Academic Year ====================

    def bulk_change_year(self, from_year: str, to_year: str) -> int:
        stmt = (
            update(Student)
            .where(Student.year == from_year)
            .values(year=to_year)
            .execution_options(synchronize_session=False)
        )
        return self._execute_write(stmt)

    def change_year_if(self, student_id: str, from_year: str, to_year: str) -> int:
        """Compare-and-swap the year of one student."""
        stmt = (
            update(Student)
            .where(Student.id == student_id, Student.year == from_year)
            .values(year=to_year)
            .execution_options(synchronize_session=False)
        )
        return self._execute_write(stmt)

    @staticmethod
    def _counter_column(counter: str):
        if counter not in QUOTA_COUNTERS:
            raise ValueError(f"Unknown quota counter '{counter}'")
        return getattr(Student, counter)
