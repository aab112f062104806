"""
Student model.

A hostel resident who submits leave and outing requests. Carries the two
quota counters consumed by request creation.
"""

from sqlalchemy import CheckConstraint, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from outpass.models.base.base_model import TimestampModel


class Student(TimestampModel):
    """
    Student resident.

    `remaining_outings` and `remaining_leaves` are only ever changed through
    conditional UPDATE statements issued by the quota ledger, so they never
    drop below zero.
    """

    __tablename__ = "students"
    __table_args__ = (
        CheckConstraint("remaining_outings >= 0", name="ck_student_remaining_outings"),
        CheckConstraint("remaining_leaves >= 0", name="ck_student_remaining_leaves"),
    )

    name: Mapped[str] = mapped_column(String(120), nullable=False)
    phone_number: Mapped[str] = mapped_column(String(10), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    year: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        index=True,
        comment="Academic year tag (E1..E4)"
    )
    branch: Mapped[str] = mapped_column(String(120), nullable=False)
    room_no: Mapped[str] = mapped_column(String(20), nullable=False)
    address: Mapped[str] = mapped_column(Text, nullable=False)
    image: Mapped[str] = mapped_column(String(255), nullable=False, default="default.jpg")
    parent_name: Mapped[str] = mapped_column(String(120), nullable=False)
    parent_phone_number: Mapped[str] = mapped_column(String(10), nullable=False)
    hostel_block: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        index=True,
        comment="Hostel block, the unit of caretaker scoping"
    )
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    remaining_outings: Mapped[int] = mapped_column(Integer, nullable=False, default=4)
    remaining_leaves: Mapped[int] = mapped_column(Integer, nullable=False, default=10)

    def to_dict(self, exclude=None):
        exclude = list(exclude or []) + ["password_hash"]
        return super().to_dict(exclude=exclude)
