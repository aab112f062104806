"""
Leave and outing request models.

Both request kinds share the timed request shape: a scheduled out/in
window, the actual departure and return times recorded by an admin, and a
decision status. They differ only in their domain field (`reason` for a
leave, `purpose` for an outing) and the outing's calendar date.
"""

from datetime import date, datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Date, DateTime, Enum, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, declared_attr, mapped_column, relationship

from outpass.models.base.base_model import TimestampModel, utcnow
from outpass.models.base.enums import RequestStatus

if TYPE_CHECKING:
    from outpass.models.student import Student

__all__ = ["TimedRequestMixin", "Leave", "Outing"]


class TimedRequestMixin:
    """Columns shared by every request kind."""

    @declared_attr
    def student_id(cls) -> Mapped[str]:
        return mapped_column(
            String(36),
            ForeignKey("students.id", ondelete="RESTRICT"),
            nullable=False,
            index=True,
            comment="Owning student"
        )

    @declared_attr
    def accepted_by(cls) -> Mapped[Optional[str]]:
        return mapped_column(
            String(36),
            ForeignKey("admins.id", ondelete="SET NULL"),
            nullable=True,
            comment="Admin who accepted the request"
        )

    @declared_attr
    def student(cls) -> Mapped["Student"]:
        return relationship("Student", lazy="joined")

    scheduled_out: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        comment="Planned departure"
    )
    scheduled_in: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        comment="Planned return"
    )
    actual_out: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="Departure recorded by an admin"
    )
    actual_in: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="Return recorded by an admin"
    )
    phone_number: Mapped[str] = mapped_column(String(10), nullable=False)
    destination: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[RequestStatus] = mapped_column(
        Enum(
            RequestStatus,
            native_enum=False,
            length=20,
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        nullable=False,
        default=RequestStatus.PENDING,
        index=True,
    )
    remarks: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    @property
    def has_departed(self) -> bool:
        return self.actual_out is not None

    @property
    def has_returned(self) -> bool:
        return self.actual_in is not None


class Leave(TimedRequestMixin, TimestampModel):
    """Multi-day leave from the hostel, counted against the semester quota."""

    __tablename__ = "leaves"
    __table_args__ = (
        Index("ix_leaves_student_status", "student_id", "status"),
    )

    reason: Mapped[str] = mapped_column(Text, nullable=False)


class Outing(TimedRequestMixin, TimestampModel):
    """Same-day outing, counted against the monthly quota."""

    __tablename__ = "outings"
    __table_args__ = (
        Index("ix_outings_student_status", "student_id", "status"),
    )

    purpose: Mapped[str] = mapped_column(Text, nullable=False)
    outing_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        default=lambda: utcnow().date(),
        comment="Calendar day of the outing"
    )
