"""
History models.

Append-only snapshots of completed requests, written once when the return
is recorded. `student_id` is a plain indexed column rather than a foreign
key so the archive outlives the student and request rows.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from outpass.models.base.base_model import TimestampModel

__all__ = ["HistoryMixin", "LeaveHistory", "OutingHistory"]


class HistoryMixin:
    """Columns shared by both history record kinds."""

    request_id: Mapped[str] = mapped_column(
        String(36),
        nullable=False,
        unique=True,
        comment="Originating request (one history record per request)"
    )
    student_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    scheduled_out: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    scheduled_in: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    actual_out: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    actual_in: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    destination: Mapped[str] = mapped_column(Text, nullable=False)
    remarks: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class LeaveHistory(HistoryMixin, TimestampModel):
    __tablename__ = "leave_history"

    reason: Mapped[str] = mapped_column(Text, nullable=False)


class OutingHistory(HistoryMixin, TimestampModel):
    __tablename__ = "outing_history"

    purpose: Mapped[str] = mapped_column(Text, nullable=False)
