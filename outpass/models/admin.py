"""
Admin model.

Caretakers, wardens and deans who review requests. `reports_to` records the
organisational reporting line and plays no part in authorization.
"""

from typing import Optional

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from outpass.models.base.base_model import TimestampModel


class Admin(TimestampModel):
    """Administrator with a role in the approval hierarchy."""

    __tablename__ = "admins"

    name: Mapped[str] = mapped_column(String(120), nullable=False)
    position: Mapped[str] = mapped_column(String(120), nullable=False)
    role: Mapped[str] = mapped_column(
        String(30),
        nullable=False,
        index=True,
        comment="Role identifier from the workflow policy"
    )
    phone_number: Mapped[str] = mapped_column(String(10), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    reports_to: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("admins.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    block: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    gender: Mapped[str] = mapped_column(String(10), nullable=False)

    def to_dict(self, exclude=None):
        exclude = list(exclude or []) + ["password_hash"]
        return super().to_dict(exclude=exclude)
