"""
Authenticated caller as seen by the service layer.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from outpass.models.base.enums import ActorKind

if TYPE_CHECKING:
    from outpass.models.admin import Admin
    from outpass.models.student import Student

@dataclass(frozen=True)
class ActorContext:
    """
    Represents an authenticated student or admin.

    Attributes:
        actor_id: Id of the student or admin record
        kind: Whether the caller is a student or an admin
        role: Admin role identifier, None for students
        block: Hostel block of the student, or the block an admin manages
    """
    actor_id: str
    kind: ActorKind
    role: Optional[str] = None
    block: Optional[str] = None

    @classmethod
    def for_student(cls, student: "Student") -> "ActorContext":
        return cls(actor_id=student.id, kind=ActorKind.STUDENT, block=student.hostel_block)

    @classmethod
    def for_admin(cls, admin: "Admin") -> "ActorContext":
        return cls(actor_id=admin.id, kind=ActorKind.ADMIN, role=admin.role, block=admin.block)

    @property
    def is_student(self) -> bool:
        return self.kind == ActorKind.STUDENT

    @property
    def is_admin(self) -> bool:
        return self.kind == ActorKind.ADMIN


__all__ = ["ActorContext"]
