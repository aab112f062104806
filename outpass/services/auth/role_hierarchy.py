"""
Total order over admin roles.

Levels come from the workflow policy (caretaker=1 ... dsw=5 by default).
"""
from __future__ import annotations

from typing import Optional

from outpass.core.exceptions import UnknownRoleError
from outpass.core.policy import DEFAULT_POLICY, WorkflowPolicy


class RoleHierarchy:
    """Compares admin roles by their level."""

    def __init__(self, policy: Optional[WorkflowPolicy] = None) -> None:
        self.policy = policy or DEFAULT_POLICY

    def level_of(self, role: str) -> int:
        """
        Numeric level of `role`.

        Raises:
            UnknownRoleError: If `role` is not part of the hierarchy
        """
        role = getattr(role, "value", role)
        try:
            return self.policy.role_levels[role]
        except (KeyError, TypeError):
            raise UnknownRoleError(role) from None

    @property
    def max_level(self) -> int:
        return len(self.policy.admin_roles)

    def is_known(self, role: str) -> bool:
        return getattr(role, "value", role) in self.policy.role_levels

    def is_highest(self, role: str) -> bool:
        return self.level_of(role) == self.max_level

    def outranks(self, role: str, other: str) -> bool:
        """True when `role` is strictly above `other`."""
        return self.level_of(role) > self.level_of(other)

    def at_least(self, role: str, minimum: str) -> bool:
        return self.level_of(role) >= self.level_of(minimum)


__all__ = ["RoleHierarchy"]
