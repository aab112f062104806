"""
Workflow policy.

An immutable bundle of the institutional rules the services depend on:
quota maxima, the ordered admin roles and the academic year progression.
Built once from settings and handed to each service.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from outpass.config.settings import Settings, get_settings
from outpass.core.exceptions import UnknownRoleError


@dataclass(frozen=True)
class WorkflowPolicy:
    """
    Immutable workflow configuration.

    Attributes:
        max_outings_per_month: Outing quota restored by the monthly reset
        max_leaves_per_semester: Leave quota restored by the semester reset
        admin_roles: Role identifiers ordered from lowest to highest
        academic_years: Year tags ordered from first to final year
        admin_management_min_role: Minimum role allowed to create/delete admins
    """

    max_outings_per_month: int = 4
    max_leaves_per_semester: int = 10
    admin_roles: Tuple[str, ...] = ("caretaker", "chiefwarden", "warden", "adsw", "dsw")
    academic_years: Tuple[str, ...] = ("E1", "E2", "E3", "E4")
    admin_management_min_role: str = "warden"
    role_levels: Mapping[str, int] = field(init=False, repr=False, compare=False)
    year_progression: Mapping[str, str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if len(set(self.admin_roles)) != len(self.admin_roles) or not self.admin_roles:
            raise ValueError("admin_roles must be a non-empty list of unique roles")
        if self.admin_management_min_role not in self.admin_roles:
            raise UnknownRoleError(self.admin_management_min_role)

        levels = {role: index + 1 for index, role in enumerate(self.admin_roles)}
        progression = {
            current: following
            for current, following in zip(self.academic_years, self.academic_years[1:])
        }
        object.__setattr__(self, "role_levels", MappingProxyType(levels))
        object.__setattr__(self, "year_progression", MappingProxyType(progression))

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "WorkflowPolicy":
        settings = settings or get_settings()
        return cls(
            max_outings_per_month=settings.MAX_OUTINGS_PER_MONTH,
            max_leaves_per_semester=settings.MAX_LEAVES_PER_SEMESTER,
            admin_roles=tuple(settings.ADMIN_ROLES),
            academic_years=tuple(settings.ACADEMIC_YEARS),
            admin_management_min_role=settings.ADMIN_MANAGEMENT_MIN_ROLE,
        )

    @property
    def lowest_role(self) -> str:
        return self.admin_roles[0]

    @property
    def highest_role(self) -> str:
        return self.admin_roles[-1]

    def next_year(self, year: str) -> Optional[str]:
        """Return the year that follows `year`, or None at the final year."""
        return self.year_progression.get(year)


DEFAULT_POLICY = WorkflowPolicy()

__all__ = ["WorkflowPolicy", "DEFAULT_POLICY"]
