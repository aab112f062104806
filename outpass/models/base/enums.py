"""
Database enums shared by models, schemas and services.
"""

import enum


class ActorKind(str, enum.Enum):
    """Kind of authenticated caller."""
    STUDENT = "student"
    ADMIN = "admin"


class AdminRole(str, enum.Enum):
    """Default admin roles, lowest first. The active order lives in WorkflowPolicy."""
    CARETAKER = "caretaker"
    CHIEF_WARDEN = "chiefwarden"
    WARDEN = "warden"
    ADSW = "adsw"
    DSW = "dsw"


class RequestStatus(str, enum.Enum):
    """Decision status of a leave or outing request."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    FORWARDED = "forwarded"


class AcademicYear(str, enum.Enum):
    """Default academic year tags."""
    E1 = "E1"
    E2 = "E2"
    E3 = "E3"
    E4 = "E4"


class Gender(str, enum.Enum):
    """Gender enumeration."""
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"
