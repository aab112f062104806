"""
Pytest fixtures for the outpass test suite.

Provides:
- An in-memory SQLite database per test (StaticPool, foreign keys on)
- Services wired to that session with a deterministic clock
- Student/admin factories and actor helpers
"""

import os
from datetime import datetime, timedelta
from itertools import count

import pytest

os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.setdefault("ENVIRONMENT", "testing")

from outpass.config.database import (  # noqa: E402
    create_tables,
    drop_tables,
    get_session,
    init_engine,
    reset_engine,
)
from outpass.config.logging import setup_logging  # noqa: E402
from outpass.config.settings import get_settings  # noqa: E402
from outpass.core.policy import DEFAULT_POLICY  # noqa: E402
from outpass.models import Admin, Student  # noqa: E402
from outpass.services import (  # noqa: E402
    ActorContext,
    AdminService,
    CredentialService,
    LeaveHistoryService,
    LeaveService,
    OutingHistoryService,
    OutingService,
    StudentService,
)

TEST_PASSWORD = "secret123"

_sequence = count(1)


# =============================================================================
# Logging / settings
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    get_settings.cache_clear()
    setup_logging(get_settings())
    yield


# =============================================================================
# Database
# =============================================================================


@pytest.fixture
def engine():
    engine = init_engine("sqlite:///:memory:", echo=False)
    create_tables()
    yield engine
    drop_tables()
    reset_engine()


@pytest.fixture
def session(engine):
    session = get_session()
    yield session
    session.rollback()
    session.close()


# =============================================================================
# Clock
# =============================================================================


class FixedClock:
    """Deterministic clock; naive UTC so values round-trip through SQLite unchanged."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    return FixedClock(datetime(2025, 3, 1, 9, 0, 0))


# =============================================================================
# Services
# =============================================================================


@pytest.fixture
def policy():
    return DEFAULT_POLICY


@pytest.fixture
def credentials(session, policy):
    # Minimum bcrypt cost keeps the suite fast
    return CredentialService(session, policy, bcrypt_rounds=4)


@pytest.fixture
def leave_service(session, policy, clock):
    return LeaveService(session, policy, clock=clock)


@pytest.fixture
def outing_service(session, policy, clock):
    return OutingService(session, policy, clock=clock)


@pytest.fixture
def leave_history_service(session, policy):
    return LeaveHistoryService(session, policy)


@pytest.fixture
def outing_history_service(session, policy):
    return OutingHistoryService(session, policy)


@pytest.fixture
def student_service(session, policy, credentials):
    return StudentService(session, policy, credentials=credentials)


@pytest.fixture
def admin_service(session, policy, credentials):
    return AdminService(session, policy, credentials=credentials)


# =============================================================================
# Factories
# =============================================================================


@pytest.fixture
def password_hash(credentials):
    return credentials.hash_secret(TEST_PASSWORD)


@pytest.fixture
def make_student(session, password_hash, policy):
    """Persist a student; keyword arguments override the defaults."""

    def _make(**overrides) -> Student:
        n = next(_sequence)
        values = dict(
            name=f"Student {n}",
            phone_number="9876543210",
            email=f"student{n}@college.edu",
            year="E1",
            branch="CSE",
            room_no=f"{100 + n}",
            address="1 Campus Road",
            parent_name=f"Parent {n}",
            parent_phone_number="9123456780",
            hostel_block="A",
            password_hash=password_hash,
            remaining_outings=policy.max_outings_per_month,
            remaining_leaves=policy.max_leaves_per_semester,
        )
        values.update(overrides)
        student = Student(**values)
        session.add(student)
        session.commit()
        return student

    return _make


@pytest.fixture
def make_admin(session, password_hash):
    """Persist an admin with the given role (default caretaker of block A)."""

    def _make(role: str = "caretaker", **overrides) -> Admin:
        n = next(_sequence)
        values = dict(
            name=f"Admin {n}",
            position=role.title(),
            role=role,
            phone_number="9000000000",
            email=f"admin{n}@college.edu",
            password_hash=password_hash,
            block="A",
            gender="female",
        )
        values.update(overrides)
        admin = Admin(**values)
        session.add(admin)
        session.commit()
        return admin

    return _make


@pytest.fixture
def student_actor(make_student):
    def _actor(**overrides) -> ActorContext:
        return ActorContext.for_student(make_student(**overrides))

    return _actor


@pytest.fixture
def admin_actor(make_admin):
    def _actor(role: str = "caretaker", **overrides) -> ActorContext:
        return ActorContext.for_admin(make_admin(role, **overrides))

    return _actor


@pytest.fixture
def leave_payload():
    """Builder for a valid leave payload."""

    def _payload(**overrides) -> dict:
        payload = dict(
            out_date=datetime(2025, 3, 5, 8, 0),
            in_date=datetime(2025, 3, 8, 18, 0),
            phone_number="9876543210",
            reason="Family function",
            destination="Hyderabad",
        )
        payload.update(overrides)
        return payload

    return _payload


@pytest.fixture
def outing_payload():
    """Builder for a valid outing payload."""

    def _payload(**overrides) -> dict:
        payload = dict(
            out_time=datetime(2025, 3, 2, 10, 0),
            in_time=datetime(2025, 3, 2, 17, 0),
            phone_number="9876543210",
            purpose="Shopping",
            destination="City market",
        )
        payload.update(overrides)
        return payload

    return _payload
