"""
Credential service tests.

Covers:
- Hashing and verification, including long secrets
- Login for both actor kinds with a generic failure message
- Token issue/resolve, expiry and tampering
- Secret rotation
"""

from datetime import timedelta

import pytest

from outpass.core.exceptions import ErrorCode, NotAuthenticatedError, ValidationError
from outpass.models import ActorKind
from outpass.services import ActorContext
from outpass.services.auth.credential_service import INVALID_CREDENTIALS

# Password hashed by the conftest factories
TEST_PASSWORD = "secret123"


class TestHashing:

    def test_hash_and_verify(self, credentials):
        hashed = credentials.hash_secret("hunter22")

        assert hashed != "hunter22"
        assert credentials.verify_secret("hunter22", hashed)
        assert not credentials.verify_secret("hunter23", hashed)

    def test_long_secret(self, credentials):
        secret = "x" * 100
        hashed = credentials.hash_secret(secret)

        assert credentials.verify_secret(secret, hashed)
        assert not credentials.verify_secret("x" * 99, hashed)

    def test_empty_secret_rejected(self, credentials):
        with pytest.raises(ValidationError):
            credentials.hash_secret("")

    def test_malformed_hash(self, credentials):
        assert not credentials.verify_secret("anything", "not-a-hash")


class TestLogin:

    def test_student_login(self, credentials, make_student):
        student = make_student()

        result = credentials.login(student.email, TEST_PASSWORD, "student")

        assert result.is_success
        assert result.data["actor"].actor_id == student.id
        assert result.data["actor"].kind == ActorKind.STUDENT
        assert result.data["token"]

    def test_admin_login_carries_role(self, credentials, make_admin):
        admin = make_admin("warden", block="B")

        actor = credentials.verify_credential(admin.email, TEST_PASSWORD, ActorKind.ADMIN)

        assert actor.role == "warden"
        assert actor.block == "B"

    def test_wrong_password_and_unknown_email_look_alike(self, credentials, make_student):
        student = make_student()

        wrong = credentials.login(student.email, "wrongpass", "student")
        unknown = credentials.login("nobody@college.edu", TEST_PASSWORD, "student")

        assert wrong.error_code == unknown.error_code == ErrorCode.NOT_AUTHENTICATED
        assert wrong.error.message == unknown.error.message == INVALID_CREDENTIALS

    def test_student_cannot_log_in_as_admin(self, credentials, make_student):
        student = make_student()

        result = credentials.login(student.email, TEST_PASSWORD, "admin")

        assert result.error_code == ErrorCode.NOT_AUTHENTICATED

    def test_invalid_actor_kind(self, credentials):
        result = credentials.login("a@college.edu", TEST_PASSWORD, "parent")

        assert result.error_code == ErrorCode.VALIDATION_ERROR
        assert result.error.message == "Invalid user type"

    def test_missing_fields(self, credentials):
        assert credentials.login("", "", "student").error_code == ErrorCode.VALIDATION_ERROR


class TestTokens:

    def test_round_trip_reloads_actor(self, session, credentials, make_admin):
        admin = make_admin("caretaker", block="A")
        token = credentials.issue_token(ActorContext.for_admin(admin))

        # Moved to another block after the token was issued
        admin.block = "D"
        session.commit()

        actor = credentials.resolve_token(token)
        assert actor.actor_id == admin.id
        assert actor.block == "D"

    def test_expired_token(self, credentials, make_student):
        token = credentials.issue_token(
            ActorContext.for_student(make_student()),
            expires_delta=timedelta(seconds=-10),
        )

        with pytest.raises(NotAuthenticatedError) as exc_info:
            credentials.resolve_token(token)
        assert exc_info.value.message == "Token has expired"

    def test_tampered_token(self, credentials, make_student):
        token = credentials.issue_token(ActorContext.for_student(make_student()))

        with pytest.raises(NotAuthenticatedError):
            credentials.resolve_token(token[:-4] + "abcd")

    def test_missing_token(self, credentials):
        with pytest.raises(NotAuthenticatedError):
            credentials.resolve_token(None)

    def test_deleted_subject(self, session, credentials, make_student):
        student = make_student()
        token = credentials.issue_token(ActorContext.for_student(student))
        session.delete(student)
        session.commit()

        with pytest.raises(NotAuthenticatedError):
            credentials.resolve_token(token)


class TestChangeSecret:

    def test_change_and_log_in_with_new(self, credentials, make_student):
        student = make_student()
        actor = ActorContext.for_student(student)

        result = credentials.change_secret(actor, TEST_PASSWORD, "brandnew1")

        assert result.is_success
        assert result.message == "Password updated successfully"
        assert credentials.login(student.email, "brandnew1", "student").is_success
        assert not credentials.login(student.email, TEST_PASSWORD, "student").is_success

    def test_wrong_current_secret(self, credentials, make_admin):
        actor = ActorContext.for_admin(make_admin("warden"))

        result = credentials.change_secret(actor, "notmine", "brandnew1")

        assert result.error_code == ErrorCode.NOT_AUTHENTICATED
        assert result.error.message == "Current password is incorrect"

    def test_new_secret_too_short(self, credentials, make_student):
        actor = ActorContext.for_student(make_student())

        result = credentials.change_secret(actor, TEST_PASSWORD, "abc")

        assert result.error_code == ErrorCode.VALIDATION_ERROR

    def test_requires_actor(self, credentials):
        assert credentials.change_secret(None, TEST_PASSWORD, "brandnew1").error_code == ErrorCode.NOT_AUTHENTICATED
