"""
Authorization gate tests.

Covers:
- Allow / Deny decisions with their denial reasons
- require() raising NotAuthenticated / Forbidden
- Role assignment and admin management helpers
- Every operation having a rule
"""

import pytest

from outpass.core.exceptions import (
    DenialReason,
    ForbiddenError,
    NotAuthenticatedError,
    UnknownRoleError,
)
from outpass.models.base.enums import ActorKind
from outpass.services.auth.actor_context import ActorContext
from outpass.services.auth.authorization_gate import (
    Allow,
    AuthorizationGate,
    Deny,
    Operation,
    OperationRule,
)


def student(actor_id="s-1"):
    return ActorContext(actor_id=actor_id, kind=ActorKind.STUDENT, block="A")


def admin(role, actor_id=None, block="A"):
    return ActorContext(actor_id=actor_id or f"a-{role}", kind=ActorKind.ADMIN, role=role, block=block)


@pytest.fixture
def gate():
    return AuthorizationGate()


class TestAuthorize:

    def test_every_operation_has_a_rule(self, gate):
        for operation in Operation:
            assert isinstance(gate.rule_for(operation), OperationRule)

    def test_missing_actor_is_not_authenticated(self, gate):
        decision = gate.authorize(None, Operation.REQUEST_LIST)
        assert isinstance(decision, Deny)
        assert decision.reason == DenialReason.NOT_AUTHENTICATED
        assert not decision

    def test_student_on_admin_operation(self, gate):
        decision = gate.authorize(student(), Operation.REQUEST_DECIDE)
        assert isinstance(decision, Deny)
        assert decision.reason == DenialReason.WRONG_ACTOR_KIND

    def test_admin_on_student_operation(self, gate):
        decision = gate.authorize(admin("dsw"), Operation.REQUEST_CREATE)
        assert isinstance(decision, Deny)
        assert decision.reason == DenialReason.WRONG_ACTOR_KIND

    @pytest.mark.parametrize("role", ["caretaker", "chiefwarden"])
    def test_admin_management_requires_warden(self, gate, role):
        for operation in (Operation.ADMIN_CREATE, Operation.ADMIN_DELETE):
            decision = gate.authorize(admin(role), operation)
            assert isinstance(decision, Deny)
            assert decision.reason == DenialReason.INSUFFICIENT_ROLE

    @pytest.mark.parametrize("role", ["warden", "adsw", "dsw"])
    def test_warden_and_above_may_manage_admins(self, gate, role):
        assert isinstance(gate.authorize(admin(role), Operation.ADMIN_CREATE), Allow)

    def test_any_admin_may_update_admins(self, gate):
        assert gate.authorize(admin("caretaker"), Operation.ADMIN_UPDATE)

    def test_unknown_admin_role_is_denied(self, gate):
        decision = gate.authorize(admin("janitor"), Operation.REQUEST_LIST_PENDING)
        assert isinstance(decision, Deny)
        assert decision.reason == DenialReason.INSUFFICIENT_ROLE

    def test_shared_operations_allow_both_kinds(self, gate):
        assert gate.authorize(student(), Operation.REQUEST_GET)
        assert gate.authorize(admin("caretaker"), Operation.REQUEST_GET)

    def test_operation_table_override(self):
        gate = AuthorizationGate(
            operations={Operation.STUDENT_RESET_LEAVE_QUOTA: OperationRule(ActorKind.ADMIN, "dsw")}
        )
        assert not gate.authorize(admin("warden"), Operation.STUDENT_RESET_LEAVE_QUOTA)
        assert gate.authorize(admin("dsw"), Operation.STUDENT_RESET_LEAVE_QUOTA)


class TestRequire:

    def test_returns_actor_when_allowed(self, gate):
        actor = admin("warden")
        assert gate.require(actor, Operation.ADMIN_CREATE) is actor

    def test_raises_not_authenticated(self, gate):
        with pytest.raises(NotAuthenticatedError):
            gate.require(None, Operation.REQUEST_LIST)

    def test_raises_forbidden_with_reason(self, gate):
        with pytest.raises(ForbiddenError) as exc_info:
            gate.require(admin("caretaker"), Operation.ADMIN_DELETE)
        assert exc_info.value.reason == DenialReason.INSUFFICIENT_ROLE
        assert exc_info.value.details["reason"] == "INSUFFICIENT_ROLE"


class TestRoleManagement:

    def test_can_assign_only_lower_roles(self, gate):
        warden = admin("warden")
        assert gate.can_assign_role(warden, "chiefwarden")
        assert not gate.can_assign_role(warden, "warden")
        assert not gate.can_assign_role(warden, "dsw")

    def test_students_cannot_assign_roles(self, gate):
        assert not gate.can_assign_role(student(), "caretaker")

    def test_unknown_target_role(self, gate):
        with pytest.raises(UnknownRoleError):
            gate.can_assign_role(admin("dsw"), "registrar")

    def test_can_manage_self_regardless_of_role(self, gate):
        caretaker = admin("caretaker", actor_id="a-1")
        assert gate.can_manage_admin(caretaker, "a-1", "caretaker")

    def test_can_manage_only_lower_admins(self, gate):
        adsw = admin("adsw")
        assert gate.can_manage_admin(adsw, "other", "warden")
        assert not gate.can_manage_admin(adsw, "other", "adsw")
        assert not gate.can_manage_admin(adsw, "other", "dsw")
