"""
Authorization gate.

Every service operation is named in a single operation table that states
which kind of actor may call it and, for admin operations, the minimum role.
Record level scoping (own records, caretaker block) is not decided here; the
visibility scoper re-checks single records after they are fetched.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Mapping, Optional, Union

from outpass.config.logging import get_logger
from outpass.core.exceptions import DenialReason, ForbiddenError, NotAuthenticatedError
from outpass.core.policy import DEFAULT_POLICY, WorkflowPolicy
from outpass.models.base.enums import ActorKind
from outpass.services.auth.actor_context import ActorContext
from outpass.services.auth.role_hierarchy import RoleHierarchy

logger = get_logger(__name__)


class Operation(str, Enum):
    """Named service operations guarded by the gate."""

    # Requests (leave and outing)
    REQUEST_CREATE = "request.create"
    REQUEST_UPDATE = "request.update"
    REQUEST_UPDATE_BY_STUDENT = "request.update_by_student"
    REQUEST_DECIDE = "request.decide"
    REQUEST_RECORD_DEPARTURE = "request.record_departure"
    REQUEST_RECORD_RETURN = "request.record_return"
    REQUEST_DELETE = "request.delete"
    REQUEST_GET = "request.get"
    REQUEST_LIST = "request.list"
    REQUEST_LIST_PENDING = "request.list_pending"

    # History
    HISTORY_LIST = "history.list"
    HISTORY_GET = "history.get"
    HISTORY_LIST_FOR_STUDENT = "history.list_for_student"

    # Student roster
    STUDENT_CREATE = "student.create"
    STUDENT_BULK_CREATE = "student.bulk_create"
    STUDENT_LIST = "student.list"
    STUDENT_GET = "student.get"
    STUDENT_UPDATE = "student.update"
    STUDENT_DELETE = "student.delete"
    STUDENT_UPGRADE_YEAR = "student.upgrade_year"
    STUDENT_BULK_UPGRADE_YEAR = "student.bulk_upgrade_year"
    STUDENT_RESET_OUTING_QUOTA = "student.reset_outing_quota"
    STUDENT_RESET_LEAVE_QUOTA = "student.reset_leave_quota"

    # Admin directory
    ADMIN_LIST = "admin.list"
    ADMIN_GET = "admin.get"
    ADMIN_CREATE = "admin.create"
    ADMIN_UPDATE = "admin.update"
    ADMIN_DELETE = "admin.delete"
    ADMIN_LIST_SUBORDINATES = "admin.list_subordinates"

    # Credentials
    CREDENTIAL_CHANGE_SECRET = "credential.change_secret"


@dataclass(frozen=True)
class OperationRule:
    """
    Who may invoke an operation.

    Attributes:
        actor_kind: Required actor kind, None when students and admins both may
        min_role: Minimum admin role, None when any admin role suffices
    """
    actor_kind: Optional[ActorKind] = None
    min_role: Optional[str] = None


@dataclass(frozen=True)
class Allow:
    allowed: bool = True

    def __bool__(self) -> bool:
        return True


@dataclass(frozen=True)
class Deny:
    reason: DenialReason
    message: str
    allowed: bool = False

    def __bool__(self) -> bool:
        return False


AuthorizationDecision = Union[Allow, Deny]

ANY_ACTOR = OperationRule()
STUDENT_ONLY = OperationRule(actor_kind=ActorKind.STUDENT)
ADMIN_ONLY = OperationRule(actor_kind=ActorKind.ADMIN)


def build_operation_table(policy: WorkflowPolicy) -> Dict[Operation, OperationRule]:
    """Default operation table for `policy`."""
    admin_manager = OperationRule(
        actor_kind=ActorKind.ADMIN,
        min_role=policy.admin_management_min_role,
    )
    return {
        Operation.REQUEST_CREATE: STUDENT_ONLY,
        Operation.REQUEST_UPDATE: ANY_ACTOR,
        Operation.REQUEST_UPDATE_BY_STUDENT: STUDENT_ONLY,
        Operation.REQUEST_DECIDE: ADMIN_ONLY,
        Operation.REQUEST_RECORD_DEPARTURE: ADMIN_ONLY,
        Operation.REQUEST_RECORD_RETURN: ADMIN_ONLY,
        Operation.REQUEST_DELETE: ANY_ACTOR,
        Operation.REQUEST_GET: ANY_ACTOR,
        Operation.REQUEST_LIST: ANY_ACTOR,
        Operation.REQUEST_LIST_PENDING: ADMIN_ONLY,
        Operation.HISTORY_LIST: ANY_ACTOR,
        Operation.HISTORY_GET: ANY_ACTOR,
        Operation.HISTORY_LIST_FOR_STUDENT: ANY_ACTOR,
        Operation.STUDENT_CREATE: ADMIN_ONLY,
        Operation.STUDENT_BULK_CREATE: ADMIN_ONLY,
        Operation.STUDENT_LIST: ADMIN_ONLY,
        Operation.STUDENT_GET: ANY_ACTOR,
        Operation.STUDENT_UPDATE: ANY_ACTOR,
        Operation.STUDENT_DELETE: ADMIN_ONLY,
        Operation.STUDENT_UPGRADE_YEAR: ADMIN_ONLY,
        Operation.STUDENT_BULK_UPGRADE_YEAR: ADMIN_ONLY,
        Operation.STUDENT_RESET_OUTING_QUOTA: ADMIN_ONLY,
        Operation.STUDENT_RESET_LEAVE_QUOTA: ADMIN_ONLY,
        Operation.ADMIN_LIST: ADMIN_ONLY,
        Operation.ADMIN_GET: ADMIN_ONLY,
        Operation.ADMIN_CREATE: admin_manager,
        Operation.ADMIN_UPDATE: ADMIN_ONLY,
        Operation.ADMIN_DELETE: admin_manager,
        Operation.ADMIN_LIST_SUBORDINATES: ADMIN_ONLY,
        Operation.CREDENTIAL_CHANGE_SECRET: ANY_ACTOR,
    }


class AuthorizationGate:
    """Decides whether an actor may invoke an operation."""

    def __init__(
        self,
        policy: Optional[WorkflowPolicy] = None,
        operations: Optional[Mapping[Operation, OperationRule]] = None,
    ) -> None:
        self.policy = policy or DEFAULT_POLICY
        self.hierarchy = RoleHierarchy(self.policy)
        self.operations: Dict[Operation, OperationRule] = build_operation_table(self.policy)
        if operations:
            self.operations.update(operations)

    def rule_for(self, operation: Operation) -> OperationRule:
        try:
            return self.operations[Operation(operation)]
        except (KeyError, ValueError):
            raise KeyError(f"No authorization rule for operation '{operation}'") from None

    def authorize(self, actor: Optional[ActorContext], operation: Operation) -> AuthorizationDecision:
        """Evaluate the operation rule for `actor` without raising."""
        rule = self.rule_for(operation)

        if actor is None:
            return Deny(DenialReason.NOT_AUTHENTICATED, "Not authorized to access this route")

        if rule.actor_kind is not None and actor.kind != rule.actor_kind:
            if rule.actor_kind == ActorKind.ADMIN:
                message = "Only admins can access this route"
            else:
                message = "Only students can access this route"
            return Deny(DenialReason.WRONG_ACTOR_KIND, message)

        if actor.is_admin:
            if not self.hierarchy.is_known(actor.role):
                return Deny(
                    DenialReason.INSUFFICIENT_ROLE,
                    f"User role {actor.role} is not authorized to access this route",
                )
            if rule.min_role is not None and not self.hierarchy.at_least(actor.role, rule.min_role):
                return Deny(
                    DenialReason.INSUFFICIENT_ROLE,
                    f"User role {actor.role} does not have sufficient privileges",
                )

        return Allow()

    def require(self, actor: Optional[ActorContext], operation: Operation) -> ActorContext:
        """
        Raise unless `actor` may invoke `operation`.

        Raises:
            NotAuthenticatedError: When there is no actor
            ForbiddenError: When the actor kind or role does not satisfy the rule
        """
        decision = self.authorize(actor, operation)
        if isinstance(decision, Deny):
            if decision.reason == DenialReason.NOT_AUTHENTICATED:
                raise NotAuthenticatedError(decision.message)
            logger.warning(
                f"Denied {Operation(operation).value}: {decision.reason.value}",
                extra={"actor_id": actor.actor_id, "actor_kind": actor.kind.value, "operation": Operation(operation).value},
            )
            raise ForbiddenError(decision.message, reason=decision.reason)
        return actor

    # ==================== Role management ====================

    def can_assign_role(self, actor: ActorContext, target_role: str) -> bool:
        """An admin may only hand out roles strictly below their own."""
        if actor is None or not actor.is_admin:
            return False
        return self.hierarchy.outranks(actor.role, target_role)

    def can_manage_admin(self, actor: ActorContext, target_id: str, target_role: str) -> bool:
        """An admin may manage themself or admins strictly below them."""
        if actor is None or not actor.is_admin:
            return False
        if actor.actor_id == target_id:
            return True
        return self.hierarchy.outranks(actor.role, target_role)


__all__ = [
    "Allow",
    "AuthorizationDecision",
    "AuthorizationGate",
    "Deny",
    "Operation",
    "OperationRule",
    "build_operation_table",
]
