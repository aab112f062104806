"""
Admin directory service.

Admins can only create, edit or delete admins strictly below their own
role, and can only hand out roles strictly below their own. Editing one's
own profile is always allowed.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from sqlalchemy.orm import Session

from outpass.core.exceptions import DenialReason, ForbiddenError, NotFoundError, ValidationError
from outpass.core.policy import WorkflowPolicy
from outpass.models.admin import Admin
from outpass.repositories.admin_repository import AdminRepository
from outpass.schemas.admin import AdminCreate, AdminUpdate
from outpass.services.auth.actor_context import ActorContext
from outpass.services.auth.authorization_gate import AuthorizationGate, Operation
from outpass.services.auth.credential_service import CredentialService
from outpass.services.auth.role_hierarchy import RoleHierarchy
from outpass.services.base import BaseService, ServiceResult

Payload = Union[Dict[str, Any], Any]


class AdminService(BaseService):
    """Directory of caretakers, wardens and deans."""

    def __init__(
        self,
        db_session: Session,
        policy: Optional[WorkflowPolicy] = None,
        credentials: Optional[CredentialService] = None,
    ):
        super().__init__(db_session, policy)
        self.repository = AdminRepository(db_session)
        self.credentials = credentials or CredentialService(db_session, self.policy)
        self.gate = AuthorizationGate(self.policy)
        self.hierarchy = RoleHierarchy(self.policy)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def list_admins(self, actor: ActorContext) -> ServiceResult[List[Admin]]:
        try:
            self.gate.require(actor, Operation.ADMIN_LIST)
            admins = self.repository.find_all()
            return ServiceResult.success(admins, metadata={"count": len(admins)})
        except Exception as e:
            return self._handle_exception(e, "list admins")

    def get_admin(self, actor: ActorContext, admin_id: str) -> ServiceResult[Admin]:
        try:
            self.gate.require(actor, Operation.ADMIN_GET)
            return ServiceResult.success(self._load(admin_id))
        except Exception as e:
            return self._handle_exception(e, "get admin", admin_id)

    def list_subordinates(self, actor: ActorContext, admin_id: str) -> ServiceResult[List[Admin]]:
        """Admins whose reporting line points at `admin_id`."""
        try:
            self.gate.require(actor, Operation.ADMIN_LIST_SUBORDINATES)
            subordinates = self.repository.find_subordinates(admin_id)
            return ServiceResult.success(subordinates, metadata={"count": len(subordinates)})
        except Exception as e:
            return self._handle_exception(e, "list subordinates", admin_id)

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def create_admin(self, actor: ActorContext, payload: Payload) -> ServiceResult[Admin]:
        try:
            self.gate.require(actor, Operation.ADMIN_CREATE)
            data = self._coerce(AdminCreate, payload)

            if not self.gate.can_assign_role(actor, data.role):
                raise ForbiddenError(
                    "You can only create admins with lower role levels than yours",
                    reason=DenialReason.INSUFFICIENT_ROLE,
                    details={"role": data.role},
                )
            self._check_email_free(data.email)
            if data.reports_to is not None:
                self._load(data.reports_to)

            values = data.model_dump(mode="json", exclude={"password"})
            admin = Admin(**values, password_hash=self.credentials.hash_secret(data.password))
            with self.transaction():
                self.repository.create(admin)

            self._log_operation(
                "create admin",
                admin.id,
                {"actor_id": actor.actor_id, "role": admin.role},
            )
            return ServiceResult.success(admin, message="Admin created")
        except Exception as e:
            return self._handle_exception(e, "create admin")

    def update_admin(self, actor: ActorContext, admin_id: str, payload: Payload) -> ServiceResult[Admin]:
        try:
            self.gate.require(actor, Operation.ADMIN_UPDATE)
            admin = self._load(admin_id)

            if not self.gate.can_manage_admin(actor, admin.id, admin.role):
                raise ForbiddenError(
                    "You can only update admins with lower role levels than yours",
                    reason=DenialReason.INSUFFICIENT_ROLE,
                )

            changes = self._coerce(AdminUpdate, payload).model_dump(mode="json", exclude_unset=True)

            new_role = changes.get("role")
            if new_role is not None and new_role != admin.role:
                if not self.gate.can_assign_role(actor, new_role):
                    raise ForbiddenError(
                        "You cannot assign a role equal to or higher than your own",
                        reason=DenialReason.INSUFFICIENT_ROLE,
                        details={"role": new_role},
                    )
            if changes.get("email") and changes["email"] != admin.email:
                self._check_email_free(changes["email"])
            if changes.get("reports_to") is not None:
                if changes["reports_to"] == admin.id:
                    raise ValidationError("An admin cannot report to themself", field="reports_to")
                self._load(changes["reports_to"])

            password = changes.pop("password", None)
            if password:
                changes["password_hash"] = self.credentials.hash_secret(password)

            with self.transaction():
                self.repository.update(admin, changes)

            self._log_operation(
                "update admin",
                admin.id,
                {"actor_id": actor.actor_id, "fields": sorted(changes)},
            )
            return ServiceResult.success(admin, message="Admin updated")
        except Exception as e:
            return self._handle_exception(e, "update admin", admin_id)

    def delete_admin(self, actor: ActorContext, admin_id: str) -> ServiceResult[bool]:
        """Delete an admin strictly below the actor; their reports are detached."""
        try:
            self.gate.require(actor, Operation.ADMIN_DELETE)
            admin = self._load(admin_id)

            if not self.hierarchy.outranks(actor.role, admin.role):
                raise ForbiddenError(
                    "You can only delete admins with lower role levels than yours",
                    reason=DenialReason.INSUFFICIENT_ROLE,
                )

            with self.transaction():
                for subordinate in self.repository.find_subordinates(admin.id):
                    self.repository.update(subordinate, {"reports_to": None})
                self.repository.delete(admin)

            self._log_operation("delete admin", admin_id, {"actor_id": actor.actor_id})
            return ServiceResult.success(True, message="Admin deleted")
        except Exception as e:
            return self._handle_exception(e, "delete admin", admin_id)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _load(self, admin_id: str) -> Admin:
        admin = self.repository.get_by_id(admin_id)
        if admin is None:
            raise NotFoundError("Admin", admin_id)
        return admin

    def _check_email_free(self, email: str) -> None:
        if self.repository.find_by_email(email) is not None:
            raise ValidationError(f"Email '{email}' is already registered", field="email")


__all__ = ["AdminService"]
