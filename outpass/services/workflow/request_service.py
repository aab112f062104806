"""
Request lifecycle engine.

One service drives both leave and outing requests through

    pending -> accepted | rejected | forwarded
    forwarded -> accepted | rejected | forwarded
    accepted -> departed (actual_out) -> returned (actual_in, archived)

Quota is consumed on create and given back when a still pending request is
deleted. Status changes are compare-and-swap updates on the status the
service last read, so two reviewers racing on the same request cannot both
win.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Union

from sqlalchemy.orm import Session

from outpass.core.exceptions import (
    DenialReason,
    ForbiddenError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from outpass.core.policy import WorkflowPolicy
from outpass.models.base.base_model import utcnow
from outpass.models.base.enums import RequestStatus
from outpass.repositories.request_repository import RequestRepository
from outpass.schemas.request import RequestDecision
from outpass.services.auth.actor_context import ActorContext
from outpass.services.auth.authorization_gate import AuthorizationGate, Operation
from outpass.services.auth.role_hierarchy import RoleHierarchy
from outpass.services.base import BaseService, ServiceResult
from outpass.services.workflow.history_archiver import HistoryArchiver
from outpass.services.workflow.quota_ledger import QuotaLedger
from outpass.services.workflow.request_kinds import LEAVE, OUTING, RequestKind
from outpass.services.workflow.visibility import VisibilityScoper

DECIDABLE_STATUSES = (RequestStatus.PENDING, RequestStatus.FORWARDED)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes for timezone-aware columns
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class RequestService(BaseService):
    """
    Lifecycle operations for one request kind.

    Every operation takes the calling actor explicitly and returns a
    ServiceResult; domain failures never escape as exceptions.
    """

    def __init__(
        self,
        db_session: Session,
        kind: RequestKind,
        policy: Optional[WorkflowPolicy] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        super().__init__(db_session, policy)
        self.kind = kind
        self.clock = clock or utcnow
        self.repository = RequestRepository(kind.model, db_session)
        self.ledger = QuotaLedger(db_session, self.policy)
        self.scoper = VisibilityScoper(db_session, self.policy)
        self.archiver = HistoryArchiver(db_session, kind)
        self.gate = AuthorizationGate(self.policy)
        self.hierarchy = RoleHierarchy(self.policy)

    # -------------------------------------------------------------------------
    # Creation and student edits
    # -------------------------------------------------------------------------

    def create(self, actor: ActorContext, payload: Union[Dict[str, Any], Any]) -> ServiceResult:
        """
        Submit a new request for the calling student.

        Consumes one quota unit in the same transaction as the insert.
        """
        try:
            self.gate.require(actor, Operation.REQUEST_CREATE)
            data = self._coerce(self.kind.create_schema, payload)
            values = self.kind.to_columns(data.model_dump(exclude_none=True))

            with self.transaction():
                self.ledger.consume(actor.actor_id, self.kind)
                entity = self.repository.create(
                    self.kind.model(
                        student_id=actor.actor_id,
                        status=RequestStatus.PENDING,
                        **values,
                    )
                )

            self._log_operation(
                f"create {self.kind.name}",
                entity.id,
                {"actor_id": actor.actor_id, "student_id": actor.actor_id},
            )
            return ServiceResult.success(entity, message=f"{self.kind.label} request created")
        except Exception as e:
            return self._handle_exception(e, f"create {self.kind.name}")

    def update(
        self,
        actor: ActorContext,
        request_id: str,
        payload: Union[Dict[str, Any], Any],
    ) -> ServiceResult:
        """Route an update to the student edit or the admin decision."""
        try:
            self.gate.require(actor, Operation.REQUEST_UPDATE)
        except Exception as e:
            return self._handle_exception(e, f"update {self.kind.name}", request_id)
        if actor.is_student:
            return self.update_by_student(actor, request_id, payload)
        return self.decide(actor, request_id, payload)

    def update_by_student(
        self,
        actor: ActorContext,
        request_id: str,
        payload: Union[Dict[str, Any], Any],
    ) -> ServiceResult:
        """
        Edit the owning student's pending request.

        Only the schedule window, phone number, reason/purpose and
        destination may change; any other field is rejected.
        """
        try:
            self.gate.require(actor, Operation.REQUEST_UPDATE_BY_STUDENT)
            changes = self.kind.to_columns(self._coerce(self.kind.update_schema, payload).changes())

            entity = self._load(request_id)
            if entity.student_id != actor.actor_id:
                raise ForbiddenError(
                    f"Not authorized to update this {self.kind.name}",
                    reason=DenialReason.OUT_OF_SCOPE,
                )
            if entity.status != RequestStatus.PENDING:
                raise InvalidTransitionError(
                    f"Cannot update {self.kind.name} that is not pending",
                    current_status=entity.status.value,
                )

            scheduled_out = changes.get("scheduled_out", entity.scheduled_out)
            scheduled_in = changes.get("scheduled_in", entity.scheduled_in)
            if _as_utc(scheduled_in) < _as_utc(scheduled_out):
                raise ValidationError(
                    f"{self.kind.label} return must not be before departure",
                    field="scheduled_in",
                )

            if not changes:
                return ServiceResult.success(entity, message="Nothing to update")

            with self.transaction():
                changes["status"] = RequestStatus.PENDING
                if not self.repository.transition_status(entity.id, RequestStatus.PENDING, changes):
                    raise InvalidTransitionError(
                        f"Cannot update {self.kind.name} that is not pending",
                        current_status=self._current_status(entity.id),
                    )

            self._log_operation(
                f"update {self.kind.name}",
                entity.id,
                {"actor_id": actor.actor_id, "student_id": actor.actor_id},
            )
            return ServiceResult.success(self._load(entity.id), message=f"{self.kind.label} request updated")
        except Exception as e:
            return self._handle_exception(e, f"update {self.kind.name}", request_id)

    # -------------------------------------------------------------------------
    # Admin decisions and movement events
    # -------------------------------------------------------------------------

    def decide(
        self,
        actor: ActorContext,
        request_id: str,
        decision: Union[Dict[str, Any], RequestDecision],
    ) -> ServiceResult:
        """Accept, reject or forward a pending or forwarded request."""
        try:
            self.gate.require(actor, Operation.REQUEST_DECIDE)
            decision = self._coerce(RequestDecision, decision)
            target = decision.status

            if target == RequestStatus.PENDING:
                raise InvalidTransitionError(
                    "A decision must accept, reject or forward the request",
                    target_status=target.value,
                )
            if target == RequestStatus.REJECTED and not decision.remarks:
                raise ValidationError(
                    f"Remarks are required when rejecting {self.kind.article} {self.kind.name}",
                    field="remarks",
                )
            if target == RequestStatus.FORWARDED and self.hierarchy.is_highest(actor.role):
                raise InvalidTransitionError(
                    "Cannot forward from highest authority level",
                    target_status=target.value,
                )

            entity = self._load(request_id)
            self.scoper.ensure_can_access(actor, entity.student_id, self.kind.name)

            current = entity.status
            if current not in DECIDABLE_STATUSES:
                raise InvalidTransitionError(
                    f"{self.kind.label} has already been {current.value}",
                    current_status=current.value,
                    target_status=target.value,
                )

            values: Dict[str, Any] = {
                "status": target,
                "accepted_by": actor.actor_id if target == RequestStatus.ACCEPTED else None,
            }
            if "remarks" in decision.model_fields_set:
                values["remarks"] = decision.remarks

            with self.transaction():
                if not self.repository.transition_status(entity.id, current, values):
                    raise InvalidTransitionError(
                        f"{self.kind.label} was changed by another reviewer",
                        current_status=self._current_status(entity.id),
                        target_status=target.value,
                    )

            self._log_operation(
                f"{target.value} {self.kind.name}",
                entity.id,
                {
                    "actor_id": actor.actor_id,
                    "actor_kind": actor.kind.value,
                    "student_id": entity.student_id,
                    "from_status": current.value,
                },
            )
            return ServiceResult.success(self._load(entity.id), message=f"{self.kind.label} {target.value}")
        except Exception as e:
            return self._handle_exception(e, f"decide {self.kind.name}", request_id)

    def record_departure(self, actor: ActorContext, request_id: str) -> ServiceResult:
        """Stamp the actual departure of an accepted request."""
        try:
            self.gate.require(actor, Operation.REQUEST_RECORD_DEPARTURE)
            entity = self._load(request_id)
            self.scoper.ensure_can_access(actor, entity.student_id, self.kind.name)

            if entity.status != RequestStatus.ACCEPTED:
                raise InvalidTransitionError(
                    f"Only accepted {self.kind.name}s can be recorded",
                    current_status=entity.status.value,
                )
            if entity.has_departed:
                raise InvalidTransitionError(
                    f"{self.kind.label} departure has already been recorded",
                    current_status=entity.status.value,
                )

            with self.transaction():
                if not self.repository.mark_departed(entity.id, self.clock()):
                    raise InvalidTransitionError(
                        f"{self.kind.label} departure has already been recorded",
                        current_status=self._current_status(entity.id),
                    )

            self._log_operation(
                f"record {self.kind.name} departure",
                entity.id,
                {"actor_id": actor.actor_id, "student_id": entity.student_id},
            )
            return ServiceResult.success(self._load(entity.id), message="Departure recorded")
        except Exception as e:
            return self._handle_exception(e, f"record {self.kind.name} departure", request_id)

    def record_return(self, actor: ActorContext, request_id: str) -> ServiceResult:
        """
        Stamp the actual return and archive the request to history.

        Both happen in one transaction; if archiving fails the return is
        not recorded either.
        """
        try:
            self.gate.require(actor, Operation.REQUEST_RECORD_RETURN)
            entity = self._load(request_id)
            self.scoper.ensure_can_access(actor, entity.student_id, self.kind.name)

            if not entity.has_departed:
                raise InvalidTransitionError(
                    f"{self.kind.departure_label} must be recorded first",
                    current_status=entity.status.value,
                )
            if entity.has_returned:
                raise InvalidTransitionError(
                    f"{self.kind.label} return has already been recorded",
                    current_status=entity.status.value,
                )

            with self.transaction():
                if not self.repository.mark_returned(entity.id, self.clock()):
                    raise InvalidTransitionError(
                        f"{self.kind.label} return has already been recorded",
                        current_status=self._current_status(entity.id),
                    )
                record = self.archiver.archive(self._load(entity.id))

            self._log_operation(
                f"record {self.kind.name} return",
                entity.id,
                {"actor_id": actor.actor_id, "student_id": entity.student_id},
            )
            return ServiceResult.success(
                self._load(entity.id),
                message="Return recorded",
                metadata={"history_id": record.id},
            )
        except Exception as e:
            return self._handle_exception(e, f"record {self.kind.name} return", request_id)

    # -------------------------------------------------------------------------
    # Deletion
    # -------------------------------------------------------------------------

    def delete(self, actor: ActorContext, request_id: str) -> ServiceResult[bool]:
        """
        Remove a request.

        Students may delete their own pending requests; admins any request
        in scope. A request deleted while still pending gives its quota
        unit back.
        """
        try:
            self.gate.require(actor, Operation.REQUEST_DELETE)
            entity = self._load(request_id)
            student_id = entity.student_id
            seen_status = entity.status

            if actor.is_student:
                if student_id != actor.actor_id:
                    raise ForbiddenError(
                        f"Not authorized to delete this {self.kind.name}",
                        reason=DenialReason.OUT_OF_SCOPE,
                    )
                if seen_status != RequestStatus.PENDING:
                    raise InvalidTransitionError(
                        f"Cannot delete {self.kind.name} that is not pending",
                        current_status=seen_status.value,
                    )
            else:
                self.scoper.ensure_can_access(actor, student_id, self.kind.name)

            with self.transaction():
                if not self.repository.delete_if_status(request_id, seen_status):
                    raise InvalidTransitionError(
                        f"{self.kind.label} was changed concurrently, retry the delete",
                        current_status=seen_status.value,
                    )
                if seen_status == RequestStatus.PENDING:
                    self.ledger.restore(student_id, self.kind)

            self._log_operation(
                f"delete {self.kind.name}",
                request_id,
                {
                    "actor_id": actor.actor_id,
                    "actor_kind": actor.kind.value,
                    "student_id": student_id,
                    "quota_restored": seen_status == RequestStatus.PENDING,
                },
            )
            return ServiceResult.success(True, message=f"{self.kind.label} deleted")
        except Exception as e:
            return self._handle_exception(e, f"delete {self.kind.name}", request_id)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get(self, actor: ActorContext, request_id: str) -> ServiceResult:
        try:
            self.gate.require(actor, Operation.REQUEST_GET)
            entity = self._load(request_id)
            self.scoper.ensure_can_access(actor, entity.student_id, self.kind.name)
            return ServiceResult.success(entity)
        except Exception as e:
            return self._handle_exception(e, f"get {self.kind.name}", request_id)

    def list(self, actor: ActorContext) -> ServiceResult[List[Any]]:
        """All requests visible to the actor, newest first."""
        try:
            self.gate.require(actor, Operation.REQUEST_LIST)
            items = self.repository.find_scoped(student_ids=self.scoper.student_ids_for(actor))
            return ServiceResult.success(items, metadata={"count": len(items)})
        except Exception as e:
            return self._handle_exception(e, f"list {self.kind.name}s")

    def list_pending(self, actor: ActorContext) -> ServiceResult[List[Any]]:
        """
        The admin's review queue.

        Caretakers get pending requests of their block; higher roles get
        pending and forwarded requests across all blocks.
        """
        try:
            self.gate.require(actor, Operation.REQUEST_LIST_PENDING)
            items = self.repository.find_scoped(
                student_ids=self.scoper.student_ids_for(actor),
                statuses=self.scoper.pending_statuses(actor),
            )
            return ServiceResult.success(items, metadata={"count": len(items)})
        except Exception as e:
            return self._handle_exception(e, f"list pending {self.kind.name}s")

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _load(self, request_id: str):
        entity = self.repository.get_by_id(request_id)
        if entity is None:
            raise NotFoundError(self.kind.label, request_id)
        return entity

    def _current_status(self, request_id: str) -> Optional[str]:
        entity = self.repository.get_by_id(request_id)
        return entity.status.value if entity is not None else None


class LeaveService(RequestService):
    """Request service bound to leaves."""

    def __init__(self, db_session: Session, policy: Optional[WorkflowPolicy] = None, clock=None):
        super().__init__(db_session, LEAVE, policy, clock)


class OutingService(RequestService):
    """Request service bound to outings."""

    def __init__(self, db_session: Session, policy: Optional[WorkflowPolicy] = None, clock=None):
        super().__init__(db_session, OUTING, policy, clock)


__all__ = ["RequestService", "LeaveService", "OutingService", "DECIDABLE_STATUSES"]
