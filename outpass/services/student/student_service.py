"""
Student roster service.

Admin management of student records: creation (single and bulk), profile
edits, academic year upgrades and the quota resets. Students may read and
edit their own profile, except for the academic year and quota counters.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from sqlalchemy.orm import Session

from outpass.core.exceptions import (
    DenialReason,
    ForbiddenError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from outpass.core.policy import WorkflowPolicy
from outpass.models.request import Leave, Outing
from outpass.models.student import Student
from outpass.repositories.request_repository import RequestRepository
from outpass.repositories.student_repository import StudentRepository
from outpass.schemas.student import (
    StudentAdminUpdate,
    StudentBulkCreate,
    StudentCreate,
    StudentSelfUpdate,
)
from outpass.services.auth.actor_context import ActorContext
from outpass.services.auth.authorization_gate import AuthorizationGate, Operation
from outpass.services.auth.credential_service import CredentialService
from outpass.services.base import BaseService, ServiceResult
from outpass.services.file.image_store import ImageStore, ImageUpload
from outpass.services.workflow.quota_ledger import QuotaLedger
from outpass.services.workflow.visibility import VisibilityScoper

# Fields only an admin may change on a student record
RESTRICTED_STUDENT_FIELDS = ("year", "remaining_outings", "remaining_leaves")

Payload = Union[Dict[str, Any], Any]


class StudentService(BaseService):
    """Roster operations on student records."""

    def __init__(
        self,
        db_session: Session,
        policy: Optional[WorkflowPolicy] = None,
        credentials: Optional[CredentialService] = None,
        image_store: Optional[ImageStore] = None,
    ):
        super().__init__(db_session, policy)
        self.repository = StudentRepository(db_session)
        self.leaves = RequestRepository(Leave, db_session)
        self.outings = RequestRepository(Outing, db_session)
        self.credentials = credentials or CredentialService(db_session, self.policy)
        self.image_store = image_store
        self.ledger = QuotaLedger(db_session, self.policy)
        self.scoper = VisibilityScoper(db_session, self.policy)
        self.gate = AuthorizationGate(self.policy)

    # -------------------------------------------------------------------------
    # Creation
    # -------------------------------------------------------------------------

    def create_student(
        self,
        actor: ActorContext,
        payload: Payload,
        image: Optional[ImageUpload] = None,
    ) -> ServiceResult[Student]:
        """Create a student with full quotas and a hashed password."""
        stored_image = None
        try:
            self.gate.require(actor, Operation.STUDENT_CREATE)
            data = self._coerce(StudentCreate, payload)
            self._check_year(data.year)
            self._check_email_free(data.email)

            stored_image = self._store_image(image)
            student = self._build_student(data, stored_image)
            with self.transaction():
                self.repository.create(student)

            self._log_operation(
                "create student",
                student.id,
                {"actor_id": actor.actor_id, "student_id": student.id},
            )
            return ServiceResult.success(student, message="Student created")
        except Exception as e:
            self._discard_image(stored_image)
            return self._handle_exception(e, "create student")

    def bulk_create_students(self, actor: ActorContext, payload: Payload) -> ServiceResult[List[Student]]:
        """Create many students in one transaction; any invalid entry fails the batch."""
        try:
            self.gate.require(actor, Operation.STUDENT_BULK_CREATE)
            data = self._coerce(StudentBulkCreate, payload)

            seen = set()
            for index, entry in enumerate(data.students):
                self._check_year(entry.year)
                if entry.email in seen:
                    raise ValidationError(
                        f"Duplicate email '{entry.email}' in batch",
                        field=f"students.{index}.email",
                    )
                seen.add(entry.email)
                self._check_email_free(entry.email)

            students = [self._build_student(entry, None) for entry in data.students]
            with self.transaction():
                self.repository.create_many(students)

            self._log_operation(
                "bulk create students",
                extra={"actor_id": actor.actor_id, "count": len(students)},
            )
            return ServiceResult.success(
                students,
                message=f"Created {len(students)} students",
                metadata={"count": len(students)},
            )
        except Exception as e:
            return self._handle_exception(e, "bulk create students")

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def list_students(self, actor: ActorContext) -> ServiceResult[List[Student]]:
        try:
            self.gate.require(actor, Operation.STUDENT_LIST)
            if self.scoper.is_block_scoped(actor):
                students = self.repository.find_by_block(actor.block)
            else:
                students = self.repository.find_all()
            return ServiceResult.success(students, metadata={"count": len(students)})
        except Exception as e:
            return self._handle_exception(e, "list students")

    def get_student(self, actor: ActorContext, student_id: str) -> ServiceResult[Student]:
        try:
            self.gate.require(actor, Operation.STUDENT_GET)
            student = self._load(student_id)
            self.scoper.ensure_can_access(actor, student.id, "student profile")
            return ServiceResult.success(student)
        except Exception as e:
            return self._handle_exception(e, "get student", student_id)

    # -------------------------------------------------------------------------
    # Updates
    # -------------------------------------------------------------------------

    def update_student(
        self,
        actor: ActorContext,
        student_id: str,
        payload: Payload,
        image: Optional[ImageUpload] = None,
    ) -> ServiceResult[Student]:
        """
        Edit a student record.

        Admins may change every field including year and quotas; a student
        may change only their own profile fields.
        """
        stored_image = None
        try:
            self.gate.require(actor, Operation.STUDENT_UPDATE)
            student = self._load(student_id)

            if actor.is_student:
                if actor.actor_id != student.id:
                    raise ForbiddenError(
                        "Not authorized to update this student profile",
                        reason=DenialReason.OUT_OF_SCOPE,
                    )
                self._reject_restricted_fields(payload)
                changes = self._coerce(StudentSelfUpdate, payload).changes()
            else:
                self.scoper.ensure_can_access(actor, student.id, "student profile")
                changes = self._coerce(StudentAdminUpdate, payload).changes()
                if "year" in changes:
                    self._check_year(changes["year"])

            if changes.get("email") and changes["email"] != student.email:
                self._check_email_free(changes["email"])
            password = changes.pop("password", None)
            if password:
                changes["password_hash"] = self.credentials.hash_secret(password)

            stored_image = self._store_image(image)
            if stored_image:
                changes["image"] = stored_image

            with self.transaction():
                self.repository.update(student, changes)

            self._log_operation(
                "update student",
                student.id,
                {
                    "actor_id": actor.actor_id,
                    "actor_kind": actor.kind.value,
                    "student_id": student.id,
                    "fields": sorted(changes),
                },
            )
            return ServiceResult.success(student, message="Student updated")
        except Exception as e:
            self._discard_image(stored_image)
            return self._handle_exception(e, "update student", student_id)

    def delete_student(self, actor: ActorContext, student_id: str) -> ServiceResult[bool]:
        """
        Remove a student record.

        Refused while leave or outing requests still reference the student;
        archived history is kept.
        """
        try:
            self.gate.require(actor, Operation.STUDENT_DELETE)
            student = self._load(student_id)
            self.scoper.ensure_can_access(actor, student.id, "student profile")

            open_requests = self.leaves.count_for_student(student.id) + self.outings.count_for_student(student.id)
            if open_requests:
                raise ValidationError(
                    "Student still has leave or outing requests; delete them first",
                    details={"requests": open_requests},
                )

            with self.transaction():
                self.repository.delete(student)

            self._log_operation("delete student", student_id, {"actor_id": actor.actor_id})
            return ServiceResult.success(True, message="Student deleted")
        except Exception as e:
            return self._handle_exception(e, "delete student", student_id)

    # -------------------------------------------------------------------------
    # Academic year
    # -------------------------------------------------------------------------

    def upgrade_year(self, actor: ActorContext, student_id: str) -> ServiceResult[Student]:
        """Move one student to the following academic year."""
        try:
            self.gate.require(actor, Operation.STUDENT_UPGRADE_YEAR)
            student = self._load(student_id)
            self.scoper.ensure_can_access(actor, student.id, "student profile")

            current = student.year
            following = self.policy.next_year(current)
            if following is None:
                raise ValidationError("Cannot upgrade year further", field="year")

            with self.transaction():
                if not self.repository.change_year_if(student.id, current, following):
                    raise InvalidTransitionError(
                        "Student year was changed concurrently",
                        current_status=current,
                        target_status=following,
                    )

            self._log_operation(
                "upgrade student year",
                student.id,
                {"actor_id": actor.actor_id, "student_id": student.id, "from": current, "to": following},
            )
            return ServiceResult.success(self._load(student.id), message=f"Upgraded from {current} to {following}")
        except Exception as e:
            return self._handle_exception(e, "upgrade student year", student_id)

    def bulk_upgrade_year(self, actor: ActorContext, year: Optional[str]) -> ServiceResult[int]:
        """Move every student of `year` to the following year in one statement."""
        try:
            self.gate.require(actor, Operation.STUDENT_BULK_UPGRADE_YEAR)
            if not year:
                raise ValidationError("Please provide a year to upgrade", field="year")
            following = self.policy.next_year(year)
            if following is None:
                raise ValidationError("Invalid year or cannot upgrade further", field="year")

            with self.transaction():
                count = self.repository.bulk_change_year(year, following)

            message = f"Upgraded {count} students from {year} to {following}"
            self._log_operation("bulk upgrade year", extra={"actor_id": actor.actor_id, "count": count})
            return ServiceResult.success(count, message=message, metadata={"count": count})
        except Exception as e:
            return self._handle_exception(e, "bulk upgrade student year")

    # -------------------------------------------------------------------------
    # Quota resets
    # -------------------------------------------------------------------------

    def reset_outing_quota(self, actor: ActorContext) -> ServiceResult[int]:
        """Monthly reset of every student's outing counter."""
        try:
            self.gate.require(actor, Operation.STUDENT_RESET_OUTING_QUOTA)
            with self.transaction():
                count = self.ledger.reset_outing_quota()
            self._log_operation("reset outing quota", extra={"actor_id": actor.actor_id, "count": count})
            return ServiceResult.success(
                count,
                message=f"Reset outing count for {count} students",
                metadata={"count": count},
            )
        except Exception as e:
            return self._handle_exception(e, "reset outing quota")

    def reset_leave_quota(self, actor: ActorContext) -> ServiceResult[int]:
        """Semester reset of every student's leave counter."""
        try:
            self.gate.require(actor, Operation.STUDENT_RESET_LEAVE_QUOTA)
            with self.transaction():
                count = self.ledger.reset_leave_quota()
            self._log_operation("reset leave quota", extra={"actor_id": actor.actor_id, "count": count})
            return ServiceResult.success(
                count,
                message=f"Reset leave count for {count} students",
                metadata={"count": count},
            )
        except Exception as e:
            return self._handle_exception(e, "reset leave quota")

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _load(self, student_id: str) -> Student:
        student = self.repository.get_by_id(student_id)
        if student is None:
            raise NotFoundError("Student", student_id)
        return student

    def _build_student(self, data: StudentCreate, image: Optional[str]) -> Student:
        values = data.model_dump(exclude={"password", "image"})
        return Student(
            **values,
            image=image or data.image or "default.jpg",
            password_hash=self.credentials.hash_secret(data.password),
            remaining_outings=self.policy.max_outings_per_month,
            remaining_leaves=self.policy.max_leaves_per_semester,
        )

    def _check_year(self, year: str) -> None:
        if year not in self.policy.academic_years:
            raise ValidationError(
                f"Unknown academic year '{year}'",
                field="year",
                details={"allowed": list(self.policy.academic_years)},
            )

    def _check_email_free(self, email: str) -> None:
        if self.repository.find_by_email(email) is not None:
            raise ValidationError(f"Email '{email}' is already registered", field="email")

    @staticmethod
    def _reject_restricted_fields(payload: Payload) -> None:
        sent = payload.keys() if isinstance(payload, dict) else getattr(payload, "model_fields_set", set())
        blocked = sorted(field for field in RESTRICTED_STUDENT_FIELDS if field in sent)
        if blocked:
            raise ValidationError(
                "Students cannot change their academic year or quota counters",
                field=blocked[0],
                details={"fields": blocked},
            )

    def _store_image(self, image: Optional[ImageUpload]) -> Optional[str]:
        if image is None:
            return None
        if self.image_store is None:
            self.image_store = ImageStore()
        return self.image_store.store_upload(image)

    def _discard_image(self, reference: Optional[str]) -> None:
        if reference and self.image_store is not None:
            self.image_store.discard(reference)


__all__ = ["StudentService", "RESTRICTED_STUDENT_FIELDS"]
