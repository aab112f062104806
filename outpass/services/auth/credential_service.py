"""
Credential store.

Password hashing with passlib/bcrypt and JWT access tokens with
python-jose. Tokens only carry the subject id and actor kind; role and
block are reloaded from the database on every resolve so a demoted or
moved admin takes effect immediately.
"""
from __future__ import annotations

import hashlib
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Union

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from outpass.config.settings import Settings, get_settings
from outpass.core.exceptions import NotAuthenticatedError, NotFoundError, ValidationError
from outpass.core.policy import WorkflowPolicy
from outpass.models.base.enums import ActorKind
from outpass.repositories.admin_repository import AdminRepository
from outpass.repositories.student_repository import StudentRepository
from outpass.services.auth.actor_context import ActorContext
from outpass.services.auth.authorization_gate import AuthorizationGate, Operation
from outpass.services.base import BaseService, ServiceResult

INVALID_CREDENTIALS = "Invalid credentials"
MIN_SECRET_LENGTH = 6


@dataclass(frozen=True)
class JWTSettings:
    """JWT configuration settings."""
    secret_key: str
    algorithm: str = "HS256"
    access_token_expires_minutes: int = 60

    def __post_init__(self) -> None:
        if not self.secret_key:
            raise ValueError("JWT secret_key cannot be empty")
        if self.access_token_expires_minutes <= 0:
            raise ValueError("access_token_expires_minutes must be positive")

    @classmethod
    def from_settings(cls, settings: Settings) -> "JWTSettings":
        return cls(
            secret_key=settings.JWT_SECRET_KEY,
            algorithm=settings.JWT_ALGORITHM,
            access_token_expires_minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES,
        )


def _prepare_secret_for_bcrypt(secret: str) -> str:
    """
    bcrypt only looks at the first 72 bytes; longer secrets are reduced to
    their SHA-256 hex digest first.
    """
    if len(secret.encode("utf-8")) > 71:
        return hashlib.sha256(secret.encode("utf-8")).hexdigest()
    return secret


class CredentialService(BaseService):
    """Hashes secrets, verifies logins and issues/resolves access tokens."""

    def __init__(
        self,
        db_session: Session,
        policy: Optional[WorkflowPolicy] = None,
        settings: Optional[Settings] = None,
        bcrypt_rounds: Optional[int] = None,
    ) -> None:
        super().__init__(db_session, policy)
        settings = settings or get_settings()
        self.jwt_settings = JWTSettings.from_settings(settings)
        self._pwd_context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=bcrypt_rounds or settings.PASSWORD_BCRYPT_ROUNDS,
        )
        self.students = StudentRepository(db_session)
        self.admins = AdminRepository(db_session)
        self.gate = AuthorizationGate(self.policy)

    # ------------------------------------------------------------------ #
    # Hashing
    # ------------------------------------------------------------------ #

    def hash_secret(self, secret: str) -> str:
        """
        Hash a plaintext secret.

        Raises:
            ValidationError: If the secret is empty
        """
        if not secret:
            raise ValidationError("Password cannot be empty", field="password")
        return self._pwd_context.hash(_prepare_secret_for_bcrypt(secret))

    def verify_secret(self, secret: str, hashed: str) -> bool:
        if not secret or not hashed:
            return False
        try:
            return self._pwd_context.verify(_prepare_secret_for_bcrypt(secret), hashed)
        except (ValueError, TypeError):
            # Malformed or unknown hash format
            return False

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def verify_credential(
        self,
        email: str,
        secret: str,
        actor_kind: Union[ActorKind, str],
    ) -> ActorContext:
        """
        Check an email/secret pair for the given actor kind.

        Raises:
            NotAuthenticatedError: With the same generic message whether the
                account is missing or the secret is wrong
            ValidationError: If `actor_kind` is neither student nor admin
        """
        try:
            kind = ActorKind(actor_kind)
        except ValueError:
            raise ValidationError("Invalid user type", field="actor_kind") from None
        if not email or not secret:
            raise ValidationError("Please provide an email and password")

        if kind == ActorKind.STUDENT:
            account = self.students.find_by_email(email)
        else:
            account = self.admins.find_by_email(email)

        if account is None or not self.verify_secret(secret, account.password_hash):
            raise NotAuthenticatedError(INVALID_CREDENTIALS)

        if kind == ActorKind.STUDENT:
            return ActorContext.for_student(account)
        return ActorContext.for_admin(account)

    def login(
        self,
        email: str,
        secret: str,
        actor_kind: Union[ActorKind, str],
    ) -> ServiceResult[Dict[str, Any]]:
        """Verify credentials and issue an access token."""
        try:
            actor = self.verify_credential(email, secret, actor_kind)
            token = self.issue_token(actor)
            self._log_operation(
                "login",
                actor.actor_id,
                {"actor_id": actor.actor_id, "actor_kind": actor.kind.value},
            )
            return ServiceResult.success({"token": token, "actor": actor})
        except Exception as e:
            return self._handle_exception(e, "log in")

    # ------------------------------------------------------------------ #
    # Tokens
    # ------------------------------------------------------------------ #

    def issue_token(self, actor: ActorContext, expires_delta: Optional[timedelta] = None) -> str:
        """Create a signed access token for `actor`."""
        now = datetime.now(timezone.utc)
        if expires_delta is None:
            expires_delta = timedelta(minutes=self.jwt_settings.access_token_expires_minutes)

        payload: Dict[str, Any] = {
            "sub": actor.actor_id,
            "kind": actor.kind.value,
            "iat": int(now.timestamp()),
            "exp": int((now + expires_delta).timestamp()),
        }
        return jwt.encode(payload, self.jwt_settings.secret_key, algorithm=self.jwt_settings.algorithm)

    def resolve_token(self, token: Optional[str]) -> ActorContext:
        """
        Decode a token and reload the actor it names.

        Raises:
            NotAuthenticatedError: Missing, malformed, expired or orphaned token
        """
        if not token:
            raise NotAuthenticatedError()
        try:
            payload = jwt.decode(
                token,
                self.jwt_settings.secret_key,
                algorithms=[self.jwt_settings.algorithm],
            )
        except ExpiredSignatureError:
            raise NotAuthenticatedError("Token has expired") from None
        except JWTError:
            raise NotAuthenticatedError() from None

        subject = payload.get("sub")
        kind = payload.get("kind")
        if kind == ActorKind.STUDENT.value:
            student = self.students.get_by_id(subject)
            if student is not None:
                return ActorContext.for_student(student)
        elif kind == ActorKind.ADMIN.value:
            admin = self.admins.get_by_id(subject)
            if admin is not None:
                return ActorContext.for_admin(admin)
        raise NotAuthenticatedError()

    # ------------------------------------------------------------------ #
    # Secret rotation
    # ------------------------------------------------------------------ #

    def change_secret(
        self,
        actor: ActorContext,
        current_secret: str,
        new_secret: str,
    ) -> ServiceResult[bool]:
        """Replace the actor's own secret after checking the current one."""
        try:
            self.gate.require(actor, Operation.CREDENTIAL_CHANGE_SECRET)
            if not current_secret or not new_secret:
                raise ValidationError("Please provide current and new password")
            if len(new_secret) < MIN_SECRET_LENGTH:
                raise ValidationError(
                    f"Password must be at least {MIN_SECRET_LENGTH} characters",
                    field="new_secret",
                )

            repository = self.students if actor.is_student else self.admins
            with self.transaction():
                account = repository.get_by_id(actor.actor_id)
                if account is None:
                    raise NotFoundError("Student" if actor.is_student else "Admin", actor.actor_id)
                if not self.verify_secret(current_secret, account.password_hash):
                    raise NotAuthenticatedError("Current password is incorrect")
                repository.update(account, {"password_hash": self.hash_secret(new_secret)})

            self._log_operation(
                "change secret",
                actor.actor_id,
                {"actor_id": actor.actor_id, "actor_kind": actor.kind.value},
            )
            return ServiceResult.success(True, message="Password updated successfully")
        except Exception as e:
            return self._handle_exception(e, "change password", actor.actor_id if actor else None)


__all__ = ["CredentialService", "JWTSettings", "INVALID_CREDENTIALS"]
