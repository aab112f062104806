from outpass.services.auth.actor_context import ActorContext
from outpass.services.auth.authorization_gate import (
    Allow,
    AuthorizationDecision,
    AuthorizationGate,
    Deny,
    Operation,
    OperationRule,
)
from outpass.services.auth.credential_service import CredentialService, JWTSettings
from outpass.services.auth.role_hierarchy import RoleHierarchy

__all__ = [
    "ActorContext",
    "Allow",
    "AuthorizationDecision",
    "AuthorizationGate",
    "CredentialService",
    "Deny",
    "JWTSettings",
    "Operation",
    "OperationRule",
    "RoleHierarchy",
]
