"""
Service layer.

Every public operation takes the calling ActorContext and returns a
ServiceResult.
"""

from outpass.services.admin import AdminService
from outpass.services.auth import (
    ActorContext,
    AuthorizationGate,
    CredentialService,
    Operation,
    RoleHierarchy,
)
from outpass.services.base import BaseService, ServiceError, ServiceResult
from outpass.services.file import ImageStore, ImageUpload
from outpass.services.student import StudentService
from outpass.services.workflow import (
    LeaveHistoryService,
    LeaveService,
    OutingHistoryService,
    OutingService,
    QuotaLedger,
    RequestService,
    VisibilityScoper,
)

__all__ = [
    "ActorContext",
    "AdminService",
    "AuthorizationGate",
    "BaseService",
    "CredentialService",
    "ImageStore",
    "ImageUpload",
    "LeaveHistoryService",
    "LeaveService",
    "Operation",
    "OutingHistoryService",
    "OutingService",
    "QuotaLedger",
    "RequestService",
    "RoleHierarchy",
    "ServiceError",
    "ServiceResult",
    "StudentService",
    "VisibilityScoper",
]
