"""
Leave/outing workflow: lifecycle engine, quota ledger, visibility and history.
"""

from outpass.services.workflow.history_archiver import HistoryArchiver
from outpass.services.workflow.history_service import (
    HistoryService,
    LeaveHistoryService,
    OutingHistoryService,
)
from outpass.services.workflow.quota_ledger import QuotaLedger
from outpass.services.workflow.request_kinds import LEAVE, OUTING, RequestKind
from outpass.services.workflow.request_service import (
    LeaveService,
    OutingService,
    RequestService,
)
from outpass.services.workflow.visibility import VisibilityScoper

__all__ = [
    "HistoryArchiver",
    "HistoryService",
    "LEAVE",
    "LeaveHistoryService",
    "LeaveService",
    "OUTING",
    "OutingHistoryService",
    "OutingService",
    "QuotaLedger",
    "RequestKind",
    "RequestService",
    "VisibilityScoper",
]
