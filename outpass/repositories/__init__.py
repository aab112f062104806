"""
Repository layer.
"""

from outpass.repositories.admin_repository import AdminRepository
from outpass.repositories.base import BaseRepository
from outpass.repositories.history_repository import HistoryRepository
from outpass.repositories.request_repository import RequestRepository
from outpass.repositories.student_repository import StudentRepository

__all__ = [
    "AdminRepository",
    "BaseRepository",
    "HistoryRepository",
    "RequestRepository",
    "StudentRepository",
]
