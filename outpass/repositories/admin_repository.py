"""
Admin Repository
"""

from typing import List, Optional

from sqlalchemy.orm import Session

from outpass.models.admin import Admin
from outpass.repositories.base.base_repository import BaseRepository


class AdminRepository(BaseRepository[Admin]):
    """Admin repository."""

    def __init__(self, db: Session):
        super().__init__(Admin, db)

    def find_by_email(self, email: str) -> Optional[Admin]:
        return self.find_one(Admin.email == email.lower())

    def find_subordinates(self, admin_id: str) -> List[Admin]:
        """Admins whose reporting line points at `admin_id`."""
        return self.find_all(Admin.reports_to == admin_id)
