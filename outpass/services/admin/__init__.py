from outpass.services.admin.admin_service import AdminService

__all__ = ["AdminService"]
