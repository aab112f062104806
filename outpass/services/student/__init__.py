from outpass.services.student.student_service import RESTRICTED_STUDENT_FIELDS, StudentService

__all__ = ["RESTRICTED_STUDENT_FIELDS", "StudentService"]
