"""
Student roster tests.

Covers:
- Single and all-or-nothing bulk creation
- Profile edits by students and admins, restricted fields
- Academic year upgrades, single and bulk
- Quota resets
- Deletion guard while requests exist
"""

import pytest

from outpass.core.exceptions import ErrorCode
from outpass.models import Student
from outpass.services import ImageStore, ImageUpload, StudentService

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


@pytest.fixture
def student_payload():
    counter = iter(range(1, 1000))

    def _payload(**overrides):
        n = next(counter)
        payload = dict(
            name=f"New Student {n}",
            phone_number="9876500000",
            email=f"new{n}@college.edu",
            year="E1",
            branch="ECE",
            room_no="12",
            address="2 Campus Road",
            parent_name="Guardian",
            parent_phone_number="9123400000",
            hostel_block="A",
            password="welcome1",
        )
        payload.update(overrides)
        return payload

    return _payload


def students_with_year(session, year):
    return session.query(Student).filter_by(year=year).count()


# =============================================================================
# Creation
# =============================================================================


class TestCreateStudent:

    def test_create_with_full_quotas(self, student_service, admin_actor, student_payload, credentials):
        result = student_service.create_student(admin_actor("caretaker"), student_payload(email="Mixed@College.edu"))

        assert result.is_success
        student = result.data
        assert student.email == "mixed@college.edu"
        assert student.remaining_outings == 4
        assert student.remaining_leaves == 10
        assert student.image == "default.jpg"
        assert credentials.verify_secret("welcome1", student.password_hash)

    def test_unknown_year(self, student_service, admin_actor, student_payload):
        result = student_service.create_student(admin_actor("warden"), student_payload(year="E9"))

        assert result.error_code == ErrorCode.VALIDATION_ERROR
        assert result.error.field == "year"

    def test_duplicate_email(self, student_service, admin_actor, student_payload, make_student):
        existing = make_student()

        result = student_service.create_student(admin_actor("warden"), student_payload(email=existing.email))

        assert result.error_code == ErrorCode.VALIDATION_ERROR

    def test_students_cannot_create(self, student_service, student_actor, student_payload):
        result = student_service.create_student(student_actor(), student_payload())

        assert result.error_code == ErrorCode.FORBIDDEN

    def test_create_with_image(self, session, policy, credentials, admin_actor, student_payload, tmp_path):
        service = StudentService(session, policy, credentials=credentials, image_store=ImageStore(upload_dir=tmp_path))

        result = service.create_student(
            admin_actor("warden"),
            student_payload(),
            image=ImageUpload(PNG_BYTES, "my photo.png", "image/png"),
        )

        assert result.is_success
        assert result.data.image.startswith("image_my_photo_")
        assert (tmp_path / result.data.image).read_bytes() == PNG_BYTES

    def test_rejected_image_creates_nothing(self, session, policy, credentials, admin_actor, student_payload, tmp_path):
        service = StudentService(session, policy, credentials=credentials, image_store=ImageStore(upload_dir=tmp_path))

        result = service.create_student(
            admin_actor("warden"),
            student_payload(),
            image=ImageUpload(b"%PDF-1.4", "cv.pdf", "application/pdf"),
        )

        assert result.error_code == ErrorCode.VALIDATION_ERROR
        assert result.error.message == "Only image files (jpeg, jpg, png, gif) are allowed"
        assert session.query(Student).count() == 0
        assert list(tmp_path.iterdir()) == []


class TestBulkCreate:

    def test_creates_all(self, session, student_service, admin_actor, student_payload):
        result = student_service.bulk_create_students(
            admin_actor("warden"),
            {"students": [student_payload(), student_payload(year="E2")]},
        )

        assert result.is_success
        assert result.metadata["count"] == 2
        assert session.query(Student).count() == 2

    def test_one_bad_entry_fails_batch(self, session, student_service, admin_actor, student_payload):
        result = student_service.bulk_create_students(
            admin_actor("warden"),
            {"students": [student_payload(), student_payload(year="X1")]},
        )

        assert result.error_code == ErrorCode.VALIDATION_ERROR
        assert session.query(Student).count() == 0

    def test_duplicate_email_in_batch(self, session, student_service, admin_actor, student_payload):
        result = student_service.bulk_create_students(
            admin_actor("warden"),
            {"students": [student_payload(email="twin@college.edu"), student_payload(email="twin@college.edu")]},
        )

        assert result.error_code == ErrorCode.VALIDATION_ERROR
        assert result.error.field == "students.1.email"
        assert session.query(Student).count() == 0

    def test_empty_batch(self, student_service, admin_actor):
        result = student_service.bulk_create_students(admin_actor("warden"), {"students": []})

        assert result.error_code == ErrorCode.VALIDATION_ERROR


# =============================================================================
# Reads and updates
# =============================================================================


class TestReadStudents:

    def test_caretaker_lists_block(self, student_service, make_student, admin_actor):
        in_block = make_student(hostel_block="A")
        make_student(hostel_block="B")

        result = student_service.list_students(admin_actor("caretaker", block="A"))

        assert [s.id for s in result.data] == [in_block.id]

    def test_warden_lists_all(self, student_service, make_student, admin_actor):
        make_student(hostel_block="A")
        make_student(hostel_block="B")

        result = student_service.list_students(admin_actor("warden"))

        assert result.metadata["count"] == 2

    def test_student_reads_own_profile(self, student_service, student_actor):
        student = student_actor()

        assert student_service.get_student(student, student.actor_id).is_success

    def test_student_cannot_read_other_profile(self, student_service, student_actor):
        result = student_service.get_student(student_actor(), student_actor().actor_id)

        assert result.error_code == ErrorCode.FORBIDDEN
        assert result.error.message == "Not authorized to access this student profile"

    def test_missing_student(self, student_service, admin_actor):
        assert student_service.get_student(admin_actor("warden"), "missing").error_code == ErrorCode.NOT_FOUND


class TestUpdateStudent:

    def test_student_updates_profile(self, student_service, student_actor):
        student = student_actor()

        result = student_service.update_student(student, student.actor_id, {"room_no": "301"})

        assert result.is_success
        assert result.data.room_no == "301"

    @pytest.mark.parametrize("field, value", [
        ("year", "E2"),
        ("remaining_outings", 4),
        ("remaining_leaves", 10),
    ])
    def test_student_cannot_touch_restricted(self, session, student_service, student_actor, field, value):
        student = student_actor(remaining_outings=0, remaining_leaves=0)

        result = student_service.update_student(student, student.actor_id, {field: value})

        assert result.error_code == ErrorCode.VALIDATION_ERROR
        assert result.error.message == "Students cannot change their academic year or quota counters"
        stored = session.get(Student, student.actor_id)
        assert (stored.year, stored.remaining_outings, stored.remaining_leaves) == ("E1", 0, 0)

    def test_student_cannot_update_other(self, student_service, student_actor):
        result = student_service.update_student(student_actor(), student_actor().actor_id, {"room_no": "1"})

        assert result.error_code == ErrorCode.FORBIDDEN

    def test_admin_changes_year_and_quota(self, student_service, make_student, admin_actor):
        student = make_student()

        result = student_service.update_student(
            admin_actor("warden"), student.id, {"year": "E3", "remaining_outings": 2}
        )

        assert result.is_success
        assert result.data.year == "E3"
        assert result.data.remaining_outings == 2

    def test_admin_unknown_year(self, student_service, make_student, admin_actor):
        result = student_service.update_student(admin_actor("warden"), make_student().id, {"year": "E7"})

        assert result.error_code == ErrorCode.VALIDATION_ERROR

    def test_password_is_rehashed(self, student_service, student_actor, credentials, session):
        student = student_actor()

        student_service.update_student(student, student.actor_id, {"password": "newsecret"})

        assert credentials.verify_secret("newsecret", session.get(Student, student.actor_id).password_hash)

    def test_caretaker_cannot_update_other_block(self, student_service, make_student, admin_actor):
        student = make_student(hostel_block="B")

        result = student_service.update_student(admin_actor("caretaker", block="A"), student.id, {"room_no": "9"})

        assert result.error_code == ErrorCode.FORBIDDEN


class TestDeleteStudent:

    def test_delete_without_requests(self, session, student_service, make_student, admin_actor):
        student = make_student()

        result = student_service.delete_student(admin_actor("warden"), student.id)

        assert result.is_success
        assert session.get(Student, student.id) is None

    def test_refused_while_requests_exist(self, session, student_service, leave_service, student_actor, leave_payload, admin_actor):
        student = student_actor()
        leave_service.create(student, leave_payload())

        result = student_service.delete_student(admin_actor("warden"), student.actor_id)

        assert result.error_code == ErrorCode.VALIDATION_ERROR
        assert session.get(Student, student.actor_id) is not None


# =============================================================================
# Academic year
# =============================================================================


class TestUpgradeYear:

    def test_single_upgrade(self, student_service, make_student, admin_actor):
        student = make_student(year="E2")

        result = student_service.upgrade_year(admin_actor("warden"), student.id)

        assert result.is_success
        assert result.data.year == "E3"
        assert result.message == "Upgraded from E2 to E3"

    def test_final_year_cannot_upgrade(self, student_service, make_student, admin_actor):
        result = student_service.upgrade_year(admin_actor("warden"), make_student(year="E4").id)

        assert result.error_code == ErrorCode.VALIDATION_ERROR
        assert result.error.message == "Cannot upgrade year further"

    def test_bulk_upgrade_then_final(self, session, student_service, make_student, admin_actor):
        warden = admin_actor("warden")
        make_student(year="E3")
        make_student(year="E3")
        make_student(year="E1")

        first = student_service.bulk_upgrade_year(warden, "E3")
        second = student_service.bulk_upgrade_year(warden, "E4")

        assert first.data == 2
        assert first.message == "Upgraded 2 students from E3 to E4"
        assert students_with_year(session, "E4") == 2
        assert students_with_year(session, "E1") == 1
        assert second.error_code == ErrorCode.VALIDATION_ERROR
        assert second.error.message == "Invalid year or cannot upgrade further"

    def test_bulk_upgrade_requires_year(self, student_service, admin_actor):
        result = student_service.bulk_upgrade_year(admin_actor("warden"), None)

        assert result.error.message == "Please provide a year to upgrade"

    def test_bulk_upgrade_with_no_students(self, student_service, admin_actor):
        result = student_service.bulk_upgrade_year(admin_actor("warden"), "E1")

        assert result.is_success
        assert result.data == 0


# =============================================================================
# Quota resets
# =============================================================================


class TestQuotaReset:

    def test_reset_outings(self, session, student_service, make_student, admin_actor):
        used = make_student(remaining_outings=1, remaining_leaves=3)
        make_student()

        result = student_service.reset_outing_quota(admin_actor("warden"))

        assert result.data == 1
        assert result.message == "Reset outing count for 1 students"
        stored = session.get(Student, used.id)
        assert stored.remaining_outings == 4
        assert stored.remaining_leaves == 3

    def test_reset_leaves(self, session, student_service, make_student, admin_actor):
        used = make_student(remaining_leaves=0)

        result = student_service.reset_leave_quota(admin_actor("caretaker"))

        assert result.data == 1
        assert session.get(Student, used.id).remaining_leaves == 10

    def test_students_cannot_reset(self, student_service, student_actor):
        assert student_service.reset_leave_quota(student_actor()).error_code == ErrorCode.FORBIDDEN
