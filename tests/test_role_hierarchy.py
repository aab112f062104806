"""
Role hierarchy and workflow policy tests.

Covers:
- The caretaker < chiefwarden < warden < adsw < dsw order
- Unknown roles
- Policy derived values (role levels, year progression) and validation
"""

import pytest

from outpass.config.settings import Settings
from outpass.core.exceptions import UnknownRoleError, ValidationError
from outpass.core.policy import DEFAULT_POLICY, WorkflowPolicy
from outpass.services.auth.role_hierarchy import RoleHierarchy


class TestRoleHierarchy:

    @pytest.fixture
    def hierarchy(self):
        return RoleHierarchy(DEFAULT_POLICY)

    @pytest.mark.parametrize(
        "role,level",
        [("caretaker", 1), ("chiefwarden", 2), ("warden", 3), ("adsw", 4), ("dsw", 5)],
    )
    def test_levels(self, hierarchy, role, level):
        assert hierarchy.level_of(role) == level

    def test_unknown_role_raises(self, hierarchy):
        with pytest.raises(UnknownRoleError) as exc_info:
            hierarchy.level_of("principal")
        assert isinstance(exc_info.value, ValidationError)
        assert exc_info.value.field == "role"

    def test_none_is_unknown(self, hierarchy):
        with pytest.raises(UnknownRoleError):
            hierarchy.level_of(None)

    def test_accepts_enum_members(self, hierarchy):
        from outpass.models.base.enums import AdminRole

        assert hierarchy.level_of(AdminRole.WARDEN) == 3

    def test_outranks_is_strict(self, hierarchy):
        assert hierarchy.outranks("warden", "caretaker")
        assert not hierarchy.outranks("warden", "warden")
        assert not hierarchy.outranks("caretaker", "dsw")

    def test_highest(self, hierarchy):
        assert hierarchy.max_level == 5
        assert hierarchy.is_highest("dsw")
        assert not hierarchy.is_highest("adsw")

    def test_at_least(self, hierarchy):
        assert hierarchy.at_least("warden", "warden")
        assert hierarchy.at_least("dsw", "warden")
        assert not hierarchy.at_least("chiefwarden", "warden")


class TestWorkflowPolicy:

    def test_defaults(self):
        assert DEFAULT_POLICY.max_outings_per_month == 4
        assert DEFAULT_POLICY.max_leaves_per_semester == 10
        assert DEFAULT_POLICY.lowest_role == "caretaker"
        assert DEFAULT_POLICY.highest_role == "dsw"

    def test_year_progression(self):
        assert DEFAULT_POLICY.next_year("E1") == "E2"
        assert DEFAULT_POLICY.next_year("E3") == "E4"
        assert DEFAULT_POLICY.next_year("E4") is None
        assert DEFAULT_POLICY.next_year("E9") is None

    def test_derived_mappings_are_read_only(self):
        with pytest.raises(TypeError):
            DEFAULT_POLICY.role_levels["dean"] = 6

    def test_duplicate_roles_rejected(self):
        with pytest.raises(ValueError):
            WorkflowPolicy(admin_roles=("caretaker", "caretaker"), admin_management_min_role="caretaker")

    def test_management_role_must_exist(self):
        with pytest.raises(UnknownRoleError):
            WorkflowPolicy(admin_management_min_role="registrar")

    def test_from_settings(self):
        settings = Settings(
            MAX_OUTINGS_PER_MONTH=2,
            MAX_LEAVES_PER_SEMESTER=6,
            ADMIN_ROLES=["tutor", "head"],
            ACADEMIC_YEARS=["Y1", "Y2"],
            ADMIN_MANAGEMENT_MIN_ROLE="head",
        )
        policy = WorkflowPolicy.from_settings(settings)

        assert policy.max_outings_per_month == 2
        assert policy.max_leaves_per_semester == 6
        assert policy.role_levels == {"tutor": 1, "head": 2}
        assert policy.next_year("Y1") == "Y2"
        assert RoleHierarchy(policy).is_highest("head")

    def test_list_settings_read_as_json_from_env(self, monkeypatch):
        monkeypatch.setenv("ADMIN_ROLES", '[" tutor ", "head"]')
        monkeypatch.setenv("ACADEMIC_YEARS", '["Y1", "Y2", "Y3"]')
        monkeypatch.setenv("ADMIN_MANAGEMENT_MIN_ROLE", "head")
        monkeypatch.setenv("ALLOWED_IMAGE_EXTENSIONS", '[".PNG", "jpg"]')

        settings = Settings()

        assert settings.ADMIN_ROLES == ["tutor", "head"]
        assert settings.ALLOWED_IMAGE_EXTENSIONS == {"png", "jpg"}
        assert WorkflowPolicy.from_settings(settings).academic_years == ("Y1", "Y2", "Y3")
