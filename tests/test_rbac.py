"""Tests for the permission table and permission checks.

Covers the Role/AccessLevel enums, the feature catalogue, has_permission,
has_admin_permission, and immutability of the table.
"""

from __future__ import annotations

import pytest

from expensemanager.rbac import (
    ADMIN_ONLY_FEATURE,
    FEATURE_ACCESS,
    PERMISSIONS,
    AccessLevel,
    PermissionTable,
    Role,
    has_admin_permission,
    has_permission,
    role_display_name,
)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class TestRoleEnum:
    def test_all_roles_defined(self):
        assert set(Role) == {"admin", "manager", "accountant", "user"}

    def test_role_is_strenum(self):
        assert str(Role.ADMIN) == "admin"
        assert f"role={Role.USER}" == "role=user"

    def test_access_levels_are_ordered(self):
        assert AccessLevel.NONE < AccessLevel.BASIC < AccessLevel.ADVANCED < AccessLevel.FULL
        assert int(AccessLevel.FULL) == 3

    def test_display_names(self):
        assert role_display_name(Role.ADMIN) == "Administrator"
        assert role_display_name("user") == "Regular User"

    def test_display_name_unknown_role_passes_through(self):
        assert role_display_name("auditor") == "auditor"


# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------


class TestFeatureCatalogue:
    def test_feature_count(self):
        assert len(PERMISSIONS) == 12

    def test_admin_has_full_access_everywhere(self):
        for feature in PERMISSIONS.features:
            assert PERMISSIONS.level(Role.ADMIN, feature) == AccessLevel.FULL

    @pytest.mark.parametrize(
        ("feature", "levels"),
        [
            ("create_expense", (3, 2, 1, 1)),
            ("view_all_expenses", (3, 2, 1, 0)),
            ("edit_all_expenses", (3, 2, 1, 0)),
            ("delete_all_expenses", (3, 0, 0, 0)),
            ("create_category", (3, 2, 0, 0)),
            ("edit_categories", (3, 2, 0, 0)),
            ("delete_categories", (3, 0, 0, 0)),
            ("export_reports", (3, 2, 1, 0)),
            ("manage_users", (3, 0, 0, 0)),
            ("view_dashboard", (3, 1, 1, 1)),
            ("view_reports", (3, 1, 1, 1)),
            ("view_categories", (3, 1, 1, 1)),
        ],
    )
    def test_levels(self, feature, levels):
        roles = (Role.ADMIN, Role.ACCOUNTANT, Role.MANAGER, Role.USER)
        assert tuple(int(PERMISSIONS.level(r, feature)) for r in roles) == levels

    def test_admin_only_feature(self):
        assert ADMIN_ONLY_FEATURE == "manage_users"
        assert ADMIN_ONLY_FEATURE not in PERMISSIONS.allowed_features(Role.MANAGER)

    def test_allowed_features_for_user(self):
        assert PERMISSIONS.allowed_features(Role.USER) == [
            "create_expense",
            "view_dashboard",
            "view_reports",
            "view_categories",
        ]

    def test_as_matrix(self):
        matrix = PERMISSIONS.as_matrix()
        assert set(matrix) == set(FEATURE_ACCESS)
        assert matrix["export_reports"] == {
            "admin": True,
            "manager": True,
            "accountant": True,
            "user": False,
        }


# ---------------------------------------------------------------------------
# has_permission / has_admin_permission
# ---------------------------------------------------------------------------


class TestHasPermission:
    def test_basic_level_grants(self):
        assert has_permission(Role.USER, "create_expense") is True

    def test_zero_level_denies(self):
        assert has_permission(Role.USER, "view_all_expenses") is False

    def test_manager_cannot_delete_all_expenses(self):
        assert has_permission(Role.MANAGER, "delete_all_expenses") is False

    def test_accepts_plain_strings(self):
        assert has_permission("accountant", "edit_categories") is True

    def test_unknown_feature_denied(self):
        for role in Role:
            assert has_permission(role, "launch_rockets") is False

    def test_unknown_role_denied(self):
        assert has_permission("superuser", "view_dashboard") is False

    def test_non_string_feature_denied(self):
        assert has_permission(Role.ADMIN, None) is False  # type: ignore[arg-type]

    def test_admin_permission_requires_full(self):
        assert has_admin_permission(Role.ADMIN, "create_expense") is True
        assert has_admin_permission(Role.ACCOUNTANT, "create_expense") is False

    def test_admin_permission_unknown_feature(self):
        assert has_admin_permission(Role.ADMIN, "launch_rockets") is False

    def test_admin_permission_implies_permission(self):
        for feature in PERMISSIONS.features:
            for role in Role:
                if has_admin_permission(role, feature):
                    assert has_permission(role, feature)

    def test_repeated_checks_are_stable(self):
        before = PERMISSIONS.as_matrix()
        for feature in PERMISSIONS.features:
            for role in Role:
                first = has_permission(role, feature)
                assert has_permission(role, feature) is first
        assert PERMISSIONS.as_matrix() == before


# ---------------------------------------------------------------------------
# PermissionTable
# ---------------------------------------------------------------------------


class TestPermissionTable:
    def test_table_is_read_only(self):
        with pytest.raises(TypeError):
            PERMISSIONS._access["manage_users"] = {}  # type: ignore[index]

    def test_rows_are_read_only(self):
        row = PERMISSIONS.requirement("manage_users")
        with pytest.raises(TypeError):
            row[Role.USER] = AccessLevel.FULL  # type: ignore[index]

    def test_source_mapping_mutation_does_not_leak(self):
        source = {"export_reports": {Role.USER: AccessLevel.NONE}}
        table = PermissionTable(source)
        source["export_reports"][Role.USER] = AccessLevel.FULL
        assert has_permission(Role.USER, "export_reports", table) is False

    def test_explicit_table_overrides_default(self):
        table = PermissionTable({"export_reports": {Role.USER: AccessLevel.BASIC}})
        assert has_permission(Role.USER, "export_reports", table) is True
        assert has_permission(Role.USER, "export_reports") is False

    def test_missing_role_in_row_resolves_to_none(self):
        table = PermissionTable({"export_reports": {Role.ADMIN: AccessLevel.FULL}})
        assert table.level(Role.MANAGER, "export_reports") == AccessLevel.NONE

    def test_requirement_unknown(self):
        assert PERMISSIONS.requirement("launch_rockets") is None

    def test_contains(self):
        assert "manage_users" in PERMISSIONS
        assert "launch_rockets" not in PERMISSIONS
        assert 42 not in PERMISSIONS
