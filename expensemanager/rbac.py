"""Role-Based Access Control for Expense Manager.

Single source of truth for who may invoke which feature.  Every consumer
(route gates, the ownership guard, the ``/api/permissions`` endpoints that
drive client-side visibility) evaluates the same :data:`PERMISSIONS` table
through :func:`has_permission`.

Roles:
    admin       - Full access, user management, deletes across owners
    accountant  - Manages all expenses and categories, exports reports
    manager     - Views and edits all expenses, exports reports
    user        - Records and manages their own expenses

Access levels per (feature, role):
    0 = no access
    1 = basic access (view/own)
    2 = advanced access (edit/all)
    3 = full access (delete/admin)

A feature is granted when the level is at least ``BASIC``; the admin-only
variant requires ``FULL``.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import IntEnum, StrEnum
from types import MappingProxyType


class Role(StrEnum):
    """Enumerated account roles."""

    ADMIN = "admin"
    MANAGER = "manager"
    ACCOUNTANT = "accountant"
    USER = "user"


class UserStatus(StrEnum):
    """Account lifecycle status. Only ``active`` accounts may sign in."""

    PENDING = "pending"
    ACTIVE = "active"
    REJECTED = "rejected"


class AccessLevel(IntEnum):
    NONE = 0
    BASIC = 1
    ADVANCED = 2
    FULL = 3


ROLE_DISPLAY_NAMES: Mapping[Role, str] = MappingProxyType(
    {
        Role.ADMIN: "Administrator",
        Role.ACCOUNTANT: "Accountant",
        Role.MANAGER: "Manager",
        Role.USER: "Regular User",
    }
)

#: Feature key granting nothing to anyone but admins.
ADMIN_ONLY_FEATURE = "manage_users"


def _row(admin: int, accountant: int, manager: int, user: int) -> dict[Role, AccessLevel]:
    return {
        Role.ADMIN: AccessLevel(admin),
        Role.ACCOUNTANT: AccessLevel(accountant),
        Role.MANAGER: AccessLevel(manager),
        Role.USER: AccessLevel(user),
    }


#: feature -> role -> level.  Names are the external contract used by routes.
FEATURE_ACCESS: dict[str, dict[Role, AccessLevel]] = {
    # Expenses
    "create_expense": _row(3, 2, 1, 1),
    "view_all_expenses": _row(3, 2, 1, 0),
    "edit_all_expenses": _row(3, 2, 1, 0),
    "delete_all_expenses": _row(3, 0, 0, 0),
    # Categories
    "create_category": _row(3, 2, 0, 0),
    "edit_categories": _row(3, 2, 0, 0),
    "delete_categories": _row(3, 0, 0, 0),
    # Reports
    "export_reports": _row(3, 2, 1, 0),
    # User management
    "manage_users": _row(3, 0, 0, 0),
    # Read-level features
    "view_dashboard": _row(3, 1, 1, 1),
    "view_reports": _row(3, 1, 1, 1),
    "view_categories": _row(3, 1, 1, 1),
}


class PermissionTable:
    """Immutable feature -> role -> level lookup.

    Built once at startup.  Pass a different instance explicitly (e.g. in
    tests) rather than mutating the default one.
    """

    def __init__(self, access: Mapping[str, Mapping[Role, AccessLevel]]) -> None:
        self._access: Mapping[str, Mapping[Role, AccessLevel]] = MappingProxyType(
            {
                feature: MappingProxyType({Role(r): AccessLevel(lvl) for r, lvl in row.items()})
                for feature, row in access.items()
            }
        )

    def __contains__(self, feature: object) -> bool:
        return isinstance(feature, str) and feature in self._access

    def __len__(self) -> int:
        return len(self._access)

    @property
    def features(self) -> tuple[str, ...]:
        return tuple(self._access)

    def requirement(self, feature: str) -> Mapping[Role, AccessLevel] | None:
        """Return the per-role levels for *feature*, or ``None`` if unknown."""
        if not isinstance(feature, str):
            return None
        return self._access.get(feature)

    def level(self, role: str, feature: str) -> AccessLevel:
        """Resolve the access level of *role* for *feature*.

        Unknown features and unknown roles resolve to ``NONE``.
        """
        row = self.requirement(feature)
        if row is None:
            return AccessLevel.NONE
        try:
            parsed = Role(role)
        except ValueError:
            return AccessLevel.NONE
        return row.get(parsed, AccessLevel.NONE)

    def allowed_features(self, role: str) -> list[str]:
        """Features *role* may invoke, in declaration order."""
        return [f for f in self._access if self.level(role, f) >= AccessLevel.BASIC]

    def as_matrix(self) -> dict[str, dict[str, bool]]:
        """Dump the table as feature -> role -> allowed for compliance review."""
        return {
            feature: {role.value: self.level(role, feature) >= AccessLevel.BASIC for role in Role}
            for feature in self._access
        }


#: Process-wide permission table.
PERMISSIONS = PermissionTable(FEATURE_ACCESS)


def has_permission(role: str, feature: str, table: PermissionTable = PERMISSIONS) -> bool:
    """Return ``True`` if *role* may invoke *feature*.

    Pure and total: unknown features and unknown roles are denied, and
    nothing here raises.
    """
    return table.level(role, feature) >= AccessLevel.BASIC


def has_admin_permission(role: str, feature: str, table: PermissionTable = PERMISSIONS) -> bool:
    """Return ``True`` if *role* holds full (level 3) access to *feature*."""
    return table.level(role, feature) >= AccessLevel.FULL


def role_display_name(role: str) -> str:
    try:
        return ROLE_DISPLAY_NAMES[Role(role)]
    except ValueError:
        return role
