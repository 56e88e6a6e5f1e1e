"""Resource-ownership guard.

Owners always keep basic rights over their own rows.  Anyone else needs the
role-based "all resources" feature that governs the resource kind and the
operation being attempted.
"""

from __future__ import annotations

from enum import StrEnum

from expensemanager.rbac import ADMIN_ONLY_FEATURE, PERMISSIONS, PermissionTable, has_permission


class ResourceKind(StrEnum):
    EXPENSE = "expense"
    CATEGORY = "category"


class ResourceAction(StrEnum):
    VIEW = "view"
    EDIT = "edit"
    DELETE = "delete"


_CROSS_OWNER_FEATURES: dict[tuple[ResourceKind, ResourceAction], str] = {
    (ResourceKind.EXPENSE, ResourceAction.VIEW): "view_all_expenses",
    (ResourceKind.EXPENSE, ResourceAction.EDIT): "edit_all_expenses",
    (ResourceKind.EXPENSE, ResourceAction.DELETE): "delete_all_expenses",
    (ResourceKind.CATEGORY, ResourceAction.VIEW): "edit_categories",
    (ResourceKind.CATEGORY, ResourceAction.EDIT): "edit_categories",
    (ResourceKind.CATEGORY, ResourceAction.DELETE): "delete_categories",
}


def governing_feature(resource_kind: str, action: str = ResourceAction.EDIT) -> str:
    """Feature key that grants *action* on other users' *resource_kind* rows.

    Unrecognized kinds or actions fall back to the admin-only feature.
    """
    try:
        key = (ResourceKind(resource_kind), ResourceAction(action))
    except ValueError:
        return ADMIN_ONLY_FEATURE
    return _CROSS_OWNER_FEATURES.get(key, ADMIN_ONLY_FEATURE)


def can_access_resource(
    actor_id: int,
    actor_role: str,
    resource_owner_id: int,
    resource_kind: str,
    action: str = ResourceAction.EDIT,
    table: PermissionTable = PERMISSIONS,
) -> bool:
    """Return ``True`` if the actor may perform *action* on the resource.

    Self-ownership is checked first and wins regardless of role.
    """
    if actor_id == resource_owner_id:
        return True
    return has_permission(actor_role, governing_feature(resource_kind, action), table)
