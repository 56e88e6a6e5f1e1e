"""Permission table introspection.

``GET /api/permissions`` dumps the whole table for compliance review.
``GET /api/permissions/me`` tells a client which features to show; it is a
usability aid only, the server-side gates stay authoritative.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from expensemanager.auth import require_permission, require_principal
from expensemanager.gate import Principal
from expensemanager.rbac import (
    PERMISSIONS,
    ROLE_DISPLAY_NAMES,
    Role,
    has_admin_permission,
    role_display_name,
)

router = APIRouter(prefix="/api/permissions", tags=["Permissions"])


class PermissionMatrix(BaseModel):
    roles: dict[str, str]
    features: dict[str, dict[str, bool]]
    levels: dict[str, dict[str, int]]


class PrincipalPermissions(BaseModel):
    role: Role
    role_display_name: str
    features: list[str]
    admin_features: list[str]


@router.get("", response_model=PermissionMatrix)
async def permission_matrix(principal: Principal = Depends(require_permission("manage_users"))):
    return PermissionMatrix(
        roles={role.value: name for role, name in ROLE_DISPLAY_NAMES.items()},
        features=PERMISSIONS.as_matrix(),
        levels={
            feature: {role.value: int(PERMISSIONS.level(role, feature)) for role in Role}
            for feature in PERMISSIONS.features
        },
    )


@router.get("/me", response_model=PrincipalPermissions)
async def my_permissions(principal: Principal = Depends(require_principal)):
    return PrincipalPermissions(
        role=principal.role,
        role_display_name=role_display_name(principal.role),
        features=PERMISSIONS.allowed_features(principal.role),
        admin_features=[f for f in PERMISSIONS.features if has_admin_permission(principal.role, f)],
    )
