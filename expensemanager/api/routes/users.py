"""User management routes (account approval workflow)."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from expensemanager.api.dependencies import get_notifier, get_storage
from expensemanager.api.routes.auth import UserPublic
from expensemanager.auth import require_permission
from expensemanager.exceptions import NotFoundError, ValidationError
from expensemanager.gate import Principal
from expensemanager.notifications import Notifier
from expensemanager.rbac import UserStatus
from expensemanager.storage.memory import MemoryStorage

router = APIRouter(prefix="/api/users", tags=["Users"])

_manage_users = require_permission("manage_users")


@router.get("/pending", response_model=list[UserPublic])
async def list_pending_users(
    principal: Principal = Depends(_manage_users),
    storage: MemoryStorage = Depends(get_storage),
):
    return [UserPublic.from_user(u) for u in await storage.get_pending_users()]


async def _transition(storage: MemoryStorage, user_id: int, target: UserStatus):
    user = await storage.get_user(user_id)
    if user is None:
        raise NotFoundError("User not found")
    if user.status == target:
        raise ValidationError(f"User is already {target}")
    return user, await storage.update_user_status(user_id, target)


@router.post("/{user_id}/approve", response_model=UserPublic)
async def approve_user(
    user_id: int,
    principal: Principal = Depends(_manage_users),
    storage: MemoryStorage = Depends(get_storage),
    notifier: Notifier = Depends(get_notifier),
):
    user, updated = await _transition(storage, user_id, UserStatus.ACTIVE)
    notifier.account_approved(user.email, user.display_name)
    return UserPublic.from_user(updated)


@router.post("/{user_id}/reject", response_model=UserPublic)
async def reject_user(
    user_id: int,
    principal: Principal = Depends(_manage_users),
    storage: MemoryStorage = Depends(get_storage),
    notifier: Notifier = Depends(get_notifier),
):
    user, updated = await _transition(storage, user_id, UserStatus.REJECTED)
    notifier.account_rejected(user.email, user.display_name)
    return UserPublic.from_user(updated)
