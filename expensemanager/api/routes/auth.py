"""Auth routes: registration, login/logout, current user, password reset."""

from __future__ import annotations

from datetime import datetime, timedelta

from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel, EmailStr, Field

from expensemanager.api.dependencies import get_notifier, get_storage
from expensemanager.api.rate_limit import limiter
from expensemanager.auth import require_principal
from expensemanager.auth_providers.user_account import (
    hash_password,
    issue_jwt,
    token_lifetime_seconds,
    verify_password,
)
from expensemanager.config import settings
from expensemanager.core.models import User
from expensemanager.exceptions import ConflictError, UnauthenticatedError, ValidationError
from expensemanager.gate import Principal
from expensemanager.notifications import Notifier
from expensemanager.rbac import Role, UserStatus, role_display_name
from expensemanager.storage.memory import MemoryStorage

router = APIRouter(prefix="/api", tags=["Auth"])

_RESET_REQUEST_MESSAGE = (
    "If your email exists in our system, you will receive a password reset link."
)


class RegisterRequest(BaseModel):
    username: str = Field(min_length=1, max_length=64)
    password: str = Field(min_length=8, max_length=256)
    email: EmailStr
    name: str | None = Field(default=None, max_length=128)


class RegisterResponse(BaseModel):
    message: str
    username: str


class LoginRequest(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)
    remember_me: bool = False


class UserPublic(BaseModel):
    id: int
    username: str
    name: str | None
    email: str
    role: Role
    role_display_name: str
    status: UserStatus
    created_at: datetime
    last_login: datetime | None

    @classmethod
    def from_user(cls, user: User) -> UserPublic:
        return cls(
            id=user.id,
            username=user.username,
            name=user.name,
            email=user.email,
            role=user.role,
            role_display_name=role_display_name(user.role),
            status=user.status,
            created_at=user.created_at,
            last_login=user.last_login,
        )


class LoginResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserPublic


class PasswordResetRequest(BaseModel):
    email: EmailStr


class PasswordReset(BaseModel):
    token: str = Field(min_length=1)
    password: str = Field(min_length=8, max_length=256)


class MessageResponse(BaseModel):
    message: str


@router.post("/register", response_model=RegisterResponse, status_code=201)
@limiter.limit("10/minute")
async def register(
    req: RegisterRequest,
    request: Request,
    storage: MemoryStorage = Depends(get_storage),
    notifier: Notifier = Depends(get_notifier),
):
    """Create a pending account. Self-registration always gets the ``user`` role."""
    if await storage.get_user_by_username(req.username) is not None:
        raise ConflictError("Username already exists")
    if await storage.get_user_by_email(req.email) is not None:
        raise ConflictError("Email already in use")

    user = await storage.create_user(
        username=req.username,
        password_hash=hash_password(req.password),
        email=req.email,
        name=req.name,
        role=Role.USER,
        status=UserStatus.PENDING,
    )
    notifier.registration_received(user.email, user.display_name)
    return RegisterResponse(
        message="Signup successful. Your account is pending approval.",
        username=user.username,
    )


@router.post("/login", response_model=LoginResponse)
@limiter.limit("10/minute")
async def login(
    req: LoginRequest,
    request: Request,
    storage: MemoryStorage = Depends(get_storage),
):
    """Exchange credentials of an active account for a bearer token."""
    user = await storage.get_user_by_username(req.username)
    if user is None or not verify_password(req.password, user.password_hash):
        raise UnauthenticatedError("Invalid username or password")
    if user.status != UserStatus.ACTIVE:
        raise UnauthenticatedError("Account not active. Please wait for admin approval.")

    user = await storage.update_user_login_time(user.id)
    return LoginResponse(
        token=issue_jwt(user.id, user.username, remember_me=req.remember_me),
        expires_in=token_lifetime_seconds(req.remember_me),
        user=UserPublic.from_user(user),
    )


@router.post("/logout", response_model=MessageResponse)
async def logout(
    request: Request,
    principal: Principal = Depends(require_principal),
    storage: MemoryStorage = Depends(get_storage),
):
    """Revoke the bearer token used for this request."""
    jti = request.state.auth.claims.get("jti")
    if jti:
        await storage.revoke_token(jti)
    return MessageResponse(message="Logged out")


@router.get("/user", response_model=UserPublic)
async def current_user(
    principal: Principal = Depends(require_principal),
    storage: MemoryStorage = Depends(get_storage),
):
    return UserPublic.from_user(await storage.get_user(principal.id))


@router.post("/password-reset-request", response_model=MessageResponse)
@limiter.limit("5/minute")
async def request_password_reset(
    req: PasswordResetRequest,
    request: Request,
    storage: MemoryStorage = Depends(get_storage),
    notifier: Notifier = Depends(get_notifier),
):
    """Start a password reset. The response never reveals whether the email exists."""
    user = await storage.get_user_by_email(req.email)
    if user is not None:
        token = await storage.create_password_reset_token(
            req.email, timedelta(minutes=settings.reset_token_minutes)
        )
        reset_link = f"{str(request.base_url).rstrip('/')}/reset-password?token={token}"
        notifier.password_reset(user.email, user.display_name, reset_link)
    return MessageResponse(message=_RESET_REQUEST_MESSAGE)


@router.post("/password-reset", response_model=MessageResponse)
async def reset_password(
    req: PasswordReset,
    storage: MemoryStorage = Depends(get_storage),
):
    user = await storage.get_user_by_reset_token(req.token)
    if user is None:
        raise ValidationError("Invalid or expired token")
    await storage.update_user_password(user.id, hash_password(req.password))
    return MessageResponse(message="Password has been reset successfully")
