"""Request authentication and authorization gates for Expense Manager.

Clients supply credentials via the ``Authorization: Bearer <token>`` header;
tokens are issued by ``POST /api/login``.

``resolve_principal`` runs on every request and attaches the caller's
:class:`~expensemanager.gate.Principal` (or ``None``) to
``request.state.principal``.  It never rejects a request by itself; routes
declare what they need:

* ``Depends(require_principal)`` - any active account
* ``Depends(require_permission("feature"))`` - a feature from the permission table
* ``authorize_resource(...)`` - called by a handler after it has fetched the row

Denials come back from :mod:`expensemanager.gate` as decision values and are
turned into exceptions only here, in :func:`enforce`.
"""

from __future__ import annotations

import logging

from fastapi import Request

from expensemanager.auth_providers.base import AuthProvider, AuthResult
from expensemanager.auth_providers.user_account import UserAccountProvider
from expensemanager.exceptions import (
    ForbiddenError,
    MisconfiguredFeatureError,
    NotFoundError,
    UnauthenticatedError,
)
from expensemanager.gate import (
    Decision,
    Outcome,
    Principal,
    check_authenticated,
    check_feature,
    check_resource,
)
from expensemanager.ownership import ResourceAction
from expensemanager.rbac import PERMISSIONS

_audit_logger = logging.getLogger("expensemanager.audit")
_provider: AuthProvider = UserAccountProvider()

_DENIALS = {
    Outcome.UNAUTHENTICATED: UnauthenticatedError,
    Outcome.FORBIDDEN: ForbiddenError,
    Outcome.NOT_FOUND: NotFoundError,
}


def _extract_token(request: Request) -> str | None:
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.lower().startswith("bearer "):
        return auth_header[7:].strip() or None
    return None


async def authenticate_request(request: Request) -> AuthResult | None:
    """Verify the bearer token on *request*, honouring logout revocation."""
    token = _extract_token(request)
    if token is None:
        return None
    result = await _provider.authenticate(token)
    if not result.authenticated:
        _audit_logger.warning(
            "Auth failure (invalid token): %s %s",
            request.method,
            request.url.path,
            extra={
                "event_category": "audit",
                "action": "auth_failure",
                "reason": result.error,
                "path": request.url.path,
            },
        )
        return None
    storage = request.app.state.storage
    jti = result.claims.get("jti")
    if jti and await storage.is_token_revoked(jti):
        return None
    return result


async def resolve_principal(request: Request) -> None:
    """Global dependency: attach the caller's principal, or ``None``.

    Role and status are read from the current user record, not the token,
    so approvals, rejections and role changes apply immediately.
    """
    request.state.principal = None
    request.state.auth = await authenticate_request(request)
    if request.state.auth is None:
        return
    user = await request.app.state.storage.get_user(request.state.auth.user_id)
    if user is None:
        return
    request.state.principal = Principal(id=user.id, role=user.role, status=user.status)


def get_principal(request: Request) -> Principal | None:
    return getattr(request.state, "principal", None)


def enforce(request: Request, decision: Decision, feature: str | None = None) -> None:
    """Translate a denial into the matching HTTP error; allow is a no-op."""
    if decision.allowed:
        return
    principal = get_principal(request)
    if decision.outcome != Outcome.NOT_FOUND:
        _audit_logger.warning(
            "Access denied (%s): %s %s",
            decision.outcome,
            request.method,
            request.url.path,
            extra={
                "event_category": "audit",
                "action": "access_denied",
                "outcome": decision.outcome.value,
                "feature": feature,
                "user_id": principal.id if principal else None,
                "role": principal.role.value if principal else None,
                "path": request.url.path,
            },
        )
    raise _DENIALS[decision.outcome](decision.reason)


async def require_principal(request: Request) -> Principal:
    """Dependency: any authenticated, active account."""
    principal = get_principal(request)
    enforce(request, check_authenticated(principal))
    return principal


def require_permission(feature: str):
    """Dependency factory: require the caller's role to grant *feature*.

    The key is validated here, when the route is declared, so a typo stops
    the application from starting.

    Usage::

        @router.post("/categories")
        async def create(principal: Principal = Depends(require_permission("create_category"))): ...
    """
    if feature not in PERMISSIONS:
        raise MisconfiguredFeatureError(feature)

    async def _check(request: Request) -> Principal:
        principal = get_principal(request)
        enforce(request, check_feature(principal, feature), feature)
        return principal

    _check.feature = feature  # type: ignore[attr-defined]
    return _check


def authorize_resource(
    request: Request,
    principal: Principal,
    resource_owner_id: int | None,
    resource_kind: str,
    action: str = ResourceAction.EDIT,
) -> None:
    """Ownership gate for a single fetched resource (``None`` = not found)."""
    enforce(request, check_resource(principal, resource_owner_id, resource_kind, action))
