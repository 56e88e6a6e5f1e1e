"""Request gate decisions.

Turns the permission table and the ownership guard into per-request
decisions.  Nothing here raises or mutates state: every check returns a
:class:`Decision` that the web boundary (``expensemanager.auth``) translates
into a response.

Per request the gate moves strictly forward::

    unauthenticated -> authenticated -> feature checked
                    -> resource found -> ownership checked -> handler

and stops at the first denial.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum

from expensemanager.ownership import ResourceAction, can_access_resource, governing_feature
from expensemanager.rbac import PERMISSIONS, PermissionTable, Role, UserStatus, has_permission

logger = logging.getLogger("expensemanager.gate")


@dataclass(frozen=True)
class Principal:
    """The authenticated actor: exactly what authorization needs to know."""

    id: int
    role: Role
    status: UserStatus

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE


class Outcome(StrEnum):
    ALLOW = "allow"
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class Decision:
    outcome: Outcome
    reason: str = ""

    @property
    def allowed(self) -> bool:
        return self.outcome == Outcome.ALLOW

    @classmethod
    def allow(cls) -> Decision:
        return cls(Outcome.ALLOW)

    @classmethod
    def unauthenticated(cls, reason: str = "Unauthorized") -> Decision:
        return cls(Outcome.UNAUTHENTICATED, reason)

    @classmethod
    def forbidden(cls, reason: str = "Insufficient permissions") -> Decision:
        return cls(Outcome.FORBIDDEN, reason)

    @classmethod
    def not_found(cls, reason: str = "Not found") -> Decision:
        return cls(Outcome.NOT_FOUND, reason)


def check_authenticated(principal: Principal | None) -> Decision:
    """Allow only a present principal whose account is active."""
    if principal is None:
        return Decision.unauthenticated()
    if not principal.is_active:
        return Decision.unauthenticated("Account not active")
    return Decision.allow()


def check_feature(
    principal: Principal | None,
    feature: str,
    table: PermissionTable = PERMISSIONS,
) -> Decision:
    """Authentication check followed by the feature permission check."""
    decision = check_authenticated(principal)
    if not decision.allowed:
        return decision
    if feature not in table:
        # Routes validate their keys at declaration; reaching this is a bug.
        logger.error("Feature %r is not in the permission table", feature)
        return Decision.forbidden()
    if not has_permission(principal.role, feature, table):
        return Decision.forbidden(f"Insufficient permissions for {feature}")
    return Decision.allow()


def check_resource(
    principal: Principal | None,
    resource_owner_id: int | None,
    resource_kind: str,
    action: str = ResourceAction.EDIT,
    table: PermissionTable = PERMISSIONS,
) -> Decision:
    """Authentication, existence, then ownership.

    *resource_owner_id* is ``None`` when the handler could not find the
    resource; existence is reported before authorization.
    """
    decision = check_authenticated(principal)
    if not decision.allowed:
        return decision
    if resource_owner_id is None:
        return Decision.not_found(f"{str(resource_kind).capitalize()} not found")
    if not can_access_resource(
        principal.id, principal.role, resource_owner_id, resource_kind, action, table
    ):
        feature = governing_feature(resource_kind, action)
        return Decision.forbidden(
            f"You don't have permission to {action} this {resource_kind} ({feature} required)"
        )
    return Decision.allow()
