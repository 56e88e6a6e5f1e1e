"""Base authentication provider protocol and result types."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable


@dataclass
class AuthResult:
    """Result of an authentication attempt.

    ``user_id`` identifies the account; role and status are looked up from
    storage on every request so approvals and rejections take effect at once.
    """

    authenticated: bool
    user_id: int | None = None
    provider: str = ""
    claims: dict = field(default_factory=dict)
    error: str | None = None


@runtime_checkable
class AuthProvider(Protocol):
    """Protocol that all auth providers must implement."""

    name: str

    async def authenticate(self, token: str) -> AuthResult:
        """Authenticate a token and return an AuthResult."""
        ...
