"""User account authentication provider with PBKDF2 + JWT."""

from __future__ import annotations

import hashlib
import hmac
import logging
import os
import secrets
import time

import jwt

from expensemanager.auth_providers.base import AuthResult
from expensemanager.config import settings

logger = logging.getLogger("expensemanager.auth_providers.user_account")

_JWT_ALGORITHM = "HS256"
_PBKDF2_ITERATIONS = 260_000


def _get_jwt_secret() -> str:
    secret = os.environ.get("EM_JWT_SECRET", settings.jwt_secret)
    if not secret:
        logger.warning("EM_JWT_SECRET not set - using insecure default (dev only)")
        return "em-dev-secret-do-not-use-in-production"
    return secret


def hash_password(password: str) -> str:
    """Hash password using PBKDF2-SHA256."""
    salt = secrets.token_hex(16)
    dk = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), _PBKDF2_ITERATIONS)
    return f"pbkdf2:sha256:{_PBKDF2_ITERATIONS}${salt}${dk.hex()}"


def verify_password(password: str, password_hash: str) -> bool:
    """Verify password against a PBKDF2-SHA256 hash."""
    try:
        parts = password_hash.split("$")
        if len(parts) != 3:
            return False
        prefix_and_iterations, salt, stored_hash = parts
        iterations = int(prefix_and_iterations.split(":")[-1])
        dk = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), iterations)
        return hmac.compare_digest(dk.hex(), stored_hash)
    except (ValueError, IndexError):
        return False


def token_lifetime_seconds(remember_me: bool = False) -> int:
    if remember_me:
        return settings.remember_me_days * 24 * 3600
    return settings.token_expiry_hours * 3600


def issue_jwt(user_id: int, username: str, remember_me: bool = False) -> str:
    """Issue a bearer token for a user."""
    now = time.time()
    payload = {
        "sub": str(user_id),
        "username": username,
        "jti": secrets.token_hex(8),
        "iat": int(now),
        "exp": int(now + token_lifetime_seconds(remember_me)),
    }
    return jwt.encode(payload, _get_jwt_secret(), algorithm=_JWT_ALGORITHM)


def decode_jwt(token: str) -> dict | None:
    """Decode and validate a token. Returns claims or None."""
    try:
        return jwt.decode(token, _get_jwt_secret(), algorithms=[_JWT_ALGORITHM])
    except jwt.PyJWTError:
        return None


class UserAccountProvider:
    """Authenticate via bearer tokens issued at login."""

    name = "user_account"

    async def authenticate(self, token: str) -> AuthResult:
        claims = decode_jwt(token)
        if claims is None:
            return AuthResult(
                authenticated=False,
                provider=self.name,
                error="Invalid or expired token",
            )
        try:
            user_id = int(claims["sub"])
        except (KeyError, TypeError, ValueError):
            return AuthResult(
                authenticated=False,
                provider=self.name,
                error="Malformed token subject",
            )
        return AuthResult(
            authenticated=True,
            user_id=user_id,
            provider=self.name,
            claims=claims,
        )
