"""Custom exception hierarchy for Expense Manager.

Provides structured error types that the centralized error handler
translates into consistent JSON responses.
"""

from __future__ import annotations


class ExpenseManagerError(Exception):
    """Base exception for all Expense Manager errors."""

    status_code: int = 500
    error_type: str = "internal_error"

    def __init__(self, message: str = "An internal error occurred") -> None:
        self.message = message
        super().__init__(message)


class UnauthenticatedError(ExpenseManagerError):
    """No verified, active principal on the request."""

    status_code = 401
    error_type = "unauthenticated"

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)


class ForbiddenError(ExpenseManagerError):
    """Principal verified but lacking the required privilege."""

    status_code = 403
    error_type = "forbidden"

    def __init__(self, message: str = "Insufficient permissions") -> None:
        super().__init__(message)


class NotFoundError(ExpenseManagerError):
    """Requested resource was not found."""

    status_code = 404
    error_type = "not_found"


class ValidationError(ExpenseManagerError):
    """Input validation failure beyond Pydantic constraints."""

    status_code = 400
    error_type = "validation_error"


class ConflictError(ExpenseManagerError):
    """Request conflicts with the current state of a resource."""

    status_code = 409
    error_type = "conflict"


class MisconfiguredFeatureError(ExpenseManagerError):
    """A route references a feature key absent from the permission table.

    Raised while routes are declared, so a bad key stops the application
    from starting instead of silently denying every request.
    """

    error_type = "misconfigured_feature"

    def __init__(self, feature: str) -> None:
        self.feature = feature
        super().__init__(f"Unknown feature key: {feature!r}")
