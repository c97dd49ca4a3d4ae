"""Application error hierarchy.

Services raise these; the API layer turns them into
``{"error": {"message": ...}}`` responses with the matching status code.
"""

from __future__ import annotations


class AppError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class UnauthenticatedError(AppError):
    """Missing, invalid or expired credentials, or an inactive account."""

    status_code = 401
    default_message = "Authentication required"


class ForbiddenError(AppError):
    """Authenticated caller lacks the role or ownership required."""

    status_code = 403
    default_message = "Insufficient permissions"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Resource not found"


class ConflictError(AppError):
    status_code = 409
    default_message = "Resource already exists"


class InvalidStateError(AppError):
    """Operation not allowed in the entity's current state."""

    status_code = 400
    default_message = "Invalid state for this operation"


class ValidationError(AppError):
    status_code = 400
    default_message = "Validation failed"


class RateLimitedError(AppError):
    status_code = 429
    default_message = "Too many requests, please try again later."


class BudgetRequiredError(AppError):
    status_code = 400
    default_message = "No budget allocated. Please contact your manager."


class InsufficientFundsError(AppError):
    """Requested amount exceeds the total or the monthly budget cap."""

    status_code = 400

    def __init__(self, cap: str, available, required):
        self.cap = cap
        self.available = available
        self.required = required
        label = "monthly budget" if cap == "monthly" else "budget"
        super().__init__(
            f"Insufficient {label}. Available: ${available:.2f}, Required: ${required:.2f}"
        )


class InternalError(AppError):
    status_code = 500
    default_message = "Internal server error"
