"""Application exceptions.

Every error raised by a route handler derives from StoreRatingError and
carries the HTTP status and machine-readable code it maps to. main.py turns
them into the JSON error envelope.
"""

from typing import Any, Optional


class StoreRatingError(Exception):
    """Base exception for all store rating API errors."""

    status_code = 500
    code = "SERVER_ERROR"
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, details: Any = None):
        """Initialize the exception.

        Args:
            message: Human readable message; falls back to the class default.
            details: Optional structured context returned to the caller.
        """
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class ValidationFailed(StoreRatingError):
    """Raised when input is malformed or out of range."""

    status_code = 400
    code = "VALIDATION_ERROR"
    default_message = "Validation failed"


class InvalidRole(ValidationFailed):
    """Raised when a role outside the known enumeration is requested."""

    default_message = "Invalid role specified"


class OwnerNotFound(ValidationFailed):
    """Raised when a store is assigned to a user that does not exist."""

    default_message = "Owner not found"


class Unauthenticated(StoreRatingError):
    """Raised when the caller is not authenticated."""

    status_code = 401
    code = "UNAUTHORIZED"
    default_message = "Access token required"


class InvalidCredentials(Unauthenticated):
    code = "INVALID_CREDENTIALS"
    default_message = "Invalid credentials"


class InvalidToken(Unauthenticated):
    code = "INVALID_TOKEN"
    default_message = "Invalid token"


class TokenExpired(Unauthenticated):
    code = "TOKEN_EXPIRED"
    default_message = "Token has expired"


class Forbidden(StoreRatingError):
    """Raised on a role or ownership mismatch."""

    status_code = 403
    code = "FORBIDDEN"
    default_message = "Access denied. Insufficient permissions."


class NotFound(StoreRatingError):
    """Raised when a referenced entity does not exist."""

    status_code = 404
    code = "NOT_FOUND"
    default_message = "Resource not found"


class Conflict(StoreRatingError):
    """Raised when a write would violate a uniqueness rule."""

    status_code = 409
    code = "CONFLICT"
    default_message = "A record with this information already exists"


class DuplicateEmail(Conflict):
    default_message = "User with this email already exists"


class AlreadyRated(Conflict):
    default_message = "You have already rated this store. Use update rating instead."
