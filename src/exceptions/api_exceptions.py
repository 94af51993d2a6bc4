"""
Domain exceptions for the Bookshelf API
"""

from typing import Any, Dict, List, Optional


class BookshelfError(Exception):
    """
    Base class for errors that map to an HTTP response.

    Raised by managers and the auth gate, caught by the global exception
    handler in app.py and converted to JSON with to_dict().

    Attributes:
        message: Human-readable message returned to the client
        status_code: HTTP status code for the response
        error_code: Stable identifier for frontend detection
    """

    status_code = 500
    error_code = "SERVER_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for JSON response"""
        return {"error": self.error_code, "message": self.message}


class ValidationError(BookshelfError):
    """Malformed or out-of-range input"""

    status_code = 400
    error_code = "VALIDATION_ERROR"

    def __init__(
        self,
        message: str = "Validation failed",
        errors: Optional[List[Dict[str, str]]] = None,
    ):
        self.errors = errors or []
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["errors"] = self.errors
        return data


class NotFoundError(BookshelfError):
    """Entity id does not resolve"""

    status_code = 404
    error_code = "NOT_FOUND"


class AuthenticationError(BookshelfError):
    """Missing or malformed credential"""

    status_code = 401
    error_code = "AUTHENTICATION_REQUIRED"

    def __init__(self, message: str = "Access token required"):
        super().__init__(message)


class InvalidTokenError(BookshelfError):
    """Credential present but unknown or expired"""

    status_code = 403
    error_code = "INVALID_TOKEN"

    def __init__(self, message: str = "Invalid token"):
        super().__init__(message)


class AuthorizationError(BookshelfError):
    """Authenticated user is not the owner of the entity"""

    status_code = 403
    error_code = "NOT_AUTHORIZED"


class ConflictError(BookshelfError):
    """Uniqueness violation (duplicate review, duplicate account)"""

    status_code = 400
    error_code = "CONFLICT"


class ServerError(BookshelfError):
    """Unexpected storage or runtime failure. Never carries internals."""

    status_code = 500
    error_code = "SERVER_ERROR"

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)


class RatingSyncError(ServerError):
    """
    Book rating could not be recomputed after a review mutation.

    The review write has already been compensated when this is raised.
    """

    error_code = "RATING_SYNC_FAILED"

    def __init__(self, message: str = "Failed to update book rating"):
        super().__init__(message)
