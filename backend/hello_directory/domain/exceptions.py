"""
Domain Exceptions

Error variants returned by the directory and cache layers. They carry a
kind instead of an HTTP status; the routing layer owns the mapping from
kind to status code.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    """Kinds of domain failure the routing layer distinguishes."""

    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    VALIDATION = "validation"
    UNAVAILABLE = "unavailable"


class DirectoryError(Exception):
    """Base exception for all domain errors.

    Preserves a machine-readable error code and structured details so the
    API layer can render them without parsing messages.
    """

    kind: ErrorKind = ErrorKind.VALIDATION

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code or self.kind.value.upper()
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(DirectoryError):
    """Raised when a requested user id does not exist."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, message: str = "user not found", user_id: Optional[int] = None):
        details = {}
        if user_id is not None:
            details["id"] = user_id
        super().__init__(message=message, error_code="USER_NOT_FOUND", details=details)


class ConflictError(DirectoryError):
    """Raised when a create or update would break username/email uniqueness."""

    kind = ErrorKind.CONFLICT

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        details = {"field": field} if field else {}
        super().__init__(message=message, error_code="USER_CONFLICT", details=details)

    @classmethod
    def for_field(cls, field: str) -> "ConflictError":
        """Build the conflict error for a unique natural key."""
        return cls(f"{field} already exists", field=field)


class ValidationError(DirectoryError):
    """Raised when malformed input reaches the core."""

    kind = ErrorKind.VALIDATION

    def __init__(self, message: str, field: Optional[str] = None, value: Any = None):
        details: Dict[str, Any] = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)
        super().__init__(message=message, error_code="INVALID_INPUT", details=details)


class BackendUnavailable(DirectoryError):
    """Raised when the cache or storage backend cannot be reached."""

    kind = ErrorKind.UNAVAILABLE

    def __init__(
        self,
        message: str,
        backend: str,
        original_error: Optional[Exception] = None,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.backend = backend
        details = dict(details or {})
        details["backend"] = backend
        if original_error:
            details["original_error"] = str(original_error)
            details["original_error_type"] = type(original_error).__name__

        super().__init__(
            message=message,
            error_code=error_code or "BACKEND_UNAVAILABLE",
            details=details,
        )
        # Preserve exception context for debugging (exception chaining)
        if original_error:
            self.__cause__ = original_error
