"""
Postboard Backend: Custom Exception Hierarchy
===============================================

What:  Application-specific exceptions for persistence and API error scenarios.
How:   Each exception carries a message and an optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error envelopes with the right HTTP status.
Who:   Raised by the ORM layer, services and dependencies; caught by handlers.

Exception Hierarchy:
    PostboardError (base)
    ├── NotFoundError            → 404 Not Found
    ├── PreconditionError        → 409 Conflict (invalid lifecycle operation)
    ├── StorageError             → 500 Internal Server Error
    ├── ValidationError          → 422 Unprocessable Entity
    ├── ConflictError            → 409 Conflict
    └── AuthenticationError      → 401 Unauthorized

The ORM layer only ever raises NotFoundError, PreconditionError and
StorageError. The rest belong to services and the HTTP layer.
"""

from typing import Any, Dict, Optional


class PostboardError(Exception):
    """
    Base exception for all Postboard application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, only selectively returned)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class NotFoundError(PostboardError):
    """
    Raised when a requested record does not exist.

    What:    `find_or_fail` found no row, or a service lookup came back empty.
    HTTP:    404 Not Found

    The requested identifier is kept on the exception as `resource_id`
    (unchanged type) and in the context as a string.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Any = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id is not None:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = str(resource_id)
        super().__init__(message=message, context=ctx)
        self.resource = resource
        self.resource_id = resource_id


class PreconditionError(PostboardError):
    """
    Raised when an operation is invalid for the record's lifecycle state.

    When:    delete() on a record that was never saved or is already deleted.
    HTTP:    409 Conflict
    """

    def __init__(
        self,
        message: str = "Operation is not valid in the current state",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class StorageError(PostboardError):
    """
    Opaque pass-through of a data-access failure.

    What:    Connectivity failure, constraint violation, timeout, bad SQL.
    When:    Raised by the query executor around any SQLAlchemy error; the
             driver exception stays reachable as `__cause__` and `original`.
    HTTP:    500 Internal Server Error

    Security Note:
        The message returned to clients is always generic. The statement and
        driver message are logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        original: Optional[BaseException] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if original is not None:
            ctx.setdefault("error_type", type(original).__name__)
        super().__init__(message=message, context=ctx)
        self.original = original


class ValidationError(PostboardError):
    """
    Raised when client input breaks a business rule.

    HTTP:    422 Unprocessable Entity, same status FastAPI uses for schema
             validation so clients only have one error shape to handle.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class ConflictError(PostboardError):
    """Raised when a write would collide with existing data (e.g. duplicate email)."""

    def __init__(
        self,
        message: str = "The resource already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AuthenticationError(PostboardError):
    """
    Raised for bad credentials and missing, invalid or expired tokens.

    HTTP:    401 Unauthorized with a `WWW-Authenticate: Bearer` header.
    """

    def __init__(
        self,
        message: str = "Could not validate credentials",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
