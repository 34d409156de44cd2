"""
Catalog API — Custom Exception Hierarchy
========================================

What:  Application-specific exceptions for every failure a handler can produce.
Why:   Each failure kind maps to exactly one HTTP status, so handlers never
       decide status codes themselves and "not found" is never confused with
       a server error.
How:   Each exception class carries a message, optional context dict, and an
       ErrorKind tag. Global exception handlers (registered in main.py) turn
       them into structured JSON error responses.
Who:   Raised by services, the repository and the auth gate; caught by global handlers.

Exception Hierarchy:
    CatalogError (base)
    ├── ValidationError       → 400 Bad Request (ordered field error list)
    ├── AuthenticationError   → 401 Unauthorized
    ├── NotFoundError         → 404 Not Found
    ├── DatabaseError         → 500 Internal Server Error
    ├── ImageUploadError      → 500 Internal Server Error
    └── NotificationError     → logged only, never reaches the client
"""

import enum
from typing import Any, Dict, List, Optional


class ErrorKind(str, enum.Enum):
    """Machine-readable failure categories, also used as the `error` field of responses."""

    VALIDATION_FAILED = "validation_error"
    UNAUTHENTICATED = "unauthenticated"
    NOT_FOUND = "not_found"
    PERSISTENCE_FAILED = "persistence_error"
    UPLOAD_FAILED = "upload_error"
    NOTIFICATION_FAILED = "notification_error"
    UNEXPECTED = "internal_server_error"


class CatalogError(Exception):
    """
    Base exception for all catalog application errors.

    Attributes:
        message:  User-facing error description (returned in the API response)
        context:  Additional debug info (logged, returned only where noted)
        kind:     ErrorKind tag
    """

    kind: ErrorKind = ErrorKind.UNEXPECTED

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(CatalogError):
    """
    Raised when client input fails one or more validation rules.

    HTTP: 400 Bad Request

    `errors` keeps the violations in rule declaration order:
        [{"field": "price", "message": "Price must be numeric", "value": "abc"}]
    """

    kind = ErrorKind.VALIDATION_FAILED

    def __init__(
        self,
        message: str = "Validation failed",
        errors: Optional[List[Dict[str, Any]]] = None,
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.errors = list(errors or [])
        if field and not self.errors:
            self.errors.append({"field": field, "message": message})
        self.field = field or (self.errors[0]["field"] if self.errors else None)
        super().__init__(message=message, context=context)


class AuthenticationError(CatalogError):
    """
    Raised by the auth gate when a request carries no valid credentials.

    HTTP: 401 Unauthorized
    """

    kind = ErrorKind.UNAUTHENTICATED

    def __init__(
        self,
        message: str = "Missing or invalid credentials",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(CatalogError):
    """
    Raised when a requested resource does not exist.

    HTTP: 404 Not Found

    SQLAlchemy returns None (or a zero rowcount) for missing records; the
    services convert that into this exception so routes stay free of
    status-code logic.
    """

    kind = ErrorKind.NOT_FOUND

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource.capitalize()} with ID '{resource_id}' does not exist"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class DatabaseError(CatalogError):
    """
    Raised when a database operation fails.

    HTTP: 500 Internal Server Error

    The message names the failed operation and carries the driver's error
    text; the full context (statement, params) is logged server-side only.
    """

    kind = ErrorKind.PERSISTENCE_FAILED

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ImageUploadError(CatalogError):
    """
    Raised when the object store rejects or fails an image upload.

    HTTP: 500 Internal Server Error

    Raised before persistence, so a failed upload never leaves a product
    row behind.
    """

    kind = ErrorKind.UPLOAD_FAILED

    def __init__(
        self,
        message: str = "Image upload failed. Please try again.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotificationError(CatalogError):
    """
    Raised when the mail provider cannot accept a notification.

    Never mapped to an HTTP response: notifications run after the creating
    request has been committed, and a failure here is only logged.
    """

    kind = ErrorKind.NOTIFICATION_FAILED

    def __init__(
        self,
        message: str = "Notification could not be delivered",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
