# marketplace/core/exceptions.py
"""Custom exceptions for the marketplace API."""
from fastapi import HTTPException
from typing import Any, Dict, Optional


class MarketplaceException(HTTPException):
    """Base exception for the marketplace application."""
    def __init__(
        self,
        status_code: int,
        detail: Any,
        headers: Optional[Dict[str, Any]] = None
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)


class NotFoundError(MarketplaceException):
    """Resource not found."""
    def __init__(self, resource: str, id: Any = None):
        message = f"{resource} not found"
        if id is not None:
            message += f" with id: {id}"
        super().__init__(status_code=404, detail={"error": "Not Found", "message": message})


class ValidationError(MarketplaceException):
    """Exception raised for validation errors."""
    def __init__(self, message: str, field: Optional[str] = None):
        detail = {"error": "Validation Error", "message": message}
        if field:
            detail["field"] = field
        super().__init__(status_code=422, detail=detail)


class ConflictError(MarketplaceException):
    """Base for 409 responses; `code` lets clients tell the cases apart."""
    code = "conflict"

    def __init__(self, message: str):
        super().__init__(
            status_code=409,
            detail={"error": "Conflict", "code": self.code, "message": message}
        )


class AlreadyEnrolledError(ConflictError):
    code = "already_enrolled"

    def __init__(self, kind: str):
        super().__init__(f"You are already enrolled in this {kind}")


class AlreadyRegisteredError(ConflictError):
    code = "already_registered"

    def __init__(self):
        super().__init__("You are already registered for this event")


class SubjectFullError(ConflictError):
    code = "subject_full"

    def __init__(self, kind: str):
        super().__init__(f"This {kind} has no spots left")


class InvalidTransitionError(ConflictError):
    code = "invalid_transition"

    def __init__(self, current: str, target: str):
        super().__init__(f"Cannot move enrollment from '{current}' to '{target}'")


class StaleEnrollmentError(ConflictError):
    code = "stale_enrollment"

    def __init__(self, expected_version: int, current_version: int):
        super().__init__(
            f"Enrollment was modified by someone else "
            f"(expected version {expected_version}, found {current_version}). Reload and retry."
        )


class AuthenticationError(MarketplaceException):
    """Missing or invalid session; clients send the user to sign in."""
    def __init__(self, message: str = "Could not validate credentials"):
        super().__init__(
            status_code=401,
            detail={"error": "Authentication Required", "message": message},
            headers={"WWW-Authenticate": "Bearer"},
        )


class PermissionDeniedError(MarketplaceException):
    def __init__(self, message: str = "Permission denied"):
        super().__init__(status_code=403, detail={"error": "Forbidden", "message": message})


class StoreError(MarketplaceException):
    """Transient failure talking to the database. Not retried automatically."""
    def __init__(self, message: str = "The request could not be completed. Please try again."):
        super().__init__(
            status_code=503,
            detail={"error": "Store Error", "message": message, "retryable": True}
        )


class RateLimitExceeded(MarketplaceException):
    def __init__(self):
        super().__init__(status_code=429, detail={"error": "Too Many Requests", "message": "Rate limit exceeded"})
