"""Custom exceptions and error response schemas."""

from typing import Any, Optional

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    """Standardized error payload handed to the caller layer."""

    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[dict[str, Any]] = Field(None, description="Additional context")


class AppError(Exception):
    """Base exception for all app-level errors."""

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[dict[str, Any]] = None,
    ):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_response(self) -> ErrorDetail:
        """Convert to the standard error payload."""
        return ErrorDetail(
            code=self.code,
            message=self.message,
            details=self.details if self.details else None,
        )


class ValidationError(AppError):
    """Raised when user input fails validation."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            code="VALIDATION_ERROR",
            message=message,
            details=details,
        )


class NotFoundError(AppError):
    """Raised when a referenced category or record doesn't exist."""

    def __init__(self, resource: str, resource_id: str):
        super().__init__(
            code="NOT_FOUND",
            message=f"{resource} with ID {resource_id} not found",
            details={"resource": resource, "resource_id": resource_id},
        )


class ForbiddenError(AppError):
    """Raised when a user tries to modify a record they don't own."""

    def __init__(self, message: str = "Forbidden"):
        super().__init__(
            code="FORBIDDEN",
            message=message,
        )


class NoUserIdError(AppError):
    """Raised when an operation needs the acting user's ID and none was given."""

    def __init__(self, action: str):
        super().__init__(
            code="NO_USER_ID",
            message=f"A user ID is required to {action}",
            details={"action": action},
        )


class SaveFailedError(AppError):
    """Raised when a persistence write fails."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            code="SAVE_FAILED",
            message=message,
            details=details,
        )


class PersistenceReadError(AppError):
    """Raised when stored data can't be read or decoded."""

    def __init__(self, key: str, reason: str):
        super().__init__(
            code="PERSISTENCE_READ_FAILED",
            message=f"Could not read stored data for {key}",
            details={"key": key, "reason": reason},
        )
