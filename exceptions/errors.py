"""
Custom exception classes for the application.

All errors raised by services and the content store client derive from
AppError so routes can turn them into the standard error response.
"""

from typing import Optional, Any
from datetime import datetime, timezone


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "NO_FILE_UPLOADED")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        code: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{resource.upper()}_NOT_FOUND",
            message=f"{resource} not found",
            status_code=404,
            details={"id": identifier}
        )


class ValidationError(AppError):
    """Request validation failed (400)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=400,
            details=details
        )


class ConflictError(AppError):
    """Conflict with existing resource (409)."""

    def __init__(
        self,
        message: str,
        code: str = "CONFLICT",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=409,
            details=details
        )


class ExternalServiceError(AppError):
    """External service failure."""

    def __init__(
        self,
        service: str,
        message: str,
        status_code: int = 503,
        code: Optional[str] = None,
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code or f"{service.upper()}_ERROR",
            message=message,
            status_code=status_code,
            details={"service": service, **(details or {})}
        )


# ===================
# CONFIGURATION ERRORS
# ===================

class ConfigurationMissingError(AppError):
    """Content store settings are incomplete (503)."""

    def __init__(self, missing: list[str]):
        super().__init__(
            code="CONFIGURATION_MISSING",
            message="Content store is not configured",
            status_code=503,
            details={"missing": missing}
        )


# ===================
# CONTENT STORE ERRORS
# ===================

class RemoteUnavailableError(ExternalServiceError):
    """Network, auth or server failure talking to the content store."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        path: Optional[str] = None
    ):
        super().__init__(
            service="github",
            message=message,
            status_code=500,
            code="REMOTE_STORE_UNAVAILABLE",
            details={"upstream_status": status, "path": path}
        )
        self.status = status


class StoreNotFoundError(NotFoundError):
    """Path does not exist in the content store."""

    def __init__(self, path: str):
        super().__init__(
            resource="Stored file",
            identifier=path,
            code="STORE_PATH_NOT_FOUND"
        )
        self.path = path


class DeleteConflictError(ConflictError):
    """Entry changed or vanished between version lookup and delete."""

    def __init__(self, path: str, status: Optional[int] = None):
        super().__init__(
            code="STORE_DELETE_CONFLICT",
            message="File was changed or removed before it could be deleted",
            details={"path": path, "upstream_status": status}
        )
        self.path = path


# ===================
# UPLOAD ERRORS
# ===================

class NoFileUploadedError(ValidationError):
    """Upload request carried no file."""

    def __init__(self, field: str = "file"):
        super().__init__(
            code="NO_FILE_UPLOADED",
            message="No file uploaded",
            details={"field": field}
        )
