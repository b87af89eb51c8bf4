"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    ConflictError,
    ExternalServiceError,

    # Configuration
    ConfigurationMissingError,

    # Content store
    RemoteUnavailableError,
    StoreNotFoundError,
    DeleteConflictError,

    # Uploads
    NoFileUploadedError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    "ExternalServiceError",

    # Configuration
    "ConfigurationMissingError",

    # Content store
    "RemoteUnavailableError",
    "StoreNotFoundError",
    "DeleteConflictError",

    # Uploads
    "NoFileUploadedError",
]
