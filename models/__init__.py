"""
Pydantic models for validation and serialization.
"""

from models.base import (
    BaseSchema,
    CamelSchema,
)
from models.file import (
    StoredEntry,
    UploadResult,
    FileInfo,
    FileListResponse,
)
from models.sweep import SweepReport

__all__ = [
    # Base
    "BaseSchema",
    "CamelSchema",

    # Files
    "StoredEntry",
    "UploadResult",
    "FileInfo",
    "FileListResponse",

    # Sweep
    "SweepReport",
]
