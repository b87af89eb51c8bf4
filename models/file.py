"""
File models.

Stored entries as reported by the content store, plus the upload and
listing payloads returned by the API.
"""

from datetime import datetime
from typing import Optional
from pydantic import ConfigDict, Field

from models.base import BaseSchema, CamelSchema


class StoredEntry(BaseSchema):
    """One item in the content store (a file or a directory)."""

    # Leaf names are stored verbatim
    model_config = ConfigDict(str_strip_whitespace=False)

    path: str = Field(..., description="Full path inside the repository")
    name: str = Field(..., description="Leaf name, <timestamp>_<originalName> for managed files")
    sha: str = Field(..., description="Version token required to delete this exact blob")
    type: str = Field(default="file", description="file, dir, symlink or submodule")
    size: Optional[int] = Field(None, ge=0, description="Blob size in bytes")

    @property
    def is_file(self) -> bool:
        return self.type == "file"


class UploadResult(CamelSchema):
    """Response for a successful upload."""

    message: str = Field(default="File uploaded successfully")
    url: str = Field(..., description="Public raw URL of the stored file")
    file_name: str = Field(..., description="Original file name")
    expires_at: datetime = Field(..., description="Instant after which the file may be purged")
    size: int = Field(..., ge=0, description="Size in bytes")
    path: str = Field(..., description="Path inside the repository")
    sha: str = Field(..., description="Version token of the stored blob")


class FileInfo(CamelSchema):
    """A managed file as shown in the listing."""

    name: str = Field(..., description="Original file name")
    url: str = Field(..., description="Public raw URL")
    uploaded_at: datetime
    expires_at: datetime
    is_expired: bool


class FileListResponse(CamelSchema):
    """Listing of every decodable file in the namespace."""

    files: list[FileInfo] = Field(default_factory=list)
