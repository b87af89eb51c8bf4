"""
File service for uploads and listings.

Uploads are written to "<namespace>/<timestamp>_<name>"; the listing
decodes those names back and reports when each file expires.
"""

from typing import Callable, Optional
import structlog

from config import Settings, get_content_store, get_settings
from exceptions import (
    ConfigurationMissingError,
    NoFileUploadedError,
    StoreNotFoundError,
)
from integrations.github_store import GitHubContentStore
from models.file import FileInfo, UploadResult
from utils.expiry import (
    RETENTION_MILLIS,
    expires_at_millis,
    is_expired,
    millis_to_datetime,
    now_millis,
    within_calendar_range,
)
from utils.naming import build_path, clean_original_name, decode_name, encode_name

logger = structlog.get_logger(__name__)


class FileService:
    """
    Upload and listing operations against the content store.

    Store failures propagate to the caller as AppError subclasses.
    """

    def __init__(
        self,
        store: GitHubContentStore,
        settings: Settings,
        clock: Callable[[], int] = now_millis,
        retention_millis: int = RETENTION_MILLIS
    ):
        self.store = store
        self.settings = settings
        self.namespace = settings.storage_namespace
        self.clock = clock
        self.retention_millis = retention_millis

    def _require_configured(self) -> None:
        if not self.store.configured:
            raise ConfigurationMissingError(self.settings.missing_store_settings)

    async def upload(self, file_name: Optional[str], content: bytes) -> UploadResult:
        """
        Store one uploaded file.

        Args:
            file_name: File name sent by the client
            content: File bytes

        Returns:
            UploadResult with public URL and expiry

        Raises:
            NoFileUploadedError: If the file name is empty
            ConfigurationMissingError: If the store is not configured
            RemoteUnavailableError: If the write fails
        """
        original_name = clean_original_name(file_name)
        if original_name is None:
            raise NoFileUploadedError()

        self._require_configured()

        uploaded_at = self.clock()
        path = build_path(self.namespace, encode_name(uploaded_at, original_name))
        hours = self.retention_millis // 3_600_000

        logger.info(
            "uploading_file",
            file_name=original_name,
            path=path,
            size=len(content)
        )

        entry = await self.store.write(
            path,
            content,
            f"Upload {original_name} - expires in {hours}h"
        )

        expires_at = expires_at_millis(uploaded_at, self.retention_millis)

        logger.info(
            "file_uploaded",
            path=entry.path,
            sha=entry.sha,
            expires_at_millis=expires_at
        )

        return UploadResult(
            url=self.store.public_url(entry.path),
            file_name=original_name,
            expires_at=millis_to_datetime(expires_at),
            size=len(content),
            path=entry.path,
            sha=entry.sha,
        )

    async def list_files(self) -> list[FileInfo]:
        """
        List every managed file in the namespace.

        Entries whose names do not decode, or whose timestamp has no
        calendar date, are left out of the listing (they are not deleted
        either).

        Returns:
            FileInfo list, in store order

        Raises:
            ConfigurationMissingError: If the store is not configured
            RemoteUnavailableError: If the listing fails
        """
        self._require_configured()

        try:
            entries = await self.store.list_entries(self.namespace)
        except StoreNotFoundError:
            logger.debug("namespace_missing", namespace=self.namespace)
            return []

        now = self.clock()
        files = []

        for entry in entries:
            if not entry.is_file:
                continue

            decoded = decode_name(entry.name, path=entry.path)
            if decoded is None:
                logger.debug("listing_skipped_undecodable", name=entry.name)
                continue

            uploaded_at = decoded.upload_timestamp_millis
            if not within_calendar_range(uploaded_at, self.retention_millis):
                logger.warning(
                    "listing_skipped_out_of_range",
                    name=entry.name,
                    upload_timestamp_millis=uploaded_at
                )
                continue

            files.append(FileInfo(
                name=decoded.original_name,
                url=self.store.public_url(entry.path),
                uploaded_at=millis_to_datetime(uploaded_at),
                expires_at=millis_to_datetime(
                    expires_at_millis(uploaded_at, self.retention_millis)
                ),
                is_expired=is_expired(uploaded_at, now, self.retention_millis),
            ))

        logger.debug("files_listed", count=len(files), total_entries=len(entries))
        return files


# Singleton instance
_file_service: Optional[FileService] = None


def get_file_service() -> FileService:
    """Get or create FileService instance."""
    global _file_service
    if _file_service is None:
        _file_service = FileService(get_content_store(), get_settings())
    return _file_service
