"""
GitHub repository contents API used as the remote file store.

Every write is a commit on the configured branch. Each blob carries a sha
(version token); deletes must present the current sha, so two sweeps racing
on the same file get a conflict on the second attempt instead of a double
delete.
"""

import base64
from typing import Any, Optional
from urllib.parse import quote

import httpx
import structlog
from pydantic import ValidationError as PydanticValidationError

from config.settings import Settings
from exceptions import (
    ConfigurationMissingError,
    DeleteConflictError,
    RemoteUnavailableError,
    StoreNotFoundError,
)
from models.file import StoredEntry

logger = structlog.get_logger(__name__)

API_VERSION = "2022-11-28"

# The contents API returns at most this many entries for a directory
LISTING_LIMIT = 1000


class GitHubContentStore:
    """
    Async client for one repository/branch.

    Usage:
        store = GitHubContentStore(settings)
        entry = await store.write("temp/1700000000000_a.txt", b"...", "Upload a.txt")
        await store.delete(entry.path, entry.sha, "Remove a.txt")
        await store.aclose()
    """

    def __init__(
        self,
        settings: Settings,
        client: Optional[httpx.AsyncClient] = None
    ):
        self.settings = settings
        self.owner = settings.github_owner
        self.repo = settings.github_repo
        self.branch = settings.github_branch
        self._client = client or httpx.AsyncClient(
            base_url=settings.github_api_url,
            timeout=settings.store_timeout_seconds,
        )
        self._headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": API_VERSION,
        }
        if settings.github_token:
            self._headers["Authorization"] = f"Bearer {settings.github_token}"

    @property
    def configured(self) -> bool:
        return self.settings.store_configured

    def _require_configured(self) -> None:
        if not self.configured:
            raise ConfigurationMissingError(self.settings.missing_store_settings)

    def _contents_url(self, path: str) -> str:
        return f"/repos/{self.owner}/{self.repo}/contents/{quote(path, safe='/')}"

    def public_url(self, path: str) -> str:
        """Raw download URL for a stored path."""
        base = self.settings.raw_base_url.rstrip("/")
        return f"{base}/{self.owner}/{self.repo}/{self.branch}/{quote(path, safe='/')}"

    # ===================
    # TRANSPORT
    # ===================

    async def _request(
        self,
        method: str,
        path: str,
        url: str,
        **kwargs: Any
    ) -> httpx.Response:
        """
        Send one request and map failures to store errors.

        404 raises StoreNotFoundError; transport errors and any other
        non-2xx status except 409 raise RemoteUnavailableError. 409 is
        returned to the caller, which decides what a conflict means.
        """
        self._require_configured()

        try:
            response = await self._client.request(
                method,
                url,
                headers=self._headers,
                **kwargs
            )
        except httpx.HTTPError as e:
            logger.error(
                "store_request_failed",
                method=method,
                path=path,
                error=str(e),
                error_type=type(e).__name__
            )
            raise RemoteUnavailableError(
                f"Content store request failed: {e}",
                path=path
            ) from e

        if response.status_code == 404:
            raise StoreNotFoundError(path)

        if response.status_code == 409 or response.is_success:
            return response

        message = _error_message(response)
        logger.error(
            "store_request_rejected",
            method=method,
            path=path,
            status=response.status_code,
            error=message
        )
        raise RemoteUnavailableError(
            f"Content store returned {response.status_code}: {message}",
            status=response.status_code,
            path=path
        )

    # ===================
    # OPERATIONS
    # ===================

    async def write(self, path: str, content: bytes, message: str) -> StoredEntry:
        """
        Create or overwrite a file.

        Args:
            path: Target path inside the repository
            content: Raw file bytes
            message: Commit message

        Returns:
            StoredEntry with the new sha

        Raises:
            RemoteUnavailableError: If the write is rejected or fails
        """
        payload = {
            "message": message,
            "content": base64.b64encode(content).decode("ascii"),
            "branch": self.branch,
        }

        response = await self._request("PUT", path, self._contents_url(path), json=payload)

        if response.status_code == 409:
            # Same path written concurrently; treated like any other failed write
            raise RemoteUnavailableError(
                "Content store rejected the write: path changed concurrently",
                status=409,
                path=path
            )

        body = _json_body(response, path)
        entry = _to_entry(body.get("content") if isinstance(body, dict) else None, path)
        logger.debug("store_write_complete", path=path, sha=entry.sha)
        return entry

    async def get_entry(self, path: str) -> StoredEntry:
        """
        Fetch the current metadata (and sha) of a single file.

        Raises:
            StoreNotFoundError: If the path does not exist
            RemoteUnavailableError: On any other failure
        """
        response = await self._request(
            "GET", path, self._contents_url(path), params={"ref": self.branch}
        )
        data = _json_body(response, path)

        if isinstance(data, list):
            raise RemoteUnavailableError(
                "Expected a file but found a directory",
                status=response.status_code,
                path=path
            )

        return _to_entry(data, path)

    async def list_entries(self, path: str) -> list[StoredEntry]:
        """
        List the children of a directory.

        A file path yields a one-item list. The API caps directory
        listings; hitting the cap is logged since later entries are
        invisible to listing and sweep.

        Raises:
            StoreNotFoundError: If the directory does not exist
            RemoteUnavailableError: On any other failure
        """
        response = await self._request(
            "GET", path, self._contents_url(path), params={"ref": self.branch}
        )
        data = _json_body(response, path)

        items = data if isinstance(data, list) else [data]

        if len(items) >= LISTING_LIMIT:
            logger.warning(
                "store_listing_truncated",
                path=path,
                returned=len(items),
                limit=LISTING_LIMIT
            )

        return [_to_entry(item, path) for item in items]

    async def delete(self, path: str, sha: str, message: str) -> None:
        """
        Delete a file at a known version.

        Raises:
            DeleteConflictError: If the sha is stale or the file is gone
            RemoteUnavailableError: On any other failure
        """
        payload = {
            "message": message,
            "sha": sha,
            "branch": self.branch,
        }

        try:
            response = await self._request(
                "DELETE", path, self._contents_url(path), json=payload
            )
        except StoreNotFoundError as e:
            raise DeleteConflictError(path, status=404) from e

        if response.status_code == 409:
            raise DeleteConflictError(path, status=409)

        logger.debug("store_delete_complete", path=path, sha=sha)

    async def check(self) -> dict:
        """
        Check that the repository is reachable with the configured token.

        Returns:
            dict: Connection status with details
        """
        if not self.configured:
            return {
                "status": "unconfigured",
                "missing": self.settings.missing_store_settings
            }

        try:
            response = await self._request(
                "GET", "", f"/repos/{self.owner}/{self.repo}"
            )
            data = _json_body(response, "")
            if not isinstance(data, dict):
                raise RemoteUnavailableError("Unexpected repository payload")
            return {
                "status": "healthy",
                "repository": data.get("full_name"),
                "private": data.get("private"),
            }
        except (StoreNotFoundError, RemoteUnavailableError) as e:
            return {
                "status": "unhealthy",
                "error": e.message
            }

    async def aclose(self) -> None:
        await self._client.aclose()


# ===================
# HELPER FUNCTIONS
# ===================

def _json_body(response: httpx.Response, path: str) -> Any:
    """Decode a success body; proxies and outages can answer 200 with HTML."""
    try:
        return response.json()
    except ValueError as e:
        logger.error(
            "store_response_unreadable",
            path=path,
            status=response.status_code,
            body=response.text[:200]
        )
        raise RemoteUnavailableError(
            "Content store returned a body that is not JSON",
            status=response.status_code,
            path=path
        ) from e


def _to_entry(data: Any, path: str) -> StoredEntry:
    """Convert a contents API item to StoredEntry."""
    try:
        return StoredEntry(
            path=data["path"],
            name=data["name"],
            sha=data["sha"],
            type=data.get("type", "file"),
            size=data.get("size"),
        )
    except (KeyError, TypeError, AttributeError, PydanticValidationError) as e:
        logger.error("store_entry_malformed", path=path, error=str(e))
        raise RemoteUnavailableError(
            f"Content store returned a malformed entry: {e}",
            path=path
        ) from e


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(body, dict):
        return str(body.get("message", body))
    return str(body)[:200]
