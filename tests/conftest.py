"""
Shared test fixtures.

FakeContentStore stands in for the GitHub contents API so services and
routes can be exercised without network access.
"""

import sys
from pathlib import Path

# Add project root to Python path
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

import asyncio
import pytest
from typing import Generator, Optional

from config.settings import Settings
from exceptions import (
    ConfigurationMissingError,
    DeleteConflictError,
    StoreNotFoundError,
)
from models.file import StoredEntry

NAMESPACE = "temp"
DAY_MS = 86_400_000


# ===================
# FAKE CONTENT STORE
# ===================

class FakeContentStore:
    """
    In-memory content store with the same async surface as GitHubContentStore.

    Failures can be injected per path:
        store.get_errors["temp/1_a.txt"] = RemoteUnavailableError("boom")
        store.delete_errors["temp/1_a.txt"] = DeleteConflictError("temp/1_a.txt", 409)
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self.files: dict[str, dict] = {}
        self.writes: list[dict] = []
        self.deleted: list[str] = []
        self.list_error: Optional[Exception] = None
        self.write_error: Optional[Exception] = None
        self.get_errors: dict[str, Exception] = {}
        self.delete_errors: dict[str, Exception] = {}
        self._sha_counter = 0

    @property
    def configured(self) -> bool:
        return self.settings.store_configured

    def _next_sha(self) -> str:
        self._sha_counter += 1
        return f"sha-{self._sha_counter}"

    def public_url(self, path: str) -> str:
        return f"https://raw.example.test/{path}"

    def add_file(self, name: str, content: bytes = b"data", type: str = "file") -> str:
        """Seed an entry directly under the namespace."""
        path = f"{NAMESPACE}/{name}"
        self.files[path] = {
            "name": name,
            "sha": self._next_sha(),
            "content": content,
            "type": type,
        }
        return path

    def _entry(self, path: str) -> StoredEntry:
        item = self.files[path]
        return StoredEntry(
            path=path,
            name=item["name"],
            sha=item["sha"],
            type=item["type"],
            size=len(item["content"]),
        )

    async def write(self, path: str, content: bytes, message: str) -> StoredEntry:
        if not self.configured:
            raise ConfigurationMissingError(self.settings.missing_store_settings)
        if self.write_error:
            raise self.write_error
        self.writes.append({"path": path, "content": content, "message": message})
        self.files[path] = {
            "name": path.rsplit("/", 1)[-1],
            "sha": self._next_sha(),
            "content": content,
            "type": "file",
        }
        return self._entry(path)

    async def list_entries(self, path: str) -> list[StoredEntry]:
        await asyncio.sleep(0)
        if self.list_error:
            raise self.list_error
        prefix = f"{path}/"
        children = [p for p in self.files if p.startswith(prefix)]
        if not children:
            # Git has no empty directories
            raise StoreNotFoundError(path)
        return [self._entry(p) for p in children]

    async def get_entry(self, path: str) -> StoredEntry:
        await asyncio.sleep(0)
        if path in self.get_errors:
            raise self.get_errors[path]
        if path not in self.files:
            raise StoreNotFoundError(path)
        return self._entry(path)

    async def delete(self, path: str, sha: str, message: str) -> None:
        await asyncio.sleep(0)
        if path in self.delete_errors:
            raise self.delete_errors[path]
        if path not in self.files:
            raise DeleteConflictError(path, status=404)
        if self.files[path]["sha"] != sha:
            raise DeleteConflictError(path, status=409)
        del self.files[path]
        self.deleted.append(path)


class FixedClock:
    """Clock returning a settable epoch-millisecond value."""

    def __init__(self, now: int):
        self.now = now
        self.calls = 0

    def __call__(self) -> int:
        self.calls += 1
        return self.now


# ===================
# FIXTURES
# ===================

@pytest.fixture
def store_settings() -> Settings:
    """Fully configured settings."""
    return Settings(
        github_token="test-token",
        github_owner="octo",
        github_repo="uploads",
        github_branch="main",
        storage_namespace=NAMESPACE,
        _env_file=None,
    )


@pytest.fixture
def unconfigured_settings() -> Settings:
    """Settings with no credential, owner or repository."""
    return Settings(
        github_token=None,
        github_owner=None,
        github_repo=None,
        storage_namespace=NAMESPACE,
        _env_file=None,
    )


@pytest.fixture
def fake_store(store_settings) -> FakeContentStore:
    """
    In-memory content store.

    Usage:
        def test_something(fake_store):
            fake_store.add_file("1000_a.txt")
    """
    return FakeContentStore(store_settings)


@pytest.fixture
def clock() -> FixedClock:
    """Clock fixed at 1000 ms plus one day plus 2 ms."""
    return FixedClock(1000 + DAY_MS + 2)


@pytest.fixture
def test_client(fake_store, store_settings, clock) -> Generator:
    """
    Create FastAPI test client wired to the fake store.

    The lifespan is not entered, so no sweep scheduler runs.

    Usage:
        def test_endpoint(test_client, fake_store):
            response = test_client.get("/files")
    """
    from fastapi.testclient import TestClient
    from main import app
    from services.file_service import FileService, get_file_service

    service = FileService(fake_store, store_settings, clock=clock)
    app.dependency_overrides[get_file_service] = lambda: service
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
