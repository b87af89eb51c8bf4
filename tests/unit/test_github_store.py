"""
Unit tests for GitHubContentStore.

Requests are answered by httpx.MockTransport; nothing leaves the process.

Run: pytest tests/unit/test_github_store.py -v
"""

import base64
import json

import httpx
import pytest

from exceptions import (
    ConfigurationMissingError,
    DeleteConflictError,
    RemoteUnavailableError,
    StoreNotFoundError,
)
from integrations.github_store import LISTING_LIMIT, GitHubContentStore

CONTENTS = "/repos/octo/uploads/contents"


def file_item(name: str, sha: str = "abc123", path_prefix: str = "temp") -> dict:
    return {
        "name": name,
        "path": f"{path_prefix}/{name}",
        "sha": sha,
        "size": 4,
        "type": "file",
    }


class Recorder:
    """MockTransport handler that records requests and replays a response."""

    def __init__(self, status: int = 200, body=None, exc: Exception = None):
        self.status = status
        self.body = body
        self.exc = exc
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.exc:
            raise self.exc
        return httpx.Response(self.status, json=self.body)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    @property
    def last_json(self) -> dict:
        return json.loads(self.last.content)


def make_store(settings, handler) -> GitHubContentStore:
    client = httpx.AsyncClient(
        transport=httpx.MockTransport(handler),
        base_url=settings.github_api_url,
    )
    return GitHubContentStore(settings, client=client)


class TestWrite:
    """Tests for GitHubContentStore.write()"""

    @pytest.mark.asyncio
    async def test_write_puts_base64_content(self, store_settings):
        handler = Recorder(201, {"content": file_item("1000_a.txt", sha="new-sha"), "commit": {}})
        store = make_store(store_settings, handler)

        entry = await store.write("temp/1000_a.txt", b"data", "Upload a.txt - expires in 24h")

        assert handler.last.method == "PUT"
        assert handler.last.url.path == f"{CONTENTS}/temp/1000_a.txt"
        assert handler.last.headers["Authorization"] == "Bearer test-token"
        assert handler.last_json == {
            "message": "Upload a.txt - expires in 24h",
            "content": base64.b64encode(b"data").decode("ascii"),
            "branch": "main",
        }
        assert entry.sha == "new-sha"
        assert entry.path == "temp/1000_a.txt"

    @pytest.mark.asyncio
    async def test_write_response_without_content_raises_remote_unavailable(self, store_settings):
        store = make_store(store_settings, Recorder(201, {"commit": {}}))

        with pytest.raises(RemoteUnavailableError):
            await store.write("temp/1000_a.txt", b"data", "Upload a.txt")

    @pytest.mark.asyncio
    async def test_write_quotes_path(self, store_settings):
        handler = Recorder(201, {"content": file_item("1000_my file#1.txt")})
        store = make_store(store_settings, handler)

        await store.write("temp/1000_my file#1.txt", b"x", "Upload")

        assert handler.last.url.raw_path.startswith(
            f"{CONTENTS}/temp/1000_my%20file%231.txt".encode()
        )

    @pytest.mark.asyncio
    async def test_write_server_error_raises_remote_unavailable(self, store_settings):
        store = make_store(store_settings, Recorder(502, {"message": "Bad Gateway"}))

        with pytest.raises(RemoteUnavailableError) as exc_info:
            await store.write("temp/1000_a.txt", b"x", "Upload")

        assert exc_info.value.status == 502
        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_write_auth_failure_raises_remote_unavailable(self, store_settings):
        store = make_store(store_settings, Recorder(401, {"message": "Bad credentials"}))

        with pytest.raises(RemoteUnavailableError) as exc_info:
            await store.write("temp/1000_a.txt", b"x", "Upload")

        assert "Bad credentials" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_write_network_error_raises_remote_unavailable(self, store_settings):
        handler = Recorder(exc=httpx.ConnectError("connection refused"))
        store = make_store(store_settings, handler)

        with pytest.raises(RemoteUnavailableError):
            await store.write("temp/1000_a.txt", b"x", "Upload")

    @pytest.mark.asyncio
    async def test_write_unconfigured_sends_nothing(self, unconfigured_settings):
        handler = Recorder(201, {})
        store = make_store(unconfigured_settings, handler)

        with pytest.raises(ConfigurationMissingError):
            await store.write("temp/1000_a.txt", b"x", "Upload")

        assert handler.requests == []


class TestListEntries:
    """Tests for GitHubContentStore.list_entries()"""

    @pytest.mark.asyncio
    async def test_list_directory(self, store_settings):
        handler = Recorder(200, [
            file_item("1000_a.txt", sha="s1"),
            {**file_item("sub"), "type": "dir", "size": 0},
        ])
        store = make_store(store_settings, handler)

        entries = await store.list_entries("temp")

        assert handler.last.url.params["ref"] == "main"
        assert [e.name for e in entries] == ["1000_a.txt", "sub"]
        assert entries[0].is_file
        assert not entries[1].is_file

    @pytest.mark.asyncio
    async def test_list_single_file_wrapped(self, store_settings):
        store = make_store(store_settings, Recorder(200, file_item("1000_a.txt")))

        entries = await store.list_entries("temp/1000_a.txt")

        assert len(entries) == 1

    @pytest.mark.asyncio
    async def test_list_missing_namespace_raises_not_found(self, store_settings):
        store = make_store(store_settings, Recorder(404, {"message": "Not Found"}))

        with pytest.raises(StoreNotFoundError):
            await store.list_entries("temp")

    @pytest.mark.asyncio
    async def test_list_at_api_cap_still_returns_entries(self, store_settings):
        items = [file_item(f"{i}_f.txt", sha=f"s{i}") for i in range(LISTING_LIMIT)]
        store = make_store(store_settings, Recorder(200, items))

        entries = await store.list_entries("temp")

        assert len(entries) == LISTING_LIMIT

    @pytest.mark.asyncio
    async def test_list_malformed_item_raises_remote_unavailable(self, store_settings):
        store = make_store(store_settings, Recorder(200, [file_item("1000_a.txt"), {"name": "x"}]))

        with pytest.raises(RemoteUnavailableError):
            await store.list_entries("temp")


class TestGetEntry:
    """Tests for GitHubContentStore.get_entry()"""

    @pytest.mark.asyncio
    async def test_get_entry_returns_current_sha(self, store_settings):
        store = make_store(store_settings, Recorder(200, file_item("1000_a.txt", sha="current")))

        entry = await store.get_entry("temp/1000_a.txt")

        assert entry.sha == "current"

    @pytest.mark.asyncio
    async def test_get_entry_missing_raises_not_found(self, store_settings):
        store = make_store(store_settings, Recorder(404, {"message": "Not Found"}))

        with pytest.raises(StoreNotFoundError):
            await store.get_entry("temp/1000_a.txt")

    @pytest.mark.asyncio
    async def test_get_entry_directory_rejected(self, store_settings):
        store = make_store(store_settings, Recorder(200, [file_item("x")]))

        with pytest.raises(RemoteUnavailableError):
            await store.get_entry("temp")

    @pytest.mark.asyncio
    async def test_get_entry_html_body_raises_remote_unavailable(self, store_settings):
        """A proxy answering 200 with an HTML page is a store failure."""
        store = make_store(
            store_settings,
            lambda request: httpx.Response(200, text="<html>Service Unavailable</html>")
        )

        with pytest.raises(RemoteUnavailableError) as exc_info:
            await store.get_entry("temp/1000_a.txt")

        assert exc_info.value.status == 200

    @pytest.mark.asyncio
    async def test_get_entry_without_sha_raises_remote_unavailable(self, store_settings):
        item = file_item("1000_a.txt")
        del item["sha"]
        store = make_store(store_settings, Recorder(200, item))

        with pytest.raises(RemoteUnavailableError):
            await store.get_entry("temp/1000_a.txt")


class TestDelete:
    """Tests for GitHubContentStore.delete()"""

    @pytest.mark.asyncio
    async def test_delete_sends_sha_and_branch(self, store_settings):
        handler = Recorder(200, {"content": None, "commit": {}})
        store = make_store(store_settings, handler)

        await store.delete("temp/1000_a.txt", "abc123", "Auto-delete expired file: temp/1000_a.txt")

        assert handler.last.method == "DELETE"
        assert handler.last_json == {
            "message": "Auto-delete expired file: temp/1000_a.txt",
            "sha": "abc123",
            "branch": "main",
        }

    @pytest.mark.asyncio
    async def test_delete_stale_sha_raises_conflict(self, store_settings):
        store = make_store(store_settings, Recorder(409, {"message": "sha does not match"}))

        with pytest.raises(DeleteConflictError):
            await store.delete("temp/1000_a.txt", "old", "Remove")

    @pytest.mark.asyncio
    async def test_delete_missing_raises_conflict(self, store_settings):
        store = make_store(store_settings, Recorder(404, {"message": "Not Found"}))

        with pytest.raises(DeleteConflictError):
            await store.delete("temp/1000_a.txt", "abc123", "Remove")

    @pytest.mark.asyncio
    async def test_delete_server_error_raises_remote_unavailable(self, store_settings):
        store = make_store(store_settings, Recorder(500, {"message": "oops"}))

        with pytest.raises(RemoteUnavailableError):
            await store.delete("temp/1000_a.txt", "abc123", "Remove")


class TestPublicUrlAndCheck:
    """Tests for public_url() and check()"""

    def test_public_url_raw_link(self, store_settings):
        store = GitHubContentStore(store_settings)

        assert store.public_url("temp/1000_a b.txt") == (
            "https://raw.githubusercontent.com/octo/uploads/main/temp/1000_a%20b.txt"
        )

    @pytest.mark.asyncio
    async def test_check_healthy(self, store_settings):
        handler = Recorder(200, {"full_name": "octo/uploads", "private": False})
        store = make_store(store_settings, handler)

        result = await store.check()

        assert handler.last.url.path == "/repos/octo/uploads"
        assert result == {"status": "healthy", "repository": "octo/uploads", "private": False}

    @pytest.mark.asyncio
    async def test_check_unhealthy(self, store_settings):
        store = make_store(store_settings, Recorder(401, {"message": "Bad credentials"}))

        result = await store.check()

        assert result["status"] == "unhealthy"

    @pytest.mark.asyncio
    async def test_check_unconfigured(self, unconfigured_settings):
        store = make_store(unconfigured_settings, Recorder(200, {}))

        result = await store.check()

        assert result["status"] == "unconfigured"
        assert "GITHUB_OWNER" in result["missing"]
