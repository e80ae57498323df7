"""Tests for the synchronous Codecov API client."""

from __future__ import annotations

from typing import Any
from unittest.mock import patch

import httpx
import pytest

from codecov_cache.client.sync_client import CodecovClient
from codecov_cache.exceptions import (
    AuthError,
    ConnectionError_,
    NotFoundError,
    ResponseParseError,
    ServerError,
)
from codecov_cache.models import (
    BranchDetailError,
    BranchDetailSuccess,
    ClientConfig,
    Owner,
    RequestConfig,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _client(config: ClientConfig, handler) -> CodecovClient:
    return CodecovClient(config, transport=httpx.MockTransport(handler))


def _repo(name: str) -> dict[str, Any]:
    return {"name": name, "private": False, "language": "rust", "branch": "main"}


@pytest.fixture(autouse=True)
def _quiet(quiet_output):
    yield


# ---------------------------------------------------------------------------
# Context manager
# ---------------------------------------------------------------------------


class TestContextManager:
    def test_enter_creates_and_exit_closes(self, client_config: ClientConfig) -> None:
        client = CodecovClient(client_config)
        assert client._client is None
        with client:
            assert client._client is not None
        assert client._client is None

    def test_request_outside_context_fails(self, client_config: ClientConfig, author) -> None:
        client = CodecovClient(client_config)
        with pytest.raises(AssertionError):
            client.get_branches(author)


# ---------------------------------------------------------------------------
# Request shape
# ---------------------------------------------------------------------------


class TestRequestShape:
    def test_auth_and_accept_headers(self, client_config: ClientConfig, author) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"count": 0, "results": []})

        with _client(client_config, handler) as client:
            client.get_branches(author)

        assert seen[0].headers["Authorization"] == "bearer test-token"
        assert seen[0].headers["Accept"] == "application/json"

    def test_endpoint_paths(self, client_config: ClientConfig, author, make_detail_payload) -> None:
        paths: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            paths.append(request.url.path)
            if request.url.path.endswith("/branches/main"):
                return httpx.Response(200, json=make_detail_payload())
            return httpx.Response(200, json={"count": 0, "results": []})

        with _client(client_config, handler) as client:
            client.get_commits(author)
            client.get_branches(author)
            client.get_branch_detail(author, "main")
            client.get_repos_page(author.owner)

        assert paths == [
            "/api/v2/github/octocat/repos/hello-world/commits",
            "/api/v2/github/octocat/repos/hello-world/branches",
            "/api/v2/github/octocat/repos/hello-world/branches/main",
            "/api/v2/github/octocat/repos",
        ]

    def test_branch_name_is_url_encoded(self, client_config: ClientConfig, author, make_detail_payload) -> None:
        raw_paths: list[bytes] = []

        def handler(request: httpx.Request) -> httpx.Response:
            raw_paths.append(request.url.raw_path)
            return httpx.Response(200, json=make_detail_payload(name="feature/x"))

        with _client(client_config, handler) as client:
            client.get_branch_detail(author, "feature/x")

        assert raw_paths[0].endswith(b"/branches/feature%2Fx")


# ---------------------------------------------------------------------------
# Pagination
# ---------------------------------------------------------------------------


class TestPagination:
    def test_get_all_repos_follows_pages(self, client_config: ClientConfig) -> None:
        pages = {
            "1": {"count": 3, "next": "page2", "results": [_repo("a"), _repo("b")], "total_pages": 2},
            "2": {"count": 3, "next": None, "results": [_repo("c")], "total_pages": 2},
        }
        requested: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            page = request.url.params["page"]
            requested.append(page)
            return httpx.Response(200, json=pages[page])

        with _client(client_config, handler) as client:
            repos = client.get_all_repos(Owner(service="github", username="octocat"))

        assert [r.name for r in repos] == ["a", "b", "c"]
        assert requested == ["1", "2"]

    def test_stops_on_empty_page(self, client_config: ClientConfig) -> None:
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            return httpx.Response(200, json={"count": 0, "next": "more", "results": []})

        with _client(client_config, handler) as client:
            repos = client.get_all_repos(Owner(service="github", username="octocat"))

        assert repos == []
        assert calls == 1


# ---------------------------------------------------------------------------
# Branch detail results
# ---------------------------------------------------------------------------


class TestBranchDetail:
    def test_success_variant(self, client_config: ClientConfig, author, make_detail_payload) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=make_detail_payload(commitid="abc"))

        with _client(client_config, handler) as client:
            result = client.get_branch_detail(author, "main")

        assert isinstance(result, BranchDetailSuccess)
        assert result.is_success
        assert result.detail.head_commit.commitid == "abc"
        assert result.detail.head_commit.totals == {"coverage": 87.5, "files": 12}

    def test_404_with_detail_is_error_variant(self, client_config: ClientConfig, author) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, json={"detail": "Not found."})

        with _client(client_config, handler) as client:
            result = client.get_branch_detail(author, "gone")

        assert isinstance(result, BranchDetailError)
        assert not result.is_success
        assert result.error.detail == "Not found."

    def test_404_without_body_raises(self, client_config: ClientConfig, author) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, text="nope")

        with _client(client_config, handler) as client:
            with pytest.raises(NotFoundError):
                client.get_branch_detail(author, "gone")

    def test_200_error_body_is_error_variant(self, client_config: ClientConfig, author) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"detail": "No report for branch."})

        with _client(client_config, handler) as client:
            result = client.get_branch_detail(author, "main")

        assert isinstance(result, BranchDetailError)

    def test_unexpected_body_raises_parse_error(self, client_config: ClientConfig, author) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"unexpected": True})

        with _client(client_config, handler) as client:
            with pytest.raises(ResponseParseError):
                client.get_branch_detail(author, "main")

    def test_non_json_body_raises_parse_error(self, client_config: ClientConfig, author) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>maintenance</html>")

        with _client(client_config, handler) as client:
            with pytest.raises(ResponseParseError):
                client.get_branch_detail(author, "main")


# ---------------------------------------------------------------------------
# Error mapping and retry
# ---------------------------------------------------------------------------


class TestErrorMapping:
    @pytest.mark.parametrize("status", [401, 403])
    def test_auth_errors(self, client_config: ClientConfig, author, status: int) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(status, json={"detail": "Invalid token."})

        with _client(client_config, handler) as client:
            with pytest.raises(AuthError, match="Invalid token"):
                client.get_branch_detail(author, "main")

    def test_list_404_raises_not_found(self, client_config: ClientConfig, author) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, json={"detail": "Not found."})

        with _client(client_config, handler) as client:
            with pytest.raises(NotFoundError):
                client.get_commits(author)

    @pytest.mark.parametrize("status", [400, 429, 500, 503])
    def test_server_errors(self, client_config: ClientConfig, author, status: int) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(status, text="boom")

        with _client(client_config, handler) as client:
            with pytest.raises(ServerError, match=f"HTTP {status}"):
                client.get_branches(author)

    def test_connection_error(self, client_config: ClientConfig, author) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with _client(client_config, handler) as client:
            with pytest.raises(ConnectionError_):
                client.get_branch_detail(author, "main")


class TestRetry:
    def _config(self, client_config: ClientConfig, retries: int) -> ClientConfig:
        return client_config.model_copy(update={"request": RequestConfig(max_retries=retries)})

    def test_retries_5xx_then_succeeds(self, client_config: ClientConfig, author) -> None:
        statuses = iter([502, 503, 200])

        def handler(request: httpx.Request) -> httpx.Response:
            status = next(statuses)
            if status == 200:
                return httpx.Response(200, json={"count": 0, "results": []})
            return httpx.Response(status)

        with patch("codecov_cache.client.sync_client.time.sleep") as sleep:
            with _client(self._config(client_config, 3), handler) as client:
                client.get_branches(author)

        assert [c.args[0] for c in sleep.call_args_list] == [1, 2]

    def test_retries_exhausted_on_timeout(self, client_config: ClientConfig, author) -> None:
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            raise httpx.ReadTimeout("slow", request=request)

        with patch("codecov_cache.client.sync_client.time.sleep"):
            with _client(self._config(client_config, 2), handler) as client:
                with pytest.raises(ConnectionError_, match="after 3 attempts"):
                    client.get_commits(author)

        assert calls == 3

    def test_4xx_not_retried(self, client_config: ClientConfig, author) -> None:
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            return httpx.Response(401)

        with patch("codecov_cache.client.sync_client.time.sleep") as sleep:
            with _client(self._config(client_config, 3), handler) as client:
                with pytest.raises(AuthError):
                    client.get_branches(author)

        assert calls == 1
        sleep.assert_not_called()
