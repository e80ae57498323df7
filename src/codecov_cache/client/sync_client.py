"""Synchronous Codecov API client with bearer auth, retry, and error mapping.

:class:`CodecovClient` wraps :class:`httpx.Client` and layers on:

- **Auth injection** -- ``Authorization: bearer <token>`` on every request.
- **Retry with backoff** -- retries on 5xx and network errors with
  exponential delay (1 s, 2 s, 4 s, ...).
- **Error mapping** -- HTTP and transport failures become the
  :class:`~codecov_cache.exceptions.RemoteError` family.
- **Response parsing** -- JSON bodies are validated into the Pydantic
  models from :mod:`codecov_cache.models`.

This client never touches the cache; see
:class:`~codecov_cache.client.cached_client.CachedCodecovClient` for that.
"""

from __future__ import annotations

import time
from typing import Any, Optional, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError

from codecov_cache.exceptions import (
    AuthError,
    ConnectionError_,
    NotFoundError,
    ResponseParseError,
    ServerError,
)
from codecov_cache.models import (
    APIErrorDetail,
    Author,
    BranchDetail,
    BranchDetailAPIResponse,
    BranchDetailError,
    BranchDetailSuccess,
    BranchesAPIResponse,
    ClientConfig,
    CommitsAPIResponse,
    Owner,
    Repo,
    ReposAPIResponse,
)
from codecov_cache.output import get_output

_ModelT = TypeVar("_ModelT", bound=BaseModel)


def _segment(value: str) -> str:
    return quote(value, safe="")


class CodecovClient:
    """Blocking client for the Codecov v2 REST API.

    Must be used as a context manager so that the underlying transport is
    opened and closed properly.

    Args:
        config: Resolved client configuration (token, base URL, request
            settings).
        transport: Optional :mod:`httpx` transport, e.g.
            :class:`httpx.MockTransport` in tests.

    Example::

        with CodecovClient(config) as client:
            repos = client.get_all_repos(Owner(service="github", username="octocat"))
    """

    def __init__(
        self,
        config: ClientConfig,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._config = config
        self._transport = transport
        self._client: Optional[httpx.Client] = None

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> CodecovClient:
        request = self._config.request
        self._client = httpx.Client(
            base_url=self._config.base_url,
            timeout=request.timeout,
            verify=request.verify_ssl,
            follow_redirects=True,
            transport=self._transport,
            headers={
                "Accept": "application/json",
                "Authorization": f"bearer {self._config.token}",
            },
        )
        return self

    def __exit__(self, *args: object) -> None:
        if self._client:
            self._client.close()
            self._client = None

    # ------------------------------------------------------------------ #
    # Endpoints
    # ------------------------------------------------------------------ #

    def get_repos_page(self, owner: Owner, page: int = 1) -> ReposAPIResponse:
        """Return one page of ``/{service}/{owner}/repos``."""
        path = f"/{_segment(owner.service)}/{_segment(owner.username)}/repos"
        return self._get_model(path, ReposAPIResponse, params={"page": page})

    def get_all_repos(self, owner: Owner) -> list[Repo]:
        """Return every repository of *owner*, following pagination until exhausted."""
        repos: list[Repo] = []
        page = 1
        while True:
            response = self.get_repos_page(owner, page)
            repos.extend(response.results)
            if response.next is None or not response.results:
                break
            if response.total_pages is not None and page >= response.total_pages:
                break
            page += 1
        return repos

    def get_commits(self, author: Author) -> CommitsAPIResponse:
        """Return the commit listing of a repository.

        See https://docs.codecov.com/reference/repos_commits_list
        """
        return self._get_model(f"{self._repo_path(author)}/commits", CommitsAPIResponse)

    def get_branches(self, author: Author) -> BranchesAPIResponse:
        """Return the branch listing of a repository.

        See https://docs.codecov.com/reference/repos_branches_list
        """
        return self._get_model(f"{self._repo_path(author)}/branches", BranchesAPIResponse)

    def get_branch_detail(self, author: Author, branch_name: str) -> BranchDetailAPIResponse:
        """Return the detail of *branch_name*, including its current head commit.

        A 404 carrying an error body is a domain result, not an exception:
        it comes back as :class:`~codecov_cache.models.BranchDetailError`.

        See https://docs.codecov.com/reference/repos_branches_retrieve

        Raises:
            AuthError: On 401 / 403.
            ServerError: On 5xx and other unexpected statuses.
            ConnectionError_: On network / timeout errors after all retries.
            ResponseParseError: If the body matches neither the detail nor
                the error shape.
        """
        path = f"{self._repo_path(author)}/branches/{_segment(branch_name)}"
        response = self._execute_with_retry(path, None)

        if response.status_code == 404:
            error = self._try_parse(response, APIErrorDetail)
            if error is not None:
                return BranchDetailError(error=error)
        self._map_response_error(response)

        data = self._json(response)
        try:
            return BranchDetailSuccess(detail=BranchDetail.model_validate(data))
        except ValidationError as exc:
            try:
                return BranchDetailError(error=APIErrorDetail.model_validate(data))
            except ValidationError:
                raise ResponseParseError(f"Unexpected branch detail body: {exc}") from exc

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _repo_path(author: Author) -> str:
        return (
            f"/{_segment(author.service)}/{_segment(author.username)}"
            f"/repos/{_segment(author.name)}"
        )

    def _get_model(
        self,
        path: str,
        model: type[_ModelT],
        params: Optional[dict[str, Any]] = None,
    ) -> _ModelT:
        response = self._execute_with_retry(path, params)
        self._map_response_error(response)
        data = self._json(response)
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            raise ResponseParseError(f"Unexpected body from {path}: {exc}") from exc

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise ResponseParseError(
                f"Response from {response.request.url} is not JSON: {exc}"
            ) from exc

    @staticmethod
    def _try_parse(response: httpx.Response, model: type[_ModelT]) -> Optional[_ModelT]:
        try:
            return model.model_validate(response.json())
        except (ValueError, ValidationError):
            return None

    def _execute_with_retry(
        self,
        path: str,
        params: Optional[dict[str, Any]],
    ) -> httpx.Response:
        """GET *path*, retrying on 5xx and connection / timeout errors.

        The delay doubles each attempt: 1 s, 2 s, 4 s, ...
        """
        assert self._client is not None, "Client not initialised -- use as context manager"

        max_retries = self._config.request.max_retries
        output = get_output()

        for attempt in range(max_retries + 1):
            try:
                response = self._client.get(path, params=params)
            except (httpx.TimeoutException, httpx.NetworkError) as exc:
                if attempt < max_retries:
                    delay = 2 ** attempt
                    output.debug(
                        f"Connection error: {exc}, retrying in {delay}s "
                        f"(attempt {attempt + 1}/{max_retries})"
                    )
                    time.sleep(delay)
                    continue
                raise ConnectionError_(
                    f"Connection failed after {max_retries + 1} attempts: {exc}"
                ) from exc

            if response.status_code >= 500 and attempt < max_retries:
                delay = 2 ** attempt
                output.debug(
                    f"Server error {response.status_code}, retrying in {delay}s "
                    f"(attempt {attempt + 1}/{max_retries})"
                )
                time.sleep(delay)
                continue
            return response

        raise ServerError("Request failed after all retries")  # pragma: no cover

    @staticmethod
    def _map_response_error(response: httpx.Response) -> None:
        """Raise a typed exception for error HTTP status codes."""
        status = response.status_code
        if status < 400:
            return

        try:
            detail = response.json()
            if isinstance(detail, dict):
                msg = detail.get("detail") or detail.get("message") or detail.get("error") or ""
            else:
                msg = str(detail)
        except ValueError:
            msg = response.text[:200] if response.text else ""

        prefix = f"HTTP {status}"
        full_msg = f"{prefix}: {msg}" if msg else prefix

        if status in (401, 403):
            raise AuthError(full_msg)
        if status == 404:
            raise NotFoundError(full_msg)
        raise ServerError(full_msg)
