"""Canonical Pydantic models shared across all codecov_cache modules.

The models fall into three groups:

**Identity models** -- who and what a query is about:
    :class:`Owner` and :class:`Author`. An :class:`Author` also knows how to
    turn itself into a cache key.

**API payload models** -- the JSON bodies returned by the Codecov v2 API:
    :class:`Repo`, :class:`ReposAPIResponse`, :class:`Commit`,
    :class:`CommitsAPIResponse`, :class:`Branch`, :class:`BranchesAPIResponse`,
    :class:`CommitDetail`, :class:`BranchDetail` and :class:`APIErrorDetail`.
    Payload models use ``extra="allow"`` so that fields the API adds later
    survive a round-trip through the cache.

**Configuration models** -- :class:`RequestConfig` and :class:`ClientConfig`,
    built once at startup by :func:`~codecov_cache.config.resolve_config`.

The branch-detail endpoint answers with either a detail body or an error
body; :data:`BranchDetailAPIResponse` is the tagged union of
:class:`BranchDetailSuccess` and :class:`BranchDetailError`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# --- Identity ---


class Owner(BaseModel):
    """A Codecov owner: a user or organisation on a git hosting service.

    Example::

        owner = Owner(service="github", username="kitsuyui")
        author = owner.new_author("rust-codecov")
    """

    model_config = ConfigDict(frozen=True)

    service: str = Field(description="Git hosting service: github, gitlab, bitbucket, ...")
    username: str

    def new_author(self, name: str) -> Author:
        """Return the :class:`Author` for repository *name* under this owner."""
        return Author(service=self.service, username=self.username, name=name)


class Author(BaseModel):
    """A single repository identity (``service/username/name``)."""

    model_config = ConfigDict(frozen=True)

    service: str
    username: str
    name: str = Field(description="Repository name")

    @property
    def owner(self) -> Owner:
        return Owner(service=self.service, username=self.username)

    def cache_key(self, branch: str, commit_id: str) -> tuple[str, ...]:
        """Build the key sequence for a branch detail at *commit_id*.

        Segments go from most general to most specific:
        ``(service, username, name, branch, commit_id)``.
        """
        return (self.service, self.username, self.name, branch, commit_id)


# --- API payloads ---


class _Payload(BaseModel):
    model_config = ConfigDict(extra="allow")


class RepoAuthor(_Payload):
    service: Optional[str] = None
    username: Optional[str] = None
    name: Optional[str] = None


class Repo(_Payload):
    """A repository entry from ``/{service}/{owner}/repos``."""

    name: str
    private: Optional[bool] = None
    updatestamp: Optional[str] = None
    author: Optional[RepoAuthor] = None
    language: Optional[str] = None
    branch: Optional[str] = None
    active: Optional[bool] = None
    activated: Optional[bool] = None
    totals: Optional[dict[str, Any]] = None


class ReposAPIResponse(_Payload):
    """One page of the repository listing."""

    count: int = 0
    next: Optional[str] = None
    previous: Optional[str] = None
    results: list[Repo] = Field(default_factory=list)
    total_pages: Optional[int] = None


class Commit(_Payload):
    """A commit entry from the commits listing."""

    commitid: str
    message: Optional[str] = None
    timestamp: Optional[str] = None
    ci_passed: Optional[bool] = None
    author: Optional[dict[str, Any]] = None
    branch: Optional[str] = None
    totals: Optional[dict[str, Any]] = None
    state: Optional[str] = None
    parent: Optional[str] = None


class CommitsAPIResponse(_Payload):
    count: int = 0
    next: Optional[str] = None
    previous: Optional[str] = None
    results: list[Commit] = Field(default_factory=list)
    total_pages: Optional[int] = None


class Branch(_Payload):
    name: str
    updatestamp: Optional[str] = None


class BranchesAPIResponse(_Payload):
    count: int = 0
    next: Optional[str] = None
    previous: Optional[str] = None
    results: list[Branch] = Field(default_factory=list)
    total_pages: Optional[int] = None


class CommitDetail(Commit):
    """The head commit embedded in a :class:`BranchDetail`, including its report."""

    report: Optional[dict[str, Any]] = None


class BranchDetail(_Payload):
    """Detail of one branch, including the commit it currently points at.

    ``head_commit.commitid`` is the resolved commit id used as the canonical
    cache key.
    """

    name: str
    updatestamp: Optional[str] = None
    head_commit: CommitDetail


class APIErrorDetail(_Payload):
    """The error body the API returns for domain-level failures, e.g. ``{"detail": "Not found."}``."""

    detail: str


class BranchDetailSuccess(BaseModel):
    kind: Literal["success"] = "success"
    detail: BranchDetail

    @property
    def is_success(self) -> bool:
        return True


class BranchDetailError(BaseModel):
    kind: Literal["error"] = "error"
    error: APIErrorDetail

    @property
    def is_success(self) -> bool:
        return False


BranchDetailAPIResponse = Annotated[
    Union[BranchDetailSuccess, BranchDetailError],
    Field(discriminator="kind"),
]
"""Result of :meth:`~codecov_cache.client.CodecovClient.get_branch_detail`."""


# --- Configuration ---


class RequestConfig(BaseModel):
    """HTTP request settings applied to every API call."""

    timeout: int = Field(default=30, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")
    max_retries: int = Field(default=3, description="Max retry attempts")


DEFAULT_BASE_URL = "https://codecov.io/api/v2"
DEFAULT_LEAF_FILENAME = "data.json"


class ClientConfig(BaseModel):
    """Everything the remote client and the cache need, resolved once at startup.

    Built by :func:`~codecov_cache.config.resolve_config` and passed by
    reference to both :class:`~codecov_cache.client.CodecovClient` and
    :class:`~codecov_cache.cache.KeyPathCache`; neither reads the process
    environment itself.
    """

    token: str = Field(repr=False)
    cache_dir: Path
    base_url: str = DEFAULT_BASE_URL
    leaf_filename: str = DEFAULT_LEAF_FILENAME
    request: RequestConfig = Field(default_factory=RequestConfig)
