"""Cache-aside facade over :class:`~codecov_cache.client.sync_client.CodecovClient`.

:class:`CachedCodecovClient` exposes the same endpoints as the remote
client. All of them go straight to the network except
:meth:`~CachedCodecovClient.get_branch_detail_with_commit_id`, which serves
branch details from a :class:`~codecov_cache.cache.KeyPathCache`.

A branch detail is looked up under the commit the caller asked for, but it
is always stored under the head commit the API reports. A commit id never
changes meaning, so an entry stored this way stays correct forever and the
cache needs no invalidation.

Failure policy:

* reading or decoding a cache entry fails -> treated as a miss, reported
  at debug level;
* writing the fresh value back fails -> reported as a warning through
  :func:`best_effort`, the fresh value is still returned;
* the remote call fails -> the error propagates to the caller unchanged.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional

import httpx
from codecov_cache.cache import CacheKey, KeyPathCache
from codecov_cache.client.sync_client import CodecovClient
from codecov_cache.exceptions import CacheError, DeserializationError
from codecov_cache.models import (
    Author,
    BranchDetail,
    BranchDetailAPIResponse,
    BranchDetailSuccess,
    BranchesAPIResponse,
    ClientConfig,
    CommitsAPIResponse,
    Owner,
    Repo,
)
from codecov_cache.output import debug, warning


def best_effort(action: Callable[[], None], description: str) -> bool:
    """Run a cache side effect whose failure must not affect the caller.

    :class:`~codecov_cache.exceptions.CacheError` raised by *action* is
    reported as a warning and discarded. Anything else propagates.

    Args:
        action: Zero-argument callable performing the side effect.
        description: What the action does, used in the warning message.

    Returns:
        ``True`` if *action* completed, ``False`` if it failed and the
        failure was swallowed.
    """
    try:
        action()
    except CacheError as exc:
        warning(f"{description} failed: {exc}")
        return False
    return True


def encode_branch_detail(detail: BranchDetail) -> bytes:
    return detail.model_dump_json().encode("utf-8")


def decode_branch_detail(data: bytes) -> BranchDetail:
    """Decode cached bytes into a :class:`~codecov_cache.models.BranchDetail`.

    Raises:
        DeserializationError: If *data* is not valid JSON or does not match
            the model.
    """
    try:
        return BranchDetail.model_validate_json(data)
    except ValueError as exc:
        raise DeserializationError(f"Cannot decode cached branch detail: {exc}") from exc


class CachedCodecovClient:
    """Codecov client that caches branch details keyed by commit id.

    Args:
        config: Resolved configuration shared by the remote client and the
            cache.
        codecov_client: Remote client to use. Built from *config* when
            omitted.
        cache_client: Cache to use. Built from ``config.cache_dir`` and
            ``config.leaf_filename`` when omitted.
        transport: Optional :mod:`httpx` transport for the default remote
            client.

    Example::

        with CachedCodecovClient.from_env() as client:
            author = Owner(service="github", username="kitsuyui").new_author("rust-codecov")
            result = client.get_branch_detail_with_commit_id(author, "main", "abc123")
    """

    def __init__(
        self,
        config: ClientConfig,
        codecov_client: Optional[CodecovClient] = None,
        cache_client: Optional[KeyPathCache] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._config = config
        self._codecov = codecov_client or CodecovClient(config, transport=transport)
        self._cache = cache_client or KeyPathCache(config.cache_dir, config.leaf_filename)

    @classmethod
    def from_env(
        cls,
        token: Optional[str] = None,
        cache_dir: Optional[str | Path] = None,
    ) -> CachedCodecovClient:
        """Build a client from ``CODECOV_OWNER_TOKEN`` / ``CODECOV_CACHE_DIR``.

        Raises:
            ConfigError: If no token can be resolved.
        """
        from codecov_cache.config import resolve_config

        return cls(resolve_config(token=token, cache_dir=cache_dir))

    def __enter__(self) -> CachedCodecovClient:
        self._codecov.__enter__()
        return self

    def __exit__(self, *args: object) -> None:
        self._codecov.__exit__(*args)

    @property
    def cache_client(self) -> KeyPathCache:
        return self._cache

    @property
    def codecov_client(self) -> CodecovClient:
        return self._codecov

    # ------------------------------------------------------------------ #
    # Pass-through endpoints
    # ------------------------------------------------------------------ #

    def get_all_repos(self, owner: Owner) -> list[Repo]:
        return self._codecov.get_all_repos(owner)

    def get_commits(self, author: Author) -> CommitsAPIResponse:
        return self._codecov.get_commits(author)

    def get_branches(self, author: Author) -> BranchesAPIResponse:
        return self._codecov.get_branches(author)

    def get_branch_detail(
        self,
        author: Author,
        branch_name: str,
        commit_id: Optional[str] = None,
    ) -> BranchDetailAPIResponse:
        """Return the detail of *branch_name*.

        Without *commit_id* the branch tip may have moved since any earlier
        fetch, so the cache is bypassed entirely. With *commit_id* this is
        :meth:`get_branch_detail_with_commit_id`.
        """
        if commit_id is None:
            return self._codecov.get_branch_detail(author, branch_name)
        return self.get_branch_detail_with_commit_id(author, branch_name, commit_id)

    # ------------------------------------------------------------------ #
    # Cache-aside endpoint
    # ------------------------------------------------------------------ #

    def get_branch_detail_with_commit_id(
        self,
        author: Author,
        branch_name: str,
        commit_id: str,
    ) -> BranchDetailAPIResponse:
        """Return the detail of *branch_name* at *commit_id*, using the cache when possible.

        1. Look up ``(service, username, repo, branch, commit_id)``. A
           decodable entry is returned as is.
        2. Otherwise fetch the branch detail from the API.
        3. On success, store it under the head commit id from the response,
           which may differ from *commit_id*.

        An empty *commit_id* skips the lookup but still stores the result.

        Raises:
            RemoteError: If the cache misses and the API call fails.
        """
        if commit_id:
            cached = self._load_cached(author.cache_key(branch_name, commit_id))
            if cached is not None:
                return BranchDetailSuccess(detail=cached)

        retrieved = self._codecov.get_branch_detail(author, branch_name)

        if isinstance(retrieved, BranchDetailSuccess):
            detail = retrieved.detail
            canonical_key = author.cache_key(branch_name, detail.head_commit.commitid)
            data = encode_branch_detail(detail)
            best_effort(
                lambda: self._cache.save(canonical_key, data),
                f"Saving cache entry {'/'.join(canonical_key)}",
            )
        return retrieved

    def _load_cached(self, key: CacheKey) -> Optional[BranchDetail]:
        label = "/".join(key)
        try:
            data = self._cache.load(key)
        except CacheError as exc:
            debug(f"Cache miss: {label} ({exc})")
            return None
        try:
            detail = decode_branch_detail(data)
        except DeserializationError as exc:
            debug(f"Ignoring unreadable cache entry {label}: {exc}")
            return None
        debug(f"Cache hit: {label}")
        return detail
