"""Codecov API clients.

Classes:
    :class:`CodecovClient` -- blocking client for the Codecov v2 API,
    backed by :class:`httpx.Client`.
    :class:`CachedCodecovClient` -- the same endpoints, with branch details
    served from a :class:`~codecov_cache.cache.KeyPathCache` when the
    caller names the commit.

Both are context managers::

    from codecov_cache.client import CachedCodecovClient

    with CachedCodecovClient(config) as client:
        client.get_branch_detail_with_commit_id(author, "main", commit_id)
"""

from codecov_cache.client.cached_client import CachedCodecovClient, best_effort
from codecov_cache.client.sync_client import CodecovClient

__all__ = ["CachedCodecovClient", "CodecovClient", "best_effort"]
