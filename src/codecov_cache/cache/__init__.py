"""Hierarchical on-disk blob storage for codecov_cache.

This package provides :class:`KeyPathCache`, a byte-blob store addressed by
an ordered sequence of string keys. Each key segment becomes one directory
level under the cache root, so the entry for ``("github", "kitsuyui",
"rust-codecov", "main", "abc123")`` lives at::

    <cache_root>/github/kitsuyui/rust-codecov/main/abc123/data.json

The cache knows nothing about what it stores; encoding and decoding are the
caller's job (see :class:`~codecov_cache.client.CachedCodecovClient`).
"""

from codecov_cache.cache.cache import CacheKey, KeyPathCache

__all__ = ["CacheKey", "KeyPathCache"]
