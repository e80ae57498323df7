"""Key-path blob store backed directly by the filesystem.

Entries are addressed by an ordered key sequence. The mapping from keys to
disk is a plain join, with no hashing and no escaping::

    <cache_root>/<k1>/<k2>/.../<kn>/<leaf_filename>

so the layout is stable and can be inspected or pruned with ordinary shell
tools. Segment order matters: ``("a", "b")`` and ``("b", "a")`` are two
independent entries.

There is no in-memory layer, no eviction, no expiry and no locking. Every
call goes to the filesystem, and concurrent writers rely on ``os.replace``
being atomic: readers see either the old payload or the new one, never a
partial write. Directories are created lazily on the first :meth:`save`
and are never pruned.

Filesystem failures are translated at this boundary into the
:class:`~codecov_cache.exceptions.CacheError` family so that callers can
tell a plain miss (:class:`~codecov_cache.exceptions.CacheNotFoundError`)
from anything else (:class:`~codecov_cache.exceptions.CacheIOError`).
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Optional, Sequence

from codecov_cache.exceptions import (
    CacheIOError,
    CacheNotFoundError,
    InvalidCacheKeyError,
)
from codecov_cache.models import DEFAULT_LEAF_FILENAME

CacheKey = Sequence[str]
"""An ordered, non-empty sequence of filesystem-safe string segments."""

_FORBIDDEN_SEGMENTS = frozenset({".", ".."})


def _separators() -> tuple[str, ...]:
    seps = {"/", os.sep, "\x00"}
    if os.altsep:
        seps.add(os.altsep)
    return tuple(seps)


class KeyPathCache:
    """Durable, hierarchical, key-addressed byte-blob store.

    The instance holds only its root path and leaf filename, so it is cheap
    to construct and safe to share or rebuild at will.

    Args:
        cache_dir: Root directory of the cache. It does not need to exist;
            it is created on the first :meth:`save`.
        filename: Name of the leaf file written inside the innermost key
            directory.

    Example::

        cache = KeyPathCache("/tmp/codecov-cache")
        cache.save(["github", "octocat", "hello", "main", "c1"], b"{}")
        assert cache.load(["github", "octocat", "hello", "main", "c1"]) == b"{}"
    """

    def __init__(self, cache_dir: str | Path, filename: str = DEFAULT_LEAF_FILENAME) -> None:
        if not filename or any(sep in filename for sep in _separators()):
            raise InvalidCacheKeyError(f"Invalid leaf filename: {filename!r}")
        self._cache_dir = Path(cache_dir)
        self._filename = filename

    @property
    def cache_dir(self) -> Path:
        return self._cache_dir

    @property
    def filename(self) -> str:
        return self._filename

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    def path_for(self, keys: CacheKey) -> Path:
        """Return the leaf file path for *keys*.

        Raises:
            InvalidCacheKeyError: If *keys* is empty or has an unsafe segment.
        """
        return self._dir_for(self._validate(keys)) / self._filename

    def save(self, keys: CacheKey, data: bytes) -> None:
        """Store *data* under *keys*, replacing any existing entry.

        Intermediate directories are created as needed. The payload is
        written to a temporary file next to the leaf and renamed over it,
        so concurrent readers never observe a partial write.

        Raises:
            InvalidCacheKeyError: If *keys* is empty or has an unsafe segment.
            CacheIOError: If a directory cannot be created or the write fails.
        """
        key = self._validate(keys)
        directory = self._dir_for(key)
        path = directory / self._filename

        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise CacheIOError(f"Cannot create cache directory {directory}: {exc}", key) from exc

        tmp_path: Optional[str] = None
        try:
            with tempfile.NamedTemporaryFile(
                mode="wb",
                dir=directory,
                prefix=f".{self._filename}.",
                suffix=".tmp",
                delete=False,
            ) as fh:
                tmp_path = fh.name
                fh.write(data)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_path, path)
            tmp_path = None
        except OSError as exc:
            raise CacheIOError(f"Cannot write cache entry {path}: {exc}", key) from exc
        finally:
            if tmp_path is not None:
                try:
                    os.unlink(tmp_path)
                except OSError:
                    pass

    def load(self, keys: CacheKey) -> bytes:
        """Return the full payload stored under *keys*.

        Raises:
            InvalidCacheKeyError: If *keys* is empty or has an unsafe segment.
            CacheNotFoundError: If no entry exists at *keys*.
            CacheIOError: For any other read failure.
        """
        key = self._validate(keys)
        path = self._dir_for(key) / self._filename
        try:
            return path.read_bytes()
        except (FileNotFoundError, NotADirectoryError) as exc:
            raise CacheNotFoundError(f"No cache entry at {path}", key) from exc
        except OSError as exc:
            raise CacheIOError(f"Cannot read cache entry {path}: {exc}", key) from exc

    def remove(self, keys: CacheKey) -> None:
        """Delete the entry stored under *keys*. Parent directories are left in place.

        Raises:
            InvalidCacheKeyError: If *keys* is empty or has an unsafe segment.
            CacheNotFoundError: If no entry exists at *keys*.
            CacheIOError: For any other filesystem failure.
        """
        key = self._validate(keys)
        path = self._dir_for(key) / self._filename
        try:
            path.unlink()
        except (FileNotFoundError, NotADirectoryError) as exc:
            raise CacheNotFoundError(f"No cache entry at {path}", key) from exc
        except OSError as exc:
            raise CacheIOError(f"Cannot remove cache entry {path}: {exc}", key) from exc

    def has(self, keys: CacheKey) -> bool:
        """Return whether an entry exists under *keys*. Never raises.

        The answer can be stale by the time the caller acts on it; a
        following :meth:`load` is authoritative.
        """
        try:
            return self.path_for(keys).is_file()
        except (InvalidCacheKeyError, OSError):
            return False

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _dir_for(self, key: tuple[str, ...]) -> Path:
        """Join an already validated *key* onto the cache root."""
        path = self._cache_dir
        for segment in key:
            path = path / segment
        return path

    @staticmethod
    def _validate(keys: CacheKey) -> tuple[str, ...]:
        """Return *keys* as a tuple, rejecting empty keys and unsafe segments."""
        if isinstance(keys, (str, bytes)):
            raise InvalidCacheKeyError(
                f"Cache key must be a sequence of segments, not {type(keys).__name__}"
            )
        key = tuple(keys)
        if not key:
            raise InvalidCacheKeyError("Cache key must have at least one segment")
        separators = _separators()
        for segment in key:
            if not isinstance(segment, str) or not segment:
                raise InvalidCacheKeyError(f"Invalid cache key segment {segment!r}", key)
            if segment in _FORBIDDEN_SEGMENTS or any(sep in segment for sep in separators):
                raise InvalidCacheKeyError(f"Invalid cache key segment {segment!r}", key)
        return key
