"""Exception hierarchy for codecov_cache.

All exceptions inherit from :class:`CodecovCacheError`, which carries an
``exit_code`` attribute mapped to a constant from
:mod:`codecov_cache.exit_codes`. Each component raises only its own family,
and translation between families happens at the component boundary:

* the key-path cache maps :class:`OSError` to the :class:`CacheError` family;
* the remote client maps HTTP status codes and :mod:`httpx` transport errors
  to the :class:`RemoteError` family;
* the caching facade absorbs :class:`CacheError` and
  :class:`DeserializationError` and lets only :class:`RemoteError` reach the
  caller.

Subclass hierarchy::

    CodecovCacheError (exit 1)
    +-- ConfigError              (exit 1)
    +-- CacheError               (exit 1)
    |   +-- CacheNotFoundError   (exit 4)
    |   +-- CacheIOError         (exit 1)
    |   +-- InvalidCacheKeyError (exit 2)
    +-- DeserializationError     (exit 1)
    +-- RemoteError              (exit 5)
        +-- AuthError            (exit 3)
        +-- NotFoundError        (exit 4)
        +-- ServerError          (exit 5)
        +-- ConnectionError_     (exit 6)
        +-- ResponseParseError   (exit 5)
"""

from codecov_cache.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_SERVER_ERROR,
)


class CodecovCacheError(Exception):
    """Base exception for all codecov_cache errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigError(CodecovCacheError):
    """Raised for configuration problems (missing token, unusable cache directory)."""

    exit_code = EXIT_GENERIC_FAILURE


# --- Cache family ---


class CacheError(CodecovCacheError):
    """Base class for failures of the key-path cache.

    Args:
        message: Human-readable error description.
        keys: The key sequence the failed operation was addressing.
    """

    def __init__(self, message: str, keys: tuple[str, ...] = ()):
        super().__init__(message)
        self.keys = keys


class CacheNotFoundError(CacheError):
    """Raised when no entry exists at the requested key."""

    exit_code = EXIT_NOT_FOUND


class CacheIOError(CacheError):
    """Raised for any other filesystem failure (permissions, disk full, races)."""


class InvalidCacheKeyError(CacheError):
    """Raised when a key sequence is empty or a segment is not filesystem-safe."""

    exit_code = EXIT_INVALID_USAGE


class DeserializationError(CodecovCacheError):
    """Raised when cached bytes cannot be decoded into the expected model."""


# --- Remote family ---


class RemoteError(CodecovCacheError):
    """Base class for failures of the remote Codecov API call."""

    exit_code = EXIT_SERVER_ERROR


class AuthError(RemoteError):
    """Raised when the API returns HTTP 401 or 403."""

    exit_code = EXIT_AUTH_FAILURE


class NotFoundError(RemoteError):
    """Raised when a list endpoint returns HTTP 404."""

    exit_code = EXIT_NOT_FOUND


class ServerError(RemoteError):
    """Raised for HTTP 5xx responses and unexpected 4xx responses."""

    exit_code = EXIT_SERVER_ERROR


class ConnectionError_(RemoteError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused).

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """

    exit_code = EXIT_CONNECTION_ERROR


class ResponseParseError(RemoteError):
    """Raised when a successful response body does not match the expected model."""
