"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~codecov_cache.exceptions.CodecovCacheError` subclass.

Example::

    $ codecov-cache branch github kitsuyui rust-codecov main
    $ echo $?
    3   # EXIT_AUTH_FAILURE -- the token was rejected
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_AUTH_FAILURE = 3
"""The Codecov API rejected the token."""

EXIT_NOT_FOUND = 4
"""The requested resource or cache entry was not found."""

EXIT_SERVER_ERROR = 5
"""The Codecov API returned a server error or an unusable response."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_INTERRUPTED = 130
"""The user pressed Ctrl-C."""
