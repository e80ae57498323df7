"""Built-in CLI sub-commands for codecov_cache.

* :mod:`~codecov_cache.commands.api` -- query the Codecov API
  (``repos``, ``commits``, ``branches``, ``branch``).
* :mod:`~codecov_cache.commands.cache` -- inspect and prune the key-path
  cache (``cache path``, ``cache has``, ``cache show``, ``cache remove``).

API commands are plain callbacks registered on the root app; the cache
commands form a :class:`typer.Typer` sub-application.
"""
