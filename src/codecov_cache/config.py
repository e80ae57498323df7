"""Configuration resolution with XDG-aware cache paths.

Configuration is read from the process environment exactly once, by
:func:`resolve_config`, and handed to the rest of the package as a
:class:`~codecov_cache.models.ClientConfig`. Nothing else in the package
reads environment variables.

Environment variables:

* ``CODECOV_OWNER_TOKEN`` -- API token (required).
* ``CODECOV_CACHE_DIR`` -- cache root override.
* ``CODECOV_API_URL`` -- API base URL override.

When no cache root is given, :func:`get_cache_dir` picks the platform cache
directory: XDG Base Directory compliant on Linux/BSD, ``~/.codecov-cache/``
on macOS and Windows. The directory is not created here; the cache creates
directories lazily on its first write.
"""

from __future__ import annotations

import os
import platform
from pathlib import Path
from typing import Optional

from codecov_cache.exceptions import ConfigError
from codecov_cache.models import DEFAULT_BASE_URL, ClientConfig, RequestConfig

_APP_NAME = "codecov-cache"

TOKEN_ENV_VAR = "CODECOV_OWNER_TOKEN"
CACHE_DIR_ENV_VAR = "CODECOV_CACHE_DIR"
BASE_URL_ENV_VAR = "CODECOV_API_URL"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_cache_dir() -> Path:
    """Return the default cache root.

    On Linux/BSD: ``$XDG_CACHE_HOME/codecov-cache/`` (default
    ``~/.cache/codecov-cache/``). On macOS/Windows: ``~/.codecov-cache/cache/``.

    Returns:
        Absolute path to the cache root. The directory may not exist yet.
    """
    if _is_xdg_platform():
        return _xdg_base("XDG_CACHE_HOME", (".cache",)) / _APP_NAME
    return _fallback_base_dir() / "cache"


def resolve_cache_dir(cache_dir: Optional[str | Path] = None) -> Path:
    """Resolve the cache root: explicit argument, then ``CODECOV_CACHE_DIR``, then the default.

    Args:
        cache_dir: Explicit cache root (highest precedence).

    Returns:
        The cache root with ``~`` expanded.
    """
    if cache_dir is not None:
        return Path(cache_dir).expanduser()
    env_value = os.environ.get(CACHE_DIR_ENV_VAR, "")
    if env_value:
        return Path(env_value).expanduser()
    return get_cache_dir()


def resolve_token(token: Optional[str] = None) -> str:
    """Resolve the API token from *token* or ``CODECOV_OWNER_TOKEN``.

    Raises:
        ConfigError: If no token is available.
    """
    if token:
        return token
    value = os.environ.get(TOKEN_ENV_VAR)
    if not value:
        raise ConfigError(f"Environment variable '{TOKEN_ENV_VAR}' is not set")
    return value


def resolve_config(
    token: Optional[str] = None,
    cache_dir: Optional[str | Path] = None,
    base_url: Optional[str] = None,
    request: Optional[RequestConfig] = None,
) -> ClientConfig:
    """Resolve the effective client configuration.

    Precedence (high to low):
        1. Explicit arguments
        2. Environment variables (``CODECOV_OWNER_TOKEN``,
           ``CODECOV_CACHE_DIR``, ``CODECOV_API_URL``)
        3. Defaults

    Returns:
        A fully populated :class:`~codecov_cache.models.ClientConfig`.

    Raises:
        ConfigError: If no token can be resolved.
    """
    resolved_base_url = base_url or os.environ.get(BASE_URL_ENV_VAR) or DEFAULT_BASE_URL
    return ClientConfig(
        token=resolve_token(token),
        cache_dir=resolve_cache_dir(cache_dir),
        base_url=resolved_base_url.rstrip("/"),
        request=request or RequestConfig(),
    )
