"""Cache commands -- inspect the key-path cache without touching the API.

Keys are given as separate arguments, most general first::

    codecov-cache cache has github kitsuyui rust-codecov main 1a2b3c
    codecov-cache cache show github kitsuyui rust-codecov main 1a2b3c
    codecov-cache cache remove github kitsuyui rust-codecov main 1a2b3c
"""

from __future__ import annotations

import typer

from codecov_cache.cache import KeyPathCache
from codecov_cache.exceptions import CacheError
from codecov_cache.output import error, info, print_data, success


cache_app = typer.Typer(no_args_is_help=True)

_KEYS_HELP = "Key segments, most general first (service username repo branch commit)."


def _cache(ctx: typer.Context) -> KeyPathCache:
    from codecov_cache.config import resolve_cache_dir

    obj = ctx.obj or {}
    return KeyPathCache(resolve_cache_dir(obj.get("cache_dir")))


@cache_app.command("path")
def cache_path(ctx: typer.Context) -> None:
    """Print the cache root directory."""
    print_data(str(_cache(ctx).cache_dir))


@cache_app.command("has")
def cache_has(
    ctx: typer.Context,
    keys: list[str] = typer.Argument(help=_KEYS_HELP),
) -> None:
    """Exit 0 if an entry exists under KEYS, 1 otherwise."""
    present = _cache(ctx).has(keys)
    print_data("yes" if present else "no")
    if not present:
        raise typer.Exit(code=1)


@cache_app.command("show")
def cache_show(
    ctx: typer.Context,
    keys: list[str] = typer.Argument(help=_KEYS_HELP),
) -> None:
    """Print the raw payload stored under KEYS."""
    cache = _cache(ctx)
    try:
        data = cache.load(keys)
    except CacheError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from exc
    info(f"Entry: {cache.path_for(keys)}")
    print_data(data.decode("utf-8", errors="replace"))


@cache_app.command("remove")
def cache_remove(
    ctx: typer.Context,
    keys: list[str] = typer.Argument(help=_KEYS_HELP),
) -> None:
    """Delete the entry stored under KEYS."""
    try:
        _cache(ctx).remove(keys)
    except CacheError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from exc
    success(f"Removed {'/'.join(keys)}")
