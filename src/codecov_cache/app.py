"""Typer application and CLI entry point for codecov_cache.

Registers the API commands (``repos``, ``commits``, ``branches``,
``branch``) and the ``cache`` inspection group on the root application.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs a SIGINT handler and maps
:class:`~codecov_cache.exceptions.CodecovCacheError` to its exit code.
"""

from __future__ import annotations

import signal
import sys
from typing import Any, Optional

import typer

from codecov_cache import __version__
from codecov_cache.commands.api import branch_command, branches_command, commits_command, repos_command
from codecov_cache.commands.cache import cache_app
from codecov_cache.exit_codes import EXIT_GENERIC_FAILURE, EXIT_INTERRUPTED


app = typer.Typer(
    name="codecov-cache",
    help="Query the Codecov API, caching branch details per commit on disk.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("repos")(repos_command)
app.command("commits")(commits_command)
app.command("branches")(branches_command)
app.command("branch")(branch_command)
app.add_typer(cache_app, name="cache", help="Inspect the on-disk cache.")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"codecov-cache {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    token: Optional[str] = typer.Option(
        None, "--token", help="Codecov API token (default: $CODECOV_OWNER_TOKEN)."
    ),
    cache_dir: Optional[str] = typer.Option(
        None, "--cache-dir", help="Cache root (default: $CODECOV_CACHE_DIR or the user cache dir)."
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-essential output."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
) -> None:
    """Install the output manager and stash shared options in ``ctx.obj``."""
    from codecov_cache.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))

    ctx.ensure_object(dict)
    ctx.obj["token"] = token
    ctx.obj["cache_dir"] = cache_dir


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_INTERRUPTED)

    signal.signal(signal.SIGINT, _handler)


def main() -> None:
    """CLI entry point invoked by the ``codecov-cache`` console script.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_INTERRUPTED)
    except Exception as exc:
        from codecov_cache.exceptions import CodecovCacheError
        from codecov_cache.output import error

        if isinstance(exc, CodecovCacheError):
            error(str(exc))
            sys.exit(exc.exit_code)
        error(f"Unexpected error: {exc}")
        sys.exit(EXIT_GENERIC_FAILURE)
