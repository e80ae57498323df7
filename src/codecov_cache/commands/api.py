"""API commands -- query repositories, commits, and branches.

Every command resolves a :class:`~codecov_cache.models.ClientConfig` once,
opens a :class:`~codecov_cache.client.CachedCodecovClient` and prints the
result through the output system. ``branch --commit`` goes through the
cache; every other command always hits the API.
"""

from __future__ import annotations

from typing import Optional

import typer

from codecov_cache.exceptions import CodecovCacheError
from codecov_cache.exit_codes import EXIT_NOT_FOUND
from codecov_cache.models import BranchDetailSuccess, Owner
from codecov_cache.output import error, format_response, print_table


def _open_client(ctx: typer.Context):
    from codecov_cache.client import CachedCodecovClient
    from codecov_cache.config import resolve_config

    obj = ctx.obj or {}
    config = resolve_config(token=obj.get("token"), cache_dir=obj.get("cache_dir"))
    return CachedCodecovClient(config)


def _fail(exc: CodecovCacheError) -> typer.Exit:
    error(str(exc))
    return typer.Exit(code=exc.exit_code)


def _first_line(text: Optional[str]) -> str:
    return text.splitlines()[0] if text and text.strip() else ""


def repos_command(
    ctx: typer.Context,
    service: str = typer.Argument(help="Git hosting service, e.g. 'github'."),
    username: str = typer.Argument(help="Owner user or organisation name."),
) -> None:
    """List every repository of an owner (all pages).

    Example::

        codecov-cache repos github kitsuyui
    """
    owner = Owner(service=service, username=username)
    try:
        with _open_client(ctx) as client:
            repos = client.get_all_repos(owner)
    except CodecovCacheError as exc:
        raise _fail(exc) from exc

    rows = [
        [repo.name, repo.language or "", repo.branch or "", str(bool(repo.private)).lower()]
        for repo in repos
    ]
    print_table(["name", "language", "branch", "private"], rows, title=f"{service}/{username}")


def commits_command(
    ctx: typer.Context,
    service: str = typer.Argument(help="Git hosting service, e.g. 'github'."),
    username: str = typer.Argument(help="Owner user or organisation name."),
    repo: str = typer.Argument(help="Repository name."),
) -> None:
    """List the most recent commits of a repository."""
    author = Owner(service=service, username=username).new_author(repo)
    try:
        with _open_client(ctx) as client:
            response = client.get_commits(author)
    except CodecovCacheError as exc:
        raise _fail(exc) from exc

    rows = [
        [c.commitid, c.branch or "", c.timestamp or "", _first_line(c.message)]
        for c in response.results
    ]
    print_table(["commitid", "branch", "timestamp", "message"], rows)


def branches_command(
    ctx: typer.Context,
    service: str = typer.Argument(help="Git hosting service, e.g. 'github'."),
    username: str = typer.Argument(help="Owner user or organisation name."),
    repo: str = typer.Argument(help="Repository name."),
) -> None:
    """List the branches of a repository."""
    author = Owner(service=service, username=username).new_author(repo)
    try:
        with _open_client(ctx) as client:
            response = client.get_branches(author)
    except CodecovCacheError as exc:
        raise _fail(exc) from exc

    print_table(
        ["name", "updatestamp"],
        [[b.name, b.updatestamp or ""] for b in response.results],
    )


def branch_command(
    ctx: typer.Context,
    service: str = typer.Argument(help="Git hosting service, e.g. 'github'."),
    username: str = typer.Argument(help="Owner user or organisation name."),
    repo: str = typer.Argument(help="Repository name."),
    branch: str = typer.Argument(help="Branch name."),
    commit: Optional[str] = typer.Option(
        None, "--commit", "-c", help="Known head commit id; enables the cache."
    ),
) -> None:
    """Show the detail of a branch, including its head commit.

    With ``--commit`` the detail is served from the cache when an entry for
    that commit exists, and stored there after a live fetch.

    Example::

        codecov-cache branch github kitsuyui rust-codecov main --commit 1a2b3c
    """
    author = Owner(service=service, username=username).new_author(repo)
    try:
        with _open_client(ctx) as client:
            result = client.get_branch_detail(author, branch, commit_id=commit)
    except CodecovCacheError as exc:
        raise _fail(exc) from exc

    if not isinstance(result, BranchDetailSuccess):
        error(f"Branch '{branch}' not available: {result.error.detail}")
        raise typer.Exit(code=EXIT_NOT_FOUND)
    format_response(result.detail.model_dump(mode="json"))
