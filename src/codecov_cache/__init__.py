"""codecov_cache -- a Codecov API client with a transparent on-disk cache.

Branch details fetched for a specific commit never change, so this package
stores them under a directory tree keyed by ``service/owner/repo/branch/commit``
and serves later queries for the same commit straight from disk.

Typical usage::

    from codecov_cache.client import CachedCodecovClient
    from codecov_cache.models import Owner

    with CachedCodecovClient.from_env() as client:
        author = Owner(service="github", username="kitsuyui").new_author("rust-codecov")
        detail = client.get_branch_detail_with_commit_id(author, "main", "abc123")

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models for API payloads and configuration.
    config: Environment-based configuration resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
    cache: Hierarchical key-path blob store.
    client: Remote API client and the caching facade.
"""

__version__ = "0.1.0"
