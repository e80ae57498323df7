"""Shared test fixtures for codecov_cache.

Provides isolated environment variables, a ready-made client configuration
pointing at ``tmp_path``, canned API payloads, and a quiet output manager.
These fixtures are automatically discovered by pytest.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from codecov_cache.models import ClientConfig, Owner, RequestConfig
from codecov_cache.output import OutputFormat, OutputManager, reset_output, set_output


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time; CliRunner swaps those streams, so a stale manager would
    write to a closed file in the next test.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Environment isolation
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Clear every CODECOV_* variable and point XDG_CACHE_HOME into tmp_path."""
    for var in ["CODECOV_OWNER_TOKEN", "CODECOV_CACHE_DIR", "CODECOV_API_URL"]:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "xdg-cache"))
    return tmp_path


# ---------------------------------------------------------------------------
# Configuration and identities
# ---------------------------------------------------------------------------


@pytest.fixture
def cache_root(tmp_path: Path) -> Path:
    """Cache root that does not exist yet."""
    return tmp_path / "cache-root"


@pytest.fixture
def client_config(cache_root: Path) -> ClientConfig:
    """A config with no retries so that failure tests never sleep."""
    return ClientConfig(
        token="test-token",
        cache_dir=cache_root,
        base_url="https://codecov.test/api/v2",
        request=RequestConfig(timeout=5, max_retries=0),
    )


@pytest.fixture
def author():
    return Owner(service="github", username="octocat").new_author("hello-world")


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a quiet, plain output manager for the duration of a test."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True, no_color=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# Canned API payloads
# ---------------------------------------------------------------------------


def branch_detail_payload(commitid: str = "c2", name: str = "main") -> dict[str, Any]:
    """Body of a successful ``/branches/{name}`` response."""
    return {
        "name": name,
        "updatestamp": "2024-01-02T03:04:05Z",
        "head_commit": {
            "commitid": commitid,
            "message": "Fix flaky test",
            "timestamp": "2024-01-02T03:00:00Z",
            "ci_passed": True,
            "author": {"service": "github", "username": "octocat"},
            "branch": name,
            "totals": {"coverage": 87.5, "files": 12},
            "state": "complete",
            "parent": "c1",
            "report": {"files": []},
        },
    }


@pytest.fixture
def detail_payload() -> dict[str, Any]:
    return branch_detail_payload()


@pytest.fixture
def make_detail_payload():
    """Factory fixture: ``make_detail_payload(commitid, name)``."""
    return branch_detail_payload
