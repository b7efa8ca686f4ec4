"""Shared test fixtures for keydock.

Provides reusable fixtures for isolated config environments, auth profile
stores, registry snapshots, output state, and running CLI commands. These
fixtures are automatically discovered by pytest and available to all test
modules without explicit imports.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from keydock.auth.profile_store import (
    ApiKeyCredential,
    AuthProfileStore,
    OAuthCredential,
    TokenCredential,
)
from keydock.models import GatewayConfig
from keydock.output import OutputFormat, OutputManager, reset_output, set_output
from keydock.providers import PROVIDER_ENV_VARS


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time.  When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale
    ("I/O operation on closed file").  Resetting forces a fresh manager
    to be created on next use.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME and XDG_DATA_HOME to subdirectories of tmp_path
    so that tests never touch real user config, clears the KEYDOCK_*
    variables and every provider API key variable, and changes the working
    directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setattr("keydock.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

    for var in ["KEYDOCK_CONFIG", "KEYDOCK_AGENT_DIR"]:
        monkeypatch.delenv(var, raising=False)
    for names in PROVIDER_ENV_VARS.values():
        for var in names:
            monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def agent_dir(isolated_config: Path) -> Path:
    """The default agent directory inside the isolated data dir."""
    return isolated_config / "data" / "keydock" / "agent"


# ---------------------------------------------------------------------------
# Store and config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_store() -> AuthProfileStore:
    """A store with one profile of each credential type across providers."""
    return AuthProfileStore(
        profiles={
            "anthropic:default": TokenCredential(provider="anthropic", token="sk-ant-token-0001"),
            "anthropic:work": ApiKeyCredential(provider="anthropic", key="sk-ant-api-0002"),
            "openai-codex:me": OAuthCredential(
                provider="openai-codex",
                access="codex-access-0003",
                refresh="codex-refresh-0003",
                account_id="acct_42",
            ),
            "zai:default": ApiKeyCredential(provider="z.ai", key="zai-key-0004"),
        }
    )


@pytest.fixture
def sample_config() -> GatewayConfig:
    return GatewayConfig.model_validate(
        {
            "models": {"providers": {"openrouter": {"api_key": "sk-or-static-0005"}}},
            "auth": {"order": {"anthropic": ["anthropic:work"]}},
        }
    )


def _write_json(path: Path, data: Any) -> Path:
    """Write *data* as JSON to *path*, creating parent dirs."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path


@pytest.fixture
def registry_file(tmp_path: Path) -> Path:
    """A registry snapshot with duplicate, ordered and unordered channels."""
    return _write_json(
        tmp_path / "registry.json",
        {
            "channels": [
                {
                    "plugin_id": "mattermost",
                    "plugin": {
                        "id": "mattermost",
                        "meta": {"label": "Mattermost", "order": 10, "aliases": ["mm"]},
                        "capabilities": {"chat_types": ["direct", "channel"], "threads": True},
                    },
                },
                {
                    "plugin_id": "mattermost-fork",
                    "plugin": {
                        "id": "mattermost",
                        "meta": {"label": "Mattermost Fork", "order": 1},
                    },
                },
                {"plugin_id": "zulip", "plugin": {"id": "zulip", "meta": {"label": "Zulip"}}},
                {"plugin_id": "irc", "plugin": {"id": "irc", "meta": {"label": "IRC"}}},
            ]
        },
    )


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def json_output() -> OutputManager:
    """Install a JSON-format OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.JSON)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner.

    Returns a CliRunner instance that captures stdout/stderr and
    provides a consistent interface for invoking Typer apps in tests.
    """
    from typer.testing import CliRunner

    return CliRunner()
