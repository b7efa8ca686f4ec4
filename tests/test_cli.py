"""End-to-end tests for the keydock CLI."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from keydock import __version__
from keydock.app import app
from keydock.auth.profile_store import (
    AuthProfileStore,
    TokenCredential,
    load_auth_profile_store,
    save_auth_profile_store,
)
from keydock.models import GatewayConfig


def _invoke(runner, *args: str, env: dict[str, str] | None = None):  # noqa: ANN001, ANN202
    return runner.invoke(app, ["--no-color", *args], env=env)


@pytest.fixture
def stored(agent_dir: Path, sample_store: AuthProfileStore) -> Path:
    """Write the sample store to the default agent directory."""
    return save_auth_profile_store(sample_store, agent_dir)


@pytest.fixture
def config_file(isolated_config: Path, sample_config: GatewayConfig) -> Path:
    path = isolated_config / "gateway.json"
    path.write_text(sample_config.model_dump_json(), encoding="utf-8")
    return path


def test_version(cli_runner) -> None:
    result = cli_runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


class TestAuthResolve:
    def test_profile_secret_is_masked(self, cli_runner, stored: Path) -> None:
        result = _invoke(cli_runner, "auth", "resolve", "anthropic")
        assert result.exit_code == 0, result.output
        assert "profile:anthropic:" in result.output
        assert "sk-ant-token-0001" not in result.output
        assert "sk-ant-api-0002" not in result.output

    def test_config_source_json(self, cli_runner, config_file: Path) -> None:
        result = _invoke(
            cli_runner, "--json", "--config", str(config_file), "auth", "resolve", "openrouter"
        )
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["source"] == "config: models.providers.openrouter"
        assert data["mode"] == "api-key"
        assert data["api_key"] == "sk-o…0005"

    def test_env_source_reveal(self, cli_runner, isolated_config: Path) -> None:
        result = _invoke(
            cli_runner,
            "--json",
            "auth",
            "resolve",
            "openai",
            "--reveal",
            env={"OPENAI_API_KEY": "sk-env-openai-0006"},
        )
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["source"] == "env: OPENAI_API_KEY"
        assert data["api_key"] == "sk-env-openai-0006"

    def test_explicit_profile_never_falls_back(self, cli_runner, stored: Path) -> None:
        result = _invoke(
            cli_runner,
            "auth",
            "resolve",
            "openai",
            "--profile",
            "openai:missing",
            env={"OPENAI_API_KEY": "sk-env-openai-0006"},
        )
        assert result.exit_code == 3
        assert 'No credentials found for profile "openai:missing"' in result.output
        assert "sk-env-openai-0006" not in result.output

    def test_no_credential(self, cli_runner, isolated_config: Path) -> None:
        result = _invoke(cli_runner, "auth", "resolve", "groq")
        assert result.exit_code == 3
        assert 'No API key found for provider "groq"' in result.output
        assert "keydock auth set-token" in result.output

    def test_sibling_guidance(self, cli_runner, stored: Path) -> None:
        result = _invoke(cli_runner, "auth", "resolve", "openai")
        assert result.exit_code == 3
        assert "openai-codex" in result.output
        assert "codex-access-0003" not in result.output

    def test_invalid_store_is_config_error(self, cli_runner, agent_dir: Path) -> None:
        agent_dir.mkdir(parents=True)
        (agent_dir / "auth-profiles.json").write_text("{not json")
        result = _invoke(cli_runner, "auth", "resolve", "openai")
        assert result.exit_code == 1
        assert "Invalid auth profile store" in result.output


class TestAuthInspect:
    def test_mode(self, cli_runner, stored: Path) -> None:
        result = _invoke(cli_runner, "--json", "auth", "mode", "anthropic")
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout) == {"provider": "anthropic", "mode": "mixed"}

    def test_mode_blank_provider(self, cli_runner, isolated_config: Path) -> None:
        result = _invoke(cli_runner, "auth", "mode", "  ")
        assert result.exit_code == 2

    def test_order(self, cli_runner, stored: Path, config_file: Path) -> None:
        result = _invoke(
            cli_runner,
            "--json",
            "--config",
            str(config_file),
            "auth",
            "order",
            "anthropic",
            "--prefer",
            "anthropic:work",
        )
        assert result.exit_code == 0, result.output
        rows = json.loads(result.stdout)
        assert [row["Profile"] for row in rows] == ["anthropic:work", "anthropic:default"]
        assert [row["Type"] for row in rows] == ["api_key", "token"]

    def test_order_empty(self, cli_runner, isolated_config: Path) -> None:
        result = _invoke(cli_runner, "auth", "order", "groq")
        assert result.exit_code == 0
        assert 'No candidate profiles for provider "groq"' in result.output

    def test_list_filters_by_normalized_provider(self, cli_runner, stored: Path) -> None:
        result = _invoke(cli_runner, "--json", "auth", "list", "--provider", "z-ai")
        assert result.exit_code == 0, result.output
        rows = json.loads(result.stdout)
        assert [row["Profile"] for row in rows] == ["zai:default"]
        assert "zai-key-0004" not in result.output


class TestAuthEdit:
    def test_set_token_from_env(self, cli_runner, agent_dir: Path) -> None:
        result = _invoke(
            cli_runner,
            "auth",
            "set-token",
            "Z.AI",
            "--name",
            "Work Laptop",
            "--token-env",
            "MY_TOKEN",
            env={"MY_TOKEN": "  tok-zai-0007\n"},
        )
        assert result.exit_code == 0, result.output
        assert "tok-zai-0007" not in result.output

        store = load_auth_profile_store(agent_dir / "auth-profiles.json")
        credential = store.get("zai:work-laptop")
        assert isinstance(credential, TokenCredential)
        assert credential.provider == "zai"
        assert credential.token == "tok-zai-0007"

    def test_set_token_missing_env(self, cli_runner, isolated_config: Path) -> None:
        result = _invoke(cli_runner, "auth", "set-token", "openai", "--token-env", "UNSET_VAR")
        assert result.exit_code == 2
        assert "UNSET_VAR" in result.output

    def test_set_token_prompt(self, cli_runner, agent_dir: Path) -> None:
        result = cli_runner.invoke(
            app, ["--no-color", "auth", "set-token", "openai"], input="tok-prompt-0008\n"
        )
        assert result.exit_code == 0, result.output
        store = load_auth_profile_store(agent_dir / "auth-profiles.json")
        assert store.get("openai:default") is not None

    def test_remove(self, cli_runner, stored: Path) -> None:
        result = _invoke(cli_runner, "auth", "remove", "anthropic:work")
        assert result.exit_code == 0, result.output
        assert load_auth_profile_store(stored).get("anthropic:work") is None

    def test_remove_missing(self, cli_runner, stored: Path) -> None:
        result = _invoke(cli_runner, "auth", "remove", "anthropic:nope")
        assert result.exit_code == 4


class TestChannels:
    def test_list(self, cli_runner, registry_file: Path) -> None:
        result = _invoke(cli_runner, "--json", "channels", "list", "-r", str(registry_file))
        assert result.exit_code == 0, result.output
        rows = json.loads(result.stdout)
        assert [row["Channel"] for row in rows] == ["mattermost", "irc", "zulip"]
        assert rows[0]["Label"] == "Mattermost"
        assert rows[0]["Aliases"] == "mm"
        assert "threads" in rows[0]["Capabilities"]

    def test_show(self, cli_runner, registry_file: Path) -> None:
        result = _invoke(
            cli_runner, "--json", "channels", "show", "mattermost", "-r", str(registry_file)
        )
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["order"] == 10
        assert "chat:channel" in data["capabilities"]

    def test_show_unknown(self, cli_runner, registry_file: Path) -> None:
        result = _invoke(cli_runner, "channels", "show", "slack", "-r", str(registry_file))
        assert result.exit_code == 4

    def test_resolve_alias(self, cli_runner, registry_file: Path) -> None:
        result = _invoke(cli_runner, "--json", "channels", "resolve", " MM ", "-r", str(registry_file))
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["channel"] == "mattermost"

    def test_resolve_unknown(self, cli_runner, registry_file: Path) -> None:
        result = _invoke(cli_runner, "channels", "resolve", "slack", "-r", str(registry_file))
        assert result.exit_code == 4
        assert 'No channel matches "slack"' in result.output

    def test_missing_registry_file(self, cli_runner, tmp_path: Path) -> None:
        result = _invoke(cli_runner, "channels", "list", "-r", str(tmp_path / "nope.json"))
        assert result.exit_code == 1
        assert "Registry file not found" in result.output
