"""Tests for candidate profile ordering."""

from __future__ import annotations

from keydock.auth.order import configured_profile_order, dedupe_profile_ids, resolve_auth_profile_order
from keydock.auth.profile_store import AuthProfileStore
from keydock.models import GatewayConfig


def test_dedupe_keeps_first_position() -> None:
    assert dedupe_profile_ids(["b", "a", "b", "c", "a"]) == ["b", "a", "c"]


class TestResolveAuthProfileOrder:
    def test_explicit_profile_is_whole_order(self, sample_store: AuthProfileStore) -> None:
        order = resolve_auth_profile_order(
            "anthropic", sample_store, explicit_profile_id="anthropic:elsewhere"
        )
        assert order == ["anthropic:elsewhere"]

    def test_store_order(self, sample_store: AuthProfileStore) -> None:
        assert resolve_auth_profile_order("anthropic", sample_store) == [
            "anthropic:default",
            "anthropic:work",
        ]

    def test_preferred_first(self, sample_store: AuthProfileStore) -> None:
        order = resolve_auth_profile_order(
            "anthropic", sample_store, preferred_profile="anthropic:work"
        )
        assert order == ["anthropic:work", "anthropic:default"]

    def test_preferred_for_other_provider_ignored(self, sample_store: AuthProfileStore) -> None:
        order = resolve_auth_profile_order(
            "anthropic", sample_store, preferred_profile="openai-codex:me"
        )
        assert order == ["anthropic:default", "anthropic:work"]

    def test_configured_hints_appended_and_deduped(self, sample_store: AuthProfileStore) -> None:
        config = GatewayConfig.model_validate(
            {"auth": {"order": {"Anthropic": ["anthropic:work", " anthropic:backup ", ""]}}}
        )
        order = resolve_auth_profile_order("anthropic", sample_store, config)
        assert order == ["anthropic:default", "anthropic:work", "anthropic:backup"]

    def test_pure(self, sample_store: AuthProfileStore, sample_config: GatewayConfig) -> None:
        first = resolve_auth_profile_order("anthropic", sample_store, sample_config)
        second = resolve_auth_profile_order("anthropic", sample_store, sample_config)
        assert first == second


def test_configured_order_normalizes_keys() -> None:
    config = GatewayConfig.model_validate({"auth": {"order": {"z.ai": ["zai:a"], "zai": ["zai:b"]}}})
    assert configured_profile_order(config, "z-ai") == ["zai:a", "zai:b"]
    assert configured_profile_order(None, "zai") == []
