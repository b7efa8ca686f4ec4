"""Tests for the static channel registry helpers."""

from __future__ import annotations

from typing import Optional

import pytest

from keydock.channels.registry import (
    format_channel_primer_line,
    format_channel_selection_line,
    get_chat_channel_meta,
    list_chat_channel_aliases,
    list_chat_channels,
    normalize_any_channel_id,
    normalize_chat_channel_id,
)
from keydock.channels.types import ChannelMeta, ChannelPlugin
from keydock.exceptions import RegistryError
from keydock.plugins.registry import PluginRegistry
from keydock.plugins.runtime import PluginRuntime


def _link(path: str, label: Optional[str] = None) -> str:
    return f"<{label}|{path}>" if label else f"<{path}>"


def test_static_tables_empty() -> None:
    assert list_chat_channels() == []
    assert list_chat_channel_aliases() == []
    assert get_chat_channel_meta("telegram") is None


class TestNormalizeChatChannelId:
    def test_static_only(self) -> None:
        assert normalize_chat_channel_id("mattermost") is None

    def test_injected_tables(self) -> None:
        assert (
            normalize_chat_channel_id(" TG ", order=("telegram",), aliases={"tg": "telegram"})
            == "telegram"
        )
        assert normalize_chat_channel_id("", order=("telegram",)) is None


class TestNormalizeAnyChannelId:
    def test_plugin_alias(self) -> None:
        registry = PluginRegistry()
        registry.register_channel(
            ChannelPlugin(id="mattermost", meta=ChannelMeta(id="mattermost", aliases=[" MM "]))
        )
        runtime = PluginRuntime(registry)
        assert normalize_any_channel_id("mm", runtime) == "mattermost"
        assert normalize_any_channel_id("MATTERMOST", runtime) == "mattermost"
        assert normalize_any_channel_id("slack", runtime) is None

    def test_blank_needs_no_registry(self) -> None:
        assert normalize_any_channel_id("  ", PluginRuntime()) is None

    def test_requires_registry(self) -> None:
        with pytest.raises(RegistryError):
            normalize_any_channel_id("mm", PluginRuntime())


class TestFormatting:
    def test_primer_line(self) -> None:
        meta = ChannelMeta(id="mattermost", label="Mattermost", blurb="Self-hosted team chat.")
        assert format_channel_primer_line(meta) == "Mattermost: Self-hosted team chat."

    def test_selection_line_defaults(self) -> None:
        meta = ChannelMeta(
            id="mattermost", label="Mattermost", blurb="Team chat.", docs_path="/channels/mattermost"
        )
        assert format_channel_selection_line(meta, _link) == (
            "Mattermost - Team chat. Docs: <mattermost|/channels/mattermost>"
        )

    def test_selection_line_options(self) -> None:
        meta = ChannelMeta(
            id="irc",
            label="IRC",
            blurb="Classic.",
            docs_path="/channels/irc",
            selection_docs_prefix="",
            selection_docs_omit_label=True,
            selection_extras=["(beta)", "", "[plugin]"],
        )
        assert format_channel_selection_line(meta, _link) == (
            "IRC - Classic. </channels/irc> (beta) [plugin]"
        )

    def test_selection_line_docs_label(self) -> None:
        meta = ChannelMeta(id="irc", label="IRC", blurb="b", docs_path="/p", docs_label="IRC docs")
        assert format_channel_selection_line(meta, _link).endswith("Docs: <IRC docs|/p>")
