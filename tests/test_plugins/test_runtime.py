"""Tests for the plugin registry, its JSON snapshot loader, and the runtime holder."""

from __future__ import annotations

import json
import threading
from pathlib import Path

import pytest

from keydock.channels.types import ChannelMeta, ChannelPlugin
from keydock.exceptions import ConfigError, RegistryError
from keydock.plugins.registry import PluginRegistry, load_registry_snapshot
from keydock.plugins.runtime import PluginRuntime


class TestPluginRuntime:
    def test_unset(self) -> None:
        runtime = PluginRuntime()
        assert runtime.active() is None
        with pytest.raises(RegistryError) as excinfo:
            runtime.require()
        assert excinfo.value.exit_code == 10

    def test_activate_returns_previous(self) -> None:
        first, second = PluginRegistry(), PluginRegistry()
        runtime = PluginRuntime(first)
        assert runtime.activate(second) is first
        assert runtime.require() is second
        assert runtime.activate(None) is second
        assert runtime.active() is None

    def test_readers_see_whole_registries(self) -> None:
        registries = [PluginRegistry() for _ in range(4)]
        runtime = PluginRuntime(registries[0])
        seen = []

        def reader() -> None:
            for _ in range(200):
                seen.append(runtime.require())

        threads = [threading.Thread(target=reader) for _ in range(4)]
        for thread in threads:
            thread.start()
        for registry in registries[1:]:
            runtime.activate(registry)
        for thread in threads:
            thread.join()

        assert all(any(item is registry for registry in registries) for item in seen)


class TestPluginRegistry:
    def test_register_keeps_duplicates_in_order(self) -> None:
        registry = PluginRegistry()
        plugin = ChannelPlugin(id="irc", meta=ChannelMeta(id="irc"))
        registry.register_channel(plugin)
        registry.register_channel(plugin, plugin_id="irc-fork")
        assert [r.plugin_id for r in registry.channels] == ["irc", "irc-fork"]


class TestLoadRegistrySnapshot:
    def test_loads_entries(self, registry_file: Path) -> None:
        registry = load_registry_snapshot(registry_file)
        assert [r.plugin.id for r in registry.channels] == ["mattermost", "mattermost", "zulip", "irc"]
        first = registry.channels[0]
        assert first.plugin.meta.id == "mattermost"
        assert first.plugin.meta.aliases == ["mm"]
        assert first.plugin.capabilities.chat_types == ["direct", "channel"]
        assert registry.channels[1].plugin_id == "mattermost-fork"

    def test_explicit_dock(self, tmp_path: Path) -> None:
        path = tmp_path / "registry.json"
        path.write_text(
            json.dumps(
                {
                    "channels": [
                        {
                            "plugin": {"id": "irc"},
                            "dock": {"capabilities": {"reactions": True}},
                        }
                    ]
                }
            )
        )
        registration = load_registry_snapshot(path).channels[0]
        assert registration.plugin_id == "irc"
        assert registration.dock is not None
        assert registration.dock.id == "irc"
        assert registration.dock.capabilities.reactions is True

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            load_registry_snapshot(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "registry.json"
        path.write_text("[")
        with pytest.raises(ConfigError, match="Invalid JSON"):
            load_registry_snapshot(path)

    def test_invalid_shape(self, tmp_path: Path) -> None:
        path = tmp_path / "registry.json"
        path.write_text(json.dumps({"channels": [{"plugin": {"meta": {"order": "first"}}}]}))
        with pytest.raises(ConfigError, match="Invalid registry file"):
            load_registry_snapshot(path)
