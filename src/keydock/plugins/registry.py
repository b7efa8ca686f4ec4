"""The plugin registry: channel registrations handed over by the plugin loader.

keydock does not discover or import plugin code. A loader elsewhere in the
gateway populates a :class:`PluginRegistry` and activates it through
:class:`~keydock.plugins.runtime.PluginRuntime`. For diagnostics the CLI
can also read a registry description from JSON with
:func:`load_registry_snapshot` (data only; no code is loaded).

Snapshot format::

    {
      "channels": [
        {
          "plugin_id": "mattermost",
          "plugin": {
            "id": "mattermost",
            "meta": {"label": "Mattermost", "order": 10, "aliases": ["mm"]},
            "capabilities": {"chat_types": ["direct", "channel"]}
          }
        }
      ]
    }
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from keydock.channels.types import ChannelCapabilities, ChannelDock, ChannelMeta, ChannelPlugin
from keydock.config import describe_validation_error
from keydock.exceptions import ConfigError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PluginChannelRegistration:
    """One channel registration, in the order the loader produced it.

    Attributes:
        plugin_id: Id of the plugin package that registered the channel.
        plugin: The channel plugin descriptor.
        dock: An explicit dock; when ``None`` one is built from *plugin*.
    """

    plugin_id: str
    plugin: ChannelPlugin
    dock: Optional[ChannelDock] = None


@dataclass
class PluginRegistry:
    """Ordered channel registrations. Duplicates are kept; consumers decide."""

    channels: list[PluginChannelRegistration] = field(default_factory=list)

    def register_channel(
        self,
        plugin: ChannelPlugin,
        *,
        plugin_id: Optional[str] = None,
        dock: Optional[ChannelDock] = None,
    ) -> PluginChannelRegistration:
        """Append a registration for *plugin* and return it."""
        registration = PluginChannelRegistration(
            plugin_id=plugin_id or plugin.id, plugin=plugin, dock=dock
        )
        self.channels.append(registration)
        logger.debug("Registered channel '%s' from plugin '%s'", plugin.id, registration.plugin_id)
        return registration


# --- Snapshot loading ---


class _PluginSnapshot(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = ""
    meta: dict[str, Any] = Field(default_factory=dict)
    capabilities: ChannelCapabilities = Field(default_factory=ChannelCapabilities)
    adapters: dict[str, Any] = Field(default_factory=dict)


class _DockSnapshot(BaseModel):
    model_config = ConfigDict(extra="ignore")

    capabilities: ChannelCapabilities = Field(default_factory=ChannelCapabilities)
    adapters: dict[str, Any] = Field(default_factory=dict)


class _RegistrationSnapshot(BaseModel):
    model_config = ConfigDict(extra="ignore")

    plugin_id: Optional[str] = None
    plugin: _PluginSnapshot
    dock: Optional[_DockSnapshot] = None


class _RegistrySnapshot(BaseModel):
    model_config = ConfigDict(extra="ignore")

    channels: list[_RegistrationSnapshot] = Field(default_factory=list)


def _to_registration(entry: _RegistrationSnapshot) -> PluginChannelRegistration:
    snapshot = entry.plugin
    meta = ChannelMeta.model_validate({"id": snapshot.id, **snapshot.meta})
    plugin = ChannelPlugin(
        id=snapshot.id,
        meta=meta,
        capabilities=snapshot.capabilities,
        adapters=dict(snapshot.adapters),
    )
    dock = None
    if entry.dock is not None:
        dock = ChannelDock(
            id=snapshot.id,
            capabilities=entry.dock.capabilities,
            adapters=dict(entry.dock.adapters),
        )
    return PluginChannelRegistration(
        plugin_id=entry.plugin_id or snapshot.id, plugin=plugin, dock=dock
    )


def load_registry_snapshot(path: Path) -> PluginRegistry:
    """Build a :class:`PluginRegistry` from a JSON description at *path*.

    Raises:
        ConfigError: If the file is missing, unreadable, not JSON, or does
            not describe a registry.
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        snapshot = _RegistrySnapshot.model_validate(data)
        channels = [_to_registration(entry) for entry in snapshot.channels]
    except FileNotFoundError:
        raise ConfigError(f"Registry file not found: {path}") from None
    except ValidationError as exc:
        raise ConfigError(
            f"Invalid registry file {path}: {describe_validation_error(exc)}"
        ) from None
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON in registry file {path}: {exc.msg}") from None
    except OSError as exc:
        raise ConfigError(f"Cannot read registry file {path}: {exc}") from exc
    logger.debug("Loaded %d channel registrations from %s", len(channels), path)
    return PluginRegistry(channels=channels)
