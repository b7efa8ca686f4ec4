"""Channel plugin descriptors: metadata, capabilities and the plugin record.

These are the shapes a channel plugin hands to the registry. keydock never
imports plugin code; it only reads these descriptors.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

ChatType = Literal["direct", "group", "channel", "thread"]


class ChannelCapabilities(BaseModel):
    """What a channel can do. Unknown capability flags are preserved."""

    model_config = ConfigDict(extra="allow", frozen=True)

    chat_types: list[ChatType] = Field(default_factory=lambda: ["direct"])
    polls: bool = False
    reactions: bool = False
    edit: bool = False
    threads: bool = False
    media: bool = False
    native_commands: bool = False
    block_streaming: bool = False


class ChannelMeta(BaseModel):
    """Display and ordering metadata for a channel.

    Attributes:
        id: Channel id, e.g. ``"mattermost"``.
        label: Human-readable name.
        blurb: One-line description used in selection prompts.
        docs_path: Documentation path, e.g. ``"/channels/mattermost"``.
        order: Explicit sort position. Channels without one sort after
            every ordered channel.
        aliases: Alternate spellings accepted by
            :func:`~keydock.channels.registry.normalize_any_channel_id`.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    id: str
    label: str = ""
    blurb: str = ""
    docs_path: str = ""
    order: Optional[int] = None
    aliases: list[str] = Field(default_factory=list)
    docs_label: Optional[str] = None
    selection_docs_prefix: Optional[str] = None
    selection_docs_omit_label: bool = False
    selection_extras: list[str] = Field(default_factory=list)


@dataclass
class ChannelPlugin:
    """A registered channel plugin.

    ``adapters`` holds the plugin's optional behaviour hooks keyed by name
    (``commands``, ``threading``, ``mentions``, ...). Their shape is owned by
    the plugin; the dock only passes them through.
    """

    id: str
    meta: ChannelMeta
    capabilities: ChannelCapabilities = field(default_factory=ChannelCapabilities)
    adapters: dict[str, Any] = field(default_factory=dict)


DOCK_ADAPTER_KEYS: tuple[str, ...] = (
    "commands",
    "outbound",
    "streaming",
    "elevated",
    "config",
    "groups",
    "mentions",
    "threading",
    "agent_prompt",
)
"""Adapters light enough for shared code paths; everything else stays on the plugin."""


@dataclass
class ChannelDock:
    """The lightweight capability entry shared code consults for a channel."""

    id: str
    capabilities: ChannelCapabilities = field(default_factory=ChannelCapabilities)
    adapters: dict[str, Any] = field(default_factory=dict)
