"""Channel capability descriptors and the merged channel dock table.

The main entry points are:

- :func:`list_channel_docks` / :func:`get_channel_dock` -- the merged,
  deterministically ordered capability table for the active registry.
- :func:`normalize_any_channel_id` -- resolve a raw channel name or alias.
- :class:`ChannelDockTable` -- the merger itself, with injectable static
  tables.
"""

from keydock.channels.dock import (
    ChannelDockTable,
    build_dock_from_plugin,
    get_channel_dock,
    list_channel_docks,
)
from keydock.channels.registry import (
    format_channel_primer_line,
    format_channel_selection_line,
    get_chat_channel_meta,
    list_chat_channel_aliases,
    list_chat_channels,
    normalize_any_channel_id,
    normalize_chat_channel_id,
)
from keydock.channels.types import ChannelCapabilities, ChannelDock, ChannelMeta, ChannelPlugin

__all__ = [
    "ChannelCapabilities",
    "ChannelDock",
    "ChannelDockTable",
    "ChannelMeta",
    "ChannelPlugin",
    "build_dock_from_plugin",
    "format_channel_primer_line",
    "format_channel_selection_line",
    "get_channel_dock",
    "get_chat_channel_meta",
    "list_channel_docks",
    "list_chat_channel_aliases",
    "list_chat_channels",
    "normalize_any_channel_id",
    "normalize_chat_channel_id",
]
