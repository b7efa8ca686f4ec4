"""Channel docks: the merged, ordered capability table for every channel.

A dock is the light view of a channel that shared code paths (routing,
mention stripping, threading defaults) consult without touching the
plugin's heavier machinery. :class:`ChannelDockTable` merges the static
docks with the docks of plugin-registered channels:

- Static docks come first, in declared order.
- Plugin registrations follow, skipping blank ids, ids already seen (the
  first registration wins) and ids the static table knows.
- Entries sort by ``meta.order``, else the static position, else after
  every ordered entry; ties break on the id (case-sensitive).

The merged list is built on first use and reused until a different
registry is activated or the active one gains registrations.
"""

from __future__ import annotations

import logging
import threading
import weakref
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Mapping, Optional, Sequence

from keydock.channels.registry import (
    CHAT_CHANNEL_ALIASES,
    CHAT_CHANNEL_META,
    CHAT_CHANNEL_ORDER,
    normalize_any_channel_id,
)
from keydock.channels.types import DOCK_ADAPTER_KEYS, ChannelDock, ChannelMeta, ChannelPlugin

if TYPE_CHECKING:
    from keydock.plugins.registry import PluginRegistry
    from keydock.plugins.runtime import PluginRuntime

logger = logging.getLogger(__name__)

DOCKS: dict[str, ChannelDock] = {}
"""Static docks keyed by channel id."""

UNORDERED = float("inf")
"""Sort position of an entry with neither an explicit order nor a static index."""


def build_dock_from_plugin(plugin: ChannelPlugin) -> ChannelDock:
    """Derive a dock from *plugin*, keeping only its light adapters."""
    adapters: dict[str, Any] = {}
    for key in DOCK_ADAPTER_KEYS:
        adapter = plugin.adapters.get(key)
        if adapter is None:
            continue
        if key == "outbound" and isinstance(adapter, Mapping):
            limit = adapter.get("text_chunk_limit")
            if not limit:
                continue
            adapter = {"text_chunk_limit": limit}
        adapters[key] = adapter
    return ChannelDock(id=plugin.id, capabilities=plugin.capabilities, adapters=adapters)


@dataclass(frozen=True)
class _DockEntry:
    id: str
    dock: ChannelDock
    order: Optional[int]


class ChannelDockTable:
    """Merged view of static and plugin-registered channel docks.

    Args:
        runtime: Holder of the active plugin registry.
        static_docks: Static docks keyed by id. Defaults to :data:`DOCKS`.
        static_order: Static channel ids in declared order.
        static_meta: Static channel metadata keyed by id.
        static_aliases: Lowercase alias to static channel id.
    """

    def __init__(
        self,
        runtime: "PluginRuntime",
        *,
        static_docks: Optional[Mapping[str, ChannelDock]] = None,
        static_order: Optional[Sequence[str]] = None,
        static_meta: Optional[Mapping[str, ChannelMeta]] = None,
        static_aliases: Optional[Mapping[str, str]] = None,
    ) -> None:
        self._runtime = runtime
        self._static_docks = DOCKS if static_docks is None else static_docks
        self._static_order = tuple(CHAT_CHANNEL_ORDER if static_order is None else static_order)
        self._static_meta = CHAT_CHANNEL_META if static_meta is None else static_meta
        self._static_aliases = CHAT_CHANNEL_ALIASES if static_aliases is None else static_aliases
        self._lock = threading.Lock()
        self._cache: Optional[tuple["PluginRegistry", int, tuple[ChannelDock, ...]]] = None

    @property
    def registry(self) -> "PluginRegistry":
        """The active plugin registry (raises ``RegistryError`` if unset)."""
        return self._runtime.require()

    def list_entries(self) -> list[ChannelDock]:
        """Return every dock in merged order.

        Raises:
            RegistryError: If no plugin registry is active.
        """
        registry = self._runtime.require()
        count = len(registry.channels)
        with self._lock:
            cached = self._cache
        if cached is not None and cached[0] is registry and cached[1] == count:
            return list(cached[2])

        docks = self._merge(registry)
        with self._lock:
            self._cache = (registry, count, docks)
        return list(docks)

    def get_entry(self, channel_id: str) -> Optional[ChannelDock]:
        """Return the dock for *channel_id*, or ``None``.

        The static table is checked first, then the first plugin
        registration with exactly that id.

        Raises:
            RegistryError: If the lookup reaches the plugin registrations and
                no registry is active.
        """
        static = self._static_docks.get(channel_id)
        if static is not None:
            return static
        for registration in self._runtime.require().channels:
            if registration.plugin.id == channel_id:
                return registration.dock or build_dock_from_plugin(registration.plugin)
        return None

    def normalize_id(self, raw: Optional[str]) -> Optional[str]:
        """Resolve a raw channel name or alias to a known channel id."""
        return normalize_any_channel_id(
            raw, self._runtime, order=self._static_order, aliases=self._static_aliases
        )

    def _static_entries(self) -> list[_DockEntry]:
        entries: list[_DockEntry] = []
        for channel_id in self._static_order:
            dock = self._static_docks.get(channel_id)
            if dock is None:
                continue
            meta = self._static_meta.get(channel_id)
            entries.append(_DockEntry(channel_id, dock, meta.order if meta else None))
        return entries

    def _plugin_entries(self, registry: "PluginRegistry") -> list[_DockEntry]:
        entries: list[_DockEntry] = []
        seen: set[str] = set()
        for registration in registry.channels:
            plugin = registration.plugin
            channel_id = plugin.id.strip()
            if not channel_id or channel_id in seen:
                continue
            seen.add(channel_id)
            if channel_id in self._static_order:
                continue
            dock = registration.dock or build_dock_from_plugin(plugin)
            entries.append(_DockEntry(channel_id, dock, plugin.meta.order))
        return entries

    def _merge(self, registry: "PluginRegistry") -> tuple[ChannelDock, ...]:
        positions = {channel_id: index for index, channel_id in enumerate(self._static_order)}

        def sort_key(entry: _DockEntry) -> tuple[float, str]:
            if entry.order is not None:
                return (entry.order, entry.id)
            return (positions.get(entry.id, UNORDERED), entry.id)

        entries = self._static_entries() + self._plugin_entries(registry)
        entries.sort(key=sort_key)
        logger.debug("Merged %d channel docks", len(entries))
        return tuple(entry.dock for entry in entries)


# --- Module-level helpers ---

_tables: "weakref.WeakKeyDictionary[PluginRuntime, ChannelDockTable]" = weakref.WeakKeyDictionary()
_tables_lock = threading.Lock()


def dock_table_for(runtime: "PluginRuntime") -> ChannelDockTable:
    """Return the shared :class:`ChannelDockTable` for *runtime*."""
    with _tables_lock:
        table = _tables.get(runtime)
        if table is None:
            table = ChannelDockTable(runtime)
            _tables[runtime] = table
        return table


def list_channel_docks(runtime: "PluginRuntime") -> list[ChannelDock]:
    return dock_table_for(runtime).list_entries()


def get_channel_dock(channel_id: str, runtime: "PluginRuntime") -> Optional[ChannelDock]:
    return dock_table_for(runtime).get_entry(channel_id)
