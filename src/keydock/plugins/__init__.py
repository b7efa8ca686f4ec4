"""Plugin registry handling for keydock.

keydock consumes an already-populated :class:`PluginRegistry`; it never
loads plugin code. :class:`PluginRuntime` holds the active registry.
"""

from keydock.plugins.registry import (
    PluginChannelRegistration,
    PluginRegistry,
    load_registry_snapshot,
)
from keydock.plugins.runtime import PluginRuntime

__all__ = [
    "PluginChannelRegistration",
    "PluginRegistry",
    "PluginRuntime",
    "load_registry_snapshot",
]
