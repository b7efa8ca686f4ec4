"""Holder for the active plugin registry.

Readers take :meth:`PluginRuntime.active` once and work from that
reference, so they see either the old or the new registry in full. Swaps
happen under a lock.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Optional

from keydock.exceptions import RegistryError

if TYPE_CHECKING:
    from keydock.plugins.registry import PluginRegistry

logger = logging.getLogger(__name__)


class PluginRuntime:
    """A single, atomically swapped reference to the active :class:`PluginRegistry`.

    Example::

        runtime = PluginRuntime()
        runtime.activate(registry)
        docks = list_channel_docks(runtime)
    """

    def __init__(self, registry: Optional[PluginRegistry] = None) -> None:
        self._lock = threading.Lock()
        self._registry = registry

    def activate(self, registry: Optional[PluginRegistry]) -> Optional[PluginRegistry]:
        """Make *registry* active and return the previously active one.

        Passing ``None`` deactivates the runtime.
        """
        with self._lock:
            previous, self._registry = self._registry, registry
        logger.debug(
            "Activated plugin registry with %d channel registrations",
            len(registry.channels) if registry is not None else 0,
        )
        return previous

    def active(self) -> Optional[PluginRegistry]:
        """Return the active registry, or ``None`` if none is set."""
        with self._lock:
            return self._registry

    def require(self) -> PluginRegistry:
        """Return the active registry.

        Raises:
            RegistryError: If no registry has been activated.
        """
        registry = self.active()
        if registry is None:
            raise RegistryError(
                "Plugin registry is not initialized. Activate one before looking up channels."
            )
        return registry
