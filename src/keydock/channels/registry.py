"""Statically known chat channels and channel id normalization.

Every channel now ships as a plugin, so the static tables are empty. They
stay as the first tier of lookup: a channel known here always wins over a
plugin registering the same id.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Iterable, Mapping, Optional, Sequence

from keydock.channels.types import ChannelMeta

if TYPE_CHECKING:
    from keydock.plugins.registry import PluginChannelRegistration
    from keydock.plugins.runtime import PluginRuntime

CHAT_CHANNEL_ORDER: tuple[str, ...] = ()
"""Static channel ids in declared order."""

CHAT_CHANNEL_META: dict[str, ChannelMeta] = {}

CHAT_CHANNEL_ALIASES: dict[str, str] = {}
"""Lowercase alias -> static channel id."""

DEFAULT_CHAT_CHANNEL: Optional[str] = None

DocsLink = Callable[[str, Optional[str]], str]


def normalize_channel_key(raw: Optional[str]) -> Optional[str]:
    """Trim and lowercase *raw*; blank input becomes ``None``."""
    if raw is None:
        return None
    return raw.strip().lower() or None


def list_chat_channels() -> list[ChannelMeta]:
    """Return metadata for every static channel, in declared order."""
    return [CHAT_CHANNEL_META[channel_id] for channel_id in CHAT_CHANNEL_ORDER]


def list_chat_channel_aliases() -> list[str]:
    return list(CHAT_CHANNEL_ALIASES)


def get_chat_channel_meta(channel_id: str) -> Optional[ChannelMeta]:
    return CHAT_CHANNEL_META.get(channel_id)


def normalize_chat_channel_id(
    raw: Optional[str],
    *,
    order: Sequence[str] = CHAT_CHANNEL_ORDER,
    aliases: Mapping[str, str] = CHAT_CHANNEL_ALIASES,
) -> Optional[str]:
    """Resolve *raw* against the static channels only."""
    key = normalize_channel_key(raw)
    if key is None:
        return None
    resolved = aliases.get(key, key)
    return resolved if resolved in order else None


def match_plugin_channel_id(
    key: str, registrations: Iterable["PluginChannelRegistration"]
) -> Optional[str]:
    """Return the id of the first registration whose id or alias equals *key*.

    *key* must already be normalized; ids and aliases are compared
    case-insensitively.
    """
    for registration in registrations:
        plugin = registration.plugin
        if plugin.id.strip().lower() == key:
            return plugin.id
        if any(alias.strip().lower() == key for alias in plugin.meta.aliases):
            return plugin.id
    return None


def normalize_any_channel_id(
    raw: Optional[str],
    runtime: "PluginRuntime",
    *,
    order: Sequence[str] = CHAT_CHANNEL_ORDER,
    aliases: Mapping[str, str] = CHAT_CHANNEL_ALIASES,
) -> Optional[str]:
    """Resolve *raw* to a static or plugin-registered channel id.

    Static channels and aliases are tried first, then plugin ids and
    plugin-declared aliases in registration order.

    Raises:
        RegistryError: If the lookup reaches the plugin tier and no registry
            is active.
    """
    key = normalize_channel_key(raw)
    if key is None:
        return None
    static_id = normalize_chat_channel_id(key, order=order, aliases=aliases)
    if static_id is not None:
        return static_id
    return match_plugin_channel_id(key, runtime.require().channels)


def format_channel_primer_line(meta: ChannelMeta) -> str:
    return f"{meta.label}: {meta.blurb}"


def format_channel_selection_line(meta: ChannelMeta, docs_link: DocsLink) -> str:
    """Render the one-line channel description shown in a selection prompt.

    Args:
        meta: The channel metadata.
        docs_link: Renders ``(path, label)`` into a link. *label* is
            ``None`` when ``meta.selection_docs_omit_label`` is set.
    """
    prefix = meta.selection_docs_prefix if meta.selection_docs_prefix is not None else "Docs:"
    label = None if meta.selection_docs_omit_label else (meta.docs_label or meta.id)
    docs = docs_link(meta.docs_path, label)
    extras = " ".join(extra for extra in meta.selection_extras if extra)
    line = f"{meta.label} - {meta.blurb} "
    if prefix:
        line += f"{prefix} "
    line += docs
    if extras:
        line += f" {extras}"
    return line
