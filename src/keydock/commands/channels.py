"""Channel commands -- inspect the merged channel dock table.

The gateway's plugin loader is not part of keydock, so these commands read
a registry snapshot (a JSON description of channel registrations, see
:func:`~keydock.plugins.registry.load_registry_snapshot`) and run the same
merge the gateway runs at startup.

Example::

    keydock channels list --registry registry.json
    keydock channels resolve MM --registry registry.json
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from keydock.channels.dock import ChannelDockTable
from keydock.channels.types import ChannelMeta
from keydock.exceptions import KeydockError, NotFoundError
from keydock.output import error, get_output, info

channels_app = typer.Typer(no_args_is_help=True)

_REGISTRY_OPTION = typer.Option(
    ..., "--registry", "-r", help="JSON registry snapshot describing channel registrations."
)


def _load_table(registry_path: Path) -> ChannelDockTable:
    from keydock.plugins.registry import load_registry_snapshot
    from keydock.plugins.runtime import PluginRuntime

    registry = load_registry_snapshot(registry_path)
    return ChannelDockTable(PluginRuntime(registry))


def _meta_for(table: ChannelDockTable, channel_id: str) -> Optional[ChannelMeta]:
    from keydock.channels.registry import get_chat_channel_meta

    static = get_chat_channel_meta(channel_id)
    if static is not None:
        return static
    for registration in table.registry.channels:
        if registration.plugin.id == channel_id:
            return registration.plugin.meta
    return None


def _enabled_capabilities(capabilities) -> list[str]:  # noqa: ANN001
    data = capabilities.model_dump()
    chat_types = data.pop("chat_types", [])
    flags = [name for name, value in data.items() if value is True]
    return [f"chat:{chat_type}" for chat_type in chat_types] + flags


@channels_app.command("list")
def channels_list(registry: Path = _REGISTRY_OPTION) -> None:
    """List every channel dock in merged order."""
    try:
        table = _load_table(registry)
        docks = table.list_entries()
    except KeydockError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    if not docks:
        info("No channels registered.")
        return

    rows = []
    for dock in docks:
        meta = _meta_for(table, dock.id)
        rows.append(
            [
                dock.id,
                meta.label if meta else "",
                str(meta.order) if meta and meta.order is not None else "-",
                ", ".join(meta.aliases) if meta else "",
                ", ".join(_enabled_capabilities(dock.capabilities)),
            ]
        )
    headers = ["Channel", "Label", "Order", "Aliases", "Capabilities"]
    get_output().print_table(headers, rows, title="Channel Docks")


@channels_app.command("show")
def channels_show(
    channel_id: str = typer.Argument(help="Exact channel id."),
    registry: Path = _REGISTRY_OPTION,
) -> None:
    """Show the dock for one channel."""
    try:
        table = _load_table(registry)
        dock = table.get_entry(channel_id)
        if dock is None:
            raise NotFoundError(f'Channel "{channel_id}" not found.')
    except KeydockError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    meta = _meta_for(table, dock.id)
    get_output().print_record(
        {
            "id": dock.id,
            "label": meta.label if meta else None,
            "order": meta.order if meta else None,
            "aliases": list(meta.aliases) if meta else [],
            "capabilities": _enabled_capabilities(dock.capabilities),
            "adapters": sorted(dock.adapters),
        },
        title="Channel Dock",
    )


@channels_app.command("resolve")
def channels_resolve(
    raw: str = typer.Argument(help="Channel name or alias, any case."),
    registry: Path = _REGISTRY_OPTION,
) -> None:
    """Resolve a channel name or alias to its channel id."""
    try:
        table = _load_table(registry)
        channel_id = table.normalize_id(raw)
        if channel_id is None:
            raise NotFoundError(f'No channel matches "{raw.strip()}".')
    except KeydockError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    get_output().print_record({"input": raw, "channel": channel_id})
