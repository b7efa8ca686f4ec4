"""keydock -- provider credential resolution and channel docks for an agent gateway.

The package decides which secret authenticates each outbound call to a
model provider and merges static and plugin-registered channel
capabilities into one ordered, alias-aware table.

Typical usage::

    from keydock.auth import resolve_api_key_for_provider
    from keydock.channels import list_channel_docks

    auth = resolve_api_key_for_provider("openrouter", config=config)
    docks = list_channel_docks(runtime)

Modules:
    app: Typer application and CLI entry point.
    auth: Credential resolution, profile store and auth-mode classification.
    channels: Channel descriptors, static registry and the dock merger.
    plugins: The plugin registry and its runtime holder.
    config: XDG-aware directories and gateway configuration.
    exceptions: Exception hierarchy with exit-code mapping.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
