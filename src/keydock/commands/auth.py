"""Auth commands -- inspect credential resolution and manage profiles.

Provides the ``keydock auth`` sub-command group. The read-only commands
(``resolve``, ``mode``, ``order``, ``list``) show what the gateway would
do for a provider; ``set-token`` and ``remove`` edit the auth profile
store of the selected agent directory.

Secrets are masked in every command's output unless ``--reveal`` is
passed to ``resolve``.

Typical workflow::

    keydock auth set-token anthropic --token-env ANTHROPIC_SETUP_TOKEN
    keydock auth resolve anthropic
    keydock auth mode anthropic
"""

from __future__ import annotations

import os
from typing import Optional

import typer

from keydock.exceptions import (
    InvalidUsageError,
    KeydockError,
    NoCredentialFoundError,
    NotFoundError,
)
from keydock.output import debug, error, get_output, info, success, suggest

auth_app = typer.Typer(no_args_is_help=True)


def _load_inputs(ctx: typer.Context):  # noqa: ANN202
    """Load the gateway config and auth store selected by the global options."""
    from keydock.auth.profile_store import ensure_auth_profile_store
    from keydock.config import load_gateway_config

    obj = ctx.obj or {}
    config = load_gateway_config(obj.get("config_path"))
    store = ensure_auth_profile_store(obj.get("agent_dir"))
    return config, store


def _fail(exc: KeydockError) -> typer.Exit:
    error(str(exc))
    return typer.Exit(code=exc.exit_code)


@auth_app.command("resolve")
def auth_resolve(
    ctx: typer.Context,
    provider: str = typer.Argument(help="Provider id, e.g. openai or z.ai."),
    profile: Optional[str] = typer.Option(
        None, "--profile", help="Resolve exactly this profile; never fall back."
    ),
    prefer: Optional[str] = typer.Option(
        None, "--prefer", help="Try this profile first if it belongs to the provider."
    ),
    reveal: bool = typer.Option(
        False, "--reveal", help="Print the secret instead of a masked preview."
    ),
) -> None:
    """Show which credential the gateway would use for PROVIDER.

    Prints the source descriptor (``profile:<id>``, ``env: <VAR>`` or
    ``config: models.providers.<key>``), the auth mode and a masked secret.

    Example::

        keydock auth resolve openai
        keydock auth resolve anthropic --profile anthropic:work
    """
    from keydock.auth.resolver import resolve_api_key_for_provider
    from keydock.secrets import mask_secret

    try:
        config, store = _load_inputs(ctx)
        auth = resolve_api_key_for_provider(
            provider,
            config=config,
            profile_id=profile,
            preferred_profile=prefer,
            store=store,
            agent_dir=(ctx.obj or {}).get("agent_dir"),
        )
    except NoCredentialFoundError as exc:
        for failure in exc.failures:
            debug(f"{failure.label} failed with {failure.error_type}")
        raise _fail(exc) from None
    except KeydockError as exc:
        raise _fail(exc) from None

    get_output().print_record(
        {
            "provider": provider,
            "source": auth.source,
            "mode": auth.mode.value,
            "profile_id": auth.profile_id,
            "api_key": auth.api_key if reveal else mask_secret(auth.api_key),
        },
        title="Resolved Credential",
    )


@auth_app.command("mode")
def auth_mode(
    ctx: typer.Context,
    provider: str = typer.Argument(help="Provider id."),
) -> None:
    """Classify how PROVIDER authenticates, without resolving a secret.

    Example::

        keydock auth mode openai-codex
    """
    from keydock.auth.mode import resolve_model_auth_mode

    try:
        config, store = _load_inputs(ctx)
        mode = resolve_model_auth_mode(provider, config, store)
        if mode is None:
            raise InvalidUsageError("Provider id must not be blank.")
    except KeydockError as exc:
        raise _fail(exc) from None

    get_output().print_record({"provider": provider, "mode": mode.value})


@auth_app.command("order")
def auth_order(
    ctx: typer.Context,
    provider: str = typer.Argument(help="Provider id."),
    profile: Optional[str] = typer.Option(None, "--profile", help="Explicit profile id."),
    prefer: Optional[str] = typer.Option(None, "--prefer", help="Preferred profile id."),
) -> None:
    """List the candidate profiles tried for PROVIDER, in order.

    Example::

        keydock auth order anthropic --prefer anthropic:work
    """
    from keydock.auth.order import resolve_auth_profile_order

    try:
        config, store = _load_inputs(ctx)
    except KeydockError as exc:
        raise _fail(exc) from None

    order = resolve_auth_profile_order(
        provider, store, config, explicit_profile_id=profile, preferred_profile=prefer
    )
    if not order:
        info(f'No candidate profiles for provider "{provider}".')
        suggest("Environment variables and models.providers are tried next.")
        return

    rows = []
    for position, profile_id in enumerate(order, 1):
        credential = store.get(profile_id)
        rows.append(
            [
                str(position),
                profile_id,
                credential.type if credential is not None else "missing",
            ]
        )
    get_output().print_table(["#", "Profile", "Type"], rows, title="Resolution Order")


@auth_app.command("list")
def auth_list(
    ctx: typer.Context,
    provider: Optional[str] = typer.Option(
        None, "--provider", help="Only list profiles for this provider."
    ),
) -> None:
    """List stored auth profiles (secrets are never shown).

    Example::

        keydock auth list --provider zai
    """
    try:
        _, store = _load_inputs(ctx)
    except KeydockError as exc:
        raise _fail(exc) from None

    profile_ids = (
        store.list_profiles_for_provider(provider) if provider else list(store.profiles)
    )
    if not profile_ids:
        info("No auth profiles stored.")
        suggest("Add one: keydock auth set-token <provider>")
        return

    rows = []
    for profile_id in profile_ids:
        credential = store.profiles[profile_id]
        expires_at = getattr(credential, "expires_at", None)
        rows.append(
            [
                profile_id,
                credential.provider,
                credential.type,
                credential.email or "-",
                expires_at.isoformat() if expires_at else "-",
            ]
        )
    headers = ["Profile", "Provider", "Type", "Email", "Expires"]
    get_output().print_table(headers, rows, title="Auth Profiles")


@auth_app.command("set-token")
def auth_set_token(
    ctx: typer.Context,
    provider: str = typer.Argument(help="Provider id."),
    name: str = typer.Option("default", "--name", help="Profile name (slugified)."),
    token_env: Optional[str] = typer.Option(
        None, "--token-env", help="Read the token from this environment variable."
    ),
) -> None:
    """Store a pasted token as the ``<provider>:<name>`` profile.

    The token is read from ``--token-env`` when given, otherwise prompted
    for with hidden input.

    Example::

        keydock auth set-token anthropic --name work
    """
    from keydock.auth.profile_store import TokenCredential, save_auth_profile_store
    from keydock.config import shorten_home_path
    from keydock.providers import build_token_profile_id, normalize_provider_id
    from keydock.secrets import normalize_secret_input

    try:
        if not provider.strip():
            raise InvalidUsageError("Provider id must not be blank.")
        if token_env:
            raw = os.environ.get(token_env)
            if raw is None:
                raise InvalidUsageError(f"Environment variable {token_env} is not set.")
        else:
            raw = typer.prompt("Token", hide_input=True)
        token = normalize_secret_input(raw)
        if not token:
            raise InvalidUsageError("Token must not be empty.")

        _, store = _load_inputs(ctx)
        profile_id = build_token_profile_id(provider, name)
        store.upsert_profile(
            profile_id,
            TokenCredential(provider=normalize_provider_id(provider), token=token),
        )
        path = save_auth_profile_store(store, (ctx.obj or {}).get("agent_dir"))
    except KeydockError as exc:
        raise _fail(exc) from None

    success(f'Saved token profile "{profile_id}" to {shorten_home_path(path)}.')
    suggest(f"Check it: keydock auth resolve {provider} --profile {profile_id}")


@auth_app.command("remove")
def auth_remove(
    ctx: typer.Context,
    profile_id: str = typer.Argument(help="Profile id to delete."),
) -> None:
    """Delete a stored auth profile.

    Example::

        keydock auth remove anthropic:work
    """
    from keydock.auth.profile_store import save_auth_profile_store

    try:
        _, store = _load_inputs(ctx)
        if not store.remove_profile(profile_id):
            raise NotFoundError(f'Profile "{profile_id}" not found.')
        save_auth_profile_store(store, (ctx.obj or {}).get("agent_dir"))
    except KeydockError as exc:
        raise _fail(exc) from None

    success(f'Removed profile "{profile_id}".')
