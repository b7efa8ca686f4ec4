"""Classify how a provider authenticates without resolving any secret."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Mapping, Optional

from keydock.auth.base import AuthMode
from keydock.auth.profile_store import (
    AuthProfileStore,
    credential_mode,
    ensure_auth_profile_store,
)
from keydock.models import GatewayConfig
from keydock.providers import get_custom_provider_api_key, resolve_env_api_key

logger = logging.getLogger(__name__)


def resolve_model_auth_mode(
    provider: str,
    config: Optional[GatewayConfig] = None,
    store: Optional[AuthProfileStore] = None,
    env: Optional[Mapping[str, str]] = None,
    *,
    agent_dir: Optional[Path | str] = None,
) -> Optional[AuthMode]:
    """Return the semantic auth mode for *provider*.

    Only credential type metadata is inspected: the secret backend and the
    OAuth refresher are never called, so classification works for expired
    or unreachable credentials too.

    Args:
        provider: Raw or canonical provider id.
        config: Gateway config consulted for a static ``api_key``.
        store: Auth profile store snapshot. Loaded from *agent_dir* when
            omitted.
        env: Environment mapping. Defaults to ``os.environ``.
        agent_dir: Agent directory holding ``auth-profiles.json``.

    Returns:
        ``None`` for a blank provider. Otherwise ``MIXED`` when the
        provider's profiles span two or more types, the single type's mode
        when they share one, and for a provider without profiles the mode
        implied by its env var or static config, or ``UNKNOWN``.
    """
    if not provider.strip():
        return None

    if store is None:
        store = ensure_auth_profile_store(agent_dir)
    modes = {
        credential_mode(store.profiles[profile_id])
        for profile_id in store.list_profiles_for_provider(provider)
    }
    if len(modes) >= 2:
        return AuthMode.MIXED
    if modes:
        return modes.pop()

    found = resolve_env_api_key(provider, env)
    if found is not None:
        return AuthMode.OAUTH if found.is_oauth else AuthMode.API_KEY

    if get_custom_provider_api_key(config, provider):
        return AuthMode.API_KEY

    logger.debug("No credential evidence for provider %s", provider)
    return AuthMode.UNKNOWN
