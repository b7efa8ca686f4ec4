"""Credentials for provider usage/quota snapshots.

Usage endpoints authenticate differently from model calls: z.ai takes a
plain API key, while OAuth providers report usage for the signed-in account
only. :func:`resolve_provider_usage_auths` collects one token per provider
that can report usage and silently skips the rest.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import partial
from typing import Mapping, Optional, Sequence

from keydock.auth.base import AttemptFailure, attempt
from keydock.auth.order import resolve_auth_profile_order
from keydock.auth.profile_store import (
    ApiKeyCredential,
    AuthProfileStore,
    OAuthCredential,
    OAuthRefresher,
    TokenCredential,
)
from keydock.models import GatewayConfig
from keydock.providers import (
    get_custom_provider_api_key,
    normalize_provider_id,
    resolve_env_api_key,
)
from keydock.secrets import normalize_optional_secret_input

logger = logging.getLogger(__name__)

USAGE_OAUTH_PROVIDERS: tuple[str, ...] = ("openai-codex",)


@dataclass(frozen=True)
class ProviderUsageAuth:
    """A token accepted by a provider's usage endpoint."""

    provider: str
    token: str = field(repr=False)
    account_id: Optional[str] = None


def _is_oauth_like(store: AuthProfileStore, profile_id: str) -> bool:
    return isinstance(store.get(profile_id), (OAuthCredential, TokenCredential))


def resolve_zai_usage_key(
    store: AuthProfileStore,
    config: Optional[GatewayConfig] = None,
    env: Optional[Mapping[str, str]] = None,
) -> Optional[str]:
    """Find a z.ai API key: env vars, then static config, then an api_key profile."""
    found = resolve_env_api_key("zai", env)
    if found is not None:
        return found.api_key

    key = get_custom_provider_api_key(config, "zai") or get_custom_provider_api_key(config, "z-ai")
    if key:
        return key

    for profile_id in store.list_profiles_for_provider("zai"):
        credential = store.get(profile_id)
        if isinstance(credential, ApiKeyCredential):
            return normalize_optional_secret_input(credential.key)
    return None


def usage_oauth_providers(
    store: AuthProfileStore, config: Optional[GatewayConfig] = None
) -> list[str]:
    """Return the OAuth providers that hold an oauth or token profile.

    A profile counts when it is in the store for the provider, or when
    ``auth.profiles`` declares it for the provider and the store holds it
    as oauth or token.
    """
    declared = config.auth.profiles if config is not None else {}
    result: list[str] = []
    for provider in USAGE_OAUTH_PROVIDERS:
        normalized = normalize_provider_id(provider)
        stored = [
            pid for pid in store.list_profiles_for_provider(provider) if _is_oauth_like(store, pid)
        ]
        configured = [
            pid
            for pid, profile in declared.items()
            if normalize_provider_id(profile.provider) == normalized and _is_oauth_like(store, pid)
        ]
        if stored or configured:
            result.append(provider)
    return result


def _resolve_usage_candidate(
    store: AuthProfileStore,
    provider: str,
    profile_id: str,
    refresher: Optional[OAuthRefresher],
) -> Optional[ProviderUsageAuth]:
    credential = store.get(profile_id)
    # Stale config metadata must not block usage snapshots, so no config here.
    secret = store.resolve_api_key_for_profile(profile_id, None, refresher=refresher)
    if secret is None:
        return None
    account_id = credential.account_id if isinstance(credential, OAuthCredential) else None
    return ProviderUsageAuth(provider=provider, token=secret.api_key, account_id=account_id)


def resolve_usage_oauth_token(
    provider: str,
    store: AuthProfileStore,
    config: Optional[GatewayConfig] = None,
    *,
    refresher: Optional[OAuthRefresher] = None,
    failures: Optional[list[AttemptFailure]] = None,
) -> Optional[ProviderUsageAuth]:
    """Walk *provider*'s candidate order using only oauth and token profiles."""
    failures = [] if failures is None else failures
    for profile_id in resolve_auth_profile_order(provider, store, config):
        if not _is_oauth_like(store, profile_id):
            continue
        resolved = attempt(
            partial(_resolve_usage_candidate, store, provider, profile_id, refresher),
            label=f"profile:{profile_id}",
            failures=failures,
        )
        if resolved is not None:
            return resolved
    return None


def resolve_provider_usage_auths(
    providers: Sequence[str],
    *,
    store: AuthProfileStore,
    config: Optional[GatewayConfig] = None,
    env: Optional[Mapping[str, str]] = None,
    refresher: Optional[OAuthRefresher] = None,
    auth: Optional[Sequence[ProviderUsageAuth]] = None,
) -> list[ProviderUsageAuth]:
    """Collect usage credentials for each of *providers* that can report usage.

    Args:
        providers: Usage provider ids, in the order results should follow.
        store: Auth profile store snapshot.
        config: Gateway config (static keys, profile declarations, order hints).
        env: Environment mapping. Defaults to ``os.environ``.
        refresher: Refreshes expired OAuth logins.
        auth: Caller-supplied credentials; returned as-is when given.

    Returns:
        One :class:`ProviderUsageAuth` per provider with a usable token.
    """
    if auth is not None:
        return list(auth)

    oauth_providers = usage_oauth_providers(store, config)
    auths: list[ProviderUsageAuth] = []
    for provider in providers:
        if provider == "zai":
            key = resolve_zai_usage_key(store, config, env)
            if key:
                auths.append(ProviderUsageAuth(provider=provider, token=key))
            continue

        if provider not in oauth_providers:
            logger.debug("Provider %s has no usage credentials", provider)
            continue
        resolved = resolve_usage_oauth_token(provider, store, config, refresher=refresher)
        if resolved is not None:
            auths.append(resolved)
    return auths
