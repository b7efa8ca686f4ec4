"""Provider credential resolution: an explicit, ordered chain of strategies.

For a provider without an explicit profile, :class:`CredentialResolver`
evaluates its strategies in order and returns the first hit:

1. :class:`ProfileChainStrategy` -- each candidate from
   :func:`~keydock.auth.order.resolve_auth_profile_order`. A failing
   candidate (expired OAuth login, backend error, ...) is recorded and
   skipped; it never aborts the chain.
2. :class:`EnvironmentStrategy` -- the provider's env vars, in declared
   priority.
3. :class:`ProviderConfigStrategy` -- ``models.providers.<id>.api_key``.

When all of them come up empty the resolver raises
:class:`~keydock.exceptions.AmbiguousProviderGuidanceError` if a sibling
provider holds an OAuth login (see
:data:`~keydock.providers.PROVIDER_SIBLING_GUIDANCE`), otherwise
:class:`~keydock.exceptions.NoCredentialFoundError`.

An explicit profile id bypasses the chain entirely: it either resolves,
sourced ``profile:<id>``, or raises
:class:`~keydock.exceptions.ProfileResolutionError`.

Typical usage::

    from keydock.auth import resolve_api_key_for_provider

    auth = resolve_api_key_for_provider("openrouter", config=config)
    headers = {"Authorization": f"Bearer {auth.api_key}"}
"""

from __future__ import annotations

import logging
from functools import partial
from pathlib import Path
from typing import Mapping, Optional, Sequence

from keydock.auth.base import (
    AuthMode,
    ResolutionRequest,
    ResolutionStrategy,
    ResolvedProviderAuth,
    attempt,
)
from keydock.auth.order import resolve_auth_profile_order
from keydock.auth.profile_store import (
    AUTH_PROFILE_FILENAME,
    AuthProfileStore,
    OAuthCredential,
    OAuthRefresher,
    credential_mode,
    ensure_auth_profile_store,
    resolve_auth_store_path,
)
from keydock.config import shorten_home_path
from keydock.exceptions import (
    AmbiguousProviderGuidanceError,
    AuthError,
    NoCredentialFoundError,
    ProfileResolutionError,
)
from keydock.models import GatewayConfig
from keydock.providers import (
    PROVIDER_SIBLING_GUIDANCE,
    normalize_provider_id,
    resolve_env_api_key,
    resolve_provider_config,
)
from keydock.secrets import normalize_optional_secret_input, normalize_secret_input

logger = logging.getLogger(__name__)

REMEDIATION_COMMAND = "keydock auth set-token <provider>"


# --- Strategies ---


class ProfileChainStrategy(ResolutionStrategy):
    """Walk the candidate profiles; the first that yields a secret wins."""

    @property
    def name(self) -> str:
        return "profiles"

    def resolve(self, request: ResolutionRequest) -> Optional[ResolvedProviderAuth]:
        for candidate in request.order:
            resolved = attempt(
                partial(self._resolve_candidate, request, candidate),
                label=f"profile:{candidate}",
                failures=request.failures,
            )
            if resolved is not None:
                return resolved
        return None

    @staticmethod
    def _resolve_candidate(
        request: ResolutionRequest, profile_id: str
    ) -> Optional[ResolvedProviderAuth]:
        credential = request.store.get(profile_id)
        if credential is None:
            return None
        # Order hints may name another provider's profile; never borrow it.
        if normalize_provider_id(credential.provider) != normalize_provider_id(request.provider):
            logger.debug("Skipping profile %s: belongs to %s", profile_id, credential.provider)
            return None
        secret = request.store.resolve_api_key_for_profile(
            profile_id, request.config, refresher=request.refresher
        )
        if secret is None:
            return None
        return ResolvedProviderAuth(
            api_key=secret.api_key,
            profile_id=profile_id,
            source=f"profile:{profile_id}",
            mode=credential_mode(credential),
        )


class EnvironmentStrategy(ResolutionStrategy):
    """Read the provider's env vars in declared priority."""

    @property
    def name(self) -> str:
        return "env"

    def resolve(self, request: ResolutionRequest) -> Optional[ResolvedProviderAuth]:
        found = resolve_env_api_key(request.provider, request.env)
        if found is None:
            return None
        return ResolvedProviderAuth(
            api_key=found.api_key,
            source=found.source,
            mode=AuthMode.OAUTH if found.is_oauth else AuthMode.API_KEY,
        )


class ProviderConfigStrategy(ResolutionStrategy):
    """Use the static ``api_key`` from ``models.providers``."""

    @property
    def name(self) -> str:
        return "config"

    def resolve(self, request: ResolutionRequest) -> Optional[ResolvedProviderAuth]:
        match = resolve_provider_config(request.config, request.provider)
        if match is None:
            return None
        key, provider_config = match
        secret = normalize_optional_secret_input(provider_config.api_key)
        if not secret:
            return None
        return ResolvedProviderAuth(
            api_key=secret,
            source=f"config: models.providers.{key}",
            mode=AuthMode.API_KEY,
        )


DEFAULT_STRATEGIES: tuple[ResolutionStrategy, ...] = (
    ProfileChainStrategy(),
    EnvironmentStrategy(),
    ProviderConfigStrategy(),
)


# --- Resolver ---


def has_oauth_profile(store: AuthProfileStore, provider: str) -> bool:
    """Return True if *store* holds an OAuth profile for *provider*."""
    return any(
        isinstance(store.get(profile_id), OAuthCredential)
        for profile_id in store.list_profiles_for_provider(provider)
    )


class CredentialResolver:
    """Evaluate resolution strategies in order until one yields a secret.

    Args:
        strategies: The chain to evaluate. Defaults to
            :data:`DEFAULT_STRATEGIES` (profiles, env, config).
        agent_dir: Agent directory named in the exhaustion diagnostic.
    """

    def __init__(
        self,
        strategies: Optional[Sequence[ResolutionStrategy]] = None,
        *,
        agent_dir: Optional[Path | str] = None,
    ) -> None:
        self._strategies = tuple(DEFAULT_STRATEGIES if strategies is None else strategies)
        self._agent_dir = agent_dir

    @property
    def strategies(self) -> tuple[ResolutionStrategy, ...]:
        return self._strategies

    def resolve(self, request: ResolutionRequest) -> ResolvedProviderAuth:
        """Return the first strategy result for *request*.

        Raises:
            AmbiguousProviderGuidanceError: A sibling provider holds an
                OAuth login the caller probably meant.
            NoCredentialFoundError: Every strategy came up empty.
        """
        for strategy in self._strategies:
            resolved = strategy.resolve(request)
            if resolved is not None:
                logger.debug(
                    "Resolved provider %s via %s (%s)",
                    request.provider,
                    resolved.source,
                    resolved.mode.value,
                )
                return resolved
            logger.debug("Strategy %s found nothing for %s", strategy.name, request.provider)
        raise self._exhausted(request)

    def _exhausted(self, request: ResolutionRequest) -> AuthError:
        guidance = PROVIDER_SIBLING_GUIDANCE.get(normalize_provider_id(request.provider))
        if guidance is not None and has_oauth_profile(request.store, guidance.sibling):
            return AmbiguousProviderGuidanceError(
                guidance.message, provider=request.provider, sibling=guidance.sibling
            )

        store_path = resolve_auth_store_path(self._agent_dir)
        message = " ".join(
            [
                f'No API key found for provider "{request.provider}".',
                f"Auth store: {shorten_home_path(store_path)} "
                f"(agent dir: {shorten_home_path(store_path.parent)}).",
                f"Configure auth for this agent ({REMEDIATION_COMMAND}) "
                f"or copy {AUTH_PROFILE_FILENAME} from the main agent dir.",
            ]
        )
        return NoCredentialFoundError(
            message,
            provider=request.provider,
            store_path=store_path,
            failures=request.failures,
        )


# --- Public entry points ---


def resolve_profile_credential(
    profile_id: str,
    store: AuthProfileStore,
    config: Optional[GatewayConfig] = None,
    *,
    refresher: Optional[OAuthRefresher] = None,
) -> ResolvedProviderAuth:
    """Resolve exactly *profile_id*, with no fallback.

    Raises:
        ProfileResolutionError: The profile is missing, empty, unusable, or
            its backend failed.
    """
    try:
        secret = store.resolve_api_key_for_profile(profile_id, config, refresher=refresher)
    except Exception as exc:
        raise ProfileResolutionError(
            profile_id,
            f'No credentials found for profile "{profile_id}" ({type(exc).__name__}).',
        ) from exc
    credential = store.get(profile_id)
    if secret is None or credential is None:
        raise ProfileResolutionError(profile_id)
    return ResolvedProviderAuth(
        api_key=secret.api_key,
        profile_id=profile_id,
        source=f"profile:{profile_id}",
        mode=credential_mode(credential),
    )


def resolve_api_key_for_provider(
    provider: str,
    *,
    config: Optional[GatewayConfig] = None,
    profile_id: Optional[str] = None,
    preferred_profile: Optional[str] = None,
    store: Optional[AuthProfileStore] = None,
    agent_dir: Optional[Path | str] = None,
    env: Optional[Mapping[str, str]] = None,
    refresher: Optional[OAuthRefresher] = None,
    resolver: Optional[CredentialResolver] = None,
) -> ResolvedProviderAuth:
    """Resolve the credential to use for *provider*.

    Args:
        provider: Raw or canonical provider id.
        config: Gateway config (profile metadata, order hints, static keys).
        profile_id: Resolve exactly this profile; never fall back.
        preferred_profile: Try this profile first if it belongs to *provider*.
        store: Auth profile store snapshot. Loaded from *agent_dir* when
            omitted.
        agent_dir: Agent directory holding ``auth-profiles.json``.
        env: Environment mapping. Defaults to ``os.environ``.
        refresher: Refreshes expired OAuth logins.
        resolver: Custom strategy chain.

    Returns:
        A fresh :class:`~keydock.auth.base.ResolvedProviderAuth`.

    Raises:
        ProfileResolutionError: *profile_id* was given and did not resolve.
        AmbiguousProviderGuidanceError: See :class:`CredentialResolver`.
        NoCredentialFoundError: See :class:`CredentialResolver`.
    """
    if store is None:
        store = ensure_auth_profile_store(agent_dir)

    if profile_id:
        return resolve_profile_credential(profile_id, store, config, refresher=refresher)

    order = resolve_auth_profile_order(
        provider, store, config, preferred_profile=preferred_profile
    )
    request = ResolutionRequest(
        provider=provider,
        order=order,
        store=store,
        config=config,
        env=env,
        refresher=refresher,
    )
    return (resolver or CredentialResolver(agent_dir=agent_dir)).resolve(request)


def require_api_key(auth: ResolvedProviderAuth, provider: str) -> str:
    """Return the normalized secret from *auth*, or raise if it is blank."""
    key = normalize_secret_input(auth.api_key)
    if key:
        return key
    raise AuthError(f'No API key resolved for provider "{provider}" (auth mode: {auth.mode.value}).')
