"""Provider credential resolution for keydock.

This package decides which secret authenticates an outbound call to a
model provider, given stored auth profiles, environment variables and
static config, and labels how that provider authenticates.

The main entry points are:

- :func:`resolve_api_key_for_provider` -- resolve the credential for a
  provider through the ordered strategy chain, or exactly one explicit
  profile.
- :func:`resolve_model_auth_mode` -- classify a provider's auth mode from
  credential metadata alone.
- :func:`resolve_auth_profile_order` -- the deduplicated candidate profile
  order the chain walks.
- :class:`AuthProfileStore` -- the persisted profile records and their
  JSON-file adapter.

Typical usage::

    from keydock.auth import resolve_api_key_for_provider

    auth = resolve_api_key_for_provider("anthropic", config=config)
    print(auth.source, auth.mode.value)  # never print auth.api_key
"""

from keydock.auth.base import (
    AttemptFailure,
    AuthMode,
    ResolutionRequest,
    ResolutionStrategy,
    ResolvedProviderAuth,
    attempt,
)
from keydock.auth.mode import resolve_model_auth_mode
from keydock.auth.order import dedupe_profile_ids, resolve_auth_profile_order
from keydock.auth.profile_store import (
    ApiKeyCredential,
    AuthProfileStore,
    Credential,
    OAuthCredential,
    OAuthRefresher,
    TokenCredential,
    ensure_auth_profile_store,
    load_auth_profile_store,
    save_auth_profile_store,
)
from keydock.auth.resolver import (
    CredentialResolver,
    EnvironmentStrategy,
    ProfileChainStrategy,
    ProviderConfigStrategy,
    require_api_key,
    resolve_api_key_for_provider,
)
from keydock.auth.usage import ProviderUsageAuth, resolve_provider_usage_auths

__all__ = [
    "ApiKeyCredential",
    "AttemptFailure",
    "AuthMode",
    "AuthProfileStore",
    "Credential",
    "CredentialResolver",
    "EnvironmentStrategy",
    "OAuthCredential",
    "OAuthRefresher",
    "ProfileChainStrategy",
    "ProviderConfigStrategy",
    "ProviderUsageAuth",
    "ResolutionRequest",
    "ResolutionStrategy",
    "ResolvedProviderAuth",
    "TokenCredential",
    "attempt",
    "dedupe_profile_ids",
    "ensure_auth_profile_store",
    "load_auth_profile_store",
    "require_api_key",
    "resolve_api_key_for_provider",
    "resolve_auth_profile_order",
    "resolve_model_auth_mode",
    "resolve_provider_usage_auths",
    "save_auth_profile_store",
]
