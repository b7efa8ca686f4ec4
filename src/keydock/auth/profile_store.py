"""Persisted auth profiles: credential records and the JSON-file store adapter.

Profiles live in ``<agent_dir>/auth-profiles.json`` (see
:func:`~keydock.config.resolve_agent_dir`). The file is written atomically
with ``0o600`` permissions so that secrets are never world-readable, even
momentarily.

Each record is one variant of a tagged union keyed by ``type``:

- :class:`ApiKeyCredential` (``api_key``) -- a static key.
- :class:`OAuthCredential` (``oauth``) -- access/refresh tokens from an
  OAuth login, optionally expiring.
- :class:`TokenCredential` (``token``) -- a pasted bearer token, optionally
  expiring.

The resolution core only ever reads an :class:`AuthProfileStore`; the
mutators (:meth:`~AuthProfileStore.upsert_profile`,
:meth:`~AuthProfileStore.remove_profile`) exist for the profile-management
commands.

Example::

    store = ensure_auth_profile_store()
    store.upsert_profile(
        "anthropic:default",
        TokenCredential(provider="anthropic", token="sk-ant-..."),
    )
    save_auth_profile_store(store)
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Annotated, Callable, Literal, Optional, Union, assert_never

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from keydock.auth.base import AuthMode
from keydock.config import (
    atomic_write,
    describe_validation_error,
    resolve_agent_dir,
    shorten_home_path,
)
from keydock.exceptions import AuthError, ConfigError
from keydock.models import GatewayConfig
from keydock.providers import normalize_provider_id
from keydock.secrets import normalize_optional_secret_input

logger = logging.getLogger(__name__)

AUTH_PROFILE_FILENAME = "auth-profiles.json"
AUTH_STORE_VERSION = 1


# --- Credential records ---


class ApiKeyCredential(BaseModel):
    """A static API key for one provider."""

    model_config = ConfigDict(frozen=True)

    type: Literal["api_key"] = "api_key"
    provider: str
    key: str = Field(repr=False)
    email: Optional[str] = None


class OAuthCredential(BaseModel):
    """Tokens obtained through an OAuth login.

    Attributes:
        access: The access token sent to the provider.
        refresh: The refresh token, used by an :data:`OAuthRefresher`.
        expires_at: When ``access`` stops working. ``None`` means unknown,
            treated as valid.
        account_id: Provider-side account identifier, if reported.
    """

    model_config = ConfigDict(frozen=True)

    type: Literal["oauth"] = "oauth"
    provider: str
    access: str = Field(repr=False)
    refresh: Optional[str] = Field(default=None, repr=False)
    expires_at: Optional[datetime] = None
    account_id: Optional[str] = None
    email: Optional[str] = None


class TokenCredential(BaseModel):
    """A bearer token pasted by the user, optionally expiring."""

    model_config = ConfigDict(frozen=True)

    type: Literal["token"] = "token"
    provider: str
    token: str = Field(repr=False)
    expires_at: Optional[datetime] = None
    email: Optional[str] = None


Credential = Annotated[
    Union[ApiKeyCredential, OAuthCredential, TokenCredential],
    Field(discriminator="type"),
]

CredentialType = Literal["api_key", "oauth", "token"]

OAuthRefresher = Callable[[str, OAuthCredential], OAuthCredential]
"""Refreshes an expired OAuth login: ``(profile_id, credential) -> fresh credential``.

Owned by the secret backend; it may perform network calls and may raise.
"""


def credential_mode(credential: Credential) -> AuthMode:
    """Map a record's type tag to the :class:`AuthMode` it authenticates with."""
    if isinstance(credential, ApiKeyCredential):
        return AuthMode.API_KEY
    if isinstance(credential, OAuthCredential):
        return AuthMode.OAUTH
    if isinstance(credential, TokenCredential):
        return AuthMode.TOKEN
    assert_never(credential)


def _is_expired(expires_at: Optional[datetime], now: Optional[datetime] = None) -> bool:
    """Return True if *expires_at* is in the past. Naive datetimes are treated as UTC."""
    if expires_at is None:
        return False
    now = now or datetime.now(timezone.utc)
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    return now >= expires_at


@dataclass(frozen=True)
class ProfileSecret:
    """The secret a profile resolved to. Excluded from ``repr``."""

    api_key: str = field(repr=False)
    provider: str
    email: Optional[str] = None


# --- Store ---


class AuthProfileStore(BaseModel):
    """Ordered mapping of profile id to credential record.

    Dict order is the store-defined profile order and survives a JSON
    round trip.
    """

    version: int = AUTH_STORE_VERSION
    profiles: dict[str, Credential] = Field(default_factory=dict)

    def get(self, profile_id: str) -> Optional[Credential]:
        """Return the record stored under *profile_id*, or ``None``."""
        return self.profiles.get(profile_id)

    def list_profiles_for_provider(self, provider: str) -> list[str]:
        """Return the ids of every profile for *provider*, in store order.

        Provider ids are normalized on both sides, so ``z-ai`` and ``zai``
        name the same profiles.
        """
        normalized = normalize_provider_id(provider)
        return [
            profile_id
            for profile_id, credential in self.profiles.items()
            if normalize_provider_id(credential.provider) == normalized
        ]

    def upsert_profile(self, profile_id: str, credential: Credential) -> None:
        """Insert or replace a profile.

        Raises:
            ConfigError: If *profile_id* exists with a different credential
                type. A profile's type is fixed once created.
        """
        existing = self.profiles.get(profile_id)
        if existing is not None and existing.type != credential.type:
            raise ConfigError(
                f'Profile "{profile_id}" is a {existing.type} profile; '
                f"remove it before storing a {credential.type} credential."
            )
        self.profiles[profile_id] = credential

    def remove_profile(self, profile_id: str) -> bool:
        """Delete a profile. Returns ``False`` if it did not exist."""
        return self.profiles.pop(profile_id, None) is not None

    def resolve_api_key_for_profile(
        self,
        profile_id: str,
        config: Optional[GatewayConfig] = None,
        *,
        refresher: Optional[OAuthRefresher] = None,
        now: Optional[datetime] = None,
    ) -> Optional[ProfileSecret]:
        """Resolve the secret stored under *profile_id*.

        Returns ``None`` when the profile is missing, contradicts its
        declared ``auth.profiles`` metadata, holds an empty secret, or is an
        expired token.

        Args:
            profile_id: The profile to resolve.
            config: Gateway config whose ``auth.profiles`` entry, if any,
                must agree with the stored record.
            refresher: Refreshes an expired OAuth login.
            now: Reference time for expiry checks (UTC). Defaults to now.

        Raises:
            AuthError: If an OAuth login has expired and no *refresher* is
                available. Anything the refresher raises propagates.
        """
        credential = self.profiles.get(profile_id)
        if credential is None:
            return None
        if not _matches_declared_profile(profile_id, credential, config):
            logger.debug("Profile %s does not match its configured metadata", profile_id)
            return None

        if isinstance(credential, ApiKeyCredential):
            secret = normalize_optional_secret_input(credential.key)
        elif isinstance(credential, TokenCredential):
            if _is_expired(credential.expires_at, now):
                logger.debug("Token profile %s has expired", profile_id)
                return None
            secret = normalize_optional_secret_input(credential.token)
        elif isinstance(credential, OAuthCredential):
            secret = _resolve_oauth_secret(profile_id, credential, refresher, now)
        else:
            assert_never(credential)

        if not secret:
            return None
        return ProfileSecret(api_key=secret, provider=credential.provider, email=credential.email)


def _matches_declared_profile(
    profile_id: str, credential: Credential, config: Optional[GatewayConfig]
) -> bool:
    declared = config.auth.profiles.get(profile_id) if config is not None else None
    if declared is None:
        return True
    if normalize_provider_id(declared.provider) != normalize_provider_id(credential.provider):
        return False
    if declared.mode == credential.type:
        return True
    # A pasted setup token satisfies a profile declared as oauth.
    return declared.mode == "oauth" and credential.type == "token"


def _resolve_oauth_secret(
    profile_id: str,
    credential: OAuthCredential,
    refresher: Optional[OAuthRefresher],
    now: Optional[datetime],
) -> Optional[str]:
    if not _is_expired(credential.expires_at, now):
        return normalize_optional_secret_input(credential.access)
    if refresher is None:
        raise AuthError(
            f'OAuth login for profile "{profile_id}" has expired. Sign in again to refresh it.'
        )
    refreshed = refresher(profile_id, credential)
    return normalize_optional_secret_input(refreshed.access)


# --- Persistence ---


def resolve_auth_store_path(agent_dir: Optional[Path | str] = None) -> Path:
    """Return the path of ``auth-profiles.json`` for *agent_dir*."""
    return resolve_agent_dir(agent_dir) / AUTH_PROFILE_FILENAME


def resolve_auth_store_path_for_display(agent_dir: Optional[Path | str] = None) -> str:
    """Like :func:`resolve_auth_store_path`, with the home directory shown as ``~``."""
    return shorten_home_path(resolve_auth_store_path(agent_dir))


def load_auth_profile_store(path: Path) -> AuthProfileStore:
    """Load a store from *path*; a missing file yields an empty store.

    Raises:
        ConfigError: If the file is unreadable, not JSON, or fails
            validation. The message never echoes file contents.
    """
    if not path.is_file():
        return AuthProfileStore()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return AuthProfileStore.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(
            f"Invalid auth profile store at {path}: {describe_validation_error(exc)}"
        ) from None
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid auth profile store at {path}: {exc.msg}") from None
    except OSError as exc:
        raise ConfigError(f"Cannot read auth profile store at {path}: {exc}") from exc


def ensure_auth_profile_store(agent_dir: Optional[Path | str] = None) -> AuthProfileStore:
    """Load the store for *agent_dir* (see :func:`resolve_agent_dir`)."""
    return load_auth_profile_store(resolve_auth_store_path(agent_dir))


def save_auth_profile_store(
    store: AuthProfileStore, agent_dir: Optional[Path | str] = None
) -> Path:
    """Persist *store* atomically with ``0o600`` permissions and return the path."""
    path = resolve_auth_store_path(agent_dir)
    data = store.model_dump(mode="json", exclude_none=True)
    atomic_write(path, json.dumps(data, indent=2) + "\n", mode=0o600)
    return path
