"""Pydantic models for the gateway configuration consumed by keydock.

The configuration is serialised as JSON (``config.json`` in the config
directory, see :mod:`keydock.config`). Only the sections keydock reads are
modelled; every model uses ``extra="allow"`` so keys owned by other parts of
the gateway survive a load/save round trip in ``model_extra``.

Example::

    GatewayConfig.model_validate({
        "models": {"providers": {"openrouter": {"api_key": "sk-or-..."}}},
        "auth": {
            "profiles": {"anthropic:work": {"provider": "anthropic", "mode": "token"}},
            "order": {"anthropic": ["anthropic:work", "anthropic:default"]},
        },
    })
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class ProviderConfig(BaseModel):
    """Static configuration for one model provider (``models.providers.<id>``)."""

    model_config = ConfigDict(extra="allow")

    api_key: Optional[str] = Field(
        default=None,
        description="Static API key, used when no profile or env var yields one",
    )
    base_url: Optional[str] = Field(default=None, description="Override for the provider endpoint")


class ModelsConfig(BaseModel):
    """The ``models`` section: per-provider static configuration."""

    model_config = ConfigDict(extra="allow")

    providers: dict[str, ProviderConfig] = Field(default_factory=dict)


class AuthProfileConfig(BaseModel):
    """Declared metadata for a stored auth profile (``auth.profiles.<id>``).

    When present, the stored credential must match the declared provider
    and mode before it is used.
    """

    model_config = ConfigDict(extra="allow")

    provider: str
    mode: Literal["api_key", "oauth", "token"]
    email: Optional[str] = None


class AuthSettings(BaseModel):
    """The ``auth`` section: profile metadata and per-provider order hints."""

    model_config = ConfigDict(extra="allow")

    profiles: dict[str, AuthProfileConfig] = Field(default_factory=dict)
    order: dict[str, list[str]] = Field(
        default_factory=dict,
        description="Provider id -> profile ids to try after the provider's stored profiles",
    )


class GatewayConfig(BaseModel):
    """Top-level gateway configuration as seen by keydock.

    A missing config file yields ``GatewayConfig()`` with empty sections.
    """

    model_config = ConfigDict(extra="allow")

    models: ModelsConfig = Field(default_factory=ModelsConfig)
    auth: AuthSettings = Field(default_factory=AuthSettings)
