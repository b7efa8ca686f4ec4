"""Foundational types for provider credential resolution.

This module defines the vocabulary shared by the resolver, the mode
classifier and the usage-auth helpers:

- :class:`AuthMode` -- the semantic label describing how a provider
  authenticates.
- :class:`ResolvedProviderAuth` -- the ephemeral result of a successful
  resolution. It is recomputed on every call so key rotation is picked up
  immediately, and its secret never appears in ``repr``.
- :class:`ResolutionStrategy` / :class:`ResolutionRequest` -- one step of
  the ordered fallback chain and the inputs it sees.
- :func:`attempt` -- the "try; on failure record and continue" combinator
  that isolates per-candidate failures.

See Also:
    :mod:`keydock.auth.resolver` for the strategy chain itself.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Callable, Mapping, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from keydock.models import GatewayConfig

if TYPE_CHECKING:
    from keydock.auth.profile_store import AuthProfileStore, OAuthRefresher

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AuthMode(str, Enum):
    """How a provider is authenticated.

    ``MIXED`` and ``UNKNOWN`` only come out of the mode classifier; a
    resolved credential is always ``API_KEY``, ``OAUTH`` or ``TOKEN``.
    """

    API_KEY = "api-key"
    OAUTH = "oauth"
    TOKEN = "token"
    MIXED = "mixed"
    UNKNOWN = "unknown"


class ResolvedProviderAuth(BaseModel):
    """A secret ready for one outbound call, plus where it came from.

    Attributes:
        api_key: The secret. Excluded from ``repr``.
        profile_id: The stored profile that supplied it, if any.
        source: Descriptor such as ``profile:openai:default``,
            ``env: OPENAI_API_KEY`` or ``config: models.providers.openai``.
        mode: How the secret authenticates.
    """

    model_config = ConfigDict(frozen=True)

    api_key: str = Field(repr=False)
    profile_id: Optional[str] = None
    source: str
    mode: AuthMode


@dataclass(frozen=True)
class AttemptFailure:
    """A swallowed failure recorded while walking the candidate chain."""

    label: str
    error_type: str


def attempt(
    fn: Callable[[], T], *, label: str, failures: list[AttemptFailure]
) -> Optional[T]:
    """Run *fn*; on any exception record it in *failures* and return ``None``.

    Only the exception class name is kept and logged. Backend messages can
    echo request material, so their text is never surfaced.
    """
    try:
        return fn()
    except Exception as exc:
        failures.append(AttemptFailure(label=label, error_type=type(exc).__name__))
        logger.debug("Skipping %s after %s", label, type(exc).__name__)
        return None


@dataclass
class ResolutionRequest:
    """Inputs shared by every strategy during one resolution.

    Attributes:
        provider: The requested provider id, as given by the caller.
        order: Candidate profile ids, already built and deduplicated.
        store: Snapshot of the auth profile store.
        config: Gateway configuration, if any.
        env: Environment mapping; ``None`` means ``os.environ``.
        refresher: Optional callable that refreshes expired OAuth logins.
        failures: Filled by strategies with isolated per-candidate failures.
    """

    provider: str
    order: list[str]
    store: "AuthProfileStore"
    config: Optional[GatewayConfig] = None
    env: Optional[Mapping[str, str]] = None
    refresher: Optional["OAuthRefresher"] = None
    failures: list[AttemptFailure] = field(default_factory=list)


class ResolutionStrategy(ABC):
    """One step of the ordered fallback chain.

    Strategies return ``None`` to pass control to the next one. They raise
    only for conditions that must end the whole resolution.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Short identifier used in debug logs (e.g. ``"env"``)."""
        ...

    @abstractmethod
    def resolve(self, request: ResolutionRequest) -> Optional[ResolvedProviderAuth]:
        """Return a resolved credential, or ``None`` to fall through."""
        ...
