"""Candidate profile ordering for a provider.

:func:`resolve_auth_profile_order` is a pure function of its arguments:
the same store snapshot, config and hints always give the same list, so a
resolution outcome can be reproduced from its inputs.
"""

from __future__ import annotations

from typing import Iterable, Optional

from keydock.auth.profile_store import AuthProfileStore
from keydock.models import GatewayConfig
from keydock.providers import normalize_provider_id


def dedupe_profile_ids(profile_ids: Iterable[str]) -> list[str]:
    """Drop repeated ids, keeping each one at its first position."""
    seen: set[str] = set()
    result: list[str] = []
    for profile_id in profile_ids:
        if profile_id in seen:
            continue
        seen.add(profile_id)
        result.append(profile_id)
    return result


def configured_profile_order(config: Optional[GatewayConfig], provider: str) -> list[str]:
    """Return the ``auth.order`` hints for *provider* (keys compared normalized)."""
    if config is None:
        return []
    normalized = normalize_provider_id(provider)
    hints: list[str] = []
    for key, profile_ids in config.auth.order.items():
        if normalize_provider_id(key) == normalized:
            hints.extend(pid.strip() for pid in profile_ids if pid.strip())
    return hints


def resolve_auth_profile_order(
    provider: str,
    store: AuthProfileStore,
    config: Optional[GatewayConfig] = None,
    *,
    explicit_profile_id: Optional[str] = None,
    preferred_profile: Optional[str] = None,
) -> list[str]:
    """Build the ordered candidate list of profile ids for *provider*.

    An explicit profile id is the whole answer: explicit requests never
    fall back. Otherwise the candidates are, in priority order:

    1. *preferred_profile*, when the store holds it for this provider.
    2. The provider's stored profiles, in store order.
    3. The configured ``auth.order`` hints for the provider.

    Later duplicates are dropped.

    Args:
        provider: Raw or canonical provider id.
        store: Snapshot of the auth profile store.
        config: Gateway config supplying order hints.
        explicit_profile_id: A profile the caller insists on.
        preferred_profile: A profile to try first if it belongs to *provider*.

    Returns:
        Candidate profile ids, without duplicates.
    """
    if explicit_profile_id:
        return [explicit_profile_id]

    stored = store.list_profiles_for_provider(provider)
    candidates: list[str] = []
    if preferred_profile and preferred_profile in stored:
        candidates.append(preferred_profile)
    candidates.extend(stored)
    candidates.extend(configured_profile_order(config, provider))
    return dedupe_profile_ids(candidates)
