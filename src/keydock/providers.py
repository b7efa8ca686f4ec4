"""Static per-provider data: id folding, env var table, config lookup, sibling hints.

Everything here is plain data plus small pure lookups. The credential
resolver (:mod:`keydock.auth.resolver`) and the mode classifier
(:mod:`keydock.auth.mode`) consume these tables; neither hard-codes a
provider name.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from typing import Mapping, Optional

from keydock.models import GatewayConfig, ProviderConfig
from keydock.secrets import normalize_optional_secret_input

# --- Provider id normalization ---

PROVIDER_ID_SYNONYMS: dict[str, str] = {
    "z.ai": "zai",
    "z-ai": "zai",
    "opencode-zen": "opencode",
    "qwen": "qwen-portal",
    "kimi-code": "kimi-coding",
    "bedrock": "amazon-bedrock",
    "aws-bedrock": "amazon-bedrock",
    "bytedance": "volcengine",
    "doubao": "volcengine",
}


def normalize_provider_id(provider: str) -> str:
    """Fold a raw provider spelling to its canonical lowercase id."""
    normalized = provider.strip().lower()
    return PROVIDER_ID_SYNONYMS.get(normalized, normalized)


# --- Environment variables ---

PROVIDER_ENV_VARS: dict[str, tuple[str, ...]] = {
    "openai": ("OPENAI_API_KEY",),
    "voyage": ("VOYAGE_API_KEY",),
    "groq": ("GROQ_API_KEY",),
    "deepgram": ("DEEPGRAM_API_KEY",),
    "cerebras": ("CEREBRAS_API_KEY",),
    "xai": ("XAI_API_KEY",),
    "openrouter": ("OPENROUTER_API_KEY",),
    "litellm": ("LITELLM_API_KEY",),
    "vercel-ai-gateway": ("AI_GATEWAY_API_KEY",),
    "moonshot": ("MOONSHOT_API_KEY",),
    "nvidia": ("NVIDIA_API_KEY",),
    "venice": ("VENICE_API_KEY",),
    "mistral": ("MISTRAL_API_KEY",),
    "together": ("TOGETHER_API_KEY",),
    "qianfan": ("QIANFAN_API_KEY",),
    "ollama": ("OLLAMA_API_KEY",),
    "vllm": ("VLLM_API_KEY",),
    "chutes": ("CHUTES_OAUTH_TOKEN", "CHUTES_API_KEY"),
    "zai": ("ZAI_API_KEY", "Z_AI_API_KEY"),
    "opencode": ("OPENCODE_API_KEY", "OPENCODE_ZEN_API_KEY"),
    "qwen-portal": ("QWEN_OAUTH_TOKEN", "QWEN_PORTAL_API_KEY"),
    "volcengine": ("VOLCANO_ENGINE_API_KEY",),
    "volcengine-plan": ("VOLCANO_ENGINE_API_KEY",),
    "byteplus": ("BYTEPLUS_API_KEY",),
    "byteplus-plan": ("BYTEPLUS_API_KEY",),
    "huggingface": ("HUGGINGFACE_HUB_TOKEN", "HF_TOKEN"),
}
"""Provider id -> environment variables in declared priority order."""

OAUTH_ENV_MARKER = "OAUTH_TOKEN"
ENV_SOURCE_PREFIX = "env: "


@dataclass(frozen=True)
class EnvApiKeyResult:
    """A secret found in the environment and the variable it came from."""

    api_key: str = field(repr=False)
    var_name: str

    @property
    def source(self) -> str:
        return f"{ENV_SOURCE_PREFIX}{self.var_name}"

    @property
    def is_oauth(self) -> bool:
        return OAUTH_ENV_MARKER in self.var_name


def env_vars_for_provider(provider: str) -> tuple[str, ...]:
    """Return the declared env var names for *provider* (empty if unknown)."""
    return PROVIDER_ENV_VARS.get(normalize_provider_id(provider), ())


def resolve_env_api_key(
    provider: str, env: Optional[Mapping[str, str]] = None
) -> Optional[EnvApiKeyResult]:
    """Probe the provider's env vars in priority order.

    Empty and whitespace-only values count as unset, so a blank
    ``ZAI_API_KEY`` falls through to ``Z_AI_API_KEY``.

    Args:
        provider: Raw or canonical provider id.
        env: Environment mapping to read. Defaults to ``os.environ``.

    Returns:
        The first non-empty value, or ``None``.
    """
    environ = os.environ if env is None else env
    for var_name in env_vars_for_provider(provider):
        value = normalize_optional_secret_input(environ.get(var_name))
        if value:
            return EnvApiKeyResult(api_key=value, var_name=var_name)
    return None


# --- Static provider config ---


def resolve_provider_config(
    config: Optional[GatewayConfig], provider: str
) -> Optional[tuple[str, ProviderConfig]]:
    """Find the ``models.providers`` entry for *provider*.

    An exact key match wins; otherwise both the requested id and each
    configured key are normalized before comparison.

    Returns:
        ``(config_key, provider_config)`` or ``None``.
    """
    if config is None:
        return None
    providers = config.models.providers
    direct = providers.get(provider)
    if direct is not None:
        return provider, direct
    normalized = normalize_provider_id(provider)
    if normalized in providers:
        return normalized, providers[normalized]
    for key, entry in providers.items():
        if normalize_provider_id(key) == normalized:
            return key, entry
    return None


def get_custom_provider_api_key(
    config: Optional[GatewayConfig], provider: str
) -> Optional[str]:
    """Return the normalized static ``api_key`` configured for *provider*."""
    match = resolve_provider_config(config, provider)
    if match is None:
        return None
    return normalize_optional_secret_input(match[1].api_key)


# --- Sibling guidance ---


@dataclass(frozen=True)
class SiblingGuidance:
    """Points a provider without credentials at a sibling holding an OAuth login."""

    sibling: str
    message: str


PROVIDER_SIBLING_GUIDANCE: dict[str, SiblingGuidance] = {
    "openai": SiblingGuidance(
        sibling="openai-codex",
        message=(
            'No API key found for provider "openai". You are authenticated with '
            "OpenAI Codex OAuth. Use openai-codex/gpt-5.3-codex (OAuth) or set "
            "OPENAI_API_KEY to use openai/gpt-5.1-codex."
        ),
    ),
}


# --- Token profile ids ---

DEFAULT_TOKEN_PROFILE_NAME = "default"

_SLUG_INVALID = re.compile(r"[^a-z0-9._-]+")
_SLUG_DASHES = re.compile(r"-+")


def normalize_token_profile_name(raw: str) -> str:
    """Slugify a user-supplied profile name; blank input becomes ``default``."""
    trimmed = raw.strip()
    if not trimmed:
        return DEFAULT_TOKEN_PROFILE_NAME
    slug = _SLUG_INVALID.sub("-", trimmed.lower())
    slug = _SLUG_DASHES.sub("-", slug).strip("-")
    return slug or DEFAULT_TOKEN_PROFILE_NAME


def build_token_profile_id(provider: str, name: str) -> str:
    """Build a ``<provider>:<name>`` profile id from raw input."""
    return f"{normalize_provider_id(provider)}:{normalize_token_profile_name(name)}"
