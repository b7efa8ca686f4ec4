"""Normalization and masking for raw secret input.

Secrets arrive from environment variables, JSON files and interactive
prompts, and frequently carry stray whitespace or a pasted line break.
Every resolution path funnels raw values through
:func:`normalize_optional_secret_input` so that an empty or
whitespace-only value is treated exactly like a missing one.
"""

from __future__ import annotations

import re
from typing import Any, Optional

_LINE_BREAKS = re.compile(r"[\r\n\u2028\u2029]+")
_MASK = "********"


def normalize_secret_input(value: Any) -> str:
    """Strip line breaks and surrounding whitespace from a raw secret.

    ``None`` becomes the empty string; any other value is converted with
    :class:`str` first.

    Args:
        value: The raw input.

    Returns:
        The cleaned secret, possibly empty.
    """
    if value is None:
        return ""
    return _LINE_BREAKS.sub("", str(value)).strip()


def normalize_optional_secret_input(value: Any) -> Optional[str]:
    """Like :func:`normalize_secret_input` but return ``None`` for empty results."""
    normalized = normalize_secret_input(value)
    return normalized or None


def mask_secret(value: Optional[str]) -> str:
    """Return a display-safe rendering of *value*.

    Long secrets keep their first and last four characters so users can
    tell keys apart; anything shorter than 16 characters is fully masked.
    """
    if not value:
        return ""
    if len(value) < 16:
        return _MASK
    return f"{value[:4]}…{value[-4:]}"
