"""Tests for keydock.secrets -- secret normalization and masking."""

from __future__ import annotations

import pytest

from keydock.secrets import mask_secret, normalize_optional_secret_input, normalize_secret_input


class TestNormalizeSecretInput:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("  sk-live-1  ", "sk-live-1"),
            ("sk-live-1\n", "sk-live-1"),
            ("sk-li\r\nve-1", "sk-live-1"),
            ("sk-live -1", "sk-live-1"),
            (None, ""),
            ("", ""),
            ("   ", ""),
        ],
    )
    def test_normalizes(self, raw, expected) -> None:
        assert normalize_secret_input(raw) == expected

    def test_non_string_is_stringified(self) -> None:
        assert normalize_secret_input(12345) == "12345"


class TestNormalizeOptionalSecretInput:
    def test_blank_is_none(self) -> None:
        assert normalize_optional_secret_input("  \n ") is None
        assert normalize_optional_secret_input(None) is None

    def test_value_is_kept(self) -> None:
        assert normalize_optional_secret_input(" abc ") == "abc"


class TestMaskSecret:
    def test_empty(self) -> None:
        assert mask_secret("") == ""
        assert mask_secret(None) == ""

    def test_short_secret_fully_masked(self) -> None:
        masked = mask_secret("sk-short")
        assert masked == "********"
        assert "short" not in masked

    def test_long_secret_keeps_edges(self) -> None:
        secret = "sk-abcdefghijklmnop-wxyz"
        masked = mask_secret(secret)
        assert masked.startswith("sk-a")
        assert masked.endswith("wxyz")
        assert "ghijkl" not in masked
