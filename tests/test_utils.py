"""Unit tests for utils.py functions."""

from __future__ import annotations

import pytest

from bifrost_harness.errors import ValidationError
from bifrost_harness.utils import (
    add_0x,
    checksum,
    hex_to_bytes,
    is_hex,
    keccak256,
    parse_quantity,
    quantity,
    strip_0x,
)


class TestKeccak:
    def test_empty(self) -> None:
        # Keccak-256, not NIST SHA3-256 (a7ffc6f8...)
        assert keccak256(b"").hex() == (
            "c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"
        )


class TestHex:
    def test_prefix_helpers(self) -> None:
        assert strip_0x("0xab") == "ab"
        assert strip_0x("0XAB") == "AB"
        assert strip_0x("ab") == "ab"
        assert add_0x("ab") == "0xab"
        assert add_0x("0xab") == "0xab"

    def test_is_hex(self) -> None:
        assert is_hex("0xdeadBEEF")
        assert is_hex("")
        assert not is_hex("0xg1")

    def test_hex_to_bytes(self) -> None:
        assert hex_to_bytes("0x0102") == b"\x01\x02"
        assert hex_to_bytes("0x102") == b"\x01\x02"
        with pytest.raises(ValidationError):
            hex_to_bytes("0xzz")

    def test_quantities(self) -> None:
        assert quantity(0) == "0x0"
        assert quantity(21_000) == "0x5208"
        assert parse_quantity("0x5208") == 21_000
        assert parse_quantity(7) == 7
        assert parse_quantity(None) is None


class TestChecksum:
    def test_lowercase_input(self) -> None:
        assert checksum("0x3cd0a705a2dc65e5b1e1205896baa2be8a07c6e0") == (
            "0x3Cd0A705a2DC65e5b1E1205896BaA2be8A07c6e0"
        )

    @pytest.mark.parametrize("address", ["0x1234", "3cd0", None, "0x" + "zz" * 20])
    def test_invalid(self, address) -> None:
        with pytest.raises(ValidationError):
            checksum(address)
