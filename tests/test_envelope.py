"""Tests for raw envelope decoding and the request/result types."""

from __future__ import annotations

import pytest
import rlp

from bifrost_harness.errors import ValidationError
from bifrost_harness.pneuma.envelope import (
    AUTO,
    EnvelopeType,
    Nonce,
    SignedTransaction,
    TransactionRequest,
    decode_transaction,
)


class TestEnvelopeType:
    def test_values_match_type_bytes(self) -> None:
        assert int(EnvelopeType.LEGACY) == 0
        assert int(EnvelopeType.ACCESS_LIST) == 1
        assert int(EnvelopeType.DYNAMIC_FEE) == 2

    def test_is_typed(self) -> None:
        assert not EnvelopeType.LEGACY.is_typed
        assert EnvelopeType.ACCESS_LIST.is_typed
        assert EnvelopeType.DYNAMIC_FEE.is_typed


class TestNonceSentinel:
    """AUTO is explicit; None means the nonce is missing."""

    def test_auto_is_singleton(self) -> None:
        assert AUTO is Nonce.AUTO
        assert repr(AUTO) == "AUTO"

    def test_request_defaults_to_missing(self) -> None:
        request = TransactionRequest(sender="0xf24FF3a9CF04c71Dbc94D0b566f7A27B94566cac")
        assert request.nonce is None
        assert request.envelope is EnvelopeType.LEGACY
        assert request.data == b""


class TestSignedTransaction:
    def test_hex_views(self) -> None:
        signed = SignedTransaction(
            raw=b"\x02\xc0",
            hash=b"\xab" * 32,
            sender="0xf24FF3a9CF04c71Dbc94D0b566f7A27B94566cac",
            nonce=0,
            envelope=EnvelopeType.DYNAMIC_FEE,
        )
        assert signed.raw_hex == "0x02c0"
        assert signed.hash_hex == "0x" + "ab" * 32


class TestDecodeErrors:
    """Malformed payloads raise ValidationError."""

    def test_empty(self) -> None:
        with pytest.raises(ValidationError, match="empty"):
            decode_transaction(b"")

    def test_unknown_type_byte(self) -> None:
        with pytest.raises(ValidationError, match="0x03"):
            decode_transaction(b"\x03" + rlp.encode([]))

    def test_truncated_payload(self) -> None:
        with pytest.raises(ValidationError, match="malformed"):
            decode_transaction(b"\x02\xf8")

    def test_wrong_field_count(self) -> None:
        payload = b"\x01" + rlp.encode([b"\x01"] * 5)
        with pytest.raises(ValidationError, match="11 fields"):
            decode_transaction(payload)

    def test_unsigned_legacy(self) -> None:
        fields = [b"", b"\x01", b"\x52\x08", b"\x11" * 20, b"", b"", b"", b"", b""]
        with pytest.raises(ValidationError):
            decode_transaction(rlp.encode(fields))

    def test_hex_string_input(self) -> None:
        with pytest.raises(ValidationError, match="empty"):
            decode_transaction("0x")

    @pytest.mark.parametrize("raw", ["0xzz", "0x123", "0X02c0", "02c0"])
    def test_bad_hex_strings(self, raw: str) -> None:
        with pytest.raises(ValidationError):
            decode_transaction(raw)

    def test_nested_list_in_scalar_field(self) -> None:
        fields = [[b"\x01"]] + [b""] * 8
        with pytest.raises(ValidationError, match="field 0 must be a byte string"):
            decode_transaction(rlp.encode(fields))

    @pytest.mark.parametrize(
        "access_list",
        [
            b"\x01",
            [[b"\x11" * 20]],
            [[b"\x11" * 20, b"\x00" * 32]],
            [[[b"\x11"], []]],
            [[b"\x11" * 20, [b"\x01"]]],
            [[b"\x11" * 19, []]],
        ],
    )
    def test_malformed_access_list(self, access_list) -> None:
        fields = [b"\x01", b"", b"\x01", b"\x52\x08", b"\x11" * 20, b"", b"", access_list, b"", b"\x01", b"\x01"]
        with pytest.raises(ValidationError):
            decode_transaction(b"\x01" + rlp.encode(fields))
