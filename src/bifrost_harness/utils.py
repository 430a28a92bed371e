from __future__ import annotations

import re

from eth_hash.auto import keccak
from eth_utils import is_address, to_checksum_address

from .errors import ValidationError

_HEX_RE = re.compile(r"^[0-9a-fA-F]*$")


def keccak256(data: bytes) -> bytes:
    # NOTE: Keccak-256 != SHA3-256 (NIST). Never use hashlib.sha3_256 here.
    return keccak(data)


def strip_0x(value: str) -> str:
    return value[2:] if value[:2] in ("0x", "0X") else value


def add_0x(value: str) -> str:
    return value if value[:2] in ("0x", "0X") else "0x" + value


def is_hex(value: str) -> bool:
    return bool(_HEX_RE.match(strip_0x(value)))


def hex_to_bytes(value: str) -> bytes:
    body = strip_0x(value)
    if not is_hex(body):
        raise ValidationError(f"not a hex string: {value!r}")
    if len(body) % 2:
        body = "0" + body
    return bytes.fromhex(body)


def quantity(value: int) -> str:
    """Render an integer as a JSON-RPC quantity (``0x``-prefixed, no leading zeros)."""
    return hex(value)


def parse_quantity(value: str | int | None) -> int | None:
    if value is None or isinstance(value, int):
        return value
    return int(value, 16)


def checksum(address: str) -> str:
    """Validate an address and return its EIP-55 checksummed form."""
    if not isinstance(address, str) or not is_address(address.lower()):
        raise ValidationError(f"invalid address: {address!r}")
    return to_checksum_address(address)
