"""
Transaction envelopes - request/result types and raw envelope decoding.

Three envelope formats are supported:

- Legacy (untyped): rlp([nonce, gasPrice, gas, to, value, data, v, r, s])
- AccessList (EIP-2930): 0x01 || rlp([chainId, nonce, gasPrice, gas, to,
  value, data, accessList, yParity, r, s])
- DynamicFee (EIP-1559): 0x02 || rlp([chainId, nonce, maxPriorityFeePerGas,
  maxFeePerGas, gas, to, value, data, accessList, yParity, r, s])
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Optional, Union

import rlp
from eth_account import Account

from ..errors import ValidationError
from ..utils import checksum, hex_to_bytes, keccak256


class EnvelopeType(enum.IntEnum):
    LEGACY = 0
    ACCESS_LIST = 1
    DYNAMIC_FEE = 2

    @property
    def is_typed(self) -> bool:
        return self is not EnvelopeType.LEGACY


class Nonce(enum.Enum):
    """Nonce placeholder resolved against the node's pending transaction count."""

    AUTO = "auto"

    def __repr__(self) -> str:
        return "AUTO"


AUTO = Nonce.AUTO


@dataclass(frozen=True)
class AccessListEntry:
    address: str
    storage_keys: tuple[str, ...] = ()


@dataclass(frozen=True)
class TransactionRequest:
    """
    A logical transaction, consumed once by TransactionBuilder.

    Fee fields are mutually exclusive: Legacy and AccessList envelopes take
    ``gas_price``; DynamicFee takes ``max_fee_per_gas`` and
    ``max_priority_fee_per_gas``. ``nonce`` is either an integer or ``AUTO``;
    ``None`` means the caller forgot it.
    """

    sender: str
    to: Optional[str] = None
    nonce: Union[int, Nonce, None] = None
    gas_limit: Optional[int] = None
    gas_price: Optional[int] = None
    max_fee_per_gas: Optional[int] = None
    max_priority_fee_per_gas: Optional[int] = None
    value: Optional[int] = None
    data: Union[bytes, str] = b""
    access_list: tuple[AccessListEntry, ...] = field(default_factory=tuple)
    chain_id: Optional[int] = None
    envelope: EnvelopeType = EnvelopeType.LEGACY


@dataclass(frozen=True)
class SignedTransaction:
    raw: bytes
    hash: bytes
    sender: str
    nonce: int
    envelope: EnvelopeType

    @property
    def raw_hex(self) -> str:
        return "0x" + self.raw.hex()

    @property
    def hash_hex(self) -> str:
        return "0x" + self.hash.hex()


@dataclass(frozen=True)
class InclusionResult:
    tx_hash: str
    status: bool
    block_hash: str
    block_number: int
    receipt: dict = field(repr=False, compare=False)


@dataclass(frozen=True)
class DecodedTransaction:
    envelope: EnvelopeType
    chain_id: Optional[int]
    nonce: int
    gas_limit: int
    gas_price: Optional[int]
    max_fee_per_gas: Optional[int]
    max_priority_fee_per_gas: Optional[int]
    to: Optional[str]
    value: int
    data: bytes
    access_list: tuple[AccessListEntry, ...]
    v: int
    r: int
    s: int
    sender: str
    hash: bytes


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------

_FIELD_COUNT = {
    EnvelopeType.LEGACY: 9,
    EnvelopeType.ACCESS_LIST: 11,
    EnvelopeType.DYNAMIC_FEE: 12,
}


def _int(item: bytes) -> int:
    return int.from_bytes(item, "big")


def _address(item: bytes) -> Optional[str]:
    if item == b"":
        return None
    if len(item) != 20:
        raise ValidationError(f"address field has {len(item)} bytes, expected 20")
    return checksum("0x" + item.hex())


def _access_list(items: list) -> tuple[AccessListEntry, ...]:
    if not isinstance(items, list):
        raise ValidationError("access list must be an rlp list")
    entries = []
    for item in items:
        if not isinstance(item, list) or len(item) != 2 or not isinstance(item[1], list):
            raise ValidationError("access list entry must be [address, [storage keys]]")
        address, keys = item
        if not isinstance(address, bytes) or not all(
            isinstance(key, bytes) and len(key) == 32 for key in keys
        ):
            raise ValidationError("access list entry holds malformed address or storage key")
        entries.append(
            AccessListEntry(
                address=_address(address),
                storage_keys=tuple("0x" + key.hex() for key in keys),
            )
        )
    return tuple(entries)


def decode_transaction(raw: Union[bytes, str]) -> DecodedTransaction:
    """
    Decode a signed raw transaction and recover its sender.

    Args:
        raw: Serialized envelope (bytes or 0x-prefixed hex)

    Returns:
        DecodedTransaction with every field of the envelope

    Raises:
        ValidationError: If the payload is not a well-formed signed envelope
    """
    if isinstance(raw, str):
        raw = hex_to_bytes(raw)
    if not raw:
        raise ValidationError("empty transaction payload")

    if raw[0] >= 0xC0:
        envelope, payload = EnvelopeType.LEGACY, raw
    elif raw[0] in (EnvelopeType.ACCESS_LIST, EnvelopeType.DYNAMIC_FEE):
        envelope, payload = EnvelopeType(raw[0]), raw[1:]
    else:
        raise ValidationError(f"unsupported transaction type byte 0x{raw[0]:02x}")

    try:
        fields = rlp.decode(payload)
    except rlp.DecodingError as exc:
        raise ValidationError(f"malformed transaction payload: {exc}") from exc

    if not isinstance(fields, list) or len(fields) != _FIELD_COUNT[envelope]:
        raise ValidationError(
            f"{envelope.name} envelope must have {_FIELD_COUNT[envelope]} fields"
        )
    acl_index = None if envelope is EnvelopeType.LEGACY else len(fields) - 4
    for index, item in enumerate(fields):
        if index != acl_index and not isinstance(item, bytes):
            raise ValidationError(f"{envelope.name} field {index} must be a byte string")
    access_list = () if acl_index is None else _access_list(fields[acl_index])

    try:
        sender = Account.recover_transaction(raw)
    except Exception as exc:
        raise ValidationError(f"cannot recover sender: {exc}") from exc

    gas_price = max_fee = max_priority_fee = None
    if envelope is EnvelopeType.LEGACY:
        nonce, gas_price, gas, to, value, data, v, r, s = fields
        v = _int(v)
        chain_id = None if v in (27, 28) else (v - 35) // 2
    else:
        if envelope is EnvelopeType.ACCESS_LIST:
            chain_id, nonce, gas_price, gas, to, value, data, _acl, v, r, s = fields
        else:
            (chain_id, nonce, max_priority_fee, max_fee, gas, to, value, data,
             _acl, v, r, s) = fields
            max_priority_fee, max_fee = _int(max_priority_fee), _int(max_fee)
        chain_id = _int(chain_id)
        v = _int(v)

    return DecodedTransaction(
        envelope=envelope,
        chain_id=chain_id,
        nonce=_int(nonce),
        gas_limit=_int(gas),
        gas_price=_int(gas_price) if gas_price is not None else None,
        max_fee_per_gas=max_fee,
        max_priority_fee_per_gas=max_priority_fee,
        to=_address(to),
        value=_int(value),
        data=bytes(data),
        access_list=access_list,
        v=v,
        r=_int(r),
        s=_int(s),
        sender=sender,
        hash=keccak256(raw),
    )
