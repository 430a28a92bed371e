"""
Precompile call encoding and invocation.

Calldata is ``selector || word_0 || word_1 || ...`` where every word is 32
bytes, big-endian, left-padded with zeros. Only fixed-width words are
produced here; dynamic arguments (arrays, bytes) must arrive already
ABI-encoded and are appended verbatim. Responses are returned raw.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from ..config import DISPATCH_GAS, VIEW_CALL_GAS
from ..errors import UnknownSelector, ValidationError
from ..pneuma.envelope import InclusionResult
from ..pneuma.rpc import NodeRPCClient
from ..pneuma.tx import TransactionBuilder
from ..sigil.keystore import Keypair
from ..utils import checksum, is_hex, quantity, strip_0x
from .interfaces import Precompile

logger = logging.getLogger(__name__)

WORD_HEX_LEN = 64
_UINT256_MAX = 2**256 - 1


# ---------------------------------------------------------------------------
# Parameter words
# ---------------------------------------------------------------------------

def encode_word(param: str) -> str:
    """
    Left-pad a hex parameter to a 32-byte word.

    A param longer than one word is taken as pre-encoded ABI data and must
    be a whole number of words.

    Returns:
        Lowercase hex without 0x prefix, a multiple of 64 characters long
    """
    if not isinstance(param, str) or not is_hex(param):
        raise ValidationError(f"parameter must be a hex string, got {param!r}")
    body = strip_0x(param).lower()
    if len(body) <= WORD_HEX_LEN:
        return body.rjust(WORD_HEX_LEN, "0")
    if len(body) % WORD_HEX_LEN:
        raise ValidationError(
            f"pre-encoded parameter is {len(body)} hex chars, not a whole number of words"
        )
    return body


def encode_address(address: str) -> str:
    return strip_0x(checksum(address)).lower().rjust(WORD_HEX_LEN, "0")


def encode_uint(value: int) -> str:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= _UINT256_MAX:
        raise ValidationError(f"uint256 out of range: {value!r}")
    return format(value, "064x")


def encode_bool(value: bool) -> str:
    return encode_uint(1 if value else 0)


def encode_bytes32(value: str) -> str:
    body = strip_0x(value).lower()
    if len(body) != WORD_HEX_LEN or not is_hex(body):
        raise ValidationError(f"bytes32 must be exactly 32 bytes of hex, got {value!r}")
    return body


# ---------------------------------------------------------------------------
# Calldata
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PrecompileCall:
    target: str
    selector: str
    words: tuple[str, ...] = ()

    @classmethod
    def build(
        cls, precompile: Precompile, name: str, params: Sequence[str] = ()
    ) -> "PrecompileCall":
        selector = precompile.selectors[name]
        return cls(
            target=precompile.address,
            selector=selector,
            words=tuple(encode_word(p) for p in params),
        )

    def to_calldata(self) -> str:
        return "0x" + self.selector + "".join(self.words)


def encode_call(table: Mapping[str, str], name: str, params: Sequence[str] = ()) -> str:
    """
    Build calldata for a precompile function.

    Args:
        table: Selector table (name -> 8 hex chars)
        name: Function name, e.g. "min_nomination"
        params: Hex-encoded parameters, each padded to one word

    Returns:
        0x-prefixed calldata; just the selector when there are no params

    Raises:
        UnknownSelector: If ``name`` is not in the table
        ValidationError: If a parameter isn't usable hex
    """
    if name not in table:
        raise UnknownSelector(name, getattr(table, "precompile", None))
    selector = strip_0x(table[name]).lower()
    return "0x" + selector + "".join(encode_word(p) for p in params)


# ---------------------------------------------------------------------------
# Invocation
# ---------------------------------------------------------------------------

async def view_call(
    rpc: NodeRPCClient,
    data: str,
    target: str,
    sender: str,
    gas_price: int,
) -> str:
    """
    Run a zero-value, non-mutating call against a precompile.

    Args:
        rpc: Node client
        data: Calldata from ``encode_call``
        target: Precompile address
        sender: Caller address
        gas_price: Gas price of the call, normally ``HarnessConfig.gas_price``

    Returns:
        The raw hex response; decoding is the caller's job
    """
    tx = {
        "from": checksum(sender),
        "value": "0x0",
        "gas": quantity(VIEW_CALL_GAS),
        "gasPrice": quantity(gas_price),
        "to": checksum(target),
        "data": data,
    }
    logger.debug(f"eth_call {target} data={data[:10]}")
    return await rpc.eth_call(tx)


async def dispatch_call(
    builder: TransactionBuilder,
    data: str,
    target: str,
    sender: str,
    private_key: str,
    value: int = 0,
    gas_limit: int = DISPATCH_GAS,
) -> InclusionResult:
    """
    Send a transaction into a precompile and wait for block inclusion.

    Args:
        builder: Transaction builder bound to the node client
        data: Calldata from ``encode_call``
        target: Precompile address
        sender: Sender address
        private_key: Key controlling ``sender``
        value: Wei attached to the call
        gas_limit: Gas limit of the dispatch transaction

    Returns:
        InclusionResult (tx hash + execution status)
    """
    request = await builder.prepare(
        sender, to=target, data=data, value=value, gas_limit=gas_limit
    )
    return await builder.send_and_wait(request, private_key)


class PrecompileCodec:
    """One precompile bound to a node: encode, read, and dispatch by name."""

    def __init__(self, precompile: Precompile, builder: TransactionBuilder):
        self.precompile = precompile
        self.builder = builder

    @property
    def address(self) -> str:
        return self.precompile.address

    def encode(self, name: str, *params: str) -> str:
        return encode_call(self.precompile.selectors, name, params)

    async def call(self, name: str, *params: str, sender: str) -> str:
        data = self.encode(name, *params)
        if self.builder.rpc is None:
            raise ValidationError("no node client to call through")
        return await view_call(
            self.builder.rpc,
            data,
            self.address,
            sender,
            gas_price=self.builder.config.gas_price,
        )

    async def send(
        self, name: str, *params: str, account: Keypair, value: int = 0
    ) -> InclusionResult:
        data = self.encode(name, *params)
        return await dispatch_call(
            self.builder,
            data,
            self.address,
            account.address,
            account.private_key,
            value=value,
        )
