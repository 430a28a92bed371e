"""
Transaction Builder - Validate, sign, and submit Ethereum transactions.

Uses eth-account for signing (RFC 6979 deterministic ECDSA) and the async
NodeRPCClient for nonce/chain-id lookups and submission.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Optional, Union

from ..config import HarnessConfig
from ..errors import RPCTransportError, SigningError, ValidationError
from ..sigil.keystore import load_account
from ..utils import checksum, hex_to_bytes, parse_quantity
from .envelope import (
    AUTO,
    AccessListEntry,
    EnvelopeType,
    InclusionResult,
    Nonce,
    SignedTransaction,
    TransactionRequest,
)
from .rpc import NodeRPCClient

logger = logging.getLogger(__name__)

_STORAGE_KEY_RE = re.compile(r"^0x[0-9a-fA-F]{64}$")

UINT64_MAX = 2**64 - 1
UINT256_MAX = 2**256 - 1

# Nonce is capped at 2**64 - 1 by EIP-2681
_FIELD_MAX = {
    "nonce": UINT64_MAX,
    "gas_limit": UINT64_MAX,
    "gas_price": UINT256_MAX,
    "max_fee_per_gas": UINT256_MAX,
    "max_priority_fee_per_gas": UINT256_MAX,
    "value": UINT256_MAX,
    "chain_id": UINT256_MAX,
}


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def _check_fees(request: TransactionRequest) -> None:
    has_price = request.gas_price is not None
    has_max_fee = request.max_fee_per_gas is not None
    has_priority_fee = request.max_priority_fee_per_gas is not None

    if has_price and (has_max_fee or has_priority_fee):
        raise ValidationError("conflicting fee fields")
    if request.envelope is EnvelopeType.DYNAMIC_FEE:
        if not (has_max_fee and has_priority_fee):
            raise ValidationError("conflicting fee fields")
    elif not has_price:
        raise ValidationError("conflicting fee fields")


def _check_int(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValidationError(f"{name} must be a non-negative integer, got {value!r}")
    if value > _FIELD_MAX[name]:
        raise ValidationError(f"{name} exceeds {_FIELD_MAX[name].bit_length()} bits: {value}")


def _check_required(request: TransactionRequest) -> None:
    for name in ("gas_limit", "value", "nonce"):
        if getattr(request, name) is None:
            raise ValidationError(f"missing field: {name}")
    if request.envelope.is_typed and request.chain_id is None:
        raise ValidationError("missing field: chain_id")

    if request.nonce is not AUTO:
        _check_int("nonce", request.nonce)
    for name in (
        "gas_limit",
        "gas_price",
        "max_fee_per_gas",
        "max_priority_fee_per_gas",
        "value",
        "chain_id",
    ):
        value = getattr(request, name)
        if value is not None:
            _check_int(name, value)

    if request.access_list and not request.envelope.is_typed:
        raise ValidationError("access list requires an AccessList or DynamicFee envelope")
    for entry in request.access_list:
        checksum(entry.address)
        for key in entry.storage_keys:
            if not _STORAGE_KEY_RE.match(key):
                raise ValidationError(f"storage key must be 32 bytes of hex: {key!r}")

    checksum(request.sender)
    if request.to is not None:
        checksum(request.to)


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------

def _signable(request: TransactionRequest, nonce: int) -> dict[str, Any]:
    """Lay out the eth-account transaction dict for the request's envelope."""
    data = request.data
    if isinstance(data, str):
        data = hex_to_bytes(data)

    tx: dict[str, Any] = {
        "nonce": nonce,
        "gas": request.gas_limit,
        "value": request.value,
        "data": data,
    }
    if request.to is not None:
        tx["to"] = checksum(request.to)

    if request.envelope is EnvelopeType.LEGACY:
        tx["gasPrice"] = request.gas_price
        if request.chain_id is not None:
            tx["chainId"] = request.chain_id
        return tx

    tx["type"] = int(request.envelope)
    tx["chainId"] = request.chain_id
    tx["accessList"] = [
        {"address": checksum(entry.address), "storageKeys": list(entry.storage_keys)}
        for entry in request.access_list
    ]
    if request.envelope is EnvelopeType.ACCESS_LIST:
        tx["gasPrice"] = request.gas_price
    else:
        tx["maxFeePerGas"] = request.max_fee_per_gas
        tx["maxPriorityFeePerGas"] = request.max_priority_fee_per_gas
    return tx


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------

def make_request(
    config: HarnessConfig,
    sender: str,
    to: Optional[str] = None,
    data: Union[bytes, str] = b"",
    value: int = 0,
    nonce: Union[int, Nonce] = AUTO,
    gas_limit: Optional[int] = None,
    envelope: Optional[EnvelopeType] = None,
    chain_id: Optional[int] = None,
    access_list: tuple[AccessListEntry, ...] = (),
) -> TransactionRequest:
    """
    Fill a TransactionRequest from the harness transaction template.

    Fee fields are chosen to match the envelope: gas price for Legacy and
    AccessList, the max-fee pair for DynamicFee.
    """
    envelope = config.envelope if envelope is None else envelope
    fees: dict[str, int] = {}
    if envelope is EnvelopeType.DYNAMIC_FEE:
        fees["max_fee_per_gas"] = config.max_fee_per_gas
        fees["max_priority_fee_per_gas"] = config.max_priority_fee_per_gas
    else:
        fees["gas_price"] = config.gas_price

    return TransactionRequest(
        sender=sender,
        to=to,
        nonce=nonce,
        gas_limit=config.gas_limit if gas_limit is None else gas_limit,
        value=value,
        data=data,
        access_list=tuple(access_list),
        chain_id=config.chain_id if chain_id is None else chain_id,
        envelope=envelope,
        **fees,
    )


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------

class TransactionBuilder:
    """
    Build and sign transaction envelopes.

    The node client is only needed to resolve ``AUTO`` nonces, look up the
    chain id for templated requests, and submit.
    """

    def __init__(
        self,
        rpc: Optional[NodeRPCClient] = None,
        config: Optional[HarnessConfig] = None,
    ):
        self.rpc = rpc
        self.config = config or HarnessConfig()

    async def prepare(self, sender: str, **overrides: Any) -> TransactionRequest:
        """
        Build a templated request, fetching the chain id when it isn't configured.

        Args:
            sender: 0x-prefixed sender address
            overrides: Any keyword accepted by ``make_request``

        Returns:
            TransactionRequest ready for ``build``
        """
        if overrides.get("chain_id") is None and self.config.chain_id is None:
            if self.rpc is not None:
                overrides["chain_id"] = await self.rpc.chain_id()
        return make_request(self.config, sender, **overrides)

    async def build(self, request: TransactionRequest, private_key: str) -> SignedTransaction:
        """
        Validate, resolve the nonce, and sign.

        Args:
            request: The logical transaction
            private_key: 0x-prefixed hex private key controlling ``request.sender``

        Returns:
            SignedTransaction (raw envelope + hash)

        Raises:
            ValidationError: Contradictory or missing fields
            SigningError: Bad key, key/sender mismatch, or signer failure
        """
        _check_fees(request)
        _check_required(request)

        account = load_account(private_key)
        if account.address.lower() != request.sender.lower():
            raise SigningError(
                f"private key controls {account.address}, not sender {request.sender}"
            )

        nonce = await self._resolve_nonce(request)
        tx = _signable(request, nonce)

        try:
            signed = account.sign_transaction(tx)
        except (TypeError, ValueError) as exc:
            raise SigningError(f"signing failed: {exc}") from exc

        result = SignedTransaction(
            raw=bytes(signed.raw_transaction),
            hash=bytes(signed.hash),
            sender=account.address,
            nonce=nonce,
            envelope=request.envelope,
        )
        logger.debug(
            f"Built {request.envelope.name} tx {result.hash_hex} "
            f"from {result.sender} nonce={nonce}"
        )
        return result

    async def submit(self, request: TransactionRequest, private_key: str) -> str:
        """
        Build, sign, and send a transaction.

        Returns:
            Transaction hash reported by the node (0x-prefixed hex)
        """
        if self.rpc is None:
            raise ValidationError("no node client to submit through")
        signed = await self.build(request, private_key)
        tx_hash = await self.rpc.send_raw_transaction(signed.raw)
        logger.info(f"Submitted tx {tx_hash} from {signed.sender} nonce={signed.nonce}")
        return tx_hash

    async def send_and_wait(
        self, request: TransactionRequest, private_key: str
    ) -> InclusionResult:
        """Submit and wait for block inclusion using the configured seal mode."""
        tx_hash = await self.submit(request, private_key)
        return await wait_for_inclusion(
            self.rpc,
            tx_hash,
            manual_seal=self.config.manual_seal,
            poll_interval=self.config.poll_interval,
        )

    async def _resolve_nonce(self, request: TransactionRequest) -> int:
        if request.nonce is not AUTO:
            return request.nonce
        if self.rpc is None:
            raise ValidationError("missing field: nonce")
        return await self.rpc.get_transaction_count(request.sender, "pending")


# ---------------------------------------------------------------------------
# Inclusion
# ---------------------------------------------------------------------------

async def wait_for_inclusion(
    rpc: NodeRPCClient,
    tx_hash: str,
    manual_seal: bool = True,
    poll_interval: float = 0.5,
) -> InclusionResult:
    """
    Wait until a submitted transaction is in a block.

    On a manual-seal node a block is sealed first. The receipt's block is then
    fetched by hash to confirm it carries the transaction.

    Args:
        rpc: Node client
        tx_hash: 0x-prefixed transaction hash
        manual_seal: Seal a block via engine_createBlock before polling
        poll_interval: Seconds between receipt polls

    Returns:
        InclusionResult with the execution status from the receipt
    """
    if manual_seal:
        await rpc.create_block()

    receipt = await rpc.wait_for_receipt(tx_hash, poll_interval=poll_interval)
    block_hash = receipt["blockHash"]
    block = await rpc.get_block_by_hash(block_hash)
    if block is None:
        raise RPCTransportError(f"receipt for {tx_hash} points at unknown block {block_hash}")

    included = [h.lower() for h in block.get("transactions", []) if isinstance(h, str)]
    if tx_hash.lower() not in included:
        raise RPCTransportError(f"block {block_hash} does not contain {tx_hash}")

    result = InclusionResult(
        tx_hash=tx_hash,
        status=parse_quantity(receipt.get("status", "0x0")) == 1,
        block_hash=block_hash,
        block_number=parse_quantity(receipt["blockNumber"]),
        receipt=receipt,
    )
    logger.info(
        f"Tx {tx_hash} included in block #{result.block_number} "
        f"({'success' if result.status else 'reverted'})"
    )
    return result
