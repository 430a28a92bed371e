"""
JSON-RPC client for a Bifrost node.

Async JSON-RPC 2.0 over httpx. Every public method is a single
request/response against one endpoint; there is no retry and no internal
deadline beyond the HTTP timeout.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Optional, Union

import httpx

from ..errors import RpcError, RPCTransportError
from ..utils import parse_quantity, quantity

logger = logging.getLogger(__name__)


class NodeRPCClient:
    """
    JSON-RPC client bound to one node endpoint.

    Usage:
        async with NodeRPCClient("http://127.0.0.1:9933") as rpc:
            chain_id = await rpc.chain_id()
    """

    def __init__(
        self,
        url: str,
        timeout: float = 30,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.url = url
        self.timeout = timeout
        self.id_counter = 0
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def __aenter__(self) -> "NodeRPCClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def call(self, method: str, *params: Any) -> Any:
        """
        Make a JSON-RPC call.

        Args:
            method: RPC method name (e.g., "eth_call")
            params: Positional RPC parameters

        Returns:
            Result field from the RPC response

        Raises:
            RPCTransportError: If the endpoint can't be reached or replies garbage
            RpcError: If the node returns an error object
        """
        self.id_counter += 1
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": list(params),
            "id": self.id_counter,
        }

        logger.debug(f"RPC call: {method}({params})")

        try:
            response = await self._client.post(self.url, json=payload)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning(f"RPC request {method} to {self.url} failed: {exc}")
            raise RPCTransportError(f"{method} failed: {exc}") from exc

        try:
            data = response.json()
        except json.JSONDecodeError as exc:
            logger.warning(f"Invalid JSON response: {response.text}")
            raise RPCTransportError(f"Invalid JSON from {self.url}: {exc}") from exc

        if "error" in data:
            logger.warning(f"RPC error: {data['error']}")
            raise RpcError(data["error"])

        return data.get("result")

    # ------------------------------------------------------------------
    # Chain state
    # ------------------------------------------------------------------

    async def chain_id(self) -> int:
        return parse_quantity(await self.call("eth_chainId"))

    async def gas_price(self) -> int:
        return parse_quantity(await self.call("eth_gasPrice"))

    async def get_transaction_count(self, address: str, block: str = "pending") -> int:
        """
        Get the transaction count (next nonce) of an address.

        Args:
            address: 0x-prefixed address
            block: Block tag; "pending" includes unconfirmed transactions

        Returns:
            Transaction count
        """
        return parse_quantity(await self.call("eth_getTransactionCount", address, block))

    async def is_syncing(self) -> bool:
        return (await self.call("eth_syncing")) is not False

    async def ensure_synced(self) -> None:
        """Raise RPCTransportError if the node is still catching up."""
        if await self.is_syncing():
            raise RPCTransportError(f"node at {self.url} is still synchronizing")

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    async def send_raw_transaction(self, raw: Union[bytes, str]) -> str:
        """
        Send a signed raw transaction.

        Args:
            raw: Serialized transaction (bytes or 0x-prefixed hex)

        Returns:
            Transaction hash (0x-prefixed hex)
        """
        if isinstance(raw, bytes):
            raw = "0x" + raw.hex()
        return await self.call("eth_sendRawTransaction", raw)

    async def eth_call(self, tx: dict[str, Any], block: str = "latest") -> str:
        return await self.call("eth_call", tx, block)

    async def get_transaction(self, tx_hash: str) -> Optional[dict]:
        return await self.call("eth_getTransactionByHash", tx_hash)

    async def get_receipt(self, tx_hash: str) -> Optional[dict]:
        return await self.call("eth_getTransactionReceipt", tx_hash)

    async def wait_for_receipt(self, tx_hash: str, poll_interval: float = 0.5) -> dict:
        """
        Poll until the transaction receipt is available.

        There is no deadline here; wrap in ``asyncio.wait_for`` to bound it.
        """
        while True:
            receipt = await self.get_receipt(tx_hash)
            if receipt is not None:
                return receipt
            await asyncio.sleep(poll_interval)

    # ------------------------------------------------------------------
    # Blocks
    # ------------------------------------------------------------------

    async def get_block_by_hash(self, block_hash: str, full: bool = False) -> Optional[dict]:
        return await self.call("eth_getBlockByHash", block_hash, full)

    async def get_block_by_number(
        self, number: Union[int, str] = "latest", full: bool = False
    ) -> Optional[dict]:
        if isinstance(number, int):
            number = quantity(number)
        return await self.call("eth_getBlockByNumber", number, full)

    async def create_block(
        self, finalize: bool = True, parent_hash: Optional[str] = None
    ) -> dict:
        """
        Seal a block on a manual-seal dev node.

        Returns:
            The engine's result dict, including the sealed block ``hash``
        """
        params: list[Any] = [True, finalize]
        if parent_hash is not None:
            params.append(parent_hash)
        result = await self.call("engine_createBlock", *params)
        logger.debug(f"Sealed block {result.get('hash') if result else None}")
        return result
