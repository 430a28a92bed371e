"""
Shared fixtures: an in-process fake Bifrost node behind httpx.MockTransport.

The fake node keeps just enough state for the harness: per-sender nonces,
a pending pool, manually sealed blocks and receipts. Every JSON-RPC method
it receives is recorded in ``FakeNode.calls`` so tests can assert that an
operation made no network traffic at all.
"""

from __future__ import annotations

import json
from typing import Any, Optional

import httpx
import pytest

from bifrost_harness.pneuma.envelope import decode_transaction
from bifrost_harness.pneuma.rpc import NodeRPCClient
from bifrost_harness.sigil.keystore import Keypair, dev_keystore
from bifrost_harness.utils import keccak256

DEV_CHAIN_ID = 49088  # 0xbfc0
FAKE_URL = "http://fake-node:9933"


class FakeNode:
    def __init__(self, chain_id: int = DEV_CHAIN_ID, auto_seal: bool = False):
        self.chain_id = chain_id
        self.auto_seal = auto_seal
        self.syncing: Any = False
        self.calls: list[str] = []
        self.nonces: dict[str, int] = {}
        self.transactions: dict[str, dict] = {}
        self.pending: list[str] = []
        self.blocks: dict[str, dict] = {}
        self.block_numbers: list[str] = []
        self.receipts: dict[str, dict] = {}
        self.reverts: set[str] = set()
        self.call_results: dict[str, str] = {}
        self.eth_calls: list[dict] = []
        self.errors: dict[str, dict] = {}

    # -- transport ---------------------------------------------------------

    def handler(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        method, params = body["method"], body["params"]
        self.calls.append(method)

        reply: dict[str, Any] = {"jsonrpc": "2.0", "id": body["id"]}
        if method in self.errors:
            reply["error"] = self.errors[method]
            return httpx.Response(200, json=reply)

        handler = getattr(self, method, None)
        if handler is None:
            reply["error"] = {"code": -32601, "message": "Method not found"}
            return httpx.Response(200, json=reply)
        try:
            reply["result"] = handler(*params)
        except ValueError as exc:
            reply["error"] = {"code": -32603, "message": str(exc)}
        return httpx.Response(200, json=reply)

    def count(self, method: str) -> int:
        return self.calls.count(method)

    # -- eth namespace -----------------------------------------------------

    def eth_chainId(self) -> str:
        return hex(self.chain_id)

    def eth_gasPrice(self) -> str:
        return hex(1_000_000_000_000)

    def eth_syncing(self) -> Any:
        return self.syncing

    def eth_getTransactionCount(self, address: str, block: str) -> str:
        return hex(self.nonces.get(address.lower(), 0))

    def eth_sendRawTransaction(self, raw: str) -> str:
        tx = decode_transaction(raw)
        expected = self.nonces.get(tx.sender.lower(), 0)
        if tx.nonce != expected:
            raise ValueError(f"invalid nonce {tx.nonce}, expected {expected}")
        if tx.chain_id is not None and tx.chain_id != self.chain_id:
            raise ValueError("invalid chain id")

        tx_hash = "0x" + tx.hash.hex()
        self.nonces[tx.sender.lower()] = expected + 1
        self.transactions[tx_hash] = {
            "hash": tx_hash,
            "from": tx.sender,
            "to": tx.to,
            "nonce": hex(tx.nonce),
            "gas": hex(tx.gas_limit),
            "value": hex(tx.value),
            "input": "0x" + tx.data.hex(),
            "type": hex(int(tx.envelope)),
            "chainId": hex(tx.chain_id) if tx.chain_id is not None else None,
            "blockHash": None,
        }
        self.pending.append(tx_hash)
        if self.auto_seal:
            self.seal()
        return tx_hash

    def eth_getTransactionByHash(self, tx_hash: str) -> Optional[dict]:
        return self.transactions.get(tx_hash)

    def eth_getTransactionReceipt(self, tx_hash: str) -> Optional[dict]:
        return self.receipts.get(tx_hash)

    def eth_getBlockByHash(self, block_hash: str, full: bool) -> Optional[dict]:
        return self.blocks.get(block_hash)

    def eth_getBlockByNumber(self, number: str, full: bool) -> Optional[dict]:
        if not self.block_numbers:
            return None
        if number == "latest":
            return self.blocks[self.block_numbers[-1]]
        index = int(number, 16) - 1
        if 0 <= index < len(self.block_numbers):
            return self.blocks[self.block_numbers[index]]
        return None

    def eth_call(self, tx: dict, block: str) -> str:
        self.eth_calls.append(tx)
        return self.call_results.get(tx["data"][:10], "0x")

    # -- engine namespace --------------------------------------------------

    def engine_createBlock(
        self, create_empty: bool, finalize: bool, parent_hash: Optional[str] = None
    ) -> dict:
        return {"hash": self.seal(), "aux": {"size": 0}, "proof_size": 0}

    def seal(self) -> str:
        number = len(self.block_numbers) + 1
        block_hash = "0x" + keccak256(number.to_bytes(8, "big")).hex()
        self.blocks[block_hash] = {
            "hash": block_hash,
            "number": hex(number),
            "transactions": list(self.pending),
        }
        self.block_numbers.append(block_hash)
        for tx_hash in self.pending:
            self.transactions[tx_hash]["blockHash"] = block_hash
            self.receipts[tx_hash] = {
                "transactionHash": tx_hash,
                "blockHash": block_hash,
                "blockNumber": hex(number),
                "status": "0x0" if tx_hash in self.reverts else "0x1",
            }
        self.pending = []
        return block_hash


@pytest.fixture()
def node() -> FakeNode:
    return FakeNode()


@pytest.fixture()
def rpc(node: FakeNode) -> NodeRPCClient:
    client = httpx.AsyncClient(transport=httpx.MockTransport(node.handler))
    return NodeRPCClient(FAKE_URL, client=client)


@pytest.fixture()
def alith() -> Keypair:
    return dev_keystore().lookup("alith")


@pytest.fixture()
def baltathar() -> Keypair:
    return dev_keystore().lookup("baltathar")
