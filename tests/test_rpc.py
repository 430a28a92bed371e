"""Tests for NodeRPCClient against the fake node and failing transports."""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from bifrost_harness.errors import RpcError, RPCTransportError
from bifrost_harness.pneuma.rpc import NodeRPCClient


def _client(handler) -> NodeRPCClient:
    return NodeRPCClient(
        "http://fake-node:9933",
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


class TestCall:
    @pytest.mark.asyncio
    async def test_payload_shape(self) -> None:
        seen: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(json.loads(request.content))
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": seen[-1]["id"], "result": "0x1"})

        async with _client(handler) as rpc:
            await rpc.call("eth_blockNumber")
            await rpc.call("eth_getBalance", "0xabc", "latest")

        assert seen[0] == {"jsonrpc": "2.0", "method": "eth_blockNumber", "params": [], "id": 1}
        assert seen[1]["params"] == ["0xabc", "latest"]
        assert seen[1]["id"] == 2

    @pytest.mark.asyncio
    async def test_error_object(self, rpc, node) -> None:
        node.errors["eth_chainId"] = {"code": -32000, "message": "boom", "data": "0x01"}
        with pytest.raises(RpcError) as exc_info:
            await rpc.chain_id()
        assert exc_info.value.code == -32000
        assert exc_info.value.data == "0x01"
        assert "RPC Error -32000: boom" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_rpc_error_is_transport_error(self, rpc, node) -> None:
        with pytest.raises(RPCTransportError):
            await rpc.call("no_such_method")

    @pytest.mark.asyncio
    async def test_unreachable(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(RPCTransportError, match="eth_chainId failed"):
            await _client(handler).chain_id()

    @pytest.mark.asyncio
    async def test_http_status(self) -> None:
        with pytest.raises(RPCTransportError):
            await _client(lambda request: httpx.Response(503)).chain_id()

    @pytest.mark.asyncio
    async def test_invalid_json(self) -> None:
        with pytest.raises(RPCTransportError, match="Invalid JSON"):
            await _client(lambda request: httpx.Response(200, content=b"<html>")).chain_id()


class TestHelpers:
    @pytest.mark.asyncio
    async def test_quantities_parsed(self, rpc, node, alith) -> None:
        node.nonces[alith.address.lower()] = 3
        assert await rpc.chain_id() == 49088
        assert await rpc.gas_price() == 1_000_000_000_000
        assert await rpc.get_transaction_count(alith.address) == 3

    @pytest.mark.asyncio
    async def test_ensure_synced(self, rpc, node) -> None:
        await rpc.ensure_synced()
        node.syncing = {"currentBlock": "0x1", "highestBlock": "0x10"}
        assert await rpc.is_syncing() is True
        with pytest.raises(RPCTransportError, match="still synchronizing"):
            await rpc.ensure_synced()

    @pytest.mark.asyncio
    async def test_create_block(self, rpc, node) -> None:
        result = await rpc.create_block()
        latest = await rpc.get_block_by_number()
        assert result["hash"] == latest["hash"]
        assert await rpc.get_block_by_number(1) == latest
        assert await rpc.get_block_by_hash(result["hash"]) == latest

    @pytest.mark.asyncio
    async def test_missing_receipt_is_none(self, rpc) -> None:
        assert await rpc.get_receipt("0x" + "00" * 32) is None
        assert await rpc.get_transaction("0x" + "00" * 32) is None

    @pytest.mark.asyncio
    async def test_wait_for_receipt_polls(self, rpc, node) -> None:
        tx_hash = "0x" + "11" * 32
        polls = 0
        original = node.eth_getTransactionReceipt

        def receipt(h: str):
            nonlocal polls
            polls += 1
            if polls == 3:
                return {"transactionHash": h, "status": "0x1"}
            return original(h)

        node.eth_getTransactionReceipt = receipt
        result = await rpc.wait_for_receipt(tx_hash, poll_interval=0)
        assert result["transactionHash"] == tx_hash
        assert polls == 3

    @pytest.mark.asyncio
    async def test_wait_for_receipt_deadline_is_callers(self, rpc) -> None:
        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(rpc.wait_for_receipt("0x" + "22" * 32, poll_interval=0.01), 0.05)
