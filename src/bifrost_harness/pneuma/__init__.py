"""
Pneuma - Transaction layer of the Bifrost harness.

Provides the async JSON-RPC client, transaction envelope types and
decoding, and the transaction builder.

Uses httpx + eth-account + rlp instead of the heavyweight web3.py.
"""
