"""
Theurgy Transfer - Send value between accounts.

Checks the node is synced, builds a transaction from the harness template,
submits it and waits until it is in a block.
"""

from __future__ import annotations

import sys
from typing import Optional

import click

from ..config import HarnessConfig
from ..pneuma.envelope import AUTO, InclusionResult
from ..pneuma.tx import TransactionBuilder
from ..sigil.keystore import Keypair
from .common import load_config, open_client, resolve_account, run


async def _transfer(
    config: HarnessConfig,
    account: Keypair,
    recipient: str,
    value: int,
    gas: int,
    nonce: Optional[int],
) -> InclusionResult:
    async with open_client(config) as rpc:
        await rpc.ensure_synced()
        builder = TransactionBuilder(rpc, config)
        request = await builder.prepare(
            account.address,
            to=recipient,
            value=value,
            gas_limit=gas,
            nonce=AUTO if nonce is None else nonce,
        )
        return await builder.send_and_wait(request, account.private_key)


@click.command()
@click.option("--from", "sender", required=True, help="Sending account name (e.g. alith)")
@click.option("--to", "recipient", required=True, help="Recipient address")
@click.option("--value", default=0, type=int, help="Amount in wei")
@click.option("--gas", default=21_000, type=int, help="Gas limit")
@click.option("--nonce", default=None, type=int, help="Explicit nonce (default: pending count)")
@click.option("--rpc-url", default=None, help="Node RPC URL (default: BIFROST_RPC_URL)")
def transfer(
    sender: str,
    recipient: str,
    value: int,
    gas: int,
    nonce: Optional[int],
    rpc_url: Optional[str],
) -> None:
    """Transfer value from a named account and wait for inclusion."""
    config = load_config(rpc_url)
    account = resolve_account(sender)

    click.echo("=== Bifrost Transfer ===")
    click.echo(f"  From:  {account.name} ({account.address})")
    click.echo(f"  To:    {recipient}")
    click.echo(f"  Value: {value} wei")
    click.echo(f"  Type:  {config.envelope.name}")
    click.echo("")

    result = run(_transfer(config, account, recipient, value, gas, nonce))

    if result.status:
        click.secho("SUCCESS: Transaction included!", fg="green")
    else:
        click.secho("FAILED: Transaction reverted", fg="red")
    click.echo(f"  TX:    {result.tx_hash}")
    click.echo(f"  Block: #{result.block_number} ({result.block_hash})")
    if not result.status:
        sys.exit(1)
