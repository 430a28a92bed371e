"""
Theurgy Precompile - Read from and dispatch into Bifrost precompiles.

Functions are addressed by name; parameters are hex words (``0x`` optional)
that are left-padded to 32 bytes. Read results are printed raw unless
``--decode`` names the ABI types to decode them as.
"""

from __future__ import annotations

import sys
from typing import Optional

import click
from eth_abi import decode as abi_decode
from eth_abi.exceptions import DecodingError

from ..config import HarnessConfig
from ..errors import HarnessError, ValidationError
from ..pneuma.envelope import InclusionResult
from ..pneuma.tx import TransactionBuilder
from ..precompiles.codec import PrecompileCodec
from ..precompiles.interfaces import get_precompile
from ..sigil.keystore import Keypair
from ..utils import hex_to_bytes
from .common import fail, load_config, open_client, resolve_account, run


def decode_result(raw: str, types: str) -> tuple:
    """
    Decode a raw eth_call result with eth-abi.

    Args:
        raw: 0x-prefixed return data
        types: Comma-separated ABI types, e.g. "uint256,bool"
    """
    type_list = [t.strip() for t in types.split(",") if t.strip()]
    try:
        return abi_decode(type_list, hex_to_bytes(raw))
    except (DecodingError, ValueError, TypeError) as exc:
        raise ValidationError(f"cannot decode result as ({types}): {exc}") from exc


async def _call(
    config: HarnessConfig, precompile: str, name: str, params: tuple[str, ...], sender: str
) -> str:
    async with open_client(config) as rpc:
        codec = PrecompileCodec(get_precompile(precompile), TransactionBuilder(rpc, config))
        return await codec.call(name, *params, sender=sender)


async def _send(
    config: HarnessConfig,
    precompile: str,
    name: str,
    params: tuple[str, ...],
    account: Keypair,
    value: int,
) -> InclusionResult:
    async with open_client(config) as rpc:
        await rpc.ensure_synced()
        codec = PrecompileCodec(get_precompile(precompile), TransactionBuilder(rpc, config))
        return await codec.send(name, *params, account=account, value=value)


@click.group()
def precompile() -> None:
    """Call or dispatch precompile functions."""
    pass


@precompile.command("call")
@click.argument("precompile_name", metavar="PRECOMPILE")
@click.argument("name")
@click.argument("params", nargs=-1)
@click.option("--from", "sender", default="alith", help="Caller account name")
@click.option("--decode", "types", default=None, help="ABI types of the result, e.g. uint256")
@click.option("--rpc-url", default=None, help="Node RPC URL (default: BIFROST_RPC_URL)")
def call_cmd(
    precompile_name: str,
    name: str,
    params: tuple[str, ...],
    sender: str,
    types: Optional[str],
    rpc_url: Optional[str],
) -> None:
    """Read a precompile function with eth_call."""
    config = load_config(rpc_url)
    account = resolve_account(sender)

    raw = run(_call(config, precompile_name, name, params, account.address))

    if types is None:
        click.echo(raw)
        return
    try:
        values = decode_result(raw, types)
    except HarnessError as exc:
        fail(exc)
    for value in values:
        click.echo(value)


@precompile.command("send")
@click.argument("precompile_name", metavar="PRECOMPILE")
@click.argument("name")
@click.argument("params", nargs=-1)
@click.option("--from", "sender", required=True, help="Sending account name")
@click.option("--value", default=0, type=int, help="Value in wei")
@click.option("--rpc-url", default=None, help="Node RPC URL (default: BIFROST_RPC_URL)")
def send_cmd(
    precompile_name: str,
    name: str,
    params: tuple[str, ...],
    sender: str,
    value: int,
    rpc_url: Optional[str],
) -> None:
    """Dispatch a precompile function and wait for inclusion."""
    config = load_config(rpc_url)
    account = resolve_account(sender)

    click.echo(f"=== {precompile_name}.{name} ===")
    click.echo(f"  Sender: {account.address}")
    if params:
        click.echo(f"  Params: {' '.join(params)}")
    click.echo("")

    result = run(_send(config, precompile_name, name, params, account, value))

    if result.status:
        click.secho("SUCCESS: Transaction confirmed!", fg="green")
        click.echo(f"  TX: {result.tx_hash}")
    else:
        click.secho("FAILED: Transaction reverted", fg="red")
        click.echo(f"  TX: {result.tx_hash}")
        sys.exit(1)
