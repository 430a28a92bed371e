"""
Bifrost Harness CLI

Command-line interface for driving a Bifrost development node: signing and
sending transactions and calling the chain's precompiles.

Commands:
  whoami      - Show the address of a named account
  transfer    - Send value and wait for inclusion
  selectors   - List a precompile's function selectors
  precompile  - Call (read) or send (dispatch) a precompile function
"""

from __future__ import annotations

import logging
from typing import Optional

import click

from .errors import HarnessError
from .precompiles.interfaces import PRECOMPILES, get_precompile
from .theurgy.common import fail, resolve_account


# ============ Constants ============

VERSION = "0.1.0"


# ============ Main CLI Group ============


@click.group(invoke_without_command=True)
@click.version_option(version=VERSION, prog_name="bifrost-harness")
@click.option("--verbose", "-v", is_flag=True, help="Log RPC traffic at DEBUG level")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Bifrost Harness - transactions and precompiles for a Bifrost node."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


# ============ Top-level Commands ============

from .theurgy.transfer import transfer
from .theurgy.precompile import precompile

cli.add_command(transfer)
cli.add_command(precompile)


# ============ Identity ============


@cli.command()
@click.option("--account", "name", default="alith", help="Account name")
def whoami(name: str) -> None:
    """Show the address of a named account."""
    account = resolve_account(name)
    click.echo(f"Address: {account.address}")


# ============ Selectors ============


@cli.command()
@click.argument("precompile_name", metavar="PRECOMPILE", required=False)
def selectors(precompile_name: Optional[str]) -> None:
    """List function selectors of a precompile (or the known precompiles)."""
    if precompile_name is None:
        for p in PRECOMPILES.values():
            click.echo(
                click.style(f"  {p.name:<14}", fg="bright_white", bold=True)
                + click.style(p.address, dim=True)
            )
        return

    try:
        target = get_precompile(precompile_name)
    except HarnessError as exc:
        fail(exc)

    click.secho(f"  {target.name} @ {target.address}", fg="cyan")
    width = max(len(name) for name in target.selectors)
    for name, selector in target.selectors.items():
        click.echo(f"  {name:<{width}}  0x{selector}")


# ============ Entry Points ============


def main() -> None:
    """Bifrost Harness CLI entry point."""
    cli()


if __name__ == "__main__":
    main()
