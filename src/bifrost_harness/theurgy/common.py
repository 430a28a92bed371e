"""
Shared plumbing for CLI commands: configuration, accounts, node sessions.
"""

from __future__ import annotations

import asyncio
import dataclasses
import sys
from typing import Any, Awaitable, NoReturn, Optional

import click

from ..config import HARNESS_ENV, HarnessConfig
from ..errors import HarnessError
from ..pneuma.rpc import NodeRPCClient
from ..sigil.keystore import ChainedKeyStore, EnvKeyStore, Keypair, dev_keystore


def fail(exc: HarnessError) -> NoReturn:
    click.secho(f"ERROR: {exc}", fg="red", err=True)
    sys.exit(exc.exit_code)


def load_config(rpc_url: Optional[str] = None) -> HarnessConfig:
    """Load the harness configuration, applying a --rpc-url override."""
    try:
        config = HarnessConfig.from_env()
    except HarnessError as exc:
        fail(exc)
    if rpc_url:
        config = dataclasses.replace(config, rpc_url=rpc_url)
    return config


def resolve_account(name: str) -> Keypair:
    """Look up a named account: .env / environment first, then dev accounts."""
    keystore = ChainedKeyStore(EnvKeyStore(HARNESS_ENV), dev_keystore())
    try:
        return keystore.lookup(name)
    except HarnessError as exc:
        fail(exc)


def open_client(config: HarnessConfig) -> NodeRPCClient:
    return NodeRPCClient(config.rpc_url, timeout=config.rpc_timeout)


def run(coro: Awaitable[Any]) -> Any:
    """Run a command coroutine, turning harness errors into exit codes."""
    try:
        return asyncio.run(coro)
    except HarnessError as exc:
        fail(exc)
