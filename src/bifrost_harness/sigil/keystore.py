"""
Key material for the harness.

Accounts are looked up by name through a KeyStore, which callers inject
instead of reaching for a global key table.

- StaticKeyStore: in-memory name -> private key mapping
- EnvKeyStore: <NAME>_PRIVATE_KEY entries from a .env file / the environment
- dev_keystore(): the well-known development controllers of a dev node
"""

from __future__ import annotations

import os
import secrets
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional, Protocol

from dotenv import dotenv_values
from eth_account import Account
from eth_account.signers.local import LocalAccount

from ..errors import SigningError, UnknownAccount

# Development controllers pre-funded in the dev chain spec
DEV_ACCOUNTS: dict[str, str] = {
    "alith": "0x5fb92d6e98884f76de468fa3f6278f8807c48bebc13595d45af5bdc4da702133",
    "baltathar": "0x8075991ce870b93a8870eca0c0f91913d12f47948ca0fd25b49c6fa7cdbeee8b",
    "charleth": "0x0b6e18cafb6ed99687ec547bd28139cafdd2bffe70e6b688025de6b445aa5c5b",
    "dorothy": "0x39539ab1876910bbf3a223d84a29e28f1cb4e2e456503e7e91ed39b2e7223d68",
    "ethan": "0x7dce9bc8babb68fec1409be38c8e1a52650206a7ed90ff956ae8a6d15eeaaef4",
    "faith": "0xb9d2ea9a615f3165812e8d44de0d24da9bbd164b65c4f0573e1ce2c8dbd9c8df",
}


def load_account(private_key: str) -> LocalAccount:
    """
    Parse a private key into an eth-account LocalAccount.

    Raises:
        SigningError: If the key is not a valid secp256k1 private key
    """
    if not isinstance(private_key, str):
        raise SigningError("private key must be a hex string")
    if not private_key.startswith("0x"):
        private_key = "0x" + private_key
    try:
        return Account.from_key(private_key)
    except ValueError as exc:
        raise SigningError(f"invalid private key: {exc}") from exc


@dataclass(frozen=True)
class Keypair:
    name: str
    address: str
    private_key: str = field(repr=False)

    @classmethod
    def from_key(cls, name: str, private_key: str) -> "Keypair":
        account = load_account(private_key)
        return cls(
            name=name,
            address=account.address,
            private_key="0x" + bytes(account.key).hex(),
        )


def generate_keypair(name: str) -> Keypair:
    """Generate a fresh random secp256k1 keypair."""
    return Keypair.from_key(name, "0x" + secrets.token_hex(32))


class KeyStore(Protocol):
    def lookup(self, name: str) -> Keypair: ...


class StaticKeyStore:
    def __init__(self, keys: Mapping[str, str]):
        self._keys = {name.lower(): key for name, key in keys.items()}

    def lookup(self, name: str) -> Keypair:
        try:
            key = self._keys[name.lower()]
        except KeyError:
            raise UnknownAccount(f"no key registered for account '{name}'") from None
        return Keypair.from_key(name.lower(), key)

    def names(self) -> list[str]:
        return sorted(self._keys)


class EnvKeyStore:
    """
    Keys stored as ``<NAME>_PRIVATE_KEY`` in a .env file or the environment.

    The environment wins over the file, so CI can override single accounts.
    """

    def __init__(self, env_path: Optional[Path] = None):
        self.env_path = env_path

    def lookup(self, name: str) -> Keypair:
        var = f"{name.upper()}_PRIVATE_KEY"
        key = os.environ.get(var)
        if not key and self.env_path is not None and self.env_path.exists():
            key = dotenv_values(self.env_path).get(var)
        if not key:
            where = f" or {self.env_path}" if self.env_path else ""
            raise UnknownAccount(f"{var} not found in the environment{where}")
        return Keypair.from_key(name.lower(), key)


class ChainedKeyStore:
    """Try each store in order; the first one that knows the name wins."""

    def __init__(self, *stores: KeyStore):
        self.stores = stores

    def lookup(self, name: str) -> Keypair:
        for store in self.stores:
            try:
                return store.lookup(name)
            except UnknownAccount:
                continue
        raise UnknownAccount(f"no key registered for account '{name}'")


def dev_keystore() -> StaticKeyStore:
    return StaticKeyStore(DEV_ACCOUNTS)
