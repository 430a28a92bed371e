"""
Harness configuration.

Values are read from ``~/.bifrost-harness/.env`` (if present) and then from
the process environment, which takes precedence.

Variables:
    BIFROST_RPC_URL        JSON-RPC endpoint of the node under test
    BIFROST_RPC_TIMEOUT    HTTP timeout in seconds
    ETH_TRANSACTION_TYPE   Legacy | EIP2930 | EIP1559
    BIFROST_MANUAL_SEAL    seal a block after each dispatched transaction
    RECEIPT_POLL_INTERVAL  seconds between receipt polls
    BIFROST_CHAIN_ID       chain id; fetched from the node when unset
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import dotenv_values

from .errors import ValidationError
from .pneuma.envelope import EnvelopeType

HARNESS_DIR = Path.home() / ".bifrost-harness"
HARNESS_ENV = HARNESS_DIR / ".env"

DEFAULT_RPC_URL = "http://127.0.0.1:9933"

# Transaction template used by the harness when the caller leaves a field open
DEFAULT_GAS_LIMIT = 12_000_000
DEFAULT_GAS_PRICE = 1_000_000_000_000
DEFAULT_MAX_FEE_PER_GAS = 1_000_000_000_000
DEFAULT_MAX_PRIORITY_FEE_PER_GAS = 0

# Precompile call gas
VIEW_CALL_GAS = 0x10000
DISPATCH_GAS = 0x200000

_ENVELOPE_NAMES = {
    "legacy": EnvelopeType.LEGACY,
    "eip2930": EnvelopeType.ACCESS_LIST,
    "accesslist": EnvelopeType.ACCESS_LIST,
    "eip1559": EnvelopeType.DYNAMIC_FEE,
    "dynamicfee": EnvelopeType.DYNAMIC_FEE,
}

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def parse_envelope(name: str) -> EnvelopeType:
    key = name.strip().replace("-", "").replace("_", "").lower()
    try:
        return _ENVELOPE_NAMES[key]
    except KeyError:
        raise ValidationError(
            f"Unknown transaction type '{name}'. Use Legacy, EIP2930 or EIP1559."
        ) from None


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ValidationError(f"{name} must be a boolean, got {value!r}")


def _parse_number(name: str, value: str, kind: type) -> float | int:
    try:
        parsed = kind(value)
    except ValueError:
        raise ValidationError(f"{name} must be a {kind.__name__}, got {value!r}") from None
    if parsed < 0:
        raise ValidationError(f"{name} must not be negative")
    return parsed


@dataclass(frozen=True)
class HarnessConfig:
    rpc_url: str = DEFAULT_RPC_URL
    rpc_timeout: float = 30.0
    envelope: EnvelopeType = EnvelopeType.LEGACY
    manual_seal: bool = True
    poll_interval: float = 0.5
    chain_id: Optional[int] = None
    gas_limit: int = DEFAULT_GAS_LIMIT
    gas_price: int = DEFAULT_GAS_PRICE
    max_fee_per_gas: int = DEFAULT_MAX_FEE_PER_GAS
    max_priority_fee_per_gas: int = DEFAULT_MAX_PRIORITY_FEE_PER_GAS

    @classmethod
    def from_env(cls, env_path: Optional[Path] = None) -> "HarnessConfig":
        """
        Build the configuration from a .env file and the environment.

        Args:
            env_path: Path to .env file (default: ~/.bifrost-harness/.env)

        Returns:
            HarnessConfig

        Raises:
            ValidationError: If a variable holds an unusable value
        """
        env_path = env_path or HARNESS_ENV
        values: dict[str, Optional[str]] = {}
        if env_path.exists():
            values.update(dotenv_values(env_path))
        values.update(os.environ)

        kwargs: dict = {}
        if values.get("BIFROST_RPC_URL"):
            url = values["BIFROST_RPC_URL"]
            if not url.startswith(("http://", "https://")):
                raise ValidationError(f"BIFROST_RPC_URL must be an http(s) URL, got {url!r}")
            kwargs["rpc_url"] = url
        if values.get("BIFROST_RPC_TIMEOUT"):
            kwargs["rpc_timeout"] = _parse_number(
                "BIFROST_RPC_TIMEOUT", values["BIFROST_RPC_TIMEOUT"], float
            )
        if values.get("ETH_TRANSACTION_TYPE"):
            kwargs["envelope"] = parse_envelope(values["ETH_TRANSACTION_TYPE"])
        if values.get("BIFROST_MANUAL_SEAL"):
            kwargs["manual_seal"] = _parse_bool(
                "BIFROST_MANUAL_SEAL", values["BIFROST_MANUAL_SEAL"]
            )
        if values.get("RECEIPT_POLL_INTERVAL"):
            kwargs["poll_interval"] = _parse_number(
                "RECEIPT_POLL_INTERVAL", values["RECEIPT_POLL_INTERVAL"], float
            )
        if values.get("BIFROST_CHAIN_ID"):
            kwargs["chain_id"] = _parse_number(
                "BIFROST_CHAIN_ID", values["BIFROST_CHAIN_ID"], int
            )
        return cls(**kwargs)
