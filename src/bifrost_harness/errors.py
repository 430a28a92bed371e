"""
Harness error taxonomy.

Every failure surfaced by the transaction and precompile layers is one of
these. ``exit_code`` is what the CLI exits with when the error reaches it.
"""

from __future__ import annotations

from typing import Any, Optional


class HarnessError(RuntimeError):
    exit_code: int = 1


class ValidationError(HarnessError):
    """Malformed or contradictory request fields. Raised before any network call."""

    exit_code = 2


class UnknownSelector(HarnessError):
    """Operation name absent from a precompile selector table."""

    exit_code = 3

    def __init__(self, name: str, precompile: Optional[str] = None):
        self.name = name
        self.precompile = precompile
        where = f" on precompile '{precompile}'" if precompile else ""
        super().__init__(f"selector '{name}' doesn't exist{where}")


class SigningError(HarnessError):
    """Invalid key material, or the key does not control the sender."""

    exit_code = 4


class UnknownAccount(HarnessError):
    exit_code = 5


class RPCTransportError(HarnessError):
    """Endpoint unreachable, malformed response, or node still synchronizing."""

    exit_code = 6


class RpcError(RPCTransportError):
    """The node answered with a JSON-RPC error object."""

    exit_code = 7

    def __init__(self, error: dict[str, Any]):
        self.code = error.get("code")
        self.message = error.get("message")
        self.data = error.get("data")
        super().__init__(f"RPC Error {self.code}: {self.message}")


__all__ = [
    "HarnessError",
    "RPCTransportError",
    "RpcError",
    "SigningError",
    "UnknownAccount",
    "UnknownSelector",
    "ValidationError",
]
