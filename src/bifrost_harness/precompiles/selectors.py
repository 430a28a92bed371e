"""
Selector tables - operation name -> 4-byte function selector.

A table is built once per precompile and never mutated afterwards. The
normal way to build one is from the precompile's Solidity signatures, so the
selectors used for encoding can't drift from the interface the node exposes.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType
from typing import Optional

from ..errors import UnknownSelector, ValidationError
from ..utils import keccak256, strip_0x

_SIGNATURE_RE = re.compile(r"^([A-Za-z_][A-Za-z0-9_]*)\((.*)\)$")
_SELECTOR_RE = re.compile(r"^[0-9a-f]{8}$")


def function_selector(signature: str) -> str:
    """
    Compute the 4-byte selector of a canonical Solidity signature.

    Args:
        signature: e.g. ``"nominate(address,uint256,uint256,uint256)"``

    Returns:
        8 lowercase hex characters, no 0x prefix
    """
    if not _SIGNATURE_RE.match(signature) or " " in signature:
        raise ValidationError(f"not a canonical function signature: {signature!r}")
    return keccak256(signature.encode("utf-8"))[:4].hex()


class SelectorTable(Mapping[str, str]):
    """Read-only name -> selector mapping for one precompile."""

    def __init__(self, entries: Mapping[str, str], precompile: Optional[str] = None):
        normalized: dict[str, str] = {}
        for name, selector in entries.items():
            selector = strip_0x(selector).lower()
            if not _SELECTOR_RE.match(selector):
                raise ValidationError(f"selector for '{name}' must be 4 bytes of hex")
            normalized[name] = selector
        self._entries = MappingProxyType(normalized)
        self.precompile = precompile

    @classmethod
    def from_signatures(
        cls, signatures: Iterable[str], precompile: Optional[str] = None
    ) -> "SelectorTable":
        """
        Generate a table from Solidity signatures, keyed by function name.

        Raises:
            ValidationError: If two signatures share a name (overloads)
        """
        entries: dict[str, str] = {}
        for signature in signatures:
            name = signature.split("(", 1)[0]
            if name in entries:
                raise ValidationError(f"overloaded function '{name}' in selector table")
            entries[name] = function_selector(signature)
        return cls(entries, precompile=precompile)

    def __getitem__(self, name: str) -> str:
        try:
            return self._entries[name]
        except KeyError:
            raise UnknownSelector(name, self.precompile) from None

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self._entries.get(name, default)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"SelectorTable({self.precompile!r}, {len(self)} entries)"
