"""Keccak-256 hashing and Solidity function selectors."""

from __future__ import annotations

import enum
from collections.abc import Iterable, Mapping

from Crypto.Hash import keccak


def keccak256(text: str | bytes) -> bytes:
    """Return the Keccak-256 digest of ``text`` (strings are UTF-8 encoded)."""
    data = text.encode("utf-8") if isinstance(text, str) else bytes(text)
    return keccak.new(digest_bits=256, data=data).digest()


def function_selector(signature: str) -> int:
    """Return the 32-bit selector of a Solidity function signature."""
    if not isinstance(signature, str):
        raise TypeError("expected a string signature")
    return int.from_bytes(keccak256(signature)[:4], "big")


def selector_enum(
    name: str, signatures: Mapping[str, str] | Iterable[tuple[str, str]]
) -> type[enum.IntEnum]:
    """Build an IntEnum whose members are valued by their signature selectors."""
    members: dict[str, int] = {}
    for member, signature in dict(signatures).items():
        selector = function_selector(signature)
        if selector in members.values():
            raise ValueError(f"selector of {signature!r} collides with another member")
        members[member] = selector
    if not members:
        raise ValueError("a selector enum needs at least one member")
    return enum.IntEnum(name, members)