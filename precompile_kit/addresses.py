"""Addresses of the chain's precompiles and of token precompile contracts."""

from __future__ import annotations

import enum

from .precompile_set import address_u64

_MAX_U128 = 2**128 - 1

TOKEN_FUNGIBLE_CREATE_SELECTOR = bytes([0x42, 0xEC, 0xAB, 0xC0])
"""Selector of ``create`` on a fungible token address."""

TOKEN_NON_FUNGIBLE_CREATE_SELECTOR = bytes([0xE9, 0xD0, 0x63, 0x8D])
"""Selector of ``create`` on a non-fungible token address."""

TOKEN_MULTI_CREATE_SELECTOR = bytes([0xCF, 0x5B, 0xA5, 0x3F])
"""Selector of ``create`` on a multi token address."""

FT_PRECOMPILE_ADDRESS_PREFIX = bytes([0xFF, 0xFF, 0xFF, 0xFF])
NFT_PRECOMPILE_ADDRESS_PREFIX = bytes([0xFE, 0xFF, 0xFF, 0xFF])
MT_PRECOMPILE_ADDRESS_PREFIX = bytes([0xFD, 0xFF, 0xFF, 0xFF])

_USED_ADDRESS_NUMBERS = (1, 2, 3, 4, 5, 6, 7, 8, 1024, 1025, 1026)


def hash_address(a: int) -> bytes:
    """Return the 20-byte address whose low 8 bytes hold ``a`` big-endian."""
    return address_u64(a)


def used_addresses() -> list[bytes]:
    """Addresses of the Ethereum and generic precompiles of the chain."""
    return [hash_address(number) for number in _USED_ADDRESS_NUMBERS]


def is_precompile(address: bytes) -> bool:
    """Whether ``address`` is one of :func:`used_addresses`."""
    return bytes(address) in used_addresses()


def _check_address(address: bytes) -> bytes:
    if isinstance(address, (int, str)):
        raise TypeError("address must be bytes")
    raw = bytes(address)
    if len(raw) != 20:
        raise ValueError("address must be 20 bytes long")
    return raw


class TokenKind(enum.Enum):
    """Families of token contracts, each living under its own address prefix."""

    FUNGIBLE = FT_PRECOMPILE_ADDRESS_PREFIX
    NON_FUNGIBLE = NFT_PRECOMPILE_ADDRESS_PREFIX
    MULTI = MT_PRECOMPILE_ADDRESS_PREFIX

    @property
    def prefix(self) -> bytes:
        """The 4-byte address prefix of this token family."""
        return self.value

    @property
    def create_selector(self) -> bytes:
        """The selector that creates a token of this family."""
        return _CREATE_SELECTORS[self]

    def try_from_address(self, address: bytes) -> int | None:
        """Return the token id encoded in ``address``, or None if not of this kind.

        Only the last four bytes of the address are read as the id.
        """
        raw = _check_address(address)
        if raw[:4] != self.prefix:
            return None
        return int.from_bytes(raw[16:20], "big")

    def into_address(self, token_id: int) -> bytes:
        """Return the address of the token contract with id ``token_id``."""
        if isinstance(token_id, bool) or not isinstance(token_id, int):
            raise TypeError("token id must be an int")
        if not 0 <= token_id <= _MAX_U128:
            raise ValueError("token id must fit in 128 bits")
        return self.prefix + token_id.to_bytes(16, "big")


_CREATE_SELECTORS = {
    TokenKind.FUNGIBLE: TOKEN_FUNGIBLE_CREATE_SELECTOR,
    TokenKind.NON_FUNGIBLE: TOKEN_NON_FUNGIBLE_CREATE_SELECTOR,
    TokenKind.MULTI: TOKEN_MULTI_CREATE_SELECTOR,
}


def token_kind_of(address: bytes) -> TokenKind | None:
    """Return the token family whose prefix starts ``address``, if any."""
    raw = _check_address(address)
    for kind in TokenKind:
        if raw[:4] == kind.prefix:
            return kind
    return None