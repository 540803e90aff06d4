"""Assembling precompiles into a precompile set, with call-safety checks.

Every fragment refuses DELEGATECALL/CALLCODE and recursive calls unless
configured otherwise. ``execute`` returns ``None`` when the fragment does not
handle the called address. It returns a :class:`PrecompileOutput` on success
and raises a :class:`PrecompileFailure` when the call fails.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any, Protocol

from .errors import PrecompileOutput, revert
from .handle import PrecompileHandle

_MAX_U64 = 2**64 - 1

Precompile = Callable[[PrecompileHandle], PrecompileOutput]


class StatefulPrecompile(Protocol):
    """A precompile keeping state for the duration of one transaction."""

    def execute(self, handle: PrecompileHandle) -> PrecompileOutput: ...


class PrecompileSet(Protocol):
    """Anything that may handle calls to a range of addresses."""

    def execute(self, handle: PrecompileHandle) -> PrecompileOutput | None: ...

    def is_precompile(self, address: bytes) -> bool: ...


def address_u64(n: int) -> bytes:
    """Return the 20-byte address whose low 8 bytes hold ``n`` big-endian."""
    if isinstance(n, bool) or not isinstance(n, int):
        raise TypeError("expected an int")
    if not 0 <= n <= _MAX_U64:
        raise ValueError("address number must fit in 64 bits")
    return n.to_bytes(20, "big")


def _address(value: bytes) -> bytes:
    raw = bytes(value)
    if len(raw) != 20:
        raise ValueError("address must be 20 bytes long")
    return raw


def _check_recursion_limit(limit: int | None) -> int | None:
    if limit is not None and not 0 <= limit <= 0xFFFF:
        raise ValueError("recursion limit must fit in 16 bits")
    return limit


def _check_delegate_call(handle: PrecompileHandle, allow: bool) -> None:
    if not allow and handle.code_address != handle.context.address:
        raise revert("cannot be called with DELEGATECALL or CALLCODE")


class PrecompileSetFragment(ABC):
    """A part of a precompile set, behaving as a set of its own."""

    @abstractmethod
    def execute(self, handle: PrecompileHandle) -> PrecompileOutput | None:
        """Run the call if it is for this fragment; return None otherwise."""

    @abstractmethod
    def is_precompile(self, address: bytes) -> bool:
        """Whether ``address`` is a precompile of this fragment."""

    @abstractmethod
    def used_addresses(self) -> list[bytes]:
        """The addresses this fragment is known to cover."""


class _SingleAddressFragment(PrecompileSetFragment):
    """Shared logic of fragments living at one fixed address."""

    def __init__(
        self,
        address: bytes,
        recursion_limit: int | None = 0,
        allow_delegate_call: bool = False,
    ) -> None:
        self.address = _address(address)
        self.recursion_limit = _check_recursion_limit(recursion_limit)
        self.allow_delegate_call = allow_delegate_call
        self._recursion_level = 0

    @abstractmethod
    def _run(self, handle: PrecompileHandle) -> PrecompileOutput:
        """Execute the wrapped precompile."""

    @contextmanager
    def _nesting(self) -> Iterator[None]:
        if self.recursion_limit is None:
            yield
            return
        if self._recursion_level > self.recursion_limit:
            raise revert("precompile is called with too high nesting")
        self._recursion_level += 1
        try:
            yield
        finally:
            self._recursion_level -= 1

    def execute(self, handle: PrecompileHandle) -> PrecompileOutput | None:
        if handle.code_address != self.address:
            return None
        _check_delegate_call(handle, self.allow_delegate_call)
        with self._nesting():
            return self._run(handle)

    def is_precompile(self, address: bytes) -> bool:
        return bytes(address) == self.address

    def used_addresses(self) -> list[bytes]:
        return [self.address]


class PrecompileAt(_SingleAddressFragment):
    """A stateless precompile (a callable taking the handle) at ``address``.

    ``recursion_limit`` is the allowed nesting depth (``None`` for unlimited,
    0 forbids re-entrance); DELEGATECALL is refused unless allowed.
    """

    def __init__(
        self,
        address: bytes,
        precompile: Precompile,
        recursion_limit: int | None = 0,
        allow_delegate_call: bool = False,
    ) -> None:
        super().__init__(address, recursion_limit, allow_delegate_call)
        self.precompile = precompile

    def _run(self, handle: PrecompileHandle) -> PrecompileOutput:
        return self.precompile(handle)


class StatefulPrecompileAt(_SingleAddressFragment):
    """A stateful precompile (an object with ``execute``) at ``address``."""

    def __init__(
        self,
        address: bytes,
        precompile: StatefulPrecompile,
        recursion_limit: int | None = 0,
        allow_delegate_call: bool = False,
    ) -> None:
        super().__init__(address, recursion_limit, allow_delegate_call)
        self.precompile = precompile

    def _run(self, handle: PrecompileHandle) -> PrecompileOutput:
        return self.precompile.execute(handle)


class PrecompileSetStartingWith(PrecompileSetFragment):
    """An inner precompile set whose addresses all start with ``prefix``.

    Nesting is tracked separately for every address of the inner set.
    """

    def __init__(
        self,
        prefix: bytes,
        precompile_set: PrecompileSet,
        recursion_limit: int | None = 0,
        allow_delegate_call: bool = False,
    ) -> None:
        self.prefix = bytes(prefix)
        self.precompile_set = precompile_set
        self.recursion_limit = _check_recursion_limit(recursion_limit)
        self.allow_delegate_call = allow_delegate_call
        self._recursion_levels: dict[bytes, int] = {}

    def execute(self, handle: PrecompileHandle) -> PrecompileOutput | None:
        code_address = bytes(handle.code_address)
        if not self.is_precompile(code_address):
            return None
        _check_delegate_call(handle, self.allow_delegate_call)

        if self.recursion_limit is None:
            return self.precompile_set.execute(handle)

        level = self._recursion_levels.setdefault(code_address, 0)
        if level > self.recursion_limit:
            raise revert("precompile is called with too high nesting")
        self._recursion_levels[code_address] = level + 1
        try:
            return self.precompile_set.execute(handle)
        finally:
            self._recursion_levels[code_address] -= 1

    def is_precompile(self, address: bytes) -> bool:
        address = bytes(address)
        return address.startswith(self.prefix) and self.precompile_set.is_precompile(
            address
        )

    def used_addresses(self) -> list[bytes]:
        # The addresses of the inner set cannot be listed.
        return []


class RevertPrecompile(PrecompileSetFragment):
    """A precompile at ``address`` that always reverts."""

    def __init__(self, address: bytes) -> None:
        self.address = _address(address)

    def execute(self, handle: PrecompileHandle) -> PrecompileOutput | None:
        if handle.code_address == self.address:
            raise revert("revert")
        return None

    def is_precompile(self, address: bytes) -> bool:
        return bytes(address) == self.address

    def used_addresses(self) -> list[bytes]:
        return [self.address]


class FragmentGroup(PrecompileSetFragment):
    """Fragments tried in order; the first one handling the call wins."""

    def __init__(self, *fragments: PrecompileSetFragment) -> None:
        if not fragments:
            raise ValueError("a fragment group needs at least one fragment")
        self.fragments: tuple[PrecompileSetFragment, ...] = fragments

    def execute(self, handle: PrecompileHandle) -> PrecompileOutput | None:
        for fragment in self.fragments:
            result = fragment.execute(handle)
            if result is not None:
                return result
        return None

    def is_precompile(self, address: bytes) -> bool:
        return any(fragment.is_precompile(address) for fragment in self.fragments)

    def used_addresses(self) -> list[bytes]:
        return [
            address
            for fragment in self.fragments
            for address in fragment.used_addresses()
        ]


class PrecompilesInRangeInclusive(PrecompileSetFragment):
    """Skips the inner fragment for addresses outside ``[start, end]``."""

    def __init__(self, start: bytes, end: bytes, inner: PrecompileSetFragment) -> None:
        self.start = _address(start)
        self.end = _address(end)
        self.inner = inner

    def _contains(self, address: bytes) -> bool:
        return self.start <= bytes(address) <= self.end

    def execute(self, handle: PrecompileHandle) -> PrecompileOutput | None:
        if self._contains(handle.code_address):
            return self.inner.execute(handle)
        return None

    def is_precompile(self, address: bytes) -> bool:
        return self._contains(address) and self.inner.is_precompile(address)

    def used_addresses(self) -> list[bytes]:
        return self.inner.used_addresses()


class PrecompileSetBuilder:
    """Turns a fragment into a complete precompile set.

    ``address_mapping`` converts addresses into runtime account ids for
    :meth:`used_addresses`; by default addresses are returned unchanged.
    """

    def __init__(
        self,
        inner: PrecompileSetFragment,
        address_mapping: Callable[[bytes], Any] | None = None,
    ) -> None:
        self.inner = inner
        self.address_mapping = address_mapping

    def execute(self, handle: PrecompileHandle) -> PrecompileOutput | None:
        """Run the call through the inner fragment."""
        return self.inner.execute(handle)

    def is_precompile(self, address: bytes) -> bool:
        """Whether ``address`` is a precompile of this set."""
        return self.inner.is_precompile(address)

    def used_addresses(self) -> list[Any]:
        """The covered addresses, mapped to account ids."""
        addresses = self.inner.used_addresses()
        if self.address_mapping is None:
            return list(addresses)
        return [self.address_mapping(address) for address in addresses]