"""Solidity ABI encoding and decoding of precompile input and output data."""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from .errors import PrecompileFailure, revert

_WORD = 32
_MAX_USIZE = 2**64 - 1


@dataclass(frozen=True)
class Address:
    """The Solidity ``address`` type: a 20-byte account address."""

    value: bytes

    def __post_init__(self) -> None:
        if isinstance(self.value, (int, str)):
            raise TypeError("address must be bytes")
        raw = bytes(self.value)
        if len(raw) != 20:
            raise ValueError("address must be 20 bytes long")
        object.__setattr__(self, "value", raw)

    def __bytes__(self) -> bytes:
        return self.value


@dataclass(frozen=True)
class Bytes:
    """The Solidity ``bytes``/``string`` type: tightly packed bytes."""

    data: bytes = b""

    def __post_init__(self) -> None:
        if isinstance(self.data, str):
            object.__setattr__(self, "data", self.data.encode("utf-8"))
        elif isinstance(self.data, int):
            raise TypeError("bytes data must be bytes or str")
        else:
            object.__setattr__(self, "data", bytes(self.data))

    def as_bytes(self) -> bytes:
        """Interpret as ``bytes``."""
        return self.data

    def as_str(self) -> str:
        """Interpret as ``string``; raises UnicodeDecodeError if not UTF-8."""
        return self.data.decode("utf-8")

    def __bytes__(self) -> bytes:
        return self.data


class EvmDataReader:
    """Cursor over EVM input data that parses ABI-encoded values."""

    def __init__(self, input: bytes, cursor: int = 0) -> None:
        self._input = bytes(input)
        self._cursor = cursor

    @staticmethod
    def read_selector(input: bytes, enum_type: type[enum.IntEnum]) -> enum.IntEnum:
        """Parse the leading 4-byte selector of ``input`` into ``enum_type``."""
        if len(input) < 4:
            raise revert("tried to parse selector out of bounds")
        value = int.from_bytes(bytes(input[:4]), "big")
        try:
            return enum_type(value)
        except ValueError:
            raise revert("unknown selector") from None

    @classmethod
    def new_skip_selector(cls, input: bytes) -> EvmDataReader:
        """Create a reader over ``input`` with its 4-byte selector skipped."""
        if len(input) < 4:
            raise revert("input is too short")
        return cls(bytes(input)[4:])

    def expect_arguments(self, args: int) -> None:
        """Check that at least ``args`` 32-byte words remain to be read."""
        if len(self._input) < self._cursor + args * _WORD:
            raise revert("input doesn't match expected length")

    def read(self, kind: EvmType) -> Any:
        """Read a value of the given ABI type."""
        return kind.read(self)

    def read_raw_bytes(self, length: int) -> bytes:
        """Read ``length`` raw bytes without alignment handling."""
        return self._take(length, "raw bytes")

    def read_pointer(self) -> EvmDataReader:
        """Read an offset and return a reader starting at the pointed location."""
        try:
            offset = self.read(UintType(256))
        except PrecompileFailure:
            raise revert("tried to parse array offset out of bounds") from None
        if offset > _MAX_USIZE:
            raise revert("array offset is too large")
        if offset >= len(self._input):
            raise revert("pointer points out of bounds")
        return EvmDataReader(self._input[offset:])

    def read_till_end(self) -> bytes:
        """Read all remaining bytes."""
        remaining = len(self._input) - self._cursor
        if remaining < 0:
            raise revert("tried to parse raw bytes out of bounds")
        return self._take(remaining, "raw bytes")

    def _take(self, length: int, what: str) -> bytes:
        start = self._cursor
        end = start + length
        if end > _MAX_USIZE:
            raise revert("data reading cursor overflow")
        self._cursor = end
        if end > len(self._input):
            raise revert(f"tried to parse {what} out of bounds")
        return self._input[start:end]


@dataclass
class _OffsetDatum:
    offset_position: int
    data: bytes
    offset_shift: int = 0


@dataclass
class EvmDataWriter:
    """Builder of ABI-encoded EVM data, optionally prefixed by a selector."""

    selector: int | None = None
    _data: bytearray = field(default_factory=bytearray, repr=False)
    _offsets: list[_OffsetDatum] = field(default_factory=list, repr=False)

    def build(self) -> bytes:
        """Return the encoded data, with pointed data appended after it."""
        output = bytearray(self._data)
        for datum in self._offsets:
            position = datum.offset_position
            free_space_offset = len(output) - datum.offset_shift
            output[position : position + _WORD] = free_space_offset.to_bytes(_WORD, "big")
            output += datum.data
        if self.selector is not None:
            return self.selector.to_bytes(4, "big") + bytes(output)
        return bytes(output)

    def write(self, kind: EvmType, value: Any) -> EvmDataWriter:
        """Append ``value`` encoded as the given ABI type."""
        kind.write(self, value)
        return self

    def write_raw_bytes(self, value: bytes) -> EvmDataWriter:
        """Append raw bytes without alignment handling."""
        self._data += bytes(value)
        return self

    def write_pointer(self, data: bytes) -> None:
        """Write a placeholder offset to ``data``, which is appended on build."""
        position = len(self._data)
        self._data += b"\xff" * _WORD
        self._offsets.append(_OffsetDatum(position, bytes(data)))


class EvmType(ABC):
    """An ABI type that can be read from and written to EVM data."""

    @abstractmethod
    def read(self, reader: EvmDataReader) -> Any:
        """Read a value of this type."""

    @abstractmethod
    def write(self, writer: EvmDataWriter, value: Any) -> None:
        """Write a value of this type."""

    @abstractmethod
    def has_static_size(self) -> bool:
        """Whether values of this type are encoded inline."""


@dataclass(frozen=True)
class UintType(EvmType):
    """Unsigned integer of ``bits`` bits (8 to 256, multiple of 8)."""

    bits: int = 256

    def __post_init__(self) -> None:
        if self.bits % 8 or not 8 <= self.bits <= 256:
            raise ValueError("bits must be a multiple of 8 between 8 and 256")

    def read(self, reader: EvmDataReader) -> int:
        value = int.from_bytes(reader._take(_WORD, "U256"), "big")
        if value >= 2**self.bits:
            raise revert(f"value too big for u{self.bits}")
        return value

    def write(self, writer: EvmDataWriter, value: int) -> None:
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError("expected an int")
        if not 0 <= value < 2**self.bits:
            raise ValueError(f"value does not fit in u{self.bits}")
        writer._data += value.to_bytes(_WORD, "big")

    def has_static_size(self) -> bool:
        return True


@dataclass(frozen=True)
class Hash256Type(EvmType):
    """A raw 32-byte word (``bytes32``)."""

    def read(self, reader: EvmDataReader) -> bytes:
        return reader._take(_WORD, "H256")

    def write(self, writer: EvmDataWriter, value: bytes) -> None:
        if isinstance(value, (int, str)):
            raise TypeError("expected 32 bytes")
        raw = bytes(value)
        if len(raw) != _WORD:
            raise ValueError("expected 32 bytes")
        writer._data += raw

    def has_static_size(self) -> bool:
        return True


@dataclass(frozen=True)
class BoolType(EvmType):
    """The Solidity ``bool`` type."""

    def read(self, reader: EvmDataReader) -> bool:
        try:
            word = reader._take(_WORD, "H256")
        except PrecompileFailure:
            raise revert("tried to parse bool out of bounds") from None
        return any(word)

    def write(self, writer: EvmDataWriter, value: bool) -> None:
        writer._data += (1 if value else 0).to_bytes(_WORD, "big")

    def has_static_size(self) -> bool:
        return True


@dataclass(frozen=True)
class AddressType(EvmType):
    """The Solidity ``address`` type, read as :class:`Address`."""

    def read(self, reader: EvmDataReader) -> Address:
        word = reader._take(_WORD, "H160")
        return Address(word[12:])

    def write(self, writer: EvmDataWriter, value: Address | bytes) -> None:
        address = value if isinstance(value, Address) else Address(value)
        writer._data += address.value.rjust(_WORD, b"\x00")

    def has_static_size(self) -> bool:
        return True


@dataclass(frozen=True)
class BytesType(EvmType):
    """The Solidity ``bytes``/``string`` type, read as :class:`Bytes`."""

    def read(self, reader: EvmDataReader) -> Bytes:
        inner = reader.read_pointer()
        try:
            length = inner.read(UintType(256))
        except PrecompileFailure:
            raise revert("tried to parse bytes/string length out of bounds") from None
        if length > _MAX_USIZE:
            raise revert("bytes/string length is too large")
        return Bytes(inner._take(length, "bytes/string"))

    def write(self, writer: EvmDataWriter, value: Bytes | bytes | str) -> None:
        raw = (value if isinstance(value, Bytes) else Bytes(value)).data
        length = len(raw)
        padded = raw.ljust(-(-length // _WORD) * _WORD, b"\x00")
        inner = EvmDataWriter().write(UintType(256), length).write_raw_bytes(padded)
        writer.write_pointer(inner.build())

    def has_static_size(self) -> bool:
        return False


@dataclass(frozen=True)
class ArrayType(EvmType):
    """A dynamic array of ``item`` values, read as a list."""

    item: EvmType

    def read(self, reader: EvmDataReader) -> list[Any]:
        inner = reader.read_pointer()
        try:
            size = inner.read(UintType(256))
        except PrecompileFailure:
            raise revert("tried to parse array length out of bounds") from None
        if size > _MAX_USIZE:
            raise revert("array length is too large")
        if len(inner._input) < _WORD:
            raise revert("try to read array items out of bound")
        items = EvmDataReader(inner._input[_WORD:])
        result = []
        for _ in range(size):
            result.append(items.read(self.item))
        return result

    def write(self, writer: EvmDataWriter, value: Sequence[Any]) -> None:
        values = list(value)
        inner = EvmDataWriter().write(UintType(256), len(values))
        for element in values:
            # Offsets inside an item are relative to the item itself, not the
            # array start; the shift corrects that when offsets are baked.
            shift = len(inner._data)
            item_writer = EvmDataWriter().write(self.item, element)
            inner.write_raw_bytes(item_writer._data)
            inner._offsets.extend(
                _OffsetDatum(
                    datum.offset_position + shift,
                    datum.data,
                    datum.offset_shift + _WORD,
                )
                for datum in item_writer._offsets
            )
        writer.write_pointer(inner.build())

    def has_static_size(self) -> bool:
        return False


class TupleType(EvmType):
    """A Solidity tuple (struct) of the given item types, read as a tuple."""

    def __init__(self, *items: EvmType) -> None:
        if not items:
            raise ValueError("a tuple needs at least one item type")
        self.items: tuple[EvmType, ...] = items

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TupleType):
            return NotImplemented
        return self.items == other.items

    def __hash__(self) -> int:
        return hash(self.items)

    def __repr__(self) -> str:
        return f"TupleType{self.items!r}"

    def read(self, reader: EvmDataReader) -> tuple[Any, ...]:
        if not self.has_static_size():
            reader = reader.read_pointer()
        return tuple(reader.read(item) for item in self.items)

    def write(self, writer: EvmDataWriter, value: Sequence[Any]) -> None:
        values = tuple(value)
        if len(values) != len(self.items):
            raise ValueError(f"expected {len(self.items)} values, got {len(values)}")
        if self.has_static_size():
            for item, element in zip(self.items, values):
                writer.write(item, element)
        else:
            inner = EvmDataWriter()
            for item, element in zip(self.items, values):
                inner.write(item, element)
            writer.write_pointer(inner.build())

    def has_static_size(self) -> bool:
        return all(item.has_static_size() for item in self.items)