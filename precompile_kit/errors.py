"""Results and failures produced by precompiles."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ExitError:
    """Reason an execution stopped with an error."""

    kind: str
    message: str = ""

    @classmethod
    def out_of_gas(cls) -> ExitError:
        return cls("OutOfGas")

    @classmethod
    def other(cls, text: str) -> ExitError:
        return cls("Other", text)

    def __str__(self) -> str:
        return f"{self.kind}: {self.message}" if self.message else self.kind


class PrecompileFailure(Exception):
    """Base class for every way a precompile call can fail."""

    def _key(self) -> tuple:
        return ()

    def __eq__(self, other: object) -> bool:
        if type(self) is not type(other):
            return NotImplemented
        return self._key() == other._key()  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return hash((type(self), self._key()))


class Revert(PrecompileFailure):
    """The call reverted; ``output`` carries the revert data."""

    def __init__(self, output: bytes) -> None:
        self.output = bytes(output)
        super().__init__(self.output)

    def _key(self) -> tuple:
        return (self.output,)

    def __str__(self) -> str:
        try:
            return self.output.decode("utf-8")
        except UnicodeDecodeError:
            return self.output.hex()

    def __repr__(self) -> str:
        return f"Revert({self.output!r})"


class EvmError(PrecompileFailure):
    """The call failed with an EVM exit error, consuming all gas."""

    def __init__(self, exit_status: ExitError) -> None:
        self.exit_status = exit_status
        super().__init__(exit_status)

    def _key(self) -> tuple:
        return (self.exit_status,)

    def __str__(self) -> str:
        return str(self.exit_status)

    def __repr__(self) -> str:
        return f"EvmError({self.exit_status!r})"


@dataclass(frozen=True)
class PrecompileOutput:
    """Successful result of a precompile call."""

    output: bytes
    exit_status: str = "Returned"


def _as_bytes(value: bytes | bytearray | str) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    if isinstance(value, int):
        raise TypeError("expected bytes or str, not int")
    return bytes(value)


def revert(output: bytes | bytearray | str) -> Revert:
    """Build a revert failure carrying ``output`` (text is UTF-8 encoded)."""
    return Revert(_as_bytes(output))


def error(text: str) -> EvmError:
    """Build an error failure with the given message."""
    return EvmError(ExitError.other(text))


def succeed(output: bytes | bytearray | str) -> PrecompileOutput:
    """Build a successful output returning ``output``."""
    return PrecompileOutput(_as_bytes(output))