"""Dispatching runtime calls from a precompile and pricing storage access."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

from .errors import EvmError, ExitError, revert
from .handle import PrecompileHandle


class DispatchError(Exception):
    """A runtime call failed while being dispatched."""


class Dispatchable(Protocol):
    """A runtime call: its declared weight and how to dispatch it."""

    weight: int

    def dispatch(self, origin: Any) -> int | None:
        """Run the call; return the weight actually used, or None if unknown."""


@dataclass(frozen=True)
class RuntimeHelper:
    """Helpers bound to a runtime's weight-to-gas mapping and database weights."""

    weight_to_gas: Callable[[int], int]
    db_read_weight: int = 0
    db_write_weight: int = 0

    def try_dispatch(
        self, handle: PrecompileHandle, origin: Any, call: Dispatchable
    ) -> None:
        """Dispatch ``call`` if enough gas remains, then charge the gas it used.

        Raises an out-of-gas error if the declared weight exceeds the remaining
        gas, and a revert if the call itself fails.
        """
        declared_weight = call.weight
        required_gas = self.weight_to_gas(declared_weight)
        if required_gas > handle.remaining_gas():
            raise EvmError(ExitError.out_of_gas())

        try:
            used_weight = call.dispatch(origin)
        except DispatchError as exc:
            raise revert(f"Dispatched call failed with error: {exc!r}") from exc

        used_gas = self.weight_to_gas(
            declared_weight if used_weight is None else used_weight
        )
        handle.record_cost(used_gas)

    def db_write_gas_cost(self) -> int:
        """Cost of a database write, in gas."""
        return self.weight_to_gas(self.db_write_weight)

    def db_read_gas_cost(self) -> int:
        """Cost of a database read, in gas."""
        return self.weight_to_gas(self.db_read_weight)