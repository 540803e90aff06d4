"""The interface a precompile uses to talk to the executing EVM."""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence

from .costs import log_costs
from .data import EvmDataReader
from .logs import Log
from .modifier import Context, FunctionModifier
from .modifier import check_function_modifier as _check_modifier


class PrecompileHandle(ABC):
    """Access to gas, logs, input and context of a precompile call.

    Implementations provide the attributes ``code_address`` (the address of
    the precompile being called), ``input`` (the call data), ``context`` (a
    :class:`Context`) and ``is_static``.
    """

    code_address: bytes
    input: bytes
    context: Context
    is_static: bool

    @abstractmethod
    def record_cost(self, cost: int) -> None:
        """Charge ``cost`` gas; raise an out-of-gas error if the limit is passed."""

    @abstractmethod
    def remaining_gas(self) -> int:
        """Gas still available to the call."""

    @abstractmethod
    def log(self, address: bytes, topics: Sequence[bytes], data: bytes) -> None:
        """Emit a log."""

    def record_log_costs_manual(self, topics: int, data_len: int) -> None:
        """Charge the cost of a log of known shape ahead of emitting it."""
        self.record_cost(log_costs(topics, data_len))

    def record_log_costs(self, logs: Iterable[Log]) -> None:
        """Charge the cost of every log in ``logs``."""
        for log in logs:
            self.record_log_costs_manual(len(log.topics), len(log.data))

    def check_function_modifier(self, modifier: FunctionModifier) -> None:
        """Raise a revert if the call is not allowed for ``modifier``."""
        _check_modifier(self.context, self.is_static, modifier)

    def read_selector(self, enum_type: type[enum.IntEnum]) -> enum.IntEnum:
        """Parse the function selector at the start of the input."""
        return EvmDataReader.read_selector(self.input, enum_type)

    def read_input(self) -> EvmDataReader:
        """Return a reader over the input with the selector skipped."""
        return EvmDataReader.new_skip_selector(self.input)