"""A mock handle and a fluent tester for writing precompile tests."""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

from .costs import EvmConfig, call_cost
from .errors import (
    EvmError,
    ExitError,
    PrecompileFailure,
    PrecompileOutput,
    Revert,
)
from .handle import PrecompileHandle
from .logs import Log
from .modifier import Context

_MAX_U64 = 2**64 - 1


@dataclass(frozen=True)
class Subcall:
    """A sub-call made by a precompile through the mock handle."""

    address: bytes
    transfer: Any
    input: bytes
    target_gas: int | None
    is_static: bool
    context: Context


@dataclass
class SubcallOutput:
    """What a sub-call returns: exit reason, output, gas cost and logs."""

    reason: ExitError | str
    output: bytes = b""
    cost: int = 0
    logs: list[Log] = field(default_factory=list)


SubcallHandler = Callable[[Subcall], SubcallOutput]


class _PrecompileSet(Protocol):
    def execute(self, handle: PrecompileHandle) -> PrecompileOutput | None: ...


@dataclass
class MockHandle(PrecompileHandle):
    """In-memory precompile handle that meters gas and collects logs."""

    code_address: bytes
    context: Context
    gas_limit: int = _MAX_U64
    gas_used: int = 0
    logs: list[Log] = field(default_factory=list)
    subcall_handle: SubcallHandler | None = None
    input: bytes = b""
    is_static: bool = False

    def call(
        self,
        address: bytes,
        transfer: Any,
        input: bytes,
        target_gas: int | None,
        is_static: bool,
        context: Context,
    ) -> tuple[ExitError | str, bytes]:
        """Perform a sub-call through the registered subcall handler."""
        try:
            self.record_cost(call_cost(context.apparent_value, EvmConfig.london()))
        except EvmError:
            return ExitError.out_of_gas(), b""

        if self.subcall_handle is None:
            raise RuntimeError("no subcall handle registered")

        result = self.subcall_handle(
            Subcall(
                address=bytes(address),
                transfer=transfer,
                input=bytes(input),
                target_gas=target_gas,
                is_static=is_static,
                context=context,
            )
        )

        try:
            self.record_cost(result.cost)
        except EvmError:
            return ExitError.out_of_gas(), b""

        for log in result.logs:
            self.log(log.address, log.topics, log.data)

        return result.reason, bytes(result.output)

    def record_cost(self, cost: int) -> None:
        """Charge ``cost`` gas; raise out of gas once the limit is passed."""
        self.gas_used += cost
        if self.gas_used > self.gas_limit:
            raise EvmError(ExitError.out_of_gas())

    def remaining_gas(self) -> int:
        """Gas left before the limit is reached."""
        return max(0, self.gas_limit - self.gas_used)

    def log(self, address: bytes, topics: Sequence[bytes], data: bytes) -> None:
        """Record a log."""
        self.logs.append(Log(address, tuple(topics), data))


class PrecompilesTester:
    """Fluent helper that runs a precompile set once and checks the outcome."""

    def __init__(
        self,
        precompiles: _PrecompileSet,
        from_address: bytes,
        to_address: bytes,
        data: bytes,
    ) -> None:
        to_address = bytes(to_address)
        self._precompiles = precompiles
        self.handle = MockHandle(
            code_address=to_address,
            context=Context(address=to_address, caller=bytes(from_address)),
            input=bytes(data),
        )
        self._target_gas: int | None = None
        self._subcall_handle: SubcallHandler | None = None
        self._expected_cost: int | None = None
        self._expected_logs: list[Log] | None = None

    def with_value(self, value: int) -> PrecompilesTester:
        self.handle.context = dataclasses.replace(self.handle.context, apparent_value=value)
        return self

    def with_subcall_handle(self, subcall_handle: SubcallHandler) -> PrecompilesTester:
        self._subcall_handle = subcall_handle
        return self

    def with_target_gas(self, target_gas: int | None) -> PrecompilesTester:
        self._target_gas = target_gas
        return self

    def expect_cost(self, cost: int) -> PrecompilesTester:
        self._expected_cost = cost
        return self

    def expect_no_logs(self) -> PrecompilesTester:
        self._expected_logs = []
        return self

    def expect_log(self, log: Log) -> PrecompilesTester:
        self._expected_logs = [*(self._expected_logs or []), log]
        return self

    def _execute(self) -> PrecompileOutput | PrecompileFailure | None:
        handle = self.handle
        handle.subcall_handle = self._subcall_handle
        if self._target_gas is not None:
            handle.gas_limit = self._target_gas
        try:
            result = self._precompiles.execute(handle)
        except PrecompileFailure as failure:
            result = failure
        finally:
            self._subcall_handle = handle.subcall_handle
            handle.subcall_handle = None
        return result

    def _assert_optionals(self) -> None:
        if self._expected_cost is not None and self.handle.gas_used != self._expected_cost:
            raise AssertionError(
                f"expected cost {self._expected_cost}, got {self.handle.gas_used}"
            )
        if self._expected_logs is not None and self.handle.logs != self._expected_logs:
            raise AssertionError(
                f"expected logs {self._expected_logs!r}, got {self.handle.logs!r}"
            )

    def execute_some(self) -> PrecompileOutput | PrecompileFailure:
        """Expect some precompile to handle the call, whatever the result."""
        result = self._execute()
        if result is None:
            raise AssertionError("no precompile handled the call")
        self._assert_optionals()
        return result

    def execute_none(self) -> None:
        """Expect no precompile to handle the call."""
        result = self._execute()
        if result is not None:
            raise AssertionError(f"expected no precompile to run, got {result!r}")
        self._assert_optionals()

    def execute_returns(self, output: bytes) -> None:
        """Expect a successful return of exactly ``output``."""
        result = self._execute()
        expected = PrecompileOutput(bytes(output))
        if result != expected:
            raise AssertionError(f"expected {expected!r}, got {result!r}")
        self._assert_optionals()

    def execute_reverts(self, check: Callable[[bytes], bool]) -> None:
        """Expect a revert whose output satisfies ``check``."""
        result = self._execute()
        if not isinstance(result, Revert):
            raise AssertionError(f"expected a revert, got {result!r}")
        if not check(result.output):
            raise AssertionError(f"revert output {result.output!r} failed the check")
        self._assert_optionals()

    def execute_error(self, error: ExitError) -> None:
        """Expect an error failure with exit status ``error``."""
        result = self._execute()
        expected = EvmError(error)
        if result != expected:
            raise AssertionError(f"expected {expected!r}, got {result!r}")
        self._assert_optionals()


def prepare_test(
    precompiles: _PrecompileSet, from_address: bytes, to_address: bytes, data: bytes
) -> PrecompilesTester:
    """Start a tester for calling ``precompiles`` at ``to_address``."""
    return PrecompilesTester(precompiles, from_address, to_address, data)