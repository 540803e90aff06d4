import pytest

from precompile_kit.costs import EvmConfig, call_cost
from precompile_kit.errors import EvmError, ExitError, revert, succeed
from precompile_kit.logs import Log, log1
from precompile_kit.modifier import Context
from precompile_kit.testing import (
    MockHandle,
    PrecompilesTester,
    Subcall,
    SubcallOutput,
    prepare_test,
)

TARGET = b"\x00" * 19 + b"\x01"
OTHER = b"\x00" * 19 + b"\x02"
CALLER = b"\x11" * 20
CALLEE = b"\x22" * 20
TOPIC = b"\x01" * 32
COST = 42


class _Set:
    def execute(self, handle):
        if handle.code_address != TARGET:
            return None
        handle.record_cost(COST)
        if handle.context.apparent_value:
            raise revert("function is not payable")
        if handle.input == b"log":
            handle.log(TARGET, [TOPIC], b"data")
            return succeed(b"")
        if handle.input == b"sub":
            _, output = handle.call(CALLEE, None, b"x", None, False, handle.context)
            return succeed(output)
        return succeed(handle.input)


def _handle(gas_limit=10**9):
    return MockHandle(TARGET, Context(TARGET, CALLER), gas_limit=gas_limit)


def test_mock_record_cost_and_remaining_gas():
    handle = _handle(gas_limit=100)
    handle.record_cost(30)
    assert handle.gas_used == 30
    assert handle.remaining_gas() == 70


def test_mock_record_cost_over_limit_raises():
    handle = _handle(gas_limit=10)
    with pytest.raises(EvmError) as info:
        handle.record_cost(11)
    assert info.value.exit_status == ExitError.out_of_gas()


def test_mock_log_collects_logs():
    handle = _handle()
    handle.log(TARGET, [TOPIC], b"abc")
    assert handle.logs == [log1(TARGET, TOPIC, b"abc")]


def test_call_without_subcall_handle_fails():
    handle = _handle()
    with pytest.raises(RuntimeError):
        handle.call(CALLEE, None, b"", None, False, handle.context)


def test_call_forwards_to_subcall_handle():
    seen = []
    sub_log = Log(CALLEE, (TOPIC,), b"sub")

    def on_subcall(subcall: Subcall) -> SubcallOutput:
        seen.append(subcall)
        return SubcallOutput("Returned", b"out", 7, [sub_log])

    handle = _handle()
    handle.subcall_handle = on_subcall
    reason, output = handle.call(CALLEE, None, b"in", 5, True, handle.context)
    assert (reason, output) == ("Returned", b"out")
    assert seen[0].address == CALLEE
    assert seen[0].input == b"in"
    assert seen[0].is_static is True
    assert handle.logs == [sub_log]
    assert handle.gas_used == call_cost(0, EvmConfig.london()) + 7


def test_call_with_value_charges_value_transfer():
    context = Context(TARGET, CALLER, 5)
    handle = MockHandle(TARGET, context)
    handle.subcall_handle = lambda subcall: SubcallOutput("Returned", b"", 0)
    handle.call(CALLEE, None, b"", None, False, context)
    assert handle.gas_used == call_cost(5, EvmConfig.london())
    assert handle.gas_used > call_cost(0, EvmConfig.london())


def test_call_out_of_gas():
    handle = _handle(gas_limit=1)
    handle.subcall_handle = lambda subcall: SubcallOutput("Returned", b"x", 0)
    assert handle.call(CALLEE, None, b"", None, False, handle.context) == (
        ExitError.out_of_gas(),
        b"",
    )


def test_execute_returns_with_cost():
    tester = prepare_test(_Set(), CALLER, TARGET, b"hello").expect_cost(COST)
    tester.execute_returns(b"hello")
    assert tester.handle.gas_used == COST


def test_execute_returns_mismatch():
    tester = prepare_test(_Set(), CALLER, TARGET, b"hello")
    with pytest.raises(AssertionError):
        tester.execute_returns(b"other")
    assert tester.handle.gas_used == COST


def test_wrong_expected_cost_fails():
    tester = prepare_test(_Set(), CALLER, TARGET, b"hi").expect_cost(COST + 1)
    with pytest.raises(AssertionError):
        tester.execute_returns(b"hi")
    assert tester.handle.gas_used == COST


def test_execute_none_for_unknown_address():
    tester = prepare_test(_Set(), CALLER, OTHER, b"hi")
    tester.execute_none()
    assert tester.handle.gas_used == 0


def test_execute_some_on_unknown_address_fails():
    tester = prepare_test(_Set(), CALLER, OTHER, b"hi")
    with pytest.raises(AssertionError):
        tester.execute_some()
    assert tester.handle.gas_used == 0


def test_execute_some_returns_result():
    result = PrecompilesTester(_Set(), CALLER, TARGET, b"hi").execute_some()
    assert result == succeed(b"hi")


def test_execute_reverts_with_value():
    tester = prepare_test(_Set(), CALLER, TARGET, b"hi").with_value(1)
    tester.execute_reverts(lambda output: output == b"function is not payable")
    assert tester.handle.context.apparent_value == 1


def test_execute_reverts_failed_check():
    tester = prepare_test(_Set(), CALLER, TARGET, b"hi").with_value(1)
    with pytest.raises(AssertionError):
        tester.execute_reverts(lambda output: output == b"other")
    assert tester.handle.gas_used == COST


def test_execute_error_out_of_gas():
    tester = prepare_test(_Set(), CALLER, TARGET, b"hi").with_target_gas(COST - 1)
    tester.execute_error(ExitError.out_of_gas())
    assert tester.handle.gas_used == COST


def test_expect_log():
    tester = prepare_test(_Set(), CALLER, TARGET, b"log").expect_log(
        log1(TARGET, TOPIC, b"data")
    )
    tester.execute_returns(b"")
    assert tester.handle.logs == [log1(TARGET, TOPIC, b"data")]


def test_expect_no_logs_fails_when_logged():
    tester = prepare_test(_Set(), CALLER, TARGET, b"log").expect_no_logs()
    with pytest.raises(AssertionError):
        tester.execute_returns(b"")
    assert tester.handle.logs == [log1(TARGET, TOPIC, b"data")]


def test_subcall_handle_is_used():
    tester = prepare_test(_Set(), CALLER, TARGET, b"sub").with_subcall_handle(
        lambda subcall: SubcallOutput("Returned", subcall.input * 2, 0)
    )
    tester.execute_returns(b"xx")
    assert tester.handle.gas_used == COST + call_cost(0, EvmConfig.london())
    assert tester.handle.subcall_handle is None