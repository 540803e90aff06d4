import pytest

from precompile_kit.errors import Revert
from precompile_kit.modifier import Context, FunctionModifier, check_function_modifier

PAYABLE_ERROR = b"function is not payable"
STATIC_ERROR = b"can't call non-static function in static context"


def context(value):
    return Context(address=bytes(20), caller=bytes(20), apparent_value=value)


def outcome(value, is_static, modifier):
    try:
        check_function_modifier(context(value), is_static, modifier)
    except Revert as exc:
        return exc.output
    return None


@pytest.mark.parametrize(
    "value,is_static,modifier,expected",
    [
        # Can't call non-static functions in static context.
        (0, True, FunctionModifier.PAYABLE, STATIC_ERROR),
        (0, True, FunctionModifier.NON_PAYABLE, STATIC_ERROR),
        (0, True, FunctionModifier.VIEW, None),
        # Static check is performed before non-payable check.
        (1, True, FunctionModifier.PAYABLE, STATIC_ERROR),
        (1, True, FunctionModifier.NON_PAYABLE, STATIC_ERROR),
        # View passes static check but fails for payable.
        (1, True, FunctionModifier.VIEW, PAYABLE_ERROR),
        # Can't send funds to non payable function.
        (1, False, FunctionModifier.PAYABLE, None),
        (1, False, FunctionModifier.NON_PAYABLE, PAYABLE_ERROR),
        (1, False, FunctionModifier.VIEW, PAYABLE_ERROR),
        # Any function can be called without funds.
        (0, False, FunctionModifier.PAYABLE, None),
        (0, False, FunctionModifier.NON_PAYABLE, None),
        (0, False, FunctionModifier.VIEW, None),
    ],
)
def test_check_function_modifier(value, is_static, modifier, expected):
    assert outcome(value, is_static, modifier) == expected


def test_context_rejects_short_address():
    with pytest.raises(ValueError):
        Context(address=bytes(19), caller=bytes(20))


def test_context_rejects_negative_value():
    with pytest.raises(ValueError):
        Context(address=bytes(20), caller=bytes(20), apparent_value=-1)


def test_context_default_value_is_zero():
    assert Context(address=bytes(20), caller=bytes(20)).apparent_value == 0