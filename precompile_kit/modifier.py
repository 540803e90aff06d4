"""Checks related to function modifiers (view, non-payable, payable)."""

from __future__ import annotations

import enum
from dataclasses import dataclass

from .errors import revert

_MAX_U256 = 2**256 - 1


@dataclass(frozen=True)
class Context:
    """The execution context a precompile is called in."""

    address: bytes
    caller: bytes
    apparent_value: int = 0

    def __post_init__(self) -> None:
        for name in ("address", "caller"):
            value = getattr(self, name)
            if len(value) != 20:
                raise ValueError(f"{name} must be 20 bytes long")
            object.__setattr__(self, name, bytes(value))
        if not 0 <= self.apparent_value <= _MAX_U256:
            raise ValueError("apparent value must fit in 256 bits")


class FunctionModifier(enum.Enum):
    """Modifiers a Solidity function can be annotated with."""

    VIEW = "view"
    NON_PAYABLE = "nonpayable"
    PAYABLE = "payable"


def check_function_modifier(
    context: Context, is_static: bool, modifier: FunctionModifier
) -> None:
    """Raise a revert if the call is not allowed in this context."""
    if is_static and modifier is not FunctionModifier.VIEW:
        raise revert("can't call non-static function in static context")
    if modifier is not FunctionModifier.PAYABLE and context.apparent_value > 0:
        raise revert("function is not payable")