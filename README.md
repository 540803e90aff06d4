# precompile_kit

Building blocks for EVM precompiles written in Python:

- **Solidity ABI encoding and decoding** (`precompile_kit.data`). `EvmDataReader` and
  `EvmDataWriter` work with type descriptors: `UintType(bits)`, `Hash256Type`, `BoolType`,
  `AddressType`, `BytesType`, `ArrayType(item)` and `TupleType(*items)`. Values are plain
  Python values, plus the `Address` and `Bytes` wrappers. Offsets and padding follow the
  Solidity ABI.
- **Function selectors** (`precompile_kit.selectors`). `keccak256`, `function_selector` and
  `selector_enum` turn Solidity signatures into an `IntEnum` of 4-byte selectors.
- **Results and failures** (`precompile_kit.errors`). A successful call returns a
  `PrecompileOutput`. A failed call raises a `PrecompileFailure`, which is either a `Revert`
  carrying output bytes or an `EvmError` carrying an `ExitError`. The helpers `succeed`,
  `revert` and `error` build them.
- **Gas accounting** (`precompile_kit.costs`). `log_costs` and `call_cost` use the EVM's
  constants. `EvmConfig.london()` gives the London configuration.
- **Function modifiers** (`precompile_kit.modifier`). `check_function_modifier` runs the
  view, non-payable and payable checks against a call `Context`.
- **Logs** (`precompile_kit.logs`). `log0` to `log4` build a `Log`. `Log.compute_cost`
  prices a log, and `Log.record(handle)` emits it.
- **Handles** (`precompile_kit.handle`). `PrecompileHandle` is the abstract interface a
  precompile talks to. It provides input parsing, modifier checks and log cost recording.
- **Runtime dispatch** (`precompile_kit.substrate`). `RuntimeHelper` is configured with a
  weight-to-gas function. Its `try_dispatch` runs a call that has a `weight` and a
  `dispatch(origin)` method, metered against the gas that remains. A `DispatchError`
  raised by the call becomes a revert.
- **Precompile sets** (`precompile_kit.precompile_set`). These classes bind precompiles to
  places and combine them:
  - `PrecompileAt` and `StatefulPrecompileAt` bind a precompile to a fixed address.
  - `PrecompileSetStartingWith` binds one to an address prefix.
  - `PrecompilesInRangeInclusive` binds one to an address range.
  - `RevertPrecompile` always reverts.
  - `FragmentGroup` and `PrecompileSetBuilder` combine fragments.

  Recursion is forbidden by default (`recursion_limit=0`) and so is DELEGATECALL.
- **Address scheme** (`precompile_kit.addresses`). `hash_address`, `used_addresses` and
  `is_precompile` cover the fixed precompile addresses. `TokenKind` and `token_kind_of`
  cover the prefixed token contract addresses.
- **Testing helpers** (`precompile_kit.testing`). `MockHandle`, `PrecompilesTester` and
  `prepare_test` drive a precompile set in unit tests.

## Installation

```
pip install precompile_kit
```

## Encoding and decoding

Pass a type descriptor as `kind` to `EvmDataWriter.write(kind, value)` and to
`EvmDataReader.read(kind)`.

```python
from precompile_kit.data import (
    Address, AddressType, ArrayType, EvmDataReader, EvmDataWriter, UintType,
)

addresses = ArrayType(AddressType())
owners = [Address(bytes([0x11] * 20)), Address(bytes([0x22] * 20))]

encoded = EvmDataWriter().write(addresses, owners).write(UintType(256), 42).build()

reader = EvmDataReader(encoded)
assert reader.read(addresses) == owners
assert reader.read(UintType(256)) == 42
```

Malformed input raises a `Revert` whose `output` holds the reason, for example
`b"tried to parse H160 out of bounds"`. `EvmDataReader.new_skip_selector(data)` skips the
leading 4-byte selector. `EvmDataReader.read_selector(data, enum_type)` parses that selector
into a selector enum.

## Selectors

```python
from precompile_kit.selectors import function_selector, selector_enum

Action = selector_enum("Action", {
    "BALANCE_OF": "balanceOf(address)",
    "TRANSFER": "transfer(address,uint256)",
})
assert function_selector("transfer(address,uint256)") == Action.TRANSFER
```

## Modifiers

```python
from precompile_kit.modifier import Context, FunctionModifier, check_function_modifier

context = Context(address=bytes(20), caller=bytes(20), apparent_value=0)
check_function_modifier(context, False, FunctionModifier.NON_PAYABLE)
```

The checks raise a `Revert` in two cases:

- A call made in a static context to a function other than a view. The output is
  `b"can't call non-static function in static context"`.
- A call that carries value to a function that is not payable. The output is
  `b"function is not payable"`.

The static check comes first.

## Gas costs

```python
from precompile_kit.costs import EvmConfig, call_cost, log_costs

log_costs(3, 32)                    # 375 + 3 * 375 + 32 * 8
call_cost(0, EvmConfig.london())
```

## Precompile sets and testing

```python
from precompile_kit.errors import succeed
from precompile_kit.precompile_set import (
    FragmentGroup, PrecompileAt, PrecompileSetBuilder, RevertPrecompile, address_u64,
)
from precompile_kit.testing import prepare_test

def echo(handle):
    return succeed(handle.input)

precompiles = PrecompileSetBuilder(FragmentGroup(
    PrecompileAt(address_u64(1024), echo),
    RevertPrecompile(address_u64(1025)),
))

caller = address_u64(7)
prepare_test(precompiles, caller, address_u64(1024), b"hi").expect_no_logs().execute_returns(b"hi")
prepare_test(precompiles, caller, address_u64(1025), b"").execute_reverts(lambda out: out == b"revert")
prepare_test(precompiles, caller, address_u64(9), b"").execute_none()
```

`prepare_test` accepts any object with an `execute(handle)` method. The tester also
supports the following:

- `with_value` sets the value the call carries.
- `with_target_gas` sets the gas limit.
- `with_subcall_handle` sets the handler for `MockHandle.call`.
- `expect_cost` and `expect_log` add checks on gas used and on logs.
- `execute_error` expects a call that fails with an `EvmError`.

## What this package does not do

This package contains no EVM and no runtime:

- `PrecompileHandle` is an abstract interface. The only implementation supplied is
  `MockHandle`, for tests.
- `RuntimeHelper.try_dispatch` runs whatever call objects you give it.
- It ships none of the precompiles themselves. That includes the standard Ethereum ones.
  `used_addresses` only lists their addresses.
- The token contracts behind the `TokenKind` address prefixes are not included either. For
  those, the package only covers how token ids map to and from addresses, and the `create`
  selectors.