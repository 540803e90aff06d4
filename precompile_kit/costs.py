"""Gas cost calculations for logs and sub-calls."""

from __future__ import annotations

from dataclasses import dataclass

from .errors import EvmError, ExitError

_MAX_U64 = 2**64 - 1

G_LOG = 375
G_LOGDATA = 8
G_LOGTOPIC = 375

G_CALLVALUE = 9000
G_NEWACCOUNT = 25000


@dataclass(frozen=True)
class EvmConfig:
    """The subset of EVM configuration that cost estimates depend on."""

    gas_call: int
    gas_account_access_cold: int
    gas_storage_read_warm: int
    increase_state_access_gas: bool
    empty_considered_exists: bool

    @classmethod
    def london(cls) -> EvmConfig:
        return cls(
            gas_call=0,
            gas_account_access_cold=2600,
            gas_storage_read_warm=100,
            increase_state_access_gas=True,
            empty_considered_exists=False,
        )


def _checked(value: int) -> int:
    if value > _MAX_U64:
        raise EvmError(ExitError.out_of_gas())
    return value


def log_costs(topics: int, data_len: int) -> int:
    """Gas cost of emitting a log with ``topics`` topics and ``data_len`` bytes."""
    if topics < 0 or data_len < 0:
        raise ValueError("topics and data length must be non-negative")
    topic_cost = _checked(G_LOGTOPIC * topics)
    data_cost = _checked(G_LOGDATA * data_len)
    return _checked(_checked(G_LOG + topic_cost) + data_cost)


def call_cost(value: int, config: EvmConfig) -> int:
    """Worst-case gas cost of a sub-call transferring ``value``."""
    transfers_value = value != 0
    is_cold = True
    new_account = True

    if config.increase_state_access_gas:
        access = (
            config.gas_account_access_cold if is_cold else config.gas_storage_read_warm
        )
    else:
        access = config.gas_call

    transfer = G_CALLVALUE if transfers_value else 0

    eip161 = not config.empty_considered_exists
    if eip161:
        new = G_NEWACCOUNT if transfers_value and new_account else 0
    else:
        new = G_NEWACCOUNT if new_account else 0

    return access + transfer + new