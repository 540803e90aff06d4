"""EVM logs and helpers to build them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .costs import log_costs


def _fixed(value: Any, size: int, what: str) -> bytes:
    if isinstance(value, int):
        raise TypeError(f"{what} must be bytes, not int")
    raw = bytes(value)
    if len(raw) != size:
        raise ValueError(f"{what} must be {size} bytes long")
    return raw


def _data(value: Any) -> bytes:
    if isinstance(value, int):
        raise TypeError("log data must be bytes, not int")
    return bytes(value)


@dataclass(frozen=True)
class Log:
    """An EVM log: emitting address, up to four topics and raw data."""

    address: bytes
    topics: tuple[bytes, ...]
    data: bytes

    def __post_init__(self) -> None:
        object.__setattr__(self, "address", _fixed(self.address, 20, "address"))
        topics = tuple(_fixed(topic, 32, "topic") for topic in self.topics)
        object.__setattr__(self, "topics", topics)
        object.__setattr__(self, "data", _data(self.data))

    def compute_cost(self) -> int:
        """Gas cost of emitting this log."""
        return log_costs(len(self.topics), len(self.data))

    def record(self, handle: Any) -> None:
        """Emit this log through ``handle``."""
        handle.log(self.address, list(self.topics), self.data)


def log0(address: bytes, data: bytes) -> Log:
    """Create a log without topics."""
    return Log(address, (), data)


def log1(address: bytes, topic0: bytes, data: bytes) -> Log:
    """Create a log with one topic."""
    return Log(address, (topic0,), data)


def log2(address: bytes, topic0: bytes, topic1: bytes, data: bytes) -> Log:
    """Create a log with two topics."""
    return Log(address, (topic0, topic1), data)


def log3(
    address: bytes, topic0: bytes, topic1: bytes, topic2: bytes, data: bytes
) -> Log:
    """Create a log with three topics."""
    return Log(address, (topic0, topic1, topic2), data)


def log4(
    address: bytes,
    topic0: bytes,
    topic1: bytes,
    topic2: bytes,
    topic3: bytes,
    data: bytes,
) -> Log:
    """Create a log with four topics."""
    return Log(address, (topic0, topic1, topic2, topic3), data)