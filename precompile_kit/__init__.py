"""Building blocks for EVM precompiles: ABI data, selectors, gas costs, handles and precompile sets."""

__version__ = "0.1.0"

__all__ = [
    "addresses",
    "costs",
    "data",
    "errors",
    "handle",
    "logs",
    "modifier",
    "precompile_set",
    "selectors",
    "substrate",
    "testing",
]