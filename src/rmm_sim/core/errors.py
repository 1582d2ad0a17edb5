"""
Exception hierarchy for the RMM simulation core.

RMMError
├── RMMValidationError        fatal, surfaced immediately, never retried
│   ├── CalibrationError      curve parameter out of bounds
│   ├── DecimalMismatchError  amount width != token decimals
│   └── SnapshotError         malformed pool snapshot payload
├── NegativeAmountError       negative reserve/liquidity at construction
└── DivisionByZeroError       scaled denominator is exactly zero

Infeasible or negative swaps are not exceptions: the engine returns a
zero SwapResult for them.

None of these derive from ValueError, so raising them inside a pydantic
validator propagates the exception itself instead of a wrapped
pydantic.ValidationError.
"""

from typing import Any


class RMMError(Exception):
    """Base class for all errors raised by rmm_sim."""


class RMMValidationError(RMMError):
    """Input failed validation; the attempted operation is aborted."""


class CalibrationError(RMMValidationError):
    """
    A calibration parameter is outside of its allowed bounds.

    Attributes:
        field: Name of the offending calibration field
        value: The rejected value
    """

    def __init__(self, field: str, value: Any, message: str):
        self.field = field
        self.value = value
        super().__init__(f"{field}: {message} (got {value!r})")


class DecimalMismatchError(RMMValidationError):
    """Decimal width of an amount does not match the token it represents."""


class SnapshotError(RMMValidationError):
    """Pool snapshot payload does not satisfy the pool_snapshot contract."""


class NegativeAmountError(RMMError):
    """A reserve or liquidity amount is negative."""


class DivisionByZeroError(RMMError, ZeroDivisionError):
    """Fixed-point division by a denominator that scales to exactly zero."""
