"""
FixedPoint - scaled-integer decimals with EVM truncation semantics

A FixedPoint is `magnitude / 10**decimals` where magnitude is a Python int.
Token amounts on-chain are integers in base units and every division in
the EVM truncates. Curve math produces values with more decimal places
than a low-decimal token can hold, so every operation here scales both
operands into the integer domain, does integer math, and truncates the
result back to `decimals`.

INVARIANTS:
1. Results always keep the decimals of the left operand
2. Rounding is always toward zero, never half-up, never banker's
3. Identical inputs give bit-identical magnitudes (pure int arithmetic)
4. Floats enter through their shortest repr, so 0.3 means exactly 3/10

Operand rules: add/sub re-express a FixedPoint operand at this value's
decimals (truncating). mul/div/mul_div use a FixedPoint operand's raw
magnitude and scale, so only the final result is truncated. An
int/float/str/Decimal operand is converted at this value's decimals
(truncating).
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import ClassVar, Final, Union

from rmm_sim.core.errors import DecimalMismatchError, DivisionByZeroError, NegativeAmountError

# =============================================================================
# CONSTANTS
# =============================================================================

# Engine precision: every value is scaled to 18 decimals for on-chain math
WAD_DECIMALS: Final[int] = 18

# Largest uint256, used as the saturating "infinity" magnitude
MAX_UINT256: Final[int] = 2**256 - 1

# Q64.64 denominator of the on-chain invariant representation
X64_DENOMINATOR: Final[int] = 2**64

Number = Union[int, float, str, Decimal]


# =============================================================================
# INTEGER HELPERS
# =============================================================================


def _trunc_div(numerator: int, denominator: int) -> int:
    """Integer division rounding toward zero, like EVM `sdiv`."""
    quotient = abs(numerator) // abs(denominator)
    return -quotient if (numerator < 0) != (denominator < 0) else quotient


def _scaled_int(value: Number, decimals: int) -> int:
    """
    Exact `trunc(value * 10**decimals)` without any float or context rounding.
    """
    if isinstance(value, bool):
        raise TypeError("bool is not a numeric amount")
    if isinstance(value, int):
        return value * 10**decimals
    if isinstance(value, float):
        dec = Decimal(repr(value))
    else:
        dec = Decimal(value)

    if not dec.is_finite():
        raise ValueError(f"Cannot scale a non-finite value: {value!r}")

    sign, digits, exponent = dec.as_tuple()
    coefficient = int("".join(map(str, digits))) if digits else 0
    shift = exponent + decimals
    if shift >= 0:
        scaled = coefficient * 10**shift
    else:
        scaled = coefficient // 10 ** (-shift)
    return -scaled if sign else scaled


# =============================================================================
# FIXED POINT
# =============================================================================


@dataclass(frozen=True, eq=False)
class FixedPoint:
    """
    Truncating fixed-point decimal with an explicit decimal width.

    Examples:
        >>> FixedPoint.from_value(1.23456789, 6)
        FixedPoint('1.234567', decimals=6)
        >>> FixedPoint.from_value(10, 6).div(3)
        FixedPoint('3.333333', decimals=6)
    """

    magnitude: int
    decimals: int = WAD_DECIMALS

    ZERO: ClassVar["FixedPoint"]
    HALF: ClassVar["FixedPoint"]
    ONE: ClassVar["FixedPoint"]
    INFINITY: ClassVar["FixedPoint"]

    def __post_init__(self) -> None:
        if isinstance(self.magnitude, bool) or not isinstance(self.magnitude, int):
            raise TypeError(f"magnitude must be an int, got {type(self.magnitude).__name__}")
        if not isinstance(self.decimals, int) or self.decimals < 0:
            raise ValueError(f"decimals must be a non-negative int, got {self.decimals!r}")

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def from_value(
        cls,
        value: Union[Number, "FixedPoint"],
        decimals: int = WAD_DECIMALS,
        *,
        allow_negative: bool = True,
    ) -> "FixedPoint":
        """
        Build a value from a human-readable number, truncating to `decimals`.

        Args:
            value: Unscaled number (e.g. 1.5 for one and a half tokens)
            decimals: Decimal width of the token the value represents
            allow_negative: False for reserves and liquidity

        Raises:
            NegativeAmountError: If value < 0 and allow_negative is False
        """
        if isinstance(value, FixedPoint):
            result = value.rescale(decimals)
        else:
            result = cls(_scaled_int(value, decimals), decimals)
        if not allow_negative and result.magnitude < 0:
            raise NegativeAmountError(f"Amount cannot be negative: {value!r}")
        return result

    @classmethod
    def parse(
        cls,
        magnitude: Union[int, str],
        decimals: int = WAD_DECIMALS,
        *,
        allow_negative: bool = True,
    ) -> "FixedPoint":
        """
        Build a value from raw base units (wei), as returned by a chain node.

        Raises:
            NegativeAmountError: If magnitude < 0 and allow_negative is False
        """
        raw = int(magnitude)
        if not allow_negative and raw < 0:
            raise NegativeAmountError(f"Amount cannot be negative: {magnitude!r}")
        return cls(raw, decimals)

    @classmethod
    def from_x64(cls, raw: Union[int, str], decimals: int = WAD_DECIMALS) -> "FixedPoint":
        """Build a value from a signed Q64.64 integer, truncating to `decimals`."""
        return cls(_trunc_div(int(raw) * 10**decimals, X64_DENOMINATOR), decimals)

    # -------------------------------------------------------------------------
    # Readouts
    # -------------------------------------------------------------------------

    @property
    def scale_factor(self) -> int:
        return 10**self.decimals

    @property
    def value(self) -> Decimal:
        """Exact decimal value."""
        digits = tuple(int(c) for c in str(abs(self.magnitude)))
        return Decimal((1 if self.magnitude < 0 else 0, digits, -self.decimals))

    @property
    def normalized(self) -> float:
        """Truncated value as a float, for the pricing primitives."""
        return float(self.value)

    @property
    def is_zero(self) -> bool:
        return self.magnitude == 0

    @property
    def is_negative(self) -> bool:
        return self.magnitude < 0

    @property
    def is_infinity(self) -> bool:
        return self.magnitude >= MAX_UINT256

    def rescale(self, decimals: int) -> "FixedPoint":
        """Same value at another decimal width, truncating when narrowing."""
        return FixedPoint(self._aligned_magnitude(self, decimals), decimals)

    def to_x64(self) -> int:
        """Q64.64 representation, as the engine contract stores its invariant."""
        return _trunc_div(self.magnitude * X64_DENOMINATOR, self.scale_factor)

    # -------------------------------------------------------------------------
    # Arithmetic
    # -------------------------------------------------------------------------

    @staticmethod
    def _aligned_magnitude(value: "FixedPoint", decimals: int) -> int:
        if value.decimals <= decimals:
            return value.magnitude * 10 ** (decimals - value.decimals)
        return _trunc_div(value.magnitude, 10 ** (value.decimals - decimals))

    def _upscale(self, operand: Union[Number, "FixedPoint"]) -> int:
        """Operand expressed in this value's integer domain."""
        if isinstance(operand, FixedPoint):
            return self._aligned_magnitude(operand, self.decimals)
        return _scaled_int(operand, self.decimals)

    def _fraction(self, operand: Union[Number, "FixedPoint"]) -> tuple[int, int]:
        """Operand as an exact (numerator, denominator) pair of ints."""
        if isinstance(operand, FixedPoint):
            return operand.magnitude, operand.scale_factor
        return _scaled_int(operand, self.decimals), self.scale_factor

    def _with(self, magnitude: int) -> "FixedPoint":
        return FixedPoint(magnitude, self.decimals)

    def add(self, adder: Union[Number, "FixedPoint"]) -> "FixedPoint":
        """Scales up, adds scaled values, keeps this width."""
        return self._with(self.magnitude + self._upscale(adder))

    def sub(self, subtractor: Union[Number, "FixedPoint"]) -> "FixedPoint":
        """Scales up, subtracts scaled values, keeps this width."""
        return self._with(self.magnitude - self._upscale(subtractor))

    def mul(self, multiplier: Union[Number, "FixedPoint"]) -> "FixedPoint":
        """`self * multiplier`, truncated."""
        numerator, denominator = self._fraction(multiplier)
        return self._with(_trunc_div(self.magnitude * numerator, denominator))

    def _mul_div_terms(
        self,
        multiplier: Union[Number, "FixedPoint"],
        divider: Union[Number, "FixedPoint"],
    ) -> tuple[int, int]:
        mul_num, mul_den = self._fraction(multiplier)
        div_num, div_den = self._fraction(divider)
        if div_num == 0:
            raise DivisionByZeroError(f"mul_div by zero divider: {divider!r}")
        return self.magnitude * mul_num * div_den, mul_den * div_num

    def mul_div(
        self,
        multiplier: Union[Number, "FixedPoint"],
        divider: Union[Number, "FixedPoint"],
    ) -> "FixedPoint":
        """
        `self * multiplier / divider` with a single truncation at the end.

        Raises:
            DivisionByZeroError: If divider is zero
        """
        numerator, denominator = self._mul_div_terms(multiplier, divider)
        return self._with(_trunc_div(numerator, denominator))

    def mul_div_ceil(
        self,
        multiplier: Union[Number, "FixedPoint"],
        divider: Union[Number, "FixedPoint"],
    ) -> "FixedPoint":
        """
        `self * multiplier / divider`, rounded up to the next unit.

        Raises:
            DivisionByZeroError: If divider is zero
        """
        numerator, denominator = self._mul_div_terms(multiplier, divider)
        return self._with(-(-numerator // denominator))

    def _div_terms(self, divider: Union[Number, "FixedPoint"]) -> tuple[int, int]:
        div_num, div_den = self._fraction(divider)
        if div_num == 0:
            raise DivisionByZeroError(f"Division by zero divider: {divider!r}")
        return self.magnitude * div_den, div_num

    def div(self, divider: Union[Number, "FixedPoint"]) -> "FixedPoint":
        """
        `self / divider`, truncated toward zero.

        Raises:
            DivisionByZeroError: If divider is zero
        """
        numerator, denominator = self._div_terms(divider)
        return self._with(_trunc_div(numerator, denominator))

    def div_ceil(self, divider: Union[Number, "FixedPoint"]) -> "FixedPoint":
        """
        `self / divider`, rounded up to the next unit.

        Raises:
            DivisionByZeroError: If divider is zero
        """
        numerator, denominator = self._div_terms(divider)
        return self._with(-(-numerator // denominator))

    # -------------------------------------------------------------------------
    # Comparison
    # -------------------------------------------------------------------------

    def _compare(self, other: object) -> int:
        if isinstance(other, FixedPoint):
            theirs = other.value
        elif isinstance(other, (int, float, str, Decimal)) and not isinstance(other, bool):
            theirs = Decimal(repr(other)) if isinstance(other, float) else Decimal(other)
        else:
            return NotImplemented
        mine = self.value
        return (mine > theirs) - (mine < theirs)

    def __eq__(self, other: object) -> bool:
        result = self._compare(other)
        if result is NotImplemented:
            return NotImplemented
        return result == 0

    def __hash__(self) -> int:
        return hash(self.value)

    def __lt__(self, other: object) -> bool:
        result = self._compare(other)
        return result if result is NotImplemented else result < 0

    def __le__(self, other: object) -> bool:
        result = self._compare(other)
        return result if result is NotImplemented else result <= 0

    def __gt__(self, other: object) -> bool:
        result = self._compare(other)
        return result if result is NotImplemented else result > 0

    def __ge__(self, other: object) -> bool:
        result = self._compare(other)
        return result if result is NotImplemented else result >= 0

    def __float__(self) -> float:
        return self.normalized

    def __str__(self) -> str:
        return str(self.value)

    def __repr__(self) -> str:
        return f"FixedPoint('{self.value}', decimals={self.decimals})"


FixedPoint.ZERO = FixedPoint(0)
FixedPoint.HALF = FixedPoint(5 * 10 ** (WAD_DECIMALS - 1))
FixedPoint.ONE = FixedPoint(10**WAD_DECIMALS)
FixedPoint.INFINITY = FixedPoint(MAX_UINT256)


def validate_decimals(amount: FixedPoint, decimals: int, label: str = "Amount") -> None:
    """
    Check that an amount carries the decimal width of its token.

    Raises:
        DecimalMismatchError: If the widths differ
    """
    if amount.decimals != decimals:
        raise DecimalMismatchError(
            f"{label} decimals does not match token decimals: {amount.decimals} != {decimals}"
        )
