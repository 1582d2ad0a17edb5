"""Enums, results and diagnostic events of the curve engine."""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable

from rmm_sim.core.math.fixed_point import FixedPoint

if TYPE_CHECKING:
    from rmm_sim.engine.curve_engine import CurveEngine


# =============================================================================
# ENUMS
# =============================================================================


class SwapDirection(str, Enum):
    """Which token the trader pays in."""

    RISKY_IN = "risky_in"
    STABLE_IN = "stable_in"


class PoolSide(str, Enum):
    """Side of the pool a liquidity quote is anchored on."""

    RISKY = "risky"
    STABLE = "stable"
    LIQUIDITY = "liquidity"


class CurveStatus(str, Enum):
    """Lifecycle of a pool, a pure function of wall-clock time vs maturity."""

    ACTIVE = "active"
    EXPIRED = "expired"


# =============================================================================
# RESULTS
# =============================================================================


@dataclass(frozen=True)
class SwapResult:
    """
    Outcome of a simulated swap.

    A trade that is not possible (negative amount, reserve pushed past the
    curve) is reported with zero amounts rather than an exception.

    Attributes:
        direction: Token paid in
        amount_in: Gross amount paid in, input token decimals
        amount_out: Amount received, output token decimals
        effective_amount_in: amount_in * gamma, the part that moves the curve
        invariant_last: Invariant before the trade
        next_invariant: Invariant after the trade
        effective_price: amount_out / amount_in at 18 decimals
        engine: Engine holding the post-trade state (the caller's engine for
            committed swaps, a clone otherwise)
    """

    direction: SwapDirection
    amount_in: FixedPoint
    amount_out: FixedPoint
    effective_amount_in: FixedPoint
    invariant_last: FixedPoint
    next_invariant: FixedPoint
    effective_price: FixedPoint
    engine: "CurveEngine"

    @property
    def feasible(self) -> bool:
        return not self.amount_in.is_zero and not self.amount_out.is_zero


@dataclass(frozen=True)
class LiquidityQuote:
    """Amounts of each side for a proportional allocate/remove."""

    del_risky: FixedPoint
    del_stable: FixedPoint
    del_liquidity: FixedPoint


@dataclass(frozen=True)
class LiquidityValue:
    """Pool value in the unit of the supplied prices, 18 decimals."""

    risky_value: FixedPoint
    stable_value: FixedPoint
    total: FixedPoint
    value_per_liquidity: FixedPoint


# =============================================================================
# EVENTS
# =============================================================================


@dataclass(frozen=True)
class InvariantRegression:
    """
    The invariant after a simulated swap is lower than before it.

    Advisory only: the swap result is still returned and state is not
    rolled back.
    """

    pool_id: str
    direction: SwapDirection
    amount_in: FixedPoint
    invariant_last: FixedPoint
    next_invariant: FixedPoint

    @property
    def shortfall(self) -> FixedPoint:
        return self.invariant_last.sub(self.next_invariant)


InvariantRegressionHandler = Callable[[InvariantRegression], None]
