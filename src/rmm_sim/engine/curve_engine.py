"""
CurveEngine - off-chain replica of one RMM-01 pool

Holds the live reserves of a pool and reproduces what the engine contract
computes for it: the trading invariant, swaps against the curve, implied
prices and proportional liquidity quotes. All amounts are FixedPoint
values truncated exactly as the contract truncates; the pricing
primitives in rmm_math run on plain floats in between.

State:
    reserve_risky / reserve_stable  token base units, token decimals
    liquidity                       18 decimals
    invariant                       signed, 18 decimals

Swaps mutate state only when called with commit=True. The default is to
run against a clone, so any number of previews can share one base engine.

Swap algorithm (exact in, symmetric for both directions):
    1. negative or zero amount -> zero result
    2. k_last = invariant of the current reserves
    3. effective_in = amount_in * gamma
    4. in_per_liq = (reserve_in + effective_in) / liquidity
    5. out_per_liq = curve(in_per_liq, k_last)
    6. amount_out = reserve_out - out_per_liq * liquidity, negative -> zero result
    7. reserves += amount_in / -= amount_out
    8. next_invariant < k_last -> InvariantRegression event (advisory)
    9. effective_price = amount_out / amount_in at 18 decimals
"""

import logging
import time
from typing import Callable, Optional, Sequence, Union

from rmm_sim.core.domain.calibration import BASIS_POINTS, Calibration
from rmm_sim.core.domain.pool_identity import PoolIdentity
from rmm_sim.core.domain.pool_snapshot import PoolSnapshot
from rmm_sim.core.errors import CalibrationError, NegativeAmountError
from rmm_sim.core.math import rmm_math
from rmm_sim.core.math.fixed_point import FixedPoint, Number, validate_decimals
from rmm_sim.core.math.numerical_safeguards import is_valid_float, safe_divide, sanitize_float
from rmm_sim.engine.config import EngineConfig
from rmm_sim.engine.types import (
    CurveStatus,
    InvariantRegression,
    InvariantRegressionHandler,
    LiquidityQuote,
    LiquidityValue,
    PoolSide,
    SwapDirection,
    SwapResult,
)

logger = logging.getLogger(__name__)

Amount = Union[Number, FixedPoint]


class CurveEngine:
    """Reserves, invariant and swap simulation of a single pool."""

    def __init__(
        self,
        calibration: Calibration,
        reserve_risky: FixedPoint,
        reserve_stable: FixedPoint,
        liquidity: FixedPoint,
        invariant: Optional[FixedPoint] = None,
        *,
        gamma_bps: Optional[int] = None,
        config: Optional[EngineConfig] = None,
        clock: Optional[Callable[[], float]] = None,
        on_invariant_regression: Optional[InvariantRegressionHandler] = None,
    ):
        """
        Args:
            calibration: Validated curve parameters
            reserve_risky: Risky reserve, risky token decimals
            reserve_stable: Stable reserve, stable token decimals
            liquidity: Total liquidity, config.liquidity_decimals
            invariant: Stored invariant; computed from reserves when omitted
            gamma_bps: Fee complement override in (0, 10_000]; defaults to
                the calibration's gamma. 10_000 simulates a fee-free curve.
            config: Fixed-point widths and timing constants
            clock: Returns the current unix time in seconds
            on_invariant_regression: Receives InvariantRegression events;
                when omitted they are logged at WARNING

        Raises:
            DecimalMismatchError: If a reserve does not carry its token's decimals
            NegativeAmountError: If a reserve or the liquidity is negative
            CalibrationError: If gamma_bps is out of range
        """
        self.config = config or EngineConfig()
        self.calibration = calibration
        self.identity = PoolIdentity.of(calibration)

        validate_decimals(reserve_risky, calibration.risky.decimals, "Risky reserve")
        validate_decimals(reserve_stable, calibration.stable.decimals, "Stable reserve")
        validate_decimals(liquidity, self.config.liquidity_decimals, "Liquidity")
        for label, amount in (
            ("Risky reserve", reserve_risky),
            ("Stable reserve", reserve_stable),
            ("Liquidity", liquidity),
        ):
            if amount.is_negative:
                raise NegativeAmountError(f"{label} cannot be negative: {amount}")

        if gamma_bps is None:
            gamma_bps = calibration.gamma
        elif not 0 < gamma_bps <= BASIS_POINTS:
            raise CalibrationError("gamma", gamma_bps, f"Fee complement override must be in (0, {BASIS_POINTS}]")
        self.gamma_bps = gamma_bps

        self._clock = clock or time.time
        self._on_invariant_regression = on_invariant_regression

        # ===== State =====
        self.reserve_risky = reserve_risky
        self.reserve_stable = reserve_stable
        self.liquidity = liquidity
        if invariant is not None:
            self.invariant = invariant
        elif liquidity.is_zero:
            self.invariant = FixedPoint(0, self.config.invariant_decimals)
        else:
            self.invariant = self.calc_invariant()

    # =========================================================================
    # CONSTRUCTORS
    # =========================================================================

    @classmethod
    def from_reference_price(
        cls,
        calibration: Calibration,
        reference_price: float,
        liquidity: Amount = 1,
        **kwargs,
    ) -> "CurveEngine":
        """
        Pool whose reserves price the risky asset at `reference_price`.

        Risky per liquidity is 1 - delta of the replicated call, stable is
        read off the curve. The invariant is defined as zero.
        """
        config = kwargs.get("config") or EngineConfig()
        liquidity_fp = FixedPoint.from_value(liquidity, config.liquidity_decimals, allow_negative=False)

        strike = calibration.strike_float
        sigma = calibration.sigma_float
        tau = calibration.tau_seconds / config.seconds_per_year

        risky_per_liquidity = FixedPoint.from_value(
            sanitize_float(rmm_math.risky_given_reference_price(strike, sigma, tau, reference_price)),
            calibration.risky.decimals,
        )
        stable_per_liquidity = FixedPoint.from_value(
            sanitize_float(rmm_math.stable_given_risky(risky_per_liquidity.normalized, strike, sigma, tau)),
            calibration.stable.decimals,
        )

        return cls(
            calibration,
            risky_per_liquidity.mul(liquidity_fp),
            stable_per_liquidity.mul(liquidity_fp),
            liquidity_fp,
            FixedPoint(0, config.invariant_decimals),
            **kwargs,
        )

    @classmethod
    def from_snapshot(cls, snapshot: PoolSnapshot, **kwargs) -> "CurveEngine":
        """
        Pool built from live on-chain reserves.

        Raises:
            CalibrationError: If the snapshot's calibration is out of bounds
        """
        config = kwargs.get("config") or EngineConfig()
        calibration = snapshot.to_calibration()
        invariant = None
        if snapshot.invariant_x64 is not None:
            invariant = FixedPoint.from_x64(snapshot.invariant_x64, config.invariant_decimals)

        return cls(
            calibration,
            FixedPoint.parse(snapshot.reserve_risky, calibration.risky.decimals, allow_negative=False),
            FixedPoint.parse(snapshot.reserve_stable, calibration.stable.decimals, allow_negative=False),
            FixedPoint.parse(snapshot.liquidity, config.liquidity_decimals, allow_negative=False),
            invariant,
            **kwargs,
        )

    def clone(self) -> "CurveEngine":
        """Independent copy sharing only immutable values."""
        return CurveEngine(
            self.calibration,
            self.reserve_risky,
            self.reserve_stable,
            self.liquidity,
            self.invariant,
            gamma_bps=self.gamma_bps,
            config=self.config,
            clock=self._clock,
            on_invariant_regression=self._on_invariant_regression,
        )

    # =========================================================================
    # READ-ONLY FIELDS
    # =========================================================================

    @property
    def pool_id(self) -> str:
        return self.identity.pool_id

    @property
    def strike(self) -> FixedPoint:
        return self.calibration.strike_value

    @property
    def sigma(self) -> int:
        return self.calibration.sigma

    @property
    def gamma(self) -> float:
        """Fee complement applied to swaps, as a fraction."""
        return self.gamma_bps / BASIS_POINTS

    @property
    def maturity(self) -> int:
        return self.calibration.maturity

    # =========================================================================
    # TIME
    # =========================================================================

    @property
    def tau(self) -> float:
        """Years between the last pool update and maturity, floored at zero."""
        return self.calibration.tau_seconds / self.config.seconds_per_year

    @property
    def remaining(self) -> int:
        """Seconds left until maturity as of now, floored at zero."""
        return max(self.calibration.maturity - int(self._clock()), 0)

    @property
    def expired(self) -> bool:
        return self.remaining <= 0

    @property
    def status(self) -> CurveStatus:
        return CurveStatus.EXPIRED if self.expired else CurveStatus.ACTIVE

    @property
    def swappable(self) -> bool:
        """The contract still accepts swaps for a short buffer past maturity."""
        return self._clock() < self.calibration.maturity + self.config.swap_buffer_seconds

    # =========================================================================
    # INVARIANT
    # =========================================================================

    def _per_liquidity(self, reserve: FixedPoint) -> float:
        return reserve.div(self.liquidity).normalized

    def calc_invariant(self) -> FixedPoint:
        """
        Invariant of the current reserves; stored as the engine's invariant.

        Raises:
            DivisionByZeroError: If liquidity is zero
        """
        k = rmm_math.invariant_given(
            self._per_liquidity(self.reserve_risky),
            self._per_liquidity(self.reserve_stable),
            self.calibration.strike_float,
            self.calibration.sigma_float,
            self.tau,
        )
        self.invariant = FixedPoint.from_value(sanitize_float(k), self.config.invariant_decimals)
        return self.invariant

    # =========================================================================
    # SWAPS
    # =========================================================================

    def _to_amount(self, amount: Amount, decimals: int) -> FixedPoint:
        if isinstance(amount, FixedPoint):
            validate_decimals(amount, decimals)
            return amount
        return FixedPoint.from_value(amount, decimals)

    def _token_decimals(self, direction: SwapDirection) -> tuple[int, int]:
        risky = self.calibration.risky.decimals
        stable = self.calibration.stable.decimals
        if direction == SwapDirection.RISKY_IN:
            return risky, stable
        return stable, risky

    def _zero_result(
        self,
        direction: SwapDirection,
        price: Optional[FixedPoint] = None,
    ) -> SwapResult:
        in_decimals, out_decimals = self._token_decimals(direction)
        return SwapResult(
            direction=direction,
            amount_in=FixedPoint(0, in_decimals),
            amount_out=FixedPoint(0, out_decimals),
            effective_amount_in=FixedPoint(0, in_decimals),
            invariant_last=self.invariant,
            next_invariant=self.invariant,
            effective_price=price if price is not None else FixedPoint(0, self.config.price_decimals),
            engine=self,
        )

    def _curve_out(
        self,
        direction: SwapDirection,
        in_per_liquidity: FixedPoint,
        invariant: FixedPoint,
    ) -> Optional[float]:
        """Opposite-side reserve per liquidity holding `invariant` fixed; None off the curve."""
        strike = self.calibration.strike_float
        sigma = self.calibration.sigma_float
        if direction == SwapDirection.RISKY_IN:
            raw = rmm_math.stable_given_risky(in_per_liquidity.normalized, strike, sigma, self.tau, invariant.normalized)
        else:
            raw = rmm_math.risky_given_stable(in_per_liquidity.normalized, strike, sigma, self.tau, invariant.normalized)
        return raw if is_valid_float(raw) else None

    def _curve_in(
        self,
        direction: SwapDirection,
        out_per_liquidity: FixedPoint,
        invariant: FixedPoint,
    ) -> Optional[float]:
        """Same-side reserve per liquidity that leaves `out_per_liquidity` on the other side."""
        strike = self.calibration.strike_float
        sigma = self.calibration.sigma_float
        if direction == SwapDirection.RISKY_IN:
            raw = rmm_math.risky_given_stable(out_per_liquidity.normalized, strike, sigma, self.tau, invariant.normalized)
        else:
            raw = rmm_math.stable_given_risky(out_per_liquidity.normalized, strike, sigma, self.tau, invariant.normalized)
        return raw if is_valid_float(raw) else None

    def _reserves(self, direction: SwapDirection) -> tuple[FixedPoint, FixedPoint]:
        if direction == SwapDirection.RISKY_IN:
            return self.reserve_risky, self.reserve_stable
        return self.reserve_stable, self.reserve_risky

    def _settle(
        self,
        direction: SwapDirection,
        amount_in: FixedPoint,
        amount_out: FixedPoint,
        effective_amount_in: FixedPoint,
        invariant_last: FixedPoint,
    ) -> SwapResult:
        """Moves reserves, re-checks the invariant and prices the trade."""
        if direction == SwapDirection.RISKY_IN:
            self.reserve_risky = self.reserve_risky.add(amount_in)
            self.reserve_stable = self.reserve_stable.sub(amount_out)
        else:
            self.reserve_stable = self.reserve_stable.add(amount_in)
            self.reserve_risky = self.reserve_risky.sub(amount_out)

        next_invariant = self.calc_invariant()
        if next_invariant < invariant_last:
            self._report_regression(
                InvariantRegression(
                    pool_id=self.pool_id,
                    direction=direction,
                    amount_in=amount_in,
                    invariant_last=invariant_last,
                    next_invariant=next_invariant,
                )
            )

        price_decimals = self.config.price_decimals
        if amount_in.is_zero:
            effective_price = FixedPoint.INFINITY.rescale(price_decimals)
        else:
            effective_price = amount_out.rescale(price_decimals).div(amount_in.rescale(price_decimals))

        return SwapResult(
            direction=direction,
            amount_in=amount_in,
            amount_out=amount_out,
            effective_amount_in=effective_amount_in,
            invariant_last=invariant_last,
            next_invariant=next_invariant,
            effective_price=effective_price,
            engine=self,
        )

    def _report_regression(self, event: InvariantRegression) -> None:
        if self._on_invariant_regression is not None:
            self._on_invariant_regression(event)
            return
        logger.warning(
            "Invariant decreased on pool %s (%s): %s < %s",
            event.pool_id,
            event.direction.value,
            event.next_invariant,
            event.invariant_last,
        )

    def swap_exact_in(
        self,
        direction: SwapDirection,
        amount_in: Amount,
        *,
        commit: bool = False,
    ) -> SwapResult:
        """
        Simulate paying exactly `amount_in` of the input token.

        Args:
            direction: Token paid in
            amount_in: Input amount; numbers are truncated to the input
                token's decimals, FixedPoint values must carry them
            commit: Apply the trade to this engine instead of a clone

        Returns:
            SwapResult; zero amounts when the trade is not possible

        Raises:
            DecimalMismatchError: If a FixedPoint amount has the wrong width
        """
        engine = self if commit else self.clone()
        return engine._swap_exact_in(direction, amount_in)

    def _swap_exact_in(self, direction: SwapDirection, amount_in: Amount) -> SwapResult:
        in_decimals, out_decimals = self._token_decimals(direction)
        amount = self._to_amount(amount_in, in_decimals)
        if amount.is_negative or self.liquidity.is_zero:
            return self._zero_result(direction)
        if amount.is_zero:
            return self._zero_result(direction, FixedPoint.INFINITY.rescale(self.config.price_decimals))

        invariant_last = self.calc_invariant()
        effective_in = amount.mul_div(self.gamma_bps, BASIS_POINTS)

        reserve_in, reserve_out = self._reserves(direction)
        in_per_liquidity = reserve_in.add(effective_in).div(self.liquidity)
        solved = self._curve_out(direction, in_per_liquidity, invariant_last)
        if solved is None:
            logger.debug("Infeasible %s swap of %s on pool %s", direction.value, amount, self.pool_id)
            return self._zero_result(direction)
        next_reserve_out = FixedPoint.from_value(solved, out_decimals).mul(self.liquidity)

        amount_out = reserve_out.sub(next_reserve_out)
        if next_reserve_out.is_negative or amount_out.is_negative:
            logger.debug("Infeasible %s swap of %s on pool %s", direction.value, amount, self.pool_id)
            return self._zero_result(direction)

        return self._settle(direction, amount, amount_out, effective_in, invariant_last)

    def swap_exact_out(
        self,
        direction: SwapDirection,
        amount_out: Amount,
        *,
        commit: bool = False,
    ) -> SwapResult:
        """
        Simulate receiving exactly `amount_out` of the output token.

        The input is grossed up for the fee (divided by gamma, rounded up).

        Args:
            direction: Token paid in
            amount_out: Output amount; numbers are truncated to the output
                token's decimals, FixedPoint values must carry them
            commit: Apply the trade to this engine instead of a clone

        Returns:
            SwapResult; zero amounts when the trade is not possible
        """
        engine = self if commit else self.clone()
        return engine._swap_exact_out(direction, amount_out)

    def _swap_exact_out(self, direction: SwapDirection, amount_out: Amount) -> SwapResult:
        in_decimals, out_decimals = self._token_decimals(direction)
        amount = self._to_amount(amount_out, out_decimals)
        if amount.is_negative or self.liquidity.is_zero:
            return self._zero_result(direction)
        if amount.is_zero:
            return self._zero_result(direction, FixedPoint.INFINITY.rescale(self.config.price_decimals))

        invariant_last = self.calc_invariant()
        reserve_in, reserve_out = self._reserves(direction)

        next_reserve_out = reserve_out.sub(amount)
        if next_reserve_out.is_negative:
            logger.debug("Infeasible %s swap for %s out on pool %s", direction.value, amount, self.pool_id)
            return self._zero_result(direction)

        solved = self._curve_in(direction, next_reserve_out.div(self.liquidity), invariant_last)
        if solved is None:
            logger.debug("Infeasible %s swap for %s out on pool %s", direction.value, amount, self.pool_id)
            return self._zero_result(direction)
        effective_in = FixedPoint.from_value(solved, in_decimals).mul(self.liquidity).sub(reserve_in)
        if effective_in.is_negative:
            logger.debug("Infeasible %s swap for %s out on pool %s", direction.value, amount, self.pool_id)
            return self._zero_result(direction)

        gross_in = effective_in.mul_div_ceil(BASIS_POINTS, self.gamma_bps)
        return self._settle(direction, gross_in, amount, effective_in, invariant_last)

    # =========================================================================
    # PRICES
    # =========================================================================

    def _curve_price(self) -> float:
        return sanitize_float(
            rmm_math.spot_price(
                self._per_liquidity(self.reserve_risky),
                self.calibration.strike_float,
                self.calibration.sigma_float,
                self.tau,
            )
        )

    def reported_price_of_risky(self) -> FixedPoint:
        """Curve-implied price of the risky asset, stable token decimals."""
        return FixedPoint.from_value(self._curve_price(), self.calibration.stable.decimals)

    def spot_price(self) -> FixedPoint:
        """Curve-implied price of the risky asset at engine precision."""
        return FixedPoint.from_value(self._curve_price(), self.config.price_decimals)

    def marginal_price_after_swap(self, direction: SwapDirection, amount_in: Amount) -> float:
        """
        Marginal price (stable per risky) after an exact-in trade of `amount_in`.

        Closed form, no swap is simulated. Returns 0 for non-positive amounts
        and for out-of-domain results.
        """
        amount = float(amount_in)
        if not amount > 0:
            return 0.0

        per_liquidity_in = safe_divide(amount, self.liquidity.normalized)
        strike = self.calibration.strike_float
        sigma = self.calibration.sigma_float
        if direction == SwapDirection.RISKY_IN:
            price = rmm_math.marginal_price_swap_risky_in(
                per_liquidity_in,
                self._per_liquidity(self.reserve_risky),
                strike,
                sigma,
                self.tau,
                self.gamma,
            )
        else:
            price = rmm_math.marginal_price_swap_stable_in(
                per_liquidity_in,
                self.invariant.normalized,
                self._per_liquidity(self.reserve_stable),
                strike,
                sigma,
                self.tau,
                self.gamma,
            )
        return sanitize_float(price)

    # =========================================================================
    # LIQUIDITY
    # =========================================================================

    def liquidity_quote(self, amount: FixedPoint, side: PoolSide) -> LiquidityQuote:
        """
        Amounts of the other two sides, proportional to current reserves.

        Args:
            amount: Known amount, carrying the decimals of `side`
            side: Which side `amount` is denominated in

        Raises:
            DecimalMismatchError: If an amount does not carry its side's decimals
            DivisionByZeroError: If the anchoring reserve is zero
        """
        risky_decimals = self.calibration.risky.decimals
        stable_decimals = self.calibration.stable.decimals
        liquidity_decimals = self.config.liquidity_decimals

        if side == PoolSide.RISKY:
            validate_decimals(amount, risky_decimals, "Risky amount")
            del_risky = amount
            del_liquidity = self.liquidity.mul_div(del_risky, self.reserve_risky)
            del_stable = self.reserve_stable.mul_div(del_liquidity, self.liquidity)
        elif side == PoolSide.STABLE:
            validate_decimals(amount, stable_decimals, "Stable amount")
            del_stable = amount
            del_liquidity = self.liquidity.mul_div(del_stable, self.reserve_stable)
            del_risky = self.reserve_risky.mul_div(del_liquidity, self.liquidity)
        else:
            validate_decimals(amount, liquidity_decimals, "Liquidity amount")
            del_liquidity = amount
            del_risky = self.reserve_risky.mul_div(del_liquidity, self.liquidity)
            del_stable = self.reserve_stable.mul_div(del_liquidity, self.liquidity)

        validate_decimals(del_risky, risky_decimals, "Risky amount")
        validate_decimals(del_stable, stable_decimals, "Stable amount")
        validate_decimals(del_liquidity, liquidity_decimals, "Liquidity amount")
        return LiquidityQuote(del_risky=del_risky, del_stable=del_stable, del_liquidity=del_liquidity)

    def current_liquidity_value(self, prices: Sequence[float]) -> LiquidityValue:
        """
        Value of the reserves in the unit of `prices`.

        Args:
            prices: (price of risky, price of stable), e.g. in USD

        Raises:
            DivisionByZeroError: If liquidity is zero
        """
        price_risky, price_stable = prices
        decimals = self.config.price_decimals
        risky_value = self.reserve_risky.rescale(decimals).mul(price_risky)
        stable_value = self.reserve_stable.rescale(decimals).mul(price_stable)
        total = risky_value.add(stable_value)
        return LiquidityValue(
            risky_value=risky_value,
            stable_value=stable_value,
            total=total,
            value_per_liquidity=total.div(self.liquidity),
        )

    def theoretical_liquidity_value(
        self,
        reference_price: Optional[float] = None,
        last_timestamp: Optional[int] = None,
    ) -> float:
        """
        Black-Scholes value of one unit of liquidity: spot minus call premium.

        Args:
            reference_price: Spot of the risky asset; defaults to the
                curve-implied price
            last_timestamp: Start of the remaining lifetime; defaults to the
                pool's last update
        """
        spot = reference_price if reference_price is not None else self.reported_price_of_risky().normalized
        start = self.calibration.last_timestamp if last_timestamp is None else last_timestamp
        tau = max(self.calibration.maturity - start, 0) / self.config.seconds_per_year
        premium = sanitize_float(
            rmm_math.call_premium(self.calibration.strike_float, self.calibration.sigma_float, tau, spot)
        )
        return spot - premium

    def __repr__(self) -> str:
        return (
            f"CurveEngine(pool_id={self.pool_id}, reserve_risky={self.reserve_risky}, "
            f"reserve_stable={self.reserve_stable}, liquidity={self.liquidity}, invariant={self.invariant})"
        )
