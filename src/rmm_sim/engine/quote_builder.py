"""
QuoteBuilder - option-style readouts of a pool

A pool replicates a covered call struck at the calibration's strike. The
builder reads an engine and its calibration and reports the call's delta,
premium and moneyness, plus the theoretical fee a liquidity provider
earns over a date range. It never mutates the engine.
"""

from typing import Optional

from rmm_sim.core.math import rmm_math
from rmm_sim.core.math.numerical_safeguards import sanitize_float
from rmm_sim.engine.curve_engine import CurveEngine


class QuoteBuilder:
    """Read-only option view of one CurveEngine."""

    def __init__(self, engine: CurveEngine, reference_price: Optional[float] = None):
        """
        Args:
            engine: Pool to read
            reference_price: Spot of the risky asset from an external feed;
                the curve-implied price is used when omitted
        """
        self.engine = engine
        self._reference_price = reference_price

    @property
    def calibration(self):
        return self.engine.calibration

    @property
    def reference_price(self) -> float:
        if self._reference_price is not None:
            return self._reference_price
        return self.engine.reported_price_of_risky().normalized

    def _tau_from(self, start_timestamp: int, end_timestamp: Optional[int] = None) -> float:
        end = self.calibration.maturity if end_timestamp is None else min(end_timestamp, self.calibration.maturity)
        return max(end - start_timestamp, 0) / self.engine.config.seconds_per_year

    @property
    def delta(self) -> float:
        """Call delta at the reference price over the pool's remaining lifetime."""
        return sanitize_float(
            rmm_math.call_delta(
                self.calibration.strike_float,
                self.calibration.sigma_float,
                self.engine.tau,
                self.reference_price,
            )
        )

    @property
    def premium(self) -> float:
        """Call premium at the reference price over the pool's remaining lifetime."""
        return sanitize_float(
            rmm_math.call_premium(
                self.calibration.strike_float,
                self.calibration.sigma_float,
                self.engine.tau,
                self.reference_price,
            )
        )

    @property
    def in_the_money(self) -> bool:
        return self.reference_price >= self.calibration.strike_float

    def theoretical_premium(self, start_timestamp: int) -> float:
        """Call premium over the pool's lifetime from `start_timestamp` to maturity."""
        return sanitize_float(
            rmm_math.call_premium(
                self.calibration.strike_float,
                self.calibration.sigma_float,
                self._tau_from(start_timestamp),
                self.reference_price,
            )
        )

    def theoretical_max_fee(self, start_timestamp: int, end_timestamp: Optional[int] = None) -> float:
        """
        Strike minus the call premium over [start_timestamp, end_timestamp].

        Args:
            start_timestamp: Start of the range (seconds)
            end_timestamp: End of the range, capped at maturity; maturity
                when omitted

        Returns:
            Maximum value a unit of liquidity can collect in fees, in
            stable units
        """
        premium = sanitize_float(
            rmm_math.call_premium(
                self.calibration.strike_float,
                self.calibration.sigma_float,
                self._tau_from(start_timestamp, end_timestamp),
                self.reference_price,
            )
        )
        return self.calibration.strike_float - premium
