"""Engine configuration."""

from dataclasses import dataclass

from rmm_sim.core.domain.calibration import SECONDS_PER_YEAR
from rmm_sim.core.math.fixed_point import WAD_DECIMALS


@dataclass(frozen=True)
class EngineConfig:
    """
    Fixed-point widths and timing constants of the engine contract.

    Defaults match the deployed engine: liquidity, invariant and prices at
    18 decimals; swaps accepted for 120 seconds past maturity.
    """

    liquidity_decimals: int = WAD_DECIMALS
    invariant_decimals: int = WAD_DECIMALS
    price_decimals: int = WAD_DECIMALS
    swap_buffer_seconds: int = 120
    seconds_per_year: int = SECONDS_PER_YEAR
