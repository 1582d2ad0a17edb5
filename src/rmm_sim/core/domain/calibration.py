"""
Calibration - immutable curve parameters of one pool

A calibration is validated once at construction and never mutated. Bounds
match the engine contract:

    1      <= sigma    <= 10_000_000  (bps, 0.01% .. 1000%)
    9_000  <= gamma    <  10_000      (bps, fee complement, fee 0.01% .. 10%)
    0      <  maturity <  2^32 - 1    (seconds)
    0      <  strike   <  2^128 - 1   (base units of the stable token)

Any violation raises CalibrationError naming the offending field.
"""

import time
from typing import Final, Optional, Union

from pydantic import BaseModel, Field, field_validator

from rmm_sim.core.domain.pool_identity import compute_pool_id
from rmm_sim.core.domain.token import Token, validate_and_parse_address
from rmm_sim.core.errors import CalibrationError
from rmm_sim.core.math.fixed_point import FixedPoint

# =============================================================================
# PROTOCOL CONSTANTS
# =============================================================================

# Basis-point denominator of sigma and gamma
BASIS_POINTS: Final[int] = 10_000

MIN_SIGMA: Final[int] = 1
MAX_SIGMA: Final[int] = BASIS_POINTS * 1_000

MIN_GAMMA: Final[int] = BASIS_POINTS - 1_000
MAX_GAMMA: Final[int] = BASIS_POINTS - 1

MAX_MATURITY: Final[int] = 2**32 - 1
MAX_STRIKE: Final[int] = 2**128 - 1

# Year length used by the engine contract for tau
SECONDS_PER_YEAR: Final[int] = 31_556_952


# =============================================================================
# CALIBRATION MODEL
# =============================================================================


class Calibration(BaseModel):
    """
    Curve parameters of a pool plus the engine it lives in.

    Integer fields carry on-chain units: strike in stable base units,
    sigma and gamma in basis points, timestamps in seconds.
    """

    engine: str = Field(..., description="Address of the engine contract holding the pool")
    risky: Token = Field(..., description="Risky asset")
    stable: Token = Field(..., description="Stable asset")
    strike: int = Field(..., description="Strike price in base units of the stable token")
    sigma: int = Field(..., description="Implied volatility (bps)")
    maturity: int = Field(..., description="Expiry timestamp (seconds)")
    gamma: int = Field(..., description="Fee complement, 10_000 - fee (bps)")
    last_timestamp: int = Field(
        default_factory=lambda: int(time.time()),
        description="Timestamp of the last pool update (seconds)",
    )

    model_config = {"frozen": True}

    @field_validator("engine")
    @classmethod
    def validate_engine(cls, v: str) -> str:
        try:
            return validate_and_parse_address(v)
        except ValueError as e:
            raise CalibrationError("engine", v, str(e)) from e

    @field_validator("strike")
    @classmethod
    def validate_strike(cls, v: int) -> int:
        if not 0 < v < MAX_STRIKE:
            raise CalibrationError("strike", v, "Strike must be a positive integer in base units below 2^128 - 1")
        return v

    @field_validator("sigma")
    @classmethod
    def validate_sigma(cls, v: int) -> int:
        if not MIN_SIGMA <= v <= MAX_SIGMA:
            raise CalibrationError(
                "sigma", v, f"Implied volatility outside of bounds {MIN_SIGMA}-{MAX_SIGMA:_} basis points"
            )
        return v

    @field_validator("maturity")
    @classmethod
    def validate_maturity(cls, v: int) -> int:
        if not 0 < v < MAX_MATURITY:
            raise CalibrationError("maturity", v, "Maturity out of bounds > 0 && < 2^32 - 1")
        return v

    @field_validator("gamma")
    @classmethod
    def validate_gamma(cls, v: int) -> int:
        if not MIN_GAMMA <= v <= MAX_GAMMA:
            raise CalibrationError("gamma", v, f"Fee complement outside of bounds {MIN_GAMMA}-{MAX_GAMMA} basis points")
        return v

    @field_validator("last_timestamp")
    @classmethod
    def validate_last_timestamp(cls, v: int) -> int:
        if v < 0:
            raise CalibrationError("last_timestamp", v, "Timestamp cannot be negative")
        return v

    @classmethod
    def parse(
        cls,
        engine: str,
        risky: Token,
        stable: Token,
        strike: Union[str, int],
        sigma: Union[str, int],
        maturity: Union[str, int],
        gamma: Union[str, int],
        last_timestamp: Optional[Union[str, int]] = None,
    ) -> "Calibration":
        """
        Build a calibration from on-chain values, which arrive as strings.

        Raises:
            CalibrationError: If a value is not an integer or is out of bounds
        """
        raw = {"strike": strike, "sigma": sigma, "maturity": maturity, "gamma": gamma}
        if last_timestamp is not None:
            raw["last_timestamp"] = last_timestamp

        parsed: dict[str, int] = {}
        for field, value in raw.items():
            try:
                parsed[field] = int(value)
            except (TypeError, ValueError) as e:
                raise CalibrationError(field, value, "Expected an integer") from e

        return cls(engine=engine, risky=risky, stable=stable, **parsed)

    # -------------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------------

    @property
    def pool_id(self) -> str:
        return compute_pool_id(self.engine, self.strike, self.sigma, self.maturity, self.gamma)

    @property
    def strike_value(self) -> FixedPoint:
        """Strike as a fixed-point value with the stable token's decimals."""
        return FixedPoint(self.strike, self.stable.decimals)

    @property
    def strike_float(self) -> float:
        return self.strike_value.normalized

    @property
    def sigma_float(self) -> float:
        """Implied volatility as a fraction, e.g. 1000 bps -> 0.1."""
        return self.sigma / BASIS_POINTS

    @property
    def gamma_float(self) -> float:
        """Fee complement as a fraction, e.g. 9985 bps -> 0.9985."""
        return self.gamma / BASIS_POINTS

    @property
    def tau_seconds(self) -> int:
        return max(self.maturity - self.last_timestamp, 0)

    @property
    def tau_years(self) -> float:
        return self.tau_seconds / SECONDS_PER_YEAR

    @property
    def scale_factor_risky(self) -> int:
        return self.risky.scale_factor

    @property
    def scale_factor_stable(self) -> int:
        return self.stable.scale_factor

    @property
    def chain_id(self) -> int:
        return self.risky.chain_id

    def involves_token(self, token: Token) -> bool:
        return self.risky.equals(token) or self.stable.equals(token)
