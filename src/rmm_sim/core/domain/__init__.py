"""
Domain models and value objects.

Tokens, pool calibrations, pool identifiers and raw pool snapshots.
"""

from rmm_sim.core.domain.calibration import (
    BASIS_POINTS,
    MAX_GAMMA,
    MAX_MATURITY,
    MAX_SIGMA,
    MAX_STRIKE,
    MIN_GAMMA,
    MIN_SIGMA,
    SECONDS_PER_YEAR,
    Calibration,
)
from rmm_sim.core.domain.pool_identity import PoolIdentity, compute_pool_id
from rmm_sim.core.domain.pool_snapshot import PoolSnapshot
from rmm_sim.core.domain.token import (
    MAX_TOKEN_DECIMALS,
    Token,
    validate_and_parse_address,
)

__all__ = [
    # Token
    "MAX_TOKEN_DECIMALS",
    "Token",
    "validate_and_parse_address",
    # Calibration
    "BASIS_POINTS",
    "MIN_SIGMA",
    "MAX_SIGMA",
    "MIN_GAMMA",
    "MAX_GAMMA",
    "MAX_MATURITY",
    "MAX_STRIKE",
    "SECONDS_PER_YEAR",
    "Calibration",
    # Pool identity
    "PoolIdentity",
    "compute_pool_id",
    # Snapshots
    "PoolSnapshot",
]
