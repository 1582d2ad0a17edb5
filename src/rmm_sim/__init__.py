"""
rmm_sim - off-chain simulator for RMM-01 replicating market maker pools.

Reproduces the engine contract's fixed-point arithmetic so that swap
previews, liquidity quotes and pool ids match what the chain computes.
"""

from rmm_sim.core.domain import Calibration, PoolIdentity, PoolSnapshot, Token
from rmm_sim.core.errors import (
    CalibrationError,
    DecimalMismatchError,
    DivisionByZeroError,
    NegativeAmountError,
    RMMError,
    RMMValidationError,
    SnapshotError,
)
from rmm_sim.core.math import FixedPoint
from rmm_sim.engine import (
    CurveEngine,
    CurveStatus,
    EngineConfig,
    InvariantRegression,
    PoolSide,
    PoolStore,
    QuoteBuilder,
    SwapDirection,
    SwapResult,
)

__version__ = "0.1.0"

__all__ = [
    # Values
    "FixedPoint",
    # Domain
    "Token",
    "Calibration",
    "PoolIdentity",
    "PoolSnapshot",
    # Engine
    "EngineConfig",
    "CurveEngine",
    "CurveStatus",
    "SwapDirection",
    "PoolSide",
    "SwapResult",
    "InvariantRegression",
    "QuoteBuilder",
    "PoolStore",
    # Errors
    "RMMError",
    "RMMValidationError",
    "CalibrationError",
    "DecimalMismatchError",
    "SnapshotError",
    "NegativeAmountError",
    "DivisionByZeroError",
]
