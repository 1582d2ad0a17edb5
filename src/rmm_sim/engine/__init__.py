"""
Stateful curve engine and the layers built on it.
"""

from rmm_sim.engine.config import EngineConfig
from rmm_sim.engine.curve_engine import CurveEngine
from rmm_sim.engine.pool_store import PoolStore
from rmm_sim.engine.quote_builder import QuoteBuilder
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

__all__ = [
    # Configuration
    "EngineConfig",
    # Types
    "SwapDirection",
    "PoolSide",
    "CurveStatus",
    "SwapResult",
    "LiquidityQuote",
    "LiquidityValue",
    "InvariantRegression",
    "InvariantRegressionHandler",
    # Engine
    "CurveEngine",
    "QuoteBuilder",
    "PoolStore",
]
