"""
Core math modules for rmm_sim

Fixed-point arithmetic, curve pricing primitives and NaN/Inf guards.
"""

# Fixed point
from rmm_sim.core.math.fixed_point import (
    MAX_UINT256,
    WAD_DECIMALS,
    X64_DENOMINATOR,
    FixedPoint,
    validate_decimals,
)

# Numerical Safeguards
from rmm_sim.core.math.numerical_safeguards import (
    is_valid_float,
    safe_divide,
    sanitize_float,
)

# Pricing primitives
from rmm_sim.core.math.rmm_math import (
    call_delta,
    call_premium,
    inverse_std_n_cdf,
    invariant_given,
    marginal_price_swap_risky_in,
    marginal_price_swap_stable_in,
    quantile_prime,
    risky_given_reference_price,
    risky_given_stable,
    spot_price,
    stable_given_risky,
    std_n_cdf,
    std_n_pdf,
)

__all__ = [
    # Fixed point - Constants
    "MAX_UINT256",
    "WAD_DECIMALS",
    "X64_DENOMINATOR",
    # Fixed point - Types
    "FixedPoint",
    # Fixed point - Validation
    "validate_decimals",
    # Numerical Safeguards - Functions
    "is_valid_float",
    "safe_divide",
    "sanitize_float",
    # Pricing - Standard normal
    "std_n_cdf",
    "std_n_pdf",
    "inverse_std_n_cdf",
    "quantile_prime",
    # Pricing - Black-Scholes
    "call_delta",
    "call_premium",
    "risky_given_reference_price",
    # Pricing - Trading curve
    "stable_given_risky",
    "risky_given_stable",
    "invariant_given",
    "spot_price",
    "marginal_price_swap_risky_in",
    "marginal_price_swap_stable_in",
]
