"""
Numerical Safeguards - NaN/Inf guards for curve math

The pricing primitives work on plain floats and return NaN/Inf for
out-of-domain inputs (a pool exactly at expiry, a reserve outside (0, 1),
a degenerate denominator). Nothing non-finite is allowed to reach the
fixed-point layer: every float leaving a primitive passes through
sanitize_float() first.

INVARIANTS:
1. NaN/Inf never propagate into FixedPoint values (replaced by fallback)
2. Division by an exact zero returns the fallback instead of raising
3. All operations are deterministic
"""

import logging
import math

logger = logging.getLogger(__name__)

# =============================================================================
# NaN/Inf SANITIZATION
# =============================================================================


def is_valid_float(value: float) -> bool:
    """
    Check that a float is finite (not NaN, not Inf).

    Args:
        value: Value to check

    Returns:
        True for finite values, False for NaN or Inf
    """
    return math.isfinite(value)


def sanitize_float(value: float, fallback: float = 0.0) -> float:
    """
    Replace NaN/Inf with a fallback value.

    Args:
        value: Raw value, usually returned by a pricing primitive
        fallback: Replacement for NaN/Inf (default: 0.0)

    Returns:
        value if finite, otherwise fallback

    Examples:
        >>> sanitize_float(10.0)
        10.0
        >>> sanitize_float(float('nan'))
        0.0
        >>> sanitize_float(float('-inf'), fallback=-1.0)
        -1.0
    """
    if is_valid_float(value):
        return value
    logger.debug("Out-of-domain numerical result %r normalized to %r", value, fallback)
    return fallback


# =============================================================================
# SAFE DIVISION
# =============================================================================


def safe_divide(numerator: float, denominator: float, fallback: float = 0.0) -> float:
    """
    Float division that never raises and never returns NaN/Inf.

    Args:
        numerator: Numerator
        denominator: Denominator
        fallback: Value returned when the denominator is zero or the
            result is not finite (default: 0.0)

    Returns:
        numerator / denominator, or fallback

    Examples:
        >>> safe_divide(10.0, 2.0)
        5.0
        >>> safe_divide(10.0, 0.0)
        0.0
    """
    num_clean = sanitize_float(numerator, fallback=0.0)
    denom_clean = sanitize_float(denominator, fallback=0.0)

    if denom_clean == 0.0:
        return fallback

    return sanitize_float(num_clean / denom_clean, fallback=fallback)

