"""
RMM-01 pricing primitives

Closed-form Black-Scholes and trading-curve functions on unscaled floats.
The curve of a replicating market maker for a covered call, per unit of
liquidity, is

    y = K * Phi(Phi^-1(1 - x) - sigma * sqrt(tau)) + k

where x is the risky reserve, y the stable reserve, K the strike, sigma
the implied volatility, tau the time to maturity in years and k the
invariant. Reference: https://arxiv.org/pdf/2012.08040.pdf

Nothing here raises for out-of-domain inputs: the functions return NaN
(or +-inf at the closed ends of the unit interval) and leave it to the
caller to sanitize before converting into fixed point.
"""

import math
from statistics import NormalDist

_STD_NORMAL = NormalDist(mu=0.0, sigma=1.0)


# =============================================================================
# STANDARD NORMAL
# =============================================================================


def std_n_cdf(x: float) -> float:
    if math.isnan(x):
        return math.nan
    return _STD_NORMAL.cdf(x)


def std_n_pdf(x: float) -> float:
    if math.isnan(x):
        return math.nan
    if math.isinf(x):
        return 0.0
    return _STD_NORMAL.pdf(x)


def inverse_std_n_cdf(p: float) -> float:
    """Quantile function; -inf at 0, +inf at 1, NaN outside [0, 1]."""
    if math.isnan(p) or p < 0.0 or p > 1.0:
        return math.nan
    if p == 0.0:
        return -math.inf
    if p == 1.0:
        return math.inf
    return _STD_NORMAL.inv_cdf(p)


def quantile_prime(p: float) -> float:
    """Derivative of the quantile function, 1 / pdf(Phi^-1(p))."""
    density = std_n_pdf(inverse_std_n_cdf(p))
    if math.isnan(density):
        return math.nan
    if density == 0.0:
        return math.inf
    return 1.0 / density


# =============================================================================
# BLACK-SCHOLES
# =============================================================================


def _d1(strike: float, sigma: float, tau: float, spot: float) -> float:
    if strike <= 0.0 or spot <= 0.0 or sigma <= 0.0 or tau <= 0.0:
        return math.nan
    return (math.log(spot / strike) + 0.5 * sigma**2 * tau) / (sigma * math.sqrt(tau))


def call_delta(strike: float, sigma: float, tau: float, spot: float) -> float:
    """Call delta Phi(d1); NaN for non-positive inputs."""
    return std_n_cdf(_d1(strike, sigma, tau, spot))


def call_premium(strike: float, sigma: float, tau: float, spot: float) -> float:
    """Undiscounted Black-Scholes call premium; NaN for non-positive inputs."""
    d1 = _d1(strike, sigma, tau, spot)
    d2 = d1 - sigma * math.sqrt(max(tau, 0.0))
    return spot * std_n_cdf(d1) - strike * std_n_cdf(d2)


def risky_given_reference_price(strike: float, sigma: float, tau: float, spot: float) -> float:
    """Risky reserve per liquidity that prices the risky asset at `spot`: 1 - delta."""
    return 1.0 - call_delta(strike, sigma, tau, spot)


# =============================================================================
# TRADING CURVE
# =============================================================================


def stable_given_risky(
    risky: float,
    strike: float,
    sigma: float,
    tau: float,
    invariant: float = 0.0,
) -> float:
    """Stable reserve per liquidity on the curve for a risky reserve in [0, 1]."""
    if tau < 0.0:
        return math.nan
    z = inverse_std_n_cdf(1.0 - risky) - sigma * math.sqrt(tau)
    return strike * std_n_cdf(z) + invariant


def risky_given_stable(
    stable: float,
    strike: float,
    sigma: float,
    tau: float,
    invariant: float = 0.0,
) -> float:
    """Risky reserve per liquidity on the curve for a stable reserve in [k, K + k]."""
    if tau < 0.0 or strike <= 0.0:
        return math.nan
    z = inverse_std_n_cdf((stable - invariant) / strike) + sigma * math.sqrt(tau)
    return 1.0 - std_n_cdf(z)


def invariant_given(
    risky: float,
    stable: float,
    strike: float,
    sigma: float,
    tau: float,
) -> float:
    """Trading function value k = y - K * Phi(Phi^-1(1 - x) - sigma * sqrt(tau))."""
    return stable - stable_given_risky(risky, strike, sigma, tau, 0.0)


def spot_price(risky: float, strike: float, sigma: float, tau: float) -> float:
    """
    Price of the risky asset implied by the curve, -dy/dx.

    K * pdf(Phi^-1(1 - x) - sigma * sqrt(tau)) * quantile_prime(1 - x)
    """
    if tau < 0.0:
        return math.nan
    z = inverse_std_n_cdf(1.0 - risky) - sigma * math.sqrt(tau)
    return strike * std_n_pdf(z) * quantile_prime(1.0 - risky)


# =============================================================================
# MARGINAL PRICES
# =============================================================================


def marginal_price_swap_risky_in(
    amount_in: float,
    risky: float,
    strike: float,
    sigma: float,
    tau: float,
    gamma: float,
) -> float:
    """
    Marginal price (stable per risky) after selling `amount_in` risky.

    All amounts are per unit of liquidity; gamma is the fee complement.
    """
    if tau < 0.0:
        return math.nan
    u = 1.0 - risky - gamma * amount_in
    z = inverse_std_n_cdf(u) - sigma * math.sqrt(tau)
    return gamma * strike * std_n_pdf(z) * quantile_prime(u)


def marginal_price_swap_stable_in(
    amount_in: float,
    invariant: float,
    stable: float,
    strike: float,
    sigma: float,
    tau: float,
    gamma: float,
) -> float:
    """
    Marginal price (stable per risky) after buying with `amount_in` stable.

    All amounts are per unit of liquidity; gamma is the fee complement.
    """
    if tau < 0.0 or strike <= 0.0:
        return math.nan
    u = (stable + gamma * amount_in - invariant) / strike
    z = inverse_std_n_cdf(u) + sigma * math.sqrt(tau)
    slope = gamma * std_n_pdf(z) * quantile_prime(u)
    if math.isnan(slope):
        return math.nan
    if slope == 0.0:
        return math.inf
    return strike / slope
