"""
Tests for the RMM-01 pricing primitives

Reference point used throughout: strike 10, sigma 0.1, tau 1 year,
spot 10. Then d1 = 0.05, d2 = -0.05, and the curve point for that spot
is x = 1 - Phi(d1), y = K * Phi(d2).
"""

import math

import pytest

from rmm_sim.core.math import rmm_math

K = 10.0
SIGMA = 0.1
TAU = 1.0
SPOT = 10.0


@pytest.fixture
def curve_point() -> tuple[float, float]:
    risky = rmm_math.risky_given_reference_price(K, SIGMA, TAU, SPOT)
    stable = rmm_math.stable_given_risky(risky, K, SIGMA, TAU)
    return risky, stable


# =============================================================================
# STANDARD NORMAL
# =============================================================================


class TestStandardNormal:
    """Tests for the standard normal helpers"""

    def test_cdf_pdf_at_zero(self) -> None:
        assert rmm_math.std_n_cdf(0.0) == pytest.approx(0.5)
        assert rmm_math.std_n_pdf(0.0) == pytest.approx(1.0 / math.sqrt(2.0 * math.pi))

    def test_pdf_at_infinity(self) -> None:
        assert rmm_math.std_n_pdf(math.inf) == 0.0
        assert rmm_math.std_n_pdf(-math.inf) == 0.0

    def test_inverse_cdf_closed_ends(self) -> None:
        assert rmm_math.inverse_std_n_cdf(0.0) == -math.inf
        assert rmm_math.inverse_std_n_cdf(1.0) == math.inf
        assert rmm_math.inverse_std_n_cdf(0.5) == pytest.approx(0.0, abs=1e-12)

    def test_inverse_cdf_out_of_domain(self) -> None:
        assert math.isnan(rmm_math.inverse_std_n_cdf(-0.1))
        assert math.isnan(rmm_math.inverse_std_n_cdf(1.1))
        assert math.isnan(rmm_math.std_n_cdf(math.nan))

    def test_inverse_round_trip(self) -> None:
        assert rmm_math.std_n_cdf(rmm_math.inverse_std_n_cdf(0.8)) == pytest.approx(0.8, rel=1e-12)

    def test_quantile_prime(self) -> None:
        assert rmm_math.quantile_prime(0.5) == pytest.approx(math.sqrt(2.0 * math.pi))
        assert rmm_math.quantile_prime(1.0) == math.inf


# =============================================================================
# BLACK-SCHOLES
# =============================================================================


class TestBlackScholes:
    """Tests for call delta and premium"""

    def test_call_delta(self) -> None:
        assert rmm_math.call_delta(K, SIGMA, TAU, SPOT) == pytest.approx(rmm_math.std_n_cdf(0.05))

    def test_call_premium(self) -> None:
        expected = SPOT * rmm_math.std_n_cdf(0.05) - K * rmm_math.std_n_cdf(-0.05)
        assert rmm_math.call_premium(K, SIGMA, TAU, SPOT) == pytest.approx(expected)
        assert rmm_math.call_premium(K, SIGMA, TAU, SPOT) == pytest.approx(0.39878, rel=1e-4)

    def test_non_positive_inputs_are_nan(self) -> None:
        assert math.isnan(rmm_math.call_delta(K, SIGMA, 0.0, SPOT))
        assert math.isnan(rmm_math.call_premium(0.0, SIGMA, TAU, SPOT))
        assert math.isnan(rmm_math.risky_given_reference_price(K, SIGMA, TAU, -1.0))

    def test_risky_is_one_minus_delta(self) -> None:
        delta = rmm_math.call_delta(K, SIGMA, TAU, SPOT)
        assert rmm_math.risky_given_reference_price(K, SIGMA, TAU, SPOT) == pytest.approx(1.0 - delta)


# =============================================================================
# TRADING CURVE
# =============================================================================


class TestTradingCurve:
    """Tests for the curve solvers"""

    def test_stable_at_reference_point(self, curve_point) -> None:
        _, stable = curve_point
        assert stable == pytest.approx(K * rmm_math.std_n_cdf(-0.05), rel=1e-9)

    def test_solvers_are_inverse(self, curve_point) -> None:
        risky, stable = curve_point
        assert rmm_math.risky_given_stable(stable, K, SIGMA, TAU) == pytest.approx(risky, rel=1e-9)

    def test_invariant_zero_on_curve(self, curve_point) -> None:
        risky, stable = curve_point
        assert rmm_math.invariant_given(risky, stable, K, SIGMA, TAU) == pytest.approx(0.0, abs=1e-12)

    def test_invariant_shifts_curve(self, curve_point) -> None:
        risky, stable = curve_point
        assert rmm_math.stable_given_risky(risky, K, SIGMA, TAU, 0.5) == pytest.approx(stable + 0.5)
        assert rmm_math.invariant_given(risky, stable + 0.5, K, SIGMA, TAU) == pytest.approx(0.5)

    def test_curve_endpoints(self) -> None:
        """All risky -> no stable; no risky -> strike of stable"""
        assert rmm_math.stable_given_risky(1.0, K, SIGMA, TAU) == 0.0
        assert rmm_math.stable_given_risky(0.0, K, SIGMA, TAU) == pytest.approx(K)

    def test_out_of_domain_is_nan(self) -> None:
        assert math.isnan(rmm_math.stable_given_risky(1.5, K, SIGMA, TAU))
        assert math.isnan(rmm_math.risky_given_stable(K * 2, K, SIGMA, TAU))
        assert math.isnan(rmm_math.stable_given_risky(0.5, K, SIGMA, -1.0))

    @pytest.mark.parametrize("spot", [8.0, 10.0, 12.0, 15.0])
    def test_spot_price_recovers_reference(self, spot: float) -> None:
        risky = rmm_math.risky_given_reference_price(K, SIGMA, TAU, spot)
        assert rmm_math.spot_price(risky, K, SIGMA, TAU) == pytest.approx(spot, rel=1e-6)


# =============================================================================
# MARGINAL PRICES
# =============================================================================


class TestMarginalPrices:
    """Tests for post-trade marginal prices"""

    def test_risky_in_zero_amount_is_spot(self, curve_point) -> None:
        risky, _ = curve_point
        price = rmm_math.marginal_price_swap_risky_in(0.0, risky, K, SIGMA, TAU, 1.0)
        assert price == pytest.approx(SPOT, rel=1e-6)

    def test_stable_in_zero_amount_is_spot(self, curve_point) -> None:
        _, stable = curve_point
        price = rmm_math.marginal_price_swap_stable_in(0.0, 0.0, stable, K, SIGMA, TAU, 1.0)
        assert price == pytest.approx(SPOT, rel=1e-6)

    def test_selling_risky_lowers_price(self, curve_point) -> None:
        risky, _ = curve_point
        before = rmm_math.marginal_price_swap_risky_in(0.01, risky, K, SIGMA, TAU, 0.99)
        after = rmm_math.marginal_price_swap_risky_in(0.1, risky, K, SIGMA, TAU, 0.99)
        assert 0.0 < after < before < SPOT

    def test_buying_risky_raises_price(self, curve_point) -> None:
        _, stable = curve_point
        before = rmm_math.marginal_price_swap_stable_in(0.01, 0.0, stable, K, SIGMA, TAU, 0.99)
        after = rmm_math.marginal_price_swap_stable_in(1.0, 0.0, stable, K, SIGMA, TAU, 0.99)
        assert SPOT < before < after
