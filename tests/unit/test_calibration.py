"""
Tests for Token, Calibration and PoolIdentity

Checks:
1. Calibration bounds raise CalibrationError naming the field
2. Derived values (tau, sigma/gamma fractions, strike value)
3. Pool id is deterministic and sensitive to every packed field
4. Token address checksumming and equality
"""

import pytest
from pydantic import ValidationError
from web3 import Web3

from rmm_sim.core.domain import (
    MAX_MATURITY,
    MAX_STRIKE,
    SECONDS_PER_YEAR,
    Calibration,
    PoolIdentity,
    Token,
    compute_pool_id,
)
from rmm_sim.core.errors import CalibrationError, RMMValidationError

ENGINE_ADDRESS = "0x" + "ab" * 20
LAST_TIMESTAMP = 1_700_000_000


def make_calibration(risky: Token, stable: Token, **overrides) -> Calibration:
    fields = {
        "engine": ENGINE_ADDRESS,
        "risky": risky,
        "stable": stable,
        "strike": 10 * 10**18,
        "sigma": 1000,
        "maturity": LAST_TIMESTAMP + SECONDS_PER_YEAR,
        "gamma": 9900,
        "last_timestamp": LAST_TIMESTAMP,
    }
    fields.update(overrides)
    return Calibration(**fields)


# =============================================================================
# BOUNDS
# =============================================================================


class TestCalibrationBounds:
    """Out-of-bounds parameters are rejected with the offending field"""

    @pytest.mark.parametrize(
        "field,value",
        [
            ("sigma", 0),
            ("sigma", 10_000_001),
            ("gamma", 8999),
            ("gamma", 10_000),
            ("maturity", 0),
            ("maturity", MAX_MATURITY),
            ("strike", 0),
            ("strike", MAX_STRIKE),
            ("last_timestamp", -1),
        ],
    )
    def test_out_of_bounds(self, risky, stable, field: str, value: int) -> None:
        with pytest.raises(CalibrationError) as exc_info:
            make_calibration(risky, stable, **{field: value})
        assert exc_info.value.field == field
        assert exc_info.value.value == value

    @pytest.mark.parametrize(
        "field,value",
        [("sigma", 1), ("sigma", 10_000_000), ("gamma", 9000), ("gamma", 9999), ("maturity", 1)],
    )
    def test_bounds_inclusive(self, risky, stable, field: str, value: int) -> None:
        calibration = make_calibration(risky, stable, **{field: value})
        assert getattr(calibration, field) == value

    def test_invalid_engine_address(self, risky, stable) -> None:
        with pytest.raises(CalibrationError) as exc_info:
            make_calibration(risky, stable, engine="0x1234")
        assert exc_info.value.field == "engine"

    def test_calibration_error_is_validation_error(self, risky, stable) -> None:
        with pytest.raises(RMMValidationError):
            make_calibration(risky, stable, sigma=0)

    def test_frozen(self, calibration) -> None:
        with pytest.raises(ValidationError):
            calibration.sigma = 2000


class TestCalibrationParse:
    """Tests for Calibration.parse with on-chain string values"""

    def test_parse_strings(self, risky, stable) -> None:
        calibration = Calibration.parse(
            ENGINE_ADDRESS,
            risky,
            stable,
            str(10 * 10**18),
            "1000",
            str(LAST_TIMESTAMP + SECONDS_PER_YEAR),
            "9900",
            str(LAST_TIMESTAMP),
        )
        assert calibration.strike == 10 * 10**18
        assert calibration.sigma == 1000
        assert calibration.last_timestamp == LAST_TIMESTAMP

    def test_parse_non_integer(self, risky, stable) -> None:
        with pytest.raises(CalibrationError) as exc_info:
            Calibration.parse(ENGINE_ADDRESS, risky, stable, "ten", "1000", "1", "9900")
        assert exc_info.value.field == "strike"

    def test_parse_out_of_bounds(self, risky, stable) -> None:
        with pytest.raises(CalibrationError) as exc_info:
            Calibration.parse(ENGINE_ADDRESS, risky, stable, "1", "1000", "1", "10000")
        assert exc_info.value.field == "gamma"


# =============================================================================
# DERIVED VALUES
# =============================================================================


class TestCalibrationDerived:
    """Tests for derived properties"""

    def test_fractions(self, calibration) -> None:
        assert calibration.sigma_float == pytest.approx(0.1)
        assert calibration.gamma_float == pytest.approx(0.99)

    def test_tau(self, calibration) -> None:
        assert calibration.tau_seconds == SECONDS_PER_YEAR
        assert calibration.tau_years == pytest.approx(1.0)

    def test_tau_floored_at_zero(self, risky, stable) -> None:
        calibration = make_calibration(risky, stable, last_timestamp=LAST_TIMESTAMP + 2 * SECONDS_PER_YEAR)
        assert calibration.tau_seconds == 0
        assert calibration.tau_years == 0.0

    def test_strike_value_uses_stable_decimals(self, calibration_6) -> None:
        assert calibration_6.strike_value.decimals == 6
        assert calibration_6.strike_value == 10
        assert calibration_6.strike_float == 10.0

    def test_scale_factors(self, calibration_6) -> None:
        assert calibration_6.scale_factor_risky == 10**12
        assert calibration_6.scale_factor_stable == 10**12

    def test_involves_token(self, calibration, risky) -> None:
        other = Token(address="0x" + "33" * 20, decimals=18)
        assert calibration.involves_token(risky)
        assert not calibration.involves_token(other)

    def test_engine_checksummed(self, calibration) -> None:
        assert calibration.engine == Web3.to_checksum_address(ENGINE_ADDRESS)


# =============================================================================
# POOL IDENTITY
# =============================================================================


class TestPoolIdentity:
    """Tests for the pool id derivation"""

    def test_format(self, calibration) -> None:
        pool_id = calibration.pool_id
        assert pool_id.startswith("0x")
        assert len(pool_id) == 66
        int(pool_id, 16)

    def test_deterministic(self, risky, stable) -> None:
        assert make_calibration(risky, stable).pool_id == make_calibration(risky, stable).pool_id

    def test_matches_compute_pool_id(self, calibration) -> None:
        expected = compute_pool_id(
            ENGINE_ADDRESS,
            calibration.strike,
            calibration.sigma,
            calibration.maturity,
            calibration.gamma,
        )
        assert calibration.pool_id == expected

    def test_string_inputs_hash_identically(self, calibration) -> None:
        assert compute_pool_id(
            ENGINE_ADDRESS,
            str(calibration.strike),
            str(calibration.sigma),
            str(calibration.maturity),
            str(calibration.gamma),
        ) == calibration.pool_id

    @pytest.mark.parametrize(
        "field,value",
        [
            ("engine", "0x" + "cd" * 20),
            ("strike", 11 * 10**18),
            ("sigma", 1001),
            ("maturity", LAST_TIMESTAMP + SECONDS_PER_YEAR + 1),
            ("gamma", 9901),
        ],
    )
    def test_changes_with_every_packed_field(self, risky, stable, field: str, value) -> None:
        base = make_calibration(risky, stable)
        changed = make_calibration(risky, stable, **{field: value})
        assert changed.pool_id != base.pool_id

    def test_tokens_and_timestamp_not_packed(self, risky, stable, risky_6) -> None:
        base = make_calibration(risky, stable)
        assert make_calibration(risky_6, stable).pool_id == base.pool_id
        assert make_calibration(risky, stable, last_timestamp=0).pool_id == base.pool_id

    def test_identity_key(self, calibration) -> None:
        identity = PoolIdentity.of(calibration)
        assert identity.key == (calibration.engine, calibration.pool_id)


# =============================================================================
# TOKEN
# =============================================================================


class TestToken:
    """Tests for the Token model"""

    def test_address_checksummed(self) -> None:
        token = Token(address="0x" + "ab" * 20, decimals=18)
        assert token.address == Web3.to_checksum_address("0x" + "ab" * 20)

    def test_equals_ignores_case_and_metadata(self) -> None:
        lower = Token(address="0x" + "ab" * 20, decimals=18, symbol="A")
        upper = Token(address="0x" + "AB" * 20, decimals=18, symbol="B")
        assert lower.equals(upper)
        assert not lower.equals(Token(address="0x" + "ab" * 20, decimals=18, chain_id=5))

    def test_invalid_address(self) -> None:
        with pytest.raises(ValidationError):
            Token(address="not-an-address", decimals=18)

    def test_decimals_bounds(self) -> None:
        with pytest.raises(ValidationError):
            Token(address="0x" + "ab" * 20, decimals=19)
        with pytest.raises(ValidationError):
            Token(address="0x" + "ab" * 20, decimals=-1)

    def test_scale_factor(self, stable_6) -> None:
        assert stable_6.scale_factor == 10**12
