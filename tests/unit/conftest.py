"""Shared fixtures: tokens, calibrations and snapshot payloads."""

import copy

import pytest

from rmm_sim.core.domain import SECONDS_PER_YEAR, Calibration, Token

ENGINE_ADDRESS = "0x" + "ab" * 20
RISKY_ADDRESS = "0x" + "11" * 20
STABLE_ADDRESS = "0x" + "22" * 20

LAST_TIMESTAMP = 1_700_000_000
MATURITY = LAST_TIMESTAMP + SECONDS_PER_YEAR


@pytest.fixture
def risky() -> Token:
    return Token(address=RISKY_ADDRESS, decimals=18, symbol="RISKY", name="Risky Token")


@pytest.fixture
def stable() -> Token:
    return Token(address=STABLE_ADDRESS, decimals=18, symbol="USDS", name="Stable Token")


@pytest.fixture
def risky_6() -> Token:
    return Token(address=RISKY_ADDRESS, decimals=6, symbol="RISKY6")


@pytest.fixture
def stable_6() -> Token:
    return Token(address=STABLE_ADDRESS, decimals=6, symbol="USDC")


@pytest.fixture
def calibration(risky, stable) -> Calibration:
    """Strike 10, sigma 10%, one year to maturity, 1% fee."""
    return Calibration(
        engine=ENGINE_ADDRESS,
        risky=risky,
        stable=stable,
        strike=10 * 10**18,
        sigma=1000,
        maturity=MATURITY,
        gamma=9900,
        last_timestamp=LAST_TIMESTAMP,
    )


@pytest.fixture
def calibration_6(risky_6, stable_6) -> Calibration:
    """Same curve with 6-decimal tokens on both sides."""
    return Calibration(
        engine=ENGINE_ADDRESS,
        risky=risky_6,
        stable=stable_6,
        strike=10 * 10**6,
        sigma=1000,
        maturity=MATURITY,
        gamma=9900,
        last_timestamp=LAST_TIMESTAMP,
    )


@pytest.fixture
def calibration_18_6(risky, stable_6) -> Calibration:
    """Same curve with an 18-decimal risky and a 6-decimal stable."""
    return Calibration(
        engine=ENGINE_ADDRESS,
        risky=risky,
        stable=stable_6,
        strike=10 * 10**6,
        sigma=1000,
        maturity=MATURITY,
        gamma=9900,
        last_timestamp=LAST_TIMESTAMP,
    )


_SNAPSHOT_PAYLOAD = {
    "name": "Pool",
    "properties": {
        "chainId": 1,
        "engine": ENGINE_ADDRESS,
        "risky": {"address": RISKY_ADDRESS, "decimals": 18, "symbol": "RISKY"},
        "stable": {"address": STABLE_ADDRESS, "decimals": "6", "symbol": "USDC"},
        "invariant": "0",
        "calibration": {
            "strike": "10000000",
            "sigma": "1000",
            "maturity": str(MATURITY),
            "gamma": "9900",
            "lastTimestamp": str(LAST_TIMESTAMP),
        },
        "reserve": {
            "reserveRisky": "480061" + "0" * 12,
            "reserveStable": "4800610",
            "liquidity": "1" + "0" * 18,
            "blockTimestamp": str(LAST_TIMESTAMP),
        },
    },
}


@pytest.fixture
def snapshot_payload() -> dict:
    """uri()-style pool payload: 18-decimal risky, 6-decimal stable, one unit of liquidity."""
    return copy.deepcopy(_SNAPSHOT_PAYLOAD)
