"""
PoolIdentity - deterministic pool identifier

The engine contract addresses a pool by

    keccak256(abi.encodePacked(engine, strike, sigma, maturity, gamma))

with the packed widths address (160 bits), uint128, uint32, uint32, uint32.
The id computed here is byte-identical, so an id derived off-chain
addresses the same on-chain pool.
"""

from dataclasses import dataclass
from typing import Final, Union

from web3 import Web3

POOL_ID_ABI_TYPES: Final[list[str]] = ["address", "uint128", "uint32", "uint32", "uint32"]

IntLike = Union[int, str]


def compute_pool_id(
    engine: str,
    strike: IntLike,
    sigma: IntLike,
    maturity: IntLike,
    gamma: IntLike,
) -> str:
    """
    Keccak-256 of the solidity-packed engine address and calibration.

    Args:
        engine: Address of the engine contract
        strike: Strike in base units of the stable token
        sigma: Implied volatility in basis points
        maturity: Expiry timestamp in seconds
        gamma: 10_000 - fee, in basis points

    Returns:
        0x-prefixed hex string of the 32-byte pool id
    """
    values = [
        Web3.to_checksum_address(engine),
        int(strike),
        int(sigma),
        int(maturity),
        int(gamma),
    ]
    return "0x" + bytes(Web3.solidity_keccak(POOL_ID_ABI_TYPES, values)).hex()


@dataclass(frozen=True)
class PoolIdentity:
    """Engine address plus the pool id derived from it."""

    engine: str
    pool_id: str

    @classmethod
    def of(cls, calibration) -> "PoolIdentity":
        return cls(engine=calibration.engine, pool_id=calibration.pool_id)

    @property
    def key(self) -> tuple[str, str]:
        return (self.engine, self.pool_id)
