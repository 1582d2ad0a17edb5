"""
PoolSnapshot - raw pool state as read from the snapshot source

Immutable Pydantic model built from a payload that has already passed the
pool_snapshot JSON Schema contract. The core owns no persistence format;
a snapshot is the hand-off point between the caller's feed (chain node or
indexer) and CurveEngine construction.
"""

from typing import Any, Dict, Optional

import jsonschema
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from rmm_sim.core.contracts import validate_pool_snapshot
from rmm_sim.core.domain.calibration import Calibration
from rmm_sim.core.domain.token import Token
from rmm_sim.core.errors import SnapshotError


class PoolSnapshot(BaseModel):
    """Reserves and calibration of one pool at one point in time."""

    engine: str = Field(..., description="Engine contract address")
    risky: Token = Field(..., description="Risky asset")
    stable: Token = Field(..., description="Stable asset")

    # Calibration (on-chain units)
    strike: int = Field(..., gt=0, description="Strike in stable base units")
    sigma: int = Field(..., gt=0, description="Implied volatility (bps)")
    maturity: int = Field(..., gt=0, description="Expiry timestamp (seconds)")
    gamma: int = Field(..., gt=0, description="Fee complement (bps)")
    last_timestamp: Optional[int] = Field(None, ge=0, description="Last pool update (seconds)")

    # Reserves (base units)
    reserve_risky: int = Field(..., ge=0, description="Risky reserve (risky base units)")
    reserve_stable: int = Field(..., ge=0, description="Stable reserve (stable base units)")
    liquidity: int = Field(..., ge=0, description="Total liquidity (18 decimals)")
    block_timestamp: Optional[int] = Field(None, ge=0, description="Block of the reserve read (seconds)")

    invariant_x64: Optional[int] = Field(None, description="Stored invariant, signed Q64.64")

    model_config = {"frozen": True}

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "PoolSnapshot":
        """
        Validate a raw payload against the pool_snapshot contract and parse it.

        Raises:
            SnapshotError: If the payload violates the contract
        """
        try:
            validate_pool_snapshot(payload)
        except jsonschema.ValidationError as e:
            raise SnapshotError(f"Invalid pool snapshot: {e.message}") from e

        props = payload["properties"]
        chain_id = int(props.get("chainId", 1))
        calibration = props["calibration"]
        reserve = props["reserve"]

        def token(raw: Dict[str, Any]) -> Token:
            return Token(
                address=raw["address"],
                decimals=int(raw["decimals"]),
                symbol=raw.get("symbol"),
                name=raw.get("name"),
                chain_id=chain_id,
            )

        def optional_int(value: Optional[str]) -> Optional[int]:
            return int(value) if value is not None else None

        try:
            return cls(
                engine=props["engine"],
                risky=token(props["risky"]),
                stable=token(props["stable"]),
                strike=int(calibration["strike"]),
                sigma=int(calibration["sigma"]),
                maturity=int(calibration["maturity"]),
                gamma=int(calibration["gamma"]),
                last_timestamp=optional_int(calibration.get("lastTimestamp")),
                reserve_risky=int(reserve["reserveRisky"]),
                reserve_stable=int(reserve["reserveStable"]),
                liquidity=int(reserve["liquidity"]),
                block_timestamp=optional_int(reserve.get("blockTimestamp")),
                invariant_x64=optional_int(props.get("invariant")),
            )
        except PydanticValidationError as e:
            raise SnapshotError(f"Invalid pool snapshot: {e}") from e

    def to_calibration(self, last_timestamp: Optional[int] = None) -> Calibration:
        """
        Calibration of this pool.

        The timestamp used for tau is, in order: the argument, the pool's
        last update, the block the reserves were read at.

        Raises:
            CalibrationError: If the calibration is out of bounds
        """
        timestamp = last_timestamp
        if timestamp is None:
            timestamp = self.last_timestamp if self.last_timestamp is not None else self.block_timestamp
        return Calibration.parse(
            self.engine,
            self.risky,
            self.stable,
            self.strike,
            self.sigma,
            self.maturity,
            self.gamma,
            timestamp,
        )
