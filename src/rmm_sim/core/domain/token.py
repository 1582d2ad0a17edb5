"""
Token - ERC-20 metadata of one side of a pool

Immutable Pydantic model. Addresses are stored checksummed so that two
tokens compare equal regardless of the case they were supplied in.
"""

from typing import Final, Optional

from pydantic import BaseModel, Field, field_validator
from web3 import Web3

# Engine precision; no token may carry more decimals than this
MAX_TOKEN_DECIMALS: Final[int] = 18


def validate_and_parse_address(address: str) -> str:
    """
    Validate a hex address and return its checksummed form.

    Raises:
        ValueError: If `address` is not a valid hex address
    """
    if not isinstance(address, str) or not Web3.is_address(address):
        raise ValueError(f"{address} is not a valid address.")
    return Web3.to_checksum_address(address)


class Token(BaseModel):
    """ERC-20 token metadata."""

    address: str = Field(..., description="Checksummed token address")
    decimals: int = Field(..., ge=0, le=MAX_TOKEN_DECIMALS, description="Token decimals")
    symbol: Optional[str] = Field(None, description="Token symbol")
    name: Optional[str] = Field(None, description="Token name")
    chain_id: int = Field(1, gt=0, description="Chain the token lives on")

    model_config = {"frozen": True}

    @field_validator("address")
    @classmethod
    def checksum_address(cls, v: str) -> str:
        return validate_and_parse_address(v)

    @property
    def scale_factor(self) -> int:
        """Multiplier that lifts an amount of this token to engine precision."""
        return 10 ** (MAX_TOKEN_DECIMALS - self.decimals)

    def equals(self, other: "Token") -> bool:
        return self.chain_id == other.chain_id and self.address == other.address
