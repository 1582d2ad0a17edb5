"""
Contract Validation Module

JSON Schema contracts for payloads entering the core from outside.
"""

from .validators import (
    ContractValidator,
    PoolSnapshotValidator,
    SchemaLoader,
    validate_pool_snapshot,
)

__all__ = [
    # Classes
    "SchemaLoader",
    "ContractValidator",
    "PoolSnapshotValidator",
    # Functions
    "validate_pool_snapshot",
]
