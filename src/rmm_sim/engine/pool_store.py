"""
PoolStore - caller-owned registry of curve engines

Engines are keyed by (engine address, pool id). The store is populated
from pool snapshots and hands out clones, so a caller previewing trades
never mutates the stored state. Entries older than `max_age_seconds` are
stale and can be dropped with evict_stale().
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, Optional, Tuple

from rmm_sim.core.domain.pool_snapshot import PoolSnapshot
from rmm_sim.core.domain.token import validate_and_parse_address
from rmm_sim.engine.curve_engine import CurveEngine

logger = logging.getLogger(__name__)

PoolKey = Tuple[str, str]


@dataclass
class _Entry:
    engine: CurveEngine
    refreshed_at: float


class PoolStore:
    """In-memory engines by (engine address, pool id)."""

    def __init__(
        self,
        max_age_seconds: Optional[float] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        if max_age_seconds is not None and max_age_seconds <= 0:
            raise ValueError(f"max_age_seconds must be positive, got {max_age_seconds}")
        self.max_age_seconds = max_age_seconds
        self._clock = clock or time.time
        self._entries: Dict[PoolKey, _Entry] = {}

    @staticmethod
    def _key(engine_address: str, pool_id: str) -> PoolKey:
        return (validate_and_parse_address(engine_address), pool_id.lower())

    def refresh(self, snapshot: PoolSnapshot, **engine_kwargs) -> CurveEngine:
        """
        Build an engine from `snapshot` and store it, replacing any previous one.

        Returns:
            A clone of the stored engine

        Raises:
            CalibrationError: If the snapshot's calibration is out of bounds
        """
        engine_kwargs.setdefault("clock", self._clock)
        engine = CurveEngine.from_snapshot(snapshot, **engine_kwargs)
        return self.put(engine)

    def put(self, engine: CurveEngine) -> CurveEngine:
        """Store a clone of `engine`; returns another clone for the caller."""
        key = self._key(*engine.identity.key)
        replaced = key in self._entries
        self._entries[key] = _Entry(engine=engine.clone(), refreshed_at=self._clock())
        logger.debug("%s pool %s of engine %s", "Replaced" if replaced else "Stored", key[1], key[0])
        return engine.clone()

    def get(self, engine_address: str, pool_id: str) -> Optional[CurveEngine]:
        """Independent clone of the stored engine, or None."""
        entry = self._entries.get(self._key(engine_address, pool_id))
        if entry is None:
            return None
        return entry.engine.clone()

    def evict(self, engine_address: str, pool_id: str) -> bool:
        """Drop one pool; returns whether it was present."""
        removed = self._entries.pop(self._key(engine_address, pool_id), None) is not None
        if removed:
            logger.debug("Evicted pool %s of engine %s", pool_id, engine_address)
        return removed

    def is_stale(self, engine_address: str, pool_id: str) -> bool:
        entry = self._entries.get(self._key(engine_address, pool_id))
        if entry is None or self.max_age_seconds is None:
            return False
        return self._clock() - entry.refreshed_at > self.max_age_seconds

    def evict_stale(self) -> int:
        """Drop every entry older than max_age_seconds; returns how many."""
        if self.max_age_seconds is None:
            return 0
        now = self._clock()
        stale = [key for key, entry in self._entries.items() if now - entry.refreshed_at > self.max_age_seconds]
        for key in stale:
            del self._entries[key]
        if stale:
            logger.info("Evicted %d stale pools", len(stale))
        return len(stale)

    def invalidate_engine(self, engine_address: str) -> int:
        """Drop every pool of one engine contract; returns how many."""
        address = validate_and_parse_address(engine_address)
        keys = [key for key in self._entries if key[0] == address]
        for key in keys:
            del self._entries[key]
        if keys:
            logger.info("Invalidated %d pools of engine %s", len(keys), address)
        return len(keys)

    def keys(self) -> list[PoolKey]:
        return list(self._entries)

    def __iter__(self) -> Iterator[PoolKey]:
        return iter(self.keys())

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, tuple) or len(key) != 2:
            return False
        try:
            return self._key(*key) in self._entries
        except (TypeError, ValueError, AttributeError):
            return False
