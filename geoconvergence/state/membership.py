"""Zone membership store for the GEOConvergence geofencing engine.

Maps each tracked entity id to the set of zone ids it occupied at the most
recent evaluation. This is the only mutable state shared across cycles, so it
is an explicitly owned object injected into the engine rather than a module
global.

Entries are replaced wholesale every cycle, never merged. Entities that stop
appearing keep their entry until reap() or forget() removes it.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, FrozenSet, Iterable, Iterator, List, Optional

from geoconvergence.utils.date_utils import parse_timestamp, to_iso, utc_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MembershipEntry:
    zone_ids: FrozenSet[str]
    last_seen: datetime


class ZoneMembershipStore:
    """Thread-safe entity → zone-set table with TTL reaping.

    Every method takes the store lock. Callers that perform a read-modify-write
    across several entities (a whole geofencing cycle) should hold
    ``evaluation()`` for the duration so concurrent cycles cannot interleave.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, MembershipEntry] = {}
        self._lock = threading.RLock()

    @contextmanager
    def evaluation(self) -> Iterator["ZoneMembershipStore"]:
        """Hold the store lock for a full evaluation cycle."""
        with self._lock:
            yield self

    def get(self, entity_id: str) -> FrozenSet[str]:
        """Zone ids the entity occupied last cycle (empty if never seen)."""
        with self._lock:
            entry = self._entries.get(entity_id)
            return entry.zone_ids if entry else frozenset()

    def last_seen(self, entity_id: str) -> Optional[datetime]:
        with self._lock:
            entry = self._entries.get(entity_id)
            return entry.last_seen if entry else None

    def replace(
        self,
        entity_id: str,
        zone_ids: Iterable[str],
        seen_at: Optional[datetime] = None,
    ) -> None:
        """Overwrite the entity's membership. An empty set is stored as-is."""
        with self._lock:
            self._entries[entity_id] = MembershipEntry(
                zone_ids=frozenset(zone_ids),
                last_seen=seen_at or utc_now(),
            )

    def touch(self, entity_id: str, seen_at: Optional[datetime] = None) -> bool:
        """Refresh ``last_seen`` without changing zones. Returns False for unknown ids."""
        with self._lock:
            entry = self._entries.get(entity_id)
            if entry is None:
                return False
            self._entries[entity_id] = MembershipEntry(
                zone_ids=entry.zone_ids,
                last_seen=seen_at or utc_now(),
            )
            return True

    def forget(self, entity_id: str) -> bool:
        """Drop an entity's entry. Returns True if one existed."""
        with self._lock:
            return self._entries.pop(entity_id, None) is not None

    def reap(self, max_age_seconds: float, now: Optional[datetime] = None) -> List[str]:
        """Remove entries not refreshed within ``max_age_seconds``.

        Args:
            max_age_seconds: Time-to-live for an unseen entity.
            now: Reference time (current UTC time when None).

        Returns:
            Ids of the entities that were removed.
        """
        now = now or utc_now()
        cutoff = now - timedelta(seconds=max_age_seconds)
        with self._lock:
            stale = [eid for eid, entry in self._entries.items() if entry.last_seen < cutoff]
            for eid in stale:
                del self._entries[eid]
        if stale:
            logger.debug("Membership: reaped %d stale entities", len(stale))
        return stale

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def snapshot(self) -> Dict[str, FrozenSet[str]]:
        """Point-in-time copy of entity → zone ids."""
        with self._lock:
            return {eid: entry.zone_ids for eid, entry in self._entries.items()}

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, entity_id: object) -> bool:
        with self._lock:
            return entity_id in self._entries

    # ── Serialization ──────────────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready representation, zone ids sorted for stable output."""
        with self._lock:
            return {
                eid: {
                    "zones": sorted(entry.zone_ids),
                    "last_seen": to_iso(entry.last_seen),
                }
                for eid, entry in self._entries.items()
            }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ZoneMembershipStore":
        """Rebuild a store from to_dict() output. Malformed entries are skipped."""
        store = cls()
        for eid, raw in (data or {}).items():
            if not isinstance(raw, dict) or not isinstance(raw.get("zones", []), list):
                logger.warning("Membership: skipping malformed state entry for %r", eid)
                continue
            seen_at = parse_timestamp(raw.get("last_seen")) or utc_now()
            store.replace(str(eid), (str(z) for z in raw.get("zones", [])), seen_at)
        return store
