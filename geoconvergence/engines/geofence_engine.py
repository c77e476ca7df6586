"""GeofenceEngine — per-cycle ENTRY/EXIT alerts for tracked entities.

Each cycle compares fresh containment against the membership recorded by the
previous cycle, emits edge alerts, then replaces the stored membership. The
whole cycle runs while holding the store's evaluation lock so overlapping
cycles cannot interleave their read-modify-write for an entity.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional, Sequence

from config.settings import EngineConfig
from geoconvergence.analysis.geofencing import (
    entities_in_zone,
    evaluate_entity,
    partition_zones,
)
from geoconvergence.engines.base import BaseEngine, EngineStatus
from geoconvergence.models.pipeline import CycleSnapshot
from geoconvergence.models.zones import (
    Alert,
    AlertKind,
    GeofenceResult,
    GeofenceStats,
    TrackedEntity,
    ZoneOfInterest,
)
from geoconvergence.state.membership import ZoneMembershipStore
from geoconvergence.utils.date_utils import utc_now

logger = logging.getLogger(__name__)


class GeofenceEngine(BaseEngine):
    """Edge-triggered geofencing over an injected ZoneMembershipStore.

    Args:
        config: Engine configuration (membership scope, TTL).
        store: Membership store; a private one is created when None.
    """

    name = "GeofenceEngine"
    version = "1.0.0"

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        store: Optional[ZoneMembershipStore] = None,
    ) -> None:
        super().__init__(config)
        self.store = store if store is not None else ZoneMembershipStore()

    def run(
        self,
        snapshot: CycleSnapshot,
        evaluated_at: Optional[datetime] = None,
    ) -> GeofenceResult:
        """Evaluate the snapshot's entities against its zones."""
        return self.evaluate(
            snapshot.entities,
            snapshot.zones,
            evaluated_at=evaluated_at or snapshot.captured_at,
        )

    def evaluate(
        self,
        entities: Sequence[TrackedEntity],
        zones: Sequence[ZoneOfInterest],
        evaluated_at: Optional[datetime] = None,
    ) -> GeofenceResult:
        """Run one geofencing cycle.

        Args:
            entities: Entities observed this cycle; those without a position
                are skipped; their stored zones are left untouched but
                their last-seen time is refreshed.
            zones: Every known zone. Only active zones with an alert flag
                produce alerts; membership scope follows the config.
            evaluated_at: Cycle time (current UTC time when None).

        Returns:
            GeofenceResult with this cycle's alerts only.
        """
        evaluated_at = evaluated_at or utc_now()
        tracked_zones, alerting_zones = partition_zones(zones, self.config.membership_scope)
        stats = GeofenceStats(
            entities_in=len(entities),
            zones_in=len(zones),
            zones_alerting=len(alerting_zones),
        )
        result = GeofenceResult(evaluated_at=evaluated_at, stats=stats)

        with self.store.evaluation():
            for entity in entities:
                if entity.position is None:
                    # Still reported, so keep it alive for the TTL reaper
                    self.store.touch(entity.id, evaluated_at)
                    stats.entities_skipped += 1
                    continue

                previous = self.store.get(entity.id)
                alerts, current = evaluate_entity(
                    entity, tracked_zones, alerting_zones, previous, evaluated_at
                )
                result.alerts.extend(alerts)
                self.store.replace(entity.id, current, seen_at=evaluated_at)
                stats.entities_evaluated += 1

            if self.config.membership_ttl_seconds > 0:
                reaped = self.store.reap(self.config.membership_ttl_seconds, now=evaluated_at)
                stats.reaped_entities = len(reaped)

        stats.entry_alerts = sum(1 for a in result.alerts if a.kind == AlertKind.ENTRY)
        stats.exit_alerts = sum(1 for a in result.alerts if a.kind == AlertKind.EXIT)
        result.status = EngineStatus.OK

        if stats.entities_skipped:
            result.warnings.append(f"{stats.entities_skipped} entities had no position")

        logger.info(
            "Geofence: %d/%d entities evaluated against %d alerting zones → "
            "%d entry, %d exit alerts",
            stats.entities_evaluated,
            stats.entities_in,
            stats.zones_alerting,
            stats.entry_alerts,
            stats.exit_alerts,
        )
        return result

    def check(
        self,
        entities: Sequence[TrackedEntity],
        zones: Sequence[ZoneOfInterest],
        evaluated_at: Optional[datetime] = None,
    ) -> List[Alert]:
        """Run one cycle and return only its alerts."""
        return self.evaluate(entities, zones, evaluated_at).alerts

    def entities_in_zone(
        self,
        zone: ZoneOfInterest,
        entities: Sequence[TrackedEntity],
    ) -> List[TrackedEntity]:
        """Who is inside ``zone`` right now. Does not read or modify the store."""
        return entities_in_zone(zone, entities)

    def reset(self) -> None:
        """Forget every entity's membership."""
        self.store.clear()
