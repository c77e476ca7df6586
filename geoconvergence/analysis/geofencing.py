"""Geofence containment and edge-trigger rules for GEOConvergence.

Each (entity, zone) pair is a two-state machine, OUTSIDE or INSIDE, driven
only by a fresh point-in-polygon test every cycle. There is no hysteresis.
Pure functions; the membership store is read and written by the engine.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import AbstractSet, Iterable, List, Sequence, Set, Tuple

from geoconvergence.models.zones import (
    Alert,
    AlertKind,
    AlertSeverity,
    TrackedEntity,
    ZoneOfInterest,
    ZoneType,
)
from geoconvergence.utils.date_utils import epoch_millis, to_iso
from geoconvergence.utils.geo_utils import bbox_contains, point_in_polygon, polygon_bbox

logger = logging.getLogger(__name__)


def zone_contains(zone: ZoneOfInterest, lat: float, lng: float) -> bool:
    """Containment test with a bounding-box prefilter."""
    if len(zone.polygon) < 3:
        return False
    if not bbox_contains(lat, lng, polygon_bbox(zone.polygon)):
        return False
    return point_in_polygon(lat, lng, zone.polygon)


def partition_zones(
    zones: Sequence[ZoneOfInterest],
    membership_scope: str = "all",
) -> Tuple[List[ZoneOfInterest], List[ZoneOfInterest]]:
    """Split zones into those tracked for membership and those evaluated for alerts.

    Args:
        zones: Every zone supplied for the cycle.
        membership_scope: "all" tracks membership for every zone; "alerting"
            restricts it to active zones with an alert flag set.

    Returns:
        (tracked zones, alerting zones).
    """
    alerting = [z for z in zones if z.is_alerting]
    tracked = list(zones) if membership_scope == "all" else alerting
    return tracked, alerting


def entry_severity(zone: ZoneOfInterest) -> AlertSeverity:
    """Entering an exclusion zone is critical; any other zone is a warning."""
    if zone.type == ZoneType.EXCLUSION:
        return AlertSeverity.CRITICAL
    return AlertSeverity.WARNING


def _entity_label(entity: TrackedEntity) -> str:
    """Display name for alert text: the label, else the id."""
    return entity.label or entity.id


def build_entry_alert(
    entity: TrackedEntity,
    zone: ZoneOfInterest,
    evaluated_at: datetime,
) -> Alert:
    """ENTRY alert for ``entity`` crossing into ``zone``; severity follows the zone type."""
    return Alert(
        id=f"geo-entry-{entity.id}-{zone.id}-{epoch_millis(evaluated_at)}",
        severity=entry_severity(zone),
        title=f"Zone entry: {zone.name}",
        message=(
            f"{_entity_label(entity)} ({entity.type or 'unknown'}) entered "
            f"{zone.name} [{zone.type.value.upper()}]"
        ),
        entity_id=entity.id,
        zone_id=zone.id,
        timestamp=to_iso(evaluated_at),
        kind=AlertKind.ENTRY,
    )


def build_exit_alert(
    entity: TrackedEntity,
    zone: ZoneOfInterest,
    evaluated_at: datetime,
) -> Alert:
    """INFO-level EXIT alert for ``entity`` leaving ``zone``."""
    return Alert(
        id=f"geo-exit-{entity.id}-{zone.id}-{epoch_millis(evaluated_at)}",
        severity=AlertSeverity.INFO,
        title=f"Zone exit: {zone.name}",
        message=f"{_entity_label(entity)} ({entity.type or 'unknown'}) left {zone.name}",
        entity_id=entity.id,
        zone_id=zone.id,
        timestamp=to_iso(evaluated_at),
        kind=AlertKind.EXIT,
    )


def evaluate_entity(
    entity: TrackedEntity,
    tracked_zones: Sequence[ZoneOfInterest],
    alerting_zones: Sequence[ZoneOfInterest],
    previous: AbstractSet[str],
    evaluated_at: datetime,
) -> Tuple[List[Alert], Set[str]]:
    """Compute one entity's alerts and new membership for this cycle.

    Alerts compare containment against ``previous``, the membership recorded
    by the preceding cycle. The caller stores the returned set afterwards.

    Args:
        entity: Entity with a known position.
        tracked_zones: Zones whose membership is recorded.
        alerting_zones: Active zones with an entry or exit flag.
        previous: Zone ids the entity occupied last cycle.
        evaluated_at: Cycle time stamped onto alerts.

    Returns:
        (alerts in zone order, zone ids the entity occupies now).
    """
    if entity.position is None:
        return [], set(previous)

    lat, lng = entity.position.lat, entity.position.lng
    current: Set[str] = {z.id for z in tracked_zones if zone_contains(z, lat, lng)}

    alerts: List[Alert] = []
    for zone in alerting_zones:
        inside = zone.id in current
        was_inside = zone.id in previous
        if inside and not was_inside and zone.alert_on_entry:
            alerts.append(build_entry_alert(entity, zone, evaluated_at))
        elif not inside and was_inside and zone.alert_on_exit:
            alerts.append(build_exit_alert(entity, zone, evaluated_at))

    return alerts, current


def entities_in_zone(
    zone: ZoneOfInterest,
    entities: Iterable[TrackedEntity],
) -> List[TrackedEntity]:
    """Entities currently inside ``zone``, independent of any stored membership."""
    return [
        e
        for e in entities
        if e.position is not None and zone_contains(zone, e.position.lat, e.position.lng)
    ]
