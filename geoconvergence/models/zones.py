"""Zone, tracked-entity and alert data models for GEOConvergence.

Defines the inputs and outputs of the geofencing engine. Zones and entities
arrive already validated (see geoconvergence.io.loaders); the engine treats
them as read-only.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple

LatLng = Tuple[float, float]


class ZoneType(str, Enum):
    """Operator-assigned zone type. Only EXCLUSION escalates entry severity."""

    INCLUSION = "inclusion"
    EXCLUSION = "exclusion"
    SURVEILLANCE = "surveillance"
    ALERT = "alert"


class AlertSeverity(str, Enum):
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"


class AlertKind(str, Enum):
    ENTRY = "entry"
    EXIT = "exit"


@dataclass(frozen=True)
class Position:
    lat: float
    lng: float


@dataclass(frozen=True)
class ZoneOfInterest:
    """An operator-authored polygon monitored for entity entry/exit.

    ``polygon`` is an ordered ring of (lat, lng) vertices with at least three
    points; the ring is implicitly closed.
    """

    id: str
    name: str
    polygon: Tuple[LatLng, ...]
    type: ZoneType = ZoneType.INCLUSION
    active: bool = True
    alert_on_entry: bool = False
    alert_on_exit: bool = False

    @property
    def is_alerting(self) -> bool:
        """True when the zone takes part in alert evaluation this cycle."""
        return self.active and (self.alert_on_entry or self.alert_on_exit)


@dataclass(frozen=True)
class TrackedEntity:
    """An aircraft, vessel or other mover observed during a cycle."""

    id: str
    label: str = ""
    type: str = ""
    position: Optional[Position] = None


@dataclass
class Alert:
    """A single geofence edge alert. Emitted per cycle, never stored by the engine."""

    id: str
    severity: AlertSeverity
    title: str
    message: str
    entity_id: str
    zone_id: str
    timestamp: str   # ISO 8601 UTC
    kind: AlertKind = AlertKind.ENTRY
    category: str = "geofence"
    source: str = "GEOFENCE"
    acknowledged: bool = False


@dataclass
class GeofenceStats:
    """Summary statistics for a single geofencing cycle."""

    entities_in: int = 0
    entities_evaluated: int = 0
    entities_skipped: int = 0
    zones_in: int = 0
    zones_alerting: int = 0
    entry_alerts: int = 0
    exit_alerts: int = 0
    reaped_entities: int = 0


@dataclass
class GeofenceResult:
    """Complete output from the GeofenceEngine for one cycle."""

    alerts: List[Alert] = field(default_factory=list)
    stats: Optional[GeofenceStats] = None
    evaluated_at: Optional[datetime] = None
    status: str = "OK"
    warnings: List[str] = field(default_factory=list)
