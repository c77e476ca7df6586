"""Event, asset and convergence-zone data models for GEOConvergence.

Defines the records consumed and produced by the convergence detector.
All fields are typed; no raw dicts are returned from engine code.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple


class EventCategory(str, Enum):
    """Closed set of crisis-signal categories that can converge in a cell."""

    CONFLICT = "conflict"
    FIRE = "fire"
    DISASTER = "disaster"
    OUTAGE = "outage"


# Fixed reporting order for per-category counts
CATEGORY_ORDER: Tuple[EventCategory, ...] = (
    EventCategory.CONFLICT,
    EventCategory.FIRE,
    EventCategory.DISASTER,
    EventCategory.OUTAGE,
)


class ConvergenceLevel(str, Enum):
    """Severity band derived from a convergence score."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class AssetKind:
    """Kinds of static assets matched against convergence centroids."""

    MILITARY_BASE = "military_base"
    NUCLEAR_FACILITY = "nuclear_facility"


@dataclass(frozen=True)
class GeoEvent:
    """A single geolocated crisis event, rebuilt fresh every detection run."""

    lat: float
    lng: float
    category: EventCategory
    label: str = ""


@dataclass(frozen=True)
class StaticAsset:
    """A military base or nuclear facility supplied as reference data."""

    lat: float
    lng: float
    name: str
    kind: str = AssetKind.MILITARY_BASE


@dataclass(frozen=True)
class ConvergenceZone:
    """A grid cell where several distinct event categories co-occur.

    Created once per detection run and never mutated afterwards.
    ``event_types`` holds each distinct category once, in first-seen order.
    """

    id: str
    lat: float
    lng: float
    radius_km: float
    score: int
    level: ConvergenceLevel
    event_types: Tuple[EventCategory, ...]
    event_count: int
    description: str
    nearby_assets: Tuple[str, ...] = ()
    timestamp: str = ""   # ISO 8601 UTC
    cell: Tuple[int, int] = (0, 0)


@dataclass
class ConvergenceStats:
    """Summary statistics for a single detection run."""

    total_events_in: int = 0
    total_assets_in: int = 0
    cells_evaluated: int = 0
    cells_qualified: int = 0
    zones_returned: int = 0
    truncated: bool = False


@dataclass
class ConvergenceResult:
    """Complete output from the ConvergenceDetector."""

    zones: List[ConvergenceZone] = field(default_factory=list)
    stats: Optional[ConvergenceStats] = None
    status: str = "OK"
    warnings: List[str] = field(default_factory=list)
