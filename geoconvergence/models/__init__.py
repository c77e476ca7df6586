"""GEOConvergence data models package.

All engine input/output schemas are defined here as typed dataclasses.
Never return raw Dict from engine code; use the typed models.
"""

from geoconvergence.models.events import (
    CATEGORY_ORDER,
    AssetKind,
    ConvergenceLevel,
    ConvergenceResult,
    ConvergenceStats,
    ConvergenceZone,
    EventCategory,
    GeoEvent,
    StaticAsset,
)
from geoconvergence.models.pipeline import CycleResult, CycleSnapshot, PhaseRecord
from geoconvergence.models.zones import (
    Alert,
    AlertKind,
    AlertSeverity,
    GeofenceResult,
    GeofenceStats,
    Position,
    TrackedEntity,
    ZoneOfInterest,
    ZoneType,
)

__all__ = [
    # events
    "CATEGORY_ORDER",
    "AssetKind",
    "ConvergenceLevel",
    "ConvergenceResult",
    "ConvergenceStats",
    "ConvergenceZone",
    "EventCategory",
    "GeoEvent",
    "StaticAsset",
    # zones
    "Alert",
    "AlertKind",
    "AlertSeverity",
    "GeofenceResult",
    "GeofenceStats",
    "Position",
    "TrackedEntity",
    "ZoneOfInterest",
    "ZoneType",
    # pipeline
    "CycleResult",
    "CycleSnapshot",
    "PhaseRecord",
]
