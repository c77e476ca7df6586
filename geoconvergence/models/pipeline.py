"""Cycle orchestration data models for GEOConvergence.

Defines CycleSnapshot (the validated input of one cycle), CycleResult (both
engine outputs plus timing) and PhaseRecord (per-phase timing log).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from geoconvergence.models.events import ConvergenceResult, GeoEvent, StaticAsset
from geoconvergence.models.zones import GeofenceResult, TrackedEntity, ZoneOfInterest


@dataclass
class CycleSnapshot:
    """Everything one evaluation cycle consumes, already validated."""

    events: List[GeoEvent] = field(default_factory=list)
    assets: List[StaticAsset] = field(default_factory=list)
    entities: List[TrackedEntity] = field(default_factory=list)
    zones: List[ZoneOfInterest] = field(default_factory=list)
    captured_at: Optional[datetime] = None


@dataclass
class PhaseRecord:
    """Timing and status record for a single cycle phase."""

    phase_name: str
    start_time: datetime
    end_time: Optional[datetime] = None
    status: str = "OK"

    @property
    def elapsed_seconds(self) -> float:
        """Compute elapsed time in seconds."""
        if self.end_time is None:
            return 0.0
        return (self.end_time - self.start_time).total_seconds()


@dataclass
class CycleResult:
    """Outputs of one full cycle: convergence zones and geofence alerts."""

    cycle_id: str
    evaluated_at: datetime
    convergence: Optional[ConvergenceResult] = None
    geofence: Optional[GeofenceResult] = None
    phase_log: List[PhaseRecord] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def status(self) -> str:
        """OK when both engines succeeded, PARTIAL when one did, FAILED otherwise."""
        statuses = [
            r.status for r in (self.convergence, self.geofence) if r is not None
        ]
        if not statuses:
            return "FAILED"
        if len(statuses) < 2 or any(s != "OK" for s in statuses):
            return "PARTIAL"
        return "OK"

    def log_phase_start(self, phase_name: str, start_time: datetime) -> PhaseRecord:
        """Record the start of a cycle phase."""
        record = PhaseRecord(phase_name=phase_name, start_time=start_time)
        self.phase_log.append(record)
        return record
