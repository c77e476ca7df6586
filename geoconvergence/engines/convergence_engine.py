"""ConvergenceDetector — score grid cells where crisis categories co-occur.

Stateless: every call consumes a full snapshot of events and assets and
returns a ranked list of at most ``config.max_zones`` zones. Safe to call
concurrently from independent threads.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, List, Optional

from geoconvergence.analysis.convergence import detect_convergence_with_stats
from geoconvergence.engines.base import BaseEngine, EngineStatus
from geoconvergence.models.events import (
    ConvergenceResult,
    ConvergenceZone,
    GeoEvent,
    StaticAsset,
)
from geoconvergence.models.pipeline import CycleSnapshot
from geoconvergence.utils.date_utils import utc_now

logger = logging.getLogger(__name__)


class ConvergenceDetector(BaseEngine):
    """End-to-end events → convergence zones pipeline."""

    name = "ConvergenceDetector"
    version = "1.0.0"

    def run(
        self,
        snapshot: CycleSnapshot,
        evaluated_at: Optional[datetime] = None,
    ) -> ConvergenceResult:
        """Detect convergence zones in a cycle snapshot.

        Args:
            snapshot: Snapshot carrying events and static assets.
            evaluated_at: Cycle time (current UTC time when None).

        Returns:
            ConvergenceResult with ranked zones and detection statistics.
        """
        evaluated_at = evaluated_at or snapshot.captured_at or utc_now()
        result = ConvergenceResult()

        zones, stats = detect_convergence_with_stats(
            snapshot.events,
            snapshot.assets,
            config=self.config,
            evaluated_at=evaluated_at,
        )
        result.zones = zones
        result.stats = stats

        if not snapshot.events:
            result.warnings.append("No events supplied for convergence detection")
        if stats.truncated:
            result.warnings.append(
                f"{stats.cells_qualified} zones qualified; kept top {stats.zones_returned}"
            )
        result.status = EngineStatus.OK
        return result

    def detect(
        self,
        events: Iterable[GeoEvent],
        assets: Optional[Iterable[StaticAsset]] = None,
        evaluated_at: Optional[datetime] = None,
    ) -> List[ConvergenceZone]:
        """Convenience wrapper returning only the ranked zones."""
        snapshot = CycleSnapshot(events=list(events), assets=list(assets or []))
        return self.run(snapshot, evaluated_at).zones

    def validate_output(self, result: ConvergenceResult) -> bool:
        """Check the result honours the admission and ranking invariants."""
        if result is None:
            return False
        if len(result.zones) > self.config.max_zones:
            return False
        scores = [z.score for z in result.zones]
        if scores != sorted(scores, reverse=True):
            return False
        return all(
            len(z.event_types) >= self.config.min_categories
            and z.event_count >= self.config.min_events
            and z.radius_km >= self.config.min_radius_km
            for z in result.zones
        )
