"""GEOConvergence cycle orchestrator.

Runs both engines over one validated snapshot, records per-phase timing and
exports the results. Phase order:
  Phase 1 — ConvergenceDetector (stateless)
  Phase 2 — GeofenceEngine (reads and replaces the membership store)

A failure in one phase is logged and recorded on the CycleResult; the other
phase still runs.

Usage:
    from geoconvergence.io.loaders import load_snapshot
    from geoconvergence.pipeline import CycleRunner

    runner = CycleRunner()
    result = runner.run(load_snapshot("snapshot.json"))
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional

from config.settings import EngineConfig
from geoconvergence.engines.base import BaseEngine, EngineStatus
from geoconvergence.engines.convergence_engine import ConvergenceDetector
from geoconvergence.engines.geofence_engine import GeofenceEngine
from geoconvergence.io.persistence import save_json
from geoconvergence.models.pipeline import CycleResult, CycleSnapshot
from geoconvergence.state.membership import ZoneMembershipStore
from geoconvergence.utils.date_utils import utc_now
from geoconvergence.utils.logging_utils import get_cycle_logger

logger = logging.getLogger(__name__)


def make_cycle_id(evaluated_at: Optional[datetime] = None) -> str:
    """Generate a sortable cycle ID: ``YYYYMMDD_HHMMSS_<6 hex chars>``."""
    evaluated_at = evaluated_at or utc_now()
    return f"{evaluated_at.strftime('%Y%m%d_%H%M%S')}_{uuid.uuid4().hex[:6]}"


def _run_phase(
    result: CycleResult,
    phase_name: str,
    engine: BaseEngine,
    snapshot: CycleSnapshot,
    result_attr: str,
) -> bool:
    """Execute a single engine and record its timing on the cycle result.

    Args:
        result: Cycle result being populated.
        phase_name: Label for logs and phase_log.
        engine: Engine instance.
        snapshot: Validated cycle input.
        result_attr: CycleResult field to write the engine result to.

    Returns:
        True if the phase completed, False if it raised.
    """
    cycle_logger = get_cycle_logger(__name__, result.cycle_id)
    record = result.log_phase_start(phase_name, utc_now())

    try:
        engine_result = engine._run_timed(snapshot, result.evaluated_at)
    except Exception as exc:
        record.end_time = utc_now()
        record.status = EngineStatus.FAILED
        cycle_logger.error("%s failed: %s", phase_name, exc)
        result.errors.append(f"{phase_name} failed with exception: {exc}")
        return False

    setattr(result, result_attr, engine_result)
    record.end_time = utc_now()
    record.status = str(getattr(engine_result, "status", EngineStatus.OK))
    for w in getattr(engine_result, "warnings", []):
        result.warnings.append(f"[{phase_name}] {w}")
    cycle_logger.debug("%s complete (%.3fs)", phase_name, record.elapsed_seconds)
    return True


class CycleRunner:
    """Owns the engines and the membership store across repeated cycles.

    Args:
        config: Engine configuration shared by both engines.
        store: Membership store to inject; a new one is created when None.
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        store: Optional[ZoneMembershipStore] = None,
    ) -> None:
        self.config = config or EngineConfig()
        self.store = store if store is not None else ZoneMembershipStore()
        self.detector = ConvergenceDetector(self.config)
        self.geofence = GeofenceEngine(self.config, self.store)

    def run(
        self,
        snapshot: CycleSnapshot,
        evaluated_at: Optional[datetime] = None,
    ) -> CycleResult:
        """Run one full cycle over ``snapshot``.

        Args:
            snapshot: Validated cycle input.
            evaluated_at: Cycle time; defaults to the snapshot capture time,
                then to the current UTC time.

        Returns:
            CycleResult with both engine outputs and the phase log.
        """
        evaluated_at = evaluated_at or snapshot.captured_at or utc_now()
        result = CycleResult(cycle_id=make_cycle_id(evaluated_at), evaluated_at=evaluated_at)
        cycle_logger = get_cycle_logger(__name__, result.cycle_id)
        cycle_logger.info(
            "Starting cycle: %d events, %d assets, %d entities, %d zones",
            len(snapshot.events),
            len(snapshot.assets),
            len(snapshot.entities),
            len(snapshot.zones),
        )

        _run_phase(result, "ConvergenceDetector", self.detector, snapshot, "convergence")
        _run_phase(result, "GeofenceEngine", self.geofence, snapshot, "geofence")

        cycle_logger.info(
            "Cycle complete (status=%s): %d zones, %d alerts, %d warnings, %d errors",
            result.status,
            len(result.convergence.zones) if result.convergence else 0,
            len(result.geofence.alerts) if result.geofence else 0,
            len(result.warnings),
            len(result.errors),
        )
        for err in result.errors:
            cycle_logger.error("Cycle error: %s", err)
        return result


def run_cycle(
    snapshot: CycleSnapshot,
    config: Optional[EngineConfig] = None,
    store: Optional[ZoneMembershipStore] = None,
    evaluated_at: Optional[datetime] = None,
) -> CycleResult:
    """Run a single cycle with a one-off CycleRunner.

    Pass the same ``store`` on every call to keep geofence edges continuous
    across cycles.
    """
    return CycleRunner(config, store).run(snapshot, evaluated_at)


def export_cycle(result: CycleResult, output_dir: str | Path) -> Dict[str, Path]:
    """Write a cycle's zones, alerts and summary as JSON files.

    Args:
        result: Completed cycle result.
        output_dir: Destination directory (created if missing).

    Returns:
        Mapping of artifact name to written path.
    """
    output_dir = Path(output_dir)
    zones = result.convergence.zones if result.convergence else []
    alerts = result.geofence.alerts if result.geofence else []

    artifacts = {
        "convergence_zones": output_dir / "convergence_zones.json",
        "alerts": output_dir / "alerts.json",
        "cycle_summary": output_dir / "cycle_summary.json",
    }
    save_json({"zones": zones, "count": len(zones)}, artifacts["convergence_zones"])
    save_json({"alerts": alerts, "count": len(alerts)}, artifacts["alerts"])
    save_json(
        {
            "cycle_id": result.cycle_id,
            "evaluated_at": result.evaluated_at,
            "status": result.status,
            "convergence_stats": result.convergence.stats if result.convergence else None,
            "geofence_stats": result.geofence.stats if result.geofence else None,
            "phases": [
                {
                    "phase": p.phase_name,
                    "status": p.status,
                    "elapsed_seconds": round(p.elapsed_seconds, 4),
                }
                for p in result.phase_log
            ],
            "warnings": result.warnings,
            "errors": result.errors,
        },
        artifacts["cycle_summary"],
    )
    logger.info("Exported cycle %s → %s", result.cycle_id, output_dir)
    return artifacts
