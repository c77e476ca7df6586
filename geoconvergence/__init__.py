"""GEOConvergence — crisis-event convergence detection and geofencing.

Public API surface:
    - EngineConfig: Runtime configuration
    - ConvergenceDetector / detect_convergence: events → scored convergence zones
    - GeofenceEngine / ZoneMembershipStore: per-cycle entry/exit alerts
    - CycleRunner / run_cycle: both engines over one snapshot
"""

__version__ = "1.0.0"
__author__ = "GEOConvergence Contributors"

from config.settings import EngineConfig
from geoconvergence.analysis.convergence import detect_convergence
from geoconvergence.analysis.geofencing import entities_in_zone
from geoconvergence.engines.convergence_engine import ConvergenceDetector
from geoconvergence.engines.geofence_engine import GeofenceEngine
from geoconvergence.exceptions import InvalidEntityRecord, InvalidZoneDefinition
from geoconvergence.pipeline import CycleRunner, export_cycle, run_cycle
from geoconvergence.state.membership import ZoneMembershipStore

__all__ = [
    "__version__",
    "EngineConfig",
    "ConvergenceDetector",
    "GeofenceEngine",
    "ZoneMembershipStore",
    "CycleRunner",
    "InvalidEntityRecord",
    "InvalidZoneDefinition",
    "detect_convergence",
    "entities_in_zone",
    "export_cycle",
    "run_cycle",
]
