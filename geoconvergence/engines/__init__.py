"""GEOConvergence engines package."""

from geoconvergence.engines.base import BaseEngine, EngineStatus
from geoconvergence.engines.convergence_engine import ConvergenceDetector
from geoconvergence.engines.geofence_engine import GeofenceEngine

__all__ = [
    "BaseEngine",
    "EngineStatus",
    "ConvergenceDetector",
    "GeofenceEngine",
]
