"""GEOConvergence configuration package."""

from config.defaults import (
    ASSET_PROXIMITY_KM,
    CONVERGENCE_MIN_CATEGORIES,
    CONVERGENCE_MIN_EVENTS,
    CONVERGENCE_MIN_RADIUS_KM,
    DEFAULT_LOG_LEVEL,
    GRID_CELL_DEGREES,
    MAX_CONVERGENCE_ZONES,
    MEMBERSHIP_SCOPE,
    MEMBERSHIP_TTL_SECONDS,
)
from config.settings import EngineConfig, LevelThresholds, ScoreWeights

__all__ = [
    "EngineConfig",
    "LevelThresholds",
    "ScoreWeights",
    "ASSET_PROXIMITY_KM",
    "CONVERGENCE_MIN_CATEGORIES",
    "CONVERGENCE_MIN_EVENTS",
    "CONVERGENCE_MIN_RADIUS_KM",
    "DEFAULT_LOG_LEVEL",
    "GRID_CELL_DEGREES",
    "MAX_CONVERGENCE_ZONES",
    "MEMBERSHIP_SCOPE",
    "MEMBERSHIP_TTL_SECONDS",
]
