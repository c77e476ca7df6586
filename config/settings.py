"""GEOConvergence — EngineConfig and environment-based configuration loading.

All runtime configuration flows through EngineConfig. No module-level globals,
no hard-coded values. Deployment overrides come from environment variables.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from config.defaults import (
    ASSET_PROXIMITY_KM,
    CONVERGENCE_MIN_CATEGORIES,
    CONVERGENCE_MIN_EVENTS,
    CONVERGENCE_MIN_RADIUS_KM,
    DEFAULT_LOG_LEVEL,
    GRID_CELL_DEGREES,
    LEVEL_CRITICAL_THRESHOLD,
    LEVEL_HIGH_THRESHOLD,
    LEVEL_MEDIUM_THRESHOLD,
    MAX_CONVERGENCE_ZONES,
    MEMBERSHIP_SCOPE,
    MEMBERSHIP_TTL_SECONDS,
    OUTPUT_ROOT,
    SCORE_MAX,
    SCORE_WEIGHT_CATEGORY,
    SCORE_WEIGHT_EVENT,
    STABLE_ZONE_IDS,
)

# Load .env file if present; silently skip if missing
load_dotenv()

logger = logging.getLogger(__name__)

_MEMBERSHIP_SCOPES = ("all", "alerting")


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r; using %d", name, raw, default)
        return default


@dataclass
class ScoreWeights:
    """Linear weights for convergence scoring (category diversity outweighs volume)."""

    event: int = SCORE_WEIGHT_EVENT
    category: int = SCORE_WEIGHT_CATEGORY
    ceiling: int = SCORE_MAX

    def __post_init__(self) -> None:
        if self.event < 0 or self.category < 0:
            raise ValueError(
                f"ScoreWeights must be non-negative, got event={self.event} "
                f"category={self.category}"
            )


@dataclass
class LevelThresholds:
    """Score thresholds mapping a convergence score to its level."""

    critical: int = LEVEL_CRITICAL_THRESHOLD
    high: int = LEVEL_HIGH_THRESHOLD
    medium: int = LEVEL_MEDIUM_THRESHOLD

    def __post_init__(self) -> None:
        if not (self.critical >= self.high >= self.medium):
            raise ValueError(
                "LevelThresholds must satisfy critical >= high >= medium, got "
                f"{self.critical}/{self.high}/{self.medium}"
            )


@dataclass
class EngineConfig:
    """Single configuration object shared by the convergence and geofencing engines.

    All tuneable thresholds and file paths live here. Never use module-level
    globals or hard-coded values in engine code.
    """

    # ── Spatial binning ────────────────────────────────────────────────────────
    grid_cell_degrees: float = GRID_CELL_DEGREES

    # ── Convergence admission ──────────────────────────────────────────────────
    min_categories: int = CONVERGENCE_MIN_CATEGORIES
    min_events: int = CONVERGENCE_MIN_EVENTS
    min_radius_km: float = CONVERGENCE_MIN_RADIUS_KM
    max_zones: int = MAX_CONVERGENCE_ZONES

    # ── Scoring ────────────────────────────────────────────────────────────────
    score_weights: ScoreWeights = field(default_factory=ScoreWeights)
    level_thresholds: LevelThresholds = field(default_factory=LevelThresholds)

    # ── Asset proximity ────────────────────────────────────────────────────────
    asset_proximity_km: float = ASSET_PROXIMITY_KM

    # ── Zone identifiers ───────────────────────────────────────────────────────
    stable_zone_ids: bool = field(
        default_factory=lambda: _env_bool("STABLE_ZONE_IDS", STABLE_ZONE_IDS)
    )

    # ── Geofencing ─────────────────────────────────────────────────────────────
    membership_scope: str = MEMBERSHIP_SCOPE
    membership_ttl_seconds: int = field(
        default_factory=lambda: _env_int("MEMBERSHIP_TTL_SECONDS", MEMBERSHIP_TTL_SECONDS)
    )

    # ── Output and logging ─────────────────────────────────────────────────────
    output_root: str = field(default_factory=lambda: os.getenv("OUTPUT_ROOT", OUTPUT_ROOT))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL))

    def __post_init__(self) -> None:
        if self.grid_cell_degrees <= 0:
            raise ValueError(f"grid_cell_degrees must be positive, got {self.grid_cell_degrees}")
        if self.max_zones < 0:
            self.max_zones = 0
        if self.membership_ttl_seconds < 0:
            self.membership_ttl_seconds = 0
        if self.membership_scope not in _MEMBERSHIP_SCOPES:
            logger.warning(
                "Unknown membership_scope %r; falling back to %r",
                self.membership_scope,
                MEMBERSHIP_SCOPE,
            )
            self.membership_scope = MEMBERSHIP_SCOPE
