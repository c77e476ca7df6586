"""GEOConvergence — All default threshold values and configuration constants.

All tuneable values live here. Never hard-code magic numbers in source files.
Import constants from this module; override via EngineConfig at runtime.
"""

# ── Spatial binning ────────────────────────────────────────────────────────────
# Grid cell edge in decimal degrees (1.0 ≈ 111 km at the equator)
GRID_CELL_DEGREES: float = 1.0

# ── Convergence admission thresholds ───────────────────────────────────────────
# Minimum number of distinct event categories in a cell
CONVERGENCE_MIN_CATEGORIES: int = 2

# Minimum number of events in a cell
CONVERGENCE_MIN_EVENTS: int = 3

# Floor applied to a zone radius so tightly co-located events never yield 0 km
CONVERGENCE_MIN_RADIUS_KM: float = 50.0

# Maximum number of zones returned per detection run
MAX_CONVERGENCE_ZONES: int = 50

# ── Convergence scoring ────────────────────────────────────────────────────────
# Points per event in a cell
SCORE_WEIGHT_EVENT: int = 10

# Points per distinct event category in a cell
SCORE_WEIGHT_CATEGORY: int = 15

# Hard ceiling on the convergence score
SCORE_MAX: int = 100

# Level thresholds (score >= threshold)
LEVEL_CRITICAL_THRESHOLD: int = 80
LEVEL_HIGH_THRESHOLD: int = 60
LEVEL_MEDIUM_THRESHOLD: int = 40

# ── Asset proximity ────────────────────────────────────────────────────────────
# Fixed radius around a zone centroid for military bases / nuclear facilities
ASSET_PROXIMITY_KM: float = 100.0

# ── Zone identifiers ──────────────────────────────────────────────────────────
# When True, zone ids derive from the cell key only (stable across cycles)
STABLE_ZONE_IDS: bool = False

# ── Geofencing ─────────────────────────────────────────────────────────────────
# "all": membership tracked for every supplied zone, alerts only for active ones
# "alerting": membership tracked only for active zones with an alert flag set
MEMBERSHIP_SCOPE: str = "all"

# Seconds after which an unseen entity's membership is reaped (0 disables)
MEMBERSHIP_TTL_SECONDS: int = 0

# ── Output paths ──────────────────────────────────────────────────────────────
# Root directory for cycle exports
OUTPUT_ROOT: str = "outputs/cycles"

# ── Logging ────────────────────────────────────────────────────────────────────
DEFAULT_LOG_LEVEL: str = "INFO"
