"""Convergence detection for GEOConvergence.

Buckets heterogeneous crisis events into fixed-size grid cells and promotes
cells where several distinct event categories co-occur into scored
convergence zones. Pure functions with no I/O.

Admission thresholds, scoring weights and level bands come from EngineConfig
(defaults: ≥2 categories, ≥3 events, score = 10·events + 15·categories capped
at 100, CRITICAL ≥80 / HIGH ≥60 / MEDIUM ≥40).
"""

from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from config.settings import EngineConfig, LevelThresholds, ScoreWeights
from geoconvergence.models.events import (
    CATEGORY_ORDER,
    ConvergenceLevel,
    ConvergenceStats,
    ConvergenceZone,
    EventCategory,
    GeoEvent,
    StaticAsset,
)
from geoconvergence.utils.date_utils import epoch_millis, to_iso, utc_now
from geoconvergence.utils.geo_utils import (
    cell_key,
    centroid,
    haversine_km,
    is_valid_coordinate,
)

logger = logging.getLogger(__name__)

CellKey = Tuple[int, int]

# Singular / plural nouns used in zone descriptions
_CATEGORY_NOUNS: Dict[EventCategory, Tuple[str, str]] = {
    EventCategory.CONFLICT: ("conflict", "conflicts"),
    EventCategory.FIRE: ("fire", "fires"),
    EventCategory.DISASTER: ("disaster", "disasters"),
    EventCategory.OUTAGE: ("internet outage", "internet outages"),
}


# ── Spatial binning ─────────────────────────────────────────────────────────────


def bin_events(
    events: Iterable[GeoEvent],
    cell_degrees: float = 1.0,
) -> Dict[CellKey, List[GeoEvent]]:
    """Assign each event to its grid cell.

    Events without a finite, in-range coordinate are dropped. The returned
    dict preserves first-insertion order of cells, which is also the
    tie-break order used when ranking zones of equal score.

    Args:
        events: Events of any category.
        cell_degrees: Grid cell edge in decimal degrees.

    Returns:
        Mapping of cell key to the events that fell into it.
    """
    cells: Dict[CellKey, List[GeoEvent]] = {}
    dropped = 0
    for event in events:
        if not is_valid_coordinate(event.lat, event.lng):
            dropped += 1
            continue
        cells.setdefault(cell_key(event.lat, event.lng, cell_degrees), []).append(event)

    if dropped:
        logger.debug("Binning: dropped %d events without a usable coordinate", dropped)
    return cells


def distinct_categories(events: Iterable[GeoEvent]) -> Tuple[EventCategory, ...]:
    """Return each category present in ``events`` once, in first-seen order."""
    seen: Dict[EventCategory, None] = {}
    for event in events:
        seen.setdefault(event.category, None)
    return tuple(seen)


# ── Scoring ─────────────────────────────────────────────────────────────────────


def compute_score(
    event_count: int,
    category_count: int,
    weights: Optional[ScoreWeights] = None,
) -> int:
    """Linear convergence score clamped to [0, ceiling].

    Category diversity is weighted above raw volume (15 vs 10 per unit by
    default).
    """
    weights = weights or ScoreWeights()
    raw = event_count * weights.event + category_count * weights.category
    return max(0, min(weights.ceiling, raw))


def score_to_level(
    score: float,
    thresholds: Optional[LevelThresholds] = None,
) -> ConvergenceLevel:
    """Map a convergence score to its severity band."""
    thresholds = thresholds or LevelThresholds()
    if score >= thresholds.critical:
        return ConvergenceLevel.CRITICAL
    if score >= thresholds.high:
        return ConvergenceLevel.HIGH
    if score >= thresholds.medium:
        return ConvergenceLevel.MEDIUM
    return ConvergenceLevel.LOW


def find_nearby_assets(
    lat: float,
    lng: float,
    assets: Iterable[StaticAsset],
    radius_km: float = 100.0,
) -> List[str]:
    """Names of assets within ``radius_km`` of a point, in input order.

    The radius is fixed and independent of the zone's own radius.
    """
    nearby: List[str] = []
    for asset in assets:
        if not is_valid_coordinate(asset.lat, asset.lng):
            continue
        if haversine_km(lat, lng, asset.lat, asset.lng) <= radius_km:
            nearby.append(asset.name)
    return nearby


def describe_cluster(events: Sequence[GeoEvent], radius_km: float) -> str:
    """Human-readable summary of a cluster's composition.

    Example: ``"Convergence: 2 conflicts, 1 fire within a 50km radius"``
    """
    counts = Counter(event.category for event in events)
    parts: List[str] = []
    for category in CATEGORY_ORDER:
        n = counts.get(category, 0)
        if n > 0:
            singular, plural = _CATEGORY_NOUNS[category]
            parts.append(f"{n} {singular if n == 1 else plural}")
    return f"Convergence: {', '.join(parts)} within a {round(radius_km)}km radius"


def make_zone_id(
    cell: CellKey,
    lat: float,
    lng: float,
    evaluated_at: datetime,
    stable: bool = False,
) -> str:
    """Build a zone identifier.

    By default the id embeds the rounded centroid and the evaluation time in
    milliseconds, so the same cluster detected in two cycles receives two ids.
    With ``stable=True`` the id is derived from the cell key alone.
    """
    if stable:
        return f"conv-cell-{cell[0]}_{cell[1]}"
    return f"conv-{lat:.2f}-{lng:.2f}-{epoch_millis(evaluated_at)}"


def score_cluster(
    cell: CellKey,
    events: Sequence[GeoEvent],
    assets: Sequence[StaticAsset],
    config: EngineConfig,
    evaluated_at: datetime,
) -> Optional[ConvergenceZone]:
    """Evaluate a single cell and build its ConvergenceZone if it qualifies.

    Args:
        cell: Grid cell key.
        events: Events binned into the cell.
        assets: Static assets to match against the centroid.
        config: Engine thresholds and weights.
        evaluated_at: Evaluation time stamped onto the zone.

    Returns:
        ConvergenceZone, or None when the cell is below the admission thresholds.
    """
    categories = distinct_categories(events)
    event_count = len(events)
    if len(categories) < config.min_categories or event_count < config.min_events:
        return None

    center_lat, center_lng = centroid((e.lat, e.lng) for e in events)
    max_dist = max(haversine_km(center_lat, center_lng, e.lat, e.lng) for e in events)
    radius_km = max(config.min_radius_km, max_dist)

    score = compute_score(event_count, len(categories), config.score_weights)

    return ConvergenceZone(
        id=make_zone_id(cell, center_lat, center_lng, evaluated_at, config.stable_zone_ids),
        lat=center_lat,
        lng=center_lng,
        radius_km=radius_km,
        score=score,
        level=score_to_level(score, config.level_thresholds),
        event_types=categories,
        event_count=event_count,
        description=describe_cluster(events, radius_km),
        nearby_assets=tuple(
            find_nearby_assets(center_lat, center_lng, assets, config.asset_proximity_km)
        ),
        timestamp=to_iso(evaluated_at),
        cell=cell,
    )


# ── Ranking ─────────────────────────────────────────────────────────────────────


def rank_zones(zones: List[ConvergenceZone], limit: int = 50) -> List[ConvergenceZone]:
    """Sort zones by score descending and keep the ``limit`` highest.

    The sort is stable: zones with equal scores keep cell insertion order.
    """
    return sorted(zones, key=lambda z: z.score, reverse=True)[: max(0, limit)]


# ── End-to-end detection ───────────────────────────────────────────────────────


def detect_convergence_with_stats(
    events: Iterable[GeoEvent],
    assets: Optional[Iterable[StaticAsset]] = None,
    config: Optional[EngineConfig] = None,
    evaluated_at: Optional[datetime] = None,
) -> Tuple[List[ConvergenceZone], ConvergenceStats]:
    """Run binning, scoring, asset matching and ranking over a snapshot.

    Args:
        events: Events of every category; may be empty.
        assets: Military bases and nuclear facilities; may be None.
        config: Engine configuration (defaults when None).
        evaluated_at: Timestamp for zone ids and records (now when None).

    Returns:
        (ranked zones, detection statistics).
    """
    config = config or EngineConfig()
    evaluated_at = evaluated_at or utc_now()
    event_list = list(events)
    asset_list = list(assets or [])

    stats = ConvergenceStats(
        total_events_in=len(event_list),
        total_assets_in=len(asset_list),
    )
    if not event_list:
        logger.debug("Convergence: no events, returning no zones")
        return [], stats

    cells = bin_events(event_list, config.grid_cell_degrees)
    stats.cells_evaluated = len(cells)

    zones: List[ConvergenceZone] = []
    for cell, members in cells.items():
        zone = score_cluster(cell, members, asset_list, config, evaluated_at)
        if zone is not None:
            zones.append(zone)

    stats.cells_qualified = len(zones)
    ranked = rank_zones(zones, config.max_zones)
    stats.zones_returned = len(ranked)
    stats.truncated = len(ranked) < len(zones)

    logger.info(
        "Convergence: %d events → %d cells → %d qualifying zones (returned %d)",
        stats.total_events_in,
        stats.cells_evaluated,
        stats.cells_qualified,
        stats.zones_returned,
    )
    return ranked, stats


def detect_convergence(
    events: Iterable[GeoEvent],
    assets: Optional[Iterable[StaticAsset]] = None,
    config: Optional[EngineConfig] = None,
    evaluated_at: Optional[datetime] = None,
) -> List[ConvergenceZone]:
    """Return convergence zones for a snapshot, highest score first.

    Zero qualifying cells yield an empty list, never an error.
    """
    zones, _ = detect_convergence_with_stats(events, assets, config, evaluated_at)
    return zones
