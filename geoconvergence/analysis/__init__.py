"""GEOConvergence analysis package — pure convergence and geofencing rules."""

from geoconvergence.analysis.convergence import (
    bin_events,
    compute_score,
    describe_cluster,
    detect_convergence,
    detect_convergence_with_stats,
    find_nearby_assets,
    rank_zones,
    score_cluster,
    score_to_level,
)
from geoconvergence.analysis.geofencing import (
    entities_in_zone,
    evaluate_entity,
    partition_zones,
    zone_contains,
)

__all__ = [
    "bin_events",
    "compute_score",
    "describe_cluster",
    "detect_convergence",
    "detect_convergence_with_stats",
    "find_nearby_assets",
    "rank_zones",
    "score_cluster",
    "score_to_level",
    "entities_in_zone",
    "evaluate_entity",
    "partition_zones",
    "zone_contains",
]
