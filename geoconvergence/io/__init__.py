"""GEOConvergence I/O package — input validation and JSON persistence."""

from geoconvergence.io.loaders import (
    assets_from_snapshot,
    events_from_snapshot,
    load_entities,
    load_snapshot,
    load_zones,
    parse_entity,
    parse_zone,
    snapshot_from_dict,
)
from geoconvergence.io.persistence import ensure_output_dir, load_json, save_json

__all__ = [
    "assets_from_snapshot",
    "events_from_snapshot",
    "load_entities",
    "load_snapshot",
    "load_zones",
    "parse_entity",
    "parse_zone",
    "snapshot_from_dict",
    "ensure_output_dir",
    "load_json",
    "save_json",
]
