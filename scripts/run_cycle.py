#!/usr/bin/env python3
"""GEOConvergence CLI — run one convergence + geofencing cycle over a snapshot.

Usage:
    python scripts/run_cycle.py --snapshot snapshot.json
    python scripts/run_cycle.py --snapshot snapshot.json --state-file membership.json
    python scripts/run_cycle.py --snapshot snapshot.json --stable-zone-ids --max-zones 20

Exit codes:
    0 — cycle completed
    1 — cycle completed with at least one failed phase
    2 — snapshot missing or rejected at validation
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

# Ensure project root is on sys.path for consistent import resolution
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from config.defaults import (  # noqa: E402
    ASSET_PROXIMITY_KM,
    DEFAULT_LOG_LEVEL,
    MAX_CONVERGENCE_ZONES,
    MEMBERSHIP_SCOPE,
    MEMBERSHIP_TTL_SECONDS,
    OUTPUT_ROOT,
)
from config.settings import EngineConfig  # noqa: E402
from geoconvergence.exceptions import GeoConvergenceError  # noqa: E402
from geoconvergence.io.loaders import load_snapshot  # noqa: E402
from geoconvergence.io.persistence import ensure_output_dir, load_json, save_json  # noqa: E402
from geoconvergence.pipeline import CycleRunner, export_cycle  # noqa: E402
from geoconvergence.state.membership import ZoneMembershipStore  # noqa: E402
from geoconvergence.utils.logging_utils import configure_logging  # noqa: E402

logger = logging.getLogger("geoconvergence.cli")


def build_arg_parser() -> argparse.ArgumentParser:
    """Build the argparse argument parser for a single cycle run."""
    parser = argparse.ArgumentParser(
        prog="run_cycle",
        description="GEOConvergence — convergence detection and geofencing over one snapshot",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    # ── Input / output ──────────────────────────────────────────────────────────
    parser.add_argument(
        "--snapshot", type=str, required=True, help="Path to the snapshot JSON file"
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default=None,
        help=f"Directory for results (default: <{OUTPUT_ROOT}>/<cycle_id>)",
    )
    parser.add_argument(
        "--state-file",
        type=str,
        default=None,
        help="Membership state JSON carried between invocations (read, then rewritten)",
    )
    parser.add_argument(
        "--skip-invalid",
        action="store_true",
        help="Drop invalid zones/entities with a warning instead of failing",
    )

    # ── Convergence ─────────────────────────────────────────────────────────────
    parser.add_argument(
        "--max-zones",
        type=int,
        default=MAX_CONVERGENCE_ZONES,
        help="Maximum convergence zones to return",
    )
    parser.add_argument(
        "--asset-radius-km",
        type=float,
        default=ASSET_PROXIMITY_KM,
        help="Radius around a zone centroid for nearby assets",
    )
    parser.add_argument(
        "--stable-zone-ids",
        action="store_true",
        help="Derive zone ids from the grid cell only (stable across cycles)",
    )

    # ── Geofencing ──────────────────────────────────────────────────────────────
    parser.add_argument(
        "--membership-scope",
        type=str,
        default=MEMBERSHIP_SCOPE,
        choices=["all", "alerting"],
        help="Zones whose membership is tracked",
    )
    parser.add_argument(
        "--membership-ttl",
        type=int,
        default=MEMBERSHIP_TTL_SECONDS,
        help="Seconds before an unseen entity is reaped (0 disables)",
    )

    # ── Logging ─────────────────────────────────────────────────────────────────
    parser.add_argument(
        "--log-level",
        type=str,
        default=DEFAULT_LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity",
    )
    parser.add_argument("--log-file", type=str, default=None, help="Also log to this file")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point. Returns the process exit code."""
    args = build_arg_parser().parse_args(argv)
    configure_logging(log_level=args.log_level, log_file=args.log_file)

    config = EngineConfig(
        max_zones=args.max_zones,
        asset_proximity_km=args.asset_radius_km,
        stable_zone_ids=args.stable_zone_ids,
        membership_scope=args.membership_scope,
        membership_ttl_seconds=args.membership_ttl,
        log_level=args.log_level,
    )

    try:
        snapshot = load_snapshot(args.snapshot, skip_invalid=args.skip_invalid)
    except FileNotFoundError as exc:
        logger.error("%s", exc)
        return 2
    except (GeoConvergenceError, TypeError) as exc:
        logger.error("Snapshot rejected: %s", exc)
        return 2

    store = ZoneMembershipStore()
    if args.state_file:
        store = ZoneMembershipStore.from_dict(load_json(args.state_file))
        logger.info("Loaded membership for %d entities from %s", len(store), args.state_file)

    result = CycleRunner(config, store).run(snapshot)

    output_dir = (
        Path(args.output_dir)
        if args.output_dir
        else ensure_output_dir(config.output_root, result.cycle_id)
    )
    export_cycle(result, output_dir)

    if args.state_file:
        save_json(store.to_dict(), args.state_file)

    zones = result.convergence.zones if result.convergence else []
    alerts = result.geofence.alerts if result.geofence else []
    print(f"Cycle {result.cycle_id}: status={result.status}")
    print(f"  Convergence zones: {len(zones)}")
    for zone in zones[:5]:
        print(f"    [{zone.level.value:<8}] score={zone.score:>3}  {zone.description}")
    print(f"  Geofence alerts:   {len(alerts)}")
    for alert in alerts[:10]:
        print(f"    [{alert.severity.value:<8}] {alert.title} — {alert.message}")
    print(f"  Output: {output_dir}")

    return 0 if not result.errors else 1


if __name__ == "__main__":
    sys.exit(main())
