"""Shared pytest fixtures for GEOConvergence tests.

- Fixture data lives in tests/fixtures/ as static JSON files
- Engines are built from a default EngineConfig; nothing reads the environment
- Every geofencing test gets its own ZoneMembershipStore
"""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, List

import pytest

_FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ── Raw fixture data loaders ─────────────────────────────────────────────────────

@pytest.fixture(scope="session")
def snapshot_path() -> Path:
    """Path to the sample snapshot JSON (two qualifying cells, three zones)."""
    return _FIXTURES_DIR / "sample_snapshot.json"


@pytest.fixture(scope="session")
def snapshot_raw(snapshot_path) -> Dict[str, Any]:
    """Raw sample snapshot dict as a feed collector would post it."""
    with open(snapshot_path, encoding="utf-8") as f:
        return json.load(f)


# ── Configuration ────────────────────────────────────────────────────────────────

@pytest.fixture
def test_engine_config():
    """Default EngineConfig with environment-driven fields pinned."""
    from config.settings import EngineConfig

    return EngineConfig(
        stable_zone_ids=False,
        membership_ttl_seconds=0,
        log_level="WARNING",
    )


@pytest.fixture
def fixed_now() -> datetime:
    """A fixed UTC evaluation time so ids and timestamps are deterministic."""
    return datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def cycle_times(fixed_now) -> List[datetime]:
    """Ten consecutive cycle times one minute apart."""
    return [fixed_now + timedelta(minutes=i) for i in range(10)]


# ── Model object fixtures ────────────────────────────────────────────────────────

@pytest.fixture
def convergence_scenario_events():
    """Two conflicts and one fire inside cell (10, 20)."""
    from geoconvergence.models.events import EventCategory, GeoEvent

    return [
        GeoEvent(lat=10.0, lng=20.0, category=EventCategory.CONFLICT, label="battles"),
        GeoEvent(lat=10.05, lng=20.05, category=EventCategory.CONFLICT, label="explosions"),
        GeoEvent(lat=10.02, lng=20.03, category=EventCategory.FIRE, label="hotspot"),
    ]


@pytest.fixture
def sample_assets():
    """One base near cell (10, 20), one far away, one reactor near Paris."""
    from geoconvergence.models.events import AssetKind, StaticAsset

    return [
        StaticAsset(lat=10.3, lng=20.4, name="Camp Alpha", kind=AssetKind.MILITARY_BASE),
        StaticAsset(lat=12.5, lng=22.0, name="Far Outpost", kind=AssetKind.MILITARY_BASE),
        StaticAsset(lat=48.45, lng=2.45, name="Seine Reactor", kind=AssetKind.NUCLEAR_FACILITY),
    ]


@pytest.fixture
def paris_square():
    """Axis-aligned (lat, lng) ring around central Paris."""
    return ((48.80, 2.25), (48.80, 2.45), (48.90, 2.45), (48.90, 2.25))


@pytest.fixture
def exclusion_zone(paris_square):
    """Active exclusion zone alerting on both entry and exit."""
    from geoconvergence.models.zones import ZoneOfInterest, ZoneType

    return ZoneOfInterest(
        id="z-paris",
        name="Paris Restricted",
        polygon=paris_square,
        type=ZoneType.EXCLUSION,
        active=True,
        alert_on_entry=True,
        alert_on_exit=True,
    )


@pytest.fixture
def make_entity():
    """Factory for TrackedEntity objects with an optional position."""
    from geoconvergence.models.zones import Position, TrackedEntity

    def _make(entity_id="AF123", lat=None, lng=None, label="AFR123", entity_type="aircraft"):
        position = Position(lat=lat, lng=lng) if lat is not None and lng is not None else None
        return TrackedEntity(id=entity_id, label=label, type=entity_type, position=position)

    return _make


@pytest.fixture
def membership_store():
    """Fresh, isolated membership store."""
    from geoconvergence.state.membership import ZoneMembershipStore

    return ZoneMembershipStore()
