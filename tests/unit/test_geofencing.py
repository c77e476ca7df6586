"""Unit tests for the geofencing engine and its containment rules.

Covers:
- Edge triggering: one ENTRY per inside span, one EXIT per outside transition
- Alert content: severity by zone type, ids, titles and messages
- Inactive and non-alerting zones
- Membership scope: "all" versus "alerting"
- Entities without a position
- entities_in_zone never touches stored membership
- TTL reaping and reset()
"""

from __future__ import annotations

from datetime import timedelta

import pytest

from config.settings import EngineConfig
from geoconvergence.analysis.geofencing import (
    entities_in_zone,
    entry_severity,
    partition_zones,
    zone_contains,
)
from geoconvergence.engines.geofence_engine import GeofenceEngine
from geoconvergence.models.pipeline import CycleSnapshot
from geoconvergence.models.zones import (
    AlertKind,
    AlertSeverity,
    ZoneOfInterest,
    ZoneType,
)

INSIDE = (48.85, 2.35)
OUTSIDE = (48.95, 2.35)


# ── Helpers ──────────────────────────────────────────────────────────────────────

def _engine(store, **overrides):
    config = EngineConfig(**{"stable_zone_ids": False, "membership_ttl_seconds": 0, **overrides})
    return GeofenceEngine(config, store)


def _zone(polygon, zone_id="z", zone_type=ZoneType.INCLUSION, active=True, entry=True, exit_=True):
    return ZoneOfInterest(
        id=zone_id,
        name=zone_id.upper(),
        polygon=polygon,
        type=zone_type,
        active=active,
        alert_on_entry=entry,
        alert_on_exit=exit_,
    )


def _run_track(engine, make_entity, zones, positions, times):
    """Run one cycle per position and return the alerts of every cycle."""
    per_cycle = []
    for (lat, lng), t in zip(positions, times):
        entity = make_entity(lat=lat, lng=lng)
        per_cycle.append(engine.check([entity], zones, evaluated_at=t))
    return per_cycle


# ── Edge triggering ──────────────────────────────────────────────────────────────

class TestEdgeTriggering:
    def test_entry_then_exit(self, membership_store, exclusion_zone, make_entity, cycle_times):
        engine = _engine(membership_store)
        cycles = _run_track(
            engine, make_entity, [exclusion_zone], [OUTSIDE, INSIDE, INSIDE, OUTSIDE], cycle_times
        )
        assert [len(c) for c in cycles] == [0, 1, 0, 1]
        assert cycles[1][0].kind == AlertKind.ENTRY
        assert cycles[1][0].severity == AlertSeverity.CRITICAL
        assert cycles[3][0].kind == AlertKind.EXIT
        assert cycles[3][0].severity == AlertSeverity.INFO

    def test_first_sighting_inside_raises_entry(
        self, membership_store, exclusion_zone, make_entity, fixed_now
    ):
        engine = _engine(membership_store)
        alerts = engine.check([make_entity(lat=INSIDE[0], lng=INSIDE[1])], [exclusion_zone], fixed_now)
        assert len(alerts) == 1
        assert alerts[0].kind == AlertKind.ENTRY

    def test_one_entry_per_inside_span(
        self, membership_store, exclusion_zone, make_entity, cycle_times
    ):
        track = [OUTSIDE, INSIDE, INSIDE, INSIDE, OUTSIDE, OUTSIDE, INSIDE, INSIDE, OUTSIDE, INSIDE]
        engine = _engine(membership_store)
        alerts = [a for c in _run_track(engine, make_entity, [exclusion_zone], track, cycle_times) for a in c]
        kinds = [a.kind for a in alerts]
        assert kinds == [
            AlertKind.ENTRY,
            AlertKind.EXIT,
            AlertKind.ENTRY,
            AlertKind.EXIT,
            AlertKind.ENTRY,
        ]

    def test_staying_outside_never_alerts(
        self, membership_store, exclusion_zone, make_entity, cycle_times
    ):
        engine = _engine(membership_store)
        cycles = _run_track(engine, make_entity, [exclusion_zone], [OUTSIDE] * 5, cycle_times)
        assert all(c == [] for c in cycles)

    def test_entry_only_zone_suppresses_exit(
        self, membership_store, paris_square, make_entity, cycle_times
    ):
        zone = _zone(paris_square, exit_=False)
        engine = _engine(membership_store)
        cycles = _run_track(engine, make_entity, [zone], [INSIDE, OUTSIDE, INSIDE], cycle_times)
        assert [len(c) for c in cycles] == [1, 0, 1]

    def test_exit_only_zone_suppresses_entry(
        self, membership_store, paris_square, make_entity, cycle_times
    ):
        zone = _zone(paris_square, entry=False)
        engine = _engine(membership_store)
        cycles = _run_track(engine, make_entity, [zone], [INSIDE, OUTSIDE, INSIDE], cycle_times)
        assert [len(c) for c in cycles] == [0, 1, 0]
        assert membership_store.get("AF123") == frozenset({"z"})

    def test_independent_state_per_entity(
        self, membership_store, exclusion_zone, make_entity, cycle_times
    ):
        engine = _engine(membership_store)
        a_in = make_entity("A", *INSIDE)
        b_out = make_entity("B", *OUTSIDE)
        first = engine.check([a_in, b_out], [exclusion_zone], cycle_times[0])
        assert [a.entity_id for a in first] == ["A"]

        a_out = make_entity("A", *OUTSIDE)
        b_in = make_entity("B", *INSIDE)
        second = engine.check([a_out, b_in], [exclusion_zone], cycle_times[1])
        assert [(a.entity_id, a.kind) for a in second] == [
            ("A", AlertKind.EXIT),
            ("B", AlertKind.ENTRY),
        ]

    def test_overlapping_zones_alert_independently(
        self, membership_store, exclusion_zone, make_entity, fixed_now
    ):
        wide = _zone(
            ((48.0, 2.0), (48.0, 3.0), (49.0, 3.0), (49.0, 2.0)),
            zone_id="z-wide",
            zone_type=ZoneType.SURVEILLANCE,
        )
        engine = _engine(membership_store)
        alerts = engine.check([make_entity(lat=INSIDE[0], lng=INSIDE[1])], [exclusion_zone, wide], fixed_now)
        assert [(a.zone_id, a.severity) for a in alerts] == [
            ("z-paris", AlertSeverity.CRITICAL),
            ("z-wide", AlertSeverity.WARNING),
        ]


# ── Alert content ────────────────────────────────────────────────────────────────

class TestAlertContent:
    def test_entry_alert_fields(self, membership_store, exclusion_zone, make_entity, fixed_now):
        engine = _engine(membership_store)
        alert = engine.check([make_entity(lat=INSIDE[0], lng=INSIDE[1])], [exclusion_zone], fixed_now)[0]
        assert alert.id == "geo-entry-AF123-z-paris-1705320000000"
        assert alert.title == "Zone entry: Paris Restricted"
        assert alert.message == "AFR123 (aircraft) entered Paris Restricted [EXCLUSION]"
        assert alert.entity_id == "AF123"
        assert alert.zone_id == "z-paris"
        assert alert.timestamp == "2024-01-15T12:00:00.000Z"
        assert alert.category == "geofence"
        assert alert.source == "GEOFENCE"
        assert alert.acknowledged is False

    def test_exit_alert_fields(self, membership_store, exclusion_zone, make_entity, cycle_times):
        engine = _engine(membership_store)
        cycles = _run_track(engine, make_entity, [exclusion_zone], [INSIDE, OUTSIDE], cycle_times)
        alert = cycles[1][0]
        assert alert.id.startswith("geo-exit-AF123-z-paris-")
        assert alert.title == "Zone exit: Paris Restricted"
        assert alert.message == "AFR123 (aircraft) left Paris Restricted"

    def test_message_falls_back_to_entity_id(self, membership_store, exclusion_zone, make_entity, fixed_now):
        entity = make_entity("X9", INSIDE[0], INSIDE[1], label="", entity_type="")
        alert = _engine(membership_store).check([entity], [exclusion_zone], fixed_now)[0]
        assert alert.message == "X9 (unknown) entered Paris Restricted [EXCLUSION]"

    @pytest.mark.parametrize(
        "zone_type,severity",
        [
            (ZoneType.EXCLUSION, AlertSeverity.CRITICAL),
            (ZoneType.INCLUSION, AlertSeverity.WARNING),
            (ZoneType.SURVEILLANCE, AlertSeverity.WARNING),
            (ZoneType.ALERT, AlertSeverity.WARNING),
        ],
    )
    def test_entry_severity_by_zone_type(self, paris_square, zone_type, severity):
        assert entry_severity(_zone(paris_square, zone_type=zone_type)) == severity


# ── Zone filtering and membership scope ──────────────────────────────────────────

class TestZoneFiltering:
    def test_inactive_zone_never_alerts(self, membership_store, paris_square, make_entity, cycle_times):
        zone = _zone(paris_square, active=False)
        engine = _engine(membership_store)
        cycles = _run_track(engine, make_entity, [zone], [OUTSIDE, INSIDE, OUTSIDE], cycle_times)
        assert all(c == [] for c in cycles)

    def test_zone_without_flags_never_alerts(self, membership_store, paris_square, make_entity, fixed_now):
        zone = _zone(paris_square, entry=False, exit_=False)
        alerts = _engine(membership_store).check([make_entity(lat=INSIDE[0], lng=INSIDE[1])], [zone], fixed_now)
        assert alerts == []

    def test_scope_all_records_non_alerting_zones(
        self, membership_store, paris_square, exclusion_zone, make_entity, fixed_now
    ):
        dormant = _zone(paris_square, zone_id="z-dormant", active=False)
        engine = _engine(membership_store, membership_scope="all")
        engine.check([make_entity(lat=INSIDE[0], lng=INSIDE[1])], [exclusion_zone, dormant], fixed_now)
        assert membership_store.get("AF123") == frozenset({"z-paris", "z-dormant"})

    def test_scope_alerting_records_only_alerting_zones(
        self, membership_store, paris_square, exclusion_zone, make_entity, fixed_now
    ):
        dormant = _zone(paris_square, zone_id="z-dormant", active=False)
        engine = _engine(membership_store, membership_scope="alerting")
        engine.check([make_entity(lat=INSIDE[0], lng=INSIDE[1])], [exclusion_zone, dormant], fixed_now)
        assert membership_store.get("AF123") == frozenset({"z-paris"})

    def test_reactivated_zone_alerts_on_next_entry_only(
        self, membership_store, paris_square, make_entity, cycle_times
    ):
        """With full-scope membership, an entity already inside a zone when it
        is activated does not raise a stale ENTRY."""
        dormant = _zone(paris_square, active=False)
        active = _zone(paris_square, active=True)
        engine = _engine(membership_store)
        entity = make_entity(lat=INSIDE[0], lng=INSIDE[1])
        assert engine.check([entity], [dormant], cycle_times[0]) == []
        assert engine.check([entity], [active], cycle_times[1]) == []

    def test_unknown_scope_falls_back_to_all(self):
        assert EngineConfig(membership_scope="bogus").membership_scope == "all"

    def test_partition_zones(self, paris_square, exclusion_zone):
        dormant = _zone(paris_square, zone_id="z-dormant", active=False)
        tracked, alerting = partition_zones([exclusion_zone, dormant], "all")
        assert [z.id for z in tracked] == ["z-paris", "z-dormant"]
        assert [z.id for z in alerting] == ["z-paris"]
        tracked, _ = partition_zones([exclusion_zone, dormant], "alerting")
        assert [z.id for z in tracked] == ["z-paris"]

    def test_zone_contains_degenerate_polygon(self):
        zone = _zone(((48.8, 2.2), (48.9, 2.4)))
        assert zone_contains(zone, 48.85, 2.3) is False


# ── Missing positions ────────────────────────────────────────────────────────────

class TestMissingPosition:
    def test_entity_without_position_is_skipped(
        self, membership_store, exclusion_zone, make_entity, fixed_now
    ):
        result = _engine(membership_store).evaluate([make_entity("ghost")], [exclusion_zone], fixed_now)
        assert result.alerts == []
        assert result.stats.entities_skipped == 1
        assert result.stats.entities_evaluated == 0
        assert "ghost" not in membership_store
        assert any("no position" in w for w in result.warnings)

    def test_missing_position_keeps_previous_membership(
        self, membership_store, exclusion_zone, make_entity, cycle_times
    ):
        engine = _engine(membership_store)
        engine.check([make_entity(lat=INSIDE[0], lng=INSIDE[1])], [exclusion_zone], cycle_times[0])
        assert engine.check([make_entity()], [exclusion_zone], cycle_times[1]) == []
        assert membership_store.get("AF123") == frozenset({"z-paris"})
        # Still inside when the position returns: no duplicate ENTRY
        again = engine.check([make_entity(lat=INSIDE[0], lng=INSIDE[1])], [exclusion_zone], cycle_times[2])
        assert again == []

    def test_missing_position_survives_ttl_reaping(
        self, membership_store, exclusion_zone, make_entity, fixed_now
    ):
        engine = _engine(membership_store, membership_ttl_seconds=300)
        first = engine.check([make_entity(lat=INSIDE[0], lng=INSIDE[1])], [exclusion_zone], fixed_now)
        assert [a.kind for a in first] == [AlertKind.ENTRY]

        later = fixed_now + timedelta(minutes=10)
        result = engine.evaluate([make_entity()], [exclusion_zone], later)
        assert result.alerts == []
        assert result.stats.reaped_entities == 0
        assert membership_store.get("AF123") == frozenset({"z-paris"})
        assert membership_store.last_seen("AF123") == later

        again = engine.check(
            [make_entity(lat=INSIDE[0], lng=INSIDE[1])],
            [exclusion_zone],
            fixed_now + timedelta(minutes=11),
        )
        assert again == []


# ── Queries, reaping and reset ───────────────────────────────────────────────────

class TestQueriesAndState:
    def test_entities_in_zone_is_read_only(self, membership_store, exclusion_zone, make_entity):
        engine = _engine(membership_store)
        entities = [
            make_entity("A", *INSIDE),
            make_entity("B", *OUTSIDE),
            make_entity("C"),
        ]
        inside = engine.entities_in_zone(exclusion_zone, entities)
        assert [e.id for e in inside] == ["A"]
        assert len(membership_store) == 0

    def test_entities_in_zone_ignores_active_flag(self, paris_square, make_entity):
        zone = _zone(paris_square, active=False, entry=False, exit_=False)
        assert [e.id for e in entities_in_zone(zone, [make_entity("A", *INSIDE)])] == ["A"]

    def test_stats_count_alerts(self, membership_store, exclusion_zone, make_entity, cycle_times):
        engine = _engine(membership_store)
        engine.evaluate([make_entity("A", *INSIDE)], [exclusion_zone], cycle_times[0])
        result = engine.evaluate(
            [make_entity("A", *OUTSIDE), make_entity("B", *INSIDE)],
            [exclusion_zone],
            cycle_times[1],
        )
        assert result.stats.entry_alerts == 1
        assert result.stats.exit_alerts == 1
        assert result.stats.zones_alerting == 1

    def test_ttl_reaps_unseen_entities(self, membership_store, exclusion_zone, make_entity, fixed_now):
        engine = _engine(membership_store, membership_ttl_seconds=300)
        engine.check([make_entity("A", *INSIDE)], [exclusion_zone], fixed_now)
        result = engine.evaluate(
            [make_entity("B", *OUTSIDE)], [exclusion_zone], fixed_now + timedelta(minutes=10)
        )
        assert result.stats.reaped_entities == 1
        assert "A" not in membership_store
        assert "B" in membership_store

    def test_reset_forgets_membership(self, membership_store, exclusion_zone, make_entity, cycle_times):
        engine = _engine(membership_store)
        engine.check([make_entity(lat=INSIDE[0], lng=INSIDE[1])], [exclusion_zone], cycle_times[0])
        engine.reset()
        assert len(membership_store) == 0
        alerts = engine.check([make_entity(lat=INSIDE[0], lng=INSIDE[1])], [exclusion_zone], cycle_times[1])
        assert [a.kind for a in alerts] == [AlertKind.ENTRY]

    def test_run_uses_snapshot(self, membership_store, exclusion_zone, make_entity, fixed_now):
        snapshot = CycleSnapshot(
            entities=[make_entity(lat=INSIDE[0], lng=INSIDE[1])],
            zones=[exclusion_zone],
            captured_at=fixed_now,
        )
        result = _engine(membership_store).run(snapshot)
        assert result.evaluated_at == fixed_now
        assert result.alerts[0].timestamp == "2024-01-15T12:00:00.000Z"
