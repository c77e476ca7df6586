"""Input-validation boundary for GEOConvergence.

Converts raw snapshot dicts (as posted by feed collectors or read from a JSON
file) into typed models. Two kinds of record are rejected loudly:

* zones without an id or with fewer than three usable vertices
  (InvalidZoneDefinition)
* entities without an id (InvalidEntityRecord)

Everything else degrades silently: events and assets without a usable
coordinate are filtered out, and an unparseable entity position is treated
as absent.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from geoconvergence.exceptions import InvalidEntityRecord, InvalidZoneDefinition
from geoconvergence.models.events import AssetKind, EventCategory, GeoEvent, StaticAsset
from geoconvergence.models.pipeline import CycleSnapshot
from geoconvergence.models.zones import Position, TrackedEntity, ZoneOfInterest, ZoneType
from geoconvergence.utils.date_utils import parse_timestamp
from geoconvergence.utils.geo_utils import is_valid_coordinate

logger = logging.getLogger(__name__)

LatLng = Tuple[float, float]

# Snapshot key → (category, field holding the label, fallback label)
_EVENT_SOURCES: Tuple[Tuple[str, EventCategory, Optional[str], str], ...] = (
    ("conflicts", EventCategory.CONFLICT, "eventType", "conflict"),
    ("fires", EventCategory.FIRE, None, "hotspot"),
    ("disasters", EventCategory.DISASTER, "eventType", "disaster"),
    ("outages", EventCategory.OUTAGE, "country", "outage"),
)

# Snapshot keys (camelCase, snake_case) → asset kind
_ASSET_SOURCES: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("militaryBases", "military_bases"), AssetKind.MILITARY_BASE),
    (("nuclearFacilities", "nuclear_facilities"), AssetKind.NUCLEAR_FACILITY),
)


# ── Field coercion helpers ──────────────────────────────────────────────────────


def _to_float(value: Any) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _first(raw: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in raw and raw[key] is not None:
            return raw[key]
    return None


def _records(raw: Mapping[str, Any], *keys: str) -> List[Any]:
    """The first present array among ``keys``; anything that is not a list is ignored."""
    value = _first(raw, *keys)
    if isinstance(value, (list, tuple)):
        return list(value)
    if value is not None:
        logger.debug("Snapshot: ignoring non-array %r (%s)", keys[0], type(value).__name__)
    return []


def _coordinate(raw: Mapping[str, Any]) -> Optional[LatLng]:
    """Extract a valid (lat, lng) from a mapping using common field spellings."""
    lat = _to_float(_first(raw, "lat", "latitude"))
    lng = _to_float(_first(raw, "lng", "lon", "longitude"))
    if lat is None or lng is None or not is_valid_coordinate(lat, lng):
        return None
    return lat, lng


def _vertex(raw: Any) -> Optional[LatLng]:
    """Parse a polygon vertex given as ``[lat, lng]`` or ``{"lat":…, "lng":…}``."""
    if isinstance(raw, Mapping):
        return _coordinate(raw)
    if isinstance(raw, (list, tuple)) and len(raw) >= 2:
        lat, lng = _to_float(raw[0]), _to_float(raw[1])
        if lat is not None and lng is not None and is_valid_coordinate(lat, lng):
            return lat, lng
    return None


def _flag(raw: Mapping[str, Any], default: bool, *keys: str) -> bool:
    value = _first(raw, *keys)
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def _identity(value: Any) -> Optional[str]:
    if value is None or isinstance(value, bool):
        return None
    text = str(value).strip()
    return text or None


# ── Zones ───────────────────────────────────────────────────────────────────────


def parse_zone(raw: Any) -> ZoneOfInterest:
    """Validate and convert a raw zone record.

    Args:
        raw: Mapping with ``id``, ``name``, ``type``, ``polygon``, ``active``,
            ``alertOnEntry`` and ``alertOnExit`` (snake_case also accepted).

    Returns:
        ZoneOfInterest with an implicitly closed ring of ≥3 vertices.

    Raises:
        InvalidZoneDefinition: Missing id, unknown type or unusable polygon.
    """
    if not isinstance(raw, Mapping):
        raise InvalidZoneDefinition(f"Zone record must be a mapping, got {type(raw).__name__}")

    zone_id = _identity(raw.get("id"))
    if zone_id is None:
        raise InvalidZoneDefinition("Zone record has no id")

    raw_type = raw.get("type") or ZoneType.INCLUSION.value
    try:
        zone_type = ZoneType(str(raw_type).strip().lower())
    except ValueError as exc:
        raise InvalidZoneDefinition(
            f"Zone {zone_id!r} has unknown type {raw_type!r}", zone_id=zone_id
        ) from exc

    raw_polygon = raw.get("polygon")
    if not isinstance(raw_polygon, (list, tuple)):
        raise InvalidZoneDefinition(f"Zone {zone_id!r} has no polygon", zone_id=zone_id)

    vertices: List[LatLng] = []
    for index, raw_vertex in enumerate(raw_polygon):
        vertex = _vertex(raw_vertex)
        if vertex is None:
            raise InvalidZoneDefinition(
                f"Zone {zone_id!r} vertex {index} is not a valid coordinate: {raw_vertex!r}",
                zone_id=zone_id,
            )
        vertices.append(vertex)

    # Rings may arrive explicitly closed; the test closes them implicitly
    if len(vertices) > 1 and vertices[0] == vertices[-1]:
        vertices.pop()

    if len(set(vertices)) < 3:
        raise InvalidZoneDefinition(
            f"Zone {zone_id!r} polygon needs at least 3 distinct vertices, "
            f"got {len(set(vertices))}",
            zone_id=zone_id,
        )

    return ZoneOfInterest(
        id=zone_id,
        name=str(raw.get("name") or zone_id),
        polygon=tuple(vertices),
        type=zone_type,
        active=_flag(raw, True, "active"),
        alert_on_entry=_flag(raw, False, "alertOnEntry", "alert_on_entry"),
        alert_on_exit=_flag(raw, False, "alertOnExit", "alert_on_exit"),
    )


def load_zones(records: Optional[Iterable[Any]], skip_invalid: bool = False) -> List[ZoneOfInterest]:
    """Parse a list of zone records.

    Args:
        records: Raw zone records (None is treated as empty).
        skip_invalid: Log and drop invalid zones instead of raising.

    Raises:
        InvalidZoneDefinition: On the first invalid zone when skip_invalid is False.
    """
    zones: List[ZoneOfInterest] = []
    for raw in records or []:
        try:
            zones.append(parse_zone(raw))
        except InvalidZoneDefinition as exc:
            if not skip_invalid:
                raise
            logger.warning("Skipping invalid zone: %s", exc)
    return zones


# ── Entities ────────────────────────────────────────────────────────────────────


def parse_entity(raw: Any) -> TrackedEntity:
    """Validate and convert a raw tracked-entity record.

    The position may be a nested ``position`` mapping or top-level
    ``lat``/``lng`` (``latitude``/``longitude``) fields.

    Raises:
        InvalidEntityRecord: The record is not a mapping or has no id.
    """
    if not isinstance(raw, Mapping):
        raise InvalidEntityRecord(
            f"Entity record must be a mapping, got {type(raw).__name__}", record=raw
        )

    entity_id = _identity(raw.get("id"))
    if entity_id is None:
        raise InvalidEntityRecord("Entity record has no id", record=raw)

    position: Optional[Position] = None
    raw_position = raw.get("position")
    coordinate = _coordinate(raw_position) if isinstance(raw_position, Mapping) else _coordinate(raw)
    if coordinate is not None:
        position = Position(lat=coordinate[0], lng=coordinate[1])

    return TrackedEntity(
        id=entity_id,
        label=str(_first(raw, "label", "callsign", "name") or ""),
        type=str(raw.get("type") or ""),
        position=position,
    )


def load_entities(records: Optional[Iterable[Any]], skip_invalid: bool = False) -> List[TrackedEntity]:
    """Parse a list of entity records.

    Raises:
        InvalidEntityRecord: On the first invalid entity when skip_invalid is False.
    """
    entities: List[TrackedEntity] = []
    for raw in records or []:
        try:
            entities.append(parse_entity(raw))
        except InvalidEntityRecord as exc:
            if not skip_invalid:
                raise
            logger.warning("Skipping invalid entity: %s", exc)
    return entities


# ── Events and assets ──────────────────────────────────────────────────────────


def _event(raw: Any, category: EventCategory, label_field: Optional[str], fallback: str) -> Optional[GeoEvent]:
    if not isinstance(raw, Mapping):
        return None
    coordinate = _coordinate(raw)
    if coordinate is None:
        return None
    label = raw.get(label_field) if label_field else None
    return GeoEvent(lat=coordinate[0], lng=coordinate[1], category=category, label=str(label or fallback))


def events_from_snapshot(raw: Mapping[str, Any]) -> List[GeoEvent]:
    """Build GeoEvents from the optional per-category arrays of a snapshot.

    Recognised keys: ``conflicts``, ``fires``, ``disasters``, ``outages`` and a
    generic ``events`` array whose records carry their own ``category``.
    Missing or non-array sections default to empty; malformed records are dropped.
    """
    events: List[GeoEvent] = []
    dropped = 0

    for key, category, label_field, fallback in _EVENT_SOURCES:
        for record in _records(raw, key):
            event = _event(record, category, label_field, fallback)
            if event is None:
                dropped += 1
            else:
                events.append(event)

    for record in _records(raw, "events"):
        event = None
        if isinstance(record, Mapping):
            try:
                category = EventCategory(str(record.get("category", "")).strip().lower())
            except ValueError:
                category = None
            if category is not None:
                event = _event(record, category, "label", category.value)
        if event is None:
            dropped += 1
        else:
            events.append(event)

    if dropped:
        logger.debug("Snapshot: dropped %d malformed event records", dropped)
    return events


def assets_from_snapshot(raw: Mapping[str, Any]) -> List[StaticAsset]:
    """Build StaticAssets from ``militaryBases`` then ``nuclearFacilities``."""
    assets: List[StaticAsset] = []
    for keys, kind in _ASSET_SOURCES:
        for record in _records(raw, *keys):
            if not isinstance(record, Mapping):
                continue
            coordinate = _coordinate(record)
            name = _identity(record.get("name"))
            if coordinate is None or name is None:
                continue
            assets.append(StaticAsset(lat=coordinate[0], lng=coordinate[1], name=name, kind=kind))
    return assets


# ── Whole snapshots ────────────────────────────────────────────────────────────


def snapshot_from_dict(raw: Mapping[str, Any], skip_invalid: bool = False) -> CycleSnapshot:
    """Validate a complete raw snapshot.

    Args:
        raw: Snapshot mapping; every array is optional.
        skip_invalid: Drop invalid zones/entities instead of raising.

    Raises:
        InvalidZoneDefinition, InvalidEntityRecord: See load_zones / load_entities.
    """
    if not isinstance(raw, Mapping):
        raise TypeError(f"Snapshot must be a mapping, got {type(raw).__name__}")

    return CycleSnapshot(
        events=events_from_snapshot(raw),
        assets=assets_from_snapshot(raw),
        entities=load_entities(raw.get("entities"), skip_invalid=skip_invalid),
        zones=load_zones(raw.get("zones"), skip_invalid=skip_invalid),
        captured_at=parse_timestamp(_first(raw, "timestamp", "captured_at")),
    )


def load_snapshot(path: str | Path, skip_invalid: bool = False) -> CycleSnapshot:
    """Read and validate a snapshot JSON file.

    Raises:
        FileNotFoundError: The file does not exist or is not valid JSON.
    """
    from geoconvergence.io.persistence import load_json

    data: Optional[Dict[str, Any]] = load_json(path)
    if data is None:
        raise FileNotFoundError(f"Snapshot not found or unreadable: {path}")
    return snapshot_from_dict(data, skip_invalid=skip_invalid)
