"""Error kinds surfaced at the GEOConvergence input-validation boundary.

The engines themselves never raise for malformed data; records that cannot
be trusted are rejected here, before a cycle starts.
"""

from __future__ import annotations

from typing import Any, Optional


class GeoConvergenceError(Exception):
    """Base class for all GEOConvergence errors."""


class InvalidZoneDefinition(GeoConvergenceError):
    """A zone record is missing its id or carries an unusable polygon."""

    def __init__(self, message: str, zone_id: Optional[Any] = None) -> None:
        super().__init__(message)
        self.zone_id = zone_id


class InvalidEntityRecord(GeoConvergenceError):
    """A tracked-entity record is missing its required identity fields."""

    def __init__(self, message: str, record: Optional[Any] = None) -> None:
        super().__init__(message)
        self.record = record
