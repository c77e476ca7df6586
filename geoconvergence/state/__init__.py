"""GEOConvergence state package — the geofencing membership store."""

from geoconvergence.state.membership import MembershipEntry, ZoneMembershipStore

__all__ = ["MembershipEntry", "ZoneMembershipStore"]
