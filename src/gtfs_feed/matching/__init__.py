"""Stop-to-shape matching."""

from gtfs_feed.matching.geo import haversine_distance
from gtfs_feed.matching.models import StopAtShape
from gtfs_feed.matching.shape_matcher import MIN_TOLERANCE, find_stops_at_shape, match_trips

__all__ = [
    # Matchers
    "find_stops_at_shape",
    "match_trips",
    "MIN_TOLERANCE",
    # Models
    "StopAtShape",
    # Geometry
    "haversine_distance",
]
