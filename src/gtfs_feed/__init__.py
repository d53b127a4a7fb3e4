"""Read, validate, filter and write GTFS transit feeds."""

from gtfs_feed.data import FeedReader, FeedWriter, read_feed, write_feed
from gtfs_feed.filters import filter_by_bounding_box, filter_by_routes, filter_by_stops
from gtfs_feed.matching import StopAtShape, find_stops_at_shape, match_trips
from gtfs_feed.models import Feed
from gtfs_feed.validation import ValidationResult, Violation, validate, validate_feed

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "Feed",
    "FeedReader",
    "FeedWriter",
    "read_feed",
    "write_feed",
    "validate",
    "validate_feed",
    "ValidationResult",
    "Violation",
    "filter_by_stops",
    "filter_by_routes",
    "filter_by_bounding_box",
    "find_stops_at_shape",
    "match_trips",
    "StopAtShape",
]
