"""Match a trip's stops to the points of the trip's shape.

Stops are visited in stop_sequence order and shape points in
shape_pt_sequence order. Each stop is matched to the closest shape point
after the previous match, searching with a tolerance radius that starts at
``MIN_TOLERANCE`` meters and doubles while it stays below the maximum.
A forward scan stops as soon as distances grow again after a candidate was
found, so only the local minimum near the stop is considered.
"""

import math
from collections.abc import Iterable

from gtfs_feed.data.config import get_settings
from gtfs_feed.errors import NoShapeMatch
from gtfs_feed.matching.geo import haversine_distance
from gtfs_feed.matching.models import StopAtShape
from gtfs_feed.models.feed import Feed
from gtfs_feed.models.gtfs import ShapePoint, Stop

# Starting search radius in meters
MIN_TOLERANCE = 1.0


def _match_stop(
    stop: Stop, points: list[ShapePoint], last_index: int, max_tolerance: float
) -> int | None:
    """Return the index of the shape point matched to a stop, or None."""
    tolerance = MIN_TOLERANCE
    while tolerance < max_tolerance:
        best_index: int | None = None
        best_distance = math.inf
        for idx in range(last_index + 1, len(points)):
            point = points[idx]
            distance = haversine_distance(
                stop.stop_lat, stop.stop_lon, point.shape_pt_lat, point.shape_pt_lon
            )
            if distance < tolerance:
                if best_index is not None and distance > best_distance:
                    # moving away from the best candidate
                    break
                if distance < best_distance:
                    best_distance = distance
                    best_index = idx
            elif best_index is not None:
                break
        if best_index is not None:
            return best_index
        tolerance *= 2
    return None


def find_stops_at_shape(
    feed: Feed, trip_id: str, max_tolerance: float | None = None
) -> list[StopAtShape]:
    """Find the shape point matching each stop of a trip.

    Args:
        feed: Feed holding the trip, its stop times, stops and shape.
        trip_id: Trip to match.
        max_tolerance: Upper bound (exclusive) of the search radius in meters.
            Defaults to the ``GTFS_MAX_SHAPE_TOLERANCE`` setting (20 m).

    Returns:
        One match per stop time in stop_sequence order; empty when the trip
        has no shape or no stop times.

    Raises:
        ValueError: If trip_id is blank or the trip does not exist.
        NoShapeMatch: If a stop has no shape point within the tolerance range.
    """
    if not trip_id or not trip_id.strip():
        raise ValueError("trip_id is required")
    if max_tolerance is None:
        max_tolerance = get_settings().max_shape_tolerance

    trip = feed.trips.get(trip_id)
    if trip is None:
        raise ValueError(f"Trip not found: {trip_id}")
    if not trip.shape_id:
        return []

    points = feed.shape_points(trip.shape_id)
    matches: list[StopAtShape] = []
    last_index = -1
    for stop_time in feed.stop_times_for_trip(trip_id):
        stop = feed.stops.get(stop_time.stop_id)
        found = None if stop is None else _match_stop(stop, points, last_index, max_tolerance)
        if found is None:
            raise NoShapeMatch(trip_id, stop_time.stop_id, max_tolerance)

        last_index = found
        matches.append(
            StopAtShape(
                trip_id=trip_id,
                stop_id=stop_time.stop_id,
                shape_point_sequence=points[found].shape_pt_sequence,
                stop_offset=0.0,
            )
        )
    return matches


def match_trips(
    feed: Feed, trip_ids: Iterable[str] | None = None, max_tolerance: float | None = None
) -> tuple[dict[str, list[StopAtShape]], list[str]]:
    """Match several trips, skipping the ones that fail.

    Args:
        feed: Feed holding the trips.
        trip_ids: Trips to match; defaults to every trip with a shape.
        max_tolerance: See ``find_stops_at_shape``.

    Returns:
        Tuple of matches per trip id and the ids of trips without a match.
    """
    if trip_ids is None:
        trip_ids = [trip.trip_id for trip in feed.trips if trip.shape_id]

    matched: dict[str, list[StopAtShape]] = {}
    failed: list[str] = []
    for trip_id in trip_ids:
        try:
            matched[trip_id] = find_stops_at_shape(feed, trip_id, max_tolerance)
        except NoShapeMatch:
            failed.append(trip_id)
    return matched, failed
