"""Feed filters that extract a referentially closed sub-feed.

Trips touched by the selection are kept whole: all of their stop times, the
stops those visit, their routes, services and shapes come along, and so do
the agencies, fares, frequencies and transfers that refer only to kept rows.
The input feed is never modified; the output holds copies of its rows.
"""

from collections.abc import Callable, Iterable
from typing import TypeVar

from pydantic import BaseModel

from gtfs_feed.models.feed import EntityList, Feed
from gtfs_feed.models.gtfs import Route, Stop

T = TypeVar("T", bound=BaseModel)

StopSelector = Callable[[Stop], bool] | Iterable[str]
RouteSelector = Callable[[Route], bool] | Iterable[str]


def _predicate(selector: Callable[[T], bool] | Iterable[str], key: Callable[[T], str]):
    """Turn an id collection into a predicate; predicates pass through."""
    if callable(selector):
        return selector
    ids = set(selector)
    return lambda entity: key(entity) in ids


def _copy_into(target: EntityList[T], rows: Iterable[T]) -> None:
    for row in rows:
        target.add(row.model_copy())


def stop_ids_for(feed: Feed, stops: StopSelector) -> set[str]:
    """Ids of the stops matching a predicate or id collection."""
    predicate = _predicate(stops, lambda s: s.stop_id)
    return {stop.stop_id for stop in feed.stops if predicate(stop)}


def _trips_visiting(feed: Feed, stop_ids: set[str]) -> set[str]:
    return {
        st.trip_id for st in feed.stop_times if st.stop_id in stop_ids and st.trip_id in feed.trips
    }


def trip_ids_for(feed: Feed, stops: StopSelector) -> set[str]:
    """Ids of the trips visiting at least one selected stop."""
    return _trips_visiting(feed, stop_ids_for(feed, stops))


def route_ids_for(feed: Feed, stops: StopSelector) -> set[str]:
    """Ids of the routes with at least one trip visiting a selected stop."""
    trip_ids = trip_ids_for(feed, stops)
    return {trip.route_id for trip in feed.trips if trip.trip_id in trip_ids}


def _extract(
    feed: Feed,
    trip_ids: set[str],
    stop_ids: set[str] | None = None,
    route_ids: set[str] | None = None,
) -> Feed:
    """Build the referential closure of the given trips plus seed stops and routes."""
    stop_ids = set(stop_ids or ())
    route_ids = set(route_ids or ())
    service_ids: set[str] = set()
    shape_ids: set[str] = set()

    trips = [trip for trip in feed.trips if trip.trip_id in trip_ids]
    for trip in trips:
        route_ids.add(trip.route_id)
        service_ids.add(trip.service_id)
        if trip.shape_id:
            shape_ids.add(trip.shape_id)

    stop_times = [st for st in feed.stop_times if st.trip_id in trip_ids]
    stop_ids.update(st.stop_id for st in stop_times)

    # parent stations, transitively
    pending = list(stop_ids)
    while pending:
        stop = feed.stops.get(pending.pop())
        if stop is not None and stop.parent_station and stop.parent_station not in stop_ids:
            stop_ids.add(stop.parent_station)
            pending.append(stop.parent_station)

    routes = [route for route in feed.routes if route.route_id in route_ids]
    agency_ids = {route.agency_id for route in routes if route.agency_id}

    fare_rules = [rule for rule in feed.fare_rules if rule.route_id in route_ids]
    fare_ids = {rule.fare_id for rule in fare_rules}
    fare_attributes = [fare for fare in feed.fare_attributes if fare.fare_id in fare_ids]
    agency_ids.update(fare.agency_id for fare in fare_attributes if fare.agency_id)
    # a blank agency_id refers to the feed's only agency
    if any(not route.agency_id for route in routes) or any(
        not fare.agency_id for fare in fare_attributes
    ):
        agency_ids.update(feed.agencies.keys())

    filtered = Feed()
    _copy_into(filtered.agencies, (a for a in feed.agencies if a.agency_id in agency_ids))
    _copy_into(filtered.stops, (s for s in feed.stops if s.stop_id in stop_ids))
    _copy_into(filtered.routes, routes)
    _copy_into(filtered.trips, trips)
    _copy_into(filtered.stop_times, stop_times)
    _copy_into(filtered.calendars, (c for c in feed.calendars if c.service_id in service_ids))
    _copy_into(
        filtered.calendar_dates, (cd for cd in feed.calendar_dates if cd.service_id in service_ids)
    )
    _copy_into(filtered.fare_attributes, fare_attributes)
    _copy_into(filtered.fare_rules, fare_rules)
    _copy_into(filtered.shapes, (p for p in feed.shapes if p.shape_id in shape_ids))
    _copy_into(filtered.frequencies, (f for f in feed.frequencies if f.trip_id in trip_ids))
    _copy_into(
        filtered.transfers,
        (
            t
            for t in feed.transfers
            if t.from_stop_id in stop_ids and t.to_stop_id in stop_ids
        ),
    )
    _copy_into(filtered.feed_info, feed.feed_info)
    return filtered


def filter_by_stops(feed: Feed, stops: StopSelector) -> Feed:
    """Keep the selected stops and every trip that visits one of them.

    Args:
        feed: Feed to filter.
        stops: Predicate on ``Stop`` or a collection of stop ids.

    Returns:
        A new, independent feed.
    """
    stop_ids = stop_ids_for(feed, stops)
    return _extract(feed, _trips_visiting(feed, stop_ids), stop_ids=stop_ids)


def filter_by_routes(feed: Feed, routes: RouteSelector) -> Feed:
    """Keep the selected routes and all of their trips.

    Args:
        feed: Feed to filter.
        routes: Predicate on ``Route`` or a collection of route ids.

    Returns:
        A new, independent feed.
    """
    predicate = _predicate(routes, lambda r: r.route_id)
    route_ids = {route.route_id for route in feed.routes if predicate(route)}
    trip_ids = {trip.trip_id for trip in feed.trips if trip.route_id in route_ids}
    return _extract(feed, trip_ids, route_ids=route_ids)


def filter_by_bounding_box(
    feed: Feed, top: float, left: float, bottom: float, right: float
) -> Feed:
    """Keep the stops inside a lat/lon box and every trip that visits one of them.

    Edges are inclusive.

    Raises:
        ValueError: If ``top`` is below ``bottom`` or ``left`` is east of ``right``.
    """
    if top < bottom or left > right:
        raise ValueError(
            f"Invalid bounding box: top={top} left={left} bottom={bottom} right={right}"
        )
    return filter_by_stops(
        feed, lambda stop: bottom <= stop.stop_lat <= top and left <= stop.stop_lon <= right
    )
