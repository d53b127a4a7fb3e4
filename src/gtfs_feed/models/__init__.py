"""GTFS entity models and the in-memory feed container."""

from gtfs_feed.models.feed import EntityList, Feed, GroupedCollection, KeyedCollection
from gtfs_feed.models.gtfs import (
    Agency,
    Calendar,
    CalendarDate,
    FareAttribute,
    FareRule,
    FeedInfo,
    Frequency,
    Route,
    ShapePoint,
    Stop,
    StopTime,
    TimeOfDay,
    Transfer,
    Trip,
)

__all__ = [
    # Container
    "Feed",
    "EntityList",
    "KeyedCollection",
    "GroupedCollection",
    # Entities
    "Agency",
    "Calendar",
    "CalendarDate",
    "FareAttribute",
    "FareRule",
    "FeedInfo",
    "Frequency",
    "Route",
    "ShapePoint",
    "Stop",
    "StopTime",
    "TimeOfDay",
    "Transfer",
    "Trip",
]
