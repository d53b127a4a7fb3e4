"""Declarative field descriptions for every GTFS table.

Each table is described by a ``TableSchema``: the entity model it produces and
an ordered list of ``FieldSpec`` entries giving the canonical column name,
whether it is required, and how to convert the raw text to a value and back.
"""

import datetime as dt
import math
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel

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


def parse_string(value: str) -> str:
    """Trim whitespace and a pair of surrounding quotes."""
    cleaned = value.strip()
    if len(cleaned) >= 2 and cleaned[0] == '"' and cleaned[-1] == '"':
        cleaned = cleaned[1:-1]
    return cleaned


def parse_int(value: str) -> int:
    cleaned = parse_string(value)
    if "_" in cleaned:
        raise ValueError(f"Invalid integer: {value!r}")
    return int(cleaned)


def parse_float(value: str) -> float:
    """Parse a finite decimal number; nan, inf and digit separators are rejected."""
    cleaned = parse_string(value)
    if "_" in cleaned:
        raise ValueError(f"Invalid number: {value!r}")
    number = float(cleaned)
    if not math.isfinite(number):
        raise ValueError(f"Invalid number: {value!r}")
    return number


def parse_bool(value: str) -> bool:
    cleaned = parse_string(value)
    if cleaned == "1":
        return True
    if cleaned == "0":
        return False
    raise ValueError(f"Invalid boolean: {value!r}")


def parse_date(value: str) -> dt.date:
    """Parse a ``YYYYMMDD`` date."""
    cleaned = parse_string(value)
    if len(cleaned) != 8 or not cleaned.isdigit():
        raise ValueError(f"Invalid date: {value!r}")
    return dt.date(int(cleaned[:4]), int(cleaned[4:6]), int(cleaned[6:]))


def parse_time(value: str) -> TimeOfDay:
    return TimeOfDay.parse(parse_string(value))


def format_bool(value: bool) -> str:
    return "1" if value else "0"


def format_date(value: dt.date) -> str:
    return f"{value.year:04d}{value.month:02d}{value.day:02d}"


# (convert, serialize) per value kind
STRING = (parse_string, str)
INT = (parse_int, str)
FLOAT = (parse_float, repr)
BOOL = (parse_bool, format_bool)
DATE = (parse_date, format_date)
TIME = (parse_time, str)


@dataclass(frozen=True)
class FieldSpec:
    """One column of a GTFS table."""

    name: str
    required: bool = False
    convert: Callable[[str], Any] = parse_string
    serialize: Callable[[Any], str] = str

    def parse(self, raw: str | None) -> Any:
        """Convert a raw value; blank or absent values become ``None``.

        Raises:
            ValueError: If a non-blank value cannot be converted.
        """
        if raw is None or raw.strip() == "":
            return None
        return self.convert(raw)

    def format(self, value: Any) -> str:
        if value is None:
            return ""
        return self.serialize(value)


def _req(name: str, kind: tuple[Callable[[str], Any], Callable[[Any], str]] = STRING) -> FieldSpec:
    return FieldSpec(name, True, *kind)


def _opt(name: str, kind: tuple[Callable[[str], Any], Callable[[Any], str]] = STRING) -> FieldSpec:
    return FieldSpec(name, False, *kind)


@dataclass(frozen=True)
class TableSchema:
    """Description of one GTFS table and the entity it holds."""

    name: str
    model: type[BaseModel]
    fields: tuple[FieldSpec, ...]
    required: bool = False

    @property
    def filename(self) -> str:
        return f"{self.name}.txt"

    @property
    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]

    @property
    def required_fields(self) -> list[str]:
        return [f.name for f in self.fields if f.required]


# Tables in read/write order
SCHEMAS: dict[str, TableSchema] = {
    schema.name: schema
    for schema in (
        TableSchema(
            "agency",
            Agency,
            (
                _req("agency_id"),
                _req("agency_name"),
                _req("agency_url"),
                _req("agency_timezone"),
                _opt("agency_lang"),
                _opt("agency_phone"),
                _opt("agency_fare_url"),
                _opt("agency_email"),
            ),
            required=True,
        ),
        TableSchema(
            "stops",
            Stop,
            (
                _req("stop_id"),
                _opt("stop_code"),
                _req("stop_name"),
                _opt("stop_desc"),
                _req("stop_lat", FLOAT),
                _req("stop_lon", FLOAT),
                _opt("zone_id"),
                _opt("stop_url"),
                _opt("location_type", INT),
                _opt("parent_station"),
                _opt("stop_timezone"),
                _opt("wheelchair_boarding", INT),
                _opt("level_id"),
                _opt("platform_code"),
            ),
            required=True,
        ),
        TableSchema(
            "routes",
            Route,
            (
                _req("route_id"),
                _opt("agency_id"),
                _opt("route_short_name"),
                _opt("route_long_name"),
                _opt("route_desc"),
                _req("route_type", INT),
                _opt("route_url"),
                _opt("route_color"),
                _opt("route_text_color"),
                _opt("route_sort_order", INT),
            ),
            required=True,
        ),
        TableSchema(
            "trips",
            Trip,
            (
                _req("route_id"),
                _req("service_id"),
                _req("trip_id"),
                _opt("trip_headsign"),
                _opt("trip_short_name"),
                _opt("direction_id", INT),
                _opt("block_id"),
                _opt("shape_id"),
                _opt("wheelchair_accessible", INT),
                _opt("bikes_allowed", INT),
            ),
            required=True,
        ),
        TableSchema(
            "stop_times",
            StopTime,
            (
                _req("trip_id"),
                _opt("arrival_time", TIME),
                _opt("departure_time", TIME),
                _req("stop_id"),
                _req("stop_sequence", INT),
                _opt("stop_headsign"),
                _opt("pickup_type", INT),
                _opt("drop_off_type", INT),
                _opt("shape_dist_traveled", FLOAT),
                _opt("timepoint", INT),
            ),
            required=True,
        ),
        TableSchema(
            "calendar",
            Calendar,
            (
                _req("service_id"),
                _req("monday", BOOL),
                _req("tuesday", BOOL),
                _req("wednesday", BOOL),
                _req("thursday", BOOL),
                _req("friday", BOOL),
                _req("saturday", BOOL),
                _req("sunday", BOOL),
                _req("start_date", DATE),
                _req("end_date", DATE),
            ),
        ),
        TableSchema(
            "calendar_dates",
            CalendarDate,
            (
                _req("service_id"),
                _req("date", DATE),
                _req("exception_type", INT),
            ),
        ),
        TableSchema(
            "fare_attributes",
            FareAttribute,
            (
                _req("fare_id"),
                _req("price", FLOAT),
                _req("currency_type"),
                _req("payment_method", INT),
                _opt("transfers", INT),
                _opt("agency_id"),
                _opt("transfer_duration", INT),
            ),
        ),
        TableSchema(
            "fare_rules",
            FareRule,
            (
                _req("fare_id"),
                _opt("route_id"),
                _opt("origin_id"),
                _opt("destination_id"),
                _opt("contains_id"),
            ),
        ),
        TableSchema(
            "shapes",
            ShapePoint,
            (
                _req("shape_id"),
                _req("shape_pt_lat", FLOAT),
                _req("shape_pt_lon", FLOAT),
                _req("shape_pt_sequence", INT),
                _opt("shape_dist_traveled", FLOAT),
            ),
        ),
        TableSchema(
            "frequencies",
            Frequency,
            (
                _req("trip_id"),
                _req("start_time", TIME),
                _req("end_time", TIME),
                _req("headway_secs", INT),
                _opt("exact_times", INT),
            ),
        ),
        TableSchema(
            "transfers",
            Transfer,
            (
                _req("from_stop_id"),
                _req("to_stop_id"),
                _req("transfer_type", INT),
                _opt("min_transfer_time", INT),
            ),
        ),
        TableSchema(
            "feed_info",
            FeedInfo,
            (
                _req("feed_publisher_name"),
                _req("feed_publisher_url"),
                _req("feed_lang"),
                _opt("feed_start_date", DATE),
                _opt("feed_end_date", DATE),
                _opt("feed_version"),
                _opt("feed_contact_email"),
                _opt("feed_contact_url"),
            ),
        ),
    )
}

REQUIRED_FILES: tuple[str, ...] = tuple(name for name, s in SCHEMAS.items() if s.required)

# At least one table of each set must be present
REQUIRED_FILE_SETS: tuple[tuple[str, ...], ...] = (("calendar", "calendar_dates"),)


def get_schema(table: str) -> TableSchema:
    """Return the schema of a table.

    Raises:
        KeyError: If the table is not a known GTFS table.
    """
    return SCHEMAS[table]
