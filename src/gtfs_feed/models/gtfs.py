"""Pydantic models for GTFS entities."""

import datetime as dt

from pydantic import BaseModel, ConfigDict


class TimeOfDay(BaseModel):
    """Time of day as used in stop_times and frequencies.

    Hours may exceed 23 for trips running past midnight of the service day.
    """

    model_config = ConfigDict(frozen=True)

    hours: int
    minutes: int
    seconds: int

    @classmethod
    def parse(cls, value: str) -> "TimeOfDay":
        """Parse ``H:MM:SS`` or ``HH:MM:SS``.

        Raises:
            ValueError: If the value is not a valid time of day.
        """
        parts = value.strip().split(":")
        if len(parts) != 3 or not all(part.isdigit() for part in parts):
            raise ValueError(f"Invalid time of day: {value!r}")
        hours, minutes, seconds = (int(part) for part in parts)
        if len(parts[1]) != 2 or len(parts[2]) != 2 or minutes > 59 or seconds > 59:
            raise ValueError(f"Invalid time of day: {value!r}")
        return cls(hours=hours, minutes=minutes, seconds=seconds)

    @property
    def total_seconds(self) -> int:
        return self.hours * 3600 + self.minutes * 60 + self.seconds

    def __str__(self) -> str:
        return f"{self.hours:02d}:{self.minutes:02d}:{self.seconds:02d}"


class Agency(BaseModel):
    """GTFS agency entity."""

    agency_id: str
    agency_name: str
    agency_url: str
    agency_timezone: str
    agency_lang: str | None = None
    agency_phone: str | None = None
    agency_fare_url: str | None = None
    agency_email: str | None = None


class Stop(BaseModel):
    """GTFS stop entity."""

    stop_id: str
    stop_code: str | None = None
    stop_name: str
    stop_desc: str | None = None
    stop_lat: float
    stop_lon: float
    zone_id: str | None = None
    stop_url: str | None = None
    location_type: int | None = None  # 0=stop, 1=station, 2=entrance
    parent_station: str | None = None
    stop_timezone: str | None = None
    wheelchair_boarding: int | None = None
    level_id: str | None = None
    platform_code: str | None = None


class Route(BaseModel):
    """GTFS route entity."""

    route_id: str
    agency_id: str | None = None
    route_short_name: str | None = None
    route_long_name: str | None = None
    route_desc: str | None = None
    route_type: int  # 0=tram, 1=metro, 2=rail, 3=bus, ...
    route_url: str | None = None
    route_color: str | None = None
    route_text_color: str | None = None
    route_sort_order: int | None = None


class Trip(BaseModel):
    """GTFS trip entity."""

    trip_id: str
    route_id: str
    service_id: str
    trip_headsign: str | None = None
    trip_short_name: str | None = None
    direction_id: int | None = None
    block_id: str | None = None
    shape_id: str | None = None
    wheelchair_accessible: int | None = None
    bikes_allowed: int | None = None


class StopTime(BaseModel):
    """GTFS stop_times entity."""

    trip_id: str
    arrival_time: TimeOfDay | None = None
    departure_time: TimeOfDay | None = None
    stop_id: str
    stop_sequence: int
    stop_headsign: str | None = None
    pickup_type: int | None = None
    drop_off_type: int | None = None
    shape_dist_traveled: float | None = None
    timepoint: int | None = None


class ShapePoint(BaseModel):
    """GTFS shapes entity: one point of a shape."""

    shape_id: str
    shape_pt_lat: float
    shape_pt_lon: float
    shape_pt_sequence: int
    shape_dist_traveled: float | None = None


class Calendar(BaseModel):
    """GTFS calendar entity for service patterns."""

    service_id: str
    monday: bool
    tuesday: bool
    wednesday: bool
    thursday: bool
    friday: bool
    saturday: bool
    sunday: bool
    start_date: dt.date
    end_date: dt.date


class CalendarDate(BaseModel):
    """GTFS calendar_dates entity for service exceptions."""

    service_id: str
    date: dt.date
    exception_type: int  # 1=added, 2=removed


class FareAttribute(BaseModel):
    """GTFS fare_attributes entity."""

    fare_id: str
    price: float
    currency_type: str
    payment_method: int  # 0=on board, 1=before boarding
    transfers: int | None = None  # empty=unlimited
    agency_id: str | None = None
    transfer_duration: int | None = None


class FareRule(BaseModel):
    """GTFS fare_rules entity."""

    fare_id: str
    route_id: str | None = None
    origin_id: str | None = None
    destination_id: str | None = None
    contains_id: str | None = None


class Frequency(BaseModel):
    """GTFS frequencies entity for headway-based service."""

    trip_id: str
    start_time: TimeOfDay
    end_time: TimeOfDay
    headway_secs: int
    exact_times: int | None = None


class Transfer(BaseModel):
    """GTFS transfers entity."""

    from_stop_id: str
    to_stop_id: str
    transfer_type: int
    min_transfer_time: int | None = None


class FeedInfo(BaseModel):
    """GTFS feed_info entity."""

    feed_publisher_name: str
    feed_publisher_url: str
    feed_lang: str
    feed_start_date: dt.date | None = None
    feed_end_date: dt.date | None = None
    feed_version: str | None = None
    feed_contact_email: str | None = None
    feed_contact_url: str | None = None
