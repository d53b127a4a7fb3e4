"""Referential-integrity and sequencing checks for an in-memory feed.

Validation is read-only and never raises for data problems: every check
returns a list of ``Violation`` records.
"""

from collections.abc import Callable, Iterable
from enum import Enum

from pydantic import BaseModel, Field

from gtfs_feed.models.feed import Feed


class ViolationKind(str, Enum):
    """Category of a validation failure."""

    INTEGRITY = "integrity"  # Foreign key without a target row
    DUPLICATE_SEQUENCE = "duplicate_sequence"  # stop_sequence repeated within a trip


class Violation(BaseModel):
    """A single validation failure."""

    kind: ViolationKind
    table: str = Field(description="Table holding the offending row")
    field: str = Field(description="Offending field")
    value: str = Field(description="Offending value")
    message: str


class ValidationResult(BaseModel):
    """Outcome of validating a feed."""

    violations: list[Violation] = Field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.violations

    def __bool__(self) -> bool:
        return self.valid


def _dangling(
    table: str,
    rows: Iterable[BaseModel],
    field: str,
    exists: Callable[[str], bool],
    target: str,
) -> list[Violation]:
    """Report rows whose non-empty ``field`` has no row in ``target``."""
    violations = []
    for row in rows:
        value = getattr(row, field)
        if value is None or value == "":
            continue
        if not exists(value):
            violations.append(
                Violation(
                    kind=ViolationKind.INTEGRITY,
                    table=table,
                    field=field,
                    value=value,
                    message=f"Unknown {target} referenced by {table}.{field}: {value}",
                )
            )
    return violations


def check_references(feed: Feed) -> list[Violation]:
    """Check every foreign key of every row against its target collection.

    Empty values on optional link fields (e.g. ``routes.agency_id``) are valid.
    """
    service_ids = feed.service_ids()
    return [
        *_dangling("routes", feed.routes, "agency_id", feed.agencies.__contains__, "agency"),
        *_dangling("trips", feed.trips, "route_id", feed.routes.__contains__, "route"),
        *_dangling("trips", feed.trips, "service_id", service_ids.__contains__, "service"),
        *_dangling("trips", feed.trips, "shape_id", feed.shapes.__contains__, "shape"),
        *_dangling("stop_times", feed.stop_times, "trip_id", feed.trips.__contains__, "trip"),
        *_dangling("stop_times", feed.stop_times, "stop_id", feed.stops.__contains__, "stop"),
        *_dangling("stops", feed.stops, "parent_station", feed.stops.__contains__, "stop"),
        *_dangling(
            "fare_attributes",
            feed.fare_attributes,
            "agency_id",
            feed.agencies.__contains__,
            "agency",
        ),
        *_dangling(
            "fare_rules", feed.fare_rules, "fare_id", feed.fare_attributes.__contains__, "fare"
        ),
        *_dangling("fare_rules", feed.fare_rules, "route_id", feed.routes.__contains__, "route"),
        *_dangling("frequencies", feed.frequencies, "trip_id", feed.trips.__contains__, "trip"),
        *_dangling("transfers", feed.transfers, "from_stop_id", feed.stops.__contains__, "stop"),
        *_dangling("transfers", feed.transfers, "to_stop_id", feed.stops.__contains__, "stop"),
    ]


def check_stop_sequences(feed: Feed) -> list[Violation]:
    """Check that no two stop times of a trip share a stop_sequence."""
    violations = []
    for trip_id in feed.stop_times.group_keys():
        seen: set[int] = set()
        for stop_time in feed.stop_times.get(trip_id):
            if stop_time.stop_sequence in seen:
                violations.append(
                    Violation(
                        kind=ViolationKind.DUPLICATE_SEQUENCE,
                        table="stop_times",
                        field="stop_sequence",
                        value=str(stop_time.stop_sequence),
                        message=(
                            f"Duplicate stop_sequence {stop_time.stop_sequence} "
                            f"for trip {trip_id}"
                        ),
                    )
                )
            seen.add(stop_time.stop_sequence)
    return violations


def validate_feed(feed: Feed) -> ValidationResult:
    """Run all checks and collect every violation."""
    return ValidationResult(violations=[*check_references(feed), *check_stop_sequences(feed)])


def validate(feed: Feed) -> bool:
    """Return True if the feed passes every check."""
    return validate_feed(feed).valid
