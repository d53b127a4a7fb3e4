"""Error types raised while reading feeds, accessing sources and matching shapes.

Each fallible operation has its own family:

- ``ReadError`` for the reader (and for duplicate keys rejected by the feed model)
- ``SourceError`` for table sources
- ``ShapeMatchError`` for the stop-to-shape matcher

Validation problems are not exceptions; see ``gtfs_feed.validation.Violation``.
"""


class ReadError(Exception):
    """Base class for errors raised while reading a feed."""


class RequiredFileMissing(ReadError):
    """A required table is not present in the source."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Required file missing: {name}")


class RequiredFileSetMissing(ReadError):
    """None of the tables of a required file set are present in the source."""

    def __init__(self, names: tuple[str, ...] | list[str]):
        self.names = tuple(names)
        super().__init__(f"Required file set missing, expected one of: {', '.join(self.names)}")


class MissingRequiredField(ReadError):
    """A table header lacks a required column."""

    def __init__(self, table: str, field: str):
        self.table = table
        self.field = field
        super().__init__(f"{table} is missing required field: {field}")


class MalformedRow(ReadError):
    """A row's column count does not match the header."""

    def __init__(self, table: str, row_index: int, expected: int, actual: int):
        self.table = table
        self.row_index = row_index
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"{table} row {row_index}: expected {expected} columns, found {actual}"
        )


class ConversionError(ReadError):
    """A raw field value could not be converted (or a required value is empty)."""

    def __init__(self, table: str, field: str, raw_value: str | None, row_index: int | None = None):
        self.table = table
        self.field = field
        self.raw_value = raw_value
        self.row_index = row_index
        where = f"{table} row {row_index}" if row_index is not None else table
        if raw_value is None or raw_value.strip() == "":
            message = f"{where}: missing value for required field {field}"
        else:
            message = f"{where}: invalid value for {field}: {raw_value!r}"
        super().__init__(message)


class DuplicateKey(ReadError):
    """A row with the same key already exists in a keyed collection."""

    def __init__(self, table: str, key: str):
        self.table = table
        self.key = key
        super().__init__(f"Duplicate key in {table}: {key}")


class SourceError(Exception):
    """Base class for table source errors."""


class TableNotFound(SourceError):
    """The requested table is not present in the source."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Table not found: {name}")


class NotSeekable(SourceError):
    """A table backed by a non-seekable stream was iterated a second time."""

    def __init__(self, source: str):
        self.source = source
        super().__init__(f"Cannot re-read {source}: underlying stream is not seekable")


class ShapeMatchError(Exception):
    """Base class for stop-to-shape matching errors."""


class NoShapeMatch(ShapeMatchError):
    """No shape point lies within the tolerance range of a stop."""

    def __init__(self, trip_id: str, stop_id: str, max_tolerance: float):
        self.trip_id = trip_id
        self.stop_id = stop_id
        self.max_tolerance = max_tolerance
        super().__init__(
            f"No shape point found for stop {stop_id} of trip {trip_id} "
            f"with tolerance [0-{max_tolerance}[m"
        )
