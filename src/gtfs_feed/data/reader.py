"""GTFS reader: builds an in-memory feed from a table source."""

import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ValidationError

from gtfs_feed.data.config import FeedSettings, get_settings
from gtfs_feed.data.field_map import ColumnIndex, FieldMap, build_column_index
from gtfs_feed.data.schema import REQUIRED_FILE_SETS, REQUIRED_FILES, SCHEMAS, TableSchema
from gtfs_feed.data.sources import Table, TableSource, open_source
from gtfs_feed.errors import (
    ConversionError,
    DuplicateKey,
    MalformedRow,
    ReadError,
    RequiredFileMissing,
    RequiredFileSetMissing,
)
from gtfs_feed.models.feed import Feed

logger = logging.getLogger(__name__)


class FeedReader:
    """Reader for loading GTFS tables into a ``Feed``.

    Row-level problems (malformed rows, conversion errors, duplicate keys) are
    handled according to ``strict``:

    - lenient (default): the problem is recorded in ``issues`` and logged; the
      row is dropped, except for an invalid optional value, which is left empty.
    - strict: the first problem is raised and the read is aborted.

    Missing required files, file sets and header fields always abort the read.
    """

    def __init__(self, strict: bool | None = None, settings: FeedSettings | None = None):
        """Initialize the reader.

        Args:
            strict: Abort on the first row-level problem. Defaults to the
                ``GTFS_STRICT`` setting.
            settings: Optional settings; defaults to the environment configuration.
        """
        settings = settings or get_settings()
        self.strict = settings.strict if strict is None else strict
        self.field_maps: dict[str, FieldMap] = {name: FieldMap() for name in SCHEMAS}
        self.issues: list[ReadError] = []

    def read(self, source: TableSource) -> Feed:
        """Read all GTFS tables of a source into a new feed.

        Args:
            source: Table source to read from.

        Returns:
            The populated feed.

        Raises:
            RequiredFileMissing: If a required table is absent.
            RequiredFileSetMissing: If no table of a required set is present.
            MissingRequiredField: If a table header lacks a required column
                (including an empty required file).
            ReadError: In strict mode, for the first row-level problem.
        """
        self.issues = []
        present = set(source.names())
        tables = {name: source.open_table(name) for name in SCHEMAS if name in present}

        # empty optional files count as absent
        for name, table in list(tables.items()):
            if not table.header and not SCHEMAS[name].required:
                logger.warning(f"{SCHEMAS[name].filename} is empty")
                del tables[name]
        self._check_required_files(set(tables))

        feed = Feed()
        for name, schema in SCHEMAS.items():
            if name not in tables:
                logger.debug(f"Optional file {schema.filename} not found")
                continue
            self._load_table(feed, schema, tables[name])

        for name in sorted(present - SCHEMAS.keys()):
            logger.debug(f"Ignoring unsupported file {name}.txt")

        logger.info(
            f"GTFS read complete: {sum(feed.row_counts().values()):,} rows"
            + (f" ({len(self.issues):,} issues)" if self.issues else "")
        )
        return feed

    def _check_required_files(self, present: set[str]) -> None:
        """Verify required files and file sets before reading anything."""
        for name in REQUIRED_FILES:
            if name not in present:
                raise RequiredFileMissing(name)
        for file_set in REQUIRED_FILE_SETS:
            if not any(name in present for name in file_set):
                raise RequiredFileSetMissing(file_set)

    def _load_table(self, feed: Feed, schema: TableSchema, table: Table) -> int:
        """Load a single table into its feed collection."""
        logger.info(f"Loading {schema.name} from {schema.filename}...")

        # an empty required file has no columns and fails here
        index = build_column_index(schema, table.header, self.field_maps[schema.name])
        collection = feed.collection(schema.name)

        total_rows = 0
        skipped_rows = 0
        for row_index, row in enumerate(table, start=1):
            try:
                collection.add(self._parse_row(schema, index, row, row_index))
            except (MalformedRow, ConversionError, DuplicateKey) as error:
                self._report(error)
                skipped_rows += 1
                continue
            total_rows += 1

        logger.info(
            f"  Loaded {total_rows:,} rows into {schema.name}"
            + (f" (skipped {skipped_rows:,} invalid)" if skipped_rows else "")
        )
        return total_rows

    def _parse_row(
        self, schema: TableSchema, index: ColumnIndex, row: list[str], row_index: int
    ) -> BaseModel:
        """Convert one raw row into an entity.

        Raises:
            MalformedRow: If the column count differs from the header.
            ConversionError: If a required value is missing or invalid.
        """
        if len(row) != len(index.header):
            raise MalformedRow(schema.name, row_index, len(index.header), len(row))

        raw = index.values(row)
        values: dict[str, Any] = {}
        for spec in schema.fields:
            if spec.name not in raw:
                continue
            raw_value = raw[spec.name]
            try:
                value = spec.parse(raw_value)
            except ValueError:
                error = ConversionError(schema.name, spec.name, raw_value, row_index)
                if spec.required:
                    raise error from None
                self._report(error)
                value = None
            if value is None:
                if spec.required:
                    raise ConversionError(schema.name, spec.name, raw_value, row_index)
                continue
            values[spec.name] = value

        try:
            return schema.model(**values)
        except ValidationError as exc:
            field = str(exc.errors()[0]["loc"][0]) if exc.errors() else "?"
            raise ConversionError(schema.name, field, raw.get(field), row_index) from exc

    def _report(self, error: ReadError) -> None:
        """Raise in strict mode, otherwise record and log the problem."""
        if self.strict:
            raise error
        self.issues.append(error)
        logger.warning(str(error))


def read_feed(
    gtfs_path: Path, strict: bool | None = None, settings: FeedSettings | None = None
) -> Feed:
    """Read a GTFS directory or ZIP file.

    Args:
        gtfs_path: Path to GTFS directory or ZIP file.
        strict: Abort on the first row-level problem (defaults to settings).
        settings: Optional settings; defaults to the environment configuration.

    Returns:
        The populated feed.

    Raises:
        FileNotFoundError: If GTFS path doesn't exist.
        ReadError: If the feed cannot be read (see ``FeedReader.read``).
    """
    settings = settings or get_settings()
    source = open_source(Path(gtfs_path), settings.delimiter, settings.encoding)
    return FeedReader(strict=strict, settings=settings).read(source)
