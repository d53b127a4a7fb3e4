"""GTFS writer: serializes an in-memory feed to table targets."""

import logging
from collections.abc import Iterable, Iterator
from pathlib import Path

from pydantic import BaseModel

from gtfs_feed.data.config import get_settings
from gtfs_feed.data.schema import SCHEMAS, TableSchema
from gtfs_feed.data.targets import DirectoryTarget, TableTarget, ZipTarget
from gtfs_feed.models.feed import Feed

logger = logging.getLogger(__name__)


def _serialize_rows(schema: TableSchema, entities: Iterable[BaseModel]) -> Iterator[list[str]]:
    for entity in entities:
        yield [spec.format(getattr(entity, spec.name)) for spec in schema.fields]


class FeedWriter:
    """Writer for GTFS feeds.

    Every non-empty collection is written with the full canonical header of
    its table, rows in insertion order. Grouped tables (stop_times, shapes,
    calendar_dates) are not re-sorted by their sequence fields.
    """

    def write(self, feed: Feed, target: TableTarget) -> dict[str, int]:
        """Write a feed to a target.

        Args:
            feed: Feed to serialize.
            target: Destination for the tables.

        Returns:
            Dictionary with row counts per written table.
        """
        row_counts: dict[str, int] = {}
        for name, schema in SCHEMAS.items():
            collection = feed.collection(name)
            if not len(collection):
                continue
            logger.info(f"Writing {len(collection):,} rows to {schema.filename}...")
            row_counts[name] = target.write_table(
                name, schema.field_names, _serialize_rows(schema, collection)
            )
        return row_counts


def write_feed(feed: Feed, output_path: Path, delimiter: str | None = None) -> dict[str, int]:
    """Write a feed to a directory, or to a ZIP file when the path ends in ``.zip``.

    Args:
        feed: Feed to serialize.
        output_path: Target directory or ZIP file.
        delimiter: Column delimiter; defaults to the ``GTFS_DELIMITER`` setting.

    Returns:
        Dictionary with row counts per written table.
    """
    output_path = Path(output_path)
    delimiter = delimiter or get_settings().delimiter
    target: TableTarget
    if output_path.suffix.lower() == ".zip":
        target = ZipTarget(output_path, delimiter)
    else:
        target = DirectoryTarget(output_path, delimiter)
    row_counts = FeedWriter().write(feed, target)
    logger.info(f"GTFS write complete: {output_path}")
    return row_counts
