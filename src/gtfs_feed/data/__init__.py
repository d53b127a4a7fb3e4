"""Reading and writing GTFS tables."""

from gtfs_feed.data.config import FeedSettings, get_settings
from gtfs_feed.data.field_map import ColumnIndex, FieldMap, build_column_index
from gtfs_feed.data.reader import FeedReader, read_feed
from gtfs_feed.data.schema import (
    REQUIRED_FILE_SETS,
    REQUIRED_FILES,
    SCHEMAS,
    FieldSpec,
    TableSchema,
)
from gtfs_feed.data.sources import (
    DirectorySource,
    StreamSource,
    Table,
    TableSource,
    ZipSource,
    open_source,
)
from gtfs_feed.data.targets import DirectoryTarget, MemoryTarget, TableTarget, ZipTarget
from gtfs_feed.data.writer import FeedWriter, write_feed

__all__ = [
    # Config
    "FeedSettings",
    "get_settings",
    # Schema
    "SCHEMAS",
    "REQUIRED_FILES",
    "REQUIRED_FILE_SETS",
    "FieldSpec",
    "TableSchema",
    # Field mapping
    "FieldMap",
    "ColumnIndex",
    "build_column_index",
    # Sources and targets
    "Table",
    "TableSource",
    "DirectorySource",
    "ZipSource",
    "StreamSource",
    "open_source",
    "TableTarget",
    "DirectoryTarget",
    "ZipTarget",
    "MemoryTarget",
    # Reader and writer
    "FeedReader",
    "read_feed",
    "FeedWriter",
    "write_feed",
]
