"""Table targets: destinations the writer serializes GTFS tables to."""

import csv
import io
import logging
import zipfile
from abc import ABC, abstractmethod
from collections.abc import Iterable
from pathlib import Path
from typing import TextIO

from gtfs_feed.data.schema import SCHEMAS
from gtfs_feed.data.sources import StreamSource

logger = logging.getLogger(__name__)


class TableTarget(ABC):
    """Receives tables by logical name as a header plus rows of strings."""

    def __init__(self, delimiter: str = ","):
        self.delimiter = delimiter

    @abstractmethod
    def write_table(self, name: str, header: list[str], rows: Iterable[list[str]]) -> int:
        """Write one table, replacing any previous content. Returns the row count."""

    def _write_csv(self, f: TextIO, header: list[str], rows: Iterable[list[str]]) -> int:
        writer = csv.writer(f, delimiter=self.delimiter, lineterminator="\n")
        writer.writerow(header)
        count = 0
        for row in rows:
            writer.writerow(row)
            count += 1
        return count


class DirectoryTarget(TableTarget):
    """Writes ``<name>.txt`` files into a directory, creating it if needed.

    GTFS table files already in the directory are removed; other files are kept.
    """

    def __init__(self, path: Path, delimiter: str = ","):
        super().__init__(delimiter)
        self.path = Path(path)
        self.path.mkdir(parents=True, exist_ok=True)
        for schema in SCHEMAS.values():
            stale = self.path / schema.filename
            if stale.is_file():
                logger.debug(f"Removing existing {stale}")
                stale.unlink()

    def write_table(self, name: str, header: list[str], rows: Iterable[list[str]]) -> int:
        with open(self.path / f"{name}.txt", "w", encoding="utf-8", newline="") as f:
            return self._write_csv(f, header, rows)


class ZipTarget(TableTarget):
    """Writes ``<name>.txt`` entries into a new ZIP archive.

    An existing archive at the path is replaced; each table is written once.
    """

    def __init__(self, path: Path, delimiter: str = ","):
        super().__init__(delimiter)
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.unlink(missing_ok=True)

    def write_table(self, name: str, header: list[str], rows: Iterable[list[str]]) -> int:
        buffer = io.StringIO()
        count = self._write_csv(buffer, header, rows)
        with zipfile.ZipFile(self.path, "a", compression=zipfile.ZIP_DEFLATED) as zf:
            zf.writestr(f"{name}.txt", buffer.getvalue())
        return count


class MemoryTarget(TableTarget):
    """Keeps written tables in memory."""

    def __init__(self, delimiter: str = ","):
        super().__init__(delimiter)
        self.tables: dict[str, str] = {}

    def write_table(self, name: str, header: list[str], rows: Iterable[list[str]]) -> int:
        buffer = io.StringIO()
        count = self._write_csv(buffer, header, rows)
        self.tables[name] = buffer.getvalue()
        return count

    def to_source(self) -> StreamSource:
        """Return a seekable source over the written tables."""
        return StreamSource(
            {name: io.StringIO(text) for name, text in self.tables.items()},
            delimiter=self.delimiter,
        )
