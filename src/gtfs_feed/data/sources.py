"""Table sources: named GTFS tables read from a directory, a ZIP file or streams."""

import csv
import io
import logging
import zipfile
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator, Mapping
from contextlib import AbstractContextManager, nullcontext
from pathlib import Path, PurePosixPath
from typing import TextIO

from gtfs_feed.errors import NotSeekable, TableNotFound

logger = logging.getLogger(__name__)


class Table:
    """A header plus a lazy, re-iterable sequence of raw rows.

    Every ``iter()`` starts again at the first data row. Sources that cannot
    rewind raise ``NotSeekable`` instead.
    """

    def __init__(self, name: str, header: list[str], rows: Callable[[], Iterator[list[str]]]):
        self.name = name
        self.header = header
        self._rows = rows

    def __iter__(self) -> Iterator[list[str]]:
        return self._rows()

    def __repr__(self) -> str:
        return f"Table({self.name!r}, header={self.header!r})"


def _is_blank(row: list[str]) -> bool:
    return not row or (len(row) == 1 and row[0].strip() == "")


def _iter_rows(stream: TextIO, delimiter: str) -> Iterator[list[str]]:
    """Yield non-blank CSV rows from a text stream."""
    for row in csv.reader(stream, delimiter=delimiter):
        if not _is_blank(row):
            yield row


class TableSource(ABC):
    """Yields GTFS tables by logical name (``stops``, ``stop_times``...)."""

    def __init__(self, delimiter: str = ",", encoding: str = "utf-8-sig"):
        self.delimiter = delimiter
        self.encoding = encoding

    @abstractmethod
    def names(self) -> list[str]:
        """Logical names of the tables present in this source."""

    @abstractmethod
    def _open(self, name: str) -> AbstractContextManager[TextIO]:
        """Open a fresh text stream positioned at the start of a table."""

    def __contains__(self, name: object) -> bool:
        return name in self.names()

    def open_table(self, name: str) -> Table:
        """Open a table for reading.

        Raises:
            TableNotFound: If the table is not present in this source.
        """
        if name not in self:
            raise TableNotFound(name)

        logger.debug(f"Opening {name} from {self!r}")
        header, rows = self._table_rows(name)
        return Table(name, header, rows)

    def _table_rows(self, name: str) -> tuple[list[str], Callable[[], Iterator[list[str]]]]:
        """Read the header and build a row factory that reopens the table per pass."""
        with self._open(name) as f:
            header = next(_iter_rows(f, self.delimiter), [])

        def rows() -> Iterator[list[str]]:
            with self._open(name) as f:
                data = _iter_rows(f, self.delimiter)
                next(data, None)  # header
                yield from data

        return header, rows


class DirectorySource(TableSource):
    """Tables stored as ``<name>.txt`` files in a directory."""

    def __init__(self, path: Path, delimiter: str = ",", encoding: str = "utf-8-sig"):
        super().__init__(delimiter, encoding)
        self.path = Path(path)
        if not self.path.is_dir():
            raise FileNotFoundError(f"GTFS directory not found: {self.path}")

    def names(self) -> list[str]:
        return sorted(p.stem for p in self.path.glob("*.txt") if p.is_file())

    def _open(self, name: str) -> AbstractContextManager[TextIO]:
        return open(self.path / f"{name}.txt", encoding=self.encoding, newline="")

    def __repr__(self) -> str:
        return f"DirectorySource({str(self.path)!r})"


class ZipSource(TableSource):
    """Tables stored as ``<name>.txt`` entries of a ZIP archive.

    Entries nested in a single folder inside the archive are found as well.
    """

    def __init__(self, path: Path, delimiter: str = ",", encoding: str = "utf-8-sig"):
        super().__init__(delimiter, encoding)
        self.path = Path(path)
        if not self.path.is_file():
            raise FileNotFoundError(f"GTFS archive not found: {self.path}")
        with zipfile.ZipFile(self.path, "r") as zf:
            self._members = {
                PurePosixPath(member).stem: member
                for member in zf.namelist()
                if member.endswith(".txt") and not member.startswith("__MACOSX")
            }

    def names(self) -> list[str]:
        return sorted(self._members)

    def _open(self, name: str) -> AbstractContextManager[TextIO]:
        zf = zipfile.ZipFile(self.path, "r")
        return _ZipEntryStream(zf, self._members[name], self.encoding)

    def __repr__(self) -> str:
        return f"ZipSource({str(self.path)!r})"


class _ZipEntryStream(AbstractContextManager[TextIO]):
    """Text stream over one archive entry that closes the archive with it."""

    def __init__(self, zf: zipfile.ZipFile, member: str, encoding: str):
        self._zf = zf
        self._member = member
        self._encoding = encoding
        self._stream: TextIO | None = None

    def __enter__(self) -> TextIO:
        self._stream = io.TextIOWrapper(
            self._zf.open(self._member), encoding=self._encoding, newline=""
        )
        return self._stream

    def __exit__(self, *exc_info: object) -> None:
        if self._stream is not None:
            self._stream.close()
        self._zf.close()


class StreamSource(TableSource):
    """Tables backed by caller-supplied text streams.

    A table can be re-read or reopened only when its stream is seekable;
    otherwise the second pass raises ``NotSeekable``. The caller owns the
    streams and they are never closed here.
    """

    def __init__(self, streams: Mapping[str, TextIO], delimiter: str = ","):
        super().__init__(delimiter)
        self._streams = dict(streams)
        self._consumed: set[str] = set()

    def names(self) -> list[str]:
        return sorted(self._streams)

    def _open(self, name: str) -> AbstractContextManager[TextIO]:
        stream = self._streams[name]
        if stream.seekable():
            stream.seek(0)
        elif name in self._consumed:
            raise NotSeekable(name)
        self._consumed.add(name)
        return nullcontext(stream)

    def _table_rows(self, name: str) -> tuple[list[str], Callable[[], Iterator[list[str]]]]:
        if self._streams[name].seekable():
            return super()._table_rows(name)

        # one pass only: the rows continue right after the header
        with self._open(name) as stream:
            pending: Iterator[list[str]] | None = _iter_rows(stream, self.delimiter)
            header = next(pending, [])

        def rows() -> Iterator[list[str]]:
            nonlocal pending
            if pending is None:
                raise NotSeekable(name)
            data, pending = pending, None
            return data

        return header, rows

    def __repr__(self) -> str:
        return f"StreamSource({self.names()!r})"


def open_source(path: Path, delimiter: str = ",", encoding: str = "utf-8-sig") -> TableSource:
    """Open a GTFS directory or ZIP file as a table source.

    Raises:
        FileNotFoundError: If the path doesn't exist.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"GTFS path not found: {path}")
    if path.is_file() and path.suffix.lower() == ".zip":
        return ZipSource(path, delimiter, encoding)
    return DirectorySource(path, delimiter, encoding)
