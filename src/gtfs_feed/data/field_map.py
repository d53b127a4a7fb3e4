"""Mapping between canonical GTFS field names and the headers found in a file."""

from dataclasses import dataclass, field

from gtfs_feed.data.schema import TableSchema
from gtfs_feed.errors import MissingRequiredField


class FieldMap:
    """Bidirectional alias table between canonical and actual field names.

    Fields without an explicit alias map to themselves.
    """

    def __init__(self, aliases: dict[str, str] | None = None):
        self._expected_to_actual: dict[str, str] = {}
        self._actual_to_expected: dict[str, str] = {}
        for expected, actual in (aliases or {}).items():
            self.add(expected, actual)

    def add(self, expected: str, actual: str) -> None:
        """Map a canonical field name to the header used by a feed.

        Raises:
            ValueError: If either name is already mapped.
        """
        if expected in self._expected_to_actual or actual in self._actual_to_expected:
            raise ValueError(f"Field already mapped: {expected} -> {actual}")
        self._expected_to_actual[expected] = actual
        self._actual_to_expected[actual] = expected

    def clear(self) -> None:
        self._expected_to_actual.clear()
        self._actual_to_expected.clear()

    def get_actual(self, expected: str) -> str:
        return self._expected_to_actual.get(expected, expected)

    def get_expected(self, actual: str) -> str:
        return self._actual_to_expected.get(actual, actual)

    def __len__(self) -> int:
        return len(self._expected_to_actual)


@dataclass
class ColumnIndex:
    """Resolved column positions for one table, computed once per table."""

    table: str
    header: list[str]
    positions: dict[str, int] = field(default_factory=dict)  # canonical -> column

    def actual_name(self, canonical: str) -> str | None:
        idx = self.positions.get(canonical)
        return None if idx is None else self.header[idx]

    def canonical_name(self, column: int) -> str | None:
        for name, idx in self.positions.items():
            if idx == column:
                return name
        return None

    def values(self, row: list[str]) -> dict[str, str | None]:
        """Map a raw row to canonical field names; unmapped fields are absent."""
        return {
            name: row[idx] if idx < len(row) else None for name, idx in self.positions.items()
        }


def clean_header_name(name: str) -> str:
    """Strip whitespace, a byte-order mark and surrounding quotes from a header."""
    cleaned = name.replace("\ufeff", "").strip()
    if len(cleaned) >= 2 and cleaned[0] == '"' and cleaned[-1] == '"':
        cleaned = cleaned[1:-1].strip()
    return cleaned


def _normalize_header(name: str, expected: set[str]) -> str:
    """Normalize a header against the canonical names of a table.

    Exact matches win; otherwise a qualified header such as ``stops.stop_id``
    resolves to the longest canonical name it ends with.
    """
    if name in expected:
        return name
    suffix_matches = [col for col in expected if name.endswith(("." + col, ":" + col, " " + col))]
    if suffix_matches:
        return max(suffix_matches, key=len)
    return name


def build_column_index(
    schema: TableSchema, header: list[str], field_map: FieldMap | None = None
) -> ColumnIndex:
    """Resolve a table header against a schema.

    Args:
        schema: Schema of the table being read.
        header: Header row as found in the source.
        field_map: Optional aliases for headers that differ from the canonical names.

    Returns:
        The column index for the table.

    Raises:
        MissingRequiredField: If a required canonical field has no column.
    """
    if field_map is None:
        field_map = FieldMap()
    expected = set(schema.field_names)
    index = ColumnIndex(table=schema.name, header=list(header))

    for idx, raw_name in enumerate(header):
        name = field_map.get_expected(clean_header_name(raw_name))
        name = _normalize_header(name, expected)
        if name in expected and name not in index.positions:
            index.positions[name] = idx

    for name in schema.required_fields:
        if name not in index.positions:
            raise MissingRequiredField(schema.name, field_map.get_actual(name))
    return index
