"""Tests for header resolution and field aliases."""

import pytest

from gtfs_feed.data.field_map import FieldMap, build_column_index, clean_header_name
from gtfs_feed.data.schema import get_schema
from gtfs_feed.errors import MissingRequiredField


class TestFieldMap:
    """Tests for FieldMap."""

    def test_identity_by_default(self) -> None:
        """Unmapped names map to themselves both ways."""
        field_map = FieldMap()
        assert field_map.get_actual("stop_id") == "stop_id"
        assert field_map.get_expected("stop_id") == "stop_id"
        assert len(field_map) == 0

    def test_add_alias(self) -> None:
        """An alias resolves in both directions."""
        field_map = FieldMap({"stop_id": "id"})
        assert field_map.get_actual("stop_id") == "id"
        assert field_map.get_expected("id") == "stop_id"
        assert len(field_map) == 1

    def test_duplicate_alias_rejected(self) -> None:
        """A name can only be mapped once."""
        field_map = FieldMap({"stop_id": "id"})
        with pytest.raises(ValueError):
            field_map.add("stop_id", "identifier")
        with pytest.raises(ValueError):
            field_map.add("stop_code", "id")

    def test_clear(self) -> None:
        """Clearing restores identity mapping."""
        field_map = FieldMap({"stop_id": "id"})
        field_map.clear()
        assert field_map.get_actual("stop_id") == "stop_id"
        assert len(field_map) == 0


class TestCleanHeaderName:
    """Tests for header cleanup."""

    def test_strips_bom_whitespace_and_quotes(self) -> None:
        """BOM, whitespace and quotes are removed."""
        assert clean_header_name("\ufeffagency_id") == "agency_id"
        assert clean_header_name(' "stop_name" ') == "stop_name"


class TestBuildColumnIndex:
    """Tests for build_column_index."""

    def test_positions_follow_header_order(self) -> None:
        """Columns may appear in any order; extra columns are ignored."""
        schema = get_schema("stops")
        index = build_column_index(
            schema, ["stop_lon", "extra", "stop_name", "stop_lat", "stop_id"]
        )
        assert index.positions == {"stop_lon": 0, "stop_name": 2, "stop_lat": 3, "stop_id": 4}
        assert index.canonical_name(1) is None
        assert index.values(["1.5", "x", "Name", "2.5", "S1"]) == {
            "stop_lon": "1.5",
            "stop_name": "Name",
            "stop_lat": "2.5",
            "stop_id": "S1",
        }

    def test_qualified_headers(self) -> None:
        """Prefixed headers resolve to the longest matching canonical name."""
        schema = get_schema("stops")
        index = build_column_index(
            schema, ["stops.stop_id", "stops.stop_name", "stops.stop_lat", "stops.stop_lon"]
        )
        assert index.actual_name("stop_id") == "stops.stop_id"
        assert index.actual_name("stop_name") == "stops.stop_name"

    def test_alias(self) -> None:
        """Aliases map non-standard headers to canonical names."""
        schema = get_schema("stops")
        field_map = FieldMap({"stop_lat": "latitude", "stop_lon": "longitude"})
        index = build_column_index(
            schema, ["stop_id", "stop_name", "latitude", "longitude"], field_map
        )
        assert index.positions["stop_lat"] == 2
        assert index.actual_name("stop_lon") == "longitude"

    def test_missing_required_field(self) -> None:
        """A missing required column raises MissingRequiredField."""
        schema = get_schema("stops")
        with pytest.raises(MissingRequiredField) as exc_info:
            build_column_index(schema, ["stop_id", "stop_name", "stop_lat"])
        assert exc_info.value.table == "stops"
        assert exc_info.value.field == "stop_lon"

    def test_missing_required_field_reports_alias(self) -> None:
        """The error names the header the feed was expected to use."""
        schema = get_schema("stops")
        field_map = FieldMap({"stop_lon": "longitude"})
        with pytest.raises(MissingRequiredField) as exc_info:
            build_column_index(schema, ["stop_id", "stop_name", "stop_lat"], field_map)
        assert exc_info.value.field == "longitude"
