"""Tests for stop and route filters."""

from pathlib import Path

import pytest

from gtfs_feed.data.reader import read_feed
from gtfs_feed.data.writer import write_feed
from gtfs_feed.filters import (
    filter_by_bounding_box,
    filter_by_routes,
    filter_by_stops,
    route_ids_for,
    stop_ids_for,
    trip_ids_for,
)
from gtfs_feed.models.feed import Feed
from gtfs_feed.models.gtfs import Stop, Transfer
from gtfs_feed.validation import validate


def _ids(collection) -> set[str]:
    return set(collection.keys())


class TestFilterByStops:
    """Tests for filter_by_stops."""

    def test_single_stop(self, sample_feed: Feed) -> None:
        """Trips visiting the stop are kept whole, with their dependencies."""
        filtered = filter_by_stops(sample_feed, ["BULLFROG"])

        assert _ids(filtered.trips) == {"AB1", "AB2", "BFC1", "BFC2"}
        assert _ids(filtered.stops) == {"BULLFROG", "BEATTY_AIRPORT", "FUR_CREEK_RES"}
        assert _ids(filtered.routes) == {"AB", "BFC"}
        assert _ids(filtered.agencies) == {"DTA"}
        assert set(filtered.shapes.group_keys()) == {"shape_1", "shape_2", "shape_6", "shape_7"}
        assert _ids(filtered.calendars) == {"FULLW"}
        assert len(filtered.calendar_dates) == 1
        assert len(filtered.stop_times) == 8
        assert _ids(filtered.fare_attributes) == {"p"}
        assert {rule.route_id for rule in filtered.fare_rules} == {"AB", "BFC"}
        assert len(filtered.frequencies) == 0

    def test_predicate_selector(self, sample_feed: Feed) -> None:
        """A predicate on Stop selects like an id collection."""
        by_predicate = filter_by_stops(sample_feed, lambda stop: stop.stop_id == "BULLFROG")
        by_ids = filter_by_stops(sample_feed, {"BULLFROG"})
        assert by_predicate.row_counts() == by_ids.row_counts()

    def test_all_stops_keeps_everything(self, sample_feed: Feed) -> None:
        """Selecting every stop keeps every row."""
        filtered = filter_by_stops(sample_feed, lambda stop: True)
        assert filtered.row_counts() == sample_feed.row_counts()

    def test_no_stops(self, sample_feed: Feed) -> None:
        """An empty selection gives an empty feed."""
        filtered = filter_by_stops(sample_feed, [])
        assert sum(filtered.row_counts().values()) == 0

    def test_output_is_valid(self, sample_feed: Feed) -> None:
        """The extracted feed is referentially closed."""
        assert validate(filter_by_stops(sample_feed, ["BULLFROG"]))
        assert validate(filter_by_stops(sample_feed, ["NANAA", "AMV"]))

    def test_input_unchanged(self, sample_feed: Feed) -> None:
        """Filtering neither removes rows from nor aliases the input."""
        before = sample_feed.row_counts()
        filtered = filter_by_stops(sample_feed, ["BULLFROG"])
        filtered.stops.get("BULLFROG").stop_name = "Changed"

        assert sample_feed.row_counts() == before
        assert sample_feed.stops.get("BULLFROG").stop_name == "Bullfrog (Demo)"

    def test_unvisited_stop_kept(self, sample_feed: Feed) -> None:
        """A selected stop without trips is kept on its own."""
        sample_feed.stops.add(
            Stop(stop_id="LONELY", stop_name="Lonely", stop_lat=36.0, stop_lon=-116.0)
        )
        filtered = filter_by_stops(sample_feed, ["LONELY"])

        assert _ids(filtered.stops) == {"LONELY"}
        assert len(filtered.trips) == 0

    def test_parent_station_kept(self, sample_feed: Feed) -> None:
        """Parent stations of kept stops come along."""
        sample_feed.stops.add(
            Stop(
                stop_id="BULLFROG_STATION",
                stop_name="Bullfrog station",
                stop_lat=36.88108,
                stop_lon=-116.81797,
                location_type=1,
            )
        )
        sample_feed.stops.get("BULLFROG").parent_station = "BULLFROG_STATION"

        filtered = filter_by_stops(sample_feed, ["BEATTY_AIRPORT"])
        assert "BULLFROG_STATION" in filtered.stops
        assert validate(filtered)

    def test_blank_route_agency_keeps_agency(
        self, minimal_gtfs_dir: Path, tmp_path: Path
    ) -> None:
        """Routes without agency_id keep the feed's agency so the output reads back."""
        (minimal_gtfs_dir / "routes.txt").write_text(
            "route_id,agency_id,route_short_name,route_type\n24,,24,3\n"
        )
        feed = read_feed(minimal_gtfs_dir, strict=True)
        filtered = filter_by_stops(feed, ["BERRI"])
        assert _ids(filtered.agencies) == {"STM"}

        out_dir = tmp_path / "filtered"
        write_feed(filtered, out_dir)
        reread = read_feed(out_dir, strict=True)
        assert _ids(reread.agencies) == {"STM"}
        assert _ids(reread.trips) == {"TRIP1"}
        assert validate(reread)

    def test_transfers_need_both_ends(self, sample_feed: Feed) -> None:
        """Transfers are kept only when both stops are kept."""
        sample_feed.transfers.extend(
            [
                Transfer(from_stop_id="BULLFROG", to_stop_id="BEATTY_AIRPORT", transfer_type=0),
                Transfer(from_stop_id="BULLFROG", to_stop_id="AMV", transfer_type=0),
            ]
        )
        filtered = filter_by_stops(sample_feed, ["BULLFROG"])

        assert [(t.from_stop_id, t.to_stop_id) for t in filtered.transfers] == [
            ("BULLFROG", "BEATTY_AIRPORT")
        ]


class TestFilterByRoutes:
    """Tests for filter_by_routes."""

    def test_single_route(self, sample_feed: Feed) -> None:
        """All trips of the route are kept with their dependencies."""
        filtered = filter_by_routes(sample_feed, ["AAMV"])

        assert _ids(filtered.routes) == {"AAMV"}
        assert _ids(filtered.trips) == {"AAMV1", "AAMV2", "AAMV3", "AAMV4"}
        assert _ids(filtered.stops) == {"BEATTY_AIRPORT", "AMV"}
        assert _ids(filtered.calendars) == {"WE"}
        assert len(filtered.calendar_dates) == 0
        assert len(filtered.shapes) == 0
        assert _ids(filtered.fare_attributes) == {"a"}
        assert validate(filtered)

    def test_route_predicate(self, sample_feed: Feed) -> None:
        """A predicate on Route can select by any attribute."""
        filtered = filter_by_routes(sample_feed, lambda route: route.route_short_name == "40")

        assert _ids(filtered.trips) == {"CITY1", "CITY2"}
        assert len(filtered.frequencies) == 10
        assert _ids(filtered.stops) == {"STAGECOACH", "NANAA", "NADAV", "DADAN", "EMSI"}

    def test_all_routes_keeps_everything(self, sample_feed: Feed) -> None:
        """Selecting every route keeps every row."""
        filtered = filter_by_routes(sample_feed, lambda route: True)
        assert filtered.row_counts() == sample_feed.row_counts()


class TestFilterByBoundingBox:
    """Tests for filter_by_bounding_box."""

    def test_box_around_one_stop(self, sample_feed: Feed) -> None:
        """A box around Bullfrog selects like the stop id itself."""
        filtered = filter_by_bounding_box(sample_feed, 36.89, -116.83, 36.875, -116.81)
        by_ids = filter_by_stops(sample_feed, ["BULLFROG"])

        assert _ids(filtered.trips) == {"AB1", "AB2", "BFC1", "BFC2"}
        assert filtered.row_counts() == by_ids.row_counts()
        assert validate(filtered)

    def test_edges_inclusive(self, sample_feed: Feed) -> None:
        """A stop lying exactly on the box edge is inside."""
        filtered = filter_by_bounding_box(sample_feed, 36.88108, -116.81797, 36.88108, -116.81797)
        assert "BULLFROG" in filtered.stops

    def test_empty_area(self, sample_feed: Feed) -> None:
        """A box without stops gives an empty feed."""
        filtered = filter_by_bounding_box(sample_feed, 1.0, 1.0, 0.0, 2.0)
        assert sum(filtered.row_counts().values()) == 0

    @pytest.mark.parametrize(
        "box",
        [(36.875, -116.83, 36.89, -116.81), (36.89, -116.81, 36.875, -116.83)],
    )
    def test_inverted_box(
        self, sample_feed: Feed, box: tuple[float, float, float, float]
    ) -> None:
        """top below bottom or left east of right is rejected."""
        with pytest.raises(ValueError):
            filter_by_bounding_box(sample_feed, *box)


class TestSelectionHelpers:
    """Tests for the selection helpers."""

    def test_ids_for_stop(self, sample_feed: Feed) -> None:
        """Stops, trips and routes touched by a stop selection."""
        assert stop_ids_for(sample_feed, ["BULLFROG", "UNKNOWN"]) == {"BULLFROG"}
        assert trip_ids_for(sample_feed, ["FUR_CREEK_RES"]) == {"BFC1", "BFC2"}
        assert route_ids_for(sample_feed, ["STAGECOACH"]) == {"STBA", "CITY"}
