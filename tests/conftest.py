import shutil
from pathlib import Path

import pytest

from gtfs_feed.data.config import get_settings
from gtfs_feed.data.reader import read_feed
from gtfs_feed.models.feed import Feed

SAMPLE_FEED_DIR = Path(__file__).parent / "data" / "sample-feed"


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    """Isolate tests from GTFS_* environment variables and any local .env file."""
    for name in ("GTFS_STRICT", "GTFS_DELIMITER", "GTFS_ENCODING", "GTFS_MAX_SHAPE_TOLERANCE"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def sample_feed_dir(tmp_path: Path) -> Path:
    """Copy the demo feed to a writable directory."""
    gtfs_dir = tmp_path / "sample-feed"
    shutil.copytree(SAMPLE_FEED_DIR, gtfs_dir)
    return gtfs_dir


@pytest.fixture
def sample_feed() -> Feed:
    """The demo feed, read in strict mode."""
    return read_feed(SAMPLE_FEED_DIR, strict=True)


@pytest.fixture
def minimal_gtfs_dir(tmp_path: Path) -> Path:
    """Create a GTFS directory with only the required files."""
    gtfs_dir = tmp_path / "gtfs"
    gtfs_dir.mkdir()

    # agency.txt
    (gtfs_dir / "agency.txt").write_text(
        "agency_id,agency_name,agency_url,agency_timezone\n"
        "STM,Societe de transport de Montreal,http://www.stm.info,America/Montreal\n"
    )

    # stops.txt
    (gtfs_dir / "stops.txt").write_text(
        "stop_id,stop_name,stop_lat,stop_lon\n"
        "BERRI,Berri-UQAM,45.515,-73.561\n"
        "51001,Sherbrooke / Saint-Denis,45.518,-73.568\n"
    )

    # routes.txt
    (gtfs_dir / "routes.txt").write_text(
        "route_id,agency_id,route_short_name,route_type\n24,STM,24,3\n"
    )

    # trips.txt
    (gtfs_dir / "trips.txt").write_text("route_id,service_id,trip_id\n24,WEEKDAY,TRIP1\n")

    # stop_times.txt
    (gtfs_dir / "stop_times.txt").write_text(
        "trip_id,arrival_time,departure_time,stop_id,stop_sequence\n"
        "TRIP1,08:00:00,08:00:00,BERRI,1\n"
        "TRIP1,08:05:00,08:05:00,51001,2\n"
    )

    # calendar.txt
    (gtfs_dir / "calendar.txt").write_text(
        "service_id,monday,tuesday,wednesday,thursday,friday,saturday,sunday,start_date,end_date\n"
        "WEEKDAY,1,1,1,1,1,0,0,20240101,20241231\n"
    )

    return gtfs_dir
