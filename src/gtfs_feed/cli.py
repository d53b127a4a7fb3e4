import argparse
import logging
from pathlib import Path

from gtfs_feed.data.reader import read_feed
from gtfs_feed.data.writer import write_feed
from gtfs_feed.errors import ReadError, ShapeMatchError
from gtfs_feed.filters import filter_by_bounding_box, filter_by_routes, filter_by_stops
from gtfs_feed.matching.shape_matcher import find_stops_at_shape, match_trips
from gtfs_feed.validation import validate_feed

logger = logging.getLogger(__name__)


def run_validate(args: argparse.Namespace) -> int:
    """Read a feed and report integrity violations."""
    feed = read_feed(args.gtfs_path, strict=args.strict)
    result = validate_feed(feed)

    if result.valid:
        print(f"\nFeed is valid: {feed!r}")
        return 0

    print(f"\nFeed has {len(result.violations):,} violations:")
    for violation in result.violations:
        print(f"  [{violation.kind.value}] {violation.message}")
    return 1


def run_filter(args: argparse.Namespace) -> int:
    """Extract a sub-feed for the given stops, routes or bounding box."""
    feed = read_feed(args.gtfs_path, strict=args.strict)
    if args.stops:
        filtered = filter_by_stops(feed, args.stops)
    elif args.bbox:
        filtered = filter_by_bounding_box(feed, *args.bbox)
    else:
        filtered = filter_by_routes(feed, args.routes)

    row_counts = write_feed(filtered, args.output)
    print("\nFilter complete. Row counts:")
    for table, count in row_counts.items():
        print(f"  {table}: {count:,}")
    return 0


def run_match(args: argparse.Namespace) -> int:
    """Match trip stops to shape points and print the result."""
    feed = read_feed(args.gtfs_path, strict=args.strict)

    if args.trips and len(args.trips) == 1:
        matched = {args.trips[0]: find_stops_at_shape(feed, args.trips[0], args.max_tolerance)}
        failed: list[str] = []
    else:
        matched, failed = match_trips(feed, args.trips, args.max_tolerance)

    for trip_id, stops in matched.items():
        print(f"\n{trip_id}:")
        for stop in stops:
            print(f"  {stop.stop_id} -> shape point {stop.shape_point_sequence}")
    if failed:
        print(f"\nNo match for {len(failed):,} trips: {', '.join(failed)}")
        return 1
    return 0


def run_copy(args: argparse.Namespace) -> int:
    """Read a feed and write it back out, e.g. to convert a directory to a ZIP."""
    feed = read_feed(args.gtfs_path, strict=args.strict)
    row_counts = write_feed(feed, args.output)
    print("\nCopy complete. Row counts:")
    for table, count in row_counts.items():
        print(f"  {table}: {count:,}")
    return 0


def main(argv: list[str] | None = None) -> int:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "gtfs_path",
        type=Path,
        help="Path to GTFS directory or ZIP file",
    )
    common.add_argument(
        "--strict",
        action="store_true",
        default=None,
        help="Abort on the first invalid row (default: GTFS_STRICT env var)",
    )
    common.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    parser = argparse.ArgumentParser(
        prog="gtfs-feed",
        description="Read, validate, filter and write GTFS feeds",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # validate command
    validate_parser = subparsers.add_parser(
        "validate", parents=[common], help="Check referential integrity of a feed"
    )
    validate_parser.set_defaults(handler=run_validate)

    # filter command
    filter_parser = subparsers.add_parser(
        "filter", parents=[common], help="Extract the sub-feed serving some stops, routes or area"
    )
    filter_parser.add_argument("output", type=Path, help="Output directory or ZIP file")
    selection = filter_parser.add_mutually_exclusive_group(required=True)
    selection.add_argument("--stops", nargs="+", metavar="STOP_ID", help="Stop ids to keep")
    selection.add_argument("--routes", nargs="+", metavar="ROUTE_ID", help="Route ids to keep")
    selection.add_argument(
        "--bbox",
        nargs=4,
        type=float,
        metavar=("TOP", "LEFT", "BOTTOM", "RIGHT"),
        help="Keep stops inside this lat/lon box",
    )
    filter_parser.set_defaults(handler=run_filter)

    # match command
    match_parser = subparsers.add_parser(
        "match", parents=[common], help="Match trip stops to shape points"
    )
    match_parser.add_argument(
        "--trips",
        nargs="+",
        metavar="TRIP_ID",
        help="Trips to match (default: every trip with a shape)",
    )
    match_parser.add_argument(
        "--max-tolerance",
        type=float,
        default=None,
        help="Maximum search radius in meters (default: GTFS_MAX_SHAPE_TOLERANCE env var or 20)",
    )
    match_parser.set_defaults(handler=run_match)

    # copy command
    copy_parser = subparsers.add_parser(
        "copy", parents=[common], help="Read a feed and write it to a directory or ZIP file"
    )
    copy_parser.add_argument("output", type=Path, help="Output directory or ZIP file")
    copy_parser.set_defaults(handler=run_copy)

    args = parser.parse_args(argv)

    # Configure logging
    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        return args.handler(args)
    except (ReadError, ShapeMatchError, FileNotFoundError, ValueError) as e:
        logger.error(str(e))
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
