#!/usr/bin/env python3
"""Browse a directory of events: search, featured rotation and map framing.

- Only current or upcoming events are shown (end date today or later)
- Free-text search over name, location and description (case-insensitive)
- Structured filters: --region, --date (start date), --price
- List, map and status are always computed from the same filtered result
- Featured events rotate across round-robin columns (default 3)
- CLI:
  - eventhub [filters]        list matching events, with map summary
  - eventhub featured         featured rotation
  - eventhub map [filters]    map markers and framing
  - eventhub regions          regions present in the dataset
  - eventhub browse           interactive search session
  - eventhub sc <name>        run a saved search from the config file
"""

from __future__ import annotations

import argparse
import json
import logging
import pathlib
import sys
from datetime import datetime, timezone

from eventhub import config
from eventhub.browse import cmd_browse
from eventhub.config import DEFAULT_CONFIG_PATH, FEATURED_BUCKETS, MAP_PADDING
from eventhub.event_store import (
    DiskProvider,
    EventStore,
    LoadError,
    Query,
    available_regions,
)
from eventhub.models import parse_iso_date
from eventhub.render import SnapshotMap, SnapshotView, TerminalMap, TerminalView
from eventhub.sync import SyncState, ViewSynchronizer
from eventhub.user_config import (
    ensure_config,
    get_data_path,
    get_featured_buckets,
    get_map_padding,
    get_searches,
    load_config,
    validate_config,
)


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def _add_query_args(parser: argparse.ArgumentParser) -> None:
    """Register filter flags on *parser*."""
    parser.add_argument(
        "--search",
        default=None,
        help="Only show events whose name, location or description contains this text (case-insensitive).",
    )
    parser.add_argument(
        "--region",
        default=None,
        help="Only show events in this region (exact match).",
    )
    parser.add_argument(
        "--date",
        default=None,
        metavar="YYYY-MM-DD",
        help="Only show events starting on this date.",
    )
    parser.add_argument(
        "--price",
        choices=["free", "paid"],
        default=None,
        help="Only show free or paid events.",
    )
    parser.add_argument(
        "--top",
        type=_positive_int,
        default=None,
        help="How many events to print (default: all).",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        dest="json_output",
        help="Print one JSON document instead of text.",
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description=(
            "Search a directory of current and upcoming events.\n"
            "\n"
            "Subcommands:\n"
            "  eventhub featured   Show the featured rotation.\n"
            "  eventhub map        Show map markers and framing.\n"
            "  eventhub regions    List regions in the dataset.\n"
            "  eventhub browse     Interactive search session.\n"
            "  eventhub sc NAME    Run a saved search from the config file.\n"
            "  eventhub [options]  List matching events (default).\n"
            "\n"
            "Data: <data>, a .json or .yaml list of events"
        ),
        epilog=(
            "Examples:\n"
            "  eventhub --data events.json\n"
            "    List every current or upcoming event.\n"
            "\n"
            "  eventhub --search berlin --price free\n"
            "    Free events with 'berlin' in the name, location or description.\n"
            "\n"
            "  eventhub --region EMEA --json\n"
            "    EMEA events, with map framing, as JSON.\n"
            "\n"
            "  eventhub featured --buckets 2\n"
            "    Featured events dealt into two columns."
        ),
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument(
        "--data",
        default=None,
        help=f"Event data file (default: {config.DEFAULT_DATA_PATH}).",
    )
    parser.add_argument(
        "--config",
        default=None,
        help=f"Config file (default: {DEFAULT_CONFIG_PATH}).",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Log loading and synchronization details to stderr.",
    )
    subparsers = parser.add_subparsers(dest="command")
    featured_parser = subparsers.add_parser(
        "featured",
        help="Show the featured rotation.",
    )
    featured_parser.add_argument(
        "--buckets",
        type=int,
        default=None,
        help=f"Number of rotation columns (default: {FEATURED_BUCKETS}).",
    )
    featured_parser.add_argument(
        "--json",
        action="store_true",
        dest="json_output",
        help="Print the columns as JSON.",
    )
    map_parser = subparsers.add_parser(
        "map",
        help="Show map markers and framing for matching events.",
    )
    _add_query_args(map_parser)
    subparsers.add_parser(
        "regions",
        help="List regions in the dataset.",
    )
    browse_parser = subparsers.add_parser(
        "browse",
        help="Interactive search session.",
    )
    browse_parser.add_argument(
        "--top",
        type=_positive_int,
        default=None,
        help="How many events to print per search (default: all).",
    )
    sc_parser = subparsers.add_parser(
        "sc",
        help="Run a saved search from the config file.",
    )
    sc_parser.add_argument("name", help="Saved search name.")
    _add_query_args(parser)
    return parser.parse_args(argv)


def _build_query(args: argparse.Namespace) -> Query:
    return Query(
        text=args.search or "",
        region=args.region,
        date=args.date,
        price=args.price,
    )


def _check_date(args: argparse.Namespace) -> bool:
    if args.date is None:
        return True
    try:
        parse_iso_date(args.date)
    except ValueError:
        print(f"Invalid --date format: '{args.date}'. Use YYYY-MM-DD.", file=sys.stderr)
        return False
    return True


def _make_store() -> EventStore:
    return EventStore(DiskProvider(config.get_data_path()))


def cmd_query(args: argparse.Namespace, settings: dict) -> int:
    """List matching events, with the map summary from the same result."""
    if not _check_date(args):
        return 2

    view = SnapshotView()
    map_widget = SnapshotMap()
    sync = ViewSynchronizer(
        view,
        map_widget,
        bucket_count=settings["featured_buckets"],
        map_padding=settings["map_padding"],
    )
    query = _build_query(args)
    state = sync.load(_make_store().load)
    if not query.is_empty:
        sync.on_query_change(query)

    if args.json_output:
        output = {
            "type": "query",
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "state": state.value,
            "query": query.model_dump(mode="json"),
            **view.to_dict(),
            "map": map_widget.to_dict(),
        }
        print(json.dumps(output, indent=2))
        return 1 if state is SyncState.ERROR else 0

    # Paint the final snapshot only; the load pass before a narrower query
    # would otherwise print the unfiltered list first.
    terminal = TerminalView(top=args.top)
    terminal.render_status(view.status or "")
    terminal.render_list(view.items)
    terminal.render_map_status(view.map_status or "")
    if state is SyncState.ERROR:
        if view.status != config.LOAD_FAILED_STATUS:
            print(config.LOAD_FAILED_STATUS, file=sys.stderr)
        return 1
    return 0


def cmd_featured(args: argparse.Namespace, settings: dict) -> int:
    buckets = args.buckets if args.buckets is not None else settings["featured_buckets"]
    if buckets < 1:
        print("--buckets must be at least 1.", file=sys.stderr)
        return 2
    view = SnapshotView()
    sync = ViewSynchronizer(view, SnapshotMap(), bucket_count=buckets)
    state = sync.load(_make_store().load)
    if state is SyncState.ERROR:
        print(config.LOAD_FAILED_STATUS, file=sys.stderr)
        return 1
    if args.json_output:
        print(json.dumps({"type": "featured", "featured": view.to_dict()["featured"]}, indent=2))
        return 0
    TerminalView().render_featured(view.buckets)
    return 0


def cmd_map(args: argparse.Namespace, settings: dict) -> int:
    if not _check_date(args):
        return 2
    view = SnapshotView()
    sync = ViewSynchronizer(
        view,
        SnapshotMap(),
        bucket_count=settings["featured_buckets"],
        map_padding=settings["map_padding"],
    )
    state = sync.load(_make_store().load)
    snapshot = sync.on_query_change(_build_query(args))
    projection = snapshot.projection
    if args.json_output:
        print(json.dumps({"type": "map", **projection.to_dict()}, indent=2))
    else:
        terminal = TerminalMap(show_markers=True)
        print(f"Map: {projection.status}")
        terminal.set_markers(projection.points)
        if projection.bounds is not None:
            terminal.fit_bounds(projection.bounds)
        elif projection.view is not None:
            terminal.set_view(projection.view.center, projection.view.zoom)
    if state is SyncState.ERROR:
        print(config.LOAD_FAILED_STATUS, file=sys.stderr)
        return 1
    return 0


def cmd_regions() -> int:
    try:
        items = _make_store().load()
    except LoadError as err:
        print(str(err), file=sys.stderr)
        return 1
    for region in available_regions(items):
        print(region)
    return 0


def _resolve_settings(args: argparse.Namespace, user_config: dict) -> dict:
    data_path = args.data or get_data_path(user_config)
    config.configure(data_path=data_path)
    buckets = get_featured_buckets(user_config)
    padding = get_map_padding(user_config)
    return {
        "featured_buckets": buckets if buckets is not None else FEATURED_BUCKETS,
        "map_padding": padding if padding is not None else MAP_PADDING,
    }


def _configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    _configure_logging(args.debug)

    config_path = pathlib.Path(args.config).expanduser() if args.config else DEFAULT_CONFIG_PATH
    if args.config is None:
        ensure_config(config_path)
    user_config = load_config(config_path)
    validate_config(user_config)

    if args.command == "sc":
        searches = get_searches(user_config)
        if args.name not in searches:
            available = ", ".join(sorted(searches)) or "none"
            print(
                f"Unknown saved search '{args.name}'. Available: {available}.",
                file=sys.stderr,
            )
            return 2
        prefix = []
        if args.data:
            prefix += ["--data", args.data]
        if args.config:
            prefix += ["--config", args.config]
        if args.debug:
            prefix.append("--debug")
        return main(prefix + searches[args.name])

    settings = _resolve_settings(args, user_config)
    if args.command == "featured":
        return cmd_featured(args, settings)
    if args.command == "map":
        return cmd_map(args, settings)
    if args.command == "regions":
        return cmd_regions()
    if args.command == "browse":
        return cmd_browse(
            _make_store(),
            bucket_count=settings["featured_buckets"],
            map_padding=settings["map_padding"],
            top=args.top,
        )
    return cmd_query(args, settings)


if __name__ == "__main__":
    raise SystemExit(main())
