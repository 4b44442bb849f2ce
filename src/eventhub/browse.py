"""Interactive browse REPL for the ``eventhub browse`` command."""

from __future__ import annotations

import sys

from eventhub.event_store import EventStore, Query, available_regions
from eventhub.models import parse_iso_date
from eventhub.render import TerminalMap, TerminalView
from eventhub.sync import SyncState, ViewSynchronizer

HELP_TEXT = """\
Type text to search names, locations and descriptions.
  /region NAME       filter by region (no NAME clears it)
  /date YYYY-MM-DD   filter by start date (no date clears it)
  /price free|paid   filter by price (no value clears it)
  /clear             drop every filter
  /regions           list regions
  /featured          show the featured rotation
  /exit              quit"""

_FIELD_COMMANDS = {
    "/region": "region",
    "/date": "date",
    "/price": "price",
}


def parse_line(line: str, current: Query) -> Query | None:
    """Translate one input line into the next Query, or None for non-query commands.

    Raises ValueError for a malformed /date argument.
    """
    message = line.strip()
    if not message.startswith("/"):
        return current.replace(text=message)
    command, _, arg = message.partition(" ")
    field = _FIELD_COMMANDS.get(command.lower())
    if field is None:
        return None
    value = arg.strip() or None
    if field == "date" and value is not None:
        try:
            parse_iso_date(value)
        except ValueError as err:
            raise ValueError(f"Invalid date: '{value}'. Use YYYY-MM-DD.") from err
    return current.replace(**{field: value})


def cmd_browse(
    store: EventStore,
    *,
    bucket_count: int,
    map_padding: float,
    top: int | None = None,
) -> int:
    print("eventhub browse (Ctrl+D to exit)")
    view = TerminalView(top=top)
    sync = ViewSynchronizer(
        view,
        TerminalMap(),
        bucket_count=bucket_count,
        map_padding=map_padding,
    )
    # Handlers exist before the load starts; input works even if it fails.
    if sync.load(store.load) is SyncState.ERROR:
        print("Search still works, over an empty dataset.", file=sys.stderr)

    while True:
        try:
            line = input("eventhub> ")
        except (EOFError, KeyboardInterrupt):
            print()
            return 0

        message = line.strip()
        if message in ("/exit", "/quit"):
            return 0
        if message in ("/help", "/?"):
            print(HELP_TEXT)
            continue
        if message == "/clear":
            sync.on_clear()
            continue
        if message == "/regions":
            regions = available_regions(sync.items)
            print("\n".join(regions) if regions else "No regions.")
            continue
        if message == "/featured":
            sync.refresh_featured()
            continue

        try:
            query = parse_line(line, sync.query)
        except ValueError as err:
            print(str(err), file=sys.stderr)
            continue
        if query is None:
            print(f"Unknown command: {message.split()[0]}. Type /help.", file=sys.stderr)
            continue
        sync.on_query_change(query)
