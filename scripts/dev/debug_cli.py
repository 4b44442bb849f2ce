#!/usr/bin/env python3
"""
Run eventhub CLI flows under debugger.

Usage from IntelliJ IDEA / PyCharm:
- Open this file and run with the debugger.
- Set breakpoints in:
  - sync.py
  - event_store.py
  - map_projection.py
"""

import sys

from eventhub.cli import main


if __name__ == "__main__":
    # Change argv to simulate different CLI invocations.

    # Free-text search:
    sys.argv = ["eventhub", "--debug", "--data", "tests/fixtures/events.json", "--search", "tech"]

    # Structured filters:
    # sys.argv = ["eventhub", "--data", "tests/fixtures/events.json", "--region", "EMEA", "--price", "free"]

    # JSON output:
    # sys.argv = ["eventhub", "--data", "tests/fixtures/events.json", "--json"]

    # Featured rotation:
    # sys.argv = ["eventhub", "--data", "tests/fixtures/events.json", "featured", "--buckets", "2"]

    # Map framing:
    # sys.argv = ["eventhub", "--data", "tests/fixtures/events.json", "map"]

    raise SystemExit(main())
