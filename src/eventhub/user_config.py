"""User configuration: TOML loading, validation, and template auto-creation."""

from __future__ import annotations

import pathlib
import re
import sys
import tomllib


CONFIG_TEMPLATE = """\
# Path to the event dataset (.json, .yaml or .yml).
# data_path = "assets/data/events.json"

# Number of featured rotation columns (default: 3).
# featured_buckets = 3

# Fractional margin added around map markers (default: 0.2).
# map_padding = 0.2

# Saved searches: named queries callable via 'eventhub sc <name>'
# Each saved search is an array of CLI arguments.
# Example:
# [searches]
# free-berlin = ["--search", "berlin", "--price", "free"]
# emea = ["--region", "EMEA"]
"""

_SEARCH_NAME_RE = re.compile(r"^[a-zA-Z0-9-]+$")


def _fail(message: str) -> None:
    print(f"Error: {message}", file=sys.stderr)
    raise SystemExit(2)


def ensure_config(path: pathlib.Path) -> None:
    """Create config file with template if it does not exist."""
    if path.is_file():
        return
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(CONFIG_TEMPLATE, encoding="utf-8")


def load_config(path: pathlib.Path) -> dict:
    """Read and parse a TOML config file.  A missing file is an empty config."""
    if not path.is_file():
        return {}
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as exc:
        print(f"Error: malformed config file {path}: {exc}", file=sys.stderr)
        raise SystemExit(2) from exc


def validate_config(config: dict) -> None:
    """Validate value types and the searches table in the parsed config."""
    data_path = config.get("data_path")
    if data_path is not None and not isinstance(data_path, str):
        _fail("data_path must be a string.")

    buckets = config.get("featured_buckets")
    if buckets is not None:
        if isinstance(buckets, bool) or not isinstance(buckets, int) or buckets < 1:
            _fail("featured_buckets must be an integer of at least 1.")

    padding = config.get("map_padding")
    if padding is not None:
        if isinstance(padding, bool) or not isinstance(padding, (int, float)) or padding < 0:
            _fail("map_padding must be a non-negative number.")

    searches = config.get("searches")
    if searches is None:
        return
    if not isinstance(searches, dict):
        _fail("[searches] must be a table.")
    for name, value in searches.items():
        if not _SEARCH_NAME_RE.match(name):
            _fail(
                f"saved search name '{name}' is invalid. "
                "Use only letters, digits, and hyphens."
            )
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            _fail(f"saved search '{name}' must be an array of strings.")


def get_data_path(config: dict) -> str | None:
    """Return the data_path value from config, if present."""
    return config.get("data_path")


def get_featured_buckets(config: dict) -> int | None:
    return config.get("featured_buckets")


def get_map_padding(config: dict) -> float | None:
    padding = config.get("map_padding")
    return float(padding) if padding is not None else None


def get_searches(config: dict) -> dict[str, list[str]]:
    """Return the saved searches mapping from config."""
    return config.get("searches", {})
