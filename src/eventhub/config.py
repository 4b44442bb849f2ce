"""Shared configuration values for eventhub modules."""

from __future__ import annotations

import pathlib

DEFAULT_DATA_PATH = pathlib.Path("assets") / "data" / "events.json"
DEFAULT_CONFIG_PATH = pathlib.Path.home() / ".eventhub" / "config.toml"
_data_path_override: pathlib.Path | None = None

FEATURED_BUCKETS = 3
MAP_PADDING = 0.2
DEFAULT_MAP_CENTER = (0.0, 0.0)
DEFAULT_MAP_ZOOM = 2
PLACEHOLDER_LOGO = "assets/img/event-placeholder.svg"

DATA_SUFFIXES_JSON = (".json",)
DATA_SUFFIXES_YAML = (".yaml", ".yml")

LOAD_FAILED_STATUS = "Failed to load events."
NO_MATCHES_STATUS = "No matches"
NO_MAPPABLE_STATUS = "No mappable events"
NO_FEATURED_STATUS = "No featured events."


def configure(*, data_path: str | None = None) -> None:
    global _data_path_override
    if data_path is not None:
        _data_path_override = pathlib.Path(data_path).expanduser()


def get_data_path() -> pathlib.Path:
    if _data_path_override is not None:
        return _data_path_override
    return DEFAULT_DATA_PATH


def _reset() -> None:
    """Reset runtime overrides. For testing only."""
    global _data_path_override
    _data_path_override = None
