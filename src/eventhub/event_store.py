"""EventStore: loading and querying the event directory.

Providers handle loading mechanics (disk or memory).  Callers construct a
provider, pass it to ``EventStore``, and interact only with the store after
that.  The filter engine at the bottom of this module is pure and never
raises for any ``Query`` value.
"""

from __future__ import annotations

import datetime as dt
import json
import logging
import pathlib
from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, Protocol, Sequence

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from eventhub.config import DATA_SUFFIXES_JSON, DATA_SUFFIXES_YAML
from eventhub.models import Item, MalformedItemError, PriceClass, parse_iso_date

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class LoadError(Exception):
    """Raised when the event dataset cannot be fetched or parsed."""


# ---------------------------------------------------------------------------
# Data types
# ---------------------------------------------------------------------------

class Query(BaseModel):
    """A complete filter request.  Replaced wholesale on every input change."""

    model_config = ConfigDict(frozen=True)

    text: str = Field("", description="Case-insensitive substring matched against name, location and description.")
    region: str | None = Field(None, description="Exact region match. Empty means all regions.")
    date: dt.date | None = Field(None, description="Exact start date match (YYYY-MM-DD).")
    price: PriceClass | None = Field(None, description="Price class: 'free' or 'paid'.")

    @field_validator("text", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        return value if isinstance(value, str) else ""

    @field_validator("region", mode="before")
    @classmethod
    def _coerce_region(cls, value: Any) -> str | None:
        if isinstance(value, str) and value.strip():
            return value.strip()
        return None

    @field_validator("date", mode="before")
    @classmethod
    def _coerce_date(cls, value: Any) -> dt.date | None:
        if value is None or value == "":
            return None
        try:
            return parse_iso_date(value)
        except ValueError:
            return None

    @field_validator("price", mode="before")
    @classmethod
    def _coerce_price(cls, value: Any) -> PriceClass | None:
        if isinstance(value, PriceClass):
            return value
        if isinstance(value, str):
            try:
                return PriceClass(value.strip().lower())
            except ValueError:
                return None
        return None

    def replace(self, **changes: Any) -> Query:
        """Return a new validated Query with *changes* applied."""
        return Query.model_validate({**self.model_dump(), **changes})

    @property
    def is_empty(self) -> bool:
        return (
            not self.text.strip()
            and self.region is None
            and self.date is None
            and self.price is None
        )


@dataclass(frozen=True)
class QueryResult:
    items: tuple[Item, ...]
    total: int
    reference_date: date


# ---------------------------------------------------------------------------
# Relevance
# ---------------------------------------------------------------------------

def local_today() -> date:
    """Today's calendar date at local midnight."""
    return date.today()


def is_current_or_upcoming(item: Item, reference_date: date | None = None) -> bool:
    """True iff the item has not ended before *reference_date* (inclusive)."""
    if reference_date is None:
        reference_date = local_today()
    return item.end_date >= reference_date


# ---------------------------------------------------------------------------
# Provider protocol & implementations
# ---------------------------------------------------------------------------

class EventProvider(Protocol):
    def load(self) -> list[Item]: ...


def parse_records(records: Iterable[Any], *, source: str = "<memory>") -> list[Item]:
    """Turn raw records into Items, skipping the ones that are malformed."""
    items: list[Item] = []
    for index, record in enumerate(records):
        try:
            items.append(Item.from_dict(record))
        except MalformedItemError as err:
            logger.warning("Skipping event #%d in %s: %s", index, source, err)
    return items


class DiskProvider:
    """Reads events from a JSON or YAML file on disk."""

    def __init__(self, path: pathlib.Path) -> None:
        self._path = path

    @property
    def path(self) -> pathlib.Path:
        return self._path

    def load(self) -> list[Item]:
        if not self._path.is_file():
            raise LoadError(f"Event data not found: {self._path}")
        data = self._read()
        if isinstance(data, dict) and "events" in data:
            data = data["events"]
        if not isinstance(data, list):
            raise LoadError(
                f"Event data in {self._path} must be a list of events, "
                f"got {type(data).__name__}"
            )
        items = parse_records(data, source=str(self._path))
        logger.info("Loaded %d of %d events from %s", len(items), len(data), self._path)
        return items

    def _read(self) -> Any:
        suffix = self._path.suffix.lower()
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                if suffix in DATA_SUFFIXES_YAML:
                    return yaml.safe_load(f)
                if suffix in DATA_SUFFIXES_JSON:
                    return json.load(f)
        except (json.JSONDecodeError, yaml.YAMLError, OSError, UnicodeDecodeError) as err:
            raise LoadError(f"Cannot read event data {self._path}: {err}") from err
        raise LoadError(
            f"Unsupported event data format '{suffix}'. Use .json, .yaml or .yml."
        )


class MemoryProvider:
    """Holds events in memory.  Used by tests and dev tooling."""

    def __init__(self, items: Sequence[Item]) -> None:
        self._items = list(items)

    def load(self) -> list[Item]:
        return list(self._items)


# ---------------------------------------------------------------------------
# EventStore
# ---------------------------------------------------------------------------

class EventStore:
    """Database-like abstraction over the event dataset.

    Provider binding is fixed after construction.  Callers interact only with
    ``load()`` and ``query()``.
    """

    def __init__(self, provider: EventProvider) -> None:
        self._provider = provider

    def load(self) -> list[Item]:
        return self._provider.load()

    def query(self, query: Query, *, reference_date: date | None = None) -> QueryResult:
        if reference_date is None:
            reference_date = local_today()
        items = filter_items(self._provider.load(), query, reference_date=reference_date)
        return QueryResult(items=tuple(items), total=len(items), reference_date=reference_date)


# ---------------------------------------------------------------------------
# Filter engine
# ---------------------------------------------------------------------------

def _matches_text(item: Item, term: str) -> bool:
    if term in item.name.lower():
        return True
    if term in item.location.lower():
        return True
    return item.description is not None and term in item.description.lower()


def filter_items(
    items: Iterable[Item],
    query: Query,
    *,
    reference_date: date | None = None,
) -> list[Item]:
    """Relevance first, then text, then structured filters.  Order is preserved."""
    if reference_date is None:
        reference_date = local_today()

    filtered = [
        item for item in items
        if is_current_or_upcoming(item, reference_date)
    ]

    term = query.text.strip().lower()
    if term:
        filtered = [item for item in filtered if _matches_text(item, term)]
    if query.region is not None:
        filtered = [item for item in filtered if item.region == query.region]
    if query.date is not None:
        filtered = [item for item in filtered if item.start_date == query.date]
    if query.price is not None:
        filtered = [item for item in filtered if item.price == query.price]

    return filtered


def available_regions(items: Iterable[Item], *, reference_date: date | None = None) -> list[str]:
    """Sorted distinct regions of current or upcoming items, for a region picker."""
    if reference_date is None:
        reference_date = local_today()
    return sorted({
        item.region for item in items
        if item.region and is_current_or_upcoming(item, reference_date)
    })
