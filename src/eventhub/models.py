"""Shared domain models for eventhub."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any


class MalformedItemError(ValueError):
    """Raised when a raw event record cannot be turned into an Item."""


class PriceClass(str, Enum):
    FREE = "free"
    PAID = "paid"


def parse_iso_date(value: Any) -> date:
    """Parse a ``YYYY-MM-DD`` string (or pass through a date) to a calendar date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Expected an ISO date string, got {type(value).__name__}")
    return date.fromisoformat(value.strip())


def _coordinate(value: Any) -> float | None:
    # bool is an int subclass; a JSON true is not a latitude.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        return float(value)
    except OverflowError:
        return None


def _optional_str(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value
    return None


@dataclass(frozen=True)
class Item:
    name: str
    start_date: date
    end_date: date
    location: str = ""
    price: PriceClass = PriceClass.PAID
    organization_url: str = ""
    logo_url: str | None = None
    featured: bool = False
    region: str | None = None
    description: str | None = None
    latitude: float | None = None
    longitude: float | None = None

    @property
    def has_coordinates(self) -> bool:
        return has_coordinates(self)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "location": self.location,
            "free_or_paid": self.price.value,
            "organization_url": self.organization_url,
            "logo": self.logo_url,
            "featured": self.featured,
            "region": self.region,
            "description": self.description,
            "lat": self.latitude,
            "lng": self.longitude,
        }

    @staticmethod
    def from_dict(d: dict[str, Any]) -> Item:
        """Build an Item from a raw record.

        Accepts both record shapes seen in the wild: the directory format
        (``name``, ``start_date``, ``end_date``, ``lat``/``lng``) and the
        simpler listing format (``title``, ``date``).
        """
        try:
            return Item._from_record(d)
        except (TypeError, OverflowError) as err:
            raise MalformedItemError(f"Event record is malformed: {err}") from err

    @staticmethod
    def _from_record(d: dict[str, Any]) -> Item:
        if not isinstance(d, dict):
            raise MalformedItemError(f"Event record must be a mapping, got {type(d).__name__}")

        name = d.get("name") or d.get("title")
        if not isinstance(name, str) or not name.strip():
            raise MalformedItemError("Event record has no name")

        raw_start = d.get("start_date") or d.get("date")
        if raw_start is None:
            raise MalformedItemError(f"Event '{name}' has no start date")
        raw_end = d.get("end_date") or raw_start
        try:
            start_date = parse_iso_date(raw_start)
            end_date = parse_iso_date(raw_end)
        except ValueError as err:
            raise MalformedItemError(f"Event '{name}' has an invalid date: {err}") from err

        price_raw = d.get("free_or_paid")
        is_free = isinstance(price_raw, str) and price_raw.strip().lower() == "free"

        latitude = d.get("lat", d.get("latitude"))
        longitude = d.get("lng", d.get("longitude"))

        return Item(
            name=name,
            start_date=start_date,
            end_date=end_date,
            location=d.get("location") if isinstance(d.get("location"), str) else "",
            price=PriceClass.FREE if is_free else PriceClass.PAID,
            organization_url=_optional_str(d.get("organization_url")) or "",
            logo_url=_optional_str(d.get("logo")),
            featured=d.get("featured") is True,
            region=_optional_str(d.get("region")),
            description=_optional_str(d.get("description")),
            latitude=_coordinate(latitude),
            longitude=_coordinate(longitude),
        )


def has_coordinates(item: Item) -> bool:
    """True iff both latitude and longitude are present and finite."""
    if item.latitude is None or item.longitude is None:
        return False
    return math.isfinite(item.latitude) and math.isfinite(item.longitude)
