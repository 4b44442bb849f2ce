"""Tests for the Item model and record parsing."""
from __future__ import annotations

import math
from datetime import date, datetime

import pytest

from eventhub.models import Item, MalformedItemError, PriceClass, has_coordinates


def _record(**overrides) -> dict:
    record = {
        "name": "Tech Fair",
        "start_date": "2099-01-01",
        "end_date": "2099-01-03",
        "location": "Berlin",
        "free_or_paid": "free",
        "organization_url": "https://example.org/tech-fair",
        "logo": "assets/img/tech-fair.png",
        "featured": True,
        "lat": 52.5,
        "lng": 13.4,
    }
    record.update(overrides)
    return record


# ---------------------------------------------------------------------------
# Item.from_dict
# ---------------------------------------------------------------------------

class TestFromDict:
    def test_directory_record(self):
        item = Item.from_dict(_record())
        assert item.name == "Tech Fair"
        assert item.start_date == date(2099, 1, 1)
        assert item.end_date == date(2099, 1, 3)
        assert item.price is PriceClass.FREE
        assert item.featured is True
        assert item.logo_url == "assets/img/tech-fair.png"
        assert (item.latitude, item.longitude) == (52.5, 13.4)

    def test_listing_record_uses_title_and_date(self):
        item = Item.from_dict({
            "title": "Community Meetup",
            "date": "2099-05-05",
            "location": "Lyon",
            "region": "EMEA",
            "description": "Monthly gathering",
        })
        assert item.name == "Community Meetup"
        assert item.start_date == item.end_date == date(2099, 5, 5)
        assert item.region == "EMEA"
        assert item.description == "Monthly gathering"

    def test_native_dates_accepted(self):
        item = Item.from_dict(_record(start_date=date(2099, 1, 1), end_date=datetime(2099, 1, 2, 10, 0)))
        assert item.end_date == date(2099, 1, 2)

    def test_anything_but_free_is_paid(self):
        assert Item.from_dict(_record(free_or_paid="paid")).price is PriceClass.PAID
        assert Item.from_dict(_record(free_or_paid="donation")).price is PriceClass.PAID
        assert Item.from_dict(_record(free_or_paid="FREE")).price is PriceClass.FREE
        assert Item.from_dict(_record(free_or_paid=None)).price is PriceClass.PAID

    def test_latitude_longitude_keys(self):
        record = _record()
        del record["lat"], record["lng"]
        record.update(latitude=48.85, longitude=2.35)
        item = Item.from_dict(record)
        assert (item.latitude, item.longitude) == (48.85, 2.35)

    def test_non_numeric_coordinates_dropped(self):
        item = Item.from_dict(_record(lat="52.5", lng=True))
        assert item.latitude is None
        assert item.longitude is None

    def test_oversized_coordinate_dropped(self):
        item = Item.from_dict(_record(lat=10 ** 400, lng=1))
        assert item.latitude is None
        assert item.longitude == 1.0
        assert not item.has_coordinates

    def test_missing_name_raises(self):
        with pytest.raises(MalformedItemError):
            Item.from_dict(_record(name=""))

    def test_missing_start_date_raises(self):
        record = _record()
        del record["start_date"]
        with pytest.raises(MalformedItemError):
            Item.from_dict(record)

    def test_unparsable_date_raises(self):
        with pytest.raises(MalformedItemError, match="invalid date"):
            Item.from_dict(_record(end_date="next tuesday"))

    def test_non_mapping_raises(self):
        with pytest.raises(MalformedItemError):
            Item.from_dict(["Tech Fair"])

    def test_items_are_immutable(self):
        item = Item.from_dict(_record())
        with pytest.raises(AttributeError):
            item.name = "Other"

    def test_to_dict_round_trip_fields(self):
        data = Item.from_dict(_record()).to_dict()
        assert data["start_date"] == "2099-01-01"
        assert data["free_or_paid"] == "free"
        assert data["lat"] == 52.5


# ---------------------------------------------------------------------------
# has_coordinates
# ---------------------------------------------------------------------------

class TestHasCoordinates:
    def _item(self, lat, lng) -> Item:
        return Item(name="X", start_date=date(2099, 1, 1), end_date=date(2099, 1, 1), latitude=lat, longitude=lng)

    def test_both_present(self):
        assert has_coordinates(self._item(52.5, 13.4))
        assert self._item(0.0, 0.0).has_coordinates

    def test_missing_either(self):
        assert not has_coordinates(self._item(None, 13.4))
        assert not has_coordinates(self._item(52.5, None))

    def test_non_finite(self):
        assert not has_coordinates(self._item(math.nan, 13.4))
        assert not has_coordinates(self._item(52.5, math.inf))
