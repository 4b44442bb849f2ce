"""Shared fixtures and builders."""
from __future__ import annotations

from datetime import date

import pytest

import eventhub.config as config
from eventhub.models import Item, PriceClass

TODAY = date(2030, 6, 15)


def make_item(
    name: str,
    *,
    start: date = date(2030, 7, 1),
    end: date | None = None,
    location: str = "",
    price: PriceClass = PriceClass.PAID,
    featured: bool = False,
    region: str | None = None,
    description: str | None = None,
    lat: float | None = None,
    lng: float | None = None,
) -> Item:
    return Item(
        name=name,
        start_date=start,
        end_date=end if end is not None else start,
        location=location,
        price=price,
        organization_url=f"https://example.org/{name.lower().replace(' ', '-')}",
        featured=featured,
        region=region,
        description=description,
        latitude=lat,
        longitude=lng,
    )


@pytest.fixture(autouse=True)
def _reset_config():
    yield
    config._reset()
