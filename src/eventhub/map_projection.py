"""Map projection: which events can be drawn, and how to frame them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from eventhub.config import (
    DEFAULT_MAP_CENTER,
    DEFAULT_MAP_ZOOM,
    MAP_PADDING,
    NO_MAPPABLE_STATUS,
)
from eventhub.models import Item, has_coordinates


@dataclass(frozen=True)
class Bounds:
    south: float
    west: float
    north: float
    east: float

    @staticmethod
    def around(points: Iterable[tuple[float, float]]) -> Bounds:
        lats, lngs = zip(*points)
        return Bounds(south=min(lats), west=min(lngs), north=max(lats), east=max(lngs))

    def pad(self, ratio: float) -> Bounds:
        """Grow each side by *ratio* of the current height/width."""
        lat_buffer = abs(self.north - self.south) * ratio
        lng_buffer = abs(self.east - self.west) * ratio
        return Bounds(
            south=self.south - lat_buffer,
            west=self.west - lng_buffer,
            north=self.north + lat_buffer,
            east=self.east + lng_buffer,
        )

    @property
    def center(self) -> tuple[float, float]:
        return ((self.south + self.north) / 2, (self.west + self.east) / 2)

    def to_dict(self) -> dict[str, float]:
        return {"south": self.south, "west": self.west, "north": self.north, "east": self.east}


@dataclass(frozen=True)
class MapView:
    center: tuple[float, float]
    zoom: int

    def to_dict(self) -> dict[str, object]:
        return {"center": list(self.center), "zoom": self.zoom}


DEFAULT_VIEW = MapView(center=DEFAULT_MAP_CENTER, zoom=DEFAULT_MAP_ZOOM)


@dataclass(frozen=True)
class MapPoint:
    latitude: float
    longitude: float
    item: Item

    @property
    def coords(self) -> tuple[float, float]:
        return (self.latitude, self.longitude)

    @property
    def label(self) -> str:
        """Popup text: name, location, dates and link."""
        item = self.item
        lines = [
            item.name,
            item.location,
            f"{item.start_date.isoformat()} → {item.end_date.isoformat()}",
        ]
        if item.organization_url:
            lines.append(item.organization_url)
        return "\n".join(line for line in lines if line)


@dataclass(frozen=True)
class Projection:
    points: tuple[MapPoint, ...]
    bounds: Bounds | None
    view: MapView | None
    status: str

    @property
    def coords(self) -> list[tuple[float, float]]:
        return [p.coords for p in self.points]

    @property
    def items(self) -> tuple[Item, ...]:
        return tuple(p.item for p in self.points)

    def to_dict(self) -> dict[str, object]:
        return {
            "status": self.status,
            "points": [
                {"lat": p.latitude, "lng": p.longitude, "name": p.item.name}
                for p in self.points
            ],
            "bounds": self.bounds.to_dict() if self.bounds is not None else None,
            "view": self.view.to_dict() if self.view is not None else None,
        }


def map_status(count: int) -> str:
    if count == 0:
        return NO_MAPPABLE_STATUS
    return f"{count} event{'s' if count > 1 else ''} on map"


def project(items: Iterable[Item], *, padding: float = MAP_PADDING) -> Projection:
    points = tuple(
        MapPoint(latitude=item.latitude, longitude=item.longitude, item=item)
        for item in items
        if has_coordinates(item)
    )
    if not points:
        return Projection(points=(), bounds=None, view=DEFAULT_VIEW, status=map_status(0))
    bounds = Bounds.around(p.coords for p in points).pad(padding)
    return Projection(points=points, bounds=bounds, view=None, status=map_status(len(points)))
