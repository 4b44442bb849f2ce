"""Concrete views and map widgets.

``TerminalView``/``TerminalMap`` print to a text stream for the CLI.
``SnapshotView``/``SnapshotMap`` keep only the latest render in memory; they
back ``--json`` output and are handy in tests.
"""

from __future__ import annotations

import sys
from typing import Any, Sequence, TextIO

from eventhub.config import NO_FEATURED_STATUS, PLACEHOLDER_LOGO
from eventhub.featured import non_empty_buckets
from eventhub.map_projection import Bounds, MapPoint
from eventhub.models import Item, PriceClass

_BOLD = "\033[1m"
_DIM = "\033[2m"
_RESET = "\033[0m"


def price_label(item: Item) -> str:
    return "Free" if item.price is PriceClass.FREE else "Paid"


def date_range(item: Item) -> str:
    return f"{item.start_date.isoformat()} → {item.end_date.isoformat()}"


def logo_for(item: Item) -> str:
    return item.logo_url or PLACEHOLDER_LOGO


class TerminalView:
    """Prints each render as a block.  A new block supersedes the previous one."""

    def __init__(self, out: TextIO | None = None, *, top: int | None = None, color: bool | None = None) -> None:
        self._out = out if out is not None else sys.stdout
        self._top = top
        if color is None:
            color = self._out.isatty()
        self._bold = _BOLD if color else ""
        self._dim = _DIM if color else ""
        self._reset = _RESET if color else ""

    def _print(self, text: str = "") -> None:
        print(text, file=self._out)

    def render_status(self, text: str) -> None:
        self._print(f"{self._bold}{text}{self._reset}")

    def render_map_status(self, text: str) -> None:
        self._print(f"{self._dim}Map: {text}{self._reset}")

    def render_list(self, items: Sequence[Item]) -> None:
        shown = items[: self._top] if self._top is not None else items
        price_width = max((len(price_label(item)) for item in shown), default=4)
        date_width = max((len(date_range(item)) for item in shown), default=0)
        for item in shown:
            price_text = f"[{price_label(item)}]".ljust(price_width + 2)
            date_text = date_range(item).ljust(date_width)
            line = f"{price_text} {date_text} | {item.name} | {item.location}"
            if item.organization_url:
                line = f"{line} | {item.organization_url}"
            self._print(line)
        if len(shown) < len(items):
            self._print(f"{self._dim}... {len(items) - len(shown)} more{self._reset}")

    def render_featured(self, buckets: Sequence[Sequence[Item]]) -> None:
        columns = non_empty_buckets(buckets)
        if not columns:
            self._print(f"{self._dim}{NO_FEATURED_STATUS}{self._reset}")
            return
        for number, bucket in columns:
            self._print(f"{self._bold}Featured #{number}{self._reset}")
            for item in bucket:
                self._print(f"  {item.name} ({price_label(item)}) | {item.location} | {date_range(item)}")


class TerminalMap:
    """Text stand-in for a map widget: prints markers and framing."""

    def __init__(self, out: TextIO | None = None, *, show_markers: bool = False) -> None:
        self._out = out if out is not None else sys.stdout
        self._show_markers = show_markers

    def set_markers(self, points: Sequence[MapPoint]) -> None:
        if not self._show_markers:
            return
        for point in points:
            print(f"  @ {point.latitude:.4f},{point.longitude:.4f}  {point.item.name}", file=self._out)

    def fit_bounds(self, bounds: Bounds) -> None:
        if not self._show_markers:
            return
        print(
            f"  bounds: S {bounds.south:.4f} W {bounds.west:.4f} "
            f"N {bounds.north:.4f} E {bounds.east:.4f}",
            file=self._out,
        )

    def set_view(self, center: tuple[float, float], zoom: int) -> None:
        if not self._show_markers:
            return
        print(f"  view: center {center[0]:.1f},{center[1]:.1f} zoom {zoom}", file=self._out)


class SnapshotView:
    """Keeps the latest value handed to each view."""

    def __init__(self) -> None:
        self.items: tuple[Item, ...] = ()
        self.buckets: tuple[tuple[Item, ...], ...] = ()
        self.status: str | None = None
        self.map_status: str | None = None
        self.renders = 0

    def render_list(self, items: Sequence[Item]) -> None:
        self.items = tuple(items)
        self.renders += 1

    def render_featured(self, buckets: Sequence[Sequence[Item]]) -> None:
        self.buckets = tuple(tuple(bucket) for bucket in buckets)

    def render_status(self, text: str) -> None:
        self.status = text

    def render_map_status(self, text: str) -> None:
        self.map_status = text

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "map_status": self.map_status,
            "events": [item.to_dict() for item in self.items],
            "featured": [
                [item.to_dict() for item in bucket]
                for _, bucket in non_empty_buckets(self.buckets)
            ],
        }


class SnapshotMap:
    """Keeps the markers and framing from the latest map update."""

    def __init__(self) -> None:
        self.points: tuple[MapPoint, ...] = ()
        self.bounds: Bounds | None = None
        self.center: tuple[float, float] | None = None
        self.zoom: int | None = None

    def set_markers(self, points: Sequence[MapPoint]) -> None:
        self.points = tuple(points)

    def fit_bounds(self, bounds: Bounds) -> None:
        self.bounds = bounds
        self.center = None
        self.zoom = None

    def set_view(self, center: tuple[float, float], zoom: int) -> None:
        self.bounds = None
        self.center = center
        self.zoom = zoom

    @property
    def items(self) -> tuple[Item, ...]:
        return tuple(point.item for point in self.points)

    def to_dict(self) -> dict[str, Any]:
        return {
            "points": [
                {"lat": p.latitude, "lng": p.longitude, "name": p.item.name, "label": p.label}
                for p in self.points
            ],
            "bounds": self.bounds.to_dict() if self.bounds is not None else None,
            "view": (
                {"center": list(self.center), "zoom": self.zoom}
                if self.center is not None
                else None
            ),
        }
