"""View synchronizer: one filtered result, fanned out to every view.

The synchronizer owns the loaded dataset, the current ``Query`` and the last
``Snapshot``.  It is the only component that recomputes the filtered result;
views and the map widget are passive sinks that get replaced wholesale on
each pass.  List and map are always driven from the same ``Snapshot.items``.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Awaitable, Callable, Protocol, Sequence, Union

from eventhub.config import (
    FEATURED_BUCKETS,
    LOAD_FAILED_STATUS,
    MAP_PADDING,
    NO_MATCHES_STATUS,
)
from eventhub.event_store import LoadError, Query, filter_items, local_today
from eventhub.featured import featured_buckets
from eventhub.map_projection import Bounds, MapPoint, Projection, project
from eventhub.models import Item

logger = logging.getLogger(__name__)


class SyncState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


class Views(Protocol):
    def render_list(self, items: Sequence[Item]) -> None: ...
    def render_featured(self, buckets: Sequence[Sequence[Item]]) -> None: ...
    def render_status(self, text: str) -> None: ...
    def render_map_status(self, text: str) -> None: ...


class MapWidget(Protocol):
    def set_markers(self, points: Sequence[MapPoint]) -> None: ...
    def fit_bounds(self, bounds: Bounds) -> None: ...
    def set_view(self, center: tuple[float, float], zoom: int) -> None: ...


Loader = Callable[[], Sequence[Item]]
AsyncLoader = Callable[[], Union[Sequence[Item], Awaitable[Sequence[Item]]]]


@dataclass(frozen=True)
class Snapshot:
    query: Query
    items: tuple[Item, ...]
    projection: Projection
    status: str
    generation: int


def results_status(count: int) -> str:
    if count == 0:
        return NO_MATCHES_STATUS
    return f"{count} match{'es' if count > 1 else ''}"


class ViewSynchronizer:
    """Owns dataset + query state and drives list, map, featured and status views."""

    def __init__(
        self,
        views: Views,
        map_widget: MapWidget,
        *,
        bucket_count: int = FEATURED_BUCKETS,
        map_padding: float = MAP_PADDING,
        clock: Callable[[], date] = local_today,
    ) -> None:
        if bucket_count < 1:
            raise ValueError(f"bucket_count must be at least 1, got {bucket_count}")
        self._views = views
        self._map = map_widget
        self._bucket_count = bucket_count
        self._map_padding = map_padding
        self._clock = clock
        self._state = SyncState.IDLE
        self._items: tuple[Item, ...] = ()
        self._query = Query()
        self._snapshot: Snapshot | None = None
        self._generation = 0

    # -- read-only state ----------------------------------------------------

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def items(self) -> tuple[Item, ...]:
        return self._items

    @property
    def query(self) -> Query:
        return self._query

    @property
    def snapshot(self) -> Snapshot | None:
        return self._snapshot

    # -- loading ------------------------------------------------------------

    def begin_load(self) -> None:
        self._transition(SyncState.LOADING)

    def load(self, loader: Loader) -> SyncState:
        """Run *loader* and render the result (or the failure state)."""
        self.begin_load()
        try:
            items = loader()
        except LoadError as err:
            self._fail(err)
        else:
            self._ready(items)
        return self._state

    async def load_async(self, loader: AsyncLoader) -> SyncState:
        """Like ``load`` but awaits the loader.

        Plain callables run in a worker thread so input handlers stay usable
        while the load is outstanding.
        """
        self.begin_load()
        try:
            if inspect.iscoroutinefunction(loader):
                items = await loader()
            else:
                items = await asyncio.to_thread(loader)
                if inspect.isawaitable(items):
                    items = await items
        except LoadError as err:
            self._fail(err)
        else:
            self._ready(items)
        return self._state

    def _ready(self, items: Sequence[Item]) -> None:
        self._items = tuple(items)
        self._query = Query()
        self._transition(SyncState.READY)
        logger.info("Loaded %d events", len(self._items))
        self._render_featured()
        self._sync(("map", "list", "status"))

    def _fail(self, err: LoadError) -> None:
        logger.warning("Failed to load events: %s", err)
        self._items = ()
        self._query = Query()
        self._transition(SyncState.ERROR)
        self._views.render_featured(())
        self._sync(("list", "map", "status"), status=LOAD_FAILED_STATUS)

    def _transition(self, state: SyncState) -> None:
        if state is not self._state:
            logger.debug("State %s -> %s", self._state.value, state.value)
        self._state = state

    # -- input handlers -----------------------------------------------------

    def on_query_change(self, query: Query) -> Snapshot:
        self._query = query
        return self.synchronize()

    def on_clear(self) -> Snapshot:
        return self.on_query_change(Query())

    # -- fan-out ------------------------------------------------------------

    def synchronize(self) -> Snapshot:
        """Recompute the filtered result once and push it to every view."""
        return self._sync(("status", "list", "map"))

    def _sync(self, order: Sequence[str], *, status: str | None = None) -> Snapshot:
        reference_date = self._clock()
        items = tuple(filter_items(self._items, self._query, reference_date=reference_date))
        self._generation += 1
        snapshot = Snapshot(
            query=self._query,
            items=items,
            projection=project(items, padding=self._map_padding),
            status=status if status is not None else results_status(len(items)),
            generation=self._generation,
        )
        self._snapshot = snapshot
        logger.debug(
            "Sync #%d: %d matches, %d on map",
            snapshot.generation,
            len(snapshot.items),
            len(snapshot.projection.points),
        )
        renderers = {
            "status": lambda: self._views.render_status(snapshot.status),
            "list": lambda: self._views.render_list(snapshot.items),
            "map": lambda: self._render_map(snapshot.projection),
        }
        for name in order:
            renderers[name]()
        return snapshot

    def refresh_featured(self) -> tuple[tuple[Item, ...], ...]:
        return self._render_featured()

    def _render_featured(self) -> tuple[tuple[Item, ...], ...]:
        buckets = featured_buckets(
            self._items, self._bucket_count, reference_date=self._clock()
        )
        self._views.render_featured(buckets)
        return buckets

    def _render_map(self, projection: Projection) -> None:
        self._map.set_markers(projection.points)
        if projection.bounds is not None:
            self._map.fit_bounds(projection.bounds)
        elif projection.view is not None:
            self._map.set_view(projection.view.center, projection.view.zoom)
        self._views.render_map_status(projection.status)
