"""Featured rotation: round-robin bucketing of featured events."""

from __future__ import annotations

from datetime import date
from typing import Iterable, Sequence, TypeVar

from eventhub.config import FEATURED_BUCKETS
from eventhub.event_store import is_current_or_upcoming, local_today
from eventhub.models import Item

T = TypeVar("T")


def round_robin(items: Sequence[T], bucket_count: int) -> tuple[tuple[T, ...], ...]:
    """Deal *items* into *bucket_count* buckets; index ``i`` lands in ``i % bucket_count``.

    Buckets keep the relative input order of their members and may be empty.
    """
    if bucket_count < 1:
        raise ValueError(f"bucket_count must be at least 1, got {bucket_count}")
    buckets: list[list[T]] = [[] for _ in range(bucket_count)]
    for index, item in enumerate(items):
        buckets[index % bucket_count].append(item)
    return tuple(tuple(bucket) for bucket in buckets)


def featured_items(items: Iterable[Item], *, reference_date: date | None = None) -> list[Item]:
    if reference_date is None:
        reference_date = local_today()
    return [
        item for item in items
        if item.featured and is_current_or_upcoming(item, reference_date)
    ]


def featured_buckets(
    items: Iterable[Item],
    bucket_count: int = FEATURED_BUCKETS,
    *,
    reference_date: date | None = None,
) -> tuple[tuple[Item, ...], ...]:
    return round_robin(featured_items(items, reference_date=reference_date), bucket_count)


def non_empty_buckets(buckets: Sequence[Sequence[T]]) -> list[tuple[int, Sequence[T]]]:
    """Pairs of (1-based column number, bucket) for the buckets worth rendering."""
    return [(index + 1, bucket) for index, bucket in enumerate(buckets) if bucket]
