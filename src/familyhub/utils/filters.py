"""
In-memory filtering for the gallery and event lists.

Everything here is a pure function over already-fetched records: the input
sequence is never mutated and the output keeps input order unless a function
says it sorts.
"""

from collections.abc import Iterable, Sequence
from datetime import UTC, datetime
from typing import TypeVar

from ..models.family import FamilyEvent, FamilyPhoto

T = TypeVar("T")

# Category selector meaning "do not filter by category".
ALL_CATEGORIES = "all"


def _contains(haystack: str | None, needle: str) -> bool:
    return haystack is not None and needle in haystack.lower()


def matches_query(photo: FamilyPhoto, query: str) -> bool:
    """
    Check a photo against a free-text query.

    A blank query matches everything. Otherwise the query must be a
    case-insensitive substring of the title, location or description;
    missing optional fields simply do not match.
    """
    needle = query.strip().lower()
    if not needle:
        return True
    return _contains(photo.title, needle) or _contains(photo.location, needle) or _contains(photo.description, needle)


def matches_category(photo: FamilyPhoto, category: str | None) -> bool:
    if not category or category == ALL_CATEGORIES:
        return True
    return photo.category_id == category


def filter_photos(
    photos: Iterable[FamilyPhoto], query: str = "", category: str | None = ALL_CATEGORIES
) -> list[FamilyPhoto]:
    """
    Filter photos by search text and category.

    Args:
        photos: Photos in display order
        query: Free-text search, may be empty
        category: Category id or ``ALL_CATEGORIES``

    Returns:
        list[FamilyPhoto]: Matching photos in their original order
    """
    return [photo for photo in photos if matches_query(photo, query) and matches_category(photo, category)]


def count_photos_by_category(photos: Iterable[FamilyPhoto]) -> dict[str, int]:
    """Photo counts per category id, plus the total under ``ALL_CATEGORIES``."""
    counts: dict[str, int] = {ALL_CATEGORIES: 0}
    for photo in photos:
        counts[ALL_CATEGORIES] += 1
        if photo.category_id:
            counts[photo.category_id] = counts.get(photo.category_id, 0) + 1
    return counts


def _as_naive_utc(moment: datetime) -> datetime:
    # Stored timestamps are naive UTC.
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(UTC).replace(tzinfo=None)


def partition_events(
    events: Iterable[FamilyEvent], now: datetime | None = None
) -> tuple[list[FamilyEvent], list[FamilyEvent]]:
    """
    Split events into upcoming and past relative to ``now``.

    Returns:
        tuple: (upcoming soonest first, past most recent first). An event
        happening exactly at ``now`` counts as upcoming.
    """
    cutoff = _as_naive_utc(now or datetime.now(UTC))
    upcoming: list[FamilyEvent] = []
    past: list[FamilyEvent] = []
    for event in events:
        if _as_naive_utc(event.event_date) >= cutoff:
            upcoming.append(event)
        else:
            past.append(event)
    upcoming.sort(key=lambda event: _as_naive_utc(event.event_date))
    past.sort(key=lambda event: _as_naive_utc(event.event_date), reverse=True)
    return upcoming, past


def paginate(items: Sequence[T], page: int = 0, page_size: int = 24) -> tuple[list[T], bool]:
    """
    Slice one page out of a list.

    Args:
        items: Full list
        page: Page number (0-based); negative pages are treated as 0
        page_size: Items per page, must be positive

    Returns:
        tuple: (items on the page, whether more pages follow)

    Raises:
        ValueError: If page_size is not positive
    """
    if page_size <= 0:
        raise ValueError("page_size must be positive")
    start = max(page, 0) * page_size
    end = start + page_size
    return list(items[start:end]), end < len(items)
