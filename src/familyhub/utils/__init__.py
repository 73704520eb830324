"""Utility functions for familyhub."""

from .filters import ALL_CATEGORIES, count_photos_by_category, filter_photos, paginate, partition_events

__all__ = [
    "ALL_CATEGORIES",
    "count_photos_by_category",
    "filter_photos",
    "paginate",
    "partition_events",
]
