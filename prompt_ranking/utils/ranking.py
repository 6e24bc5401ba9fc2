"""
Ranking helpers — ordering, filtering, and truncation shared by the stages.
"""

from typing import Callable, Collection, Iterable, List, Optional, TypeVar

from ..models.item import Item
from .text import normalize_label

T = TypeVar("T")


def sort_by_score_desc(entries: Iterable[T], key: Callable[[T], float]) -> List[T]:
    """
    Sort by key descending. Stable: equal scores keep their input order,
    so catalog order is the tie-break.
    """
    return sorted(entries, key=lambda entry: -key(entry))


def matches_category(item: Item, category: Optional[str]) -> bool:
    """True when no category filter is set or the item's category equals it (case-insensitive)."""
    if category is None:
        return True
    return normalize_label(item.category) == normalize_label(category)


def not_excluded(item: Item, excluded_ids: Collection[str]) -> bool:
    return item.id not in excluded_ids


def apply_limit(entries: List[T], limit: Optional[int]) -> List[T]:
    """First `limit` entries; None keeps everything."""
    if limit is None:
        return list(entries)
    return list(entries[:limit])
