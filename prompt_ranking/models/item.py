"""
Item model — typed representation of a catalog prompt for the ranking stages.

Used by search, trending, and recommendation stages instead of raw dicts.
Built from catalog dicts via Item.model_validate(d) or ensure_items().
"""

import logging
import math
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

MAX_RATING = 5.0


def _coerce_count(value: Any) -> int:
    """Non-negative integer counter; anything unusable becomes 0."""
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return 0
    if not math.isfinite(number) or number < 0:
        return 0
    return int(number)


class ItemStats(BaseModel):
    """Usage counters snapshot. Read-only from the engine's point of view."""

    model_config = ConfigDict(frozen=True)

    views: int = 0
    copies: int = 0
    saves: int = 0
    rating: float = 0.0
    rating_count: int = 0

    @field_validator("views", "copies", "saves", "rating_count", mode="before")
    @classmethod
    def _counters(cls, value: Any) -> int:
        return _coerce_count(value)

    @field_validator("rating", mode="before")
    @classmethod
    def _rating(cls, value: Any) -> float:
        try:
            rating = float(value)
        except (TypeError, ValueError, OverflowError):
            return 0.0
        if not math.isfinite(rating):
            return 0.0
        return min(MAX_RATING, max(0.0, rating))


class Item(BaseModel):
    """
    Catalog prompt used across the ranking stages.

    All fields except id are optional to support partial catalog records.
    Counters live in stats; updated_at may be a datetime or an ISO string and is
    parsed lazily by the trending stage (unparseable values get the freshness floor).
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    id: str
    title: str = ""
    description: str = ""
    content: str = ""
    category: str = ""
    tags: List[str] = Field(default_factory=list)
    author: Optional[str] = None
    featured: bool = False
    stats: ItemStats = Field(default_factory=ItemStats)
    updated_at: Optional[Union[datetime, str]] = None

    @field_validator("id", mode="before")
    @classmethod
    def _id_not_blank(cls, value: Any) -> str:
        if isinstance(value, int) and not isinstance(value, bool):
            value = str(value)
        if not isinstance(value, str) or not value.strip():
            raise ValueError("item id must be a non-empty string")
        return value

    @field_validator("title", "description", "content", "category", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return value if isinstance(value, str) else ""

    @field_validator("tags", mode="before")
    @classmethod
    def _tags(cls, value: Any) -> List[str]:
        if not isinstance(value, (list, tuple, set, frozenset)):
            return []
        seen = set()
        tags = []
        for tag in value:
            if not isinstance(tag, str) or not tag.strip():
                continue
            key = tag.strip().lower()
            if key in seen:
                continue
            seen.add(key)
            tags.append(tag.strip())
        return tags

    @field_validator("stats", mode="before")
    @classmethod
    def _stats(cls, value: Any) -> Any:
        return value if isinstance(value, (dict, ItemStats)) else {}

    @field_validator("author", mode="before")
    @classmethod
    def _author(cls, value: Any) -> Optional[str]:
        return value if isinstance(value, str) and value.strip() else None

    @field_validator("featured", mode="before")
    @classmethod
    def _featured(cls, value: Any) -> bool:
        return value is True

    @field_validator("updated_at", mode="before")
    @classmethod
    def _updated_at(cls, value: Any) -> Any:
        return value if isinstance(value, (datetime, str)) else None


def ensure_items(records: List[Union[Dict[str, Any], "Item"]]) -> List["Item"]:
    """
    Convert list of dicts or Items to list of Item models for use in the stages.

    Records that cannot be validated (e.g. missing id) are dropped with a warning.
    """
    items: List[Item] = []
    for record in records or []:
        if isinstance(record, Item):
            items.append(record)
            continue
        try:
            items.append(Item.model_validate(record))
        except ValidationError as exc:
            logger.warning(
                "[catalog] ITEM_DROPPED reason=%s record_id=%s",
                exc.errors()[0].get("msg") if exc.errors() else "invalid",
                record.get("id") if isinstance(record, dict) else None,
            )
    return items
