"""
Signal model — a user's interaction with a catalog item (viewed, saved), plus
explicit tag/category preferences.

Used by the recommendation stage to build the affinity profile.
Built from history-tracker dicts via Signal.model_validate(d) or ensure_signals().
"""

import logging
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Set, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..errors import InvalidOptionError
from .item import Item

logger = logging.getLogger(__name__)


class SignalKind(str, Enum):
    VIEWED = "viewed"
    SAVED = "saved"


class Signal(BaseModel):
    """
    A single observed interaction on a catalog item.

    item_id: catalog id; resolved against the catalog passed to recommend().
    timestamp: when it happened; older signals decay (see RecommendationConfig).
    weight: extra multiplier supplied by the tracker (default 1.0).
    """

    model_config = ConfigDict(frozen=True)

    item_id: str
    kind: SignalKind = SignalKind.VIEWED
    timestamp: Optional[Union[datetime, str]] = None
    weight: float = Field(default=1.0, ge=0.0, allow_inf_nan=False)


def _label_set(value: Any) -> Set[str]:
    if value is None:
        return set()
    if isinstance(value, str):
        value = [value]
    return {v.strip().lower() for v in value if isinstance(v, str) and v.strip()}


class Preferences(BaseModel):
    """
    Explicit preferences. Boosts are additive; exclusions are absolute and win
    over a boost for the same label. Labels are stored trimmed and lower-cased.
    """

    model_config = ConfigDict(frozen=True)

    tags: Set[str] = Field(default_factory=set)
    categories: Set[str] = Field(default_factory=set)
    exclude_tags: Set[str] = Field(default_factory=set)
    exclude_categories: Set[str] = Field(default_factory=set)

    @field_validator("tags", "categories", "exclude_tags", "exclude_categories", mode="before")
    @classmethod
    def _normalize(cls, value: Any) -> Set[str]:
        return _label_set(value)

    @property
    def boosted_tags(self) -> Set[str]:
        return self.tags - self.exclude_tags

    @property
    def boosted_categories(self) -> Set[str]:
        return self.categories - self.exclude_categories

    def has_boosts(self) -> bool:
        """True when at least one tag or category boost survives exclusions."""
        return bool(self.boosted_tags or self.boosted_categories)


SignalLike = Union[Signal, Item, Dict[str, Any], str]


def ensure_signals(
    values: Optional[List[SignalLike]],
    fallback_kind: SignalKind,
) -> List[Signal]:
    """
    Convert dicts, Items, or bare ids to Signal models.

    Items and ids become signals of fallback_kind; dicts without a kind get it too.
    Values that are not signal-shaped are skipped with a warning.
    """
    if not isinstance(values, (list, tuple)):
        return []
    signals: List[Signal] = []
    for value in values:
        if isinstance(value, Signal):
            signals.append(value)
        elif isinstance(value, Item):
            signals.append(Signal(item_id=value.id, kind=fallback_kind))
        elif isinstance(value, str) and value.strip():
            signals.append(Signal(item_id=value, kind=fallback_kind))
        elif isinstance(value, dict):
            try:
                signals.append(Signal.model_validate({"kind": fallback_kind, **value}))
            except ValidationError as exc:
                logger.warning("[signals] SIGNAL_SKIPPED reason=%s value=%r", exc.error_count(), value)
        else:
            logger.warning("[signals] SIGNAL_SKIPPED reason=unsupported_type value=%r", value)
    return signals


class SignalBundle(BaseModel):
    """Everything the recommendation stage knows about one user."""

    viewed: List[Signal] = Field(default_factory=list)
    saved: List[Signal] = Field(default_factory=list)
    preferences: Optional[Preferences] = None

    @field_validator("viewed", mode="before")
    @classmethod
    def _viewed(cls, value: Any) -> List[Signal]:
        return ensure_signals(value, SignalKind.VIEWED)

    @field_validator("saved", mode="before")
    @classmethod
    def _saved(cls, value: Any) -> List[Signal]:
        return ensure_signals(value, SignalKind.SAVED)

    def is_cold_start(self) -> bool:
        """No behavioral signal and no surviving explicit boost."""
        has_boosts = self.preferences is not None and self.preferences.has_boosts()
        return not self.viewed and not self.saved and not has_boosts


def ensure_bundle(value: Union[SignalBundle, Dict[str, Any], None]) -> SignalBundle:
    """Coerce a dict (or None) into a SignalBundle; invalid shapes raise InvalidOptionError."""
    if isinstance(value, SignalBundle):
        return value
    if value is None:
        return SignalBundle()
    if not isinstance(value, dict):
        raise InvalidOptionError(f"Signals must be a SignalBundle or dict, got {type(value).__name__}")
    try:
        return SignalBundle.model_validate(value)
    except ValidationError as exc:
        raise InvalidOptionError(f"Invalid signal bundle: {exc}") from exc
