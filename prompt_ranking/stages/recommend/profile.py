"""
Affinity profile: what a user is into, built from signals and explicit preferences.

Each viewed/saved signal adds its weight to the tags and category of its item;
each boosted tag/category adds a fixed boost. Per-source bookkeeping
(saved / viewed / preference) is kept so reasons can say where an affinity came from.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Set, Tuple

from ...models.config import RecommendationConfig
from ...models.item import Item
from ...models.signal import Preferences, Signal, SignalKind
from ...utils.scores import age_in_days, exponential_decay
from ...utils.text import normalize_label

logger = logging.getLogger(__name__)

PREFERENCE_SOURCE = "preference"
# Dominant-source tie-break order.
SOURCE_PRIORITY = (SignalKind.SAVED.value, PREFERENCE_SOURCE, SignalKind.VIEWED.value)


@dataclass
class AffinityProfile:
    tag_weights: Dict[str, float] = field(default_factory=dict)
    category_weights: Dict[str, float] = field(default_factory=dict)
    tag_sources: Dict[str, Dict[str, float]] = field(default_factory=dict)
    category_sources: Dict[str, Dict[str, float]] = field(default_factory=dict)
    excluded_tags: Set[str] = field(default_factory=set)
    excluded_categories: Set[str] = field(default_factory=set)

    @property
    def max_tag_weight(self) -> float:
        return max(1.0, max(self.tag_weights.values(), default=0.0))

    @property
    def max_category_weight(self) -> float:
        return max(1.0, max(self.category_weights.values(), default=0.0))

    def is_empty(self) -> bool:
        return not self.tag_weights and not self.category_weights

    def excludes(self, item: Item) -> bool:
        """Exclusions are absolute: an excluded category or any excluded tag removes the item."""
        if normalize_label(item.category) in self.excluded_categories:
            return True
        return any(normalize_label(tag) in self.excluded_tags for tag in item.tags)

    def add(self, tags: List[str], category: str, source: str, weight: float) -> None:
        for tag in tags:
            key = normalize_label(tag)
            if key:
                _add_weight(self.tag_weights, self.tag_sources, key, source, weight)
        key = normalize_label(category)
        if key:
            _add_weight(self.category_weights, self.category_sources, key, source, weight)


def _add_weight(
    weights: Dict[str, float],
    sources: Dict[str, Dict[str, float]],
    key: str,
    source: str,
    weight: float,
) -> None:
    weights[key] = weights.get(key, 0.0) + weight
    bucket = sources.setdefault(key, {})
    bucket[source] = bucket.get(source, 0.0) + weight


def pick_top_source(sources: Optional[Dict[str, float]]) -> Optional[str]:
    """Source with the largest accumulated weight (saved > preference > viewed on ties)."""
    if not sources:
        return None
    return min(
        sources,
        key=lambda s: (-sources[s], SOURCE_PRIORITY.index(s) if s in SOURCE_PRIORITY else len(SOURCE_PRIORITY)),
    )


def signal_weight(signal: Signal, now: datetime, config: RecommendationConfig) -> float:
    """
    kind weight * recency * signal.weight.

    Saved signals use saved_signal_weight, viewed ones viewed_signal_weight;
    signals without a usable timestamp get full recency.
    """
    base = (
        config.saved_signal_weight
        if signal.kind == SignalKind.SAVED
        else config.viewed_signal_weight
    )
    age = age_in_days(signal.timestamp, now)
    recency = 1.0 if age is None else exponential_decay(age, config.signal_half_life_days)
    return base * recency * signal.weight


def build_profile(
    resolved: List[Tuple[Signal, Item]],
    preferences: Optional[Preferences],
    now: datetime,
    config: RecommendationConfig,
) -> AffinityProfile:
    """
    Merge implicit (signals) and explicit (preferences) interests into one profile.

    Boosts are added on top of implicit weights; excluded labels are recorded
    and never receive weight.
    """
    profile = AffinityProfile()
    if preferences is not None:
        profile.excluded_tags = set(preferences.exclude_tags)
        profile.excluded_categories = set(preferences.exclude_categories)

    for signal, item in resolved:
        weight = signal_weight(signal, now, config)
        if not math.isfinite(weight) or weight <= 0:
            continue
        profile.add(item.tags, item.category, signal.kind.value, weight)

    if preferences is not None:
        for tag in sorted(preferences.boosted_tags):
            _add_weight(profile.tag_weights, profile.tag_sources, tag, PREFERENCE_SOURCE, config.preference_tag_boost)
        for category in sorted(preferences.boosted_categories):
            _add_weight(
                profile.category_weights,
                profile.category_sources,
                category,
                PREFERENCE_SOURCE,
                config.preference_category_boost,
            )

    # Summed weights can overflow to inf; those labels would turn every ratio into NaN.
    overflowed_tags = {k for k, w in profile.tag_weights.items() if not math.isfinite(w)}
    overflowed_categories = {k for k, w in profile.category_weights.items() if not math.isfinite(w)}
    if overflowed_tags or overflowed_categories:
        logger.warning(
            "[recommend] WEIGHT_OVERFLOW tags=%s categories=%s",
            sorted(overflowed_tags), sorted(overflowed_categories),
        )

    for key in profile.excluded_tags | overflowed_tags:
        profile.tag_weights.pop(key, None)
        profile.tag_sources.pop(key, None)
    for key in profile.excluded_categories | overflowed_categories:
        profile.category_weights.pop(key, None)
        profile.category_sources.pop(key, None)

    logger.debug(
        "[recommend] PROFILE_BUILT signals=%s tags=%s categories=%s",
        len(resolved), len(profile.tag_weights), len(profile.category_weights),
    )
    return profile
