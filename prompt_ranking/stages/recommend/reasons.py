"""
Human-readable reasons for a recommendation (e.g. "Because you saved prompts in automation").

At most max_reasons per item: tag reason, then category reason, then featured.
"""

from typing import List, Optional

from ...models.config import RecommendationConfig
from ...models.item import Item
from ...models.signal import SignalKind
from .profile import PREFERENCE_SOURCE
from .scoring import AffinityScore

FEATURED_REASON = "Featured prompt"

_TAG_TEMPLATES = {
    SignalKind.SAVED.value: "Because you saved prompts tagged: {}",
    SignalKind.VIEWED.value: "Based on recent views: {}",
    PREFERENCE_SOURCE: "Matches your preferences: {}",
}
_CATEGORY_TEMPLATES = {
    SignalKind.SAVED.value: "Because you saved prompts in {}",
    SignalKind.VIEWED.value: "Based on recent views in {}",
    PREFERENCE_SOURCE: "Preferred category: {}",
}


def tag_reason(source: Optional[str], tags: List[str], max_tags: int) -> Optional[str]:
    template = _TAG_TEMPLATES.get(source or "")
    if template is None or not tags:
        return None
    return template.format(", ".join(tags[:max_tags]))


def category_reason(source: Optional[str], category: str) -> Optional[str]:
    template = _CATEGORY_TEMPLATES.get(source or "")
    if template is None or not category:
        return None
    return template.format(category)


def get_reasons(item: Item, affinity: AffinityScore, config: RecommendationConfig) -> List[str]:
    """Reasons for one recommended item (max config.max_reasons)."""
    reasons = [
        tag_reason(affinity.tag_source, affinity.matched_tags, config.max_reason_tags),
        category_reason(affinity.category_source, item.category),
        FEATURED_REASON if affinity.featured else None,
    ]
    return [r for r in reasons if r][: config.max_reasons]
