"""
Per-candidate affinity scoring against the user's profile.

tag_affinity      = mean over the candidate's tags of tag_weight / max_tag_weight
category_affinity = category_weight / max_category_weight
affinity = tag_weight * tag_affinity + category_weight * category_affinity
         + featured_weight (only when tag or category affinity is positive)

The popularity tie-break (trending total) is added by the caller.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ...models.config import RecommendationConfig
from ...models.item import Item
from ...utils.text import normalize_label
from .profile import AffinityProfile, pick_top_source


@dataclass(frozen=True)
class AffinityScore:
    score: float
    tag_affinity: float = 0.0
    category_affinity: float = 0.0
    # Matched tags, strongest profile weight first.
    matched_tags: List[str] = field(default_factory=list)
    tag_source: Optional[str] = None
    category_source: Optional[str] = None
    featured: bool = False


def score_candidate(
    item: Item,
    profile: AffinityProfile,
    config: RecommendationConfig,
) -> AffinityScore:
    """Affinity of one candidate; score 0.0 means the profile says nothing about it."""
    tag_total = 0.0
    matched: Dict[str, float] = {}
    tag_sources: Dict[str, float] = {}
    for tag in item.tags:
        key = normalize_label(tag)
        weight = profile.tag_weights.get(key, 0.0)
        if weight <= 0:
            continue
        tag_total += weight / profile.max_tag_weight
        matched[tag] = weight
        for source, contribution in profile.tag_sources.get(key, {}).items():
            tag_sources[source] = tag_sources.get(source, 0.0) + contribution
    tag_affinity = tag_total / len(item.tags) if item.tags else 0.0

    category_key = normalize_label(item.category)
    category_weight = profile.category_weights.get(category_key, 0.0) if category_key else 0.0
    category_affinity = category_weight / profile.max_category_weight

    score = config.tag_weight * tag_affinity + config.category_weight * category_affinity
    featured = item.featured and score > 0
    if featured:
        score += config.featured_weight

    return AffinityScore(
        score=score,
        tag_affinity=tag_affinity,
        category_affinity=category_affinity,
        matched_tags=sorted(matched, key=lambda t: -matched[t]),
        tag_source=pick_top_source(tag_sources),
        category_source=pick_top_source(profile.category_sources.get(category_key)) if category_weight > 0 else None,
        featured=featured,
    )
