"""
Computed Parameters for the ranking engine

This module computes derived parameters from a RankingConfig.
Computed parameters are read-only: they describe what a config implies
(half-lives, effective weights, signal ratios) and are recalculated
whenever the base config changes.
"""

import math
from typing import Any, Dict, Optional

from .models.config import RankingConfig, resolve_config


def compute_parameters(config: Optional[RankingConfig] = None) -> Dict[str, Any]:
    """
    Compute derived parameters from a ranking config.

    Args:
        config: RankingConfig (DEFAULT_CONFIG when None)

    Returns:
        Dictionary of computed parameter values
    """
    config = resolve_config(config)
    search = config.search
    trending = config.trending
    rec = config.recommendations
    computed: Dict[str, Any] = {}

    # =========================================================================
    # Search field weights relative to the body (content) weight
    # =========================================================================
    field_weights = search.field_weights()
    field_total = sum(field_weights.values())
    for field, weight in field_weights.items():
        computed[f"{field}_weight_share"] = weight / field_total if field_total > 0 else 0.25
    if search.content_weight > 0:
        computed["title_to_content_ratio"] = search.title_weight / search.content_weight
    else:
        computed["title_to_content_ratio"] = float("inf")
    # Smallest similarity-weighted multiplier a fuzzy hit can carry
    computed["min_fuzzy_multiplier"] = search.fuzzy_threshold * search.fuzzy_penalty if search.fuzzy_enabled else 0.0

    # =========================================================================
    # Trending: freshness decay rate and share of popularity vs quality
    # =========================================================================
    weights = trending.weights
    computed["freshness_decay_per_week"] = math.log(2) / trending.freshness_half_life_weeks
    computed["freshness_half_life_days"] = trending.freshness_half_life_weeks * 7
    computed["popularity_share"] = weights.views + weights.copies + weights.saves
    computed["quality_share"] = weights.rating
    computed["freshness_share"] = weights.freshness
    # Lowest total an item can reach (no usage, no ratings, undated)
    computed["min_trending_score"] = (
        weights.rating * trending.rating_prior + weights.freshness * trending.min_freshness
    )

    # =========================================================================
    # Recommendation signals
    # =========================================================================
    signal_total = rec.saved_signal_weight + rec.viewed_signal_weight
    if signal_total > 0:
        computed["effective_saved_weight"] = rec.saved_signal_weight / signal_total
        computed["effective_viewed_weight"] = rec.viewed_signal_weight / signal_total
    else:
        computed["effective_saved_weight"] = 0.5
        computed["effective_viewed_weight"] = 0.5
    if rec.viewed_signal_weight > 0:
        computed["saved_to_viewed_ratio"] = rec.saved_signal_weight / rec.viewed_signal_weight
    else:
        computed["saved_to_viewed_ratio"] = float("inf")
    computed["signal_decay_per_day"] = math.log(2) / rec.signal_half_life_days

    # =========================================================================
    # Recommendation score range
    # =========================================================================
    computed["max_affinity_score"] = rec.tag_weight + rec.category_weight + rec.featured_weight
    computed["max_recommendation_score"] = computed["max_affinity_score"] + rec.popularity_weight
    computed["max_related_score"] = (
        rec.tag_weight + rec.category_weight + rec.author_weight + rec.featured_weight
    )

    return computed
