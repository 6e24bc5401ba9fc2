"""
Trending: popularity and freshness scoring relative to the corpus.

Five components, each in [0, 1]:
- view / copy / save: counter / corpus max (denominator 1 when the max is 0)
- rating: raw rating pulled toward a neutral prior when it rests on few ratings
- freshness: exponential decay from last update, floored for old or undated items

total = weights . components, weights sum to 1, so total is in [0, 1].
Filtering runs category -> exclude ids -> min score -> limit; ordering is by
total descending with catalog order as the tie-break.
"""

import logging
import math
from datetime import datetime
from typing import List, Optional, Sequence, Union

from ..models.config import RankingConfig, TrendingConfig, resolve_config
from ..models.item import Item, ensure_items
from ..models.options import TrendingOptions, resolve_options
from ..models.scoring import (
    ScoreBreakdown,
    ScoreComponents,
    ScoredItem,
    ScoringContext,
    TrendingWeights,
)
from ..utils.ranking import apply_limit, matches_category, not_excluded, sort_by_score_desc
from ..utils.scores import age_in_days, as_utc, exponential_decay, normalize_by_max, utc_now

logger = logging.getLogger(__name__)

MAX_RATING = 5.0
DAYS_PER_WEEK = 7.0


def build_scoring_context(items: Sequence[Item], now: Optional[datetime] = None) -> ScoringContext:
    """Corpus maxima over items plus the reference time. All maxima are 0 for an empty corpus."""
    return ScoringContext(
        max_views=max((i.stats.views for i in items), default=0),
        max_copies=max((i.stats.copies for i in items), default=0),
        max_saves=max((i.stats.saves for i in items), default=0),
        max_rating_count=max((i.stats.rating_count for i in items), default=0),
        now=as_utc(now) if now is not None else utc_now(),
    )


def rating_score(
    rating: float,
    rating_count: int,
    max_rating_count: float,
    prior: float = 0.6,
) -> float:
    """
    Confidence-weighted rating (0-1).

    confidence = min(1, sqrt(rating_count / max(1, max_rating_count)));
    score = confidence * rating/5 + (1 - confidence) * prior.
    More ratings pull the score toward the raw rating and away from the prior.
    """
    normalized = normalize_by_max(rating, MAX_RATING)
    confidence = min(1.0, math.sqrt(max(0, rating_count) / max(1.0, max_rating_count)))
    return confidence * normalized + (1.0 - confidence) * prior


def freshness_score(updated_at, now: datetime, config: TrendingConfig) -> float:
    """
    Freshness in [min_freshness, max_freshness] decaying with a half-life in weeks.

    Missing or unparseable timestamps get min_freshness; future ones count as age 0.
    """
    age_days = age_in_days(updated_at, now)
    if age_days is None:
        return config.min_freshness
    decay = exponential_decay(age_days / DAYS_PER_WEEK, config.freshness_half_life_weeks)
    return config.min_freshness + (config.max_freshness - config.min_freshness) * decay


def calculate_trending_score(
    item: Item,
    context: ScoringContext,
    weights: Optional[TrendingWeights] = None,
    config: Optional[RankingConfig] = None,
) -> ScoreBreakdown:
    """Trending score for one item against a precomputed corpus context."""
    trending_config = resolve_config(config).trending
    weights = weights or trending_config.weights
    stats = item.stats

    components = ScoreComponents(
        view_score=normalize_by_max(stats.views, context.max_views),
        copy_score=normalize_by_max(stats.copies, context.max_copies),
        save_score=normalize_by_max(stats.saves, context.max_saves),
        rating_score=rating_score(
            stats.rating,
            stats.rating_count,
            context.max_rating_count,
            trending_config.rating_prior,
        ),
        freshness_score=freshness_score(item.updated_at, context.now, trending_config),
    )
    total = (
        weights.views * components.view_score
        + weights.copies * components.copy_score
        + weights.saves * components.save_score
        + weights.rating * components.rating_score
        + weights.freshness * components.freshness_score
    )
    return ScoreBreakdown(
        item_id=item.id,
        total_score=min(1.0, max(0.0, total)),
        components=components,
        weights=weights,
    )


def get_trending_with_scores(
    items: Sequence[Union[Item, dict]],
    options: Union[TrendingOptions, dict, None] = None,
    config: Optional[RankingConfig] = None,
) -> List[ScoredItem]:
    """
    Ranked (item, breakdown) pairs.

    Corpus maxima are taken over the full input before any filter runs, so a
    category view scores items exactly as the unfiltered ranking does.
    """
    opts = resolve_options(TrendingOptions, options)
    catalog = ensure_items(list(items or []))
    context = build_scoring_context(catalog, opts.now)
    excluded = set(opts.exclude_ids)

    scored = [
        ScoredItem(item=item, score=calculate_trending_score(item, context, config=config))
        for item in catalog
        if matches_category(item, opts.category) and not_excluded(item, excluded)
    ]
    if opts.min_score is not None:
        scored = [s for s in scored if s.score.total_score >= opts.min_score]

    ranked = sort_by_score_desc(scored, key=lambda s: s.score.total_score)
    logger.debug(
        "[trending] RANKED candidates=%s kept=%s category=%s",
        len(catalog), len(ranked), opts.category,
    )
    return apply_limit(ranked, opts.limit)


def get_trending(
    items: Sequence[Union[Item, dict]],
    options: Union[TrendingOptions, dict, None] = None,
    config: Optional[RankingConfig] = None,
) -> List[Item]:
    """Items ordered by trending score, after filters and limit."""
    return [s.item for s in get_trending_with_scores(items, options, config)]


def sort_by_trending(
    items: Sequence[Union[Item, dict]],
    now: Optional[datetime] = None,
    config: Optional[RankingConfig] = None,
) -> List[Item]:
    """Drop-in sort: every item, no filters, ordered by trending score."""
    return get_trending(items, TrendingOptions(now=now), config)
