"""
Prompt Ranking Engine: search, trending, and recommendations for a prompt catalog

Single entry point for the package:
- models/: Item, Signal/SignalBundle/Preferences, option models, RankingConfig, results
- stages/: search (BM25 + fuzzy), trending, recommend (personalized + related)
- utils/: score normalization, ranking helpers, tokenizer, edit distance
- computed_params: derived read-only parameters for a config

Every call is pure: the catalog snapshot is passed in and never mutated.
"""

from datetime import datetime
from typing import List, Optional, Sequence, Union

from pydantic import ValidationError

from .errors import ConfigError, InvalidOptionError, RankingError
from .models.config import (
    DEFAULT_CONFIG,
    RankingConfig,
    RecommendationConfig,
    SearchConfig,
    TrendingConfig,
    load_config,
    resolve_config,
)
from .models.item import Item, ItemStats, ensure_items
from .models.options import RecommendOptions, RelatedOptions, SearchOptions, TrendingOptions
from .models.scoring import (
    RecommendationResult,
    ScoreBreakdown,
    ScoredItem,
    ScoringContext,
    SearchHit,
    TrendingWeights,
)
from .models.signal import Preferences, Signal, SignalBundle, SignalKind
from .stages.recommend import recommend as _recommend
from .stages.recommend import related as _related
from .stages.search import SearchIndex, build_index
from .stages.search import search as _search
from .stages.trending import build_scoring_context, calculate_trending_score, get_trending, get_trending_with_scores
from .stages.trending import sort_by_trending as _sort_by_trending

Catalog = Sequence[Union[Item, dict]]


def search(
    query: str,
    catalog: Optional[Catalog] = None,
    options: Union[SearchOptions, dict, None] = None,
    *,
    config: Optional[RankingConfig] = None,
    index: Optional[SearchIndex] = None,
) -> List[SearchHit]:
    """Rank catalog items by relevance to query (see stages.search)."""
    return _search(query, catalog, options, config=config, index=index)


def trending(
    catalog: Catalog,
    options: Union[TrendingOptions, dict, None] = None,
    *,
    config: Optional[RankingConfig] = None,
) -> List[Item]:
    """Items ordered by trending score after category / exclude / min_score / limit."""
    return get_trending(catalog, options, config)


def trending_with_scores(
    catalog: Catalog,
    options: Union[TrendingOptions, dict, None] = None,
    *,
    config: Optional[RankingConfig] = None,
) -> List[ScoredItem]:
    """Like trending(), keeping each item's ScoreBreakdown."""
    return get_trending_with_scores(catalog, options, config)


def trending_score_of(
    item: Union[Item, dict],
    context: Union[ScoringContext, dict],
    *,
    config: Optional[RankingConfig] = None,
) -> ScoreBreakdown:
    """
    Score a single item against a context from build_scoring_context().

    A dict context needs `now` and may give any of the corpus maxima.
    """
    if not isinstance(item, Item):
        try:
            item = Item.model_validate(item)
        except ValidationError as exc:
            raise InvalidOptionError(f"Invalid item: {exc}") from exc
    if not isinstance(context, ScoringContext):
        try:
            context = ScoringContext.model_validate(context)
        except ValidationError as exc:
            raise InvalidOptionError(f"Invalid scoring context: {exc}") from exc
    return calculate_trending_score(item, context, config=config)


def recommend(
    signals: Union[SignalBundle, dict, None],
    catalog: Catalog,
    options: Union[RecommendOptions, dict, None] = None,
    *,
    config: Optional[RankingConfig] = None,
) -> List[RecommendationResult]:
    """Personalized recommendations; [] on cold start."""
    return _recommend(signals, catalog, options, config)


def related(
    source: Union[Item, dict, str],
    catalog: Catalog,
    options: Union[RelatedOptions, dict, None] = None,
    *,
    config: Optional[RankingConfig] = None,
) -> List[RecommendationResult]:
    """Items similar to source ("more like this")."""
    return _related(source, catalog, options, config)


def sort_by_trending(
    catalog: Catalog,
    now: Optional[datetime] = None,
    *,
    config: Optional[RankingConfig] = None,
) -> List[Item]:
    """Every item, unfiltered, ordered by trending score."""
    return _sort_by_trending(catalog, now, config)


__all__ = [
    "DEFAULT_CONFIG",
    "ConfigError",
    "InvalidOptionError",
    "Item",
    "ItemStats",
    "Preferences",
    "RankingConfig",
    "RankingError",
    "RecommendOptions",
    "RecommendationConfig",
    "RecommendationResult",
    "RelatedOptions",
    "ScoreBreakdown",
    "ScoredItem",
    "ScoringContext",
    "SearchConfig",
    "SearchHit",
    "SearchIndex",
    "SearchOptions",
    "Signal",
    "SignalBundle",
    "SignalKind",
    "TrendingConfig",
    "TrendingOptions",
    "TrendingWeights",
    "build_index",
    "build_scoring_context",
    "ensure_items",
    "load_config",
    "recommend",
    "related",
    "resolve_config",
    "search",
    "sort_by_trending",
    "trending",
    "trending_score_of",
    "trending_with_scores",
]
