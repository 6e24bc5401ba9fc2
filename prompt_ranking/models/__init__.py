"""Data models for the ranking engine."""

from .config import (
    DEFAULT_CONFIG,
    RankingConfig,
    RecommendationConfig,
    SearchConfig,
    TrendingConfig,
    load_config,
    resolve_config,
)
from .item import Item, ItemStats, ensure_items
from .options import (
    RecommendOptions,
    RelatedOptions,
    SearchOptions,
    TrendingOptions,
    resolve_options,
)
from .scoring import (
    RecommendationResult,
    ScoreBreakdown,
    ScoreComponents,
    ScoredItem,
    ScoringContext,
    SearchHit,
    TrendingWeights,
)
from .signal import Preferences, Signal, SignalBundle, SignalKind, ensure_bundle, ensure_signals

__all__ = [
    "DEFAULT_CONFIG",
    "Item",
    "ItemStats",
    "Preferences",
    "RankingConfig",
    "RecommendOptions",
    "RecommendationConfig",
    "RecommendationResult",
    "RelatedOptions",
    "ScoreBreakdown",
    "ScoreComponents",
    "ScoredItem",
    "ScoringContext",
    "SearchConfig",
    "SearchHit",
    "SearchOptions",
    "Signal",
    "SignalBundle",
    "SignalKind",
    "TrendingConfig",
    "TrendingOptions",
    "TrendingWeights",
    "ensure_bundle",
    "ensure_items",
    "ensure_signals",
    "load_config",
    "resolve_config",
    "resolve_options",
]
