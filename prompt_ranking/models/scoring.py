"""
Scoring models — what the stages return.

Contains:
- TrendingWeights, ScoringContext, ScoreComponents, ScoreBreakdown: trending stage
- ScoredItem: an item with its trending breakdown
- SearchHit: an item with its lexical relevance
- RecommendationResult: an item with its affinity score and reasons
"""

from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict, model_validator

from .item import Item


class TrendingWeights(BaseModel):
    """Linear weights for the five trending components (must sum to 1.0)."""

    model_config = ConfigDict(frozen=True)

    views: float = 0.25
    copies: float = 0.30
    saves: float = 0.15
    rating: float = 0.20
    freshness: float = 0.10

    @model_validator(mode="after")
    def weights_sum_to_one(self):
        values = (self.views, self.copies, self.saves, self.rating, self.freshness)
        if any(w < 0 for w in values):
            raise ValueError("Trending weights must be non-negative")
        total = sum(values)
        if abs(total - 1.0) > 0.01:
            raise ValueError(f"Trending weights must sum to 1.0, got {total}")
        return self


class ScoringContext(BaseModel):
    """Corpus maxima and reference time, computed once per trending call."""

    model_config = ConfigDict(frozen=True)

    max_views: float = 0.0
    max_copies: float = 0.0
    max_saves: float = 0.0
    max_rating_count: float = 0.0
    now: datetime


class ScoreComponents(BaseModel):
    model_config = ConfigDict(frozen=True)

    view_score: float
    copy_score: float
    save_score: float
    rating_score: float
    freshness_score: float


class ScoreBreakdown(BaseModel):
    """Trending score for one item, with its components and the weights used."""

    model_config = ConfigDict(frozen=True)

    item_id: str
    total_score: float
    components: ScoreComponents
    weights: TrendingWeights


class ScoredItem(BaseModel):
    """An item with its trending breakdown."""

    item: Item
    score: ScoreBreakdown


class SearchHit(BaseModel):
    """An item with its lexical relevance score."""

    item: Item
    score: float
    matched_fields: List[str] = []
    fuzzy: bool = False


class RecommendationResult(BaseModel):
    """A recommended item with its ranking score and display reasons."""

    item: Item
    score: float
    reasons: List[str] = []
