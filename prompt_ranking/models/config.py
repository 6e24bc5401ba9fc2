"""
Ranking configuration — search, trending, and recommendation parameters.

RankingConfig defaults are defined here. The host may pass a dict (e.g. from a
ranking config JSON file); from_dict() merges it with these defaults.
load_config() reads that file from a path or from PROMPT_RANKING_CONFIG.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from ..errors import ConfigError
from .scoring import TrendingWeights

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "PROMPT_RANKING_CONFIG"
PROJECT_ROOT = Path(__file__).resolve().parents[2]


class SearchConfig(BaseModel):
    """Lexical search parameters."""

    model_config = ConfigDict(frozen=True)

    # -------------------------------------------------------------------------
    # Field weights: a term hit in the title counts 3x a hit in the body.
    # -------------------------------------------------------------------------

    title_weight: float = Field(default=3.0, ge=0.0)
    description_weight: float = Field(default=2.0, ge=0.0)
    tags_weight: float = Field(default=1.5, ge=0.0)
    content_weight: float = Field(default=1.0, ge=0.0)

    # -------------------------------------------------------------------------
    # BM25: k1 controls term-frequency saturation, b controls length normalization.
    # -------------------------------------------------------------------------

    k1: float = Field(default=1.2, gt=0.0)
    b: float = Field(default=0.75, ge=0.0, le=1.0)

    # -------------------------------------------------------------------------
    # Fuzzy fallback for query terms with no exact hit in a candidate.
    # similarity = 1 - levenshtein / max(len); contribution *= similarity * penalty
    # -------------------------------------------------------------------------

    fuzzy_enabled: bool = True
    fuzzy_threshold: float = Field(default=0.7, gt=0.0, le=1.0)
    fuzzy_penalty: float = Field(default=0.8, gt=0.0, le=1.0)
    # Query terms shorter than this never fuzzy-match.
    fuzzy_min_term_length: int = Field(default=3, ge=1)

    def field_weights(self) -> Dict[str, float]:
        """Searchable fields in display order with their weights."""
        return {
            "title": self.title_weight,
            "description": self.description_weight,
            "tags": self.tags_weight,
            "content": self.content_weight,
        }


class TrendingConfig(BaseModel):
    """Trending / popularity parameters."""

    model_config = ConfigDict(frozen=True)

    weights: TrendingWeights = Field(default_factory=TrendingWeights)

    # freshness = min + (max - min) * exp(-age_weeks * ln2 / half_life_weeks)
    freshness_half_life_weeks: float = Field(default=4.0, gt=0.0)
    min_freshness: float = Field(default=0.1, ge=0.0, le=1.0)
    max_freshness: float = Field(default=1.0, ge=0.0, le=1.0)

    # Neutral rating (0-1 scale) that low-confidence ratings are pulled toward. 0.6 = 3/5.
    rating_prior: float = Field(default=0.6, ge=0.0, le=1.0)

    @model_validator(mode="after")
    def freshness_bounds(self):
        if self.min_freshness > self.max_freshness:
            raise ValueError("min_freshness must not exceed max_freshness")
        return self


class RecommendationConfig(BaseModel):
    """Personalized and related recommendation parameters."""

    model_config = ConfigDict(frozen=True)

    # -------------------------------------------------------------------------
    # Affinity weights
    # score = tag_weight * tag_affinity + category_weight * category_affinity
    #       + featured_weight * featured + popularity_weight * trending_total
    # -------------------------------------------------------------------------

    tag_weight: float = Field(default=0.6, ge=0.0)
    category_weight: float = Field(default=0.2, ge=0.0)
    featured_weight: float = Field(default=0.1, ge=0.0)
    # Related items only: same author.
    author_weight: float = Field(default=0.1, ge=0.0)
    # Popularity only reorders near-equal affinities; keep well below category_weight.
    popularity_weight: float = Field(default=0.05, ge=0.0)

    # -------------------------------------------------------------------------
    # Signal weights. A save is a stronger preference signal than a view.
    # -------------------------------------------------------------------------

    saved_signal_weight: float = Field(default=2.0, ge=0.0)
    viewed_signal_weight: float = Field(default=1.0, ge=0.0)
    # Signal recency: weight *= exp(-ln2 / half_life * age_days). 21 days half-life.
    signal_half_life_days: float = Field(default=21.0, gt=0.0)

    # -------------------------------------------------------------------------
    # Explicit preference boosts (added to the implicit profile)
    # -------------------------------------------------------------------------

    preference_tag_boost: float = Field(default=0.9, ge=0.0)
    preference_category_boost: float = Field(default=0.6, ge=0.0)

    # -------------------------------------------------------------------------
    # Output
    # -------------------------------------------------------------------------

    max_recommendations: int = Field(default=10, ge=0)
    max_reasons: int = Field(default=2, ge=0)
    # Tags listed in one reason string ("... tagged: a, b, c").
    max_reason_tags: int = Field(default=3, ge=1)

    @model_validator(mode="after")
    def saves_outweigh_views(self):
        if self.saved_signal_weight < self.viewed_signal_weight:
            raise ValueError(
                f"saved_signal_weight ({self.saved_signal_weight}) must be >= "
                f"viewed_signal_weight ({self.viewed_signal_weight})"
            )
        return self


class RankingConfig(BaseModel):
    """Configuration for every ranking stage."""

    model_config = ConfigDict(frozen=True)

    search: SearchConfig = Field(default_factory=SearchConfig)
    trending: TrendingConfig = Field(default_factory=TrendingConfig)
    recommendations: RecommendationConfig = Field(default_factory=RecommendationConfig)

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "RankingConfig":
        """Create config from a nested dictionary (e.g., loaded from JSON). Unknown keys are ignored."""
        flat: Dict[str, Any] = {}
        if "search" in config_dict:
            flat["search"] = _known(SearchConfig, config_dict["search"])
        if "trending" in config_dict:
            trending = _known(TrendingConfig, config_dict["trending"])
            if "weights" in trending:
                trending["weights"] = _known(TrendingWeights, trending["weights"])
            flat["trending"] = trending
        if "recommendations" in config_dict:
            flat["recommendations"] = _known(RecommendationConfig, config_dict["recommendations"])
        return cls.model_validate(flat)


def _known(model: type, section: Any) -> Dict[str, Any]:
    if not isinstance(section, dict):
        return {}
    allowed = set(model.model_fields)
    ignored = sorted(set(section) - allowed)
    if ignored:
        logger.info("[config] UNKNOWN_KEYS_IGNORED section=%s keys=%s", model.__name__, ignored)
    return {k: v for k, v in section.items() if k in allowed}


DEFAULT_CONFIG = RankingConfig()


def resolve_config(config: Optional[RankingConfig]) -> RankingConfig:
    """Return config or DEFAULT_CONFIG when none is provided."""
    return config if config is not None else DEFAULT_CONFIG


def load_config(path: Optional[Union[str, Path]] = None) -> RankingConfig:
    """
    Load a RankingConfig from a JSON file.

    Without a path, PROMPT_RANKING_CONFIG is read from the environment (a .env
    file at the project root is honoured). With neither, DEFAULT_CONFIG is returned.
    Relative paths resolve against the project root.
    """
    if path is None:
        root_env = PROJECT_ROOT / ".env"
        if root_env.exists():
            load_dotenv(root_env)
        path = os.getenv(CONFIG_ENV_VAR) or None
    if path is None:
        return DEFAULT_CONFIG

    config_path = Path(path)
    if not config_path.is_absolute():
        config_path = (PROJECT_ROOT / config_path).resolve()
    try:
        with open(config_path, encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Cannot read ranking config {config_path}: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigError(f"Ranking config {config_path} must contain a JSON object")
    try:
        config = RankingConfig.from_dict(raw)
    except ValidationError as exc:
        raise ConfigError(f"Invalid ranking config {config_path}: {exc}") from exc
    logger.info("[config] LOADED path=%s", config_path)
    return config
