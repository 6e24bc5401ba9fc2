"""
Per-call option models for the public entry points.

Callers may pass the model or a plain dict; resolve_options() validates once at
the boundary. Unknown keys, negative limits, and out-of-range thresholds raise
InvalidOptionError instead of being clamped.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..errors import InvalidOptionError


class _Options(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class SearchOptions(_Options):
    """category: exact (case-insensitive) category filter. limit: max hits, None = all."""

    category: Optional[str] = None
    limit: Optional[int] = Field(default=None, ge=0, strict=True)


class TrendingOptions(_Options):
    """
    Filters applied in order: category, exclude_ids, min_score, limit.
    now: reference time for freshness (defaults to the current UTC time).
    """

    limit: Optional[int] = Field(default=None, ge=0, strict=True)
    category: Optional[str] = None
    exclude_ids: List[str] = Field(default_factory=list)
    min_score: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    now: Optional[datetime] = None

    @field_validator("exclude_ids", mode="before")
    @classmethod
    def _ids(cls, value: Any) -> Any:
        return [] if value is None else value


class RecommendOptions(_Options):
    """limit defaults to RecommendationConfig.max_recommendations."""

    limit: Optional[int] = Field(default=None, ge=0, strict=True)
    exclude_ids: List[str] = Field(default_factory=list)
    now: Optional[datetime] = None

    @field_validator("exclude_ids", mode="before")
    @classmethod
    def _ids(cls, value: Any) -> Any:
        return [] if value is None else value


class RelatedOptions(_Options):
    limit: Optional[int] = Field(default=None, ge=0, strict=True)
    exclude_ids: List[str] = Field(default_factory=list)
    min_score: float = Field(default=0.0, ge=0.0)

    @field_validator("exclude_ids", mode="before")
    @classmethod
    def _ids(cls, value: Any) -> Any:
        return [] if value is None else value


OptionsT = TypeVar("OptionsT", bound=_Options)


def resolve_options(
    model: Type[OptionsT],
    options: Union[OptionsT, Dict[str, Any], None],
) -> OptionsT:
    """Return validated options of the given model; None means all defaults."""
    if options is None:
        return model()
    if isinstance(options, model):
        return options
    if not isinstance(options, dict):
        raise InvalidOptionError(
            f"{model.__name__} must be a {model.__name__} or dict, got {type(options).__name__}"
        )
    try:
        return model.model_validate(options)
    except ValidationError as exc:
        raise InvalidOptionError(f"Invalid {model.__name__}: {exc}") from exc
