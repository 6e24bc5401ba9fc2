"""Shared utilities for scoring, ranking, text normalization, and fuzzy matching."""

from .fuzzy import close_matches, levenshtein, similarity
from .ranking import apply_limit, matches_category, not_excluded, sort_by_score_desc
from .scores import (
    age_in_days,
    exponential_decay,
    normalize_by_max,
    parse_timestamp,
    utc_now,
)
from .similarity import jaccard_similarity
from .text import STOPWORDS, normalize_label, tokenize, tokenize_raw

__all__ = [
    "STOPWORDS",
    "age_in_days",
    "apply_limit",
    "close_matches",
    "exponential_decay",
    "jaccard_similarity",
    "levenshtein",
    "matches_category",
    "normalize_by_max",
    "normalize_label",
    "not_excluded",
    "parse_timestamp",
    "similarity",
    "sort_by_score_desc",
    "tokenize",
    "tokenize_raw",
    "utc_now",
]
