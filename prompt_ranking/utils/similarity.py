"""
Similarity utilities — set overlap for tag matching.
"""

from typing import Iterable

from .text import normalize_label


def jaccard_similarity(tags_a: Iterable[str], tags_b: Iterable[str]) -> float:
    """|A ∩ B| / |A ∪ B| over normalized labels; 0.0 when both are empty."""
    set_a = {normalize_label(t) for t in tags_a if normalize_label(t)}
    set_b = {normalize_label(t) for t in tags_b if normalize_label(t)}
    union = set_a | set_b
    if not union:
        return 0.0
    return len(set_a & set_b) / len(union)
