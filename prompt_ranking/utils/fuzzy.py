"""
Approximate string matching for the search stage's fuzzy fallback.
"""

from typing import Dict, Iterable


def levenshtein(a: str, b: str, max_distance: int = -1) -> int:
    """
    Edit distance (insert, delete, substitute) between a and b.

    With max_distance >= 0 the computation stops early and returns
    max_distance + 1 once every cell of a row exceeds the bound.
    """
    if a == b:
        return 0
    if len(a) < len(b):
        a, b = b, a
    if not b:
        return len(a)
    if max_distance >= 0 and len(a) - len(b) > max_distance:
        return max_distance + 1

    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            cost = 0 if ca == cb else 1
            current.append(min(previous[j] + 1, current[j - 1] + 1, previous[j - 1] + cost))
        if max_distance >= 0 and min(current) > max_distance:
            return max_distance + 1
        previous = current
    return previous[-1]


def similarity(a: str, b: str) -> float:
    """1 - distance / longest length, in [0, 1]. Two empty strings are identical."""
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return 1.0 - levenshtein(a, b) / longest


def close_matches(term: str, vocabulary: Iterable[str], threshold: float) -> Dict[str, float]:
    """
    Vocabulary tokens whose similarity to term is >= threshold, excluding term itself.

    Candidates whose length alone rules them out are skipped before computing
    the edit distance.
    """
    matches: Dict[str, float] = {}
    for token in vocabulary:
        if token == term:
            continue
        longest = max(len(term), len(token))
        if longest == 0:
            continue
        max_distance = int((1.0 - threshold) * longest + 1e-9)
        if abs(len(term) - len(token)) > max_distance:
            continue
        distance = levenshtein(term, token, max_distance)
        if distance > max_distance:
            continue
        score = 1.0 - distance / longest
        if score >= threshold:
            matches[token] = score
    return matches
