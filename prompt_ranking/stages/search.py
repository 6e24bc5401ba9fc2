"""
Lexical search: field-weighted BM25 with a fuzzy fallback.

Each searchable field (title, description, tags, content) gets its own
BM25Okapi model, so term saturation and length normalization use that field's
average length. IDF is shared across fields and computed over whole documents.
Field scores are multiplied by the field weight and summed per query term.

When a candidate has no exact hit for a query term, the closest vocabulary
tokens (Levenshtein similarity >= fuzzy_threshold) stand in for it, scaled by
similarity * fuzzy_penalty. Near-miss spellings ("wizrd") still surface items.

build_index() tokenizes the catalog once so an index can be reused across
queries; search() builds one on the fly when none is given. k1 and b are fixed
when the index is built.
"""

import logging
import math
from collections import Counter
from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np
from rank_bm25 import BM25Okapi

from ..models.config import RankingConfig, SearchConfig, resolve_config
from ..models.item import Item, ensure_items
from ..models.options import SearchOptions, resolve_options
from ..models.scoring import SearchHit
from ..utils.fuzzy import close_matches
from ..utils.ranking import apply_limit, matches_category, sort_by_score_desc
from ..utils.text import tokenize, tokenize_many

logger = logging.getLogger(__name__)

FIELDS: Tuple[str, ...] = ("title", "description", "tags", "content")


def bm25_idf(doc_count: int, doc_freq: int) -> float:
    """BM25 idf, always positive: ln((N - df + 0.5) / (df + 0.5) + 1)."""
    return math.log((doc_count - doc_freq + 0.5) / (doc_freq + 0.5) + 1.0)


class FieldBM25(BM25Okapi):
    """
    BM25Okapi over one field's token lists.

    idf comes from whole-document frequencies instead of the field's own, so a
    term is equally rare in every field. Average length is at least 1 so a
    field that is empty in every document never divides by zero.
    """

    def __init__(
        self,
        corpus: List[List[str]],
        doc_freq: Mapping[str, int],
        doc_count: int,
        k1: float,
        b: float,
    ):
        self._doc_freq = doc_freq
        self._doc_count = doc_count
        super().__init__(corpus, k1=k1, b=b)
        self.avgdl = max(self.avgdl, 1.0)
        self.postings: Dict[str, List[int]] = {}
        for pos, frequencies in enumerate(self.doc_freqs):
            for term in frequencies:
                self.postings.setdefault(term, []).append(pos)

    def _calc_idf(self, nd):
        self.idf = {term: bm25_idf(self._doc_count, self._doc_freq.get(term, 0)) for term in nd}


@dataclass(frozen=True)
class SearchIndex:
    """Per-field BM25 models over a catalog snapshot. Read-only after build."""

    items: Tuple[Item, ...]
    fields: Dict[str, FieldBM25]
    doc_freq: Dict[str, int]
    vocabulary: FrozenSet[str]

    @property
    def doc_count(self) -> int:
        return len(self.items)

    def idf(self, term: str) -> float:
        return bm25_idf(self.doc_count, self.doc_freq.get(term, 0))


def _field_tokens(item: Item) -> Dict[str, List[str]]:
    return {
        "title": tokenize(item.title),
        "description": tokenize(item.description),
        "tags": tokenize_many(item.tags),
        "content": tokenize(item.content),
    }


def build_index(
    items: Sequence[Union[Item, dict]],
    config: Optional[RankingConfig] = None,
) -> SearchIndex:
    """Tokenize every searchable field and build one BM25 model per field."""
    search_config = resolve_config(config).search
    catalog = ensure_items(list(items or []))
    corpora: Dict[str, List[List[str]]] = {f: [] for f in FIELDS}
    doc_freq: Counter = Counter()

    for item in catalog:
        doc_terms = set()
        for field, tokens in _field_tokens(item).items():
            corpora[field].append(tokens)
            doc_terms.update(tokens)
        doc_freq.update(doc_terms)

    # BM25Okapi cannot be built over an empty corpus.
    fields: Dict[str, FieldBM25] = {}
    if catalog:
        fields = {
            field: FieldBM25(corpus, doc_freq, len(catalog), search_config.k1, search_config.b)
            for field, corpus in corpora.items()
        }
    logger.debug("[search] INDEX_BUILT docs=%s vocabulary=%s", len(catalog), len(doc_freq))
    return SearchIndex(
        items=tuple(catalog),
        fields=fields,
        doc_freq=dict(doc_freq),
        vocabulary=frozenset(doc_freq),
    )


def _term_scores(
    index: SearchIndex,
    term: str,
    config: SearchConfig,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Weighted BM25 contribution of one term for every document.

    Returns (scores, field_mask) where field_mask[doc, i] says FIELDS[i] matched.
    """
    n = index.doc_count
    scores = np.zeros(n, dtype=float)
    fields = np.zeros((n, len(FIELDS)), dtype=bool)
    if term not in index.doc_freq:
        return scores, fields
    for col, (field, weight) in enumerate(config.field_weights().items()):
        if weight <= 0:
            continue
        model = index.fields[field]
        positions = model.postings.get(term)
        if not positions:
            continue
        # Only documents containing the term: an empty field with b = 1 would be 0/0.
        field_scores = np.asarray(model.get_batch_scores([term], positions), dtype=float)
        scores[positions] += weight * field_scores
        fields[positions, col] = True
    return scores, fields


def _fuzzy_term_scores(
    index: SearchIndex,
    term: str,
    config: SearchConfig,
) -> Tuple[np.ndarray, np.ndarray]:
    """Best approximate-match contribution of one term per document (zeros when none)."""
    n = index.doc_count
    best = np.zeros(n, dtype=float)
    best_fields = np.zeros((n, len(FIELDS)), dtype=bool)
    if not config.fuzzy_enabled or len(term) < config.fuzzy_min_term_length:
        return best, best_fields

    expansions = close_matches(term, index.vocabulary, config.fuzzy_threshold)
    if expansions:
        logger.debug("[search] FUZZY_EXPANSION term=%s matches=%s", term, sorted(expansions))
    for token, sim in sorted(expansions.items()):
        scores, fields = _term_scores(index, token, config)
        scores *= sim * config.fuzzy_penalty
        improved = scores > best
        best = np.where(improved, scores, best)
        best_fields[improved] = fields[improved]
    return best, best_fields


def search(
    query: str,
    items: Optional[Sequence[Union[Item, dict]]] = None,
    options: Union[SearchOptions, dict, None] = None,
    config: Optional[RankingConfig] = None,
    index: Optional[SearchIndex] = None,
) -> List[SearchHit]:
    """
    Rank catalog items by relevance to a free-text query.

    Pass a prebuilt index to skip tokenizing the catalog (items is then ignored).
    An empty or punctuation-only query returns []; callers that want to show the
    whole catalog for "no query" do so themselves. Category filtering is exact
    (case-insensitive); ties keep catalog order.
    """
    opts = resolve_options(SearchOptions, options)
    search_config = resolve_config(config).search
    if index is None:
        index = build_index(items or [], config)

    terms = list(dict.fromkeys(tokenize(query if isinstance(query, str) else "")))
    if not terms or index.doc_count == 0:
        logger.debug("[search] EMPTY_QUERY_OR_CATALOG terms=%s docs=%s", terms, index.doc_count)
        return []

    n = index.doc_count
    totals = np.zeros(n, dtype=float)
    matched = np.zeros((n, len(FIELDS)), dtype=bool)
    fuzzy = np.zeros(n, dtype=bool)

    for term in terms:
        exact, exact_fields = _term_scores(index, term, search_config)
        approx, approx_fields = _fuzzy_term_scores(index, term, search_config)
        use_fuzzy = (exact <= 0) & (approx > 0)
        totals += np.where(exact > 0, exact, approx)
        matched |= np.where(use_fuzzy[:, None], approx_fields, exact_fields)
        fuzzy |= use_fuzzy

    allowed = np.array(
        [matches_category(item, opts.category) for item in index.items], dtype=bool
    )
    hits = [
        SearchHit(
            item=index.items[pos],
            score=float(totals[pos]),
            matched_fields=[FIELDS[col] for col in np.flatnonzero(matched[pos])],
            fuzzy=bool(fuzzy[pos]),
        )
        for pos in np.flatnonzero(allowed & (totals > 0))
    ]
    ranked = sort_by_score_desc(hits, key=lambda hit: hit.score)
    logger.debug("[search] QUERY terms=%s hits=%s", terms, len(ranked))
    return apply_limit(ranked, opts.limit)
