"""
"More like this": items similar to a source item, no user history needed.

score = tag_weight * jaccard(tags) + category_weight * same_category
      + author_weight * same_author + featured_weight * featured
"""

import logging
from typing import List, Optional, Sequence, Union

from ...models.config import RankingConfig, RecommendationConfig, resolve_config
from ...models.item import Item, ensure_items
from ...models.options import RelatedOptions, resolve_options
from ...models.scoring import RecommendationResult
from ...utils.ranking import apply_limit, sort_by_score_desc
from ...utils.similarity import jaccard_similarity
from ...utils.text import normalize_label
from .reasons import FEATURED_REASON

logger = logging.getLogger(__name__)


def _resolve_source(source: Union[Item, dict, str], catalog: List[Item]) -> Optional[Item]:
    if isinstance(source, str):
        return next((item for item in catalog if item.id == source), None)
    resolved = ensure_items([source])
    return resolved[0] if resolved else None


def _shared_tags(source: Item, candidate: Item) -> List[str]:
    source_tags = {normalize_label(t) for t in source.tags}
    return [t for t in candidate.tags if normalize_label(t) in source_tags]


def score_related(
    source: Item,
    candidate: Item,
    config: RecommendationConfig,
) -> RecommendationResult:
    """Similarity of candidate to source with its reasons (max config.max_reasons)."""
    reasons: List[str] = []
    score = 0.0

    tag_similarity = jaccard_similarity(source.tags, candidate.tags)
    if tag_similarity > 0:
        score += config.tag_weight * tag_similarity
        shared = _shared_tags(source, candidate)[: config.max_reason_tags]
        reasons.append(f"Similar tags: {', '.join(shared)}")

    category = normalize_label(candidate.category)
    if category and category == normalize_label(source.category):
        score += config.category_weight
        reasons.append(f"Same category: {candidate.category}")

    if source.author and candidate.author and source.author == candidate.author:
        score += config.author_weight
        reasons.append(f"By the same author: {candidate.author}")

    if candidate.featured:
        score += config.featured_weight
        reasons.append(FEATURED_REASON)

    return RecommendationResult(item=candidate, score=score, reasons=reasons[: config.max_reasons])


def related(
    source: Union[Item, dict, str],
    items: Sequence[Union[Item, dict]],
    options: Union[RelatedOptions, dict, None] = None,
    config: Optional[RankingConfig] = None,
) -> List[RecommendationResult]:
    """
    Catalog items most similar to source, never including source itself.

    source may be an Item, a record dict, or an id looked up in items; an
    unknown id returns []. Only scores strictly above min_score are kept.
    """
    opts = resolve_options(RelatedOptions, options)
    rec_config = resolve_config(config).recommendations
    catalog = ensure_items(list(items or []))
    source_item = _resolve_source(source, catalog)
    if source_item is None:
        logger.info("[related] SOURCE_NOT_FOUND source=%r", source if isinstance(source, str) else None)
        return []

    excluded = set(opts.exclude_ids) | {source_item.id}
    results = [
        score_related(source_item, candidate, rec_config)
        for candidate in catalog
        if candidate.id not in excluded
    ]
    results = [r for r in results if r.score > opts.min_score]
    ranked = sort_by_score_desc(results, key=lambda r: r.score)
    limit = opts.limit if opts.limit is not None else rec_config.max_recommendations
    logger.debug("[related] RANKED source=%s kept=%s", source_item.id, len(ranked))
    return apply_limit(ranked, limit)
