"""
Personalized recommendations: affinity profile, then per-candidate scoring.

Blends tag and category affinity with a featured bonus and a small popularity
tie-break; attaches up to max_reasons reasons per item.
Submodules used: profile, scoring, reasons.
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple, Union

from ...models.config import RankingConfig, resolve_config
from ...models.item import Item, ensure_items
from ...models.options import RecommendOptions, resolve_options
from ...models.scoring import RecommendationResult
from ...models.signal import Signal, SignalBundle, ensure_bundle
from ...utils.ranking import apply_limit, sort_by_score_desc
from ...utils.scores import as_utc, utc_now
from ..trending import build_scoring_context, calculate_trending_score
from .profile import build_profile
from .reasons import get_reasons
from .scoring import score_candidate

logger = logging.getLogger(__name__)


def _resolve_signals(
    bundle: SignalBundle,
    by_id: Dict[str, Item],
) -> List[Tuple[Signal, Item]]:
    """Pair each signal with its catalog item; unknown ids are dropped."""
    resolved: List[Tuple[Signal, Item]] = []
    for signal in list(bundle.saved) + list(bundle.viewed):
        item = by_id.get(signal.item_id)
        if item is None:
            logger.debug("[recommend] SIGNAL_UNKNOWN_ITEM item_id=%s kind=%s", signal.item_id, signal.kind.value)
            continue
        resolved.append((signal, item))
    return resolved


def recommend(
    signals: Union[SignalBundle, dict, None],
    items: Sequence[Union[Item, dict]],
    options: Union[RecommendOptions, dict, None] = None,
    config: Optional[RankingConfig] = None,
) -> List[RecommendationResult]:
    """
    Rank catalog items for one user.

    Cold start (no viewed, no saved, no surviving boost) returns [] so the
    caller can fall back to trending. Viewed, saved, and exclude_ids items are
    never recommended; excluded tags and categories remove candidates outright.
    """
    opts = resolve_options(RecommendOptions, options)
    bundle = ensure_bundle(signals)
    ranking_config = resolve_config(config)
    rec_config = ranking_config.recommendations

    # 1) Cold start: nothing to personalize on
    if bundle.is_cold_start():
        logger.info("[recommend] COLD_START reason=no_signals_or_boosts")
        return []

    catalog = ensure_items(list(items or []))
    if not catalog:
        return []
    now: datetime = as_utc(opts.now) if opts.now is not None else utc_now()

    # 2) Affinity profile from resolved signals and explicit preferences
    by_id = {item.id: item for item in catalog}
    resolved = _resolve_signals(bundle, by_id)
    profile = build_profile(resolved, bundle.preferences, now, rec_config)
    if profile.is_empty():
        logger.info("[recommend] EMPTY_PROFILE signals=%s resolved=%s", len(bundle.saved) + len(bundle.viewed), len(resolved))
        return []

    # 3) Score every eligible candidate; popularity only breaks near-ties
    seen = {s.item_id for s in bundle.saved} | {s.item_id for s in bundle.viewed}
    excluded = seen | set(opts.exclude_ids)
    context = build_scoring_context(catalog, now)
    results: List[RecommendationResult] = []
    for item in catalog:
        if item.id in excluded or profile.excludes(item):
            continue
        affinity = score_candidate(item, profile, rec_config)
        if affinity.score <= 0:
            continue
        popularity = calculate_trending_score(item, context, config=ranking_config).total_score
        results.append(
            RecommendationResult(
                item=item,
                score=affinity.score + rec_config.popularity_weight * popularity,
                reasons=get_reasons(item, affinity, rec_config),
            )
        )

    # 4) Sort (catalog order on ties) and truncate
    ranked = sort_by_score_desc(results, key=lambda r: r.score)
    limit = opts.limit if opts.limit is not None else rec_config.max_recommendations
    logger.debug(
        "[recommend] RANKED candidates=%s kept=%s limit=%s",
        len(catalog), len(ranked), limit,
    )
    return apply_limit(ranked, limit)
