#!/usr/bin/env python3
"""
Configuration and Model Tests

Tests config defaults, dict/JSON loading, validation, derived parameters,
and the catalog / signal models.

Test Scenarios:
---------------
1. from_dict merges over defaults and ignores unknown keys
2. load_config reads a path or PROMPT_RANKING_CONFIG; bad files raise ConfigError
3. Weights not summing to 1 and views outweighing saves are rejected
4. compute_parameters reports derived values
5. Item and Signal coercion of partial or malformed records

Run:
----
    pytest tests/test_config.py -v
"""

import json

import pytest
from pydantic import ValidationError

from prompt_ranking import ConfigError, InvalidOptionError, RankingError
from prompt_ranking.computed_params import compute_parameters
from prompt_ranking.models.config import (
    CONFIG_ENV_VAR,
    DEFAULT_CONFIG,
    RankingConfig,
    RecommendationConfig,
    load_config,
    resolve_config,
)
from prompt_ranking.models.item import Item, ensure_items
from prompt_ranking.models.options import SearchOptions, TrendingOptions, resolve_options
from prompt_ranking.models.scoring import TrendingWeights
from prompt_ranking.models.signal import Preferences, SignalBundle, SignalKind, ensure_bundle


class TestDefaults:
    def test_default_values(self):
        config = DEFAULT_CONFIG
        assert config.search.title_weight == 3.0
        assert config.search.k1 == 1.2
        assert config.trending.weights.copies == 0.30
        assert config.recommendations.signal_half_life_days == 21.0
        assert config.recommendations.max_reasons == 2

    def test_resolve_config(self):
        assert resolve_config(None) is DEFAULT_CONFIG
        custom = RankingConfig()
        assert resolve_config(custom) is custom


class TestFromDict:
    def test_merges_over_defaults(self):
        config = RankingConfig.from_dict({"search": {"title_weight": 5}, "recommendations": {"max_reasons": 1}})
        assert config.search.title_weight == 5.0
        assert config.search.content_weight == 1.0
        assert config.recommendations.max_reasons == 1

    def test_unknown_keys_are_ignored(self):
        config = RankingConfig.from_dict({"search": {"bogus": 1}, "unknown_section": {}})
        assert config == DEFAULT_CONFIG

    def test_nested_trending_weights(self):
        weights = {"views": 0.2, "copies": 0.2, "saves": 0.2, "rating": 0.2, "freshness": 0.2}
        config = RankingConfig.from_dict({"trending": {"weights": weights}})
        assert config.trending.weights.views == 0.2


class TestValidation:
    def test_weights_must_sum_to_one(self):
        with pytest.raises(ValidationError):
            TrendingWeights(views=0.5)

    def test_negative_weight_rejected(self):
        with pytest.raises(ValidationError):
            TrendingWeights(views=-0.25, copies=0.80)

    def test_views_cannot_outweigh_saves(self):
        with pytest.raises(ValidationError):
            RecommendationConfig(saved_signal_weight=0.5, viewed_signal_weight=1.0)

    def test_freshness_bounds(self):
        with pytest.raises(ValidationError):
            RankingConfig.from_dict({"trending": {"min_freshness": 0.9, "max_freshness": 0.5}})


class TestLoadConfig:
    def test_load_from_path(self, tmp_path):
        path = tmp_path / "ranking.json"
        path.write_text(json.dumps({"search": {"fuzzy_threshold": 0.8}}))
        assert load_config(path).search.fuzzy_threshold == 0.8

    def test_load_from_env(self, tmp_path, monkeypatch):
        path = tmp_path / "ranking.json"
        path.write_text(json.dumps({"recommendations": {"max_recommendations": 3}}))
        monkeypatch.setenv(CONFIG_ENV_VAR, str(path))
        assert load_config().recommendations.max_recommendations == 3

    def test_defaults_without_path_or_env(self, monkeypatch):
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
        assert load_config() == DEFAULT_CONFIG

    @pytest.mark.parametrize(
        "content",
        ["{not json", "[1, 2, 3]", json.dumps({"trending": {"weights": {"views": 0.9}}})],
    )
    def test_bad_files_raise_config_error(self, tmp_path, content):
        path = tmp_path / "ranking.json"
        path.write_text(content)
        with pytest.raises(ConfigError):
            load_config(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError) as exc_info:
            load_config(tmp_path / "missing.json")
        assert isinstance(exc_info.value, RankingError)


class TestComputedParameters:
    def test_default_derived_values(self):
        computed = compute_parameters()
        assert computed["title_to_content_ratio"] == pytest.approx(3.0)
        assert computed["saved_to_viewed_ratio"] == pytest.approx(2.0)
        assert computed["freshness_half_life_days"] == pytest.approx(28.0)
        assert computed["popularity_share"] == pytest.approx(0.70)
        assert computed["min_trending_score"] == pytest.approx(0.13)
        assert computed["min_fuzzy_multiplier"] == pytest.approx(0.56)

    def test_tracks_config_changes(self):
        config = RankingConfig.from_dict({"recommendations": {"viewed_signal_weight": 0.5}})
        assert compute_parameters(config)["saved_to_viewed_ratio"] == pytest.approx(4.0)


class TestOptions:
    def test_dict_and_model_inputs(self):
        assert resolve_options(SearchOptions, {"limit": 3}).limit == 3
        options = TrendingOptions(category="writing")
        assert resolve_options(TrendingOptions, options) is options
        assert resolve_options(TrendingOptions, None).exclude_ids == []

    @pytest.mark.parametrize("options", [{"limit": -1}, {"limit": "5"}, {"unknown": 1}, "limit=5"])
    def test_invalid_options(self, options):
        with pytest.raises(InvalidOptionError):
            resolve_options(SearchOptions, options)

    def test_invalid_option_error_is_value_error(self):
        with pytest.raises(ValueError):
            resolve_options(TrendingOptions, {"min_score": 2})


class TestModels:
    def test_item_coercion(self):
        item = Item.model_validate(
            {"id": 7, "title": None, "tags": ["AI", "ai", " Writing ", 3], "featured": "yes", "stats": "n/a"}
        )
        assert item.id == "7"
        assert item.title == ""
        assert item.tags == ["AI", "Writing"]
        assert item.featured is False
        assert item.stats.views == 0

    def test_oversized_stats_are_coerced(self):
        stats = {"views": 10**400, "rating": 10**400, "saves": -(10**400)}
        item = Item.model_validate({"id": "big", "stats": stats})
        assert item.stats.views == 0
        assert item.stats.saves == 0
        assert item.stats.rating == 0.0

    def test_ensure_items_drops_records_without_id(self):
        items = ensure_items([{"id": "ok"}, {"id": "  "}, {"title": "no id"}])
        assert [i.id for i in items] == ["ok"]

    def test_extra_catalog_fields_are_kept(self):
        item = Item.model_validate({"id": "p", "slug": "my-prompt"})
        assert item.model_extra == {"slug": "my-prompt"}

    def test_preferences_are_normalized(self):
        prefs = Preferences(tags=[" AI ", "Writing"], exclude_tags=["writing"])
        assert prefs.tags == {"ai", "writing"}
        assert prefs.boosted_tags == {"ai"}
        assert prefs.has_boosts()

    def test_bundle_kinds_and_cold_start(self):
        bundle = ensure_bundle({"viewed": ["p1"], "saved": [{"item_id": "p2"}]})
        assert bundle.viewed[0].kind == SignalKind.VIEWED
        assert bundle.saved[0].kind == SignalKind.SAVED
        assert not bundle.is_cold_start()
        assert SignalBundle().is_cold_start()

    def test_invalid_signal_kind_skips_signal(self):
        bundle = ensure_bundle({"viewed": [{"item_id": "p1", "kind": "liked"}]})
        assert bundle.viewed == []
