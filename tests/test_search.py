#!/usr/bin/env python3
"""
Lexical Search Tests

Tests field-weighted BM25 scoring, the fuzzy fallback, and search options.

Test Scenarios:
---------------
1. Fuzzy: "idee wizrd" finds "The Idea Wizard" through approximate matches
2. Field weights: a title hit outranks a body hit for the same term
3. Options: category filter, limit, invalid option shapes
4. Degraded input: empty / stopword / symbol-only queries, empty catalog, malformed records
5. Prebuilt index gives the same ranking as an on-the-fly one
6. Per-field BM25Okapi scores with whole-document idf; k1 and b fixed at build time

Run:
----
    pytest tests/test_search.py -v
"""

import math

import pytest
from rank_bm25 import BM25Okapi

from prompt_ranking import InvalidOptionError, build_index, search
from prompt_ranking.models.config import RankingConfig, SearchConfig

from conftest import make_item


def _ids(hits):
    return [hit.item.id for hit in hits]


class TestFuzzySearch:
    """Near-miss spellings still surface the intended prompt."""

    def test_misspelled_query_finds_idea_wizard(self, search_catalog):
        hits = search("idee wizrd", search_catalog)
        assert _ids(hits)[0] == "wizard"
        assert hits[0].fuzzy is True
        assert "title" in hits[0].matched_fields
        assert hits[0].score > 0

    def test_exact_match_is_not_flagged_fuzzy(self, search_catalog):
        hits = search("wizard", search_catalog)
        assert _ids(hits) == ["wizard"]
        assert hits[0].fuzzy is False

    def test_exact_beats_fuzzy_for_same_term(self):
        catalog = [
            make_item("near", title="Wizards guild"),
            make_item("exact", title="Wizard guild"),
        ]
        hits = search("wizard", catalog)
        assert _ids(hits) == ["exact", "near"]
        assert hits[0].score > hits[1].score
        assert hits[1].fuzzy is True

    def test_fuzzy_can_be_disabled(self, search_catalog):
        config = RankingConfig(search=SearchConfig(fuzzy_enabled=False))
        assert search("idee wizrd", search_catalog, config=config) == []

    def test_short_terms_never_fuzzy_match(self):
        catalog = [make_item("go", title="Go concurrency patterns")]
        assert search("gx", catalog) == []


class TestFieldWeights:
    """Title hits count more than description, tag, or content hits."""

    def test_title_match_outranks_content_match(self):
        catalog = [
            make_item("body", title="Code Helper", content="Works with python scripts of any size."),
            make_item("title", title="Python Debugger", content="Step through code line by line."),
        ]
        assert _ids(search("python", catalog)) == ["title", "body"]

    def test_matched_fields_reports_every_field_hit(self, search_catalog):
        hits = search("sql", search_catalog)
        by_id = {hit.item.id: hit for hit in hits}
        assert by_id["sql"].matched_fields == ["title", "tags"]
        assert by_id["report"].matched_fields == ["content"]
        assert _ids(hits)[0] == "sql"

    def test_zero_weight_field_is_ignored(self):
        catalog = [make_item("only-body", title="Helper", content="python everywhere")]
        config = RankingConfig(search=SearchConfig(content_weight=0.0))
        assert search("python", catalog, config=config) == []


class TestSearchOptions:
    """Category filter, limit, and option validation."""

    def test_category_filter_is_case_insensitive(self, search_catalog):
        hits = search("sql", search_catalog, {"category": "DATA"})
        assert set(_ids(hits)) == {"sql", "report"}
        assert search("sql", search_catalog, {"category": "writing"}) == []

    def test_limit(self, search_catalog):
        assert len(search("sql", search_catalog, {"limit": 1})) == 1
        assert search("sql", search_catalog, {"limit": 0}) == []

    def test_negative_limit_raises(self, search_catalog):
        with pytest.raises(InvalidOptionError):
            search("sql", search_catalog, {"limit": -1})

    def test_unknown_option_raises(self, search_catalog):
        with pytest.raises(InvalidOptionError):
            search("sql", search_catalog, {"sort": "date"})

    def test_non_dict_options_raise(self, search_catalog):
        with pytest.raises(InvalidOptionError):
            search("sql", search_catalog, ["limit", 1])


class TestDegradedInput:
    """Nothing to match means an empty result, never an exception."""

    def test_empty_query(self, search_catalog):
        assert search("", search_catalog) == []
        assert search("   ", search_catalog) == []

    def test_stopword_and_punctuation_query(self, search_catalog):
        assert search("the and of", search_catalog) == []
        assert search("!!! ???", search_catalog) == []

    def test_symbol_only_query_matches_nothing(self):
        catalog = [make_item("ops", content="use ++ and ## everywhere")]
        assert search("++", catalog) == []
        assert search("##", catalog) == []
        assert search("+ #", catalog) == []

    def test_oversized_counters_do_not_raise(self):
        catalog = [
            make_item("big", title="SQL tips", stats={"rating": 10**400, "views": 10**400}),
            make_item("small", title="SQL basics"),
        ]
        assert set(_ids(search("sql", catalog))) == {"big", "small"}

    def test_empty_catalog(self):
        assert search("sql", []) == []
        assert search("sql", None) == []

    def test_malformed_records_are_dropped(self):
        catalog = [{"title": "no id sql"}, make_item("ok", title="SQL basics"), 42]
        assert _ids(search("sql", catalog)) == ["ok"]

    def test_ties_keep_catalog_order(self):
        catalog = [make_item("first", title="Prompt"), make_item("second", title="Prompt")]
        assert _ids(search("prompt", catalog)) == ["first", "second"]


class TestPrebuiltIndex:
    """A reusable index ranks exactly like an index built per query."""

    def test_index_matches_on_the_fly_ranking(self, search_catalog):
        index = build_index(search_catalog)
        assert index.doc_count == len(search_catalog)
        for query in ("sql", "idee wizrd", "cold email"):
            assert _ids(search(query, index=index)) == _ids(search(query, search_catalog))

    def test_idf_is_positive_for_common_terms(self):
        catalog = [make_item(str(i), title="prompt") for i in range(5)]
        index = build_index(catalog)
        assert index.idf("prompt") > 0
        assert index.idf("prompt") < index.idf("unseen")


class TestBM25Scoring:
    """Per-field BM25Okapi models with document-level idf."""

    def test_title_score_matches_formula(self):
        # Equal title lengths: length normalization is exactly k1, tf = 1.
        catalog = [
            make_item("hit", title="Python Debugger"),
            make_item("miss", title="Code Helper"),
        ]
        hits = search("python", catalog)
        assert _ids(hits) == ["hit"]
        idf = math.log((2 - 1 + 0.5) / (1 + 0.5) + 1)
        assert hits[0].score == pytest.approx(3.0 * idf)

    def test_index_holds_one_bm25_model_per_field(self, search_catalog):
        index = build_index(search_catalog)
        assert set(index.fields) == {"title", "description", "tags", "content"}
        assert all(isinstance(model, BM25Okapi) for model in index.fields.values())
        assert index.fields["title"].idf["sql"] == pytest.approx(index.idf("sql"))

    def test_field_empty_everywhere(self):
        catalog = [make_item("a", title="Prompt one"), make_item("b", title="Prompt two")]
        for b in (0.75, 1.0):
            hits = search("prompt", catalog, config=RankingConfig(search=SearchConfig(b=b)))
            assert _ids(hits) == ["a", "b"]
            assert all(math.isfinite(hit.score) and hit.matched_fields == ["title"] for hit in hits)

    def test_k1_and_b_come_from_build_config(self):
        catalog = [
            make_item("short", title="Python"),
            make_item("long", title="Python tools for data teams"),
        ]
        flat = RankingConfig(search=SearchConfig(b=0.0))
        hits = search("python", catalog, config=flat)
        assert hits[0].score == pytest.approx(hits[1].score)
        assert _ids(search("python", catalog)) == ["short", "long"]
