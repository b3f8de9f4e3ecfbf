"""Unit tests for index-level and result-level relevance."""

import math

import pytest

from minisearch.search.scoring import index_relevance, result_relevance


pytestmark = pytest.mark.unit


class TestIndexRelevance:
    def test_normalizes_by_query_term_count(self, make_document):
        document = make_document("https://a", "java tooling", "Guide")
        single = index_relevance(document, ["java"])
        double = index_relevance(document, ["java", "missing"])

        quality = 0.1 * document.relevance_score
        assert single - quality == pytest.approx(1.0 + math.log(2))
        assert double - quality == pytest.approx((1.0 + math.log(2)) / 2)

    def test_title_bonus_is_case_insensitive(self, make_document):
        titled = make_document("https://a", "java tooling", "JAVA Handbook")
        plain = make_document("https://b", "java tooling", "Handbook")
        assert index_relevance(titled, ["java"]) - index_relevance(plain, ["java"]) == pytest.approx(2.0)

    def test_empty_terms_yield_quality_only(self, make_document):
        document = make_document("https://a", "java tooling")
        assert index_relevance(document, []) == pytest.approx(0.1 * document.relevance_score)


class TestResultRelevance:
    def test_components(self):
        score = result_relevance(
            ["java"],
            {"java": [0, 4]},
            title="Java Guide",
            domain="example.com",
            content_length=500,
        )
        # 1 matched + 0.5 * 2 positions + 2 title + 0.5 domain + 1 length bonus
        assert score == pytest.approx(5.5)

    def test_length_bonus_shrinks_for_long_content(self):
        score = result_relevance(["java"], {"java": [0]}, title="", domain="", content_length=4000)
        assert score == pytest.approx(1.0 + 0.5 + 0.25)

    def test_no_length_bonus_for_empty_content(self):
        assert result_relevance([], {}, title=None, domain=None, content_length=0) == 0.0
