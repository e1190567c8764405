"""
Tests for LimitExtractor: explicit counts, number words and singular superlatives.
"""

import pytest

from smartsearch.search.limits import LimitExtractor, limit_extractor


class TestExplicitCounts:

    @pytest.mark.parametrize("query,expected", [
        ("상위 5개 느린 쿼리", 5),
        ("느린 쿼리 10개만", 10),
        ("top 20 slow queries", 20),
        ("톱 3", 3),
        ("가장 많이 실행된 쿼리 20개", 20),
    ])
    def test_numeric_limit(self, query, expected):
        assert limit_extractor.extract(query) == expected

    def test_months_are_not_counts(self):
        assert limit_extractor.extract("3개월 동안 느린 쿼리") is None

    def test_clamped_to_max(self):
        assert limit_extractor.extract("상위 5000개") == 1000

    def test_zero_is_ignored(self):
        assert limit_extractor.extract("0개") is None


class TestNumberWords:

    @pytest.mark.parametrize("query,expected", [
        ("가장 느린 쿼리 하나", 1),
        ("최근 1시간 가장 느린 쿼리 하나만", 1),
        ("느린 쿼리 한 개", 1),
        ("느린 쿼리 두 개", 2),
        ("세 개만 보여줘", 3),
        ("다섯 개", 5),
        ("열 개", 10),
        ("스무 개", 20),
    ])
    def test_korean_number_words(self, query, expected):
        assert limit_extractor.extract(query) == expected


class TestSuperlatives:

    def test_singular_superlative_means_one(self):
        assert limit_extractor.extract("가장 느린 쿼리") == 1

    def test_plural_superlative_leaves_limit_unset(self):
        assert limit_extractor.extract("가장 느린 쿼리들") is None

    def test_superlative_with_count_uses_count(self):
        assert limit_extractor.extract("가장 느린 쿼리 10개") == 10

    def test_english_singular_superlative(self):
        assert limit_extractor.extract("show me the slowest query") == 1

    def test_no_superlative_no_limit(self):
        assert limit_extractor.extract("느린 쿼리") is None


class TestLimitExtractor:

    def test_empty_query(self):
        assert limit_extractor.extract("") is None

    def test_custom_max_limit(self):
        assert LimitExtractor(max_limit=50).extract("상위 100개") == 50
