"""
Tests for synonym tables and SynonymResolver.

Covers:
- specific-before-generic ordering of every table (checked at construction)
- category lookups for Korean and English phrasing
- sort field defaulting when only sort intent is present
"""

import pytest

from smartsearch.search.synonyms import (
    SYNONYM_TABLES,
    PerformanceFocus,
    SynonymCategory,
    SynonymResolver,
    SynonymTable,
    synonym_resolver,
)


class TestSynonymTableOrdering:
    """A phrase must precede every shorter phrase it contains."""

    @pytest.mark.parametrize("category", list(SynonymCategory))
    def test_every_table_has_no_precedence_violations(self, category):
        table = SYNONYM_TABLES[category]
        assert table.precedence_violations() == []

    def test_every_category_has_a_table(self):
        assert set(SYNONYM_TABLES) == set(SynonymCategory)

    def test_generic_before_specific_is_rejected(self):
        with pytest.raises(ValueError) as exc_info:
            SynonymTable(SynonymCategory.TIME_RANGE, (("시간", "1h"), ("한 시간", "1h")))
        assert "한 시간" in str(exc_info.value)

    def test_ordering_check_is_case_insensitive(self):
        with pytest.raises(ValueError):
            SynonymTable(SynonymCategory.SQL_TYPE, (("select", "SELECT"), ("SELECT INTO", "INSERT")))

    def test_first_contained_phrase_wins(self):
        table = SynonymTable(SynonymCategory.TIME_RANGE, (("6시간", "6h"), ("시간", "1h")))
        assert table.lookup("최근 6시간") == "6h"
        assert table.lookup("시간대별") == "1h"
        assert table.lookup("어제") is None


class TestTimeRangeResolution:

    @pytest.mark.parametrize("query,expected", [
        ("최근 1시간 느린 쿼리", "1h"),
        ("한 시간 동안", "1h"),
        ("오늘 실행된 쿼리", "24h"),
        ("어제 UPDATE 중 느린 것", "24h"),
        ("3개월간 추이", "90d"),
        ("분기별 쿼리", "90d"),
        ("yesterday slow queries", "24h"),
        ("queries in the last hour", "1h"),
    ])
    def test_time_phrases(self, query, expected):
        assert synonym_resolver.resolve(query, SynonymCategory.TIME_RANGE) == expected

    def test_no_time_phrase(self):
        assert synonym_resolver.resolve("느린 쿼리", SynonymCategory.TIME_RANGE) is None

    @pytest.mark.parametrize("query", ["최근 11시간", "최근 21일", "11개월", "지난 2주", "last 2 hours"])
    def test_unsupported_window_leaves_range_unset(self, query):
        assert synonym_resolver.resolve(query, SynonymCategory.TIME_RANGE) is None

    @pytest.mark.parametrize("query,expected", [
        ("최근 12시간", "12h"),
        ("최근 24시간 쿼리", "24h"),
        ("1주일 동안", "7d"),
        ("last 7 days", "7d"),
    ])
    def test_supported_numeric_windows(self, query, expected):
        assert synonym_resolver.resolve(query, SynonymCategory.TIME_RANGE) == expected

    def test_digit_phrase_does_not_match_inside_longer_number(self):
        table = SynonymTable(SynonymCategory.TIME_RANGE, (("1시간", "1h"),))
        assert table.lookup("11시간") is None
        assert table.lookup("최근 1시간") == "1h"


class TestSqlTypeResolution:

    @pytest.mark.parametrize("query,expected", [
        ("UPDATE 쿼리", "UPDATE"),
        ("update statements", "UPDATE"),
        ("수정 쿼리", "UPDATE"),
        ("조회 쿼리", "SELECT"),
        ("삭제 쿼리", "DELETE"),
        ("데이터 입력 쿼리", "INSERT"),
    ])
    def test_sql_type_phrases(self, query, expected):
        assert synonym_resolver.resolve(query, SynonymCategory.SQL_TYPE) == expected

    def test_generic_query_word_is_not_a_sql_type(self):
        assert synonym_resolver.resolve("느린 쿼리", SynonymCategory.SQL_TYPE) is None


class TestPerformanceResolution:

    def test_slow_means_elapsed_time_high(self):
        focus = synonym_resolver.resolve("느린 쿼리", SynonymCategory.PERFORMANCE)
        assert focus == PerformanceFocus("elapsed_time", "high")
        assert focus.sort_order == "desc"

    def test_fast_means_elapsed_time_low(self):
        focus = synonym_resolver.resolve("빠른 쿼리", SynonymCategory.PERFORMANCE)
        assert focus == PerformanceFocus("elapsed_time", "low")
        assert focus.sort_order == "asc"

    @pytest.mark.parametrize("query,field", [
        ("CPU 많이 쓰는 쿼리", "cpu_time"),
        ("버퍼 많이 쓰는", "buffer_gets"),
        ("디스크 읽기 많은", "disk_reads"),
        ("자주 실행되는 쿼리", "executions"),
        ("full scan queries", "buffer_gets"),
        ("행이 많은 쿼리", "rows_processed"),
        ("queries returning many rows", "rows_processed"),
    ])
    def test_metric_focus(self, query, field):
        assert synonym_resolver.resolve(query, SynonymCategory.PERFORMANCE).field == field


class TestSortResolution:

    def test_explicit_sort_field(self):
        assert synonym_resolver.resolve_sort_field("CPU순으로 보여줘") == "cpu_time"
        assert synonym_resolver.resolve_sort_field("빈도순 정렬") == "executions"

    def test_sort_intent_without_field_defaults_to_elapsed_time(self):
        assert synonym_resolver.resolve_sort_field("정렬해서 보여줘") == "elapsed_time"
        assert synonym_resolver.resolve_sort_field("sort by something") == "elapsed_time"

    def test_no_sort_wording(self):
        assert synonym_resolver.resolve_sort_field("느린 쿼리") is None

    def test_sort_direction(self):
        assert synonym_resolver.resolve("오름차순으로", SynonymCategory.SORT_DIRECTION) == "asc"
        assert synonym_resolver.resolve("빠른순", SynonymCategory.SORT_DIRECTION) == "asc"
        assert synonym_resolver.resolve("느린순", SynonymCategory.SORT_DIRECTION) == "desc"


class TestSynonymResolver:

    def test_empty_query(self):
        for category in SynonymCategory:
            assert synonym_resolver.resolve("", category) is None

    def test_custom_tables(self):
        table = SynonymTable(SynonymCategory.TIME_RANGE, (("지난 분기", "90d"),))
        resolver = SynonymResolver({SynonymCategory.TIME_RANGE: table})
        assert resolver.resolve("지난 분기 쿼리", SynonymCategory.TIME_RANGE) == "90d"
        assert resolver.resolve("느린 쿼리", SynonymCategory.PERFORMANCE) is None

    def test_category_accepts_string_value(self):
        assert synonym_resolver.resolve("오늘", "time_range") == "24h"
