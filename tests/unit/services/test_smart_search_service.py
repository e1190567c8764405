"""
Tests for SmartSearchService orchestration.

Covers the input guard, the optional generative candidate with its timeout
and failure fallbacks, and language handling.
"""

import asyncio

import pytest
from unittest.mock import AsyncMock, patch

from smartsearch.config.settings import Settings
from smartsearch.services.llm_service import CompletionError
from smartsearch.services.smart_search_service import SmartSearchService
from smartsearch.utils.errors import EmptyQueryError, ErrorCode, QueryTooLongError

COMPOUND_QUERY = "어제 UPDATE 중 느린 것"
COMPOUND_FILTERS = {
    "timeRange": "24h",
    "sqlPattern": "%UPDATE%",
    "minElapsedTime": 1000,
    "sortBy": "elapsed_time",
    "sortOrder": "desc",
}


class SlowAdapter:
    async def complete(self, prompt, system_prompt=None):
        await asyncio.sleep(5)
        return '{"filters": {"timeRange": "7d"}}'


@pytest.fixture
def service(settings):
    return SmartSearchService(settings=settings)


@pytest.fixture
def adapter():
    adapter = AsyncMock()
    adapter.complete.return_value = (
        '{"interpretation": "어제 느린 UPDATE", "filters": {"timeRange": "24h", "limit": 3}, '
        '"suggestions": ["어제 느린 SELECT"]}'
    )
    return adapter


class TestQueryGuard:

    def test_query_at_max_length_is_accepted(self, service):
        query = "가" * 500
        assert service.validate_query(query) == query

    def test_query_over_max_length_is_rejected(self, service):
        with pytest.raises(QueryTooLongError) as exc_info:
            service.validate_query("가" * 501)

        assert exc_info.value.code == ErrorCode.QUERY_TOO_LONG
        assert exc_info.value.details == {"length": 501, "maxLength": 500}

    def test_length_counts_characters_not_bytes(self, service):
        # 500 Hangul syllables are 1500 bytes in UTF-8
        assert len(("가" * 500).encode("utf-8")) == 1500
        assert service.validate_query("가" * 500)

    @pytest.mark.parametrize("query", [None, "", "   ", "\n\t"])
    def test_empty_query_is_rejected(self, service, query):
        with pytest.raises(EmptyQueryError):
            service.validate_query(query)

    def test_query_is_stripped(self, service):
        assert service.validate_query("  느린 쿼리 ") == "느린 쿼리"

    def test_configured_max_length(self):
        service = SmartSearchService(settings=Settings(max_query_length=10))
        with pytest.raises(QueryTooLongError):
            service.validate_query("x" * 11)

    @pytest.mark.asyncio
    async def test_search_rejects_before_any_work(self, settings, adapter):
        service = SmartSearchService(settings=settings, adapter=adapter)
        with pytest.raises(QueryTooLongError):
            await service.search("가" * 501)
        adapter.complete.assert_not_awaited()


class TestRuleBasedSearch:

    @pytest.mark.asyncio
    async def test_compound_query(self, service):
        result = await service.search(COMPOUND_QUERY)

        assert result.source == "rules"
        assert result.filters.to_dict() == COMPOUND_FILTERS
        assert 1 <= len(result.suggestions) <= 5

    @pytest.mark.asyncio
    async def test_no_adapter_when_disabled(self, service):
        assert service.adapter is None

    @pytest.mark.asyncio
    async def test_unsupported_language_uses_korean(self, service):
        result = await service.search("느린 쿼리", language="fr")
        assert result.interpretation.endswith("검색합니다 (실행 시간 내림차순 정렬).")

    @pytest.mark.asyncio
    async def test_english_interpretation(self, service):
        result = await service.search("slow queries today", language="en")
        assert result.interpretation.startswith("Searching SQL")

    @pytest.mark.asyncio
    async def test_records_source(self, service):
        with patch("smartsearch.services.smart_search_service.record_search") as record:
            await service.search("느린 쿼리")
        record.assert_called_once_with("rules")

    @pytest.mark.asyncio
    async def test_configured_reconciler_bounds(self):
        service = SmartSearchService(settings=Settings(max_suggestions=1, fallback_pattern_length=3))
        result = await service.search("블라블라")

        assert result.filters.sql_pattern == "%블라블%"
        assert len(result.suggestions) == 1


class TestGenerativeCandidate:

    @pytest.mark.asyncio
    async def test_candidate_is_reconciled(self, settings, adapter):
        service = SmartSearchService(settings=settings, adapter=adapter)
        result = await service.search(COMPOUND_QUERY)

        assert result.source == "llm"
        assert result.interpretation == "어제 느린 UPDATE"
        assert result.suggestions == ["어제 느린 SELECT"]
        assert result.filters.to_dict() == {**COMPOUND_FILTERS, "limit": 3}

    @pytest.mark.asyncio
    async def test_adapter_receives_prompt_and_system_prompt(self, settings, adapter):
        service = SmartSearchService(settings=settings, adapter=adapter)
        await service.search(COMPOUND_QUERY, language="en")

        prompt = adapter.complete.await_args.args[0]
        system_prompt = adapter.complete.await_args.kwargs["system_prompt"]
        assert COMPOUND_QUERY in prompt
        assert "## Search Query" in prompt
        assert system_prompt.startswith("You are a search query interpretation expert")

    @pytest.mark.asyncio
    async def test_explicit_candidate_skips_adapter(self, settings, adapter):
        service = SmartSearchService(settings=settings, adapter=adapter)
        result = await service.search("느린 쿼리", candidate_text='{"filters": {"schema": "hr"}}')

        adapter.complete.assert_not_awaited()
        assert result.source == "llm"
        assert result.filters.schema == "HR"

    @pytest.mark.asyncio
    async def test_timeout_falls_back_to_rules(self):
        service = SmartSearchService(
            settings=Settings(llm_timeout_seconds=0.01),
            adapter=SlowAdapter(),
        )
        with patch("smartsearch.services.smart_search_service.record_search") as record:
            result = await service.search(COMPOUND_QUERY)

        assert result.source == "rules"
        assert result.filters.to_dict() == COMPOUND_FILTERS
        record.assert_any_call("llm_timeout")

    @pytest.mark.asyncio
    async def test_completion_error_falls_back_to_rules(self, settings, adapter):
        adapter.complete.side_effect = CompletionError("Bedrock API error: boom", "ThrottlingException")
        service = SmartSearchService(settings=settings, adapter=adapter)

        with patch("smartsearch.services.smart_search_service.record_search") as record:
            result = await service.search(COMPOUND_QUERY)

        assert result.source == "rules"
        assert result.filters.to_dict() == COMPOUND_FILTERS
        record.assert_any_call("llm_error")

    @pytest.mark.asyncio
    async def test_unexpected_adapter_error_falls_back_to_rules(self, settings, adapter):
        adapter.complete.side_effect = RuntimeError("socket closed")
        service = SmartSearchService(settings=settings, adapter=adapter)

        result = await service.search(COMPOUND_QUERY)
        assert result.source == "rules"

    @pytest.mark.asyncio
    async def test_garbage_candidate_falls_back_to_rules(self, settings, adapter):
        adapter.complete.return_value = "I cannot help with that."
        service = SmartSearchService(settings=settings, adapter=adapter)

        result = await service.search(COMPOUND_QUERY)
        assert result.source == "rules"
        assert result.filters.to_dict() == COMPOUND_FILTERS

    def test_bedrock_adapter_created_when_enabled(self):
        service = SmartSearchService(settings=Settings(llm_enabled=True))
        with patch("smartsearch.services.smart_search_service.BedrockCompletionAdapter") as adapter_cls:
            assert service.adapter is adapter_cls.return_value
            assert service.adapter is adapter_cls.return_value
        adapter_cls.assert_called_once_with(service.settings)
