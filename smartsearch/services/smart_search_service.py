"""
Smart search orchestration.

query -> input guard -> HintComposer -> optional generative candidate
(bounded by a timeout) -> ResponseReconciler -> SmartSearchResult
"""

import asyncio
from typing import Optional

import structlog

from smartsearch.config.settings import Settings, get_settings
from smartsearch.search.filters import SmartSearchResult
from smartsearch.search.hints import HintBundle, HintComposer, hint_composer
from smartsearch.search.reconciler import ResponseReconciler
from smartsearch.services.llm_service import (
    BedrockCompletionAdapter,
    CompletionAdapter,
    CompletionError,
)
from smartsearch.services.prompts import build_user_prompt, get_system_prompt
from smartsearch.services.search_metrics import record_search
from smartsearch.utils.errors import EmptyQueryError, QueryTooLongError

logger = structlog.get_logger(__name__)

SUPPORTED_LANGUAGES = ("ko", "en")


class SmartSearchService:
    """Compile free-text SQL performance queries into validated filters."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        adapter: Optional[CompletionAdapter] = None,
        composer: HintComposer = hint_composer,
        reconciler: Optional[ResponseReconciler] = None,
    ):
        self.settings = settings or get_settings()
        self._adapter = adapter
        self.composer = composer
        self.reconciler = reconciler or ResponseReconciler(
            fallback_pattern_length=self.settings.fallback_pattern_length,
            max_suggestions=self.settings.max_suggestions,
        )

    @property
    def adapter(self) -> Optional[CompletionAdapter]:
        """Injected adapter, or a Bedrock one when generative interpretation is enabled."""
        if self._adapter is None and self.settings.llm_enabled:
            self._adapter = BedrockCompletionAdapter(self.settings)
        return self._adapter

    def validate_query(self, query: Optional[str]) -> str:
        """Raise QueryTooLongError / EmptyQueryError; return the stripped query."""
        if query is None or not query.strip():
            record_search("rejected")
            raise EmptyQueryError()
        if len(query) > self.settings.max_query_length:
            record_search("rejected")
            raise QueryTooLongError(len(query), self.settings.max_query_length)
        return query.strip()

    async def search(
        self,
        query: str,
        language: str = "ko",
        candidate_text: Optional[str] = None,
    ) -> SmartSearchResult:
        text = self.validate_query(query)
        if language not in SUPPORTED_LANGUAGES:
            logger.debug("Unsupported language, using Korean", language=language)
            language = "ko"

        hints = self.composer.compose(text)

        if candidate_text is None:
            candidate_text = await self._request_candidate(text, hints, language)

        result = self.reconciler.reconcile(candidate_text, hints, text, language)
        record_search(result.source)
        logger.info(
            "Smart search completed",
            query_length=len(text),
            language=language,
            **result.to_log_context(),
        )
        return result

    async def _request_candidate(self, query: str, hints: HintBundle, language: str) -> Optional[str]:
        """Candidate text from the adapter, or None on timeout or any adapter failure."""
        adapter = self.adapter
        if adapter is None:
            return None

        prompt = build_user_prompt(query, hints, language, self.settings.few_shot_examples)
        try:
            return await asyncio.wait_for(
                adapter.complete(prompt, system_prompt=get_system_prompt(language)),
                timeout=self.settings.llm_timeout_seconds,
            )
        except asyncio.TimeoutError:
            record_search("llm_timeout")
            logger.warning(
                "Generative interpretation timed out, using rule-based hints",
                timeout_seconds=self.settings.llm_timeout_seconds,
            )
        except CompletionError as e:
            record_search("llm_error")
            logger.warning(
                "Generative interpretation failed, using rule-based hints",
                error=str(e),
                error_code=e.error_code,
            )
        except Exception as e:
            record_search("llm_error")
            logger.error("Unexpected adapter error, using rule-based hints", error=str(e), exc_info=True)
        return None


smart_search_service = SmartSearchService()
