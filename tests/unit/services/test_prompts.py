"""
Tests for interpretation prompts and worked examples
"""

import json

import pytest

from smartsearch.search.reconciler import validate_filters
from smartsearch.services.prompts import (
    EXAMPLE_CATEGORIES,
    FEW_SHOT_EXAMPLES,
    SYSTEM_PROMPT_EN,
    SYSTEM_PROMPT_KO,
    build_user_prompt,
    format_examples,
    get_system_prompt,
    select_examples,
)


class TestFewShotExamples:

    def test_every_category_has_examples(self):
        for category in EXAMPLE_CATEGORIES:
            assert any(ex.category == category for ex in FEW_SHOT_EXAMPLES), category

    @pytest.mark.parametrize("example", FEW_SHOT_EXAMPLES, ids=lambda ex: ex.query)
    def test_example_filters_survive_validation(self, example):
        """Worked examples must never teach the model a filter we would drop."""
        assert validate_filters(example.filters).to_dict() == example.filters

    def test_select_examples_per_category(self):
        selected = select_examples(1)
        assert [ex.category for ex in selected] == list(EXAMPLE_CATEGORIES)

    def test_select_examples_is_deterministic(self):
        assert select_examples(2) == select_examples(2)

    def test_select_zero_examples(self):
        assert select_examples(0) == []


class TestFormatting:

    def test_format_korean(self):
        example = FEW_SHOT_EXAMPLES[0]
        formatted = format_examples([example], "ko")
        input_line, output_line = formatted.split("\n")

        assert input_line == f'입력: "{example.query}"'
        assert json.loads(output_line[len("출력: "):]) == example.to_output()

    def test_format_english_labels(self):
        formatted = format_examples(FEW_SHOT_EXAMPLES[:2], "en")
        assert formatted.count("Input: ") == 2
        assert formatted.count("Output: ") == 2

    def test_korean_text_is_not_escaped(self):
        assert "\\u" not in format_examples(FEW_SHOT_EXAMPLES[:1], "ko")


class TestPrompts:

    def test_system_prompt_by_language(self):
        assert get_system_prompt("ko") == SYSTEM_PROMPT_KO
        assert get_system_prompt("en") == SYSTEM_PROMPT_EN
        assert get_system_prompt("fr") == SYSTEM_PROMPT_KO

    def test_user_prompt_contains_query_and_hints(self, compose):
        query = "어제 UPDATE 중 느린 것"
        prompt = build_user_prompt(query, compose(query), "ko")

        assert f'"{query}"' in prompt
        assert "[사전 분석 힌트]" in prompt
        assert "## 사용 가능한 필터" in prompt
        assert "## 예시" in prompt
        assert prompt.rstrip().endswith("JSON만 출력하세요.")

    def test_user_prompt_without_examples(self, compose):
        prompt = build_user_prompt("느린 쿼리", compose("느린 쿼리"), "ko", examples_per_category=0)
        assert "## 예시" not in prompt
        assert "입력:" not in prompt

    def test_english_user_prompt(self, compose):
        prompt = build_user_prompt("slow queries today", compose("slow queries today"), "en")
        assert "## Search Query" in prompt
        assert "[Pre-analysis hints]" in prompt
        assert "Input: " in prompt
        assert "## Request" in prompt
