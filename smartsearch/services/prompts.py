"""
Prompts for generative query interpretation.

The model only proposes a candidate; every field it returns is validated by
the reconciler, so the prompt is guidance rather than a contract.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence, Tuple

from smartsearch.search.hints import HintBundle, hint_context


SYSTEM_PROMPT_KO = """당신은 Oracle SQL 성능 모니터링 시스템의 검색 쿼리 해석 전문가입니다.
사용자의 자연어 검색어를 SQL 모니터링 시스템의 필터로 정확하게 변환합니다.

## 핵심 원칙
1. 예시를 최대한 정확히 참조하여 응답합니다.
2. 사용자 쿼리의 모든 조건을 빠짐없이 추출합니다.
3. 명시되지 않은 필드는 생략합니다.
4. 설명 없이 순수 JSON 형식으로만 응답합니다.

## 시간 관련 키워드
- "1시간", "최근" → timeRange: "1h"
- "오늘", "어제", "24시간", "하루" → timeRange: "24h"
- "일주일", "7일", "이번주" → timeRange: "7d"
- "한달", "30일", "이번달" → timeRange: "30d"
- "3개월", "분기" → timeRange: "90d"

## 성능 임계값 기준
- 느린, 지연 → minElapsedTime: 1000 (1초 이상)
- 꽤 느린 → minElapsedTime: 3000
- 매우 느린, 심각한 → minElapsedTime: 5000
- 빠른 → sortBy: elapsed_time, sortOrder: asc

## 결과 수 제한
- "하나", "1개", "가장 ~한 쿼리"(단수) → limit: 1
- "상위 N개", "top N" → limit: N
- "가장 느린 쿼리들"처럼 복수형이면 limit 생략

## JSON 응답 형식
```json
{
  "interpretation": "검색 의도 설명 (한 문장)",
  "filters": {
    "timeRange": "1h|6h|12h|24h|7d|30d|90d|all",
    "minElapsedTime": number,
    "maxElapsedTime": number,
    "minBufferGets": number,
    "maxBufferGets": number,
    "minDiskReads": number,
    "minExecutions": number,
    "sqlPattern": "LIKE 패턴",
    "schema": "스키마명",
    "sortBy": "elapsed_time|cpu_time|buffer_gets|disk_reads|executions|rows_processed",
    "sortOrder": "asc|desc",
    "limit": number
  },
  "suggestions": ["추천 검색어1", "추천 검색어2"]
}
```"""


SYSTEM_PROMPT_EN = """You are a search query interpretation expert for an Oracle SQL performance monitoring system.
You convert the user's natural language query into monitoring system filters.

## Core Principles
1. Follow the examples as closely as possible.
2. Extract every condition in the query.
3. Omit fields the query does not mention.
4. Respond with pure JSON only, no explanation.

## Time Keywords
- "1 hour", "recent" → timeRange: "1h"
- "today", "yesterday", "24 hours" → timeRange: "24h"
- "this week", "7 days" → timeRange: "7d"
- "this month", "30 days" → timeRange: "30d"
- "3 months", "quarter" → timeRange: "90d"

## Performance Thresholds
- slow, delayed → minElapsedTime: 1000 (over 1 second)
- very slow, critical → minElapsedTime: 5000
- fast → sortBy: elapsed_time, sortOrder: asc

## Result Limit
- "the slowest query", "one" → limit: 1
- "top N" → limit: N

## JSON Response Format
```json
{
  "interpretation": "Search intent description (one sentence)",
  "filters": {
    "timeRange": "1h|6h|12h|24h|7d|30d|90d|all",
    "minElapsedTime": number,
    "maxElapsedTime": number,
    "minBufferGets": number,
    "maxBufferGets": number,
    "minDiskReads": number,
    "minExecutions": number,
    "sqlPattern": "LIKE pattern",
    "schema": "schema name",
    "sortBy": "elapsed_time|cpu_time|buffer_gets|disk_reads|executions|rows_processed",
    "sortOrder": "asc|desc",
    "limit": number
  },
  "suggestions": ["suggestion1", "suggestion2"]
}
```"""


AVAILABLE_FILTERS = {
    "ko": """## 사용 가능한 필터
- timeRange: 기간 ("1h", "6h", "12h", "24h", "7d", "30d", "90d", "all")
- minElapsedTime / maxElapsedTime: 실행 시간 (ms, 1000=1초)
- minBufferGets / maxBufferGets: Buffer Gets (논리적 읽기)
- minDiskReads: 최소 Disk Reads (물리적 읽기)
- minExecutions: 최소 실행 횟수
- sqlPattern: SQL 텍스트 패턴 (LIKE 검색, %와일드카드%)
- schema: 스키마명 (대문자)
- sortBy / sortOrder: 정렬 기준과 순서
- limit: 결과 수 제한 (1-1000)""",
    "en": """## Available Filters
- timeRange: time period ("1h", "6h", "12h", "24h", "7d", "30d", "90d", "all")
- minElapsedTime / maxElapsedTime: elapsed time (ms, 1000 = 1 second)
- minBufferGets / maxBufferGets: buffer gets (logical reads)
- minDiskReads: minimum disk reads (physical reads)
- minExecutions: minimum execution count
- sqlPattern: SQL text pattern (LIKE search, %wildcards%)
- schema: schema name (upper case)
- sortBy / sortOrder: sort field and direction
- limit: result count limit (1-1000)""",
}


@dataclass(frozen=True)
class FewShotExample:
    query: str
    category: str
    interpretation: str
    filters: Dict[str, Any]
    suggestions: Tuple[str, ...] = field(default_factory=tuple)

    def to_output(self) -> Dict[str, Any]:
        return {
            "interpretation": self.interpretation,
            "filters": self.filters,
            "suggestions": list(self.suggestions),
        }


FEW_SHOT_EXAMPLES: Tuple[FewShotExample, ...] = (
    # time
    FewShotExample(
        "오늘 실행된 쿼리", "time",
        "오늘(24시간 이내) 실행된 SQL을 검색합니다.",
        {"timeRange": "24h", "sortBy": "elapsed_time", "sortOrder": "desc"},
        ("오늘 느린 쿼리", "오늘 자주 실행된 쿼리"),
    ),
    FewShotExample(
        "이번 달 쿼리", "time",
        "최근 30일간 실행된 SQL을 검색합니다.",
        {"timeRange": "30d", "sortBy": "elapsed_time", "sortOrder": "desc"},
        ("이번 달 성능 이슈", "이번 달 자주 실행된 쿼리"),
    ),
    FewShotExample(
        "분기별 쿼리", "time",
        "최근 90일간 실행된 SQL을 검색합니다.",
        {"timeRange": "90d", "sortBy": "executions", "sortOrder": "desc"},
        ("분기별 성능 추이", "분기별 실행량 변화"),
    ),
    # performance
    FewShotExample(
        "느린 쿼리", "performance",
        "실행 시간이 1초 이상인 느린 SQL을 검색합니다.",
        {"minElapsedTime": 1000, "sortBy": "elapsed_time", "sortOrder": "desc"},
        ("매우 느린 쿼리 (5초+)", "CPU 많이 쓰는 쿼리"),
    ),
    FewShotExample(
        "매우 느린 쿼리", "performance",
        "실행 시간이 5초 이상인 심각하게 느린 SQL을 검색합니다.",
        {"minElapsedTime": 5000, "sortBy": "elapsed_time", "sortOrder": "desc"},
        ("타임아웃 발생 쿼리", "긴급 튜닝 필요 쿼리"),
    ),
    FewShotExample(
        "빠른 쿼리", "performance",
        "실행 시간이 짧은 순으로 SQL을 검색합니다.",
        {"sortBy": "elapsed_time", "sortOrder": "asc"},
        ("가장 빠른 쿼리", "최적화된 쿼리 패턴"),
    ),
    # resource
    FewShotExample(
        "CPU 많이 쓰는 쿼리", "resource",
        "CPU 사용 시간이 긴 SQL을 검색합니다.",
        {"sortBy": "cpu_time", "sortOrder": "desc"},
        ("CPU 병목 쿼리", "버퍼 많이 쓰는 쿼리"),
    ),
    FewShotExample(
        "버퍼 10만 이상", "resource",
        "Buffer Gets가 10만 이상인 SQL을 검색합니다.",
        {"minBufferGets": 100000, "sortBy": "buffer_gets", "sortOrder": "desc"},
        ("풀스캔 쿼리", "디스크 읽기 많은 쿼리"),
    ),
    FewShotExample(
        "디스크 읽기 많은", "resource",
        "물리적 디스크 읽기가 많은 SQL을 검색합니다.",
        {"sortBy": "disk_reads", "sortOrder": "desc", "limit": 20},
        ("I/O 병목 쿼리", "버퍼 캐시 미스 쿼리"),
    ),
    # sql type
    FewShotExample(
        "UPDATE 쿼리", "sql_type",
        "UPDATE 문을 실행 시간 순으로 검색합니다.",
        {"sqlPattern": "%UPDATE%", "sortBy": "elapsed_time", "sortOrder": "desc"},
        ("느린 UPDATE", "자주 실행되는 UPDATE"),
    ),
    FewShotExample(
        "조회 쿼리", "sql_type",
        "SELECT 문을 실행 시간 순으로 검색합니다.",
        {"sqlPattern": "%SELECT%", "sortBy": "elapsed_time", "sortOrder": "desc"},
        ("느린 SELECT", "대용량 조회 쿼리"),
    ),
    # compound
    FewShotExample(
        "어제 UPDATE 중 느린 것", "compound",
        "어제 실행된 UPDATE 중 1초 이상 걸린 SQL을 검색합니다.",
        {
            "timeRange": "24h", "sqlPattern": "%UPDATE%", "minElapsedTime": 1000,
            "sortBy": "elapsed_time", "sortOrder": "desc",
        },
        ("어제 느린 SELECT", "어제 자주 실행된 UPDATE"),
    ),
    FewShotExample(
        "가장 느린 쿼리 하나", "compound",
        "가장 느린 SQL 1건을 검색합니다.",
        {"sortBy": "elapsed_time", "sortOrder": "desc", "limit": 1},
        ("가장 느린 쿼리 10개", "가장 자주 실행된 쿼리"),
    ),
    FewShotExample(
        "HR 스키마 느린 쿼리", "compound",
        "HR 스키마에서 1초 이상 걸린 SQL을 검색합니다.",
        {"schema": "HR", "minElapsedTime": 1000, "sortBy": "elapsed_time", "sortOrder": "desc"},
        ("HR 스키마 자주 실행된 쿼리", "HR 스키마 대용량 쿼리"),
    ),
    FewShotExample(
        "상위 5개 느린 쿼리", "compound",
        "실행 시간이 가장 긴 SQL 5건을 검색합니다.",
        {"minElapsedTime": 1000, "sortBy": "elapsed_time", "sortOrder": "desc", "limit": 5},
        ("상위 10개 CPU 쿼리", "상위 5개 자주 실행된 쿼리"),
    ),
    # ambiguous
    FewShotExample(
        "문제 있는 쿼리", "ambiguous",
        "성능 이슈가 있는 SQL을 실행 시간 순으로 검색합니다.",
        {"minElapsedTime": 1000, "sortBy": "elapsed_time", "sortOrder": "desc"},
        ("CPU 문제 쿼리", "메모리 문제 쿼리"),
    ),
    FewShotExample(
        "최적화 필요", "ambiguous",
        "최적화가 필요한 SQL을 Buffer Gets 기준으로 검색합니다.",
        {"minBufferGets": 10000, "sortBy": "buffer_gets", "sortOrder": "desc"},
        ("인덱스 필요한 쿼리", "쿼리 재작성 필요"),
    ),
)

EXAMPLE_CATEGORIES = ("time", "performance", "resource", "sql_type", "compound", "ambiguous")


def select_examples(
    per_category: int,
    examples: Sequence[FewShotExample] = FEW_SHOT_EXAMPLES,
) -> List[FewShotExample]:
    """First `per_category` examples of each category, in category order."""
    selected: List[FewShotExample] = []
    for category in EXAMPLE_CATEGORIES:
        selected.extend([ex for ex in examples if ex.category == category][:per_category])
    return selected


def format_examples(examples: Sequence[FewShotExample], language: str = "ko") -> str:
    input_label, output_label = ("입력", "출력") if language == "ko" else ("Input", "Output")
    return "\n\n".join(
        f'{input_label}: "{ex.query}"\n'
        f"{output_label}: {json.dumps(ex.to_output(), ensure_ascii=False)}"
        for ex in examples
    )


def get_system_prompt(language: str = "ko") -> str:
    return SYSTEM_PROMPT_EN if language == "en" else SYSTEM_PROMPT_KO


def build_user_prompt(query: str, hints: HintBundle, language: str = "ko", examples_per_category: int = 2) -> str:
    """User prompt: the query, rule-based hints, filter vocabulary and worked examples."""
    lang = "en" if language == "en" else "ko"
    examples = format_examples(select_examples(examples_per_category), lang)

    if lang == "ko":
        sections = [
            f'## 검색어\n"{query}"{hint_context(hints, lang)}',
            AVAILABLE_FILTERS[lang],
        ]
        if examples:
            sections.append(f"## 예시 (정확히 참조하세요)\n{examples}")
        sections.append("## 요청\n위 검색어를 분석하여 JSON으로만 응답하세요. 설명 없이 JSON만 출력하세요.")
    else:
        sections = [
            f'## Search Query\n"{query}"{hint_context(hints, lang)}',
            AVAILABLE_FILTERS[lang],
        ]
        if examples:
            sections.append(f"## Examples (follow closely)\n{examples}")
        sections.append("## Request\nAnalyze the query above and respond with JSON only, no explanation.")

    return "\n\n".join(sections)
