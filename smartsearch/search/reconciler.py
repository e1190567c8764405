"""
Response reconciliation for SQL smart search

Combines an optional, untrusted generative candidate with the rule-based
HintBundle into the final FilterSpec, interpretation and suggestions:

A. parse_candidate: fenced JSON -> outermost braces -> repaired text
B. FilterValidator: every candidate field passes a strict predicate or is dropped
C. fill_from_hints: empty fields are filled from the HintBundle
D. no candidate (or nothing usable): filters come from hints alone, and when
   even that is empty the raw query text becomes the SQL pattern
E. generate_suggestions: deterministic, context-bucketed follow-up queries

Nothing but programming errors escapes reconcile(); a malformed candidate is
simply treated as absent.
"""

from dataclasses import replace
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence
import json
import math
import re

import structlog

from smartsearch.search.filters import (
    FIELD_KEYS,
    MAX_LIMIT,
    NUMERIC_FIELDS,
    VALID_SORT_FIELDS,
    VALID_SORT_ORDERS,
    VALID_TIME_RANGES,
    FilterSpec,
    Number,
    SmartSearchResult,
)
from smartsearch.search.hints import HintBundle
from smartsearch.search.intensity import IntensityScaler
from smartsearch.search.rules import normalize_number

logger = structlog.get_logger(__name__)

MAX_SQL_PATTERN_LENGTH = 999
MAX_SCHEMA_LENGTH = 99
MAX_INTERPRETATION_LENGTH = 500
DEFAULT_FALLBACK_PATTERN_LENGTH = 50
DEFAULT_MAX_SUGGESTIONS = 5

SCHEMA_PATTERN = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

_CODE_BLOCK_PATTERN = re.compile(r"```(?:json)?\s*([\s\S]*?)```", re.IGNORECASE)
_FENCE_PATTERN = re.compile(r"```(?:json)?\s*", re.IGNORECASE)
_TRAILING_COMMA_PATTERN = re.compile(r",(\s*[}\]])")
_BARE_KEY_PATTERN = re.compile(r"([{,]\s*)([A-Za-z_][A-Za-z0-9_]*)(\s*:)")
_CONTROL_CHAR_PATTERN = re.compile(r"[\x00-\x1F\x7F]")


# ============================================================================
# STEP A: STRUCTURED EXTRACTION
# ============================================================================

def try_parse_json(text: Optional[str]) -> Optional[Dict[str, Any]]:
    """JSON object from text, or None for anything else (invalid, array, scalar)."""
    if not text:
        return None
    try:
        parsed = json.loads(text)
    except (ValueError, RecursionError):
        return None
    return parsed if isinstance(parsed, dict) else None


def _outermost_braces(text: str) -> Optional[str]:
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return None
    return text[start:end + 1]


def _from_code_block(text: str) -> Optional[Dict[str, Any]]:
    match = _CODE_BLOCK_PATTERN.search(text)
    if not match:
        return None
    return try_parse_json(match.group(1).strip())


def _from_braces(text: str) -> Optional[Dict[str, Any]]:
    return try_parse_json(_outermost_braces(text))


def repair_json_text(text: str) -> str:
    """Fix the usual generative-model JSON slips (fences, trailing commas, bare keys)."""
    fixed = _FENCE_PATTERN.sub("", text).replace("```", "")
    fixed = _TRAILING_COMMA_PATTERN.sub(r"\1", fixed)
    fixed = _BARE_KEY_PATTERN.sub(r'\1"\2"\3', fixed)
    fixed = _CONTROL_CHAR_PATTERN.sub(" ", fixed)
    return _outermost_braces(fixed) or fixed


def _from_repaired(text: str) -> Optional[Dict[str, Any]]:
    return try_parse_json(repair_json_text(text))


CANDIDATE_PARSERS: Sequence[Callable[[str], Optional[Dict[str, Any]]]] = (
    _from_code_block,
    _from_braces,
    _from_repaired,
)


def first_some(parsers: Iterable[Callable[[str], Optional[Any]]], text: str) -> Optional[Any]:
    for parser in parsers:
        result = parser(text)
        if result is not None:
            return result
    return None


def parse_candidate(candidate_text: Optional[str]) -> Optional[Dict[str, Any]]:
    """Structured candidate from generative output, or None when nothing parses."""
    if not candidate_text or not candidate_text.strip():
        return None
    parsed = first_some(CANDIDATE_PARSERS, candidate_text)
    if parsed is None:
        logger.warning(
            "Candidate is not parseable JSON, using rule-based hints",
            preview=candidate_text[:200],
        )
    return parsed


# ============================================================================
# STEP B: VALIDATION
# ============================================================================

class FilterValidator:
    """Strict per-field predicates. Each returns the normalized value or None."""

    @staticmethod
    def time_range(value: Any) -> Optional[str]:
        if isinstance(value, str) and value in VALID_TIME_RANGES:
            return value
        return None

    @staticmethod
    def positive_number(value: Any) -> Optional[Number]:
        if isinstance(value, bool):
            return None
        if isinstance(value, str):
            try:
                value = float(value.strip().replace(",", ""))
            except ValueError:
                return None
        if not isinstance(value, (int, float)):
            return None
        if isinstance(value, float) and not math.isfinite(value):
            return None
        if value <= 0:
            return None
        return normalize_number(value)

    @staticmethod
    def sql_pattern(value: Any) -> Optional[str]:
        if isinstance(value, str) and 0 < len(value) <= MAX_SQL_PATTERN_LENGTH:
            return value
        return None

    @staticmethod
    def schema(value: Any) -> Optional[str]:
        if (
            isinstance(value, str)
            and len(value) <= MAX_SCHEMA_LENGTH
            and SCHEMA_PATTERN.fullmatch(value)
        ):
            return value.upper()
        return None

    @staticmethod
    def sort_by(value: Any) -> Optional[str]:
        if isinstance(value, str) and value in VALID_SORT_FIELDS:
            return value
        return None

    @staticmethod
    def sort_order(value: Any) -> Optional[str]:
        if isinstance(value, str) and value in VALID_SORT_ORDERS:
            return value
        return None

    @classmethod
    def limit(cls, value: Any) -> Optional[int]:
        number = cls.positive_number(value)
        if number is None:
            return None
        limit = int(min(number, MAX_LIMIT))
        return limit if limit >= 1 else None


_VALIDATORS: Dict[str, Callable[[Any], Any]] = {
    "time_range": FilterValidator.time_range,
    "sql_pattern": FilterValidator.sql_pattern,
    "schema": FilterValidator.schema,
    "sort_by": FilterValidator.sort_by,
    "sort_order": FilterValidator.sort_order,
    "limit": FilterValidator.limit,
    **{name: FilterValidator.positive_number for name in NUMERIC_FIELDS},
}


def _candidate_filters(candidate: Dict[str, Any]) -> Dict[str, Any]:
    filters = candidate.get("filters")
    if isinstance(filters, dict):
        return filters
    # Some models answer with the filter object itself
    if any(key in candidate for key in FIELD_KEYS.values()):
        return candidate
    return {}


def validate_filters(raw_filters: Dict[str, Any]) -> FilterSpec:
    """Keep only fields that pass their predicate; invalid fields are dropped."""
    accepted: Dict[str, Any] = {}
    dropped: List[str] = []

    for name, key in FIELD_KEYS.items():
        if key in raw_filters:
            raw = raw_filters[key]
        elif name in raw_filters:
            raw = raw_filters[name]
        else:
            continue
        if raw is None:
            continue
        value = _VALIDATORS[name](raw)
        if value is None:
            dropped.append(key)
        else:
            accepted[name] = value

    if dropped:
        logger.debug("Dropped invalid candidate fields", fields=dropped)
    return FilterSpec(**accepted)


# ============================================================================
# STEPS C/D: HINT FALLBACK
# ============================================================================

def _sql_pattern_from_hints(hints: HintBundle) -> Optional[str]:
    parts = []
    if hints.sql_type:
        parts.append(hints.sql_type)
    if hints.schema_table and hints.schema_table.table:
        parts.append(hints.schema_table.table)
    if not parts:
        return None
    return "%" + "%".join(parts) + "%"


def fill_from_hints(filters: FilterSpec, hints: HintBundle) -> FilterSpec:
    """Fill every empty field from the matching hint. Populated fields are kept."""
    updates: Dict[str, Any] = {}

    if filters.time_range is None and hints.time_range:
        updates["time_range"] = hints.time_range

    for name, value in hints.thresholds.items():
        if getattr(filters, name, None) is None:
            updates[name] = value

    focus = hints.performance_focus
    elapsed_bounds = (
        filters.min_elapsed_time,
        filters.max_elapsed_time,
        hints.thresholds.get("min_elapsed_time"),
        hints.thresholds.get("max_elapsed_time"),
    )
    if (
        focus is not None
        and focus.field == "elapsed_time"
        and focus.direction == "high"
        and all(bound is None for bound in elapsed_bounds)
    ):
        updates["min_elapsed_time"] = IntensityScaler.default_elapsed_threshold(hints.intensity)

    if filters.sql_pattern is None:
        pattern = _sql_pattern_from_hints(hints)
        if pattern:
            updates["sql_pattern"] = pattern

    if filters.schema is None and hints.schema_table and hints.schema_table.schema:
        updates["schema"] = hints.schema_table.schema

    if filters.sort_by is None:
        if hints.sort_by:
            updates["sort_by"] = hints.sort_by
        elif focus is not None:
            updates["sort_by"] = focus.field

    if filters.sort_order is None:
        if hints.sort_direction:
            updates["sort_order"] = hints.sort_direction
        elif hints.sort_by:
            updates["sort_order"] = "desc"
        elif focus is not None:
            updates["sort_order"] = focus.sort_order

    if filters.limit is None and hints.limit:
        updates["limit"] = hints.limit

    return replace(filters, **updates) if updates else filters


def text_search_pattern(query: str, max_length: int = DEFAULT_FALLBACK_PATTERN_LENGTH) -> Optional[str]:
    text = (query or "").strip()[:max_length]
    return f"%{text}%" if text else None


# ============================================================================
# STEP E: SUGGESTIONS
# ============================================================================

_SUGGESTIONS = {
    "ko": {
        "week_slow": "이번주 느린 쿼리",
        "month_issues": "이번달 성능 이슈",
        "last_hour": "최근 1시간 쿼리",
        "high_cpu": "CPU 사용량 높은 쿼리",
        "heavy_buffer": "버퍼 과다 사용 쿼리",
        "long_running": "실행시간 긴 쿼리",
        "disk_heavy": "디스크 읽기 많은 쿼리",
        "slow": "느린 쿼리 검색",
        "select": "SELECT 조회 쿼리",
        "update": "UPDATE 수정 쿼리",
        "frequent": "자주 실행되는 쿼리",
    },
    "en": {
        "week_slow": "Slow queries this week",
        "month_issues": "Performance issues this month",
        "last_hour": "Queries in the last hour",
        "high_cpu": "High CPU queries",
        "heavy_buffer": "Queries with heavy buffer gets",
        "long_running": "Long-running queries",
        "disk_heavy": "Queries with many disk reads",
        "slow": "Search slow queries",
        "select": "SELECT queries",
        "update": "UPDATE queries",
        "frequent": "Frequently executed queries",
    },
}

_TIME_WORDS = re.compile(r"시간|오늘|어제|최근|hour|today|yesterday|recent", re.IGNORECASE)
_SLOW_WORDS = re.compile(r"느린|지연|slow", re.IGNORECASE)
_BUFFER_WORDS = re.compile(r"버퍼|메모리|buffer|memory", re.IGNORECASE)
_SQL_WORDS = re.compile(r"select|update|delete|insert", re.IGNORECASE)


def _unique(values: Iterable[str]) -> List[str]:
    seen: List[str] = []
    for value in values:
        if value and value not in seen:
            seen.append(value)
    return seen


def generate_suggestions(
    query: str,
    hints: HintBundle,
    language: str = "ko",
    max_suggestions: int = DEFAULT_MAX_SUGGESTIONS,
) -> List[str]:
    """Follow-up searches bucketed by time, performance and SQL type context."""
    text = query or ""
    labels = _SUGGESTIONS.get(language, _SUGGESTIONS["ko"])
    suggestions: List[str] = []

    if hints.time_range or _TIME_WORDS.search(text):
        if hints.time_range != "7d":
            suggestions.append(labels["week_slow"])
        if hints.time_range != "30d":
            suggestions.append(labels["month_issues"])
    else:
        suggestions.append(labels["last_hour"])

    focus_field = hints.performance_focus.field if hints.performance_focus else None
    if focus_field == "elapsed_time" or _SLOW_WORDS.search(text):
        suggestions.append(labels["high_cpu"])
        suggestions.append(labels["heavy_buffer"])
    elif focus_field == "buffer_gets" or _BUFFER_WORDS.search(text):
        suggestions.append(labels["long_running"])
        suggestions.append(labels["disk_heavy"])
    else:
        suggestions.append(labels["slow"])

    if hints.sql_type or _SQL_WORDS.search(text):
        if hints.sql_type != "SELECT":
            suggestions.append(labels["select"])
        if hints.sql_type != "UPDATE":
            suggestions.append(labels["update"])
    else:
        suggestions.append(labels["frequent"])

    return _unique(suggestions)[:max_suggestions]


def _candidate_suggestions(candidate: Dict[str, Any], max_suggestions: int) -> List[str]:
    raw = candidate.get("suggestions")
    if not isinstance(raw, list):
        return []
    cleaned = (item.strip() for item in raw if isinstance(item, str))
    return _unique(cleaned)[:max_suggestions]


# ============================================================================
# INTERPRETATION
# ============================================================================

_TIME_RANGE_LABELS = {
    "ko": {
        "1h": "최근 1시간", "6h": "최근 6시간", "12h": "최근 12시간", "24h": "최근 24시간",
        "7d": "최근 7일", "30d": "최근 30일", "90d": "최근 90일", "all": "전체 기간",
    },
    "en": {
        "1h": "the last hour", "6h": "the last 6 hours", "12h": "the last 12 hours",
        "24h": "the last 24 hours", "7d": "the last 7 days", "30d": "the last 30 days",
        "90d": "the last 90 days", "all": "all time",
    },
}

_METRIC_LABELS = {
    "ko": {
        "elapsed_time": "실행 시간", "cpu_time": "CPU 시간", "buffer_gets": "Buffer Gets",
        "disk_reads": "Disk Reads", "executions": "실행 횟수", "rows_processed": "처리 건수",
    },
    "en": {
        "elapsed_time": "elapsed time", "cpu_time": "CPU time", "buffer_gets": "buffer gets",
        "disk_reads": "disk reads", "executions": "executions", "rows_processed": "rows processed",
    },
}


def describe_filters(filters: FilterSpec, language: str = "ko") -> str:
    """One deterministic sentence describing what the filters will search for."""
    lang = language if language in _TIME_RANGE_LABELS else "ko"
    metrics = _METRIC_LABELS[lang]
    conditions: List[str] = []
    ordering: List[str] = []

    if lang == "ko":
        if filters.time_range:
            conditions.append(_TIME_RANGE_LABELS[lang][filters.time_range])
        if filters.schema:
            conditions.append(f"{filters.schema} 스키마")
        if filters.sql_pattern:
            conditions.append(f"SQL 패턴 '{filters.sql_pattern}'")
        if filters.min_elapsed_time is not None:
            conditions.append(f"{metrics['elapsed_time']} {filters.min_elapsed_time}ms 이상")
        if filters.max_elapsed_time is not None:
            conditions.append(f"{metrics['elapsed_time']} {filters.max_elapsed_time}ms 이하")
        if filters.min_buffer_gets is not None:
            conditions.append(f"{metrics['buffer_gets']} {filters.min_buffer_gets} 이상")
        if filters.max_buffer_gets is not None:
            conditions.append(f"{metrics['buffer_gets']} {filters.max_buffer_gets} 이하")
        if filters.min_disk_reads is not None:
            conditions.append(f"{metrics['disk_reads']} {filters.min_disk_reads} 이상")
        if filters.min_executions is not None:
            conditions.append(f"{metrics['executions']} {filters.min_executions}회 이상")
        if filters.sort_by:
            direction = "오름차순" if filters.sort_order == "asc" else "내림차순"
            ordering.append(f"{metrics[filters.sort_by]} {direction} 정렬")
        if filters.limit:
            ordering.append(f"상위 {filters.limit}건")

        sentence = (
            f"{', '.join(conditions)} 조건의 SQL을 검색합니다."
            if conditions else "전체 SQL을 검색합니다."
        )
    else:
        if filters.time_range:
            conditions.append(f"executed in {_TIME_RANGE_LABELS[lang][filters.time_range]}")
        if filters.schema:
            conditions.append(f"in schema {filters.schema}")
        if filters.sql_pattern:
            conditions.append(f"matching '{filters.sql_pattern}'")
        if filters.min_elapsed_time is not None:
            conditions.append(f"{metrics['elapsed_time']} >= {filters.min_elapsed_time}ms")
        if filters.max_elapsed_time is not None:
            conditions.append(f"{metrics['elapsed_time']} <= {filters.max_elapsed_time}ms")
        if filters.min_buffer_gets is not None:
            conditions.append(f"{metrics['buffer_gets']} >= {filters.min_buffer_gets}")
        if filters.max_buffer_gets is not None:
            conditions.append(f"{metrics['buffer_gets']} <= {filters.max_buffer_gets}")
        if filters.min_disk_reads is not None:
            conditions.append(f"{metrics['disk_reads']} >= {filters.min_disk_reads}")
        if filters.min_executions is not None:
            conditions.append(f"{metrics['executions']} >= {filters.min_executions}")
        if filters.sort_by:
            direction = "ascending" if filters.sort_order == "asc" else "descending"
            ordering.append(f"sorted by {metrics[filters.sort_by]} {direction}")
        if filters.limit:
            ordering.append(f"top {filters.limit}")

        sentence = (
            f"Searching SQL {', '.join(conditions)}."
            if conditions else "Searching all SQL."
        )

    if ordering:
        sentence = f"{sentence[:-1]} ({', '.join(ordering)})."
    return sentence


def _candidate_interpretation(candidate: Dict[str, Any]) -> Optional[str]:
    interpretation = candidate.get("interpretation")
    if isinstance(interpretation, str) and interpretation.strip():
        return interpretation.strip()[:MAX_INTERPRETATION_LENGTH]
    return None


# ============================================================================
# RECONCILER
# ============================================================================

class ResponseReconciler:
    """Turn (candidate text, hints, query) into a bounded SmartSearchResult."""

    def __init__(
        self,
        fallback_pattern_length: int = DEFAULT_FALLBACK_PATTERN_LENGTH,
        max_suggestions: int = DEFAULT_MAX_SUGGESTIONS,
    ):
        self.fallback_pattern_length = fallback_pattern_length
        self.max_suggestions = max_suggestions

    def reconcile(
        self,
        candidate_text: Optional[str],
        hints: HintBundle,
        original_query: str,
        language: str = "ko",
    ) -> SmartSearchResult:
        candidate: Optional[Dict[str, Any]] = None
        filters = FilterSpec()

        if candidate_text:
            try:
                candidate = parse_candidate(candidate_text)
                if candidate is not None:
                    filters = validate_filters(_candidate_filters(candidate))
            except Exception as e:
                logger.error("Failed to process candidate, using rule-based hints", error=str(e))
                candidate = None
                filters = FilterSpec()

        filters = fill_from_hints(filters, hints)

        if filters.is_empty():
            pattern = text_search_pattern(original_query, self.fallback_pattern_length)
            if pattern:
                filters = replace(filters, sql_pattern=pattern)
                logger.info("No filter signal, falling back to text search", sql_pattern=pattern)

        interpretation = (
            _candidate_interpretation(candidate) if candidate is not None else None
        ) or describe_filters(filters, language)

        suggestions = (
            _candidate_suggestions(candidate, self.max_suggestions) if candidate is not None else []
        ) or generate_suggestions(original_query, hints, language, self.max_suggestions)

        result = SmartSearchResult(
            interpretation=interpretation,
            filters=filters,
            suggestions=suggestions,
            source="llm" if candidate is not None else "rules",
        )
        logger.info("Search filters reconciled", **result.to_log_context())
        return result


response_reconciler = ResponseReconciler()
