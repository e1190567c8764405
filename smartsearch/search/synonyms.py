"""
Synonym tables for SQL smart search

Maps Korean/English phrase fragments to canonical filter values per category.
Each table is an ordered tuple of (phrase, value) pairs scanned front to back;
the first phrase contained in the query wins. A phrase must therefore come
before every shorter phrase it contains ("한 시간" before "시간"), which
SynonymTable checks when the module is imported.
"""

from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Any, Dict, List, Optional, Pattern, Tuple
import re

import structlog

logger = structlog.get_logger(__name__)


class SynonymCategory(str, Enum):
    """Extraction categories backed by a synonym table"""
    TIME_RANGE = "time_range"
    SQL_TYPE = "sql_type"
    PERFORMANCE = "performance"
    SORT_FIELD = "sort_field"
    SORT_DIRECTION = "sort_direction"
    INTENSITY = "intensity"


@dataclass(frozen=True)
class PerformanceFocus:
    """Qualitative metric focus, e.g. "느린" -> elapsed_time / high"""
    field: str
    direction: str  # 'high' or 'low'

    @property
    def sort_order(self) -> str:
        return "desc" if self.direction == "high" else "asc"


@dataclass(frozen=True)
class SynonymTable:
    category: SynonymCategory
    entries: Tuple[Tuple[str, Any], ...]

    def __post_init__(self):
        violations = self.precedence_violations()
        if violations:
            raise ValueError(
                f"Synonym table '{self.category.value}' lists generic phrases before "
                f"specific ones: {violations}"
            )

    def precedence_violations(self) -> List[Tuple[str, str]]:
        """Pairs (earlier, later) where the later phrase contains the earlier one."""
        violations = []
        phrases = [phrase.lower() for phrase, _ in self.entries]
        for i, earlier in enumerate(phrases):
            for later in phrases[i + 1:]:
                if earlier in later:
                    violations.append((earlier, later))
        return violations

    def lookup(self, text: str) -> Optional[Any]:
        lowered = text.lower()
        for phrase, value in self.entries:
            if _phrase_pattern(phrase).search(lowered):
                return value
        return None


@lru_cache(maxsize=None)
def _phrase_pattern(phrase: str) -> Pattern[str]:
    # A leading numeral must not continue a longer number: "1시간" is not in "11시간"
    prefix = r"(?<!\d)" if phrase[:1].isdigit() else ""
    return re.compile(prefix + re.escape(phrase.lower()))


_ELAPSED_HIGH = PerformanceFocus("elapsed_time", "high")
_ELAPSED_LOW = PerformanceFocus("elapsed_time", "low")
_BUFFER_HIGH = PerformanceFocus("buffer_gets", "high")
_DISK_HIGH = PerformanceFocus("disk_reads", "high")
_CPU_HIGH = PerformanceFocus("cpu_time", "high")
_EXECUTIONS_HIGH = PerformanceFocus("executions", "high")
_ROWS_HIGH = PerformanceFocus("rows_processed", "high")


TIME_RANGE_SYNONYMS = SynonymTable(SynonymCategory.TIME_RANGE, (
    # 1 hour
    ("최근 1시간", "1h"),
    ("지난 1시간", "1h"),
    ("1시간 이내", "1h"),
    ("1시간내", "1h"),
    ("한 시간", "1h"),
    ("한시간", "1h"),
    ("1시간", "1h"),
    ("last hour", "1h"),
    ("past hour", "1h"),
    ("1 hour", "1h"),
    ("one hour", "1h"),

    # 6 / 12 / 24 hours
    ("여섯 시간", "6h"),
    ("여섯시간", "6h"),
    ("6시간", "6h"),
    ("반나절", "6h"),
    ("6 hours", "6h"),
    ("열두 시간", "12h"),
    ("열두시간", "12h"),
    ("12시간", "12h"),
    ("반일", "12h"),
    ("12 hours", "12h"),
    ("24시간", "24h"),
    ("24 hours", "24h"),
    ("하루동안", "24h"),
    ("하루", "24h"),
    ("오늘", "24h"),
    ("금일", "24h"),
    ("당일", "24h"),
    ("어제", "24h"),
    ("1일", "24h"),
    ("today", "24h"),
    ("yesterday", "24h"),

    # 90 days
    ("90일", "90d"),
    ("3개월", "90d"),
    ("석 달", "90d"),
    ("석달", "90d"),
    ("분기", "90d"),
    ("90 days", "90d"),
    ("3 months", "90d"),
    ("quarter", "90d"),

    # 30 days
    ("30일", "30d"),
    ("1개월", "30d"),
    ("한 달", "30d"),
    ("한달", "30d"),
    ("이번 달", "30d"),
    ("이번달", "30d"),
    ("지난 달", "30d"),
    ("지난달", "30d"),
    ("월간", "30d"),
    ("30 days", "30d"),
    ("this month", "30d"),
    ("last month", "30d"),

    # 7 days
    ("7일", "7d"),
    ("일주일", "7d"),
    ("1주일", "7d"),
    ("한 주", "7d"),
    ("한주", "7d"),
    ("이번 주", "7d"),
    ("이번주", "7d"),
    ("지난 주", "7d"),
    ("지난주", "7d"),
    ("주간", "7d"),
    ("일주", "7d"),
    ("7 days", "7d"),
    ("this week", "7d"),
    ("last week", "7d"),

    # All time
    ("모든 기간", "all"),
    ("전체 기간", "all"),
    ("제한없음", "all"),
    ("all time", "all"),
    ("전체", "all"),

    # Bare recency defaults to the shortest window
    ("최근", "1h"),
    ("recent", "1h"),
))


SQL_TYPE_SYNONYMS = SynonymTable(SynonymCategory.SQL_TYPE, (
    ("데이터 조회", "SELECT"),
    ("데이터 입력", "INSERT"),
    ("데이터 수정", "UPDATE"),
    ("데이터 삭제", "DELETE"),
    ("저장 프로시저", "PLSQL"),
    ("테이블 생성", "DDL"),
    ("테이블 변경", "DDL"),
    ("인덱스 생성", "DDL"),
    ("pl/sql", "PLSQL"),
    ("plsql", "PLSQL"),

    ("select", "SELECT"),
    ("insert", "INSERT"),
    ("update", "UPDATE"),
    ("delete", "DELETE"),
    ("merge", "MERGE"),
    ("upsert", "MERGE"),
    ("ddl", "DDL"),
    ("create", "DDL"),
    ("alter", "DDL"),
    ("drop", "DDL"),

    ("조회", "SELECT"),
    ("셀렉트", "SELECT"),
    ("삽입", "INSERT"),
    ("인서트", "INSERT"),
    ("입력", "INSERT"),
    ("등록", "INSERT"),
    ("업데이트", "UPDATE"),
    ("수정", "UPDATE"),
    ("변경", "UPDATE"),
    ("갱신", "UPDATE"),
    ("삭제", "DELETE"),
    ("딜리트", "DELETE"),
    ("제거", "DELETE"),
    ("머지", "MERGE"),
    ("프로시저", "PLSQL"),
    ("스토어드", "PLSQL"),
    ("펑션", "PLSQL"),
    ("함수", "PLSQL"),
    ("패키지", "PLSQL"),
))


PERFORMANCE_SYNONYMS = SynonymTable(SynonymCategory.PERFORMANCE, (
    # Elapsed time, long
    ("실행 시간", _ELAPSED_HIGH),
    ("실행시간", _ELAPSED_HIGH),
    ("수행시간", _ELAPSED_HIGH),
    ("응답시간", _ELAPSED_HIGH),
    ("소요시간", _ELAPSED_HIGH),
    ("오래 걸리는", _ELAPSED_HIGH),
    ("오래걸리는", _ELAPSED_HIGH),
    ("시간이 오래", _ELAPSED_HIGH),
    ("느려진", _ELAPSED_HIGH),
    ("느린", _ELAPSED_HIGH),
    ("지연된", _ELAPSED_HIGH),
    ("지연", _ELAPSED_HIGH),
    ("장시간", _ELAPSED_HIGH),
    ("슬로우", _ELAPSED_HIGH),
    ("slowest", _ELAPSED_HIGH),
    ("slow", _ELAPSED_HIGH),

    # Elapsed time, short
    ("빨라진", _ELAPSED_LOW),
    ("빠른", _ELAPSED_LOW),
    ("신속한", _ELAPSED_LOW),
    ("fastest", _ELAPSED_LOW),
    ("fast", _ELAPSED_LOW),

    # Executions
    ("자주 실행", _EXECUTIONS_HIGH),
    ("많이 실행", _EXECUTIONS_HIGH),
    ("자주 호출", _EXECUTIONS_HIGH),
    ("실행 횟수", _EXECUTIONS_HIGH),
    ("실행횟수", _EXECUTIONS_HIGH),
    ("most executed", _EXECUTIONS_HIGH),
    ("frequent", _EXECUTIONS_HIGH),
    ("빈번한", _EXECUTIONS_HIGH),
    ("자주", _EXECUTIONS_HIGH),
    ("호출", _EXECUTIONS_HIGH),

    # CPU
    ("cpu 사용", _CPU_HIGH),
    ("cpu 시간", _CPU_HIGH),
    ("cpu 소모", _CPU_HIGH),
    ("씨피유", _CPU_HIGH),
    ("cpu", _CPU_HIGH),

    # Buffer gets / logical reads
    ("버퍼 읽기", _BUFFER_HIGH),
    ("논리적 읽기", _BUFFER_HIGH),
    ("로지컬 리드", _BUFFER_HIGH),
    ("메모리 읽기", _BUFFER_HIGH),
    ("풀스캔", _BUFFER_HIGH),
    ("logical read", _BUFFER_HIGH),
    ("buffer get", _BUFFER_HIGH),
    ("full scan", _BUFFER_HIGH),
    ("버퍼", _BUFFER_HIGH),
    ("buffer", _BUFFER_HIGH),

    # Disk reads / physical reads
    ("디스크 읽기", _DISK_HIGH),
    ("물리적 읽기", _DISK_HIGH),
    ("피지컬 리드", _DISK_HIGH),
    ("physical read", _DISK_HIGH),
    ("disk read", _DISK_HIGH),
    ("i/o", _DISK_HIGH),
    ("디스크", _DISK_HIGH),
    ("disk", _DISK_HIGH),

    # Rows processed
    ("행이 많", _ROWS_HIGH),
    ("많은 행", _ROWS_HIGH),
    ("데이터가 많", _ROWS_HIGH),
    ("rows", _ROWS_HIGH),
))


SORT_FIELD_SYNONYMS = SynonymTable(SynonymCategory.SORT_FIELD, (
    # Elapsed time
    ("시간순", "elapsed_time"),
    ("느린순", "elapsed_time"),
    ("빠른순", "elapsed_time"),
    ("수행시간", "elapsed_time"),
    ("실행시간", "elapsed_time"),
    ("응답시간", "elapsed_time"),
    ("소요시간", "elapsed_time"),
    ("걸린시간", "elapsed_time"),
    ("by elapsed", "elapsed_time"),
    ("by time", "elapsed_time"),

    # Buffer gets
    ("버퍼 사용량", "buffer_gets"),
    ("버퍼순", "buffer_gets"),
    ("논리적읽기", "buffer_gets"),
    ("메모리사용", "buffer_gets"),
    ("by buffer", "buffer_gets"),

    # Disk reads
    ("디스크 읽기", "disk_reads"),
    ("디스크순", "disk_reads"),
    ("물리적읽기", "disk_reads"),
    ("io순", "disk_reads"),
    ("by disk", "disk_reads"),

    # Executions
    ("실행횟수순", "executions"),
    ("수행횟수", "executions"),
    ("실행순", "executions"),
    ("호출순", "executions"),
    ("빈도순", "executions"),
    ("by executions", "executions"),

    # CPU time
    ("cpu 사용량", "cpu_time"),
    ("cpu사용량", "cpu_time"),
    ("cpu순", "cpu_time"),
    ("by cpu", "cpu_time"),

    # Rows processed
    ("처리건수", "rows_processed"),
    ("처리량", "rows_processed"),
    ("로우수", "rows_processed"),
    ("행수", "rows_processed"),
    ("by rows", "rows_processed"),
))


SORT_DIRECTION_SYNONYMS = SynonymTable(SynonymCategory.SORT_DIRECTION, (
    ("오름차순", "asc"),
    ("내림차순", "desc"),
    ("빠른순", "asc"),
    ("낮은순", "asc"),
    ("적은순", "asc"),
    ("작은순", "asc"),
    ("느린순", "desc"),
    ("높은순", "desc"),
    ("많은순", "desc"),
    ("큰순", "desc"),
    ("ascending", "asc"),
    ("descending", "desc"),
))


INTENSITY_SYNONYMS = SynonymTable(SynonymCategory.INTENSITY, (
    # Extreme
    ("매우", 3),
    ("아주", 3),
    ("엄청", 3),
    ("극도로", 3),
    ("심각하게", 3),
    ("심각한", 3),
    ("극심한", 3),
    ("최악의", 3),
    ("너무", 3),
    ("extremely", 3),
    ("very slow", 3),
    ("severely", 3),
    ("critical", 3),

    # Moderate
    ("상당히", 2),
    ("꽤", 2),
    ("많이", 2),
    ("비교적", 2),
    ("제법", 2),
    ("quite", 2),
    ("fairly", 2),
    ("rather", 2),

    # Mild
    ("조금", 1),
    ("약간", 1),
    ("다소", 1),
    ("slightly", 1),
    ("somewhat", 1),
))


SYNONYM_TABLES: Dict[SynonymCategory, SynonymTable] = {
    table.category: table
    for table in (
        TIME_RANGE_SYNONYMS,
        SQL_TYPE_SYNONYMS,
        PERFORMANCE_SYNONYMS,
        SORT_FIELD_SYNONYMS,
        SORT_DIRECTION_SYNONYMS,
        INTENSITY_SYNONYMS,
    )
}

# Generic "sort by something" wording without a recognizable field
SORT_INTENT_PATTERN = re.compile(r"정렬|순서|순으로|기준|sort(?:ed)?\s+by|order\s+by", re.IGNORECASE)

DEFAULT_SORT_FIELD = "elapsed_time"

# An explicit window length ("11시간", "2 weeks"); one with no canonical value
# leaves the time range unset instead of falling back to bare recency
DURATION_PATTERN = re.compile(
    r"\d+(?:시간|주일|주|일|개월|달)|\d+\s*(?:hours?|days?|weeks?|months?)\b",
    re.IGNORECASE,
)


class SynonymResolver:
    """Resolve phrase fragments to canonical values, one category at a time."""

    def __init__(self, tables: Optional[Dict[SynonymCategory, SynonymTable]] = None):
        self.tables = tables or SYNONYM_TABLES

    def resolve(self, query: str, category: SynonymCategory) -> Optional[Any]:
        category = SynonymCategory(category)
        table = self.tables.get(category)
        if table is None or not query:
            return None
        if category is SynonymCategory.TIME_RANGE:
            for duration in DURATION_PATTERN.finditer(query):
                if table.lookup(duration.group(0)) is None:
                    logger.debug("Unsupported time window, leaving range unset", window=duration.group(0))
                    return None
        return table.lookup(query)

    def resolve_sort_field(self, query: str) -> Optional[str]:
        """Explicit sort field, or elapsed_time when only sort intent is present."""
        sort_field = self.resolve(query, SynonymCategory.SORT_FIELD)
        if sort_field:
            return sort_field
        if query and SORT_INTENT_PATTERN.search(query):
            logger.debug("Sort intent without field, defaulting", sort_by=DEFAULT_SORT_FIELD)
            return DEFAULT_SORT_FIELD
        return None


synonym_resolver = SynonymResolver()
