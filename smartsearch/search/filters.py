from __future__ import annotations
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional, Union

Number = Union[int, float]

VALID_TIME_RANGES = ("1h", "6h", "12h", "24h", "7d", "30d", "90d", "all")

VALID_SORT_FIELDS = (
    "elapsed_time",
    "cpu_time",
    "buffer_gets",
    "disk_reads",
    "executions",
    "rows_processed",
)

VALID_SORT_ORDERS = ("asc", "desc")

MAX_LIMIT = 1000

# Attribute name -> key used by the query execution engine and by candidates
FIELD_KEYS: Dict[str, str] = {
    "time_range": "timeRange",
    "min_elapsed_time": "minElapsedTime",
    "max_elapsed_time": "maxElapsedTime",
    "min_buffer_gets": "minBufferGets",
    "max_buffer_gets": "maxBufferGets",
    "min_disk_reads": "minDiskReads",
    "min_executions": "minExecutions",
    "sql_pattern": "sqlPattern",
    "schema": "schema",
    "sort_by": "sortBy",
    "sort_order": "sortOrder",
    "limit": "limit",
}

NUMERIC_FIELDS = (
    "min_elapsed_time",
    "max_elapsed_time",
    "min_buffer_gets",
    "max_buffer_gets",
    "min_disk_reads",
    "min_executions",
)


@dataclass
class FilterSpec:
    """Validated search filter handed to the query execution engine.

    A field left as None means "no constraint".
    """
    time_range: Optional[str] = None
    min_elapsed_time: Optional[Number] = None  # ms
    max_elapsed_time: Optional[Number] = None  # ms
    min_buffer_gets: Optional[Number] = None
    max_buffer_gets: Optional[Number] = None
    min_disk_reads: Optional[Number] = None
    min_executions: Optional[Number] = None
    sql_pattern: Optional[str] = None
    schema: Optional[str] = None
    sort_by: Optional[str] = None
    sort_order: Optional[str] = None
    limit: Optional[int] = None

    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))

    def populated(self) -> List[str]:
        return [f.name for f in fields(self) if getattr(self, f.name) is not None]

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with engine keys, omitting unset fields."""
        return {
            FIELD_KEYS[name]: getattr(self, name)
            for name in FIELD_KEYS
            if getattr(self, name) is not None
        }


@dataclass
class SmartSearchResult:
    interpretation: str
    filters: FilterSpec
    suggestions: List[str] = field(default_factory=list)
    source: str = "rules"  # 'llm' when a candidate survived parsing, else 'rules'

    def to_dict(self) -> Dict[str, Any]:
        return {
            "interpretation": self.interpretation,
            "filters": self.filters.to_dict(),
            "suggestions": list(self.suggestions),
            "source": self.source,
        }

    def to_log_context(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "filters": self.filters.populated(),
            "suggestion_count": len(self.suggestions),
        }
