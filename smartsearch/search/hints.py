"""
Hint composition for SQL smart search

Runs every rule-based extractor over the raw query and merges the results
into one immutable HintBundle. The bundle serves two purposes:

1. Context for the optional generative interpretation step (hint_context)
2. The deterministic source the reconciler falls back on
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Union

import structlog

from smartsearch.search.intensity import DEFAULT_INTENSITY, IntensityScaler, intensity_scaler
from smartsearch.search.limits import LimitExtractor, limit_extractor
from smartsearch.search.schema_table import SchemaTable, SchemaTableDetector, schema_table_detector
from smartsearch.search.synonyms import (
    PerformanceFocus,
    SynonymCategory,
    SynonymResolver,
    synonym_resolver,
)
from smartsearch.search.thresholds import ThresholdExtractor, threshold_extractor

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class HintBundle:
    """Rule-extracted signals for one request. Never persisted."""
    time_range: Optional[str] = None
    sql_type: Optional[str] = None
    performance_focus: Optional[PerformanceFocus] = None
    sort_by: Optional[str] = None
    sort_direction: Optional[str] = None
    thresholds: Mapping[str, Union[int, float]] = field(default_factory=lambda: MappingProxyType({}))
    intensity: int = DEFAULT_INTENSITY
    schema_table: Optional[SchemaTable] = None
    limit: Optional[int] = None

    def __post_init__(self):
        if not isinstance(self.thresholds, MappingProxyType):
            object.__setattr__(self, "thresholds", MappingProxyType(dict(self.thresholds)))

    def is_empty(self) -> bool:
        return not any((
            self.time_range,
            self.sql_type,
            self.performance_focus,
            self.sort_by,
            self.sort_direction,
            self.thresholds,
            self.schema_table,
            self.limit,
        ))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "time_range": self.time_range,
            "sql_type": self.sql_type,
            "performance_focus": (
                {"field": self.performance_focus.field, "direction": self.performance_focus.direction}
                if self.performance_focus else None
            ),
            "sort_by": self.sort_by,
            "sort_direction": self.sort_direction,
            "thresholds": dict(self.thresholds),
            "intensity": self.intensity,
            "schema_table": (
                {"schema": self.schema_table.schema, "table": self.schema_table.table}
                if self.schema_table else None
            ),
            "limit": self.limit,
        }


class HintComposer:
    """Merge the independent extractors; they target disjoint fields."""

    def __init__(
        self,
        resolver: SynonymResolver = synonym_resolver,
        thresholds: ThresholdExtractor = threshold_extractor,
        limits: LimitExtractor = limit_extractor,
        schema_tables: SchemaTableDetector = schema_table_detector,
        intensity: IntensityScaler = intensity_scaler,
    ):
        self.resolver = resolver
        self.thresholds = thresholds
        self.limits = limits
        self.schema_tables = schema_tables
        self.intensity = intensity

    def compose(self, query: str) -> HintBundle:
        text = (query or "").strip()
        hints = HintBundle(
            time_range=self.resolver.resolve(text, SynonymCategory.TIME_RANGE),
            sql_type=self.resolver.resolve(text, SynonymCategory.SQL_TYPE),
            performance_focus=self.resolver.resolve(text, SynonymCategory.PERFORMANCE),
            sort_by=self.resolver.resolve_sort_field(text),
            sort_direction=self.resolver.resolve(text, SynonymCategory.SORT_DIRECTION),
            thresholds=self.thresholds.extract(text),
            intensity=self.intensity.scale(text),
            schema_table=self.schema_tables.detect(text),
            limit=self.limits.extract(text),
        )
        logger.debug("Hints composed", **hints.to_dict())
        return hints


_HINT_LABELS = {
    "ko": {
        "time_range": "시간 범위 감지",
        "sql_type": "SQL 유형 감지",
        "performance": "성능 지표 감지",
        "high": "높은 값",
        "low": "낮은 값",
        "sort_by": "정렬 기준 감지",
        "sort_direction": "정렬 방향 감지",
        "thresholds": "임계값 감지",
        "schema_table": "스키마/테이블 감지",
        "schema": "스키마 감지",
        "table": "테이블 감지",
        "limit": "결과 수 제한 감지",
        "limit_unit": "개",
        "header": "[사전 분석 힌트]",
    },
    "en": {
        "time_range": "Detected time range",
        "sql_type": "Detected SQL type",
        "performance": "Detected metric focus",
        "high": "high values",
        "low": "low values",
        "sort_by": "Detected sort field",
        "sort_direction": "Detected sort direction",
        "thresholds": "Detected thresholds",
        "schema_table": "Detected schema/table",
        "schema": "Detected schema",
        "table": "Detected table",
        "limit": "Detected result limit",
        "limit_unit": "",
        "header": "[Pre-analysis hints]",
    },
}


def hint_context(hints: HintBundle, language: str = "ko") -> str:
    """Render hints as prompt context; empty string when nothing was detected."""
    labels = _HINT_LABELS.get(language, _HINT_LABELS["ko"])
    parts = []

    if hints.time_range:
        parts.append(f"{labels['time_range']}: {hints.time_range}")
    if hints.sql_type:
        parts.append(f"{labels['sql_type']}: {hints.sql_type}")
    if hints.performance_focus:
        focus = hints.performance_focus
        parts.append(f"{labels['performance']}: {focus.field} ({labels[focus.direction]})")
    if hints.sort_by:
        parts.append(f"{labels['sort_by']}: {hints.sort_by}")
    if hints.sort_direction:
        parts.append(f"{labels['sort_direction']}: {hints.sort_direction}")
    if hints.thresholds:
        rendered = ", ".join(f"{name}={value}" for name, value in hints.thresholds.items())
        parts.append(f"{labels['thresholds']}: {rendered}")
    if hints.schema_table:
        if hints.schema_table.schema and hints.schema_table.table:
            parts.append(f"{labels['schema_table']}: {hints.schema_table.describe()}")
        elif hints.schema_table.schema:
            parts.append(f"{labels['schema']}: {hints.schema_table.schema}")
        else:
            parts.append(f"{labels['table']}: {hints.schema_table.table}")
    if hints.limit:
        parts.append(f"{labels['limit']}: {hints.limit}{labels['limit_unit']}")

    if not parts:
        return ""
    return "\n" + labels["header"] + "\n" + "\n".join(parts)


hint_composer = HintComposer()
