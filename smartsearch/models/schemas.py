"""
Pydantic models for API request/response schemas and data validation
"""

from typing import List, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator

from smartsearch.search.filters import FilterSpec, SmartSearchResult


# Request Models
class SmartSearchRequest(BaseModel):
    """Smart search request payload"""
    # Length is checked by the service so that overlong input maps to QUERY_TOO_LONG
    query: str = Field(..., description="Free-text search query (Korean or English)")
    language: Literal["ko", "en"] = Field(default="ko", description="Language of interpretation and suggestions")
    candidate: Optional[str] = Field(
        None,
        description="Pre-obtained generative response; skips the model call when provided",
    )

    @field_validator("candidate")
    @classmethod
    def validate_candidate(cls, v):
        if v is not None and not v.strip():
            return None
        return v


# Response Models
class SearchFilters(BaseModel):
    """FilterSpec as exposed to clients (camelCase keys, unset fields omitted)"""
    model_config = ConfigDict(populate_by_name=True)

    time_range: Optional[str] = Field(None, alias="timeRange")
    min_elapsed_time: Optional[Union[int, float]] = Field(None, alias="minElapsedTime")
    max_elapsed_time: Optional[Union[int, float]] = Field(None, alias="maxElapsedTime")
    min_buffer_gets: Optional[Union[int, float]] = Field(None, alias="minBufferGets")
    max_buffer_gets: Optional[Union[int, float]] = Field(None, alias="maxBufferGets")
    min_disk_reads: Optional[Union[int, float]] = Field(None, alias="minDiskReads")
    min_executions: Optional[Union[int, float]] = Field(None, alias="minExecutions")
    sql_pattern: Optional[str] = Field(None, alias="sqlPattern")
    schema_name: Optional[str] = Field(None, alias="schema")
    sort_by: Optional[str] = Field(None, alias="sortBy")
    sort_order: Optional[str] = Field(None, alias="sortOrder")
    limit: Optional[int] = None

    @classmethod
    def from_filter_spec(cls, filters: FilterSpec) -> "SearchFilters":
        return cls.model_validate(filters.to_dict())


class SmartSearchData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    original_query: str = Field(..., alias="originalQuery")
    interpretation: str
    filters: SearchFilters
    suggestions: List[str] = Field(default_factory=list)
    source: Literal["llm", "rules"]
    processing_time_ms: int = Field(..., alias="processingTimeMs")

    @classmethod
    def from_result(cls, query: str, result: SmartSearchResult, processing_time_ms: int) -> "SmartSearchData":
        return cls(
            original_query=query,
            interpretation=result.interpretation,
            filters=SearchFilters.from_filter_spec(result.filters),
            suggestions=list(result.suggestions),
            source=result.source,
            processing_time_ms=processing_time_ms,
        )


class SmartSearchResponse(BaseModel):
    """Smart search response payload"""
    success: bool = True
    data: SmartSearchData

