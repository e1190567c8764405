"""
Smart search endpoint: free-text SQL performance query -> validated filters
"""

import time

from fastapi import APIRouter
import structlog

from smartsearch.models.schemas import SmartSearchData, SmartSearchRequest, SmartSearchResponse
from smartsearch.services.smart_search_service import smart_search_service
from smartsearch.utils.errors import SmartSearchError, raise_internal_error, raise_search_error

router = APIRouter()
logger = structlog.get_logger(__name__)


@router.post("/smart", response_model=SmartSearchResponse, response_model_exclude_none=True)
async def smart_search(request: SmartSearchRequest) -> SmartSearchResponse:
    """Interpret a natural-language search query into SQL monitoring filters"""
    started = time.perf_counter()

    try:
        result = await smart_search_service.search(
            request.query,
            language=request.language,
            candidate_text=request.candidate,
        )
    except SmartSearchError as e:
        raise_search_error(e)
    except Exception as e:
        raise_internal_error("Smart search failed", e, "Unable to interpret the search query. Please try again.")

    processing_time_ms = int((time.perf_counter() - started) * 1000)
    return SmartSearchResponse(
        success=True,
        data=SmartSearchData.from_result(request.query, result, processing_time_ms),
    )
