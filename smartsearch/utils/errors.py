"""
Error codes and the JSON error envelope

Every error leaving the API has the shape
{"error": {"code": ..., "message": ..., "details"?: {...}}}. Messages are meant
for end users; internal detail goes to the log only.
"""

from typing import Optional, Dict, Any
from enum import Enum
import structlog
from fastapi import HTTPException, status

logger = structlog.get_logger(__name__)


class ErrorCode(str, Enum):
    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    QUERY_TOO_LONG = "QUERY_TOO_LONG"


USER_FRIENDLY_MESSAGES = {
    ErrorCode.INTERNAL_ERROR: "Something went wrong on our side. Please try again later.",
    ErrorCode.VALIDATION_ERROR: "Some of the submitted values are invalid. Please check your input.",
    ErrorCode.QUERY_TOO_LONG: "The search text is too long. Please shorten it and try again.",
}


class SmartSearchError(Exception):
    """Rejected search input; `code` selects the HTTP error code"""

    code: ErrorCode = ErrorCode.VALIDATION_ERROR

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message or USER_FRIENDLY_MESSAGES[self.code]
        self.details = details
        super().__init__(self.message)


class QueryTooLongError(SmartSearchError):
    code = ErrorCode.QUERY_TOO_LONG

    def __init__(self, length: int, max_length: int):
        self.length = length
        self.max_length = max_length
        super().__init__(
            f"Search query must be at most {max_length} characters (got {length}).",
            {"length": length, "maxLength": max_length},
        )


class EmptyQueryError(SmartSearchError):
    code = ErrorCode.VALIDATION_ERROR

    def __init__(self):
        super().__init__("Please enter a search query.")


def create_error_response(
    code: ErrorCode,
    message: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Build the error envelope; `message` defaults to the code's friendly text."""
    error: Dict[str, Any] = {
        "code": code.value,
        "message": message or USER_FRIENDLY_MESSAGES.get(code, USER_FRIENDLY_MESSAGES[ErrorCode.INTERNAL_ERROR]),
    }
    if details:
        error["details"] = details
    return {"error": error}


def raise_validation_error(
    message: str,
    field: Optional[str] = None,
    code: ErrorCode = ErrorCode.VALIDATION_ERROR,
) -> None:
    """400 with the given message; `field` names the offending request field."""
    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=create_error_response(code, message, {"field": field} if field else None),
    )


def raise_search_error(error: SmartSearchError, field: Optional[str] = "query") -> None:
    """400 carrying the SmartSearchError's own code."""
    logger.info("Search request rejected", code=error.code.value, reason=error.message)
    raise_validation_error(error.message, field=field, code=error.code)


def raise_internal_error(
    log_message: str,
    exception: Optional[Exception] = None,
    user_message: Optional[str] = None,
) -> None:
    """Log the real failure, answer 500 with a generic message."""
    logger.error(log_message, error=str(exception) if exception else None, exc_info=exception is not None)
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=create_error_response(ErrorCode.INTERNAL_ERROR, user_message),
    )
