"""
Error codes for the query service.

These codes are machine-readable and can be used by frontends to handle
specific error conditions (e.g., an expired analysis session).
"""

from enum import Enum

from nlquery.errors import (
    NLQueryError,
    NotFoundError,
    ParseError,
    ProviderError,
    QueryServiceError,
    ValidationError,
)


class NLQueryErrorCode(str, Enum):
    """Machine-readable error codes for query service errors."""

    # Client errors (4xx)
    INVALID_REQUEST = "invalid_request"  # Bad request format or field value
    NOT_FOUND = "not_found"  # Trace or span does not exist
    SESSION_NOT_FOUND = "session_not_found"  # Session absent or expired
    DISABLED = "disabled"  # nlquery is turned off

    # Upstream errors (5xx)
    MODEL_ERROR = "model_error"  # Model call failed or returned nothing
    PARSE_ERROR = "parse_error"  # Model output did not match the schema
    QUERY_SERVICE_ERROR = "query_service_error"  # Trace backend unreachable
    ANALYSIS_UNAVAILABLE = "analysis_unavailable"  # No model provider configured

    # General errors
    SERVER_ERROR = "server_error"  # Internal server error


# HTTP status code mapping for each error
ERROR_STATUS_CODES = {
    NLQueryErrorCode.INVALID_REQUEST: 400,
    NLQueryErrorCode.NOT_FOUND: 404,
    NLQueryErrorCode.SESSION_NOT_FOUND: 404,
    NLQueryErrorCode.DISABLED: 404,
    NLQueryErrorCode.MODEL_ERROR: 502,
    NLQueryErrorCode.PARSE_ERROR: 502,
    NLQueryErrorCode.QUERY_SERVICE_ERROR: 502,
    NLQueryErrorCode.ANALYSIS_UNAVAILABLE: 503,
    NLQueryErrorCode.SERVER_ERROR: 500,
}

_EXCEPTION_CODES = (
    (ValidationError, NLQueryErrorCode.INVALID_REQUEST),
    (NotFoundError, NLQueryErrorCode.SESSION_NOT_FOUND),
    (ParseError, NLQueryErrorCode.PARSE_ERROR),
    (ProviderError, NLQueryErrorCode.MODEL_ERROR),
    (QueryServiceError, NLQueryErrorCode.QUERY_SERVICE_ERROR),
)


def get_status_code(error_code: NLQueryErrorCode) -> int:
    """Get HTTP status code for an error code."""
    return ERROR_STATUS_CODES.get(error_code, 500)


def error_code_for(exc: NLQueryError) -> NLQueryErrorCode:
    """Map an nlquery exception to its error code."""
    for exc_type, code in _EXCEPTION_CODES:
        if isinstance(exc, exc_type):
            return code
    return NLQueryErrorCode.SERVER_ERROR
