"""
Service error to HTTP status mapping.
"""

from fastapi import HTTPException

from marketdash.services.base import (
    ExternalAPIError,
    RateLimitError,
    ServiceError,
    ValidationError,
)


def to_http_exception(error: ServiceError) -> HTTPException:
    """ValidationError -> 400, RateLimitError -> 429, ExternalAPIError -> 502."""
    if isinstance(error, ValidationError):
        status = 400
    elif isinstance(error, RateLimitError):
        status = 429
    elif isinstance(error, ExternalAPIError):
        status = 502
    else:
        status = 500
    return HTTPException(status_code=status, detail=error.message)
