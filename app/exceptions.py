"""
    Centralized exception handling for the FastAPI application.

    Error bodies are plain text and never carry upstream detail; the
    `reason` of an APIException is only logged.
"""
from typing import Optional
from fastapi import Request
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

log = logging.getLogger(__name__)

NOT_FOUND = "Not found"
SERVICE_UNAVAILABLE = "Service unavailable"
INTERNAL_SERVER_ERROR = "Internal server error"

class APIException(Exception):
    """Base class for API exceptions."""
    def __init__(self, status_code: int, detail: str, reason: Optional[str] = None):
        self.status_code = status_code
        self.detail = detail
        self.reason = reason or detail
        super().__init__(self.reason)

class InvalidTokenException(APIException):
    """Exception for asset tokens that are not valid base62."""
    def __init__(self, token: str):
        super().__init__(status_code=404, detail=NOT_FOUND, reason=f"Invalid asset token '{token}'")

class AssetNotFoundException(APIException):
    """Exception for when an asset is not in the catalog or has no stored object."""
    def __init__(self, asset_id: str, reason: Optional[str] = None):
        super().__init__(status_code=404, detail=NOT_FOUND, reason=reason or f"Asset '{asset_id}' not found")

class UpstreamFetchException(APIException):
    """Exception for object store fetches that did not succeed."""
    def __init__(self, reason: str):
        super().__init__(status_code=404, detail=NOT_FOUND, reason=reason)

class StorageUnavailableException(APIException):
    """Exception for when the object store client is not available."""
    def __init__(self):
        super().__init__(status_code=503, detail=SERVICE_UNAVAILABLE, reason="Object store client unavailable")

class TranscodingException(APIException):
    """Exception for image transforms that failed."""
    def __init__(self, reason: str):
        super().__init__(status_code=500, detail=INTERNAL_SERVER_ERROR, reason=reason)

class DynamoDBException(APIException):
    """Exception for DynamoDB failures."""
    def __init__(self, reason: str):
        super().__init__(status_code=500, detail=INTERNAL_SERVER_ERROR, reason=reason)

class InternalErrorException(APIException):
    """Exception for any unexpected failure while serving an asset."""
    def __init__(self, reason: str):
        super().__init__(status_code=500, detail=INTERNAL_SERVER_ERROR, reason=reason)

async def api_exception_handler(request: Request, exc: APIException):
    """Handles API exceptions."""
    if exc.status_code >= 500:
        log.error("API Exception: %s", exc.reason, exc_info=exc)
    else:
        log.warning("API Exception: %s", exc.reason)
    return PlainTextResponse(exc.detail, status_code=exc.status_code)

async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handles Starlette/FastAPI HTTP exceptions."""
    log.warning("HTTP Exception: %s", exc.detail)
    return PlainTextResponse(str(exc.detail), status_code=exc.status_code, headers=exc.headers)

async def generic_exception_handler(request: Request, exc: Exception):
    """Handles all other exceptions."""
    log.error(f"Unhandled Exception: {str(exc)}", exc_info=exc)
    return PlainTextResponse(INTERNAL_SERVER_ERROR, status_code=500)

def add_exception_handlers(app):
    """Adds exception handlers to the FastAPI app."""
    app.add_exception_handler(APIException, api_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
