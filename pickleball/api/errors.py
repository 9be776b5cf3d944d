import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from pickleball.exceptions import (
    DataIntegrityAnomaly,
    InvalidMatchSetup,
    InvalidScoringTeam,
    PickleballError,
    RecordNotFound,
    StoreUnavailable,
)

logger = logging.getLogger(__name__)

# Checked in order; the first matching class wins. Anything else is a conflict with current state.
STATUS_BY_ERROR = (
    (RecordNotFound, status.HTTP_404_NOT_FOUND),
    (InvalidScoringTeam, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (InvalidMatchSetup, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (StoreUnavailable, status.HTTP_503_SERVICE_UNAVAILABLE),
    (DataIntegrityAnomaly, status.HTTP_500_INTERNAL_SERVER_ERROR),
)


def status_for(error: PickleballError) -> int:
    for error_class, code in STATUS_BY_ERROR:
        if isinstance(error, error_class):
            return code
    return status.HTTP_409_CONFLICT


async def pickleball_error_handler(request: Request, exc: PickleballError) -> JSONResponse:
    code = status_for(exc)
    if code >= 500:
        logger.error("%s %s failed: %s (%s)", request.method, request.url.path, exc.message, exc.kind)
    else:
        logger.info("%s %s rejected: %s (%s)", request.method, request.url.path, exc.message, exc.kind)
    headers = {"Retry-After": "1"} if exc.retryable else None
    return JSONResponse(status_code=code, content={"error": exc.kind, "detail": exc.message}, headers=headers)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PickleballError, pickleball_error_handler)
