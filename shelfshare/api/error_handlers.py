"""Error Handlers — every failure leaves the API as one `{"error": {...}}` envelope.

Invariants:
    - ShelfShareError -> its own http_status and to_response() body
    - 401 responses carry `WWW-Authenticate: Bearer`
    - Request body/path validation failures -> 400 VALIDATION_ERROR with per-field details
    - Anything else -> 500 INTERNAL_ERROR; the exception text is logged, never returned

Design Decisions:
    - Rejections (4xx) log at WARNING and server faults (5xx) at ERROR, so alerting
      keys on level alone
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from shelfshare.core.errors import (
    ErrorCategory, ErrorSeverity, InputValidationError, ShelfShareError,
)

logger = logging.getLogger(__name__)


async def handle_domain_error(request: Request, exc: ShelfShareError) -> JSONResponse:
    logger.log(
        logging.ERROR if exc.http_status >= 500 else logging.WARNING,
        f"{exc.code}: {exc.message}",
        extra={
            "error_code": exc.code,
            "path": request.url.path,
            "user_id": exc.context.user_id,
            "loan_id": exc.context.loan_id,
        },
    )
    body = exc.to_response()
    if isinstance(exc, InputValidationError):
        body["error"]["details"] = [{"field": exc.field, "message": exc.message}]
    headers = (
        {"WWW-Authenticate": "Bearer"}
        if exc.http_status == status.HTTP_401_UNAUTHORIZED else None
    )
    return JSONResponse(status_code=exc.http_status, content=body, headers=headers)


async def handle_request_validation(
    request: Request, exc: RequestValidationError,
) -> JSONResponse:
    details = [
        {
            # drop the leading "body"/"path"/"query" segment
            "field": ".".join(str(loc) for loc in e["loc"][1:]) or str(e["loc"][0]),
            "message": e["msg"],
            "type": e["type"],
        }
        for e in exc.errors()
    ]
    logger.warning(
        f"Rejected request payload: {[d['field'] for d in details]}",
        extra={"error_code": "VALIDATION_ERROR", "path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": {
                "code": "VALIDATION_ERROR",
                "message": "Invalid request data",
                "category": ErrorCategory.VALIDATION.value,
                "severity": ErrorSeverity.ERROR.value,
                "details": details,
            },
        },
    )


async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled {type(exc).__name__}: {exc}",
        exc_info=True,
        extra={"path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
                "category": ErrorCategory.INTERNAL.value,
                "severity": ErrorSeverity.CRITICAL.value,
            },
        },
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ShelfShareError, handle_domain_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(Exception, handle_unexpected)
