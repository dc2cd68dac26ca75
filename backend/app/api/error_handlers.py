"""Error Handlers - exception -> JSON error envelope, one handler per exception family.

Invariants:
    - RecordStoreError answers with its own http_status and to_response() body
    - RequestValidationError answers 400 with one detail entry per failing field
    - Anything else answers 500 INTERNAL_ERROR
    - With redact=True, 5xx messages become GENERIC_MESSAGE; 4xx messages never change

Design Decisions:
    - redact is fixed when the handlers are registered (from settings.is_production)
"""

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.core.errors import ErrorCategory, ErrorSeverity, RecordStoreError

logger = logging.getLogger(__name__)

GENERIC_MESSAGE = "An unexpected error occurred"


def error_body(
    code: str,
    message: str,
    category: ErrorCategory,
    severity: ErrorSeverity,
    **extra: Any,
) -> dict:
    return {
        "error": {
            "code": code,
            "message": message,
            "category": category.value,
            "severity": severity.value,
            **extra,
        },
    }


def validation_details(exc: RequestValidationError) -> list[dict]:
    return [
        {
            "field": ".".join(str(part) for part in err["loc"]),
            "message": err["msg"],
            "type": err["type"],
        }
        for err in exc.errors()
    ]


def register_error_handlers(app: FastAPI, redact: bool = False) -> None:
    """Attach the store, validation and catch-all handlers to the app."""

    @app.exception_handler(RecordStoreError)
    async def handle_store_error(request: Request, exc: RecordStoreError):
        log = logger.warning if exc.is_client_error else logger.error
        log(
            f"{exc.code} on {request.url.path}: {exc.message}",
            extra={
                "error_code": exc.code,
                "path": request.url.path,
                "model_name": exc.context.model_name,
                "operation": exc.context.operation,
                "record_id": exc.context.record_id,
            },
        )
        hidden = redact and not exc.is_client_error
        return JSONResponse(
            status_code=exc.http_status,
            content=exc.to_response(GENERIC_MESSAGE if hidden else None),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        details = validation_details(exc)
        logger.warning(
            f"Invalid request body on {request.url.path}: {details}",
            extra={"error_code": "VALIDATION_ERROR", "path": request.url.path},
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_body(
                "VALIDATION_ERROR", "Invalid request data",
                ErrorCategory.VALIDATION, ErrorSeverity.ERROR,
                details=details,
            ),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.error(
            f"Unhandled {type(exc).__name__} on {request.url.path}: {exc}",
            extra={"error_code": "INTERNAL_ERROR", "path": request.url.path},
            exc_info=True,
        )
        message = GENERIC_MESSAGE if redact else (str(exc) or GENERIC_MESSAGE)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body(
                "INTERNAL_ERROR", message,
                ErrorCategory.INTERNAL, ErrorSeverity.CRITICAL,
            ),
        )
