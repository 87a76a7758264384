"""Error Handlers — global exception handlers for the chain manager API.

Invariants:
    - ChainManagerError → structured JSON with error code, message, severity
    - Domain errors log at their severity; 4xx never logs above WARNING
    - Log records carry error_code, http_status and the chain/host context
    - RequestValidationError → field-level error details
    - Exception (catch-all) → never leaks internal details

Design Decisions:
    - Three-layer handler: domain (ChainManagerError), validation (Pydantic), catch-all (Exception)
    - Extracted from main.py to keep the app module small
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from chainmgr.core.errors import ChainManagerError, ErrorSeverity

logger = logging.getLogger(__name__)

_SEVERITY_LEVELS = {
    ErrorSeverity.INFO: logging.INFO,
    ErrorSeverity.WARNING: logging.WARNING,
    ErrorSeverity.ERROR: logging.ERROR,
    ErrorSeverity.CRITICAL: logging.CRITICAL,
}


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_domain_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def _register_domain_error_handler(app: FastAPI) -> None:
    """Register chain manager domain/infrastructure error handler."""

    @app.exception_handler(ChainManagerError)
    async def domain_error_handler(request: Request, exc: ChainManagerError):
        """Handle all chain manager domain/infrastructure errors."""
        logger.log(
            _log_level(exc),
            f"{request.method} {request.url.path} → {exc.http_status} "
            f"{exc.code}: {exc.message}",
            extra=_error_extra(request, exc),
        )
        return JSONResponse(
            status_code=exc.http_status, content=exc.to_response(),
        )


def _register_validation_error_handler(app: FastAPI) -> None:
    """Register Pydantic validation error handler."""

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        """Handle Pydantic validation errors."""
        logger.warning(
            f"Validation error on {request.url.path}: {exc.errors()}",
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_build_validation_error_response(exc),
        )


def _register_generic_error_handler(app: FastAPI) -> None:
    """Register catch-all error handler."""

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all — never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "An unexpected error occurred",
                    "category": "internal",
                    "severity": ErrorSeverity.CRITICAL.value,
                },
            },
        )


def _log_level(exc: ChainManagerError) -> int:
    level = _SEVERITY_LEVELS.get(exc.severity, logging.ERROR)
    if exc.http_status < 500:
        return min(level, logging.WARNING)
    return level


def _error_extra(request: Request, exc: ChainManagerError) -> dict:
    """Structured log fields: error identity plus the chain/host the error is about."""
    return {
        "error_code": exc.code,
        "category": exc.category.value,
        "http_status": exc.http_status,
        "path": request.url.path,
        "chain_id": exc.context.chain_id,
        "chain_name": exc.context.chain_name,
        "host": exc.context.host,
    }


def _build_validation_error_response(exc: RequestValidationError) -> dict:
    """Build structured validation error response."""
    return {
        "error": {
            "code": "VALIDATION_ERROR",
            "message": "Invalid request data",
            "category": "validation",
            "severity": ErrorSeverity.ERROR.value,
            "details": [
                {
                    "field": ".".join(str(loc) for loc in e["loc"]),
                    "message": e["msg"],
                    "type": e["type"],
                }
                for e in exc.errors()
            ],
        },
    }
