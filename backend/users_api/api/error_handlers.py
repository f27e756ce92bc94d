"""Error Handlers — terminal translator from any failure to a JSON error envelope.

Invariants:
    - UsersApiError → its own http_status and message (400/404/409/429/500)
    - RequestValidationError (undecodable body) → 400 with the first error only
    - Starlette HTTPException (unknown route, wrong method) → same envelope
    - Exception (catch-all) → 500 "An unexpected error occurred."
    - Every failure is logged: WARNING for 4xx, ERROR with traceback for 5xx
    - Middleware rejections (429) are rendered through error_response() too
    - detail/trace added only outside production

Design Decisions:
    - Four-layer handler: domain (UsersApiError), validation (FastAPI),
      HTTP (Starlette), catch-all (Exception)
    - Run mode read per request from get_settings() so a process can be
      inspected without restarting in a different mode
"""

import logging
import traceback

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from users_api.config import get_settings
from users_api.core.errors import (
    ErrorCategory, ErrorSeverity, InternalError, UsersApiError,
)
from users_api.core.validate_payload import describe_error

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_domain_error_handler(app)
    _register_validation_error_handler(app)
    _register_http_error_handler(app)
    _register_generic_error_handler(app)


def _register_domain_error_handler(app: FastAPI) -> None:
    """Register Users API domain/infrastructure error handler."""

    @app.exception_handler(UsersApiError)
    async def users_api_error_handler(request: Request, exc: UsersApiError):
        """Handle all typed Users API errors."""
        return error_response(request, exc)


def _register_validation_error_handler(app: FastAPI) -> None:
    """Register FastAPI request decoding error handler."""

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        """Handle undecodable request bodies (invalid JSON)."""
        errors = exc.errors()
        message = _describe_request_error(errors[0]) if errors else "Invalid request data"
        _log_failure(request, exc, status.HTTP_400_BAD_REQUEST, "VALIDATION_ERROR")
        content = _envelope(
            "VALIDATION_ERROR", message, ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, status.HTTP_400_BAD_REQUEST,
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_with_debug(content, exc),
        )


def _register_http_error_handler(app: FastAPI) -> None:
    """Register Starlette HTTP error handler (404 route, 405 method)."""

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(
        request: Request, exc: StarletteHTTPException,
    ):
        """Wrap routing errors in the standard envelope."""
        _log_failure(request, exc, exc.status_code, "HTTP_ERROR")
        content = _envelope(
            "HTTP_ERROR", str(exc.detail), ErrorCategory.HTTP,
            ErrorSeverity.WARNING, exc.status_code,
        )
        return JSONResponse(
            status_code=exc.status_code, content=content,
            headers=getattr(exc, "headers", None),
        )


def _register_generic_error_handler(app: FastAPI) -> None:
    """Register catch-all error handler."""

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all — only the generic message in production."""
        internal = InternalError("unhandled")
        _log_failure(request, exc, internal.http_status, internal.code)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_with_debug(internal.to_response(), exc),
        )


# ─── Helpers ────────────────────────────────────────────────────

def error_response(
    request: Request, exc: UsersApiError, headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Log a typed error and render its envelope.

    Also used by middleware that rejects requests before routing, where
    raised exceptions never reach the registered handlers.
    """
    _log_failure(request, exc, exc.http_status, exc.code)
    return JSONResponse(
        status_code=exc.http_status,
        content=_with_debug(exc.to_response(), _debug_source(exc)),
        headers=headers,
    )


def _envelope(
    code: str, message: str, category: ErrorCategory,
    severity: ErrorSeverity, http_status: int,
) -> dict:
    """Build the error envelope for failures outside the UsersApiError hierarchy."""
    return {
        "error": {
            "code": code,
            "message": message,
            "category": category.value,
            "severity": severity.value,
            "status": http_status,
        },
    }


def _describe_request_error(error: dict) -> str:
    if error.get("type") == "json_invalid":
        return "Request body must be valid JSON"
    # FastAPI prefixes locations with "body"/"path"/"query"
    loc = tuple(error.get("loc") or ())[1:]
    return describe_error({**error, "loc": loc})


def _debug_source(exc: UsersApiError) -> BaseException:
    """InternalError carries the storage exception as its cause."""
    if isinstance(exc, InternalError) and exc.__cause__ is not None:
        return exc.__cause__
    return exc


def _with_debug(content: dict, source: BaseException) -> dict:
    """Attach error detail and trace outside production."""
    if get_settings().is_production:
        return content
    content["error"]["detail"] = str(source) or type(source).__name__
    content["error"]["trace"] = traceback.format_exception(
        type(source), source, source.__traceback__,
    )
    return content


def _log_failure(
    request: Request, exc: BaseException, http_status: int, code: str,
) -> None:
    extra = {
        "error_code": code,
        "path": request.url.path,
        "method": request.method,
        "status": http_status,
    }
    if isinstance(exc, UsersApiError) and exc.context.user_id is not None:
        extra["user_id"] = exc.context.user_id
    if http_status >= 500:
        logger.error(
            f"Unhandled failure on {request.method} {request.url.path}: {exc}",
            exc_info=exc,
            extra=extra,
        )
    else:
        logger.warning(
            f"{code} on {request.method} {request.url.path}: {exc}",
            extra=extra,
        )
