"""Gestion standardisée des erreurs API avec enveloppes d'erreur.

Toutes les erreurs sont rendues sous la forme `{code, message, errors?, traceId}`. Les erreurs
métier (`ContentError`) portent leur propre statut; les erreurs de validation FastAPI sont rendues
en 400 avec la liste des champs fautifs; toute autre exception devient un 500 générique dont la
cause n'est visible que dans les logs.
"""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from nouvel_ayiti.domain.errors import ContentError, ErrorCodes

log = structlog.get_logger(__name__)

# Map common HTTP status codes to error codes
_HTTP_ERROR_CODES = {
    400: ErrorCodes.BAD_REQUEST,
    401: ErrorCodes.UNAUTHORIZED,
    403: ErrorCodes.FORBIDDEN,
    404: ErrorCodes.NOT_FOUND,
    405: ErrorCodes.METHOD_NOT_ALLOWED,
    409: ErrorCodes.CONFLICT,
    500: ErrorCodes.INTERNAL_ERROR,
}


def create_error_response(
    status_code: int,
    code: str,
    message: str,
    trace_id: str | None = None,
    errors: list[dict[str, Any]] | None = None,
) -> JSONResponse:
    """Create a standardized error response."""
    content: dict[str, Any] = {"code": code, "message": message, "traceId": trace_id}
    if errors:
        content["errors"] = errors
    return JSONResponse(status_code=status_code, content=content)


def extract_trace_id(request: Request) -> str | None:
    """Identifiant de requête posé par `RequestIDMiddleware`, à défaut l'en-tête."""
    trace_id = getattr(request.state, "request_id", None)
    return trace_id or request.headers.get("X-Request-ID")


def field_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    """Aplatit les erreurs Pydantic en `[{field, message}]`."""
    out = []
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ())]
        # retire la source ("body", "query", "path") sauf si c'est la seule info
        field = ".".join(loc[1:]) if len(loc) > 1 else ".".join(loc)
        out.append({"field": field, "message": err.get("msg", "invalid value")})
    return out


def handle_content_error(request: Request, exc: ContentError) -> JSONResponse:
    """Handle domain errors with their own status and code."""
    trace_id = extract_trace_id(request)
    log.info(
        "content_error",
        code=exc.code,
        status_code=exc.status_code,
        error_message=exc.message,
        path=request.url.path,
        trace_id=trace_id,
    )
    return create_error_response(
        exc.status_code, exc.code, exc.message, trace_id=trace_id, errors=exc.errors
    )


def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render FastAPI validation failures as 400 with per-field errors."""
    trace_id = extract_trace_id(request)
    errors = field_errors(exc)
    log.info("validation_failed", path=request.url.path, errors=errors, trace_id=trace_id)
    return create_error_response(
        400, ErrorCodes.VALIDATION_ERROR, "Validation failed", trace_id=trace_id, errors=errors
    )


def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle Starlette/FastAPI HTTPException with standard envelope."""
    trace_id = extract_trace_id(request)
    code = _HTTP_ERROR_CODES.get(exc.status_code, "HTTP_ERROR")
    response = create_error_response(
        exc.status_code, code, str(exc.detail), trace_id=trace_id
    )
    if exc.headers:
        response.headers.update(exc.headers)
    return response


def handle_generic_exception(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions: generic body, full cause in logs."""
    trace_id = extract_trace_id(request)
    log.error(
        "unexpected_error",
        path=request.url.path,
        method=request.method,
        trace_id=trace_id,
        exception_type=type(exc).__name__,
        exc_info=exc,
    )
    return create_error_response(
        500, ErrorCodes.INTERNAL_ERROR, "Internal server error", trace_id=trace_id
    )


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ContentError, handle_content_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(Exception, handle_generic_exception)
