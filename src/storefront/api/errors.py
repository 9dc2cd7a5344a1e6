"""Exception handlers that render every failure as the error envelope.

    {"success": false, "error": "...", "code": "...", "status": 400}

Upstream failures and unexpected errors are logged in full; the client only
sees a generic message for them.
"""

import math

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError
from protean.exceptions import ValidationError as ProteanValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from storefront.errors import ExternalServiceError, InternalError, RateLimitedError, StorefrontError

logger = structlog.get_logger(__name__)

GENERIC_MESSAGES = {
    ExternalServiceError.code: "Error al comunicarse con un servicio externo",
    InternalError.code: "Error interno del servidor",
}

_HTTP_CODES = {400: "BAD_REQUEST", 401: "UNAUTHORIZED", 403: "FORBIDDEN", 404: "NOT_FOUND", 405: "METHOD_NOT_ALLOWED", 429: "RATE_LIMITED"}


def error_response(message: str, code: str, status: int) -> JSONResponse:
    return JSONResponse(
        status_code=status,
        content={"success": False, "error": message, "code": code, "status": status},
    )


def _join_messages(messages) -> str:
    if isinstance(messages, dict):
        parts = []
        for field, errors in messages.items():
            errors = errors if isinstance(errors, list | tuple) else [errors]
            parts.append(f"{field}: {', '.join(str(e) for e in errors)}")
        return "; ".join(parts)
    return str(messages)


async def _storefront_error(request: Request, exc: StorefrontError) -> JSONResponse:
    if exc.code in GENERIC_MESSAGES:
        logger.error(
            "Request failed",
            path=request.url.path,
            code=exc.code,
            error=exc.message,
            details=exc.details,
            exc_info=exc,
        )
        return error_response(GENERIC_MESSAGES[exc.code], exc.code, exc.status)

    logger.info("Request rejected", path=request.url.path, code=exc.code, error=exc.message)
    response = error_response(exc.message, exc.code, exc.status)
    if isinstance(exc, RateLimitedError):
        response.headers["Retry-After"] = str(math.ceil(exc.retry_after))
    return response


async def _domain_validation_error(request: Request, exc: ProteanValidationError) -> JSONResponse:
    return error_response(_join_messages(getattr(exc, "messages", str(exc))), "VALIDATION_ERROR", 400)


async def _object_not_found(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    return error_response("Recurso no encontrado", "NOT_FOUND", 404)


async def _request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    messages = {".".join(str(p) for p in err.get("loc", ()) if p != "body"): err.get("msg") for err in exc.errors()}
    return error_response(_join_messages(messages), "VALIDATION_ERROR", 400)


async def _http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    code = _HTTP_CODES.get(exc.status_code, "ERROR")
    return error_response(str(exc.detail), code, exc.status_code)


async def _unhandled(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error", path=request.url.path, error=str(exc), exc_info=exc)
    return error_response(GENERIC_MESSAGES[InternalError.code], InternalError.code, 500)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StorefrontError, _storefront_error)
    app.add_exception_handler(ProteanValidationError, _domain_validation_error)
    app.add_exception_handler(ObjectNotFoundError, _object_not_found)
    app.add_exception_handler(RequestValidationError, _request_validation_error)
    app.add_exception_handler(StarletteHTTPException, _http_exception)
    app.add_exception_handler(Exception, _unhandled)
