"""
Exception handlers — every failure leaves as an ErrorResponse envelope.

  ProjectifyError         → its own status_code / code (Retry-After on 429)
  RequestValidationError  → 400 "Validation failed" + per-field errors
  HTTPException           → its status, code derived from the status
  anything else           → 500, logged with traceback, message withheld
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from projectify.auth.errors import AuthenticationError
from projectify.core.errors import ProjectifyError, RateLimited
from projectify.schemas.common import ErrorResponse, FieldError

logger = logging.getLogger(__name__)

_HTTP_CODES = {
    status.HTTP_400_BAD_REQUEST: "bad_request",
    status.HTTP_401_UNAUTHORIZED: "unauthorized",
    status.HTTP_403_FORBIDDEN: "forbidden",
    status.HTTP_404_NOT_FOUND: "not_found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "method_not_allowed",
}


def _render(
    status_code: int,
    body: ErrorResponse,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(body.model_dump(by_alias=True, exclude_none=True)),
        headers=headers,
    )


def _field_name(loc: tuple) -> str:
    # Drop the "body"/"query"/"path" source prefix FastAPI adds
    parts = [str(p) for p in loc[1:]] if len(loc) > 1 else [str(p) for p in loc]
    return ".".join(parts)


async def handle_projectify_error(_request: Request, exc: ProjectifyError) -> JSONResponse:
    headers = None
    if isinstance(exc, AuthenticationError):
        headers = {"WWW-Authenticate": "Bearer"}
    elif isinstance(exc, RateLimited):
        headers = {"Retry-After": str(exc.retry_after)}
    elif exc.status_code >= 500:
        logger.error("%s: %s", exc.code, exc.message)

    return _render(
        exc.status_code,
        ErrorResponse(message=exc.message, error=exc.code),
        headers,
    )


async def handle_validation_error(_request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        FieldError(field=_field_name(tuple(err.get("loc", ()))), message=err.get("msg", ""))
        for err in exc.errors()
    ]
    return _render(
        status.HTTP_400_BAD_REQUEST,
        ErrorResponse(message="Validation failed", error="invalid_argument", errors=errors),
    )


async def handle_http_exception(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
    code = _HTTP_CODES.get(exc.status_code, f"http_{exc.status_code}")
    return _render(
        exc.status_code,
        ErrorResponse(message=str(exc.detail), error=code),
        getattr(exc, "headers", None),
    )


async def handle_unexpected(_request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error", exc_info=exc)
    return _render(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        ErrorResponse(message="Internal server error", error="internal_error"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ProjectifyError, handle_projectify_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(Exception, handle_unexpected)
