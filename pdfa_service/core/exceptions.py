"""
FastAPI exception handlers.

Renders HTTP errors as JSON, except for PlainTextHTTPException which keeps a
text/plain body (used for the "not a PDF" response).
"""
import logging

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from pdfa_service.core.error_handling import PlainTextHTTPException, request_id_var

logger = logging.getLogger(__name__)


def _with_request_id(headers):
    merged = dict(headers or {})
    request_id = request_id_var.get()
    if request_id and "X-Request-ID" not in merged:
        merged["X-Request-ID"] = request_id
    return merged


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    headers = _with_request_id(getattr(exc, "headers", None))
    if isinstance(exc, PlainTextHTTPException):
        return PlainTextResponse(str(exc.detail), status_code=exc.status_code, headers=headers)
    return JSONResponse({"detail": exc.detail}, status_code=exc.status_code, headers=headers)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Request validation failed for {request.method} {request.url.path}: {exc.errors()}")
    return JSONResponse(
        {"detail": jsonable_encoder(exc.errors())},
        status_code=422,
        headers=_with_request_id(None),
    )
