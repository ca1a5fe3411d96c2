"""
Error handling utilities for PDF/A validation operations.

This module provides the service's exception taxonomy and a decorator that
translates it into HTTP responses consistently across routes.
"""
import inspect
import logging
import time
import uuid
from contextvars import ContextVar
from functools import wraps
from pathlib import Path
from typing import Callable, Optional, ParamSpec, TypeVar

from fastapi import HTTPException

from pdfa_service.core.constants import MEDIA_TYPE_TEXT, NOT_A_PDF_MESSAGE

logger = logging.getLogger(__name__)

# Context variable for request ID tracking across async contexts
request_id_var: ContextVar[str] = ContextVar('request_id', default='')

# Type variables for generic function signatures
P = ParamSpec('P')
T = TypeVar('T')


# ============================================================================
# Custom Exceptions
# ============================================================================

class PDFAServiceError(Exception):
    """Base exception for validation service errors."""
    pass


class InputResolutionError(PDFAServiceError):
    """The request's document source could not be determined."""
    pass


class AmbiguousInputError(InputResolutionError):
    """Both a URL and an uploaded file were supplied."""
    pass


class MissingInputError(InputResolutionError):
    """Neither a URL nor an uploaded file was supplied."""
    pass


class RemoteFetchError(InputResolutionError):
    """The document URL could not be opened for reading."""

    def __init__(self, url: str, message: str):
        super().__init__(message)
        self.url = url


class UnknownProfileError(PDFAServiceError):
    """No validation profile is registered under the requested identifier."""

    def __init__(self, profile_id: str):
        super().__init__(f"Unknown validation profile: {profile_id!r}")
        self.profile_id = profile_id


class ValidationEngineError(PDFAServiceError):
    """The validation engine failed unexpectedly."""
    pass


class ModelParsingError(ValidationEngineError):
    """The input could not be interpreted as a PDF document."""
    pass


class EncryptedDocumentError(ValidationEngineError):
    """The document is encrypted and cannot be opened without a password."""
    pass


class NotAPDFError(PDFAServiceError):
    """The input genuinely is not a parseable PDF (digest confirmed)."""
    pass


class ValidationIncompleteError(PDFAServiceError):
    """Validation could not finish because reading the input failed."""
    pass


class ReportPipelineError(PDFAServiceError):
    """Base exception for the rendered report path."""
    pass


class StagingIOError(ReportPipelineError):
    """The input could not be persisted to a temporary file.

    ``path`` is set when the temporary file was created, so callers can
    remove a partially written artifact.
    """

    def __init__(self, message: str, path: Optional[Path] = None):
        super().__init__(message)
        self.path = path


class PipelineIOError(ReportPipelineError):
    """The batch pipeline produced no usable report."""
    pass


class RenderTransformError(ReportPipelineError):
    """The machine-readable report could not be rendered."""
    pass


class DigestNotFinalizedError(RuntimeError):
    """A digest was requested before its stream reached end-of-input."""
    pass


class PlainTextHTTPException(HTTPException):
    """HTTPException whose detail is sent as a text/plain body."""

    media_type = MEDIA_TYPE_TEXT


# ============================================================================
# Error Handler Decorator
# ============================================================================

def _to_http_exception(exc: Exception, error_message: str, request_id: str, elapsed: float) -> HTTPException:
    """Map a service exception onto the HTTP status callers should see."""
    headers = {"X-Request-ID": request_id}

    if isinstance(exc, NotAPDFError):
        logger.warning(f"[{request_id}] {error_message} - Not a PDF after {elapsed:.2f}s: {exc}")
        return PlainTextHTTPException(status_code=415, detail=NOT_A_PDF_MESSAGE, headers=headers)
    if isinstance(exc, RemoteFetchError):
        logger.error(f"[{request_id}] {error_message} - Remote fetch failed after {elapsed:.2f}s: {exc}")
        return HTTPException(status_code=502, detail=str(exc), headers=headers)
    if isinstance(exc, InputResolutionError):
        logger.error(f"[{request_id}] {error_message} - Invalid input after {elapsed:.2f}s: {exc}")
        return HTTPException(status_code=400, detail=str(exc), headers=headers)
    if isinstance(exc, UnknownProfileError):
        logger.error(f"[{request_id}] {error_message} - {exc}")
        return HTTPException(status_code=404, detail=str(exc), headers=headers)
    if isinstance(exc, EncryptedDocumentError):
        logger.error(f"[{request_id}] {error_message} - Encrypted document after {elapsed:.2f}s: {exc}")
        return HTTPException(status_code=500, detail=f"{error_message}: {str(exc)}", headers=headers)
    if isinstance(exc, ValidationIncompleteError):
        logger.error(f"[{request_id}] {error_message} - Validation incomplete after {elapsed:.2f}s: {exc}")
        return HTTPException(
            status_code=500,
            detail=f"Validation could not be completed: {str(exc)}",
            headers=headers
        )
    if isinstance(exc, ReportPipelineError):
        logger.error(f"[{request_id}] {error_message} - Report pipeline error after {elapsed:.2f}s: {exc}")
        return HTTPException(
            status_code=500,
            detail=f"Report generation failed: {str(exc)}",
            headers=headers
        )
    if isinstance(exc, PDFAServiceError):
        logger.error(f"[{request_id}] {error_message} - Validation error after {elapsed:.2f}s: {exc}")
        return HTTPException(status_code=500, detail=f"{error_message}: {str(exc)}", headers=headers)

    logger.exception(f"[{request_id}] {error_message} - Unexpected error after {elapsed:.2f}s: {exc}")
    return HTTPException(status_code=500, detail=f"{error_message}: {str(exc)}", headers=headers)


def _current_request_id() -> str:
    if not request_id_var.get():
        request_id_var.set(str(uuid.uuid4()))
    return request_id_var.get()


def _log_completion(request_id: str, func_name: str, elapsed: float):
    from pdfa_service.core.config import settings
    threshold_ms = settings.RESPONSE_TIME_WARNING_THRESHOLD_MS
    elapsed_ms = elapsed * 1000
    if elapsed_ms > threshold_ms:
        logger.warning(
            f"[{request_id}] SLOW RESPONSE: {func_name} took {elapsed:.2f}s "
            f"({elapsed_ms:.0f}ms > {threshold_ms}ms threshold)"
        )
    else:
        logger.info(f"[{request_id}] Completed {func_name} in {elapsed:.2f}s")


def handle_validation_errors(
    error_message: str = "Operation failed"
) -> Callable[[Callable[P, T]], Callable[P, T]]:
    """
    Decorator to handle errors in validation routes.

    Converts service errors to appropriate HTTP exceptions and logs them
    with request tracking and timing. Works with both sync and async
    functions; HTTPExceptions raised by the route pass through untouched.

    Args:
        error_message: Custom error message prefix

    Returns:
        Decorated function with error handling

    Example:
        @handle_validation_errors("Failed to validate PDF")
        def validate(profile_id: str) -> Response:
            ...
    """
    def decorator(func: Callable[P, T]) -> Callable[P, T]:

        @wraps(func)
        async def async_wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            request_id = _current_request_id()
            start_time = time.time()
            try:
                logger.info(f"[{request_id}] Starting {func.__name__}")
                result = await func(*args, **kwargs)
                _log_completion(request_id, func.__name__, time.time() - start_time)
                return result
            except HTTPException:
                raise
            except Exception as e:
                raise _to_http_exception(e, error_message, request_id, time.time() - start_time) from e

        @wraps(func)
        def sync_wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            request_id = _current_request_id()
            start_time = time.time()
            try:
                logger.info(f"[{request_id}] Starting {func.__name__}")
                result = func(*args, **kwargs)
                _log_completion(request_id, func.__name__, time.time() - start_time)
                return result
            except HTTPException:
                raise
            except Exception as e:
                raise _to_http_exception(e, error_message, request_id, time.time() - start_time) from e

        if inspect.iscoroutinefunction(func):
            return async_wrapper  # type: ignore
        return sync_wrapper  # type: ignore

    return decorator
