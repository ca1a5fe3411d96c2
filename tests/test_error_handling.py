"""
Tests for error translation and Accept negotiation.
"""
import asyncio

import pytest
from fastapi import HTTPException

from pdfa_service.core.error_handling import (
    AmbiguousInputError,
    MissingInputError,
    ModelParsingError,
    NotAPDFError,
    PipelineIOError,
    PlainTextHTTPException,
    RemoteFetchError,
    RenderTransformError,
    UnknownProfileError,
    ValidationIncompleteError,
    handle_validation_errors,
)
from pdfa_service.core.utils import negotiate_media_type


@pytest.mark.parametrize("error, status", [
    (AmbiguousInputError("both"), 400),
    (MissingInputError("none"), 400),
    (UnknownProfileError("9z"), 404),
    (RemoteFetchError("http://x.invalid", "refused"), 502),
    (ValidationIncompleteError("reset"), 500),
    (PipelineIOError("no report"), 500),
    (RenderTransformError("bad xml"), 500),
    (ModelParsingError("garbled"), 500),
    (ValueError("unexpected"), 500),
])
def test_errors_map_to_status(error, status):
    @handle_validation_errors("Failed")
    def route():
        raise error

    with pytest.raises(HTTPException) as exc_info:
        route()

    assert exc_info.value.status_code == status
    assert "X-Request-ID" in exc_info.value.headers


def test_not_a_pdf_is_plain_text_415():
    @handle_validation_errors("Failed")
    def route():
        raise NotAPDFError("no header")

    with pytest.raises(PlainTextHTTPException) as exc_info:
        route()

    assert exc_info.value.status_code == 415
    assert exc_info.value.detail == "File does not appear to be a PDF."


def test_http_exceptions_pass_through():
    @handle_validation_errors("Failed")
    def route():
        raise HTTPException(status_code=406, detail="nope")

    with pytest.raises(HTTPException) as exc_info:
        route()

    assert exc_info.value.status_code == 406
    assert exc_info.value.detail == "nope"


def test_async_routes_are_wrapped():
    @handle_validation_errors("Failed")
    async def route():
        raise UnknownProfileError("9z")

    with pytest.raises(HTTPException) as exc_info:
        asyncio.run(route())

    assert exc_info.value.status_code == 404


@pytest.mark.parametrize("accept, expected", [
    (None, "application/json"),
    ("", "application/json"),
    ("*/*", "application/json"),
    ("application/json", "application/json"),
    ("application/xml", "application/xml"),
    ("text/xml", "application/xml"),
    ("text/html", "text/html"),
    ("text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8", "text/html"),
    ("application/xml;q=0.5, application/json;q=0.9", "application/json"),
    ("image/png, */*;q=0.1", "application/json"),
])
def test_negotiation(accept, expected):
    assert negotiate_media_type(accept) == expected


def test_negotiation_rejects_unsupported():
    with pytest.raises(HTTPException) as exc_info:
        negotiate_media_type("image/png")

    assert exc_info.value.status_code == 406
