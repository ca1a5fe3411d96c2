"""
Input resolution: decides where a request's document bytes come from.
"""
import logging
from typing import Optional

import httpx

from pdfa_service.core.error_handling import (
    AmbiguousInputError,
    MissingInputError,
    RemoteFetchError,
)
from pdfa_service.core.http_client import ResponseBodyReader, get_http_client
from pdfa_service.models.validation_models import ResolvedInput, ValidationRequest

logger = logging.getLogger(__name__)


class InputResolver:
    """
    Resolves a validation request to exactly one readable stream.

    A document is either fetched from ``source_url`` or taken from the
    uploaded file, never both. URL fetches are a single streaming GET with
    no retry.
    """

    def __init__(self, client: Optional[httpx.Client] = None, timeout: Optional[float] = None):
        """
        Initialize the resolver.

        Args:
            client: Client used for URL fetches. An injected client is left
                open; when omitted, one is created per fetch and closed with
                the resolved input.
            timeout: Transport timeout for created clients (seconds)
        """
        self._client = client
        self._timeout = timeout

    def resolve(self, request: ValidationRequest, require_input: bool = True) -> Optional[ResolvedInput]:
        """
        Resolve the request's document source.

        Args:
            request: The validation request
            require_input: Whether a request with no document is an error

        Returns:
            ResolvedInput to read the document from, or None when there is
            no input and none is required

        Raises:
            AmbiguousInputError: Both a URL and an upload were supplied
            MissingInputError: Neither was supplied and input is required
            RemoteFetchError: The URL could not be opened
        """
        if request.has_url and request.has_upload:
            raise AmbiguousInputError("Supply either a file or a url, not both")

        if request.has_url:
            return self._fetch(request.source_url)

        if request.has_upload:
            name = request.upload_filename or "upload"
            logger.info(f"Validating uploaded file {name}")
            return ResolvedInput(stream=request.upload, origin=f"upload:{name}")

        if require_input:
            raise MissingInputError("No document supplied: provide a file or a url")
        return None

    def _fetch(self, url: str) -> ResolvedInput:
        owns_client = self._client is None
        client = self._client or get_http_client(timeout=self._timeout)
        logger.info(f"Fetching document from {url}")

        try:
            request = client.build_request("GET", url)
            response = client.send(request, stream=True)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            if owns_client:
                client.close()
            raise RemoteFetchError(url, f"Could not open {url}: {exc}") from exc

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            response.close()
            if owns_client:
                client.close()
            raise RemoteFetchError(url, f"Could not open {url}: HTTP {response.status_code}") from exc

        closers = [client.close] if owns_client else []
        closers.append(response.close)
        return ResolvedInput(stream=ResponseBodyReader(response), origin=f"url:{url}", closers=closers)
