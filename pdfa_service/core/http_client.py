"""
Shared HTTP client utilities: configured Client and a streaming body reader.
"""
from __future__ import annotations

import io
import logging
from typing import Iterator, Optional

import httpx

from pdfa_service.core.config import settings

logger = logging.getLogger(__name__)


def get_http_client(timeout: Optional[float] = None) -> httpx.Client:
    """Create a configured Client for fetching remote documents."""
    return httpx.Client(
        timeout=timeout or settings.HTTP_CLIENT_TIMEOUT,
        follow_redirects=settings.HTTP_FOLLOW_REDIRECTS,
        headers={"User-Agent": settings.HTTP_USER_AGENT},
    )


class ResponseBodyReader(io.RawIOBase):
    """
    Expose a streamed httpx response body as a readable binary file object.

    Bytes are pulled from the connection on demand. Transport errors raised
    mid-body are re-raised as OSError so consumers treat them as read
    failures.
    """

    def __init__(self, response: httpx.Response):
        self._response = response
        self._chunks: Iterator[bytes] = response.iter_bytes()
        self._pending = b""

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        if len(buffer) == 0:
            return 0
        while not self._pending:
            try:
                self._pending = next(self._chunks)
            except StopIteration:
                return 0
            except httpx.HTTPError as exc:
                raise OSError(f"Failed reading response body from {self._response.url}: {exc}") from exc

        size = min(len(buffer), len(self._pending))
        buffer[:size] = self._pending[:size]
        self._pending = self._pending[size:]
        return size
