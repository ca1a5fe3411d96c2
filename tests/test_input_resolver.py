"""
Unit tests for InputResolver.

Network access is replaced with httpx.MockTransport.
"""
import io
import unittest

import httpx

from pdfa_service.core.error_handling import (
    AmbiguousInputError,
    MissingInputError,
    RemoteFetchError,
)
from pdfa_service.models.validation_models import ValidationRequest
from pdfa_service.services.input_resolver import InputResolver


class TestInputResolver(unittest.TestCase):
    """Test cases for resolving request inputs."""

    def setUp(self):
        self.requests = []

    def _client(self, handler):
        def recording_handler(request):
            self.requests.append(request)
            return handler(request)
        return httpx.Client(transport=httpx.MockTransport(recording_handler))

    def test_upload_is_passed_through(self):
        upload = io.BytesIO(b"%PDF-1.4")
        resolver = InputResolver(client=self._client(lambda r: httpx.Response(200)))

        resolved = resolver.resolve(ValidationRequest(profile_id="1b", upload=upload, upload_filename="a.pdf"))

        self.assertIs(resolved.stream, upload)
        self.assertEqual(resolved.origin, "upload:a.pdf")
        self.assertEqual(self.requests, [])

    def test_url_body_is_streamed(self):
        body = b"%PDF-1.7 remote document"
        resolver = InputResolver(client=self._client(lambda r: httpx.Response(200, content=body)))

        with resolver.resolve(ValidationRequest(profile_id="1b", source_url="https://example.org/doc.pdf")) as resolved:
            data = resolved.stream.read()

        self.assertEqual(data, body)
        self.assertEqual(len(self.requests), 1)
        self.assertEqual(self.requests[0].method, "GET")
        self.assertEqual(str(self.requests[0].url), "https://example.org/doc.pdf")

    def test_both_inputs_rejected_before_fetch(self):
        resolver = InputResolver(client=self._client(lambda r: httpx.Response(200)))
        request = ValidationRequest(
            profile_id="1b",
            source_url="https://example.org/doc.pdf",
            upload=io.BytesIO(b"x"),
        )

        with self.assertRaises(AmbiguousInputError):
            resolver.resolve(request)
        self.assertEqual(self.requests, [])

    def test_missing_input(self):
        resolver = InputResolver(client=self._client(lambda r: httpx.Response(200)))

        with self.assertRaises(MissingInputError):
            resolver.resolve(ValidationRequest(profile_id="1b"))
        self.assertIsNone(resolver.resolve(ValidationRequest(profile_id="1b"), require_input=False))

    def test_blank_url_counts_as_missing(self):
        resolver = InputResolver(client=self._client(lambda r: httpx.Response(200)))

        with self.assertRaises(MissingInputError):
            resolver.resolve(ValidationRequest(profile_id="1b", source_url="   "))

    def test_connection_failure_is_remote_fetch_error(self):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        resolver = InputResolver(client=self._client(refuse))

        with self.assertRaises(RemoteFetchError) as ctx:
            resolver.resolve(ValidationRequest(profile_id="1b", source_url="http://unreachable.invalid/x.pdf"))

        self.assertEqual(ctx.exception.url, "http://unreachable.invalid/x.pdf")
        self.assertIsInstance(ctx.exception.__cause__, httpx.ConnectError)
        self.assertEqual(len(self.requests), 1)

    def test_error_status_is_remote_fetch_error(self):
        resolver = InputResolver(client=self._client(lambda r: httpx.Response(404)))

        with self.assertRaises(RemoteFetchError) as ctx:
            resolver.resolve(ValidationRequest(profile_id="1b", source_url="https://example.org/missing.pdf"))

        self.assertIn("404", str(ctx.exception))
        self.assertIsInstance(ctx.exception.__cause__, httpx.HTTPStatusError)

    def test_injected_client_is_not_closed(self):
        client = self._client(lambda r: httpx.Response(200, content=b"data"))
        resolver = InputResolver(client=client)

        with resolver.resolve(ValidationRequest(profile_id="1b", source_url="https://example.org/doc.pdf")):
            pass

        self.assertFalse(client.is_closed)


if __name__ == "__main__":
    unittest.main()
