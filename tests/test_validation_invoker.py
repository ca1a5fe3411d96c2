"""
Unit tests for ValidationInvoker.
"""
import io
import unittest
from dataclasses import replace

from pdf_fixtures import NOT_A_PDF, build_minimal_pdf, sha1_hex

from pdfa_service.core.config import settings
from pdfa_service.core.error_handling import ModelParsingError, NotAPDFError
from pdfa_service.models.validation_models import ValidationStatus
from pdfa_service.services.validation_context import build_validation_context
from pdfa_service.services.validation_invoker import ValidationInvoker


class BrokenStream(io.RawIOBase):
    """Delivers a valid-looking prefix, then fails."""

    def __init__(self, prefix: bytes):
        self._prefix = io.BytesIO(prefix)

    def readable(self):
        return True

    def readinto(self, buffer):
        data = self._prefix.read(len(buffer))
        if not data:
            raise OSError("connection reset by peer")
        buffer[:len(data)] = data
        return len(data)


class TestValidationInvoker(unittest.TestCase):
    """Test cases for validating streams with digest tracking."""

    @classmethod
    def setUpClass(cls):
        cls.context = build_validation_context(settings)

    def setUp(self):
        self.invoker = ValidationInvoker(self.context)

    def test_compliant_document(self):
        pdf = build_minimal_pdf(part=1, conformance="B")

        outcome = self.invoker.validate(io.BytesIO(pdf), self.context.profiles.get("1b"))

        self.assertEqual(outcome.status, ValidationStatus.COMPLETED)
        self.assertTrue(outcome.result.is_compliant)
        self.assertEqual(outcome.result.pdfa_flavour, "1b")
        self.assertEqual(outcome.digest.hex_digest, sha1_hex(pdf))

    def test_non_compliant_document_is_still_completed(self):
        pdf = build_minimal_pdf(part=1, conformance="B")

        outcome = self.invoker.validate(io.BytesIO(pdf), self.context.profiles.get("1a"))

        self.assertTrue(outcome.is_completed)
        self.assertFalse(outcome.result.is_compliant)
        failed = outcome.result.failed_clauses()
        self.assertIn("6.8.2.2", failed)
        self.assertIn("6.8.3.3", failed)

    def test_not_a_pdf_without_digest(self):
        with self.assertRaises(NotAPDFError):
            self.invoker.validate(io.BytesIO(NOT_A_PDF), self.context.profiles.get("1b"))

    def test_not_a_pdf_with_matching_digest(self):
        with self.assertRaises(NotAPDFError):
            self.invoker.validate(
                io.BytesIO(NOT_A_PDF),
                self.context.profiles.get("1b"),
                expected_digest_hex=sha1_hex(NOT_A_PDF).upper(),
            )

    def test_digest_mismatch_reraises_parse_error(self):
        with self.assertRaises(ModelParsingError) as ctx:
            self.invoker.validate(
                io.BytesIO(NOT_A_PDF),
                self.context.profiles.get("1b"),
                expected_digest_hex="0" * 40,
            )
        self.assertNotIsInstance(ctx.exception, NotAPDFError)

    def test_read_failure_is_io_failure_outcome(self):
        pdf = build_minimal_pdf()

        outcome = self.invoker.validate(BrokenStream(pdf[:20]), self.context.profiles.get("1b"))

        self.assertEqual(outcome.status, ValidationStatus.IO_FAILURE)
        self.assertIsNone(outcome.result)
        self.assertIsInstance(outcome.error, OSError)

    def test_failed_assertions_are_capped(self):
        context = replace(self.context, max_failed_checks=1)
        invoker = ValidationInvoker(context)
        pdf = build_minimal_pdf(part=1, conformance="B", with_metadata=False)

        outcome = invoker.validate(io.BytesIO(pdf), context.profiles.get("1a"))

        self.assertEqual(len(outcome.result.assertions), 1)
        self.assertTrue(outcome.result.assertions_truncated)
        self.assertFalse(outcome.result.is_compliant)


if __name__ == "__main__":
    unittest.main()
