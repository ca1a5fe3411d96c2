"""
Unit tests for DigestTracker.
"""
import hashlib
import io
import unittest

from pdfa_service.core.error_handling import DigestNotFinalizedError
from pdfa_service.models.validation_models import DigestResult
from pdfa_service.services.digest_tracker import DigestTracker


class TestDigestTracker(unittest.TestCase):
    """Test cases for digest tracking over streams."""

    def setUp(self):
        self.payload = b"%PDF-1.4\n" + bytes(range(256)) * 50

    def test_reads_are_passed_through_unchanged(self):
        tracker = DigestTracker.wrap(io.BytesIO(self.payload))

        first = tracker.read(10)
        rest = tracker.read()

        self.assertEqual(first + rest, self.payload)
        self.assertEqual(tracker.bytes_read, len(self.payload))

    def test_digest_of_fully_read_stream(self):
        tracker = DigestTracker.wrap(io.BytesIO(self.payload))
        tracker.read()

        digest = tracker.final_digest()

        self.assertEqual(digest.algorithm, "sha1")
        self.assertEqual(digest.hex_digest, hashlib.sha1(self.payload).hexdigest())

    def test_digest_before_exhaustion_raises(self):
        tracker = DigestTracker.wrap(io.BytesIO(self.payload))
        tracker.read(100)

        self.assertFalse(tracker.exhausted)
        with self.assertRaises(DigestNotFinalizedError):
            tracker.final_digest()

    def test_drain_completes_partial_read(self):
        tracker = DigestTracker.wrap(io.BytesIO(self.payload))
        tracker.read(100)

        drained = tracker.drain()

        self.assertEqual(drained, len(self.payload) - 100)
        self.assertTrue(tracker.exhausted)
        self.assertEqual(tracker.final_digest().hex_digest, hashlib.sha1(self.payload).hexdigest())

    def test_empty_stream(self):
        tracker = DigestTracker.wrap(io.BytesIO(b""))

        self.assertEqual(tracker.read(), b"")
        self.assertEqual(tracker.final_digest().hex_digest, hashlib.sha1(b"").hexdigest())

    def test_zero_length_read_does_not_mark_exhausted(self):
        tracker = DigestTracker.wrap(io.BytesIO(self.payload))

        self.assertEqual(tracker.read(0), b"")
        self.assertFalse(tracker.exhausted)


class TestDigestResult(unittest.TestCase):
    """Test cases for digest comparison."""

    def test_matches_ignores_case_and_whitespace(self):
        digest = DigestResult(algorithm="sha1", hex_digest="a9993e364706816aba3e25717850c26c9cd0d89d")

        self.assertTrue(digest.matches(" A9993E364706816ABA3E25717850C26C9CD0D89D "))
        self.assertFalse(digest.matches("0" * 40))


if __name__ == "__main__":
    unittest.main()
