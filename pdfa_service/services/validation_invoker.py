"""
Runs the validation engine over a request stream while tracking its digest.
"""
import logging
from typing import BinaryIO, Optional

from pdfa_service.core.error_handling import ModelParsingError, NotAPDFError
from pdfa_service.engine.parser import PDFAParser
from pdfa_service.engine.profiles import ValidationProfile
from pdfa_service.engine.validator import ValidatorFactory
from pdfa_service.models.validation_models import DigestResult, ValidationOutcome
from pdfa_service.services.digest_tracker import DigestTracker
from pdfa_service.services.validation_context import ValidationContext

logger = logging.getLogger(__name__)


class ValidationInvoker:
    """Validates one document stream against one profile."""

    def __init__(self, context: ValidationContext):
        self.context = context

    def validate(
        self,
        stream: BinaryIO,
        profile: ValidationProfile,
        expected_digest_hex: Optional[str] = None
    ) -> ValidationOutcome:
        """
        Validate ``stream`` against ``profile``.

        A stream that cannot be parsed is reported as "not a PDF" only when
        the client supplied no digest, or the digest of what was received
        matches the one supplied. A mismatching digest means the bytes were
        corrupted in transit, so the parse error itself is raised.

        Args:
            stream: Document bytes, consumed once
            profile: Profile to validate against
            expected_digest_hex: Optional SHA-1 hex digest supplied by the client

        Returns:
            ValidationOutcome: completed with the result, or io_failure when
            reading the stream failed

        Raises:
            NotAPDFError: The input is genuinely not a parseable PDF
            ModelParsingError: Parsing failed and the digest does not match
            ValidationEngineError: The engine failed while evaluating rules
        """
        tracker = DigestTracker.wrap(stream)
        try:
            with PDFAParser(tracker, profile, spool_max_size=self.context.spool_max_size) as parser:
                validator = ValidatorFactory.create_validator(
                    profile,
                    record_passed=self.context.record_passed_assertions,
                    max_failed_checks=self.context.max_failed_checks,
                )
                result = validator.validate(parser)
        except ModelParsingError as exc:
            try:
                digest = self._finalize(tracker)
            except OSError as read_exc:
                logger.error(f"I/O error while draining unparseable input: {read_exc}")
                return ValidationOutcome.io_failure(read_exc)

            if expected_digest_hex is None or digest.matches(expected_digest_hex):
                logger.info(f"Input is not a PDF (sha1 {digest.hex_digest}): {exc}")
                raise NotAPDFError(str(exc)) from exc

            logger.warning(
                f"Parse failure with digest mismatch: expected {expected_digest_hex}, "
                f"received {digest.hex_digest} ({tracker.bytes_read} bytes)"
            )
            raise
        except OSError as exc:
            logger.error(f"I/O error while reading input after {tracker.bytes_read} bytes: {exc}")
            return ValidationOutcome.io_failure(exc)

        digest = self._finalize(tracker)
        logger.info(
            f"Validated {tracker.bytes_read} bytes against {profile.id}: "
            f"compliant={result.is_compliant}, sha1={digest.hex_digest}"
        )
        return ValidationOutcome.completed(result, digest)

    @staticmethod
    def _finalize(tracker: DigestTracker) -> DigestResult:
        tracker.drain()
        return tracker.final_digest()
