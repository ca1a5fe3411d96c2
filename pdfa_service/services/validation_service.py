"""
Request orchestration for PDF/A validation.

Handles the two request flows: validation returning a structured result,
and validation rendered to an HTML report through the batch pipeline.
"""
import logging

from pdfa_service.core.error_handling import PipelineIOError, ValidationIncompleteError
from pdfa_service.engine.results import ValidationResult
from pdfa_service.models.validation_models import RenderedReport, ValidationRequest
from pdfa_service.services.batch_pipeline import BatchPipelineOrchestrator
from pdfa_service.services.input_resolver import InputResolver
from pdfa_service.services.report_renderer import ReportRenderer
from pdfa_service.services.staging_store import StagingStore
from pdfa_service.services.validation_context import ValidationContext
from pdfa_service.services.validation_invoker import ValidationInvoker

logger = logging.getLogger(__name__)


class ValidationService:
    """
    Validates documents submitted by upload or URL.

    The requested profile is looked up before the input is resolved, so an
    unknown profile never triggers a remote fetch.
    """

    def __init__(self, context: ValidationContext, resolver: InputResolver):
        """
        Initialize the validation service.

        Args:
            context: Process-wide validation context
            resolver: Resolves requests to input streams
        """
        self.context = context
        self.resolver = resolver
        self.invoker = ValidationInvoker(context)
        self.staging = StagingStore(
            directory=context.staging_dir,
            prefix=context.staging_prefix,
            chunk_size=context.staging_chunk_size,
        )
        self.pipeline = BatchPipelineOrchestrator(context)
        self.renderer = ReportRenderer(context.report_stylesheet)

    def validate(self, request: ValidationRequest) -> ValidationResult:
        """
        Validate the request's document and return the structured result.

        Raises:
            UnknownProfileError: The profile is not registered
            InputResolutionError: The input is missing, ambiguous or unreachable
            NotAPDFError: The input is not a PDF
            ValidationIncompleteError: Reading the input failed mid-validation
        """
        profile = self.context.profiles.get(request.profile_id)
        with self.resolver.resolve(request) as resolved:
            logger.info(f"Validating {resolved.origin} against profile {profile.id}")
            outcome = self.invoker.validate(resolved.stream, profile, request.expected_digest_hex)

        if not outcome.is_completed:
            raise ValidationIncompleteError(f"Failed reading input: {outcome.error}")
        return outcome.result

    def render_report(self, request: ValidationRequest) -> RenderedReport:
        """
        Validate the request's document and render an HTML report.

        The input is staged to a temporary file for the batch pipeline; the
        file is removed whether or not rendering succeeds.

        Raises:
            UnknownProfileError: The profile is not registered
            InputResolutionError: The input is missing, ambiguous or unreachable
            ReportPipelineError: Staging, report generation or rendering failed
        """
        profile = self.context.profiles.get(request.profile_id)
        with self.resolver.resolve(request) as resolved:
            with self.staging.staged(resolved.stream) as artifact:
                logger.info(f"Generating report for {resolved.origin} ({artifact.size_bytes} bytes) against {profile.id}")
                report_bytes, summary = self.pipeline.run(artifact, profile)

        if summary is None:
            raise PipelineIOError("Batch processing produced no report")

        return self.renderer.render(
            report_bytes,
            summary,
            base_url=self.context.rules_wiki_url_base,
            full_html=self.context.full_html,
        )
