"""
Batch processing pipeline used to produce machine-readable reports.

A batch processor runs the configured tasks (validation, feature
extraction, metadata fixing) over a set of files and hands each job to a
report handler. The HTTP report flow runs a one-file batch with validation
only.
"""
import io
import logging
from pathlib import Path
from typing import Iterable, Optional, Tuple

from pdfa_service.core.error_handling import EncryptedDocumentError, ModelParsingError, ValidationEngineError
from pdfa_service.engine.features import FeatureConfig, FeatureExtractor
from pdfa_service.engine.fixer import FixerConfig, FixerStatus, MetadataFixer
from pdfa_service.engine.parser import PDFAParser
from pdfa_service.engine.profiles import ValidationProfile
from pdfa_service.engine.validator import ValidatorConfig, ValidatorFactory
from pdfa_service.models.validation_models import (
    BatchSummary,
    JobResult,
    ProcessorConfig,
    StagedArtifact,
    TaskType,
)
from pdfa_service.services.report_writer import MrrReportHandler
from pdfa_service.services.validation_context import ValidationContext

logger = logging.getLogger(__name__)


class BatchProcessor:
    """
    Runs the configured tasks over a batch of files.

    Use as a context manager; the processor is released on exit.
    """

    def __init__(self, config: ProcessorConfig, spool_max_size: int = 16 * 1024 * 1024):
        self.config = config
        self.spool_max_size = spool_max_size
        self._validator = ValidatorFactory.from_config(config.validator_config)
        self._extractor = FeatureExtractor(config.feature_config)
        self._fixer = MetadataFixer(config.fixer_config)
        self._closed = False

    @property
    def profile(self) -> ValidationProfile:
        return self.config.validator_config.profile

    def process(self, files: Iterable[StagedArtifact], handler: MrrReportHandler) -> BatchSummary:
        """
        Process every file and write each job to ``handler``.

        Parse failures, encrypted files and engine failures are counted and
        recorded as failed jobs; processing continues with the next file.

        Returns:
            BatchSummary for the run

        Raises:
            OSError: If a file cannot be read
            PipelineIOError: If the handler cannot write the report
        """
        if self._closed:
            raise RuntimeError("BatchProcessor is closed")

        summary = BatchSummary()
        for artifact in files:
            summary.total_jobs += 1
            job = self._process_item(artifact, summary)
            handler.handle_job(job)

        summary.finish()
        handler.close(summary)
        logger.info(
            f"Batch finished: {summary.total_jobs} job(s), {summary.compliant} compliant, "
            f"{summary.non_compliant} non-compliant, {summary.failed_jobs} failed in {summary.duration_ms}ms"
        )
        return summary

    def _process_item(self, artifact: StagedArtifact, summary: BatchSummary) -> JobResult:
        job = JobResult(path=artifact.path, size_bytes=artifact.size_bytes)
        with open(artifact.path, "rb") as fh:
            try:
                parser = PDFAParser(fh, self.profile, spool_max_size=self.spool_max_size)
            except EncryptedDocumentError as exc:
                logger.warning(f"Skipping encrypted document {artifact.path}: {exc}")
                summary.encrypted += 1
                job.task_exception = str(exc)
                job.exception_type = type(exc).__name__
                return job
            except ModelParsingError as exc:
                logger.warning(f"Failed to parse {artifact.path}: {exc}")
                summary.failed_to_parse += 1
                job.task_exception = str(exc)
                job.exception_type = type(exc).__name__
                return job

            with parser:
                try:
                    self._run_tasks(artifact, parser, job, summary)
                except ValidationEngineError as exc:
                    logger.error(f"Validation failed for {artifact.path}: {exc}")
                    summary.validation_exceptions += 1
                    job.task_exception = str(exc)
                    job.exception_type = type(exc).__name__
        return job

    def _run_tasks(self, artifact: StagedArtifact, parser: PDFAParser, job: JobResult, summary: BatchSummary):
        if self.config.has_task(TaskType.VALIDATE) or self.config.has_task(TaskType.FIX_METADATA):
            job.validation_result = self._validator.validate(parser)
            if job.validation_result.is_compliant:
                summary.compliant += 1
            else:
                summary.non_compliant += 1

        if self.config.has_task(TaskType.EXTRACT_FEATURES) and not self.config.feature_config.is_inert:
            job.features = self._extractor.extract(parser.document)
            summary.feature_reports += 1

        if self.config.has_task(TaskType.FIX_METADATA):
            job.fixer_result = self._fixer.fix(
                Path(artifact.path), parser.document, job.validation_result, self.profile
            )
            if job.fixer_result.status is FixerStatus.FIX_APPLIED:
                summary.fixes_applied += 1

    def close(self):
        self._closed = True

    def __enter__(self) -> "BatchProcessor":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


class ProcessorFactory:
    """Creates batch processors and their configurations."""

    @staticmethod
    def from_values(
        validator_config: ValidatorConfig,
        feature_config: FeatureConfig,
        fixer_config: FixerConfig,
        tasks: Iterable[TaskType]
    ) -> ProcessorConfig:
        return ProcessorConfig(
            validator_config=validator_config,
            feature_config=feature_config,
            fixer_config=fixer_config,
            tasks=frozenset(tasks),
        )

    @staticmethod
    def file_batch_processor(config: ProcessorConfig, spool_max_size: int = 16 * 1024 * 1024) -> BatchProcessor:
        return BatchProcessor(config, spool_max_size=spool_max_size)


class BatchPipelineOrchestrator:
    """Produces the machine-readable report for a staged document."""

    def __init__(self, context: ValidationContext):
        self.context = context

    def run(self, artifact: StagedArtifact, profile: ValidationProfile) -> Tuple[bytes, Optional[BatchSummary]]:
        """
        Validate ``artifact`` against ``profile`` and write the MRR.

        Returns:
            Tuple of (report bytes, summary). The summary is None when an I/O
            error interrupted processing and no report was produced.

        Raises:
            PipelineIOError: If the report sink cannot be written
        """
        validator_config = ValidatorFactory.create_config(
            profile,
            record_passed=self.context.record_passed_assertions,
            max_failed_checks=self.context.max_failed_checks,
        )
        config = ProcessorFactory.from_values(
            validator_config,
            self.context.feature_config,
            self.context.fixer_config,
            {TaskType.VALIDATE},
        )
        sink = io.BytesIO()
        handler = MrrReportHandler(sink)

        summary: Optional[BatchSummary] = None
        try:
            with ProcessorFactory.file_batch_processor(config, self.context.spool_max_size) as processor:
                summary = processor.process([artifact], handler)
        except OSError as exc:
            logger.error(f"I/O error while processing {artifact.path}: {exc}")

        return sink.getvalue(), summary
