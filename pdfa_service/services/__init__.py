"""Services package for input resolution, validation and report generation."""

from pdfa_service.services.batch_pipeline import BatchPipelineOrchestrator, BatchProcessor, ProcessorFactory
from pdfa_service.services.digest_tracker import DigestTracker
from pdfa_service.services.input_resolver import InputResolver
from pdfa_service.services.report_renderer import ReportRenderer
from pdfa_service.services.staging_store import StagingStore
from pdfa_service.services.validation_context import ValidationContext, build_validation_context
from pdfa_service.services.validation_invoker import ValidationInvoker
from pdfa_service.services.validation_service import ValidationService

__all__ = [
    'BatchPipelineOrchestrator',
    'BatchProcessor',
    'ProcessorFactory',
    'DigestTracker',
    'InputResolver',
    'ReportRenderer',
    'StagingStore',
    'ValidationContext',
    'build_validation_context',
    'ValidationInvoker',
    'ValidationService',
]
