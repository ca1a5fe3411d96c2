"""Data structures for validation requests, outcomes and batch runs."""

from .validation_models import (
    BatchSummary,
    DigestResult,
    JobResult,
    ProcessorConfig,
    RenderedReport,
    ResolvedInput,
    StagedArtifact,
    TaskType,
    ValidationOutcome,
    ValidationRequest,
    ValidationStatus,
)

__all__ = [
    "BatchSummary",
    "DigestResult",
    "JobResult",
    "ProcessorConfig",
    "RenderedReport",
    "ResolvedInput",
    "StagedArtifact",
    "TaskType",
    "ValidationOutcome",
    "ValidationRequest",
    "ValidationStatus",
]
