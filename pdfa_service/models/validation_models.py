"""
Data structures passed between the validation service components.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, BinaryIO, Callable, Dict, FrozenSet, List, Optional

from pdfa_service.core.constants import MEDIA_TYPE_HTML
from pdfa_service.engine.features import FeatureConfig
from pdfa_service.engine.fixer import FixerConfig, FixerResult
from pdfa_service.engine.results import ValidationResult
from pdfa_service.engine.validator import ValidatorConfig


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


@dataclass
class ValidationRequest:
    """An inbound validation request, independent of the HTTP layer."""

    profile_id: str
    expected_digest_hex: Optional[str] = None
    source_url: Optional[str] = None
    upload: Optional[BinaryIO] = None
    upload_filename: Optional[str] = None

    def __post_init__(self):
        """Treat blank form values as absent."""
        self.expected_digest_hex = _blank_to_none(self.expected_digest_hex)
        self.source_url = _blank_to_none(self.source_url)

    @property
    def has_url(self) -> bool:
        return self.source_url is not None

    @property
    def has_upload(self) -> bool:
        return self.upload is not None


@dataclass
class ResolvedInput:
    """The byte stream a request's document will be read from.

    Consumed once. Closing releases whatever was opened to produce the
    stream (e.g. an HTTP response); uploads are owned by the web framework
    and have nothing to release.
    """

    stream: BinaryIO
    origin: str
    closers: List[Callable[[], None]] = field(default_factory=list, repr=False)

    def close(self):
        while self.closers:
            self.closers.pop()()

    def __enter__(self) -> "ResolvedInput":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


@dataclass(frozen=True)
class DigestResult:
    """Finalized digest of a fully consumed stream."""

    algorithm: str
    hex_digest: str

    def matches(self, expected_hex: str) -> bool:
        return expected_hex.strip().lower() == self.hex_digest.lower()


@dataclass(frozen=True)
class StagedArtifact:
    """A request's document persisted to a temporary file."""

    path: Path
    size_bytes: int


class ValidationStatus(str, Enum):
    COMPLETED = "completed"
    IO_FAILURE = "io_failure"


@dataclass(frozen=True)
class ValidationOutcome:
    """Result of a validation attempt.

    Distinguishes a finished validation (whether or not the document is
    compliant) from one abandoned because reading the input failed.
    """

    status: ValidationStatus
    result: Optional[ValidationResult] = None
    digest: Optional[DigestResult] = None
    error: Optional[BaseException] = None

    @classmethod
    def completed(cls, result: ValidationResult, digest: Optional[DigestResult] = None) -> "ValidationOutcome":
        return cls(status=ValidationStatus.COMPLETED, result=result, digest=digest)

    @classmethod
    def io_failure(cls, error: BaseException) -> "ValidationOutcome":
        return cls(status=ValidationStatus.IO_FAILURE, error=error)

    @property
    def is_completed(self) -> bool:
        return self.status is ValidationStatus.COMPLETED


class TaskType(str, Enum):
    """Tasks the batch processor can run per document."""
    VALIDATE = "validate"
    EXTRACT_FEATURES = "extract_features"
    FIX_METADATA = "fix_metadata"


@dataclass(frozen=True)
class ProcessorConfig:
    """Immutable batch processor configuration."""

    validator_config: ValidatorConfig
    feature_config: FeatureConfig
    fixer_config: FixerConfig
    tasks: FrozenSet[TaskType]

    def has_task(self, task: TaskType) -> bool:
        return task in self.tasks


@dataclass
class JobResult:
    """Outcome of processing a single item in a batch."""

    path: Path
    size_bytes: int
    validation_result: Optional[ValidationResult] = None
    features: Optional[Dict[str, Any]] = None
    fixer_result: Optional[FixerResult] = None
    task_exception: Optional[str] = None
    exception_type: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.task_exception is not None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class BatchSummary:
    """Run statistics for one batch pipeline execution."""

    total_jobs: int = 0
    failed_to_parse: int = 0
    encrypted: int = 0
    validation_exceptions: int = 0
    compliant: int = 0
    non_compliant: int = 0
    feature_reports: int = 0
    fixes_applied: int = 0
    started_at: datetime = field(default_factory=_utcnow)
    finished_at: Optional[datetime] = None

    @property
    def failed_jobs(self) -> int:
        return self.failed_to_parse + self.encrypted + self.validation_exceptions

    @property
    def processed_jobs(self) -> int:
        return self.total_jobs - self.failed_jobs

    @property
    def duration_ms(self) -> int:
        finished = self.finished_at or _utcnow()
        return int((finished - self.started_at).total_seconds() * 1000)

    def finish(self):
        self.finished_at = _utcnow()


@dataclass(frozen=True)
class RenderedReport:
    """Final rendered report returned to the caller."""

    content: bytes
    media_type: str = MEDIA_TYPE_HTML
