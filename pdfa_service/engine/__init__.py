"""In-process PDF/A validation engine: profiles, parser, validator, features and fixer."""

from pdfa_service.engine.features import FeatureConfig, FeatureExtractor, FeatureType
from pdfa_service.engine.fixer import FixerConfig, FixerResult, FixerStatus, MetadataFixer
from pdfa_service.engine.parser import PDFAParser
from pdfa_service.engine.profiles import ProfileDirectory, ValidationProfile, build_default_directory
from pdfa_service.engine.results import ValidationResult
from pdfa_service.engine.validator import PDFAValidator, ValidatorConfig, ValidatorFactory

__all__ = [
    "FeatureConfig",
    "FeatureExtractor",
    "FeatureType",
    "FixerConfig",
    "FixerResult",
    "FixerStatus",
    "MetadataFixer",
    "PDFAParser",
    "ProfileDirectory",
    "ValidationProfile",
    "build_default_directory",
    "ValidationResult",
    "PDFAValidator",
    "ValidatorConfig",
    "ValidatorFactory",
]
