"""
Process-wide validation context, built once at application startup.
"""
import logging
from dataclasses import dataclass
from importlib import resources
from typing import Optional

from lxml import etree

from pdfa_service.core.config import Settings
from pdfa_service.engine.features import FeatureConfig
from pdfa_service.engine.fixer import FixerConfig
from pdfa_service.engine.profiles import ProfileDirectory, build_default_directory

logger = logging.getLogger(__name__)

REPORT_STYLESHEET = "html_report.xsl"


@dataclass(frozen=True)
class ValidationContext:
    """Immutable state shared by every request."""

    profiles: ProfileDirectory
    feature_config: FeatureConfig
    fixer_config: FixerConfig
    report_stylesheet: etree.XSLT
    rules_wiki_url_base: str
    max_failed_checks: int = 100
    record_passed_assertions: bool = False
    spool_max_size: int = 16 * 1024 * 1024
    staging_dir: Optional[str] = None
    staging_prefix: str = "cache"
    staging_chunk_size: int = 64 * 1024
    full_html: bool = False


def load_report_stylesheet() -> etree.XSLT:
    """Compile the packaged HTML report stylesheet."""
    source = resources.files("pdfa_service.resources").joinpath(REPORT_STYLESHEET).read_bytes()
    parser = etree.XMLParser(resolve_entities=False, no_network=True)
    return etree.XSLT(etree.fromstring(source, parser))


def build_validation_context(settings: Settings) -> ValidationContext:
    """
    Build the validation context from application settings.

    Loads the profile directory and compiles the report stylesheet; both
    are reused for the lifetime of the process.
    """
    profiles = build_default_directory()
    context = ValidationContext(
        profiles=profiles,
        feature_config=FeatureConfig.default(),
        fixer_config=FixerConfig.default(),
        report_stylesheet=load_report_stylesheet(),
        rules_wiki_url_base=settings.RULES_WIKI_URL_BASE,
        max_failed_checks=settings.MAX_FAILED_CHECKS,
        record_passed_assertions=settings.RECORD_PASSED_ASSERTIONS,
        spool_max_size=settings.spool_max_size,
        staging_dir=settings.STAGING_DIR,
        staging_prefix=settings.STAGING_PREFIX,
        staging_chunk_size=settings.STAGING_CHUNK_SIZE,
        full_html=settings.REPORT_FULL_HTML,
    )
    logger.info(f"Validation context ready: {len(profiles)} profiles ({', '.join(profiles.ids)})")
    return context
