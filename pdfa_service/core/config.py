"""
Configuration settings for the application.
"""
from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Logging Configuration
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "text"  # Options: "text", "json"
    LOG_INCLUDE_REQUEST_ID: bool = True  # Include X-Request-ID in logs

    # HTTP Client Configuration (remote documents submitted by URL)
    HTTP_CLIENT_TIMEOUT: float = 120.0  # Transport timeout for a single fetch (seconds)
    HTTP_FOLLOW_REDIRECTS: bool = True
    HTTP_USER_AGENT: str = "pdfa-validation-service/1.0"

    # Performance Monitoring
    RESPONSE_TIME_WARNING_THRESHOLD_MS: int = 30000  # Warn if requests take longer than 30s (milliseconds)

    # Validation
    MAX_FAILED_CHECKS: int = 100  # Failed assertions recorded per document, -1 for unlimited
    RECORD_PASSED_ASSERTIONS: bool = False
    SPOOL_MAX_MEMORY_MB: int = 16  # Parser keeps documents up to this size in memory, larger ones spill to disk

    # Staging (rendered report path)
    STAGING_DIR: Optional[str] = None  # Defaults to the system temp directory
    STAGING_PREFIX: str = "cache"
    STAGING_CHUNK_SIZE: int = 64 * 1024

    # Report Rendering
    RULES_WIKI_URL_BASE: str = "https://github.com/veraPDF/veraPDF-validation-profiles/wiki/"
    REPORT_FULL_HTML: bool = False  # Embed the stylesheet in rendered reports

    @property
    def spool_max_size(self) -> int:
        """Parser spool threshold in bytes."""
        return self.SPOOL_MAX_MEMORY_MB * 1024 * 1024

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


settings = Settings()
