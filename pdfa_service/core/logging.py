import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pdfa_service.core.config import settings
from pdfa_service.core.error_handling import request_id_var

SERVICE_NAME = "pdfa-validation-service"

TEXT_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"

# Third-party loggers and the level they are held at regardless of LOG_LEVEL
QUIET_LOGGERS = {
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    # pypdf reports every repaired xref entry at WARNING
    "pypdf": logging.ERROR,
}


class RequestIDFilter(logging.Filter):
    """
    Stamp each record with the id of the request being served ("-" outside one).
    """

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get() or "-"
        return True


class JSONFormatter(logging.Formatter):
    """
    One JSON object per line, for log shippers.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "service": SERVICE_NAME,
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = getattr(record, "request_id", "-")
        if settings.LOG_INCLUDE_REQUEST_ID and request_id != "-":
            entry["request_id"] = request_id

        # logger.info(..., extra={"extra_fields": {...}})
        extra_fields = getattr(record, "extra_fields", None)
        if isinstance(extra_fields, dict):
            entry.update(extra_fields)

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def _text_formatter() -> logging.Formatter:
    fmt = TEXT_FORMAT
    if settings.LOG_INCLUDE_REQUEST_ID:
        fmt += " request_id=%(request_id)s"
    return logging.Formatter(fmt)


def setup_logging(level: Optional[str] = None) -> None:
    """
    Configure the root logger once for the process.

    Args:
        level: Overrides LOG_LEVEL when given
    """
    log_level = getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter() if settings.LOG_FORMAT.lower() == "json" else _text_formatter())
    handler.addFilter(RequestIDFilter())

    root_logger = logging.getLogger()
    for existing in list(root_logger.handlers):
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)

    for name in ("uvicorn.access", "uvicorn.error"):
        logging.getLogger(name).setLevel(log_level)
    for name, quiet_level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(quiet_level)
