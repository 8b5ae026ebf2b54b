"""Logging configuration with rotating file handlers."""

import logging
import re
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from tableedit.config import get_settings

settings = get_settings()

# Values following these keys are replaced before a record is written
SENSITIVE_KEYS = ("password", "secret", "token", "authorization", "credential", "cookie")

_SENSITIVE_PATTERN = re.compile(
    r"(?P<key>\b\w*(?:" + "|".join(SENSITIVE_KEYS) + r")\w*\b['\"]?\s*[:=]\s*['\"]?)"
    r"(?P<value>(?:Basic |Bearer )?[^\s'\",}]+)",
    re.IGNORECASE,
)


def redact(message: str) -> str:
    """Replace values of sensitive key/value pairs with [REDACTED]."""
    return _SENSITIVE_PATTERN.sub(lambda m: f"{m.group('key')}[REDACTED]", message)


class SensitiveDataFilter(logging.Filter):
    """Redact credentials from log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = redact(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def setup_logging() -> None:
    """Configure application logging with rotating file handlers."""
    log_dir = Path(settings.LOG_DIR)
    log_dir.mkdir(exist_ok=True)

    # Root logger configuration
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, settings.LOG_LEVEL))

    # Clear existing handlers
    root_logger.handlers.clear()

    redaction = SensitiveDataFilter()

    # Console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_format = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    console_handler.setFormatter(console_format)
    console_handler.addFilter(redaction)
    root_logger.addHandler(console_handler)

    # File handler for app.log
    file_format = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"
    )

    app_handler = RotatingFileHandler(
        log_dir / "app.log",
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=5,
        encoding="utf-8",
    )
    app_handler.setLevel(logging.DEBUG)
    app_handler.setFormatter(file_format)
    app_handler.addFilter(redaction)
    root_logger.addHandler(app_handler)

    # Grid engine logger gets its own file
    grid_logger = logging.getLogger("gridsync")
    grid_logger.handlers.clear()
    grid_handler = RotatingFileHandler(
        log_dir / "gridsync.log",
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    grid_handler.setFormatter(file_format)
    grid_handler.addFilter(redaction)
    grid_logger.addHandler(grid_handler)

    # Reduce noise from external libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
