import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

import structlog

DEFAULT_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


class IgnoreUrllib3RetryFilter(logging.Filter):
    """Drop urllib3's own retry chatter; retries are reported by the client."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name.startswith("urllib3.connectionpool"):
            return "Retrying" not in record.getMessage()
        return True


def setup_logging(
    level: str | None = None,
    log_file: str | None = None,
    format: str | None = None,
) -> None:
    """
    Configure stdlib logging and route structlog through it.

    Environment variables:
        TFDC_LOG_LEVEL: Log level (default: WARNING)
        TFDC_LOG_FILE: Optional rotating log file path
        TFDC_LOG_MAX_SIZE: Max size in MB before rotating (default: 10MB)
        TFDC_LOG_BACKUP_COUNT: Number of backup files to keep (default: 5)

    Explicit arguments win over the environment.
    """
    log_level_str = (level or os.environ.get("TFDC_LOG_LEVEL", "WARNING")).upper()
    log_level = getattr(logging, log_level_str, logging.WARNING)

    formatter = logging.Formatter(format or DEFAULT_FORMAT)
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.addFilter(IgnoreUrllib3RetryFilter())
    handlers: list[logging.Handler] = [console_handler]

    file_path = log_file or os.environ.get("TFDC_LOG_FILE")
    if file_path:
        resolved_path = Path(file_path).expanduser()
        resolved_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            max_bytes = int(os.environ.get("TFDC_LOG_MAX_SIZE", 10)) * 1024 * 1024
        except (TypeError, ValueError):
            max_bytes = 10 * 1024 * 1024

        try:
            backup_count = int(os.environ.get("TFDC_LOG_BACKUP_COUNT", 5))
        except ValueError:
            backup_count = 5

        file_handler = RotatingFileHandler(
            resolved_path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
        file_handler.setFormatter(formatter)
        file_handler.addFilter(IgnoreUrllib3RetryFilter())
        handlers.append(file_handler)

    logging.basicConfig(level=log_level, handlers=handlers, force=True)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.KeyValueRenderer(key_order=["event"]),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    logging.getLogger(__name__).debug(
        "Logging configured: level=%s, file=%s", log_level_str, file_path or "-"
    )


def set_level(level: int) -> None:
    """Adjust the root logger and its handlers after setup."""
    logging.root.setLevel(level)
    for handler in logging.root.handlers:
        handler.setLevel(level)
