"""
Logging setup for the backend and the terminal client.

Both share the ``receptionist`` logger. Records pass through a redaction
filter before any handler formats them, so API keys, ephemeral client
secrets and bot tokens never reach the console or the log file even if a
message accidentally includes one.
"""

import logging
import os
import re
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from receptionist.config.constants import LOGGER_NAME

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

LOG_DIR = Path(os.getenv("LOG_DIR", "logs"))
LOG_FILE_NAME = "receptionist.log"
MAX_LOG_SIZE = 10 * 1024 * 1024  # 10 MB
BACKUP_COUNT = 5

REDACTED = "[REDACTED]"

_SECRET_PATTERNS = (
    re.compile(r"(Bearer\s+)[A-Za-z0-9._\-]+"),
    re.compile(r"\b(sk-)[A-Za-z0-9_\-]{8,}"),
    re.compile(r"\b(ek_)[A-Za-z0-9_\-]{4,}"),
    re.compile(r"(/bot)\d+:[A-Za-z0-9_\-]+"),
)


def redact(text: str) -> str:
    """Mask credentials, keeping the prefix that says what kind they were."""
    for pattern in _SECRET_PATTERNS:
        text = pattern.sub(lambda m: m.group(1) + REDACTED, text)
    return text


class RedactSecretsFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        cleaned = redact(message)
        if cleaned != message:
            record.msg = cleaned
            record.args = None
        return True


def configure_logging(level: Optional[str] = None, log_to_file: bool = True) -> logging.Logger:
    """
    Configure the application logger.

    Args:
        level: Level name overriding the LOG_LEVEL environment variable
        log_to_file: Also write to a rotating file under LOG_DIR

    Returns:
        logging.Logger: The configured logger instance
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, (level or LOG_LEVEL).upper()))

    # Reconfiguring replaces the previous handlers and filters
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()
    for existing in logger.filters[:]:
        logger.removeFilter(existing)
    logger.addFilter(RedactSecretsFilter())

    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_to_file:
        try:
            LOG_DIR.mkdir(exist_ok=True)
            file_handler = RotatingFileHandler(
                LOG_DIR / LOG_FILE_NAME,
                maxBytes=MAX_LOG_SIZE,
                backupCount=BACKUP_COUNT,
            )
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)
        except OSError as e:
            logger.warning(f"Could not set up file logging: {e}")

    logger.propagate = False
    return logger
