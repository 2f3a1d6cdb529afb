"""JSON logging for agent construction and the check_endpoint script."""

import logging
import os

from pythonjsonlogger import jsonlogger

LOGGER_NAME = "s3_agent"
LOG_LEVEL_ENV = "S3_AGENT_LOG_LEVEL"

RECORD_FIELDS = frozenset({"timestamp", "level", "message", "exc_info", "funcName", "lineno"})
# Connection context callers may pass through `extra`
CONTEXT_FIELDS = frozenset({"endpoint", "addressing_style", "custom_ca", "bucket_count"})
REDACTED_FIELDS = frozenset({"access_key", "secret_key", "aws_access_key_id", "aws_secret_access_key"})


class AgentJsonFormatter(jsonlogger.JsonFormatter):
    """Emits the record fields plus connection context; credentials are masked."""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)

        if "levelname" in log_record:
            log_record["level"] = log_record.pop("levelname")

        for key in list(log_record):
            if key in REDACTED_FIELDS:
                log_record[key] = "***"
            elif key not in RECORD_FIELDS and key not in CONTEXT_FIELDS:
                del log_record[key]


def resolve_level(value: str | None) -> int:
    """Map a level name such as "debug" to its logging constant, defaulting to INFO."""
    if not value:
        return logging.INFO
    level = logging.getLevelName(value.strip().upper())
    return level if isinstance(level, int) else logging.INFO


def _setup_logger() -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)

    # Prevent duplicate handlers if module reloaded
    if logger.handlers:
        return logger

    handler = logging.StreamHandler()
    handler.setFormatter(
        AgentJsonFormatter(
            fmt="%(timestamp)s %(levelname)s %(funcName)s %(lineno)d %(message)s",
            timestamp=True,
        )
    )

    logger.setLevel(resolve_level(os.environ.get(LOG_LEVEL_ENV)))
    logger.addHandler(handler)
    logger.propagate = False

    return logger


LOGGER = _setup_logger()
