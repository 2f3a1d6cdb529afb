"""Tests for logging_config module."""

import json
import logging

import pytest

from s3_agent.lib.logging_config import LOGGER, AgentJsonFormatter, resolve_level


@pytest.fixture
def formatter() -> AgentJsonFormatter:
    """Return a formatter configured like the LOGGER handler."""
    return AgentJsonFormatter(
        fmt="%(timestamp)s %(levelname)s %(funcName)s %(lineno)d %(message)s",
        timestamp=True,
    )


def _record(**extra: object) -> logging.LogRecord:
    record = logging.LogRecord(
        name="s3_agent",
        level=logging.INFO,
        pathname=__file__,
        lineno=42,
        msg="Built S3 agent for %s",
        args=("https://s3.example.com",),
        exc_info=None,
        func="new_s3_agent",
    )
    record.__dict__.update(extra)
    return record


def test_logger_is_singleton() -> None:
    """LOGGER is the named s3_agent logger with a single handler."""
    assert LOGGER is logging.getLogger("s3_agent")
    assert len(LOGGER.handlers) == 1
    assert LOGGER.propagate is False


def test_formatter_keeps_record_fields(formatter: AgentJsonFormatter) -> None:
    """Formatted records contain the compact field set only."""
    payload = json.loads(formatter.format(_record()))

    assert payload["message"] == "Built S3 agent for https://s3.example.com"
    assert payload["level"] == "INFO"
    assert payload["funcName"] == "new_s3_agent"
    assert payload["lineno"] == 42
    assert "timestamp" in payload
    assert "name" not in payload
    assert "levelname" not in payload


def test_formatter_keeps_connection_context(formatter: AgentJsonFormatter) -> None:
    """Connection context passed via extra is emitted, other extras dropped."""
    record = _record(
        endpoint="https://s3.example.com",
        addressing_style="path",
        custom_ca=True,
        request_id="abc",
    )

    payload = json.loads(formatter.format(record))

    assert payload["endpoint"] == "https://s3.example.com"
    assert payload["addressing_style"] == "path"
    assert payload["custom_ca"] is True
    assert "request_id" not in payload


def test_formatter_masks_credentials(formatter: AgentJsonFormatter) -> None:
    """Credentials passed via extra never reach the output."""
    output = formatter.format(_record(access_key="AKIA123", secret_key="hunter2"))

    payload = json.loads(output)
    assert payload["access_key"] == "***"
    assert payload["secret_key"] == "***"
    assert "hunter2" not in output


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, logging.INFO),
        ("", logging.INFO),
        ("debug", logging.DEBUG),
        (" WARNING ", logging.WARNING),
        ("chatty", logging.INFO),
    ],
)
def test_resolve_level(value: str | None, expected: int) -> None:
    """Level names map to logging constants, unknown names fall back to INFO."""
    assert resolve_level(value) == expected
