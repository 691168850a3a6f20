"""Observability module for the YepCode MCP Server.

Provides:
- Correlation ID generation
- JSON structured logging (one object per line on stderr)
"""

from __future__ import annotations

import json
import logging
import sys
import uuid
from datetime import datetime, timezone

# Fields callers attach through ``extra=`` that the JSON formatter surfaces
_EXTRA_FIELDS = ("tool", "latency_ms", "status", "error", "execution_id")


def generate_correlation_id() -> str:
    """Generate a unique correlation ID for request tracing."""
    return str(uuid.uuid4())[:8]  # Short form for readability


class JsonLogFormatter(logging.Formatter):
    """JSON structured log formatter with correlation ID support."""

    def __init__(self, include_correlation_id: bool = True):
        super().__init__()
        self.include_correlation_id = include_correlation_id

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "ts": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname.lower(),
            "logger": record.name,
            "msg": record.getMessage(),
        }

        if self.include_correlation_id and hasattr(record, "correlation_id"):
            log_data["cid"] = record.correlation_id

        for name in _EXTRA_FIELDS:
            if hasattr(record, name):
                log_data[name] = getattr(record, name)

        if record.exc_info:
            log_data["exc"] = self.formatException(record.exc_info)

        return json.dumps(log_data, separators=(",", ":"), default=str)


def setup_logging(
    level: str = "info", log_format: str = "json", logger_name: str = "yepcode-mcp"
) -> logging.Logger:
    """Configure the server logger.

    Logs always go to stderr: stdout carries the stdio transport.

    Args:
        level: Log level name
        log_format: "json" or "text"
        logger_name: Name of logger to configure

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(logger_name)
    logger.handlers.clear()
    logger.propagate = False

    log_level = getattr(logging, level.upper(), logging.INFO)
    logger.setLevel(log_level)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(log_level)

    if log_format == "json":
        handler.setFormatter(JsonLogFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
        )

    logger.addHandler(handler)
    return logger
