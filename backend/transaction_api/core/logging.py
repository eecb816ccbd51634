# transaction_api/core/logging.py
"""Logging setup for the transaction service.

Call ``setup_logging`` once at startup. Modules log through
``logging.getLogger(__name__)`` and never configure handlers themselves.
"""
import json
import logging
import sys
from datetime import datetime, timezone


class JsonFormatter(logging.Formatter):
    """One JSON object per log line."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def setup_logging(level: str = "INFO", format_type: str = "standard") -> None:
    """
    Configure the root logger with a single stdout handler.
    - level: DEBUG, INFO, WARNING, ERROR, CRITICAL (unknown values fall back to INFO)
    - format_type: "standard" (pipe separated text) or "json"
    """
    log_level = getattr(logging, str(level).upper(), logging.INFO)

    if format_type == "json":
        formatter: logging.Formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    logging.getLogger("transaction_api").setLevel(log_level)
    # SQL statements are only wanted when SQL_ECHO is set
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
