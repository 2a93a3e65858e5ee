"""
Logging configuration for the fund services.

Console output for operators, JSON lines for log shippers. Level and format
come from the arguments or fall back to ``FundSettings``.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Optional

from .settings import get_settings


class Colors:
    RESET = "\033[0m"
    BOLD = "\033[1m"

    DEBUG = "\033[36m"
    INFO = "\033[32m"
    WARNING = "\033[33m"
    ERROR = "\033[31m"
    CRITICAL = "\033[35m"

    EVENT = "\033[94m"
    FUND = "\033[93m"


class ConsoleFormatter(logging.Formatter):
    """Colored single-line formatter for terminals."""

    LEVEL_COLORS = {
        logging.DEBUG: Colors.DEBUG,
        logging.INFO: Colors.INFO,
        logging.WARNING: Colors.WARNING,
        logging.ERROR: Colors.ERROR,
        logging.CRITICAL: Colors.CRITICAL,
    }

    PREFIX_COLORS = {
        "[EVENT]": Colors.EVENT,
        "[FUND]": Colors.FUND,
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno, Colors.RESET)
        timestamp = self.formatTime(record, "%H:%M:%S")
        level = f"{color}{record.levelname:8}{Colors.RESET}"

        message = record.getMessage()
        for prefix, prefix_color in self.PREFIX_COLORS.items():
            if message.startswith(prefix):
                message = (
                    f"{prefix_color}{Colors.BOLD}{prefix}{Colors.RESET}"
                    + message[len(prefix):]
                )
                break

        module = record.name.split(".")[-1][:15]
        line = f"{timestamp} {level} {module:15} {message}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


class JsonFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "module": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key in ("fund_id", "participant", "operation"):
            if hasattr(record, key):
                log_data[key] = getattr(record, key)

        return json.dumps(log_data)


def setup_logging(level: Optional[str] = None, json_format: Optional[bool] = None) -> None:
    """
    Configure the root logger.

    Args:
        level: Log level name. Defaults to ``FUND_LOG_LEVEL``.
        json_format: Emit JSON lines. Defaults to ``FUND_LOG_FORMAT == "json"``.
    """
    settings = get_settings()
    log_level = level or settings.log_level
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)
    use_json = (
        json_format if json_format is not None else settings.log_format.lower() == "json"
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonFormatter() if use_json else ConsoleFormatter())

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers = []
    root_logger.addHandler(handler)

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    logging.getLogger(__name__).debug(
        "Logging configured: level=%s, format=%s",
        log_level,
        "json" if use_json else "console",
    )
