"""
Logging Setup for fleetopt

Handlers are attached to the "fleetopt" package logger, never the root
logger, so embedding applications keep control of their own logging.

Formats:
- json: one object per line, extra= fields merged in (log shippers)
- text: colored level names (terminals)

Log files always receive JSON.
"""

from datetime import datetime, timezone
from typing import Optional
import json
import logging
import sys

from .settings import Settings, get_settings

PACKAGE_LOGGER = "fleetopt"

# Attributes present on every LogRecord; anything else came in through `extra=`
_RESERVED_ATTRS = set(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


class JSONFormatter(logging.Formatter):
    """
    Structured formatter

    Every line carries the service name and environment so optimizer
    logs from several deployments can share one sink.
    """

    def __init__(self, service: str = PACKAGE_LOGGER, environment: Optional[str] = None):
        super().__init__()
        self.service = service
        self.environment = environment

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "service": self.service,
            "logger": record.name,
            "message": record.getMessage(),
            "function": record.funcName,
            "line": record.lineno,
        }
        if self.environment:
            entry["environment"] = self.environment

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        for key, value in vars(record).items():
            if key not in _RESERVED_ATTRS and key not in entry:
                entry[key] = value

        return json.dumps(entry, default=str)


class ColoredFormatter(logging.Formatter):
    """Human-readable formatter with ANSI-colored level names"""

    COLORS = {
        "DEBUG": "\033[36m",     # Cyan
        "INFO": "\033[32m",      # Green
        "WARNING": "\033[33m",   # Yellow
        "ERROR": "\033[31m",     # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    def __init__(self, fmt: Optional[str] = None, datefmt: str = "%Y-%m-%d %H:%M:%S"):
        super().__init__(fmt=fmt or self.DEFAULT_FORMAT, datefmt=datefmt)

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname)
        if color:
            # Color a copy; other handlers see the plain level name
            record = logging.makeLogRecord(vars(record))
            record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


def setup_logging(settings: Optional[Settings] = None) -> logging.Logger:
    """
    Configure the fleetopt package logger from settings

    Replaces any handlers installed by a previous call.

    Args:
        settings: Application settings (defaults to get_settings())
            - log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL
            - log_format: "json" or "text"
            - log_file: optional path, written as JSON

    Returns:
        The configured package logger
    """
    settings = settings or get_settings()
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(getattr(logging, settings.log_level.upper()))
    logger.propagate = False

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    if settings.log_format == "json":
        console_formatter = JSONFormatter(settings.app_name, settings.environment)
    else:
        console_formatter = ColoredFormatter()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)

    if settings.log_file:
        file_handler = logging.FileHandler(settings.log_file)
        file_handler.setFormatter(JSONFormatter(settings.app_name, settings.environment))
        logger.addHandler(file_handler)

    logger.info(
        f"{settings.app_name} logging initialized",
        extra={
            "log_level": settings.log_level,
            "log_format": settings.log_format,
            "log_file": settings.log_file,
        }
    )
    return logger


def get_logger(name: str) -> logging.Logger:
    """Logger under the fleetopt namespace (pass __name__ from package modules)"""
    if name == PACKAGE_LOGGER or name.startswith(f"{PACKAGE_LOGGER}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{PACKAGE_LOGGER}.{name}")
