"""
Logging configuration module for the Channel Alert Bot.

Provides unified logging setup with support for:
- Console and file logging
- JSON structured logging
- Rotating file handlers
- Context-aware logging (user_id, message_id, channel_id)
"""

import json
import logging
import sys
from contextvars import ContextVar
from logging.handlers import RotatingFileHandler
from typing import Any, Optional

from alertbot.config.settings import LoggingSettings, get_settings


# Context variables for correlation IDs
context_user_id: ContextVar[Optional[int]] = ContextVar("user_id", default=None)
context_message_id: ContextVar[Optional[int]] = ContextVar("message_id", default=None)
context_channel_id: ContextVar[Optional[str]] = ContextVar("channel_id", default=None)

_CONTEXT_FIELDS = (
    ("user_id", "user"),
    ("message_id", "msg"),
    ("channel_id", "channel"),
)


class ContextFilter(logging.Filter):
    """
    Logging filter that adds context variables to log records.

    This allows correlation of logs across the dispatcher and the matching engine
    by tracking the subscriber, the message and the source channel.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        """Add context variables to the log record."""
        record.user_id = context_user_id.get()
        record.message_id = context_message_id.get()
        record.channel_id = context_channel_id.get()
        return True


class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Outputs log records as JSON objects with standard fields plus any context variables.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        for field, _short in _CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log_data[field] = value

        # Add exception info if present
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Add extra fields
        if hasattr(record, "extra_data"):
            log_data.update(record.extra_data)

        return json.dumps(log_data, ensure_ascii=False)


class ColoredFormatter(logging.Formatter):
    """
    Colored console formatter for better readability in development.

    Uses ANSI color codes to highlight different log levels.
    """

    # ANSI color codes
    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors."""
        # The record is shared between handlers, so work on a copy.
        record = logging.makeLogRecord(record.__dict__)

        if record.levelname in self.COLORS:
            record.levelname = (
                f"{self.COLORS[record.levelname]}{record.levelname}{self.RESET}"
            )

        context_parts = []
        for field, short in _CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                context_parts.append(f"{short}={value}")

        if context_parts:
            context_str = f"[{', '.join(context_parts)}] "
            record.msg = f"{context_str}{record.msg}"

        return super().format(record)


def setup_logging(settings: Optional[LoggingSettings] = None) -> None:
    """
    Configure logging for the application.

    Args:
        settings: Logging settings. If None, will load from global settings.
    """
    if settings is None:
        settings = get_settings().logging

    # Get root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(settings.level)

    # Remove existing handlers
    root_logger.handlers.clear()

    # Create context filter
    context_filter = ContextFilter()

    # Console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(settings.level)
    console_handler.addFilter(context_filter)

    if settings.json_logs:
        console_formatter: logging.Formatter = JSONFormatter()
    else:
        console_formatter = ColoredFormatter(
            fmt=settings.format,
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    console_handler.setFormatter(console_formatter)
    root_logger.addHandler(console_handler)

    # File handler (if log file is specified)
    if settings.log_file:
        file_handler = RotatingFileHandler(
            filename=settings.log_file,
            maxBytes=settings.log_file_max_bytes,
            backupCount=settings.log_file_backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(settings.level)
        file_handler.addFilter(context_filter)

        # Always use JSON format for file logs for easier parsing
        file_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(file_handler)

    # Set levels for third-party loggers to reduce noise
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    root_logger.info(
        "Logging configured",
        extra={
            "extra_data": {
                "level": settings.level,
                "json_logs": settings.json_logs,
                "log_file": str(settings.log_file) if settings.log_file else None,
            }
        },
    )


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the specified name.

    Args:
        name: Logger name (typically __name__ of the module)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


class LogContext:
    """
    Context manager for setting correlation IDs in logs.

    Example:
        with LogContext(user_id=123, channel_id="jobs_channel"):
            logger.info("Evaluating subscriber keywords")
            # Logs will include user_id=123 and channel_id=jobs_channel
    """

    def __init__(
        self,
        user_id: Optional[int] = None,
        message_id: Optional[int] = None,
        channel_id: Optional[str] = None,
    ):
        """Initialize log context."""
        self.user_id = user_id
        self.message_id = message_id
        self.channel_id = channel_id
        self.tokens: list[Any] = []

    def __enter__(self) -> "LogContext":
        """Set context variables."""
        if self.user_id is not None:
            self.tokens.append(context_user_id.set(self.user_id))
        if self.message_id is not None:
            self.tokens.append(context_message_id.set(self.message_id))
        if self.channel_id is not None:
            self.tokens.append(context_channel_id.set(self.channel_id))
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Reset context variables."""
        for token in reversed(self.tokens):
            try:
                token.var.reset(token)
            except ValueError:
                # Token already reset
                pass
        self.tokens.clear()
