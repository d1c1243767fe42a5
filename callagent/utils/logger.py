"""
Logger Utility
==============

Console logging for the agent and its services:

1. Log levels (DEBUG, INFO, WARNING, ERROR)
2. Timestamped, color-coded terminal output
3. Context prefixes with child loggers ([Agent:Stream], [Dispatch], ...)
4. Optional structured data printed as JSON under the message

The minimum level comes from the LOG_LEVEL environment variable. A logger
can also be pinned to DEBUG explicitly, which is how AGENT_DEBUG turns on
the per-fragment tracing of the agent loop.

Usage:
    from callagent.utils.logger import Logger, logger

    logger.info("Agent ready")

    agent_logger = Logger("Agent")
    agent_logger.debug("Function call detected", {"name": "test-echotest"})
"""

import json
import os
import sys
from datetime import datetime
from enum import IntEnum
from typing import Any


class LogLevel(IntEnum):
    """Numeric log levels. Higher values are more severe."""
    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40


class Colors:
    """ANSI escape codes for colored terminal output."""
    RESET = "\033[0m"
    DEBUG = "\033[36m"    # Cyan
    INFO = "\033[32m"     # Green
    WARNING = "\033[33m"  # Yellow
    ERROR = "\033[31m"    # Red
    DIM = "\033[2m"


_LEVEL_NAMES = {
    "DEBUG": LogLevel.DEBUG,
    "INFO": LogLevel.INFO,
    "WARNING": LogLevel.WARNING,
    "WARN": LogLevel.WARNING,
    "ERROR": LogLevel.ERROR,
}


def parse_log_level(value: str | None, default: LogLevel = LogLevel.INFO) -> LogLevel:
    """
    Map a level name such as "debug" or "WARN" to a LogLevel.

    Unknown or empty values fall back to the default.
    """
    if not value:
        return default
    return _LEVEL_NAMES.get(value.strip().upper(), default)


class Logger:
    """
    A context-aware logger with colored output.

    Example:
        logger = Logger("Dispatch")
        logger.info("Executing test-echotest")

        child = logger.child("Demo")
        child.debug("echotest called", {"echomessage": "hi"})
    """

    def __init__(self, context: str = "", level: LogLevel | None = None):
        """
        Args:
            context: Prefix shown in every line (e.g. "Agent")
            level: Fixed minimum level; read from LOG_LEVEL when omitted
        """
        self.context = context
        self._fixed_level = level
        self._min_level = level if level is not None else parse_log_level(os.getenv("LOG_LEVEL"))

    @property
    def level(self) -> LogLevel:
        return self._min_level

    def set_level(self, level: LogLevel) -> None:
        """Pin this logger to a minimum level, overriding LOG_LEVEL."""
        self._fixed_level = level
        self._min_level = level

    def child(self, child_context: str) -> "Logger":
        """
        Create a logger with a nested context.

        The child inherits a pinned level, so a debug-enabled agent also
        traces its sub-operations.
        """
        new_context = f"{self.context}:{child_context}" if self.context else child_context
        return Logger(new_context, level=self._fixed_level)

    def _format_message(self, level: str, message: str, color: str) -> str:
        """
        Output format: [TIMESTAMP] [LEVEL] [context] message
        """
        timestamp = datetime.now().isoformat(timespec="seconds")
        context_str = f"[{self.context}] " if self.context else ""

        return (
            f"{Colors.DIM}[{timestamp}]{Colors.RESET} "
            f"{color}[{level}]{Colors.RESET} "
            f"{context_str}{message}"
        )

    def _log(
        self,
        level: LogLevel,
        level_name: str,
        color: str,
        message: str,
        data: dict[str, Any] | None = None
    ) -> None:
        if level < self._min_level:
            return

        formatted = self._format_message(level_name, message, color)

        # Errors go to stderr, everything else to stdout
        stream = sys.stderr if level >= LogLevel.ERROR else sys.stdout
        print(formatted, file=stream)

        if data:
            data_str = json.dumps(data, indent=2, default=str)
            print(f"{Colors.DIM}{data_str}{Colors.RESET}", file=stream)

    def debug(self, message: str, data: dict[str, Any] | None = None) -> None:
        """Log a debug message. Shown only at DEBUG level."""
        self._log(LogLevel.DEBUG, "DEBUG", Colors.DEBUG, message, data)

    def info(self, message: str, data: dict[str, Any] | None = None) -> None:
        self._log(LogLevel.INFO, "INFO", Colors.INFO, message, data)

    def warning(self, message: str, data: dict[str, Any] | None = None) -> None:
        self._log(LogLevel.WARNING, "WARN", Colors.WARNING, message, data)

    def error(self, message: str, error: BaseException | None = None) -> None:
        """
        Log an error message.

        Args:
            message: The error message
            error: Optional exception; its type and text are printed as data
        """
        data = None
        if error:
            data = {
                "error_type": type(error).__name__,
                "error_message": str(error),
            }
        self._log(LogLevel.ERROR, "ERROR", Colors.ERROR, message, data)


# Default logger for code that has no more specific context
logger = Logger("CallAgent")
