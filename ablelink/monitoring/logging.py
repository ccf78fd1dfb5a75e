"""
Structured logging for AbleLink.
"""

from __future__ import annotations

import json
import logging
import sys
import threading
import time
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, TextIO


class LogLevel(Enum):
    """Log levels."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    @property
    def numeric(self) -> int:
        """Get numeric log level."""
        return {
            "debug": logging.DEBUG,
            "info": logging.INFO,
            "warning": logging.WARNING,
            "error": logging.ERROR,
        }[self.value]


@dataclass
class LogRecord:
    """A structured log record.

    Attributes:
        level: Log level.
        event: Event name/type.
        message: Human-readable message.
        timestamp: Unix timestamp.
        data: Additional structured data.
    """

    level: str
    event: str
    message: str = ""
    timestamp: float = field(default_factory=time.time)
    data: dict[str, Any] = field(default_factory=dict)

    logger_name: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        d = asdict(self)
        d.update(d.pop("data", {}))
        return d

    def to_json(self) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), default=str)


class StructuredLogger:
    """Structured event logging with JSON output.

    Example:
        logger = StructuredLogger("ablelink")

        logger.info(
            "aggregation_complete",
            message="Scored 3 users",
            users=3,
            failures=1,
        )

        # Bind context shared by every record
        view_logger = logger.bind(viewer_id="cg-1")
        view_logger.info("dashboard_refreshed")
    """

    def __init__(
        self,
        name: str = "ablelink",
        level: LogLevel = LogLevel.INFO,
        output: TextIO | None = None,
        json_format: bool = True,
    ):
        """Initialize the logger.

        Args:
            name: Logger name.
            level: Minimum log level.
            output: Output stream (default: stderr).
            json_format: Output as JSON (vs. human-readable).
        """
        self.name = name
        self._level = level
        self._output = output or sys.stderr
        self._json_format = json_format
        self._context: dict[str, Any] = {}
        self._lock = threading.Lock()

    def bind(self, **context: Any) -> "StructuredLogger":
        """Create a new logger with bound context."""
        new_logger = StructuredLogger(
            name=self.name,
            level=self._level,
            output=self._output,
            json_format=self._json_format,
        )
        new_logger._context = {**self._context, **context}
        return new_logger

    def _log(self, level: LogLevel, event: str, message: str = "", **data: Any) -> None:
        if level.numeric < self._level.numeric:
            return

        record = LogRecord(
            level=level.value,
            event=event,
            message=message,
            data={**self._context, **data},
            logger_name=self.name,
        )
        self._emit(record)

    def _emit(self, record: LogRecord) -> None:
        with self._lock:
            if self._json_format:
                line = record.to_json()
            else:
                line = self._format_human(record)
            print(line, file=self._output)

    def _format_human(self, record: LogRecord) -> str:
        timestamp = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(record.timestamp))

        parts = [
            f"[{timestamp}]",
            f"[{record.level.upper()}]",
            f"[{record.event}]",
        ]
        if record.message:
            parts.append(record.message)
        if record.data:
            data_str = " ".join(f"{k}={v}" for k, v in record.data.items())
            parts.append(f"({data_str})")

        return " ".join(parts)

    def debug(self, event: str, message: str = "", **data: Any) -> None:
        """Log at DEBUG level."""
        self._log(LogLevel.DEBUG, event, message, **data)

    def info(self, event: str, message: str = "", **data: Any) -> None:
        """Log at INFO level."""
        self._log(LogLevel.INFO, event, message, **data)

    def warning(self, event: str, message: str = "", **data: Any) -> None:
        """Log at WARNING level."""
        self._log(LogLevel.WARNING, event, message, **data)

    def error(self, event: str, message: str = "", **data: Any) -> None:
        """Log at ERROR level."""
        self._log(LogLevel.ERROR, event, message, **data)

    # Convenience methods for common events

    def narration_started(self, fragments: int, **extra: Any) -> None:
        self.debug(
            "narration_started",
            f"Reading {fragments} fragment(s)",
            fragments=fragments,
            **extra,
        )

    def narration_finished(self, fragments: int, **extra: Any) -> None:
        self.debug("narration_finished", fragments=fragments, **extra)

    def narration_cancelled(self, index: int | None, reason: str = "", **extra: Any) -> None:
        self.info(
            "narration_cancelled",
            f"Narration stopped at fragment {index}",
            index=index,
            reason=reason,
            **extra,
        )

    def aggregation_complete(
        self,
        users: int,
        failures: int,
        duration_ms: float,
        **extra: Any,
    ) -> None:
        self.info(
            "aggregation_complete",
            f"Scored {users} user(s) in {duration_ms:.1f}ms",
            users=users,
            failures=failures,
            duration_ms=duration_ms,
            **extra,
        )

    def fetch_failed(self, error: Exception, **extra: Any) -> None:
        self.warning(
            "fetch_failed",
            str(error),
            error_type=type(error).__name__,
            **extra,
        )


# Global logger instance
_global_logger: StructuredLogger | None = None


def configure_logging(
    level: LogLevel | str = LogLevel.INFO,
    output: TextIO | None = None,
    json_format: bool = True,
) -> StructuredLogger:
    """Configure the process-wide event logger.

    Args:
        level: Log level.
        output: Output stream.
        json_format: Use JSON format.

    Returns:
        Configured logger.
    """
    global _global_logger

    if isinstance(level, str):
        level = LogLevel(level)

    _global_logger = StructuredLogger(
        name="ablelink",
        level=level,
        output=output,
        json_format=json_format,
    )
    return _global_logger


def get_logger(name: str = "ablelink") -> StructuredLogger:
    """Get the process-wide event logger, creating a default one if needed."""
    global _global_logger

    if _global_logger is None:
        _global_logger = StructuredLogger(name=name)

    return _global_logger
