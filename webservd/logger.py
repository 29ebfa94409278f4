"""Timestamped console logging."""

from __future__ import annotations

import enum
import sys
from datetime import datetime
from typing import Any, TextIO

_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class LogLevel(enum.Enum):
    """Severity of a log message."""

    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    DEBUG = "DEBUG"


def timestamp() -> str:
    """Return the current local time as ``YYYY-MM-DD HH:MM:SS``."""
    return datetime.now().strftime(_TIMESTAMP_FORMAT)


class Logger:
    """Writes one line per message, prefixed with time and level."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    def _write(self, line: str) -> None:
        self.stream.write(line + "\n")
        self.stream.flush()

    def log(self, level: LogLevel, message: Any) -> None:
        """Write ``message`` at the given level."""
        self._write(f"[{timestamp()}] [{LogLevel(level).value}] {message}")

    def info(self, message: Any) -> None:
        self.log(LogLevel.INFO, message)

    def warning(self, message: Any) -> None:
        self.log(LogLevel.WARNING, message)

    def error(self, message: Any) -> None:
        self.log(LogLevel.ERROR, message)

    def debug(self, message: Any) -> None:
        self.log(LogLevel.DEBUG, message)

    def server_info(self, message: Any, server_name: str, host: str, port: int) -> None:
        """Write an info line that also names the server, host and port."""
        self._write(
            f"[{timestamp()}] [INFO] {message}"
            f"ServerName[{server_name}] Host[{host}] Port[{port}]"
        )