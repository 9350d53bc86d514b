"""Thread-safe, timestamped logging to an append-only file."""

from __future__ import annotations

import enum
import threading
import time
from pathlib import Path

_MAX_MESSAGE_LENGTH = 1023


class LogLevel(enum.Enum):
    """Severity of a log entry."""

    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"
    DEBUG = "DEBUG"

    def __str__(self) -> str:
        return self.value


class Logger:
    """Appends timestamped entries to a log file; safe to share between threads."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    def write(self, level: LogLevel, message: str, *args: object) -> None:
        """Append one entry of the form ``[YYYY-MM-DD HH:MM:SS] LEVEL: message``.

        ``message`` is %-formatted with ``args`` when any are given. Messages
        longer than 1023 characters are truncated. If the file cannot be
        opened the entry is silently dropped.
        """
        text = message % args if args else message
        text = text[:_MAX_MESSAGE_LENGTH]
        stamp = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime())
        line = f"[{stamp}] {level}: {text}\n"
        with self._lock:
            try:
                with self.path.open("a", encoding="utf-8") as log:
                    log.write(line)
            except OSError:
                return