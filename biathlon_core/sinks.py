"""Event sinks that render race log lines as ``[timestamp] message``."""
from __future__ import annotations

import logging
import sys
from typing import List, TextIO


def render_line(timestamp: str, message: str) -> str:
    return f"[{timestamp}] {message}"


class ConsoleSink:
    """Writes rendered lines to a text stream (stdout by default)."""

    def __init__(self, stream: TextIO | None = None):
        self.stream = stream

    def log_event(self, timestamp: str, message: str) -> None:
        print(render_line(timestamp, message), file=self.stream or sys.stdout)


class LoggingSink:
    """Routes rendered lines to a ``logging`` logger."""

    def __init__(self, logger: logging.Logger | None = None, level: int = logging.INFO):
        self.logger = logger or logging.getLogger("biathlon_core.events")
        self.level = level

    def log_event(self, timestamp: str, message: str) -> None:
        self.logger.log(self.level, render_line(timestamp, message))


class BufferSink:
    """Keeps rendered lines in memory, in emission order."""

    def __init__(self) -> None:
        self.lines: List[str] = []

    def log_event(self, timestamp: str, message: str) -> None:
        self.lines.append(render_line(timestamp, message))

    def clear(self) -> None:
        self.lines.clear()
