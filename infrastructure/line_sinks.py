"""
infrastructure/line_sinks.py

Concrete line sinks for planner output.

- BufferedLineSink: in-memory, used by tests and by callers that post-process
  the trace
- StreamLineSink: writes to stdout (or any text stream), used by the demo
- LoggingLineSink: turns each write into one log record
"""

import sys
from typing import List, Optional, TextIO

from common.constants import DEFAULT_INDENT_UNIT
from component_15_logging_config import StructuredLogger, get_logger
from infrastructure.interfaces import LineSink


class BufferedLineSink(LineSink):
    """Collects output in memory. ``lines`` holds one entry per emitted line."""

    def __init__(self, indent_unit: str = DEFAULT_INDENT_UNIT):
        self.indent_unit = indent_unit
        self.lines: List[str] = []

    def write(self, text: str, indent: int = 0, line_breaks: int = 0) -> None:
        self.lines.extend([""] * max(line_breaks, 0))
        self.lines.append(self.indent_unit * max(indent, 0) + text)

    def getvalue(self) -> str:
        """Full output joined with newlines."""
        return "\n".join(self.lines)

    def clear(self) -> None:
        self.lines.clear()


class StreamLineSink(LineSink):
    """
    Writes to a text stream.

    Each write starts on a fresh line; ``line_breaks`` adds empty lines on top.
    """

    def __init__(
        self, stream: Optional[TextIO] = None, indent_unit: str = DEFAULT_INDENT_UNIT
    ):
        self.stream = stream if stream is not None else sys.stdout
        self.indent_unit = indent_unit

    def write(self, text: str, indent: int = 0, line_breaks: int = 0) -> None:
        self.stream.write("\n" * max(line_breaks, 0))
        self.stream.write(self.indent_unit * max(indent, 0) + text + "\n")
        self.stream.flush()


class LoggingLineSink(LineSink):
    """Forwards each write to a logger at INFO level."""

    def __init__(
        self,
        logger: Optional[StructuredLogger] = None,
        indent_unit: str = DEFAULT_INDENT_UNIT,
    ):
        self.logger = logger if logger is not None else get_logger("planner.output")
        self.indent_unit = indent_unit

    def write(self, text: str, indent: int = 0, line_breaks: int = 0) -> None:
        # Line breaks have no meaning inside a single log record
        self.logger.info(self.indent_unit * max(indent, 0) + text)
