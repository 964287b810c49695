"""
infrastructure/interfaces.py

Base interface for line output sinks.

The planner reports what it does through a line sink: a display target that
accepts a text plus an indentation count and a number of preceding line breaks.
Sinks are purely observational. The search never reads from them, so swapping
one sink for another cannot change a planning result.

Interface Contract:
    write(text, indent, line_breaks) emits ``line_breaks`` empty lines, then
    ``indent`` indentation units, then ``text``.

Usage:
    from infrastructure.interfaces import LineSink

    class MySink(LineSink):
        def write(self, text: str, indent: int = 0, line_breaks: int = 0) -> None:
            ...
"""

from abc import ABC, abstractmethod


class LineSink(ABC):
    """
    Abstract base class for planner output sinks.

    Implementations:
        - BufferedLineSink: collects output in memory
        - StreamLineSink: writes to a file-like stream (stdout by default)
        - LoggingLineSink: forwards each line to a logger
    """

    @abstractmethod
    def write(self, text: str, indent: int = 0, line_breaks: int = 0) -> None:
        """
        Emit one piece of output.

        Args:
            text: Text to emit
            indent: Number of indentation units before the text
            line_breaks: Number of line breaks emitted before the text
        """
        pass
