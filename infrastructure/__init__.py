"""
infrastructure package

Shared infrastructure for the planner.

Modules:
    - interfaces: LineSink base class for observational output
    - line_sinks: buffered, stream and logging sinks
"""

from infrastructure.interfaces import LineSink
from infrastructure.line_sinks import BufferedLineSink, LoggingLineSink, StreamLineSink

__all__ = [
    "LineSink",
    "BufferedLineSink",
    "StreamLineSink",
    "LoggingLineSink",
]
