"""
component_15_logging_config.py

Central logging setup for the planner.

Every planner module logs through get_logger(__name__), which returns a
StructuredLogger. Key/value context passed as ``extra`` is rendered after the
message, so a search run reads like:

    [2026-01-01 12:00:00] [INFO    ] [component_31_search_engine] Goal reached | passes=2 | balance=2

Timed operations (one per solve() call) additionally go to the
``planner.performance`` logger, which can be routed to its own file.

Usage:
    from component_15_logging_config import get_logger

    logger = get_logger(__name__)
    logger.info("Search started", extra={"rules": 4, "max_passes": 20})
"""

import logging
import logging.handlers
import sys
import time
import traceback
from pathlib import Path
from types import TracebackType
from typing import Any, Dict, List, Literal, MutableMapping, Optional, Tuple, Type

CONSOLE_LOG_LEVEL: int = logging.INFO
FILE_LOG_LEVEL: int = logging.DEBUG

PERFORMANCE_LOGGER_NAME: str = "planner.performance"

# Handlers installed by setup_logging(), removed again on re-setup
_installed_handlers: List[Tuple[logging.Logger, logging.Handler]] = []


class PlannerLogFormatter(logging.Formatter):
    """
    ``[time] [LEVEL] [logger] message | key=value | ...``

    Colours are keyed by level number; levels between the standard ones use
    the colour of the next lower standard level.
    """

    LEVEL_COLORS: Tuple[Tuple[int, str], ...] = (
        (logging.CRITICAL, "\033[35m"),
        (logging.ERROR, "\033[31m"),
        (logging.WARNING, "\033[33m"),
        (logging.INFO, "\033[32m"),
        (logging.DEBUG, "\033[36m"),
    )
    RESET: str = "\033[0m"

    def __init__(self, use_colors: bool = False, include_extra: bool = True) -> None:
        super().__init__(
            fmt="[%(asctime)s] [%(levelname)-8s] [%(name)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        self.use_colors = use_colors
        self.include_extra = include_extra

    @staticmethod
    def render_context(context: Any) -> str:
        if isinstance(context, dict):
            return " | ".join(f"{key}={value}" for key, value in context.items())
        return str(context)

    def color_for(self, levelno: int) -> str:
        for threshold, color in self.LEVEL_COLORS:
            if levelno >= threshold:
                return color
        return ""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)

        context = getattr(record, "extra_info", None)
        if self.include_extra and context:
            line = f"{line} | {self.render_context(context)}"

        if self.use_colors:
            line = f"{self.color_for(record.levelno)}{line}{self.RESET}"
        return line


class PerformanceLogger:
    """
    Times a block and reports the duration.

    DEBUG START/END lines go to ``logger``; the duration is also sent at INFO
    to the planner.performance logger. Exceptions are logged and re-raised.

    Usage:
        with PerformanceLogger(logger.logger, "forward_search", rules=4) as perf:
            ...
        perf.duration_ms
    """

    def __init__(
        self, logger: logging.Logger, operation_name: str, **context: Any
    ) -> None:
        self.logger = logger
        self.operation_name = operation_name
        self.context: Dict[str, Any] = context
        self.duration_ms: Optional[float] = None
        self._started: Optional[float] = None

    def _with(self, **more: Any) -> Dict[str, Dict[str, Any]]:
        return {"extra_info": {**self.context, **more}}

    def __enter__(self) -> "PerformanceLogger":
        self._started = time.perf_counter()
        self.logger.debug(f"START: {self.operation_name}", extra=self._with())
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> Literal[False]:
        if self._started is None:
            raise RuntimeError("PerformanceLogger exited without being entered")
        self.duration_ms = (time.perf_counter() - self._started) * 1000

        if exc_type is not None:
            self.logger.error(
                f"FAILED: {self.operation_name} after {self.duration_ms:.2f}ms",
                extra=self._with(duration_ms=self.duration_ms, error=repr(exc_val)),
            )
            return False

        self.logger.debug(
            f"END: {self.operation_name} ({self.duration_ms:.2f}ms)",
            extra=self._with(duration_ms=self.duration_ms),
        )
        logging.getLogger(PERFORMANCE_LOGGER_NAME).info(
            f"{self.operation_name}: {self.duration_ms:.2f}ms",
            extra=self._with(duration_ms=self.duration_ms),
        )
        return False


class StructuredLogger(logging.LoggerAdapter):
    """Adapter that moves the call's ``extra`` dict to ``record.extra_info``."""

    def process(
        self, msg: str, kwargs: MutableMapping[str, Any]
    ) -> Tuple[str, MutableMapping[str, Any]]:
        context = kwargs.pop("extra", None)
        if context:
            kwargs["extra"] = {"extra_info": dict(context)}
        return msg, kwargs

    def log_exception(self, exc: Exception, message: str = "", **context: Any) -> None:
        """ERROR record with exception type, text and full traceback."""
        formatted = traceback.format_exception(type(exc), exc, exc.__traceback__)
        self.error(
            f"{message}: {type(exc).__name__}: {exc}\n{''.join(formatted)}",
            extra=context,
        )


def _install(owner: logging.Logger, handler: logging.Handler) -> None:
    owner.addHandler(handler)
    _installed_handlers.append((owner, handler))


def setup_logging(
    console_level: int = CONSOLE_LOG_LEVEL,
    file_level: int = FILE_LOG_LEVEL,
    log_file: Optional[Path] = None,
    enable_performance_logging: bool = False,
) -> None:
    """
    (Re)configure planner logging.

    Args:
        console_level: Level for stdout output
        file_level: Level for the log file
        log_file: Rotating log file; no file logging when None
        enable_performance_logging: Also write timings to <log_file>.performance.log
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # handlers filter

    # Foreign handlers (pytest, embedding applications) stay untouched
    while _installed_handlers:
        owner, handler = _installed_handlers.pop()
        owner.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(console_level)
    console.setFormatter(PlannerLogFormatter(use_colors=sys.stdout.isatty()))
    _install(root_logger, console)

    if log_file is not None:
        file_path = Path(log_file)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        planner_file = logging.handlers.RotatingFileHandler(
            file_path, maxBytes=10 * 1024 * 1024, backupCount=5, encoding="utf-8"
        )
        planner_file.setLevel(file_level)
        planner_file.setFormatter(PlannerLogFormatter())
        _install(root_logger, planner_file)

        if enable_performance_logging:
            perf_logger = logging.getLogger(PERFORMANCE_LOGGER_NAME)
            perf_logger.setLevel(logging.INFO)
            timings_file = logging.handlers.RotatingFileHandler(
                file_path.with_suffix(".performance.log"),
                maxBytes=5 * 1024 * 1024,
                backupCount=3,
                encoding="utf-8",
            )
            timings_file.setFormatter(PlannerLogFormatter())
            _install(perf_logger, timings_file)

    get_logger("planner.logging_config").debug(
        "Logging configured",
        extra={
            "console_level": logging.getLevelName(console_level),
            "file_level": logging.getLevelName(file_level),
            "log_file": str(log_file) if log_file else None,
            "performance_logging": enable_performance_logging,
        },
    )


def get_logger(name: str) -> StructuredLogger:
    """StructuredLogger for a planner module (usually ``__name__``)."""
    return StructuredLogger(logging.getLogger(name), {})


def log_component_start(
    logger: StructuredLogger, component_name: str, **context: Any
) -> None:
    logger.info(f"START: {component_name}", extra=context)


def log_component_end(
    logger: StructuredLogger, component_name: str, **context: Any
) -> None:
    logger.info(f"END: {component_name}", extra=context)


# Console logging by default; an explicit setup_logging() call overrides it
if not logging.getLogger().handlers:
    setup_logging()
