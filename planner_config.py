"""
planner_config.py

Configuration for the forward planner.

Settings are read from a YAML file with a ``planner:`` section:

    planner:
      max_passes: 20
      resolve_cache_size: 2048
      trace_passes: true
      indent_unit: "    "
      console_log_level: DEBUG
      log_file: logs/planner.log

The file is taken from the PLANNER_CONFIG environment variable, else
``planner_config.yaml`` in the working directory. A missing file is not an
error: defaults from common.constants apply.

Usage:
    from planner_config import get_config

    config = get_config()
    engine = ForwardSearchEngine(rules, config=config)
"""

import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from common.constants import (
    CONFIG_ENV_VAR,
    DEFAULT_CONFIG_FILE,
    DEFAULT_INDENT_UNIT,
    DEFAULT_MAX_PASSES,
    DEFAULT_RESOLVE_CACHE_SIZE,
)
from component_15_logging_config import get_logger
from planner_exceptions import InvalidConfigError, wrap_exception

logger = get_logger(__name__)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class PlannerConfig:
    """
    Runtime settings of the planner.

    Attributes:
        max_passes: Default pass bound when solve() is called without one
        resolve_cache_size: LRU size for flattened fact views per arena
        trace_passes: Write one summary line per pass to the line sink
        indent_unit: Indentation emitted per indent level by line sinks
        console_log_level: Level name for the console handler
        log_file: Optional rotating log file
    """

    max_passes: int = DEFAULT_MAX_PASSES
    resolve_cache_size: int = DEFAULT_RESOLVE_CACHE_SIZE
    trace_passes: bool = True
    indent_unit: str = DEFAULT_INDENT_UNIT
    console_log_level: str = "INFO"
    log_file: Optional[str] = None

    def __post_init__(self):
        """Validate value types and ranges."""
        validate_pass_bound(self.max_passes, "max_passes")

        if (
            isinstance(self.resolve_cache_size, bool)
            or not isinstance(self.resolve_cache_size, int)
            or self.resolve_cache_size < 1
        ):
            raise InvalidConfigError(
                "resolve_cache_size must be a positive integer",
                context={"resolve_cache_size": self.resolve_cache_size},
            )

        if not isinstance(self.trace_passes, bool):
            raise InvalidConfigError(
                "trace_passes must be a boolean",
                context={"trace_passes": self.trace_passes},
            )

        if not isinstance(self.indent_unit, str):
            raise InvalidConfigError(
                "indent_unit must be a string",
                context={"indent_unit": self.indent_unit},
            )

        level = str(self.console_log_level).upper()
        if level not in _LOG_LEVELS:
            raise InvalidConfigError(
                f"console_log_level must be one of {', '.join(_LOG_LEVELS)}",
                context={"console_log_level": self.console_log_level},
            )
        self.console_log_level = level

    @property
    def console_level(self) -> int:
        """Numeric logging level for the console handler."""
        return logging.getLevelName(self.console_log_level)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlannerConfig":
        """Build a config from a mapping, ignoring (and logging) unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning("Ignoring unknown config keys", extra={"keys": unknown})
        return cls(**{k: v for k, v in data.items() if k in known})


def validate_pass_bound(value: Any, name: str = "max_passes") -> int:
    """
    Check that a pass bound is a non-negative integer.

    Raises:
        InvalidConfigError: For booleans, non-integers and negative values
    """
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidConfigError(
            f"{name} must be a non-negative integer", context={name: value}
        )
    return value


def load_config(path: Union[str, Path]) -> PlannerConfig:
    """
    Load settings from a YAML file.

    Args:
        path: Path to the YAML file

    Returns:
        PlannerConfig (defaults if the file does not exist)

    Raises:
        InvalidConfigError: Unreadable YAML or invalid values
    """
    config_file = Path(path)
    if not config_file.exists():
        logger.warning(f"Config file not found: {config_file}, using defaults")
        return PlannerConfig()

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise wrap_exception(
            e, InvalidConfigError, "Config file could not be read", path=str(config_file)
        ) from e

    if not isinstance(data, dict):
        raise InvalidConfigError(
            "Config file must contain a mapping", context={"path": str(config_file)}
        )

    section = data.get("planner", {}) or {}
    if not isinstance(section, dict):
        raise InvalidConfigError(
            "'planner' section must be a mapping", context={"path": str(config_file)}
        )

    config = PlannerConfig.from_dict(section)
    logger.info(
        "Planner config loaded",
        extra={"path": str(config_file), "max_passes": config.max_passes},
    )
    return config


_config: Optional[PlannerConfig] = None


def get_config() -> PlannerConfig:
    """Return the process-wide config, loading it on first use."""
    global _config
    if _config is None:
        path = os.environ.get(CONFIG_ENV_VAR)
        if path:
            _config = load_config(path)
        elif Path(DEFAULT_CONFIG_FILE).exists():
            _config = load_config(DEFAULT_CONFIG_FILE)
        else:
            _config = PlannerConfig()
    return _config


def set_config(config: PlannerConfig) -> None:
    """Replace the process-wide config."""
    global _config
    _config = config


def reset_config() -> None:
    """Forget the process-wide config; the next get_config() reloads it."""
    global _config
    _config = None
