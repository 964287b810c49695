"""
Common constants for the forward planner.

This package provides centralized defaults and reserved names used throughout
the planner modules.
"""

from common.constants import *

__all__ = [
    # Search Defaults
    "DEFAULT_MAX_PASSES",
    "DEFAULT_RESOLVE_CACHE_SIZE",
    # State Metadata
    "METADATA_FIELDS",
    "LEGACY_METADATA_NAMES",
    "RESERVED_FACT_KEYS",
    # Output
    "DEFAULT_INDENT_UNIT",
    "DEFAULT_CONFIG_FILE",
    "CONFIG_ENV_VAR",
]
