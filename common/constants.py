"""
Centralized constants for the forward planner.

This module provides a single source of truth for defaults and reserved names
used throughout the planner. Runtime overrides go through planner_config.py;
the values here are the fallbacks.

Organization:
    - Search Defaults: pass bound and cache sizes
    - State Metadata: names that are never domain facts
    - Output: line sink formatting

Usage:
    from common.constants import DEFAULT_MAX_PASSES, RESERVED_FACT_KEYS
"""

# =============================================================================
# Search Defaults
# =============================================================================

DEFAULT_MAX_PASSES: int = 10
"""
Default number of level-synchronous passes for one planning call.

Each pass expands every open state that existed when the pass began, so the
bound is also the maximum plan length the search can discover.

Used by:
    - component_31_search_engine.py: ForwardSearchEngine.solve()
    - planner_config.py: PlannerConfig.max_passes default
"""

DEFAULT_RESOLVE_CACHE_SIZE: int = 1024
"""
Maximum number of flattened fact views memoised per state arena.

Dominance checks compare every new candidate against the resolved facts of all
visited states. Accepted states never change their facts, so their flattened
view is cached (LRU) instead of being rebuilt from the parent chain each time.

Used by:
    - component_31_fact_state.py: StateArena.resolve()
"""

# =============================================================================
# State Metadata
# =============================================================================

METADATA_FIELDS: frozenset = frozenset(
    {"parent", "balance", "age", "last_rule_name", "open"}
)
"""
Bookkeeping attributes of a FactState.

These live in dedicated attributes and are never stored in the fact layer.
"""

LEGACY_METADATA_NAMES: frozenset = frozenset(
    {"prevState", "transName", "live", "lastRuleName"}
)
"""
Metadata names used by older scenario definitions.

Treated like the current metadata names: rejected in initial fragments and
procedural writes, skipped with a warning in patterns and patches.
"""

RESERVED_FACT_KEYS: frozenset = METADATA_FIELDS | LEGACY_METADATA_NAMES
"""
All names that are never domain facts.

Used by:
    - component_31_fact_state.py: check_fact_keys() rejects them
    - component_31_conditions.py: Pattern and Patch skip them
"""

# =============================================================================
# Output
# =============================================================================

DEFAULT_INDENT_UNIT: str = "  "
"""Indentation emitted per indent level by the line sinks."""

DEFAULT_CONFIG_FILE: str = "planner_config.yaml"
"""Config file looked up in the working directory when PLANNER_CONFIG is unset."""

CONFIG_ENV_VAR: str = "PLANNER_CONFIG"
"""Environment variable naming an explicit config file path."""
