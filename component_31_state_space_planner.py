"""
Component 31: State-Space Planner (forward search)

Facade module providing one import point for forward planning.

The implementation is split into focused modules:
- component_31_fact_state: Layered fact states and the visited arena
- component_31_conditions: Preconditions, effects and rules
- component_31_search_engine: Level-synchronous search with dominance pruning
- component_31_plan_extractor: Plan extraction, replay and validation
- component_31_domain_builders: Door and river crossing scenarios
- component_31_scenario_loader: YAML scenarios

Run as a script to solve the built-in scenarios, or pass a YAML scenario path:

    python component_31_state_space_planner.py [scenario.yaml]

Author: Planner Development Team
Date: 2026-10-18
"""

import json
import sys
from typing import List, Optional

# ============================================================================
# Import all public classes from split modules
# ============================================================================

from component_15_logging_config import (
    get_logger,
    log_component_end,
    log_component_start,
    setup_logging,
)

# Conditions and rules
from component_31_conditions import (
    Condition,
    Effect,
    Patch,
    Pattern,
    Predicate,
    Procedure,
    Rule,
    charge,
    holds,
)

# Domain builders
from component_31_domain_builders import (
    SCENARIO_BUILDERS,
    DoorScenarioBuilder,
    RiverCrossingBuilder,
    Scenario,
)

# State primitives
from component_31_fact_state import (
    FactState,
    StateArena,
    derive_child,
    lookup,
    matches,
    merge_fragments,
)

# Plans
from component_31_plan_extractor import (
    extract_path,
    extract_plan,
    format_transitions,
    simulate_plan,
    validate_plan,
)
from component_31_scenario_loader import load_scenario

# Search
from component_31_search_engine import ForwardSearchEngine, solve_plan
from infrastructure.interfaces import LineSink
from infrastructure.line_sinks import StreamLineSink
from planner_config import get_config
from planner_exceptions import PlannerException, get_user_friendly_message

logger = get_logger(__name__)

__all__ = [
    # State primitives
    "FactState",
    "StateArena",
    "merge_fragments",
    "lookup",
    "matches",
    "derive_child",
    # Conditions and rules
    "Condition",
    "Effect",
    "Pattern",
    "Predicate",
    "Patch",
    "Procedure",
    "Rule",
    "charge",
    "holds",
    # Search
    "ForwardSearchEngine",
    "solve_plan",
    # Plans
    "extract_plan",
    "extract_path",
    "format_transitions",
    "simulate_plan",
    "validate_plan",
    # Scenarios
    "Scenario",
    "DoorScenarioBuilder",
    "RiverCrossingBuilder",
    "load_scenario",
]


# ============================================================================
# Demo
# ============================================================================


def run_scenario(scenario: Scenario, sink: LineSink) -> Optional[FactState]:
    """Solve ``scenario`` and write header, solution snapshot and transitions."""
    log_component_start(logger, "scenario", scenario=scenario.name)
    sink.write(f"-----------Solving for {scenario.name}---------", 0, 2)

    engine = ForwardSearchEngine(scenario.rules, sink=sink, config=get_config())
    solution = engine.solve(scenario.fragments, scenario.goal, scenario.max_passes)

    if solution is None:
        sink.write("null", 0, 1)
    else:
        sink.write(json.dumps(solution.snapshot()), 0, 1)
        sink.write(format_transitions(solution), 0, 1)

    log_component_end(
        logger, "scenario", scenario=scenario.name, solved=solution is not None
    )
    return solution


def main(argv: Optional[List[str]] = None) -> int:
    """Solve the built-in scenarios, or the YAML scenarios given as arguments."""
    args = sys.argv[1:] if argv is None else argv

    try:
        config = get_config()
        setup_logging(console_level=config.console_level, log_file=config.log_file)
        sink = StreamLineSink(indent_unit=config.indent_unit)

        if args:
            scenarios = [load_scenario(path) for path in args]
        else:
            scenarios = [build() for build in SCENARIO_BUILDERS.values()]

        for scenario in scenarios:
            run_scenario(scenario, sink)
    except PlannerException as e:
        logger.log_exception(e, "Planner demo failed")
        print(get_user_friendly_message(e), file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
