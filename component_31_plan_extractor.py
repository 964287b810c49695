"""
Component 31: Plan Extraction and Replay

Recovering and checking plans found by the forward search engine:
- extract_plan: rule names from root to solution
- extract_path: states from root to solution
- format_transitions: one-line textual plan
- simulate_plan / validate_plan: replay a named plan from the initial facts

Author: Planner Development Team
Date: 2026-10-18
"""

import json
from typing import Any, Iterable, List, Optional, Tuple

from component_15_logging_config import get_logger
from component_31_conditions import Rule, apply_effect, as_condition, as_rule, holds
from component_31_fact_state import FactMapping, FactState, StateArena, derive_child
from planner_config import get_config
from planner_exceptions import PlanValidationError

logger = get_logger(__name__)


def extract_plan(solution: FactState) -> List[str]:
    """
    Walk parent links from ``solution`` and collect rule names.

    Stops at the first state without last_rule_name (the root).

    Returns:
        Rule names in application order
    """
    names: List[str] = []
    state: Optional[FactState] = solution
    while state is not None and state.last_rule_name:
        names.append(state.last_rule_name)
        state = state.parent
    names.reverse()
    return names


def extract_path(solution: FactState) -> List[FactState]:
    """States from the root to ``solution`` (both included)."""
    path: List[FactState] = []
    state: Optional[FactState] = solution
    while state is not None:
        path.append(state)
        state = state.parent
    path.reverse()
    return path


def format_transitions(solution: FactState) -> str:
    """Plan as a display line, e.g. ``Transitions: ["[a]", "[b]"]``."""
    return "Transitions: " + json.dumps(extract_plan(solution))


def simulate_plan(
    initial_fragments: Iterable[FactMapping],
    rules: Iterable[Any],
    plan: Iterable[str],
) -> List[FactState]:
    """
    Execute a named plan from the initial facts.

    Args:
        initial_fragments: Fact fragments merged into the root
        rules: Rules (or rule mappings) the plan refers to by name
        plan: Rule names in application order

    Returns:
        State trajectory, root first

    Raises:
        PlanValidationError: Unknown rule name or unmet precondition
    """
    by_name = {}
    for raw in rules:
        rule: Rule = as_rule(raw)
        by_name.setdefault(rule.name, rule)

    arena = StateArena(resolve_cache_size=get_config().resolve_cache_size)
    state = arena.create_root(initial_fragments)
    trajectory = [state]

    for step_index, name in enumerate(plan):
        rule = by_name.get(name)
        if rule is None:
            raise PlanValidationError(
                f"Unknown rule '{name}'", rule_name=name, step_index=step_index
            )
        if not holds(rule.precondition, state):
            raise PlanValidationError(
                f"Precondition of '{name}' does not hold",
                rule_name=name,
                step_index=step_index,
            )
        child = derive_child(state)
        apply_effect(rule.effect, child, rule.name, rule.cost)
        arena.append(child)
        trajectory.append(child)
        state = child

    return trajectory


def validate_plan(
    initial_fragments: Iterable[FactMapping],
    rules: Iterable[Any],
    plan: Iterable[str],
    goal: Any,
) -> Tuple[bool, Optional[str]]:
    """
    Check that ``plan`` is executable and reaches ``goal``.

    Returns:
        (success, error_message)
    """
    goal = as_condition(goal, role="goal")
    try:
        trajectory = simulate_plan(initial_fragments, rules, plan)
    except PlanValidationError as e:
        logger.debug("Plan replay failed", extra=e.context)
        return False, e.message

    if not holds(goal, trajectory[-1]):
        return False, "Final state does not satisfy goal"

    return True, None
