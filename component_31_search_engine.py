"""
Component 31: Forward Search Engine

Level-synchronous forward search with dominance pruning:
- try_expand: apply one rule to one state
- run_pass: expand every open state that existed when the pass began
- solve: repeat passes until a goal state appears or the bound runs out

Dominance: a new child is dropped when some visited state S has facts that the
child matches (every fact of S equals the child's) and S.balance <= child.balance.
The first dominated child also ends the expansion of its source state for the
rest of the pass.

The first goal state discovered in state x rule order is returned at once.
This is deliberately not a cost-optimal search: cheaper goal states found
later, in the same pass or in later ones, are never considered.

Author: Planner Development Team
Date: 2026-10-18
"""

from typing import Any, Dict, Iterable, List, Optional

from component_15_logging_config import PerformanceLogger, get_logger
from component_31_conditions import Condition, Rule, apply_effect, as_condition, as_rule, holds
from component_31_fact_state import FactMapping, FactState, StateArena, derive_child, matches
from infrastructure.interfaces import LineSink
from planner_config import PlannerConfig, get_config, validate_pass_bound

logger = get_logger(__name__)


class ForwardSearchEngine:
    """
    Breadth-by-pass planner over layered fact states.

    Rules are validated when registered (constructor or add_rule), so a
    malformed rule fails before any search starts.

    Attributes:
        rules: Registered rules in declaration order (order matters)
        sink: Optional observational line sink
        config: Planner settings (pass bound default, cache size, tracing)
        stats: Counters of the last solve() call
        arena: Visited collection of the last solve() call
    """

    def __init__(
        self,
        rules: Iterable[Any] = (),
        sink: Optional[LineSink] = None,
        config: Optional[PlannerConfig] = None,
    ):
        self.config = config if config is not None else get_config()
        self.sink = sink
        self.rules: List[Rule] = []
        self.stats: Dict[str, Any] = self._fresh_stats()
        self.arena: Optional[StateArena] = None
        self.add_rules(rules)

    @staticmethod
    def _fresh_stats() -> Dict[str, Any]:
        return {
            "passes": 0,
            "expansions": 0,
            "generated": 0,
            "dominated": 0,
            "accepted": 0,
            "visited": 0,
            "exhausted": False,
        }

    def add_rule(self, rule: Any) -> Rule:
        """Register a Rule (or rule mapping); raises InvalidRuleError if malformed."""
        rule = as_rule(rule)
        self.rules.append(rule)
        logger.debug(f"Registered rule: {rule.name} (cost={rule.cost})")
        return rule

    def add_rules(self, rules: Iterable[Any]) -> None:
        for rule in rules:
            self.add_rule(rule)

    # ========================================================================
    # Expansion
    # ========================================================================

    def try_expand(self, state: FactState, rule: Rule) -> Optional[FactState]:
        """
        Apply ``rule`` to ``state``.

        Returns:
            The open child state, or None if the precondition does not hold
        """
        if not holds(rule.precondition, state):
            return None

        child = derive_child(state)
        apply_effect(rule.effect, child, rule.name, rule.cost)
        child.parent_index = state.index
        child.open = True
        return child

    def is_dominated(self, arena: StateArena, child: FactState) -> bool:
        """True if a visited state covers ``child`` at no higher cost."""
        child_balance = child.balance or 0
        for visited in arena:
            if (visited.balance or 0) <= child_balance and matches(visited, child):
                return True
        return False

    def _expand_source(
        self, arena: StateArena, source: FactState, goal: Condition
    ) -> Optional[FactState]:
        # Closed unless some rule yields a non-dominated child
        source.open = False
        self.stats["expansions"] += 1

        for rule in self.rules:
            child = self.try_expand(source, rule)
            if child is None:
                continue
            self.stats["generated"] += 1

            if self.is_dominated(arena, child):
                self.stats["dominated"] += 1
                # Abandon the remaining rules for this source
                return None

            source.open = True
            arena.append(child)
            self.stats["accepted"] += 1

            if holds(goal, child):
                return child

        return None

    def run_pass(self, arena: StateArena, goal: Any) -> Optional[FactState]:
        """
        One level-synchronous pass.

        Only the states present when the pass starts are expanded; children
        appended during the pass already take part in dominance checks.

        Returns:
            The first accepted child that satisfies ``goal``, else None
        """
        goal = as_condition(goal, role="goal")
        candidates = len(arena)

        for position in range(candidates):
            source = arena[position]
            if not source.open:
                continue
            solution = self._expand_source(arena, source, goal)
            if solution is not None:
                return solution

        return None

    # ========================================================================
    # Planning
    # ========================================================================

    def solve(
        self,
        initial_fragments: Iterable[FactMapping],
        goal: Any,
        max_passes: Optional[int] = None,
    ) -> Optional[FactState]:
        """
        Search for a state satisfying ``goal``.

        Args:
            initial_fragments: Fact mappings merged left to right into the root
            goal: Pattern/Predicate or raw mapping/callable
            max_passes: Pass bound (default: config.max_passes); 0 runs no pass

        Returns:
            The goal state (walk ``parent`` for the path), or None when the
            bound is exhausted. The root itself is never goal-tested.
        """
        goal = as_condition(goal, role="goal")
        bound = (
            self.config.max_passes
            if max_passes is None
            else validate_pass_bound(max_passes)
        )

        self.stats = self._fresh_stats()
        arena = StateArena(resolve_cache_size=self.config.resolve_cache_size)
        self.arena = arena
        root = arena.create_root(initial_fragments)

        logger.info(
            "Starting forward search",
            extra={
                "facts": len(root.facts),
                "rules": len(self.rules),
                "max_passes": bound,
            },
        )

        solution: Optional[FactState] = None
        with PerformanceLogger(logger.logger, "forward_search", rules=len(self.rules)):
            for pass_number in range(1, bound + 1):
                before = len(arena)
                solution = self.run_pass(arena, goal)
                self.stats["passes"] = pass_number
                self._trace_pass(pass_number, len(arena) - before, len(arena))

                if solution is not None:
                    break
                if not any(state.open for state in arena):
                    # No open state left: later passes cannot add anything
                    self.stats["exhausted"] = True
                    logger.debug(f"Search space exhausted after pass {pass_number}")
                    break

        self.stats["visited"] = len(arena)

        if solution is not None:
            logger.info(
                "Goal reached",
                extra={
                    "passes": self.stats["passes"],
                    "balance": solution.balance,
                    "age": solution.age,
                    "visited": self.stats["visited"],
                },
            )
            self._emit(
                f"goal reached by {solution.last_rule_name} "
                f"(balance={solution.balance}, age={solution.age})",
                indent=1,
            )
        else:
            logger.warning(
                f"No plan found after {self.stats['passes']} passes",
                extra={
                    "visited": self.stats["visited"],
                    "exhausted": self.stats["exhausted"],
                },
            )
            self._emit(f"no plan within {bound} passes", indent=1)

        return solution

    def _trace_pass(self, pass_number: int, added: int, visited: int) -> None:
        logger.debug(
            f"Pass {pass_number} finished",
            extra={"added": added, "visited": visited},
        )
        if self.config.trace_passes:
            self._emit(f"pass {pass_number}: +{added} states ({visited} visited)", indent=1)

    def _emit(self, text: str, indent: int = 0, line_breaks: int = 0) -> None:
        if self.sink is not None:
            self.sink.write(text, indent, line_breaks)


def solve_plan(
    initial_fragments: Iterable[FactMapping],
    rules: Iterable[Any],
    goal: Any,
    max_passes: Optional[int] = None,
    sink: Optional[LineSink] = None,
    config: Optional[PlannerConfig] = None,
) -> Optional[FactState]:
    """Convenience wrapper: register ``rules`` and run one search."""
    engine = ForwardSearchEngine(rules, sink=sink, config=config)
    return engine.solve(initial_fragments, goal, max_passes)
