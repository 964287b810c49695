# tests/test_search_engine.py
"""
Tests for the forward search engine (component_31_search_engine).

Covers:
- Door scenario: exact solution and bookkeeping
- River crossing: solution found within the bound
- Dominance pruning and abandonment of remaining rules
- Pass bound edge cases, exhaustion, determinism
- Cost accumulation along a plan
- Sink output
"""

import pytest

from component_31_domain_builders import DoorScenarioBuilder, RiverCrossingBuilder
from component_31_plan_extractor import extract_plan
from component_31_search_engine import ForwardSearchEngine, solve_plan
from infrastructure.line_sinks import BufferedLineSink
from planner_config import PlannerConfig
from planner_exceptions import InvalidConfigError, InvalidRuleError

DOOR_FRAGMENTS = [{"agent.hasKey": 0}, {"guard.hasKey": 1}, {"door.isLocked": 1}]

ASK_FOR_KEY = {
    "name": "[ask for key]",
    "cost": 1,
    "precondition": {"guard.hasKey": 1},
    "effect": {"agent.hasKey": 1, "guard.hasKey": 0},
}

UNLOCK_DOOR = {
    "name": "[unlock door]",
    "cost": 1,
    "precondition": {"agent.hasKey": 1},
    "effect": {"door.isLocked": 0},
}


@pytest.fixture
def config():
    """Fixture: default config without pass tracing"""
    return PlannerConfig(trace_passes=False)


@pytest.fixture
def sink():
    """Fixture: in-memory line sink"""
    return BufferedLineSink()


class TestDoorScenario:
    """Tests for the locked door scenario"""

    def test_door_solution(self, config):
        """Test: Ask for key, then unlock the door"""
        engine = ForwardSearchEngine([ASK_FOR_KEY, UNLOCK_DOOR], config=config)

        solution = engine.solve(DOOR_FRAGMENTS, {"door.isLocked": 0}, 10)

        assert solution is not None
        assert solution.last_rule_name == "[unlock door]"
        assert solution.balance == 2
        assert solution.age == 2
        assert solution.to_dict() == {
            "agent.hasKey": 1,
            "guard.hasKey": 0,
            "door.isLocked": 0,
        }
        assert extract_plan(solution) == ["[ask for key]", "[unlock door]"]

    def test_door_stats(self, config):
        """Test: Two passes, one dominated re-expansion of the root"""
        engine = ForwardSearchEngine([ASK_FOR_KEY, UNLOCK_DOOR], config=config)

        engine.solve(DOOR_FRAGMENTS, {"door.isLocked": 0}, 10)

        assert engine.stats["passes"] == 2
        assert engine.stats["dominated"] == 1
        assert engine.stats["visited"] == 3
        assert engine.stats["exhausted"] is False
        assert len(engine.arena) == 3

    def test_door_predicate_variant(self, config):
        """Test: Predicate precondition gives the same plan"""
        scenario = DoorScenarioBuilder.create_scenario(use_predicate=True)

        solution = scenario.solve(config=config)

        assert extract_plan(solution) == ["[ask for key]", "[unlock door]"]
        assert solution.balance == 2

    def test_goal_as_predicate(self, config):
        """Test: Goal may be a callable"""
        solution = solve_plan(
            DOOR_FRAGMENTS,
            [ASK_FOR_KEY, UNLOCK_DOOR],
            lambda state: state["door.isLocked"] == 0,
            config=config,
        )

        assert solution is not None
        assert solution.last_rule_name == "[unlock door]"

    def test_bound_too_small(self, config):
        """Test: One pass cannot reach a two-step goal"""
        solution = solve_plan(
            DOOR_FRAGMENTS, [ASK_FOR_KEY, UNLOCK_DOOR], {"door.isLocked": 0}, 1, config=config
        )

        assert solution is None


class TestRiverCrossing:
    """Tests for the goat, cabbage and wolf puzzle"""

    def test_river_solution(self, config):
        """Test: The puzzle is solved within 20 passes"""
        scenario = RiverCrossingBuilder.create_scenario()
        engine = ForwardSearchEngine(scenario.rules, config=config)

        solution = engine.solve(scenario.fragments, scenario.goal, scenario.max_passes)

        assert solution is not None
        assert solution["goat.location"] == "right"
        assert solution["cabbage.location"] == "right"
        assert solution["wolf.location"] == "right"
        assert solution.last_rule_name == "[cross]"
        assert engine.stats["passes"] <= 20

    def test_river_plan(self, config):
        """Test: The plan found is deterministic"""
        solution = RiverCrossingBuilder.create_scenario().solve(config=config)

        assert extract_plan(solution) == [
            "[embark-goat]",
            "[cross]",
            "[cross]",
            "[embark-cabbage]",
            "[cross]",
            "[embark-goat]",
            "[cross]",
            "[embark-wolf]",
            "[cross]",
            "[cross]",
            "[embark-goat]",
            "[cross]",
        ]
        assert solution.balance == 12
        assert solution.age == 12


class TestDominance:
    """Tests for dominance pruning"""

    def test_noop_is_dominated(self, config):
        """Test: A child equal to the root at higher cost is discarded"""
        noop = {"name": "[noop]", "cost": 1, "precondition": {"x": 0}, "effect": {"x": 0}}
        engine = ForwardSearchEngine([noop], config=config)

        solution = engine.solve([{"x": 0}], {"x": 1}, 5)

        assert solution is None
        assert len(engine.arena) == 1
        assert engine.stats["dominated"] == 1
        assert engine.stats["exhausted"] is True
        assert engine.stats["passes"] == 1

    def test_dominated_child_abandons_remaining_rules(self, config):
        """Test: After the first dominated child the source tries no further rule"""
        noop = {"name": "[noop]", "cost": 1, "precondition": {"x": 0}, "effect": {"x": 0}}
        set_y = {"name": "[set y]", "cost": 1, "precondition": {"x": 0}, "effect": {"x": 1, "y": 1}}
        engine = ForwardSearchEngine([noop, set_y], config=config)

        solution = engine.solve([{"x": 0}], {"y": 1}, 5)

        assert solution is None
        assert len(engine.arena) == 1
        assert engine.stats["generated"] == 1

    def test_rule_order_matters(self, config):
        """Test: The same rules in the other order reach the goal"""
        noop = {"name": "[noop]", "cost": 1, "precondition": {"x": 0}, "effect": {"x": 0}}
        set_y = {"name": "[set y]", "cost": 1, "precondition": {"x": 0}, "effect": {"x": 1, "y": 1}}

        solution = solve_plan([{"x": 0}], [set_y, noop], {"y": 1}, 5, config=config)

        assert solution is not None
        assert extract_plan(solution) == ["[set y]"]

    def test_return_to_root_is_dominated(self, config):
        """Test: Going back to the root facts at a higher balance adds nothing"""
        costly = {"name": "[costly]", "cost": 5, "precondition": {"x": 0}, "effect": {"x": 1}}
        back = {"name": "[back]", "cost": 1, "precondition": {"x": 1}, "effect": {"x": 0}}
        engine = ForwardSearchEngine([costly, back], config=config)

        engine.solve([{"x": 0}], {"x": 2}, 3)

        assert [state.to_dict() for state in engine.arena] == [{"x": 0}, {"x": 1}]
        assert engine.stats["exhausted"] is True

    def test_cheaper_duplicate_is_kept(self, config):
        """Test: Equal facts at a lower balance are not dominated"""
        costly = {"name": "[costly]", "cost": 5, "precondition": {"x": 0}, "effect": {"x": 1}}
        cheap = {"name": "[cheap]", "cost": 1, "precondition": {"x": 0}, "effect": {"x": 1}}
        engine = ForwardSearchEngine([costly, cheap], config=config)

        engine.solve([{"x": 0}], {"x": 2}, 1)

        assert [state.balance for state in engine.arena] == [0, 5, 1]

    def test_state_adding_facts_is_dominated_by_root(self, config):
        """Test: A child that only adds facts is covered by the root"""
        mark = {"name": "[mark]", "cost": 0, "precondition": {}, "effect": {"marked": 1}}
        engine = ForwardSearchEngine([mark], config=config)

        assert engine.solve([{"x": 0}], {"marked": 1}, 3) is None
        assert len(engine.arena) == 1


class TestBounds:
    """Tests for the pass bound"""

    def test_zero_bound(self, config):
        """Test: Bound 0 runs no pass and creates only the root"""
        engine = ForwardSearchEngine([ASK_FOR_KEY, UNLOCK_DOOR], config=config)

        solution = engine.solve(DOOR_FRAGMENTS, {"door.isLocked": 0}, 0)

        assert solution is None
        assert len(engine.arena) == 1
        assert engine.stats["passes"] == 0

    def test_root_is_not_goal_tested(self, config):
        """Test: A goal already true in the root is only found via a rule"""
        engine = ForwardSearchEngine(
            [{"name": "[touch]", "cost": 1, "precondition": {}, "effect": {"z": 1}}],
            config=config,
        )

        solution = engine.solve([{"x": 0, "z": 0}], {"x": 0}, 1)

        assert solution is not None
        assert solution.last_rule_name == "[touch]"

    def test_root_goal_without_rules(self, config):
        """Test: Without rules nothing is returned, even if the root satisfies the goal"""
        assert solve_plan([{"x": 0}], [], {"x": 0}, 3, config=config) is None

    @pytest.mark.parametrize("bound", [-1, 2.5, "3", True])
    def test_invalid_bound(self, config, bound):
        """Test: Non-integer or negative bounds are rejected"""
        engine = ForwardSearchEngine([ASK_FOR_KEY], config=config)

        with pytest.raises(InvalidConfigError):
            engine.solve(DOOR_FRAGMENTS, {"door.isLocked": 0}, bound)

    def test_default_bound_from_config(self):
        """Test: Without an explicit bound the config value applies"""
        engine = ForwardSearchEngine(
            [ASK_FOR_KEY, UNLOCK_DOOR], config=PlannerConfig(max_passes=1, trace_passes=False)
        )

        assert engine.solve(DOOR_FRAGMENTS, {"door.isLocked": 0}) is None
        assert engine.stats["passes"] == 1


class TestSearchBehaviour:
    """Tests for general search behaviour"""

    def test_cost_accumulates(self, config):
        """Test: Balance sums rule costs, age counts applications"""
        rules = [
            {"name": "[a]", "cost": 1, "precondition": {"s": 0}, "effect": {"s": 1}},
            {"name": "[b]", "cost": 2, "precondition": {"s": 1}, "effect": {"s": 2}},
        ]

        solution = solve_plan([{"s": 0}], rules, {"s": 2}, 5, config=config)

        assert solution.balance == 3
        assert solution.age == 2
        assert solution.parent.balance == 1
        assert solution.parent.parent.is_root

    def test_metadata_names_in_rules_are_ignored(self, config):
        """Test: Bookkeeping comes from the cost, not from metadata keys in a patch or goal"""
        rules = [
            {
                "name": "[go]",
                "cost": 1,
                "precondition": {"x": 0},
                "effect": {"x": 1, "balance": 99},
            }
        ]

        solution = solve_plan([{"x": 0}], rules, {"x": 1, "age": 42}, 3, config=config)

        assert extract_plan(solution) == ["[go]"]
        assert solution.balance == 1
        assert solution.age == 1
        assert "balance" not in solution

    def test_deterministic(self, config):
        """Test: Repeated solves yield identical results"""
        scenario = RiverCrossingBuilder.create_scenario()

        first = scenario.solve(config=config)
        second = scenario.solve(config=config)

        assert extract_plan(first) == extract_plan(second)
        assert first.snapshot() == second.snapshot()

    def test_first_goal_is_returned_not_cheapest(self, config):
        """Test: The earlier rule wins even if a later one is cheaper"""
        rules = [
            {"name": "[expensive]", "cost": 10, "precondition": {}, "effect": {"done": 1}},
            {"name": "[cheap]", "cost": 1, "precondition": {}, "effect": {"done": 1}},
        ]

        solution = solve_plan([{"done": 0}], rules, {"done": 1}, 3, config=config)

        assert solution.last_rule_name == "[expensive]"
        assert solution.balance == 10

    def test_fresh_arena_per_solve(self, config):
        """Test: Each solve starts from a new arena"""
        engine = ForwardSearchEngine([ASK_FOR_KEY, UNLOCK_DOOR], config=config)

        engine.solve(DOOR_FRAGMENTS, {"door.isLocked": 0}, 10)
        first_arena = engine.arena
        engine.solve(DOOR_FRAGMENTS, {"door.isLocked": 0}, 10)

        assert engine.arena is not first_arena
        assert len(engine.arena) == 3

    def test_try_expand(self, config):
        """Test: try_expand returns None when the precondition fails"""
        engine = ForwardSearchEngine([ASK_FOR_KEY, UNLOCK_DOOR], config=config)
        engine.solve(DOOR_FRAGMENTS, {"door.isLocked": 0}, 0)
        root = engine.arena[0]

        assert engine.try_expand(root, engine.rules[1]) is None

        child = engine.try_expand(root, engine.rules[0])
        assert child.open is True
        assert child.index is None
        assert child["agent.hasKey"] == 1

    def test_malformed_rule_fails_on_registration(self, config):
        """Test: Bad rules are rejected before any search"""
        with pytest.raises(InvalidRuleError):
            ForwardSearchEngine([{"name": "[x]", "precondition": 3, "effect": {}}], config=config)

    def test_procedure_exception_propagates(self, config):
        """Test: Errors in procedural effects reach the caller"""

        def broken(state):
            raise ValueError("bad effect")

        with pytest.raises(ValueError, match="bad effect"):
            solve_plan([{"x": 0}], [{"name": "[b]", "precondition": {}, "effect": broken}],
                       {"x": 1}, 2, config=config)


class TestSinkOutput:
    """Tests for observational output"""

    def test_goal_line(self, config, sink):
        """Test: The solution is announced on the sink"""
        solve_plan(DOOR_FRAGMENTS, [ASK_FOR_KEY, UNLOCK_DOOR], {"door.isLocked": 0}, 10,
                   sink=sink, config=config)

        assert sink.lines == ["  goal reached by [unlock door] (balance=2, age=2)"]

    def test_pass_trace(self, sink):
        """Test: trace_passes writes one line per pass"""
        solve_plan(DOOR_FRAGMENTS, [ASK_FOR_KEY, UNLOCK_DOOR], {"door.isLocked": 0}, 10,
                   sink=sink, config=PlannerConfig(trace_passes=True))

        assert sink.lines == [
            "  pass 1: +1 states (2 visited)",
            "  pass 2: +1 states (3 visited)",
            "  goal reached by [unlock door] (balance=2, age=2)",
        ]

    def test_no_plan_line(self, config, sink):
        """Test: Failure is announced on the sink"""
        solve_plan([{"x": 0}], [], {"x": 1}, 4, sink=sink, config=config)

        assert sink.lines == ["  no plan within 4 passes"]

    def test_sink_does_not_change_result(self, config, sink):
        """Test: Results are identical with and without a sink"""
        scenario = RiverCrossingBuilder.create_scenario()

        with_sink = scenario.solve(sink=sink, config=config)
        without_sink = scenario.solve(config=config)

        assert extract_plan(with_sink) == extract_plan(without_sink)
