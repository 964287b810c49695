"""
Component 31: Domain Builders

Ready-made planning scenarios for the forward search engine:
- DoorScenarioBuilder: agent asks a guard for a key, then unlocks a door
- RiverCrossingBuilder: goat, cabbage and wolf must be ferried across a river

Each builder returns a Scenario bundling initial fact fragments, rules, goal
and pass bound, so callers can hand it straight to solve_plan().

Author: Planner Development Team
Date: 2026-10-18
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional

from common.constants import DEFAULT_MAX_PASSES
from component_31_conditions import Rule, charge
from component_31_fact_state import FactMapping, FactState
from component_31_search_engine import solve_plan

# ============================================================================
# Scenario
# ============================================================================


@dataclass
class Scenario:
    """
    A complete planning problem.

    Attributes:
        name: Display name, used as demo header
        fragments: Initial fact fragments, merged left to right
        rules: Rules in declaration order
        goal: Pattern mapping or predicate
        max_passes: Pass bound for this scenario
    """

    name: str
    fragments: List[FactMapping] = field(default_factory=list)
    rules: List[Rule] = field(default_factory=list)
    goal: Any = field(default_factory=dict)
    max_passes: int = DEFAULT_MAX_PASSES

    def solve(self, **kwargs) -> Optional[FactState]:
        """Run solve_plan() on this scenario."""
        return solve_plan(
            self.fragments, self.rules, self.goal, self.max_passes, **kwargs
        )


# ============================================================================
# Door
# ============================================================================


class DoorScenarioBuilder:
    """
    Builder for the locked door scenario.

    Facts: agent.hasKey, guard.hasKey, door.isLocked (0/1)
    Rules: [ask for key] moves the key from guard to agent,
           [unlock door] needs the key and unlocks the door
    """

    ASK_FOR_KEY = "[ask for key]"
    UNLOCK_DOOR = "[unlock door]"

    @staticmethod
    def create_fragments() -> List[FactMapping]:
        return [
            {"agent.hasKey": 0},
            {"guard.hasKey": 1},
            {"door.isLocked": 1},
        ]

    @staticmethod
    def create_rules(use_predicate: bool = False) -> List[Rule]:
        """
        Create the door rules.

        Args:
            use_predicate: Gate [unlock door] on ``agent.hasKey > 0`` instead
                of the pattern ``{"agent.hasKey": 1}``
        """
        if use_predicate:
            unlock_precondition: Any = lambda state: (state.get("agent.hasKey") or 0) > 0
        else:
            unlock_precondition = {"agent.hasKey": 1}

        return [
            Rule(
                name=DoorScenarioBuilder.ASK_FOR_KEY,
                cost=1,
                precondition={"guard.hasKey": 1},
                effect={"agent.hasKey": 1, "guard.hasKey": 0},
            ),
            Rule(
                name=DoorScenarioBuilder.UNLOCK_DOOR,
                cost=1,
                precondition=unlock_precondition,
                effect={"door.isLocked": 0},
            ),
        ]

    @staticmethod
    def create_scenario(use_predicate: bool = False) -> Scenario:
        return Scenario(
            name="opening door",
            fragments=DoorScenarioBuilder.create_fragments(),
            rules=DoorScenarioBuilder.create_rules(use_predicate),
            goal={"door.isLocked": 0},
            max_passes=10,
        )


# ============================================================================
# River Crossing
# ============================================================================


class RiverCrossingBuilder:
    """
    Builder for the goat, cabbage and wolf river crossing puzzle.

    The boat carries at most one passenger. A passenger on board has location
    "boat" and is recorded in ``boat.cargo``. The boat may not leave while the
    goat shares a bank with the wolf or with the cabbage.

    All rules use procedural effects, so each one charges its own cost.
    """

    PASSENGERS = ("goat", "cabbage", "wolf")
    CROSS = "[cross]"

    @staticmethod
    def flip_location(location: str) -> str:
        return "left" if location == "right" else "right"

    @staticmethod
    def create_fragments() -> List[FactMapping]:
        return [
            {
                "goat.location": "left",
                "cabbage.location": "left",
                "wolf.location": "left",
                "boat.location": "left",
                "boat.cargo": None,
            }
        ]

    @staticmethod
    def create_embark_rule(passenger: str, cost: float = 1) -> Rule:
        """Passenger boards if on the boat's bank and the boat is empty."""
        name = f"[embark-{passenger}]"
        location_key = f"{passenger}.location"

        def can_embark(state: FactState) -> bool:
            return state[location_key] == state["boat.location"] and not state["boat.cargo"]

        def embark(state: FactState) -> None:
            state[location_key] = "boat"
            state["boat.cargo"] = passenger
            charge(state, name, cost)

        return Rule(name=name, cost=cost, precondition=can_embark, effect=embark)

    @staticmethod
    def create_cross_rule(cost: float = 1) -> Rule:
        """Boat crosses, unloading its cargo (if any) on the far bank."""
        flip = RiverCrossingBuilder.flip_location

        def can_cross(state: FactState) -> bool:
            # Goat must not stay behind with wolf or cabbage
            if state["goat.location"] == state["wolf.location"]:
                return False
            if state["goat.location"] == state["cabbage.location"]:
                return False
            return True

        def cross(state: FactState) -> None:
            destination = flip(state["boat.location"])
            passenger = state["boat.cargo"]
            if passenger:
                state[f"{passenger}.location"] = destination
            state["boat.location"] = destination
            state["boat.cargo"] = None
            charge(state, RiverCrossingBuilder.CROSS, cost)

        return Rule(
            name=RiverCrossingBuilder.CROSS,
            cost=cost,
            precondition=can_cross,
            effect=cross,
        )

    @staticmethod
    def create_rules() -> List[Rule]:
        rules = [
            RiverCrossingBuilder.create_embark_rule(passenger)
            for passenger in RiverCrossingBuilder.PASSENGERS
        ]
        rules.append(RiverCrossingBuilder.create_cross_rule())
        return rules

    @staticmethod
    def is_safe_state(state: Mapping[str, Any]) -> bool:
        """
        Check the bank the boat is away from.

        Returns False if the goat is left there with the wolf or the cabbage.
        """
        away = RiverCrossingBuilder.flip_location(state["boat.location"])
        goat_away = state["goat.location"] == away

        if goat_away and state["wolf.location"] == away:
            return False
        if goat_away and state["cabbage.location"] == away:
            return False
        return True

    @staticmethod
    def create_scenario() -> Scenario:
        """
        Initial: everything on the left bank, boat empty
        Goal: goat, cabbage and wolf on the right bank
        """
        goal: Dict[str, Any] = {
            f"{passenger}.location": "right"
            for passenger in RiverCrossingBuilder.PASSENGERS
        }
        return Scenario(
            name="goat, cabbage and wolf problem",
            fragments=RiverCrossingBuilder.create_fragments(),
            rules=RiverCrossingBuilder.create_rules(),
            goal=goal,
            max_passes=20,
        )


SCENARIO_BUILDERS: Dict[str, Callable[[], Scenario]] = {
    "door": DoorScenarioBuilder.create_scenario,
    "river": RiverCrossingBuilder.create_scenario,
}
