"""
Component 31: Conditions, Effects and Rules

Two-variant tests and state transformers for the forward planner:
- Pattern / Predicate: declarative partial fact pattern, or arbitrary test
- Patch / Procedure: declarative fact patch, or arbitrary state writer
- Rule: named, costed transformer gated by a precondition

The same Condition shape serves as rule precondition and as planning goal.

Raw inputs are coerced when a rule is registered: a mapping becomes a
Pattern/Patch, a callable becomes a Predicate/Procedure. Anything else is
rejected immediately with InvalidRuleError. Metadata names inside a pattern
or patch are dropped with a warning.

Author: Planner Development Team
Date: 2026-10-18
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional, Union

from common.constants import RESERVED_FACT_KEYS
from component_15_logging_config import get_logger
from component_31_fact_state import FactState, FactValue, check_fact_keys, matches
from planner_exceptions import InvalidFactError, InvalidRuleError

logger = get_logger(__name__)


def _checked_facts(facts: Mapping[Any, Any], kind: str) -> Dict[str, FactValue]:
    """
    Copy a pattern or patch mapping without metadata names.

    Metadata lives in state attributes, so such keys are skipped with a warning.
    """
    if not isinstance(facts, Mapping):
        raise InvalidRuleError(
            f"{kind} expects a mapping, got {type(facts).__name__}"
        )
    domain_facts = {}
    for key, value in facts.items():
        if isinstance(key, str) and key in RESERVED_FACT_KEYS:
            logger.warning(
                f"{kind} ignores metadata name '{key}'", extra={"fact_key": key}
            )
            continue
        domain_facts[key] = value
    try:
        return check_fact_keys(domain_facts, source=kind.lower())
    except InvalidFactError as e:
        raise InvalidRuleError(
            f"{kind} uses an invalid fact key: {e.message}",
            context={"fact_key": e.context.get("fact_key")},
        ) from e


# ============================================================================
# Condition Variants
# ============================================================================


@dataclass
class Pattern:
    """Holds when every listed fact equals the candidate's resolved value."""

    facts: Dict[str, FactValue] = field(default_factory=dict)

    def __post_init__(self):
        self.facts = _checked_facts(self.facts, "Pattern")


@dataclass
class Predicate:
    """Holds when ``fn(state)`` is truthy."""

    fn: Callable[[FactState], bool]

    def __post_init__(self):
        if not callable(self.fn):
            raise InvalidRuleError("Predicate expects a callable")


Condition = Union[Pattern, Predicate]


# ============================================================================
# Effect Variants
# ============================================================================


@dataclass
class Patch:
    """Copies its facts into the new state; the engine updates bookkeeping."""

    facts: Dict[str, FactValue] = field(default_factory=dict)

    def __post_init__(self):
        self.facts = _checked_facts(self.facts, "Patch")


@dataclass
class Procedure:
    """
    Arbitrary writer ``fn(state)``.

    The procedure owns all bookkeeping: it must set last_rule_name, balance
    and age itself (see charge()). The engine performs no automatic update.
    """

    fn: Callable[[FactState], None]

    def __post_init__(self):
        if not callable(self.fn):
            raise InvalidRuleError("Procedure expects a callable")


Effect = Union[Patch, Procedure]


# ============================================================================
# Coercion
# ============================================================================


def as_condition(raw: Any, role: str = "condition") -> Condition:
    """Coerce a mapping or callable into a Condition variant."""
    if isinstance(raw, (Pattern, Predicate)):
        return raw
    if isinstance(raw, Mapping):
        return Pattern(dict(raw))
    if callable(raw):
        return Predicate(raw)
    raise InvalidRuleError(
        f"{role} must be a fact pattern (mapping) or a predicate (callable), "
        f"got {type(raw).__name__}"
    )


def as_effect(raw: Any) -> Effect:
    """Coerce a mapping or callable into an Effect variant."""
    if isinstance(raw, (Patch, Procedure)):
        return raw
    if isinstance(raw, Mapping):
        return Patch(dict(raw))
    if callable(raw):
        return Procedure(raw)
    raise InvalidRuleError(
        "effect must be a fact patch (mapping) or a procedure (callable), "
        f"got {type(raw).__name__}"
    )


# ============================================================================
# Evaluation
# ============================================================================


def holds(condition: Condition, state: FactState) -> bool:
    """Evaluate a precondition or goal against ``state``."""
    if isinstance(condition, Predicate):
        return bool(condition.fn(state))
    if isinstance(condition, Pattern):
        return matches(condition.facts, state)
    raise InvalidRuleError(
        f"Unsupported condition type: {type(condition).__name__}"
    )


def charge(state: FactState, rule_name: str, cost: Optional[float]) -> None:
    """Standard bookkeeping for one rule application."""
    state.last_rule_name = rule_name
    state.balance = (state.balance or 0) + (cost or 0)
    state.age = (state.age or 0) + 1


def apply_effect(
    effect: Effect, new_state: FactState, rule_name: str, cost: Optional[float]
) -> None:
    """Apply ``effect`` to a freshly derived state."""
    if isinstance(effect, Procedure):
        effect.fn(new_state)
        return
    if isinstance(effect, Patch):
        new_state.facts.update(effect.facts)
        charge(new_state, rule_name, cost)
        return
    raise InvalidRuleError(f"Unsupported effect type: {type(effect).__name__}")


# ============================================================================
# Rule
# ============================================================================


@dataclass
class Rule:
    """
    Named, costed state transformer.

    Attributes:
        name: Label recorded as last_rule_name on produced states
        cost: Added to balance by Patch effects (None counts as 0)
        precondition: Pattern/Predicate, or a raw mapping/callable
        effect: Patch/Procedure, or a raw mapping/callable
    """

    name: str
    cost: Optional[float]
    precondition: Condition
    effect: Effect

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name:
            raise InvalidRuleError(
                "Rule name must be a non-empty string", rule_name=repr(self.name)
            )

        if self.cost is None:
            self.cost = 0
        if isinstance(self.cost, bool) or not isinstance(self.cost, (int, float)):
            raise InvalidRuleError(
                f"Rule cost must be numeric, got {type(self.cost).__name__}",
                rule_name=self.name,
            )

        try:
            self.precondition = as_condition(self.precondition, role="precondition")
            self.effect = as_effect(self.effect)
        except InvalidRuleError as e:
            e.context["rule_name"] = self.name
            raise

        if self.cost < 0:
            logger.warning(
                f"Rule '{self.name}' has negative cost; dominance pruning compares "
                "balances and may discard paths through it",
                extra={"rule": self.name, "cost": self.cost},
            )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Rule":
        """
        Build a rule from a mapping.

        Accepts ``name``/``cost``/``precondition``/``effect`` as well as the
        older ``transName``/``preCond``/``postCond`` keys.
        """
        if not isinstance(data, Mapping):
            raise InvalidRuleError(
                f"Rule definition must be a mapping, got {type(data).__name__}"
            )
        name = data.get("name", data.get("transName"))
        precondition = data.get("precondition", data.get("preCond"))
        effect = data.get("effect", data.get("postCond"))

        if precondition is None:
            raise InvalidRuleError("Rule has no precondition", rule_name=name)
        if effect is None:
            raise InvalidRuleError("Rule has no effect", rule_name=name)

        return cls(
            name=name,
            cost=data.get("cost"),
            precondition=precondition,
            effect=effect,
        )


def as_rule(raw: Any) -> Rule:
    """Accept a Rule or a rule mapping."""
    if isinstance(raw, Rule):
        return raw
    return Rule.from_dict(raw)
