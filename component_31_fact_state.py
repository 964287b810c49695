"""
Component 31: Fact State

Layered world states for the forward planner:
- FactState: one copy-on-write layer of domain facts plus search bookkeeping
- StateArena: the append-only visited collection of one planning call
- merge_fragments / lookup / matches / derive_child primitives

Each state stores only the facts it overrides. Reading a key that the layer
does not define falls back to the parent layer, recursively up to the root.
Parents are addressed by their index in the arena, never by object reference.

Metadata (balance, age, last_rule_name, open) lives in dedicated attributes,
so fact comparisons never need to filter bookkeeping names.

Author: Planner Development Team
Date: 2026-10-18
"""

from dataclasses import dataclass, field
from typing import (
    Any,
    Dict,
    ItemsView,
    Iterable,
    Iterator,
    KeysView,
    List,
    Mapping,
    Optional,
    Union,
)

from cachetools import LRUCache

from common.constants import DEFAULT_RESOLVE_CACHE_SIZE, RESERVED_FACT_KEYS
from component_15_logging_config import get_logger
from planner_exceptions import InvalidFactError, StateArenaError

logger = get_logger(__name__)

FactValue = Union[int, float, str, bool, None]
FactMapping = Mapping[str, FactValue]

_MISSING = object()


def check_fact_keys(mapping: Mapping[Any, Any], source: str = "fragment") -> Dict[str, FactValue]:
    """
    Validate fact keys and return a plain dict copy.

    Raises:
        InvalidFactError: Non-string key or reserved metadata name
    """
    checked: Dict[str, FactValue] = {}
    for key, value in mapping.items():
        if not isinstance(key, str):
            raise InvalidFactError(
                f"Fact keys must be strings ({source})", fact_key=key
            )
        if key in RESERVED_FACT_KEYS:
            raise InvalidFactError(
                f"'{key}' is reserved for state metadata ({source})", fact_key=key
            )
        checked[key] = value
    return checked


def merge_fragments(fragments: Iterable[FactMapping]) -> Dict[str, FactValue]:
    """
    Merge initial fact fragments left to right; later fragments win.

    Example:
        merge_fragments([{"a": 1}, {"a": 2, "b": 3}]) == {"a": 2, "b": 3}
    """
    merged: Dict[str, FactValue] = {}
    for fragment in fragments:
        merged.update(check_fact_keys(fragment, source="initial fragment"))
    return merged


# ============================================================================
# State Representation
# ============================================================================


@dataclass(eq=False)
class FactState:
    """
    One layer of the world state.

    Attributes:
        facts: Facts overridden by this layer
        arena: Arena the state belongs to (parent lookups go through it)
        parent_index: Arena index of the parent, None for the root
        balance: Cumulative cost along the derivation path (may be negative)
        age: Number of rule applications since the root
        last_rule_name: Rule that produced this state, None on the root
        open: Still eligible for expansion in the next pass
        index: Position in the arena once accepted, None for a candidate
    """

    facts: Dict[str, FactValue] = field(default_factory=dict)
    arena: Optional["StateArena"] = field(default=None, repr=False)
    parent_index: Optional[int] = None
    balance: float = 0
    age: int = 0
    last_rule_name: Optional[str] = None
    open: bool = False
    index: Optional[int] = None

    # --- read access (predicates, goal tests, callers) ---

    def __getitem__(self, key: str) -> FactValue:
        value = lookup(self, key, _MISSING)
        if value is _MISSING:
            raise KeyError(key)
        return value

    def get(self, key: str, default: Any = None) -> Any:
        return lookup(self, key, default)

    def __contains__(self, key: object) -> bool:
        return lookup(self, key, _MISSING) is not _MISSING  # type: ignore[arg-type]

    def keys(self) -> KeysView:
        return self._view().keys()

    def items(self) -> ItemsView:
        return self._view().items()

    def to_dict(self) -> Dict[str, FactValue]:
        """Fully resolved facts as a new dict."""
        return dict(self._view())

    def _view(self) -> Dict[str, FactValue]:
        if self.arena is None:
            return self.facts
        return self.arena._resolved_view(self)

    # --- write access (procedural effects on a fresh candidate) ---

    def __setitem__(self, key: str, value: FactValue) -> None:
        if self.index is not None:
            raise StateArenaError(
                "Accepted states are immutable",
                context={"index": self.index, "key": key},
            )
        check_fact_keys({key: value}, source="state write")
        self.facts[key] = value

    # --- derivation chain ---

    @property
    def parent(self) -> Optional["FactState"]:
        if self.arena is None:
            return None
        return self.arena.parent_of(self)

    @property
    def is_root(self) -> bool:
        return self.parent_index is None

    def snapshot(self) -> Dict[str, Any]:
        """JSON-friendly view: resolved facts plus bookkeeping."""
        return {
            "facts": self.to_dict(),
            "balance": self.balance,
            "age": self.age,
            "last_rule_name": self.last_rule_name,
            "index": self.index,
            "parent_index": self.parent_index,
        }


# ============================================================================
# Visited Collection
# ============================================================================


class StateArena:
    """
    Append-only store of the states accepted during one planning call.

    States refer to their parent by index into ``states``. Resolved fact views
    of accepted states are memoised in an LRU cache; accepted states never
    change their facts, so cached views stay valid.
    """

    def __init__(self, resolve_cache_size: int = DEFAULT_RESOLVE_CACHE_SIZE):
        self.states: List[FactState] = []
        self._resolved: LRUCache = LRUCache(maxsize=resolve_cache_size)

    def __len__(self) -> int:
        return len(self.states)

    def __iter__(self) -> Iterator[FactState]:
        return iter(self.states)

    def __getitem__(self, index: int) -> FactState:
        return self.states[index]

    def create_root(self, fragments: Iterable[FactMapping]) -> FactState:
        """Merge fragments into the root state, mark it open and store it."""
        if self.states:
            raise StateArenaError(
                "Arena already has a root", context={"size": len(self.states)}
            )
        root = FactState(facts=merge_fragments(fragments), arena=self, open=True)
        self.append(root)
        return root

    def append(self, state: FactState) -> int:
        """Accept a state into the arena and return its index."""
        if state.index is not None:
            raise StateArenaError(
                "State is already stored", context={"index": state.index}
            )
        if state.arena is not None and state.arena is not self:
            raise StateArenaError("State belongs to a different arena")
        state.arena = self
        state.index = len(self.states)
        self.states.append(state)
        return state.index

    def parent_of(self, state: FactState) -> Optional[FactState]:
        if state.parent_index is None:
            return None
        return self.states[state.parent_index]

    def lookup(self, state: FactState, key: str, default: Any = None) -> Any:
        """Resolve ``key`` by walking the parent chain by index."""
        node: Optional[FactState] = state
        while node is not None:
            if key in node.facts:
                return node.facts[key]
            node = self.parent_of(node)
        return default

    def resolve(self, state: FactState) -> Dict[str, FactValue]:
        """Flattened facts of ``state`` as a new dict."""
        return dict(self._resolved_view(state))

    def _resolved_view(self, state: FactState) -> Dict[str, FactValue]:
        # Shared dict; callers must not mutate it
        if state.index is not None:
            cached = self._resolved.get(state.index)
            if cached is not None:
                return cached

        chain: List[FactState] = []
        base: Dict[str, FactValue] = {}
        node: Optional[FactState] = state
        while node is not None:
            if node is not state and node.index is not None:
                cached = self._resolved.get(node.index)
                if cached is not None:
                    base = cached
                    break
            chain.append(node)
            node = self.parent_of(node)

        view = dict(base)
        for layer in reversed(chain):
            view.update(layer.facts)

        if state.index is not None:
            self._resolved[state.index] = view
        return view


# ============================================================================
# Primitives
# ============================================================================


def lookup(state: FactState, key: str, default: Any = None) -> Any:
    """Value of ``key`` in ``state``, falling back through the parent chain."""
    if state.arena is None:
        return state.facts.get(key, default)
    return state.arena.lookup(state, key, default)


def matches(pattern: Union[FactMapping, FactState], state: FactState) -> bool:
    """
    True iff every key of ``pattern`` has an equal value in ``state``.

    ``pattern`` may be a partial fact mapping (preconditions, goals) or a
    visited FactState, whose resolved facts are compared (dominance checks).
    Keys absent from ``state`` read as None; extra keys in ``state`` are ignored.
    """
    for key, value in pattern.items():
        if lookup(state, key) != value:
            return False
    return True


def derive_child(parent: FactState, patch: Optional[FactMapping] = None) -> FactState:
    """
    Create a new layer over ``parent``.

    The child inherits the parent's bookkeeping (balance, age, last_rule_name)
    and starts closed; the search engine opens it once the effect is applied.
    """
    if parent.arena is None or parent.index is None:
        raise StateArenaError("Cannot derive from a state outside an arena")

    child = FactState(
        facts={},
        arena=parent.arena,
        parent_index=parent.index,
        balance=parent.balance,
        age=parent.age,
        last_rule_name=parent.last_rule_name,
    )
    if patch:
        child.facts.update(check_fact_keys(patch, source="patch"))
    return child
