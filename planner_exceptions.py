"""
planner_exceptions.py

Central exception hierarchy for the forward planner.
Defines specialised exception classes for the different failure scenarios.

Exception hierarchy:
    PlannerException (base)
    ├── ConfigurationException
    │   ├── InvalidConfigError
    │   ├── InvalidRuleError
    │   └── InvalidFactError
    ├── StateException
    │   └── StateArenaError
    └── PlanningException
        ├── PlanValidationError
        └── ScenarioLoadError

Ordinary search outcomes never raise: exhausting the pass bound returns None.

Usage:
    from planner_exceptions import InvalidRuleError

    try:
        engine = ForwardSearchEngine(rules)
    except InvalidRuleError as e:
        logger.error(f"Rule rejected: {e}")
        logger.error(f"Context: {e.context}")
"""

from typing import Any, Dict, Optional


class PlannerException(Exception):
    """
    Base exception for all planner errors.

    All planner exceptions carry:
    - A readable message
    - Contextual information (dict)
    - The original exception, if one was wrapped
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.original_exception = original_exception

    def __str__(self) -> str:
        base_msg = self.message

        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg += f" | Context: {context_str}"

        if self.original_exception:
            base_msg += f" | Caused by: {type(self.original_exception).__name__}: {str(self.original_exception)}"

        return base_msg

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message!r}, context={self.context!r})"


# ============================================================================
# CONFIGURATION EXCEPTIONS
# ============================================================================


class ConfigurationException(PlannerException):
    """Base exception for configuration and registration errors."""


class InvalidConfigError(ConfigurationException):
    """
    Invalid planner configuration.

    Causes:
    - Unreadable or malformed YAML config file
    - Values of the wrong type (e.g. non-integer pass bound)
    - Negative pass bound or cache size
    """


class InvalidRuleError(ConfigurationException):
    """
    A rule could not be registered.

    Causes:
    - Precondition is neither a pattern mapping nor a predicate callable
    - Effect is neither a patch mapping nor a procedure callable
    - Missing or empty rule name, non-numeric cost
    - Pattern or patch keys that collide with state metadata
    """

    def __init__(self, message: str, rule_name: Optional[str] = None, **kwargs):
        context = kwargs.get("context", {})
        context.setdefault("rule_name", rule_name)
        kwargs["context"] = context
        super().__init__(message, **kwargs)


class InvalidFactError(ConfigurationException):
    """
    Fact fragment rejected.

    Causes:
    - Non-string fact key
    - Fact key that collides with state metadata (balance, age, ...)
    """

    def __init__(self, message: str, fact_key: Optional[Any] = None, **kwargs):
        context = kwargs.get("context", {})
        context.setdefault("fact_key", fact_key)
        kwargs["context"] = context
        super().__init__(message, **kwargs)


# ============================================================================
# STATE EXCEPTIONS
# ============================================================================


class StateException(PlannerException):
    """Base exception for fact state errors."""


class StateArenaError(StateException):
    """
    Invalid use of the state arena.

    Causes:
    - Deriving a child from a state that was never accepted into an arena
    - Appending a state that already belongs to an arena
    """


# ============================================================================
# PLANNING EXCEPTIONS
# ============================================================================


class PlanningException(PlannerException):
    """Base exception for plan replay and scenario errors."""


class PlanValidationError(PlanningException):
    """
    Replaying a plan failed.

    Causes:
    - Plan names a rule that is not registered
    - A rule's precondition does not hold at its step
    """

    def __init__(
        self,
        message: str,
        rule_name: Optional[str] = None,
        step_index: Optional[int] = None,
        **kwargs,
    ):
        context = kwargs.get("context", {})
        context.setdefault("rule_name", rule_name)
        context.setdefault("step_index", step_index)
        kwargs["context"] = context
        super().__init__(message, **kwargs)


class ScenarioLoadError(PlanningException):
    """
    A scenario file could not be loaded.

    Causes:
    - File not found or not readable
    - YAML syntax error
    - Missing sections (facts, rules, goal)
    """

    def __init__(self, message: str, file_path: Optional[str] = None, **kwargs):
        context = kwargs.get("context", {})
        context.setdefault("file_path", file_path)
        kwargs["context"] = context
        super().__init__(message, **kwargs)


# ============================================================================
# UTILITY FUNCTIONS
# ============================================================================


def wrap_exception(
    exc: Exception,
    planner_exception_class: type[PlannerException],
    message: str,
    **context,
) -> PlannerException:
    """
    Convert a generic exception into a planner exception.

    Args:
        exc: Original exception
        planner_exception_class: Target class (e.g. InvalidConfigError)
        message: Custom error message
        **context: Additional context

    Returns:
        Planner exception chained to the original

    Example:
        try:
            data = yaml.safe_load(handle)
        except yaml.YAMLError as e:
            raise wrap_exception(e, InvalidConfigError, "Config unreadable", path=path)
    """
    return planner_exception_class(
        message=message, context=context, original_exception=exc
    )


def get_user_friendly_message(exc: Exception, include_details: bool = False) -> str:
    """
    Build a user-facing message for an exception.

    Args:
        exc: Exception object
        include_details: Append the technical message and context (debug mode)

    Returns:
        Short message suitable for console output
    """
    friendly_messages = {
        InvalidConfigError: "[ERROR] Invalid planner configuration. Please check the settings.",
        InvalidRuleError: "[ERROR] A rule is malformed and could not be registered.",
        InvalidFactError: "[ERROR] A fact fragment uses a reserved or invalid key.",
        StateArenaError: "[ERROR] Internal state bookkeeping failed.",
        PlanValidationError: "[ERROR] The plan could not be replayed from the initial state.",
        ScenarioLoadError: "[ERROR] The scenario file could not be loaded.",
    }

    default_message = "[ERROR] An unexpected error occurred."

    user_message = friendly_messages.get(type(exc), default_message)

    if isinstance(exc, InvalidRuleError) and exc.context.get("rule_name"):
        user_message = (
            f"[ERROR] Rule '{exc.context['rule_name']}' is malformed "
            "and could not be registered."
        )

    elif isinstance(exc, PlanValidationError) and exc.context.get("step_index") is not None:
        user_message = (
            f"[ERROR] Plan step {exc.context['step_index']} "
            f"({exc.context.get('rule_name', '?')}) could not be applied."
        )

    if include_details and isinstance(exc, PlannerException):
        user_message += f"\n\nDetails: {exc.message}"
        if exc.context:
            user_message += f"\n   Context: {exc.context}"

    return user_message
