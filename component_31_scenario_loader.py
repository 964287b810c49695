"""
Component 31: Scenario Loader

Declarative planning scenarios in YAML. Only pattern preconditions and patch
effects can be expressed; procedural rules need the Python builders.

    name: opening door
    max_passes: 10
    facts:
      - {agent.hasKey: 0}
      - {guard.hasKey: 1, door.isLocked: 1}
    rules:
      - name: "[ask for key]"
        cost: 1
        precondition: {guard.hasKey: 1}
        effect: {agent.hasKey: 1, guard.hasKey: 0}
    goal: {door.isLocked: 0}

``facts`` may also be a single mapping. Rule entries accept the older
``transName``/``preCond``/``postCond`` keys.

Author: Planner Development Team
Date: 2026-10-18
"""

from pathlib import Path
from typing import Any, Dict, List, Union

import yaml

from common.constants import DEFAULT_MAX_PASSES
from component_15_logging_config import get_logger
from component_31_conditions import Rule
from component_31_domain_builders import Scenario
from planner_config import validate_pass_bound
from planner_exceptions import PlannerException, ScenarioLoadError, wrap_exception

logger = get_logger(__name__)

_REQUIRED_SECTIONS = ("facts", "rules", "goal")


def _fact_fragments(raw: Any, path: str) -> List[Dict[str, Any]]:
    if isinstance(raw, dict):
        return [raw]
    if isinstance(raw, list) and all(isinstance(item, dict) for item in raw):
        return list(raw)
    raise ScenarioLoadError(
        "'facts' must be a mapping or a list of mappings", file_path=path
    )


def scenario_from_dict(data: Dict[str, Any], source: str = "<dict>") -> Scenario:
    """
    Build a Scenario from parsed YAML data.

    Raises:
        ScenarioLoadError: Missing sections or invalid rules/goal/bound
    """
    if not isinstance(data, dict):
        raise ScenarioLoadError("Scenario must be a mapping", file_path=source)

    missing = [section for section in _REQUIRED_SECTIONS if section not in data]
    if missing:
        raise ScenarioLoadError(
            f"Scenario is missing sections: {', '.join(missing)}",
            file_path=source,
        )

    if not isinstance(data["rules"], list):
        raise ScenarioLoadError("'rules' must be a list", file_path=source)
    if not isinstance(data["goal"], dict):
        raise ScenarioLoadError("'goal' must be a mapping", file_path=source)

    try:
        fragments = _fact_fragments(data["facts"], source)
        rules = [Rule.from_dict(entry) for entry in data["rules"]]
        max_passes = validate_pass_bound(data.get("max_passes", DEFAULT_MAX_PASSES))
    except ScenarioLoadError:
        raise
    except PlannerException as e:
        raise wrap_exception(
            e, ScenarioLoadError, "Invalid scenario definition", file_path=source
        ) from e

    return Scenario(
        name=str(data.get("name", Path(source).stem)),
        fragments=fragments,
        rules=rules,
        goal=data["goal"],
        max_passes=max_passes,
    )


def load_scenario(path: Union[str, Path]) -> Scenario:
    """
    Load a scenario from a YAML file.

    Args:
        path: Path to the YAML file

    Returns:
        Scenario ready for solve()

    Raises:
        ScenarioLoadError: Missing/unreadable file, bad YAML or bad content
    """
    scenario_file = Path(path)
    if not scenario_file.exists():
        raise ScenarioLoadError(
            f"Scenario file not found: {scenario_file}", file_path=str(scenario_file)
        )

    try:
        with open(scenario_file, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise wrap_exception(
            e,
            ScenarioLoadError,
            "Scenario file could not be read",
            file_path=str(scenario_file),
        ) from e

    scenario = scenario_from_dict(data, source=str(scenario_file))
    logger.info(
        "Scenario loaded",
        extra={
            "scenario": scenario.name,
            "rules": len(scenario.rules),
            "max_passes": scenario.max_passes,
        },
    )
    return scenario
