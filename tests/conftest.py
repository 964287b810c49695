"""
Shared pytest fixtures for the planner tests.
"""

import pytest

from planner_config import PlannerConfig, reset_config, set_config


@pytest.fixture(autouse=True)
def default_config(monkeypatch):
    """Fixture: every test starts from default settings, independent of the environment."""
    monkeypatch.delenv("PLANNER_CONFIG", raising=False)
    config = PlannerConfig()
    set_config(config)
    yield config
    reset_config()
