"""Shared fixtures: every test runs against its own registry and default config."""

import pytest

from correlated_uncertainty.config import PropagationConfig, set_config
from correlated_uncertainty.registry import VariableRegistry, set_default_registry


@pytest.fixture(autouse=True)
def registry():
    """Fresh default registry per test, restored afterwards."""
    fresh = VariableRegistry("test")
    previous = set_default_registry(fresh)
    previous_config = set_config(PropagationConfig())
    yield fresh
    set_default_registry(previous)
    set_config(previous_config)
