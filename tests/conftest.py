"""Shared pytest fixtures for ImmutableBase tests."""

import pytest

from immutable_base.config import HydrationConfig, reset_config, set_config
from immutable_base.hydration.api import ValidationOrder
from immutable_base.hydration.schema import reset_registry


@pytest.fixture(autouse=True)
def clean_state():
    """Start every test with an empty schema registry and default configuration."""
    reset_registry()
    reset_config()
    yield
    reset_registry()
    reset_config()


@pytest.fixture
def root_first_config():
    """Install a configuration that validates root-most classes first."""
    config = HydrationConfig(validation_order=ValidationOrder.ROOT_FIRST)
    set_config(config)
    return config


@pytest.fixture
def pretty_json_config():
    """Install a configuration producing sorted, indented JSON."""
    config = HydrationConfig(json_sort_keys=True, json_indent=2)
    set_config(config)
    return config
