"""Shared fixtures for the stratus_sim test suite."""
import pytest

from stratus_sim.device import create_default_state


@pytest.fixture
def state():
    """Fresh device state built from the built-in seed."""
    return create_default_state()
