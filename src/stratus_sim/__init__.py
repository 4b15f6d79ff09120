"""Stratus switch simulator: command interpreter and config applier over an in-memory device."""
from .cli.interpreter import interpret
from .config_engine.applier import apply_config_block
from .device.seed import create_default_state
from .device.state import DeviceState

__version__ = "0.1.0"

__all__ = ["DeviceState", "apply_config_block", "create_default_state", "interpret"]
