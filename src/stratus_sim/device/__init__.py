"""Device model for the simulated switch."""
from .state import (
    DeviceState,
    Interface,
    InterfaceStatus,
    LogEntry,
    Severity,
    StateUpdate,
    format_timestamp,
    new_log_entry,
)
from .seed import SeedError, create_default_state, load_seed, parse_seed

__all__ = [
    "DeviceState",
    "Interface",
    "InterfaceStatus",
    "LogEntry",
    "Severity",
    "StateUpdate",
    "format_timestamp",
    "new_log_entry",
    "SeedError",
    "create_default_state",
    "load_seed",
    "parse_seed",
]
