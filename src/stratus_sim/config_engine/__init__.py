"""Config Engine - apply configuration blocks to the simulated switch.

Blocks are plain EOS-style configuration text, typically produced by the
intent client:

    interface Ethernet2
    description Storage
    switchport access vlan 30
    exit

Usage:
    from stratus_sim.config_engine import ConfigApplier

    applier = ConfigApplier(state)
    result = applier.apply(block)
    print(result.summary())
"""

from .applier import ConfigApplier, apply_config_block
from .parser import ConfigParser, parse_vlan_id
from .schema import (
    ApplyResult,
    Directive,
    DirectiveKind,
    InContext,
    InterfaceContext,
    NoContext,
)

__all__ = [
    # Applier
    "ConfigApplier",
    "apply_config_block",
    # Parser
    "ConfigParser",
    "parse_vlan_id",
    # Schema classes
    "ApplyResult",
    "Directive",
    "DirectiveKind",
    "InContext",
    "InterfaceContext",
    "NoContext",
]
