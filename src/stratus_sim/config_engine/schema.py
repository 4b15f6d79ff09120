"""Schema definitions for the Config Engine.

Defines the directives a configuration block is made of, the interface
context states of the applier and the result of an apply pass.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union


# Fallback when a VLAN token cannot be parsed
DEFAULT_ACCESS_VLAN = 1


class DirectiveKind(str, Enum):
    """Kind of a single configuration line."""
    INTERFACE = "interface"         # interface <name>
    SHUTDOWN = "shutdown"           # shutdown
    NO_SHUTDOWN = "no_shutdown"     # no shutdown
    DESCRIPTION = "description"     # description <text>
    ACCESS_VLAN = "access_vlan"     # switchport access vlan <id>
    EXIT = "exit"                   # exit
    COMMENT = "comment"             # ! ...
    IGNORED = "ignored"             # anything else


# Directives that only take effect inside an interface context
CONTEXTUAL_KINDS = frozenset({
    DirectiveKind.SHUTDOWN,
    DirectiveKind.NO_SHUTDOWN,
    DirectiveKind.DESCRIPTION,
    DirectiveKind.ACCESS_VLAN,
})


@dataclass
class Directive:
    """A classified configuration line."""
    kind: DirectiveKind
    line: str
    line_no: int = 0
    argument: Optional[str] = None  # interface ref or description text
    vlan_id: Optional[int] = None

    @property
    def contextual(self) -> bool:
        return self.kind in CONTEXTUAL_KINDS


# --- Interface context ---

@dataclass(frozen=True)
class NoContext:
    """No interface selected; contextual directives are no-ops."""


@dataclass(frozen=True)
class InContext:
    """Contextual directives apply to ``interface_id``."""
    interface_id: str


InterfaceContext = Union[NoContext, InContext]


# --- Apply results ---

@dataclass
class ApplyResult:
    """Result of folding one configuration block into the device."""
    lines: int = 0
    directives_applied: int = 0
    ignored_lines: int = 0
    interfaces_changed: list[str] = field(default_factory=list)
    vlans_created: list[int] = field(default_factory=list)

    @property
    def no_change(self) -> bool:
        """Check if the block changed anything."""
        return self.directives_applied == 0

    def summary(self) -> str:
        if self.no_change:
            return "No changes applied"
        parts = [f"{self.directives_applied} directive(s) applied"]
        if self.interfaces_changed:
            parts.append(f"interfaces: {', '.join(self.interfaces_changed)}")
        if self.vlans_created:
            parts.append(f"new VLANs: {', '.join(str(v) for v in self.vlans_created)}")
        return "; ".join(parts)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "lines": self.lines,
            "directives_applied": self.directives_applied,
            "ignored_lines": self.ignored_lines,
            "interfaces_changed": self.interfaces_changed,
            "vlans_created": self.vlans_created,
        }
