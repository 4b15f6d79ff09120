"""Config Block Applier - folds a configuration block into the device model.

A block is evaluated as a small state machine over one piece of session
state, the interface context:

    NoContext --interface <known>--> InContext(id)
    InContext --interface <known>--> InContext(other id)
    InContext --exit--> NoContext
    *         --interface <unknown>--> unchanged

Contextual directives (shutdown, no shutdown, description, switchport access
vlan) act on the interface in context and are no-ops otherwise. The context
is reset at the start of every block.

All changes are staged against a private working copy and committed with a
single ``DeviceState.apply`` call, so callers never observe half a block.
"""
import logging
from dataclasses import replace
from typing import Optional

from ..device.state import (
    DeviceState,
    Interface,
    InterfaceStatus,
    LogEntry,
    Severity,
    StateUpdate,
    new_log_entry,
)
from ..utils.audit_log import ChangeTracker
from ..utils.logging_config import timed_section_sync
from .parser import ConfigParser
from .schema import (
    ApplyResult,
    Directive,
    DirectiveKind,
    InContext,
    InterfaceContext,
    NoContext,
)

logger = logging.getLogger(__name__)

CONFIG_AGENT = "ConfigAgent"


class _WorkingCopy:
    """Private staging area for one apply pass."""

    def __init__(self, state: DeviceState):
        self._state = state
        self.interfaces: dict[str, Interface] = {}
        self.vlans: list[int] = []
        self.logs: list[LogEntry] = []
        self.changed: list[str] = []

    def current(self, interface_id: str) -> Interface:
        if interface_id in self.interfaces:
            return self.interfaces[interface_id]
        return self._state.get_interface(interface_id)

    def put(self, iface: Interface) -> None:
        self.interfaces[iface.id] = iface
        if iface.id not in self.changed:
            self.changed.append(iface.id)

    def log(self, severity: Severity, message: str) -> None:
        self.logs.append(new_log_entry(severity, CONFIG_AGENT, message))

    def to_update(self) -> StateUpdate:
        return StateUpdate(
            interfaces=dict(self.interfaces),
            vlans=list(self.vlans),
            logs=list(self.logs),
        )


class ConfigApplier:
    """
    Apply configuration blocks to a device state.

    Usage:
        applier = ConfigApplier(state)
        result = applier.apply("interface Ethernet2\\nswitchport access vlan 30\\nexit")
    """

    def __init__(
        self,
        state: DeviceState,
        tracker: Optional[ChangeTracker] = None,
    ):
        """
        Initialize the applier.

        Args:
            state: Device state to mutate
            tracker: Audit tracker; each apply is recorded when given
        """
        self.state = state
        self.tracker = tracker
        self.parser = ConfigParser()

    def apply(
        self,
        block: str,
        source: str = "operator",
        intent: Optional[str] = None,
    ) -> ApplyResult:
        """
        Fold a configuration block into the device state.

        Never raises for any block text. Unknown interfaces, unknown lines
        and contextual directives outside an interface context are ignored.

        Args:
            block: Configuration text, one statement per line
            source: Who produced the block, for the audit trail
            intent: Operator intent the block was generated from, if any

        Returns:
            ApplyResult describing what changed
        """
        with timed_section_sync("config_apply", hostname=self.state.hostname):
            directives = self.parser.parse(block)
            result = ApplyResult(lines=len(directives))
            work = _WorkingCopy(self.state)
            vlans_before = set(self.state.vlans)

            context: InterfaceContext = NoContext()
            for directive in directives:
                context = self._step(context, directive, work, result)

            self.state.apply(work.to_update())

            result.interfaces_changed = [self.state.get_interface(i).name for i in work.changed]
            result.vlans_created = sorted(set(work.vlans) - vlans_before)

        logger.info(f"Applied config block from {source}: {result.summary()}")
        if self.tracker is not None:
            self.tracker.log_change(
                operation="intent_apply" if intent else "config_apply",
                source=source,
                lines=result.lines,
                directives_applied=result.directives_applied,
                interfaces_changed=result.interfaces_changed,
                vlans_created=result.vlans_created,
                block=block,
                intent=intent,
                hostname=self.state.hostname,
            )
        return result

    def _step(
        self,
        context: InterfaceContext,
        directive: Directive,
        work: _WorkingCopy,
        result: ApplyResult,
    ) -> InterfaceContext:
        """Apply one directive and return the next context."""
        if directive.kind == DirectiveKind.INTERFACE:
            iface = self.state.find_interface(directive.argument)
            if iface is None:
                logger.debug(
                    f"Line {directive.line_no}: unknown interface {directive.argument!r}, context unchanged"
                )
                result.ignored_lines += 1
                return context
            return InContext(iface.id)

        if directive.kind == DirectiveKind.EXIT:
            return NoContext()

        if directive.contextual:
            if isinstance(context, InContext):
                self._apply_contextual(context.interface_id, directive, work)
                result.directives_applied += 1
            else:
                logger.debug(f"Line {directive.line_no}: {directive.line!r} outside interface context")
                result.ignored_lines += 1
            return context

        if directive.kind == DirectiveKind.IGNORED:
            logger.debug(f"Line {directive.line_no}: ignoring {directive.line!r}")
            result.ignored_lines += 1
        return context

    def _apply_contextual(self, interface_id: str, directive: Directive, work: _WorkingCopy) -> None:
        iface = work.current(interface_id)

        if directive.kind == DirectiveKind.SHUTDOWN:
            work.put(replace(iface, status=InterfaceStatus.ADMIN_DOWN))
            work.log(Severity.WARNING, f"{iface.name} disabled via AI Agent")

        elif directive.kind == DirectiveKind.NO_SHUTDOWN:
            work.put(replace(iface, status=InterfaceStatus.UP))
            work.log(Severity.INFO, f"{iface.name} enabled via AI Agent")

        elif directive.kind == DirectiveKind.DESCRIPTION:
            work.put(replace(iface, description=directive.argument or ""))

        elif directive.kind == DirectiveKind.ACCESS_VLAN:
            work.put(replace(iface, vlan=directive.vlan_id))
            if directive.vlan_id > 0 and directive.vlan_id not in work.vlans:
                work.vlans.append(directive.vlan_id)


def apply_config_block(block: str, state: DeviceState) -> None:
    """Fold a configuration block into ``state``. Mutation only."""
    ConfigApplier(state).apply(block)
