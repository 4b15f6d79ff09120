"""Command interpreter for single lines of operator input.

Each line is interpreted on its own: there is no configuration mode and no
interface context between calls. Errors come back as text starting with
``% `` and an empty string means the command succeeded silently.
"""
import logging
from dataclasses import replace
from typing import Callable

from ..device.state import DeviceState, InterfaceStatus, Severity, StateUpdate, new_log_entry
from ..utils.logging_config import timed

logger = logging.getLogger(__name__)

VERSION_BANNER = "Stratus EOS v4.32.1F (Simulated)"

INTERFACES_HEADER = (
    "Interface       Status      Protocol    Description\n"
    "--------------  ----------  ----------  -------------------------"
)

HELP_TEXT = """
Available Commands:
  show interfaces      Show interface status
  show vlan           Show active VLANs
  show version        Show system version
  show logging        Show recent logs
  shutdown <int>      Disable an interface (e.g., shutdown et1)
  no shutdown <int>   Enable an interface
  hostname <name>     Set switch hostname
  ai <intent>         Use Gemini to generate config
  analyze             Summarize recent logs with Gemini
  clear               Clear screen
"""

INVALID_INPUT = "% Invalid input detected at marker"
INCOMPLETE_COMMAND = (
    "% Incomplete command. (Simulation Note: Use 'ai <intent>' for complex config changes)"
)

LOG_LINES_SHOWN = 10


class CommandInterpreter:
    """Interpret operator command lines against a device state."""

    def __init__(self, state: DeviceState):
        self.state = state
        self._commands: dict[str, Callable[[list[str]], str | None]] = {
            "show": self._cmd_show,
            "interface": self._cmd_interface,
            "int": self._cmd_interface,
            "shutdown": self._cmd_shutdown,
            "no": self._cmd_no,
            "hostname": self._cmd_hostname,
            "help": self._cmd_help,
            "?": self._cmd_help,
        }

    @timed("interpret")
    def handle(self, line: str) -> str:
        """Interpret one line and return the text to display."""
        parts = (line or "").split()
        if not parts:
            return ""

        cmd = parts[0].lower()
        args = parts[1:]
        logger.debug(f"interpret: cmd={cmd!r} args={args}")

        handler = self._commands.get(cmd)
        if handler is not None:
            output = handler(args)
            if output is not None:
                return output

        return f"% Unknown command: {cmd}"

    # === show ===

    def _cmd_show(self, args: list[str]) -> str:
        target = args[0] if args else None

        if target == "interfaces":
            return self.render_interfaces()
        if target == "vlan":
            return f"VLANs: {', '.join(str(v) for v in self.state.vlans)}"
        if target == "version":
            return VERSION_BANNER
        if target in ("log", "logging"):
            return "\n".join(e.render() for e in self.state.recent_logs(LOG_LINES_SHOWN))
        return INVALID_INPUT

    def render_interfaces(self) -> str:
        rows = []
        for iface in self.state.interfaces:
            status = iface.status.value.ljust(10)
            protocol = ("up" if iface.protocol_up else "down").ljust(10)
            rows.append(f"{iface.name.ljust(14)}  {status}  {protocol}  {iface.description}")
        return "\n".join([INTERFACES_HEADER] + rows)

    # === configuration ===

    def _cmd_interface(self, args: list[str]) -> str:
        return INCOMPLETE_COMMAND

    def _cmd_shutdown(self, args: list[str]) -> str:
        return self._set_status(
            args[0] if args else None,
            InterfaceStatus.ADMIN_DOWN,
            Severity.WARNING,
        )

    def _cmd_no(self, args: list[str]) -> str | None:
        if args[:1] != ["shutdown"]:
            return None
        return self._set_status(
            args[1] if len(args) > 1 else None,
            InterfaceStatus.UP,
            Severity.INFO,
        )

    def _set_status(self, ref: str | None, status: InterfaceStatus, severity: Severity) -> str:
        iface = self.state.find_interface(ref)
        if iface is None:
            # Unknown interfaces are a silent no-op
            logger.debug(f"No interface matches {ref!r}")
            return ""

        self.state.apply(StateUpdate(
            interfaces={iface.id: replace(iface, status=status)},
            logs=[new_log_entry(
                severity, "NbInterface", f"Interface {iface.name} changed state to {status.value}"
            )],
        ))
        return ""

    def _cmd_hostname(self, args: list[str]) -> str | None:
        if not args:
            return None
        self.state.apply(StateUpdate(
            hostname=args[0],
            logs=[new_log_entry(Severity.INFO, "System", f"Hostname changed to {args[0]}")],
        ))
        return ""

    def _cmd_help(self, args: list[str]) -> str:
        return HELP_TEXT


def interpret(line: str, state: DeviceState) -> str:
    """Interpret one line of operator input against ``state``."""
    return CommandInterpreter(state).handle(line)
