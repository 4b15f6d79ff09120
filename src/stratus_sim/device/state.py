"""In-memory model of the simulated switch.

The device state is the single aggregate root: hostname, interfaces, the VLAN
set and the append-only log buffer. Interfaces are replaced by id, never added
or removed, and every mutation goes through ``DeviceState.apply`` or
``DeviceState.append_log``.
"""
import copy
import logging
import threading
import uuid
from dataclasses import dataclass, field, asdict, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable, Optional

logger = logging.getLogger(__name__)


class InterfaceStatus(str, Enum):
    """Operational/administrative state of an interface."""
    UP = "up"
    DOWN = "down"
    ADMIN_DOWN = "admin_down"


class Severity(str, Enum):
    """Severity of a device log entry."""
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


# Device severities mirrored onto the process logger
_LOG_LEVELS = {
    Severity.INFO: logging.INFO,
    Severity.WARNING: logging.WARNING,
    Severity.ERROR: logging.ERROR,
    Severity.CRITICAL: logging.CRITICAL,
}


def format_timestamp(ts: datetime) -> str:
    """Render an instant as ISO-8601 UTC with milliseconds, e.g. 2025-01-01T10:00:00.000Z."""
    return ts.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class Interface:
    """A switch port. Identity is ``id``; ``name`` is the display form."""
    id: str
    name: str
    status: InterfaceStatus = InterfaceStatus.DOWN
    vlan: int = 1
    description: str = ""
    ip_address: Optional[str] = None
    mtu: int = 1500
    speed: int = 1000  # Mbps
    rx_rate: float = 0.0  # Mbps, simulated
    tx_rate: float = 0.0  # Mbps, simulated
    errors: int = 0

    @property
    def protocol_up(self) -> bool:
        return self.status == InterfaceStatus.UP

    def matches(self, ref: str) -> bool:
        """True if ``ref`` names this interface by name or id, ignoring case."""
        ref = ref.lower()
        return self.name.lower() == ref or self.id.lower() == ref


@dataclass
class LogEntry:
    """One immutable device log event."""
    id: str
    timestamp: datetime
    severity: Severity
    process: str
    message: str

    def render(self) -> str:
        return f"{format_timestamp(self.timestamp)} [{self.process}] {self.severity.value}: {self.message}"


def new_log_entry(severity: Severity, process: str, message: str) -> LogEntry:
    """Create a log entry with a fresh id and the current UTC instant."""
    return LogEntry(
        id=uuid.uuid4().hex[:12],
        timestamp=datetime.now(timezone.utc),
        severity=Severity(severity),
        process=process,
        message=message,
    )


@dataclass
class StateUpdate:
    """A batch of changes committed to the device in one step.

    ``interfaces`` maps interface id to its replacement; unknown ids are
    ignored. ``vlans`` are ids to add to the VLAN set.
    """
    hostname: Optional[str] = None
    interfaces: dict[str, Interface] = field(default_factory=dict)
    vlans: list[int] = field(default_factory=list)
    logs: list[LogEntry] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return (
            self.hostname is None and
            not self.interfaces and
            not self.vlans and
            not self.logs
        )


class DeviceState:
    """Mutable device model shared by the interpreter, applier and telemetry."""

    def __init__(
        self,
        hostname: str,
        interfaces: Iterable[Interface],
        vlans: Iterable[int] = (),
        logs: Iterable[LogEntry] = (),
    ):
        self._lock = threading.RLock()
        self._hostname = hostname
        self._interfaces: list[Interface] = list(interfaces)
        ids = [i.id for i in self._interfaces]
        if len(ids) != len(set(ids)):
            raise ValueError(f"Duplicate interface ids: {ids}")
        self._vlans: list[int] = _reconcile_vlans(vlans, self._interfaces)
        self._logs: list[LogEntry] = list(logs)

    # === Read access ===

    @property
    def hostname(self) -> str:
        return self._hostname

    @property
    def interfaces(self) -> tuple[Interface, ...]:
        return tuple(self._interfaces)

    @property
    def vlans(self) -> tuple[int, ...]:
        return tuple(self._vlans)

    @property
    def logs(self) -> tuple[LogEntry, ...]:
        return tuple(self._logs)

    def find_interface(self, ref: Optional[str]) -> Optional[Interface]:
        """Resolve an interface by name or id, case-insensitively."""
        if not ref:
            return None
        for iface in self._interfaces:
            if iface.matches(ref):
                return iface
        return None

    def get_interface(self, interface_id: str) -> Optional[Interface]:
        """Look up an interface by exact id."""
        for iface in self._interfaces:
            if iface.id == interface_id:
                return iface
        return None

    def recent_logs(self, count: int = 10) -> list[LogEntry]:
        """Return the last ``count`` log entries, oldest first."""
        with self._lock:
            return self._logs[-count:] if count > 0 else []

    # === Mutation ===

    def apply(self, update: StateUpdate) -> None:
        """Commit a batch of changes atomically.

        Interfaces are replaced in place by id so ids and ordering never
        change. The VLAN set is recomputed afterwards so every non-zero
        interface VLAN is a member.
        """
        if update.empty:
            return

        with self._lock:
            interfaces = list(self._interfaces)
            for index, current in enumerate(interfaces):
                replacement = update.interfaces.get(current.id)
                if replacement is not None:
                    interfaces[index] = replace(replacement, id=current.id)

            self._interfaces = interfaces
            self._vlans = _reconcile_vlans(
                list(self._vlans) + list(update.vlans), interfaces
            )
            if update.hostname is not None:
                self._hostname = update.hostname
            self._logs.extend(update.logs)

        for entry in update.logs:
            _mirror(entry)

    def append_log(self, severity: Severity, process: str, message: str) -> LogEntry:
        """Append one log entry with a fresh id and timestamp."""
        entry = new_log_entry(severity, process, message)
        with self._lock:
            self._logs.append(entry)
        _mirror(entry)
        return entry

    # === Snapshots ===

    def snapshot(self) -> "DeviceState":
        """Return an independent deep copy, safe to hand to collaborators."""
        with self._lock:
            clone = DeviceState(
                hostname=self._hostname,
                interfaces=copy.deepcopy(self._interfaces),
                vlans=list(self._vlans),
                logs=copy.deepcopy(self._logs),
            )
        return clone

    def to_dict(self) -> dict:
        with self._lock:
            return {
                "hostname": self._hostname,
                "interfaces": [
                    {**asdict(i), "status": i.status.value} for i in self._interfaces
                ],
                "vlans": list(self._vlans),
                "logs": [
                    {
                        "id": e.id,
                        "timestamp": format_timestamp(e.timestamp),
                        "severity": e.severity.value,
                        "process": e.process,
                        "message": e.message,
                    }
                    for e in self._logs
                ],
            }

    def __repr__(self) -> str:
        return (
            f"DeviceState(hostname={self._hostname!r}, "
            f"interfaces={len(self._interfaces)}, vlans={self._vlans}, logs={len(self._logs)})"
        )


def _reconcile_vlans(vlans: Iterable[int], interfaces: Iterable[Interface]) -> list[int]:
    """Sorted, deduplicated union of ``vlans`` and every non-zero interface VLAN."""
    merged = {v for v in vlans if v > 0}
    merged.update(i.vlan for i in interfaces if i.vlan > 0)
    return sorted(merged)


def _mirror(entry: LogEntry) -> None:
    logger.log(_LOG_LEVELS[entry.severity], f"[{entry.process}] {entry.message}")
