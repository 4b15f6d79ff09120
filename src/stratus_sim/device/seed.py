"""Seed configuration for the simulated switch.

The built-in seed mirrors a small leaf switch. An alternative seed can be
loaded from YAML:

```yaml
hostname: lab-sw02
vlans: [1, 30]
interfaces:
  - id: et1
    name: Ethernet1
    status: up
    vlan: 30
    description: Uplink
    speed: 10000
```
"""
import logging
from pathlib import Path
from typing import Any, Optional

import yaml

from .state import DeviceState, Interface, InterfaceStatus, Severity, new_log_entry

logger = logging.getLogger(__name__)

DEFAULT_HOSTNAME = "stratus-sw01"
DEFAULT_VLANS = [1, 10, 20, 99]


class SeedError(ValueError):
    """Invalid seed configuration."""
    pass


def default_interfaces() -> list[Interface]:
    """Interfaces present on a freshly booted device."""
    return [
        Interface(id="et1", name="Ethernet1", status=InterfaceStatus.UP, vlan=1,
                  description="Uplink to Core", speed=10000),
        Interface(id="et2", name="Ethernet2", status=InterfaceStatus.UP, vlan=10,
                  description="Server Farm A", speed=10000),
        Interface(id="et3", name="Ethernet3", status=InterfaceStatus.DOWN, vlan=20,
                  description="Guest WiFi", speed=1000),
        Interface(id="et4", name="Ethernet4", status=InterfaceStatus.ADMIN_DOWN, vlan=1,
                  description="Reserved", speed=1000),
        Interface(id="ma1", name="Management1", status=InterfaceStatus.UP, vlan=0,
                  description="OOB Mgmt", ip_address="192.168.1.10/24", speed=1000),
    ]


def boot_logs(first_interface: Optional[str] = "Ethernet1"):
    logs = [new_log_entry(Severity.INFO, "System", "System initialization complete")]
    if first_interface:
        logs.append(new_log_entry(Severity.INFO, "NbInterface", f"Interface {first_interface} is up"))
    return logs


def create_default_state() -> DeviceState:
    """Build the device state every process starts from."""
    return DeviceState(
        hostname=DEFAULT_HOSTNAME,
        interfaces=default_interfaces(),
        vlans=DEFAULT_VLANS,
        logs=boot_logs(),
    )


def load_seed(path: str | Path) -> DeviceState:
    """Load a device state from a YAML seed file.

    Raises:
        SeedError: If the file is missing or malformed
    """
    path = Path(path)
    if not path.exists():
        raise SeedError(f"Seed file not found: {path}")

    with open(path, encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise SeedError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise SeedError(f"Seed file {path} must contain a mapping")

    state = parse_seed(data)
    logger.info(f"Loaded seed from {path}: {state!r}")
    return state


def parse_seed(data: dict[str, Any]) -> DeviceState:
    """Build a device state from an already-parsed seed mapping."""
    hostname = data.get("hostname", DEFAULT_HOSTNAME)
    if not isinstance(hostname, str) or not hostname:
        raise SeedError(f"Invalid hostname: {hostname!r}")

    raw_interfaces = data.get("interfaces")
    if raw_interfaces is None:
        interfaces = default_interfaces()
    else:
        if not isinstance(raw_interfaces, list):
            raise SeedError("interfaces must be a list")
        interfaces = [_parse_interface(i, raw) for i, raw in enumerate(raw_interfaces)]

    vlans = data.get("vlans", DEFAULT_VLANS)
    try:
        vlans = [int(v) for v in vlans]
    except (TypeError, ValueError):
        raise SeedError(f"Invalid VLAN list: {vlans!r}")

    first_up = next((i.name for i in interfaces if i.status == InterfaceStatus.UP), None)

    try:
        return DeviceState(
            hostname=hostname,
            interfaces=interfaces,
            vlans=vlans,
            logs=boot_logs(first_up),
        )
    except ValueError as e:
        raise SeedError(str(e)) from e


def _parse_interface(index: int, raw: Any) -> Interface:
    if not isinstance(raw, dict):
        raise SeedError(f"Interface #{index} must be a mapping")

    iface_id = raw.get("id")
    name = raw.get("name")
    if not iface_id or not name:
        raise SeedError(f"Interface #{index} needs both id and name")

    try:
        status = InterfaceStatus(str(raw.get("status", "down")).lower())
    except ValueError:
        raise SeedError(
            f"Invalid status for {name}: {raw.get('status')}. "
            f"Must be one of: {', '.join(s.value for s in InterfaceStatus)}"
        )

    try:
        return Interface(
            id=str(iface_id),
            name=str(name),
            status=status,
            vlan=int(raw.get("vlan", 1)),
            description=str(raw.get("description", "")),
            ip_address=raw.get("ip_address"),
            mtu=int(raw.get("mtu", 1500)),
            speed=int(raw.get("speed", 1000)),
        )
    except (TypeError, ValueError) as e:
        raise SeedError(f"Invalid numeric field for {name}: {e}") from e
