"""Audit logging for configuration block applies.

Every block folded into the device model is recorded with:
- Timestamped entries
- The raw block and what it changed
- Structured JSON log format
- Separate audit log file
"""
import json
import logging
import os
from dataclasses import dataclass, asdict, field
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

# Dedicated audit logger
audit_logger = logging.getLogger("stratus_sim.audit")

DEFAULT_AUDIT_DIR = "~/.stratus-sim"


def setup_audit_logging(log_dir: Optional[str] = None) -> Path:
    """Configure audit logging to file.

    Args:
        log_dir: Directory for audit logs. Defaults to ~/.stratus-sim/

    Returns:
        Path of the audit log file
    """
    if log_dir is None:
        log_dir = os.environ.get("STRATUS_AUDIT_DIR", DEFAULT_AUDIT_DIR)
    log_dir = os.path.expanduser(log_dir)

    Path(log_dir).mkdir(parents=True, exist_ok=True)
    audit_file = Path(log_dir) / "audit.log"

    audit_logger.setLevel(logging.INFO)
    audit_logger.handlers.clear()

    handler = RotatingFileHandler(
        audit_file,
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=10,
        encoding="utf-8",
    )
    # One JSON document per line
    handler.setFormatter(logging.Formatter("%(message)s"))
    audit_logger.addHandler(handler)
    audit_logger.propagate = False

    return audit_file


@dataclass
class ChangeRecord:
    """Record of a configuration block apply."""
    timestamp: str
    hostname: str
    operation: str  # config_apply, intent_apply
    source: str  # operator, gemini
    lines: int
    directives_applied: int
    interfaces_changed: list[str] = field(default_factory=list)
    vlans_created: list[int] = field(default_factory=list)
    block: str = ""
    intent: Optional[str] = None

    def to_json(self) -> str:
        """Convert to JSON string."""
        return json.dumps(asdict(self), indent=None)

    @classmethod
    def from_json(cls, json_str: str) -> "ChangeRecord":
        """Parse from JSON string."""
        data = json.loads(json_str)
        return cls(**data)


class ChangeTracker:
    """Track and log configuration changes for a simulated device.

    Records carry the hostname passed to ``log_change``; the constructor
    value is used only when none is given.
    """

    def __init__(self, hostname: Optional[str] = None):
        self.hostname = hostname

    def log_change(
        self,
        operation: str,
        source: str,
        lines: int,
        directives_applied: int,
        interfaces_changed: Optional[list[str]] = None,
        vlans_created: Optional[list[int]] = None,
        block: str = "",
        intent: Optional[str] = None,
        hostname: Optional[str] = None,
    ) -> ChangeRecord:
        """Log a configuration change.

        Returns:
            The ChangeRecord that was logged
        """
        record = ChangeRecord(
            timestamp=datetime.now(timezone.utc).isoformat(),
            hostname=hostname or self.hostname or "",
            operation=operation,
            source=source,
            lines=lines,
            directives_applied=directives_applied,
            interfaces_changed=list(interfaces_changed or []),
            vlans_created=list(vlans_created or []),
            block=block[:1000] if block else "",  # Truncate long blocks
            intent=intent,
        )

        audit_logger.info(record.to_json())

        return record


def get_recent_changes(
    log_file: Optional[str] = None,
    hostname: Optional[str] = None,
    operation: Optional[str] = None,
    limit: int = 100,
) -> list[ChangeRecord]:
    """Read recent changes from audit log.

    Args:
        log_file: Path to audit log. Defaults to ~/.stratus-sim/audit.log
        hostname: Filter by device hostname
        operation: Filter by operation type
        limit: Maximum number of records to return

    Returns:
        List of ChangeRecords, most recent first
    """
    if log_file is None:
        log_file = os.path.join(
            os.path.expanduser(os.environ.get("STRATUS_AUDIT_DIR", DEFAULT_AUDIT_DIR)),
            "audit.log",
        )

    if not os.path.exists(log_file):
        return []

    records = []
    with open(log_file, "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            try:
                record = ChangeRecord.from_json(line)
            except (json.JSONDecodeError, TypeError):
                continue  # Skip malformed lines

            if hostname and record.hostname != hostname:
                continue
            if operation and record.operation != operation:
                continue

            records.append(record)

    return list(reversed(records[-limit:]))
