"""Utility modules for logging, auditing and retries."""
from .audit_log import ChangeRecord, ChangeTracker, get_recent_changes, setup_audit_logging
from .connection import with_retry, is_retryable
from .logging_config import (
    setup_logging,
    timed,
    timed_section_sync,
    perf_logger,
)

__all__ = [
    "ChangeRecord",
    "ChangeTracker",
    "get_recent_changes",
    "setup_audit_logging",
    "with_retry",
    "is_retryable",
    "setup_logging",
    "timed",
    "timed_section_sync",
    "perf_logger",
]
