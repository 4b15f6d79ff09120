"""Logging configuration for the Stratus switch simulator.

Provides configurable logging with:
- File-based logging with rotation
- Console output for real-time debugging
- Performance timing helpers for interpreter and applier passes

Environment Variables:
    STRATUS_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: INFO)
    STRATUS_LOG_FILE: Path to log file (default: ~/.stratus-sim/stratus-sim.log)
    STRATUS_LOG_MAX_SIZE: Max log file size in MB (default: 10)
    STRATUS_LOG_BACKUPS: Number of backup files to keep (default: 5)

Usage:
    from stratus_sim.utils.logging_config import setup_logging, timed

    setup_logging()  # Call once at startup

    @timed("interpret")
    def handle(self, line):
        ...

    # Sections, including ones that await:
    with timed_section_sync("gemini_generate", model="gemini-2.5-flash"):
        ...
"""
import functools
import logging
import os
import time
from contextlib import contextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Callable

# Performance logger - separate from main logger for easy filtering
perf_logger = logging.getLogger("stratus_sim.perf")
main_logger = logging.getLogger("stratus_sim")


def get_log_level(default: str = "INFO") -> int:
    """Get log level from environment."""
    level_str = os.environ.get("STRATUS_LOG_LEVEL", default).upper()
    return getattr(logging, level_str, logging.INFO)


def get_log_file() -> Path:
    """Get log file path from environment."""
    default_path = Path.home() / ".stratus-sim" / "stratus-sim.log"
    path_str = os.environ.get("STRATUS_LOG_FILE", str(default_path))
    return Path(path_str)


def setup_logging(level: Optional[str] = None) -> None:
    """Configure logging for the simulator.

    Sets up:
    - Console handler (INFO+ by default, respects STRATUS_LOG_LEVEL)
    - File handler with rotation (DEBUG level - captures everything)
    - Performance logger for timing metrics
    """
    if level:
        log_level = getattr(logging, level.upper(), logging.INFO)
    else:
        log_level = get_log_level()
    log_file = get_log_file()
    max_size_mb = int(os.environ.get("STRATUS_LOG_MAX_SIZE", "10"))
    backup_count = int(os.environ.get("STRATUS_LOG_BACKUPS", "5"))

    log_file.parent.mkdir(parents=True, exist_ok=True)

    main_format = logging.Formatter(
        "%(asctime)s.%(msecs)03d | %(name)-28s | %(levelname)-7s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
    perf_format = logging.Formatter(
        "%(asctime)s.%(msecs)03d | PERF | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    # Console handler - respects configured level
    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(main_format)

    def rotating(path: Path, formatter: logging.Formatter) -> RotatingFileHandler:
        handler = RotatingFileHandler(
            path,
            maxBytes=max_size_mb * 1024 * 1024,
            backupCount=backup_count,
            encoding="utf-8",
        )
        handler.setLevel(logging.DEBUG)
        handler.setFormatter(formatter)
        return handler

    # File handlers capture DEBUG and above
    file_handler = rotating(log_file, main_format)
    perf_log_file = log_file.parent / "stratus-sim-perf.log"
    perf_handler = rotating(perf_log_file, perf_format)

    main_logger.setLevel(logging.DEBUG)  # Capture all, handlers filter
    main_logger.addHandler(console_handler)
    main_logger.addHandler(file_handler)

    # Perf records go to their own file only
    perf_logger.setLevel(logging.DEBUG)
    perf_logger.addHandler(perf_handler)
    perf_logger.propagate = False

    main_logger.info(f"Logging initialized: level={logging.getLevelName(log_level)}, file={log_file}")
    perf_logger.info(f"Performance logging to: {perf_log_file}")


def _perf_line(operation: str, hostname: Optional[str], start: float, outcome: str, extra: dict) -> str:
    elapsed = (time.perf_counter() - start) * 1000  # ms
    parts = [f"{operation:20s}", f"{hostname or 'N/A':15s}", f"{elapsed:8.2f}ms", outcome]
    parts.extend(f"{k}={v}" for k, v in extra.items())
    return " | ".join(parts)


@contextmanager
def timed_section_sync(operation: str, hostname: Optional[str] = None, **extra):
    """Context manager timing a code section on the perf logger.

    Plain ``with`` works inside coroutines too; the time spent awaiting is
    included.
    """
    start = time.perf_counter()
    try:
        yield
    except Exception as e:
        perf_logger.warning(_perf_line(operation, hostname, start, f"FAIL: {e}", extra))
        raise
    perf_logger.info(_perf_line(operation, hostname, start, "OK", extra))


def timed(operation: str, hostname: Optional[str] = None):
    """Decorator to log execution time of a method.

    Args:
        operation: Name of the operation (e.g., "interpret")
        hostname: Device hostname; inferred from ``self.state.hostname`` when omitted
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            host = hostname
            if host is None and args:
                host = getattr(getattr(args[0], "state", None), "hostname", None)
            with timed_section_sync(operation, hostname=host):
                return func(*args, **kwargs)
        return wrapper

    return decorator
