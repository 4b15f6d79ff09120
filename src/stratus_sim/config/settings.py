"""Runtime settings for the simulator.

Environment variables:
- STRATUS_SEED_FILE: YAML seed for the device (default: built-in seed)
- STRATUS_TELEMETRY_INTERVAL: Seconds between telemetry samples (default: 1.0)
- STRATUS_TELEMETRY_WINDOW: Telemetry points kept (default: 60)
- GEMINI_API_KEY / API_KEY: Key for the intent client
- STRATUS_GEMINI_MODEL: Model name (default: gemini-2.5-flash)
- STRATUS_GEMINI_TIMEOUT: Request timeout in seconds (default: 30)
- STRATUS_GEMINI_RETRIES: Attempts per request (default: 3)
- STRATUS_AUDIT_DIR: Directory for audit.log (default: ~/.stratus-sim)
"""
import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"
DEFAULT_GEMINI_ENDPOINT = "https://generativelanguage.googleapis.com/v1beta"


@dataclass
class Settings:
    """Simulator settings."""
    seed_file: Optional[str] = None
    telemetry_interval: float = 1.0
    telemetry_window: int = 60
    gemini_api_key: Optional[str] = None
    gemini_model: str = DEFAULT_GEMINI_MODEL
    gemini_endpoint: str = DEFAULT_GEMINI_ENDPOINT
    gemini_timeout: float = 30.0
    gemini_retries: int = 3
    audit_dir: str = "~/.stratus-sim"

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables."""
        env = os.environ
        return cls(
            seed_file=env.get("STRATUS_SEED_FILE") or None,
            telemetry_interval=float(env.get("STRATUS_TELEMETRY_INTERVAL", "1.0")),
            telemetry_window=int(env.get("STRATUS_TELEMETRY_WINDOW", "60")),
            gemini_api_key=env.get("GEMINI_API_KEY") or env.get("API_KEY") or None,
            gemini_model=env.get("STRATUS_GEMINI_MODEL", DEFAULT_GEMINI_MODEL),
            gemini_endpoint=env.get("STRATUS_GEMINI_ENDPOINT", DEFAULT_GEMINI_ENDPOINT),
            gemini_timeout=float(env.get("STRATUS_GEMINI_TIMEOUT", "30")),
            gemini_retries=int(env.get("STRATUS_GEMINI_RETRIES", "3")),
            audit_dir=env.get("STRATUS_AUDIT_DIR", "~/.stratus-sim"),
        )

    @classmethod
    def from_file(cls, path: Path, base: Optional["Settings"] = None) -> "Settings":
        """Overlay settings from a YAML file onto ``base`` (default: from_env)."""
        settings = base or cls.from_env()
        if not path.exists():
            logger.warning(f"Settings file not found: {path}")
            return settings

        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        known = {f.name for f in fields(cls)}
        for key, value in data.items():
            if key not in known:
                logger.warning(f"Ignoring unknown setting: {key}")
                continue
            setattr(settings, key, value)
        return settings
