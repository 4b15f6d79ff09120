"""Synthetic telemetry for the simulated switch."""
from .generator import TelemetryGenerator, TelemetryPoint

__all__ = ["TelemetryGenerator", "TelemetryPoint"]
