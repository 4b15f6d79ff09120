"""Synthetic telemetry derived from the device model.

The generator only reads interface status and appends log entries; it never
changes interfaces, so it can run beside the interpreter without a lock
beyond the atomic log append.
"""
import asyncio
import logging
import random
import time
from collections import deque
from dataclasses import dataclass
from typing import Optional

from ..device.state import DeviceState, InterfaceStatus, Severity

logger = logging.getLogger(__name__)

# Gbps contributed by each interface that is up
THROUGHPUT_PER_UP_INTERFACE = 2.5
BASE_LATENCY_MS = 2.0
LATENCY_SPIKE_CHANCE = 0.1
LATENCY_SPIKE_MAX_MS = 15.0
ERROR_CHANCE = 0.05


@dataclass
class TelemetryPoint:
    """One synthetic sample of aggregate switch performance."""
    timestamp: float  # epoch milliseconds
    throughput: float  # Gbps
    latency: float  # ms
    errors: int

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp,
            "throughput": self.throughput,
            "latency": self.latency,
            "errors": self.errors,
        }


class TelemetryGenerator:
    """Produce telemetry points on a fixed interval.

    Usage:
        generator = TelemetryGenerator(state)
        task = asyncio.create_task(generator.run())
        ...
        generator.stop()
        await task
    """

    def __init__(
        self,
        state: DeviceState,
        interval: float = 1.0,
        window: int = 60,
        rng: Optional[random.Random] = None,
    ):
        self.state = state
        self.interval = interval
        self.points: deque[TelemetryPoint] = deque(maxlen=window)
        self._rng = rng or random.Random()
        self._stopped = asyncio.Event()

    @property
    def latest(self) -> Optional[TelemetryPoint]:
        return self.points[-1] if self.points else None

    def sample(self) -> TelemetryPoint:
        """Take one sample and add it to the rolling window."""
        rng = self._rng
        up_count = sum(1 for i in self.state.interfaces if i.status == InterfaceStatus.UP)

        noise = rng.random() * 1.5 - 0.5
        throughput = max(0.0, round(up_count * THROUGHPUT_PER_UP_INTERFACE + noise, 2))

        spike = rng.random() * LATENCY_SPIKE_MAX_MS if rng.random() < LATENCY_SPIKE_CHANCE else 0.0
        latency = round(BASE_LATENCY_MS + spike, 2)

        errors = rng.randint(0, 4) if rng.random() < ERROR_CHANCE else 0

        point = TelemetryPoint(
            timestamp=time.time() * 1000,
            throughput=throughput,
            latency=latency,
            errors=errors,
        )
        self.points.append(point)

        if errors > 0:
            self.state.append_log(
                Severity.WARNING, "Phy",
                f"Input errors detected on Ethernet{rng.randint(1, 4)}",
            )
        return point

    async def run(self) -> None:
        """Sample every ``interval`` seconds until ``stop()`` is called."""
        logger.info(f"Telemetry started: interval={self.interval}s window={self.points.maxlen}")
        self._stopped.clear()
        while not self._stopped.is_set():
            try:
                self.sample()
            except Exception as e:
                logger.error(f"Telemetry sample failed: {e}", exc_info=True)
            try:
                await asyncio.wait_for(self._stopped.wait(), timeout=self.interval)
            except asyncio.TimeoutError:
                pass
        logger.info("Telemetry stopped")

    def stop(self) -> None:
        self._stopped.set()
