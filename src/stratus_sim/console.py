#!/usr/bin/env python3
"""Interactive console for the Stratus switch simulator.

Usage:
    stratus-sim [--seed SEED] [--no-telemetry] [--log-level LEVEL]

Environment variables:
    GEMINI_API_KEY              Key for 'ai <intent>' and 'analyze'
    STRATUS_SEED_FILE           YAML seed for the device
    STRATUS_LOG_LEVEL=DEBUG     Console log verbosity
"""
import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional, TextIO

from .cli.interpreter import CommandInterpreter
from .config.settings import Settings
from .config_engine.applier import ConfigApplier
from .device.seed import SeedError, create_default_state, load_seed
from .device.state import DeviceState
from .intent.gemini import GeminiClient
from .telemetry.generator import TelemetryGenerator
from .utils.audit_log import ChangeTracker, setup_audit_logging
from .utils.logging_config import setup_logging

logger = logging.getLogger(__name__)

WELCOME_MESSAGE = """
Stratus EOS (Extensible Operating System)
Software Image: v4.32.1F
(c) Copyright 2025 Stratus Networks, Inc.

Type '?' for available commands.
Type 'ai <intent>' to use Gemini Intent-Based Networking.
"""

CLEAR_SCREEN = "\033[2J\033[H"
PROCESSING = "Processing..."
AI_BUSY = "% AI request already in progress"


class Console:
    """Line-oriented front end over the interpreter, applier and intent client."""

    def __init__(
        self,
        state: DeviceState,
        client: GeminiClient,
        tracker: Optional[ChangeTracker] = None,
        out: TextIO = sys.stdout,
    ):
        self.state = state
        self.client = client
        self.interpreter = CommandInterpreter(state)
        self.applier = ConfigApplier(state, tracker=tracker)
        self.out = out
        self.processing = False
        self._pending: set[asyncio.Task] = set()

    @property
    def prompt(self) -> str:
        if self.processing:
            return f"{self.state.hostname} [{PROCESSING}]# "
        return f"{self.state.hostname}# "

    def write(self, text: str) -> None:
        self.out.write(text + "\n")
        self.out.flush()

    async def handle(self, line: str) -> bool:
        """Handle one line. Returns False when the operator leaves."""
        cmd = line.strip()
        if not cmd:
            return True

        if cmd in ("exit", "quit"):
            return False

        if cmd == "clear":
            self.out.write(CLEAR_SCREEN)
            self.out.flush()
            return True

        if cmd.startswith("ai "):
            if self.processing:
                self.write(AI_BUSY)
            else:
                self.processing = True
                self._spawn(self.apply_intent(cmd[3:].strip()))
            return True

        if cmd == "analyze":
            self.write(PROCESSING)
            self._spawn(self.analyze())
            return True

        output = self.interpreter.handle(cmd)
        if output:
            self.write(output)
        return True

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._finished)
        return task

    def _finished(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Background console task failed", exc_info=task.exception())

    async def wait_pending(self) -> None:
        """Wait for outstanding ai and analyze requests."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def analyze(self) -> None:
        self.write(await self.client.analyze_log_anomalies(self.state.logs))

    async def apply_intent(self, intent: str) -> None:
        """Generate config for ``intent`` and apply it exactly once.

        Runs in the background; the console keeps serving commands while the
        request is outstanding.
        """
        self.processing = True
        self.write("Analyzing intent with Gemini AI...")
        try:
            block = await self.client.generate_config(intent, self.state.snapshot())
        finally:
            self.processing = False

        self.write("Suggested Configuration:")
        for line in block.splitlines():
            self.write(f"  {line}")
        self.write("Applying configuration...")

        result = self.applier.apply(block, source="gemini", intent=intent)
        self.write(result.summary())

    async def run(self, reader=None) -> None:
        """Read lines until EOF or exit."""
        reader = reader or (lambda: asyncio.to_thread(input, self.prompt))
        self.write(WELCOME_MESSAGE)
        while True:
            try:
                line = await reader()
            except EOFError:
                break
            if not await self.handle(line):
                break
        await self.wait_pending()


async def run_console(state: DeviceState, settings: Settings, telemetry: bool = True) -> None:
    client = GeminiClient(settings)
    tracker = ChangeTracker()
    console = Console(state, client, tracker=tracker)

    generator = None
    task = None
    if telemetry:
        generator = TelemetryGenerator(
            state,
            interval=settings.telemetry_interval,
            window=settings.telemetry_window,
        )
        task = asyncio.create_task(generator.run())

    try:
        await console.run()
    finally:
        if generator is not None:
            generator.stop()
            await task


def load_state(seed: Optional[Path], settings: Settings) -> DeviceState:
    path = seed or (Path(settings.seed_file) if settings.seed_file else None)
    if path is None:
        return create_default_state()
    return load_seed(path)


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the console."""
    parser = argparse.ArgumentParser(
        description="Stratus EOS switch simulator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Start with the built-in seed
    stratus-sim

    # Start from a YAML seed without telemetry
    stratus-sim --seed lab.yaml --no-telemetry

Environment:
    GEMINI_API_KEY    Enables 'ai <intent>' and 'analyze'
""",
    )
    parser.add_argument("--seed", type=Path, default=None, help="YAML seed file for the device")
    parser.add_argument("--no-telemetry", action="store_true", help="Disable the telemetry generator")
    parser.add_argument("--log-level", default=None, help="Console log level (default: STRATUS_LOG_LEVEL or INFO)")
    args = parser.parse_args(argv)

    setup_logging(args.log_level)
    settings = Settings.from_env()
    setup_audit_logging(settings.audit_dir)

    try:
        state = load_state(args.seed, settings)
    except SeedError as e:
        logger.error(f"Could not load seed: {e}")
        return 1

    try:
        asyncio.run(run_console(state, settings, telemetry=not args.no_telemetry))
    except KeyboardInterrupt:
        pass
    return 0


if __name__ == "__main__":
    sys.exit(main())
