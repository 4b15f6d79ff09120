"""Gemini client that turns operator intent into switch configuration.

The client is a collaborator of the config applier: whatever it returns is
fed to ``ConfigApplier.apply`` as untrusted text. It never raises; failures
come back as ``!`` comment lines, which the applier ignores.
"""
import logging
from typing import Iterable, Optional

import httpx

from ..config.settings import Settings
from ..device.state import DeviceState, LogEntry, format_timestamp
from ..utils.connection import with_retry
from ..utils.logging_config import timed_section_sync

logger = logging.getLogger(__name__)

NO_API_KEY = "! Error: API Key not configured."
GENERATION_FAILED = "! Error generating configuration. Please check system logs."
ANALYSIS_FAILED = "Error analyzing telemetry data."

ANALYSIS_LOG_COUNT = 15

CONFIG_PROMPT = """
You are an expert Network Engineer specializing in Arista EOS.

Current Switch State Summary:
Hostname: {hostname}
Interfaces: {interfaces}
VLANs: {vlans}

User Intent: "{intent}"

Task: Convert the user's natural language intent into valid EOS CLI configuration commands.
Return ONLY the commands. Do not add markdown formatting like ```.
If the intent is unclear or unsafe, return a comment starting with "!" explaining why.

Example Output:
enable
configure terminal
interface Ethernet2
switchport access vlan 20
exit
"""

ANALYSIS_PROMPT = """
You are a Cloud Telemetry Analysis AI.
Analyze the following system logs from a network switch for anomalies, security risks, or root causes of failure.

Logs:
{logs}

Provide a concise, bulleted summary of the health status and any recommended actions.
"""


class GeminiError(Exception):
    """The generation API returned no usable text."""
    pass


def build_config_prompt(intent: str, snapshot: DeviceState) -> str:
    interfaces = ", ".join(f"{i.name}({i.status.value})" for i in snapshot.interfaces)
    return CONFIG_PROMPT.format(
        hostname=snapshot.hostname,
        interfaces=interfaces,
        vlans=", ".join(str(v) for v in snapshot.vlans),
        intent=intent,
    )


def build_analysis_prompt(logs: Iterable[LogEntry]) -> str:
    recent = list(logs)[-ANALYSIS_LOG_COUNT:]
    lines = "\n".join(
        f"[{format_timestamp(e.timestamp)}] {e.severity.value} {e.process}: {e.message}"
        for e in recent
    )
    return ANALYSIS_PROMPT.format(logs=lines)


def strip_markdown(text: str) -> str:
    """Drop ``` fence lines a model adds despite being told not to."""
    lines = [line for line in text.splitlines() if not line.strip().startswith("```")]
    return "\n".join(lines).strip()


class GeminiClient:
    """Minimal async client for the Gemini generateContent API."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        retry_min_wait: float = 1,
        retry_max_wait: float = 10,
    ):
        self.settings = settings or Settings.from_env()
        self._transport = transport
        self._retry_min_wait = retry_min_wait
        self._retry_max_wait = retry_max_wait

    @property
    def configured(self) -> bool:
        return bool(self.settings.gemini_api_key)

    @property
    def url(self) -> str:
        return f"{self.settings.gemini_endpoint}/models/{self.settings.gemini_model}:generateContent"

    async def generate_config(self, intent: str, snapshot: DeviceState) -> str:
        """Generate a configuration block for ``intent``.

        Returns:
            Configuration text, or a ``!`` comment describing the failure
        """
        if not self.configured:
            logger.warning("No API key provided for Gemini")
            return NO_API_KEY

        try:
            text = await self.generate(build_config_prompt(intent, snapshot))
        except Exception as e:
            logger.error(f"Gemini config error: {e}", exc_info=True)
            return GENERATION_FAILED

        return strip_markdown(text)

    async def analyze_log_anomalies(self, logs: Iterable[LogEntry]) -> str:
        """Summarize the last log entries for anomalies and root causes."""
        if not self.configured:
            logger.warning("No API key provided for Gemini")
            return NO_API_KEY

        try:
            return await self.generate(build_analysis_prompt(logs))
        except Exception as e:
            logger.error(f"Gemini analysis error: {e}", exc_info=True)
            return ANALYSIS_FAILED

    async def generate(self, prompt: str) -> str:
        """Send one prompt, retrying transient failures."""
        send = with_retry(
            max_attempts=self.settings.gemini_retries,
            min_wait=self._retry_min_wait,
            max_wait=self._retry_max_wait,
        )(self._send)
        with timed_section_sync("gemini_generate", model=self.settings.gemini_model):
            return await send(prompt)

    async def _send(self, prompt: str) -> str:
        async with httpx.AsyncClient(
            timeout=httpx.Timeout(self.settings.gemini_timeout),
            transport=self._transport,
        ) as http:
            response = await http.post(
                self.url,
                headers={"x-goog-api-key": self.settings.gemini_api_key or ""},
                json={"contents": [{"parts": [{"text": prompt}]}]},
            )
            response.raise_for_status()
            return extract_text(response.json())


def extract_text(payload: dict) -> str:
    """Pull the generated text out of a generateContent response."""
    try:
        parts = payload["candidates"][0]["content"]["parts"]
    except (KeyError, IndexError, TypeError):
        raise GeminiError(f"Unexpected response shape: {str(payload)[:200]}")

    text = "".join(p.get("text", "") for p in parts if isinstance(p, dict))
    if not text.strip():
        raise GeminiError("Empty response from model")
    return text.strip()


async def generate_config(
    intent: str,
    snapshot: DeviceState,
    client: Optional[GeminiClient] = None,
) -> str:
    """Turn operator intent into configuration text. Never raises."""
    return await (client or GeminiClient()).generate_config(intent, snapshot)
