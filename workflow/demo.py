"""
Demo workflow — the station assistant wired up for the chat console.

Three steps:
  1. Assess request     (memory tool: surfaces the latest memory entry)
  2. Run weather check  (weather tool: simulated forecast for `location:<name>`)
  3. Compose response   (no tool)
"""
from __future__ import annotations

import re
from typing import Optional

from workflow.engine import Workflow
from workflow.models import ChainContext
from workflow.synthesis import ResponseSynthesizer

DEMO_MEMORY_WINDOW = 8

_LOCATION = re.compile(r"location:([a-z\s]+)", re.IGNORECASE)


def weather_tool(input: str, context: ChainContext) -> str:
    match = _LOCATION.search(input)
    location = match.group(1).strip() if match else "the station"
    return f"Simulated forecast for {location}: clear skies, light tailwind."


def memory_tool(input: str, context: ChainContext) -> str:
    snapshot = context.memory.snapshot()
    if not snapshot:
        return "Memory empty."
    latest = snapshot[-1]
    return f'{latest.role.value} said "{latest.text}"'


def create_demo_workflow(
    memory_window: int = DEMO_MEMORY_WINDOW,
    synthesizer: Optional[ResponseSynthesizer] = None,
) -> Workflow:
    """Build the three-step demo workflow with its two tools."""
    return (
        Workflow(memory_window=memory_window, synthesizer=synthesizer)
        .register_tool("weather", "Fetches weather data", weather_tool)
        .register_tool("memory", "Surfaces the most recent memory entry", memory_tool)
        .add_step(
            "Assess request",
            "\n".join([
                "User query: {{input}}",
                "Recent memory: {{memory}}",
                "Known tool results: {{toolResults}}",
                "Metadata: {{metadata}}",
                "Summarize intent in one sentence.",
            ]),
            "memory",
        )
        .add_step(
            "Run weather check",
            "\n".join([
                "Intent summary: {{input}}",
                "If the user references weather, call the weather tool with the extracted location.",
                "Otherwise, acknowledge the current intent plainly.",
            ]),
            "weather",
        )
        .add_step(
            "Compose response",
            "\n".join([
                "Weather insights: {{toolResults}}",
                "Final instruction: Provide a concise operational recommendation.",
            ]),
        )
    )
