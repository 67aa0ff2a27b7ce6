"""
Response synthesis — Turns a formatted step prompt into the step's answer.

The default synthesizer is a deterministic heuristic standing in for a
model call. Any callable with the same shape can replace it:

    fn(prompt: str, tool_observation: Optional[str]) → str | Awaitable[str]
"""
from __future__ import annotations

import re
from typing import Awaitable, Callable, Optional, Union

FALLBACK_RESPONSE = "No actionable insight produced."
SEGMENT_SEPARATOR = " | "

_WHITESPACE = re.compile(r"\s+")

ResponseSynthesizer = Callable[[str, Optional[str]], Union[str, Awaitable[str]]]


def synthesize_response(prompt: str, tool_observation: Optional[str] = None) -> str:
    """
    Keep the last line of the prompt, append the tool observation if any,
    and collapse whitespace. Empty output falls back to FALLBACK_RESPONSE.
    """
    segments = [prompt.split("\n")[-1]]
    if tool_observation:
        segments.append(tool_observation)

    synthesized = _WHITESPACE.sub(" ", SEGMENT_SEPARATOR.join(segments)).strip()
    return synthesized or FALLBACK_RESPONSE
