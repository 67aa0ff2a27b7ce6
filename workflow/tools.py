"""
Tool Registry — Named capabilities that workflow steps can call.

Every tool has:
  - A unique name (how steps reference it)
  - A description (shown in the wrapped output and in `describe()`)
  - A handler: fn(input, context) → str, sync or async

A tool's output is always decorated with its identity before it reaches
the trace or later prompts:

    weather (Fetches weather data): clear skies

Handlers that raise are not caught here. The error travels out of the
step and out of `Workflow.invoke` untouched.
"""
from __future__ import annotations

import asyncio
import inspect
import structlog
from typing import TYPE_CHECKING, Awaitable, Callable, Optional, Union

if TYPE_CHECKING:
    from workflow.models import ChainContext

logger = structlog.get_logger()

ToolHandler = Callable[[str, "ChainContext"], Union[str, Awaitable[str]]]


class Tool:
    """A registered tool. Immutable once created."""

    __slots__ = ("_name", "_description", "_handler")

    def __init__(self, name: str, description: str, handler: ToolHandler):
        self._name = name
        self._description = description
        self._handler = handler

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    @property
    def handler(self) -> ToolHandler:
        return self._handler

    async def invoke(
        self,
        input: str,
        context: ChainContext,
        timeout: Optional[float] = None,
    ) -> str:
        """
        Run the handler and wrap its result as "name (description): result".

        Sync and async handlers go through the same path: call, then await
        whatever awaitable comes back. `timeout` only bounds the awaited part.
        """
        result = self._handler(input, context)
        if inspect.isawaitable(result):
            if timeout:
                result = await asyncio.wait_for(result, timeout)
            else:
                result = await result
        return f"{self._name} ({self._description}): {result}"

    def __repr__(self):
        return f"Tool(name={self._name!r}, description={self._description!r})"


class ToolRegistry:
    """
    Catalog of the tools one workflow can bind to its steps.

    Registration overwrites by name. There is no removal; the registry is
    expected to be filled during the build phase and left alone afterwards.
    """

    def __init__(self):
        self._tools: dict[str, Tool] = {}

    # ── Registration ──────────────────────────────────

    def register(self, name: str, description: str, handler: ToolHandler) -> Tool:
        """Register a tool, replacing any previous tool with the same name."""
        tool = Tool(name, description, handler)
        replaced = name in self._tools
        self._tools[name] = tool
        logger.info("tool_registered",
                    name=name,
                    is_async=inspect.iscoroutinefunction(handler),
                    replaced=replaced)
        return tool

    # ── Lookup ────────────────────────────────────────

    def lookup(self, name: str) -> Optional[Tool]:
        return self._tools.get(name)

    def list_all(self) -> list[Tool]:
        return list(self._tools.values())

    @property
    def names(self) -> list[str]:
        return list(self._tools)

    @property
    def count(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def describe(self) -> str:
        """Human-readable tool list for inclusion in prompts."""
        if not self._tools:
            return "No tools registered."
        lines = ["Available tools:"]
        for tool in self._tools.values():
            lines.append(f"  • {tool.name}: {tool.description}")
        return "\n".join(lines)
