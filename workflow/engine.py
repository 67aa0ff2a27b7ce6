"""
Workflow Engine — Sequential prompt → tool → response pipeline.

A Workflow is built once and invoked per conversational turn:

  Build:
    workflow.register_tool("echo", "repeats the input", handler)
    workflow.add_step("Echo", "Last request: {{input}}", "echo")
    workflow.add_step("Close", "Tool results: {{toolResults}}")

  Invoke:
    Workflow.invoke(query, metadata)
      → append query to memory as "user"
      → for each step, in build order:
          format prompt from {input, memory, metadata, toolResults}
          → call bound tool (if any), record its output under the tool name
          → synthesize response from prompt + tool output
          → record StepTrace, append response to memory as "assistant"
          → response becomes the next step's {{input}}
      → WorkflowResult(final=last response, trace=every StepTrace)

Tool bindings are resolved when a step is added, so a step can never point
at a missing tool at run time. Anything a tool handler or the synthesizer
raises propagates out of `invoke`; there is no partial result.

By default concurrent `invoke` calls on one instance are serialized with an
asyncio.Lock so each turn's memory entries stay contiguous. The lock is
recreated when the running event loop changes, so one instance can be driven
by successive `asyncio.run` calls.
"""
from __future__ import annotations

import asyncio
import inspect
import json
import structlog
from contextlib import asynccontextmanager
from collections.abc import Mapping
from typing import Any, Optional

from config.settings import get_settings
from workflow.errors import EmptyWorkflowError, InvalidMetadataError, ToolNotRegisteredError
from workflow.memory import ConversationMemory
from workflow.models import ChainContext, Role, StepTrace, WorkflowResult, WorkflowStep
from workflow.prompt import PromptTemplate
from workflow.synthesis import ResponseSynthesizer, synthesize_response
from workflow.tools import ToolHandler, ToolRegistry

logger = structlog.get_logger()

_SCALAR_TYPES = (str, int, float, bool, type(None))


class Workflow:
    """
    Owns a tool registry, an ordered list of steps, and one conversation
    memory that persists across invocations.

    Constructor arguments left as None are taken from settings
    (`workflow.memory_window`, `workflow.tool_timeout_seconds`,
    `workflow.serialize_invocations`).
    """

    def __init__(
        self,
        memory_window: Optional[int] = None,
        synthesizer: Optional[ResponseSynthesizer] = None,
        tool_timeout: Optional[float] = None,
        serialize_invocations: Optional[bool] = None,
    ):
        """
        Args:
            memory_window: max entries kept in conversation memory
            synthesizer:   fn(prompt, tool_observation) → str, sync or async
            tool_timeout:  seconds to wait on an async tool handler (0 = forever)
            serialize_invocations: hold a lock for the whole of each invoke
        """
        config = get_settings().workflow
        self._memory = ConversationMemory(
            memory_window if memory_window is not None else config.memory_window,
        )
        self._tools = ToolRegistry()
        self._steps: list[WorkflowStep] = []
        self._synthesize = synthesizer or synthesize_response
        timeout = tool_timeout if tool_timeout is not None else config.tool_timeout_seconds
        self._tool_timeout = timeout or None
        serialize = (serialize_invocations if serialize_invocations is not None
                     else config.serialize_invocations)
        self._serialize = bool(serialize)
        # asyncio.Lock binds to the loop it first waits on; one lock per loop
        self._lock: Optional[asyncio.Lock] = None
        self._lock_loop: Optional[asyncio.AbstractEventLoop] = None

    @property
    def memory(self) -> ConversationMemory:
        return self._memory

    @property
    def tools(self) -> ToolRegistry:
        return self._tools

    @property
    def steps(self) -> tuple[WorkflowStep, ...]:
        return tuple(self._steps)

    # ══════════════════════════════════════════════════════════
    #  BUILD PHASE
    # ══════════════════════════════════════════════════════════

    def register_tool(self, name: str, description: str, handler: ToolHandler) -> Workflow:
        self._tools.register(name, description, handler)
        return self

    def add_step(self, name: str, template: str, tool_name: Optional[str] = None) -> Workflow:
        """
        Append a step. A `tool_name` must already be registered: the tool is
        looked up now and captured by the step.
        """
        tool = None
        if tool_name:
            tool = self._tools.lookup(tool_name)
            if tool is None:
                logger.error("workflow_step_rejected", step=name, tool=tool_name,
                             registered=self._tools.names)
                raise ToolNotRegisteredError(tool_name, step=name)

        step = WorkflowStep(name=name, template=PromptTemplate(template), tool=tool)
        self._steps.append(step)
        logger.debug("workflow_step_added",
                     step=name, tool=step.tool_name, position=len(self._steps))
        return self

    # ══════════════════════════════════════════════════════════
    #  MAIN ENTRY POINT
    # ══════════════════════════════════════════════════════════

    async def invoke(self, query: str, metadata: Optional[Mapping[str, Any]] = None) -> WorkflowResult:
        """
        Run every step once against `query`.

        Raises:
            EmptyWorkflowError:   no steps have been added
            InvalidMetadataError: a metadata value is not str/number/bool/None/list/mapping
            Anything raised by a tool handler or the synthesizer, unwrapped.
        """
        if not self._steps:
            raise EmptyWorkflowError()
        if metadata is not None and not isinstance(metadata, Mapping):
            raise InvalidMetadataError("<root>", type(metadata).__name__)

        context = ChainContext(
            memory=self._memory,
            metadata=_copy_metadata(metadata or {}),
        )

        async with self._serialized():
            return await self._run(query, context)

    async def _run(self, query: str, context: ChainContext) -> WorkflowResult:
        trace: list[StepTrace] = []
        self._memory.append(Role.USER, query)

        previous_output = query
        for step in self._steps:
            try:
                step_trace = await self._execute_step(step, previous_output, context)
            except Exception as e:
                logger.error("workflow_step_failed",
                             step=step.name, tool=step.tool_name,
                             error_type=type(e).__name__, error=str(e))
                raise

            trace.append(step_trace)
            previous_output = step_trace.response
            self._memory.append(Role.ASSISTANT, step_trace.response)

        logger.info("workflow_invoked",
                    steps=len(trace),
                    tools_called=sorted(context.tool_results),
                    memory_entries=len(self._memory),
                    final_length=len(previous_output))

        return WorkflowResult(final=previous_output, trace=tuple(trace))

    # ══════════════════════════════════════════════════════════
    #  STEP EXECUTION
    # ══════════════════════════════════════════════════════════

    async def _execute_step(
        self,
        step: WorkflowStep,
        step_input: str,
        context: ChainContext,
    ) -> StepTrace:
        prompt = step.template.format({
            "input": step_input,
            "memory": context.memory.summarize(),
            "metadata": _to_json(context.metadata),
            "toolResults": _to_json(context.tool_results),
        })

        tool_result = None
        if step.tool:
            tool_result = await step.tool.invoke(prompt, context, timeout=self._tool_timeout)
            context.tool_results[step.tool.name] = tool_result

        response = self._synthesize(prompt, tool_result)
        if inspect.isawaitable(response):
            response = await response

        logger.debug("workflow_step_completed",
                     step=step.name, tool=step.tool_name,
                     prompt_length=len(prompt), response_length=len(response))

        return StepTrace(step=step.name, prompt=prompt,
                         tool_result=tool_result, response=response)

    @asynccontextmanager
    async def _serialized(self):
        if not self._serialize:
            yield
            return
        loop = asyncio.get_running_loop()
        if self._lock is None or self._lock_loop is not loop:
            self._lock = asyncio.Lock()
            self._lock_loop = loop
        async with self._lock:
            yield


# ──────────────────────────────────────────────────────────────
#  Metadata handling
# ──────────────────────────────────────────────────────────────

def _copy_metadata(value: Any, path: str = "") -> Any:
    """Deep-copy metadata, rejecting values that cannot be rendered as JSON."""
    if isinstance(value, _SCALAR_TYPES):
        return value
    if isinstance(value, Mapping):
        copied = {}
        for key, item in value.items():
            if not isinstance(key, str):
                raise InvalidMetadataError(f"{path}[{key!r}]", f"key {type(key).__name__}")
            copied[key] = _copy_metadata(item, f"{path}.{key}" if path else key)
        return copied
    if isinstance(value, (list, tuple)):
        return [_copy_metadata(item, f"{path}[{i}]") for i, item in enumerate(value)]
    raise InvalidMetadataError(path or "<root>", type(value).__name__)


def _to_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
