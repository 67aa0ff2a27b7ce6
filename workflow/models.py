"""
Workflow Models — The records a workflow produces and threads through steps.

  - MemoryEntry:    one role-tagged line of conversation
  - WorkflowStep:   one pipeline stage (name, compiled prompt, bound tool)
  - ChainContext:   per-invocation bundle handed to every tool
  - StepTrace:      what one step saw and said
  - WorkflowResult: final answer plus the full trace

Everything except ChainContext is immutable once built.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from workflow.prompt import PromptTemplate
from workflow.tools import Tool

if TYPE_CHECKING:
    from workflow.memory import ConversationMemory


class Role(str, Enum):
    """Who produced a memory entry."""
    USER = "user"
    ASSISTANT = "assistant"


class MemoryEntry(BaseModel):
    """A single exchange recorded in conversation memory."""
    model_config = ConfigDict(frozen=True)

    role: Role
    text: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


# ──────────────────────────────────────────────────────────────
#  Step — one node in the pipeline
# ──────────────────────────────────────────────────────────────

class WorkflowStep(BaseModel):
    """
    One stage of a workflow.

    `tool` is the Tool object captured when the step was added. Re-registering
    a tool under the same name later does not change what this step calls.
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    template: PromptTemplate
    tool: Optional[Tool] = None

    @property
    def tool_name(self) -> str:
        return self.tool.name if self.tool else ""


@dataclass
class ChainContext:
    """Per-invocation state shared by every step of one `invoke` call."""
    memory: ConversationMemory
    metadata: dict[str, Any] = field(default_factory=dict)
    tool_results: dict[str, str] = field(default_factory=dict)   # tool name → last wrapped output


# ──────────────────────────────────────────────────────────────
#  Execution Result
# ──────────────────────────────────────────────────────────────

class StepTrace(BaseModel):
    """Outcome of executing one workflow step."""
    model_config = ConfigDict(frozen=True)

    step: str
    prompt: str                                    # formatted prompt
    tool_result: Optional[str] = None              # wrapped tool output (if the step has a tool)
    response: str


class WorkflowResult(BaseModel):
    """Complete result of one workflow invocation."""
    model_config = ConfigDict(frozen=True)

    final: str
    trace: tuple[StepTrace, ...] = ()
