"""
Conversational workflow engine.

A workflow is an ordered pipeline of prompt steps sharing one bounded
conversation memory:

  - Conversation memory (recency-bounded, FIFO eviction)
  - Prompt templates ({{ name }} substitution, unbound names pass through)
  - Tool registry (named sync/async handlers with decorated output)
  - Sequential execution with a full per-step trace
"""
from workflow.errors import (
    WorkflowError, ToolNotRegisteredError, EmptyWorkflowError,
    InvalidMetadataError, EMPTY_WORKFLOW_MESSAGE,
)
from workflow.prompt import PromptTemplate
from workflow.tools import Tool, ToolRegistry, ToolHandler
from workflow.models import (
    Role, MemoryEntry, WorkflowStep, ChainContext,
    StepTrace, WorkflowResult,
)
from workflow.memory import ConversationMemory
from workflow.synthesis import synthesize_response, FALLBACK_RESPONSE
from workflow.engine import Workflow
from workflow.demo import create_demo_workflow
