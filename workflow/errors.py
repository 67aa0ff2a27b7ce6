"""
Workflow errors.

Build-time misconfiguration, the empty-workflow guard, and bad caller
metadata each get their own class so callers can catch them precisely.
Tool handler failures are never wrapped; they surface as whatever the
handler raised.
"""
from __future__ import annotations

EMPTY_WORKFLOW_MESSAGE = "No steps registered in the LangChain workflow."


class WorkflowError(Exception):
    """Base exception for all workflow engine errors."""


class ToolNotRegisteredError(WorkflowError, LookupError):
    def __init__(self, tool_name: str, step: str = ""):
        self.tool_name = tool_name
        self.step = step
        super().__init__(f'Tool "{tool_name}" has not been registered.')


class EmptyWorkflowError(WorkflowError, RuntimeError):
    # Message text is relied on by consumers doing negative tests
    def __init__(self):
        super().__init__(EMPTY_WORKFLOW_MESSAGE)


class InvalidMetadataError(WorkflowError, TypeError):
    def __init__(self, key: str, value_type: str):
        self.key = key
        self.value_type = value_type
        super().__init__(
            f"Metadata value at '{key}' has unsupported type {value_type}; "
            f"expected str, int, float, bool, None, list or mapping"
        )
