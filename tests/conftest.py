"""Shared test fixtures for the workflow engine."""
import pytest

import config.settings as settings_module
from workflow.engine import Workflow
from workflow.memory import ConversationMemory
from workflow.tools import ToolRegistry


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch):
    """Every test starts from the bundled settings.yaml, never a cached override."""
    monkeypatch.setattr(settings_module, "_settings", None)
    monkeypatch.delenv("WORKFLOW_CONFIG", raising=False)


@pytest.fixture
def memory() -> ConversationMemory:
    return ConversationMemory(limit=3)


@pytest.fixture
def tool_registry() -> ToolRegistry:
    return ToolRegistry()


@pytest.fixture
def echo_workflow() -> Workflow:
    """Two-step workflow: an echo tool step followed by a closing step."""
    return (
        Workflow(memory_window=4)
        .register_tool("echo", "repeats the input", lambda input, ctx: f"echo:{input[-30:]}")
        .add_step(
            "Echo latest message",
            "\n".join([
                "Memory recap: {{memory}}",
                "Last user request: {{input}}",
                "Respond with tool output only.",
            ]),
            "echo",
        )
        .add_step(
            "Compose closing",
            "\n".join([
                "Tool results: {{toolResults}}",
                "Deliver a one sentence reply for the user.",
            ]),
        )
    )
