"""Tests for the demo station-assistant workflow and its command-line runner."""
import argparse
import json

import pytest

from scripts import run_workflow
from workflow.demo import DEMO_MEMORY_WINDOW, create_demo_workflow, memory_tool, weather_tool
from workflow.engine import Workflow
from workflow.memory import ConversationMemory
from workflow.models import ChainContext


@pytest.fixture
def demo():
    return create_demo_workflow()


# ══════════════════════════════════════════════════════
#  DEMO TOOLS
# ══════════════════════════════════════════════════════

class TestDemoTools:

    def test_weather_extracts_location(self):
        ctx = ChainContext(memory=ConversationMemory())
        out = weather_tool("Please check location:Orbital Platform, thanks", ctx)
        assert out == "Simulated forecast for Orbital Platform: clear skies, light tailwind."

    def test_weather_defaults_to_station(self):
        ctx = ChainContext(memory=ConversationMemory())
        assert weather_tool("no place given", ctx).startswith("Simulated forecast for the station:")

    def test_memory_tool_empty(self):
        ctx = ChainContext(memory=ConversationMemory())
        assert memory_tool("", ctx) == "Memory empty."

    def test_memory_tool_latest_entry(self):
        memory = ConversationMemory()
        memory.append("user", "older")
        memory.append("assistant", "newest")
        assert memory_tool("", ChainContext(memory=memory)) == 'assistant said "newest"'


# ══════════════════════════════════════════════════════
#  DEMO WORKFLOW
# ══════════════════════════════════════════════════════

class TestDemoWorkflow:

    def test_structure(self, demo):
        assert demo.memory.limit == DEMO_MEMORY_WINDOW
        assert [s.name for s in demo.steps] == [
            "Assess request", "Run weather check", "Compose response",
        ]
        assert [s.tool_name for s in demo.steps] == ["memory", "weather", ""]
        assert sorted(demo.tools.names) == ["memory", "weather"]

    @pytest.mark.asyncio
    async def test_executes_all_steps(self, demo):
        result = await demo.invoke("Summarize station status", {"source": "unit-test"})
        assert len(result.trace) == 3
        assert result.final
        assert len(demo.memory) <= DEMO_MEMORY_WINDOW

        assess, weather, compose = result.trace
        assert 'user said "Summarize station status"' in assess.tool_result
        assert '{"source":"unit-test"}' in assess.prompt
        assert "for the station" in weather.tool_result
        assert compose.tool_result is None
        assert "Simulated forecast" in compose.prompt

    @pytest.mark.asyncio
    async def test_location_reaches_weather_tool(self, demo):
        result = await demo.invoke("Request weather: location:orbital platform")
        assert "Simulated forecast for orbital platform" in result.trace[1].tool_result
        assert result.trace[1].tool_result.startswith("weather (Fetches weather data): ")

    @pytest.mark.asyncio
    async def test_memory_window_drops_first_turn(self, demo):
        await demo.invoke("First message")
        await demo.invoke("Second message")
        await demo.invoke("Third message")
        texts = [e.text for e in demo.memory.snapshot()]
        assert len(texts) == DEMO_MEMORY_WINDOW
        assert "First message" not in texts
        assert "Third message" in texts

    @pytest.mark.asyncio
    async def test_custom_synthesizer_passed_through(self):
        demo = create_demo_workflow(synthesizer=lambda prompt, obs: "ack")
        result = await demo.invoke("hello")
        assert [t.response for t in result.trace] == ["ack", "ack", "ack"]


# ══════════════════════════════════════════════════════
#  COMMAND LINE
# ══════════════════════════════════════════════════════

class TestRunWorkflowScript:

    def test_prints_final_answer_per_query(self, capsys):
        exit_code = run_workflow.main(["Summarize station status", "Any weather?"])
        out = capsys.readouterr().out.strip().splitlines()
        assert exit_code == 0
        assert len(out) == 2
        assert all(line for line in out)

    def test_trace_output_is_json(self, capsys):
        exit_code = run_workflow.main(["Summarize station status", "--trace",
                                       "--metadata", "origin=console"])
        payload = json.loads(capsys.readouterr().out)
        assert exit_code == 0
        assert len(payload["trace"]) == 3
        assert payload["final"] == payload["trace"][-1]["response"]
        assert '"origin":"console"' in payload["trace"][0]["prompt"]

    def test_bad_metadata_pair_rejected(self):
        with pytest.raises(SystemExit):
            run_workflow.main(["q", "--metadata", "novalue"])

    def test_workflow_error_reported(self, capsys, monkeypatch):
        monkeypatch.setattr(run_workflow, "create_demo_workflow",
                            lambda memory_window: Workflow(memory_window=memory_window))
        exit_code = run_workflow.main(["q"])
        captured = capsys.readouterr()
        assert exit_code == 1
        assert "No steps registered in the LangChain workflow." in captured.err

    @pytest.mark.parametrize("window", ["0", "-3", "abc"])
    def test_invalid_memory_window_rejected_by_parser(self, window, capsys):
        with pytest.raises(SystemExit) as exc:
            run_workflow.main(["q", "--memory-window", window])
        assert exc.value.code == 2
        assert "--memory-window" in capsys.readouterr().err

    def test_positive_int(self):
        assert run_workflow.positive_int("4") == 4
        with pytest.raises(argparse.ArgumentTypeError):
            run_workflow.positive_int("0")

    def test_parse_metadata(self):
        assert run_workflow.parse_metadata(["a=1", "b=x=y"]) == {"a": "1", "b": "x=y"}
