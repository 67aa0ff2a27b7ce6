#!/usr/bin/env python3
"""
Run the demo station-assistant workflow from the command line.

Each query is one conversational turn against the same workflow, so later
turns see earlier ones through memory.

Usage:
    python scripts/run_workflow.py "Summarize station status"
    python scripts/run_workflow.py "Weather at location:orbital platform" --trace
    python scripts/run_workflow.py "Hi" "Status?" --metadata origin=console --memory-window 4
"""
import argparse
import asyncio
import json
import sys

# Load .env before any config is read
from dotenv import load_dotenv

from config.settings import load_settings
from utils.logging import configure_logging
from workflow.demo import DEMO_MEMORY_WINDOW, create_demo_workflow
from workflow.errors import WorkflowError


def positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected an integer, got {value!r}")
    if number < 1:
        raise argparse.ArgumentTypeError(f"Must be a positive integer, got {number}")
    return number


def parse_metadata(pairs: list[str]) -> dict[str, str]:
    metadata = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise argparse.ArgumentTypeError(f"Metadata must be key=value, got {pair!r}")
        metadata[key] = value
    return metadata


async def run_queries(queries: list[str], metadata: dict[str, str],
                      memory_window: int, show_trace: bool) -> list[str]:
    workflow = create_demo_workflow(memory_window=memory_window)
    lines = []
    for query in queries:
        result = await workflow.invoke(query, metadata)
        if show_trace:
            lines.append(json.dumps(result.model_dump(mode="json"), indent=2, ensure_ascii=False))
        else:
            lines.append(result.final)
    return lines


def main(argv: list[str] = None) -> int:
    parser = argparse.ArgumentParser(description="Run the demo conversational workflow")
    parser.add_argument("queries", nargs="+", help="One query per conversational turn")
    parser.add_argument("--metadata", action="append", default=[],
                        help="key=value pair visible to every step (repeatable)")
    parser.add_argument("--memory-window", type=positive_int, default=DEMO_MEMORY_WINDOW,
                        help="Conversation memory size in entries")
    parser.add_argument("--trace", action="store_true", help="Print the full result as JSON")
    parser.add_argument("--config", default=None, help="Path to settings YAML")
    args = parser.parse_args(argv)

    load_dotenv()
    settings = load_settings(args.config)
    configure_logging(settings.log_level, settings.log_format, settings.app_name,
                      debug=settings.debug)

    try:
        metadata = parse_metadata(args.metadata)
    except argparse.ArgumentTypeError as e:
        parser.error(str(e))

    try:
        lines = asyncio.run(run_queries(args.queries, metadata, args.memory_window, args.trace))
    except WorkflowError as e:
        print(f"Workflow unavailable: {e}", file=sys.stderr)
        return 1

    for line in lines:
        print(line)
    return 0


if __name__ == "__main__":
    sys.exit(main())
