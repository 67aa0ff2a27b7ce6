"""
Configuration loader for the workflow engine.
Reads settings from YAML file with environment variable substitution.
"""
from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml


@dataclass
class WorkflowConfig:
    memory_window: int = 6              # entries kept in conversation memory
    tool_timeout_seconds: float = 0     # 0 = no timeout on async tool handlers
    serialize_invocations: bool = True  # one invoke at a time per workflow instance


@dataclass
class Settings:
    app_name: str = "ChainFlow"
    debug: bool = False
    log_level: str = "INFO"
    log_format: str = "console"         # "console" | "json"
    workflow: WorkflowConfig = field(default_factory=WorkflowConfig)


_settings: Optional[Settings] = None


def _substitute_env_vars(value: str) -> str:
    """Replace ${VAR_NAME} patterns with environment variable values."""
    pattern = re.compile(r'\$\{(\w+)\}')
    def replacer(match):
        var_name = match.group(1)
        return os.environ.get(var_name, match.group(0))
    return pattern.sub(replacer, value)


def _process_values(obj: Any) -> Any:
    """Recursively substitute env vars in all string values."""
    if isinstance(obj, str):
        return _substitute_env_vars(obj)
    elif isinstance(obj, dict):
        return {k: _process_values(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_process_values(v) for v in obj]
    return obj


def _as_bool(value: Any) -> bool:
    # Env-substituted values arrive as strings
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def load_settings(config_path: str = None) -> Settings:
    """Load settings from YAML file."""
    global _settings

    if config_path is None:
        config_path = os.environ.get(
            "WORKFLOW_CONFIG",
            str(Path(__file__).parent / "settings.yaml"),
        )

    settings = Settings()

    if Path(config_path).exists():
        with open(config_path) as f:
            raw = yaml.safe_load(f) or {}
        raw = _process_values(raw)

        settings.app_name = raw.get("app_name", settings.app_name)
        settings.debug = _as_bool(raw.get("debug", settings.debug))
        settings.log_level = str(raw.get("log_level", settings.log_level)).upper()
        settings.log_format = raw.get("log_format", settings.log_format)

        if "workflow" in raw:
            wf = raw["workflow"] or {}
            settings.workflow = WorkflowConfig(
                memory_window=int(wf.get("memory_window", 6)),
                tool_timeout_seconds=float(wf.get("tool_timeout_seconds", 0)),
                serialize_invocations=_as_bool(wf.get("serialize_invocations", True)),
            )

    _settings = settings
    return settings


def get_settings() -> Settings:
    """Return cached settings or load from default path."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings
