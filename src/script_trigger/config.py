# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""
Trigger configuration loading.

A YAML file describes one trigger and the local job it starts:

    schedule: "*/5 * * * *"
    script: |
      test -f ready.flag
    capture_mode: exit_code      # or captured_output
    wrapping: raw                # or marker_wrapped
    job:
      name: nightly
      workspace: ~/work/nightly
      parameters:
        - {name: FOO, type: string, default: bar}
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

from script_trigger.host import LocalJob
from script_trigger.parameters import ParameterError, parse_bool, parse_parameters
from script_trigger.schedule import ScheduleError, parse_schedule
from script_trigger.schemas import CaptureMode, ScriptWrapping, TriggerConfig

DEFAULT_CONFIG_NAME = "script-trigger.yaml"


class ConfigError(Exception):
    """Raised when the configuration is missing or invalid."""
    pass


def get_config_path(config_path: Optional[str] = None) -> Path:
    """
    Resolve the configuration file path.

    Order:
    1. Explicit path (--config)
    2. $SCRIPT_TRIGGER_CONFIG
    3. ./script-trigger.yaml
    """
    if config_path:
        return Path(config_path).expanduser()
    env_path = os.environ.get("SCRIPT_TRIGGER_CONFIG")
    if env_path:
        return Path(env_path).expanduser()
    return Path(DEFAULT_CONFIG_NAME)


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Load the raw YAML mapping."""
    path = get_config_path(config_path)
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"unable to read {path}: {e}")
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in {path}: {e}")

    if not isinstance(data, dict):
        raise ConfigError(f"config file {path} must contain a YAML mapping")
    return data


def _parse_enum(enum_cls, value: Any, field_name: str):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ConfigError(f"{field_name} must be one of: {allowed}, got: {value!r}")


def _parse_flag(value: Any, field_name: str) -> bool:
    try:
        return parse_bool(value, field_name)
    except ParameterError as e:
        raise ConfigError(str(e))


def _job_name(data: Dict[str, Any]) -> Optional[str]:
    job_data = data.get("job")
    if isinstance(job_data, dict) and job_data.get("name"):
        return str(job_data["name"])
    return None


def parse_trigger(data: Dict[str, Any]) -> TriggerConfig:
    """
    Build a TriggerConfig from the top-level mapping.

    Hashed cron fields (H) are spread by job.name and rejected without one.
    """
    schedule = data.get("schedule")
    if not schedule:
        raise ConfigError("schedule is required")
    try:
        parse_schedule(schedule, _job_name(data))
    except ScheduleError as e:
        raise ConfigError(str(e))

    script = data.get("script")
    if script is None or not isinstance(script, str):
        raise ConfigError("script is required and must be a string")

    output_log = data.get("output_log")
    if output_log is not None and (
        not isinstance(output_log, str) or "/" in output_log or "\\" in output_log
    ):
        raise ConfigError(f"output_log must be a plain file name, got: {output_log!r}")

    return TriggerConfig(
        schedule=schedule,
        script=script,
        capture_mode=_parse_enum(CaptureMode, data.get("capture_mode", "exit_code"), "capture_mode"),
        wrapping=_parse_enum(ScriptWrapping, data.get("wrapping", "raw"), "wrapping"),
        trace=_parse_flag(data.get("trace", False), "trace"),
        output_log=output_log,
    )


def parse_job(data: Dict[str, Any], base_dir: Optional[Path] = None) -> LocalJob:
    """
    Build the local job from the `job` mapping.

    A relative workspace is resolved against base_dir (the config file's directory).
    """
    job_data = data.get("job")
    if not isinstance(job_data, dict):
        raise ConfigError("job mapping is required")

    name = job_data.get("name")
    if not name:
        raise ConfigError("job.name is required")

    workspace_raw = job_data.get("workspace")
    if not workspace_raw:
        raise ConfigError("job.workspace is required")
    workspace = Path(str(workspace_raw)).expanduser()
    if not workspace.is_absolute() and base_dir is not None:
        workspace = base_dir / workspace

    quiet_period = job_data.get("quiet_period", 0)
    if not isinstance(quiet_period, int) or quiet_period < 0:
        raise ConfigError(f"job.quiet_period must be a non-negative integer, got: {quiet_period!r}")

    try:
        parameters = parse_parameters(job_data.get("parameters"))
    except ParameterError as e:
        raise ConfigError(f"invalid parameters: {e}")

    return LocalJob(
        name=str(name),
        workspace=workspace,
        parameters=parameters or None,
        quiet_period=quiet_period,
        buildable=_parse_flag(job_data.get("buildable", True), "job.buildable"),
    )


def load_trigger(config_path: Optional[str] = None) -> Tuple[TriggerConfig, LocalJob]:
    """Load the trigger and its job from a config file."""
    data = load_config(config_path)
    base_dir = get_config_path(config_path).resolve().parent
    return parse_trigger(data), parse_job(data, base_dir)
