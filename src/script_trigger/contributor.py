# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""Publishes a trigger cause into the environment of the build it started."""

from typing import Dict, Iterable

from script_trigger.schemas import ExitCodeCause, OutputCause

ENV_PREFIX = "ScriptTrigger_"


def env_name(var: str) -> str:
    return ENV_PREFIX + var


def build_environment_for(causes: Iterable[object], env: Dict[str, str]) -> None:
    """
    Add trigger variables for the first script trigger cause of a build.

    OutputCause -> ScriptTrigger_status, ScriptTrigger_output
    ExitCodeCause -> ScriptTrigger_status, ScriptTrigger_description
    """
    for cause in causes:
        if isinstance(cause, OutputCause):
            env[env_name("status")] = str(cause.status)
            env[env_name("output")] = str(cause.output)
            return
        if isinstance(cause, ExitCodeCause):
            env[env_name("status")] = str(cause.exit_code)
            env[env_name("description")] = cause.description
            return
