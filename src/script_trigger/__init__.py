# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""Cron-scheduled script trigger.

Runs a user script on a schedule and schedules a build when it exits 0.
"""

from script_trigger.schemas import (
    CaptureMode,
    ExitCodeCause,
    FiringState,
    OutputCause,
    ScriptWrapping,
    TriggerConfig,
)
from script_trigger.trigger import ScriptTrigger

__version__ = "0.3.0"

__all__ = [
    "ScriptTrigger",
    "TriggerConfig",
    "CaptureMode",
    "ScriptWrapping",
    "FiringState",
    "ExitCodeCause",
    "OutputCause",
]
