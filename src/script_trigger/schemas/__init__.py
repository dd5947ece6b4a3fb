# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""Script trigger schemas."""

from script_trigger.schemas.cause import (
    BuildCause,
    ExitCodeCause,
    OutputCause,
)
from script_trigger.schemas.trigger_def import (
    CaptureMode,
    ExecutionOutcome,
    ExecutionRequest,
    FiringResult,
    FiringState,
    ScriptWrapping,
    TriggerConfig,
)

__all__ = [
    "BuildCause",
    "ExitCodeCause",
    "OutputCause",
    "CaptureMode",
    "ScriptWrapping",
    "FiringState",
    "TriggerConfig",
    "ExecutionRequest",
    "ExecutionOutcome",
    "FiringResult",
]
