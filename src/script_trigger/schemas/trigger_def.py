# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""Trigger definition and firing schemas.

TriggerConfig (YAML) → fire → ExecutionRequest → launch → ExecutionOutcome → FiringResult
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional

from script_trigger.schemas.cause import BuildCause


class CaptureMode(Enum):
    """How the script's stdout is handled.

    exit_code: stream to a log sink, qualify on exit code only
    captured_output: buffer in memory, carry the text in the cause
    """

    EXIT_CODE = "exit_code"
    CAPTURED_OUTPUT = "captured_output"


class ScriptWrapping(Enum):
    """Whether the script body is wrapped with the CAUSE marker epilogue."""

    RAW = "raw"
    MARKER_WRAPPED = "marker_wrapped"


class FiringState(Enum):
    """Terminal state of one firing."""

    ABORTED = "aborted"
    CAUSE_EMITTED = "cause_emitted"
    NO_OP = "no_op"


@dataclass(frozen=True)
class TriggerConfig:
    """Immutable trigger configuration.

    schedule is handed to the periodic scheduler as-is; script is opaque
    user text passed through verbatim.
    """
    schedule: str
    script: str
    capture_mode: CaptureMode = CaptureMode.EXIT_CODE
    wrapping: ScriptWrapping = ScriptWrapping.RAW
    trace: bool = False  # bash -x on POSIX
    output_log: Optional[str] = None  # workspace-relative file for streamed output


@dataclass
class ExecutionRequest:
    """Everything needed to launch one script run."""
    workspace: Path
    script_path: Path
    command: List[str]
    env: Dict[str, str] = field(default_factory=dict)


@dataclass
class ExecutionOutcome:
    """Result of one process run."""
    exit_code: int
    output: Optional[bytes] = None  # only set in captured_output mode

    @property
    def qualifies(self) -> bool:
        return self.exit_code == 0


@dataclass
class FiringResult:
    """What happened during a firing."""
    state: FiringState
    outcome: Optional[ExecutionOutcome] = None
    cause: Optional[BuildCause] = None
