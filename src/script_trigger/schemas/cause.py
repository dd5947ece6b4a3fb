# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""Build causes attached to a downstream build scheduled by the trigger."""

from dataclasses import dataclass
from typing import Any, Dict, Union


@dataclass(frozen=True)
class ExitCodeCause:
    """Cause carrying the script's exit code."""
    exit_code: int
    description: str

    @property
    def short_description(self) -> str:
        return self.description

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": "exit_code",
            "exit_code": self.exit_code,
            "description": self.description,
        }


@dataclass(frozen=True)
class OutputCause:
    """Cause carrying the script's normalized stdout and a status label."""
    output: str
    status: str

    @property
    def short_description(self) -> str:
        return f"Started by script trigger: {self.status}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": "output",
            "output": self.output,
            "status": self.status,
        }


BuildCause = Union[ExitCodeCause, OutputCause]
