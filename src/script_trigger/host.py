# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""
Host collaborators of the trigger.

Scheduler and Job are the interfaces the trigger consumes. LocalScheduler and
LocalJob implement them on this machine: the workspace is a plain directory
and scheduled builds are appended to a JSONL event log.
"""

import logging
import os
import uuid
from pathlib import Path
from typing import List, Optional, Protocol

from script_trigger.contributor import build_environment_for
from script_trigger.event_client import EventClient
from script_trigger.parameters import ParameterDefinition
from script_trigger.schemas import BuildCause

logger = logging.getLogger(__name__)

QUIET_DOWN_FILE = "quiet_down"
EVENTS_FILE = "events.jsonl"


class Scheduler(Protocol):
    def is_quieting_down(self) -> bool: ...


class Job(Protocol):
    quiet_period: int

    def is_buildable(self) -> bool: ...

    def get_workspace(self) -> Path: ...

    def get_parameter_definitions(self) -> Optional[List[ParameterDefinition]]: ...

    def schedule_build(self, quiet_period: int, cause: BuildCause) -> bool: ...


def get_state_dir() -> Path:
    """
    Get the local state directory.

    $SCRIPT_TRIGGER_HOME if set, otherwise ~/.script-trigger
    """
    env_dir = os.environ.get("SCRIPT_TRIGGER_HOME")
    if env_dir:
        return Path(env_dir).expanduser()
    return Path("~/.script-trigger").expanduser()


class LocalScheduler:
    """Reports shutdown while a quiet_down file exists in the state directory."""

    def __init__(self, state_dir: Optional[Path] = None):
        self.state_dir = state_dir or get_state_dir()

    def is_quieting_down(self) -> bool:
        return (self.state_dir / QUIET_DOWN_FILE).exists()

    def quiet_down(self) -> None:
        self.state_dir.mkdir(parents=True, exist_ok=True)
        (self.state_dir / QUIET_DOWN_FILE).touch()

    def cancel_quiet_down(self) -> None:
        (self.state_dir / QUIET_DOWN_FILE).unlink(missing_ok=True)


class LocalJob:
    """A job whose builds are requests recorded in an event log."""

    def __init__(
        self,
        name: str,
        workspace: Path,
        parameters: Optional[List[ParameterDefinition]] = None,
        quiet_period: int = 0,
        buildable: bool = True,
        event_client: Optional[EventClient] = None,
    ):
        self.name = name
        self.workspace = Path(workspace).expanduser()
        self.parameters = parameters
        self.quiet_period = quiet_period
        self.buildable = buildable
        self.event_client = event_client or EventClient(get_state_dir() / EVENTS_FILE)

    def is_buildable(self) -> bool:
        return self.buildable

    def get_workspace(self) -> Path:
        """Workspace directory, created on first use."""
        self.workspace.mkdir(parents=True, exist_ok=True)
        return self.workspace

    def get_parameter_definitions(self) -> Optional[List[ParameterDefinition]]:
        return self.parameters

    def schedule_build(self, quiet_period: int, cause: BuildCause) -> bool:
        env: dict = {}
        build_environment_for([cause], env)

        self.event_client.log_event(
            event_type="build.scheduled",
            job=self.name,
            correlation_id=str(uuid.uuid4()),
            payload={
                "quiet_period": quiet_period,
                "cause": cause.to_dict(),
                "short_description": cause.short_description,
                "environment": env,
            },
        )
        logger.info(f"Scheduled build of {self.name}: {cause.short_description}")
        return True

    def scheduled_builds(self) -> List[dict]:
        """Build requests recorded for this job."""
        return self.event_client.read_events("build.scheduled", job=self.name)
