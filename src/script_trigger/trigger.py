# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""
Script trigger - one firing of a scheduled script.

Guards against shutdown, writes the script into the job workspace, runs it
with the parameter environment, classifies the outcome and asks the job to
schedule a build when the script exits 0.

A firing never raises to the scheduler, except on interruption. Failures
end up in the log and in the absence of a scheduled build.
"""

import io
import logging
import re
from pathlib import Path
from typing import Optional

from script_trigger.environment import build_environment
from script_trigger.host import Job, Scheduler
from script_trigger.launcher import Launcher, LocalLauncher, LogSink
from script_trigger.materializer import (
    build_command,
    delete_script,
    parse_marker,
    write_script,
)
from script_trigger.schemas import (
    BuildCause,
    CaptureMode,
    ExecutionOutcome,
    ExecutionRequest,
    ExitCodeCause,
    FiringResult,
    FiringState,
    OutputCause,
    ScriptWrapping,
    TriggerConfig,
)

logger = logging.getLogger(__name__)

# Child output gets its own logger so it can be filtered separately
output_logger = logging.getLogger("script_trigger.output")

WHITESPACE_RUN = re.compile(r"[\t\r\n]+")


def normalize_output(output: bytes) -> str:
    """
    Collapse runs of tabs and line breaks into one space and trim.

    Example:
        >>> normalize_output(b"line1\\r\\nline2\\tline3\\n")
        'line1 line2 line3'
    """
    text = output.decode("utf-8", errors="replace")
    return WHITESPACE_RUN.sub(" ", text).strip()


class ScriptTrigger:
    """Runs a configured script on each firing."""

    def __init__(self, config: TriggerConfig):
        self.config = config

    @property
    def schedule(self) -> str:
        return self.config.schedule

    @property
    def script(self) -> str:
        return self.config.script

    def fire(
        self,
        job: Job,
        scheduler: Scheduler,
        launcher: Optional[Launcher] = None,
    ) -> FiringResult:
        """
        Run one firing.

        Args:
            job: Job that owns the workspace and receives the build request
            scheduler: Queried for shutdown before doing anything
            launcher: Process launcher (LocalLauncher by default)

        Returns:
            FiringResult with the terminal state

        Raises:
            KeyboardInterrupt, SystemExit: Interruption while waiting on the
                script is not swallowed; the child is killed and the script
                file deleted first
        """
        try:
            if scheduler.is_quieting_down() or not job.is_buildable():
                logger.debug("Skipping firing: shutting down or job not buildable")
                return FiringResult(FiringState.ABORTED)

            outcome = self._run_script(job, launcher or LocalLauncher())
            if outcome is None:
                return FiringResult(FiringState.ABORTED)

            cause = self.classify(outcome)
            if cause is None:
                logger.info(f"Script exited with {outcome.exit_code}, no build scheduled")
                return FiringResult(FiringState.NO_OP, outcome)

            job.schedule_build(job.quiet_period, cause)
            return FiringResult(FiringState.CAUSE_EMITTED, outcome, cause)
        except Exception:
            logger.exception("Problem while executing ScriptTrigger.fire()")
            return FiringResult(FiringState.ABORTED)

    def classify(self, outcome: ExecutionOutcome) -> Optional[BuildCause]:
        """Build the cause for a qualifying outcome, None otherwise."""
        if not outcome.qualifies:
            return None

        if self.config.capture_mode == CaptureMode.EXIT_CODE:
            return ExitCodeCause(
                exit_code=outcome.exit_code,
                description=f"Script Trigger return {outcome.exit_code}",
            )

        raw = outcome.output or b""
        status = None
        if self.config.wrapping == ScriptWrapping.MARKER_WRAPPED:
            value, text = parse_marker(raw.decode("utf-8", errors="replace"))
            raw = text.encode("utf-8")
            status = value.strip() if value else None

        return OutputCause(
            output=normalize_output(raw),
            status=status or str(outcome.exit_code),
        )

    def _run_script(self, job: Job, launcher: Launcher) -> Optional[ExecutionOutcome]:
        """Write, run and delete the script. None when it could not run."""
        try:
            workspace = job.get_workspace()
            script_path = write_script(
                workspace,
                self.config.script,
                self.config.wrapping,
                path_separator=":" if launcher.is_unix() else ";",
            )
        except OSError as e:
            logger.warning(f"Unable to produce a script file: {e}")
            return None

        try:
            request = ExecutionRequest(
                workspace=workspace,
                script_path=script_path,
                command=build_command(script_path, launcher.is_unix(), self.config.trace),
                env=build_environment(job.get_parameter_definitions()),
            )
            return self._launch(request, launcher)
        except OSError as e:
            logger.warning(f"Command execution failed: {e}")
            return None
        finally:
            delete_script(script_path)

    def _launch(self, request: ExecutionRequest, launcher: Launcher) -> ExecutionOutcome:
        if self.config.capture_mode == CaptureMode.CAPTURED_OUTPUT:
            buffer = io.BytesIO()
            with LogSink(output_logger, logging.WARNING) as err_sink:
                exit_code = launcher.launch(
                    request.command, request.env, request.workspace, buffer, err_sink
                )
            output = buffer.getvalue()
            logger.info(f"Script exited with {exit_code}: {normalize_output(output)}")
            return ExecutionOutcome(exit_code, output)

        log_file: Optional[Path] = None
        if self.config.output_log:
            log_file = request.workspace / self.config.output_log
        with LogSink(output_logger, logging.INFO, log_file) as sink:
            exit_code = launcher.launch(request.command, request.env, request.workspace, sink)
        return ExecutionOutcome(exit_code)
