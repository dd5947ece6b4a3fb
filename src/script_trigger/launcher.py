# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""
Process launcher for trigger scripts.

launch() blocks until the child exits. There is no timeout.
"""

import logging
import os
import subprocess
from pathlib import Path
from typing import BinaryIO, Dict, List, Optional, Protocol

from script_trigger.materializer import is_posix


class OutputSink(Protocol):
    def write(self, data: bytes) -> object: ...


class Launcher(Protocol):
    """Starts a child process and waits for it."""

    def is_unix(self) -> bool: ...

    def launch(
        self,
        command: List[str],
        env: Dict[str, str],
        cwd: Path,
        stdout: OutputSink,
        stderr: Optional[OutputSink] = None,
    ) -> int: ...


class LogSink:
    """
    Binary sink that forwards complete lines to a logger.

    Optionally tees everything into a log file.
    """

    def __init__(
        self,
        logger: logging.Logger,
        level: int = logging.INFO,
        log_file: Optional[Path] = None,
    ):
        self.logger = logger
        self.level = level
        self._pending = b""
        self._file: Optional[BinaryIO] = open(log_file, "wb") if log_file else None

    def write(self, data: bytes) -> int:
        if self._file is not None:
            self._file.write(data)
        self._pending += data
        *lines, self._pending = self._pending.split(b"\n")
        for line in lines:
            self._emit(line)
        return len(data)

    def _emit(self, line: bytes) -> None:
        text = line.decode("utf-8", errors="replace").rstrip("\r")
        self.logger.log(self.level, text)

    def close(self) -> None:
        if self._pending:
            self._emit(self._pending)
            self._pending = b""
        if self._file is not None:
            self._file.close()
            self._file = None

    def __enter__(self) -> "LogSink":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class LocalLauncher:
    """Runs commands on this machine with subprocess."""

    def __init__(self, path_separator: Optional[str] = None):
        self.path_separator = path_separator
        self.logger = logging.getLogger(__name__)

    def is_unix(self) -> bool:
        return is_posix(self.path_separator)

    def launch(
        self,
        command: List[str],
        env: Dict[str, str],
        cwd: Path,
        stdout: OutputSink,
        stderr: Optional[OutputSink] = None,
    ) -> int:
        """
        Run a command and block until it exits.

        Args:
            command: Argument list
            env: Variables layered over the current process environment
            cwd: Working directory
            stdout: Receives the child's stdout
            stderr: Receives the child's stderr; merged into stdout when None

        Returns:
            Exit code of the child

        Raises:
            OSError: If the process cannot be started
        """
        full_env = os.environ.copy()
        full_env.update(env)

        self.logger.info(f"Executing: {' '.join(command)}")

        proc = subprocess.Popen(
            command,
            cwd=str(cwd),
            env=full_env,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT if stderr is None else subprocess.PIPE,
        )

        try:
            if stderr is None:
                for chunk in iter(lambda: proc.stdout.read1(8192), b""):
                    stdout.write(chunk)
                proc.stdout.close()
                return proc.wait()

            out, err = proc.communicate()
            if out:
                stdout.write(out)
            if err:
                stderr.write(err)
            return proc.returncode
        except BaseException:
            # Interrupted while waiting: do not leave the child running
            proc.kill()
            proc.wait()
            raise
