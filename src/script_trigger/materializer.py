"""
Script materializer for the script trigger.

Writes the user's script into a uniquely named temporary file inside the job
workspace and picks the interpreter command for the host platform.

Copyright 2025 Ben Mensi
Licensed under the Apache License, Version 2.0
"""

import logging
import os
import re
import tempfile
from pathlib import Path
from typing import List, Optional, Tuple

from script_trigger.schemas import ScriptWrapping

logger = logging.getLogger(__name__)

MARKER = "#:#:#"
CAUSE_VAR = "CAUSE"
CRLF = "\r\n"
TEMP_PREFIX = "script_trigger"

# #:#:#CAUSE#:#:#<value>#:#:#
MARKER_PATTERN = re.compile(
    re.escape(MARKER + CAUSE_VAR + MARKER) + r"(.*?)" + re.escape(MARKER) + r"[ \t]*\r?$",
    re.MULTILINE,
)


class ScriptProductionError(OSError):
    """Raised when the script file cannot be written."""
    pass


def is_posix(path_separator: Optional[str] = None) -> bool:
    """POSIX platforms separate PATH entries with ':', Windows with ';'."""
    if path_separator is None:
        path_separator = os.pathsep
    return path_separator == ":"


def script_extension(posix: bool) -> str:
    return ".sh" if posix else ".bat"


def build_command(script_path: Path, posix: bool, trace: bool = False) -> List[str]:
    """
    Command line that runs the script file.

    Example:
        >>> build_command(Path("/ws/script_trigger1.sh"), posix=True)
        ['bash', '/ws/script_trigger1.sh']
        >>> build_command(Path("C:/ws/script_trigger1.bat"), posix=False)
        ['cmd', '/c', 'call', 'C:/ws/script_trigger1.bat']
    """
    if posix:
        if trace:
            return ["bash", "-x", str(script_path)]
        return ["bash", str(script_path)]
    return ["cmd", "/c", "call", str(script_path)]


def render_script(script: str, wrapping: ScriptWrapping, posix: bool) -> str:
    """Render the file contents for a script body."""
    if wrapping == ScriptWrapping.RAW:
        return script

    marker_line = MARKER + CAUSE_VAR + MARKER

    if posix:
        # The EXIT trap runs even when the script calls exit, and keeps its status
        return (
            f"{CAUSE_VAR}=\n"
            f"trap 'echo \"{marker_line}${{{CAUSE_VAR}}}{MARKER}\"' EXIT\n"
            f"{script}\n"
        )

    return (
        "@set " + CAUSE_VAR + "=" + CRLF
        + "@echo off" + CRLF
        + "call :TheActualScript" + CRLF
        + "@echo off" + CRLF
        + "echo " + marker_line + "%" + CAUSE_VAR + "%" + MARKER + CRLF
        + "goto :EOF" + CRLF
        + ":TheActualScript" + CRLF
        + script + CRLF
    )


def write_script(
    workspace: Path,
    script: str,
    wrapping: ScriptWrapping = ScriptWrapping.RAW,
    path_separator: Optional[str] = None,
) -> Path:
    """
    Write the script into a fresh temporary file in the workspace.

    Args:
        workspace: Existing job workspace directory
        script: Raw script body
        wrapping: Whether to append the CAUSE marker epilogue
        path_separator: Overrides os.pathsep for platform detection

    Returns:
        Path of the created file; the caller deletes it

    Raises:
        ScriptProductionError: If the file cannot be created or written
    """
    posix = is_posix(path_separator)
    content = render_script(script, wrapping, posix)

    try:
        fd, name = tempfile.mkstemp(
            prefix=TEMP_PREFIX,
            suffix=script_extension(posix),
            dir=str(workspace),
        )
    except OSError as e:
        raise ScriptProductionError(f"Unable to produce a script file in {workspace}: {e}") from e

    try:
        # newline="" keeps CRLF in batch files as written
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(content)
    except OSError as e:
        delete_script(Path(name))
        raise ScriptProductionError(f"Unable to write script file {name}: {e}") from e

    logger.debug(f"Wrote script file {name}")
    return Path(name)


def delete_script(script_path: Path) -> bool:
    """
    Delete a script file produced by write_script.

    Failures are logged and never raised.

    Returns:
        True if the file is gone afterwards
    """
    try:
        script_path.unlink()
        return True
    except FileNotFoundError:
        return True
    except OSError as e:
        logger.warning(f"Unable to delete script file {script_path}: {e}")
        return False


def parse_marker(text: str) -> Tuple[Optional[str], str]:
    """
    Extract the CAUSE value echoed by a marker-wrapped script.

    A value containing the marker itself is not handled.

    Returns:
        (cause value or None when no marker line, text without marker lines)
    """
    values = MARKER_PATTERN.findall(text)
    if not values:
        return None, text
    stripped = MARKER_PATTERN.sub("", text)
    return values[-1], stripped
