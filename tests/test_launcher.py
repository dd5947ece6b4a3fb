"""Tests for the process launcher and log sink."""

import io
import logging
import os
import shutil

import pytest

from script_trigger.launcher import LocalLauncher, LogSink


needs_bash = pytest.mark.skipif(
    shutil.which("bash") is None or os.pathsep != ":",
    reason="requires bash on a POSIX platform",
)

logger = logging.getLogger("tests.launcher")


class TestLogSink:
    """Tests for LogSink."""

    def test_logs_complete_lines(self, caplog):
        with caplog.at_level(logging.INFO, logger="tests.launcher"):
            sink = LogSink(logger)
            sink.write(b"one\ntw")
            sink.write(b"o\r\nthree")
            sink.close()

        assert [r.getMessage() for r in caplog.records] == ["one", "two", "three"]

    def test_tees_to_file(self, tmp_path):
        log_file = tmp_path / "out.log"

        with LogSink(logger, log_file=log_file) as sink:
            sink.write(b"hello\n")

        assert log_file.read_bytes() == b"hello\n"

    def test_invalid_utf8_replaced(self, caplog):
        with caplog.at_level(logging.INFO, logger="tests.launcher"):
            with LogSink(logger) as sink:
                sink.write(b"\xff\n")

        assert caplog.records[0].getMessage() == "�"


class TestLocalLauncher:
    """Tests for LocalLauncher."""

    def test_is_unix_follows_separator(self):
        assert LocalLauncher(":").is_unix() is True
        assert LocalLauncher(";").is_unix() is False

    def test_missing_executable_raises_oserror(self, tmp_path):
        with pytest.raises(OSError):
            LocalLauncher().launch(
                ["definitely-not-a-real-command-xyz"], {}, tmp_path, io.BytesIO()
            )

    @needs_bash
    def test_merged_output(self, tmp_path):
        """Without a stderr sink both streams land in stdout."""
        out = io.BytesIO()

        code = LocalLauncher().launch(
            ["bash", "-c", "echo a; echo b >&2; exit 5"], {}, tmp_path, out
        )

        assert code == 5
        assert b"a" in out.getvalue()
        assert b"b" in out.getvalue()

    @needs_bash
    def test_separate_stderr(self, tmp_path):
        out, err = io.BytesIO(), io.BytesIO()

        code = LocalLauncher().launch(
            ["bash", "-c", "echo a; echo b >&2"], {}, tmp_path, out, err
        )

        assert code == 0
        assert out.getvalue() == b"a\n"
        assert err.getvalue() == b"b\n"

    @needs_bash
    def test_env_layered_over_process_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("OUTER_VAR", "outer")
        out = io.BytesIO()

        LocalLauncher().launch(
            ["bash", "-c", 'echo "$OUTER_VAR $INNER_VAR $(pwd)"'],
            {"INNER_VAR": "inner"},
            tmp_path,
            out,
        )

        assert out.getvalue().decode().strip() == f"outer inner {tmp_path.resolve()}"
