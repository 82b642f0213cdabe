"""Tests for result normalization."""

from __future__ import annotations

import pytest

from privprompt.errors import CommandFailed, IOFailure, NoAuthAgent, PermissionDenied
from privprompt.result import (
    MAGIC,
    ExecutionResult,
    normalize_linux,
    normalize_status,
    parse_exit_code,
    read_result_files,
)
from privprompt.system.kernel import CommandResult


def test_linux_grant_strips_sentinel():
    raw = CommandResult(stdout=MAGIC + "hello\n", stderr="", returncode=0)
    result = normalize_linux(raw, "echo hello")
    assert result == ExecutionResult(stdout="hello\n", stderr="")


def test_linux_grant_with_failing_command_is_command_failure():
    raw = CommandResult(stdout=MAGIC + "partial\n", stderr="no such file\n", returncode=2)
    with pytest.raises(CommandFailed) as excinfo:
        normalize_linux(raw, "cat /nope")
    assert excinfo.value.exit_code == 2
    assert excinfo.value.stdout == "partial\n"
    assert excinfo.value.stderr == "no such file\n"


def test_linux_denied_without_sentinel():
    raw = CommandResult(stdout="", stderr="Error executing command as another user: Not authorized\n", returncode=127)
    with pytest.raises(PermissionDenied):
        normalize_linux(raw, "echo hello")


def test_linux_missing_agent_is_classified():
    raw = CommandResult(
        stdout="",
        stderr="Error executing command as another user: No authentication agent found.\n",
        returncode=127,
    )
    with pytest.raises(NoAuthAgent):
        normalize_linux(raw, "echo hello")


def test_linux_zero_exit_without_sentinel_is_still_denied():
    raw = CommandResult(stdout="hello\n", stderr="", returncode=0)
    with pytest.raises(PermissionDenied):
        normalize_linux(raw, "echo hello")


@pytest.mark.parametrize("text,code", [("0", 0), ("0 \r\n", 0), (" 1\n", 1), ("255\r\n", 255), ("-1", -1)])
def test_parse_exit_code(text, code):
    assert parse_exit_code(text) == code


def test_parse_exit_code_rejects_garbage():
    with pytest.raises(IOFailure):
        parse_exit_code("ECHO is off.")


def test_missing_status_is_never_success():
    with pytest.raises(PermissionDenied):
        normalize_status(None, "out", "", "cmd")


def test_nonzero_status_carries_code_and_stderr():
    with pytest.raises(CommandFailed) as excinfo:
        normalize_status("1\n", "", "boom", "false")
    assert excinfo.value.exit_code == 1
    assert excinfo.value.stderr == "boom"
    assert "false" in str(excinfo.value)


def test_read_result_files(tmp_path):
    code, out, err = tmp_path / "code", tmp_path / "stdout", tmp_path / "stderr"
    with pytest.raises(PermissionDenied):
        read_result_files(code, out, err, "cmd")

    code.write_text("0\n")
    out.write_text("hello\n")
    stdout, stderr = read_result_files(code, out, err, "cmd")
    assert stdout == "hello\n"
    assert stderr == ""


def test_result_files_keep_line_endings_byte_for_byte(tmp_path):
    code, out, err = tmp_path / "code", tmp_path / "stdout", tmp_path / "stderr"
    code.write_bytes(b"0 \r\n")
    out.write_bytes(b"line1\r\n50%\r100%\n")
    err.write_bytes(b"warn\r\n\xff")

    stdout, stderr = read_result_files(code, out, err, "cmd")

    assert stdout == "line1\r\n50%\r100%\n"
    assert stderr == "warn\r\n\ufffd"
