"""Tests for the process launcher against real POSIX processes."""

from __future__ import annotations

import os
import sys

import pytest

from privprompt.system.kernel import CommandResult, Kernel

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="POSIX shell required")


def test_run_sh_captures_both_streams():
    res = Kernel().run_sh("echo out; echo err >&2; exit 3")
    assert res.stdout == "out\n"
    assert res.stderr == "err\n"
    assert res.returncode == 3
    assert not res.ok
    assert not res.launch_failed


def test_stdin_is_closed():
    res = Kernel().run_sh("cat")
    assert res.ok
    assert res.stdout == ""


def test_run_uses_cwd(tmp_path):
    res = Kernel().run(["/bin/sh", "-c", "pwd"], cwd=str(tmp_path))
    assert os.path.realpath(res.stdout.strip()) == os.path.realpath(tmp_path)


def test_missing_executable_is_launch_failure(tmp_path):
    res = Kernel().run([str(tmp_path / "no-such-tool")])
    assert res.launch_failed
    assert not res.ok


def test_output_keeps_carriage_returns():
    res = Kernel().run_sh(r"printf 'a\r\nb\rc'")
    assert res.stdout == "a\r\nb\rc"


def test_powershell_runs_without_profile():
    # Any argv-echoing program stands in for powershell.exe.
    res = Kernel(powershell="/bin/echo").run_powershell("Get-Date")
    assert res.stdout == "-NoProfile -Command Get-Date\n"


def test_powershell_missing_is_launch_failure(monkeypatch):
    monkeypatch.setattr(Kernel, "_detect_powershell", staticmethod(lambda: None))
    res = Kernel().run_powershell("Get-Date")
    assert res.launch_failed


def test_ok_property():
    assert CommandResult("", "", 0).ok
    assert not CommandResult("", "", 0, launch_failed=True).ok
    assert not CommandResult("", "", 2).ok
