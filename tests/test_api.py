"""Tests for the public entry points: validation, dispatch and async delivery."""

from __future__ import annotations

import dataclasses
import threading

import pytest

from privprompt import api
from privprompt.errors import (
    CommandFailed,
    PermissionDenied,
    UnsupportedPlatform,
    ValidationFailed,
)
from privprompt.result import MAGIC
from privprompt.system.kernel import CommandResult

from .conftest import StubKernel, failed


@pytest.fixture
def linux_config(config, tmp_path, monkeypatch):
    pkexec = tmp_path / "bin" / "pkexec"
    pkexec.parent.mkdir()
    pkexec.write_text("#!/bin/sh\n")
    monkeypatch.setattr(api, "_platform_key", lambda: "linux")
    return dataclasses.replace(config, linux_binaries=(str(pkexec),))


@pytest.mark.parametrize("command", ["", "   ", None, 42])
def test_command_must_be_non_empty_text(command, linux_config):
    kernel = StubKernel()
    with pytest.raises(ValidationFailed):
        api.run_elevated(command, {"name": "My Tool"}, config=linux_config, kernel=kernel)
    assert kernel.calls == []


@pytest.mark.parametrize(
    "options",
    [
        {"name": "bad/name"},
        {"name": "x" * 71},
        {"name": "ok", "icns": ""},
        {"name": "ok", "env": {}},
        {"name": "ok", "env": {"A": 1}},
        {"name": "ok", "env": {"A": "x\r\nwhoami /all"}},
        {"name": "ok", "colour": "blue"},
        ["name", "ok"],
    ],
)
def test_bad_options_are_rejected_before_any_launch(options, linux_config, temp_root):
    kernel = StubKernel()
    with pytest.raises(ValidationFailed):
        api.run_elevated("echo hi", options, config=linux_config, kernel=kernel)
    assert kernel.calls == []
    assert list(temp_root.iterdir()) == []


def test_unsupported_platform(monkeypatch, config):
    monkeypatch.setattr(api, "_platform_key", lambda: "plan9")
    with pytest.raises(UnsupportedPlatform):
        api.run_elevated("echo hi", {"name": "My Tool"}, config=config, kernel=StubKernel())


def test_dispatches_to_linux_driver(linux_config):
    kernel = StubKernel(sh=CommandResult(stdout=MAGIC + "root\n", stderr="", returncode=0))
    stdout, stderr = api.run_elevated("whoami", {"name": "My Tool"}, config=linux_config, kernel=kernel)

    assert (stdout, stderr) == ("root\n", "")
    kind, line = kernel.calls[0]
    assert kind == "sh"
    assert "--disable-internal-agent" in line


def test_name_none_falls_back_to_default(linux_config):
    kernel = StubKernel(sh=CommandResult(stdout=MAGIC, stderr="", returncode=0))
    result = api.run_elevated("true", {"name": None}, config=linux_config, kernel=kernel)
    assert result.stdout == ""


def test_async_future_resolves(linux_config):
    kernel = StubKernel(sh=CommandResult(stdout=MAGIC + "done\n", stderr="", returncode=0))
    future = api.run_elevated_async("echo done", {"name": "My Tool"}, config=linux_config, kernel=kernel)
    assert future.result(timeout=10).stdout == "done\n"


def test_async_callback_gets_streams_of_failed_command(linux_config):
    kernel = StubKernel(sh=CommandResult(stdout=MAGIC + "partial\n", stderr="boom\n", returncode=3))
    delivered = threading.Event()
    seen = {}

    def callback(error, stdout, stderr):
        seen.update(error=error, stdout=stdout, stderr=stderr)
        delivered.set()

    future = api.run_elevated_async(
        "make", {"name": "My Tool"}, callback, config=linux_config, kernel=kernel)

    assert delivered.wait(10)
    assert isinstance(seen["error"], CommandFailed)
    assert seen["error"].exit_code == 3
    assert (seen["stdout"], seen["stderr"]) == ("partial\n", "boom\n")
    with pytest.raises(CommandFailed):
        future.result(timeout=10)


def test_async_callback_on_denial_has_empty_streams(linux_config):
    kernel = StubKernel(sh=failed("Error executing command as another user: Not authorized", 127))
    delivered = threading.Event()
    seen = {}

    def callback(error, stdout, stderr):
        seen.update(error=error, stdout=stdout, stderr=stderr)
        delivered.set()

    api.run_elevated_async("id", {"name": "My Tool"}, callback, config=linux_config, kernel=kernel)

    assert delivered.wait(10)
    assert isinstance(seen["error"], PermissionDenied)
    assert (seen["stdout"], seen["stderr"]) == ("", "")


def test_async_callback_on_success(linux_config):
    kernel = StubKernel(sh=CommandResult(stdout=MAGIC + "ok\n", stderr="", returncode=0))
    delivered = threading.Event()
    seen = {}

    def callback(error, stdout, stderr):
        seen.update(error=error, stdout=stdout, stderr=stderr)
        delivered.set()

    api.run_elevated_async("id", {"name": "My Tool"}, callback, config=linux_config, kernel=kernel)

    assert delivered.wait(10)
    assert seen == {"error": None, "stdout": "ok\n", "stderr": ""}


def test_concurrent_calls_each_run_their_own_command(linux_config):
    lines = []
    lock = threading.Lock()

    class _Recording(StubKernel):
        def run_sh(self, line, *, cwd=None):
            with lock:
                lines.append(line)
            return CommandResult(stdout=MAGIC, stderr="", returncode=0)

    futures = [
        api.run_elevated_async(f"echo {i}", {"name": "My Tool"}, config=linux_config, kernel=_Recording())
        for i in range(8)
    ]
    for future in futures:
        future.result(timeout=10)
    assert len(lines) == 8
    assert {line.rsplit("echo ", 1)[1] for line in lines} == {f'{i}"' for i in range(8)}
