"""Shared fixtures: an isolated config and a scriptable stand-in for Kernel."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from privprompt.config import load_config
from privprompt.security.secure_dir import is_identifier
from privprompt.system.kernel import CommandResult


class StubKernel:
    """Records every launch and answers from per-call handlers."""

    def __init__(
        self,
        *,
        sh: CommandResult | None = None,
        run: Callable[[list[str], str | None], CommandResult] | None = None,
        powershell: Callable[[str], CommandResult] | None = None,
    ) -> None:
        self._sh = sh
        self._run = run
        self._powershell = powershell
        self.calls: list[tuple[str, object]] = []

    def run_sh(self, line, *, cwd=None) -> CommandResult:
        self.calls.append(("sh", line))
        if self._sh is None:  # pragma: no cover - test stub
            raise AssertionError("unexpected run_sh")
        return self._sh

    def run(self, args, *, cwd=None) -> CommandResult:
        self.calls.append(("run", list(args)))
        if self._run is None:  # pragma: no cover - test stub
            raise AssertionError("unexpected run")
        return self._run(list(args), cwd)

    def run_powershell(self, command, *, cwd=None) -> CommandResult:
        self.calls.append(("powershell", command))
        if self._powershell is None:  # pragma: no cover - test stub
            raise AssertionError("unexpected run_powershell")
        return self._powershell(command)


def ok(stdout: str = "", stderr: str = "") -> CommandResult:
    return CommandResult(stdout=stdout, stderr=stderr, returncode=0)


def failed(stderr: str = "", returncode: int = 1) -> CommandResult:
    return CommandResult(stdout="", stderr=stderr, returncode=returncode)


def workspaces_in(root: Path) -> list[Path]:
    return [p for p in root.iterdir() if is_identifier(p.name)]


@pytest.fixture
def temp_root(tmp_path: Path) -> Path:
    root = tmp_path / "tmp"
    root.mkdir()
    return root


@pytest.fixture
def config(tmp_path: Path, temp_root: Path):
    return load_config(
        cwd=tmp_path,
        environ={},
        temp_root=str(temp_root),
        poll_interval=0.01,
        poll_timeout=2,
    )
