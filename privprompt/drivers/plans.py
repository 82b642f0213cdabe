#!/usr/bin/env python3
# privprompt/drivers/plans.py
from __future__ import annotations

"""
Per-platform execution plans.

One variant per OS, each carrying only the paths its driver needs. A driver
builds its own variant; nothing fills optional fields on a shared object.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Union


@dataclass(frozen=True, slots=True)
class LinuxPlan:
    """Linux streams everything; no workspace files are needed."""
    binary: str

    @property
    def is_kdesudo(self) -> bool:
        return "kdesudo" in Path(self.binary).name.lower()

    @property
    def is_pkexec(self) -> bool:
        return "pkexec" in Path(self.binary).name.lower()


@dataclass(frozen=True, slots=True)
class MacPlan:
    """Applet bundle extracted into <workspace>/<name>.app."""
    workspace: Path
    bundle: Path

    @property
    def macos_dir(self) -> Path:
        return self.bundle / "Contents" / "MacOS"

    @property
    def binary(self) -> Path:
        return self.macos_dir / "applet"

    @property
    def info_plist(self) -> Path:
        return self.bundle / "Contents" / "Info.plist"

    @property
    def icon(self) -> Path:
        return self.bundle / "Contents" / "Resources" / "applet.icns"

    @property
    def command_script(self) -> Path:
        return self.macos_dir / "sudo-prompt-command"

    # Written by the applet after the elevated run
    @property
    def code_file(self) -> Path:
        return self.macos_dir / "code"

    @property
    def stdout_file(self) -> Path:
        return self.macos_dir / "stdout"

    @property
    def stderr_file(self) -> Path:
        return self.macos_dir / "stderr"


@dataclass(frozen=True, slots=True)
class WindowsPlan:
    """Batch scripts and result files directly under the workspace."""
    workspace: Path

    @property
    def command_script(self) -> Path:
        return self.workspace / "command.bat"

    @property
    def execute_script(self) -> Path:
        return self.workspace / "execute.bat"

    @property
    def stdout_file(self) -> Path:
        return self.workspace / "stdout"

    @property
    def stderr_file(self) -> Path:
        return self.workspace / "stderr"

    @property
    def status_file(self) -> Path:
        return self.workspace / "status"


Plan = Union[LinuxPlan, MacPlan, WindowsPlan]
