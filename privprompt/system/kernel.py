# privprompt/system/kernel.py
"""
Process-launch interface shared by the platform drivers.

This module provides a small, well-typed facade for:
- Running a POSIX shell line, PowerShell, or an argv list.
- An admin check.

Drivers take a Kernel as a collaborator so tests can swap in a stub that
returns canned CommandResults instead of launching real elevation tools.
"""

from __future__ import annotations

import os
import shutil
import subprocess
from dataclasses import dataclass
from typing import List, Optional, Sequence

# ---- Public result type -----------------------------------------------------


@dataclass(slots=True)
class CommandResult:
    """Normalized result for process execution."""
    stdout: str
    stderr: str
    returncode: int
    launch_failed: bool = False

    @property
    def ok(self) -> bool:
        return self.returncode == 0 and not self.launch_failed


# ---- Kernel -----------------------------------------------------------------


class Kernel:
    """
    Thin interface to run shells and processes.

    Notes:
        - stdin is always DEVNULL. PowerShell on Windows 7 waits forever on an
          open stdin, and nothing here is interactive.
        - Uses CREATE_NO_WINDOW to keep executions quiet in consoles/GUI.
        - PowerShell selection prefers Windows PowerShell, then pwsh.
    """

    # Creation flag to prevent flashing a console window in GUI context.
    _CREATE_NO_WINDOW = 0x08000000 if os.name == "nt" else 0

    def __init__(self, powershell: Optional[str] = None, *, encoding: str = "utf-8") -> None:
        """
        Args:
            powershell: Optional explicit path/exe name. If None, autodetects
                lazily on first use.
            encoding: Decode stdout/stderr using this encoding.
        """
        self._ps = powershell
        self._encoding = encoding

    # ---- Shell runners ------------------------------------------------------

    def run_sh(
        self,
        line: str,
        *,
        cwd: Optional[str] = None,
    ) -> CommandResult:
        """Run a composite line with /bin/sh -c."""
        return self._exec(["/bin/sh", "-c", line], cwd=cwd)

    def run_powershell(
        self,
        command: str,
        *,
        cwd: Optional[str] = None,
    ) -> CommandResult:
        """Run a command string in PowerShell via -NoProfile -Command."""
        ps = self._ps or self._detect_powershell()
        if not ps:
            return CommandResult("", "PowerShell not found.", 1, launch_failed=True)
        self._ps = ps

        args: List[str] = [ps, "-NoProfile", "-Command", command]
        return self._exec(args, cwd=cwd)

    def run(
        self,
        args: Sequence[str],
        *,
        cwd: Optional[str] = None,
    ) -> CommandResult:
        """Run an argv list directly, no shell involved."""
        return self._exec(list(args), cwd=cwd)

    # ---- Privilege helpers --------------------------------------------------

    @staticmethod
    def is_admin() -> bool:
        """Return True if the current process already has admin/root rights."""
        if os.name != "nt":
            return hasattr(os, "geteuid") and os.geteuid() == 0
        try:
            import ctypes  # local import keeps module lightweight at top
            return bool(ctypes.windll.shell32.IsUserAnAdmin())
        except Exception:
            return False

    # ---- Internals ----------------------------------------------------------

    def _exec(
        self,
        args: Sequence[str],
        *,
        cwd: Optional[str],
    ) -> CommandResult:
        try:
            completed = subprocess.run(
                args,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                cwd=cwd,
                creationflags=self._CREATE_NO_WINDOW,
                text=False,  # capture bytes; decode ourselves
            )
        except OSError as exc:
            # Missing executable, bad cwd, permission to execute.
            return CommandResult(stdout="", stderr=str(exc), returncode=1, launch_failed=True)
        return CommandResult(
            stdout=completed.stdout.decode(self._encoding, errors="replace"),
            stderr=completed.stderr.decode(self._encoding, errors="replace"),
            returncode=completed.returncode,
        )

    @staticmethod
    def _detect_powershell() -> Optional[str]:
        """
        Prefer Windows PowerShell (powershell.exe). If not found, try pwsh (PS7+).
        """
        for exe in ("powershell.exe", "pwsh.exe", "pwsh"):
            path = shutil.which(exe)
            if path:
                return path
        return None
