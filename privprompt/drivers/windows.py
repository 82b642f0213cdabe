#!/usr/bin/env python3
# privprompt/drivers/windows.py
from __future__ import annotations

"""
Windows driver: UAC via `Start-Process -Verb runAs`.

Start-Process can elevate but cannot wait on or report the elevated
process on every supported release, so the elevated execute.bat records
its own exit code in a status file and this side polls for it.
"""

import logging
import threading
import time
from pathlib import Path
from typing import Optional

from privprompt.config import ElevatorConfig
from privprompt.drivers.plans import WindowsPlan
from privprompt.errors import (
    Cancelled,
    IOFailure,
    PermissionDenied,
    ValidationFailed,
    WaitTimeout,
)
from privprompt.invocation import Invocation
from privprompt.result import ExecutionResult, read_result_files
from privprompt.security.sanitize import escape_powershell_single_quoted, set_line
from privprompt.security.secure_dir import workspace
from privprompt.system.kernel import Kernel
from privprompt.ui.logging import command_preview

_log = logging.getLogger(__name__)

# "0\r" is the shortest complete status file.
STATUS_MIN_SIZE = 2
CRLF = "\r\n"


def _write_script(path: Path, lines: list[str]) -> None:
    try:
        with open(path, "w", encoding="utf-8", newline="") as fh:
            fh.write(CRLF.join(lines))
    except OSError as exc:
        raise IOFailure(f"Unable to write {path.name}: {exc}") from exc


def write_command_script(plan: WindowsPlan, invocation: Invocation) -> None:
    lines = [
        "@echo off",
        # UTF-8 code page
        "chcp 65001>nul",
        # /d in case cwd is on another drive
        f'cd /d "{invocation.cwd}"',
    ]
    lines.extend(set_line(k, v) for k, v in invocation.env_items)
    lines.append(invocation.command)
    _write_script(plan.command_script, lines)


def write_execute_script(plan: WindowsPlan) -> None:
    _write_script(plan.execute_script, [
        "@echo off",
        f'call "{plan.command_script}" > "{plan.stdout_file}" 2> "{plan.stderr_file}"',
        f'(echo %ERRORLEVEL%) > "{plan.status_file}"',
    ])


def elevate(plan: WindowsPlan, kernel: Kernel) -> None:
    target = escape_powershell_single_quoted(str(plan.execute_script))
    res = kernel.run_powershell(
        f"Start-Process -FilePath '{target}' -WindowStyle hidden -Verb runAs")
    # Error text is localized, so every launcher failure counts as a denial.
    if not res.ok:
        _log.debug("Start-Process failed (%s): %s", res.returncode, res.stderr.strip())
        raise PermissionDenied()


def _status_ready(plan: WindowsPlan) -> bool:
    try:
        return plan.status_file.stat().st_size >= STATUS_MIN_SIZE
    except FileNotFoundError:
        return False
    except OSError as exc:
        raise IOFailure(f"Unable to stat status file: {exc}") from exc


def wait_for_status(
    plan: WindowsPlan,
    *,
    interval: float,
    timeout: float,
    cancel: Optional[threading.Event] = None,
) -> None:
    """
    Block until the status file is complete.

    Raises PermissionDenied when neither status nor stdout exists after a
    wait: a passwordless admin clicking Yes can leave Start-Process
    successful while execute.bat never ran. This is a heuristic, not a
    documented UAC contract.
    """
    token = cancel if cancel is not None else threading.Event()
    deadline = time.monotonic() + timeout
    while not _status_ready(plan):
        if token.wait(interval):
            raise Cancelled("Cancelled while waiting for the elevated process.")
        if not plan.status_file.exists() and not plan.stdout_file.exists():
            raise PermissionDenied()
        if time.monotonic() >= deadline:
            raise WaitTimeout(
                f"Elevated process did not finish within {timeout:g}s.")


def run(
    invocation: Invocation,
    *,
    kernel: Kernel,
    config: ElevatorConfig,
    cancel: Optional[threading.Event] = None,
) -> ExecutionResult:
    if '"' in invocation.cwd:
        raise ValidationFailed("Current working directory cannot contain double-quotes.")
    if '"' in str(config.temp_root):
        raise ValidationFailed("Temp directory cannot contain double-quotes.")

    with workspace(config.temp_root, invocation.identifier) as path:
        plan = WindowsPlan(workspace=path)
        write_execute_script(plan)
        write_command_script(plan, invocation)
        if cancel is not None and cancel.is_set():
            raise Cancelled("Cancelled before launching the elevation prompt.")

        _log.debug("Elevating via UAC: %s", command_preview(invocation.command))
        elevate(plan, kernel)
        wait_for_status(
            plan,
            interval=config.poll_interval,
            timeout=config.poll_timeout,
            cancel=cancel,
        )
        return read_result_files(
            plan.status_file, plan.stdout_file, plan.stderr_file, invocation.command)
