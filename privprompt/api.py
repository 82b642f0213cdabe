#!/usr/bin/env python3
# privprompt/api.py
from __future__ import annotations

"""
Orchestrator: validate, pick a driver by OS, run, normalize.

Public entry points:
- run_elevated(command, options) -> ExecutionResult  (blocking)
- run_elevated_async(command, options, callback) -> Future[ExecutionResult]
"""

import logging
import sys
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Mapping, Optional

from privprompt.config import ElevatorConfig, load_config
from privprompt.drivers import DRIVERS
from privprompt.errors import (
    Cancelled,
    CommandFailed,
    UnsupportedPlatform,
    ValidationFailed,
)
from privprompt.invocation import ExecOptions, Invocation
from privprompt.result import ExecutionResult
from privprompt.security.secure_dir import new_workspace_id
from privprompt.system.kernel import Kernel
from privprompt.ui.logging import command_preview

_log = logging.getLogger(__name__)

Callback = Callable[[Optional[BaseException], str, str], None]

_EXECUTOR: ThreadPoolExecutor | None = None
_EXECUTOR_LOCK = threading.Lock()


def _platform_key() -> str:
    return "linux" if sys.platform.startswith("linux") else sys.platform


def _executor() -> ThreadPoolExecutor:
    global _EXECUTOR
    with _EXECUTOR_LOCK:
        if _EXECUTOR is None:
            _EXECUTOR = ThreadPoolExecutor(thread_name_prefix="privprompt")
        return _EXECUTOR


def run_elevated(
    command: str,
    options: ExecOptions | Mapping[str, Any] | None = None,
    *,
    cancel: Optional[threading.Event] = None,
    config: Optional[ElevatorConfig] = None,
    kernel: Optional[Kernel] = None,
) -> ExecutionResult:
    """
    Run `command` through the host OS's elevation prompt.

    Args:
        command: Shell text, run by bash (Linux/macOS) or cmd.exe (Windows).
        options: ExecOptions or a mapping with name/icns/env.
        cancel: Event that aborts a pending wait; raises Cancelled after cleanup.
        config: Preloaded configuration; loaded from the environment if None.
        kernel: Process launcher, replaceable in tests.

    Returns:
        ExecutionResult, which also unpacks as (stdout, stderr).

    Raises:
        ValidationFailed, UnsupportedPlatform, NoAuthAgent, PermissionDenied,
        CommandFailed, IOFailure, Cancelled, WaitTimeout.
    """
    if not isinstance(command, str) or not command.strip():
        raise ValidationFailed("command must be a non-empty string.")
    opts = ExecOptions.coerce(options)

    driver = DRIVERS.get(_platform_key())
    if driver is None:
        raise UnsupportedPlatform(f"Platform not yet supported: {sys.platform}")

    cfg = config or load_config()
    invocation = Invocation(
        command=command,
        options=opts,
        identifier=new_workspace_id(opts.name, command),
    )
    if Kernel.is_admin():
        _log.debug("Process is already elevated; prompting anyway.")

    _log.info("Requesting elevation for %r", opts.name)
    _log.debug("Command: %s", command_preview(command))
    try:
        result = driver.run(
            invocation,
            kernel=kernel or Kernel(),
            config=cfg,
            cancel=cancel,
        )
    except CommandFailed as exc:
        _log.info("Elevated command exited %s", exc.exit_code)
        raise
    except Exception as exc:
        _log.info("Elevation failed: %s", exc)
        raise
    _log.info("Elevated command finished")
    return result


def _deliver(future: Future, callback: Callback) -> None:
    if future.cancelled():
        callback(Cancelled("Cancelled before the call started."), "", "")
        return
    error = future.exception()
    if error is None:
        result = future.result()
        callback(None, result.stdout, result.stderr)
    elif isinstance(error, CommandFailed):
        callback(error, error.stdout, error.stderr)
    else:
        callback(error, "", "")


def run_elevated_async(
    command: str,
    options: ExecOptions | Mapping[str, Any] | None = None,
    callback: Optional[Callback] = None,
    *,
    cancel: Optional[threading.Event] = None,
    config: Optional[ElevatorConfig] = None,
    kernel: Optional[Kernel] = None,
) -> "Future[ExecutionResult]":
    """
    Submit run_elevated to a shared worker pool.

    If `callback` is given it is called once as callback(error, stdout, stderr)
    when the call completes. The Future is returned either way.
    """
    future = _executor().submit(
        run_elevated,
        command,
        options,
        cancel=cancel,
        config=config,
        kernel=kernel,
    )
    if callback is not None:
        future.add_done_callback(lambda f: _deliver(f, callback))
    return future
