#!/usr/bin/env python3
# privprompt/drivers/linux.py
from __future__ import annotations

"""
Linux driver: kdesudo or pkexec with a sentinel handshake.

Both tools exit non-zero for "prompt dismissed" and for "command failed"
alike. The elevated shell echoes a marker before running the command, so a
marker at the head of stdout proves the prompt was accepted.
"""

import logging
import os
import threading
from typing import Iterable, Optional

from privprompt.config import ElevatorConfig
from privprompt.drivers.plans import LinuxPlan
from privprompt.errors import Cancelled, IOFailure, NoAuthAgent
from privprompt.invocation import Invocation
from privprompt.result import MAGIC, ExecutionResult, normalize_linux
from privprompt.security.sanitize import escape_double_quotes, export_line
from privprompt.system.kernel import Kernel
from privprompt.ui.logging import command_preview

_log = logging.getLogger(__name__)


def find_binary(candidates: Iterable[str]) -> str:
    """Return the first candidate path that exists."""
    for path in candidates:
        try:
            os.stat(path)
        except (FileNotFoundError, NotADirectoryError):
            continue
        except OSError as exc:
            raise IOFailure(f"Unable to probe {path}: {exc}") from exc
        return path
    raise NoAuthAgent("Unable to find pkexec or kdesudo.")


def build_command_line(plan: LinuxPlan, invocation: Invocation) -> str:
    parts = [f'cd "{escape_double_quotes(invocation.cwd)}";']
    parts.extend(f"{export_line(k, v)};" for k, v in invocation.env_items)
    parts.append(f'"{escape_double_quotes(plan.binary)}"')

    if plan.is_kdesudo:
        parts.extend([
            "--comment",
            f'"{invocation.options.name} wants to make changes. '
            f'Enter your password to allow this."',
            "-d",
            "--",
        ])
    elif plan.is_pkexec:
        # Make the desktop's polkit agent prompt, not a tty fallback.
        parts.append("--disable-internal-agent")

    inner = f"echo {MAGIC.strip()}; {invocation.command}"
    parts.append(f'/bin/bash -c "{escape_double_quotes(inner)}"')
    return " ".join(parts)


def run(
    invocation: Invocation,
    *,
    kernel: Kernel,
    config: ElevatorConfig,
    cancel: Optional[threading.Event] = None,
) -> ExecutionResult:
    plan = LinuxPlan(binary=find_binary(config.linux_binaries))
    line = build_command_line(plan, invocation)
    if cancel is not None and cancel.is_set():
        raise Cancelled("Cancelled before launching the elevation prompt.")

    _log.debug("Elevating via %s: %s", plan.binary, command_preview(invocation.command))
    raw = kernel.run_sh(line)
    if raw.launch_failed:
        raise IOFailure(f"Unable to launch /bin/sh: {raw.stderr}")
    return normalize_linux(raw, invocation.command)
