#!/usr/bin/env python3
# privprompt/drivers/mac.py
from __future__ import annotations

"""
macOS driver: prebuilt signed applet bundle.

Sequence (any failure stops the rest; the workspace is removed regardless):
  1) unzip the applet asset into <workspace>/<name>.app
  2) copy the optional icon into Contents/Resources/applet.icns
  3) set CFBundleName to "<name> Password Prompt" (text of the OS dialog)
  4) write Contents/MacOS/sudo-prompt-command
  5) run ./applet from Contents/MacOS; it prompts, runs the script elevated,
     and writes code/stdout/stderr next to itself
  6) decode those three files

The applet itself is an external asset; see ElevatorConfig.applet_path.
"""

import logging
import os
import threading
from pathlib import Path
from typing import Optional

from privprompt.config import ElevatorConfig
from privprompt.drivers.plans import MacPlan
from privprompt.errors import Cancelled, IOFailure, ValidationFailed
from privprompt.invocation import Invocation
from privprompt.result import ExecutionResult, read_result_files
from privprompt.security.sanitize import escape_double_quotes, export_line
from privprompt.security.secure_dir import workspace
from privprompt.system.kernel import Kernel
from privprompt.ui.logging import command_preview

_log = logging.getLogger(__name__)

UNZIP = "/usr/bin/unzip"
DEFAULTS = "/usr/bin/defaults"


def extract_applet(plan: MacPlan, applet: Path, kernel: Kernel) -> None:
    if not applet.is_file():
        raise IOFailure(f"Applet asset not found: {applet}")
    # -o: overwrite without asking
    res = kernel.run([UNZIP, "-o", str(applet), "-d", str(plan.bundle)])
    if not res.ok:
        raise IOFailure(f"Unable to extract applet: {res.stderr.strip()}")


def install_icon(plan: MacPlan, icns: Optional[str]) -> None:
    if not icns:
        return
    try:
        data = Path(icns).read_bytes()
    except OSError as exc:
        raise IOFailure(f"Unable to read icon {icns}: {exc}") from exc
    try:
        plan.icon.parent.mkdir(parents=True, exist_ok=True)
        plan.icon.write_bytes(data)
    except OSError as exc:
        raise IOFailure(f"Unable to install icon: {exc}") from exc


def patch_property_list(plan: MacPlan, name: str, kernel: Kernel) -> None:
    value = f"{name} Password Prompt"
    # `defaults` documents single-quoted values only and has no escape for them.
    if "'" in value:
        raise ValidationFailed("Value should not contain single quotes.")
    res = kernel.run([DEFAULTS, "write", str(plan.info_plist), "CFBundleName", value])
    if not res.ok:
        raise IOFailure(f"Unable to patch {plan.info_plist.name}: {res.stderr.strip()}")


def write_command_script(plan: MacPlan, invocation: Invocation) -> None:
    # The cd runs in a subshell of the applet's own script, so it only
    # affects the user's command.
    lines = [f'cd "{escape_double_quotes(invocation.cwd)}"']
    lines.extend(export_line(k, v) for k, v in invocation.env_items)
    lines.append(invocation.command)
    try:
        plan.command_script.write_text("\n".join(lines), encoding="utf-8")
    except OSError as exc:
        raise IOFailure(f"Unable to write command script: {exc}") from exc


def launch(plan: MacPlan, kernel: Kernel) -> None:
    """
    Run the applet binary directly, not through `open`, so cwd applies.
    A relative ./applet avoids quoting a bundle path that may hold spaces.
    """
    res = kernel.run([f"./{plan.binary.name}"], cwd=str(plan.macos_dir))
    if res.launch_failed:
        raise IOFailure(f"Unable to launch applet: {res.stderr}")
    if not res.ok:
        # A declined prompt also lands here; the code file decides.
        _log.debug("Applet exited %s: %s", res.returncode, res.stderr.strip())


def run(
    invocation: Invocation,
    *,
    kernel: Kernel,
    config: ElevatorConfig,
    cancel: Optional[threading.Event] = None,
) -> ExecutionResult:
    if not os.environ.get("USER"):
        raise IOFailure("env['USER'] not defined.")

    with workspace(config.temp_root, invocation.identifier) as path:
        plan = MacPlan(workspace=path, bundle=path / f"{invocation.options.name}.app")
        extract_applet(plan, config.applet_path, kernel)
        install_icon(plan, invocation.options.icns)
        patch_property_list(plan, invocation.options.name, kernel)
        write_command_script(plan, invocation)
        if cancel is not None and cancel.is_set():
            raise Cancelled("Cancelled before launching the elevation prompt.")

        _log.debug("Launching applet for: %s", command_preview(invocation.command))
        launch(plan, kernel)
        return read_result_files(
            plan.code_file, plan.stdout_file, plan.stderr_file, invocation.command)
