#!/usr/bin/env python3
# privprompt/drivers/__init__.py
from __future__ import annotations

"""
Platform drivers.

Each module exposes `run(invocation, *, kernel, config, cancel)` and returns
an ExecutionResult or raises a classified ElevationError.
"""

from . import linux, mac, windows
from .plans import LinuxPlan, MacPlan, Plan, WindowsPlan

# sys.platform prefix -> driver module
DRIVERS = {
    "darwin": mac,
    "linux": linux,
    "win32": windows,
}

__all__ = ["DRIVERS", "LinuxPlan", "MacPlan", "Plan", "WindowsPlan", "linux", "mac", "windows"]
