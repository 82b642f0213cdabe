#!/usr/bin/env python3
# privprompt/__init__.py
from __future__ import annotations
"""
Run one shell command elevated through the host OS's own prompt.

    from privprompt import run_elevated
    stdout, stderr = run_elevated("whoami", {"name": "My Tool"})

Linux uses kdesudo or pkexec, macOS a prebuilt signed applet, Windows UAC.
Nothing here configures logging; call `init_logger()` to see what happens.
"""

from .api import run_elevated, run_elevated_async
from .config import ElevatorConfig, load_config
from .errors import (
    Cancelled,
    CommandFailed,
    ElevationError,
    IdentifierError,
    IOFailure,
    NoAuthAgent,
    PermissionDenied,
    UnsupportedPlatform,
    ValidationFailed,
    WaitTimeout,
    WorkspaceError,
)
from .invocation import ExecOptions
from .result import ExecutionResult
from .ui import init_logger, init_logger_from_config

__version__ = "0.1.0"

__all__ = [
    "Cancelled",
    "CommandFailed",
    "ElevationError",
    "ElevatorConfig",
    "ExecOptions",
    "ExecutionResult",
    "IOFailure",
    "IdentifierError",
    "NoAuthAgent",
    "PermissionDenied",
    "UnsupportedPlatform",
    "ValidationFailed",
    "WaitTimeout",
    "WorkspaceError",
    "init_logger",
    "init_logger_from_config",
    "load_config",
    "run_elevated",
    "run_elevated_async",
]
