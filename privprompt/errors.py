#!/usr/bin/env python3
# privprompt/errors.py
from __future__ import annotations

"""
Error taxonomy for elevated execution.

Every failure a caller can see is an ElevationError subclass, so one
`except ElevationError` catches them all. Some classes also derive from the
matching builtin (ValueError, OSError) for callers that already handle those.
"""

PERMISSION_DENIED = "User did not grant permission."
NO_POLKIT_AGENT = "No polkit authentication agent found."


class ElevationError(Exception):
    """Base class for every classified failure."""


class ValidationFailed(ElevationError, ValueError):
    """Bad name, icon or environment. Raised before touching the OS."""


class UnsupportedPlatform(ElevationError):
    """The host OS is not Linux, macOS or Windows."""


class NoAuthAgent(ElevationError):
    """Linux only: no kdesudo/pkexec, or pkexec found no polkit agent."""

    def __init__(self, message: str = NO_POLKIT_AGENT) -> None:
        super().__init__(message)


class PermissionDenied(ElevationError):
    """The user declined the prompt, or completion artifacts never appeared."""

    def __init__(self, message: str = PERMISSION_DENIED) -> None:
        super().__init__(message)


class CommandFailed(ElevationError):
    """Elevation succeeded but the command itself exited non-zero."""

    def __init__(self, command: str, exit_code: int, stdout: str = "", stderr: str = "") -> None:
        super().__init__(f"Command failed: {command}\n{stderr}")
        self.command = command
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr


class IOFailure(ElevationError, OSError):
    """Workspace creation, script write, asset or result read failed."""


class IdentifierError(ElevationError):
    """A workspace identifier was not in canonical form."""


class WorkspaceError(ElevationError, ValueError):
    """Refused to remove a path that is not a validated workspace."""


class Cancelled(ElevationError):
    """The caller's cancel token fired while waiting for completion."""


class WaitTimeout(ElevationError):
    """The elevated process did not signal completion before POLL_TIMEOUT."""


__all__ = [
    "PERMISSION_DENIED",
    "NO_POLKIT_AGENT",
    "ElevationError",
    "ValidationFailed",
    "UnsupportedPlatform",
    "NoAuthAgent",
    "PermissionDenied",
    "CommandFailed",
    "IOFailure",
    "IdentifierError",
    "WorkspaceError",
    "Cancelled",
    "WaitTimeout",
]
