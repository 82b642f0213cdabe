#!/usr/bin/env python3
# privprompt/result.py
from __future__ import annotations

"""
Result normalization.

Each driver produces raw material in its own shape: Linux gets a captured
process result with a sentinel, macOS and Windows get an exit-code file plus
stdout/stderr files. The functions here turn that into one ExecutionResult or
raise one classified error.

Rule shared by every file-based driver: a missing exit-code/status file is
PermissionDenied, never success.
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from privprompt.errors import (
    CommandFailed,
    IOFailure,
    NoAuthAgent,
    PermissionDenied,
)
from privprompt.system.kernel import CommandResult

MAGIC = "SUDOPROMPT\n"
_NO_AGENT_RE = re.compile(r"No authentication agent found")
_LEADING_INT_RE = re.compile(r"^\s*(-?\d+)")


@dataclass(frozen=True, slots=True)
class ExecutionResult:
    """
    Outcome of a successful elevated run.

    Unpacks as (stdout, stderr) for callers that only want the streams.
    """
    stdout: str
    stderr: str
    exit_code: int = 0

    def __iter__(self) -> Iterator[str]:
        yield self.stdout
        yield self.stderr


def normalize_linux(raw: CommandResult, command: str) -> ExecutionResult:
    """Classify a kdesudo/pkexec run using the sentinel at the head of stdout."""
    elevated = raw.stdout[: len(MAGIC)] == MAGIC
    if not elevated:
        if _NO_AGENT_RE.search(raw.stderr):
            raise NoAuthAgent()
        raise PermissionDenied()

    stdout = raw.stdout[len(MAGIC):]
    if raw.returncode != 0:
        raise CommandFailed(command, raw.returncode, stdout, raw.stderr)
    return ExecutionResult(stdout=stdout, stderr=raw.stderr)


def parse_exit_code(text: str) -> int:
    match = _LEADING_INT_RE.match(text)
    if not match:
        raise IOFailure(f"Unreadable exit status: {text[:40]!r}")
    return int(match.group(1))


def normalize_status(
    code_text: str | None,
    stdout: str,
    stderr: str,
    command: str,
) -> ExecutionResult:
    """Classify an exit-code file's contents (None when the file is missing)."""
    if code_text is None:
        raise PermissionDenied()
    code = parse_exit_code(code_text)
    if code != 0:
        raise CommandFailed(command, code, stdout, stderr)
    return ExecutionResult(stdout=stdout, stderr=stderr)


def _read_optional(path: Path) -> str | None:
    try:
        # Bytes, not text mode: \r\n and bare \r must reach the caller unchanged.
        return path.read_bytes().decode("utf-8", errors="replace")
    except FileNotFoundError:
        return None
    except OSError as exc:
        raise IOFailure(f"Unable to read {path}: {exc}") from exc


def read_result_files(code: Path, stdout: Path, stderr: Path, command: str) -> ExecutionResult:
    """
    Decode the three result files an elevated process leaves behind.

    Output files that never got created read as empty strings; only the
    exit-code file decides between denied and ran.
    """
    code_text = _read_optional(code)
    if code_text is None:
        raise PermissionDenied()
    return normalize_status(
        code_text,
        _read_optional(stdout) or "",
        _read_optional(stderr) or "",
        command,
    )
