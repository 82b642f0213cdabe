#!/usr/bin/env python3
# privprompt/security/secure_dir.py
from __future__ import annotations
"""
Per-invocation workspace management.

Each elevated call gets its own directory under the temp root, named by an
unpredictable 32-hex identifier. The directory holds generated scripts and
the result files the elevated process writes back.

Notes:
- Identifiers come from SHA-256 over 256 random bytes plus the call's name and
  command, so a local process cannot pre-create the path.
- Removal refuses anything whose final component is not a canonical
  identifier, so cleanup can never target a shared or attacker-chosen path.
- Hiding the directory on Windows is best-effort and non-fatal.
"""

import ctypes
import logging
import os
import random
import re
import shutil
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from cryptography.hazmat.primitives import hashes

from privprompt.errors import IdentifierError, IOFailure, WorkspaceError

_log = logging.getLogger(__name__)

IDENTIFIER_LENGTH = 32
ENTROPY_BYTES = 256
_IDENTIFIER_RE = re.compile(r"^[0-9a-f]{32}$")
_SALT = b"privprompt-workspace-1"

# Win32 file attribute flags (used to hide the directory and prevent indexing)
_FILE_ATTRIBUTE_HIDDEN = 0x2
_FILE_ATTRIBUTE_NOT_CONTENT_INDEXED = 0x2000


def _windows_hide(path: Path) -> None:
    """Best-effort: set HIDDEN and NOT_CONTENT_INDEXED on Windows paths."""
    if os.name != "nt":
        return
    try:
        ctypes.windll.kernel32.SetFileAttributesW(  # type: ignore[attr-defined]
            str(path),
            _FILE_ATTRIBUTE_HIDDEN | _FILE_ATTRIBUTE_NOT_CONTENT_INDEXED,
        )
    except Exception as exc:  # noqa: BLE001
        _log.debug("Unable to hide %s: %s", path, exc)


def _entropy() -> bytes:
    try:
        return os.urandom(ENTROPY_BYTES)
    except (NotImplementedError, OSError) as exc:
        _log.warning(
            "Entropy source unavailable (%s); workspace identifier uses a "
            "timestamp seed and is predictable.", exc)
        return f"{time.time()}{random.random()}".encode("utf-8")


def is_identifier(value: object) -> bool:
    return isinstance(value, str) and bool(_IDENTIFIER_RE.match(value))


def new_workspace_id(name: str, command: str) -> str:
    """Return a fresh 32-hex workspace identifier for one invocation."""
    digest = hashes.Hash(hashes.SHA256())
    digest.update(_SALT)
    digest.update(name.encode("utf-8"))
    digest.update(command.encode("utf-8"))
    digest.update(_entropy())
    identifier = digest.finalize().hex()[-IDENTIFIER_LENGTH:]
    if not is_identifier(identifier):
        # Cleanup removes <root>/<identifier>; a short value would widen that.
        raise IdentifierError("Expected a valid workspace identifier.")
    return identifier


def create_workspace(root: str | os.PathLike[str], identifier: str) -> Path:
    """
    Create <root>/<identifier> and return it.

    The directory must not exist yet: a pre-existing path is treated as
    tampering, not reused.
    """
    if not is_identifier(identifier):
        raise IdentifierError(f"Refusing non-canonical identifier: {identifier!r}")
    path = Path(root) / identifier
    try:
        path.mkdir(mode=0o700)
    except FileExistsError as exc:
        raise IOFailure(f"Workspace already exists: {path}") from exc
    except OSError as exc:
        raise IOFailure(f"Unable to create workspace {path}: {exc}") from exc
    _windows_hide(path)
    _log.debug("Created workspace %s", path)
    return path


def remove_workspace(path: str | os.PathLike[str] | None) -> None:
    """
    Recursively remove a workspace directory.

    Already-removed paths are fine. Raises WorkspaceError for an empty path or
    one that does not end in a canonical identifier, IOFailure if removal fails.
    """
    if path is None or not str(path).strip():
        raise WorkspaceError("Argument path not defined.")
    target = Path(path)
    if not is_identifier(target.name):
        raise WorkspaceError(f"Refusing to remove non-workspace path: {target}")
    try:
        shutil.rmtree(target)
    except FileNotFoundError:
        _log.debug("Workspace %s already removed", target)
        return
    except OSError as exc:
        raise IOFailure(f"Unable to remove workspace {target}: {exc}") from exc
    _log.debug("Removed workspace %s", target)


@contextmanager
def workspace(root: str | os.PathLike[str], identifier: str) -> Iterator[Path]:
    """
    Scoped workspace: created on enter, removed exactly once on exit.

    A removal failure never replaces the error that ended the block; it is
    logged and attached to that error as a note. On a clean exit it is only
    logged, so the caller still gets its result.
    """
    path = create_workspace(root, identifier)
    try:
        yield path
    except BaseException as primary:
        try:
            remove_workspace(path)
        except Exception as cleanup_exc:  # noqa: BLE001
            _log.warning("Workspace cleanup failed: %s", cleanup_exc)
            primary.add_note(f"Workspace cleanup failed: {cleanup_exc}")
        raise
    else:
        try:
            remove_workspace(path)
        except Exception as cleanup_exc:  # noqa: BLE001
            _log.warning("Workspace cleanup failed: %s", cleanup_exc)
