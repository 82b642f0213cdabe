#!/usr/bin/env python3
# privprompt/ui/ansi.py
from __future__ import annotations

import ctypes
import os
import re
from typing import Optional

# Only the SGR codes the log handler uses.
ANSI = {
    "reset": "\x1b[0m",
    "red": "\x1b[31m",
    "yellow": "\x1b[33m",
    "magenta": "\x1b[35m",
    "bright_black": "\x1b[90m",
}

ANSI_REGEX = re.compile(r"\x1b\[[0-9;]*[A-Za-z]")

_vt_enabled_cache: Optional[bool] = None  # cached across calls


def strip_ansi(text: str) -> str:
    """Remove ANSI escape sequences from text."""
    return ANSI_REGEX.sub("", text)


def enable_windows_vt() -> bool:
    """
    Enable ANSI (VT) processing on Windows consoles when possible.
    Returns True if ANSI escapes should work on the current process.
    On non-Windows systems, always returns True.
    """
    global _vt_enabled_cache
    if _vt_enabled_cache is not None:
        return _vt_enabled_cache

    if os.name != "nt":
        _vt_enabled_cache = True
        return True

    # Terminals that already support ANSI
    if (
        os.environ.get("WT_SESSION")                  # Windows Terminal
        or os.environ.get("ANSICON")
        or os.environ.get("ConEmuANSI") == "ON"
        or os.environ.get("TERM", "").startswith(("xterm", "vt100"))
    ):
        _vt_enabled_cache = True
        return True

    # Try to enable VT on the classic console's stderr
    try:
        kernel32 = ctypes.windll.kernel32  # type: ignore[attr-defined]
        ENABLE_VIRTUAL_TERMINAL_PROCESSING = 0x0004
        STD_ERROR_HANDLE = -12
        handle = kernel32.GetStdHandle(STD_ERROR_HANDLE)
        mode = ctypes.c_uint()
        if handle in (0, -1) or not kernel32.GetConsoleMode(handle, ctypes.byref(mode)):
            _vt_enabled_cache = False
        else:
            _vt_enabled_cache = bool(kernel32.SetConsoleMode(
                handle, mode.value | ENABLE_VIRTUAL_TERMINAL_PROCESSING))
    except Exception:
        _vt_enabled_cache = False

    return _vt_enabled_cache
