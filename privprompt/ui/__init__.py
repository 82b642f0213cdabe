#!/usr/bin/env python3
# privprompt/ui/__init__.py
from __future__ import annotations
# Re-export convenient top-level API
from .ansi import ANSI, enable_windows_vt, strip_ansi
from .logging import (
    PRINT_MUTEX,
    ColorizingStreamHandler,
    PlainFormatter,
    command_preview,
    init_logger,
    init_logger_from_config,
)

__all__ = [
    "ANSI",
    "PRINT_MUTEX",
    "ColorizingStreamHandler",
    "PlainFormatter",
    "command_preview",
    "enable_windows_vt",
    "init_logger",
    "init_logger_from_config",
    "strip_ansi",
]
