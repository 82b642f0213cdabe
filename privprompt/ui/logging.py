#!/usr/bin/env python3
# privprompt/ui/logging.py
from __future__ import annotations

import logging
import sys
import threading
from logging.handlers import RotatingFileHandler
from typing import Optional

from .ansi import ANSI, enable_windows_vt, strip_ansi

# Serializes console writes from concurrent invocations.
PRINT_MUTEX = threading.Lock()


class ColorizingStreamHandler(logging.StreamHandler):
    """
    StreamHandler with ANSI → plain fallback.
    """

    _LEVEL_COLORS = {
        logging.DEBUG: ANSI["bright_black"],
        logging.WARNING: ANSI["yellow"],
        logging.ERROR: ANSI["red"],
        logging.CRITICAL: ANSI["magenta"],
    }

    def __init__(self, stream=None) -> None:
        super().__init__(stream)
        isatty = getattr(self.stream, "isatty", None)
        self._use_ansi = bool(isatty and isatty()) and enable_windows_vt()

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = self.format(record)
            if self._use_ansi:
                color = self._LEVEL_COLORS.get(record.levelno, "")
                if color:
                    message = f"{color}{message}{ANSI['reset']}"
            else:
                message = strip_ansi(message)
            with PRINT_MUTEX:
                self.stream.write(message + self.terminator)
                self.flush()
        except Exception:
            self.handleError(record)


class PlainFormatter(logging.Formatter):
    """Formatter that strips ANSI (good for log files)."""

    def format(self, record: logging.LogRecord) -> str:
        # Other handlers share this record; strip a copy.
        plain = logging.makeLogRecord(record.__dict__)
        plain.msg = strip_ansi(str(record.msg))
        return super().format(plain)


def init_logger(
    name: str = "privprompt",
    level: int | str = logging.INFO,
    logfile: Optional[str] = None,
) -> logging.Logger:
    """
    Initialize a color-safe logger for the library (opt-in; nothing calls
    this on import).

    Console: ANSI if available, else plain.
    File (optional): rotating, plain text, UTF-8.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False

    if not any(isinstance(h, ColorizingStreamHandler) for h in logger.handlers):
        console_handler = ColorizingStreamHandler(stream=sys.stderr)
        console_handler.setLevel(level)
        console_handler.setFormatter(
            logging.Formatter("[%(levelname)s] %(message)s"))
        logger.addHandler(console_handler)

    if logfile and not any(isinstance(h, RotatingFileHandler) for h in logger.handlers):
        file_handler = RotatingFileHandler(
            logfile, maxBytes=2_000_000, backupCount=3, encoding="utf-8"
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            PlainFormatter(
                "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        logger.addHandler(file_handler)

    return logger


def command_preview(command: str, limit: int = 200) -> str:
    """Single-line, truncated rendering of a command for log messages."""
    flat = " ".join(command.split())
    return flat if len(flat) <= limit else flat[:limit] + "..."


def init_logger_from_config(config) -> logging.Logger:
    """init_logger driven by LOG_LEVEL / LOG_FILE_PATH from an ElevatorConfig."""
    logfile = config.log_file_path
    return init_logger(
        "privprompt",
        level=config.log_level or logging.INFO,
        logfile=str(logfile) if logfile is not None else None,
    )
