#!/usr/bin/env python3
# privprompt/security/sanitize.py
from __future__ import annotations

from typing import Any, Mapping
import re

from privprompt.errors import ValidationFailed

# Names are embedded in paths, AppleScript dialogs and shell lines unescaped.
# 70 characters side-steps Unicode normalization pushing a path past 255 bytes.
NAME_MAX_LENGTH = 70
_NAME_RE = re.compile(r"^[a-z0-9 ]+$", re.IGNORECASE)

# Keys are interpolated unquoted into `export K=...` and `set K=...`
_ENV_KEY_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# cmd.exe metacharacters escaped with a caret in unquoted `set` statements
_CMD_SPECIAL_RE = re.compile(r"([<>\\|&^])")

# Line breaks would end a `set` or `export` line and start a new statement.
_ENV_VALUE_FORBIDDEN = ("\r", "\n", "\0")


def escape_double_quotes(value: str) -> str:
    """Prefix every double quote with a backslash."""
    if not isinstance(value, str):
        raise TypeError(f"Expected a string, got {type(value).__name__}.")
    return value.replace('"', '\\"')


def valid_name(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    if not _NAME_RE.match(value):
        return False
    if not value.strip():
        return False
    return len(value) <= NAME_MAX_LENGTH


def validate_name(value: Any) -> str:
    if not valid_name(value):
        raise ValidationFailed(
            f"options.name must be alphanumeric only (spaces are allowed) "
            f"and <= {NAME_MAX_LENGTH} characters."
        )
    return value


def validate_icns(icns: Any) -> str | None:
    if icns is None:
        return None
    if not isinstance(icns, str) or not icns.strip():
        raise ValidationFailed("options.icns must be a non-empty string if provided.")
    return icns


def validate_env(env: Any) -> dict[str, str] | None:
    """
    Check an environment override map and return a plain dict copy.

    None means "no overrides". Anything else must be a non-empty mapping of
    str -> str whose keys are valid variable names and whose values are
    single-line.
    """
    if env is None:
        return None
    if not isinstance(env, Mapping) or len(env) == 0:
        raise ValidationFailed(
            "options.env must be a non-empty object with string keys and values."
        )
    out: dict[str, str] = {}
    for key, value in env.items():
        if not isinstance(key, str) or not isinstance(value, str):
            raise ValidationFailed(
                "options.env must be a non-empty object with string keys and values."
            )
        if not _ENV_KEY_RE.match(key):
            raise ValidationFailed(f"options.env key is not a valid variable name: {key!r}")
        if any(ch in value for ch in _ENV_VALUE_FORBIDDEN):
            raise ValidationFailed(
                f"options.env value for {key!r} cannot contain line breaks or NUL.")
        out[key] = value
    return out


def export_line(key: str, value: str) -> str:
    """POSIX `export` statement with the value double-quoted."""
    return f'export {key}="{escape_double_quotes(value)}"'


def escape_cmd_set_value(value: str) -> str:
    # cmd assigns everything after '=' verbatim, quotes included, so the
    # value stays unquoted and each metacharacter gets a caret instead.
    # Carets do not protect % inside a batch file; only doubling does.
    return _CMD_SPECIAL_RE.sub(r"^\1", value).replace("%", "%%")


def set_line(key: str, value: str) -> str:
    """cmd.exe `set` statement with the value caret-escaped."""
    return f"set {key}={escape_cmd_set_value(value)}"


def escape_powershell_single_quoted(value: str) -> str:
    """Double single quotes for a PowerShell '...' literal (backticks are literal there)."""
    return value.replace("'", "''")
