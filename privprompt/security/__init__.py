#!/usr/bin/env python3
# privprompt/security/__init__.py
from __future__ import annotations

"""
Package for workspace lifecycle and untrusted-string handling.

Provides:
- Workspace identifiers and scoped create/remove (`workspace`, `new_workspace_id`).
- Shell-dialect escaping and option validation (`escape_double_quotes`, `valid_name`, ...).
"""

from .sanitize import (
    NAME_MAX_LENGTH,
    escape_cmd_set_value,
    escape_double_quotes,
    escape_powershell_single_quoted,
    export_line,
    set_line,
    valid_name,
    validate_env,
    validate_icns,
    validate_name,
)
from .secure_dir import (
    IDENTIFIER_LENGTH,
    create_workspace,
    is_identifier,
    new_workspace_id,
    remove_workspace,
    workspace,
)

__all__ = [
    "IDENTIFIER_LENGTH",
    "NAME_MAX_LENGTH",
    "create_workspace",
    "escape_cmd_set_value",
    "escape_double_quotes",
    "escape_powershell_single_quoted",
    "export_line",
    "is_identifier",
    "new_workspace_id",
    "remove_workspace",
    "set_line",
    "valid_name",
    "validate_env",
    "validate_icns",
    "validate_name",
    "workspace",
]
