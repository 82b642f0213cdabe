#!/usr/bin/env python3
# privprompt/invocation.py
from __future__ import annotations

import os
import re
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

from privprompt.errors import ValidationFailed
from privprompt.security.sanitize import (
    NAME_MAX_LENGTH,
    validate_env,
    validate_icns,
    validate_name,
)


def default_name() -> str:
    """Process name reduced to the characters a prompt name may hold."""
    stem = Path(sys.argv[0]).stem if sys.argv and sys.argv[0] else ""
    cleaned = re.sub(r"[^A-Za-z0-9 ]+", " ", stem).strip()[:NAME_MAX_LENGTH].strip()
    return cleaned or "Python"


@dataclass(frozen=True, slots=True)
class ExecOptions:
    """
    Caller-facing options.

    Attributes:
        name: Shown in the prompt (macOS dialog, kdesudo comment).
        icns: Optional .icns icon for the macOS prompt.
        env: Extra variables exported into the elevated command's environment.
    """
    name: str = field(default_factory=default_name)
    icns: str | None = None
    env: Mapping[str, str] | None = None

    def validated(self) -> "ExecOptions":
        """Return a checked copy; raises ValidationFailed on bad input."""
        return ExecOptions(
            name=validate_name(self.name),
            icns=validate_icns(self.icns),
            env=validate_env(self.env),
        )

    @classmethod
    def coerce(cls, options: "ExecOptions | Mapping[str, Any] | None") -> "ExecOptions":
        if options is None:
            return cls().validated()
        if isinstance(options, ExecOptions):
            return options.validated()
        if isinstance(options, Mapping):
            unknown = set(options) - {"name", "icns", "env"}
            if unknown:
                raise ValidationFailed(f"Unknown options: {sorted(unknown)}")
            kwargs = {k: v for k, v in options.items() if v is not None or k != "name"}
            return cls(**kwargs).validated()
        raise ValidationFailed("options must be an ExecOptions or a mapping.")


@dataclass(frozen=True, slots=True)
class Invocation:
    """One elevated call. Never shared between calls."""
    command: str
    options: ExecOptions
    identifier: str
    cwd: str = field(default_factory=os.getcwd)

    @property
    def env_items(self) -> list[tuple[str, str]]:
        return list((self.options.env or {}).items())
