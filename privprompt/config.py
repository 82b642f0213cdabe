#!/usr/bin/env python3
# privprompt/config.py
from __future__ import annotations

"""
Configuration loader.

Precedence (low → high):
  1) Built-in defaults
  2) Files in CWD: .env, privprompt.json, privprompt.toml
  3) Environment variables prefixed with PRIVPROMPT_

Validation:
  - TEMP_ROOT: None (system temp dir) or normalized path
  - POLL_INTERVAL / POLL_TIMEOUT: float > 0
  - APPLET_PATH: None (bundled asset) or normalized path
  - LINUX_BINARIES: os.pathsep- or comma-separated absolute paths
  - LOG_LEVEL: None or one of {'DEBUG','INFO','WARNING','ERROR','CRITICAL'}
  - LOG_FILE_PATH: None or normalized path
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping
import json
import os
import re
import tempfile
import tomllib

ENV_PREFIX = "PRIVPROMPT_"

# ---------- defaults ----------

_PACKAGE_DIR = Path(__file__).resolve().parent

DEFAULTS: dict[str, Any] = {
    "TEMP_ROOT": None,
    "POLL_INTERVAL": 1.0,
    # Upper bound on waiting for the Windows status file (seconds).
    "POLL_TIMEOUT": 3600.0,
    "APPLET_PATH": None,
    # gksudo used to come first, but it cannot run commands concurrently.
    "LINUX_BINARIES": "/usr/bin/kdesudo:/usr/bin/pkexec",
    "LOG_LEVEL": None,
    "LOG_FILE_PATH": None,
}

DEFAULT_APPLET_PATH = _PACKAGE_DIR / "assets" / "applet.zip"


# ---------- data model ----------

@dataclass(frozen=True)
class ElevatorConfig:
    temp_root: Path
    poll_interval: float
    poll_timeout: float
    applet_path: Path
    linux_binaries: tuple[str, ...]
    log_level: str | None
    log_file_path: Path | None

    # Unrecognized keys preserved for debugging/forward-compat
    extra: dict[str, Any] = field(default_factory=dict)


# ---------- file loaders (stdlib) ----------

def _load_env_file(path: Path) -> dict[str, str]:
    """Very small .env parser: KEY=VALUE, supports quotes; ignores comments/blank lines."""
    out: dict[str, str] = {}
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return out

    line_re = re.compile(r"""^\s*([A-Za-z_][A-Za-z0-9_]*)\s*=\s*(.*?)\s*$""")
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        m = line_re.match(line)
        if not m:
            continue
        k, v = m.group(1), m.group(2)
        if (v.startswith("'") and v.endswith("'")) or (v.startswith('"') and v.endswith('"')):
            v = v[1:-1]
        out[k] = v
    return out


def _load_json_file(path: Path) -> dict[str, Any]:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (FileNotFoundError, json.JSONDecodeError):
        return {}


def _load_toml_file(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except (FileNotFoundError, tomllib.TOMLDecodeError):
        return {}


def _flatten_mapping(obj: Any, prefix: str = "") -> dict[str, Any]:
    """
    Flatten nested dicts to UPPER_SNAKE keys.
    Example: {'poll': {'timeout': 30}} -> {'POLL_TIMEOUT': 30}
    """
    flat: dict[str, Any] = {}
    if isinstance(obj, Mapping):
        for k, v in obj.items():
            key = f"{prefix}_{k}" if prefix else str(k)
            if isinstance(v, Mapping):
                flat.update(_flatten_mapping(v, key))
            else:
                flat[str(key).upper()] = v
    return flat


def _strip_prefix(d: Mapping[str, Any]) -> dict[str, Any]:
    """Keep PRIVPROMPT_* keys only, with the prefix removed."""
    return {
        str(k).upper()[len(ENV_PREFIX):]: v
        for k, v in d.items()
        if str(k).upper().startswith(ENV_PREFIX)
    }


def _normalize_keys(d: Mapping[str, Any]) -> dict[str, Any]:
    return {str(k).upper(): v for k, v in d.items()}


def _find_config_files(cwd: Path) -> list[Path]:
    return [
        cwd / ".env",
        cwd / "privprompt.json",
        cwd / "privprompt.toml",
    ]


# ---------- normalization & coercion ----------

def _as_opt_str(val: Any) -> str | None:
    return None if val is None or str(val).strip().lower() in {"", "none"} else str(val)


def _as_positive_float(key: str, val: Any) -> float:
    if isinstance(val, bool):
        raise ValueError(f"{key} must be a number, got: {val!r}")
    try:
        out = float(str(val).strip())
    except Exception as exc:  # noqa: BLE001
        raise ValueError(f"{key} must be a number, got: {val!r}") from exc
    if out <= 0:
        raise ValueError(f"{key} must be > 0")
    return out


def _as_log_level(val: Any) -> str | None:
    lv = _as_opt_str(val)
    if lv is None:
        return None
    up = lv.upper()
    allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
    if up not in allowed:
        raise ValueError(
            f"LOG_LEVEL must be one of {sorted(allowed)}, got {lv!r}")
    return up


def _as_path(val: Any) -> Path:
    s = str(val)
    # expand both ~ and env vars
    s = os.path.expandvars(os.path.expanduser(s))
    return Path(s).resolve()


def _as_opt_path(val: Any) -> Path | None:
    v = _as_opt_str(val)
    return None if v is None else _as_path(v)


def _as_binaries(val: Any) -> tuple[str, ...]:
    if isinstance(val, (list, tuple)):
        items = [str(v).strip() for v in val]
    else:
        items = [s.strip() for s in re.split(r"[,:;]", str(val))]
    items = [s for s in items if s]
    if not items:
        raise ValueError("LINUX_BINARIES must name at least one path")
    for item in items:
        if not item.startswith("/"):
            raise ValueError(f"LINUX_BINARIES entries must be absolute, got {item!r}")
    return tuple(items)


# ---------- merge & load ----------

def _merge_sources(cwd: Path, environ: Mapping[str, str]) -> dict[str, Any]:
    merged: dict[str, Any] = dict(DEFAULTS)

    for file in _find_config_files(cwd):
        if file.name == ".env":
            merged.update(_strip_prefix(_load_env_file(file)))
        elif file.suffix == ".json":
            merged.update(_normalize_keys(_flatten_mapping(_load_json_file(file))))
        elif file.suffix == ".toml":
            merged.update(_normalize_keys(_flatten_mapping(_load_toml_file(file))))

    # Environment variables override all
    merged.update(_strip_prefix(environ))
    return merged


def _validate_and_build(config: dict[str, Any]) -> ElevatorConfig:
    temp_root = _as_opt_path(config.get("TEMP_ROOT")) or Path(tempfile.gettempdir())
    applet_path = _as_opt_path(config.get("APPLET_PATH")) or DEFAULT_APPLET_PATH

    recognized = set(DEFAULTS.keys())
    extra = {k: v for k, v in config.items() if k not in recognized}

    return ElevatorConfig(
        temp_root=temp_root,
        poll_interval=_as_positive_float(
            "POLL_INTERVAL", config.get("POLL_INTERVAL", DEFAULTS["POLL_INTERVAL"])),
        poll_timeout=_as_positive_float(
            "POLL_TIMEOUT", config.get("POLL_TIMEOUT", DEFAULTS["POLL_TIMEOUT"])),
        applet_path=applet_path,
        linux_binaries=_as_binaries(
            config.get("LINUX_BINARIES", DEFAULTS["LINUX_BINARIES"])),
        log_level=_as_log_level(config.get("LOG_LEVEL")),
        log_file_path=_as_opt_path(config.get("LOG_FILE_PATH")),
        extra=extra,
    )


# ---------- public API ----------

def load_config(
    *,
    cwd: str | os.PathLike[str] | None = None,
    environ: Mapping[str, str] | None = None,
    **overrides: Any,
) -> ElevatorConfig:
    """
    Load, merge, normalize, and validate configuration.
    Keyword overrides (e.g. poll_timeout=30) win over every other source.
    No filesystem side-effects.
    """
    raw = _merge_sources(
        Path(cwd) if cwd is not None else Path.cwd(),
        os.environ if environ is None else environ,
    )
    raw.update(_normalize_keys(overrides))
    return _validate_and_build(raw)
