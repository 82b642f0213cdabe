"""Tests for option coercion and the default prompt name."""

from __future__ import annotations

import os

import pytest

from privprompt.errors import ValidationFailed
from privprompt.invocation import ExecOptions, Invocation, default_name
from privprompt.security.sanitize import valid_name


@pytest.mark.parametrize(
    "argv0,expected",
    [
        ("/usr/local/bin/my-tool.py", "my tool"),
        ("C:/Tools/Setup_Wizard.exe", "Setup Wizard"),
        ("", "Python"),
        ("/tmp/---", "Python"),
        ("/opt/" + "a" * 90, "a" * 70),
    ],
)
def test_default_name_is_always_valid(monkeypatch, argv0, expected):
    monkeypatch.setattr("sys.argv", [argv0])
    name = default_name()
    assert name == expected
    assert valid_name(name)


def test_coerce_none_uses_default_name(monkeypatch):
    monkeypatch.setattr("sys.argv", ["installer"])
    assert ExecOptions.coerce(None) == ExecOptions(name="installer")


def test_coerce_mapping_copies_env():
    env = {"PATH": "/usr/bin"}
    opts = ExecOptions.coerce({"name": "My Tool", "env": env})
    env["PATH"] = "changed"

    assert opts.name == "My Tool"
    assert opts.env == {"PATH": "/usr/bin"}


def test_coerce_rejects_unknown_keys_and_types():
    with pytest.raises(ValidationFailed):
        ExecOptions.coerce({"name": "ok", "timeout": 5})
    with pytest.raises(ValidationFailed):
        ExecOptions.coerce("My Tool")


@pytest.mark.parametrize("env", [{"1BAD": "x"}, {"A B": "x"}, {"A;rm": "x"}])
def test_env_keys_must_be_variable_names(env):
    with pytest.raises(ValidationFailed):
        ExecOptions(name="ok", env=env).validated()


def test_invocation_defaults_to_process_cwd(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    inv = Invocation(command="id", options=ExecOptions(name="ok"), identifier="0" * 32)
    assert os.path.realpath(inv.cwd) == os.path.realpath(tmp_path)
    assert inv.env_items == []
