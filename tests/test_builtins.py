"""
Tests for the builtin command table.
"""

from __future__ import annotations

import pytest

from wsh_cli.builtins import BUILTIN_NAMES, Builtin, classify


@pytest.mark.parametrize(
    "name, expected",
    [
        ("exit", Builtin.EXIT),
        ("cd", Builtin.CD),
        ("export", Builtin.EXPORT),
        ("local", Builtin.LOCAL),
        ("vars", Builtin.VARS),
        ("history", Builtin.HISTORY),
        ("ls", Builtin.LS),
    ],
)
def test_classify_builtins(name: str, expected: Builtin):
    assert classify(name) is expected


@pytest.mark.parametrize("name", ["echo", "EXIT", "ls2", "", None])
def test_classify_non_builtins(name):
    assert classify(name) is None


def test_builtin_names_cover_table():
    assert set(BUILTIN_NAMES) == {
        "exit", "cd", "export", "local", "vars", "history", "ls"
    }
