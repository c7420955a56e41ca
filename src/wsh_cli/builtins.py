# wsh - Line-Oriented Command Shell
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Builtin command table.
"""

from __future__ import annotations

from enum import Enum


class Builtin(Enum):
    EXIT = "exit"
    CD = "cd"
    EXPORT = "export"
    LOCAL = "local"
    VARS = "vars"
    HISTORY = "history"
    LS = "ls"


BUILTIN_NAMES: tuple[str, ...] = tuple(b.value for b in Builtin)


def classify(name: str | None) -> Builtin | None:
    """Return the builtin named ``name``, or None for external commands."""
    if not name:
        return None
    try:
        return Builtin(name)
    except ValueError:
        return None
