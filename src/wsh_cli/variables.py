# wsh - Line-Oriented Command Shell
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Shell variable storage.

Two namespaces exist side by side:
- ``VariableStore``: shell-local variables written by ``local``, never
  exported to child processes.
- ``OSEnvironment``: the process environment written by ``export`` and
  handed to every external command.

Substitution consults the environment first, then the local store.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from dataclasses import dataclass, field


@dataclass(frozen=True)
class Variable:
    name: str
    value: str


@dataclass
class VariableStore:
    """Shell-local name/value storage.

    Names are unique. Reassignment updates the value in place, so listing
    order is the order in which names were first assigned.
    """

    _values: dict[str, str] = field(default_factory=dict)

    def set(self, name: str, value: str) -> None:
        self._values[name] = value

    def get(self, name: str) -> str | None:
        return self._values.get(name)

    def clear(self) -> None:
        self._values.clear()

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[Variable]:
        for name, value in self._values.items():
            yield Variable(name, value)


class OSEnvironment:
    """Environment protocol backed by ``os.environ``."""

    def get(self, name: str) -> str | None:
        return os.environ.get(name)

    def set(self, name: str, value: str) -> None:
        os.environ[name] = value

    def snapshot(self) -> dict[str, str]:
        return dict(os.environ)
