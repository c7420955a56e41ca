# wsh - Line-Oriented Command Shell
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Protocol definitions for dependency injection.

These interfaces keep the shell session independent of the process
environment, of how external programs are started, and of where
configuration comes from.
"""

from __future__ import annotations

from typing import Any, Protocol

from .parser import Redirection


class Environment(Protocol):
    """Protocol for the exported (process) environment."""

    def get(self, name: str) -> str | None:
        """Return the value of an environment variable, or None."""
        ...

    def set(self, name: str, value: str) -> None:
        """Set (or overwrite) an environment variable."""
        ...

    def snapshot(self) -> dict[str, str]:
        """Return a copy of the environment for a new program image."""
        ...


class Executor(Protocol):
    """Protocol for external command execution."""

    def resolve(self, name: str, search_path: str) -> str | None:
        """Find an executable for ``name`` on a colon-separated path."""
        ...

    def run(
        self,
        path: str,
        argv: list[str],
        redirection: Redirection,
        env: dict[str, str],
    ) -> int:
        """Run a program to completion and return its status."""
        ...


class ConfigModel(Protocol):
    """Protocol for configuration access."""

    @property
    def system(self) -> dict[str, Any]:
        """System configuration."""
        ...

    @property
    def history(self) -> dict[str, Any]:
        """History configuration."""
        ...

    @property
    def execution(self) -> dict[str, Any]:
        """Execution configuration."""
        ...

    @property
    def parser(self) -> dict[str, Any]:
        """Parser configuration."""
        ...

    def get_path(self, path: str, default: Any = None) -> Any:
        """Nested lookup using a dot-separated path."""
        ...
