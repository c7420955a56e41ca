# wsh - Line-Oriented Command Shell
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Fork/exec executor implementation for wsh.

This module provides:
- resolve(): search-path lookup of an executable
- run(): fork a child, apply the line's redirection in the child, replace
  its image with the program, and block until it exits or is killed

The parent never touches its own descriptors here; redirection happens
only in the child between fork and exec.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from .parser import Redirection
from .redirect import DEFAULT_FILE_MODE, RedirectionError, apply_redirection
from .utils import STDERR_FILENO, flush_std_streams, write_line

DEFAULT_SEARCH_PATH = "/bin"

# Status reported by a child whose exec failed
EXEC_FAILURE_STATUS = 1


class ExecutionError(OSError):
    """fork() or waitpid() failed in the parent."""


@dataclass(frozen=True)
class ChildStatus:
    """Terminal state of a child process."""

    pid: int
    exit_code: int
    signal: int | None = None

    @property
    def status(self) -> int:
        if self.signal is not None:
            return 128 + self.signal
        return self.exit_code


def _is_executable(path: str) -> bool:
    return os.path.isfile(path) and os.access(path, os.X_OK)


class ForkExecExecutor:
    """fork/exec implementation of Executor protocol."""

    def __init__(self, file_mode: int = DEFAULT_FILE_MODE):
        """Initialize executor with configuration.

        Args:
            file_mode: Permission bits for files created by output
                redirection in the child
        """
        self.file_mode = file_mode

    def resolve(self, name: str, search_path: str) -> str | None:
        """Find the executable that ``name`` refers to.

        Names containing '/' are used as-is. Otherwise each directory of
        ``search_path`` (colon-separated) is tried in order and the first
        executable ``dir/name`` wins.

        Args:
            name: Command name (argv[0])
            search_path: Colon-separated directory list

        Returns:
            Path to the executable, or None if not found
        """
        if not name:
            return None
        if "/" in name:
            return name if _is_executable(name) else None

        for directory in search_path.split(":"):
            if not directory:
                continue
            candidate = f"{directory}/{name}"
            if _is_executable(candidate):
                return candidate
        return None

    def _exec_child(
        self,
        path: str,
        argv: list[str],
        redirection: Redirection,
        env: dict[str, str],
    ) -> None:
        """Child side of run(). Never returns."""
        try:
            try:
                apply_redirection(redirection, self.file_mode)
            except RedirectionError as e:
                write_line(STDERR_FILENO, f"wsh: {e.filename}: {e.strerror}")
                os._exit(EXEC_FAILURE_STATUS)

            try:
                os.execve(path, argv, env)
            except OSError as e:
                write_line(STDERR_FILENO, f"wsh: {path}: {e.strerror}")
        finally:
            os._exit(EXEC_FAILURE_STATUS)

    def wait(self, pid: int) -> ChildStatus:
        """Block until ``pid`` exits or is killed.

        Stopped children are not terminal; waiting continues. An
        interrupt while waiting also keeps waiting: the child shares the
        terminal and receives the same signal, so it is reaped here.

        Raises:
            ExecutionError: If waitpid fails
        """
        while True:
            try:
                _pid, status = os.waitpid(pid, os.WUNTRACED)
            except KeyboardInterrupt:
                continue
            except OSError as e:
                raise ExecutionError(e.errno, f"waitpid: {e.strerror}") from e

            if os.WIFEXITED(status):
                return ChildStatus(pid, os.WEXITSTATUS(status))
            if os.WIFSIGNALED(status):
                sig = os.WTERMSIG(status)
                return ChildStatus(pid, 128 + sig, signal=sig)

    def run(
        self,
        path: str,
        argv: list[str],
        redirection: Redirection,
        env: dict[str, str],
    ) -> int:
        """Run a program in a child process and wait for it.

        Args:
            path: Resolved executable path
            argv: Full argument vector (argv[0] is the command name)
            redirection: Redirection to apply in the child
            env: Environment for the new program image

        Returns:
            Exit code, or 128 + signal number if the child was killed

        Raises:
            ExecutionError: If fork or waitpid fails
        """
        flush_std_streams()
        try:
            pid = os.fork()
        except OSError as e:
            raise ExecutionError(e.errno, f"fork: {e.strerror}") from e

        if pid == 0:
            self._exec_child(path, argv, redirection, env)

        return self.wait(pid).status
