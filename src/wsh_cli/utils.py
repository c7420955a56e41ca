# wsh - Line-Oriented Command Shell
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Utility functions for wsh.
"""

import os
import sys

STDIN_FILENO = 0
STDOUT_FILENO = 1
STDERR_FILENO = 2


def write_fd(fd: int, text: str) -> None:
    """Write text straight to a file descriptor.

    Output goes through the descriptor table rather than ``sys.stdout`` so
    that whatever is currently wired to ``fd`` (a redirection target, a
    pytest capture file, the terminal) receives it.

    Args:
        fd: Target file descriptor
        text: Text to write (encoded as UTF-8)
    """
    data = text.encode("utf-8", errors="replace")
    while data:
        written = os.write(fd, data)
        data = data[written:]


def write_line(fd: int, text: str) -> None:
    """Write text followed by a newline to a file descriptor."""
    write_fd(fd, text + "\n")


def flush_std_streams() -> None:
    """Flush Python-level buffers before descriptors are rewired or forked."""
    for stream in (sys.stdout, sys.stderr):
        try:
            stream.flush()
        except (AttributeError, OSError, ValueError):
            # Closed or replaced stream
            continue


def is_skippable(line: str) -> bool:
    """Check if a trimmed line carries no command.

    Blank lines and ``#`` comments are skipped entirely.

    Args:
        line: Input line (already trimmed)

    Returns:
        True if the line should be ignored
    """
    return not line or line.startswith("#")


def split_assignment(arg: str) -> tuple[str, str] | None:
    """Split ``NAME=VALUE`` at the first ``=``.

    Returns:
        (name, value), or None if there is no ``=`` or the name is empty
    """
    name, sep, value = arg.partition("=")
    if not sep or not name:
        return None
    return name, value
